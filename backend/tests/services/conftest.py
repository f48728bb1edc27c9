"""Service test fixtures: async DB + FastAPI test client + fake third-party seams.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched so the readiness probe sees the test engine
    - Email sender and purchase verifier replaced by in-memory fakes (no network)

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (PostgreSQL-specific features not exercised here)
    - StaticPool: one shared connection so every session sees the same in-memory DB
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool
from httpx import ASGITransport, AsyncClient

from geni.api.dependencies import get_email_sender, get_purchase_verifier
from geni.config import get_settings
from geni.core.auth_tokens import TokenUser, generate_token
from geni.core.domain_types import Plan
from geni.db.base import Base
from geni.infrastructure.database import get_db, DatabaseSessionManager
import geni.infrastructure.database as db_module
from geni.main import app
from geni.models.user import User


class FakeEmailSender:
    """Records magic links instead of sending them."""

    def __init__(self):
        self.sent: list[tuple[str, str]] = []
        self.succeed = True

    async def send_magic_link(self, email: str, token: str) -> bool:
        self.sent.append((email, token))
        return self.succeed


class FakePurchaseVerifier:
    """Serves canned checkout documents by id."""

    def __init__(self):
        self.checkouts: dict[str, dict] = {}
        self.error: Exception | None = None

    async def get_checkout(self, checkout_id: str) -> dict:
        if self.error is not None:
            raise self.error
        return self.checkouts.get(checkout_id, {"id": checkout_id, "status": "open"})


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def email_sender():
    return FakeEmailSender()


@pytest.fixture
def purchase_verifier():
    return FakePurchaseVerifier()


@pytest.fixture
async def client(test_engine, test_session_factory, email_sender, purchase_verifier):
    """FastAPI test client with DB and third-party dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    app.dependency_overrides[get_purchase_verifier] = lambda: purchase_verifier

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


async def _seed_user(test_db, email: str, plan: Plan) -> User:
    user = User(email=email, plan=plan.value)
    test_db.add(user)
    await test_db.commit()
    await test_db.refresh(user)
    return user


@pytest.fixture
async def paid_user(test_db):
    return await _seed_user(test_db, "paid@example.com", Plan.PAID)


@pytest.fixture
async def free_user(test_db):
    return await _seed_user(test_db, "free@example.com", Plan.FREE)


@pytest.fixture
def sign_in(client, settings):
    """Put a valid session token for user into the client's cookie jar."""
    def _sign_in(user: User) -> str:
        token = generate_token(
            TokenUser(user_id=str(user.id), email=user.email, plan=Plan(user.plan)),
            settings.jwt_secret,
        )
        client.cookies.set(settings.auth_cookie_name, token)
        return token
    return _sign_in
