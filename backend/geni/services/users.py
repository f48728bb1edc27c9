"""User Service: lookup and plan management for purchasers.

Invariants:
    - Emails are stored and looked up lowercased and stripped
    - upsert_user never downgrades: a paid user stays paid
    - Methods flush, never commit
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from geni.core.domain_types import Plan
from geni.models.user import User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    """CRUD over the users table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_user(
        self, email: str, name: str | None = None, plan: Plan = Plan.FREE,
    ) -> User:
        user = User(email=normalize_email(email), name=name, plan=plan.value)
        self.db.add(user)
        await self.db.flush()
        logger.info(
            f"Created user (plan={plan.value})", extra={"user_id": str(user.id)},
        )
        return user

    async def get_user_by_email(self, email: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.email == normalize_email(email)),
        )
        return result.scalar_one_or_none()

    async def get_user_by_id(self, user_id: UUID) -> User | None:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def update_user_plan(self, user_id: UUID, plan: Plan) -> User | None:
        user = await self.get_user_by_id(user_id)
        if user is None:
            return None
        user.plan = plan.value
        user.updated_at = datetime.now(timezone.utc)
        await self.db.flush()
        logger.info(
            f"Updated user plan to {plan.value}", extra={"user_id": str(user_id)},
        )
        return user

    async def upsert_user(self, email: str, plan: Plan = Plan.FREE) -> User:
        """Fetch or create the user; upgrade free to paid when plan is paid."""
        existing = await self.get_user_by_email(email)
        if existing is None:
            return await self.create_user(email, plan=plan)
        if plan == Plan.PAID and existing.plan != Plan.PAID.value:
            updated = await self.update_user_plan(existing.id, plan)
            return updated or existing
        return existing
