"""Magic link and session token service tests.

Tests cover:
    - Only the token hash is stored, identifier lowercased
    - verify_magic_link succeeds once, then fails (also when raced)
    - Expired and unknown tokens fail
    - cleanup_expired_magic_links removes only expired rows
    - issue_session_token logs a hash with a 7-day window
"""

import asyncio

from sqlalchemy import select

from geni.core.auth_tokens import hash_token, verify_token
from geni.models.jwt_token_log import JwtTokenLog
from geni.models.magic_link import MagicLink
from geni.services.magic_links import MagicLinkService
from geni.services.session_tokens import SessionTokenService, token_user_from

SECRET = "session-test-secret-0123456789abcdef"


async def test_create_stores_hash_only(test_db):
    token = await MagicLinkService(test_db).create_magic_link("Buyer@Example.com")
    await test_db.commit()

    link = (await test_db.execute(select(MagicLink))).scalar_one()
    assert link.identifier == "buyer@example.com"
    assert link.token_hash == hash_token(token)
    assert link.token_hash != token
    assert link.used is False


async def test_verify_is_single_use(test_db):
    links = MagicLinkService(test_db)
    token = await links.create_magic_link("buyer@example.com")
    await test_db.commit()

    assert await links.verify_magic_link(token) == "buyer@example.com"
    await test_db.commit()
    assert await links.verify_magic_link(token) is None


async def test_verify_rejects_expired_link(test_db):
    links = MagicLinkService(test_db)
    token = await links.create_magic_link("buyer@example.com", expires_in_minutes=-1)
    await test_db.commit()
    assert await links.verify_magic_link(token) is None


async def test_verify_rejects_unknown_token(test_db):
    assert await MagicLinkService(test_db).verify_magic_link("f" * 64) is None


async def test_cleanup_removes_only_expired(test_db):
    links = MagicLinkService(test_db)
    await links.create_magic_link("old@example.com", expires_in_minutes=-5)
    fresh = await links.create_magic_link("new@example.com")
    await test_db.commit()

    assert await links.cleanup_expired_magic_links() == 1
    await test_db.commit()

    remaining = (await test_db.execute(select(MagicLink))).scalars().all()
    assert [link.identifier for link in remaining] == ["new@example.com"]
    assert await links.verify_magic_link(fresh) == "new@example.com"


async def test_issue_session_token_logs_hash(test_db, paid_user):
    service = SessionTokenService(test_db, SECRET, expiry_days=7)
    token = await service.issue_session_token(token_user_from(paid_user))
    await test_db.commit()

    assert verify_token(token, SECRET).user_id == str(paid_user.id)
    log = (await test_db.execute(select(JwtTokenLog))).scalar_one()
    assert log.user_id == paid_user.id
    assert log.token_hash == hash_token(token)
    assert (log.expires_at - log.issued_at).days == 7


async def test_concurrent_verify_consumes_once(test_db, test_session_factory):
    token = await MagicLinkService(test_db).create_magic_link("buyer@example.com")
    await test_db.commit()

    async def consume():
        async with test_session_factory() as session:
            identifier = await MagicLinkService(session).verify_magic_link(token)
            await session.commit()
            return identifier

    results = await asyncio.gather(consume(), consume())
    assert results.count("buyer@example.com") == 1
    assert results.count(None) == 1
