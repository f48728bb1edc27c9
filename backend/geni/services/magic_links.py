"""Magic Link Service: single-use emailed sign-in tokens.

Invariants:
    - Only the SHA-256 hash of a token is stored; the raw token leaves once, in the email
    - identifier is the lowercased email
    - verify_magic_link succeeds at most once per token and only before expires_at,
      even under concurrent verification (single conditional UPDATE)
    - Expiry is compared in SQL (portable across timezone-aware and naive backends)
"""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from geni.core.auth_tokens import generate_magic_token, hash_token
from geni.models.magic_link import MagicLink

logger = logging.getLogger(__name__)

DEFAULT_EXPIRY_MINUTES = 15


class MagicLinkService:
    """Create, consume and purge magic links."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_magic_link(
        self, email: str, expires_in_minutes: int = DEFAULT_EXPIRY_MINUTES,
    ) -> str:
        """Store a new link for email and return the raw token."""
        token = generate_magic_token()
        self.db.add(MagicLink(
            identifier=email.strip().lower(),
            token_hash=hash_token(token),
            expires_at=datetime.now(timezone.utc) + timedelta(minutes=expires_in_minutes),
            used=False,
        ))
        await self.db.flush()
        logger.info(f"Created magic link (expires in {expires_in_minutes} min)")
        return token

    async def verify_magic_link(self, token: str) -> str | None:
        """Consume token; return the identifier, or None if unknown, used or expired."""
        token_hash = hash_token(token)
        # The used flag flips in the same statement that checks it
        result = await self.db.execute(
            update(MagicLink)
            .where(
                MagicLink.token_hash == token_hash,
                MagicLink.used.is_(False),
                MagicLink.expires_at > datetime.now(timezone.utc),
            )
            .values(used=True)
            .execution_options(synchronize_session=False),
        )
        if result.rowcount != 1:
            return None

        identifier = await self.db.scalar(
            select(MagicLink.identifier).where(MagicLink.token_hash == token_hash),
        )
        await self.db.flush()
        return identifier

    async def cleanup_expired_magic_links(self) -> int:
        result = await self.db.execute(
            delete(MagicLink).where(MagicLink.expires_at < datetime.now(timezone.utc)),
        )
        await self.db.flush()
        removed = result.rowcount or 0
        if removed:
            logger.info(f"Removed {removed} expired magic link(s)")
        return removed
