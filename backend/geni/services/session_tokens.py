"""Session Token Service: sign a session token and record its hash.

Invariants:
    - Every issued token has a jwt_token_logs row (user_id, sha256 hash, iat, exp)
    - The raw token is returned to the caller only; it is never stored or logged
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from geni.core.auth_tokens import TokenUser, generate_token, hash_token, token_lifetime
from geni.core.domain_types import Plan
from geni.models.jwt_token_log import JwtTokenLog
from geni.models.user import User

logger = logging.getLogger(__name__)


def token_user_from(user: User) -> TokenUser:
    return TokenUser(user_id=str(user.id), email=user.email, plan=Plan(user.plan))


class SessionTokenService:

    def __init__(self, db: AsyncSession, secret: str, expiry_days: int = 7):
        self.db = db
        self.secret = secret
        self.expiry_days = expiry_days

    async def issue_session_token(self, user: TokenUser) -> str:
        """Sign a token for user and append it to the token log."""
        issued_at = datetime.now(timezone.utc).replace(microsecond=0)
        token = generate_token(user, self.secret, self.expiry_days, now=issued_at)
        self.db.add(JwtTokenLog(
            user_id=UUID(user.user_id),
            token_hash=hash_token(token),
            issued_at=issued_at,
            expires_at=issued_at + token_lifetime(self.expiry_days),
        ))
        await self.db.flush()
        logger.info(
            f"Issued session token (plan={user.plan.value})",
            extra={"user_id": user.user_id},
        )
        return token
