"""Auth Tokens: HS256 session tokens and single-use magic-link tokens.

Invariants:
    - Session tokens carry user_id, email, plan, iat, exp (exp = iat + expiry_days)
    - verify_token either returns a TokenUser or raises InvalidTokenError with
      one of the fixed messages below (never the library's message)
    - Only SHA-256 hashes of tokens are persisted (hash_token)
    - Magic tokens are 32 random bytes, hex-encoded

Design Decisions:
    - PyJWT over hand-rolled HMAC: standard header/claims handling and
      constant-time signature comparison
    - `now` injectable for deterministic expiry tests
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from geni.core.domain_types import Plan
from geni.core.errors import ConfigurationError, InvalidTokenError

ALGORITHM = "HS256"
DEFAULT_EXPIRY_DAYS = 7
MAGIC_TOKEN_BYTES = 32

MSG_REQUIRED = "Token is required"
MSG_FORMAT = "Invalid token format"
MSG_SIGNATURE = "Invalid token signature"
MSG_EXPIRED = "Token has expired"
MSG_INVALID = "Invalid token"


@dataclass(frozen=True)
class TokenUser:
    """Identity carried by a verified session token."""
    user_id: str
    email: str
    plan: Plan

    @property
    def is_paid(self) -> bool:
        return self.plan == Plan.PAID


def token_lifetime(expiry_days: int = DEFAULT_EXPIRY_DAYS) -> timedelta:
    return timedelta(days=expiry_days)


def generate_token(
    user: TokenUser,
    secret: str,
    expiry_days: int = DEFAULT_EXPIRY_DAYS,
    now: datetime | None = None,
) -> str:
    """Sign a session token for user."""
    if not user.user_id or not user.email:
        raise ValueError("user_id and email are required")
    if not secret:
        raise ConfigurationError("jwt_secret")

    issued = now or datetime.now(timezone.utc)
    payload = {
        "user_id": user.user_id,
        "email": user.email,
        "plan": user.plan.value,
        "iat": int(issued.timestamp()),
        "exp": int((issued + token_lifetime(expiry_days)).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def verify_token(token: str | None, secret: str) -> TokenUser:
    """Check signature and expiry; return the identity the token carries."""
    if not token:
        raise InvalidTokenError(MSG_REQUIRED)
    if token.count(".") != 2:
        raise InvalidTokenError(MSG_FORMAT)

    try:
        claims = jwt.decode(
            token, secret, algorithms=[ALGORITHM],
            options={"require": ["exp", "iat"]},
        )
    except jwt.ExpiredSignatureError:
        raise InvalidTokenError(MSG_EXPIRED)
    except jwt.InvalidSignatureError:
        raise InvalidTokenError(MSG_SIGNATURE)
    except jwt.InvalidTokenError:
        raise InvalidTokenError(MSG_INVALID)

    try:
        return TokenUser(
            user_id=str(claims["user_id"]),
            email=str(claims["email"]),
            plan=Plan(claims.get("plan", Plan.FREE.value)),
        )
    except (KeyError, ValueError):
        raise InvalidTokenError(MSG_INVALID)


def hash_token(token: str) -> str:
    """SHA-256 hex digest; the only form in which tokens are stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def generate_magic_token() -> str:
    return secrets.token_hex(MAGIC_TOKEN_BYTES)
