"""Auth Cookie: the session token travels in one httpOnly cookie.

Invariants:
    - Cookie attributes: path "/", httpOnly, Secure (configurable for local dev),
      SameSite=lax, max-age = token lifetime
    - Clearing uses the same name and path as setting
"""

from fastapi import Request, Response

from geni.config import Settings
from geni.core.auth_tokens import token_lifetime


def set_auth_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=int(token_lifetime(settings.token_expiry_days).total_seconds()),
        path="/",
        secure=settings.auth_cookie_secure,
        httponly=True,
        samesite="lax",
    )


def get_auth_token(request: Request, settings: Settings) -> str | None:
    return request.cookies.get(settings.auth_cookie_name)


def clear_auth_cookies(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.auth_cookie_name,
        path="/",
        secure=settings.auth_cookie_secure,
        httponly=True,
        samesite="lax",
    )
