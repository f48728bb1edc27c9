"""Auth Routes: magic-link report restore and sign-out.

Invariants:
    - Restore is only offered to paid users (404 "No purchase found" otherwise)
    - The magic token goes to the email sender only; the response never contains it
    - Each restore purges expired magic links before issuing a new one
    - Verify is browser navigation: every outcome is a 303 redirect
    - Verify errors redirect to /?error=invalid_link | expired_link | user_not_found
"""

import logging

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from geni.api.auth_cookies import clear_auth_cookies, set_auth_cookie
from geni.api.dependencies import get_email_sender
from geni.api.routes.checkout import REPORT_PATH, error_redirect
from geni.config import Settings, get_settings
from geni.core.domain_types import Plan
from geni.core.errors import NoPurchaseFoundError
from geni.core.repository_protocols import EmailSender
from geni.infrastructure.database import get_db
from geni.schemas.auth import RestoreRequest, SuccessResponse
from geni.services.magic_links import MagicLinkService
from geni.services.session_tokens import SessionTokenService, token_user_from
from geni.services.users import UserService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/restore", response_model=SuccessResponse)
async def restore_access(
    body: RestoreRequest,
    sender: EmailSender = Depends(get_email_sender),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Email a sign-in link to a returning purchaser."""
    user = await UserService(db).get_user_by_email(body.email)
    if user is None or user.plan != Plan.PAID.value:
        raise NoPurchaseFoundError()

    links = MagicLinkService(db)
    await links.cleanup_expired_magic_links()
    token = await links.create_magic_link(
        body.email, settings.magic_link_expiry_minutes,
    )
    await db.commit()

    sent = await sender.send_magic_link(body.email, token)
    if not sent:
        logger.warning(
            "Magic link email was not delivered", extra={"user_id": str(user.id)},
        )
    return SuccessResponse()


@router.get("/verify")
async def verify_magic_link(
    token: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Consume a magic link and sign the user in."""
    if not token:
        return error_redirect("invalid_link")

    email = await MagicLinkService(db).verify_magic_link(token)
    if email is None:
        return error_redirect("expired_link")

    user = await UserService(db).get_user_by_email(email)
    if user is None:
        # The link is spent even though nobody can be signed in
        await db.commit()
        return error_redirect("user_not_found")

    session_token = await SessionTokenService(
        db, settings.jwt_secret, settings.token_expiry_days,
    ).issue_session_token(token_user_from(user))
    await db.commit()

    response = RedirectResponse(REPORT_PATH, status_code=status.HTTP_303_SEE_OTHER)
    set_auth_cookie(response, session_token, settings)
    return response


@router.post("/logout", response_model=SuccessResponse)
async def logout(response: Response, settings: Settings = Depends(get_settings)):
    clear_auth_cookies(response, settings)
    return SuccessResponse()
