"""Checkout Routes: landing page after a Polar purchase.

Invariants:
    - Every outcome is a 303 redirect (browser navigation, never JSON)
    - Failures redirect to /?error=missing_checkout | payment_failed | no_email
    - Success upserts the purchaser as paid, sets the auth cookie, redirects to /report
    - Only a checkout with status "succeeded" grants the paid plan
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from geni.api.auth_cookies import set_auth_cookie
from geni.api.dependencies import get_purchase_verifier
from geni.config import Settings, get_settings
from geni.core.checkout_payload import extract_email_from_checkout, is_checkout_succeeded
from geni.core.domain_types import Plan
from geni.core.errors import ExternalServiceError
from geni.core.repository_protocols import PurchaseVerifier
from geni.infrastructure.database import get_db
from geni.services.session_tokens import SessionTokenService, token_user_from
from geni.services.users import UserService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/checkout", tags=["checkout"])

REPORT_PATH = "/report"


def error_redirect(code: str) -> RedirectResponse:
    return RedirectResponse(f"/?error={code}", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/success")
async def checkout_success(
    checkout_id: str | None = Query(None),
    verifier: PurchaseVerifier = Depends(get_purchase_verifier),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Verify the checkout, mark the purchaser paid and sign them in."""
    if not checkout_id:
        return error_redirect("missing_checkout")

    try:
        checkout = await verifier.get_checkout(checkout_id)
    except ExternalServiceError as e:
        logger.error(
            f"Checkout lookup failed: {e.message}",
            extra={"service": e.service, "error_code": e.code},
        )
        return error_redirect("payment_failed")

    if not is_checkout_succeeded(checkout):
        logger.warning(f"Checkout {checkout_id} not succeeded: {checkout.get('status')}")
        return error_redirect("payment_failed")

    email = extract_email_from_checkout(checkout)
    if not email:
        logger.error(f"No email found in checkout {checkout_id}")
        return error_redirect("no_email")

    user = await UserService(db).upsert_user(email, Plan.PAID)
    token = await SessionTokenService(
        db, settings.jwt_secret, settings.token_expiry_days,
    ).issue_session_token(token_user_from(user))
    await db.commit()

    response = RedirectResponse(REPORT_PATH, status_code=status.HTTP_303_SEE_OTHER)
    set_auth_cookie(response, token, settings)
    return response
