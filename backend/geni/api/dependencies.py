"""API Dependencies: identity from the auth cookie, and the three external-facing seams.

Invariants:
    - get_optional_user never raises for a bad token (anonymous access)
    - get_current_user raises InvalidTokenError (401); require_paid_user adds 402
    - Email sender and purchase verifier are process-wide singletons, closed on shutdown
    - Every seam is overridable through app.dependency_overrides in tests
"""

import logging

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from geni.api.auth_cookies import get_auth_token
from geni.config import Settings, get_settings
from geni.core.auth_tokens import TokenUser, verify_token
from geni.core.errors import ErrorContext, InvalidTokenError, PaymentRequiredError
from geni.core.repository_protocols import EmailSender, PurchaseVerifier
from geni.infrastructure.database import get_db
from geni.infrastructure.polar_client import PolarPurchaseVerifier
from geni.infrastructure.resend_client import ResendEmailSender
from geni.services.report_vault import ReportVaultService

logger = logging.getLogger(__name__)

_email_sender: ResendEmailSender | None = None
_purchase_verifier: PolarPurchaseVerifier | None = None


def get_optional_user(
    request: Request, settings: Settings = Depends(get_settings),
) -> TokenUser | None:
    """Identity from the auth cookie, or None when absent or invalid."""
    token = get_auth_token(request, settings)
    if not token:
        return None
    try:
        return verify_token(token, settings.jwt_secret)
    except InvalidTokenError as e:
        logger.info(f"Ignoring auth cookie: {e.message}")
        return None


def get_current_user(
    request: Request, settings: Settings = Depends(get_settings),
) -> TokenUser:
    return verify_token(get_auth_token(request, settings), settings.jwt_secret)


def require_paid_user(user: TokenUser = Depends(get_current_user)) -> TokenUser:
    if not user.is_paid:
        raise PaymentRequiredError(ErrorContext(user_id=user.user_id))
    return user


def get_report_vault(
    db: AsyncSession = Depends(get_db), settings: Settings = Depends(get_settings),
) -> ReportVaultService:
    return ReportVaultService(db, settings.jwt_secret, settings.kdf_iterations)


def get_email_sender(settings: Settings = Depends(get_settings)) -> EmailSender:
    global _email_sender
    if _email_sender is None:
        _email_sender = ResendEmailSender(settings)
    return _email_sender


def get_purchase_verifier(settings: Settings = Depends(get_settings)) -> PurchaseVerifier:
    global _purchase_verifier
    if _purchase_verifier is None:
        _purchase_verifier = PolarPurchaseVerifier(settings)
    return _purchase_verifier


async def close_external_clients() -> None:
    global _email_sender, _purchase_verifier
    if _email_sender is not None:
        await _email_sender.aclose()
        _email_sender = None
    if _purchase_verifier is not None:
        await _purchase_verifier.aclose()
        _purchase_verifier = None
