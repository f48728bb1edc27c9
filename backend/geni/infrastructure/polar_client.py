"""Polar Purchase Verifier: checkout lookup over the Polar REST API.

Invariants:
    - get_checkout returns the raw checkout document (dict)
    - Failures surface as ExternalServiceError; callers decide the redirect
    - Base URL follows polar_mode (sandbox vs production)
"""

import logging
from urllib.parse import quote

import httpx

from geni.config import Settings
from geni.core.errors import ErrorContext, ExternalServiceError
from geni.infrastructure.http_client import ResilientHttpClient

logger = logging.getLogger(__name__)

SERVICE_NAME = "polar"


class PolarPurchaseVerifier:
    """PurchaseVerifier implementation backed by Polar."""

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.http = ResilientHttpClient(
            SERVICE_NAME,
            settings.polar_base_url,
            headers={
                "Authorization": f"Bearer {settings.polar_access_token}",
                "Accept": "application/json",
            },
            timeout_seconds=settings.http_timeout_seconds,
            max_retries=settings.http_max_retries,
            base_delay_ms=settings.http_base_delay_ms,
            max_delay_ms=settings.http_max_delay_ms,
            transport=transport,
        )

    async def get_checkout(self, checkout_id: str) -> dict:
        context = ErrorContext(debug_info={"checkout_id": checkout_id})
        response = await self.http.request(
            "GET", f"/v1/checkouts/{quote(checkout_id, safe='')}", context=context,
        )
        try:
            body = response.json()
        except ValueError:
            raise ExternalServiceError(
                SERVICE_NAME, "response was not JSON", "invalid_response", context=context,
            )
        if not isinstance(body, dict):
            raise ExternalServiceError(
                SERVICE_NAME, "unexpected checkout payload", "invalid_response",
                context=context,
            )
        logger.info(
            f"Fetched checkout {checkout_id} (status={body.get('status')})",
            extra={"service": SERVICE_NAME},
        )
        return body

    async def aclose(self) -> None:
        await self.http.aclose()
