"""Resend Email Sender: magic-link delivery over the Resend REST API.

Invariants:
    - send_magic_link never raises on delivery failure; returns False and logs
    - The token appears only inside the emailed link, never in logs
    - Link format: {app_base_url}/api/v1/auth/verify?email=<urlencoded>&token=<token>,
      the verify route of this API (the frontend origin proxies /api)

Design Decisions:
    - Plain REST call (POST /emails) through ResilientHttpClient rather than an SDK:
      one endpoint, shared retry policy with the Polar client
"""

import logging
from urllib.parse import quote

import httpx

from geni.config import Settings
from geni.core.errors import ExternalServiceError
from geni.infrastructure.http_client import ResilientHttpClient

logger = logging.getLogger(__name__)

SERVICE_NAME = "resend"
MAGIC_LINK_SUBJECT = "Access Your Geni Report"
VERIFY_PATH = "/api/v1/auth/verify"

_MAGIC_LINK_HTML = """\
<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; margin: 0; padding: 0; background-color: #f5f5f5;">
  <table width="100%" cellpadding="0" cellspacing="0" style="max-width: 500px; margin: 0 auto; padding: 40px 20px;">
    <tr>
      <td style="background-color: #ffffff; border-radius: 16px; padding: 40px; text-align: center;">
        <h1 style="color: #1a1a1a; font-size: 24px; margin: 0 0 16px 0;">Access Your Report</h1>
        <p style="color: #666666; font-size: 16px; line-height: 1.5; margin: 0 0 24px 0;">
          Click the button below to access your DNA insights report. This link expires in {expiry_minutes} minutes.
        </p>
        <a href="{link}" style="display: inline-block; background-color: #e85d04; color: #ffffff; text-decoration: none; padding: 14px 32px; border-radius: 8px; font-size: 16px; font-weight: 500;">
          View My Report
        </a>
        <p style="color: #999999; font-size: 14px; line-height: 1.5; margin: 32px 0 0 0;">
          If you didn't request this email, you can safely ignore it.
        </p>
      </td>
    </tr>
    <tr>
      <td style="text-align: center; padding: 24px 0;">
        <p style="color: #999999; font-size: 12px; margin: 0;">
          Geni - Educational DNA Insights<br>
          This is not medical advice.
        </p>
      </td>
    </tr>
  </table>
</body>
</html>
"""


def build_magic_link(base_url: str, email: str, token: str) -> str:
    return f"{base_url.rstrip('/')}{VERIFY_PATH}?email={quote(email, safe='')}&token={token}"


def render_magic_link_email(link: str, expiry_minutes: int) -> str:
    return _MAGIC_LINK_HTML.format(link=link, expiry_minutes=expiry_minutes)


class ResendEmailSender:
    """EmailSender implementation backed by Resend."""

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.from_email = settings.from_email
        self.app_base_url = settings.app_base_url
        self.expiry_minutes = settings.magic_link_expiry_minutes
        self.http = ResilientHttpClient(
            SERVICE_NAME,
            settings.resend_base_url,
            headers={"Authorization": f"Bearer {settings.resend_api_key}"},
            timeout_seconds=settings.http_timeout_seconds,
            max_retries=settings.http_max_retries,
            base_delay_ms=settings.http_base_delay_ms,
            max_delay_ms=settings.http_max_delay_ms,
            transport=transport,
        )

    async def send_magic_link(self, email: str, token: str) -> bool:
        link = build_magic_link(self.app_base_url, email, token)
        payload = {
            "from": self.from_email,
            "to": [email],
            "subject": MAGIC_LINK_SUBJECT,
            "html": render_magic_link_email(link, self.expiry_minutes),
        }
        try:
            await self.http.request("POST", "/emails", json=payload)
        except ExternalServiceError as e:
            logger.error(
                f"Failed to send magic link email: {e.message}",
                extra={"service": SERVICE_NAME, "error_code": e.code},
            )
            return False
        return True

    async def aclose(self) -> None:
        await self.http.aclose()
