"""Resend and Polar client tests: request shape and failure handling over httpx.MockTransport.

Tests cover:
    - Magic-link email payload (sender, recipient, subject, link, expiry text)
    - Delivery failure returns False instead of raising
    - Checkout lookup path, auth header and sandbox/production base URL
    - Non-JSON or non-object checkout bodies rejected
"""

import json

import httpx
import pytest

from geni.config import Settings
from geni.core.errors import ExternalServiceError
from geni.infrastructure.polar_client import PolarPurchaseVerifier
from geni.infrastructure.resend_client import (
    MAGIC_LINK_SUBJECT, ResendEmailSender, build_magic_link,
)


def _settings(**overrides) -> Settings:
    values = {
        "resend_api_key": "re_key",
        "polar_access_token": "polar_key",
        "app_base_url": "https://geni.test",
        "from_email": "support@geni.test",
        "http_max_retries": 1,
        "http_base_delay_ms": 0,
    }
    values.update(overrides)
    return Settings(**values)


def _recording(status=200, body=None):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body if body is not None else {"id": "em_1"})

    return httpx.MockTransport(handler), calls


# --- Resend -------------------------------------------------------------------

def test_magic_link_url_encodes_email():
    link = build_magic_link("https://geni.test/", "a+b@example.com", "tok")
    assert link == "https://geni.test/api/v1/auth/verify?email=a%2Bb%40example.com&token=tok"


async def test_send_magic_link_posts_email():
    transport, calls = _recording()
    sender = ResendEmailSender(_settings(), transport=transport)

    assert await sender.send_magic_link("buyer@example.com", "abc123") is True

    request = calls[0]
    assert request.method == "POST"
    assert request.url == httpx.URL("https://api.resend.com/emails")
    assert request.headers["authorization"] == "Bearer re_key"
    payload = json.loads(request.content)
    assert payload["from"] == "support@geni.test"
    assert payload["to"] == ["buyer@example.com"]
    assert payload["subject"] == MAGIC_LINK_SUBJECT
    assert "https://geni.test/api/v1/auth/verify?email=buyer%40example.com&token=abc123" in payload["html"]
    assert "expires in 15 minutes" in payload["html"]
    await sender.aclose()


async def test_send_magic_link_failure_returns_false():
    transport, calls = _recording(status=422, body={"message": "invalid from"})
    sender = ResendEmailSender(_settings(), transport=transport)
    assert await sender.send_magic_link("buyer@example.com", "abc123") is False
    assert len(calls) == 1
    await sender.aclose()


# --- Polar --------------------------------------------------------------------

async def test_get_checkout_returns_document():
    transport, calls = _recording(body={"id": "chk_1", "status": "succeeded"})
    verifier = PolarPurchaseVerifier(_settings(), transport=transport)

    checkout = await verifier.get_checkout("chk_1")

    assert checkout["status"] == "succeeded"
    assert calls[0].url == httpx.URL("https://api.polar.sh/v1/checkouts/chk_1")
    assert calls[0].headers["authorization"] == "Bearer polar_key"
    await verifier.aclose()


async def test_sandbox_mode_uses_sandbox_api():
    transport, calls = _recording(body={"status": "open"})
    verifier = PolarPurchaseVerifier(_settings(polar_mode="sandbox"), transport=transport)
    await verifier.get_checkout("chk_2")
    assert calls[0].url.host == "sandbox-api.polar.sh"
    await verifier.aclose()


async def test_checkout_id_is_path_escaped():
    transport, calls = _recording(body={"status": "open"})
    verifier = PolarPurchaseVerifier(_settings(), transport=transport)
    await verifier.get_checkout("a/b")
    assert calls[0].url.raw_path == b"/v1/checkouts/a%2Fb"
    await verifier.aclose()


async def test_missing_checkout_raises():
    transport, _ = _recording(status=404, body={"detail": "not found"})
    verifier = PolarPurchaseVerifier(_settings(), transport=transport)
    with pytest.raises(ExternalServiceError):
        await verifier.get_checkout("chk_missing")
    await verifier.aclose()


async def test_non_object_body_raises():
    transport, _ = _recording(body=["not", "a", "dict"])
    verifier = PolarPurchaseVerifier(_settings(), transport=transport)
    with pytest.raises(ExternalServiceError) as exc_info:
        await verifier.get_checkout("chk_3")
    assert exc_info.value.error_type == "invalid_response"
    await verifier.aclose()


async def test_non_json_body_raises():
    transport, _ = _recording(body="<html>oops</html>")
    verifier = PolarPurchaseVerifier(_settings(), transport=transport)
    with pytest.raises(ExternalServiceError):
        await verifier.get_checkout("chk_4")
    await verifier.aclose()
