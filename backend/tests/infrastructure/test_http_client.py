"""Resilient HTTP client tests: retry policy and error mapping over httpx.MockTransport.

Tests cover:
    - 2xx returned on first attempt
    - 5xx and 429 retried, then succeed
    - Retries exhausted -> ExternalServiceError
    - 4xx and timeouts fail immediately
    - Retry-After parsing, capped at max_delay_ms, and bounded backoff
"""

import httpx
import pytest

from geni.core.errors import ExternalServiceError
from geni.infrastructure import http_client
from geni.infrastructure.http_client import ResilientHttpClient


def _client(handler, max_retries=2) -> ResilientHttpClient:
    return ResilientHttpClient(
        "test-service",
        "https://api.test",
        max_retries=max_retries,
        base_delay_ms=0,
        transport=httpx.MockTransport(handler),
    )


def _sequence(*statuses):
    """Handler that answers with the given statuses in order, recording calls."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        status = statuses[min(len(calls), len(statuses) - 1)]
        calls.append(request)
        return httpx.Response(status, json={"n": len(calls)}, headers={"retry-after": "0"})

    return handler, calls


async def test_success_first_attempt():
    handler, calls = _sequence(200)
    client = _client(handler)
    response = await client.request("GET", "/thing")
    assert response.json() == {"n": 1}
    assert len(calls) == 1
    assert calls[0].url == httpx.URL("https://api.test/thing")
    await client.aclose()


async def test_server_errors_are_retried():
    handler, calls = _sequence(503, 502, 200)
    client = _client(handler)
    response = await client.request("POST", "/thing", json={"a": 1})
    assert response.status_code == 200
    assert len(calls) == 3
    await client.aclose()


async def test_rate_limit_is_retried():
    handler, calls = _sequence(429, 200)
    client = _client(handler)
    assert (await client.request("GET", "/thing")).status_code == 200
    assert len(calls) == 2
    await client.aclose()


async def test_retries_exhausted_raises():
    handler, calls = _sequence(500)
    client = _client(handler, max_retries=2)
    with pytest.raises(ExternalServiceError) as exc_info:
        await client.request("GET", "/thing")
    assert exc_info.value.error_type == "connection_error"
    assert exc_info.value.service == "test-service"
    assert len(calls) == 3
    await client.aclose()


async def test_rate_limit_exhausted_raises_rate_limit():
    handler, _ = _sequence(429)
    client = _client(handler, max_retries=1)
    with pytest.raises(ExternalServiceError) as exc_info:
        await client.request("GET", "/thing")
    assert exc_info.value.error_type == "rate_limit"
    await client.aclose()


async def test_client_errors_fail_immediately():
    handler, calls = _sequence(404)
    client = _client(handler)
    with pytest.raises(ExternalServiceError) as exc_info:
        await client.request("GET", "/missing")
    assert exc_info.value.error_type == "client_error"
    assert len(calls) == 1
    await client.aclose()


async def test_connection_errors_are_retried():
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) == 1:
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(200)

    client = _client(handler)
    assert (await client.request("GET", "/thing")).status_code == 200
    assert len(calls) == 2
    await client.aclose()


async def test_timeouts_fail_immediately():
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ReadTimeout("slow", request=request)

    client = _client(handler)
    with pytest.raises(ExternalServiceError) as exc_info:
        await client.request("GET", "/thing")
    assert exc_info.value.error_type == "timeout"
    assert len(calls) == 1
    await client.aclose()


def test_extract_retry_after_seconds_to_ms():
    assert ResilientHttpClient._extract_retry_after(
        httpx.Response(429, headers={"retry-after": "3"}),
    ) == 3000
    assert ResilientHttpClient._extract_retry_after(httpx.Response(429)) is None
    assert ResilientHttpClient._extract_retry_after(
        httpx.Response(429, headers={"retry-after": "soon"}),
    ) is None


def test_backoff_is_capped_with_jitter():
    client = ResilientHttpClient("svc", "https://api.test", base_delay_ms=500, max_delay_ms=2000)
    assert 375 <= client._backoff(0) <= 625
    assert 1500 <= client._backoff(10) <= 2500


async def test_retry_after_is_capped(monkeypatch):
    slept = []

    async def fake_sleep(seconds):
        slept.append(seconds)

    monkeypatch.setattr(http_client.asyncio, "sleep", fake_sleep)
    statuses = iter([429, 200])

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(next(statuses), headers={"retry-after": "3600"})

    client = ResilientHttpClient(
        "test-service", "https://api.test",
        max_delay_ms=50, transport=httpx.MockTransport(handler),
    )
    assert (await client.request("GET", "/thing")).status_code == 200
    assert slept == [0.05]
    await client.aclose()
