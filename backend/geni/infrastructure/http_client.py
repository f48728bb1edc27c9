"""Resilient HTTP Client: httpx.AsyncClient with retry, backoff, and error mapping.

Invariants:
    - Rate limits (429): exponential backoff with jitter, respects Retry-After header
      up to max_delay_ms
    - Transient errors (5xx, connection): max_retries retries with exponential backoff
    - Timeouts and client errors (4xx except 429): immediate failure, no retry
    - All failures mapped to ExternalServiceError (core/errors.py)

Design Decisions:
    - One wrapper shared by the Resend and Polar clients: retry policy lives in one place
    - ±25% jitter on backoff: prevents thundering herd on shared rate limits
    - transport injectable so tests can use httpx.MockTransport
"""

import asyncio
import logging
import random

import httpx

from geni.core.errors import ExternalServiceError, ErrorContext

logger = logging.getLogger(__name__)

_RATE_LIMITED = 429


class ResilientHttpClient:
    """Wraps httpx.AsyncClient with retry logic, timeouts, and error mapping."""

    def __init__(
        self,
        service: str,
        base_url: str,
        headers: dict[str, str] | None = None,
        timeout_seconds: float = 15.0,
        max_retries: int = 3,
        base_delay_ms: int = 500,
        max_delay_ms: int = 8_000,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.service = service
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms
        self.client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers or {},
            timeout=timeout_seconds,
            transport=transport,
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: dict | None = None,
        context: ErrorContext | None = None,
    ) -> httpx.Response:
        """Send a request, retrying transient failures. Returns a 2xx response."""
        for attempt in range(self.max_retries + 1):
            try:
                response = await self.client.request(method, path, json=json)
            except httpx.TimeoutException:
                raise ExternalServiceError(
                    self.service, "request timed out", "timeout", context=context,
                )
            except httpx.TransportError as e:
                await self._handle_transient_error(e, attempt, context)
                continue

            if response.status_code == _RATE_LIMITED:
                await self._handle_rate_limit(response, attempt, context)
                continue
            if response.status_code >= 500:
                await self._handle_transient_error(
                    f"HTTP {response.status_code}", attempt, context,
                )
                continue
            if response.status_code >= 400:
                raise ExternalServiceError(
                    self.service,
                    f"HTTP {response.status_code}",
                    "client_error",
                    context=context,
                )

            logger.info(
                f"{self.service} request succeeded",
                extra={
                    "service": self.service,
                    "attempt": attempt + 1,
                    "status_code": response.status_code,
                },
            )
            return response

        # Unreachable: the handlers raise on the final attempt
        raise ExternalServiceError(
            self.service, "retries exhausted", "connection_error", context=context,
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _handle_rate_limit(
        self, response: httpx.Response, attempt: int, context: ErrorContext | None,
    ) -> None:
        """Handle rate limit response with retry or raise."""
        retry_after_ms = self._extract_retry_after(response)
        if attempt >= self.max_retries:
            raise ExternalServiceError(
                self.service,
                "Rate limit exceeded after retries",
                "rate_limit",
                retry_after_ms=retry_after_ms,
                context=context,
            )
        if retry_after_ms is not None:
            delay = min(retry_after_ms, self.max_delay_ms)
        else:
            delay = self._backoff(attempt)
        logger.warning(
            f"{self.service} rate limit hit, retry after {delay}ms (attempt {attempt + 1})",
        )
        await asyncio.sleep(delay / 1000)

    async def _handle_transient_error(
        self, error: object, attempt: int, context: ErrorContext | None,
    ) -> None:
        """Handle transient errors with retry or raise."""
        if attempt >= self.max_retries:
            raise ExternalServiceError(
                self.service,
                f"Transient failure after {self.max_retries} retries: {error}",
                "connection_error",
                context=context,
            )
        delay = self._backoff(attempt)
        logger.warning(f"{self.service} transient error, retry after {delay}ms: {error}")
        await asyncio.sleep(delay / 1000)

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

    @staticmethod
    def _extract_retry_after(response: httpx.Response) -> int | None:
        """Extract Retry-After header (returns milliseconds)."""
        val = response.headers.get("retry-after")
        if val and val.isdigit():
            return int(val) * 1000
        return None
