"""HTTP transport with bounded linear-backoff retry for transient faults."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

import httpx

from marketfeed.config import TRANSPORT_CONFIG

logger = logging.getLogger(__name__)

_MAX_RETRIES: int = TRANSPORT_CONFIG["max_retries"]
_BASE_DELAY: float = TRANSPORT_CONFIG["base_delay_seconds"]
_RETRY_STATUSES: tuple[int, ...] = TRANSPORT_CONFIG["retry_statuses"]


class TransportError(Exception):
    """Raised when a request still fails after the retry budget is spent."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def is_transient_status(status_code: int) -> bool:
    """429 and every 5xx are worth retrying; everything else is final."""
    return status_code in _RETRY_STATUSES or status_code >= 500


def backoff_delay(attempt: int, base_delay: float = _BASE_DELAY) -> float:
    """Delay before retry number *attempt* (1-based)."""
    return base_delay * attempt


class RetryingTransport:
    """Issue GET requests through an ``httpx.AsyncClient`` with retry.

    No circuit breaker and no shared queue: every ``fetch`` call retries
    on its own, so concurrent calls never block each other.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        max_retries: int = _MAX_RETRIES,
        base_delay: float = _BASE_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self._max_retries = max_retries
        self._base_delay = base_delay
        self._sleep = sleep

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def fetch(self, path: str, params: dict | None = None) -> httpx.Response:
        """GET *path*, retrying network errors, 429 and 5xx.

        Non-transient responses (2xx, 3xx, 4xx other than 429) are
        returned as-is on the first attempt.  Raises ``TransportError``
        once ``max_retries`` retries have been used up.
        """
        attempts = self._max_retries + 1
        last_exc: Exception | None = None
        last_status: int | None = None

        for attempt in range(1, attempts + 1):
            try:
                resp = await self._client.get(path, params=params)
            except httpx.TransportError as exc:
                last_exc = exc
                last_status = None
                reason = f"{type(exc).__name__}: {exc}"
            else:
                if not is_transient_status(resp.status_code):
                    return resp
                last_exc = None
                last_status = resp.status_code
                reason = f"HTTP {resp.status_code}"

            if attempt < attempts:
                wait = backoff_delay(attempt, self._base_delay)
                logger.warning(
                    "GET %s failed (attempt %d/%d): %s, retrying in %.1fs",
                    path,
                    attempt,
                    attempts,
                    reason,
                    wait,
                )
                await self._sleep(wait)

        logger.error("GET %s failed after %d attempts: %s", path, attempts, reason)
        raise TransportError(
            f"GET {path} failed after {attempts} attempts: {reason}",
            status_code=last_status,
        ) from last_exc
