"""Tests for the retrying HTTP transport.

Covers:
- Transient classification (429, 5xx vs. everything else)
- Linear backoff schedule
- Retry on network errors and transient statuses, then success
- No retry for 2xx / non-429 4xx
- TransportError after the retry budget is exhausted
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import httpx
import pytest

from marketfeed.providers.transport import (
    RetryingTransport,
    TransportError,
    backoff_delay,
    is_transient_status,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _scripted_client(outcomes: list) -> tuple[httpx.AsyncClient, list[httpx.Request]]:
    """Client whose responses follow *outcomes* (status ints or exceptions)."""
    seen: list[httpx.Request] = []
    remaining = list(outcomes)

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        outcome = remaining.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return httpx.Response(outcome, json={"ok": outcome < 400})

    client = httpx.AsyncClient(
        base_url="https://brapi.test/api",
        transport=httpx.MockTransport(handler),
    )
    return client, seen


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


class TestTransientClassification:
    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
    def test_transient(self, status):
        assert is_transient_status(status) is True

    @pytest.mark.parametrize("status", [200, 204, 301, 400, 401, 403, 404])
    def test_not_transient(self, status):
        assert is_transient_status(status) is False


class TestBackoffDelay:
    def test_linear_growth(self):
        assert [backoff_delay(n, 0.5) for n in (1, 2, 3)] == [0.5, 1.0, 1.5]


# ---------------------------------------------------------------------------
# RetryingTransport.fetch
# ---------------------------------------------------------------------------


class TestFetch:
    @pytest.mark.asyncio
    async def test_success_first_try(self):
        client, seen = _scripted_client([200])
        sleep = AsyncMock()
        transport = RetryingTransport(client, sleep=sleep)

        resp = await transport.fetch("/quote/PETR4")

        assert resp.status_code == 200
        assert len(seen) == 1
        sleep.assert_not_called()

    @pytest.mark.asyncio
    async def test_retries_5xx_then_succeeds(self):
        client, seen = _scripted_client([503, 500, 200])
        sleep = AsyncMock()
        transport = RetryingTransport(client, max_retries=3, base_delay=0.5, sleep=sleep)

        resp = await transport.fetch("/quote/PETR4")

        assert resp.status_code == 200
        assert len(seen) == 3
        assert [c.args[0] for c in sleep.await_args_list] == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_retries_429(self):
        client, seen = _scripted_client([429, 200])
        transport = RetryingTransport(client, sleep=AsyncMock())

        resp = await transport.fetch("/quote/list")

        assert resp.status_code == 200
        assert len(seen) == 2

    @pytest.mark.asyncio
    async def test_retries_network_error(self):
        client, seen = _scripted_client([httpx.ConnectError("boom"), 200])
        transport = RetryingTransport(client, sleep=AsyncMock())

        resp = await transport.fetch("/quote/VALE3")

        assert resp.status_code == 200
        assert len(seen) == 2

    @pytest.mark.asyncio
    async def test_404_returned_without_retry(self):
        client, seen = _scripted_client([404])
        sleep = AsyncMock()
        transport = RetryingTransport(client, sleep=sleep)

        resp = await transport.fetch("/quote/ZZZZ")

        assert resp.status_code == 404
        assert len(seen) == 1
        sleep.assert_not_called()

    @pytest.mark.asyncio
    async def test_exhausted_status_raises_with_status_code(self):
        client, seen = _scripted_client([500, 500, 500, 500])
        sleep = AsyncMock()
        transport = RetryingTransport(client, max_retries=3, base_delay=0.5, sleep=sleep)

        with pytest.raises(TransportError) as excinfo:
            await transport.fetch("/quote/PETR4")

        assert excinfo.value.status_code == 500
        assert len(seen) == 4
        assert [c.args[0] for c in sleep.await_args_list] == [0.5, 1.0, 1.5]

    @pytest.mark.asyncio
    async def test_exhausted_network_error_chains_cause(self):
        client, seen = _scripted_client([httpx.ReadTimeout("slow")] * 3)
        transport = RetryingTransport(client, max_retries=2, sleep=AsyncMock())

        with pytest.raises(TransportError) as excinfo:
            await transport.fetch("/quote/PETR4")

        assert excinfo.value.status_code is None
        assert isinstance(excinfo.value.__cause__, httpx.ReadTimeout)
        assert len(seen) == 3

    @pytest.mark.asyncio
    async def test_params_forwarded(self):
        client, seen = _scripted_client([200])
        transport = RetryingTransport(client, sleep=AsyncMock())

        await transport.fetch("/quote/PETR4", {"range": "1mo", "interval": "1d"})

        assert seen[0].url.params["range"] == "1mo"
        assert seen[0].url.params["interval"] == "1d"
        assert seen[0].url.path == "/api/quote/PETR4"
