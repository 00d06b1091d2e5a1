"""Resolve tickers to quotes: live endpoint first, symbol directory second.

The live endpoint may be rate-limited or down while the (slightly staler)
directory is still reachable, so availability wins over freshness.  A
ticker found in neither source is omitted; nothing here raises for
absence or provider faults.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Iterable

from marketfeed.config import QUOTE_BATCH_SIZE
from marketfeed.models import Quote, SymbolListing
from marketfeed.providers.base import DataProvider
from marketfeed.providers.brapi import BrapiError
from marketfeed.services.symbol_directory import SymbolDirectory

logger = logging.getLogger(__name__)

# brapi rejects a whole batch with 400/404 when any ticker is unknown.
_SPLIT_STATUSES = (400, 404)

_TICKER_RE = re.compile(r"^[A-Z0-9]{1,12}$")


def normalize_ticker(raw: str | None) -> str | None:
    """Uppercase *raw*, or ``None`` if it is not a plain alphanumeric symbol.

    Tickers end up in the request path, so ``/``, ``?`` and ``,`` never
    get through.
    """
    ticker = (raw or "").strip().upper()
    if not _TICKER_RE.match(ticker):
        return None
    return ticker


def normalize_tickers(tickers: Iterable[str]) -> list[str]:
    """Normalize and de-duplicate, keeping first-seen order."""
    seen: dict[str, None] = {}
    for raw in tickers:
        ticker = normalize_ticker(raw)
        if ticker is None:
            if raw and raw.strip():
                logger.info("Ignoring malformed ticker %r", raw)
            continue
        seen.setdefault(ticker, None)
    return list(seen)


def quote_from_listing(listing: SymbolListing) -> Quote | None:
    """Synthesize a fallback Quote from a directory listing.

    Directory listings carry no previous close, so the quote's
    ``previous_close`` is always ``None``.
    """
    if listing.close <= 0:
        return None
    return Quote(
        ticker=listing.ticker,
        name=listing.name,
        price=listing.close,
        change_percent=listing.change_percent,
        logo_url=listing.logo_url,
        previous_close=None,
        source="directory",
    )


class QuoteResolver:
    def __init__(
        self,
        provider: DataProvider,
        directory: SymbolDirectory,
        batch_size: int = QUOTE_BATCH_SIZE,
    ) -> None:
        self._provider = provider
        self._directory = directory
        self._batch_size = max(1, batch_size)

    async def resolve_one(self, ticker: str) -> Quote | None:
        quotes = await self.resolve_many([ticker])
        return quotes[0] if quotes else None

    async def resolve_many(self, tickers: Iterable[str]) -> list[Quote]:
        """One quote per resolvable ticker, in input order."""
        wanted = normalize_tickers(tickers)
        if not wanted:
            return []

        chunks = [
            wanted[i:i + self._batch_size]
            for i in range(0, len(wanted), self._batch_size)
        ]
        found: dict[str, Quote] = {}
        for chunk_result in await asyncio.gather(
            *(self._fetch_live(chunk) for chunk in chunks)
        ):
            found.update(chunk_result)

        missing = [t for t in wanted if t not in found]
        if missing:
            found.update(await self._from_directory(missing))

        return [found[t] for t in wanted if t in found]

    async def _fetch_live(self, tickers: list[str]) -> dict[str, Quote]:
        """Live quotes for one chunk; splits the batch on a 400/404."""
        try:
            quotes = await self._provider.get_quotes(tickers)
        except BrapiError as exc:
            if len(tickers) > 1 and exc.status_code in _SPLIT_STATUSES:
                logger.info(
                    "Batch quote for %d tickers rejected (HTTP %s), retrying individually",
                    len(tickers),
                    exc.status_code,
                )
                results = await asyncio.gather(
                    *(self._fetch_live([t]) for t in tickers)
                )
                merged: dict[str, Quote] = {}
                for result in results:
                    merged.update(result)
                return merged
            logger.warning("Live quote request for %s failed: %s", ",".join(tickers), exc)
            return {}

        requested = set(tickers)
        return {q.ticker: q for q in quotes if q.ticker in requested}

    async def _from_directory(self, tickers: list[str]) -> dict[str, Quote]:
        listings = {listing.ticker: listing for listing in await self._directory.get_all()}
        results: dict[str, Quote] = {}
        for ticker in tickers:
            listing = listings.get(ticker)
            quote = quote_from_listing(listing) if listing is not None else None
            if quote is None:
                logger.info("No quote available for %s from any source", ticker)
                continue
            logger.debug("Quote for %s served from symbol directory", ticker)
            results[ticker] = quote
        return results
