"""In-process read-through cache of the full symbol directory.

The directory (every tradable B3 symbol with last close and day change)
backs type-ahead search, the top-movers ranking and the quote fallback
path.  Reads within the TTL never touch the network.  A failed refetch
serves the last known payload instead of raising, so an unavailable
directory degrades to "no suggestions" rather than an error.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable

from marketfeed.config import DIRECTORY_CACHE_TTL_SECONDS, SEARCH_RESULT_LIMIT
from marketfeed.models import SymbolListing
from marketfeed.providers.base import DataProvider
from marketfeed.providers.brapi import BrapiError

logger = logging.getLogger(__name__)


class SymbolDirectory:
    """TTL cache around ``DataProvider.get_symbol_list``.

    One instance is shared per process; it is owned by the composition
    root (``MarketData``) and injected into the services that need it.
    """

    def __init__(
        self,
        provider: DataProvider,
        ttl_seconds: float = DIRECTORY_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._provider = provider
        self._ttl = ttl_seconds
        self._clock = clock
        self._payload: tuple[SymbolListing, ...] | None = None
        self._fetched_at: float | None = None
        self._lock = asyncio.Lock()
        self._attempts = 0

    @property
    def fetched_at(self) -> float | None:
        return self._fetched_at

    def is_fresh(self) -> bool:
        """True while the cached payload is younger than the TTL."""
        if self._payload is None or self._fetched_at is None:
            return False
        return self._clock() - self._fetched_at < self._ttl

    async def get_all(self) -> tuple[SymbolListing, ...]:
        """Return every listing, refetching only when the cache is stale."""
        if self.is_fresh():
            return self._payload

        attempt = self._attempts
        async with self._lock:
            # Another caller refetched while we waited; share its outcome
            # even if it failed, rather than queueing a refetch of our own.
            if self.is_fresh() or self._attempts != attempt:
                return self._payload if self._payload is not None else ()
            return await self._refetch()

    async def refresh(self) -> tuple[SymbolListing, ...]:
        """Force a refetch regardless of age."""
        async with self._lock:
            return await self._refetch()

    async def _refetch(self) -> tuple[SymbolListing, ...]:
        try:
            listings = await self._provider.get_symbol_list()
        except BrapiError as exc:
            self._attempts += 1
            if self._payload is not None:
                logger.warning(
                    "Symbol directory refresh failed, serving %d cached listings: %s",
                    len(self._payload),
                    exc,
                )
                return self._payload
            logger.warning("Symbol directory unavailable and nothing cached: %s", exc)
            return ()

        self._attempts += 1
        self._payload = tuple(listings)
        self._fetched_at = self._clock()
        logger.info("Symbol directory refreshed: %d listings", len(self._payload))
        return self._payload

    async def search(
        self, query: str, limit: int = SEARCH_RESULT_LIMIT
    ) -> list[SymbolListing]:
        """Case-insensitive substring match on ticker or name."""
        needle = (query or "").strip().lower()
        if not needle:
            return []

        matches: list[SymbolListing] = []
        for listing in await self.get_all():
            if needle in listing.ticker.lower() or needle in listing.name.lower():
                matches.append(listing)
                if len(matches) >= limit:
                    break
        return matches

    async def lookup(self, ticker: str) -> SymbolListing | None:
        """Exact (case-insensitive) ticker match, or ``None``."""
        wanted = (ticker or "").strip().upper()
        if not wanted:
            return None
        for listing in await self.get_all():
            if listing.ticker == wanted:
                return listing
        return None
