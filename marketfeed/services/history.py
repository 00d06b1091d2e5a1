"""Historical price series with range fallback."""

from __future__ import annotations

import logging

from marketfeed.models import PriceBar
from marketfeed.providers.base import DataProvider
from marketfeed.providers.brapi import BrapiError
from marketfeed.services.quotes import normalize_ticker
from marketfeed.services.ranges import fallback_chain

logger = logging.getLogger(__name__)

# A single bar cannot drive a chart or a variance calculation.
_MIN_BARS = 2


class HistoryFetcher:
    """Walk a label's fallback chain until one entry yields real history."""

    def __init__(self, provider: DataProvider) -> None:
        self._provider = provider

    async def fetch(self, ticker: str, requested: str | int) -> list[PriceBar]:
        """Return bars sorted ascending, or ``[]`` when nothing usable exists.

        Raises ``ValueError`` for an unknown label.  Provider failures on
        individual chain entries are logged and skipped.
        """
        chain = fallback_chain(requested)
        symbol = normalize_ticker(ticker)
        if symbol is None:
            return []

        for spec in chain:
            try:
                bars = await self._provider.get_history(symbol, spec)
            except BrapiError as exc:
                logger.warning(
                    "History %s range=%s interval=%s failed: %s",
                    symbol,
                    spec.range,
                    spec.interval,
                    exc,
                )
                continue

            if len(bars) >= _MIN_BARS:
                logger.debug(
                    "History %s served by range=%s interval=%s (%d bars)",
                    symbol,
                    spec.range,
                    spec.interval,
                    len(bars),
                )
                return bars

            logger.info(
                "History %s range=%s interval=%s returned %d bar(s), degrading",
                symbol,
                spec.range,
                spec.interval,
                len(bars),
            )

        logger.warning("No usable history for %s (%s)", symbol, requested)
        return []
