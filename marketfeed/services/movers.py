"""Top gainers and losers among liquid B3 equities."""

from __future__ import annotations

import logging
import re

from marketfeed.config import MOVERS_CONFIG
from marketfeed.models import Movers, SymbolListing
from marketfeed.services.symbol_directory import SymbolDirectory

logger = logging.getLogger(__name__)

_LIMIT: int = MOVERS_CONFIG["limit"]
_TICKER_RE = re.compile(MOVERS_CONFIG["ticker_pattern"])
_EXCLUDED_NAME_RE = re.compile(
    r"\b(" + "|".join(re.escape(m) for m in MOVERS_CONFIG["excluded_name_markers"]) + r")"
)


def is_rankable(listing: SymbolListing) -> bool:
    """True for a liquid common/preferred share; anything doubtful is excluded."""
    if not _TICKER_RE.match(listing.ticker):
        return False
    if _EXCLUDED_NAME_RE.search(listing.name.upper()):
        return False
    if listing.change_percent is None:
        return False
    return listing.volume > 0 and listing.close > 0


class MoversRanker:
    """Derives top movers from the symbol directory only; never calls the API."""

    def __init__(self, directory: SymbolDirectory) -> None:
        self._directory = directory

    async def top_movers(self, limit: int = _LIMIT) -> Movers:
        listings = await self._directory.get_all()
        ranked = sorted(
            (listing for listing in listings if is_rankable(listing)),
            key=lambda listing: (-listing.change_percent, listing.ticker),
        )
        logger.debug("Ranking %d of %d listings", len(ranked), len(listings))

        if not ranked or limit <= 0:
            return Movers(gainers=(), losers=())

        return Movers(
            gainers=tuple(ranked[:limit]),
            losers=tuple(reversed(ranked[-limit:])),
        )
