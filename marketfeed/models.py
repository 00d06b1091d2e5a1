"""Immutable market-data snapshots shared by providers and services.

Every entity here is created by a fetch and replaced by the next one;
nothing is mutated after construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

VALID_PROVIDER_RANGES = frozenset({
    "1d", "2d", "5d", "7d", "1mo", "3mo", "6mo",
    "1y", "2y", "5y", "10y", "ytd", "max",
})
VALID_PROVIDER_INTERVALS = frozenset({"5m", "15m", "30m", "1d"})


@dataclass(frozen=True)
class Quote:
    """Point-in-time price snapshot for one ticker.

    ``previous_close`` is only populated by the live quote endpoint;
    quotes synthesized from the symbol directory leave it ``None``.
    """

    ticker: str
    name: str
    price: float
    change_percent: Optional[float] = None
    logo_url: Optional[str] = None
    previous_close: Optional[float] = None
    source: str = "live"

    @property
    def change_from_previous_close(self) -> Optional[float]:
        """Absolute intraday change, or ``None`` without a baseline."""
        if self.previous_close is None:
            return None
        return self.price - self.previous_close

    def to_dict(self) -> dict:
        return {
            "symbol": self.ticker,
            "name": self.name,
            "price": self.price,
            "change_pct": self.change_percent,
            "change_abs": self.change_from_previous_close,
            "previous_close": self.previous_close,
            "logo_url": self.logo_url,
            "source": self.source,
        }


@dataclass(frozen=True)
class SymbolListing:
    ticker: str
    name: str
    close: float
    change_percent: Optional[float]
    volume: float
    market_cap: Optional[float] = None
    logo_url: Optional[str] = None
    sector: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "symbol": self.ticker,
            "name": self.name,
            "close": self.close,
            "change_pct": self.change_percent,
            "volume": self.volume,
            "market_cap": self.market_cap,
            "logo_url": self.logo_url,
            "sector": self.sector,
        }


@dataclass(frozen=True)
class PriceBar:
    """One OHLCV sample.  ``timestamp`` is always timezone-aware UTC."""

    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float

    @classmethod
    def from_unix(
        cls,
        seconds: int,
        open: float,
        high: float,
        low: float,
        close: float,
        volume: float = 0,
    ) -> PriceBar:
        return cls(
            timestamp=datetime.fromtimestamp(int(seconds), tz=timezone.utc),
            open=open,
            high=high,
            low=low,
            close=close,
            volume=volume,
        )

    @property
    def unix_seconds(self) -> int:
        return int(self.timestamp.timestamp())

    def to_dict(self) -> dict:
        return {
            "date": self.timestamp.isoformat(),
            "timestamp": self.unix_seconds,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        }


@dataclass(frozen=True)
class RangeSpec:
    """A (range, interval) pair from the provider's fixed vocabulary."""

    range: str
    interval: str

    def __post_init__(self) -> None:
        if self.range not in VALID_PROVIDER_RANGES:
            raise ValueError(f"Unknown provider range: {self.range!r}")
        if self.interval not in VALID_PROVIDER_INTERVALS:
            raise ValueError(f"Unknown provider interval: {self.interval!r}")

    @property
    def is_intraday(self) -> bool:
        return self.interval != "1d"


@dataclass(frozen=True)
class Movers:
    gainers: tuple[SymbolListing, ...]
    losers: tuple[SymbolListing, ...]

    def to_dict(self) -> dict:
        return {
            "gainers": [listing.to_dict() for listing in self.gainers],
            "losers": [listing.to_dict() for listing in self.losers],
        }


# ---------------------------------------------------------------------------
# Portfolio valuation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Holding:
    ticker: str
    quantity: float
    purchase_price: float


@dataclass(frozen=True)
class Position:
    ticker: str
    name: str
    quantity: float
    purchase_price: float
    current_price: float
    logo_url: Optional[str]
    is_priced: bool

    @property
    def cost_basis(self) -> float:
        return self.quantity * self.purchase_price

    @property
    def market_value(self) -> float:
        return self.quantity * self.current_price

    @property
    def profit(self) -> float:
        return self.market_value - self.cost_basis

    @property
    def profit_percent(self) -> Optional[float]:
        if self.cost_basis == 0:
            return None
        return self.profit / self.cost_basis * 100.0

    def to_dict(self) -> dict:
        return {
            "symbol": self.ticker,
            "name": self.name,
            "quantity": self.quantity,
            "purchase_price": self.purchase_price,
            "current_price": self.current_price,
            "logo_url": self.logo_url,
            "is_priced": self.is_priced,
            "cost_basis": self.cost_basis,
            "market_value": self.market_value,
            "profit": self.profit,
            "profit_pct": self.profit_percent,
        }


@dataclass(frozen=True)
class PortfolioValuation:
    positions: tuple[Position, ...]

    @property
    def total_invested(self) -> float:
        return sum(p.cost_basis for p in self.positions)

    @property
    def current_value(self) -> float:
        return sum(p.market_value for p in self.positions)

    @property
    def profit(self) -> float:
        return self.current_value - self.total_invested

    @property
    def profit_percent(self) -> Optional[float]:
        invested = self.total_invested
        if invested == 0:
            return None
        return self.profit / invested * 100.0

    def to_dict(self) -> dict:
        return {
            "positions": [p.to_dict() for p in self.positions],
            "total_invested": self.total_invested,
            "current_value": self.current_value,
            "profit": self.profit,
            "profit_pct": self.profit_percent,
        }
