"""Abstract base class for quote providers."""

from abc import ABC, abstractmethod

from marketfeed.models import PriceBar, Quote, RangeSpec, SymbolListing


class DataProvider(ABC):
    """Interface that every market-data provider must implement."""

    @abstractmethod
    async def get_quotes(self, tickers: list[str]) -> list[Quote]:
        """Fetch live quotes for *tickers* in a single request.

        Tickers the provider does not know are simply absent from the
        result.
        """

    @abstractmethod
    async def get_history(self, ticker: str, spec: RangeSpec) -> list[PriceBar]:
        """Fetch OHLCV bars for *ticker* bucketed by *spec*.

        Returns bars sorted ascending by timestamp.
        """

    @abstractmethod
    async def get_symbol_list(self) -> list[SymbolListing]:
        """Fetch the full directory of tradable symbols."""
