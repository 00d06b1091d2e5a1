"""Composition root: builds the market-data stack around one HTTP client."""

from __future__ import annotations

import logging

import httpx

from marketfeed.config import BRAPI_API_TOKEN, BRAPI_BASE_URL, HTTP_TIMEOUT_SECONDS
from marketfeed.models import Holding, Movers, PortfolioValuation, PriceBar, Quote, SymbolListing
from marketfeed.providers.brapi import BrapiProvider
from marketfeed.providers.transport import RetryingTransport
from marketfeed.services.history import HistoryFetcher
from marketfeed.services.movers import MoversRanker
from marketfeed.services.portfolio import value_portfolio
from marketfeed.services.quotes import QuoteResolver
from marketfeed.services.symbol_directory import SymbolDirectory

logger = logging.getLogger(__name__)


class MarketData:
    """Owns the shared symbol directory and the services built on it."""

    def __init__(
        self,
        transport: RetryingTransport,
        provider: BrapiProvider,
        directory: SymbolDirectory,
    ) -> None:
        self.transport = transport
        self.provider = provider
        self.directory = directory
        self.quotes = QuoteResolver(provider, directory)
        self.history = HistoryFetcher(provider)
        self.movers = MoversRanker(directory)

    @classmethod
    def create(
        cls,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
        **transport_kwargs,
    ) -> MarketData:
        """Wire transport -> provider -> directory -> services.

        *token* defaults to ``BRAPI_API_TOKEN``; pass *client* to point the
        stack at a stub (tests) or a differently configured client.
        """
        if client is None:
            client = httpx.AsyncClient(
                base_url=BRAPI_BASE_URL,
                timeout=HTTP_TIMEOUT_SECONDS,
            )
        transport = RetryingTransport(client, **transport_kwargs)
        provider = BrapiProvider(
            transport, token=BRAPI_API_TOKEN if token is None else token
        )
        return cls(transport, provider, SymbolDirectory(provider))

    async def close(self) -> None:
        await self.transport.close()

    # -- Collaborator interface ----------------------------------------------

    async def resolve_one(self, ticker: str) -> Quote | None:
        return await self.quotes.resolve_one(ticker)

    async def resolve_many(self, tickers: list[str]) -> list[Quote]:
        return await self.quotes.resolve_many(tickers)

    async def fetch_history(self, ticker: str, requested: str | int) -> list[PriceBar]:
        return await self.history.fetch(ticker, requested)

    async def search(self, query: str) -> list[SymbolListing]:
        return await self.directory.search(query)

    async def top_movers(self) -> Movers:
        return await self.movers.top_movers()

    async def value_portfolio(self, holdings: list[Holding]) -> PortfolioValuation:
        return await value_portfolio(self.quotes, holdings)
