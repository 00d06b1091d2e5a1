"""Value a set of holdings against current quotes."""

from __future__ import annotations

from typing import Iterable

from marketfeed.models import Holding, PortfolioValuation, Position
from marketfeed.services.quotes import QuoteResolver


async def value_portfolio(
    resolver: QuoteResolver, holdings: Iterable[Holding]
) -> PortfolioValuation:
    """Price every holding, largest position first.

    Holdings with no quote from any source are valued at their purchase
    price and flagged ``is_priced=False``.
    """
    holdings = list(holdings)
    quotes = {
        q.ticker: q
        for q in await resolver.resolve_many([h.ticker for h in holdings])
    }

    positions: list[Position] = []
    for holding in holdings:
        ticker = holding.ticker.strip().upper()
        quote = quotes.get(ticker)
        positions.append(
            Position(
                ticker=ticker,
                name=quote.name if quote else ticker,
                quantity=holding.quantity,
                purchase_price=holding.purchase_price,
                current_price=quote.price if quote else holding.purchase_price,
                logo_url=quote.logo_url if quote else None,
                is_priced=quote is not None,
            )
        )

    positions.sort(key=lambda p: p.market_value, reverse=True)
    return PortfolioValuation(positions=tuple(positions))
