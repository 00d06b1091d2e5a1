"""Tests for portfolio valuation.

Covers:
- Positions priced from quotes, sorted by market value
- Unpriced holdings fall back to purchase price
- Totals and profit percentages, including zero cost basis
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from marketfeed.models import Holding, Quote
from marketfeed.services.portfolio import value_portfolio


def _resolver(quotes: list[Quote]) -> AsyncMock:
    resolver = AsyncMock()
    resolver.resolve_many.return_value = quotes
    return resolver


class TestValuePortfolio:
    @pytest.mark.asyncio
    async def test_prices_and_sorts_positions(self):
        resolver = _resolver([
            Quote("PETR4", "Petrobras PN", 40.0, logo_url="p.svg"),
            Quote("VALE3", "Vale ON", 60.0),
        ])
        holdings = [
            Holding("petr4", quantity=100, purchase_price=30.0),
            Holding("VALE3", quantity=10, purchase_price=70.0),
        ]

        valuation = await value_portfolio(resolver, holdings)

        petr, vale = valuation.positions
        assert petr.ticker == "PETR4"
        assert petr.name == "Petrobras PN"
        assert petr.market_value == 4000.0
        assert petr.profit == 1000.0
        assert petr.profit_percent == pytest.approx(33.333, rel=1e-3)
        assert petr.logo_url == "p.svg"
        assert vale.profit == -100.0

        assert valuation.total_invested == 3700.0
        assert valuation.current_value == 4600.0
        assert valuation.profit == 900.0
        assert valuation.profit_percent == pytest.approx(24.324, rel=1e-3)

    @pytest.mark.asyncio
    async def test_unpriced_holding_uses_purchase_price(self):
        resolver = _resolver([])
        valuation = await value_portfolio(resolver, [Holding("ZZZZ3", 5, 12.0)])

        [position] = valuation.positions
        assert position.is_priced is False
        assert position.current_price == 12.0
        assert position.profit == 0.0
        assert position.name == "ZZZZ3"

    @pytest.mark.asyncio
    async def test_single_batch_lookup(self):
        resolver = _resolver([])
        await value_portfolio(resolver, [Holding("A", 1, 1), Holding("B", 1, 1)])
        resolver.resolve_many.assert_awaited_once()
        assert list(resolver.resolve_many.await_args.args[0]) == ["A", "B"]

    @pytest.mark.asyncio
    async def test_zero_cost_basis(self):
        resolver = _resolver([Quote("BONU3", "Bonus", 5.0)])
        valuation = await value_portfolio(resolver, [Holding("BONU3", 10, 0.0)])

        assert valuation.positions[0].profit_percent is None
        assert valuation.profit_percent is None
        assert valuation.current_value == 50.0

    @pytest.mark.asyncio
    async def test_empty_portfolio(self):
        valuation = await value_portfolio(_resolver([]), [])
        assert valuation.to_dict() == {
            "positions": [],
            "total_invested": 0,
            "current_value": 0,
            "profit": 0,
            "profit_pct": None,
        }
