"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from marketfeed.config import DIRECTORY_REFRESH_ENABLED
from marketfeed.jobs.scheduler import start_scheduler, stop_scheduler
from marketfeed.market_data import MarketData
from marketfeed.models import Holding
from marketfeed.services.ranges import VALID_LABELS, normalize_label

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the market-data stack on startup, release it on shutdown."""
    app.state.market = MarketData.create()
    if DIRECTORY_REFRESH_ENABLED:
        start_scheduler(app.state.market.directory)

    logger.info("marketfeed started")
    yield

    stop_scheduler()
    await app.state.market.close()
    logger.info("marketfeed stopped")


app = FastAPI(title="marketfeed", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_market(request: Request) -> MarketData:
    return request.app.state.market


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class HoldingIn(BaseModel):
    ticker: str = Field(min_length=1)
    quantity: float = Field(ge=0)
    purchase_price: float = Field(ge=0)


class ValuationRequest(BaseModel):
    holdings: list[HoldingIn]


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/api/health")
async def health() -> dict:
    """Return service health status."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/api/quote/{ticker}")
async def quote(ticker: str, market: MarketData = Depends(get_market)) -> dict:
    """Current quote for one ticker, live or from the symbol directory."""
    result = await market.resolve_one(ticker)
    if result is None:
        raise HTTPException(status_code=404, detail=f"No data found for {ticker!r}")
    return result.to_dict()


@app.get("/api/quotes")
async def quotes(
    tickers: str = Query(..., description="Comma-separated tickers"),
    market: MarketData = Depends(get_market),
) -> dict:
    """Batch quotes; unknown tickers are omitted."""
    results = await market.resolve_many(tickers.split(","))
    return {"quotes": [q.to_dict() for q in results]}


@app.get("/api/history/{ticker}")
async def history(
    ticker: str,
    range_str: str = Query("30d", alias="range"),
    market: MarketData = Depends(get_market),
) -> dict:
    """OHLCV bars for a ticker; ``bars`` is empty when no history exists.

    Query params:
        range: 1d, 5d, 30d, 60d, 1y (default 30d)
    """
    try:
        label = normalize_label(range_str)
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid range. Must be one of: {', '.join(sorted(VALID_LABELS))}",
        )

    bars = await market.fetch_history(ticker, label)
    return {
        "symbol": ticker.strip().upper(),
        "range": label,
        "bars": [bar.to_dict() for bar in bars],
    }


@app.get("/api/search")
async def search(
    q: str = Query("", description="Ticker or company name fragment"),
    market: MarketData = Depends(get_market),
) -> dict:
    """Type-ahead suggestions from the cached symbol directory."""
    results = await market.search(q)
    return {"query": q, "results": [listing.to_dict() for listing in results]}


@app.get("/api/movers")
async def movers(market: MarketData = Depends(get_market)) -> dict:
    """Top gainers and losers among liquid equities."""
    result = await market.top_movers()
    return result.to_dict()


@app.post("/api/portfolio/valuation")
async def portfolio_valuation(
    body: ValuationRequest,
    market: MarketData = Depends(get_market),
) -> dict:
    """Value holdings at current prices, falling back to purchase price."""
    holdings = [
        Holding(
            ticker=h.ticker,
            quantity=h.quantity,
            purchase_price=h.purchase_price,
        )
        for h in body.holdings
    ]
    valuation = await market.value_portfolio(holdings)
    return valuation.to_dict()
