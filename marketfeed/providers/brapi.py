"""brapi.dev provider for B3 quotes, history and the symbol directory."""

from __future__ import annotations

import logging

import httpx

from marketfeed.models import PriceBar, Quote, RangeSpec, SymbolListing
from marketfeed.providers.base import DataProvider
from marketfeed.providers.transport import RetryingTransport, TransportError

logger = logging.getLogger(__name__)

_DIRECTORY_PATH = "/quote/list"

# Anything a hostile or truncated payload can raise while being parsed.
_PARSE_ERRORS = (KeyError, TypeError, ValueError, AttributeError, OverflowError, OSError)


class BrapiError(Exception):
    """Raised when a brapi request fails or returns an unusable payload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


# ---------------------------------------------------------------------------
# Pure helper functions
# ---------------------------------------------------------------------------


def build_params(token: str | None, params: dict | None = None) -> dict:
    """Merge the optional API token into request params.

    An empty or missing token adds nothing, so no bare ``token=`` ends
    up on the URL.
    """
    merged = dict(params or {})
    if token:
        merged["token"] = token
    return merged


def quote_path(tickers: list[str]) -> str:
    """``/quote/PETR4`` or ``/quote/PETR4,VALE3`` for a batch."""
    return "/quote/" + ",".join(tickers)


def _to_float(value: object) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _parse_quote(raw: dict) -> Quote | None:
    """Normalize one ``results[]`` entry, or ``None`` if it has no price."""
    symbol = raw.get("symbol")
    price = _to_float(raw.get("regularMarketPrice"))
    if not symbol or price is None or price < 0:
        return None

    ticker = str(symbol).upper()
    return Quote(
        ticker=ticker,
        name=raw.get("longName") or raw.get("shortName") or ticker,
        price=price,
        change_percent=_to_float(raw.get("regularMarketChangePercent")),
        logo_url=raw.get("logourl") or None,
        previous_close=_to_float(raw.get("regularMarketPreviousClose")),
    )


def parse_quotes(raw: dict) -> list[Quote]:
    """Normalize a /quote response into Quotes, dropping unusable rows."""
    quotes: list[Quote] = []
    for entry in raw["results"] or []:
        if not isinstance(entry, dict):
            logger.debug("Dropping non-object quote row: %r", entry)
            continue
        quote = _parse_quote(entry)
        if quote is None:
            logger.debug("Dropping quote without usable price: %s", entry.get("symbol"))
            continue
        quotes.append(quote)
    return quotes


def parse_history(raw: dict) -> list[PriceBar]:
    """Normalize ``results[0].historicalDataPrice`` into sorted PriceBars.

    Provider dates are Unix seconds.  Entries missing a date or close
    are skipped, as are dates outside the platform's timestamp range;
    duplicate timestamps keep the last occurrence.
    """
    results = raw["results"] or []
    if not results or not isinstance(results[0], dict):
        return []

    by_ts: dict[int, PriceBar] = {}
    for item in results[0].get("historicalDataPrice") or []:
        if not isinstance(item, dict):
            continue
        seconds = item.get("date")
        close = _to_float(item.get("close"))
        if seconds is None or close is None:
            continue
        open_ = _to_float(item.get("open"))
        high = _to_float(item.get("high"))
        low = _to_float(item.get("low"))
        try:
            bar = PriceBar.from_unix(
                int(seconds),
                open=open_ if open_ is not None else close,
                high=high if high is not None else close,
                low=low if low is not None else close,
                close=close,
                volume=_to_float(item.get("volume")) or 0,
            )
        except (TypeError, ValueError, OverflowError, OSError):
            logger.debug("Skipping bar with unusable date: %r", seconds)
            continue
        by_ts[bar.unix_seconds] = bar

    return [by_ts[ts] for ts in sorted(by_ts)]


def parse_symbol_list(raw: dict) -> list[SymbolListing]:
    """Normalize the /quote/list ``stocks`` array."""
    listings: list[SymbolListing] = []
    for item in raw["stocks"] or []:
        if not isinstance(item, dict):
            continue
        ticker = item.get("stock")
        if not ticker:
            continue
        ticker = str(ticker).upper()
        listings.append(
            SymbolListing(
                ticker=ticker,
                name=item.get("name") or ticker,
                close=_to_float(item.get("close")) or 0.0,
                change_percent=_to_float(item.get("change")),
                volume=_to_float(item.get("volume")) or 0.0,
                market_cap=_to_float(item.get("market_cap")),
                logo_url=item.get("logo") or None,
                sector=item.get("sector") or None,
            )
        )
    return listings


# ---------------------------------------------------------------------------
# Provider class
# ---------------------------------------------------------------------------


class BrapiProvider(DataProvider):
    """brapi.dev implementation of the DataProvider interface.

    Every failure mode is surfaced as ``BrapiError``; deciding whether to
    fall back or return nothing is left to the services layer.
    """

    def __init__(self, transport: RetryingTransport, token: str | None = None) -> None:
        self._transport = transport
        self._token = token

    async def _request(self, path: str, params: dict | None = None) -> dict:
        """GET through the retrying transport; raises BrapiError."""
        try:
            resp = await self._transport.fetch(path, build_params(self._token, params))
            resp.raise_for_status()
            data = resp.json()
        except TransportError as exc:
            raise BrapiError(str(exc), status_code=exc.status_code) from exc
        except httpx.HTTPStatusError as exc:
            raise BrapiError(
                f"GET {path} returned HTTP {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise BrapiError(f"GET {path} failed: {exc}") from exc

        if not isinstance(data, dict):
            raise BrapiError(f"GET {path} returned a non-object payload")
        if data.get("error"):
            raise BrapiError(f"GET {path}: {data.get('message', 'unknown error')}")

        return data

    async def get_quotes(self, tickers: list[str]) -> list[Quote]:
        """Fetch live quotes for one or more tickers in one call."""
        if not tickers:
            return []
        raw = await self._request(quote_path(tickers))
        try:
            return parse_quotes(raw)
        except _PARSE_ERRORS as exc:
            raise BrapiError(f"Malformed quote payload for {tickers}: {exc}") from exc

    async def get_history(self, ticker: str, spec: RangeSpec) -> list[PriceBar]:
        """Fetch bars for *ticker* with brapi's range/interval params."""
        raw = await self._request(
            quote_path([ticker]),
            {"range": spec.range, "interval": spec.interval},
        )
        try:
            return parse_history(raw)
        except _PARSE_ERRORS as exc:
            raise BrapiError(f"Malformed history payload for {ticker}: {exc}") from exc

    async def get_symbol_list(self) -> list[SymbolListing]:
        """Fetch the full symbol directory."""
        raw = await self._request(_DIRECTORY_PATH)
        try:
            return parse_symbol_list(raw)
        except _PARSE_ERRORS as exc:
            raise BrapiError(f"Malformed symbol list payload: {exc}") from exc
