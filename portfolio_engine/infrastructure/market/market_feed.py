"""
HTTP market feed.

Polls the exchange's all-market ticker in one request per cycle and the
market listing for display names. Requests are blocking and run in the
default executor.
"""

import asyncio
import time
from collections.abc import Callable, Iterable, Mapping
from threading import RLock
from typing import Any

import requests
from cachetools import TTLCache
from loguru import logger

from portfolio_engine.core.config import EngineConfig
from portfolio_engine.core.constants import (
    DISPLAY_NAME_CACHE_TTL_SECONDS,
    FALLBACK_NAME_CACHE_TTL_SECONDS,
    FEED_OK_STATUS,
    MAX_TRACKED_SYMBOLS,
)
from portfolio_engine.core.exceptions.engine import (
    FeedError,
    NetworkError,
    ParseError,
    ValidationError,
)
from portfolio_engine.core.interfaces.market import IMarketFeed
from portfolio_engine.core.models.market import MarketQuote

TICKER_PATH = "/public/ticker/ALL_KRW"
MARKETS_PATH = "/v1/market/all"
QUOTE_MARKET_PREFIX = "KRW-"

# Used when the market listing is unavailable or omits a symbol
FALLBACK_DISPLAY_NAMES = {
    "BTC": "비트코인",
    "ETH": "이더리움",
    "XRP": "엑스알피(리플)",
    "USDT": "테더",
    "DOGE": "도지코인",
    "SOL": "솔라나",
    "ENA": "에테나",
    "PEPE": "페페",
    "SHIB": "시바이누",
    "SUI": "수이",
    "WLD": "월드코인",
    "SPK": "스파크",
    "BONK": "봉크",
    "ES": "이클립스",
    "XLM": "스텔라루멘",
    "CFX": "콘플럭스",
    "ONDO": "온도 파이낸스",
    "FORT": "포르타",
    "BABY": "바빌론",
    "WOO": "우",
}


def parse_ticker_entry(symbol: str, entry: Any, name: str = "") -> MarketQuote:
    """Parse one symbol's entry of the ticker payload.

    Raises:
        ParseError: If the entry has no usable positive closing price
    """
    if not isinstance(entry, Mapping):
        raise ParseError("ticker", f"{symbol} entry is not an object", entry)
    try:
        return MarketQuote(
            symbol=symbol,
            name=name or symbol,
            price=entry.get("closing_price"),
            change_rate=str(entry.get("fluctate_rate_24H") or "0"),
        )
    except ValidationError as e:
        raise ParseError("ticker", f"{symbol}: {e}", entry) from e


def parse_ticker_payload(
    payload: Any, symbols: Iterable[str], names: Mapping[str, str] | None = None
) -> dict[str, MarketQuote]:
    """Extract quotes for the requested symbols from a ticker response.

    Symbols that are absent or fail to parse are left out with a log line.

    Raises:
        FeedError: If the payload is malformed or reports a non-OK status
    """
    if not isinstance(payload, Mapping):
        raise FeedError("Ticker response is not a JSON object")
    status = payload.get("status")
    if status != FEED_OK_STATUS:
        raise FeedError(f"Ticker status {status}: {payload.get('message', 'unknown error')}")
    data = payload.get("data")
    if not isinstance(data, Mapping):
        raise FeedError("Ticker response has no data object")

    names = names or {}
    quotes: dict[str, MarketQuote] = {}
    for symbol in symbols:
        if symbol not in data:
            logger.debug(f"{symbol} not present in ticker data")
            continue
        try:
            quotes[symbol] = parse_ticker_entry(symbol, data[symbol], names.get(symbol, ""))
        except ParseError as e:
            logger.warning(f"Skipping quote: {e}")
    return quotes


def parse_market_listing(payload: Any) -> dict[str, str]:
    """Map symbol to display name from the market listing.

    Accepts either a bare list of markets or an object wrapping it in ``data``.
    Only quote-currency markets are used.
    """
    markets = payload.get("data") if isinstance(payload, Mapping) else payload
    if not isinstance(markets, list):
        raise FeedError("Market listing is not a list")

    names: dict[str, str] = {}
    for item in markets:
        if not isinstance(item, Mapping):
            continue
        market = str(item.get("market", ""))
        name = item.get("korean_name") or item.get("english_name")
        if market.startswith(QUOTE_MARKET_PREFIX) and name:
            names[market.removeprefix(QUOTE_MARKET_PREFIX)] = str(name)
    return names


class HttpMarketFeed(IMarketFeed):
    """Market feed backed by the exchange's public REST API."""

    def __init__(
        self,
        config: EngineConfig | None = None,
        session: requests.Session | None = None,
        name_cache_ttl: float = DISPLAY_NAME_CACHE_TTL_SECONDS,
        fallback_name_ttl: float = FALLBACK_NAME_CACHE_TTL_SECONDS,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or EngineConfig()
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

        self._names: TTLCache[str, str] = TTLCache(
            maxsize=MAX_TRACKED_SYMBOLS, ttl=name_cache_ttl, timer=timer
        )
        self._fallback_names: TTLCache[str, str] = TTLCache(
            maxsize=MAX_TRACKED_SYMBOLS, ttl=fallback_name_ttl, timer=timer
        )
        self._names_lock = RLock()

    @property
    def base_url(self) -> str:
        return self.config.feed_base_url

    def _get_json(self, path: str) -> Any:
        """Blocking GET returning decoded JSON."""
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, timeout=self.config.request_timeout_seconds)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"GET {url} failed: {e}") from e
        try:
            return response.json()
        except ValueError as e:
            raise FeedError(f"GET {url} returned invalid JSON: {e}") from e

    async def _get_json_async(self, path: str) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._get_json, path)

    async def fetch_quotes(self, symbols: Iterable[str]) -> dict[str, MarketQuote]:
        """Fetch current quotes for all requested symbols in one batch call.

        Display names are resolved after the price batch, so a failing ticker
        never waits on the market listing.
        """
        wanted = list(dict.fromkeys(symbols))
        if not wanted:
            return {}

        payload = await self._get_json_async(TICKER_PATH)
        names = await self.fetch_display_names(wanted)
        quotes = parse_ticker_payload(payload, wanted, names)
        logger.debug(f"Fetched {len(quotes)}/{len(wanted)} quotes")
        return quotes

    async def fetch_display_names(self, symbols: Iterable[str]) -> dict[str, str]:
        """Fetch display names, falling back to a built-in table then the symbol.

        Listing names are cached for an hour. When the listing is unreachable
        the fallback names are cached for a short window instead, and the
        listing is retried once that window expires.
        """
        wanted = list(dict.fromkeys(symbols))
        with self._names_lock:
            unresolved = [symbol for symbol in wanted if symbol not in self._names]
            missing = [symbol for symbol in unresolved if symbol not in self._fallback_names]

        if missing:
            try:
                listing = parse_market_listing(await self._get_json_async(MARKETS_PATH))
            except (NetworkError, FeedError) as e:
                logger.warning(f"Market listing unavailable, using fallback names: {e}")
                with self._names_lock:
                    for symbol in missing:
                        self._fallback_names[symbol] = FALLBACK_DISPLAY_NAMES.get(symbol, symbol)
            else:
                with self._names_lock:
                    for symbol in unresolved:
                        self._names[symbol] = listing.get(
                            symbol, FALLBACK_DISPLAY_NAMES.get(symbol, symbol)
                        )
                        self._fallback_names.pop(symbol, None)

        with self._names_lock:
            return {
                symbol: self._names.get(symbol) or self._fallback_names.get(symbol, symbol)
                for symbol in wanted
            }

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()
