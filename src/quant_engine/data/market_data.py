"""Market data gateway: async quote and overview reads with rate-limit detection.

Gateways return a data object, None (not found / provider error), or the
RATE_LIMITED sentinel. Rate limits are surfaced to the caller, never
retried.
"""

import asyncio
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Protocol

import yfinance as yf
from requests.exceptions import HTTPError
from yfinance.exceptions import YFRateLimitError

from quant_engine.models import MarketSnapshot, Overview, Quote
from quant_engine.utils.numbers import safe_float

logger = logging.getLogger(__name__)


class _RateLimited:
    """Sentinel type returned when a provider reports a rate limit."""

    _instance: "_RateLimited | None" = None

    def __new__(cls) -> "_RateLimited":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "RATE_LIMITED"

    def __bool__(self) -> bool:
        return False


RATE_LIMITED = _RateLimited()


class MarketDataGateway(Protocol):
    """Two idempotent reads against a market-data provider."""

    async def get_quote(self, symbol: str) -> Quote | _RateLimited | None: ...

    async def get_overview(self, symbol: str) -> Overview | _RateLimited | None: ...


# Bounded concurrency for blocking provider calls
_max_workers = int(os.environ.get("YF_MAX_WORKERS", "4"))
_executor = ThreadPoolExecutor(max_workers=_max_workers)


def run_blocking(func: Any, *args: Any) -> "asyncio.Future[Any]":
    """Run a blocking call on the shared provider executor."""
    loop = asyncio.get_running_loop()
    return loop.run_in_executor(_executor, func, *args)


def is_rate_limit_error(error: BaseException) -> bool:
    """Check whether a provider exception means "rate limited"."""
    if isinstance(error, YFRateLimitError):
        return True
    if (
        isinstance(error, HTTPError)
        and getattr(error, "response", None) is not None
        and error.response.status_code == 429
    ):
        return True
    error_str = str(error).lower()
    return any(p in error_str for p in ("rate limit", "too many requests", "429"))


def quote_from_info(info: dict[str, Any]) -> Quote | None:
    """Map a yfinance info dict to a Quote, or None if it has no price."""
    price = safe_float(info.get("currentPrice")) or safe_float(info.get("regularMarketPrice"))
    if price is None:
        return None
    change = safe_float(info.get("regularMarketChange"))
    change_pct = safe_float(info.get("regularMarketChangePercent"))
    previous_close = safe_float(info.get("regularMarketPreviousClose")) or safe_float(
        info.get("previousClose")
    )
    if change is None and previous_close:
        change = price - previous_close
    if change_pct is None and change is not None and previous_close:
        change_pct = change / previous_close * 100
    volume = safe_float(info.get("regularMarketVolume")) or safe_float(info.get("volume"))
    return Quote(
        price=price,
        change=round(change, 4) if change is not None else None,
        change_percent=round(change_pct, 4) if change_pct is not None else None,
        volume=volume,
    )


def overview_from_info(symbol: str, info: dict[str, Any]) -> Overview | None:
    """Map a yfinance info dict to an Overview, or None for an empty payload."""
    if not info or not (info.get("quoteType") or info.get("shortName") or info.get("longName")):
        return None

    # dividendYield is a percent (0.44 means 0.44%); Overview stores decimals
    dividend_yield = safe_float(info.get("dividendYield"))
    if dividend_yield is not None:
        dividend_yield = dividend_yield / 100

    return Overview(
        symbol=symbol,
        name=info.get("shortName") or info.get("longName"),
        sector=info.get("sector"),
        industry=info.get("industry"),
        pe_ratio=info.get("trailingPE"),
        eps_growth=info.get("earningsQuarterlyGrowth"),
        roe=info.get("returnOnEquity"),
        book_value=info.get("bookValue"),
        shares_outstanding=info.get("sharesOutstanding"),
        market_cap=info.get("marketCap"),
        revenue_growth=info.get("revenueGrowth"),
        profit_margin=info.get("profitMargins"),
        beta=info.get("beta"),
        dividend_yield=dividend_yield,
        peg_ratio=info.get("pegRatio") or info.get("trailingPegRatio"),
        ma50=info.get("fiftyDayAverage"),
        ma200=info.get("twoHundredDayAverage"),
        high52=info.get("fiftyTwoWeekHigh"),
        low52=info.get("fiftyTwoWeekLow"),
    )


class YFinanceGateway:
    """
    Gateway backed by yfinance `Ticker.info`.

    A single info payload carries both the quote and the overview, so
    concurrent get_quote/get_overview calls for the same symbol share one
    in-flight fetch (singleflight).
    """

    def __init__(self) -> None:
        # Key: symbol (uppercase), Value: task returning the info dict or RATE_LIMITED
        self._singleflight: dict[str, "asyncio.Task[dict[str, Any] | _RateLimited | None]"] = {}
        self._lock: asyncio.Lock | None = None

    async def get_quote(self, symbol: str) -> Quote | _RateLimited | None:
        info = await self._fetch_info(symbol)
        if info is RATE_LIMITED or info is None:
            return info
        return quote_from_info(info)

    async def get_overview(self, symbol: str) -> Overview | _RateLimited | None:
        normalized_symbol = symbol.upper().strip()
        info = await self._fetch_info(normalized_symbol)
        if info is RATE_LIMITED or info is None:
            return info
        return overview_from_info(normalized_symbol, info)

    async def _fetch_info(self, symbol: str) -> dict[str, Any] | _RateLimited | None:
        normalized_symbol = symbol.upper().strip()
        if self._lock is None:
            self._lock = asyncio.Lock()

        async with self._lock:
            task = self._singleflight.get(normalized_symbol)
            joined = task is not None
            if task is None:
                task = asyncio.create_task(self._fetch_info_raw(normalized_symbol))
                self._singleflight[normalized_symbol] = task

        try:
            if joined:
                # Joiner: a cancelled waiter must not cancel the shared fetch
                return await asyncio.shield(task)
            return await task
        finally:
            async with self._lock:
                if self._singleflight.get(normalized_symbol) is task:
                    self._singleflight.pop(normalized_symbol, None)

    async def _fetch_info_raw(self, symbol: str) -> dict[str, Any] | _RateLimited | None:
        def _fetch() -> dict[str, Any]:
            return yf.Ticker(symbol).info or {}

        try:
            info = await run_blocking(_fetch)
        except Exception as e:
            if is_rate_limit_error(e):
                logger.warning(f"fetch_info({symbol}): rate limited ({e})")
                return RATE_LIMITED
            logger.warning(f"fetch_info({symbol}): provider error: {e}")
            return None
        if not info:
            return None
        return info


def build_gateway(provider: str | None = None) -> MarketDataGateway:
    """Select the market data gateway from MARKET_DATA_PROVIDER."""
    provider = (provider or os.environ.get("MARKET_DATA_PROVIDER", "yfinance")).lower()
    if provider == "alphavantage":
        from quant_engine.data.alpha_vantage import AlphaVantageGateway

        return AlphaVantageGateway()
    if provider != "yfinance":
        raise ValueError(f"Unknown MARKET_DATA_PROVIDER '{provider}'. Must be yfinance or alphavantage")
    return YFinanceGateway()


async def fetch_snapshot(gateway: MarketDataGateway, symbol: str) -> tuple[MarketSnapshot, bool]:
    """
    Fetch quote and overview concurrently.

    Returns:
        Tuple of (snapshot, rate_limited). When rate_limited is True the
        snapshot only holds whatever half came back.
    """
    quote, overview = await asyncio.gather(
        gateway.get_quote(symbol),
        gateway.get_overview(symbol),
    )
    rate_limited = quote is RATE_LIMITED or overview is RATE_LIMITED
    snapshot = MarketSnapshot(
        quote=quote if isinstance(quote, Quote) else None,
        overview=overview if isinstance(overview, Overview) else None,
    )
    return snapshot, rate_limited

