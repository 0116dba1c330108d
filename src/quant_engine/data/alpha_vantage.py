"""Alpha Vantage market data gateway (GLOBAL_QUOTE + OVERVIEW)."""

import logging
import os
from typing import Any

import requests

from quant_engine.data.market_data import RATE_LIMITED, _RateLimited, run_blocking
from quant_engine.models import Overview, Quote
from quant_engine.utils.numbers import safe_float

logger = logging.getLogger(__name__)

ALPHA_VANTAGE_BASE = "https://www.alphavantage.co/query"


def quote_from_global_quote(payload: dict[str, Any]) -> Quote | None:
    """Map a GLOBAL_QUOTE response to a Quote."""
    data = payload.get("Global Quote") or {}
    price = safe_float(data.get("05. price"))
    if price is None:
        return None
    return Quote(
        price=price,
        change=safe_float(data.get("09. change")),
        change_percent=safe_float(data.get("10. change percent")),
        volume=safe_float(data.get("06. volume")),
    )


def overview_from_payload(payload: dict[str, Any]) -> Overview | None:
    """Map an OVERVIEW response to an Overview, or None if it has no Symbol."""
    symbol = payload.get("Symbol")
    if not symbol:
        return None
    return Overview(
        symbol=symbol.upper(),
        name=payload.get("Name"),
        sector=payload.get("Sector"),
        industry=payload.get("Industry"),
        pe_ratio=payload.get("PERatio"),
        eps_growth=payload.get("QuarterlyEarningsGrowthYOY"),
        roe=payload.get("ReturnOnEquityTTM"),
        book_value=payload.get("BookValue"),
        shares_outstanding=payload.get("SharesOutstanding"),
        market_cap=payload.get("MarketCapitalization"),
        revenue_growth=payload.get("QuarterlyRevenueGrowthYOY"),
        profit_margin=payload.get("ProfitMargin"),
        beta=payload.get("Beta"),
        dividend_yield=payload.get("DividendYield"),
        peg_ratio=payload.get("PEGRatio"),
        ma50=payload.get("50DayMovingAverage"),
        ma200=payload.get("200DayMovingAverage"),
        high52=payload.get("52WeekHigh"),
        low52=payload.get("52WeekLow"),
    )


class AlphaVantageGateway:
    """Gateway over the Alpha Vantage REST API."""

    def __init__(
        self,
        api_key: str | None = None,
        session: requests.Session | None = None,
        timeout: float = 15.0,
    ):
        self.api_key = api_key if api_key is not None else os.environ.get("ALPHA_VANTAGE_API_KEY")
        self.session = session or requests.Session()
        self.timeout = timeout

    async def get_quote(self, symbol: str) -> Quote | _RateLimited | None:
        payload = await self._query("GLOBAL_QUOTE", symbol)
        if payload is RATE_LIMITED or payload is None:
            return payload
        return quote_from_global_quote(payload)

    async def get_overview(self, symbol: str) -> Overview | _RateLimited | None:
        payload = await self._query("OVERVIEW", symbol)
        if payload is RATE_LIMITED or payload is None:
            return payload
        return overview_from_payload(payload)

    async def _query(self, function: str, symbol: str) -> dict[str, Any] | _RateLimited | None:
        if not self.api_key:
            return None
        params = {"function": function, "symbol": symbol.upper().strip(), "apikey": self.api_key}

        def _get() -> requests.Response:
            return self.session.get(ALPHA_VANTAGE_BASE, params=params, timeout=self.timeout)

        try:
            response = await run_blocking(_get)
        except requests.RequestException as e:
            logger.warning(f"alpha_vantage {function}({symbol}): request failed: {e}")
            return None

        if response.status_code == 429:
            logger.warning(f"alpha_vantage {function}({symbol}): rate limited (HTTP 429)")
            return RATE_LIMITED
        if not response.ok:
            logger.warning(f"alpha_vantage {function}({symbol}): HTTP {response.status_code}")
            return None

        try:
            data = response.json()
        except ValueError:
            logger.warning(f"alpha_vantage {function}({symbol}): non-JSON response")
            return None

        # The free tier answers rate limits with HTTP 200 and a "Note"/"Information" field
        if "Note" in data or "Information" in data:
            logger.warning(f"alpha_vantage {function}({symbol}): rate limit hit")
            return RATE_LIMITED
        if "Error Message" in data:
            logger.warning(f"alpha_vantage {function}({symbol}): {data['Error Message']}")
            return None
        return data
