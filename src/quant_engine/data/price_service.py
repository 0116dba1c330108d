"""Live price lookups for open positions, backed by a short-lived cache.

Strategy per symbol: fresh cache entry, then the market data gateway, then a
deterministic mock price so position tracking always has a number to show.
"""

import asyncio
import logging
import time
from dataclasses import asdict, dataclass
from typing import Any

from quant_engine.data.cache import TTLCache
from quant_engine.data.market_data import MarketDataGateway
from quant_engine.models import Quote

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricePoint:
    """Current price for a symbol and where it came from."""

    symbol: str
    price: float
    change: float
    change_percent: float
    source: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def mock_price(symbol: str, entry_price: float | None = None, now: float | None = None) -> PricePoint:
    """
    Deterministic stand-in price within ±10% of the entry price.

    Stable within a one-minute bucket so repeated polls agree.
    """
    symbol = symbol.upper()
    now = time.time() if now is None else now
    symbol_hash = sum(ord(c) for c in symbol)
    minute_bucket = int(now // 60)
    seed = (symbol_hash * 31 + minute_bucket) % 10000
    drift = ((seed % 200) - 100) / 1000

    base = entry_price or 100.0
    price = round(base * (1 + drift), 2)
    change = round(price - base, 2)
    return PricePoint(
        symbol=symbol,
        price=price,
        change=change,
        change_percent=round(change / base * 100, 2),
        source="mock",
    )


def compute_unrealised_pnl(
    side: str, entry_price: float, current_price: float, quantity: float
) -> float:
    """Unrealised P&L for a LONG or SHORT position."""
    if side.upper() == "LONG":
        return round((current_price - entry_price) * quantity, 2)
    if side.upper() == "SHORT":
        return round((entry_price - current_price) * quantity, 2)
    raise ValueError(f"Invalid side '{side}'. Must be LONG or SHORT")


class PriceService:
    """Current prices for position tracking."""

    def __init__(self, gateway: MarketDataGateway, cache: TTLCache):
        self.gateway = gateway
        self.cache = cache

    async def get_current_price(self, symbol: str, entry_price: float | None = None) -> PricePoint:
        if not symbol or not symbol.strip():
            raise ValueError("Symbol is required")
        symbol = symbol.upper().strip()

        cached = self.cache.get(symbol)
        if cached is not None:
            return cached

        quote = await self.gateway.get_quote(symbol)
        if isinstance(quote, Quote) and quote.price is not None:
            point = PricePoint(
                symbol=symbol,
                price=quote.price,
                change=quote.change or 0.0,
                change_percent=quote.change_percent or 0.0,
                source="live",
            )
        else:
            logger.info(f"price({symbol}): live quote unavailable ({quote!r}), using mock")
            point = mock_price(symbol, entry_price)

        self.cache.set(symbol, point)
        return point

    async def get_batch_prices(self, items: list[dict[str, Any]]) -> dict[str, PricePoint]:
        """
        Fetch prices for many positions concurrently.

        Args:
            items: Dicts with "symbol" and optional "entry_price"

        Returns:
            Mapping of uppercase symbol to PricePoint
        """

        async def _one(item: dict[str, Any]) -> PricePoint:
            symbol = str(item["symbol"]).upper().strip()
            entry_price = item.get("entry_price")
            try:
                return await self.get_current_price(symbol, entry_price)
            except Exception as e:
                logger.warning(f"price({symbol}): lookup failed ({e}), using mock")
                return mock_price(symbol, entry_price)

        points = await asyncio.gather(*(_one(item) for item in items))
        return {p.symbol: p for p in points}
