"""Data layer: external collaborators and caches."""

from quant_engine.data.cache import TTLCache, build_portfolio_cache, build_price_cache
from quant_engine.data.gemini_client import GeminiClient, TextGenerator, extract_json_object
from quant_engine.data.holdings import (
    HoldingStore,
    InMemoryHoldingStore,
    PortfolioRepository,
    normalize_holding,
)
from quant_engine.data.market_data import (
    RATE_LIMITED,
    MarketDataGateway,
    YFinanceGateway,
    build_gateway,
    fetch_snapshot,
)
from quant_engine.data.price_service import PricePoint, PriceService, compute_unrealised_pnl

__all__ = [
    # Cache
    "TTLCache",
    "build_portfolio_cache",
    "build_price_cache",
    # Text generation
    "GeminiClient",
    "TextGenerator",
    "extract_json_object",
    # Holdings
    "HoldingStore",
    "InMemoryHoldingStore",
    "PortfolioRepository",
    "normalize_holding",
    # Market data
    "RATE_LIMITED",
    "MarketDataGateway",
    "YFinanceGateway",
    "build_gateway",
    "fetch_snapshot",
    # Prices
    "PricePoint",
    "PriceService",
    "compute_unrealised_pnl",
]
