"""Process-wide collaborators shared by the tools, built on first use."""

from functools import lru_cache

from quant_engine.auth import Authenticator, BearerTokenAuthenticator
from quant_engine.data.cache import build_portfolio_cache, build_price_cache
from quant_engine.data.gemini_client import GeminiClient, TextGenerator
from quant_engine.data.holdings import HoldingStore, InMemoryHoldingStore, PortfolioRepository
from quant_engine.data.market_data import MarketDataGateway, build_gateway
from quant_engine.data.price_service import PriceService


@lru_cache(maxsize=1)
def get_gateway() -> MarketDataGateway:
    return build_gateway()


@lru_cache(maxsize=1)
def get_generator() -> TextGenerator:
    return GeminiClient()


@lru_cache(maxsize=1)
def get_authenticator() -> Authenticator:
    return BearerTokenAuthenticator()


@lru_cache(maxsize=1)
def get_holding_store() -> HoldingStore:
    # Trade-management routes own the real store; locally holdings live in memory
    return InMemoryHoldingStore()


@lru_cache(maxsize=1)
def get_portfolio_repository() -> PortfolioRepository:
    return PortfolioRepository(get_holding_store(), build_portfolio_cache())


@lru_cache(maxsize=1)
def get_price_service() -> PriceService:
    return PriceService(get_gateway(), build_price_cache())
