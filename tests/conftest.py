"""Pytest configuration and fixtures."""

import base64
import json
import time
from collections.abc import Callable, Iterator
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import pytest

from quant_engine.auth import BearerTokenAuthenticator
from quant_engine.data.cache import TTLCache
from quant_engine.data.holdings import InMemoryHoldingStore, PortfolioRepository
from quant_engine.data.market_data import RATE_LIMITED
from quant_engine.models import Overview, PortfolioHolding, Quote
from quant_engine.utils.validators import RiskLimits


class FakeGateway:
    """Market data gateway serving canned quotes and overviews."""

    def __init__(
        self,
        quotes: dict[str, Any] | None = None,
        overviews: dict[str, Any] | None = None,
    ):
        self.quotes = quotes or {}
        self.overviews = overviews or {}
        self.calls: list[tuple[str, str]] = []

    async def get_quote(self, symbol: str) -> Any:
        self.calls.append(("quote", symbol))
        return self.quotes.get(symbol)

    async def get_overview(self, symbol: str) -> Any:
        self.calls.append(("overview", symbol))
        return self.overviews.get(symbol)


class FakeGenerator:
    """Text generator returning a fixed response, or raising."""

    def __init__(self, response: str = "", available: bool = True, error: Exception | None = None):
        self.response = response
        self._available = available
        self.error = error
        self.prompts: list[str] = []

    @property
    def available(self) -> bool:
        return self._available

    async def generate(
        self, prompt: str, temperature: float = 0.2, max_output_tokens: int = 300
    ) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


def _b64(data: dict[str, Any]) -> str:
    return base64.urlsafe_b64encode(json.dumps(data).encode()).decode().rstrip("=")


@pytest.fixture
def fake_gateway_cls() -> type[FakeGateway]:
    return FakeGateway


@pytest.fixture
def fake_generator_cls() -> type[FakeGenerator]:
    return FakeGenerator


@pytest.fixture
def rate_limited() -> Any:
    return RATE_LIMITED


@pytest.fixture
def make_token() -> Callable[[dict[str, Any]], str]:
    """Build an unsigned JWT-shaped token around a payload."""

    def _make(payload: dict[str, Any]) -> str:
        return f"{_b64({'alg': 'RS256', 'typ': 'JWT'})}.{_b64(payload)}.signature"

    return _make


@pytest.fixture
def token(make_token: Callable[[dict[str, Any]], str]) -> str:
    """Valid token for user-1, expiring in an hour."""
    return make_token({"user_id": "user-1", "exp": int(time.time()) + 3600})


@pytest.fixture
def authenticator() -> BearerTokenAuthenticator:
    return BearerTokenAuthenticator(project_id="")


@pytest.fixture
def aapl_quote() -> Quote:
    return Quote(price=190.0, change=1.5, change_percent=0.8, volume=50_000_000)


@pytest.fixture
def aapl_overview() -> Overview:
    return Overview(
        symbol="AAPL",
        name="Apple Inc.",
        sector="Technology",
        industry="Consumer Electronics",
        pe_ratio=29.5,
        eps_growth=0.11,
        roe=1.47,
        book_value=4.4,
        shares_outstanding=15_500_000_000,
        market_cap=2_950_000_000_000,
        revenue_growth=0.06,
        profit_margin=0.25,
        beta=1.25,
        dividend_yield=0.005,
        peg_ratio=2.1,
        ma50=185.0,
        ma200=178.0,
        high52=199.6,
        low52=164.1,
    )


@pytest.fixture
def make_holdings() -> Callable[..., list[PortfolioHolding]]:
    """
    Build holdings newest first from (symbol, pnl) pairs.

    The first pair is the most recent trade, one day apart going back.
    """

    def _make(pairs: list[tuple[str, float]], start: datetime | None = None) -> list[PortfolioHolding]:
        start = start or datetime(2024, 6, 30, 12, 0)
        return [
            PortfolioHolding(symbol=symbol, profit_and_loss=pnl, date=start - timedelta(days=i))
            for i, (symbol, pnl) in enumerate(pairs)
        ]

    return _make


@pytest.fixture
def portfolio_cache(tmp_path: Path) -> Iterator[TTLCache]:
    cache = TTLCache(300, str(tmp_path / "portfolio"))
    yield cache
    cache.close()


@pytest.fixture
def price_cache(tmp_path: Path) -> Iterator[TTLCache]:
    cache = TTLCache(30, str(tmp_path / "prices"))
    yield cache
    cache.close()


@pytest.fixture
def holding_store() -> InMemoryHoldingStore:
    return InMemoryHoldingStore()


@pytest.fixture
def repository(holding_store: InMemoryHoldingStore, portfolio_cache: TTLCache) -> PortfolioRepository:
    return PortfolioRepository(holding_store, portfolio_cache)


@pytest.fixture
def default_limits() -> RiskLimits:
    return RiskLimits()
