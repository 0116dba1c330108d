"""Data model for the decision engine.

Everything here except PortfolioHolding is derived per request and never
persisted.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Literal

Action = Literal["BUY", "SELL"]
PriceType = Literal["MARKET", "LIMIT"]
Recommendation = Literal["STRONG BUY", "BUY", "NEUTRAL", "AVOID"]
Confidence = Literal["HIGH", "MODERATE", "LOW"]
ConcentrationRisk = Literal["LOW", "MODERATE", "HIGH", "UNKNOWN"]


@dataclass(frozen=True)
class TradeIntent:
    """Structured trade intent extracted from free text."""

    action: Action
    symbol: str
    quantity: int = 1
    price_type: PriceType = "MARKET"
    target_price: float | None = None
    raw_input: str = ""
    ai_parsed: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "symbol", self.symbol.upper().strip())
        if self.quantity < 1:
            raise ValueError(f"quantity must be >= 1, got {self.quantity}")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Quote:
    """Point-in-time quote."""

    price: float | None
    change: float | None = None
    change_percent: float | None = None
    volume: float | None = None


@dataclass(frozen=True)
class Overview:
    """
    Fundamentals / overview snapshot.

    Values are kept as the provider sent them; scorers coerce with safe_float
    so placeholder strings like "None" or "-" simply score as no signal.
    """

    symbol: str
    name: str | None = None
    sector: str | None = None
    industry: str | None = None
    pe_ratio: Any = None
    eps_growth: Any = None
    roe: Any = None
    book_value: Any = None
    shares_outstanding: Any = None
    market_cap: Any = None
    revenue_growth: Any = None
    profit_margin: Any = None
    beta: Any = None
    dividend_yield: Any = None
    peg_ratio: Any = None
    ma50: Any = None
    ma200: Any = None
    high52: Any = None
    low52: Any = None


@dataclass(frozen=True)
class MarketSnapshot:
    """Quote and overview for one symbol. Either half may be missing."""

    quote: Quote | None = None
    overview: Overview | None = None


@dataclass(frozen=True)
class PortfolioHolding:
    """One historical or open position in canonical shape."""

    symbol: str
    profit_and_loss: float
    date: datetime
    reason: str = ""


@dataclass
class FactorScore:
    """
    Score for one factor.

    `breakdown` maps metric name to {"value", "score"} (plus an optional
    "note"); `extras` carries non-score facts such as the current price or
    the sentiment brief.
    """

    score: int
    breakdown: dict[str, Any] = field(default_factory=dict)
    extras: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.score = int(max(0, min(100, self.score)))

    def to_dict(self) -> dict[str, Any]:
        return {"score": self.score, "breakdown": self.breakdown, **self.extras}


@dataclass(frozen=True)
class QuantScore:
    """Weighted composite of the five factor scores."""

    total_score: int
    recommendation: Recommendation
    confidence: Confidence
    breakdown: dict[str, dict[str, float]] = field(default_factory=dict)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result = asdict(self)
        if self.error is None:
            result.pop("error")
        return result


@dataclass
class RiskAssessment:
    """Risk metrics for a proposed trade against the existing portfolio."""

    trade_value: float
    current_price: float
    portfolio_value: float
    position_size_percent: float
    sector_exposure_before: dict[str, float]
    sector_exposure_after: dict[str, float]
    concentration_risk: ConcentrationRisk
    hhi_before: int
    hhi_after: int
    beta_stock: float
    beta_portfolio_after: float
    risk_per_trade_pct: float
    kelly_optimal_pct: float
    violations: list[str] = field(default_factory=list)
    risk_violation: bool = False
    max_position_pct: float | None = None
    max_sector_pct: float | None = None
    max_risk_per_trade: float | None = None
    error: str | None = None

    @classmethod
    def unknown(cls, error: str) -> "RiskAssessment":
        """Zeroed assessment used when the risk engine itself fails."""
        return cls(
            trade_value=0.0,
            current_price=0.0,
            portfolio_value=0.0,
            position_size_percent=0.0,
            sector_exposure_before={},
            sector_exposure_after={},
            concentration_risk="UNKNOWN",
            hhi_before=0,
            hhi_after=0,
            beta_stock=0.0,
            beta_portfolio_after=0.0,
            risk_per_trade_pct=0.0,
            kelly_optimal_pct=0.0,
            error=error,
        )

    def to_dict(self) -> dict[str, Any]:
        result = asdict(self)
        if self.error is None:
            result.pop("error")
        return result


@dataclass
class PortfolioStats:
    """Aggregate statistics over a user's trade history."""

    total_trades: int = 0
    total_pnl: float = 0.0
    win_rate: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0
    profit_factor: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0
    sharpe_proxy: float = 0.0
    current_streak: dict[str, Any] = field(
        default_factory=lambda: {"type": "none", "count": 0}
    )
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result = asdict(self)
        if self.error is None:
            result.pop("error")
        return result
