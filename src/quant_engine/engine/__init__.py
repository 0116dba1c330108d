"""Scoring, risk and summary logic. Pure apart from the sentiment provider call."""

from quant_engine.engine.aggregator import (
    FACTOR_WEIGHTS,
    NEUTRAL_QUANT_SCORE,
    aggregate,
    recommendation_for,
)
from quant_engine.engine.fundamental import compute_fundamental_score
from quant_engine.engine.intent_parser import (
    AIIntentParser,
    IntentParser,
    ParseResult,
    RegexIntentParser,
)
from quant_engine.engine.portfolio_fit import compute_portfolio_fit_score
from quant_engine.engine.portfolio_metrics import (
    compute_portfolio_stats,
    holdings_breakdown,
    monthly_performance,
)
from quant_engine.engine.risk import assess_risk
from quant_engine.engine.sector import compute_sector_score
from quant_engine.engine.sentiment import compute_sentiment_score
from quant_engine.engine.summary import generate_summary
from quant_engine.engine.technical import compute_technical_score

__all__ = [
    # Intent
    "AIIntentParser",
    "IntentParser",
    "ParseResult",
    "RegexIntentParser",
    # Factors
    "compute_fundamental_score",
    "compute_technical_score",
    "compute_sector_score",
    "compute_sentiment_score",
    "compute_portfolio_fit_score",
    # Aggregation and risk
    "FACTOR_WEIGHTS",
    "NEUTRAL_QUANT_SCORE",
    "aggregate",
    "recommendation_for",
    "assess_risk",
    # Portfolio
    "compute_portfolio_stats",
    "holdings_breakdown",
    "monthly_performance",
    "generate_summary",
]
