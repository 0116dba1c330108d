"""Sector / macro factor: beta, size, dividend yield, PEG."""

from quant_engine.models import FactorScore, Overview
from quant_engine.utils.numbers import mean_score, safe_float

NEUTRAL = 50


def score_beta(beta: float | None) -> int:
    """Defensive names score higher; very high beta scores lowest."""
    if beta is None:
        return NEUTRAL
    if beta < 0.5:
        return 70
    if beta < 0.8:
        return 65
    if beta < 1.0:
        return 60
    if beta < 1.2:
        return 55
    if beta < 1.5:
        return 45
    if beta < 2.0:
        return 35
    return 20


def score_market_cap(market_cap: float | None) -> int:
    if market_cap is None:
        return NEUTRAL
    billions = market_cap / 1e9
    if billions > 200:
        return 85  # mega cap
    if billions > 50:
        return 75
    if billions > 10:
        return 65
    if billions > 2:
        return 50
    if billions > 0.3:
        return 35
    return 20


def score_dividend_yield(dividend_yield: float | None) -> int:
    """Sweet band around 2.5-4%; no dividend or an extreme yield scores lower."""
    if dividend_yield is None:
        return NEUTRAL
    if dividend_yield == 0:
        return 40
    pct = dividend_yield * 100
    if pct > 6:
        return 50
    if pct > 4:
        return 75
    if pct > 2.5:
        return 80
    if pct > 1:
        return 60
    return 45


def score_peg(peg: float | None) -> int:
    if peg is None:
        return NEUTRAL
    if peg < 0:
        return 30
    if peg < 0.5:
        return 95
    if peg < 1.0:
        return 80
    if peg < 1.5:
        return 65
    if peg < 2.0:
        return 50
    if peg < 3.0:
        return 35
    return 20


def compute_sector_score(overview: Overview | None) -> FactorScore:
    if overview is None:
        return FactorScore(score=NEUTRAL, extras={"sector": "Unknown", "industry": "Unknown"})

    beta = safe_float(overview.beta)
    market_cap = safe_float(overview.market_cap)
    dividend_yield = safe_float(overview.dividend_yield)
    peg = safe_float(overview.peg_ratio)

    breakdown = {
        "beta": {"value": beta, "score": score_beta(beta)},
        "market_cap": {"value": market_cap, "score": score_market_cap(market_cap)},
        "dividend_yield": {"value": dividend_yield, "score": score_dividend_yield(dividend_yield)},
        "peg_ratio": {"value": peg, "score": score_peg(peg)},
    }

    return FactorScore(
        score=mean_score(m["score"] for m in breakdown.values()),
        breakdown=breakdown,
        extras={
            "sector": overview.sector or "Unknown",
            "industry": overview.industry or "Unknown",
        },
    )
