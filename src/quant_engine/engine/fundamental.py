"""Fundamental factor: valuation, growth, profitability, leverage.

Growth and ROE inputs are decimals (0.15 = 15%).
"""

from quant_engine.models import FactorScore, Overview
from quant_engine.utils.numbers import mean_score, safe_float

NEUTRAL = 50


def score_pe(pe: float | None) -> int:
    if pe is None:
        return NEUTRAL
    if pe <= 0:
        return 45  # loss-making
    if pe < 10:
        return 95
    if pe < 15:
        return 85
    if pe < 20:
        return 75
    if pe < 25:
        return 65
    if pe < 35:
        return 50
    if pe < 50:
        return 35
    return 15


def score_eps_growth(growth: float | None) -> int:
    if growth is None:
        return NEUTRAL
    pct = growth * 100
    if pct > 50:
        return 95
    if pct > 30:
        return 85
    if pct > 20:
        return 75
    if pct > 10:
        return 65
    if pct > 5:
        return 55
    if pct > 0:
        return 45
    if pct > -10:
        return 30
    return 15


def score_roe(roe: float | None) -> int:
    if roe is None:
        return NEUTRAL
    pct = roe * 100
    if pct > 25:
        return 95
    if pct > 20:
        return 85
    if pct > 15:
        return 75
    if pct > 10:
        return 60
    if pct > 5:
        return 45
    if pct > 0:
        return 30
    return 15


def score_debt_equity(de: float | None) -> int:
    if de is None:
        return NEUTRAL
    if de < 0.1:
        return 95
    if de < 0.3:
        return 85
    if de < 0.5:
        return 75
    if de < 0.8:
        return 65
    if de < 1.0:
        return 55
    if de < 1.5:
        return 40
    if de < 2.5:
        return 25
    return 10


def score_revenue_growth(growth: float | None) -> int:
    if growth is None:
        return NEUTRAL
    pct = growth * 100
    if pct > 30:
        return 95
    if pct > 20:
        return 85
    if pct > 15:
        return 75
    if pct > 10:
        return 65
    if pct > 5:
        return 55
    if pct > 0:
        return 45
    if pct > -5:
        return 30
    return 15


def debt_equity_proxy(
    book_value: float | None,
    shares_outstanding: float | None,
    market_cap: float | None,
) -> float | None:
    """
    Leverage proxy from book equity vs market capitalization.

    (market_cap - book_value * shares) / (book_value * shares), floored at 0.
    This approximates enterprise-value leverage; it is not balance-sheet debt.
    """
    if not book_value or not shares_outstanding or not market_cap:
        return None
    total_equity = book_value * shares_outstanding
    if total_equity <= 0:
        return None
    return max(0.0, (market_cap - total_equity) / total_equity)


def compute_fundamental_score(overview: Overview | None) -> FactorScore:
    """Score P/E, EPS growth, ROE, the debt/equity proxy and revenue growth."""
    if overview is None:
        return FactorScore(score=NEUTRAL, extras={"data_available": False})

    pe = safe_float(overview.pe_ratio)
    eps_growth = safe_float(overview.eps_growth)
    roe = safe_float(overview.roe)
    revenue_growth = safe_float(overview.revenue_growth)
    debt_equity = debt_equity_proxy(
        safe_float(overview.book_value),
        safe_float(overview.shares_outstanding),
        safe_float(overview.market_cap),
    )

    breakdown = {
        "pe_ratio": {"value": pe, "score": score_pe(pe)},
        "eps_growth": {"value": eps_growth, "score": score_eps_growth(eps_growth)},
        "roe": {"value": roe, "score": score_roe(roe)},
        "debt_equity": {
            "value": round(debt_equity, 4) if debt_equity is not None else None,
            "score": score_debt_equity(debt_equity),
        },
        "revenue_growth": {"value": revenue_growth, "score": score_revenue_growth(revenue_growth)},
    }

    return FactorScore(
        score=mean_score(m["score"] for m in breakdown.values()),
        breakdown=breakdown,
        extras={"data_available": True},
    )
