"""Technical factor: trend, moving-average alignment, range position, momentum."""

from quant_engine.models import FactorScore, Overview, Quote
from quant_engine.utils.numbers import mean_score, safe_float

NEUTRAL = 50


def score_price_vs_ma(price: float | None, ma: float | None) -> int:
    """Above the MA is bullish, too far above is overbought."""
    if price is None or not ma:
        return NEUTRAL
    ratio = (price - ma) / ma
    if ratio > 0.20:
        return 40
    if ratio > 0.10:
        return 55
    if ratio > 0.03:
        return 80
    if ratio > -0.03:
        return 60
    if ratio > -0.10:
        return 35
    if ratio > -0.20:
        return 20
    return 10


def score_ma_alignment(ma50: float | None, ma200: float | None) -> int:
    """50-day over 200-day (golden cross) is bullish."""
    if ma50 is None or not ma200:
        return NEUTRAL
    ratio = (ma50 - ma200) / ma200
    if ratio > 0.10:
        return 90
    if ratio > 0.03:
        return 75
    if ratio > -0.03:
        return 50
    if ratio > -0.10:
        return 30
    return 15


def score_52_week_position(price: float | None, high: float | None, low: float | None) -> int:
    """Mid-to-upper range scores best; both extremes score lower."""
    if price is None or high is None or low is None or high == low:
        return NEUTRAL
    position = (price - low) / (high - low)
    if position > 0.90:
        return 55
    if position > 0.70:
        return 80
    if position > 0.50:
        return 70
    if position > 0.30:
        return 45
    if position > 0.10:
        return 25
    return 15


def score_change_percent(change_pct: float | None) -> int:
    """Moderate gains score highest; a big move today has already happened."""
    if change_pct is None:
        return NEUTRAL
    if change_pct > 3:
        return 45
    if change_pct > 1:
        return 65
    if change_pct > 0:
        return 60
    if change_pct > -1:
        return 50
    if change_pct > -3:
        return 55
    return 40


def compute_technical_score(quote: Quote | None, overview: Overview | None) -> FactorScore:
    price = safe_float(quote.price) if quote else None
    change = safe_float(quote.change) if quote else None
    change_pct = safe_float(quote.change_percent) if quote else None

    ma50 = safe_float(overview.ma50) if overview else None
    ma200 = safe_float(overview.ma200) if overview else None
    high52 = safe_float(overview.high52) if overview else None
    low52 = safe_float(overview.low52) if overview else None

    breakdown = {
        "price_vs_ma50": {
            "value": {"price": price, "ma50": ma50},
            "score": score_price_vs_ma(price, ma50),
        },
        "price_vs_ma200": {
            "value": {"price": price, "ma200": ma200},
            "score": score_price_vs_ma(price, ma200),
        },
        "ma_alignment": {
            "value": {"ma50": ma50, "ma200": ma200},
            "score": score_ma_alignment(ma50, ma200),
        },
        "week52_position": {
            "value": {"price": price, "high52": high52, "low52": low52},
            "score": score_52_week_position(price, high52, low52),
        },
        "momentum": {"value": change_pct, "score": score_change_percent(change_pct)},
    }

    return FactorScore(
        score=mean_score(m["score"] for m in breakdown.values()),
        breakdown=breakdown,
        extras={"current_price": price, "change": change, "change_pct": change_pct},
    )
