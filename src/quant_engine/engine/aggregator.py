"""Weighted aggregation of the five factor scores into a recommendation."""

import math

from quant_engine.models import Confidence, QuantScore, Recommendation
from quant_engine.utils.numbers import clamp_score, round_half_up

FACTOR_WEIGHTS = {
    "fundamental": 0.30,
    "technical": 0.25,
    "sector": 0.15,
    "sentiment": 0.10,
    "portfolio_fit": 0.20,
}

if not math.isclose(sum(FACTOR_WEIGHTS.values()), 1.0):
    raise RuntimeError(f"Factor weights must sum to 1.0, got {sum(FACTOR_WEIGHTS.values())}")

# (lower bound inclusive, recommendation, confidence), highest first
RECOMMENDATION_TIERS: list[tuple[int, Recommendation, Confidence]] = [
    (80, "STRONG BUY", "HIGH"),
    (65, "BUY", "MODERATE"),
    (50, "NEUTRAL", "LOW"),
]

NEUTRAL_QUANT_SCORE = QuantScore(
    total_score=50,
    recommendation="NEUTRAL",
    confidence="LOW",
    breakdown={},
)


def recommendation_for(total_score: int) -> tuple[Recommendation, Confidence]:
    for lower, recommendation, confidence in RECOMMENDATION_TIERS:
        if total_score >= lower:
            return recommendation, confidence
    return "AVOID", "HIGH"


def aggregate(
    fundamental: int,
    technical: int,
    sector: int,
    sentiment: int,
    portfolio_fit: int,
) -> QuantScore:
    """Combine factor scores with FACTOR_WEIGHTS. Pure."""
    scores = {
        "fundamental": fundamental,
        "technical": technical,
        "sector": sector,
        "sentiment": sentiment,
        "portfolio_fit": portfolio_fit,
    }
    total = clamp_score(sum(scores[name] * weight for name, weight in FACTOR_WEIGHTS.items()))
    recommendation, confidence = recommendation_for(total)

    breakdown = {
        name: {
            "score": scores[name],
            "weight": weight,
            "weighted_contribution": round_half_up(scores[name] * weight),
        }
        for name, weight in FACTOR_WEIGHTS.items()
    }
    return QuantScore(
        total_score=total,
        recommendation=recommendation,
        confidence=confidence,
        breakdown=breakdown,
    )
