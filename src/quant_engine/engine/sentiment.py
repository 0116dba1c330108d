"""Sentiment factor through an external text-generation provider."""

import logging

from quant_engine.data.gemini_client import TextGenerator, extract_json_object
from quant_engine.models import FactorScore, Overview
from quant_engine.prompts.templates import sentiment_prompt
from quant_engine.utils.numbers import clamp, mean_score, safe_float

logger = logging.getLogger(__name__)

NEUTRAL_SENTIMENT = 55
FALLBACK_BRIEF = "Unable to assess sentiment - using neutral baseline"

# Response field -> breakdown key
SUB_SCORES = {
    "newsPolarity": "news_polarity",
    "analystSentiment": "analyst_sentiment",
    "earningsTone": "earnings_tone",
    "sentimentScore": "overall",
}


def _sub_score(value: object) -> int:
    number = safe_float(value)
    if number is None:
        return NEUTRAL_SENTIMENT
    return int(round(clamp(number)))


async def compute_sentiment_score(
    symbol: str,
    overview: Overview | None,
    generator: TextGenerator | None,
) -> FactorScore:
    """
    Ask the provider for four 0-100 sentiment sub-scores and average them.

    Never raises: a missing key returns the neutral default, any provider or
    parsing failure returns the neutral fallback.
    """
    if generator is None or not generator.available:
        return FactorScore(
            score=NEUTRAL_SENTIMENT,
            extras={"source": "default", "note": "Sentiment provider not configured"},
        )

    company = overview.name if overview else None
    sector = overview.sector if overview else None
    try:
        text = await generator.generate(
            sentiment_prompt(symbol, company, sector), temperature=0.2, max_output_tokens=300
        )
        parsed = extract_json_object(text)
    except Exception as e:
        logger.warning(f"Sentiment analysis failed for {symbol}: {e}")
        return FactorScore(
            score=NEUTRAL_SENTIMENT,
            extras={
                "source": "fallback",
                "note": "Sentiment data unavailable",
                "brief": FALLBACK_BRIEF,
            },
        )

    breakdown = {key: {"score": _sub_score(parsed.get(field))} for field, key in SUB_SCORES.items()}
    brief = parsed.get("brief")
    return FactorScore(
        score=mean_score(m["score"] for m in breakdown.values()),
        breakdown=breakdown,
        extras={"brief": brief if isinstance(brief, str) else "", "source": "gemini"},
    )
