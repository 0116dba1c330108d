"""Numeric coercion helpers shared by the scorers and the risk engine."""

import math
from collections.abc import Iterable
from typing import Any

# Placeholder strings providers use for "no value"
MISSING_MARKERS = {"", "none", "null", "-", "n/a", "na", "nan"}


def safe_float(value: Any) -> float | None:
    """
    Convert a provider value to float, or None when it carries no signal.

    Handles None, placeholder strings ("None", "-", "N/A"), percent strings
    ("1.25%"), NaN and infinities.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        if text.lower() in MISSING_MARKERS:
            return None
        if text.endswith("%"):
            text = text[:-1].strip()
        value = text
    try:
        result = float(value)
    except (ValueError, TypeError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def clamp(value: float, lo: float = 0, hi: float = 100) -> float:
    """Clamp value into [lo, hi]."""
    return max(lo, min(hi, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (62.5 -> 63)."""
    return math.floor(value + 0.5)


def clamp_score(value: float) -> int:
    """Round and clamp to an integer score in [0, 100]."""
    return int(clamp(round_half_up(value)))


def mean_score(scores: Iterable[float]) -> int:
    """Unweighted mean of sub-scores as an integer score in [0, 100]."""
    values = [clamp(s) for s in scores]
    if not values:
        return 50
    return clamp_score(sum(values) / len(values))
