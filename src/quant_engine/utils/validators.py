"""Validation utilities and parameter classes."""

import operator
import os
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class RiskLimits:
    """Immutable risk limits, all expressed as percentages."""

    max_position_pct: float = 20.0
    max_sector_pct: float = 40.0
    max_risk_per_trade: float = 2.0

    def __post_init__(self) -> None:
        for name in ("max_position_pct", "max_sector_pct", "max_risk_per_trade"):
            value = float(getattr(self, name))
            if not 0 < value <= 100:
                raise ValueError(f"Invalid {name} {value}. Must be in (0, 100]")
            object.__setattr__(self, name, value)

    @classmethod
    def from_env(cls) -> "RiskLimits":
        """Read limits from RISK_* environment variables."""
        return cls(
            max_position_pct=float(os.environ.get("RISK_MAX_POSITION_PCT", "20")),
            max_sector_pct=float(os.environ.get("RISK_MAX_SECTOR_PCT", "40")),
            max_risk_per_trade=float(os.environ.get("RISK_MAX_RISK_PER_TRADE", "2")),
        )


def check_rule(
    value: float | None,
    threshold: float,
    comparator: Callable[[float, float], bool] = operator.gt,
) -> bool | None:
    """
    Check a rule with nullable boolean semantics.

    If value is None, returns None (not False).

    Args:
        value: The value to check (may be None)
        threshold: The threshold to compare against
        comparator: Comparison function (default: operator.gt)

    Returns:
        True/False if value is not None, None otherwise
    """
    if value is None:
        return None
    return comparator(value, threshold)


def validate_intent_text(text: object, min_length: int = 3) -> str:
    """
    Validate raw trade-intent text.

    Returns:
        The stripped text

    Raises:
        ValueError: If text is not a string or is shorter than min_length
    """
    if not isinstance(text, str) or len(text.strip()) < min_length:
        raise ValueError(
            'Please provide a trade intent (e.g., "Buy 20 AAPL at market price")'
        )
    return text.strip()
