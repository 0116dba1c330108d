"""Utility modules."""

from quant_engine.utils.numbers import clamp, clamp_score, mean_score, safe_float
from quant_engine.utils.provenance import build_error_response, build_meta, error_response_from
from quant_engine.utils.sanitize import sanitize_text
from quant_engine.utils.validators import RiskLimits, check_rule, validate_intent_text

__all__ = [
    "clamp",
    "clamp_score",
    "mean_score",
    "safe_float",
    "build_error_response",
    "build_meta",
    "error_response_from",
    "sanitize_text",
    "RiskLimits",
    "check_rule",
    "validate_intent_text",
]
