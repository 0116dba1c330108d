"""Response metadata and error envelope utilities."""

from datetime import datetime, timezone
from typing import Any

from quant_engine import SCHEMA_VERSION, SERVER_VERSION
from quant_engine.errors import QuantEngineError


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with a Z suffix."""
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z"


def build_meta(tool: str, duration_ms: float | None = None) -> dict[str, Any]:
    """
    Build standard metadata block for responses.

    Args:
        tool: Name of the tool producing this response
        duration_ms: Execution time in milliseconds (optional)

    Returns:
        Metadata dict with version info
    """
    meta: dict[str, Any] = {
        "server_version": SERVER_VERSION,
        "schema_version": SCHEMA_VERSION,
        "tool": tool,
    }
    if duration_ms is not None:
        meta["duration_ms"] = round(duration_ms, 1)
    return meta


def build_error_response(
    status: int,
    message: str,
    error_type: str = "error",
    details: str | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """
    Build standardized error response.

    Args:
        status: HTTP-equivalent status (400, 401, 429, 500)
        message: Human-readable error message
        error_type: Machine-readable error kind
        details: Optional extra detail safe to show the caller
        **extra: Partial results to attach (e.g. parsed_intent on 429)

    Returns:
        Error response dict
    """
    response: dict[str, Any] = {
        "status": status,
        "error": message,
        "error_type": error_type,
    }
    if details is not None:
        response["details"] = details
    response.update(extra)
    response["meta"] = build_meta("error")
    return response


def error_response_from(exc: QuantEngineError, **extra: Any) -> dict[str, Any]:
    """Build an error response from an engine exception."""
    return build_error_response(
        status=exc.status or 500,
        message=exc.message,
        error_type=exc.error_type,
        details=exc.details,
        **extra,
    )
