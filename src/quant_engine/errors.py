"""Error taxonomy for the decision engine.

Each error that can reach a caller carries the HTTP-equivalent status the
tool layer reports. Upstream and persistence errors are normally absorbed
by the orchestrator and degrade to neutral defaults instead.
"""


class QuantEngineError(Exception):
    """Base class for all engine errors."""

    status: int | None = None
    error_type: str = "error"

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InputError(QuantEngineError):
    """Malformed or insufficient request (bad text, unparseable intent)."""

    status = 400
    error_type = "invalid_input"


class AuthError(QuantEngineError):
    """Missing, malformed, or expired credentials."""

    status = 401
    error_type = "unauthorized"


class UpstreamRateLimitError(QuantEngineError):
    """A market-data provider reported a rate limit."""

    status = 429
    error_type = "rate_limited"


class UpstreamUnavailableError(QuantEngineError):
    """An external provider could not be reached or returned garbage."""

    error_type = "upstream_unavailable"


class PersistenceError(QuantEngineError):
    """The holding store failed to read or write."""

    error_type = "persistence_unavailable"


class InternalError(QuantEngineError):
    """Unexpected failure. Only a generic message is ever returned."""

    status = 500
    error_type = "internal_error"
