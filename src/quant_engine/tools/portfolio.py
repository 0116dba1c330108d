"""Portfolio summary and cache tools."""

import logging
from time import perf_counter
from typing import Any

from quant_engine.auth import Authenticator
from quant_engine.data.holdings import PortfolioRepository
from quant_engine.engine.portfolio_metrics import (
    compute_portfolio_stats,
    holdings_breakdown,
    monthly_performance,
)
from quant_engine.errors import AuthError, PersistenceError
from quant_engine.models import PortfolioStats
from quant_engine.utils.provenance import build_meta, error_response_from

logger = logging.getLogger(__name__)


async def portfolio_summary(
    token: str | None,
    repository: PortfolioRepository | None = None,
    authenticator: Authenticator | None = None,
) -> dict[str, Any]:
    """
    Summarize the caller's trade history.

    Args:
        token: Bearer token identifying the user
        repository: Portfolio reader (defaults to the process-wide one)
        authenticator: Token resolver (defaults to the process-wide one)

    Returns:
        Dict with stats, per-symbol breakdown and monthly performance
    """
    start_time = perf_counter()
    if repository is None or authenticator is None:
        from quant_engine import services

        repository = repository or services.get_portfolio_repository()
        authenticator = authenticator or services.get_authenticator()

    try:
        user_id = authenticator.authenticate(token)
    except AuthError as e:
        return error_response_from(e)

    warnings: list[str] = []
    try:
        holdings = await repository.load(user_id)
    except PersistenceError as e:
        logger.warning(f"Portfolio summary without holdings for {user_id}: {e.details}")
        warnings.append("Holdings unavailable; statistics are zeroed")
        holdings = []

    stats = compute_portfolio_stats(holdings) if holdings else PortfolioStats()

    duration_ms = (perf_counter() - start_time) * 1000
    return {
        "status": 200,
        "stats": stats.to_dict(),
        "holdings": holdings_breakdown(holdings),
        "monthly_performance": monthly_performance(holdings),
        "warnings": warnings,
        "meta": build_meta("get_portfolio_summary", duration_ms),
    }


async def clear_portfolio_cache(
    token: str | None,
    repository: PortfolioRepository | None = None,
    authenticator: Authenticator | None = None,
) -> dict[str, Any]:
    """Drop the caller's cached portfolio so the next read hits the store."""
    if repository is None or authenticator is None:
        from quant_engine import services

        repository = repository or services.get_portfolio_repository()
        authenticator = authenticator or services.get_authenticator()

    try:
        user_id = authenticator.authenticate(token)
    except AuthError as e:
        return error_response_from(e)

    repository.invalidate(user_id)
    return {
        "status": 200,
        "success": True,
        "message": "Cache cleared",
        "meta": build_meta("clear_portfolio_cache"),
    }
