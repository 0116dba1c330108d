"""Quantitative Decision Engine MCP Server using FastMCP."""

import json
import logging
import os
from typing import Any

from fastmcp import FastMCP

from quant_engine import SCHEMA_VERSION, SERVER_VERSION
from quant_engine.prompts.templates import get_prompt
from quant_engine.tools import (
    clear_portfolio_cache as clear_cached_portfolio,
    evaluate_trade_intent as evaluate_intent,
    live_positions,
    portfolio_summary,
)

# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=getattr(logging, log_level, logging.INFO))
logger = logging.getLogger(__name__)

# Create FastMCP server instance
mcp = FastMCP(
    name="quant-decision-engine",
)


# ============================================================================
# TOOLS
# ============================================================================


@mcp.tool
async def evaluate_trade_intent(text: str, token: str) -> str:
    """
    Evaluate a natural-language trade idea against market data and your portfolio.

    Parses the intent, scores it on five weighted factors (fundamental 30%,
    technical 25%, sector 15%, sentiment 10%, portfolio fit 20%), assesses
    position-size and concentration risk, and returns a recommendation.

    Args:
        text: Trade intent, e.g. "Buy 20 AAPL at market price"
        token: Bearer token identifying the user

    Returns:
        JSON with parsed_intent, quant_score, risk_metrics, portfolio_stats,
        recommendation, summary and data_source, or an error with a status
        (400 bad input, 401 auth, 429 rate limit with parsed_intent, 500)
    """
    result = await evaluate_intent(text=text, token=token)
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def get_portfolio_summary(token: str) -> str:
    """
    Summarize your trade history.

    Args:
        token: Bearer token identifying the user

    Returns:
        JSON with win rate, P&L, profit factor, Sharpe-like proxy, current
        streak, per-symbol breakdown and monthly performance
    """
    result = await portfolio_summary(token=token)
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def get_live_positions(positions: list[dict[str, Any]]) -> str:
    """
    Get current prices and unrealised P&L for open positions.

    Args:
        positions: List of positions with symbol, entry_price, quantity and side.
                   Example: [{"symbol": "AAPL", "entry_price": 180, "quantity": 10, "side": "LONG"}]

    Returns:
        JSON with per-position price, price source (live/mock) and unrealised P&L
    """
    result = await live_positions(positions=positions)
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def clear_portfolio_cache(token: str) -> str:
    """
    Clear your cached portfolio so the next evaluation reads fresh holdings.

    Args:
        token: Bearer token identifying the user

    Returns:
        JSON confirmation
    """
    result = await clear_cached_portfolio(token=token)
    return json.dumps(result, indent=2, default=str)


# ============================================================================
# PROMPTS
# ============================================================================


@mcp.prompt
def trade_review(text: str) -> str:
    """Evaluate a trade idea and explain the verdict."""
    result = get_prompt("trade_review", {"text": text})
    if result:
        return result["messages"][0]["content"]
    return f'Evaluate "{text}" using the evaluate_trade_intent tool.'


# ============================================================================
# ENTRY POINT
# ============================================================================


def main() -> None:
    """Run the MCP server."""
    logger.info(f"Starting Quant Decision Engine MCP Server v{SERVER_VERSION} (schema v{SCHEMA_VERSION})")
    mcp.run()


if __name__ == "__main__":
    main()
