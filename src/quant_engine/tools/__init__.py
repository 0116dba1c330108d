"""Decision engine tools."""

from quant_engine.tools.evaluate import DecisionOrchestrator, evaluate_trade_intent
from quant_engine.tools.portfolio import clear_portfolio_cache, portfolio_summary
from quant_engine.tools.position import live_positions

__all__ = [
    "DecisionOrchestrator",
    "clear_portfolio_cache",
    "evaluate_trade_intent",
    "live_positions",
    "portfolio_summary",
]
