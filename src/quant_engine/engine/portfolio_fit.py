"""Portfolio-fit factor: how the proposed symbol sits against trade history."""

from quant_engine.models import FactorScore, PortfolioHolding, TradeIntent
from quant_engine.utils.numbers import mean_score

EMPTY_PORTFOLIO_SCORE = 75
RECENT_WINDOW = 5
MIN_CORRELATION_TRADES = 3


def score_diversification(is_new: bool, unique_symbols: int) -> int:
    if is_new:
        return min(95, 60 + unique_symbols * 5)
    return max(20, 70 - unique_symbols * 3)


def score_concentration(ratio: float) -> int:
    if ratio > 0.5:
        return 15
    if ratio > 0.3:
        return 30
    if ratio > 0.2:
        return 50
    if ratio > 0.1:
        return 65
    return 80


def score_correlation(symbol_trades: list[PortfolioHolding], portfolio: list[PortfolioHolding]) -> int:
    """Same-sign average P&L as the whole book counts as correlated."""
    if len(symbol_trades) < MIN_CORRELATION_TRADES:
        return 60
    symbol_avg = sum(h.profit_and_loss for h in symbol_trades) / len(symbol_trades)
    portfolio_avg = sum(h.profit_and_loss for h in portfolio) / len(portfolio)
    if (symbol_avg > 0 and portfolio_avg > 0) or (symbol_avg < 0 and portfolio_avg < 0):
        return 40
    return 75


def score_drawdown(recent_losses: int) -> int:
    if recent_losses >= 4:
        return 25
    if recent_losses >= 3:
        return 40
    if recent_losses >= 2:
        return 55
    return 80


def compute_portfolio_fit_score(
    intent: TradeIntent, portfolio: list[PortfolioHolding]
) -> FactorScore:
    """
    Score diversification, concentration, correlation and drawdown impact.

    `portfolio` must be ordered newest first; the drawdown metric looks at
    the first five entries.
    """
    if not portfolio:
        return FactorScore(
            score=EMPTY_PORTFOLIO_SCORE,
            breakdown={
                "diversification": {"score": 90, "note": "First position - good start"},
                "concentration": {"score": 80, "note": "No concentration risk"},
                "correlation_impact": {"score": 70, "note": "No correlation data"},
                "drawdown_impact": {"score": 60, "note": "No historical drawdown data"},
            },
        )

    symbol = intent.symbol.upper()
    unique_symbols = {h.symbol.upper() for h in portfolio}
    is_new = symbol not in unique_symbols
    symbol_trades = [h for h in portfolio if h.symbol.upper() == symbol]
    recent_losses = sum(1 for h in portfolio[:RECENT_WINDOW] if h.profit_and_loss < 0)

    breakdown = {
        "diversification": {
            "score": score_diversification(is_new, len(unique_symbols)),
            "note": "New stock adds diversity" if is_new else "Already in portfolio",
        },
        "concentration": {
            "score": score_concentration(len(symbol_trades) / len(portfolio)),
            "note": f"{len(symbol_trades)}/{len(portfolio)} trades in {symbol}",
        },
        "correlation_impact": {
            "score": score_correlation(symbol_trades, portfolio),
            "note": (
                "Based on historical P&L"
                if len(symbol_trades) >= MIN_CORRELATION_TRADES
                else "Limited data"
            ),
        },
        "drawdown_impact": {
            "score": score_drawdown(recent_losses),
            "note": f"{recent_losses}/{RECENT_WINDOW} recent trades were losses",
        },
    }

    return FactorScore(
        score=mean_score(m["score"] for m in breakdown.values()),
        breakdown=breakdown,
    )
