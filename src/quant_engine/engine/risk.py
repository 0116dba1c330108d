"""
Portfolio risk engine.

Computes position sizing, HHI concentration, beta impact, Kelly sizing and
rule violations for a proposed trade against the existing portfolio.

Position weights are approximated from cumulative absolute P&L per symbol,
and symbols stand in for sectors, since holdings carry neither position
sizes nor sector tags.
"""

from collections import defaultdict

from quant_engine.models import ConcentrationRisk, MarketSnapshot, PortfolioHolding, RiskAssessment, TradeIntent
from quant_engine.utils.numbers import round_half_up, safe_float
from quant_engine.utils.validators import RiskLimits, check_rule

MIN_PORTFOLIO_VALUE = 10_000.0
PNL_TO_VALUE_MULTIPLIER = 5
STOP_LOSS_DISTANCE = 0.02
BASELINE_BETA = 1.0
MAX_KELLY_PCT = 25.0

HHI_HIGH = 2500
HHI_MODERATE = 1500


def estimate_portfolio_value(portfolio: list[PortfolioHolding]) -> float:
    """Sum of absolute P&L x 5, floored at 10,000."""
    if not portfolio:
        return MIN_PORTFOLIO_VALUE
    total_abs_pnl = sum(abs(h.profit_and_loss) for h in portfolio)
    return max(total_abs_pnl * PNL_TO_VALUE_MULTIPLIER, MIN_PORTFOLIO_VALUE)


def symbol_allocation(portfolio: list[PortfolioHolding]) -> dict[str, float]:
    """Percent weight per symbol, using cumulative absolute P&L as position size."""
    by_symbol: dict[str, float] = defaultdict(float)
    for holding in portfolio:
        by_symbol[holding.symbol.upper()] += abs(holding.profit_and_loss)

    total = sum(by_symbol.values()) or 1.0
    return {symbol: round(value / total * 100, 2) for symbol, value in by_symbol.items()}


def allocation_after_trade(
    allocation: dict[str, float], symbol: str, trade_value: float, portfolio_value: float
) -> dict[str, float]:
    """Add the trade's share to `symbol` and renormalize to 100."""
    after = dict(allocation)
    added_pct = trade_value / (portfolio_value + trade_value) * 100
    after[symbol] = round(after.get(symbol, 0.0) + added_pct, 2)

    total = sum(after.values())
    if total > 0 and total != 100:
        after = {k: round(v / total * 100, 2) for k, v in after.items()}
    return after


def compute_hhi(allocation: dict[str, float]) -> float:
    """Herfindahl-Hirschman Index: 0 (diversified) to 10000 (single holding)."""
    return sum(weight * weight for weight in allocation.values())


def concentration_tier(hhi: float) -> ConcentrationRisk:
    if hhi > HHI_HIGH:
        return "HIGH"
    if hhi > HHI_MODERATE:
        return "MODERATE"
    return "LOW"


def kelly_optimal_pct(portfolio: list[PortfolioHolding]) -> float:
    """
    Simplified Kelly fraction as a percent, clamped to [0, 25].

    Win/loss ratio defaults to 1 with no losing trades; with no winning P&L
    the fraction is 0.
    """
    wins = [h.profit_and_loss for h in portfolio if h.profit_and_loss > 0]
    losses = [h.profit_and_loss for h in portfolio if h.profit_and_loss < 0]

    win_rate = len(wins) / len(portfolio) if portfolio else 0.5
    avg_win = sum(wins) / max(1, len(wins))
    avg_loss = abs(sum(losses)) / max(1, len(losses))

    if avg_loss > 0:
        if avg_win == 0:
            return 0.0
        win_loss_ratio = avg_win / avg_loss
    else:
        win_loss_ratio = 1.0

    kelly = (win_rate - (1 - win_rate) / win_loss_ratio) * 100
    return round(max(0.0, min(MAX_KELLY_PCT, kelly)), 2)


def assess_risk(
    intent: TradeIntent,
    portfolio: list[PortfolioHolding],
    snapshot: MarketSnapshot,
    limits: RiskLimits | None = None,
) -> RiskAssessment:
    """
    Assess a proposed trade.

    Violations are evaluated independently with strict `>` comparisons, so a
    value exactly at a limit is allowed.
    """
    limits = limits or RiskLimits()
    symbol = intent.symbol.upper()
    quantity = intent.quantity

    current_price = (safe_float(snapshot.quote.price) if snapshot.quote else None) or 0.0
    trade_value = current_price * quantity

    portfolio_value = estimate_portfolio_value(portfolio)
    position_size_pct = round(trade_value / portfolio_value * 100, 2)

    allocation_before = symbol_allocation(portfolio)
    allocation_after = allocation_after_trade(
        allocation_before, symbol, trade_value, portfolio_value
    )

    hhi_before = compute_hhi(allocation_before)
    hhi_after = compute_hhi(allocation_after)

    stock_beta = (safe_float(snapshot.overview.beta) if snapshot.overview else None) or BASELINE_BETA
    weight_new = trade_value / (portfolio_value + trade_value)
    beta_after = round(BASELINE_BETA * (1 - weight_new) + stock_beta * weight_new, 3)

    risk_amount = current_price * STOP_LOSS_DISTANCE * quantity
    risk_pct = round(risk_amount / portfolio_value * 100, 2)

    violations = []
    if check_rule(position_size_pct, limits.max_position_pct):
        violations.append(
            f"Position size ({position_size_pct}%) exceeds max {limits.max_position_pct:g}%"
        )
    symbol_pct = allocation_after.get(symbol, 0.0)
    if check_rule(symbol_pct, limits.max_sector_pct):
        violations.append(
            f"{symbol} allocation ({symbol_pct}%) exceeds max {limits.max_sector_pct:g}%"
        )
    if check_rule(risk_pct, limits.max_risk_per_trade):
        violations.append(
            f"Trade risk ({risk_pct}%) exceeds max {limits.max_risk_per_trade:g}% per trade"
        )

    return RiskAssessment(
        trade_value=round(trade_value, 2),
        current_price=current_price,
        portfolio_value=round(portfolio_value, 2),
        position_size_percent=position_size_pct,
        sector_exposure_before=allocation_before,
        sector_exposure_after=allocation_after,
        concentration_risk=concentration_tier(hhi_after),
        hhi_before=round_half_up(hhi_before),
        hhi_after=round_half_up(hhi_after),
        beta_stock=stock_beta,
        beta_portfolio_after=beta_after,
        risk_per_trade_pct=risk_pct,
        kelly_optimal_pct=kelly_optimal_pct(portfolio),
        violations=violations,
        risk_violation=bool(violations),
        max_position_pct=limits.max_position_pct,
        max_sector_pct=limits.max_sector_pct,
        max_risk_per_trade=limits.max_risk_per_trade,
    )
