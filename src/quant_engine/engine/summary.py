"""Deterministic natural-language summary of an evaluation."""

from quant_engine.models import FactorScore, QuantScore, RiskAssessment, TradeIntent

HEADLINES = {
    "STRONG BUY": "STRONG BUY signal across all factors.",
    "BUY": "Favorable setup supports a BUY.",
    "NEUTRAL": "Mixed signals suggest caution.",
    "AVOID": "Weak factors indicate AVOID.",
}


def _price_line(technical: FactorScore) -> str | None:
    price = technical.extras.get("current_price")
    if not price:
        return None
    change_pct = technical.extras.get("change_pct")
    change = ""
    if change_pct is not None:
        change = f" ({'+' if change_pct > 0 else ''}{round(change_pct, 2)}%)"
    return f"Current price: ${price:.2f}{change}."


def _factor_line(quant: QuantScore) -> str | None:
    if not quant.breakdown:
        return None
    # max/min keep the first of equal scores
    strongest = max(quant.breakdown.items(), key=lambda item: item[1]["score"])
    weakest = min(quant.breakdown.items(), key=lambda item: item[1]["score"])
    return (
        f"Strongest factor: {strongest[0]} ({strongest[1]['score']}/100). "
        f"Weakest: {weakest[0]} ({weakest[1]['score']}/100)."
    )


def generate_summary(
    intent: TradeIntent,
    quant: QuantScore,
    risk: RiskAssessment,
    technical: FactorScore,
    sector: FactorScore,
    sentiment: FactorScore,
) -> str:
    """Compose the summary paragraph, one sentence per available signal."""
    symbol = intent.symbol
    lines = [f"{symbol} scores {quant.total_score}/100 - {HEADLINES[quant.recommendation]}"]

    price_line = _price_line(technical)
    if price_line:
        lines.append(price_line)

    factor_line = _factor_line(quant)
    if factor_line:
        lines.append(factor_line)

    if risk.risk_violation:
        lines.append(f"Risk violations: {'; '.join(risk.violations)}.")
    else:
        lines.append(
            f"Position size: {risk.position_size_percent}% of portfolio. "
            f"Concentration risk: {risk.concentration_risk}."
        )

    sector_name = sector.extras.get("sector")
    if sector_name and sector_name != "Unknown":
        lines.append(f"Sector: {sector_name} ({sector.extras.get('industry') or 'N/A'}).")

    brief = sentiment.extras.get("brief")
    if brief:
        lines.append(f"Sentiment: {brief}")

    if quant.recommendation == "AVOID":
        lines.append("Recommendation: Consider waiting for better entry conditions.")
    elif intent.action == "BUY":
        lines.append(
            f"Recommendation: {intent.action} {intent.quantity} shares of {symbol} "
            f"at {intent.price_type.lower()} price."
        )

    return " ".join(lines)
