"""Aggregate statistics over a user's trade history."""

from typing import Any

import pandas as pd

from quant_engine.models import PortfolioHolding, PortfolioStats


def _holdings_frame(holdings: list[PortfolioHolding]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "symbol": [h.symbol.upper() for h in holdings],
            "pnl": [float(h.profit_and_loss) for h in holdings],
            "date": pd.to_datetime([h.date for h in holdings]),
        }
    )


def current_streak(holdings: list[PortfolioHolding]) -> dict[str, Any]:
    """Length of the latest run of wins (P&L >= 0) or losses, newest first by date."""
    if not holdings:
        return {"type": "none", "count": 0}

    ordered = sorted(holdings, key=lambda h: h.date, reverse=True)
    is_win = ordered[0].profit_and_loss >= 0
    count = 0
    for holding in ordered:
        if (holding.profit_and_loss >= 0) != is_win:
            break
        count += 1
    return {"type": "win" if is_win else "loss", "count": count}


def compute_portfolio_stats(holdings: list[PortfolioHolding]) -> PortfolioStats:
    """
    Win rate, average win/loss, profit factor, extremes and a Sharpe-like proxy.

    The Sharpe proxy is mean P&L over population standard deviation of P&L.
    """
    if not holdings:
        return PortfolioStats()

    pnls = pd.Series([float(h.profit_and_loss) for h in holdings])
    winners = pnls[pnls > 0]
    losers = pnls[pnls < 0]

    avg_win = round(float(winners.mean()), 2) if len(winners) else 0.0
    avg_loss = round(float(losers.mean()), 2) if len(losers) else 0.0
    std = float(pnls.std(ddof=0))

    return PortfolioStats(
        total_trades=len(pnls),
        total_pnl=round(float(pnls.sum()), 2),
        win_rate=round(len(winners) / len(pnls) * 100, 1),
        avg_win=avg_win,
        avg_loss=avg_loss,
        profit_factor=round(abs(avg_win / avg_loss), 2) if avg_loss != 0 else 0.0,
        largest_win=round(float(winners.max()), 2) if len(winners) else 0.0,
        largest_loss=round(float(losers.min()), 2) if len(losers) else 0.0,
        sharpe_proxy=round(float(pnls.mean()) / std, 3) if std > 0 else 0.0,
        current_streak=current_streak(holdings),
    )


def holdings_breakdown(holdings: list[PortfolioHolding]) -> list[dict[str, Any]]:
    """Per-symbol trade count, P&L and win rate, best total P&L first."""
    if not holdings:
        return []

    df = _holdings_frame(holdings)
    df["win"] = df["pnl"] > 0
    grouped = df.groupby("symbol").agg(
        trade_count=("pnl", "size"),
        total_pnl=("pnl", "sum"),
        wins=("win", "sum"),
        last_trade=("date", "max"),
    )
    grouped = grouped.sort_values("total_pnl", ascending=False)

    return [
        {
            "symbol": symbol,
            "trade_count": int(row.trade_count),
            "total_pnl": round(float(row.total_pnl), 2),
            "win_rate": round(int(row.wins) / int(row.trade_count) * 100, 1),
            "avg_pnl": round(float(row.total_pnl) / int(row.trade_count), 2),
            "last_trade": row.last_trade.isoformat(),
        }
        for symbol, row in grouped.iterrows()
    ]


def monthly_performance(holdings: list[PortfolioHolding]) -> list[dict[str, Any]]:
    """P&L, trade count and win rate per calendar month, oldest first."""
    if not holdings:
        return []

    df = _holdings_frame(holdings)
    df["month"] = df["date"].dt.strftime("%Y-%m")
    df["win"] = df["pnl"] > 0
    grouped = df.groupby("month").agg(
        pnl=("pnl", "sum"),
        trades=("pnl", "size"),
        wins=("win", "sum"),
    ).sort_index()

    return [
        {
            "month": month,
            "pnl": round(float(row.pnl), 2),
            "trades": int(row.trades),
            "win_rate": round(int(row.wins) / int(row.trades) * 100, 1),
        }
        for month, row in grouped.iterrows()
    ]
