"""Tests for portfolio statistics."""

from datetime import datetime

from quant_engine.engine.portfolio_metrics import (
    compute_portfolio_stats,
    current_streak,
    holdings_breakdown,
    monthly_performance,
)

MIXED = [("AAPL", 100), ("MSFT", -50), ("AAPL", 200), ("TSLA", -25)]


class TestComputePortfolioStats:
    """Tests for compute_portfolio_stats."""

    def test_empty(self) -> None:
        """Test an empty history gives all zeros."""
        stats = compute_portfolio_stats([])

        assert stats.total_trades == 0
        assert stats.total_pnl == 0.0
        assert stats.win_rate == 0.0
        assert stats.current_streak == {"type": "none", "count": 0}

    def test_mixed_history(self, make_holdings) -> None:
        """Test aggregate statistics over wins and losses."""
        stats = compute_portfolio_stats(make_holdings(MIXED))

        assert stats.total_trades == 4
        assert stats.total_pnl == 225.0
        assert stats.win_rate == 50.0
        assert stats.avg_win == 150.0
        assert stats.avg_loss == -37.5
        assert stats.profit_factor == 4.0
        assert stats.largest_win == 200.0
        assert stats.largest_loss == -50.0

    def test_sharpe_proxy(self, make_holdings) -> None:
        """Test mean over population standard deviation."""
        stats = compute_portfolio_stats(make_holdings(MIXED))
        assert stats.sharpe_proxy == 0.559

    def test_no_losses(self, make_holdings) -> None:
        """Test profit factor is 0 without losing trades."""
        stats = compute_portfolio_stats(make_holdings([("AAPL", 10), ("MSFT", 30)]))

        assert stats.win_rate == 100.0
        assert stats.avg_loss == 0.0
        assert stats.profit_factor == 0.0
        assert stats.largest_loss == 0.0

    def test_constant_pnl(self, make_holdings) -> None:
        """Test the Sharpe proxy is 0 with zero deviation."""
        stats = compute_portfolio_stats(make_holdings([("AAPL", 10), ("AAPL", 10)]))
        assert stats.sharpe_proxy == 0.0

    def test_to_dict(self, make_holdings) -> None:
        """Test serialization leaves out an unset error."""
        result = compute_portfolio_stats(make_holdings(MIXED)).to_dict()

        assert "error" not in result
        assert result["current_streak"] == {"type": "win", "count": 1}


class TestCurrentStreak:
    """Tests for current_streak."""

    def test_latest_run(self, make_holdings) -> None:
        """Test the run is counted from the newest trade."""
        holdings = make_holdings([("A", -1), ("B", -2), ("C", 5), ("D", -3)])
        assert current_streak(holdings) == {"type": "loss", "count": 2}

    def test_breakeven_counts_as_win(self, make_holdings) -> None:
        """Test zero P&L extends a winning streak."""
        holdings = make_holdings([("A", 0), ("B", 10), ("C", -1)])
        assert current_streak(holdings) == {"type": "win", "count": 2}

    def test_orders_by_date(self, make_holdings) -> None:
        """Test input order does not matter."""
        holdings = make_holdings([("A", 10), ("B", -5), ("C", -5)])
        assert current_streak(list(reversed(holdings))) == {"type": "win", "count": 1}


class TestHoldingsBreakdown:
    """Tests for holdings_breakdown."""

    def test_empty(self) -> None:
        """Test empty history gives an empty list."""
        assert holdings_breakdown([]) == []

    def test_sorted_by_total_pnl(self, make_holdings) -> None:
        """Test symbols are ordered by total P&L, best first."""
        breakdown = holdings_breakdown(make_holdings(MIXED))
        assert [row["symbol"] for row in breakdown] == ["AAPL", "TSLA", "MSFT"]

    def test_per_symbol_fields(self, make_holdings) -> None:
        """Test per-symbol aggregates."""
        aapl = holdings_breakdown(make_holdings(MIXED))[0]

        assert aapl == {
            "symbol": "AAPL",
            "trade_count": 2,
            "total_pnl": 300.0,
            "win_rate": 100.0,
            "avg_pnl": 150.0,
            "last_trade": "2024-06-30T12:00:00",
        }


class TestMonthlyPerformance:
    """Tests for monthly_performance."""

    def test_empty(self) -> None:
        """Test empty history gives an empty list."""
        assert monthly_performance([]) == []

    def test_grouped_by_month(self, make_holdings) -> None:
        """Test trades are bucketed by calendar month, oldest first."""
        holdings = make_holdings(MIXED, start=datetime(2024, 6, 2, 12, 0))

        assert monthly_performance(holdings) == [
            {"month": "2024-05", "pnl": 175.0, "trades": 2, "win_rate": 50.0},
            {"month": "2024-06", "pnl": 50.0, "trades": 2, "win_rate": 50.0},
        ]
