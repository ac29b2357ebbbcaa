"""Unit tests for analytics.metrics."""

import math
from datetime import date

import pytest

from backtester.analytics.metrics import (
    analyze,
    completed_trades,
    compute_metrics,
    consecutive_streaks,
    monthly_returns,
    period_returns,
    profit_factor,
    sharpe_ratio,
    win_rate,
)
from backtester.core.types import (
    EquitySnapshot,
    PerformanceMetrics,
    SimulationResult,
    StrategyId,
    StrategyParams,
    Trade,
    TradeSide,
)


def snap(d, value):
    return EquitySnapshot(date=d, value=value, cash=value, position_value=0.0)


def result_with(trades=(), curve=(), max_drawdown_pct=0.0):
    return SimulationResult(
        strategy=StrategyId.SMA_CROSSOVER,
        params=StrategyParams(),
        initial_capital=1000.0,
        final_capital=1000.0,
        total_return_pct=0.0,
        trade_count=len(trades),
        max_drawdown_pct=max_drawdown_pct,
        execution_time_ms=0.0,
        trades=tuple(trades),
        equity_curve=tuple(curve),
    )


def round_trip(day, buy_price, sell_price, qty=10, commission=1.0):
    return [
        Trade(date(2024, 1, day), TradeSide.BUY, buy_price, qty, commission, "in"),
        Trade(date(2024, 1, day + 1), TradeSide.SELL, sell_price, qty, commission, "out"),
    ]


def test_sharpe_ratio_annualized():
    returns = [0.01, -0.01, 0.02, 0.0]
    std = math.sqrt(1.25e-4)  # population
    expected = (0.005 * 252 - 0.001 * 252) / (std * math.sqrt(252))
    assert sharpe_ratio(returns) == pytest.approx(expected)
    assert sharpe_ratio(returns, risk_free_rate=0.0) == pytest.approx(0.005 * 252 / (std * math.sqrt(252)))


def test_sharpe_ratio_degenerate_returns_zero():
    assert sharpe_ratio([]) == 0.0
    assert sharpe_ratio([0.002]) == 0.0
    # float noise on a flat equity curve stays under the deviation guard
    assert sharpe_ratio([0.1 + 0.2 - 0.3] * 5) == 0.0


def test_win_rate_breakeven_is_not_a_win():
    assert win_rate([0.0, 0.0, 12.5]) == pytest.approx(1 / 3)
    assert win_rate([-3.0, 0.0]) == 0.0
    assert win_rate([]) == 0.0


def test_profit_factor():
    assert profit_factor([10, -5, 10, -5]) == 2.0
    assert profit_factor([10, 10]) == 0.0  # no losses
    assert profit_factor([-5, -5]) == 0.0
    assert profit_factor([]) == 0.0


def test_consecutive_streaks_zero_counts_as_loss():
    assert consecutive_streaks([1, -1, 0, 2, 3, 4, -2]) == (3, 2)
    assert consecutive_streaks([]) == (0, 0)


def test_period_returns():
    curve = [snap(date(2024, 1, d), v) for d, v in [(1, 100.0), (2, 110.0), (3, 99.0)]]
    assert period_returns(curve) == pytest.approx([0.1, -0.1])
    assert period_returns(curve[:1]) == []


def test_completed_trades_include_commissions():
    trades = round_trip(1, 100.0, 110.0, qty=10, commission=1.0)
    (ct,) = completed_trades(trades)
    assert ct.entry_date == date(2024, 1, 1)
    assert ct.exit_date == date(2024, 1, 2)
    assert ct.profit == pytest.approx((1100 - 1) - (1000 + 1))
    assert ct.return_pct == pytest.approx(98 / 1001 * 100)


def test_completed_trades_ignore_unmatched_buy():
    trades = round_trip(1, 100.0, 110.0) + round_trip(5, 100.0, 90.0)[:1]
    assert len(completed_trades(trades)) == 1


def test_compute_metrics_no_trades():
    m = compute_metrics(result_with(max_drawdown_pct=4.2))
    assert m == PerformanceMetrics(max_drawdown_pct=4.2)


def test_compute_metrics_single_winner():
    curve = [snap(date(2024, 1, 1), 1000.0), snap(date(2024, 1, 2), 1098.0)]
    m = compute_metrics(result_with(round_trip(1, 100.0, 110.0), curve, max_drawdown_pct=0.0))
    assert m.total_trades == 1
    assert m.win_rate == 1.0
    assert m.profit_factor == 0.0
    assert m.avg_loss == 0.0
    assert m.avg_profit == pytest.approx(98.0)
    assert m.max_consecutive_wins == 1
    assert m.max_consecutive_losses == 0
    assert m.sharpe_ratio == 0.0  # single return sample has zero deviation


def test_compute_metrics_mixed():
    trades = (
        round_trip(1, 100.0, 110.0, commission=0.0)    # +100
        + round_trip(3, 100.0, 95.0, commission=0.0)   # -50
        + round_trip(5, 100.0, 130.0, commission=0.0)  # +300
        + round_trip(7, 100.0, 100.0, commission=0.0)  # 0
    )
    m = compute_metrics(result_with(trades, max_drawdown_pct=3.0))
    assert m.total_trades == 4
    assert m.winning_trades == 2
    assert m.losing_trades == 1
    assert m.win_rate == 0.5
    assert m.total_profit == pytest.approx(400.0)
    assert m.total_loss == pytest.approx(50.0)
    assert m.profit_factor == pytest.approx(8.0)
    assert m.avg_profit == pytest.approx(200.0)
    assert m.avg_loss == pytest.approx(50.0)
    assert m.max_consecutive_wins == 1
    assert m.max_consecutive_losses == 1
    assert m.max_drawdown_pct == 3.0


def test_monthly_returns_grouped_and_sorted():
    curve = [
        snap(date(2024, 1, 2), 100.0),
        snap(date(2024, 1, 31), 110.0),
        snap(date(2024, 2, 1), 110.0),
        snap(date(2024, 2, 29), 99.0),
        snap(date(2024, 3, 1), 120.0),
    ]
    months = monthly_returns(curve)
    assert [m.month for m in months] == ["2024-01", "2024-02", "2024-03"]
    assert months[0].return_pct == pytest.approx(10.0)
    assert months[1].return_pct == pytest.approx(-10.0)
    assert months[2].return_pct == 0.0
    assert (months[1].start_value, months[1].end_value) == (110.0, 99.0)
    assert monthly_returns([]) == []


def test_analyze_bundles_everything():
    curve = [snap(date(2024, 1, 1), 1000.0), snap(date(2024, 2, 1), 1098.0)]
    report = analyze(result_with(round_trip(1, 100.0, 110.0), curve))
    assert len(report.completed_trades) == 1
    assert [m.month for m in report.monthly_returns] == ["2024-01", "2024-02"]
    assert report.metrics.total_trades == 1
