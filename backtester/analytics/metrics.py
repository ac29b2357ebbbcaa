"""
Performance metrics from a SimulationResult: Sharpe, win rate, profit factor,
average profit/loss, streaks and monthly returns.
Degenerate inputs (no trades, zero deviation, no losses) give 0, never an error.
"""

from __future__ import annotations
from typing import List, Sequence

import numpy as np
import pandas as pd

from backtester.core.types import (
    CompletedTrade,
    EquitySnapshot,
    MonthlyReturn,
    PerformanceMetrics,
    PerformanceReport,
    SimulationResult,
    Trade,
    TradeSide,
)

TRADING_DAYS_PER_YEAR = 252
DEFAULT_RISK_FREE_RATE = 0.001  # per bar, annualized with the returns


def completed_trades(trades: Sequence[Trade]) -> List[CompletedTrade]:
    """Pair each buy with the next sell. A trailing unmatched buy is ignored."""
    completed: List[CompletedTrade] = []
    entry = None
    for trade in trades:
        if trade.side == TradeSide.BUY:
            entry = trade
        elif trade.side == TradeSide.SELL and entry is not None:
            buy_value = entry.quantity * entry.price + entry.commission
            sell_value = trade.quantity * trade.price - trade.commission
            profit = sell_value - buy_value
            completed.append(CompletedTrade(
                entry_date=entry.date,
                exit_date=trade.date,
                entry_price=entry.price,
                exit_price=trade.price,
                quantity=trade.quantity,
                profit=profit,
                return_pct=profit / buy_value * 100.0,
            ))
            entry = None
    return completed


def period_returns(equity_curve: Sequence[EquitySnapshot]) -> List[float]:
    """Simple return between consecutive snapshots."""
    values = [s.value for s in equity_curve]
    return [(cur - prev) / prev for prev, cur in zip(values, values[1:])]


def sharpe_ratio(
    returns: Sequence[float],
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
    periods_per_year: int = TRADING_DAYS_PER_YEAR,
) -> float:
    """Annualized Sharpe using population standard deviation."""
    if len(returns) < 1:
        return 0.0
    arr = np.asarray(returns, dtype=float)
    std = arr.std()
    if std <= 1e-12:
        return 0.0
    annual_return = arr.mean() * periods_per_year
    annual_std = std * np.sqrt(periods_per_year)
    annual_rf = risk_free_rate * periods_per_year
    return float((annual_return - annual_rf) / annual_std)


def win_rate(profits: Sequence[float]) -> float:
    """Fraction of trades with positive profit."""
    if not profits:
        return 0.0
    return sum(1 for p in profits if p > 0) / len(profits)


def profit_factor(profits: Sequence[float]) -> float:
    """Gross profit / gross loss. 0 when there are no losses."""
    wins = sum(p for p in profits if p > 0)
    losses = sum(-p for p in profits if p < 0)
    if losses <= 0:
        return 0.0
    return wins / losses


def consecutive_streaks(profits: Sequence[float]) -> tuple[int, int]:
    """(max consecutive wins, max consecutive losses). A zero profit counts as a loss."""
    max_wins = max_losses = wins = losses = 0
    for p in profits:
        if p > 0:
            wins += 1
            losses = 0
            max_wins = max(max_wins, wins)
        else:
            losses += 1
            wins = 0
            max_losses = max(max_losses, losses)
    return max_wins, max_losses


def compute_metrics(result: SimulationResult) -> PerformanceMetrics:
    """Aggregate metrics. With no trades everything is 0 except max drawdown."""
    if not result.trades:
        return PerformanceMetrics(max_drawdown_pct=result.max_drawdown_pct)
    profits = [t.profit for t in completed_trades(result.trades)]
    wins = [p for p in profits if p > 0]
    losses = [-p for p in profits if p < 0]
    total_profit = sum(wins)
    total_loss = sum(losses)
    max_wins, max_losses = consecutive_streaks(profits)
    return PerformanceMetrics(
        sharpe_ratio=sharpe_ratio(period_returns(result.equity_curve)),
        max_drawdown_pct=result.max_drawdown_pct,
        win_rate=win_rate(profits),
        profit_factor=profit_factor(profits),
        avg_profit=total_profit / len(wins) if wins else 0.0,
        avg_loss=total_loss / len(losses) if losses else 0.0,
        total_profit=total_profit,
        total_loss=total_loss,
        max_consecutive_wins=max_wins,
        max_consecutive_losses=max_losses,
        total_trades=len(profits),
        winning_trades=len(wins),
        losing_trades=len(losses),
    )


def monthly_returns(equity_curve: Sequence[EquitySnapshot]) -> List[MonthlyReturn]:
    """First-to-last snapshot return per calendar month, oldest month first."""
    if not equity_curve:
        return []
    df = pd.DataFrame({
        "month": [s.date.strftime("%Y-%m") for s in equity_curve],
        "value": [s.value for s in equity_curve],
    })
    grouped = df.groupby("month", sort=True)["value"].agg(["first", "last"])
    return [
        MonthlyReturn(
            month=str(month),
            return_pct=(float(row["last"]) - float(row["first"])) / float(row["first"]) * 100.0,
            start_value=float(row["first"]),
            end_value=float(row["last"]),
        )
        for month, row in grouped.iterrows()
    ]


def analyze(result: SimulationResult) -> PerformanceReport:
    return PerformanceReport(
        metrics=compute_metrics(result),
        completed_trades=tuple(completed_trades(result.trades)),
        monthly_returns=tuple(monthly_returns(result.equity_curve)),
    )
