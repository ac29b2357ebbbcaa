"""Analytics: performance metrics (Sharpe, win rate, profit factor, streaks, monthly returns)."""

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

__all__ = [
    "analyze",
    "completed_trades",
    "compute_metrics",
    "consecutive_streaks",
    "monthly_returns",
    "period_returns",
    "profit_factor",
    "sharpe_ratio",
    "win_rate",
]
