"""Backtesting: ledger and bar-by-bar simulation with slippage and commission."""

from backtester.backtesting.engine import BacktestEngine, run_backtest, validate_bars
from backtester.backtesting.ledger import Ledger

__all__ = ["BacktestEngine", "Ledger", "run_backtest", "validate_bars"]
