"""Core: config, types, errors, logging."""

from backtester.core.config import load_config, Config
from backtester.core.errors import (
    BacktestError,
    ConfigError,
    DataIntegrityError,
    DataSourceError,
    InsufficientDataError,
    StrategyNotFoundError,
)
from backtester.core.logger import setup_logging
from backtester.core.types import (
    CompletedTrade,
    EquitySnapshot,
    MonthlyReturn,
    PerformanceMetrics,
    PerformanceReport,
    PriceBar,
    Signal,
    SignalAction,
    SimulationResult,
    StrategyId,
    StrategyParams,
    Trade,
    TradeSide,
)

__all__ = [
    "load_config",
    "Config",
    "setup_logging",
    "BacktestError",
    "ConfigError",
    "DataIntegrityError",
    "DataSourceError",
    "InsufficientDataError",
    "StrategyNotFoundError",
    "CompletedTrade",
    "EquitySnapshot",
    "MonthlyReturn",
    "PerformanceMetrics",
    "PerformanceReport",
    "PriceBar",
    "Signal",
    "SignalAction",
    "SimulationResult",
    "StrategyId",
    "StrategyParams",
    "Trade",
    "TradeSide",
]
