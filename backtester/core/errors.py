"""
Backtester exception hierarchy. Everything raised on purpose derives from
BacktestError so callers can catch a failed run in one place.
"""

from __future__ import annotations
from typing import Optional


class BacktestError(Exception):
    """Base class for backtest failures. A failed run produces no partial result."""


class ConfigError(BacktestError):
    """Invalid configuration file or strategy parameter."""


class DataSourceError(BacktestError):
    """Price file missing, unreadable or lacking required columns."""


class DataIntegrityError(BacktestError):
    """A malformed or inconsistent price bar reached the simulation core."""

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message)
        self.index = index


class InsufficientDataError(BacktestError):
    """Fewer bars than the configured indicator periods need."""

    def __init__(self, required: int, available: int):
        super().__init__(f"need at least {required} bars, got {available}")
        self.required = required
        self.available = available


class StrategyNotFoundError(BacktestError):
    """Unrecognized strategy identifier."""

    def __init__(self, strategy: object):
        super().__init__(f"Strategy not found: {strategy!r}")
        self.strategy = strategy


__all__ = [
    "BacktestError",
    "ConfigError",
    "DataSourceError",
    "DataIntegrityError",
    "InsufficientDataError",
    "StrategyNotFoundError",
]
