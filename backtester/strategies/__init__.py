"""Strategies: signal rules and the strategy catalog."""

from backtester.strategies.catalog import (
    STRATEGY_CATALOG,
    StrategyTemplate,
    list_strategies,
    resolve_params,
)
from backtester.strategies.signals import RULES, generate_signal, generate_signals

__all__ = [
    "STRATEGY_CATALOG",
    "StrategyTemplate",
    "list_strategies",
    "resolve_params",
    "RULES",
    "generate_signal",
    "generate_signals",
]
