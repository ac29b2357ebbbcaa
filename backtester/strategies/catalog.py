"""Strategy templates: description and default parameters per strategy."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from backtester.core.types import StrategyId, StrategyParams


@dataclass(frozen=True)
class StrategyTemplate:
    strategy: StrategyId
    description: str
    default_params: Dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.strategy.value


STRATEGY_CATALOG: Dict[StrategyId, StrategyTemplate] = {
    StrategyId.SMA_CROSSOVER: StrategyTemplate(
        StrategyId.SMA_CROSSOVER,
        "Buy when the short SMA crosses above the long SMA, sell on the cross back below.",
        {"sma_short_period": 20, "sma_long_period": 50},
    ),
    StrategyId.RSI_THRESHOLD: StrategyTemplate(
        StrategyId.RSI_THRESHOLD,
        "Buy when RSI drops below the oversold level, sell above the overbought level.",
        {"rsi_period": 14, "oversold_threshold": 30, "overbought_threshold": 70},
    ),
    StrategyId.BOLLINGER_BREAKOUT: StrategyTemplate(
        StrategyId.BOLLINGER_BREAKOUT,
        "Buy when the close breaks below the lower band, sell above the upper band.",
        {"bb_period": 20, "bb_std_dev": 2.0},
    ),
    StrategyId.MACD_CROSSOVER: StrategyTemplate(
        StrategyId.MACD_CROSSOVER,
        "Buy when the MACD line crosses above its signal line, sell on the cross below.",
        {"macd_fast": 12, "macd_slow": 26, "macd_signal": 9},
    ),
    StrategyId.MULTI_INDICATOR: StrategyTemplate(
        StrategyId.MULTI_INDICATOR,
        "Trade when at least two of trend (SMA), momentum (RSI) and MACD agree.",
        {
            "sma_short_period": 20,
            "sma_long_period": 50,
            "rsi_period": 14,
            "consensus_rsi_buy": 40,
            "consensus_rsi_sell": 65,
        },
    ),
}


def list_strategies() -> List[StrategyTemplate]:
    return [STRATEGY_CATALOG[s] for s in StrategyId]


def resolve_params(strategy, overrides: Optional[Mapping[str, Any]] = None) -> StrategyParams:
    """Template defaults for the strategy, then caller overrides on top."""
    template = STRATEGY_CATALOG[StrategyId.parse(strategy)]
    merged = dict(template.default_params)
    merged.update(overrides or {})
    return StrategyParams.from_mapping(merged)
