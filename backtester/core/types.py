"""
Core data types for bars, signals, strategy parameters, trades and results.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields, replace
from datetime import date
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

from backtester.core.errors import ConfigError, StrategyNotFoundError


class SignalAction(str, Enum):
    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"


class TradeSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


class StrategyId(str, Enum):
    """Closed set of supported strategies. Values are the display names."""
    SMA_CROSSOVER = "SMA Golden Cross"
    RSI_THRESHOLD = "RSI Oversold/Overbought"
    BOLLINGER_BREAKOUT = "Bollinger Bands Breakout"
    MACD_CROSSOVER = "MACD Signal Cross"
    MULTI_INDICATOR = "Multi-Indicator Combo"

    @classmethod
    def parse(cls, value: Any) -> "StrategyId":
        """Accept a member, its display name, or its member name (any case)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip()
            for member in cls:
                if key == member.value or key.upper() == member.name:
                    return member
            lowered = key.lower()
            for member in cls:
                if lowered == member.value.lower():
                    return member
        raise StrategyNotFoundError(value)


@dataclass(frozen=True)
class PriceBar:
    """One trading day (OHLCV)."""
    date: date
    open: float
    high: float
    low: float
    close: float
    adj_close: Optional[float] = None
    volume: float = 0.0


@dataclass(frozen=True)
class Signal:
    """Action for one bar plus a human-readable reason (empty for holds)."""
    action: SignalAction
    reason: str = ""

    @classmethod
    def hold(cls) -> "Signal":
        return cls(SignalAction.HOLD)


_PERIOD_FIELDS = (
    "sma_short_period",
    "sma_long_period",
    "rsi_period",
    "macd_fast",
    "macd_slow",
    "macd_signal",
    "bb_period",
    "atr_period",
)


@dataclass(frozen=True)
class StrategyParams:
    """
    Named numeric strategy and execution parameters.
    Periods are bar counts; rates are fractions (0.001 = 0.1%).
    """
    sma_short_period: int = 20
    sma_long_period: int = 50
    rsi_period: int = 14
    oversold_threshold: float = 30.0
    overbought_threshold: float = 70.0
    consensus_rsi_buy: float = 40.0
    consensus_rsi_sell: float = 65.0
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    bb_period: int = 20
    bb_std_dev: float = 2.0
    atr_period: int = 14
    position_size: float = 0.2
    commission_rate: float = 0.001
    slippage_rate: float = 0.001

    def __post_init__(self) -> None:
        for name in _PERIOD_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")
        if not 0 < self.position_size <= 1:
            raise ConfigError(f"position_size must be in (0, 1], got {self.position_size}")
        if self.commission_rate < 0 or self.slippage_rate < 0:
            raise ConfigError("commission_rate and slippage_rate must be >= 0")
        if self.bb_std_dev < 0:
            raise ConfigError(f"bb_std_dev must be >= 0, got {self.bb_std_dev}")

    @classmethod
    def from_mapping(cls, overrides: Optional[Mapping[str, Any]] = None) -> "StrategyParams":
        """Defaults with overrides applied. Unknown keys and non-numeric values raise ConfigError."""
        return cls().with_overrides(overrides)

    def with_overrides(self, overrides: Optional[Mapping[str, Any]] = None) -> "StrategyParams":
        if not overrides:
            return self
        known = {f.name: f for f in fields(self)}
        changes: dict[str, Any] = {}
        for key, raw in overrides.items():
            if key not in known:
                raise ConfigError(f"Unknown strategy parameter: {key}")
            changes[key] = _coerce(key, raw, int if key in _PERIOD_FIELDS else float)
        return replace(self, **changes)

    def warmup_bars(self) -> int:
        """Minimum number of bars the configured indicators need."""
        return max(
            self.sma_short_period,
            self.sma_long_period,
            self.rsi_period + 1,
            self.macd_slow,
            self.bb_period,
            self.atr_period + 1,
            2,
        )


def _coerce(key: str, raw: Any, kind: type) -> Any:
    if isinstance(raw, bool):
        raise ConfigError(f"{key} must be numeric, got {raw!r}")
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"{key} must be numeric, got {raw!r}") from None
    if kind is int:
        if not value.is_integer():
            raise ConfigError(f"{key} must be a whole number, got {raw!r}")
        return int(value)
    return value


@dataclass(frozen=True)
class Trade:
    """Executed buy or sell. price is the fill after slippage."""
    date: date
    side: TradeSide
    price: float
    quantity: int
    commission: float
    reason: str = ""


@dataclass(frozen=True)
class EquitySnapshot:
    """Portfolio state at one bar's close."""
    date: date
    value: float
    cash: float
    position_value: float
    quantity: int = 0


@dataclass(frozen=True)
class CompletedTrade:
    """A buy matched with the sell that closed it."""
    entry_date: date
    exit_date: date
    entry_price: float
    exit_price: float
    quantity: int
    profit: float
    return_pct: float


@dataclass(frozen=True)
class SimulationResult:
    """Raw output of one backtest run."""
    strategy: StrategyId
    params: StrategyParams
    initial_capital: float
    final_capital: float
    total_return_pct: float
    trade_count: int
    max_drawdown_pct: float
    execution_time_ms: float
    trades: Tuple[Trade, ...] = field(default_factory=tuple)
    equity_curve: Tuple[EquitySnapshot, ...] = field(default_factory=tuple)
    final_quantity: int = 0


@dataclass(frozen=True)
class PerformanceMetrics:
    """Aggregate performance metrics. avg_loss and total_loss are positive magnitudes."""
    sharpe_ratio: float = 0.0
    max_drawdown_pct: float = 0.0
    win_rate: float = 0.0
    profit_factor: float = 0.0
    avg_profit: float = 0.0
    avg_loss: float = 0.0
    total_profit: float = 0.0
    total_loss: float = 0.0
    max_consecutive_wins: int = 0
    max_consecutive_losses: int = 0
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0


@dataclass(frozen=True)
class MonthlyReturn:
    month: str  # "YYYY-MM"
    return_pct: float
    start_value: float
    end_value: float


@dataclass(frozen=True)
class PerformanceReport:
    metrics: PerformanceMetrics
    completed_trades: Tuple[CompletedTrade, ...] = field(default_factory=tuple)
    monthly_returns: Tuple[MonthlyReturn, ...] = field(default_factory=tuple)
