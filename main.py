#!/usr/bin/env python3
"""
Backtester CLI: backtest | strategies
Usage:
  python main.py backtest [--config config.yaml] [--data prices.csv] [--strategy NAME]
                          [--capital N] [--param key=value ...] [--output result.json]
  python main.py strategies
"""

from __future__ import annotations
import argparse
import json
import logging
import sys
from dataclasses import asdict
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

# Project root
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backtester.analytics.metrics import analyze
from backtester.backtesting.engine import BacktestEngine
from backtester.core.config import load_config
from backtester.core.errors import BacktestError, ConfigError, InsufficientDataError
from backtester.core.logger import setup_logging
from backtester.core.types import PerformanceReport, SimulationResult
from backtester.data.loader import clean_prices, frame_to_bars, load_price_csv
from backtester.strategies.catalog import list_strategies, resolve_params

logger = logging.getLogger("backtester.cli")


def parse_param_overrides(items: Optional[List[str]]) -> Dict[str, str]:
    """["sma_short_period=5", ...] -> {"sma_short_period": "5"}."""
    overrides: Dict[str, str] = {}
    for item in items or []:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ConfigError(f"Expected key=value, got {item!r}")
        overrides[key.strip()] = value.strip()
    return overrides


def _jsonable(obj: Any) -> Any:
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    raise TypeError(f"Not JSON serializable: {type(obj).__name__}")


def write_report(path: Path, symbol: str, result: SimulationResult, report: PerformanceReport) -> None:
    payload = {
        "symbol": symbol,
        "results": asdict(result),
        "performance_metrics": asdict(report.metrics),
        "completed_trades": [asdict(t) for t in report.completed_trades],
        "monthly_returns": [asdict(m) for m in report.monthly_returns],
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, default=_jsonable)


def print_summary(symbol: str, result: SimulationResult, report: PerformanceReport) -> None:
    m = report.metrics
    print(f"\n--- Backtest Results: {symbol or 'unnamed'} / {result.strategy.value} ---")
    print(f"Initial capital: {result.initial_capital:,.2f}")
    print(f"Final capital: {result.final_capital:,.2f}")
    print(f"Total return: {result.total_return_pct:.2f}%")
    print(f"Trades: {result.trade_count} (completed: {m.total_trades}, wins: {m.winning_trades}, losses: {m.losing_trades})")
    print(f"Sharpe ratio: {m.sharpe_ratio:.2f}")
    print(f"Max drawdown: {m.max_drawdown_pct:.2f}%")
    print(f"Win rate: {m.win_rate*100:.1f}%")
    print(f"Profit factor: {m.profit_factor:.2f}")
    print(f"Avg profit / avg loss: {m.avg_profit:,.2f} / {m.avg_loss:,.2f}")
    print(f"Max consecutive wins / losses: {m.max_consecutive_wins} / {m.max_consecutive_losses}")
    if report.monthly_returns:
        print("Monthly returns:")
        for mr in report.monthly_returns:
            print(f"  {mr.month}: {mr.return_pct:+.2f}%")


def run_backtest(args: argparse.Namespace) -> int:
    """Run one backtest from config plus command-line overrides."""
    try:
        config = load_config(args.config, ROOT)
    except ConfigError as e:
        setup_logging()
        logger.error("Invalid configuration: %s", e)
        return 1
    setup_logging(config.log_level, config.log_dir, config.log_file)
    try:
        data_path = args.data or config.data_path
        if data_path is None:
            raise ConfigError("No price data: pass --data or set backtest.data_path in config.yaml")
        overrides = dict(config.strategy_params)
        overrides.update(parse_param_overrides(args.param))
        strategy = args.strategy or config.strategy
        params = resolve_params(strategy, overrides)
        capital = args.capital if args.capital is not None else config.initial_capital

        df = clean_prices(load_price_csv(data_path, config.start, config.end))
        if len(df) < config.min_bars:
            raise InsufficientDataError(config.min_bars, len(df))
        bars = frame_to_bars(df)

        result = BacktestEngine(strategy, params, capital).run(bars)
        report = analyze(result)
    except BacktestError as e:
        logger.error("Backtest failed: %s", e)
        return 1

    print_summary(config.symbol, result, report)
    if args.output:
        write_report(args.output, config.symbol, result, report)
        logger.info("Wrote results to %s", args.output)
    return 0


def run_strategies(args: argparse.Namespace) -> int:
    for template in list_strategies():
        defaults = ", ".join(f"{k}={v}" for k, v in template.default_params.items())
        print(f"{template.name} ({template.strategy.name.lower()})")
        print(f"  {template.description}")
        print(f"  defaults: {defaults}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Single-security strategy backtester")
    sub = parser.add_subparsers(dest="command", required=True)

    bt = sub.add_parser("backtest", help="Run a backtest over a price CSV")
    bt.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    bt.add_argument("--data", type=Path, default=None, help="Price CSV (overrides config)")
    bt.add_argument("--strategy", default=None, help="Strategy name or id (see `strategies`)")
    bt.add_argument("--capital", type=float, default=None, help="Initial capital")
    bt.add_argument("--param", action="append", metavar="KEY=VALUE", help="Strategy parameter override")
    bt.add_argument("--output", type=Path, default=None, help="Write results as JSON")
    bt.set_defaults(func=run_backtest)

    st = sub.add_parser("strategies", help="List available strategies")
    st.set_defaults(func=run_strategies)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
