"""
Load configuration from config.yaml and .env. Environment variables win over YAML.
"""

from __future__ import annotations
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from backtester.core.errors import ConfigError


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def load_dotenv_if_exists(project_root: Optional[Path] = None) -> None:
    """Load .env from project root if present."""
    path = (project_root or _project_root()) / ".env"
    if path.exists():
        load_dotenv(path)


def load_config(config_path: Optional[Path] = None, project_root: Optional[Path] = None) -> "Config":
    """Load config.yaml and overlay with env. Returns Config."""
    load_dotenv_if_exists(project_root)
    root = project_root or _project_root()
    path = Path(config_path) if config_path else root / "config.yaml"
    data: dict[str, Any] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    elif config_path:
        raise ConfigError(f"Config file not found: {path}")
    if not isinstance(data, dict):
        raise ConfigError(f"Config root must be a mapping: {path}")

    def env(key: str, default: Any = "") -> str:
        return os.getenv(key, "" if default is None else str(default)).strip()

    def env_int(key: str, default: int) -> int:
        raw = env(key, default)
        try:
            return int(raw)
        except ValueError:
            raise ConfigError(f"{key} must be an integer, got {raw!r}") from None

    def env_float(key: str, default: float) -> float:
        raw = env(key, default)
        try:
            return float(raw)
        except ValueError:
            raise ConfigError(f"{key} must be a number, got {raw!r}") from None

    backtest = data.get("backtest") or {}
    logging_cfg = data.get("logging") or {}
    strategy_params = data.get("strategy_params") or {}
    if not isinstance(strategy_params, dict):
        raise ConfigError("strategy_params must be a mapping")

    data_path = env("BACKTEST_DATA_PATH", backtest.get("data_path"))
    log_dir = env("LOG_DIR", logging_cfg.get("dir"))

    return Config(
        symbol=env("BACKTEST_SYMBOL", backtest.get("symbol", "")),
        strategy=env("BACKTEST_STRATEGY", backtest.get("strategy", "SMA Golden Cross")),
        initial_capital=env_float("INITIAL_CAPITAL", backtest.get("initial_capital", 1_000_000.0)),
        data_path=Path(data_path) if data_path else None,
        start=env("BACKTEST_START", backtest.get("start")) or None,
        end=env("BACKTEST_END", backtest.get("end")) or None,
        min_bars=env_int("MIN_BARS", backtest.get("min_bars", 100)),
        strategy_params=dict(strategy_params),
        log_level=env("LOG_LEVEL", logging_cfg.get("level", "INFO")),
        log_dir=Path(log_dir) if log_dir else None,
        log_file=logging_cfg.get("file", "backtester.log"),
    )


class Config:
    """Run configuration. Strategy parameter overrides stay a plain mapping until resolved."""

    def __init__(
        self,
        symbol: str = "",
        strategy: str = "SMA Golden Cross",
        initial_capital: float = 1_000_000.0,
        data_path: Optional[Path] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
        min_bars: int = 100,
        strategy_params: Optional[dict] = None,
        log_level: str = "INFO",
        log_dir: Optional[Path] = None,
        log_file: str = "backtester.log",
    ):
        if initial_capital <= 0:
            raise ConfigError(f"initial_capital must be positive, got {initial_capital}")
        self.symbol = symbol
        self.strategy = strategy
        self.initial_capital = initial_capital
        self.data_path = data_path
        self.start = start
        self.end = end
        self.min_bars = min_bars
        self.strategy_params = strategy_params or {}
        self.log_level = log_level
        self.log_dir = log_dir
        self.log_file = log_file
