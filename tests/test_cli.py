"""Smoke tests for the main.py CLI."""

import json
import logging
import math
from datetime import date, timedelta

import pytest

import main


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logging.getLogger("backtester").handlers.clear()


@pytest.fixture
def project(tmp_path):
    start = date(2023, 1, 2)
    lines = ["Date,Open,High,Low,Close,Adj Close,Volume"]
    for i in range(200):
        c = 100 + 12 * math.sin(i / 7) + 0.05 * i
        lines.append(f"{start + timedelta(days=i)},{c:.4f},{c + 1:.4f},{c - 1:.4f},{c:.4f},{c:.4f},1000")
    csv_path = tmp_path / "prices.csv"
    csv_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "backtest:\n"
        "  symbol: TEST\n"
        "  min_bars: 100\n"
        "logging:\n"
        "  level: WARNING\n",
        encoding="utf-8",
    )
    return tmp_path, csv_path, config_path


def test_backtest_writes_json(project, capsys):
    tmp_path, csv_path, config_path = project
    out = tmp_path / "out" / "result.json"
    code = main.main([
        "backtest", "--config", str(config_path), "--data", str(csv_path),
        "--strategy", "rsi_threshold", "--param", "rsi_period=10", "--output", str(out),
    ])
    assert code == 0
    assert "Backtest Results: TEST" in capsys.readouterr().out
    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["symbol"] == "TEST"
    assert payload["results"]["strategy"] == "RSI Oversold/Overbought"
    assert payload["results"]["params"]["rsi_period"] == 10
    assert payload["results"]["final_quantity"] == 0
    assert len(payload["results"]["equity_curve"]) == 199
    assert "sharpe_ratio" in payload["performance_metrics"]
    assert payload["monthly_returns"][0]["month"] == "2023-01"


def test_backtest_enforces_min_bars(project):
    tmp_path, csv_path, config_path = project
    config_path.write_text("backtest:\n  min_bars: 500\nlogging:\n  level: WARNING\n", encoding="utf-8")
    assert main.main(["backtest", "--config", str(config_path), "--data", str(csv_path)]) == 1


def test_backtest_unknown_strategy(project):
    _, csv_path, config_path = project
    assert main.main([
        "backtest", "--config", str(config_path), "--data", str(csv_path), "--strategy", "Coin Flip",
    ]) == 1


def test_bad_param_syntax(project):
    _, csv_path, config_path = project
    assert main.main([
        "backtest", "--config", str(config_path), "--data", str(csv_path), "--param", "rsi_period",
    ]) == 1


def test_backtest_rejects_zero_capital(project):
    _, csv_path, config_path = project
    assert main.main([
        "backtest", "--config", str(config_path), "--data", str(csv_path), "--capital", "0",
    ]) == 1


def test_strategies_lists_catalog(capsys):
    assert main.main(["strategies"]) == 0
    out = capsys.readouterr().out
    assert "SMA Golden Cross" in out
    assert "Multi-Indicator Combo" in out


def test_parse_param_overrides():
    assert main.parse_param_overrides(["a=1", " b = 2 "]) == {"a": "1", "b": "2"}
    assert main.parse_param_overrides(None) == {}


def test_setup_logging_file_handler(tmp_path):
    from backtester.core.logger import setup_logging

    log = setup_logging("debug", tmp_path / "logs", "backtest.log")
    assert log.level == logging.DEBUG
    assert len(log.handlers) == 2
    logging.getLogger("backtester.ledger").debug("BUY 10 @ 100.00")
    for handler in log.handlers:
        handler.flush()
    assert "backtester.ledger | BUY 10 @ 100.00" in (tmp_path / "logs" / "backtest.log").read_text(encoding="utf-8")
    assert len(setup_logging("INFO").handlers) == 1
