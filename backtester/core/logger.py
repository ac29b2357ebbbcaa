"""
Logging setup for the backtester CLI. Handlers go on the "backtester" logger;
the engine, ledger, data loader and CLI log through its children
("backtester.engine", "backtester.ledger", "backtester.data", "backtester.cli").
Console output goes to stderr so stdout carries only the results summary.
"""

from __future__ import annotations
import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: str = "INFO",
    log_dir: Optional[Path] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Attach a stderr handler and, when both log_dir and log_file are set, a file
    handler. Calling again replaces the previous handlers. Set level to DEBUG
    to see every simulated fill.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger("backtester")
    root.setLevel(log_level)
    root.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_dir and log_file:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_dir / log_file, encoding="utf-8")
        fh.setFormatter(formatter)
        root.addHandler(fh)

    return root
