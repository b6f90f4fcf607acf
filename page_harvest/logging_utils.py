"""
Logging setup for harvest runs.

All package loggers hang off the "page_harvest" logger. A run gets a rich
console handler that shares the run's Console with the summary output, and
optionally a log file written next to the artifacts in the results
directory. Components emit structured events with log_event(); the JSONL
file format keeps the extra fields as top-level keys.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

from .config import AppConfig


LOGGER_NAME = "page_harvest"

# HTTP client loggers that repeat every request at INFO
_CHATTY_LOGGERS = ("httpx", "httpcore")


def setup_logging(cfg: AppConfig, console: Console | None = None) -> logging.Logger:
    """Configure the package logger for one run.

    Calling it again replaces the handlers from the previous call.

    Args:
        cfg: Application config; logging options come from cfg.logging and
            the log file goes to cfg.output.path
        console: Console used for log output (a stderr console if None)

    Returns:
        The configured package logger
    """
    level = _level_from_string(cfg.logging.level)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers = []
    logger.propagate = False

    if cfg.logging.console:
        console_handler = RichHandler(
            console=console or Console(stderr=True),
            rich_tracebacks=True,
            show_time=False,
            show_level=True,
            markup=False,
        )
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(console_handler)

    if cfg.logging.file:
        path = log_path(cfg)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(_build_file_formatter(cfg.logging.format))
        logger.addHandler(file_handler)

    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(level if level <= logging.DEBUG else logging.WARNING)

    return logger


def log_path(cfg: AppConfig) -> Path:
    """Return where the run log is written: <results_dir>/<logging.filename>."""
    return cfg.output.path / cfg.logging.filename


def log_event(
    logger: logging.Logger | None,
    message: str,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    if logger is None:
        return
    logger.log(level, message, extra=fields)


class JsonlFormatter(logging.Formatter):
    """One JSON object per line; log_event fields become top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_extract_extras(record))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


# attributes every LogRecord carries; anything else came in through extra=
_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def _extract_extras(record: logging.LogRecord) -> dict[str, Any]:
    return {key: value for key, value in vars(record).items() if key not in _RESERVED}


def _build_file_formatter(fmt: str) -> logging.Formatter:
    if fmt == "jsonl":
        return JsonlFormatter()
    return logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")


def _level_from_string(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)
