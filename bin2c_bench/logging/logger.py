# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured JSON logger for bin2c-bench.

Every log entry is a single JSON line carrying a timestamp, the level, the
source module and the message, plus whatever the caller passed via `extra`.

Logs go to stderr, never stdout. The benchmarked pipelines inherit our stdout
and a caller may be redirecting it to capture generated C source; anything we
wrote there would end up inside that data.

The JSON structure looks like:
  {"ts": "2026-...", "level": "INFO", "module": "bin2c_bench.bench.controller", "msg": "run finished", ...}
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


class JsonFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    Each log entry contains four mandatory fields:
      ts     : ISO 8601 UTC timestamp
      level  : log level name
      module : the logger name (usually the Python module path)
      msg    : the formatted message string

    Extra keyword args passed to the log call get merged into the JSON object.
    This is how the harness attaches labels, elapsed times and exit codes.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "msg": record.getMessage(),
        }

        # Skip internal LogRecord attributes, keep only what the caller added.
        standard_attrs = {
            "name",
            "msg",
            "args",
            "created",
            "relativeCreated",
            "exc_info",
            "exc_text",
            "stack_info",
            "lineno",
            "funcName",
            "pathname",
            "filename",
            "module",
            "levelno",
            "levelname",
            "processName",
            "process",
            "threadName",
            "thread",
            "message",
            "msecs",
            "taskName",
        }
        for key, value in record.__dict__.items():
            if key not in standard_attrs and not key.startswith("_"):
                entry[key] = value

        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

_package_file_handler: Optional[logging.FileHandler] = None


def _resolve_log_level(level_name: str) -> int:
    """Turn a level name string into the corresponding logging constant."""
    upper = level_name.upper()
    if upper not in _VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level '{level_name}'. Must be one of: {', '.join(sorted(_VALID_LOG_LEVELS))}"
        )
    return getattr(logging, upper)


def get_logger(
    name: str,
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Create a structured JSON logger.

    This is the only sanctioned way to get a logger in bin2c-bench. Every
    module calls this once at the top and uses the returned instance.

    Args:
        name: Logger name, typically __name__ of the calling module.
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL.
        log_file: Optional path to a log file. If provided, logs go to both
                  stderr and the file.

    Returns:
        A configured logging.Logger that outputs structured JSON.
    """
    logger = logging.getLogger(name)
    level = _resolve_log_level(log_level)
    logger.setLevel(level)

    # Calling get_logger twice for the same name must not stack handlers.
    if logger.handlers:
        return logger

    formatter = JsonFormatter()

    stderr_handler = logging.StreamHandler(stream=sys.stderr)
    stderr_handler.setLevel(level)
    stderr_handler.setFormatter(formatter)
    logger.addHandler(stderr_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def configure_package_logging(log_level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """
    Reconfigure every bin2c_bench logger created so far.

    Module-level loggers are created at import time with the default level,
    before any config is loaded. Bootstrap calls this once the config is known
    so that `--log-level DEBUG` and `log_file` reach those loggers too.
    """
    global _package_file_handler

    level = _resolve_log_level(log_level)
    previous = _package_file_handler
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        _package_file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        _package_file_handler.setFormatter(JsonFormatter())

    for name in list(logging.Logger.manager.loggerDict):
        if not name.startswith("bin2c_bench"):
            continue
        existing = logging.getLogger(name)
        if not existing.handlers:
            continue
        if previous is not None and previous is not _package_file_handler:
            existing.removeHandler(previous)
        if log_file is not None and _package_file_handler not in existing.handlers:
            existing.addHandler(_package_file_handler)
        existing.setLevel(level)
        for handler in existing.handlers:
            handler.setLevel(level)

    # Only one log file at a time: the one from the latest config.
    if previous is not None and previous is not _package_file_handler:
        previous.close()
