"""Process-wide structured logger writing JSON lines to standard error."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from typing import Any

_LOGGER_NAME = "videosgo"

_LEVEL_NAMES = {
    logging.DEBUG: "debug",
    logging.INFO: "info",
    logging.WARNING: "warn",
    logging.ERROR: "error",
    logging.CRITICAL: "fatal",
}

_logger: logging.Logger | None = None


class _JSONFormatter(logging.Formatter):
    """Render a record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).astimezone()
        entry: dict[str, Any] = {
            "level": _LEVEL_NAMES.get(record.levelno, record.levelname.lower()),
            "timestamp": timestamp.isoformat(timespec="milliseconds"),
            "caller": f"{record.filename}:{record.lineno}",
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["stacktrace"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def configure() -> logging.Logger:
    """Create the shared logger at info level and make it the active one."""
    global _logger
    logger = logging.getLogger(_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_JSONFormatter())
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    _logger = logger
    return logger


def get_logger() -> logging.Logger | None:
    """Return the active logger, or None if ``configure`` has not run."""
    return _logger


def _log(level: int, template: str, args: tuple[Any, ...]) -> None:
    if _logger is not None:
        # stacklevel 3 points the caller field at the code calling debug()/info()/...
        _logger.log(level, template, *args, stacklevel=3)


def debug(template: str, *args: Any) -> None:
    """Log a formatted debug message."""
    _log(logging.DEBUG, template, args)


def info(template: str, *args: Any) -> None:
    """Log a formatted informational message."""
    _log(logging.INFO, template, args)


def warning(template: str, *args: Any) -> None:
    """Log a formatted warning message."""
    _log(logging.WARNING, template, args)


def error(template: str, *args: Any) -> None:
    """Log a formatted error message."""
    _log(logging.ERROR, template, args)


def fatal(template: str, *args: Any) -> None:
    """Log a formatted fatal message and terminate with exit status 1."""
    if _logger is None:
        return
    _log(logging.CRITICAL, template, args)
    for handler in _logger.handlers:
        handler.flush()
    raise SystemExit(1)