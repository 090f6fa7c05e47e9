"""Logging configuration for Hookflow.

All modules obtain their logger through :func:`get_logger` so that records
end up under the ``hookflow`` namespace and pick up the current analysis
context (component, file, processor) set with :class:`LogContext`.

Usage:
    from hookflow.logging_config import get_logger, LogContext

    logger = get_logger(__name__)

    with LogContext(operation="analyze_component", file="Counter.tsx"):
        logger.info("Analyzing component")
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

ROOT_LOGGER_NAME = "hookflow"

_log_context: ContextVar[Dict[str, Any]] = ContextVar("hookflow_log_context", default={})


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the hookflow namespace.

    Args:
        name: Module name, usually ``__name__``

    Returns:
        Configured logger instance
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def set_context(**fields: Any) -> None:
    """Add fields to the logging context for the current execution context."""
    current = dict(_log_context.get())
    current.update(fields)
    _log_context.set(current)


def clear_context() -> None:
    """Remove all fields from the logging context."""
    _log_context.set({})


def get_context() -> Dict[str, Any]:
    """Return a copy of the current logging context."""
    return dict(_log_context.get())


class LogContext:
    """Context manager that scopes logging context fields.

    Example:
        >>> with LogContext(operation="classify", hook="useForm"):
        ...     logger.debug("classifying")
    """

    def __init__(self, **fields: Any):
        self.fields = fields
        self._token = None

    def __enter__(self) -> "LogContext":
        current = dict(_log_context.get())
        current.update(self.fields)
        self._token = _log_context.set(current)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None
        return False


class ContextFilter(logging.Filter):
    """Attach the current logging context to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.context = get_context()
        return True


class HumanFormatter(logging.Formatter):
    """Readable single-line formatter with trailing context fields."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = getattr(record, "context", None)
        if context:
            extras = " ".join(f"{key}={value}" for key, value in context.items())
            message = f"{message} [{extras}]"
        return message


class JSONFormatter(logging.Formatter):
    """Structured JSON formatter, one object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = getattr(record, "context", None)
        if context:
            payload.update(context)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """Configure the hookflow root logger.

    Calling this more than once replaces the previously installed handlers.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Emit JSON lines instead of human readable output
        log_file: Optional file path; logs go to stderr when omitted

    Returns:
        The configured root logger
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)

    handler.setFormatter(JSONFormatter() if json_output else HumanFormatter())
    handler.addFilter(ContextFilter())
    root.addHandler(handler)
    root.propagate = False
    return root
