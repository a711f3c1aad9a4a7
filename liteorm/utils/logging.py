"""
Structured logging utilities for liteorm.

Centralizes logging configuration so the connection manager, ORM and CLI share
one setup. Standard library logging with a human-readable formatter by default
and an optional JSON formatter for structured logs.

Besides the stock levels, the NOTICE, ALERT and EMERGENCY severities are
registered so that callers can use the full eight-level set.

Usage:
    from liteorm.utils.logging import LogLevel, LogSystem, configure_logging

    configure_logging(level="INFO", json_logs=False)
    log = LogSystem(log_dir="storage")
    log.handle(LogLevel.ERROR, {"message": "boom", "table": "users"}, "db_sqlite_orm_log")
"""

from __future__ import annotations

import json
import logging
import logging.config
import threading
from enum import Enum
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

NOTICE = 25
ALERT = 60
EMERGENCY = 70

logging.addLevelName(NOTICE, "NOTICE")
logging.addLevelName(ALERT, "ALERT")
logging.addLevelName(EMERGENCY, "EMERGENCY")

ROOT_LOGGER_NAME = "liteorm"
DEFAULT_CHANNEL = "log"

# Attributes every LogRecord carries; anything else came in through `extra`.
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys() | {"message", "asctime"}
)


class LogLevel(str, Enum):
    """Severity levels accepted by the logging collaborator."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    NOTICE = "NOTICE"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"
    ALERT = "ALERT"
    EMERGENCY = "EMERGENCY"

    @property
    def number(self) -> int:
        return logging.getLevelName(self.value)


def _json_formatter(record: logging.LogRecord) -> str:
    """Render a log record as JSON string."""
    payload: Dict[str, Any] = {
        "timestamp": logging.Formatter().formatTime(record, "%Y-%m-%d %H:%M:%S"),
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
    }
    if record.exc_info:
        payload["exc_info"] = logging.Formatter().formatException(record.exc_info)
    if record.stack_info:
        payload["stack_info"] = record.stack_info
    for key, value in vars(record).items():
        if key in _STANDARD_ATTRS or key == "extra":
            continue
        payload[key] = value
    if hasattr(record, "extra") and isinstance(record.extra, dict):
        payload.update(record.extra)
    return json.dumps(payload, default=str, ensure_ascii=False)


class JsonFormatter(logging.Formatter):
    """Minimal JSON formatter for structured logs."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        return _json_formatter(record)


def configure_logging(
    level: str = "INFO",
    json_logs: bool = False,
    force: bool = True,
) -> None:
    """
    Configure root logging.

    Parameters
    ----------
    level : str
        Logging level name (e.g., "DEBUG", "NOTICE", "WARNING").
    json_logs : bool
        Whether to emit logs as JSON. If False, uses a concise human formatter.
    force : bool
        Whether to override existing logging configuration (recommended in CLI apps).
    """
    if not force and logging.getLogger().handlers:
        return

    formatter_name = "json" if json_logs else "console"

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
                "json": {
                    "()": JsonFormatter,
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": formatter_name,
                    "level": level.upper(),
                }
            },
            "root": {
                "handlers": ["default"],
                "level": level.upper(),
            },
        }
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger with the given name. If name is None, returns the root logger.
    """
    return logging.getLogger(name)


class LogSystem:
    """
    Channel-based logging collaborator.

    Each channel maps to the logger ``liteorm.<channel>``, so entries reach
    whatever handlers `configure_logging` installed. When a log directory is
    configured, the instance also writes every entry, whatever its level, as a
    JSON line to ``<log_dir>/<channel>.log``, rotated at midnight; the
    directory and file are created on first use.

    File handlers belong to the instance, not to the shared loggers: two
    systems with different directories never write into each other's files.
    Call `close` to release them.
    """

    def __init__(self, log_dir: Union[str, Path, None] = None, backup_count: int = 30) -> None:
        self.log_dir = Path(log_dir) if log_dir is not None else None
        self.backup_count = backup_count
        self._files: Dict[str, TimedRotatingFileHandler] = {}
        self._lock = threading.Lock()

    def channel(self, name: Optional[str] = None) -> logging.Logger:
        """Return the logger for a channel."""
        return get_logger(f"{ROOT_LOGGER_NAME}.{name or DEFAULT_CHANNEL}")

    def handle(
        self,
        level: Union[LogLevel, str],
        context: Mapping[str, Any],
        channel: Optional[str] = None,
    ) -> None:
        """
        Record one entry.

        Parameters
        ----------
        level : LogLevel | str
            One of the eight supported severities.
        context : Mapping[str, Any]
            JSON-serializable payload; its ``message`` key becomes the log message.
        channel : str, optional
            Channel (log file stem). Defaults to ``log``.
        """
        severity = LogLevel(level.upper() if isinstance(level, str) else level)
        fields = dict(context)
        message = str(fields.pop("message", ""))
        name = channel or DEFAULT_CHANNEL
        logger = self.channel(name)
        record = logger.makeRecord(
            logger.name,
            severity.number,
            "(unknown file)",
            0,
            message,
            (),
            None,
            extra={"context": fields},
        )
        if logger.isEnabledFor(severity.number):
            logger.handle(record)

        handler = self._file_handler(name)
        if handler is not None:
            handler.handle(record)

    def close(self) -> None:
        """Close the file handlers opened by this instance."""
        with self._lock:
            handlers, self._files = list(self._files.values()), {}
        for handler in handlers:
            handler.close()

    def _file_handler(self, channel: str) -> Optional[TimedRotatingFileHandler]:
        if self.log_dir is None:
            return None
        with self._lock:
            handler = self._files.get(channel)
            if handler is None:
                self.log_dir.mkdir(parents=True, exist_ok=True)
                handler = TimedRotatingFileHandler(
                    self.log_dir / f"{channel}.log",
                    when="midnight",
                    backupCount=self.backup_count,
                    encoding="utf-8",
                )
                handler.setFormatter(JsonFormatter())
                self._files[channel] = handler
            return handler


__all__ = [
    "ALERT",
    "EMERGENCY",
    "NOTICE",
    "JsonFormatter",
    "LogLevel",
    "LogSystem",
    "configure_logging",
    "get_logger",
]
