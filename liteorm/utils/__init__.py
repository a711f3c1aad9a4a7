"""
Utilities package for liteorm.

Exports the shared logging helpers. Keep this package lightweight and free of
domain-specific logic.
"""

from liteorm.utils.logging import LogLevel, LogSystem, configure_logging, get_logger

__all__ = [
    "LogLevel",
    "LogSystem",
    "configure_logging",
    "get_logger",
]
