"""
Failure values and internal exceptions for liteorm.

The connection manager and the ORM never let engine exceptions escape. They
log the engine error and return one of the failure values below instead. All
failure values are falsy, so ``if result:`` reads as "the operation succeeded".

Exceptions defined here are raised inside the package and caught at the ORM
boundary, except `UnknownRuleError`, which surfaces from strict validation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

SUPPORT_HINT = "Please try again and if the problem persists you can contact the administrator."


@dataclass(frozen=True)
class ConnectionFailure:
    """The database file could not be prepared or opened."""

    path: str
    message: str

    def __bool__(self) -> bool:
        return False


@dataclass(frozen=True)
class StorageFailure:
    """A statement against an existing connection failed."""

    operation: str
    table: str
    message: str

    def __bool__(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"{self.message} {SUPPORT_HINT}"


@dataclass(frozen=True)
class NotFound:
    """A well-formed query matched no rows."""

    table: str
    lookup: Dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return False


# field name -> failed rule tokens, in declaration order; empty means valid
ValidationFailure = Dict[str, List[str]]


class DataAccessError(Exception):
    """Base class for exceptions raised inside liteorm."""


class InvalidIdentifierError(DataAccessError, ValueError):
    """A table, column or operator is not safe to interpolate into SQL."""


class ConnectionUnavailableError(DataAccessError):
    """The connection manager holds no open handle."""


class ValueOutOfRangeError(DataAccessError, ValueError):
    """An integer does not fit SQLite's signed 64-bit INTEGER."""


class UnknownRuleError(DataAccessError, ValueError):
    """A validation rule token is not recognized (strict mode only)."""


def is_failure(value: Any) -> bool:
    """True for any of the returned failure values."""
    return isinstance(value, (ConnectionFailure, StorageFailure, NotFound))


__all__ = [
    "SUPPORT_HINT",
    "ConnectionFailure",
    "ConnectionUnavailableError",
    "DataAccessError",
    "InvalidIdentifierError",
    "NotFound",
    "StorageFailure",
    "UnknownRuleError",
    "ValidationFailure",
    "ValueOutOfRangeError",
    "is_failure",
]
