"""
SQL fragment helpers: identifier quoting, operator allow-list and bind typing.

Table and column names are interpolated into statements, so every name goes
through `quote_identifier` first. Values are always bound as parameters; their
storage class is decided once per bind by `bind_value`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional, Sequence, Tuple

from liteorm.errors import InvalidIdentifierError, ValueOutOfRangeError

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

SQLITE_INT_MIN = -(2**63)
SQLITE_INT_MAX = 2**63 - 1

ALLOWED_OPERATORS = frozenset(
    {"=", "!=", "<>", "<", "<=", ">", ">=", "LIKE", "NOT LIKE", "IS", "IS NOT"}
)


class BindType(str, Enum):
    INTEGER = "INTEGER"
    REAL = "REAL"
    TEXT = "TEXT"
    BLOB = "BLOB"
    NULL = "NULL"


@dataclass(frozen=True)
class BoundValue:
    """A parameter value tagged with the storage class it is bound as."""

    kind: BindType
    value: Any


def quote_identifier(name: str) -> str:
    """
    Validate and double-quote a table or column name.

    Raises
    ------
    InvalidIdentifierError
        If `name` is not a plain identifier.
    """
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise InvalidIdentifierError(f"invalid identifier {name!r}")
    return f'"{name}"'


def normalize_operator(operator: str) -> str:
    """Upper-case and allow-list a comparison operator."""
    normalized = " ".join(str(operator).split()).upper()
    if normalized not in ALLOWED_OPERATORS:
        raise InvalidIdentifierError(f"unsupported operator {operator!r}")
    return normalized


def split_condition(condition: Sequence[Any]) -> Tuple[str, str, Any]:
    """Expand a ``(column, value)`` or ``(column, operator, value)`` condition."""
    if len(condition) == 2:
        column, value = condition
        return column, "=", value
    if len(condition) == 3:
        column, operator, value = condition
        return column, normalize_operator(operator), value
    raise InvalidIdentifierError(f"malformed condition {condition!r}")


def _in_range(number: int) -> int:
    if not SQLITE_INT_MIN <= number <= SQLITE_INT_MAX:
        raise ValueOutOfRangeError(f"integer {number} is outside the SQLite INTEGER range")
    return number


def bind_value(value: Any, declared_type: Optional[str] = None) -> BoundValue:
    """
    Choose the bind type for a value.

    The value's own type decides first. A string bound against a column whose
    declared type contains ``INT`` is bound as an integer when it parses as one.

    Raises
    ------
    ValueOutOfRangeError
        If an integer falls outside SQLite's signed 64-bit range.
    """
    if value is None:
        return BoundValue(BindType.NULL, None)
    if isinstance(value, bool):
        return BoundValue(BindType.INTEGER, int(value))
    if isinstance(value, int):
        return BoundValue(BindType.INTEGER, _in_range(value))
    if isinstance(value, float):
        return BoundValue(BindType.REAL, value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return BoundValue(BindType.BLOB, bytes(value))
    if declared_type and "INT" in declared_type.upper():
        try:
            number = int(str(value).strip())
        except ValueError:
            pass
        else:
            return BoundValue(BindType.INTEGER, _in_range(number))
    return BoundValue(BindType.TEXT, str(value))


def placeholders(count: int) -> str:
    """``?, ?, ?`` for `count` parameters."""
    return ", ".join("?" for _ in range(count))


def require_columns(columns: Iterable[str], known: Iterable[str], table: str) -> None:
    """Reject column names that the introspected schema does not contain."""
    known_set = set(known)
    unknown = [column for column in columns if column not in known_set]
    if unknown:
        raise InvalidIdentifierError(
            f"unknown column(s) {', '.join(map(repr, unknown))} for table {table!r}"
        )


__all__ = [
    "ALLOWED_OPERATORS",
    "SQLITE_INT_MAX",
    "SQLITE_INT_MIN",
    "BindType",
    "BoundValue",
    "bind_value",
    "normalize_operator",
    "placeholders",
    "quote_identifier",
    "require_columns",
    "split_condition",
]
