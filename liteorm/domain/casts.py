"""
Cast directives applied to raw stored values on every read path.

A directive string such as ``"int"`` or ``"datetime:%d.%m.%Y %H:%M"`` is parsed
once into a `CastDirective` and then applied per value. Casting never raises:
values that cannot be converted are returned as stored.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError

DEFAULT_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_FALSE_STRINGS = frozenset({"", "0", "false"})

# Plain numbers are not timestamps, though pydantic would read them as epoch seconds.
_NUMERIC = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*$")

_datetime_adapter: TypeAdapter[datetime] = TypeAdapter(datetime)


class CastKind(str, Enum):
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    STRING = "string"
    ARRAY = "array"
    JSON = "json"
    NULL = "null"
    DATETIME = "datetime"


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse a stored timestamp, returning None when it is not one."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    if isinstance(value, (bool, int, float, Decimal)):
        return None
    if isinstance(value, str) and _NUMERIC.match(value):
        return None
    try:
        return _datetime_adapter.validate_python(value)
    except ValidationError:
        pass
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


@dataclass(frozen=True)
class CastDirective:
    """A parsed cast directive; `format` is only used by ``datetime``."""

    kind: CastKind
    format: Optional[str] = None

    @classmethod
    def parse(cls, spec: str) -> "CastDirective":
        """
        Parse a directive string.

        Raises
        ------
        ValueError
            If the directive name is not one of the supported kinds.
        """
        name, _, fmt = spec.strip().partition(":")
        kind = CastKind(name.strip().lower())
        if kind is CastKind.DATETIME:
            return cls(kind, fmt or DEFAULT_DATETIME_FORMAT)
        return cls(kind)

    def __str__(self) -> str:
        if self.kind is CastKind.DATETIME:
            return f"{self.kind.value}:{self.format}"
        return self.kind.value

    def apply(self, value: Any) -> Any:
        if self.kind is CastKind.NULL:
            return None
        if value is None:
            return None
        return _CASTERS[self.kind](self, value)

    def _to_int(self, value: Any) -> Any:
        try:
            return int(value)
        except (TypeError, ValueError):
            pass
        try:
            return int(float(value))
        except (TypeError, ValueError, OverflowError):
            return value

    def _to_float(self, value: Any) -> Any:
        try:
            return float(value)
        except (TypeError, ValueError):
            return value

    def _to_bool(self, value: Any) -> bool:
        if isinstance(value, bytes):
            value = value.decode("utf-8", errors="replace")
        if isinstance(value, str):
            return value.strip().lower() not in _FALSE_STRINGS
        return bool(value)

    def _to_string(self, value: Any) -> str:
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        return str(value)

    def _to_json(self, value: Any) -> Any:
        raw = value.decode("utf-8", errors="replace") if isinstance(value, bytes) else value
        if not isinstance(raw, str):
            return value
        try:
            return json.loads(raw)
        except ValueError:
            return value

    def _to_datetime(self, value: Any) -> Any:
        parsed = parse_datetime(value)
        if parsed is None:
            return value
        return parsed.strftime(self.format or DEFAULT_DATETIME_FORMAT)


_CASTERS = {
    CastKind.INT: CastDirective._to_int,
    CastKind.FLOAT: CastDirective._to_float,
    CastKind.BOOL: CastDirective._to_bool,
    CastKind.STRING: CastDirective._to_string,
    CastKind.ARRAY: CastDirective._to_json,
    CastKind.JSON: CastDirective._to_json,
    CastKind.DATETIME: CastDirective._to_datetime,
}


__all__ = ["CastDirective", "CastKind", "DEFAULT_DATETIME_FORMAT", "parse_datetime"]
