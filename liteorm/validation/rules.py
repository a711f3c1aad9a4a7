"""
Validation rule variants.

Each rule token (``required``, ``max:255``, ``in:a,b`` ...) is parsed once into
one of the frozen dataclasses below. `check` returns True when the value
passes. ``sometimes`` and ``null`` are control rules interpreted by the
validator rather than checks.
"""

from __future__ import annotations

import abc
import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Tuple

from pydantic import AnyUrl, TypeAdapter, ValidationError

from liteorm.domain.casts import parse_datetime
from liteorm.errors import UnknownRuleError

_NUMERIC_STRING = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*$")

_EMAIL = re.compile(
    r"^(?!\.)(?!.*\.\.)[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]{1,64}(?<!\.)"
    r"@(?=.{1,253}$)"
    r"(?:[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?\.)+"
    r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?$"
)

_url_adapter: TypeAdapter[AnyUrl] = TypeAdapter(AnyUrl)


def is_blank(value: Any) -> bool:
    return value is None or value == ""


def is_numeric(value: Any) -> bool:
    """Numbers and numeric strings; booleans are not numeric."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float, Decimal)):
        return True
    if isinstance(value, str):
        return bool(_NUMERIC_STRING.match(value))
    return False


class Rule(abc.ABC):
    """A parsed rule; `token` is the original rule text."""

    token: str

    @abc.abstractmethod
    def check(self, value: Any) -> bool:  # pragma: no cover - interface only
        raise NotImplementedError


@dataclass(frozen=True)
class Sometimes(Rule):
    token: str = "sometimes"

    def check(self, value: Any) -> bool:
        return True


@dataclass(frozen=True)
class Nullable(Rule):
    token: str = "null"

    def check(self, value: Any) -> bool:
        return True


@dataclass(frozen=True)
class Required(Rule):
    token: str = "required"

    def check(self, value: Any) -> bool:
        return not is_blank(value)


@dataclass(frozen=True)
class String(Rule):
    token: str = "string"

    def check(self, value: Any) -> bool:
        return value is None or isinstance(value, str)


@dataclass(frozen=True)
class MaxLength(Rule):
    limit: int
    token: str = "max"

    def check(self, value: Any) -> bool:
        if value is None or not (isinstance(value, str) or is_numeric(value)):
            return True
        return len(str(value)) <= self.limit


@dataclass(frozen=True)
class MinLength(Rule):
    limit: int
    token: str = "min"

    def check(self, value: Any) -> bool:
        if value is None or not (isinstance(value, str) or is_numeric(value)):
            return True
        return len(str(value)) >= self.limit


@dataclass(frozen=True)
class Integer(Rule):
    token: str = "integer"

    def check(self, value: Any) -> bool:
        if value is None:
            return True
        if not is_numeric(value):
            return False
        number = float(value)
        return number.is_integer()


@dataclass(frozen=True)
class Boolean(Rule):
    token: str = "boolean"

    def check(self, value: Any) -> bool:
        if value is None or isinstance(value, bool):
            return True
        if isinstance(value, int):
            return value in (0, 1)
        return isinstance(value, str) and value in ("0", "1")


@dataclass(frozen=True)
class Numeric(Rule):
    token: str = "numeric"

    def check(self, value: Any) -> bool:
        return value is None or is_numeric(value)


@dataclass(frozen=True)
class Email(Rule):
    token: str = "email"

    def check(self, value: Any) -> bool:
        return value is None or bool(_EMAIL.match(str(value)))


@dataclass(frozen=True)
class Date(Rule):
    token: str = "date"

    def check(self, value: Any) -> bool:
        if value is None or isinstance(value, date):
            return True
        if isinstance(value, bool):
            return False
        return parse_datetime(value) is not None


@dataclass(frozen=True)
class InSet(Rule):
    allowed: Tuple[str, ...]
    token: str = "in"

    def check(self, value: Any) -> bool:
        return value is None or value in self.allowed


@dataclass(frozen=True)
class Url(Rule):
    token: str = "url"

    def check(self, value: Any) -> bool:
        if value is None:
            return True
        if not isinstance(value, str):
            return False
        try:
            _url_adapter.validate_python(value)
        except ValidationError:
            return False
        return True


@dataclass(frozen=True)
class Unknown(Rule):
    """An unrecognized token; it always passes."""

    token: str

    def check(self, value: Any) -> bool:
        return True


_SIMPLE = {
    "sometimes": Sometimes,
    "null": Nullable,
    "required": Required,
    "string": String,
    "integer": Integer,
    "boolean": Boolean,
    "numeric": Numeric,
    "email": Email,
    "date": Date,
    "url": Url,
}


def parse_rule(token: str, strict: bool = False) -> Rule:
    """
    Parse one rule token.

    Unrecognized tokens, including ``max``/``min`` with a non-integer
    parameter, become `Unknown` unless `strict` is set.

    Raises
    ------
    UnknownRuleError
        In strict mode, for tokens that are not recognized.
    """
    token = token.strip()
    if token in _SIMPLE:
        return _SIMPLE[token]()

    name, sep, param = token.partition(":")
    if sep:
        if name in ("max", "min"):
            try:
                limit = int(param)
            except ValueError:
                limit = None
            if limit is not None:
                cls = MaxLength if name == "max" else MinLength
                return cls(limit=limit, token=token)
        elif name == "in":
            return InSet(allowed=tuple(param.split(",")), token=token)

    if strict:
        raise UnknownRuleError(f"unknown validation rule {token!r}")
    return Unknown(token=token)


__all__ = [
    "Boolean",
    "Date",
    "Email",
    "InSet",
    "Integer",
    "MaxLength",
    "MinLength",
    "Nullable",
    "Numeric",
    "Required",
    "Rule",
    "Sometimes",
    "String",
    "Unknown",
    "Url",
    "is_blank",
    "is_numeric",
    "parse_rule",
]
