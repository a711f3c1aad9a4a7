"""
Declarative payload validation.

Usage:
    from liteorm.validation import Validator

    validator = Validator()
    failure = validator.validate({"name": ["required", "string", "max:255"]}, payload)
    if failure:
        return validator.errors(failure)

`validate` returns ``{field: [failed rule tokens]}``; an empty mapping means the
payload is valid. Failures are expected, user-correctable results and are only
logged at DEBUG level.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from liteorm.errors import ValidationFailure
from liteorm.utils.logging import get_logger
from liteorm.validation.rules import (
    InSet,
    MaxLength,
    MinLength,
    Nullable,
    Rule,
    Sometimes,
    is_blank,
    parse_rule,
)

log = get_logger(__name__)

RuleSet = Mapping[str, Sequence[str]]
CompiledRules = Tuple[Tuple[str, Tuple[Rule, ...]], ...]

_MESSAGES = {
    "required": "{field} is required.",
    "string": "{field} must be a string.",
    "integer": "{field} must be an integer.",
    "boolean": "{field} must be true or false.",
    "numeric": "{field} must be a number.",
    "email": "{field} must be a valid email address.",
    "date": "{field} must be a valid date.",
    "url": "{field} must be a valid URL.",
}


def _label(field: str) -> str:
    return field[:1].upper() + field[1:]


@lru_cache(maxsize=256)
def _compile(frozen: Tuple[Tuple[str, Tuple[str, ...]], ...], strict: bool) -> CompiledRules:
    return tuple(
        (field, tuple(parse_rule(token, strict) for token in tokens)) for field, tokens in frozen
    )


class Validator:
    """
    Rule-driven validator.

    Parameters
    ----------
    strict : bool
        Raise `UnknownRuleError` for unrecognized rule tokens instead of
        ignoring them.
    """

    def __init__(self, strict: bool = False) -> None:
        self.strict = strict

    def compile(self, rules: RuleSet) -> CompiledRules:
        """Parse a rule set once; identical rule sets share the parsed result."""
        frozen = tuple((field, tuple(tokens)) for field, tokens in rules.items())
        return _compile(frozen, self.strict)

    def validate(self, rules: RuleSet, payload: Mapping[str, Any]) -> ValidationFailure:
        errors: ValidationFailure = {}

        for field, field_rules in self.compile(rules):
            present = field in payload
            if not present and any(isinstance(rule, Sometimes) for rule in field_rules):
                continue

            value = payload.get(field)
            for rule in field_rules:
                if isinstance(rule, Sometimes):
                    continue
                if isinstance(rule, Nullable):
                    if is_blank(value):
                        break
                    continue
                if not rule.check(value):
                    errors.setdefault(field, []).append(rule.token)

        if errors:
            log.debug("Validation failed", extra={"fields": sorted(errors)})
        return errors

    def messages(self, field: str, rule: str) -> str:
        """Human-readable sentence for one failed rule."""
        parsed = parse_rule(rule)
        label = _label(field)
        if isinstance(parsed, MaxLength):
            return f"{label} must not be greater than {parsed.limit} characters."
        if isinstance(parsed, MinLength):
            return f"{label} must be at least {parsed.limit} characters."
        if isinstance(parsed, InSet):
            return f"{label} must be one of the following values: {','.join(parsed.allowed)}."
        template = _MESSAGES.get(parsed.token)
        if template is None:
            return f"Validation error on {field} for rule {rule}."
        return template.format(field=label)

    def errors(self, failure: ValidationFailure) -> Dict[str, List[str]]:
        """Render every failed rule of a validation result as messages."""
        return {
            field: [self.messages(field, rule) for rule in rules] for field, rules in failure.items()
        }


__all__ = ["CompiledRules", "RuleSet", "Validator"]
