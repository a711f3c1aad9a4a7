"""
Validation package for liteorm.

Exports the rule-driven `Validator` and the parsed rule variants.
"""

from liteorm.validation.rules import Rule, parse_rule
from liteorm.validation.validator import RuleSet, Validator

__all__ = [
    "Rule",
    "RuleSet",
    "Validator",
    "parse_rule",
]
