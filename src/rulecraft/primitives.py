"""Constant rules shared by every schema."""

from __future__ import annotations

import re

from rulecraft import errors
from rulecraft.errors import RuleError
from rulecraft.rule import MISSING, Rule, is_number

# Digits, optionally followed by a single ".digits" group. No sign, no exponent.
_NUMERIC_TEXT = re.compile(r"[0-9]+(?:\.[0-9]+)?")


def _null(rule, value, context):
    if value is not None:
        return RuleError.create(errors.NULL, target=value, type=rule)
    return None


def _missing(rule, value, context):
    if value is not MISSING:
        return RuleError.create(errors.UNDEFINED, target=value, type=rule)
    return None


def _anything(value):
    return None


def _numeric(rule, value, context):
    if is_number(value):
        return None
    if isinstance(value, str) and _NUMERIC_TEXT.fullmatch(value):
        return None
    return RuleError.create(errors.NUMERIC, target=value, type=rule)


Null = Rule("Null", _null, contextual=True)
Missing = Rule("Missing", _missing, contextual=True)
Undefined = Missing
Any = Rule("Any", _anything)
Numeric = Rule("Numeric", _numeric, contextual=True)

__all__ = ["Any", "Missing", "Null", "Numeric", "Undefined"]
