"""Minimal structural matcher used to lift plain values into checks.

``Type(*patterns)`` compiles each pattern once. Supported patterns:

- ``Rule`` / ``Type``: delegated to
- a class: ``isinstance`` (bools do not count as ints)
- ``None`` / ``MISSING``: identity
- ``dict``: every declared key is checked through the rule protocol; extra
  keys are allowed. Patches proposed by the rules are discarded, so
  ``catch`` never changes the value it inspects
- ``list``: ``[X]`` means every item matches ``X``; longer lists match
  item by item
- ``tuple``: fixed length, item by item
- anything else: strict equality

List and tuple items go through the same rule protocol as dict keys, with
the sequence as the container and the index as the key.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable

from rulecraft import errors
from rulecraft.errors import ErrorContext, RuleError, RuleViolation, compose_error
from rulecraft.rule import (
    MISSING,
    Rule,
    RuleLike,
    ValidationContext,
    is_instance,
    resolve_rule_like,
    strictly_equal,
)

Matcher = Callable[[Any], "RuleError | None"]


class Type:
    """Structural matcher exposing ``test``, ``catch`` and ``assert_``."""

    def __init__(self, *patterns: Any) -> None:
        self.patterns = patterns
        self.name: str | None = None
        self._matchers: tuple[Matcher, ...] = tuple(self._compile(p) for p in patterns)

    def __str__(self) -> str:
        if self.name:
            return self.name
        return "Type(" + ", ".join(_describe(p) for p in self.patterns) + ")"

    def __repr__(self) -> str:
        return f"<{self}>"

    def catch(self, *values: Any) -> RuleError | None:
        """Return the first mismatch, or ``None`` when every value matches."""
        if len(values) != len(self._matchers):
            return RuleError.create(errors.TYPE_ARGUMENTS, target=values, type=self)
        for matcher, value in zip(self._matchers, values):
            error = matcher(value)
            if error is not None:
                return error
        return None

    def test(self, *values: Any) -> bool:
        return self.catch(*values) is None

    def assert_(self, *values: Any) -> None:
        error = self.catch(*values)
        if error is not None:
            raise RuleViolation(error)

    # -- compilation --------------------------------------------------------

    def _compile(self, pattern: Any) -> Matcher:
        if isinstance(pattern, Rule):
            return self._delegate(pattern, pattern.validate)
        if isinstance(pattern, Type):
            return self._delegate(pattern, pattern.catch)
        if isinstance(pattern, type):
            return self._instance_of(pattern)
        if pattern is None or pattern is MISSING:
            return self._identity(pattern)
        if isinstance(pattern, dict):
            return self._dict(pattern)
        if isinstance(pattern, list):
            return self._list(pattern)
        if isinstance(pattern, tuple):
            return self._tuple(pattern)
        return self._literal(pattern)

    def _delegate(self, inner: Any, check: Matcher) -> Matcher:
        def match(value: Any) -> RuleError | None:
            return compose_error(check(value), ErrorContext(target=value, rule=inner, type=self))

        return match

    def _instance_of(self, cls: type) -> Matcher:
        def match(value: Any) -> RuleError | None:
            if not is_instance(value, cls):
                return RuleError.create(errors.TYPE_MISMATCH, target=value, type=self, rule=cls)
            return None

        return match

    def _identity(self, expected: Any) -> Matcher:
        def match(value: Any) -> RuleError | None:
            if value is not expected:
                return RuleError.create(errors.TYPE_MISMATCH, target=value, type=self, rule=expected)
            return None

        return match

    def _literal(self, expected: Any) -> Matcher:
        def match(value: Any) -> RuleError | None:
            if not strictly_equal(value, expected):
                return RuleError.create(errors.TYPE_MISMATCH, target=value, type=self, rule=expected)
            return None

        return match

    def _dict(self, pattern: dict[Any, Any]) -> Matcher:
        fields = [(key, resolve_rule_like(sub)) for key, sub in pattern.items()]

        def match(value: Any) -> RuleError | None:
            if not isinstance(value, Mapping):
                return RuleError.create(errors.TYPE_DICT, target=value, type=self)
            context = ValidationContext(value)
            for key, like in fields:
                error = like.run(key, value, context)
                if error is not None:
                    return compose_error(
                        error,
                        ErrorContext(target=value, rule=like.target, type=self, key=key),
                    )
            return None

        return match

    def _list(self, pattern: list[Any]) -> Matcher:
        items = [resolve_rule_like(sub) for sub in pattern]

        def match(value: Any) -> RuleError | None:
            if not isinstance(value, list):
                return RuleError.create(errors.TYPE_LIST, target=value, type=self)
            if len(items) == 1:
                pairs = [(index, items[0]) for index in range(len(value))]
            elif items and len(items) != len(value):
                return RuleError.create(errors.TYPE_LIST, target=value, type=self)
            else:
                pairs = list(enumerate(items))
            return self._items(value, pairs)

        return match

    def _tuple(self, pattern: tuple[Any, ...]) -> Matcher:
        items = [resolve_rule_like(sub) for sub in pattern]

        def match(value: Any) -> RuleError | None:
            if not isinstance(value, tuple) or len(value) != len(items):
                return RuleError.create(errors.TYPE_TUPLE, target=value, type=self)
            return self._items(value, list(enumerate(items)))

        return match

    def _items(self, value: Any, pairs: list[tuple[int, RuleLike]]) -> RuleError | None:
        context = ValidationContext(value)
        for index, like in pairs:
            error = like.run(index, value, context)
            if error is not None:
                return compose_error(
                    error,
                    ErrorContext(target=value, rule=like.target, type=self, key=index),
                )
        return None


def _describe(pattern: Any) -> str:
    if isinstance(pattern, type):
        return pattern.__name__
    if isinstance(pattern, (Rule, Type)):
        return str(pattern)
    if isinstance(pattern, dict):
        return "{" + ", ".join(f"{k!r}: {_describe(v)}" for k, v in pattern.items()) + "}"
    if isinstance(pattern, list):
        return "[" + ", ".join(_describe(p) for p in pattern) + "]"
    if isinstance(pattern, tuple):
        return "(" + ", ".join(_describe(p) for p in pattern) + ")"
    return repr(pattern)
