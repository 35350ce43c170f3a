"""Combinators that build specialised rules out of rule-like values.

Every ``rule`` argument is resolved once, when the combinator is called, into
either a ``Rule`` or a ``Type`` (see ``resolve_rule_like``).
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from rulecraft import errors
from rulecraft.errors import ErrorContext, RuleError, compose_error
from rulecraft.rule import (
    MISSING,
    ContainerPatch,
    Rule,
    RuleLike,
    ValidationContext,
    is_instance,
    resolve_rule_like,
    strictly_equal,
)

logger = logging.getLogger(__name__)


def _delegate(rule: Rule, like: RuleLike, value: Any, context: ValidationContext) -> RuleError | None:
    error = like.check(value, context)
    return compose_error(error, ErrorContext(target=value, rule=like.target, type=rule))


def _substitute(default_value: Any) -> Callable[..., ContainerPatch | None]:
    def override(
        rule: Rule,
        error: RuleError | None,
        key: Any,
        container: Any,
        context: ValidationContext,
    ) -> ContainerPatch | None:
        if error is None:
            return None
        logger.debug("%s: replacing %r with default %r", rule, key, default_value)
        return ContainerPatch(key=key, value=default_value, rule_name=str(rule))

    return override


# ---------------------------------------------------------------------------
# Custom predicate / message
# ---------------------------------------------------------------------------

def Validate(rule: Any, message: str | Callable[[Any], str]) -> Rule:
    """Check ``rule`` but report ``message`` instead of the underlying error.

    ``rule`` may be a predicate (fails when it returns a falsy value), a
    ``Rule``, a ``Type`` or anything liftable into a ``Type``. A callable
    ``message`` is called with the failing value, and only on failure.
    """
    if callable(rule) and not isinstance(rule, type):
        predicate = rule

        def failed(value: Any, context: ValidationContext) -> bool:
            return not predicate(value)

        delegate: Any = rule
    else:
        like = resolve_rule_like(rule)

        def failed(value: Any, context: ValidationContext) -> bool:
            return like.check(value, context) is not None

        delegate = like.target

    def verify(self: Rule, value: Any, context: ValidationContext) -> RuleError | None:
        if not failed(value, context):
            return None
        text = message(value) if callable(message) else message
        return RuleError.create(str(text) if text else errors.VERIFY, target=value, type=self, rule=delegate)

    return Rule("Verify", verify, contextual=True)


# ---------------------------------------------------------------------------
# Existence and default substitution
# ---------------------------------------------------------------------------

def IfExists(rule: Any) -> Rule:
    """Check ``rule`` only when the value is present."""
    like = resolve_rule_like(rule)

    def if_exists(self: Rule, value: Any, context: ValidationContext) -> RuleError | None:
        if value is MISSING:
            return None
        return _delegate(self, like, value, context)

    return Rule("IfExists", if_exists, contextual=True)


def IfNotMatch(rule: Any, default_value: Any) -> Rule:
    """Check ``rule``; on failure, replace the property with ``default_value``.

    The failure is still reported for the current run. The replacement is
    what later runs and readers of the container see.
    """
    like = resolve_rule_like(rule)

    def if_not_match(self: Rule, value: Any, context: ValidationContext) -> RuleError | None:
        return _delegate(self, like, value, context)

    return Rule("IfNotMatch", if_not_match, _substitute(default_value), contextual=True)


def IfExistsNotMatch(rule: Any, default_value: Any) -> Rule:
    """``IfExists`` and ``IfNotMatch`` together: absent values are skipped."""
    like = resolve_rule_like(rule)

    def if_exists_not_match(self: Rule, value: Any, context: ValidationContext) -> RuleError | None:
        if value is MISSING:
            return None
        return _delegate(self, like, value, context)

    return Rule("IfExistsNotMatch", if_exists_not_match, _substitute(default_value), contextual=True)


# ---------------------------------------------------------------------------
# Sibling-dependent resolution
# ---------------------------------------------------------------------------

def Determine(factory: Callable[[Any], Any]) -> Rule:
    """Pick the rule for a property from its container.

    ``factory(container)`` runs in the override step and its result is kept
    on the run context. Until that happens ``validate`` reports
    ``rule.determine.unresolved``. The rule declares ``revalidate`` so that
    drivers check the value again once the rule is resolved.

    Example::

        person = Type({
            "name": str,
            "is_member": bool,
            "member_id": Determine(lambda p: str if p["is_member"] else Null),
        })
    """

    def determine(self: Rule, value: Any, context: ValidationContext) -> RuleError | None:
        resolved: RuleLike | None = context.get_state(self)
        if resolved is None:
            return RuleError.create(errors.DETERMINE_UNRESOLVED, target=value, type=self)
        return _delegate(self, resolved, value, context)

    def resolve(
        self: Rule,
        error: RuleError | None,
        key: Any,
        container: Any,
        context: ValidationContext,
    ) -> None:
        resolved = resolve_rule_like(factory(container))
        logger.debug("Determine resolved %r to %s", key, resolved.target)
        context.set_state(self, resolved)
        return None

    return Rule("Determine", determine, resolve, contextual=True, revalidate=True)


# ---------------------------------------------------------------------------
# Instance and equality
# ---------------------------------------------------------------------------

def InstanceOf(cls: type | tuple[type, ...]) -> Rule:
    """The value's class must be exactly ``cls`` (or one of a tuple of classes).

    Subclass instances fail, so ``True`` is not an ``int``.
    """
    classes = cls if isinstance(cls, tuple) else (cls,)
    if not classes or not all(isinstance(c, type) for c in classes):
        raise TypeError(f"InstanceOf expects a class, got {cls!r}")

    def instance_of(self: Rule, value: Any, context: ValidationContext) -> RuleError | None:
        if not any(is_instance(value, c, strict=True) for c in classes):
            return RuleError.create(errors.INSTANCE_OF, target=value, type=self, rule=cls)
        return None

    return Rule("InstanceOf", instance_of, contextual=True)


def Equal(expected: Any) -> Rule:
    """The value must equal ``expected`` with no coercion between types."""

    def equal(self: Rule, value: Any, context: ValidationContext) -> RuleError | None:
        if not strictly_equal(value, expected):
            return RuleError.create(errors.EQUAL, target=value, type=self, rule=expected)
        return None

    return Rule("Equal", equal, contextual=True)


__all__ = [
    "Determine",
    "Equal",
    "IfExists",
    "IfExistsNotMatch",
    "IfNotMatch",
    "InstanceOf",
    "Validate",
]
