"""Call-time contracts for callable properties."""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable

from rulecraft import errors
from rulecraft.errors import RuleError, RuleViolation
from rulecraft.rule import ContainerPatch, Rule, ValidationContext, read_property
from rulecraft.shape import Type

logger = logging.getLogger(__name__)


def _lift(rule: Any) -> Type:
    return rule if isinstance(rule, Type) else Type(rule)


def Lambda(input_rule: Any, output_rule: Any, *, bind: bool = False) -> Rule:
    """Require a callable property and enforce its argument and return shapes.

    The validate step only checks that the value is callable. The override
    step, which does nothing when validation failed, swaps the property for an
    adapter that on every call:

    1. asserts the positional arguments match ``input_rule`` (a tuple is
       spread over the arguments, anything else describes a single argument)
       and raises ``RuleViolation`` before the original runs. Keyword
       arguments are outside the contract and are rejected the same way
    2. calls the original, with the container prepended when ``bind`` is set
    3. asserts the result matches ``output_rule``, raising ``RuleViolation``
       instead of returning a bad result

    An adapter produced by this rule is not wrapped again on later runs.
    """
    input_type = Type(*input_rule) if isinstance(input_rule, tuple) else _lift(input_rule)
    output_type = _lift(output_rule)

    def check_callable(self: Rule, value: Any, context: ValidationContext) -> RuleError | None:
        if not callable(value):
            return RuleError.create(errors.LAMBDA_FUNCTION, target=value, type=self)
        return None

    def wrap(
        self: Rule,
        error: RuleError | None,
        key: Any,
        container: Any,
        context: ValidationContext,
    ) -> ContainerPatch | None:
        if error is not None:
            return None
        original = read_property(container, key)
        if not callable(original):
            return None
        if getattr(original, "__rule_contract__", None) is self:
            logger.debug("Lambda: %r is already wrapped, leaving it in place", key)
            return None
        return ContainerPatch(key=key, value=_adapter(self, original, container), rule_name=str(self))

    def _adapter(rule: Rule, original: Callable[..., Any], container: Any) -> Callable[..., Any]:
        @functools.wraps(original)
        def adapter(*args: Any, **kwargs: Any) -> Any:
            if kwargs:
                raise RuleViolation(RuleError.create(errors.TYPE_ARGUMENTS, target=kwargs, type=rule))
            input_type.assert_(*args)
            if bind:
                result = original(container, *args)
            else:
                result = original(*args)
            output_type.assert_(result)
            return result

        adapter.__rule_contract__ = rule  # type: ignore[attr-defined]
        return adapter

    return Rule("Lambda", check_callable, wrap, contextual=True)
