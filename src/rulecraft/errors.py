"""Diagnostic error values and their composition.

Rules never raise while validating. They return a ``RuleError`` (or ``None``)
and callers layer extra context onto it with ``compose_error`` as the error
travels outward through wrapping rules.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Stable message keys
# ---------------------------------------------------------------------------

NULL = "rule.null"
UNDEFINED = "rule.undefined"
NUMERIC = "rule.numeric"
INSTANCE_OF = "rule.instanceof"
EQUAL = "rule.equal"
LAMBDA_FUNCTION = "rule.lambda.function"
DETERMINE_UNRESOLVED = "rule.determine.unresolved"
VERIFY = "rule.verify"

TYPE_MISMATCH = "type.mismatch"
TYPE_DICT = "type.dict"
TYPE_LIST = "type.list"
TYPE_TUPLE = "type.tuple"
TYPE_ARGUMENTS = "type.arguments"


class RuleConfigurationError(RuntimeError):
    """Raised when rules or run policies are configured incorrectly."""


class ErrorContext(BaseModel):
    """Where an error happened: the checked value, the delegate and the owner."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    target: Any = None
    rule: Any = None
    type: Any = None
    key: Any = None

    def same_as(self, other: ErrorContext) -> bool:
        return (
            self.target is other.target
            and self.rule is other.rule
            and self.type is other.type
            and self.key is other.key
        )

    def describe(self) -> str:
        owner = str(self.type) if self.type is not None else "?"
        if self.key is not None:
            return f"{owner}[{self.key!r}]"
        return owner


class RuleError(BaseModel):
    """An immutable validation failure.

    ``context`` is where the failure was first detected. ``traces`` holds the
    contexts added by each enclosing rule, innermost first.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    message: str = Field(..., min_length=1)
    context: ErrorContext
    traces: tuple[ErrorContext, ...] = ()

    @staticmethod
    def create(
        message: str,
        target: Any,
        type: Any,
        rule: Any = None,
        key: Any = None,
    ) -> RuleError:
        """Build an error for ``target`` raised by the rule ``type``."""
        return RuleError(
            message=message,
            context=ErrorContext(target=target, rule=rule, type=type, key=key),
        )

    @property
    def target(self) -> Any:
        return self.context.target

    @property
    def layers(self) -> tuple[ErrorContext, ...]:
        return (self.context, *self.traces)

    def __str__(self) -> str:
        lines = [f"{self.message}: {self.context.target!r}"]
        for layer in self.layers:
            lines.append(f"  at {layer.describe()}")
        return "\n".join(lines)


class RuleViolation(ValueError):
    """Raised at a contract boundary when a value fails its declared rule."""

    def __init__(self, error: RuleError) -> None:
        super().__init__(str(error))
        self.error = error


def compose_error(error: RuleError | None, context: ErrorContext) -> RuleError | None:
    """Attach ``context`` to ``error`` exactly once.

    Returns ``None`` when there is no error. A context that is already part of
    the error is not added again, so composing repeatedly through nested
    delegation layers is idempotent.
    """
    if error is None:
        return None
    if any(layer.same_as(context) for layer in error.layers):
        return error
    return error.model_copy(update={"traces": (*error.traces, context)})
