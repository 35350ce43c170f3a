"""Rule core: the two-phase validate/override unit and its run context.

Calling order
-------------
A driver checks one property of a container in this sequence:

1. ``validate(value, context)``
2. ``propose(error, key, container, context)``; the returned patch is staged
   on the context, never written straight into the container
3. ``validate(value, context)`` again, only for rules declaring
   ``revalidate=True``; the second result is the one reported

Staged patches are applied once per run with ``ValidationContext.apply_patches``.
``Rule.override`` keeps the direct, mutate-in-place form for callers that
drive rules by hand.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, MutableMapping, MutableSequence, Sequence
from decimal import Decimal
from fractions import Fraction
from typing import Any, Callable, Literal

from pydantic import BaseModel, ConfigDict

from rulecraft.errors import RuleError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Missing-value sentinel
# ---------------------------------------------------------------------------

class _MissingType:
    """Marks a property that is absent, as opposed to present and ``None``."""

    _instance: _MissingType | None = None

    def __new__(cls) -> _MissingType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "MISSING"


MISSING = _MissingType()


# ---------------------------------------------------------------------------
# Value helpers
# ---------------------------------------------------------------------------

_NUMBER_TYPES = (int, float, Decimal, Fraction)


def is_number(value: Any) -> bool:
    """Real numbers other than bools and NaN."""
    if not isinstance(value, _NUMBER_TYPES) or isinstance(value, bool):
        return False
    if isinstance(value, Decimal):
        return not value.is_nan()
    if isinstance(value, float):
        return not math.isnan(value)
    return True


def is_instance(value: Any, cls: Any, strict: bool = False) -> bool:
    """Instance check that never counts bools as ints.

    In strict mode the value's class must be ``cls`` itself, not a subclass.
    """
    if strict:
        return type(value) is cls
    if isinstance(value, bool) and cls not in (bool, object):
        return False
    return isinstance(value, cls)


def strictly_equal(left: Any, right: Any) -> bool:
    """Equality without coercion: ``5`` is not ``5.0``, ``True`` is not ``1``."""
    if left is right:
        return not (isinstance(left, float) and left != left)
    return type(left) is type(right) and left == right


def _is_indexable(container: Any, key: Any) -> bool:
    return (
        isinstance(container, Sequence)
        and not isinstance(container, (str, bytes))
        and isinstance(key, int)
        and not isinstance(key, bool)
    )


def read_property(container: Any, key: Any) -> Any:
    """Read ``key`` from a mapping, a sequence or an object, ``MISSING`` when absent."""
    if isinstance(container, Mapping):
        return container.get(key, MISSING)
    if _is_indexable(container, key):
        return container[key] if -len(container) <= key < len(container) else MISSING
    if isinstance(key, str):
        return getattr(container, key, MISSING)
    return MISSING


def write_property(container: Any, key: Any, value: Any) -> None:
    if isinstance(container, MutableMapping):
        container[key] = value
    elif isinstance(container, MutableSequence) and isinstance(key, int):
        container[key] = value
    else:
        setattr(container, key, value)


# ---------------------------------------------------------------------------
# Container patches and per-run context
# ---------------------------------------------------------------------------

class ContainerPatch(BaseModel):
    """A pending write of ``value`` into ``container[key]``."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key: Any
    value: Any
    rule_name: str

    def apply(self, container: Any) -> None:
        write_property(container, self.key, self.value)


class ValidationContext:
    """State for one validation run over one container.

    Rules that resolve configuration while validating (``Determine``) keep it
    here, keyed by the rule, so one declared rule can serve many containers.
    """

    def __init__(self, container: Any = None) -> None:
        self.container = container
        self._state: dict[Rule, Any] = {}
        self._patches: list[ContainerPatch] = []

    def get_state(self, rule: Rule, default: Any = None) -> Any:
        return self._state.get(rule, default)

    def set_state(self, rule: Rule, value: Any) -> None:
        self._state[rule] = value

    @property
    def patches(self) -> tuple[ContainerPatch, ...]:
        return tuple(self._patches)

    def stage(self, patch: ContainerPatch) -> None:
        self._patches.append(patch)

    def apply_patches(self, container: Any = None) -> list[ContainerPatch]:
        """Apply staged patches once and forget them. Returns what was applied."""
        target = self.container if container is None else container
        applied, self._patches = self._patches, []
        for patch in applied:
            logger.debug("Applying %s patch to key %r", patch.rule_name, patch.key)
            patch.apply(target)
        return applied


# ---------------------------------------------------------------------------
# Rule
# ---------------------------------------------------------------------------

def _no_error(value: Any) -> None:
    return None


def _no_op(*args: Any, **kwargs: Any) -> None:
    return None


class Rule:
    """A named validation check with an optional corrective step.

    Accepts ``Rule(name, validate, override=None)`` or ``Rule(validate)``.
    A non-callable ``validate`` becomes a check that never fails, and a
    non-callable ``override`` becomes a no-op.

    Plain functions are called as ``validate(value)`` and
    ``override(error, key, container)``. With ``contextual=True`` they also
    receive the rule and the run context:
    ``validate(rule, value, context)`` and
    ``override(rule, error, key, container, context)``, and an override
    returns a ``ContainerPatch`` instead of mutating the container.
    """

    def __init__(
        self,
        *args: Any,
        contextual: bool = False,
        revalidate: bool = False,
    ) -> None:
        name: str | None = None
        validate: Any = None
        override: Any = None
        if len(args) > 1:
            name, validate = args[0], args[1]
            override = args[2] if len(args) > 2 else None
        elif args:
            validate = args[0]

        self.name = name
        self.revalidate = revalidate
        self._validate_contextual = contextual
        self._override_contextual = contextual

        if not callable(validate):
            if validate is not None:
                logger.warning("Rule %s: validate %r is not callable, ignoring it", name or "Rule", validate)
            validate = _no_error
            self._validate_contextual = False
        self._validate: Callable[..., Any] = validate

        if override is not None and not callable(override):
            logger.warning("Rule %s: override %r is not callable, ignoring it", name or "Rule", override)
            override = _no_op
            self._override_contextual = False
        self._override: Callable[..., Any] | None = override

        self._fallback = ValidationContext()

    def __str__(self) -> str:
        return str(self.name) if self.name else "Rule"

    def __repr__(self) -> str:
        return f"<Rule {self}>"

    @property
    def has_override(self) -> bool:
        return self._override is not None

    def validate(self, value: Any, context: ValidationContext | None = None) -> RuleError | None:
        if self._validate_contextual:
            return self._validate(self, value, context or self._fallback)
        return self._validate(value)

    def propose(
        self,
        error: RuleError | None,
        key: Any,
        container: Any,
        context: ValidationContext | None = None,
    ) -> ContainerPatch | None:
        """Run the corrective step and return the patch it asks for, if any.

        Built-in rules never touch ``container`` here. Plain override
        functions run as written and may mutate it themselves.
        """
        if self._override is None:
            return None
        if self._override_contextual:
            return self._override(self, error, key, container, context or self._fallback)
        result = self._override(error, key, container)
        return result if isinstance(result, ContainerPatch) else None

    def override(
        self,
        error: RuleError | None,
        key: Any,
        container: Any,
        context: ValidationContext | None = None,
    ) -> None:
        patch = self.propose(error, key, container, context)
        if patch is not None:
            patch.apply(container)


# ---------------------------------------------------------------------------
# Rule-like resolution
# ---------------------------------------------------------------------------

class RuleLike(BaseModel):
    """A rule argument resolved once into either a ``Rule`` or a ``Type``."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: Literal["rule", "type"]
    target: Any

    @property
    def revalidate(self) -> bool:
        return self.kind == "rule" and self.target.revalidate

    def check(self, value: Any, context: ValidationContext | None = None) -> RuleError | None:
        if self.kind == "rule":
            return self.target.validate(value, context)
        return self.target.catch(value)

    def test(self, value: Any) -> bool:
        return self.check(value) is None

    def propose(
        self,
        error: RuleError | None,
        key: Any,
        container: Any,
        context: ValidationContext | None = None,
    ) -> ContainerPatch | None:
        if self.kind == "rule":
            return self.target.propose(error, key, container, context)
        return None

    def run(
        self,
        key: Any,
        container: Any,
        context: ValidationContext,
        revalidate: bool = True,
    ) -> RuleError | None:
        """Check ``container[key]`` following the documented calling order."""
        value = read_property(container, key)
        error = self.check(value, context)
        patch = self.propose(error, key, container, context)
        if patch is not None:
            context.stage(patch)
        if revalidate and self.revalidate:
            error = self.check(value, context)
        return error


def resolve_rule_like(rule: Any) -> RuleLike:
    """Resolve a Rule, a Type, or any liftable value into a ``RuleLike``."""
    # Imported here to avoid a cycle: shape imports rule.
    from rulecraft.shape import Type

    if isinstance(rule, RuleLike):
        return rule
    if isinstance(rule, Rule):
        return RuleLike(kind="rule", target=rule)
    if isinstance(rule, Type):
        return RuleLike(kind="type", target=rule)
    return RuleLike(kind="type", target=Type(rule))

