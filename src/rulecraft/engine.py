"""Reference driver: checks a container property by property.

The driver follows the calling order documented in ``rulecraft.rule``:
validate, propose, then validate again for rules that ask for it. Patches are
staged on a ``ValidationContext`` created for this container and applied once,
after every property has been checked.

A ``ValidationContext`` belongs to a single run. Concurrent runs over
different containers can share declared rules; runs over the same container
must not overlap.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict

from rulecraft.diagnostics import ValidationIssue, ValidationReport
from rulecraft.errors import RuleConfigurationError
from rulecraft.rule import RuleLike, ValidationContext, resolve_rule_like

logger = logging.getLogger(__name__)


class RunPolicy(BaseModel):
    """How the driver reacts to failures and staged patches."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    fail_fast: bool = False
    apply_patches: bool = True
    revalidate: bool = True


def load_run_policy_file(path: Path) -> RunPolicy:
    """Load a run policy from a YAML file."""
    if not path.exists():
        raise RuleConfigurationError(f"Run policy not found: {path}")

    with open(path, "r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    if not isinstance(raw, dict):
        raise RuleConfigurationError(f"Run policy must be a mapping: {path}")

    # Allow the policy to live under a top-level ``policy`` key.
    if isinstance(raw.get("policy"), dict):
        raw = raw["policy"]

    return RunPolicy.model_validate(raw)


def compile_schema(schema: Mapping[Any, Any]) -> dict[Any, RuleLike]:
    """Resolve every rule-like schema entry once, ahead of any run."""
    if not isinstance(schema, Mapping):
        raise RuleConfigurationError(f"Schema must be a mapping, got {type(schema).__name__}")
    return {key: resolve_rule_like(rule) for key, rule in schema.items()}


def check_container(
    schema: Mapping[Any, Any],
    container: Any,
    policy: RunPolicy | None = None,
) -> ValidationReport:
    """Check ``container`` against ``schema`` and apply staged patches.

    Never raises for a failing value; failures are reported as issues.

    Args:
        schema: Property key to rule-like value, raw or from ``compile_schema``
        container: Mapping or object holding the properties
        policy: Driver behaviour, defaults to ``RunPolicy()``

    Returns:
        A ``ValidationReport`` listing the checked keys, the issues found and
        the keys rewritten by patches.
    """
    effective = policy if policy is not None else RunPolicy()
    compiled = compile_schema(schema)
    context = ValidationContext(container)

    checked: list[str] = []
    issues: list[ValidationIssue] = []
    for key, like in compiled.items():
        error = like.run(key, container, context, revalidate=effective.revalidate)
        checked.append(str(key))
        if error is None:
            logger.debug("Property %r passed %s", key, like.target)
            continue
        logger.debug("Property %r failed %s: %s", key, like.target, error.message)
        issues.append(ValidationIssue.from_error(key, error))
        if effective.fail_fast:
            break

    applied: list[str] = []
    if effective.apply_patches:
        applied = [str(patch.key) for patch in context.apply_patches()]

    return ValidationReport(
        ok=not issues,
        checked=checked,
        issues=issues,
        patches_applied=applied,
    )
