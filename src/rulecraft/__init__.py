"""Public API for rulecraft."""

from rulecraft.combinators import (
    Determine,
    Equal,
    IfExists,
    IfExistsNotMatch,
    IfNotMatch,
    InstanceOf,
    Validate,
)
from rulecraft.contracts import Lambda
from rulecraft.diagnostics import ValidationIssue, ValidationReport
from rulecraft.engine import RunPolicy, check_container, compile_schema, load_run_policy_file
from rulecraft.errors import (
    ErrorContext,
    RuleConfigurationError,
    RuleError,
    RuleViolation,
    compose_error,
)
from rulecraft.primitives import Any, Missing, Null, Numeric, Undefined
from rulecraft.rendering import render_report
from rulecraft.rule import (
    MISSING,
    ContainerPatch,
    Rule,
    RuleLike,
    ValidationContext,
    resolve_rule_like,
)
from rulecraft.shape import Type

__all__ = [
    # Core
    "MISSING",
    "ContainerPatch",
    "Rule",
    "RuleLike",
    "Type",
    "ValidationContext",
    "resolve_rule_like",
    # Errors
    "ErrorContext",
    "RuleConfigurationError",
    "RuleError",
    "RuleViolation",
    "compose_error",
    # Primitive rules
    "Any",
    "Missing",
    "Null",
    "Numeric",
    "Undefined",
    # Combinators
    "Determine",
    "Equal",
    "IfExists",
    "IfExistsNotMatch",
    "IfNotMatch",
    "InstanceOf",
    "Lambda",
    "Validate",
    # Driver and reports
    "RunPolicy",
    "ValidationIssue",
    "ValidationReport",
    "check_container",
    "compile_schema",
    "load_run_policy_file",
    "render_report",
]
