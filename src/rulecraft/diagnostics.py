"""Validation reports produced by the reference driver.

Reports are plain frozen models: they hold display strings rather than the
live rule objects, so they can be serialized and compared.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from rulecraft.errors import RuleError


class ValidationIssue(BaseModel):
    """A single property that failed its rule."""

    model_config = ConfigDict(frozen=True)

    key: str
    message: str
    rule: str
    trace: list[str] = Field(default_factory=list)
    target_repr: str

    @staticmethod
    def from_error(key: object, error: RuleError) -> ValidationIssue:
        """Flatten ``error`` into an issue for the property ``key``.

        ``trace`` lists the owning rule of every layer, innermost first.
        """
        return ValidationIssue(
            key=str(key),
            message=error.message,
            rule=str(error.context.type),
            trace=[layer.describe() for layer in error.layers],
            target_repr=repr(error.context.target),
        )


class ValidationReport(BaseModel):
    """Outcome of checking one container against a schema."""

    model_config = ConfigDict(frozen=True)

    ok: bool
    checked: list[str] = Field(default_factory=list)
    issues: list[ValidationIssue] = Field(default_factory=list)
    patches_applied: list[str] = Field(default_factory=list)

    def issue_for(self, key: object) -> ValidationIssue | None:
        for issue in self.issues:
            if issue.key == str(key):
                return issue
        return None
