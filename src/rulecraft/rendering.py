"""Human-readable rendering for validation reports."""

from __future__ import annotations

import json

from rulecraft.diagnostics import ValidationReport


def render_report(report: ValidationReport, format: str = "markdown") -> str:
    """Render a report for people (markdown) or tools (json)."""
    if format not in {"markdown", "json"}:
        raise ValueError(f"Unsupported report format: {format}")

    if format == "json":
        return json.dumps(report.model_dump(mode="json"), indent=2, sort_keys=True, default=str)

    if report.ok:
        lines = [
            "# Validation Passed",
            "",
            f"Checked {len(report.checked)} properties: {', '.join(report.checked) or '-'}",
        ]
    else:
        lines = ["# Validation Failed", ""]
        for issue in report.issues:
            lines.append(f"## {issue.key}")
            lines.append("")
            lines.append(f"- message: `{issue.message}`")
            lines.append(f"- value: `{issue.target_repr}`")
            lines.append(f"- rule: {issue.rule}")
            if len(issue.trace) > 1:
                lines.append(f"- trace: {' <- '.join(issue.trace)}")
            lines.append("")

    if report.patches_applied:
        lines.append("")
        lines.append("## Patched")
        lines.append("")
        for key in report.patches_applied:
            lines.append(f"- {key}")
    return "\n".join(lines).rstrip() + "\n"
