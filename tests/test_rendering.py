"""Tests for validation report rendering."""

import json

import pytest

from rulecraft.combinators import IfExists, IfNotMatch
from rulecraft.engine import check_container
from rulecraft.rendering import render_report


def test_markdown_passed() -> None:
    report = check_container({"name": str}, {"name": "a"})
    text = render_report(report)
    assert text.startswith("# Validation Passed")
    assert "Checked 1 properties: name" in text


def test_markdown_failed_lists_issues_and_patches() -> None:
    report = check_container(
        {"age": IfExists(int), "size": IfNotMatch(int, 0)},
        {"age": "x", "size": "big"},
    )
    text = render_report(report, format="markdown")
    assert text.startswith("# Validation Failed")
    assert "## age" in text
    assert "- message: `type.mismatch`" in text
    assert "- value: `'x'`" in text
    assert "- trace: Type(int) <- IfExists" in text
    assert "## Patched" in text
    assert "- size" in text


def test_json_is_sorted_and_parseable() -> None:
    report = check_container({"age": IfExists(int)}, {"age": "x"})
    payload = json.loads(render_report(report, format="json"))
    assert payload["ok"] is False
    assert payload["issues"][0]["key"] == "age"
    assert render_report(report, format="json") == render_report(report, format="json")


def test_unsupported_format() -> None:
    report = check_container({}, {})
    with pytest.raises(ValueError, match="Unsupported report format"):
        render_report(report, format="html")
