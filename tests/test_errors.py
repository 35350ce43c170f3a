"""Tests for the diagnostic error model and error composition."""

import pytest
from pydantic import ValidationError

from rulecraft.errors import ErrorContext, RuleError, RuleViolation, compose_error
from rulecraft.primitives import Null
from rulecraft.rule import Rule


def _error() -> RuleError:
    return RuleError.create("rule.null", target=1, type=Null)


class TestRuleError:
    """Tests for RuleError construction and display."""

    def test_create_fills_context(self) -> None:
        err = _error()
        assert err.message == "rule.null"
        assert err.target == 1
        assert err.context.type is Null
        assert err.context.rule is None
        assert err.traces == ()

    def test_error_is_frozen(self) -> None:
        err = _error()
        with pytest.raises(Exception):  # Pydantic FrozenModel raises
            err.message = "changed"  # type: ignore

    def test_empty_message_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RuleError.create("", target=1, type=Null)

    def test_str_names_value_and_rules(self) -> None:
        outer = Rule("Outer", lambda v: None)
        err = compose_error(_error(), ErrorContext(target=1, rule=Null, type=outer))
        text = str(err)
        assert text.startswith("rule.null: 1")
        assert "at Null" in text
        assert "at Outer" in text

    def test_describe_includes_key(self) -> None:
        ctx = ErrorContext(target={}, type=Null, key="age")
        assert ctx.describe() == "Null['age']"


class TestComposeError:
    """Tests for compose_error."""

    def test_absent_stays_absent(self) -> None:
        assert compose_error(None, ErrorContext(target=1, type=Null)) is None

    def test_adds_context_as_trace(self) -> None:
        outer = Rule("Outer", lambda v: None)
        err = _error()
        ctx = ErrorContext(target=1, rule=Null, type=outer)

        composed = compose_error(err, ctx)

        assert composed is not err
        assert composed.message == err.message
        assert composed.context is err.context
        assert composed.traces == (ctx,)
        assert err.traces == ()

    def test_composing_same_context_twice_is_idempotent(self) -> None:
        outer = Rule("Outer", lambda v: None)
        ctx = ErrorContext(target=1, rule=Null, type=outer)

        once = compose_error(_error(), ctx)
        twice = compose_error(once, ctx)

        assert twice is once
        assert len(twice.traces) == 1

    def test_context_equal_to_origin_is_not_added(self) -> None:
        err = _error()
        assert compose_error(err, err.context) is err

    def test_layers_keep_order_innermost_first(self) -> None:
        middle = Rule("Middle", lambda v: None)
        outer = Rule("Outer", lambda v: None)
        err = compose_error(_error(), ErrorContext(target=1, rule=Null, type=middle))
        err = compose_error(err, ErrorContext(target=1, rule=middle, type=outer))
        assert [str(layer.type) for layer in err.layers] == ["Null", "Middle", "Outer"]


class TestRuleViolation:
    def test_carries_error(self) -> None:
        err = _error()
        exc = RuleViolation(err)
        assert isinstance(exc, ValueError)
        assert exc.error is err
        assert "rule.null" in str(exc)
