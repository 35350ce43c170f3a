"""Tests for the structural Type matcher used when lifting values."""

from __future__ import annotations

import pytest

from rulecraft.combinators import Determine, IfExists, IfNotMatch
from rulecraft.errors import RuleViolation
from rulecraft.primitives import Null
from rulecraft.rule import MISSING
from rulecraft.shape import Type


class TestScalarPatterns:
    def test_class(self) -> None:
        shape = Type(int)
        assert shape.test(1)
        assert not shape.test(True)
        assert not shape.test("1")
        assert shape.catch("1").message == "type.mismatch"

    def test_none_and_missing(self) -> None:
        assert Type(None).test(None)
        assert not Type(None).test(MISSING)
        assert Type(MISSING).test(MISSING)
        assert not Type(MISSING).test(None)

    def test_literal(self) -> None:
        assert Type("a").test("a")
        assert not Type("a").test("b")
        assert not Type(1).test(1.0)

    def test_rule_and_nested_type(self) -> None:
        assert Type(Null).test(None)
        assert not Type(Null).test(0)
        assert Type(Type(int)).test(1)
        err = Type(Type(int)).catch("x")
        assert err.message == "type.mismatch"
        assert len(err.traces) == 1

    def test_display(self) -> None:
        assert str(Type(int)) == "Type(int)"
        assert str(Type([int], {"a": str})) == "Type([int], {'a': str})"
        shape = Type(int)
        shape.name = "Count"
        assert str(shape) == "Count"


class TestDictPattern:
    def test_shape(self) -> None:
        shape = Type({"name": str, "age": IfExists(int)})
        assert shape.test({"name": "x"})
        assert shape.test({"name": "x", "age": 3, "extra": True})
        assert not shape.test({"name": "x", "age": "3"})
        assert not shape.test({"age": 3})
        assert shape.catch("nope").message == "type.dict"

    def test_error_names_the_key(self) -> None:
        shape = Type({"name": str, "age": IfExists(int)})
        err = shape.catch({"name": "x", "age": "3"})
        assert err.message == "type.mismatch"
        assert err.traces[-1].key == "age"
        assert err.traces[-1].type is shape

    def test_catch_never_applies_patches(self) -> None:
        data = {"n": "x"}
        assert not Type({"n": IfNotMatch(int, 0)}).test(data)
        assert data == {"n": "x"}

    def test_determine_resolves_per_value(self) -> None:
        shape = Type({
            "kind": str,
            "value": Determine(lambda c: int if c["kind"] == "num" else str),
        })
        assert shape.test({"kind": "num", "value": 1})
        assert not shape.test({"kind": "num", "value": "1"})
        assert shape.test({"kind": "text", "value": "1"})

    def test_nested_shapes(self) -> None:
        shape = Type({"user": {"id": int}})
        assert shape.test({"user": {"id": 1}})
        assert not shape.test({"user": {"id": "1"}})


class TestSequencePatterns:
    def test_homogeneous_list(self) -> None:
        shape = Type([int])
        assert shape.test([])
        assert shape.test([1, 2])
        assert not shape.test([1, "2"])
        assert not shape.test((1,))

    def test_positional_list(self) -> None:
        shape = Type([int, str])
        assert shape.test([1, "a"])
        assert not shape.test([1])
        assert not shape.test(["a", 1])

    def test_empty_list_accepts_any_list(self) -> None:
        assert Type([]).test([1, "a"])

    def test_determine_items_resolve_against_the_list(self) -> None:
        shape = Type([Determine(lambda items: int if len(items) > 1 else str)])
        assert shape.test([1, 2])
        assert shape.test(["a"])
        err = shape.catch([1])
        assert err.message == "type.mismatch"
        assert err.traces[-1].key == 0

    def test_determine_in_tuple(self) -> None:
        shape = Type((str, Determine(lambda pair: int if pair[0] == "num" else str)))
        assert shape.test(("num", 1))
        assert shape.test(("text", "1"))
        assert not shape.test(("num", "1"))

    def test_list_items_never_patched(self) -> None:
        data = ["x", 1]
        assert not Type([IfNotMatch(int, 0)]).test(data)
        assert data == ["x", 1]

    def test_tuple(self) -> None:
        shape = Type((int, str))
        assert shape.test((1, "a"))
        assert not shape.test((1,))
        assert not shape.test([1, "a"])
        err = shape.catch((1, 2))
        assert err.traces[-1].key == 1


class TestMultipleValues:
    def test_positional_values(self) -> None:
        shape = Type(int, str)
        assert shape.test(1, "a")
        assert not shape.test("a", 1)

    def test_count_mismatch(self) -> None:
        err = Type(int, str).catch(1)
        assert err.message == "type.arguments"
        assert err.context.target == (1,)

    def test_assert_raises(self) -> None:
        shape = Type(int)
        shape.assert_(1)
        with pytest.raises(RuleViolation) as exc_info:
            shape.assert_("1")
        assert exc_info.value.error.context.target == "1"
