"""Tests for structured filter compilation."""

from __future__ import annotations

import pytest

from artframe.db.filters import (
    And,
    Eq,
    Ge,
    In,
    IsNull,
    Like,
    Lt,
    Ne,
    Or,
    SortKey,
    and_,
    compile_filter,
    compile_order,
)
from artframe.db.models import SOURCE_COLUMNS
from artframe.errors import UnknownField


def test_none_matches_everything():
    assert compile_filter(None, SOURCE_COLUMNS) == ("1", [])


def test_single_comparison_is_parameterised():
    sql, params = compile_filter(Eq("description", "x'; DROP TABLE sources; --"), SOURCE_COLUMNS)
    assert sql == "description = ?"
    assert params == ["x'; DROP TABLE sources; --"]


def test_and_composition_keeps_both_sides():
    sql, params = compile_filter(Eq("id", 3) & Like("description", "%cats%"), SOURCE_COLUMNS)
    assert sql == "(id = ? AND description LIKE ?)"
    assert params == [3, "%cats%"]


def test_or_nested_in_and():
    expr = And((Eq("id", 1), Or((Lt("id", 5), Ge("id", 10)))))
    sql, params = compile_filter(expr, SOURCE_COLUMNS)
    assert sql == "(id = ? AND (id < ? OR id >= ?))"
    assert params == [1, 5, 10]


def test_booleans_bound_as_integers():
    _, params = compile_filter(Eq("is_selected", True), SOURCE_COLUMNS)
    assert params == [1]


def test_eq_none_becomes_is_null():
    assert compile_filter(Eq("commands", None), SOURCE_COLUMNS) == ("commands IS NULL", [])
    assert compile_filter(Ne("commands", None), SOURCE_COLUMNS) == ("commands IS NOT NULL", [])
    assert compile_filter(IsNull("commands"), SOURCE_COLUMNS) == ("commands IS NULL", [])


def test_in_expands_placeholders():
    assert compile_filter(In("id", (1, 2, 3)), SOURCE_COLUMNS) == ("id IN (?,?,?)", [1, 2, 3])


def test_empty_in_matches_nothing():
    assert compile_filter(In("id", ()), SOURCE_COLUMNS) == ("0", [])


def test_unknown_column_rejected():
    with pytest.raises(UnknownField):
        compile_filter(Eq("id; DROP TABLE sources", 1), SOURCE_COLUMNS)


def test_non_filter_rejected():
    with pytest.raises(TypeError):
        compile_filter("id = 1", SOURCE_COLUMNS)  # type: ignore[arg-type]


def test_and_helper_skips_none():
    assert and_(None, None) is None
    assert and_(Eq("id", 1), None) == Eq("id", 1)
    assert and_(Eq("id", 1), Eq("is_selected", True)) == And((Eq("id", 1), Eq("is_selected", True)))


def test_compile_order():
    keys = [SortKey("is_selected", descending=True), SortKey("component_ref")]
    assert compile_order(keys, SOURCE_COLUMNS) == "is_selected DESC, component_ref ASC"
    assert compile_order(None, SOURCE_COLUMNS) == ""


def test_compile_order_unknown_column():
    with pytest.raises(UnknownField):
        compile_order([SortKey("random()")], SOURCE_COLUMNS)
