"""Structured, parameterised filter expressions.

Callers narrow queries, updates and deletes with a small expression tree
instead of raw SQL. Column names are checked against the target table's
vocabulary and every value is bound as a ``?`` parameter, so composing an
identity constraint with a caller filter can never change its meaning.

Example:
    compile_filter(Eq("id", 3) & Like("description", "%cats%"), SOURCE_COLUMNS)
    -> ("(id = ? AND description LIKE ?)", [3, "%cats%"])
"""

from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass
from typing import Any, ClassVar

from artframe.errors import UnknownField


class Filter:
    """Base class for filter expressions. Supports ``&`` and ``|``."""

    def __and__(self, other: Filter) -> And:
        return And((self, other))

    def __or__(self, other: Filter) -> Or:
        return Or((self, other))


@dataclass(frozen=True)
class _Comparison(Filter):
    column: str
    value: Any

    op: ClassVar[str] = "="


class Eq(_Comparison):
    op = "="


class Ne(_Comparison):
    op = "!="


class Lt(_Comparison):
    op = "<"


class Le(_Comparison):
    op = "<="


class Gt(_Comparison):
    op = ">"


class Ge(_Comparison):
    op = ">="


class Like(_Comparison):
    op = "LIKE"


@dataclass(frozen=True)
class IsNull(Filter):
    column: str


@dataclass(frozen=True)
class In(Filter):
    column: str
    values: tuple[Any, ...]


@dataclass(frozen=True)
class And(Filter):
    parts: tuple[Filter, ...]


@dataclass(frozen=True)
class Or(Filter):
    parts: tuple[Filter, ...]


@dataclass(frozen=True)
class SortKey:
    column: str
    descending: bool = False


def and_(*parts: Filter | None) -> Filter | None:
    """Conjoin *parts*, skipping ``None``. Returns None when nothing is left."""
    present = tuple(p for p in parts if p is not None)
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    return And(present)


def _bind(value: Any) -> Any:
    return int(value) if isinstance(value, bool) else value


def _check(column: str, allowed: Collection[str]) -> str:
    if column not in allowed:
        raise UnknownField(column, tuple(allowed))
    return column


def compile_filter(expr: Filter | None, allowed: Collection[str]) -> tuple[str, list[Any]]:
    """Compile *expr* to a SQL fragment and its bound parameters.

    Args:
        expr: Filter tree, or None for "match everything".
        allowed: Column names valid for the target table.

    Returns:
        ``(sql, params)``. The SQL is ``"1"`` when *expr* is None.

    Raises:
        UnknownField: If any predicate names a column outside *allowed*.
        TypeError: If *expr* is not a Filter.
    """
    if expr is None:
        return "1", []
    params: list[Any] = []
    sql = _compile(expr, allowed, params)
    return sql, params


def _compile(expr: Filter, allowed: Collection[str], params: list[Any]) -> str:
    if isinstance(expr, _Comparison):
        col = _check(expr.column, allowed)
        if expr.value is None and isinstance(expr, (Eq, Ne)):
            return f"{col} IS {'NOT ' if isinstance(expr, Ne) else ''}NULL"
        params.append(_bind(expr.value))
        return f"{col} {expr.op} ?"
    if isinstance(expr, IsNull):
        return f"{_check(expr.column, allowed)} IS NULL"
    if isinstance(expr, In):
        col = _check(expr.column, allowed)
        if not expr.values:
            return "0"
        params.extend(_bind(v) for v in expr.values)
        return f"{col} IN ({','.join('?' * len(expr.values))})"
    if isinstance(expr, (And, Or)):
        if not expr.parts:
            return "1" if isinstance(expr, And) else "0"
        joiner = " AND " if isinstance(expr, And) else " OR "
        return "(" + joiner.join(_compile(p, allowed, params) for p in expr.parts) + ")"
    raise TypeError(f"Not a filter expression: {expr!r}")


def compile_order(keys: Iterable[SortKey] | None, allowed: Collection[str]) -> str:
    """Compile sort keys to an ORDER BY body ("" when there are none)."""
    if not keys:
        return ""
    return ", ".join(
        f"{_check(k.column, allowed)} {'DESC' if k.descending else 'ASC'}" for k in keys
    )
