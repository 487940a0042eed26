"""
Filter operators and sort ordering applied client-side to fetched records.

Equality-style operators (eq, neq, in, contains, ilike) compare the *text
form* of values, so a record value of 5 matches a filter value of "5".
Relational operators (gt, lt, gte, lte) use Python's native ordering of the
raw values; a pair Python cannot order (str vs int, or a null) never matches.
"""

from __future__ import annotations

import json
import operator
from dataclasses import dataclass
from enum import Enum
from functools import cmp_to_key
from typing import Any, Callable, Dict, Iterable, List, Optional

from tablequery.domain.models import Record


class Operator(str, Enum):
    EQ = "eq"
    NEQ = "neq"
    IN = "in"
    GT = "gt"
    LT = "lt"
    GTE = "gte"
    LTE = "lte"
    CONTAINS = "contains"
    ILIKE = "ilike"


def text_form(value: Any) -> str:
    """
    Render a record or filter value the way it reads in the JSON payload.

    Strings are returned unchanged, None is "null", booleans are
    "true"/"false", integral floats drop the fractional part (5.0 -> "5"),
    and dicts and lists render as compact JSON.
    """
    if isinstance(value, str):
        return value
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def _ordered(compare: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def predicate(row_value: Any, value: Any) -> bool:
        if row_value is None or value is None:
            return False
        try:
            return bool(compare(row_value, value))
        except TypeError:
            return False

    return predicate


def _in(row_value: Any, values: Any) -> bool:
    if not isinstance(values, (list, tuple, set, frozenset)):
        return False
    row_text = text_form(row_value)
    return any(row_text == text_form(v) for v in values)


# Operator -> predicate(row_value, filter_value)
OPERATOR_MAP: Dict[Operator, Callable[[Any, Any], bool]] = {
    Operator.EQ: lambda row, value: text_form(row) == text_form(value),
    Operator.NEQ: lambda row, value: text_form(row) != text_form(value),
    Operator.IN: _in,
    Operator.GT: _ordered(operator.gt),
    Operator.LT: _ordered(operator.lt),
    Operator.GTE: _ordered(operator.ge),
    Operator.LTE: _ordered(operator.le),
    Operator.CONTAINS: lambda row, value: text_form(value) in text_form(row),
    Operator.ILIKE: lambda row, value: text_form(value).casefold() in text_form(row).casefold(),
}

# Operators whose value is a collection rather than a scalar.
LIST_OPERATORS = {Operator.IN}


@dataclass(frozen=True)
class Filter:
    column: str
    operator: Operator
    value: Any

    def matches(self, record: Record) -> bool:
        # A missing column is distinct from an explicit null: only neq keeps it.
        if self.column not in record:
            return self.operator is Operator.NEQ
        return OPERATOR_MAP[self.operator](record.get(self.column), self.value)


@dataclass(frozen=True)
class OrderBy:
    column: str
    ascending: bool = True


def apply_filters(records: Iterable[Record], filters: List[Filter]) -> List[Record]:
    """Keep records matching every filter (AND), evaluated in filter order."""
    return [r for r in records if all(f.matches(r) for f in filters)]


def _three_way(a: Any, b: Any) -> int:
    if isinstance(a, str) and isinstance(b, str):
        fa, fb = a.casefold(), b.casefold()
        folded = (fa > fb) - (fa < fb)
        return folded or (a > b) - (a < b)
    try:
        return (a > b) - (a < b)
    except TypeError:
        return 0


def compare_values(a: Any, b: Any, ascending: bool = True) -> int:
    """
    Three-way comparison used for ordering, returning -1, 0 or 1.

    Nulls sort first ascending and last descending. Strings collate
    case-insensitively, ties broken by code point. Pairs that cannot be
    ordered compare equal so the stable sort keeps their input order.
    """
    if a is None and b is None:
        return 0
    if a is None:
        return -1 if ascending else 1
    if b is None:
        return 1 if ascending else -1
    result = _three_way(a, b)
    return result if ascending else -result


def sort_records(records: Iterable[Record], order: Optional[OrderBy]) -> List[Record]:
    rows = list(records)
    if order is None:
        return rows
    key = cmp_to_key(
        lambda x, y: compare_values(x.get(order.column), y.get(order.column), order.ascending)
    )
    return sorted(rows, key=key)


__all__ = [
    "Filter",
    "LIST_OPERATORS",
    "OPERATOR_MAP",
    "Operator",
    "OrderBy",
    "apply_filters",
    "compare_values",
    "sort_records",
    "text_form",
]
