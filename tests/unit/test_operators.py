from __future__ import annotations

from decimal import Decimal

import pytest

from tablequery.query.operators import (
    Filter,
    Operator,
    OrderBy,
    apply_filters,
    compare_values,
    sort_records,
    text_form,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("INV-001", "INV-001"),
        (5, "5"),
        (5.0, "5"),
        (2.5, "2.5"),
        (True, "true"),
        (False, "false"),
        (None, "null"),
        (Decimal("10.50"), "10.50"),
        ({"a": 1, "b": [1, 2]}, '{"a":1,"b":[1,2]}'),
        ([1, "x"], '[1,"x"]'),
    ],
)
def test_text_form(value, expected) -> None:
    assert text_form(value) == expected


def test_eq_matches_on_text_form() -> None:
    record = {"status": 5}
    assert Filter("status", Operator.EQ, "5").matches(record)
    assert Filter("status", Operator.EQ, 5).matches(record)
    assert not Filter("status", Operator.EQ, "6").matches(record)


def test_neq_and_in_use_text_form() -> None:
    record = {"company_id": "7"}
    assert not Filter("company_id", Operator.NEQ, 7).matches(record)
    assert Filter("company_id", Operator.IN, (1, 7)).matches(record)
    assert not Filter("company_id", Operator.IN, (1, 2)).matches(record)


def test_in_requires_a_collection() -> None:
    assert not Filter("status", Operator.IN, "paid").matches({"status": "paid"})


def test_missing_column_is_not_null() -> None:
    record = {"id": 1}
    assert not Filter("deleted_at", Operator.EQ, None).matches(record)
    assert Filter("deleted_at", Operator.NEQ, None).matches(record)
    assert Filter("deleted_at", Operator.NEQ, "x").matches(record)
    assert not Filter("deleted_at", Operator.IN, [None]).matches(record)
    assert not Filter("deleted_at", Operator.CONTAINS, "null").matches(record)
    assert not Filter("deleted_at", Operator.GTE, 0).matches(record)


def test_explicit_null_matches_eq_none() -> None:
    record = {"id": 1, "deleted_at": None}
    assert Filter("deleted_at", Operator.EQ, None).matches(record)
    assert not Filter("deleted_at", Operator.NEQ, None).matches(record)


def test_contains_is_case_sensitive_and_ilike_is_not() -> None:
    record = {"name": "Layons Construction"}
    assert Filter("name", Operator.CONTAINS, "Construction").matches(record)
    assert not Filter("name", Operator.CONTAINS, "construction").matches(record)
    assert Filter("name", Operator.ILIKE, "CONSTRUCTION").matches(record)
    assert not Filter("name", Operator.ILIKE, "roads").matches(record)


def test_relational_operators_use_native_ordering() -> None:
    record = {"total": 100, "due_date": "2024-02-01"}
    assert Filter("total", Operator.GT, 99).matches(record)
    assert Filter("total", Operator.GTE, 100).matches(record)
    assert not Filter("total", Operator.LT, 100).matches(record)
    assert Filter("total", Operator.LTE, 100.0).matches(record)
    assert Filter("due_date", Operator.GTE, "2024-01-01").matches(record)


def test_relational_operators_skip_unorderable_pairs() -> None:
    assert not Filter("total", Operator.GT, 5).matches({"total": "100"})
    assert not Filter("total", Operator.GT, 5).matches({"total": None})
    assert not Filter("total", Operator.LT, 5).matches({})


def test_filters_combine_as_intersection() -> None:
    rows = [
        {"id": 1, "company_id": 7, "status": "paid"},
        {"id": 2, "company_id": 7, "status": "sent"},
        {"id": 3, "company_id": 9, "status": "paid"},
    ]
    by_company = Filter("company_id", Operator.EQ, 7)
    by_status = Filter("status", Operator.EQ, "paid")

    combined = apply_filters(rows, [by_company, by_status])
    only_company = apply_filters(rows, [by_company])
    only_status = apply_filters(rows, [by_status])

    assert combined == [r for r in only_company if r in only_status]
    assert [r["id"] for r in combined] == [1]


def test_sort_puts_nulls_first_ascending() -> None:
    rows = [{"d": None}, {"d": "2024-01-01"}, {"d": "2023-01-01"}]
    assert sort_records(rows, OrderBy("d")) == [
        {"d": None},
        {"d": "2023-01-01"},
        {"d": "2024-01-01"},
    ]


def test_sort_puts_nulls_last_descending() -> None:
    rows = [{"d": None}, {"d": "2024-01-01"}, {"d": "2023-01-01"}]
    assert sort_records(rows, OrderBy("d", ascending=False)) == [
        {"d": "2024-01-01"},
        {"d": "2023-01-01"},
        {"d": None},
    ]


def test_sort_is_stable() -> None:
    rows = [{"k": 1, "n": "a"}, {"k": 0, "n": "b"}, {"k": 1, "n": "c"}, {"k": 0, "n": "d"}]
    assert [r["n"] for r in sort_records(rows, OrderBy("k"))] == ["b", "d", "a", "c"]


def test_sort_strings_case_insensitively() -> None:
    rows = [{"name": "beta"}, {"name": "Alpha"}, {"name": "alpha"}, {"name": "Gamma"}]
    ordered = [r["name"] for r in sort_records(rows, OrderBy("name"))]
    assert ordered[2:] == ["beta", "Gamma"]
    assert sorted(ordered[:2]) == ["Alpha", "alpha"]


def test_compare_values_is_three_way() -> None:
    assert compare_values(1, 2) == -1
    assert compare_values(2, 1) == 1
    assert compare_values(2, 2) == 0
    assert compare_values(1, 2, ascending=False) == 1
    assert compare_values("x", 1) == 0
    assert compare_values(None, 1) == -1
    assert compare_values(None, 1, ascending=False) == 1


def test_no_order_keeps_input_order() -> None:
    rows = [{"id": 3}, {"id": 1}]
    assert sort_records(rows, None) == rows
