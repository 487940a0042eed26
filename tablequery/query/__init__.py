"""
Query package for tablequery.

Re-exports the fluent builder and the client-side operator semantics so
downstream code can import from `tablequery.query` directly.
"""

from tablequery.query.builder import QueryBuilder
from tablequery.query.operators import (
    Filter,
    Operator,
    OrderBy,
    apply_filters,
    compare_values,
    sort_records,
    text_form,
)

__all__ = [
    "Filter",
    "Operator",
    "OrderBy",
    "QueryBuilder",
    "apply_filters",
    "compare_values",
    "sort_records",
    "text_form",
]
