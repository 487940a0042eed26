"""
Fluent query builder over the record API.

The backend only supports whole-table fetch and single-row writes by id, so a
read always fetches the full table and then filters, sorts, limits and
projects client-side. Writes are issued one record at a time.

Every execution method returns a `QueryResult`; expected failures (backend
errors, transport failures after retries, missing id filters) are reported in
`result.error` instead of being raised.

Usage:
    result = await (
        client.table("invoices")
        .eq("company_id", company_id)
        .gte("due_date", "2024-01-01")
        .order("due_date")
        .limit(50)
    )
    if result.error:
        ...
"""

from __future__ import annotations

import asyncio
import re
from typing import Any, Generator, List, Mapping, Optional, Sequence, Union

from tablequery.domain.models import QueryResult, Record
from tablequery.infrastructure.api_client import TableApiClient
from tablequery.infrastructure.errors import ApiError
from tablequery.query.operators import (
    LIST_OPERATORS,
    Filter,
    Operator,
    OrderBy,
    apply_filters,
    sort_records,
)
from tablequery.utils.logging import get_logger

log = get_logger(__name__)

Values = Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]

_COLUMN_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _as_rows(values: Values) -> List[Record]:
    if isinstance(values, Mapping):
        return [dict(values)]
    return [dict(v) for v in values]


def _created_id(response: Any) -> Any:
    return response.get("id") if isinstance(response, dict) else None


def _has_id(row: Mapping[str, Any]) -> bool:
    return row.get("id") is not None


class QueryBuilder:
    """
    Accumulates filter/sort/limit/mutation intent for one table.

    Chained calls mutate and return the same instance. Await the builder (or
    call `execute()`) to run it. Builders are not meant to be shared between
    concurrent call sites; create a fresh one per query.
    """

    def __init__(self, api: TableApiClient, table: str) -> None:
        if not table:
            raise ValueError("table name must not be empty")
        self.table = table
        self._api = api
        self._filters: List[Filter] = []
        self._columns: Optional[str] = None
        self._order: Optional[OrderBy] = None
        self._limit: Optional[int] = None
        self._insert_values: Optional[Values] = None
        self._insert_concurrency = 1
        self._update_values: Optional[Mapping[str, Any]] = None
        self._delete = False

    def __repr__(self) -> str:
        return f"<QueryBuilder table={self.table!r} filters={len(self._filters)}>"

    # -------------------------------------------------------------- filters

    def _add_filter(self, column: str, op: Operator, value: Any) -> "QueryBuilder":
        if op in LIST_OPERATORS and not isinstance(value, (str, bytes, Mapping)):
            value = tuple(value)
        self._filters.append(Filter(column, op, value))
        return self

    def eq(self, column: str, value: Any) -> "QueryBuilder":
        return self._add_filter(column, Operator.EQ, value)

    def neq(self, column: str, value: Any) -> "QueryBuilder":
        return self._add_filter(column, Operator.NEQ, value)

    def in_(self, column: str, values: Sequence[Any]) -> "QueryBuilder":
        return self._add_filter(column, Operator.IN, values)

    def gt(self, column: str, value: Any) -> "QueryBuilder":
        return self._add_filter(column, Operator.GT, value)

    def lt(self, column: str, value: Any) -> "QueryBuilder":
        return self._add_filter(column, Operator.LT, value)

    def gte(self, column: str, value: Any) -> "QueryBuilder":
        return self._add_filter(column, Operator.GTE, value)

    def lte(self, column: str, value: Any) -> "QueryBuilder":
        return self._add_filter(column, Operator.LTE, value)

    def contains(self, column: str, value: Any) -> "QueryBuilder":
        return self._add_filter(column, Operator.CONTAINS, value)

    def ilike(self, column: str, value: Any) -> "QueryBuilder":
        return self._add_filter(column, Operator.ILIKE, value)

    where_equals = eq
    where_not_equals = neq
    where_in = in_
    where_greater_than = gt
    where_less_than = lt
    where_greater_or_equal = gte
    where_less_or_equal = lte
    where_contains = contains
    where_ilike = ilike

    # ------------------------------------------------- shaping the result

    def select(self, columns: str = "*") -> "QueryBuilder":
        """
        Choose returned columns, e.g. ``"id, name"``.

        Only plain comma-separated column names project. ``"*"`` and
        embedded-resource expressions such as ``"*, customers(name)"`` return
        full records.
        """
        self._columns = columns or "*"
        return self

    def order(self, column: str, ascending: bool = True) -> "QueryBuilder":
        """Sort by one column; a later call replaces the earlier one."""
        self._order = OrderBy(column, ascending)
        return self

    order_by = order

    def limit(self, count: int) -> "QueryBuilder":
        if count < 0:
            raise ValueError("limit must not be negative")
        self._limit = count
        return self

    # ------------------------------------------------------------ mutations

    def insert(self, values: Values, concurrency: int = 1) -> "QueryBuilder":
        """
        Stage one record or a sequence of records for creation.

        Records are created one after another and the batch stops at the
        first failure. With `concurrency` > 1 up to that many creates run at
        once; results still come back in input order.
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._insert_values = values
        self._insert_concurrency = concurrency
        return self

    def update(self, values: Mapping[str, Any]) -> "QueryBuilder":
        """Stage an update; requires ``eq("id", ...)``. Other filters are ignored."""
        self._update_values = values
        return self

    def delete(self) -> "QueryBuilder":
        """Stage a delete; requires ``eq("id", ...)``. Other filters are ignored."""
        self._delete = True
        return self

    # ------------------------------------------------------------ execution

    def __await__(self) -> Generator[Any, None, QueryResult]:
        return self.execute().__await__()

    async def execute(self) -> QueryResult:
        # A builder holding several staged mutations runs only the first of
        # insert, update, delete.
        if self._insert_values is not None:
            return await self._execute_insert()
        if self._update_values is not None:
            return await self._execute_update()
        if self._delete:
            return await self._execute_delete()
        return await self._execute_select()

    async def maybe_single(self) -> QueryResult:
        """First matching record, or ``data=None`` without error when nothing matches."""
        result = await self.execute()
        if result.error is not None:
            return result
        if not result.data:
            return QueryResult.success(None)
        first = result.data[0] if isinstance(result.data, list) else result.data
        return QueryResult.success(first)

    async def single(self) -> QueryResult:
        # Same as maybe_single(): several matches return the first one.
        return await self.maybe_single()

    async def upsert(self, values: Values) -> QueryResult:
        """
        Update records whose ``id`` is not None and create the rest, in order.

        The ``id`` is sent as the query parameter and left out of the body.
        Stops at the first failure.
        """
        results: List[Record] = []
        for row in _as_rows(values):
            try:
                if _has_id(row):
                    payload = {k: v for k, v in row.items() if k != "id"}
                    await self._api.update(self.table, row["id"], payload)
                    results.append(row)
                else:
                    response = await self._api.insert(self.table, row)
                    results.append({**row, "id": _created_id(response)})
            except ApiError as exc:
                return self._failure("upsert", exc, completed=results)
        return QueryResult.success(results)

    # ------------------------------------------------------------ internals

    def _failure(
        self, operation: str, exc: ApiError, completed: Optional[List[Record]] = None
    ) -> QueryResult:
        log.debug(
            f"{operation} on {self.table} failed: {exc.message}",
            extra={"table": self.table, "operation": operation, "completed": len(completed or [])},
        )
        return QueryResult.failure(exc.message, exc.status_code, completed)

    def _id_filter(self) -> Optional[Filter]:
        return next(
            (f for f in self._filters if f.column == "id" and f.operator is Operator.EQ),
            None,
        )

    def _projection(self) -> Optional[List[str]]:
        if self._columns is None:
            return None
        names = [name.strip() for name in self._columns.split(",") if name.strip()]
        if not names or not all(_COLUMN_NAME.match(name) for name in names):
            return None
        return names

    async def _execute_select(self) -> QueryResult:
        try:
            rows = await self._api.get_all(self.table)
        except ApiError as exc:
            return self._failure("select", exc)

        if rows is None:
            rows = []
        if not isinstance(rows, list):
            return QueryResult.failure(
                f"Unexpected response for table '{self.table}': expected a list of records"
            )

        rows = apply_filters(rows, self._filters)
        rows = sort_records(rows, self._order)
        if self._limit is not None:
            rows = rows[: self._limit]
        columns = self._projection()
        if columns is not None:
            rows = [{c: row[c] for c in columns if c in row} for row in rows]

        log.debug(
            f"Selected {len(rows)} rows from {self.table}",
            extra={"table": self.table, "rows": len(rows), "filters": len(self._filters)},
        )
        return QueryResult.success(rows)

    async def _execute_insert(self) -> QueryResult:
        rows = _as_rows(self._insert_values)
        if self._insert_concurrency > 1 and len(rows) > 1:
            return await self._execute_insert_concurrent(rows)

        created: List[Record] = []
        for row in rows:
            try:
                response = await self._api.insert(self.table, row)
            except ApiError as exc:
                return self._failure("insert", exc, completed=created)
            created.append({**row, "id": _created_id(response)})
        return QueryResult.success(created)

    async def _execute_insert_concurrent(self, rows: List[Record]) -> QueryResult:
        semaphore = asyncio.Semaphore(self._insert_concurrency)

        async def create(row: Record) -> Any:
            async with semaphore:
                return await self._api.insert(self.table, row)

        outcomes = await asyncio.gather(*(create(row) for row in rows), return_exceptions=True)

        created: List[Record] = []
        first_error: Optional[ApiError] = None
        for row, outcome in zip(rows, outcomes):
            if isinstance(outcome, ApiError):
                first_error = first_error or outcome
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                created.append({**row, "id": _created_id(outcome)})

        if first_error is not None:
            return self._failure("insert", first_error, completed=created)
        return QueryResult.success(created)

    async def _execute_update(self) -> QueryResult:
        id_filter = self._id_filter()
        if id_filter is None:
            return QueryResult.failure("update requires an id filter")
        values = dict(self._update_values or {})
        try:
            await self._api.update(self.table, id_filter.value, values)
        except ApiError as exc:
            return self._failure("update", exc)
        return QueryResult.success([{"id": id_filter.value, **values}])

    async def _execute_delete(self) -> QueryResult:
        id_filter = self._id_filter()
        if id_filter is None:
            return QueryResult.failure("delete requires an id filter")
        try:
            await self._api.remove(self.table, id_filter.value)
        except ApiError as exc:
            return self._failure("delete", exc)
        return QueryResult.success([])


__all__ = ["QueryBuilder"]
