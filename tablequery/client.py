"""
Entry point for callers: a table client bound to one explicit API endpoint.

Usage:
    from tablequery import TableClient

    async with TableClient("https://erp.example.com/api.php") as db:
        result = await db.table("customers").eq("company_id", 7).order("name")
        customer = await db.get_by_id("customers", 12)

`TableClient.from_settings()` builds one from environment configuration;
nothing else in the package reads the environment.
"""

from __future__ import annotations

from typing import Any, Awaitable, Mapping, Optional, Sequence, Union

import httpx

from tablequery.config import DEFAULT_API_URL, Settings, get_settings
from tablequery.domain.models import AlterAction, QueryResult, Record
from tablequery.infrastructure.api_client import RecordId, RetryPolicy, SleepFn, TableApiClient
from tablequery.infrastructure.errors import ApiError
from tablequery.query.builder import QueryBuilder
from tablequery.utils.logging import get_logger

log = get_logger(__name__)


class TableClient:
    """
    Factory for query builders plus the single-call operations (fetch by id
    and DDL) that do not need a builder.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        retry: Optional[RetryPolicy] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[SleepFn] = None,
    ) -> None:
        self.api = TableApiClient(
            base_url, retry, http_client=http_client, transport=transport, sleep=sleep
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **kwargs: Any) -> "TableClient":
        settings = settings or get_settings()
        retry = RetryPolicy(
            max_attempts=settings.api_max_attempts,
            timeout_seconds=settings.api_timeout_seconds,
            delay_seconds=settings.api_retry_delay_seconds,
        )
        return cls(settings.api_url, retry, **kwargs)

    @property
    def base_url(self) -> str:
        return self.api.base_url

    def table(self, name: str) -> QueryBuilder:
        """Start a new query against `name`. No request is made yet."""
        return QueryBuilder(self.api, name)

    from_ = table

    async def aclose(self) -> None:
        await self.api.aclose()

    async def __aenter__(self) -> "TableClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        del exc_type, exc, tb
        await self.aclose()

    async def _call(self, operation: str, call: Awaitable[Any]) -> QueryResult:
        try:
            return QueryResult.success(await call)
        except ApiError as exc:
            log.debug(f"{operation} failed: {exc.message}", extra={"operation": operation})
            return QueryResult.failure(exc.message, exc.status_code)

    async def get_by_id(self, table: str, record_id: RecordId) -> QueryResult:
        """Fetch one record by id; ``data`` is None when it does not exist."""
        result = await self._call("get_by_id", self.api.get_by_id(table, record_id))
        if result.error is not None:
            return result
        rows = result.data
        if isinstance(rows, list):
            return QueryResult.success(rows[0] if rows else None)
        if isinstance(rows, dict) and rows:
            return QueryResult.success(rows)
        return QueryResult.success(None)

    async def create_table(self, table: str, columns: Mapping[str, str]) -> QueryResult:
        return await self._call("create_table", self.api.create_table(table, columns))

    async def alter_table(
        self, table: str, actions: Sequence[Union[AlterAction, Record]]
    ) -> QueryResult:
        return await self._call("alter_table", self.api.alter_table(table, actions))

    async def drop_table(self, table: str) -> QueryResult:
        return await self._call("drop_table", self.api.drop_table(table))


__all__ = ["TableClient"]
