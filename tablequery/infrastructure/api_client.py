"""
HTTP client for the table-oriented record API.

Wraps the backend contract (table-scoped GET/POST/PUT/DELETE plus DDL
pass-through) behind async methods. Each call is bound by a per-request
timeout and retried with tenacity on transient failures (timeouts, 5xx,
transport errors). 4xx responses are never retried.

Usage:
    async with TableApiClient("https://erp.example.com/api.php") as api:
        rows = await api.get_all("customers")
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Union

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_fixed,
)

from tablequery.config import DEFAULT_API_URL
from tablequery.domain.models import AlterAction, Record
from tablequery.infrastructure.errors import ApiError, ApiRequestTimeout, TransientApiError
from tablequery.utils.logging import get_logger

log = get_logger(__name__)

RecordId = Union[int, str]
SleepFn = Callable[[float], Awaitable[None]]

_DEFAULT_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


@dataclass(frozen=True)
class RetryPolicy:
    """
    Timeout and retry knobs for every backend call.

    Attributes
    ----------
    max_attempts : int
        Total attempts per call, including the first one.
    timeout_seconds : float
        Per-attempt timeout.
    delay_seconds : float
        Wait between attempts. With `exponential=True` it is the base of an
        exponential backoff capped at `max_delay_seconds`.
    """

    max_attempts: int = 3
    timeout_seconds: float = 10.0
    delay_seconds: float = 1.0
    exponential: bool = False
    max_delay_seconds: float = 10.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        if self.delay_seconds < 0:
            raise ValueError("delay_seconds must not be negative")

    def wait_strategy(self):
        if self.exponential:
            return wait_exponential(
                multiplier=self.delay_seconds, min=self.delay_seconds, max=self.max_delay_seconds
            )
        return wait_fixed(self.delay_seconds)


def _parse_body(text: str) -> Any:
    """Decode a response body; non-JSON text is wrapped as {"raw": text}."""
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return {"raw": text}


def _error_detail(body: Any, text: str) -> str:
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    if isinstance(body, dict) and set(body) == {"raw"}:
        return text
    if isinstance(body, (dict, list)):
        return json.dumps(body)
    return text


class TableApiClient:
    """
    Async client for the record API.

    Owns a lazily created `httpx.AsyncClient` unless one is supplied, in which
    case the caller keeps ownership of it. `sleep` is the coroutine used
    between retries, injectable so tests do not wait on real timers.
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
        if not base_url:
            raise ValueError("base_url must not be empty")
        self.base_url = base_url
        self.retry = retry or RetryPolicy()
        self._http = http_client
        self._owns_http = http_client is None
        self._transport = transport
        self._sleep: SleepFn = sleep or asyncio.sleep

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(transport=self._transport, follow_redirects=True)
        return self._http

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> "TableApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        del exc_type, exc, tb
        await self.aclose()

    # ------------------------------------------------------------------ core

    async def _send_once(
        self, method: str, params: Dict[str, str], body: Any
    ) -> Any:
        """Issue a single request and classify the outcome."""
        client = self._client()
        try:
            response = await client.request(
                method,
                self.base_url,
                params=params or None,
                json=body,
                headers=_DEFAULT_HEADERS,
                timeout=self.retry.timeout_seconds,
            )
        except httpx.TimeoutException as exc:
            log.error(
                f"[API] Request timeout ({self.retry.timeout_seconds:g}s) for {method} {self.base_url}",
                extra={"method": method, "params": params},
            )
            raise ApiRequestTimeout("API request timeout - server may be unavailable") from exc
        except httpx.TransportError as exc:
            log.error(
                f"[API] Transport error for {method} {self.base_url}: {exc}",
                extra={"method": method, "params": params},
            )
            raise TransientApiError(f"Failed to fetch from API: {exc}") from exc

        text = response.text
        payload = _parse_body(text)

        if not response.is_success:
            detail = _error_detail(payload, text)
            log.error(
                f"[API] {method} {response.request.url} - {response.status_code}: {detail}",
                extra={"method": method, "status_code": response.status_code},
            )
            message = f"API error {response.status_code}: {detail}"
            if response.status_code >= 500:
                raise TransientApiError(message, status_code=response.status_code, body=payload)
            raise ApiError(message, status_code=response.status_code, body=payload)

        return payload

    def _log_retry(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        remaining = self.retry.max_attempts - retry_state.attempt_number
        log.warning(
            f"[API] Transient failure, retrying... ({remaining} attempts left)",
            extra={
                "attempt": retry_state.attempt_number,
                "error": str(exc) if exc else None,
            },
        )

    async def request(
        self,
        method: str,
        *,
        table: Optional[str] = None,
        record_id: Optional[RecordId] = None,
        body: Any = None,
    ) -> Any:
        """
        Send one logical request, retrying transient failures.

        Returns
        -------
        Any
            The decoded JSON body (or {"raw": text} for non-JSON bodies).

        Raises
        ------
        ApiError
            On 4xx responses, or once the retry budget is spent on transient
            failures (then the subclass `TransientApiError` is raised).
        """
        params: Dict[str, str] = {}
        if table is not None:
            params["table"] = table
        if record_id is not None:
            params["id"] = str(record_id)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.retry.max_attempts),
            wait=self.retry.wait_strategy(),
            retry=retry_if_exception_type(TransientApiError),
            before_sleep=self._log_retry,
            sleep=self._sleep,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._send_once(method, params, body)
        raise ApiError("Request was not attempted")  # pragma: no cover - tenacity always attempts once

    # ------------------------------------------------------------------ CRUD

    async def get_all(self, table: str) -> Any:
        return await self.request("GET", table=table)

    async def get_by_id(self, table: str, record_id: RecordId) -> Any:
        return await self.request("GET", table=table, record_id=record_id)

    async def insert(self, table: str, data: Mapping[str, Any]) -> Any:
        return await self.request("POST", table=table, body=dict(data))

    async def update(self, table: str, record_id: RecordId, data: Mapping[str, Any]) -> Any:
        return await self.request("PUT", table=table, record_id=record_id, body=dict(data))

    async def remove(self, table: str, record_id: RecordId) -> Any:
        return await self.request("DELETE", table=table, record_id=record_id)

    # ------------------------------------------------------------------ DDL

    async def create_table(self, table: str, columns: Mapping[str, str]) -> Any:
        return await self.request(
            "POST", table=table, body={"create_table": True, "columns": dict(columns)}
        )

    async def alter_table(
        self, table: str, actions: Sequence[Union[AlterAction, Record]]
    ) -> Any:
        payload: List[Record] = [
            action if isinstance(action, dict) else action.model_dump() for action in actions
        ]
        return await self.request(
            "POST", table=table, body={"alter_table": True, "actions": payload}
        )

    async def drop_table(self, table: str) -> Any:
        return await self.request("POST", body={"drop_table": table})


__all__ = ["RecordId", "RetryPolicy", "TableApiClient"]
