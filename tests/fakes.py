"""
In-memory record API used as the simulated backend in tests.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Union

import httpx

from tablequery.client import TableClient
from tablequery.infrastructure.api_client import RetryPolicy

BASE_URL = "http://backend.test/api.php"

Injected = Union[httpx.Response, Exception]


class FakeBackend:
    """
    Table store speaking the record API contract.

    `fail(n, response_or_exc)` makes the n-th request (1-based, counting
    retries) answer with the given response or raise the given exception.
    """

    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self.requests: List[httpx.Request] = []
        self.sleeps: List[float] = []
        self.next_id = 100
        self._failures: Dict[int, Injected] = {}

    # ------------------------------------------------------------ scripting

    def fail(self, call_number: int, outcome: Injected) -> None:
        self._failures[call_number] = outcome

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)

    def client(self, retry: Optional[RetryPolicy] = None) -> TableClient:
        return TableClient(
            BASE_URL,
            retry or RetryPolicy(max_attempts=3, timeout_seconds=1.0, delay_seconds=1.0),
            transport=httpx.MockTransport(self.handler),
            sleep=self.sleep,
        )

    # ------------------------------------------------------------ inspection

    @property
    def call_count(self) -> int:
        return len(self.requests)

    @property
    def calls(self) -> List[tuple]:
        """(method, query params, decoded body) for every request received."""
        recorded = []
        for request in self.requests:
            body = json.loads(request.content) if request.content else None
            recorded.append((request.method, dict(request.url.params), body))
        return recorded

    # ------------------------------------------------------------ serving

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        injected = self._failures.get(len(self.requests))
        if isinstance(injected, Exception):
            raise injected
        if injected is not None:
            return injected

        params = request.url.params
        table = params.get("table")
        record_id = params.get("id")
        body = json.loads(request.content) if request.content else None

        if request.method == "GET":
            rows = self.tables.get(table, [])
            if record_id is not None:
                rows = [r for r in rows if str(r.get("id")) == record_id]
            return httpx.Response(200, json=rows)

        if request.method == "POST":
            if isinstance(body, dict) and "drop_table" in body:
                self.tables.pop(body["drop_table"], None)
                return httpx.Response(200, json={"success": f"Table {body['drop_table']} dropped"})
            if isinstance(body, dict) and body.get("create_table"):
                self.tables.setdefault(table, [])
                return httpx.Response(200, json={"success": f"Table {table} created"})
            if isinstance(body, dict) and body.get("alter_table"):
                return httpx.Response(200, json={"success": f"Table {table} altered"})
            self.next_id += 1
            self.tables.setdefault(table, []).append({**body, "id": self.next_id})
            return httpx.Response(200, json={"success": True, "id": self.next_id})

        rows = self.tables.get(table, [])
        match = next((r for r in rows if str(r.get("id")) == record_id), None)
        if match is None:
            return httpx.Response(404, json={"error": "Record not found"})
        if request.method == "PUT":
            match.update(body or {})
            return httpx.Response(200, json={"success": True})
        if request.method == "DELETE":
            rows.remove(match)
            return httpx.Response(200, json={"success": True})
        return httpx.Response(405, json={"error": "Method not allowed"})


