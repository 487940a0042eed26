"""
Pytest configuration for tablequery.

Provides fixtures for:
- Settings with test-specific values
- An in-memory record API (tests.fakes.FakeBackend) served through
  httpx.MockTransport, recording every request
- A TableClient wired to that backend with a non-blocking retry sleep
"""

from __future__ import annotations

from typing import Any, Dict, List

import pytest

from tablequery.client import TableClient
from tablequery.config import Settings
from tests.fakes import BASE_URL, FakeBackend


@pytest.fixture
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.
    """
    return Settings(
        api_url=BASE_URL,
        api_timeout_seconds=1.0,
        api_max_attempts=3,
        api_retry_delay_seconds=0.0,
        log_level="DEBUG",
    )


@pytest.fixture
def invoices() -> List[Dict[str, Any]]:
    return [
        {"id": 1, "number": "INV-001", "company_id": 7, "status": "paid", "total": 1200.0, "due_date": "2024-03-01"},
        {"id": 2, "number": "INV-002", "company_id": 7, "status": "draft", "total": 350, "due_date": None},
        {"id": 3, "number": "INV-003", "company_id": 9, "status": "sent", "total": 980.5, "due_date": "2024-01-15"},
        {"id": 4, "number": "inv-004", "company_id": "7", "status": "sent", "total": 75, "due_date": "2023-12-31"},
    ]


@pytest.fixture
def backend(invoices: List[Dict[str, Any]]) -> FakeBackend:
    return FakeBackend({"invoices": invoices, "customers": []})


@pytest.fixture
def client(backend: FakeBackend) -> TableClient:
    return backend.client()
