"""
tablequery - fluent query builder over a table-oriented HTTP record API.

The backend exposes only whole-table reads and single-record writes by id.
This package layers a chainable query interface on top of it:

- Filters (eq, neq, in, gt, lt, gte, lte, contains, ilike), single-column
  sort and limit, applied client-side after a full-table fetch
- Insert, update, delete and upsert issued record by record
- Per-request timeout with retries on transient failures
- A uniform `QueryResult(data, error)` for every call
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from tablequery.client import TableClient
from tablequery.config import Settings, get_settings
from tablequery.domain.models import (
    AddColumn,
    ChangeColumn,
    DropColumn,
    ModifyColumn,
    QueryError,
    QueryResult,
    Record,
)
from tablequery.infrastructure.api_client import RetryPolicy, TableApiClient
from tablequery.infrastructure.errors import ApiError, ApiRequestTimeout, TransientApiError
from tablequery.query.builder import QueryBuilder
from tablequery.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Entry point
    "TableClient",
    "QueryBuilder",
    # Configuration
    "Settings",
    "get_settings",
    "RetryPolicy",
    # Results and models
    "QueryResult",
    "QueryError",
    "Record",
    "AddColumn",
    "ModifyColumn",
    "ChangeColumn",
    "DropColumn",
    # Transport
    "TableApiClient",
    "ApiError",
    "TransientApiError",
    "ApiRequestTimeout",
    # Logging
    "configure_logging",
    "get_logger",
]
