"""
Infrastructure package for tablequery.

Centralizes I/O against the record API (HTTP transport, timeout and retry
policy) and its exception hierarchy. Keep this layer free of filtering or
sorting logic; that belongs to the query package.
"""

from tablequery.infrastructure.api_client import RecordId, RetryPolicy, TableApiClient
from tablequery.infrastructure.errors import ApiError, ApiRequestTimeout, TransientApiError

__all__ = [
    "ApiError",
    "ApiRequestTimeout",
    "RecordId",
    "RetryPolicy",
    "TableApiClient",
    "TransientApiError",
]
