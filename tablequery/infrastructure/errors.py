"""
Exception hierarchy raised by the record API client.

These never reach callers of the query builder: the builder converts them to
`QueryError` values. `TransientApiError` marks the failures the retry policy
is allowed to repeat.
"""

from __future__ import annotations

from typing import Any, Optional


class ApiError(Exception):
    """The backend rejected a request, or it could not be completed."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body


class TransientApiError(ApiError):
    """5xx responses and transport-level failures; eligible for retry."""


class ApiRequestTimeout(TransientApiError):
    """A request exceeded the per-call timeout."""


__all__ = ["ApiError", "ApiRequestTimeout", "TransientApiError"]
