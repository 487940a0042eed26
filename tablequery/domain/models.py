"""
Domain models for tablequery.

Records themselves stay untyped (`Record` is a plain mapping): the remote API
owns the schema. What is modelled here is the contract this package hands
back to callers (`QueryResult` / `QueryError`) and the DDL actions passed
through to the backend.
"""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

Record = Dict[str, Any]


class QueryError(BaseModel):
    """
    Error half of a query result.

    `completed` is only populated by batch mutations: it lists the records
    that were written before the failing one, since earlier writes are not
    rolled back.
    """

    message: str = Field(..., description="Human-readable failure description.")
    status_code: Optional[int] = Field(None, description="HTTP status, when the backend answered.")
    completed: List[Record] = Field(default_factory=list)

    model_config = {"frozen": True}


class QueryResult(BaseModel):
    """
    Uniform `{data, error}` result returned by every execution method.

    Exactly one of `data`/`error` is meaningful: `error` is None on success,
    and `data` is None on failure (it may also be None on success for
    `maybe_single()` with no match).
    """

    # list of records for reads and mutations, one record (or None) for
    # maybe_single()/single()/get_by_id(), the raw response body for DDL calls
    data: Any = None
    error: Optional[QueryError] = None

    model_config = {"frozen": True}

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: Any) -> "QueryResult":
        return cls(data=data, error=None)

    @classmethod
    def failure(
        cls,
        message: str,
        status_code: Optional[int] = None,
        completed: Optional[List[Record]] = None,
    ) -> "QueryResult":
        return cls(
            data=None,
            error=QueryError(message=message, status_code=status_code, completed=completed or []),
        )


class AddColumn(BaseModel):
    type: Literal["ADD"] = "ADD"
    name: str
    definition: str


class ModifyColumn(BaseModel):
    type: Literal["MODIFY"] = "MODIFY"
    name: str
    definition: str


class ChangeColumn(BaseModel):
    type: Literal["CHANGE"] = "CHANGE"
    name: str
    new_name: str
    definition: str


class DropColumn(BaseModel):
    type: Literal["DROP"] = "DROP"
    name: str


AlterAction = Union[AddColumn, ModifyColumn, ChangeColumn, DropColumn]


__all__ = [
    "AddColumn",
    "AlterAction",
    "ChangeColumn",
    "DropColumn",
    "ModifyColumn",
    "QueryError",
    "QueryResult",
    "Record",
]
