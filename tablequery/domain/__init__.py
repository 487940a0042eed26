"""
Domain package for tablequery.

Exports the result contract and DDL models used by the API client and the
query builder. Keep this package focused on data definitions.
"""

from tablequery.domain.models import (
    AddColumn,
    AlterAction,
    ChangeColumn,
    DropColumn,
    ModifyColumn,
    QueryError,
    QueryResult,
    Record,
)

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
