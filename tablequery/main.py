from __future__ import annotations

import asyncio
import json
import sys
from typing import Any, List, Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from tablequery.client import TableClient
from tablequery.config import get_settings
from tablequery.domain.models import QueryResult, Record
from tablequery.query.builder import QueryBuilder
from tablequery.utils.logging import configure_logging

app = typer.Typer(help="Query tables of the record API from the command line.")


def _client() -> TableClient:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    return TableClient.from_settings(settings)


def _parse_equals(pairs: List[str]) -> List[tuple[str, str]]:
    parsed = []
    for pair in pairs:
        column, sep, value = pair.partition("=")
        if not sep or not column:
            raise typer.BadParameter(f"expected COLUMN=VALUE, got '{pair}'", param_hint="--eq")
        parsed.append((column, value))
    return parsed


def _render_rows(rows: List[Record], title: str) -> None:
    console = Console()
    if not rows:
        console.print(f"[dim]{title}: no rows[/dim]")
        return

    columns: List[str] = []
    for row in rows:
        for key in row:
            if key not in columns:
                columns.append(key)

    table = Table(title=title, box=box.ROUNDED, show_lines=False)
    for column in columns:
        table.add_column(column, overflow="fold")
    for row in rows:
        table.add_row(*["" if row.get(c) is None else str(row.get(c)) for c in columns])
    console.print(table)


def _emit(result: QueryResult, title: str, as_json: bool) -> None:
    if result.error is not None:
        typer.echo(f"Error: {result.error.message}", err=True)
        raise typer.Exit(code=1)
    data: Any = result.data
    if as_json:
        typer.echo(json.dumps(data, indent=2, default=str))
    elif data is None:
        typer.echo("Not found.")
    else:
        _render_rows(data if isinstance(data, list) else [data], title)


async def _run_select(builder: QueryBuilder, client: TableClient) -> QueryResult:
    async with client:
        return await builder


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"API={settings.api_url} | timeout={settings.api_timeout_seconds:g}s "
        f"attempts={settings.api_max_attempts} retry_delay={settings.api_retry_delay_seconds:g}s | "
        f"env={settings.app_env} log_level={settings.log_level}"
    )


@app.command()
def select(
    table: str = typer.Argument(..., help="Table to query."),
    eq: List[str] = typer.Option([], "--eq", "-e", help="Equality filter COLUMN=VALUE (repeatable)."),
    order: Optional[str] = typer.Option(None, "--order", "-o", help="Column to sort by."),
    desc: bool = typer.Option(False, "--desc", help="Sort descending."),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", min=0, help="Maximum rows to return."),
    columns: Optional[str] = typer.Option(None, "--columns", "-c", help="Comma-separated columns."),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table."),
) -> None:
    """
    Fetch rows from TABLE, filtered and sorted client-side.
    """
    filters = _parse_equals(eq)
    client = _client()
    builder = client.table(table)
    for column, value in filters:
        builder.eq(column, value)
    if order:
        builder.order(order, ascending=not desc)
    if limit is not None:
        builder.limit(limit)
    if columns:
        builder.select(columns)

    result = asyncio.run(_run_select(builder, client))
    _emit(result, table, as_json)


@app.command()
def get(
    table: str = typer.Argument(..., help="Table to query."),
    record_id: str = typer.Argument(..., help="Record identifier."),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table."),
) -> None:
    """
    Fetch a single record by id.
    """
    client = _client()

    async def fetch() -> QueryResult:
        async with client:
            return await client.get_by_id(table, record_id)

    _emit(asyncio.run(fetch()), f"{table} #{record_id}", as_json)


@app.command("drop-table")
def drop_table(
    table: str = typer.Argument(..., help="Table to drop."),
    yes: bool = typer.Option(False, "--yes", help="Confirm the drop."),
) -> None:
    """
    Drop TABLE on the backend. Requires --yes.
    """
    if not yes:
        typer.echo(f"Refusing to drop '{table}' without --yes.", err=True)
        raise typer.Exit(code=2)
    client = _client()

    async def drop() -> QueryResult:
        async with client:
            return await client.drop_table(table)

    result = asyncio.run(drop())
    if result.error is not None:
        typer.echo(f"Error: {result.error.message}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Dropped table '{table}'.")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
