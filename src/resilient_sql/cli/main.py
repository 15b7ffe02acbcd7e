"""Command Line Interface for the resilient SQL access layer."""

import logging
import sys
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.table import Table
from tabulate import tabulate

from ..config.settings import get_settings
from ..database.errors import DatabaseError
from ..database.executor import QueryExecutor
from ..database.models import NOT_FOUND

# Initialize CLI app
app = typer.Typer(
    name="resilient-sql",
    help="Run queries through a MySQL connection that survives dropped sessions.",
    add_completion=False
)

console = Console()

MAX_DISPLAY_ROWS = 50

FORMAT_OPTION = typer.Option(None, "--format", "-f", help="Output format: table, json, csv, plain")
PARAM_OPTION = typer.Option(None, "--param", "-p", help="Bound parameter as name=value (repeatable)")
DEBUG_OPTION = typer.Option(False, "--debug", "-d", help="Enable debug logging")


def setup_logging(debug: bool = False) -> None:
    """Set up logging configuration."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler('resilient_sql.log'),
            logging.StreamHandler(sys.stdout) if debug else logging.NullHandler()
        ]
    )


def open_executor() -> QueryExecutor:
    """Create a new executor for this invocation."""
    return QueryExecutor.from_settings(get_settings())


def parse_pairs(values: Optional[List[str]], option: str) -> Dict[str, str]:
    """Parse repeated ``name=value`` options."""
    pairs: Dict[str, str] = {}
    for item in values or []:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise typer.BadParameter(f"Expected name=value, got {item!r}", param_hint=option)
        pairs[name.strip()] = value
    return pairs


def display_rows(rows: List[Dict[str, Any]], output_format: str = "table") -> None:
    """Display result rows in the specified format."""
    if not rows:
        console.print("[yellow]No results found.[/yellow]")
        return

    columns = list(rows[0].keys())
    output_format = output_format.lower()

    if output_format == "json":
        import json
        console.print(json.dumps(rows, indent=2, default=str))

    elif output_format == "csv":
        import csv
        import io
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=columns)
        writer.writeheader()
        writer.writerows(rows)
        console.print(output.getvalue())

    elif output_format == "plain":
        console.print(tabulate([[row.get(c) for c in columns] for row in rows], headers=columns, tablefmt="grid"))

    else:  # table format (default)
        table = Table(show_header=True, header_style="bold magenta")

        for column in columns:
            table.add_column(column)

        for row in rows[:MAX_DISPLAY_ROWS]:
            table.add_row(*[str(row[c]) if row[c] is not None else "" for c in columns])

        console.print(table)

        if len(rows) > MAX_DISPLAY_ROWS:
            console.print(f"[yellow]Showing first {MAX_DISPLAY_ROWS} of {len(rows)} results[/yellow]")


def _run(operation, *args, **kwargs) -> Any:
    """Run one executor operation, exiting with status 1 on a database error."""
    try:
        with open_executor() as executor:
            return getattr(executor, operation)(*args, **kwargs)
    except DatabaseError as e:
        console.print(f"[red]{e.kind.value} error: {e}[/red]")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Invalid request: {e}[/red]")
        raise typer.Exit(1)


def _output_format(output_format: Optional[str]) -> str:
    return output_format or get_settings().default_output_format


@app.command()
def test_connection(debug: bool = DEBUG_OPTION) -> None:
    """Test database connection."""
    setup_logging(debug)

    settings = get_settings()
    console.print(f"Testing connection to {settings.connection_config().dsn}...")

    with open_executor() as executor:
        ok = executor.manager.ping()

    if ok:
        console.print("[green]✓ Database connection successful![/green]")
    else:
        console.print("[red]✗ Database connection failed![/red]")
        raise typer.Exit(1)


@app.command()
def query(
    sql: str = typer.Argument(..., help="SELECT statement"),
    params: Optional[List[str]] = PARAM_OPTION,
    output_format: Optional[str] = FORMAT_OPTION,
    debug: bool = DEBUG_OPTION
) -> None:
    """Run a query and print all rows."""
    setup_logging(debug)
    rows = _run("rows", sql, parse_pairs(params, "--param") or None)
    display_rows(rows, _output_format(output_format))


@app.command()
def scalar(
    sql: str = typer.Argument(..., help="Query returning a single value"),
    params: Optional[List[str]] = PARAM_OPTION,
    debug: bool = DEBUG_OPTION
) -> None:
    """Run a query and print its first value."""
    setup_logging(debug)
    value = _run("scalar", sql, parse_pairs(params, "--param") or None)
    if value is NOT_FOUND:
        console.print("[yellow]No results found.[/yellow]")
    else:
        console.print("NULL" if value is None else str(value))


@app.command()
def find(
    sql: str = typer.Argument(..., help="Query whose first row is shown"),
    params: Optional[List[str]] = PARAM_OPTION,
    output_format: Optional[str] = FORMAT_OPTION,
    debug: bool = DEBUG_OPTION
) -> None:
    """Run a query and print its first row."""
    setup_logging(debug)
    row = _run("find_one", sql, parse_pairs(params, "--param") or None)
    display_rows([] if row is NOT_FOUND else [row], _output_format(output_format))


@app.command()
def columns(
    table: str = typer.Argument(..., help="Table name"),
    select: Optional[List[str]] = typer.Option(None, "--column", "-c", help="Column to select (repeatable)"),
    where: Optional[str] = typer.Option(None, "--where", "-w", help="Raw WHERE predicate using placeholders"),
    params: Optional[List[str]] = PARAM_OPTION,
    output_format: Optional[str] = FORMAT_OPTION,
    debug: bool = DEBUG_OPTION
) -> None:
    """Select columns from a table."""
    setup_logging(debug)
    rows = _run("projection", table, select or None, where, parse_pairs(params, "--param") or None)
    display_rows(rows, _output_format(output_format))


@app.command()
def insert(
    table: str = typer.Argument(..., help="Table name"),
    values: List[str] = typer.Option(..., "--set", "-s", help="Column value as column=value (repeatable)"),
    debug: bool = DEBUG_OPTION
) -> None:
    """Insert one row."""
    setup_logging(debug)
    row_id = _run("insert", table, parse_pairs(values, "--set"))
    console.print(f"[green]✓ Inserted row {row_id}[/green]")


@app.command()
def update(
    table: str = typer.Argument(..., help="Table name"),
    values: List[str] = typer.Option(..., "--set", "-s", help="Column value as column=value (repeatable)"),
    where: Optional[List[str]] = typer.Option(None, "--where", "-w", help="Equality condition as column=value (repeatable)"),
    debug: bool = DEBUG_OPTION
) -> None:
    """Update rows matching all --where conditions."""
    setup_logging(debug)
    count = _run("update", table, parse_pairs(values, "--set"), parse_pairs(where, "--where") or None)
    if count is False:
        console.print("[yellow]Update executed; no row count reported.[/yellow]")
    else:
        console.print(f"[green]✓ Rows affected: {count}[/green]")


@app.command()
def delete(
    table: str = typer.Argument(..., help="Table name"),
    where: str = typer.Argument(..., help="Raw WHERE predicate using placeholders"),
    params: Optional[List[str]] = PARAM_OPTION,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    debug: bool = DEBUG_OPTION
) -> None:
    """Delete rows matching a predicate."""
    setup_logging(debug)
    if not yes and not typer.confirm(f"Delete from {table} where {where}?", default=False):
        console.print("[yellow]Delete cancelled.[/yellow]")
        return
    _run("delete", table, where, parse_pairs(params, "--param") or None)
    console.print("[green]✓ Delete completed[/green]")


@app.command()
def version() -> None:
    """Show version information."""
    from .. import __version__
    console.print(f"resilient-sql v{__version__}")


if __name__ == "__main__":
    app()
