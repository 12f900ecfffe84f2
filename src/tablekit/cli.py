"""Command-line interface for tablekit."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from tablekit.columns import list_decorators
from tablekit.table import Table, TableConfig

app = typer.Typer(
    name="tablekit",
    help="Render tabular data files as HTML tables",
    add_completion=False,
)


def _split_pairs(values: list[str], option: str) -> dict[str, str]:
    """Parse ``KEY=VALUE`` option values."""
    pairs: dict[str, str] = {}
    for value in values:
        key, sep, rest = value.partition("=")
        if not sep or not key.strip():
            typer.echo(f"Error: {option} expects COLUMN=VALUE, got {value!r}", err=True)
            raise typer.Exit(1)
        pairs[key.strip()] = rest.strip()
    return pairs


@app.command(name="render")
def render_cmd(
    file: Annotated[Path, typer.Argument(help="Path to a CSV, Parquet, JSON or NDJSON file")],
    columns: Annotated[
        Optional[list[str]],
        typer.Option("--column", "-c", help="Column to include (repeatable; default: all)"),
    ] = None,
    decorators: Annotated[
        Optional[list[str]],
        typer.Option("--decorator", "-d", help="COLUMN=KIND decorator to attach (repeatable)"),
    ] = None,
    totals: Annotated[
        Optional[list[str]],
        typer.Option(
            "--total",
            "-t",
            help="COLUMN=DIRECTIVE for the totals row, e.g. amount=sum or name=Totals: (repeatable)",
        ),
    ] = None,
    id_field: Annotated[
        str,
        typer.Option("--id-field", help="Field holding the row id"),
    ] = "id",
    no_header: Annotated[
        bool,
        typer.Option("--no-header", help="Don't render the header row"),
    ] = False,
    sortable: Annotated[
        bool,
        typer.Option("--sortable", help="Mark the table as sortable"),
    ] = False,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Output file path"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log rendering details"),
    ] = False,
) -> None:
    """Render a data file as an HTML table."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if not file.exists():
        typer.echo(f"Error: File not found: {file}", err=True)
        raise typer.Exit(1)

    decorator_map = _split_pairs(decorators or [], "--decorator")
    totals_plan = _split_pairs(totals or [], "--total")

    config = TableConfig.from_env()
    config.update(header=not no_header)
    if sortable:
        config.sortable = True

    try:
        table = Table(config=config)
        table.set_source(file, columns=columns or None, id_field=id_field)
        for name, kind in decorator_map.items():
            table.add_decorator(name, kind)
        if totals_plan:
            table.add_totals(totals_plan)

        html = table.render()
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if output:
        output.write_text(html, encoding="utf-8")
        typer.echo(f"Table written to {output} ({table.rows_rendered} rows)")
    else:
        typer.echo(html)


@app.command(name="decorators")
def decorators_cmd() -> None:
    """List the registered column decorator kinds."""
    for name in list_decorators():
        typer.echo(name)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
