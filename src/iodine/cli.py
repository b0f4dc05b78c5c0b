# src/iodine/cli.py
"""
iodine Command Line Interface (CLI).

A small viewer for JSON error reports written by ``AnnotatedError.emit_json``.
Log pipelines usually keep the structured form; this command turns one back
into something readable in a terminal.

Usage
-----
    # Pretty table of every stack entry
    $ iodine show artifacts/errors/upload-failure.json

    # Plain text, identical to emit_human_readable()
    $ iodine show artifacts/errors/upload-failure.json --raw
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from iodine import __version__
from iodine.core.render import ErrorReport, format_data, load_report
from iodine.errors import ReportError

# Pick up IODINE_* overrides from a local .env
load_dotenv()

app = typer.Typer(
    help="iodine: inspect annotated error reports.",
    rich_markup_mode="markdown",
)
console = Console()


def _render_report(report: ErrorReport) -> None:
    """Print the message as a panel and the stack as a table, oldest entry first."""
    # Messages and data are user text; escape so brackets are not read as markup.
    console.print(Panel.fit(f"[bold red]{escape(report.error_message)}[/bold red]", title="Error"))

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right")
    table.add_column("Host")
    table.add_column("Location")
    table.add_column("Data")
    for i, entry in enumerate(report.stack):
        table.add_row(
            str(i),
            escape(entry.host) or "[dim]?[/dim]",
            escape(f"{entry.file}:{entry.line}"),
            escape(format_data(entry.data)),
        )
    console.print(table)


@app.command()  # type: ignore[misc]
def show(
    report_file: Annotated[
        Path,
        typer.Argument(
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            help="Path to a JSON document produced by emit_json().",
        ),
    ],
    raw: Annotated[
        bool,
        typer.Option(
            "--raw",
            "-r",
            help="Print the plain human-readable text instead of a table.",
        ),
    ] = False,
) -> None:
    """Render a saved error report."""
    try:
        report = load_report(report_file.read_bytes())
    except ReportError as e:
        console.print(f"[bold red]❌ Report Error:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    if raw:
        typer.echo(report.emit_human_readable(), nl=False)
        return
    _render_report(report)


@app.command()  # type: ignore[misc]
def version() -> None:
    """Print the installed iodine version."""
    typer.echo(__version__)


if __name__ == "__main__":
    app()
