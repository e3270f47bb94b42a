"""Command line interface for dbcanvas."""

import logging
import sys
from json import dumps
from pathlib import Path
from typing import Literal

from cyclopts import App
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from dbcanvas.compiler import (
    CompileFailure,
    SchemaModel,
    compile_schema,
    schema_to_json,
)
from dbcanvas.compiler import validate as validate_schema
from dbcanvas.config import Settings, load_settings
from dbcanvas.diagram import layout, layout_to_flow, layout_to_html
from dbcanvas.schema import Dialect, schema_to_ddl

app = App(help="Compile database schema notation into models and diagrams")

console = Console()
err_console = Console(stderr=True)


def print_error(message: str) -> None:
    """Print error message to stderr."""
    err_console.print(f"[bold red]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print success message to stderr."""
    err_console.print(f"[bold green]✓[/] {message}")


def print_info(message: str) -> None:
    """Print info message to stderr."""
    err_console.print(f"[bold blue]i[/] {message}")


def configure_logging(*, verbose: bool) -> None:
    """Send library logs to stderr through rich, debug level when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def validate_source_location(source: Path) -> None:
    """Validate that the schema source file exists."""
    if not source.is_file():
        print_error(f"Schema file does not exist: {source}")
        sys.exit(1)


def read_source(source: Path) -> str:
    """Read a schema file as UTF-8, exiting if it is missing or not decodable."""
    validate_source_location(source)
    try:
        return source.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        print_error(
            escape(f"Schema file is not valid UTF-8: {source} (byte {e.start})"),
        )
        sys.exit(1)


def read_settings(config: Path | None) -> Settings:
    """Load settings, exiting on a missing or malformed config file."""
    if config is not None and not config.is_file():
        print_error(f"Config file does not exist: {config}")
        sys.exit(1)
    try:
        return load_settings(config)
    except (ValueError, TypeError) as e:
        print_error(f"Invalid config: {e}")
        sys.exit(1)


def compile_source(source: Path, settings: Settings) -> SchemaModel:
    """Compile a schema file, printing every diagnostic and exiting on failure."""
    text = read_source(source)
    print_info(f"Schema file: {source}")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=err_console,
    ) as progress:
        progress.add_task("Compiling schema...", total=None)
        result = compile_schema(text, operators=settings.operators)

    if isinstance(result, CompileFailure):
        for diagnostic in result.diagnostics:
            print_error(escape(f"{source}:{diagnostic}"))
        sys.exit(1)
    return result.model


def format_summary_table(model: SchemaModel) -> None:
    """Format table and relationship counts as a rich table."""
    table = Table(title="Schema Summary")
    table.add_column("Table", style="bold cyan")
    table.add_column("Fields", style="bold yellow")
    table.add_column("Primary Key")
    table.add_column("Foreign Keys")
    table.add_column("References", style="bold yellow")

    for entry in model.tables:
        references = sum(
            1 for rel in model.relationships if rel.source.table == entry.name
        )
        table.add_row(
            entry.name,
            str(len(entry.fields)),
            ", ".join(f.name for f in entry.primary_keys),
            str(sum(1 for f in entry.fields if f.is_foreign_key)),
            str(references),
        )

    console.print(table)
    console.print(
        f"{len(model.tables)} tables, {len(model.enums)} enums, "
        f"{len(model.relationships)} relationships",
    )


@app.command
def validate(
    source: Path,
    fmt: Literal["text", "json"] = "text",
    *,
    config: Path | None = None,
    verbose: bool = False,
) -> None:
    """Validate a schema file without producing output."""
    configure_logging(verbose=verbose)
    text = read_source(source)
    settings = read_settings(config)

    result = validate_schema(text, operators=settings.operators)

    if fmt == "json":
        sys.stdout.write(
            dumps(
                {
                    "valid": result.valid,
                    "error": (
                        str(result.diagnostics[0]) if result.diagnostics else None
                    ),
                    "diagnostics": [
                        {
                            "message": d.message,
                            "kind": str(d.kind),
                            "line": d.line,
                            "column": d.column,
                        }
                        for d in result.diagnostics
                    ],
                },
            ),
        )
    else:
        for diagnostic in result.diagnostics:
            print_error(escape(f"{source}:{diagnostic}"))

    if not result.valid:
        sys.exit(1)
    print_success(f"{source} is valid")


@app.command
def schema(
    source: Path,
    fmt: Literal["json", "sql"] = "json",
    *,
    dialect: Dialect = "sqlite",
    config: Path | None = None,
    verbose: bool = False,
) -> None:
    """Compile a schema file to its JSON model or SQL DDL."""
    configure_logging(verbose=verbose)
    settings = read_settings(config)
    model = compile_source(source, settings)
    print_info(f"Output format: {fmt}")

    if fmt == "json":
        sys.stdout.write(dumps(schema_to_json(model)))
    elif fmt == "sql":
        try:
            sys.stdout.write(schema_to_ddl(model, dialect))
        except ValueError as e:
            print_error(str(e))
            sys.exit(1)

    print_success("Schema generation completed successfully")


@app.command
def diagram(
    source: Path,
    fmt: Literal["json", "html"] = "json",
    *,
    config: Path | None = None,
    title: str | None = None,
    verbose: bool = False,
) -> None:
    """Lay out a schema file as a node/edge diagram."""
    configure_logging(verbose=verbose)
    settings = read_settings(config)
    model = compile_source(source, settings)
    print_info(f"Output format: {fmt}")

    try:
        diagram_layout = layout(model, settings.layout)
    except ValueError as e:
        print_error(str(e))
        sys.exit(1)

    if fmt == "json":
        sys.stdout.write(dumps(layout_to_flow(diagram_layout), ensure_ascii=False))
    elif fmt == "html":
        sys.stdout.write(
            layout_to_html(diagram_layout, settings.layout, title or source.stem),
        )

    print_success(
        f"Laid out {len(diagram_layout.nodes)} tables "
        f"and {len(diagram_layout.edges)} relationships",
    )


@app.command
def summary(
    source: Path,
    *,
    config: Path | None = None,
    verbose: bool = False,
) -> None:
    """Print a table-by-table overview of a schema file."""
    configure_logging(verbose=verbose)
    settings = read_settings(config)
    model = compile_source(source, settings)
    format_summary_table(model)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
