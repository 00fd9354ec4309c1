"""
Command-line interface for warehouse_re.

Provides infer, clustering-key and entities commands for reverse-engineering
semi-structured warehouse tables described by a fixture file.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from warehouse_re import __version__
from warehouse_re.discovery import parse_clustering_key
from warehouse_re.metadata import FixtureSource
from warehouse_re.models import InferenceConfig
from warehouse_re.reverse import ReverseEngineer

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with Rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _dump(data: Any) -> str:
    return json.dumps(data, indent=2, default=str)


@click.group()
@click.version_option(version=__version__, prog_name="warehouse-re")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def cli(verbose: bool) -> None:
    """
    Warehouse RE - Schema reverse-engineering for semi-structured warehouse tables

    Infers variant, array and object column shapes from sampled rows and
    parses clustering key definitions.
    """
    setup_logging(verbose)


@cli.command()
@click.option(
    "--fixture",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="YAML/JSON fixture describing tables, columns and samples",
)
@click.option(
    "--table",
    "tables",
    type=str,
    multiple=True,
    help="DB.SCHEMA.TABLE to process (repeatable, default: all tables)",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="YAML file with inference settings",
)
@click.option(
    "--limit",
    type=int,
    default=None,
    help="Maximum sample rows per table (overrides config)",
)
@click.option(
    "--workers",
    type=int,
    default=1,
    help="Number of tables processed concurrently",
)
@click.option(
    "--output",
    type=click.Path(path_type=Path),
    default=None,
    help="Write the reverse-engineered packages as JSON to this file",
)
def infer(
    fixture: Path,
    tables: tuple,
    config_file: Optional[Path],
    limit: Optional[int],
    workers: int,
    output: Optional[Path],
) -> None:
    """
    Reverse-engineer the schema of fixture tables.

    Examples:

        warehouse-re infer --fixture fixtures/demo.yaml

        warehouse-re infer --fixture fixtures/demo.yaml \\
            --table DEMO.PUBLIC.EVENTS --limit 100 --output events.json
    """
    config = InferenceConfig.from_yaml(config_file) if config_file else InferenceConfig()
    if limit is not None:
        config.sample_limit = limit

    console.print("[bold blue]Warehouse RE - Schema Inference[/bold blue]")
    console.print(f"Fixture: {fixture}")

    source = FixtureSource.from_file(fixture)
    unknown = [t for t in tables if not source.has_table(t)]
    if unknown:
        raise click.ClickException(f"Unknown table(s): {', '.join(unknown)}")

    engineer = ReverseEngineer(source, config=config)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Inferring schemas...", total=None)
        packages = engineer.reverse_all(list(tables) if tables else None, max_workers=workers)
        progress.update(task, completed=True)

    summary = Table(title="Inferred Columns")
    summary.add_column("Table", style="cyan")
    summary.add_column("Column")
    summary.add_column("Type")
    summary.add_column("Subtype / Shape")

    for package in packages:
        for name, node in package.properties.items():
            data = node.to_dict()
            shape = data.get("subtype") or ""
            if "items" in data:
                shape = ", ".join(str(item.get("subtype")) for item in data["items"]) or "[]"
            elif data.get("type") == "object":
                shape = ", ".join(data["properties"]) or "{}"
            summary.add_row(package.full_name, name, data["type"], str(shape))

    console.print(summary)

    result = [package.to_dict() for package in packages]
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(_dump(result))
        console.print(f"\n[green]Saved {len(packages)} packages to: {output}[/green]")
    else:
        click.echo(_dump(result))


@cli.command("clustering-key")
@click.argument("expression")
@click.option(
    "--columns",
    type=str,
    required=True,
    help="Comma-separated list of the table's column names",
)
def clustering_key(expression: str, columns: str) -> None:
    """
    Parse a clustering key EXPRESSION into key segments.

    Example:

        warehouse-re clustering-key "LINEAR(A, SUBSTRING(B, 1, 3))" --columns A,B
    """
    column_names = [c.strip() for c in columns.split(",") if c.strip()]
    segments = parse_clustering_key(column_names, expression)
    if segments is None:
        click.echo("null")
        return
    click.echo(_dump([segment.to_dict() for segment in segments]))


@cli.command()
@click.option(
    "--fixture",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="YAML/JSON fixture describing tables",
)
def entities(fixture: Path) -> None:
    """List fixture tables and views grouped by database.schema."""
    engineer = ReverseEngineer(FixtureSource.from_file(fixture))
    buckets = engineer.entity_names()

    table = Table(title="Entities")
    table.add_column("Container", style="cyan")
    table.add_column("Entities")
    for bucket in buckets:
        table.add_row(bucket["dbName"], ", ".join(bucket["dbCollections"]))
    console.print(table)


if __name__ == "__main__":
    cli()
