"""CLI entrypoints for inspecting site sources."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Annotated, Mapping

import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import SourceConfig, load_config
from .content import ContentEntity, ContentRole
from .errors import ConfigurationError, SiteSourceError
from .ingest import ContentIngestor
from .registry import ContentRegistry
from .reporting import build_scan_report, write_report

console = Console()
app = typer.Typer(help="Inspect the content, layouts and includes of a site source tree.")

ConfigPathOption = Annotated[
    str,
    typer.Option("--config", "-c", help="Path to a sitesource.yml file or a project directory."),
]
VerboseFlag = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Show debug logging."),
]


@app.command()
def scan(
    config_path: ConfigPathOption = ".",
    verbose: VerboseFlag = False,
    report_path: Annotated[
        Path | None,
        typer.Option("--report", help="Write a JSON scan report to this path."),
    ] = None,
) -> None:
    """Load every source file and list what was found."""
    _configure_logging(verbose)
    config = _load(config_path)
    ingestor = ContentIngestor(config)

    started = time.perf_counter()
    registry = _ingest(ingestor)
    duration = time.perf_counter() - started

    for role in ContentRole:
        _print_bucket(role, registry.get(role))

    console.print(
        f"[bold green]Loaded[/]: {len(registry.items)} item(s), {len(registry.layouts)} layout(s), "
        f"{len(registry.includes)} include(s) in {duration:.2f}s."
    )

    if report_path is not None:
        report = build_scan_report(registry, source_root=ingestor.source_root, duration_seconds=duration)
        target = write_report(report, report_path)
        console.print(f"[bold blue]Report[/]: {target}")


@app.command()
def show(
    entity_id: Annotated[str, typer.Argument(help="Relative path of the entity to display.")],
    role: Annotated[
        ContentRole,
        typer.Option("--role", "-r", help="Collection to look the entity up in."),
    ] = ContentRole.ITEM,
    config_path: ConfigPathOption = ".",
    verbose: VerboseFlag = False,
) -> None:
    """Print the attributes and body of a single entity."""
    _configure_logging(verbose)
    registry = _ingest(ContentIngestor(_load(config_path)))

    entity = registry.get(role).get(entity_id)
    if entity is None:
        console.print(f"[bold red]Not found[/]: no {role.value} with id '{entity_id}'.")
        raise typer.Exit(code=1)

    console.print(f"[bold]{entity.id}[/] ({entity.role.value}, {'binary' if entity.is_binary else 'text'})")
    if entity.attributes:
        console.print(yaml.safe_dump(dict(entity.attributes), sort_keys=False, allow_unicode=True).rstrip())
        console.rule()
    if not entity.is_binary:
        console.print(entity.body, markup=False, highlight=False)


def _load(path: str) -> SourceConfig:
    try:
        return load_config(path)
    except FileNotFoundError as exc:
        raise typer.BadParameter(f"Config file not found: {path}") from exc
    except ConfigurationError as exc:
        console.print(f"[bold red]Invalid configuration[/]: {exc}")
        raise typer.Exit(code=1) from exc


def _ingest(ingestor: ContentIngestor) -> ContentRegistry:
    try:
        return ingestor.load()
    except SiteSourceError as exc:
        console.print(f"[bold red]Ingestion failed[/]: {exc}")
        raise typer.Exit(code=1) from exc


def _print_bucket(role: ContentRole, bucket: Mapping[str, ContentEntity]) -> None:
    if not bucket:
        return
    table = Table(title=f"{role.value.title()}s ({len(bucket)})")
    table.add_column("id")
    table.add_column("type")
    table.add_column("attributes", justify="right")
    for entity_id in sorted(bucket):
        entity = bucket[entity_id]
        table.add_row(entity_id, "binary" if entity.is_binary else "text", str(len(entity.attributes)))
    console.print(table)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


if __name__ == "__main__":
    app()
