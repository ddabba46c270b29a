"""Command-line interface for Gadgetbridge ETL."""

from __future__ import annotations

import json
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from gadgetbridge_etl import __version__

app = typer.Typer(
    name="gadgetbridge-etl",
    help="Incremental metrics extraction from Gadgetbridge databases",
    add_completion=False,
)

# stdout carries emitted points, everything else goes to stderr
console = Console(stderr=True)


def _load_settings(config: Optional[str], databases: Optional[List[str]] = None):
    from gadgetbridge_etl.core.config import SourcesConfig, get_settings

    settings = get_settings(config)
    if databases:
        settings = settings.model_copy(
            update={"sources": SourcesConfig(database_paths=list(databases))}
        )
    return settings


# ============================================================================
# Extraction Commands
# ============================================================================

@app.command()
def run(
    config: str = typer.Option(None, "--config", "-c", help="Config file path"),
    database: Optional[List[str]] = typer.Option(
        None, "--database", "-d", help="Database path (repeatable, overrides config)",
    ),
    state_file: str = typer.Option(None, "--state-file", "-s", help="State file path"),
    once: bool = typer.Option(False, "--once", help="Run a single cycle and exit"),
    poll_interval: str = typer.Option(
        None, "--poll-interval", "-i", help="Time between cycles, e.g. '5m' or '30 seconds'",
    ),
) -> None:
    """Extract new rows and write them to stdout as JSON lines."""
    from gadgetbridge_etl.core.exceptions import GadgetbridgeETLError
    from gadgetbridge_etl.core.pipeline import create_pipeline
    from gadgetbridge_etl.core.state import StateFile
    from gadgetbridge_etl.orchestration import IntervalScheduler
    from gadgetbridge_etl.sinks import JsonLinesSink
    from gadgetbridge_etl.utils.helpers import parse_duration
    from gadgetbridge_etl.utils.logging import setup_logging

    try:
        settings = _load_settings(config, database)
        setup_logging(
            level=settings.logging.level,
            format=settings.logging.format.value,
            log_file=settings.logging.file,
        )

        pipeline = create_pipeline(settings)
        state_path = state_file or settings.state.path
        store = StateFile(state_path) if state_path else None
        if store is not None:
            pipeline.import_state(store.load())

        interval = parse_duration(poll_interval or settings.scheduler.poll_interval)
    except (GadgetbridgeETLError, FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    sink = JsonLinesSink()

    def save_state() -> None:
        if store is not None:
            store.save(pipeline.export_state())

    def cycle():
        result = pipeline.gather(sink)
        if settings.state.save_every_cycle:
            save_state()
        result.raise_for_errors()
        return result

    if once or not settings.scheduler.enabled:
        try:
            cycle()
        except GadgetbridgeETLError as e:
            console.print(f"[red]Cycle failed:[/red]\n{e}")
            raise typer.Exit(1)
        finally:
            save_state()
        return

    scheduler = IntervalScheduler(cycle, interval=interval)
    try:
        scheduler.run_forever()
    except KeyboardInterrupt:
        scheduler.stop()
    finally:
        save_state()


# ============================================================================
# Inspection Commands
# ============================================================================

@app.command()
def tables(
    config: str = typer.Option(None, "--config", "-c", help="Config file path"),
) -> None:
    """Show the tables extracted from each database."""
    from gadgetbridge_etl.core.exceptions import GadgetbridgeETLError
    from gadgetbridge_etl.extraction.catalog import BUILTIN_TABLES, SchemaCatalog

    try:
        settings = _load_settings(config)
        catalog = SchemaCatalog.merge(BUILTIN_TABLES, settings.catalog.extra_tables)
    except (GadgetbridgeETLError, FileNotFoundError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    table = Table(title="Extraction Catalog")
    table.add_column("Table")
    table.add_column("Timestamp")
    table.add_column("Tags")
    table.add_column("Fields")

    for descriptor in catalog:
        table.add_row(
            descriptor.name,
            descriptor.timestamp_column,
            ", ".join(descriptor.tag_columns),
            ", ".join(descriptor.field_columns),
        )

    console.print(table)


@app.command()
def state(
    config: str = typer.Option(None, "--config", "-c", help="Config file path"),
    state_file: str = typer.Option(None, "--state-file", "-s", help="State file path"),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON"),
) -> None:
    """Show the persisted watermark for each table."""
    from gadgetbridge_etl.core.exceptions import GadgetbridgeETLError
    from gadgetbridge_etl.core.pipeline import STATE_KEY
    from gadgetbridge_etl.core.state import StateFile
    from gadgetbridge_etl.core.utils import from_unix_seconds

    try:
        path = state_file or _load_settings(config).state.path
        if not path:
            console.print("[red]Error:[/red] no state file configured")
            raise typer.Exit(1)
        data = StateFile(path).load()
    except (GadgetbridgeETLError, FileNotFoundError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if data is None:
        console.print(f"No state stored at {path}")
        return

    if as_json:
        typer.echo(json.dumps(data, indent=2, sort_keys=True))
        return

    table = Table(title=f"Watermarks ({path})")
    table.add_column("Table")
    table.add_column("Last Timestamp", justify="right")
    table.add_column("UTC")

    for name, value in sorted(data.get(STATE_KEY, {}).items()):
        when = from_unix_seconds(value).isoformat() if isinstance(value, int) else "?"
        table.add_row(name, str(value), when)

    console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(Panel.fit(f"[bold blue]Gadgetbridge ETL v{__version__}[/bold blue]"))


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
