"""CLI entry point for the higgs static data loader.

Populates a MongoDB database with a full snapshot of the EVE universe static
data pulled from ESI.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import orjson
import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .clients import ESIClient
from .core.config import HiggsConfig, get_config
from .core.errors import ConfigError, HiggsError, StageFailedError
from .orchestration import (
    CrawlPipeline,
    CrawlResult,
    FailurePolicy,
    PipelineConfig,
    StagePlanner,
    clear_collections,
)
from .output import SummaryWriter
from .stages import STAGES, list_stages
from .storage import STATIC_COLLECTIONS, MongoStore

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# CLI app
app = typer.Typer(
    name="higgs",
    help="higgs - Load the EVE Online static universe data from ESI into MongoDB",
    add_completion=False,
)

console = Console()

ESI_STATUS_PATH = "/latest/status/"


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"higgs version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        help="Show version and exit",
    ),
) -> None:
    """higgs - EVE static data loader."""
    pass


def _load_config() -> HiggsConfig:
    try:
        config = get_config()
    except ConfigError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)

    errors = config.validate()
    if errors:
        console.print("[red]Configuration errors:[/red]")
        for error in errors:
            console.print(f"  - {error}")
        console.print("\nPlease set environment variables or create a .env file.")
        raise typer.Exit(1)
    return config


@app.command()
def populate(
    stage: Optional[list[str]] = typer.Option(
        None,
        "--stage",
        "-s",
        help="Stages to run (e.g., stars,planets). Defaults to every stage",
    ),
    no_deps: bool = typer.Option(
        False,
        "--no-deps",
        help="Do not pull in parent stages of the selected stages",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        "-w",
        help="Batch worker count (defaults to HIGGS_MAX_ROUTINES)",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Fail the run when a stage finishes with skipped items",
    ),
    legacy_abort: bool = typer.Option(
        False,
        "--legacy-abort",
        help="Abort the rest of a batch on fetch failures in regions/constellations/systems",
    ),
    parallel_stages: int = typer.Option(
        1,
        "--parallel-stages",
        help="Run up to N independent stages at the same time",
    ),
    startup_delay: Optional[float] = typer.Option(
        None,
        "--startup-delay",
        help="Seconds to wait before crawling (defaults to HIGGS_STARTUP_DELAY)",
    ),
    summary_file: Optional[Path] = typer.Option(
        None,
        "--summary-file",
        "-o",
        help="Write the run summary as JSON to this file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable verbose logging",
    ),
) -> None:
    """Delete the static collections and load a fresh snapshot from ESI."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = _load_config()

    stage_names: Optional[list[str]] = None
    if stage:
        stage_names = []
        for item in stage:
            stage_names.extend(s.strip() for s in item.split(",") if s.strip())

        available = list_stages()
        for name in stage_names:
            if name not in available:
                console.print(f"[red]Unknown stage: {name}[/red]")
                console.print(f"Available: {', '.join(available)}")
                raise typer.Exit(1)

        if no_deps:
            missing = StagePlanner().validate_dependencies(stage_names)
            for name, deps in missing.items():
                console.print(
                    f"[yellow]Warning:[/yellow] {name} reads from {', '.join(deps)}, "
                    "which will not be refreshed in this run"
                )

    pipeline_config = PipelineConfig(
        workers=workers or config.max_routines,
        max_concurrent_stages=max(1, parallel_stages),
        startup_delay=config.startup_delay if startup_delay is None else startup_delay,
        failure_policy=FailurePolicy.LEGACY if legacy_abort else FailurePolicy.SKIP,
        strict=strict,
        include_dependencies=not no_deps,
    )

    try:
        result = asyncio.run(run_populate(config, pipeline_config, stage_names, summary_file))
    except StageFailedError as e:
        console.print(f"\n[red]{e}[/red]")
        if e.result is not None:
            print_summary(e.result)
            if summary_file:
                asyncio.run(SummaryWriter(summary_file, config.datasource).write(e.result))
        raise typer.Exit(1)
    except HiggsError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    print_summary(result)
    if not result.success:
        raise typer.Exit(1)


async def run_populate(
    config: HiggsConfig,
    pipeline_config: PipelineConfig,
    stage_names: Optional[list[str]],
    summary_file: Optional[Path] = None,
) -> CrawlResult:
    """Run a snapshot with progress display."""
    console.print("\n[bold]EVE Static Data Snapshot[/bold]")
    console.print(f"ESI: {config.esi_base_url} ({config.datasource})")
    console.print(f"MongoDB: {config.mongo_uri} (db={config.mongo_database})")
    console.print(f"Workers: {pipeline_config.workers}")
    console.print()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Connecting...", total=None)

        def progress_callback(stage: str, current: int, total: int, status: str) -> None:
            if total:
                progress.update(task, description=f"{stage}: {status} {current}/{total}")
            else:
                progress.update(task, description=f"{stage}: {status}")

        pipeline_config.progress_callback = progress_callback

        async with MongoStore.from_config(config) as store, ESIClient(config) as client:
            pipeline = CrawlPipeline(client, store, pipeline_config)
            result = await pipeline.run(stage_names)

        if summary_file:
            progress.update(task, description="Writing summary...")
            await SummaryWriter(summary_file, config.datasource).write(result)

    return result


def print_summary(result: CrawlResult) -> None:
    """Print the per-stage summary table."""
    stats = result.get_statistics()

    console.print()
    table = Table(title="Snapshot Summary")
    table.add_column("Stage", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("IDs", justify="right")
    table.add_column("Stored", justify="right")
    table.add_column("Dups", justify="right")
    table.add_column("Skipped", justify="right")
    table.add_column("Not attempted", justify="right")
    table.add_column("Duration", justify="right")

    for name, stage_stats in stats.by_stage.items():
        style = "green" if stage_stats.status == "completed" else "red"
        if stage_stats.status == "completed" and stage_stats.skipped:
            style = "yellow"
        table.add_row(
            name,
            f"[{style}]{stage_stats.status.upper()}[/{style}]",
            str(stage_stats.ids_total),
            str(stage_stats.stored),
            str(stage_stats.duplicates),
            str(stage_stats.skipped),
            str(stage_stats.not_attempted),
            f"{stage_stats.duration_seconds:.1f}s",
        )

    console.print(table)

    console.print()
    console.print(f"[bold]Total stored:[/bold] {stats.total_stored}")
    console.print(f"[bold]Skipped:[/bold] {stats.total_skipped}")
    console.print(f"[bold]Rate limit signals:[/bold] {stats.rate_limit_signals}")
    console.print(f"[bold]Duration:[/bold] {stats.total_duration_seconds:.1f}s")
    if stats.aborted_stage:
        console.print(f"[bold red]Stopped at stage:[/bold red] {stats.aborted_stage}")


@app.command()
def delete(
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Do not ask for confirmation",
    ),
) -> None:
    """Delete every static data collection."""
    config = _load_config()

    if not yes:
        typer.confirm(
            f"Delete {len(STATIC_COLLECTIONS)} collections from {config.mongo_database}?",
            abort=True,
        )

    async def _delete() -> dict[str, int]:
        async with MongoStore.from_config(config) as store:
            return await clear_collections(store, STATIC_COLLECTIONS)

    try:
        removed = asyncio.run(_delete())
    except HiggsError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Deleted Collections")
    table.add_column("Collection", style="cyan")
    table.add_column("Documents", justify="right")
    for collection, count in removed.items():
        table.add_row(collection, str(count))
    console.print(table)


@app.command()
def stages() -> None:
    """List crawl stages in default order."""
    table = Table(title="Crawl Stages")
    table.add_column("Name", style="cyan")
    table.add_column("Collection")
    table.add_column("Depends on")
    table.add_column("Endpoint")
    table.add_column("Description")

    for name in list_stages():
        info = STAGES[name]().describe()
        table.add_row(
            name,
            info["collection"],
            ", ".join(info["dependencies"]) or "-",
            info["detail_path"],
            info["description"],
        )

    console.print(table)


@app.command()
def check() -> None:
    """Check configuration and connectivity."""
    config = _load_config()

    console.print("[bold]Configuration Check[/bold]\n")
    console.print(f"[green]ESI:[/green] {config.esi_base_url} ({config.datasource})")
    console.print(f"[green]User agent:[/green] {config.user_agent}")
    console.print(f"[green]MongoDB:[/green] {config.mongo_uri} (db={config.mongo_database})")
    if config.insecure_skip_verify:
        console.print("[yellow]TLS verification is disabled[/yellow]")

    async def _check_mongo() -> None:
        async with MongoStore.from_config(config):
            pass

    async def _check_esi() -> dict:
        async with ESIClient(config) as client:
            body = await client.get_with_retry(client.esi_url(ESI_STATUS_PATH))
        return orjson.loads(body)

    console.print("\n[bold]Testing MongoDB...[/bold]")
    try:
        with console.status("Connecting..."):
            asyncio.run(_check_mongo())
        console.print("[green]MongoDB reachable![/green]")
    except HiggsError as e:
        console.print(f"[red]MongoDB check failed:[/red] {e}")
        raise typer.Exit(1)

    console.print("\n[bold]Testing ESI...[/bold]")
    try:
        with console.status("Requesting server status..."):
            status = asyncio.run(_check_esi())
    except (HiggsError, orjson.JSONDecodeError) as e:
        console.print(f"[red]ESI check failed:[/red] {e}")
        raise typer.Exit(1)

    console.print("[green]ESI reachable![/green]")
    console.print(f"Server version: {status.get('server_version', '?')}")
    console.print(f"Players online: {status.get('players', '?')}")


if __name__ == "__main__":
    app()
