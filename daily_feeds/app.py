"""Typer CLI entrypoint for daily-feeds."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence

import typer
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import ConfigLocator, ConfigRepository, FeedsConfig
from .engine import DedupCache
from .errors import CacheIOError, ConfigError
from .infra import CacheFile
from .logging_conf import (
    available_source_logs,
    configure_logging,
    default_log_dir,
    source_log_path,
    tail_log,
)
from .orchestrator import RunReport, run_once
from .scheduler import APSchedulerAdapter

EXIT_SOURCE_FAILED = 1
EXIT_FATAL = 2

app = typer.Typer(
    help="Fetch configured feeds and render every new item as an HTML document.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
cache_app = typer.Typer(name="cache", help="Inspect or create the seen-item cache.", no_args_is_help=True)
log_app = typer.Typer(name="log", help="View log files.", no_args_is_help=True)
app.add_typer(cache_app, name="cache")
app.add_typer(log_app, name="log")

console = Console()


@dataclass
class AppState:
    repository: ConfigRepository
    runner: Callable[[FeedsConfig], RunReport] = run_once
    scheduler_factory: Callable[[], APSchedulerAdapter] = APSchedulerAdapter


def build_state(verbose: bool, config_path: Path | None = None) -> AppState:
    configure_logging(verbose=verbose)
    return AppState(repository=ConfigRepository(ConfigLocator(config_path)))


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _load_config(state: AppState) -> FeedsConfig:
    try:
        return state.repository.load()
    except ConfigError as exc:
        console.print(f"Configuration error: {exc}", style="red", markup=False)
        raise typer.Exit(code=EXIT_FATAL)


def _render_outcomes_table(report: RunReport) -> Table:
    table = Table(
        title=f"Run {report.run_date.isoformat()} · {report.rendered} new documents",
        box=box.SIMPLE_HEAD,
    )
    table.add_column("Source", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("New", justify="right", style="green")
    table.add_column("Seen", justify="right", style="dim")
    table.add_column("Incomplete", justify="right", style="yellow")
    table.add_column("Error", style="red", overflow="fold")
    for outcome in report.outcomes:
        table.add_row(
            escape(outcome.source),
            "[green]ok[/green]" if outcome.ok else "[red]failed[/red]",
            str(len(outcome.rendered)),
            str(outcome.skipped_seen),
            str(outcome.skipped_incomplete),
            escape(f"{outcome.error_type}: {outcome.error}") if outcome.error else "",
        )
    return table


def _render_sources_table(config: FeedsConfig, counts: dict[str, int]) -> Table:
    table = Table(title=f"Sources · {len(config.sites)} configured", box=box.SIMPLE_HEAD)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("URL", overflow="fold")
    table.add_column("Seen", justify="right", style="green")
    for site in config.sites:
        table.add_row(escape(site.name), escape(site.url), str(counts.get(site.name, 0)))
    return table


def _execute_run(state: AppState, config: FeedsConfig) -> RunReport:
    try:
        return state.runner(config)
    except ConfigError as exc:
        console.print(f"Configuration error: {exc}", style="red", markup=False)
        raise typer.Exit(code=EXIT_FATAL)
    except CacheIOError as exc:
        console.print(
            f"Documents were written but the cache could not be saved: {exc}",
            style="red",
            markup=False,
        )
        raise typer.Exit(code=EXIT_FATAL)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging.", is_flag=True),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file (TOML, YAML or JSON)."
    ),
) -> None:
    ctx.obj = build_state(verbose, config)


@app.command("run", help="Ingest every configured source once for today.")
def run(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    config = _load_config(state)
    report = _execute_run(state, config)
    console.print(_render_outcomes_table(report))
    console.print(f"Output directory: {report.output_dir}", style="bold", markup=False, soft_wrap=True)
    if not report.ok:
        failed = ", ".join(outcome.source for outcome in report.failed)
        console.print(f"Failed sources: {failed}", style="red", markup=False)
        raise typer.Exit(code=EXIT_SOURCE_FAILED)


@app.command("sources", help="List configured sources with their seen-item counts.")
def sources(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    config = _load_config(state)
    cache_file = CacheFile(config.cache_file)
    counts: dict[str, int] = {}
    if cache_file.exists():
        try:
            cache = DedupCache(cache_file.load())
        except ConfigError as exc:
            console.print(f"Configuration error: {exc}", style="red", markup=False)
            raise typer.Exit(code=EXIT_FATAL)
        counts = {name: cache.count(name) for name in cache.sources()}
    else:
        console.print(
            f"Cache file {cache_file.path} does not exist yet; run `daily-feeds cache init`.",
            style="yellow",
            markup=False,
        )
    console.print(_render_sources_table(config, counts))


@app.command("schedule", help="Run the pipeline every day at the configured time (blocks).")
def schedule(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    config = _load_config(state)
    adapter = state.scheduler_factory()

    def _job() -> None:
        try:
            report = state.runner(state.repository.reload())
        except (ConfigError, CacheIOError) as exc:
            adapter.logger.error("scheduled_run_failed", error=str(exc))
            return
        console.print(_render_outcomes_table(report))

    adapter.schedule_daily(config.schedule_time, _job)
    console.print(
        f"Running daily at {config.schedule_time.isoformat(timespec='minutes')}; Ctrl+C to stop.",
        style="dim",
    )
    try:
        adapter.start()
    except (KeyboardInterrupt, SystemExit):
        adapter.shutdown()


@cache_app.command("init", help="Create an empty cache file if none exists.")
def cache_init(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    config = _load_config(state)
    cache_file = CacheFile(config.cache_file)
    try:
        created = cache_file.initialise()
    except CacheIOError as exc:
        console.print(str(exc), style="red", markup=False)
        raise typer.Exit(code=EXIT_FATAL)
    if created:
        console.print(f"Created empty cache at {cache_file.path}.", style="green", markup=False)
    else:
        console.print(f"Cache already exists at {cache_file.path}.", style="dim", markup=False)


@cache_app.command("show", help="Show seen-item counts, or the identifiers of one source.")
def cache_show(
    ctx: typer.Context,
    name: Optional[str] = typer.Argument(None, help="Source name to list identifiers for."),
) -> None:
    state = _get_state(ctx)
    config = _load_config(state)
    try:
        snapshot = DedupCache(CacheFile(config.cache_file).load()).snapshot()
    except ConfigError as exc:
        console.print(f"Configuration error: {exc}", style="red", markup=False)
        raise typer.Exit(code=EXIT_FATAL)
    if name is not None:
        if name not in snapshot:
            console.print(f"No cache entry for `{name}`.", style="yellow", markup=False)
            raise typer.Exit(code=1)
        for identifier in sorted(snapshot[name]):
            console.print(identifier, markup=False, highlight=False)
        return
    table = Table(title="Cache", box=box.SIMPLE_HEAD)
    table.add_column("Source", style="cyan")
    table.add_column("Seen", justify="right", style="green")
    for source_name in sorted(snapshot):
        table.add_row(escape(source_name), str(len(snapshot[source_name])))
    console.print(table)


def _log_files() -> Sequence[Path]:
    log_dir = default_log_dir()
    fixed = [log_dir / "daily_feeds.log", log_dir / "error.log"]
    return [path for path in fixed if path.exists()] + list(available_source_logs())


@log_app.command("list", help="List available log files.")
def log_list() -> None:
    files = _log_files()
    if not files:
        console.print("No log files yet.", style="yellow", markup=False)
        return
    for path in files:
        console.print(str(path), markup=False, highlight=False)


@log_app.command("show", help="Show the tail of a log file (app, error or a source name).")
def log_show(
    target: str = typer.Argument("app", help="`app`, `error` or a source name."),
    lines: int = typer.Option(50, "--lines", "-n", help="Number of lines to show."),
) -> None:
    log_dir = default_log_dir()
    if target == "app":
        path = log_dir / "daily_feeds.log"
    elif target == "error":
        path = log_dir / "error.log"
    else:
        path = source_log_path(target)
    content = tail_log(path, lines)
    if not content:
        console.print(f"No log content at {path}.", style="yellow", markup=False)
        raise typer.Exit(code=1)
    for line in content:
        console.print(line.rstrip("\n"), markup=False, highlight=False)


def cli() -> None:
    app()


if __name__ == "__main__":
    cli()
