"""Typer CLI entrypoint for the filter updater."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from .config import ConfigRepository
from .logging_conf import available_filter_logs, configure_logging, filter_log_path, log_path, tail_log
from .registry import EPOCH, FilterEntry
from .scheduler import CycleReport
from .updater import FilterUpdater

app = typer.Typer(
    help="Filter list updater command line tool",
    no_args_is_help=True,
    rich_markup_mode=None,
)
log_app = typer.Typer(
    name="log",
    help="Inspect updater logs",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()


@dataclass
class AppState:
    repository: ConfigRepository
    updater: FilterUpdater


def build_state(verbose: bool) -> AppState:
    repository = ConfigRepository()
    config = repository.load_config()
    configure_logging(verbose=verbose, log_dir=repository.locator.logs_dir)
    updater = FilterUpdater(config, repository.filter_dir(config))
    updater.load_filters()
    return AppState(repository=repository, updater=updater)


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _format_time(value: datetime | None) -> str:
    if value is None or value == EPOCH:
        return "-"
    return value.astimezone().strftime("%Y-%m-%d %H:%M")


def _render_filters_table(entries: Sequence[FilterEntry]) -> Table:
    table = Table(
        title=f"Filters · {len(entries)} total",
        box=box.SIMPLE_HEAD,
        show_lines=False,
    )
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Enabled", style="magenta")
    table.add_column("Rules", style="green", justify="right")
    table.add_column("Last update", style="yellow")
    table.add_column("Next update", style="yellow")
    table.add_column("URL", overflow="fold")
    for entry in entries:
        table.add_row(
            str(entry.id),
            entry.name,
            "yes" if entry.enabled else "no",
            str(entry.rule_count),
            _format_time(entry.last_updated),
            _format_time(entry.next_update),
            entry.url,
        )
    return table


def _render_cycle_report(report: CycleReport) -> Table:
    table = Table(title="Refresh results", box=box.SIMPLE_HEAD)
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("Refreshed", str(len(report.refreshed)))
    table.add_row("Failed", str(len(report.failed)))
    commit = report.commit
    table.add_row("Committed", str(len(commit.promoted)) if commit else "0")
    table.add_row("Rename failures", str(len(commit.failed)) if commit else "0")
    return table


app.add_typer(log_app, name="log", help="View recent log lines")


@app.callback()
def main(
    ctx: typer.Context, verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging", is_flag=True)
) -> None:
    ctx.obj = build_state(verbose)


@app.command("init", help="Write the configuration file and show where it lives.")
def init_config(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    path = state.repository.save_config(state.repository.load_config())
    console.print(f"Configuration written to {path}", style="green")


@app.command("list", help="Show configured filters and their refresh state.")
def list_filters(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    entries = state.updater.filters()
    if not entries:
        console.print("No filters configured; add them to the configuration file.", style="yellow")
        raise typer.Exit(code=0)
    console.print(_render_filters_table(entries))


@app.command("refresh", help="Run a single refresh cycle now.")
def refresh(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    if not state.updater.config.enabled:
        console.print("Updating is disabled in the configuration.", style="yellow")
        raise typer.Exit(code=0)
    try:
        report = state.updater.refresh_now()
    finally:
        state.updater.shutdown()
    console.print(_render_cycle_report(report))
    console.print(_render_filters_table(state.updater.filters()))


@app.command("run", help="Keep filters refreshed in the background until interrupted.")
def run(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    stop = threading.Event()
    state.updater.start()
    console.print(
        f"Updating {len(state.updater.filters())} filters every "
        f"{state.updater.config.update_interval_hours:g}h; press Ctrl+C to stop.",
        style="cyan",
    )
    try:
        stop.wait()
    except KeyboardInterrupt:
        console.print("Stopping…", style="dim")
    finally:
        state.updater.shutdown()


@log_app.command("show", help="Show the most recent log lines.")
def log_show(
    ctx: typer.Context,
    errors: bool = typer.Option(False, "--errors", help="Show the error log instead.", is_flag=True),
    filter_id: Optional[int] = typer.Option(None, "--filter", help="Show the refresh log of one filter."),
    tail: Optional[int] = typer.Option(100, "--tail", help="Number of lines to show."),
) -> None:
    log_dir = _get_state(ctx).repository.locator.logs_dir
    if filter_id is not None:
        path = filter_log_path(log_dir, filter_id)
    else:
        path = log_path(log_dir, "error" if errors else "updater")
    lines = tail_log(path, tail or 100)
    if not lines:
        console.print("No log entries yet.", style="dim")
        return
    console.print(f"{path.name} · last {len(lines)} lines", style="cyan")
    console.print("".join(lines), markup=False, highlight=False)


@log_app.command("list", help="List filters that have a refresh log.")
def log_list(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    filter_ids = available_filter_logs(state.repository.locator.logs_dir)
    if not filter_ids:
        console.print("No filter logs yet.", style="dim")
        return
    names = {entry.id: entry.name for entry in state.updater.filters()}
    table = Table(title="Filter logs", box=box.SIMPLE_HEAD)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="cyan")
    for filter_id in filter_ids:
        table.add_row(str(filter_id), names.get(filter_id, "-"))
    console.print(table)



def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
