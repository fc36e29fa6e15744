import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from rust_order.config import Settings
from rust_order.core.discovery import collect_input_files
from rust_order.core.errors import DiscoveryError
from rust_order.core.run import run_files
from rust_order.models import FileOutcome, FileStatus, RunReport

console = Console()

_STATUS_STYLES = {
    FileStatus.REWRITTEN: ("green", "reordered"),
    FileStatus.WOULD_REWRITE: ("yellow", "would reorder"),
    FileStatus.FAILED: ("red", "failed"),
    FileStatus.SKIPPED: ("red", "skipped"),
}


def settings_from(ctx: typer.Context) -> Settings:
    return ctx.obj if isinstance(ctx.obj, Settings) else Settings.from_env()


def print_outcome(outcome: FileOutcome) -> None:
    if outcome.status not in _STATUS_STYLES:
        return
    style, label = _STATUS_STYLES[outcome.status]
    line = f"[{style}]{label}[/{style}] {escape(outcome.path)}"
    if outcome.error:
        where = f" at offset {outcome.offset}" if outcome.offset is not None else ""
        line += f": {escape(outcome.error)}{where}"
    console.print(line, soft_wrap=True)


def print_summary(report: RunReport, check: bool) -> None:
    changed = len(report.changed)
    verb = "would be reordered" if check else "reordered"
    summary = f"{len(report.outcomes)} file(s) checked, {changed} {verb}, {len(report.failed)} failed"
    if report.skipped:
        summary += f", {len(report.skipped)} skipped"
    console.print(summary, soft_wrap=True)


def fmt(
    ctx: typer.Context,
    paths: Annotated[list[Path], typer.Argument(help="Rust files or directories to reorder.")],
    check: Annotated[bool, typer.Option("--check", help="Report files that would change without writing.")] = False,
    jobs: Annotated[int | None, typer.Option(min=1, help="Files processed in parallel.")] = None,
    fail_fast: Annotated[
        bool, typer.Option("--fail-fast/--keep-going", help="Stop starting new files after the first failure.")
    ] = False,
) -> None:
    """Reorder top-level items of Rust files in place."""
    settings = settings_from(ctx)
    try:
        files = collect_input_files(paths)
    except DiscoveryError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]", soft_wrap=True)
        raise typer.Exit(2) from exc

    report = asyncio.run(run_files(files, check=check, jobs=jobs or settings.jobs, fail_fast=fail_fast))

    for outcome in report.outcomes:
        print_outcome(outcome)
    print_summary(report, check)

    if not report.ok or (check and report.changed):
        raise typer.Exit(1)
