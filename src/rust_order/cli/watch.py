import asyncio
import contextlib
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from rust_order.cli.fmt import print_outcome, settings_from
from rust_order.core.discovery import collect_input_files
from rust_order.core.errors import DiscoveryError
from rust_order.core.ports.watcher import FileWatcherPort
from rust_order.core.run import run_files
from rust_order.watcher.watchfiles_adapter import WatchfilesWatcher

logger = logging.getLogger(__name__)
console = Console()


def watch(
    ctx: typer.Context,
    directory: Annotated[Path, typer.Argument(exists=True, file_okay=False, help="Directory to watch.")],
    initial: Annotated[
        bool, typer.Option("--initial/--no-initial", help="Reorder existing files before watching.")
    ] = True,
) -> None:
    """Reorder Rust files under a directory whenever they change."""
    settings = settings_from(ctx)

    async def _reorder(paths: list[Path]) -> None:
        report = await run_files(paths, jobs=settings.jobs)
        for outcome in report.outcomes:
            print_outcome(outcome)

    async def _on_change(paths: set[Path]) -> None:
        # Our own rewrite fires another event; the second pass finds nothing to change.
        await _reorder(sorted(p for p in paths if p.is_file()))

    async def _run() -> None:
        if initial:
            try:
                await _reorder(collect_input_files([directory]))
            except DiscoveryError as exc:
                logger.info("Initial pass skipped: %s", exc)
        watcher: FileWatcherPort = WatchfilesWatcher(directory, _on_change)
        await watcher.start()
        try:
            await watcher.wait()
        finally:
            await watcher.stop()

    console.print(f"Watching {escape(str(directory))} (Ctrl+C to stop)", soft_wrap=True)
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(_run())
