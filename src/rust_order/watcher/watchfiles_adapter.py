from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Coroutine, Iterable
from pathlib import Path
from typing import Any

from watchfiles import Change, awatch

from rust_order.core.discovery import is_rust_file

logger = logging.getLogger(__name__)


def _is_supported_change(change: Change, path: Path) -> bool:
    # A deleted file has nothing left to reorder.
    return change is not Change.deleted and is_rust_file(path)


def _changed_rust_files(changes: Iterable[tuple[Change | int, str]]) -> set[Path]:
    return {Path(raw) for change, raw in changes if _is_supported_change(Change(change), Path(raw))}


class WatchfilesWatcher:
    """Reorder ``.rs`` files below a directory as they are added or edited.

    Every batch of filesystem events is reduced to the Rust files that still
    exist and handed to ``on_change``, which usually runs the reorderer on
    them. Rewrites made by ``on_change`` trigger one more batch; reordering an
    already ordered file changes nothing, so the loop settles. Implements the
    ``FileWatcherPort`` protocol.
    """

    def __init__(
        self,
        directory: str | Path,
        on_change: Callable[[set[Path]], Coroutine[Any, Any, None]],
    ) -> None:
        self._directory = Path(directory)
        self._on_change = on_change
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._watch())
        logger.info("Watching %s for Rust source changes", self._directory)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Stopped watching %s", self._directory)

    async def wait(self) -> None:
        """Block until the watch loop ends (normally only on cancellation)."""
        if self._task is not None:
            await self._task

    async def _watch(self) -> None:
        async for changes in awatch(self._directory):
            paths = _changed_rust_files(changes)
            if not paths:
                continue
            logger.info("%d Rust file(s) changed under %s", len(paths), self._directory)
            try:
                await self._on_change(paths)
            except Exception:
                # Keep watching; the next edit gets another attempt.
                logger.exception("Reordering changed files under %s failed", self._directory)
