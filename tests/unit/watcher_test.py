"""Tests for the watchfiles watcher adapter."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest
from watchfiles import Change

from rust_order.watcher.watchfiles_adapter import (
    WatchfilesWatcher,
    _changed_rust_files,
    _is_supported_change,
)


class TestIsSupportedChange:
    def test_added_rust_file(self) -> None:
        assert _is_supported_change(Change.added, Path("lib.rs")) is True

    def test_modified_rust_file(self) -> None:
        assert _is_supported_change(Change.modified, Path("src/main.rs")) is True

    def test_uppercase_suffix(self) -> None:
        assert _is_supported_change(Change.modified, Path("MAIN.RS")) is True

    def test_deleted_rust_file(self) -> None:
        assert _is_supported_change(Change.deleted, Path("lib.rs")) is False

    def test_unsupported_toml(self) -> None:
        assert _is_supported_change(Change.modified, Path("Cargo.toml")) is False

    def test_unsupported_no_extension(self) -> None:
        assert _is_supported_change(Change.added, Path("Makefile")) is False


def test_changed_rust_files_keeps_existing_rust_paths() -> None:
    changes = {(Change.added, "/src/lib.rs"), (Change.deleted, "/src/old.rs"), (Change.modified, "/Cargo.toml")}
    assert _changed_rust_files(changes) == {Path("/src/lib.rs")}


class TestWatchfilesWatcher:
    def test_implements_protocol(self) -> None:
        from rust_order.core.ports.watcher import FileWatcherPort

        callback = AsyncMock()
        watcher: FileWatcherPort = WatchfilesWatcher("/tmp", callback)
        assert hasattr(watcher, "start")
        assert hasattr(watcher, "stop")
        assert hasattr(watcher, "wait")

    @pytest.mark.asyncio
    async def test_start_creates_task(self) -> None:
        callback = AsyncMock()
        watcher = WatchfilesWatcher("/tmp", callback)

        with patch("rust_order.watcher.watchfiles_adapter.awatch") as mock_awatch:
            mock_awatch.return_value = _empty_async_iter()
            await watcher.start()
            assert watcher._task is not None
            await watcher.stop()
            assert watcher._task is None

    @pytest.mark.asyncio
    async def test_stop_without_start_is_noop(self) -> None:
        callback = AsyncMock()
        watcher = WatchfilesWatcher("/tmp", callback)
        await watcher.stop()

    @pytest.mark.asyncio
    async def test_double_start_is_noop(self) -> None:
        callback = AsyncMock()
        watcher = WatchfilesWatcher("/tmp", callback)

        with patch("rust_order.watcher.watchfiles_adapter.awatch") as mock_awatch:
            mock_awatch.return_value = _empty_async_iter()
            await watcher.start()
            task1 = watcher._task
            await watcher.start()
            assert watcher._task is task1
            await watcher.stop()

    @pytest.mark.asyncio
    async def test_callback_receives_rust_files(self) -> None:
        callback = AsyncMock()
        watcher = WatchfilesWatcher("/tmp", callback)

        changes = {(1, "/tmp/lib.rs"), (2, "/tmp/Cargo.toml"), (2, "/tmp/src/main.rs"), (3, "/tmp/old.rs")}

        with patch("rust_order.watcher.watchfiles_adapter.awatch") as mock_awatch:
            mock_awatch.return_value = _single_change_iter(changes)
            await watcher.start()
            await asyncio.sleep(0.05)
            await watcher.stop()

        callback.assert_called_once()
        paths = callback.call_args[0][0]
        assert paths == {Path("/tmp/lib.rs"), Path("/tmp/src/main.rs")}

    @pytest.mark.asyncio
    async def test_callback_not_called_for_unsupported_only(self) -> None:
        callback = AsyncMock()
        watcher = WatchfilesWatcher("/tmp", callback)

        changes = {(1, "/tmp/readme.md"), (3, "/tmp/gone.rs")}

        with patch("rust_order.watcher.watchfiles_adapter.awatch") as mock_awatch:
            mock_awatch.return_value = _single_change_iter(changes)
            await watcher.start()
            await asyncio.sleep(0.05)
            await watcher.stop()

        callback.assert_not_called()

    @pytest.mark.asyncio
    async def test_callback_error_keeps_watching(self) -> None:
        callback = AsyncMock(side_effect=RuntimeError("boom"))
        watcher = WatchfilesWatcher("/tmp", callback)

        with patch("rust_order.watcher.watchfiles_adapter.awatch") as mock_awatch:
            mock_awatch.return_value = _single_change_iter({(2, "/tmp/lib.rs")})
            await watcher.start()
            await asyncio.sleep(0.05)
            assert watcher._task is not None
            assert not watcher._task.done()
            await watcher.stop()

        callback.assert_called_once()


async def _empty_async_iter() -> AsyncIterator[Any]:
    """Async iterator that never yields, just blocks until cancelled."""
    try:
        await asyncio.sleep(3600)
    except asyncio.CancelledError:
        return
    yield  # pragma: no cover


async def _single_change_iter(changes: set[tuple[int, str]]) -> AsyncIterator[set[tuple[int, str]]]:
    """Async iterator that yields one set of changes then blocks."""
    yield changes
    try:
        await asyncio.sleep(3600)
    except asyncio.CancelledError:
        return
