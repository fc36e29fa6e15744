import logging
from collections import deque
from collections.abc import Iterable
from pathlib import Path

from rust_order.core.errors import DiscoveryError

logger = logging.getLogger(__name__)

RUST_SUFFIX = ".rs"


def is_rust_file(path: Path) -> bool:
    return path.suffix.lower() == RUST_SUFFIX


def _push_file(path: Path, files: list[Path], seen: set[Path]) -> None:
    key = path.resolve()
    if key in seen:
        logger.debug("Skipping %s, already collected", path)
        return
    seen.add(key)
    files.append(path)


def _collect_directory(directory: Path, files: list[Path], seen: set[Path]) -> None:
    queue = deque([directory])
    while queue:
        current = queue.popleft()
        try:
            entries = sorted(current.iterdir())
        except OSError as exc:
            raise DiscoveryError(f"cannot read directory: {exc.strerror or exc}", path=str(current)) from exc

        for entry in entries:
            if entry.is_symlink():
                if entry.is_file() and is_rust_file(entry):
                    _push_file(entry, files, seen)
            elif entry.is_dir():
                queue.append(entry)
            elif entry.is_file() and is_rust_file(entry):
                _push_file(entry, files, seen)


def collect_input_files(paths: Iterable[str | Path], seen: set[Path] | None = None) -> list[Path]:
    """Expand files and directories into the Rust files to process.

    Explicit files are taken as given; directories are walked breadth first
    in sorted order. *seen* holds resolved paths already collected and is
    updated in place, so every physical file is returned once.
    """
    seen = set() if seen is None else seen
    files: list[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            _collect_directory(path, files, seen)
        elif path.is_file():
            _push_file(path, files, seen)
        elif not path.exists():
            raise DiscoveryError("no such file or directory", path=str(path))

    if not files:
        raise DiscoveryError("no Rust files found")
    logger.info("Collected %d Rust file(s)", len(files))
    return files
