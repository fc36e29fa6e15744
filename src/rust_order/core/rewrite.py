import logging
import os
import shutil
import tempfile
from pathlib import Path

from rust_order.core.engine import reorder_source
from rust_order.core.errors import FileProcessingError, RustOrderError
from rust_order.models import FileOutcome, FileStatus

logger = logging.getLogger(__name__)


def read_source(path: Path) -> str:
    # newline="" keeps CRLF line endings intact
    try:
        with open(path, encoding="utf-8", newline="") as handle:
            return handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise FileProcessingError(f"cannot read file: {exc}", path=str(path)) from exc


def write_atomic(path: Path, text: str) -> None:
    """Replace *path* with *text* so readers see either the old or the new file, never a mix.

    A symlinked *path* is written through: its target gets the new text and
    the link stays a link.
    """
    target = path.resolve()
    temp_name: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            newline="",
            dir=target.parent,
            prefix=f".{target.name}.",
            suffix=".tmp",
            delete=False,
        ) as temp_file:
            temp_name = temp_file.name
            temp_file.write(text)
            temp_file.flush()
            os.fsync(temp_file.fileno())
        shutil.copymode(target, temp_name)
        os.replace(temp_name, target)
        temp_name = None
    except OSError as exc:
        raise FileProcessingError(f"cannot write file: {exc}", path=str(path)) from exc
    finally:
        if temp_name is not None:
            Path(temp_name).unlink(missing_ok=True)


def process_file(path: Path, check: bool = False) -> FileOutcome:
    """Reorder one file in place, or with *check* only report whether it would change."""
    try:
        source = read_source(path)
        result = reorder_source(source, path=str(path))
        if not result.changed:
            return FileOutcome(path=str(path), status=FileStatus.UNCHANGED)
        if check:
            return FileOutcome(path=str(path), status=FileStatus.WOULD_REWRITE)
        write_atomic(path, result.text)
    except RustOrderError as exc:
        logger.error("%s", exc)
        return FileOutcome(path=str(path), status=FileStatus.FAILED, error=exc.message, offset=exc.offset)

    logger.info("Rewrote %s", path)
    return FileOutcome(path=str(path), status=FileStatus.REWRITTEN)
