import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from rust_order.core.rewrite import process_file
from rust_order.models import FileOutcome, FileStatus, RunReport

logger = logging.getLogger(__name__)


async def run_files(
    paths: Sequence[Path],
    check: bool = False,
    jobs: int = 1,
    fail_fast: bool = False,
) -> RunReport:
    """Process *paths* concurrently and collect one outcome per path, in input order.

    Files share no state; the only coordination is the ``failed`` event,
    which stops files that have not started yet when *fail_fast* is set.
    """
    semaphore = asyncio.Semaphore(max(1, jobs))
    failed = asyncio.Event()

    async def _one(path: Path) -> FileOutcome:
        async with semaphore:
            if fail_fast and failed.is_set():
                return FileOutcome(path=str(path), status=FileStatus.SKIPPED, error="skipped after earlier failure")
            outcome = await asyncio.to_thread(process_file, path, check)
            if outcome.status is FileStatus.FAILED:
                failed.set()
            return outcome

    outcomes = await asyncio.gather(*(_one(path) for path in paths))
    report = RunReport(outcomes=list(outcomes))
    logger.info(
        "Processed %d file(s): %d changed, %d failed, %d skipped",
        len(report.outcomes),
        len(report.changed),
        len(report.failed),
        len(report.skipped),
    )
    return report
