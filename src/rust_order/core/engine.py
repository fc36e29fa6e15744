import logging

from rust_order.core.classifier import classify
from rust_order.core.errors import LosslessInvariantError
from rust_order.core.orderer import order_units
from rust_order.core.reassembler import concat, detect_newline, render
from rust_order.core.scanner import scan
from rust_order.models import ReorderResult, ScannedSource

logger = logging.getLogger(__name__)


def _first_difference(left: str, right: str) -> int:
    for offset, (a, b) in enumerate(zip(left, right, strict=False)):
        if a != b:
            return offset
    return min(len(left), len(right))


def verify_round_trip(scanned: ScannedSource, path: str | None = None) -> None:
    """Raise ``LosslessInvariantError`` unless the units partition the source exactly."""
    source = scanned.source
    position = len(scanned.preamble.text)
    for unit in scanned.units:
        if unit.start != position or unit.end < unit.start:
            raise LosslessInvariantError(
                f"unit {unit.index} starts at {unit.start}, expected {position}", path=path, offset=position
            )
        position = unit.end

    rebuilt = concat(scanned.preamble, scanned.units)
    if rebuilt != source:
        offset = _first_difference(rebuilt, source)
        raise LosslessInvariantError("scanned units do not reproduce the source", path=path, offset=offset)


def reorder_source(source: str, path: str | None = None) -> ReorderResult:
    """Return *source* with its top-level items in canonical section order.

    Raises ``LosslessInvariantError`` if scanning would lose or duplicate text;
    the caller must then leave the file alone.
    """
    scanned = scan(source)
    verify_round_trip(scanned, path)

    units = tuple(unit.model_copy(update={"category": classify(unit)}) for unit in scanned.units)
    ordered = order_units(units)
    text = render(scanned.preamble, ordered, newline=detect_newline(source))

    logger.debug(
        "%s: %d unit(s), %s",
        path or "<source>",
        len(units),
        "reordered" if text != source else "already canonical",
    )
    return ReorderResult(source=source, text=text, preamble=scanned.preamble, units=tuple(ordered))
