import re
from collections.abc import Sequence

from rust_order.models import ItemUnit, Preamble

_LEADING_BLANK_LINES = re.compile(r"(?:[ \t]*\r?\n)+")


def detect_newline(source: str) -> str:
    return "\r\n" if "\r\n" in source else "\n"


def strip_leading_blank_lines(text: str) -> str:
    match = _LEADING_BLANK_LINES.match(text)
    return text[match.end() :] if match else text


def concat(preamble: Preamble, units: Sequence[ItemUnit]) -> str:
    """Join the preamble and unit texts verbatim."""
    return preamble.text + "".join(unit.text for unit in units)


def render(preamble: Preamble, units: Sequence[ItemUnit], newline: str = "\n") -> str:
    """Render reordered units after the preamble.

    A unit opening a section loses its leading blank lines and is separated
    from the previous section by exactly one blank line. Within a section
    units keep their own leading trivia; a unit that no longer follows its
    original neighbour is moved onto a fresh line. Trivia-only units are
    emitted as they are.
    """
    parts = [preamble.text]
    previous: ItemUnit | None = None
    for unit in units:
        text = unit.text
        if previous is not None and unit.index != previous.index + 1 and not parts[-1].endswith("\n"):
            parts.append(newline)
        if unit.is_trivia:
            pass
        elif previous is None:
            text = strip_leading_blank_lines(text)
        elif unit.category is not previous.category:
            if not parts[-1].endswith("\n"):
                parts.append(newline)
            text = newline + strip_leading_blank_lines(text)
        parts.append(text)
        previous = unit
    return "".join(parts)
