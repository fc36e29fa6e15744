"""Split Rust source into a preamble and top-level item units.

The scanner is a single-pass state machine with an integer nesting depth and
an enumerated lexical mode. It never recurses and never raises: input it
cannot make sense of ends up in a trailing, unterminated unit.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum, auto

from rust_order.core.classifier import STRING_MARKER, is_semicolon_terminated
from rust_order.models import ItemUnit, Preamble, ScannedSource

logger = logging.getLogger(__name__)

_HEAD_LIMIT = 8
_OPENERS = "([{"
_CLOSERS = ")]}"

# Rest of a line after an item terminator: blanks, an optional line comment, the newline.
_LINE_TAIL = re.compile(r"[ \t]*(?://[^\r\n]*)?(?:\r?\n|\Z)")


class _Mode(Enum):
    CODE = auto()
    LINE_COMMENT = auto()
    BLOCK_COMMENT = auto()
    STRING = auto()
    RAW_STRING = auto()
    CHAR = auto()


@dataclass
class _Pending:
    """State of the unit currently being scanned."""

    start: int
    attributes: list[str] = field(default_factory=list)
    head: list[str] = field(default_factory=list)
    angle_depth: int = 0

    def add_word(self, word: str) -> None:
        if len(self.head) < _HEAD_LIMIT:
            self.head.append(word)


def _is_ident_start(ch: str) -> bool:
    return ch.isalpha() or ch == "_"


def _is_ident_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def _line_tail_end(source: str, pos: int) -> int:
    """Extend *pos* over the rest of its line when that rest holds no code."""
    match = _LINE_TAIL.match(source, pos)
    return match.end() if match else pos


def _bom_length(source: str) -> int:
    return 1 if source.startswith("\ufeff") else 0


def _shebang_end(source: str, start: int) -> int:
    """A ``#!`` first line is a shebang unless it opens an inner attribute ``#![``."""
    if not source.startswith("#!", start):
        return start
    if source[start + 2 :].lstrip(" \t").startswith("["):
        return start
    newline = source.find("\n", start)
    return len(source) if newline == -1 else newline + 1


def _raw_string_prefix(source: str, i: int) -> tuple[int, int] | None:
    """Match ``r"``, ``r#"``, ``br##"``, ``cr"`` at *i*; return (hash count, index after the quote)."""
    j = i
    if source[j] in "bc" and j + 1 < len(source) and source[j + 1] == "r":
        j += 1
    if source[j] != "r":
        return None
    j += 1
    hashes = 0
    while j < len(source) and source[j] == "#":
        hashes += 1
        j += 1
    if j < len(source) and source[j] == '"':
        return hashes, j + 1
    return None


class _Scanner:
    def __init__(self, source: str) -> None:
        self.source = source
        self.n = len(source)
        self.units: list[ItemUnit] = []

        self.bom_end = _bom_length(source)
        self.shebang_end = _shebang_end(source, self.bom_end)
        self.inner_attributes: list[str] = []
        # Preamble boundary candidate; fixed once the first item begins.
        self.preamble_open = True
        self.preamble_end = self.shebang_end

        self.mode = _Mode.CODE
        self.depth = 0
        self.comment_depth = 0
        self.raw_hashes = 0
        self.comment_inner = False
        self.line_has_content = False

        self.attr_start: int | None = None
        self.attr_inner = False
        self.pending = _Pending(start=self.shebang_end)

    # -- preamble ------------------------------------------------------------

    def _close_preamble(self) -> None:
        if self.preamble_open:
            self.preamble_open = False
            self.pending.start = self.preamble_end

    def _extend_preamble(self, end: int) -> None:
        if self.preamble_open:
            self.preamble_end = max(self.preamble_end, end)

    # -- units ---------------------------------------------------------------

    def _finish_unit(self, body_end: int) -> int:
        end = _line_tail_end(self.source, body_end)
        pending = self.pending
        self.units.append(
            ItemUnit(
                index=len(self.units),
                start=pending.start,
                end=end,
                body_end=body_end,
                text=self.source[pending.start : end],
                attributes=tuple(pending.attributes),
                head=tuple(pending.head),
            )
        )
        self.pending = _Pending(start=end)
        self.line_has_content = False
        return end

    def _finish_attribute(self, start: int, close: int) -> int:
        text = self.source[start : close + 1]
        self.attr_start = None
        if self.attr_inner and self.preamble_open:
            self.inner_attributes.append(text)
            end = _line_tail_end(self.source, close + 1)
            self._extend_preamble(end)
            if end > close + 1:
                self.line_has_content = False
            return end
        self.pending.attributes.append(text)
        return close + 1

    def _mark_significant(self) -> None:
        self.line_has_content = True
        if self.attr_start is None or not self.attr_inner:
            self._close_preamble()

    # -- main loop -----------------------------------------------------------

    def run(self) -> ScannedSource:
        i = self.shebang_end
        while i < self.n:
            if self.mode is _Mode.CODE:
                i = self._step_code(i)
            elif self.mode is _Mode.LINE_COMMENT:
                i = self._step_line_comment(i)
            elif self.mode is _Mode.BLOCK_COMMENT:
                i = self._step_block_comment(i)
            elif self.mode is _Mode.STRING:
                i = self._step_string(i)
            elif self.mode is _Mode.RAW_STRING:
                i = self._step_raw_string(i)
            else:
                i = self._step_char(i)
        return self._finish()

    def _finish(self) -> ScannedSource:
        if self.mode is not _Mode.CODE or self.depth:
            logger.debug("Source ends inside %s at depth %d", self.mode.name.lower(), self.depth)
        if self.mode is _Mode.LINE_COMMENT and self.comment_inner:
            self._extend_preamble(self.n)
        self._close_preamble()

        tail_start = self.pending.start
        if tail_start < self.n:
            attributes = list(self.pending.attributes)
            if self.attr_start is not None:
                attributes.append(self.source[self.attr_start :])
            self.units.append(
                ItemUnit(
                    index=len(self.units),
                    start=tail_start,
                    end=self.n,
                    body_end=self.n,
                    text=self.source[tail_start:],
                    attributes=tuple(attributes),
                    head=tuple(self.pending.head),
                    terminated=False,
                )
            )

        preamble_text = self.source[: self.preamble_end]
        shebang = None
        if self.shebang_end > self.bom_end:
            shebang = self.source[self.bom_end : self.shebang_end].rstrip("\r\n")
        return ScannedSource(
            source=self.source,
            preamble=Preamble(text=preamble_text, shebang=shebang, inner_attributes=tuple(self.inner_attributes)),
            units=tuple(self.units),
        )

    def _step_code(self, i: int) -> int:
        src = self.source
        ch = src[i]
        nxt = src[i + 1] if i + 1 < self.n else ""

        if ch == "\n":
            if not self.line_has_content:
                self._extend_preamble(i + 1)
            self.line_has_content = False
            return i + 1
        if ch.isspace():
            return i + 1

        if ch == "/" and nxt == "/":
            third = src[i + 2] if i + 2 < self.n else ""
            fourth = src[i + 3] if i + 3 < self.n else ""
            self.comment_inner = third == "!"
            if third == "/" and fourth != "/":
                self._close_preamble()
            self.line_has_content = True
            self.mode = _Mode.LINE_COMMENT
            return i + 2
        if ch == "/" and nxt == "*":
            third = src[i + 2] if i + 2 < self.n else ""
            fourth = src[i + 3] if i + 3 < self.n else ""
            self.comment_inner = third == "!"
            if third == "*" and fourth not in ("*", "/"):
                self._close_preamble()
            self.line_has_content = True
            self.comment_depth = 1
            self.mode = _Mode.BLOCK_COMMENT
            return i + 2

        if ch == "#" and self.depth == 0 and self.attr_start is None and (nxt == "[" or src.startswith("![", i + 1)):
            self.attr_start = i
            self.attr_inner = nxt == "!"
            self._mark_significant()
            return i + 1

        self._mark_significant()

        if ch in "rbc" and (i == 0 or not _is_ident_char(src[i - 1])):
            raw = _raw_string_prefix(src, i)
            if raw is not None:
                self.raw_hashes, after = raw
                self._record_string()
                self.mode = _Mode.RAW_STRING
                return after
            if ch in "bc" and nxt == '"':
                self._record_string()
                self.mode = _Mode.STRING
                return i + 2
            if ch == "b" and nxt == "'":
                return self._start_char(i + 1)
            if ch == "r" and nxt == "#" and i + 2 < self.n and _is_ident_start(src[i + 2]):
                return self._read_word(i + 2)

        if _is_ident_start(ch):
            return self._read_word(i)
        if ch.isdigit():
            j = i + 1
            while j < self.n and _is_ident_char(src[j]):
                j += 1
            return j

        if ch == '"':
            self._record_string()
            self.mode = _Mode.STRING
            return i + 1
        if ch == "'":
            return self._start_char(i)

        if ch in _OPENERS:
            self.depth += 1
            return i + 1
        if ch in _CLOSERS:
            if self.depth == 0:
                return i + 1
            self.depth -= 1
            if self.depth == 0:
                if self.attr_start is not None and ch == "]":
                    return self._finish_attribute(self.attr_start, i)
                if (
                    ch == "}"
                    and self.attr_start is None
                    and self.pending.angle_depth == 0
                    and not is_semicolon_terminated(self.pending.head)
                ):
                    return self._finish_unit(i + 1)
            return i + 1

        if self.depth == 0 and self.attr_start is None:
            if ch == ";":
                return self._finish_unit(i + 1)
            if ch == "<":
                self.pending.angle_depth += 1
            elif ch == ">" and src[i - 1] not in "-=":
                self.pending.angle_depth = max(0, self.pending.angle_depth - 1)
        return i + 1

    def _read_word(self, i: int) -> int:
        j = i
        while j < self.n and _is_ident_char(self.source[j]):
            j += 1
        if self.depth == 0 and self.attr_start is None:
            self.pending.add_word(self.source[i:j])
        return j

    def _record_string(self) -> None:
        if self.depth == 0 and self.attr_start is None:
            self.pending.add_word(STRING_MARKER)

    def _start_char(self, quote: int) -> int:
        """Enter a char literal at *quote*, or step over a lifetime or label."""
        src = self.source
        after = src[quote + 1] if quote + 1 < self.n else ""
        if after == "\\":
            self.mode = _Mode.CHAR
            return quote + 1
        if quote + 2 < self.n and src[quote + 2] == "'":
            return quote + 3
        j = quote + 1
        while j < self.n and _is_ident_char(src[j]):
            j += 1
        return max(j, quote + 1)

    def _step_line_comment(self, i: int) -> int:
        if self.source[i] != "\n":
            return i + 1
        self.mode = _Mode.CODE
        if self.comment_inner:
            self._extend_preamble(i + 1)
        # The newline itself is handled in code mode.
        return i

    def _step_block_comment(self, i: int) -> int:
        src = self.source
        if src.startswith("/*", i):
            self.comment_depth += 1
            return i + 2
        if src.startswith("*/", i):
            self.comment_depth -= 1
            if self.comment_depth == 0:
                self.mode = _Mode.CODE
                if self.comment_inner and self.preamble_open:
                    end = _line_tail_end(src, i + 2)
                    self._extend_preamble(end)
                    if end > i + 2:
                        self.line_has_content = False
                    return end
            return i + 2
        return i + 1

    def _step_string(self, i: int) -> int:
        ch = self.source[i]
        if ch == "\\":
            return i + 2
        if ch == '"':
            self.mode = _Mode.CODE
        return i + 1

    def _step_raw_string(self, i: int) -> int:
        closing = '"' + "#" * self.raw_hashes
        if self.source.startswith(closing, i):
            self.mode = _Mode.CODE
            return i + len(closing)
        return i + 1

    def _step_char(self, i: int) -> int:
        ch = self.source[i]
        if ch == "\\":
            return i + 2
        if ch == "'" or ch == "\n":
            self.mode = _Mode.CODE
            return i + 1 if ch == "'" else i
        return i + 1


def scan(source: str) -> ScannedSource:
    """Split *source* into its preamble and top-level item units, covering every character exactly once."""
    return _Scanner(source).run()
