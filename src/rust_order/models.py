from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class Category(StrEnum):
    IMPORT = "import"
    TYPE_ALIAS = "type_alias"
    CONSTANT = "constant"
    MODULE = "module"
    IMPLEMENTATION = "implementation"
    FUNCTION = "function"
    TEST_MODULE = "test_module"
    OTHER = "other"


# Section order of the movable categories. OTHER never moves.
CANONICAL_ORDER: tuple[Category, ...] = (
    Category.IMPORT,
    Category.TYPE_ALIAS,
    Category.CONSTANT,
    Category.MODULE,
    Category.IMPLEMENTATION,
    Category.FUNCTION,
    Category.TEST_MODULE,
)


class Preamble(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = ""
    shebang: str | None = None
    inner_attributes: tuple[str, ...] = ()


class ItemUnit(BaseModel):
    """One top-level item plus the trivia bound to it.

    ``text`` is ``source[start:end]``; ``body_end`` points just past the
    terminating ``;`` or ``}``.
    """

    model_config = ConfigDict(frozen=True)

    index: int
    start: int
    end: int
    body_end: int
    text: str
    attributes: tuple[str, ...] = ()
    head: tuple[str, ...] = ()
    terminated: bool = True
    category: Category = Category.OTHER

    @property
    def is_trivia(self) -> bool:
        return not self.attributes and not self.head


class ScannedSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str
    preamble: Preamble
    units: tuple[ItemUnit, ...]

    def reconstruct(self) -> str:
        return self.preamble.text + "".join(unit.text for unit in self.units)


class ReorderResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str
    text: str
    preamble: Preamble
    units: tuple[ItemUnit, ...]

    @property
    def changed(self) -> bool:
        return self.text != self.source


class FileStatus(StrEnum):
    UNCHANGED = "unchanged"
    REWRITTEN = "rewritten"
    WOULD_REWRITE = "would_rewrite"
    FAILED = "failed"
    SKIPPED = "skipped"


class FileOutcome(BaseModel):
    path: str
    status: FileStatus
    error: str | None = None
    offset: int | None = None


class RunReport(BaseModel):
    outcomes: list[FileOutcome]

    @property
    def failed(self) -> list[FileOutcome]:
        return [o for o in self.outcomes if o.status is FileStatus.FAILED]

    @property
    def skipped(self) -> list[FileOutcome]:
        return [o for o in self.outcomes if o.status is FileStatus.SKIPPED]

    @property
    def changed(self) -> list[FileOutcome]:
        return [o for o in self.outcomes if o.status in (FileStatus.REWRITTEN, FileStatus.WOULD_REWRITE)]

    @property
    def ok(self) -> bool:
        # Skipped files were never processed.
        return not self.failed and not self.skipped
