class RustOrderError(Exception):
    """Base error carrying the offending path and, when known, a character offset."""

    def __init__(self, message: str, path: str | None = None, offset: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.offset = offset

    def __str__(self) -> str:
        location = self.path or ""
        if self.offset is not None:
            location = f"{location}@{self.offset}" if location else f"offset {self.offset}"
        return f"{location}: {self.message}" if location else self.message


class DiscoveryError(RustOrderError):
    pass


class LosslessInvariantError(RustOrderError):
    pass


class FileProcessingError(RustOrderError):
    pass
