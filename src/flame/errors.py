from __future__ import annotations


class FlameError(Exception):
    """Base error for failures reported back to the command boundary."""

    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(FlameError):
    """Raised when a path or payload has the wrong shape for the operation."""

    kind = "validation"


class NotFoundError(FlameError):
    """Raised when a document or collection must exist but does not."""

    kind = "not_found"


class FormatError(FlameError):
    """Raised when input data cannot be parsed as JSON."""

    kind = "format"


class BackendConnectionError(FlameError):
    """Raised when the database client cannot be built or a call to it fails."""

    kind = "connection"


class PartialBatchError(FlameError):
    """Describes a multi-document operation where some items failed."""

    kind = "partial"

    def __init__(self, message: str, *, failed: int, attempted: int) -> None:
        super().__init__(message)
        self.failed = failed
        self.attempted = attempted
