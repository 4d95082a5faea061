from __future__ import annotations

from flame.errors import ValidationError


def split_path(path: str) -> list[str]:
    return [part for part in path.split("/") if part]


def is_document_path(path: str) -> bool:
    """Return True when the path has an even number of segments.

    An empty path counts as even; use `require_path` to reject it first.
    """

    return len(split_path(path)) % 2 == 0


def document_id(path: str) -> str | None:
    segments = split_path(path)
    if not segments or len(segments) % 2 != 0:
        return None
    return segments[-1]


def require_path(path: str) -> str:
    """Normalize a path and reject one without any segment."""

    segments = split_path(path)
    if not segments:
        raise ValidationError(f"Path must contain at least one segment: {path!r}")
    return "/".join(segments)
