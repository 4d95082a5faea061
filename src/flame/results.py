from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from flame.errors import PartialBatchError


class ResultKind(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    PARTIAL = "partial"
    CANCELLED = "cancelled"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    FORMAT = "format"
    CONNECTION = "connection"

    @property
    def is_error(self) -> bool:
        return self in {
            ResultKind.VALIDATION,
            ResultKind.NOT_FOUND,
            ResultKind.FORMAT,
            ResultKind.CONNECTION,
        }


@dataclass(frozen=True)
class OperationResult:
    kind: ResultKind
    message: str
    payload: Any = None


@dataclass(frozen=True)
class WriteOutcome:
    index: int
    path: str
    document_id: str | None
    ok: bool
    write_time: datetime | None = None
    error: str | None = None


@dataclass
class BatchReport:
    path: str
    outcomes: list[WriteOutcome] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.ok)

    @property
    def failed(self) -> int:
        return self.attempted - self.succeeded

    def failures(self) -> list[WriteOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    def partial_error(self) -> PartialBatchError | None:
        failures = self.failures()
        if not failures:
            return None
        details = "; ".join(f"#{outcome.index}: {outcome.error}" for outcome in failures)
        return PartialBatchError(
            f"{len(failures)} of {self.attempted} item(s) failed for {self.path}: {details}",
            failed=len(failures),
            attempted=self.attempted,
        )
