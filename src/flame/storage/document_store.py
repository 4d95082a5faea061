from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Mapping, Protocol, TypeVar


T = TypeVar("T")


@dataclass(frozen=True)
class StoredDocument:
    id: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class WriteReceipt:
    path: str
    document_id: str
    write_time: datetime | None = None


class TransactionView(Protocol):
    def get_document(self, path: str) -> StoredDocument | None:
        """Read document data inside the transaction."""

    def set_document(self, path: str, data: Mapping[str, Any]) -> None:
        """Stage a full overwrite of the document."""

    def delete_document(self, path: str) -> None:
        """Stage a delete of the document."""


class DocumentStore(Protocol):
    def get_document(self, path: str) -> StoredDocument | None:
        """Get a document. Return None when it does not exist."""

    def set_document(self, path: str, data: Mapping[str, Any], *, merge: bool = False) -> WriteReceipt:
        """Set document data, overwriting unless merge is requested."""

    def delete_document(self, path: str) -> None:
        """Delete document. No-op when document does not exist."""

    def add_document(self, collection_path: str, data: Mapping[str, Any]) -> WriteReceipt:
        """Add a document under a generated id."""

    def query_collection(self, collection_path: str, *, limit: int | None = None) -> list[StoredDocument]:
        """List documents ordered by id ascending."""

    def run_transaction(self, fn: Callable[[TransactionView], T]) -> T:
        """Run fn atomically. Nothing is written if fn raises."""

    def list_collections(self) -> list[str]:
        """List root collection ids."""
