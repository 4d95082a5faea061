from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Callable

from flame.errors import BackendConnectionError, ValidationError
from flame.firestore_path import is_document_path, require_path
from flame.formatter import format_document, format_documents
from flame.results import BatchReport, WriteOutcome
from flame.storage.document_store import DocumentStore, StoredDocument


LOGGER = logging.getLogger(__name__)

Confirm = Callable[[str], bool]


@dataclass(frozen=True)
class DownloadResult:
    path: str
    is_document: bool
    documents: list[StoredDocument] = field(default_factory=list)
    rendered: str = "[]"

    @property
    def found(self) -> bool:
        return bool(self.documents)

    @property
    def count(self) -> int:
        return len(self.documents)


@dataclass(frozen=True)
class DeleteResult:
    path: str
    is_document: bool
    cancelled: bool = False
    found: bool = True
    report: BatchReport | None = None

    @property
    def deleted(self) -> int:
        return self.report.succeeded if self.report is not None else 0


def download_path(
    store: DocumentStore,
    path: str,
    *,
    limit: int | None = None,
    include_id: bool = False,
) -> DownloadResult:
    path = require_path(path)
    if limit is not None and limit <= 0:
        raise ValidationError(f"limit must be > 0: {limit}")

    if is_document_path(path):
        try:
            doc = store.get_document(path)
        except Exception as exc:
            raise BackendConnectionError(f"Failed to fetch: {exc}") from exc
        if doc is None:
            return DownloadResult(path=path, is_document=True, rendered="null")
        return DownloadResult(path=path, is_document=True, documents=[doc], rendered=format_document(doc, include_id))

    try:
        docs = store.query_collection(path, limit=limit)
    except Exception as exc:
        raise BackendConnectionError(f"Failed to fetch: {exc}") from exc
    return DownloadResult(path=path, is_document=False, documents=docs, rendered=format_documents(docs, include_id))


def confirmation_message(path: str, *, use_emulator: bool) -> str:
    target_type = "document" if is_document_path(path) else "collection"
    environment = "EMULATOR" if use_emulator else "REMOTE"
    return (
        f"Are you sure you want to delete the {target_type} at {path}? "
        f"You are currently targeting the {environment}."
    )


def delete_path(
    store: DocumentStore,
    path: str,
    *,
    force: bool = False,
    confirm: Confirm | None = None,
    use_emulator: bool = True,
) -> DeleteResult:
    """Delete a document, or every document of a collection one by one.

    Without `force` the `confirm` callback must accept the prompt; a missing
    callback counts as a decline. Collection deletes keep going when a single
    delete fails and record it in the report.
    """

    path = require_path(path)
    is_document = is_document_path(path)

    if not force:
        confirmed = confirm(confirmation_message(path, use_emulator=use_emulator)) if confirm else False
        if not confirmed:
            return DeleteResult(path=path, is_document=is_document, cancelled=True)

    if is_document:
        return _delete_document(store, path)
    return _delete_collection(store, path)


def _delete_document(store: DocumentStore, path: str) -> DeleteResult:
    try:
        doc = store.get_document(path)
    except Exception as exc:
        raise BackendConnectionError(f"Failed to delete: {exc}") from exc
    if doc is None:
        return DeleteResult(path=path, is_document=True, found=False)

    try:
        store.delete_document(path)
    except Exception as exc:
        raise BackendConnectionError(f"Failed to delete: {exc}") from exc
    LOGGER.info("Deleted document %s", path)
    report = BatchReport(path=path, outcomes=[WriteOutcome(index=0, path=path, document_id=doc.id, ok=True)])
    return DeleteResult(path=path, is_document=True, report=report)


def _delete_collection(store: DocumentStore, path: str) -> DeleteResult:
    try:
        docs = store.query_collection(path)
    except Exception as exc:
        raise BackendConnectionError(f"Failed to delete: {exc}") from exc
    if not docs:
        return DeleteResult(path=path, is_document=False, found=False)

    report = BatchReport(path=path)
    total = len(docs)
    for index, doc in enumerate(docs):
        doc_path = f"{path}/{doc.id}"
        try:
            store.delete_document(doc_path)
        except Exception as exc:
            LOGGER.error("Failed to delete %s (%s/%s): %s", doc_path, index + 1, total, exc)
            report.outcomes.append(WriteOutcome(index=index, path=doc_path, document_id=doc.id, ok=False, error=str(exc)))
            continue
        LOGGER.info("Deleted %s (%s/%s)", doc.id, index + 1, total)
        report.outcomes.append(WriteOutcome(index=index, path=doc_path, document_id=doc.id, ok=True))
    return DeleteResult(path=path, is_document=False, report=report)


def list_collections(store: DocumentStore) -> list[str]:
    try:
        return sorted(store.list_collections())
    except Exception as exc:
        raise BackendConnectionError(f"Failed to list collections: {exc}") from exc
