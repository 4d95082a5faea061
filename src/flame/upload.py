from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import json
import logging
from typing import Any, Mapping

from flame.errors import BackendConnectionError, FormatError, ValidationError
from flame.firestore_path import is_document_path, require_path
from flame.results import BatchReport, WriteOutcome
from flame.storage.document_store import DocumentStore


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadResult:
    report: BatchReport
    multiple: bool
    write_time: datetime | None = None


def parse_payload(raw: str | None) -> Any:
    if raw is None or not raw.strip():
        raise FormatError("No document data found. Supply document data with --data or through stdin.")
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise FormatError(f"Failed to upload document: {exc}") from exc


def upload_documents(
    store: DocumentStore,
    raw: str | None,
    path: str,
    *,
    merge: bool = False,
    id_field: str | None = None,
) -> UploadResult:
    """Parse raw JSON and write it to a document or collection path.

    A single object goes to a document path, or to `path/<id_field value>` on a
    collection path. An array goes to a collection path, item by item, keyed by
    `id_field` when given and by generated ids otherwise. One item failing does
    not stop the others.
    """

    path = require_path(path)
    payload = parse_payload(raw)

    if isinstance(payload, list):
        if is_document_path(path):
            raise ValidationError("Cannot upload an array of documents to a document path")
        report = _upload_many(store, payload, path, merge=merge, id_field=id_field)
        return UploadResult(report=report, multiple=True)

    if not isinstance(payload, Mapping):
        raise ValidationError("Document data must be a JSON object or an array of objects")

    if is_document_path(path):
        outcome = _write_single(store, path, payload, merge=merge)
        return UploadResult(report=BatchReport(path=path, outcomes=[outcome]), multiple=False, write_time=outcome.write_time)

    doc_id = _extract_id(payload, id_field)
    if id_field is None or doc_id is None:
        raise ValidationError("Must specify a document ID field with --id-field!")
    # A single object keyed by field always merges into the target document.
    outcome = _write_single(store, f"{path}/{doc_id}", payload, merge=True)
    return UploadResult(report=BatchReport(path=path, outcomes=[outcome]), multiple=False, write_time=outcome.write_time)


def _write_single(store: DocumentStore, path: str, data: Mapping[str, Any], *, merge: bool) -> WriteOutcome:
    try:
        receipt = store.set_document(path, data, merge=merge)
    except Exception as exc:
        raise BackendConnectionError(f"Failed to upload document {path}: {exc}") from exc
    LOGGER.info("Added document to %s", receipt.path)
    return WriteOutcome(
        index=0,
        path=receipt.path,
        document_id=receipt.document_id,
        ok=True,
        write_time=receipt.write_time,
    )


def _upload_many(
    store: DocumentStore,
    items: list[Any],
    path: str,
    *,
    merge: bool,
    id_field: str | None,
) -> BatchReport:
    report = BatchReport(path=path)
    for index, item in enumerate(items):
        outcome = _upload_item(store, index, item, path, merge=merge, id_field=id_field)
        report.outcomes.append(outcome)
        if outcome.ok:
            LOGGER.info("Added document at index %s to %s", index, outcome.path)
        else:
            LOGGER.error("Failed to write document %s to %s: %s", index, path, outcome.error)
    return report


def _upload_item(
    store: DocumentStore,
    index: int,
    item: Any,
    path: str,
    *,
    merge: bool,
    id_field: str | None,
) -> WriteOutcome:
    if not isinstance(item, Mapping):
        return WriteOutcome(index=index, path=path, document_id=None, ok=False, error=f"Document {index} is not a JSON object!")

    try:
        if id_field:
            doc_id = _extract_id(item, id_field)
            if doc_id is None:
                return WriteOutcome(
                    index=index,
                    path=path,
                    document_id=None,
                    ok=False,
                    error=f"Document {index} does not have ID field {id_field}!",
                )
            receipt = store.set_document(f"{path}/{doc_id}", item, merge=merge)
        else:
            receipt = store.add_document(path, item)
    except Exception as exc:
        return WriteOutcome(index=index, path=path, document_id=None, ok=False, error=str(exc))

    return WriteOutcome(
        index=index,
        path=receipt.path,
        document_id=receipt.document_id,
        ok=True,
        write_time=receipt.write_time,
    )


def _extract_id(data: Mapping[str, Any], id_field: str | None) -> str | None:
    if not id_field:
        return None
    value = data.get(id_field)
    if value is None or isinstance(value, (bool, dict, list)):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    doc_id = str(value).strip()
    if not doc_id or "/" in doc_id:
        return None
    return doc_id
