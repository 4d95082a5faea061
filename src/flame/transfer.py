from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Mapping

from flame.errors import BackendConnectionError, FlameError, NotFoundError, ValidationError
from flame.firestore_path import document_id, is_document_path, require_path
from flame.storage.document_store import DocumentStore, TransactionView


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransferResult:
    source: str
    destination: str
    moved: bool
    data: dict[str, Any]


def build_transfer_payload(
    data: Mapping[str, Any],
    *,
    destination: str,
    id_field: str | None = None,
) -> dict[str, Any]:
    payload = dict(data)
    if id_field:
        payload[id_field] = document_id(destination)
    return payload


def copy_document(
    store: DocumentStore,
    source: str,
    destination: str,
    *,
    id_field: str | None = None,
) -> TransferResult:
    source, destination = _validate_transfer_paths(source, destination)

    try:
        existing = store.get_document(source)
    except Exception as exc:
        raise BackendConnectionError(f"Failed to fetch {source}: {exc}") from exc
    if existing is None:
        raise NotFoundError(f"Document {source} does not exist!")
    LOGGER.debug("Fetched source document %s", source)

    payload = build_transfer_payload(existing.data, destination=destination, id_field=id_field)
    try:
        store.set_document(destination, payload, merge=False)
    except Exception as exc:
        raise BackendConnectionError(f"Failed to write {destination}: {exc}") from exc

    LOGGER.debug("Copied document %s to %s", source, destination)
    return TransferResult(source=source, destination=destination, moved=False, data=payload)


def move_document(
    store: DocumentStore,
    source: str,
    destination: str,
    *,
    id_field: str | None = None,
) -> TransferResult:
    """Move a document atomically.

    The source read, destination write and source delete run in one
    transaction. A missing source aborts it before anything is written.
    """

    source, destination = _validate_transfer_paths(source, destination)

    def _move(tx: TransactionView) -> dict[str, Any]:
        existing = tx.get_document(source)
        if existing is None:
            raise NotFoundError(f"Document {source} does not exist!")
        payload = build_transfer_payload(existing.data, destination=destination, id_field=id_field)
        tx.set_document(destination, payload)
        # Moving a document onto itself only rewrites it.
        if destination != source:
            tx.delete_document(source)
        return payload

    try:
        payload = store.run_transaction(_move)
    except FlameError:
        raise
    except Exception as exc:
        raise BackendConnectionError(f"Move transaction failed: {exc}") from exc

    LOGGER.debug("Moved document %s to %s", source, destination)
    return TransferResult(source=source, destination=destination, moved=True, data=payload)


def _validate_transfer_paths(source: str, destination: str) -> tuple[str, str]:
    source = require_path(source)
    destination = require_path(destination)
    if not is_document_path(source) or not is_document_path(destination):
        raise ValidationError("Source and destination paths must be documents")
    return source, destination
