from __future__ import annotations

from typing import Any, Callable, Mapping, TypeVar

from google.cloud import firestore

from flame.firestore_path import document_id, split_path
from flame.storage.document_store import StoredDocument, WriteReceipt


T = TypeVar("T")
DOCUMENT_ID_FIELD = "__name__"


class FirestoreDocumentStore:
    """Firestore adapter addressed by slash-separated paths."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def _document_ref(self, path: str) -> Any:
        parts = split_path(path)
        if len(parts) == 0 or len(parts) % 2 != 0:
            raise ValueError(f"Document path must have even segments: {path}")

        ref: Any = self._client
        for index in range(0, len(parts), 2):
            ref = ref.collection(parts[index]).document(parts[index + 1])
        return ref

    def _collection_ref(self, path: str) -> Any:
        parts = split_path(path)
        if len(parts) % 2 != 1:
            raise ValueError(f"Collection path must have odd segments: {path}")

        ref: Any = self._client.collection(parts[0])
        for index in range(1, len(parts), 2):
            ref = ref.document(parts[index]).collection(parts[index + 1])
        return ref

    def get_document(self, path: str) -> StoredDocument | None:
        snapshot = self._document_ref(path).get()
        return _to_stored_document(snapshot)

    def set_document(self, path: str, data: Mapping[str, Any], *, merge: bool = False) -> WriteReceipt:
        result = self._document_ref(path).set(dict(data), merge=merge)
        return WriteReceipt(
            path="/".join(split_path(path)),
            document_id=document_id(path) or "",
            write_time=getattr(result, "update_time", None),
        )

    def delete_document(self, path: str) -> None:
        self._document_ref(path).delete()

    def add_document(self, collection_path: str, data: Mapping[str, Any]) -> WriteReceipt:
        update_time, ref = self._collection_ref(collection_path).add(dict(data))
        return WriteReceipt(
            path=f"{'/'.join(split_path(collection_path))}/{ref.id}",
            document_id=ref.id,
            write_time=update_time,
        )

    def query_collection(self, collection_path: str, *, limit: int | None = None) -> list[StoredDocument]:
        query = self._collection_ref(collection_path).order_by(DOCUMENT_ID_FIELD)
        if limit is not None:
            query = query.limit(limit)
        return [StoredDocument(id=snapshot.id, data=snapshot.to_dict() or {}) for snapshot in query.stream()]

    def run_transaction(self, fn: Callable[[_FirestoreTransactionView], T]) -> T:
        transaction = self._client.transaction()

        @firestore.transactional
        def _run(tx: Any) -> T:
            return fn(_FirestoreTransactionView(self, tx))

        return _run(transaction)

    def list_collections(self) -> list[str]:
        return sorted(collection.id for collection in self._client.collections())


class _FirestoreTransactionView:
    def __init__(self, store: FirestoreDocumentStore, transaction: Any) -> None:
        self._store = store
        self._transaction = transaction

    def get_document(self, path: str) -> StoredDocument | None:
        snapshot = self._store._document_ref(path).get(transaction=self._transaction)
        return _to_stored_document(snapshot)

    def set_document(self, path: str, data: Mapping[str, Any]) -> None:
        self._transaction.set(self._store._document_ref(path), dict(data))

    def delete_document(self, path: str) -> None:
        self._transaction.delete(self._store._document_ref(path))


def _to_stored_document(snapshot: Any) -> StoredDocument | None:
    if not snapshot.exists:
        return None
    data = snapshot.to_dict()
    return StoredDocument(id=snapshot.id, data=data if data is not None else {})
