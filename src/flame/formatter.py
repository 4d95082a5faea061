from __future__ import annotations

import base64
from datetime import date, datetime
import json
from typing import Any, Iterable

from google.cloud.firestore import DocumentReference, GeoPoint

from flame.storage.document_store import StoredDocument


ID_KEY = "_id"


def to_display(doc: StoredDocument, include_id: bool) -> dict[str, Any]:
    if include_id:
        return {ID_KEY: doc.id, **doc.data}
    return dict(doc.data)


def to_display_many(docs: Iterable[StoredDocument], include_id: bool) -> list[dict[str, Any]]:
    return [to_display(doc, include_id) for doc in docs]


def format_document(doc: StoredDocument, include_id: bool) -> str:
    return _dumps(to_display(doc, include_id))


def format_documents(docs: Iterable[StoredDocument], include_id: bool) -> str:
    rows = to_display_many(docs, include_id)
    if not rows:
        return "[]"
    return _dumps(rows)


def _dumps(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=_json_default)


def _json_default(value: Any) -> Any:
    # DatetimeWithNanoseconds is a datetime subclass.
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, GeoPoint):
        return {"latitude": value.latitude, "longitude": value.longitude}
    if isinstance(value, DocumentReference):
        return value.path
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
