from __future__ import annotations

from functools import wraps
import logging
from typing import Callable, ParamSpec, Protocol

from flame.download import Confirm, delete_path, download_path, list_collections
from flame.errors import FlameError
from flame.results import BatchReport, OperationResult, ResultKind
from flame.settings import FlameConfig, describe_config
from flame.storage.document_store import DocumentStore
from flame.transfer import copy_document, move_document
from flame.upload import upload_documents


LOGGER = logging.getLogger(__name__)
P = ParamSpec("P")


class StoreProvider(Protocol):
    config: FlameConfig

    def store(self) -> DocumentStore:
        """Return the shared document store."""


def command_boundary(func: Callable[P, OperationResult]) -> Callable[P, OperationResult]:
    """Turn taxonomy errors raised by a command into an error result."""

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> OperationResult:
        try:
            return func(*args, **kwargs)
        except FlameError as exc:
            LOGGER.debug("%s failed", func.__name__, exc_info=exc)
            return OperationResult(kind=ResultKind(exc.kind), message=exc.message)

    return wrapper


def _batch_result(report: BatchReport, message: str) -> OperationResult:
    partial = report.partial_error()
    if partial is None:
        return OperationResult(kind=ResultKind.SUCCESS, message=message, payload=report)
    return OperationResult(kind=ResultKind.PARTIAL, message=f"{message} {partial.message}", payload=report)


def status_command(config: FlameConfig) -> OperationResult:
    return OperationResult(kind=ResultKind.SUCCESS, message="\n".join(describe_config(config)), payload=config)


@command_boundary
def collections_command(provider: StoreProvider) -> OperationResult:
    collection_ids = list_collections(provider.store())
    if not collection_ids:
        return OperationResult(kind=ResultKind.WARNING, message="No collections found", payload=[])
    return OperationResult(
        kind=ResultKind.SUCCESS,
        message=f"Found {len(collection_ids)} collection(s)",
        payload=collection_ids,
    )


@command_boundary
def down_command(
    provider: StoreProvider,
    path: str,
    *,
    limit: int | None = None,
    include_id: bool = False,
) -> OperationResult:
    result = download_path(provider.store(), path, limit=limit, include_id=include_id)
    if result.is_document and not result.found:
        return OperationResult(kind=ResultKind.WARNING, message=f"Document not found: {result.path}", payload=result)
    if not result.found:
        return OperationResult(
            kind=ResultKind.WARNING,
            message=f"No documents found in collection: {result.path}",
            payload=result,
        )
    if result.is_document:
        return OperationResult(kind=ResultKind.SUCCESS, message=f"Fetched document {result.path}", payload=result)
    return OperationResult(
        kind=ResultKind.SUCCESS,
        message=f"Found {result.count} document(s) in {result.path}",
        payload=result,
    )


@command_boundary
def up_command(
    provider: StoreProvider,
    path: str,
    raw: str | None,
    *,
    merge: bool = False,
    id_field: str | None = None,
) -> OperationResult:
    result = upload_documents(provider.store(), raw, path, merge=merge, id_field=id_field)
    report = result.report
    if result.multiple:
        return _batch_result(report, f"Upload complete! {report.succeeded}/{report.attempted} document(s) written.")
    outcome = report.outcomes[0]
    message = f"Document {outcome.path} written"
    if result.write_time is not None:
        message += f" at {result.write_time.isoformat()}"
    return OperationResult(kind=ResultKind.SUCCESS, message=message, payload=result)


@command_boundary
def delete_command(
    provider: StoreProvider,
    path: str,
    *,
    force: bool = False,
    confirm: Confirm | None = None,
) -> OperationResult:
    result = delete_path(
        provider.store(),
        path,
        force=force,
        confirm=confirm,
        use_emulator=provider.config.use_emulator,
    )
    if result.cancelled:
        return OperationResult(kind=ResultKind.CANCELLED, message="Deletion cancelled.", payload=result)
    if not result.found:
        noun = "Document not found" if result.is_document else "No documents found in collection"
        return OperationResult(kind=ResultKind.WARNING, message=f"{noun}: {result.path}", payload=result)
    if result.is_document:
        return OperationResult(
            kind=ResultKind.SUCCESS,
            message=f"Document {result.path} deleted successfully.",
            payload=result,
        )
    return _batch_result(
        result.report or BatchReport(path=result.path),
        f"Deleted {result.deleted} document(s) from collection {result.path}.",
    )


@command_boundary
def copy_command(
    provider: StoreProvider,
    source: str,
    destination: str,
    *,
    id_field: str | None = None,
) -> OperationResult:
    result = copy_document(provider.store(), source, destination, id_field=id_field)
    return OperationResult(
        kind=ResultKind.SUCCESS,
        message=f"Copied document {result.source} to {result.destination}!",
        payload=result,
    )


@command_boundary
def move_command(
    provider: StoreProvider,
    source: str,
    destination: str,
    *,
    id_field: str | None = None,
) -> OperationResult:
    result = move_document(provider.store(), source, destination, id_field=id_field)
    return OperationResult(
        kind=ResultKind.SUCCESS,
        message=f"Moved document {result.source} to {result.destination}!",
        payload=result,
    )
