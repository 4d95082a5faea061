from __future__ import annotations

from dataclasses import dataclass, field
import json
import unittest

from in_memory_store import InMemoryStore

from flame.commands import (
    collections_command,
    copy_command,
    delete_command,
    down_command,
    move_command,
    status_command,
    up_command,
)
from flame.errors import BackendConnectionError
from flame.results import ResultKind
from flame.settings import FlameConfig


@dataclass
class FakeProvider:
    backing: InMemoryStore = field(default_factory=InMemoryStore)
    config: FlameConfig = field(default_factory=lambda: FlameConfig(project="demo"))

    def store(self) -> InMemoryStore:
        return self.backing


class BrokenProvider(FakeProvider):
    def store(self) -> InMemoryStore:
        raise BackendConnectionError("Failed to create Firestore client: no credentials")


class CommandBoundaryTest(unittest.TestCase):
    def test_errors_become_results(self) -> None:
        provider = FakeProvider()

        not_found = copy_command(provider, "users/ghost", "users/x")
        invalid = move_command(provider, "users", "users/x")
        bad_json = up_command(provider, "users", "{oops")

        self.assertEqual(not_found.kind, ResultKind.NOT_FOUND)
        self.assertEqual(invalid.kind, ResultKind.VALIDATION)
        self.assertEqual(invalid.message, "Source and destination paths must be documents")
        self.assertEqual(bad_json.kind, ResultKind.FORMAT)
        self.assertTrue(not_found.kind.is_error)

    def test_client_failure_is_connection_result(self) -> None:
        result = collections_command(BrokenProvider())

        self.assertEqual(result.kind, ResultKind.CONNECTION)
        self.assertIn("no credentials", result.message)


class CommandsTest(unittest.TestCase):
    def test_status(self) -> None:
        result = status_command(FlameConfig(project="demo"))

        self.assertEqual(result.kind, ResultKind.SUCCESS)
        self.assertIn("Firebase project: demo", result.message)

    def test_collections(self) -> None:
        empty = collections_command(FakeProvider())
        found = collections_command(FakeProvider(backing=InMemoryStore(collections=["users"])))

        self.assertEqual(empty.kind, ResultKind.WARNING)
        self.assertEqual(found.payload, ["users"])

    def test_down_empty_collection_is_warning(self) -> None:
        result = down_command(FakeProvider(), "users")

        self.assertEqual(result.kind, ResultKind.WARNING)
        self.assertIn("No documents found", result.message)
        self.assertEqual(result.payload.rendered, "[]")

    def test_down_collection(self) -> None:
        provider = FakeProvider(backing=InMemoryStore(docs={"users/a": {"n": 1}, "users/b": {"n": 2}}))

        result = down_command(provider, "users", include_id=True)

        self.assertEqual(result.kind, ResultKind.SUCCESS)
        self.assertEqual(result.message, "Found 2 document(s) in users")
        self.assertEqual(json.loads(result.payload.rendered)[1], {"_id": "b", "n": 2})

    def test_up_partial_batch(self) -> None:
        provider = FakeProvider()

        result = up_command(provider, "users", '[{"_id": "a"}, {"x": 1}]', id_field="_id")

        self.assertEqual(result.kind, ResultKind.PARTIAL)
        self.assertTrue(result.message.startswith("Upload complete! 1/2 document(s) written."))

    def test_up_single_document_reports_write_time(self) -> None:
        result = up_command(FakeProvider(), "users/u1", '{"name": "Alice"}')

        self.assertEqual(result.kind, ResultKind.SUCCESS)
        self.assertIn("2026-02-12T00:00:00+00:00", result.message)

    def test_delete_cancelled(self) -> None:
        provider = FakeProvider(backing=InMemoryStore(docs={"users/a": {}}))

        result = delete_command(provider, "users", confirm=lambda _: False)

        self.assertEqual(result.kind, ResultKind.CANCELLED)
        self.assertEqual(provider.backing.delete_calls, [])

    def test_delete_collection_count(self) -> None:
        provider = FakeProvider(backing=InMemoryStore(docs={"users/a": {}, "users/b": {}, "users/c": {}}))

        result = delete_command(provider, "users", force=True)

        self.assertEqual(result.kind, ResultKind.SUCCESS)
        self.assertEqual(result.message, "Deleted 3 document(s) from collection users.")
        self.assertEqual(len(provider.backing.delete_calls), 3)

    def test_delete_missing_document_is_warning(self) -> None:
        result = delete_command(FakeProvider(), "users/ghost", force=True)

        self.assertEqual(result.kind, ResultKind.WARNING)

    def test_move(self) -> None:
        provider = FakeProvider(backing=InMemoryStore(docs={"users/a": {"n": 1}}))

        result = move_command(provider, "users/a", "users/b")

        self.assertEqual(result.kind, ResultKind.SUCCESS)
        self.assertEqual(provider.backing.docs, {"users/b": {"n": 1}})


if __name__ == "__main__":
    unittest.main()
