"""Tests for the document store implementations."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from conftest import run
from expense_tracker.services.storage import (
    FirestoreExpenseStore,
    InMemoryExpenseStore,
    NotFoundError,
    StorageError,
    expense_collection_path,
)


PATH = expense_collection_path("artifacts", "default-app-id", "user-1")


class TestCollectionPath:

    def test_path_layout(self):
        assert PATH == "artifacts/default-app-id/users/user-1/expenses"


class TestInMemoryStore:
    """Tests for the in-memory store contract."""

    def test_create_assigns_id_and_server_timestamp(self, store):
        doc_id = run(store.create(PATH, {"name": "Coffee", "createdAt": store.server_timestamp}))
        docs = store.documents(PATH)
        assert doc_id in docs
        assert isinstance(docs[doc_id]["createdAt"], datetime)

    def test_timestamps_strictly_increase(self):
        fixed = datetime(2026, 10, 17, tzinfo=timezone.utc)
        store = InMemoryExpenseStore(clock=lambda: fixed)
        first = run(store.create(PATH, {"createdAt": store.server_timestamp}))
        second = run(store.create(PATH, {"createdAt": store.server_timestamp}))
        docs = store.documents(PATH)
        assert docs[second]["createdAt"] > docs[first]["createdAt"]

    def test_subscribe_pushes_initial_and_every_change(self, store):
        snapshots = []
        errors = []
        subscription = store.subscribe(PATH, snapshots.append, errors.append)
        assert snapshots == [[]]

        doc_id = run(store.create(PATH, {"name": "Coffee"}))
        assert [d for d, _ in snapshots[-1]] == [doc_id]

        run(store.delete_one(PATH, doc_id))
        assert snapshots[-1] == []

        subscription.unsubscribe()
        run(store.create(PATH, {"name": "Tea"}))
        assert len(snapshots) == 3
        assert errors == []

    def test_collections_are_isolated(self, store):
        other = expense_collection_path("artifacts", "default-app-id", "user-2")
        run(store.create(PATH, {"name": "Coffee"}))
        assert store.documents(other) == {}

    def test_batch_delete_removes_everything(self, store):
        ids = [run(store.create(PATH, {"name": n})) for n in ("a", "b", "c")]
        run(store.batch_delete(PATH, ids))
        assert store.documents(PATH) == {}

    def test_failed_batch_delete_changes_nothing(self, store):
        ids = [run(store.create(PATH, {"name": n})) for n in ("a", "b")]
        store.fail_next("batch_delete")
        with pytest.raises(StorageError):
            run(store.batch_delete(PATH, ids))
        assert set(store.documents(PATH)) == set(ids)

    def test_injected_failure_is_one_shot(self, store):
        store.fail_next("create")
        with pytest.raises(StorageError):
            run(store.create(PATH, {"name": "Coffee"}))
        run(store.create(PATH, {"name": "Coffee"}))
        assert len(store.documents(PATH)) == 1

    def test_subscribe_failure_goes_to_error_callback(self, store):
        snapshots = []
        errors = []
        store.fail_next("subscribe")
        store.subscribe(PATH, snapshots.append, errors.append)
        assert snapshots == []
        assert len(errors) == 1
        assert store.listener_count(PATH) == 0

    def test_missing_delete_is_ignored_unless_strict(self, store):
        run(store.delete_one(PATH, "nope"))
        strict = InMemoryExpenseStore(strict_deletes=True)
        with pytest.raises(NotFoundError):
            run(strict.delete_one(PATH, "nope"))

    def test_calls_are_recorded(self, store):
        run(store.list_all(PATH))
        assert store.calls == [("list_all", PATH)]


class TestFirestoreStore:
    """Tests for the Firestore store against a mocked client."""

    def make_store(self):
        client = MagicMock()
        return FirestoreExpenseStore(client), client

    def test_create_returns_document_id(self):
        store, client = self.make_store()
        client.collection.return_value.add.return_value = (None, MagicMock(id="doc-1"))
        doc_id = run(store.create(PATH, {"name": "Coffee"}))
        assert doc_id == "doc-1"
        client.collection.assert_called_with(PATH)

    def test_create_failure_is_storage_error(self):
        store, client = self.make_store()
        client.collection.return_value.add.side_effect = RuntimeError("permission denied")
        with pytest.raises(StorageError, match="permission denied"):
            run(store.create(PATH, {"name": "Coffee"}))

    def test_snapshot_is_converted(self):
        store, client = self.make_store()
        snapshots = []
        errors = []
        store.subscribe(PATH, snapshots.append, errors.append)

        callback = client.collection.return_value.on_snapshot.call_args[0][0]
        doc = MagicMock(id="doc-1")
        doc.to_dict.return_value = {"name": "Coffee"}
        callback([doc], [], None)

        assert snapshots == [[("doc-1", {"name": "Coffee"})]]
        assert errors == []

    def test_unsubscribe_stops_the_watch(self):
        store, client = self.make_store()
        watch = client.collection.return_value.on_snapshot.return_value
        subscription = store.subscribe(PATH, lambda docs: None, lambda err: None)
        subscription.unsubscribe()
        subscription.unsubscribe()
        watch.unsubscribe.assert_called_once()

    def test_subscribe_failure_goes_to_error_callback(self):
        store, client = self.make_store()
        client.collection.return_value.on_snapshot.side_effect = RuntimeError("offline")
        errors = []
        store.subscribe(PATH, lambda docs: None, errors.append)
        assert isinstance(errors[0], StorageError)

    def test_batch_delete_commits_once(self):
        store, client = self.make_store()
        batch = client.batch.return_value
        run(store.batch_delete(PATH, ["a", "b"]))
        assert batch.delete.call_count == 2
        batch.commit.assert_called_once()

    def test_list_all(self):
        store, client = self.make_store()
        doc = MagicMock(id="doc-1")
        doc.to_dict.return_value = {"name": "Coffee"}
        client.collection.return_value.stream.return_value = iter([doc])
        assert run(store.list_all(PATH)) == [("doc-1", {"name": "Coffee"})]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
