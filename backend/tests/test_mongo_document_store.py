"""
MongoDocumentStore Tests

Driver calls are mocked; these tests check session/transaction wiring and
error translation, not MongoDB itself.

Run with:
    pytest backend/tests/test_mongo_document_store.py -v
"""

import pytest
from unittest.mock import MagicMock

from pymongo.errors import OperationFailure, ServerSelectionTimeoutError

from admissions.domain.errors import PersistenceError
from admissions.repositories.mongo_client import MongoDocumentStore


# ============================================================================
# HELPERS
# ============================================================================

def _make_store():
    client = MagicMock()
    db = MagicMock()
    collection = MagicMock()
    db.__getitem__.return_value = collection
    session = MagicMock()
    client.start_session.return_value = session
    return MongoDocumentStore(client=client, db=db), client, collection, session


# ============================================================================
# TESTS
# ============================================================================

class TestReads:

    def test_find_one_strips_object_id(self):
        store, _, collection, _ = _make_store()
        collection.find_one.return_value = {"_id": "WF-1", "workflow_id": "WF-1"}

        assert store.find_one("workflows", {"workflow_id": "WF-1"}) == {"workflow_id": "WF-1"}

    def test_find_applies_sort_skip_limit(self):
        store, _, collection, _ = _make_store()
        cursor = MagicMock()
        collection.find.return_value = cursor
        cursor.sort.return_value = cursor
        cursor.skip.return_value = cursor
        cursor.limit.return_value = cursor
        cursor.__iter__.return_value = iter([{"_id": 1, "name": "a"}])

        docs = store.find("workflows", {}, sort=[("created_at", -1)], skip=5, limit=10)

        cursor.sort.assert_called_once_with([("created_at", -1)])
        cursor.skip.assert_called_once_with(5)
        cursor.limit.assert_called_once_with(10)
        assert docs == [{"name": "a"}]

    def test_driver_error_becomes_persistence_error(self):
        store, _, collection, _ = _make_store()
        collection.count_documents.side_effect = ServerSelectionTimeoutError("no primary")

        with pytest.raises(PersistenceError) as exc_info:
            store.count("workflows", {})
        assert isinstance(exc_info.value.__cause__, ServerSelectionTimeoutError)


class TestTransactions:

    def test_operations_use_the_session(self):
        store, client, collection, session = _make_store()
        collection.update_one.return_value = MagicMock(matched_count=1)

        with store.transaction() as uow:
            uow.insert_many("workflow_stages", [{"_id": "STG-1"}])
            matched = uow.update_one("workflows", {"workflow_id": "WF-1"}, {"name": "x"})

        collection.insert_many.assert_called_once_with([{"_id": "STG-1"}], session=session)
        collection.update_one.assert_called_once_with(
            {"workflow_id": "WF-1"}, {"$set": {"name": "x"}}, upsert=False, session=session
        )
        assert matched == 1
        session.start_transaction.assert_called_once()
        session.end_session.assert_called_once()

    def test_empty_insert_is_skipped(self):
        store, _, collection, _ = _make_store()
        with store.transaction() as uow:
            uow.insert_many("workflow_transitions", [])
        collection.insert_many.assert_not_called()

    def test_failure_aborts_and_wraps(self):
        store, _, collection, session = _make_store()
        collection.delete_many.side_effect = OperationFailure("write conflict")

        with pytest.raises(PersistenceError):
            with store.transaction() as uow:
                uow.delete_many("workflow_stages", {"workflow_id": "WF-1"})

        transaction_cm = session.start_transaction.return_value
        exit_args = transaction_cm.__exit__.call_args[0]
        assert exit_args[0] is OperationFailure
        session.end_session.assert_called_once()

    def test_session_start_failure(self):
        store, client, _, _ = _make_store()
        client.start_session.side_effect = ServerSelectionTimeoutError("down")

        with pytest.raises(PersistenceError):
            with store.transaction():
                pass
