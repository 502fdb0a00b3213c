"""
InMemoryDocumentStore Tests

Query subset, ordering and transactional rollback of the in-memory backend.

Run with:
    pytest backend/tests/test_document_store.py -v
"""

import pytest

from admissions.domain.errors import PersistenceError, ValidationError
from admissions.repositories.document_store import InMemoryDocumentStore, matches


def _seed(store):
    store.insert_one("items", {"_id": "a", "name": "Alpha", "kind": "x", "rank": 2})
    store.insert_one("items", {"_id": "b", "name": "beta", "kind": "y", "rank": 1})
    store.insert_one("items", {"_id": "c", "name": "Gamma", "kind": "x", "rank": 3})


class TestQueries:

    def test_equality_and_in(self):
        doc = {"kind": "x", "rank": 2}
        assert matches(doc, {"kind": "x"})
        assert matches(doc, {"rank": {"$in": [1, 2]}})
        assert not matches(doc, {"kind": "y"})

    def test_regex_case_insensitive(self):
        assert matches({"name": "Alpha"}, {"name": {"$regex": "alp", "$options": "i"}})
        assert not matches({"name": "Alpha"}, {"name": {"$regex": "alp"}})

    def test_or_and_ne(self):
        query = {"$or": [{"kind": "y"}, {"rank": 3}]}
        assert matches({"kind": "y", "rank": 0}, query)
        assert not matches({"kind": "x", "rank": 0}, query)
        assert matches({"id": 1}, {"id": {"$ne": 2}})

    def test_find_sort_skip_limit(self):
        store = InMemoryDocumentStore()
        _seed(store)
        docs = store.find("items", {}, sort=[("rank", -1)], skip=1, limit=1)
        assert [d["name"] for d in docs] == ["Alpha"]
        assert "_id" not in docs[0]

    def test_count(self):
        store = InMemoryDocumentStore()
        _seed(store)
        assert store.count("items", {"kind": "x"}) == 2
        assert store.count("missing", {}) == 0

    def test_returned_documents_are_copies(self):
        store = InMemoryDocumentStore()
        _seed(store)
        store.find_one("items", {"_id": "a"})["name"] = "changed"
        assert store.find_one("items", {"_id": "a"})["name"] == "Alpha"


class TestTransactions:

    def test_commit(self):
        store = InMemoryDocumentStore()
        with store.transaction() as uow:
            uow.insert_many("items", [{"_id": "a", "v": 1}])
            uow.update_one("items", {"_id": "a"}, {"v": 2})
        assert store.find_one("items", {"_id": "a"})["v"] == 2

    def test_rollback_wraps_store_failure(self):
        store = InMemoryDocumentStore()
        _seed(store)
        with pytest.raises(PersistenceError) as exc_info:
            with store.transaction() as uow:
                uow.delete_many("items", {"kind": "x"})
                raise RuntimeError("disk full")
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert store.count("items", {}) == 3

    def test_domain_errors_pass_through_and_roll_back(self):
        store = InMemoryDocumentStore()
        with pytest.raises(ValidationError):
            with store.transaction() as uow:
                uow.insert_many("items", [{"_id": "a"}])
                raise ValidationError("bad input")
        assert store.count("items", {}) == 0

    def test_duplicate_key(self):
        store = InMemoryDocumentStore()
        store.insert_one("items", {"_id": "a"})
        with pytest.raises(PersistenceError):
            store.insert_one("items", {"_id": "a"})

    def test_upsert_inserts_from_query(self):
        store = InMemoryDocumentStore()
        with store.transaction() as uow:
            matched = uow.update_one("locks", {"_id": "k", "kind": "x"}, {"owner": "a"}, upsert=True)
            uow.update_one("locks", {"_id": "k"}, {"owner": "b"}, upsert=True)
        assert matched == 0
        assert store.count("locks", {}) == 1
        assert store.find_one("locks", {"_id": "k"}) == {"kind": "x", "owner": "b"}

    def test_update_without_upsert_inserts_nothing(self):
        store = InMemoryDocumentStore()
        with store.transaction() as uow:
            assert uow.update_one("locks", {"_id": "k"}, {"owner": "a"}) == 0
        assert store.count("locks", {}) == 0
