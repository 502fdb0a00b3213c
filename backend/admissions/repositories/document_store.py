"""Document Store - Persistence interface with transactional units of work

Repositories talk to a DocumentStore instead of raw collections so that
every graph write can run inside one atomic unit. Two backends exist:
MongoDB (multi-document transactions, see mongo_client) and an in-memory
store used for local runs and tests.

Supported query subset: equality, {"$in": [...]}, {"$regex": str,
"$options": "i"} and a top-level {"$or": [...]}.
"""
import copy
import re
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from functools import lru_cache
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from ..config.settings import settings
from ..domain.errors import DomainError, PersistenceError
from ..utils.logger import get_logger

logger = get_logger(__name__)

# Collection names
WORKFLOWS = "workflows"
STAGES = "workflow_stages"
TRANSITIONS = "workflow_transitions"
HISTORY = "stage_transition_history"
ACTIVATION_GUARDS = "workflow_activation_guards"

SortSpec = Optional[Sequence[Tuple[str, int]]]


class UnitOfWork(ABC):
    """Operations available inside a store transaction"""

    @abstractmethod
    def find_one(self, collection: str, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def find(
        self,
        collection: str,
        query: Dict[str, Any],
        sort: SortSpec = None
    ) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def insert_many(self, collection: str, docs: List[Dict[str, Any]]) -> None:
        ...

    @abstractmethod
    def update_one(
        self,
        collection: str,
        query: Dict[str, Any],
        values: Dict[str, Any],
        upsert: bool = False
    ) -> int:
        """
        Set fields on the first matching document; returns matched count

        With upsert, a document built from the query's equality fields plus
        values is inserted when nothing matches.
        """

    @abstractmethod
    def delete_many(self, collection: str, query: Dict[str, Any]) -> int:
        ...


class DocumentStore(ABC):
    """Non-transactional reads plus a transaction() context manager"""

    @abstractmethod
    def find_one(self, collection: str, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def find(
        self,
        collection: str,
        query: Dict[str, Any],
        sort: SortSpec = None,
        skip: int = 0,
        limit: int = 0
    ) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def count(self, collection: str, query: Dict[str, Any]) -> int:
        ...

    @abstractmethod
    def insert_one(self, collection: str, doc: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def transaction(self):
        """
        Context manager yielding a UnitOfWork

        Commits when the block exits cleanly; rolls back on any exception.
        Store failures surface as PersistenceError.
        """


# ============================================================================
# In-memory backend
# ============================================================================

def _matches_value(actual: Any, expected: Any) -> bool:
    if isinstance(expected, dict) and any(key.startswith("$") for key in expected):
        if "$in" in expected:
            return actual in expected["$in"]
        if "$regex" in expected:
            if not isinstance(actual, str):
                return False
            flags = re.IGNORECASE if "i" in expected.get("$options", "") else 0
            return re.search(expected["$regex"], actual, flags) is not None
        if "$ne" in expected:
            return actual != expected["$ne"]
        raise ValueError(f"Unsupported query operator: {list(expected)}")
    return actual == expected


def matches(doc: Dict[str, Any], query: Dict[str, Any]) -> bool:
    """Evaluate the supported query subset against a document"""
    for key, expected in query.items():
        if key == "$or":
            if not any(matches(doc, sub) for sub in expected):
                return False
        elif not _matches_value(doc.get(key), expected):
            return False
    return True


def _sorted(docs: List[Dict[str, Any]], sort: SortSpec) -> List[Dict[str, Any]]:
    result = list(docs)
    for field, direction in reversed(list(sort or [])):
        result.sort(
            key=lambda d: (d.get(field) is not None, d.get(field) if d.get(field) is not None else 0),
            reverse=direction < 0
        )
    return result


def _public(doc: Dict[str, Any]) -> Dict[str, Any]:
    result = copy.deepcopy(doc)
    result.pop("_id", None)
    return result


class _InMemoryUnitOfWork(UnitOfWork):
    """Works on a private copy of the collections"""

    def __init__(self, collections: Dict[str, List[Dict[str, Any]]]):
        self._collections = collections

    def _docs(self, collection: str) -> List[Dict[str, Any]]:
        return self._collections.setdefault(collection, [])

    def find_one(self, collection, query):
        for doc in self._docs(collection):
            if matches(doc, query):
                return _public(doc)
        return None

    def find(self, collection, query, sort=None):
        found = [doc for doc in self._docs(collection) if matches(doc, query)]
        return [_public(doc) for doc in _sorted(found, sort)]

    def insert_many(self, collection, docs):
        target = self._docs(collection)
        existing_ids = {doc.get("_id") for doc in target if doc.get("_id") is not None}
        for doc in docs:
            if doc.get("_id") is not None and doc["_id"] in existing_ids:
                raise PersistenceError(
                    f"Duplicate key in {collection}: {doc['_id']}",
                    details={"collection": collection}
                )
            existing_ids.add(doc.get("_id"))
            target.append(copy.deepcopy(doc))

    def update_one(self, collection, query, values, upsert=False):
        for doc in self._docs(collection):
            if matches(doc, query):
                doc.update(copy.deepcopy(values))
                return 1
        if upsert:
            doc = {
                key: value for key, value in query.items()
                if not key.startswith("$") and not isinstance(value, dict)
            }
            doc.update(copy.deepcopy(values))
            self._docs(collection).append(doc)
        return 0

    def delete_many(self, collection, query):
        docs = self._docs(collection)
        kept = [doc for doc in docs if not matches(doc, query)]
        deleted = len(docs) - len(kept)
        self._collections[collection] = kept
        return deleted


class InMemoryDocumentStore(DocumentStore):
    """
    Process-local store

    Transactions run against a deep copy of all collections under a lock
    and replace the live data only when the block exits cleanly.
    """

    def __init__(self):
        self._collections: Dict[str, List[Dict[str, Any]]] = {}
        self._lock = threading.RLock()

    def find_one(self, collection, query):
        with self._lock:
            return _InMemoryUnitOfWork(self._collections).find_one(collection, query)

    def find(self, collection, query, sort=None, skip=0, limit=0):
        with self._lock:
            docs = _InMemoryUnitOfWork(self._collections).find(collection, query, sort)
        docs = docs[skip:]
        return docs[:limit] if limit else docs

    def count(self, collection, query):
        with self._lock:
            return sum(1 for doc in self._collections.get(collection, []) if matches(doc, query))

    def insert_one(self, collection, doc):
        with self._lock:
            _InMemoryUnitOfWork(self._collections).insert_many(collection, [doc])

    @contextmanager
    def transaction(self) -> Iterator[UnitOfWork]:
        with self._lock:
            working = copy.deepcopy(self._collections)
            try:
                yield _InMemoryUnitOfWork(working)
            except DomainError:
                raise
            except Exception as e:
                logger.error(f"In-memory transaction rolled back: {e}")
                raise PersistenceError(f"Store transaction failed: {e}") from e
            self._collections = working

    def clear(self) -> None:
        """Drop all collections"""
        with self._lock:
            self._collections = {}


# ============================================================================
# Factory
# ============================================================================

@lru_cache()
def get_document_store() -> DocumentStore:
    """Get the configured document store (cached)"""
    if settings.store_backend == "memory":
        logger.info("Using in-memory document store")
        return InMemoryDocumentStore()

    from .mongo_client import MongoDocumentStore
    logger.info("Using MongoDB document store")
    return MongoDocumentStore()
