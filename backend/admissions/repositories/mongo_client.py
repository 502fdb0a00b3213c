"""MongoDB Client - Connection, Collection Management and Transactional Store"""
from contextlib import contextmanager
from functools import wraps
from typing import Any, Dict, Iterator, Optional
from pymongo import MongoClient as PyMongoClient
from pymongo.client_session import ClientSession
from pymongo.database import Database
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import ConnectionFailure, PyMongoError

from .document_store import (
    DocumentStore, UnitOfWork, WORKFLOWS, STAGES, TRANSITIONS, HISTORY
)
from ..config.settings import settings
from ..domain.errors import PersistenceError
from ..utils.logger import get_logger

logger = get_logger(__name__)

# Global client instance
_client: Optional[PyMongoClient] = None
_database: Optional[Database] = None


def get_client() -> PyMongoClient:
    """Get or create MongoDB client"""
    global _client
    if _client is None:
        logger.info(f"Connecting to MongoDB: {settings.mongo_uri}")
        _client = PyMongoClient(
            settings.mongo_uri,
            serverSelectionTimeoutMS=5000,
            connectTimeoutMS=5000,
            socketTimeoutMS=30000,
        )
        # Test connection
        try:
            _client.admin.command("ping")
            logger.info("MongoDB connection successful")
        except ConnectionFailure as e:
            logger.error(f"MongoDB connection failed: {e}")
            raise
    return _client


def get_database() -> Database:
    """Get the application database"""
    global _database
    if _database is None:
        client = get_client()
        _database = client[settings.mongo_db]
        logger.info(f"Using database: {settings.mongo_db}")
    return _database


def close_connection() -> None:
    """Close MongoDB connection"""
    global _client, _database
    if _client is not None:
        _client.close()
        _client = None
        _database = None
        logger.info("MongoDB connection closed")


def create_indexes() -> None:
    """Create all required indexes"""
    db = get_database()
    logger.info("Creating MongoDB indexes...")

    # Workflows collection
    workflows = db[WORKFLOWS]
    workflows.create_index("workflow_id", unique=True)
    workflows.create_index([("application_type", ASCENDING), ("is_active", ASCENDING)])
    workflows.create_index("created_by")
    workflows.create_index("created_at", background=True)

    # Stages collection
    stages = db[STAGES]
    stages.create_index("stage_id", unique=True)
    stages.create_index([("workflow_id", ASCENDING), ("sequence", ASCENDING)])

    # Transitions collection
    transitions = db[TRANSITIONS]
    transitions.create_index("transition_id", unique=True)
    transitions.create_index("workflow_id")
    transitions.create_index([("source_stage_id", ASCENDING), ("priority", DESCENDING)])
    transitions.create_index("target_stage_id")

    # Stage transition history collection
    history = db[HISTORY]
    history.create_index("history_id", unique=True)
    history.create_index([("application_id", ASCENDING), ("timestamp", DESCENDING)])
    history.create_index("correlation_id")

    logger.info("MongoDB indexes created successfully")


def health_check() -> Dict[str, Any]:
    """Check MongoDB health"""
    try:
        client = get_client()
        client.admin.command("ping")
        return {
            "status": "healthy",
            "database": settings.mongo_db,
            "connection": "ok"
        }
    except Exception as e:
        logger.error(f"MongoDB health check failed: {e}")
        return {
            "status": "unhealthy",
            "database": settings.mongo_db,
            "error": str(e)
        }


def _wrap_errors(func):
    """Surface driver failures as PersistenceError"""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except PyMongoError as e:
            logger.error(f"MongoDB operation {func.__name__} failed: {e}")
            raise PersistenceError(
                f"Store operation failed: {e}",
                details={"operation": func.__name__}
            ) from e
    return wrapper


def _strip_id(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc is not None:
        doc.pop("_id", None)
    return doc


class MongoUnitOfWork(UnitOfWork):
    """Collection operations bound to one client session"""

    def __init__(self, db: Database, session: ClientSession):
        self._db = db
        self._session = session

    def find_one(self, collection, query):
        return _strip_id(self._db[collection].find_one(query, session=self._session))

    def find(self, collection, query, sort=None):
        cursor = self._db[collection].find(query, session=self._session)
        if sort:
            cursor = cursor.sort(list(sort))
        return [_strip_id(doc) for doc in cursor]

    def insert_many(self, collection, docs):
        if docs:
            self._db[collection].insert_many(docs, session=self._session)

    def update_one(self, collection, query, values, upsert=False):
        result = self._db[collection].update_one(
            query, {"$set": values}, upsert=upsert, session=self._session
        )
        return result.matched_count

    def delete_many(self, collection, query):
        result = self._db[collection].delete_many(query, session=self._session)
        return result.deleted_count


class MongoDocumentStore(DocumentStore):
    """
    DocumentStore backed by MongoDB

    Transactions use ClientSession.start_transaction (replica set required):
    the transaction commits when the block exits cleanly and aborts otherwise.
    """

    def __init__(self, client: Optional[PyMongoClient] = None, db: Optional[Database] = None):
        self._client = client or get_client()
        self._db = db if db is not None else self._client[settings.mongo_db]

    @_wrap_errors
    def find_one(self, collection, query):
        return _strip_id(self._db[collection].find_one(query))

    @_wrap_errors
    def find(self, collection, query, sort=None, skip=0, limit=0):
        cursor = self._db[collection].find(query)
        if sort:
            cursor = cursor.sort(list(sort))
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return [_strip_id(doc) for doc in cursor]

    @_wrap_errors
    def count(self, collection, query):
        return self._db[collection].count_documents(query)

    @_wrap_errors
    def insert_one(self, collection, doc):
        self._db[collection].insert_one(doc)

    @contextmanager
    def transaction(self) -> Iterator[UnitOfWork]:
        try:
            session = self._client.start_session()
        except PyMongoError as e:
            raise PersistenceError(f"Could not start store session: {e}") from e

        try:
            with session.start_transaction():
                yield MongoUnitOfWork(self._db, session)
        except PyMongoError as e:
            logger.error(f"MongoDB transaction aborted: {e}")
            raise PersistenceError(f"Store transaction failed: {e}") from e
        finally:
            session.end_session()
