"""Repository modules - Data access layer"""
from .document_store import DocumentStore, InMemoryDocumentStore, UnitOfWork, get_document_store
from .workflow_repo import WorkflowRepository
from .history_repo import HistoryRepository

__all__ = [
    "DocumentStore",
    "InMemoryDocumentStore",
    "UnitOfWork",
    "get_document_store",
    "WorkflowRepository",
    "HistoryRepository",
]
