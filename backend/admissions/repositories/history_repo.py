"""History Repository - Stage transition history (append-only)"""
from typing import List, Optional

from .document_store import DocumentStore, get_document_store, HISTORY
from ..domain.models import TransitionHistoryRecord
from ..utils.logger import get_logger

logger = get_logger(__name__)

HISTORY_ORDER = [("timestamp", -1), ("history_id", -1)]


class HistoryRepository:
    """Repository for stage transition history records"""

    def __init__(self, store: Optional[DocumentStore] = None):
        self._store = store or get_document_store()

    def create_record(self, record: TransitionHistoryRecord) -> TransitionHistoryRecord:
        """Append a history record"""
        doc = record.model_dump(mode="json")
        doc["_id"] = record.history_id

        self._store.insert_one(HISTORY, doc)
        logger.info(
            f"Recorded stage transition {record.from_stage_id} -> {record.to_stage_id}",
            extra={
                "application_id": record.application_id,
                "transition_id": record.transition_id,
                "actor_id": record.actor_id,
            }
        )
        return record

    def get_records_for_application(
        self,
        application_id: str,
        skip: int = 0,
        limit: int = 100
    ) -> List[TransitionHistoryRecord]:
        """History of one application, newest first"""
        docs = self._store.find(
            HISTORY,
            {"application_id": application_id},
            sort=HISTORY_ORDER,
            skip=skip,
            limit=limit
        )
        return [TransitionHistoryRecord.model_validate(doc) for doc in docs]

    def count_records_for_application(self, application_id: str) -> int:
        """Count history records of one application"""
        return self._store.count(HISTORY, {"application_id": application_id})
