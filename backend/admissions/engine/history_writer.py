"""History Writer - Fire-and-forget stage transition records"""
from typing import Any, Dict, Optional

from ..config.settings import settings
from ..domain.models import Transition, TransitionHistoryRecord
from ..repositories.history_repo import HistoryRepository
from ..utils.idgen import generate_history_id
from ..utils.logger import get_logger, get_correlation_id
from ..utils.time import utc_now

logger = get_logger(__name__)


class HistoryWriter:
    """
    Write stage transition history

    A failing history store never fails the transition: errors are logged
    and the record is dropped.
    """

    def __init__(self, repo: Optional[HistoryRepository] = None, enabled: Optional[bool] = None):
        self.repo = repo or HistoryRepository()
        self.enabled = settings.history_enabled if enabled is None else enabled

    def record_transition(
        self,
        application_id: str,
        transition: Transition,
        actor_id: Optional[str] = None,
        is_automatic: bool = False,
        details: Optional[Dict[str, Any]] = None
    ) -> Optional[TransitionHistoryRecord]:
        """Append one history record; returns None if it was not written"""
        if not self.enabled:
            return None

        record = TransitionHistoryRecord(
            history_id=generate_history_id(),
            application_id=application_id,
            workflow_id=transition.workflow_id,
            from_stage_id=transition.source_stage_id,
            to_stage_id=transition.target_stage_id,
            transition_id=transition.transition_id,
            is_automatic=is_automatic,
            actor_id=actor_id,
            timestamp=utc_now(),
            correlation_id=get_correlation_id(),
            details=details or {}
        )

        try:
            return self.repo.create_record(record)
        except Exception as e:
            logger.error(
                f"Failed to record stage transition history: {e}",
                extra={"application_id": application_id, "transition_id": transition.transition_id},
                exc_info=True
            )
            return None
