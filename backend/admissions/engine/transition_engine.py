"""Transition Engine - Resolve and record stage transitions for applications

The engine never stores an application's current stage. Callers hold the
current stage and a data snapshot, ask for valid or automatic transitions,
and persist the resulting stage themselves.
"""
from typing import Any, List, Mapping, Optional, Set

from .condition_evaluator import ConditionEvaluator
from .history_writer import HistoryWriter
from ..domain.models import (
    Stage, StageRequirementsResult, Transition, TransitionOutcome, TransitionHistoryRecord
)
from ..domain.errors import InvalidTransitionError, ConditionNotMetError
from ..repositories.workflow_repo import WorkflowRepository
from ..repositories.history_repo import HistoryRepository
from ..utils.logger import get_logger

logger = get_logger(__name__)

DOCUMENTS_KEY = "documents"
COMPLETED_ACTIONS_KEY = "completed_actions"
DOCUMENTS_VERIFIED_KEY = "documents_verified"


def _provided(value: Any) -> Set[str]:
    """Tags present in a data entry: a list of names, or a mapping of name -> truthy flag"""
    if isinstance(value, Mapping):
        return {str(key) for key, flag in value.items() if flag}
    if isinstance(value, (list, tuple, set)):
        return {str(item) for item in value if isinstance(item, str)}
    return set()


class TransitionEngine:
    """Resolve transitions out of a stage and record the moves taken"""

    def __init__(
        self,
        repo: Optional[WorkflowRepository] = None,
        history_repo: Optional[HistoryRepository] = None,
        evaluator: Optional[ConditionEvaluator] = None,
        history_writer: Optional[HistoryWriter] = None
    ):
        self.repo = repo or WorkflowRepository()
        self.history_repo = history_repo or HistoryRepository()
        self.evaluator = evaluator or ConditionEvaluator()
        self.history = history_writer or HistoryWriter(self.history_repo)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_transitions_for_stage(self, stage_id: str) -> List[Transition]:
        """
        Outgoing transitions of a stage in retrieval order

        Order: priority descending, then transition ID ascending. Transitions
        whose target lies outside the stage's workflow are excluded.

        Raises:
            StageNotFoundError: If the stage does not exist
        """
        stage = self.repo.get_stage_or_raise(stage_id)
        workflow_stage_ids = self.repo.get_stage_ids(stage.workflow_id)

        transitions = []
        for transition in self.repo.get_transitions_from_stage(stage_id):
            if transition.workflow_id != stage.workflow_id or transition.target_stage_id not in workflow_stage_ids:
                logger.warning(
                    f"Ignoring transition {transition.transition_id} leaving workflow {stage.workflow_id}",
                    extra={"stage_id": stage_id, "transition_id": transition.transition_id}
                )
                continue
            transitions.append(transition)

        transitions.sort(key=lambda t: (-t.priority, t.transition_id))
        return transitions

    def is_transition_valid(self, transition_id: str, application_data: Mapping[str, Any]) -> bool:
        """
        Check a transition's conditions against application data

        Raises:
            TransitionNotFoundError: If the transition does not exist
        """
        transition = self.repo.get_transition_or_raise(transition_id)
        return self.evaluator.evaluate_all(transition.conditions, application_data)

    def get_valid_transitions_for_stage(
        self,
        stage_id: str,
        application_data: Mapping[str, Any]
    ) -> List[Transition]:
        """Transitions out of a stage whose conditions currently hold"""
        return [
            transition for transition in self.get_transitions_for_stage(stage_id)
            if self.evaluator.evaluate_all(transition.conditions, application_data)
        ]

    def get_next_stages(self, stage_id: str, application_data: Mapping[str, Any]) -> List[Stage]:
        """
        Stages reachable in one move from stage_id for the given data

        Targets of the valid transitions in retrieval order, each stage once.

        Raises:
            StageNotFoundError: If the stage does not exist
        """
        stages: List[Stage] = []
        seen: Set[str] = set()
        for transition in self.get_valid_transitions_for_stage(stage_id, application_data):
            if transition.target_stage_id in seen:
                continue
            seen.add(transition.target_stage_id)
            stages.append(self.repo.get_stage_or_raise(transition.target_stage_id))
        return stages

    def evaluate_stage_requirements(
        self,
        stage_id: str,
        application_data: Mapping[str, Any]
    ) -> StageRequirementsResult:
        """
        Check an application against a stage's required documents and actions

        Uploaded documents are read from data["documents"] and finished
        actions from data["completed_actions"]; each may be a list of names
        or a mapping of name -> flag. A stage that requires documents also
        needs data["documents_verified"] to be true.

        Raises:
            StageNotFoundError: If the stage does not exist
        """
        stage = self.repo.get_stage_or_raise(stage_id)

        documents = _provided(application_data.get(DOCUMENTS_KEY))
        actions = _provided(application_data.get(COMPLETED_ACTIONS_KEY))
        missing_documents = [doc for doc in stage.required_documents if doc not in documents]
        missing_actions = [action for action in stage.required_actions if action not in actions]
        verification_pending = (
            bool(stage.required_documents)
            and application_data.get(DOCUMENTS_VERIFIED_KEY) is not True
        )

        result = StageRequirementsResult(
            stage_id=stage_id,
            met=not (missing_documents or missing_actions or verification_pending),
            missing_documents=missing_documents,
            missing_actions=missing_actions,
            verification_pending=verification_pending
        )
        logger.debug(
            f"Stage {stage_id} requirements met: {result.met}",
            extra={"stage_id": stage_id}
        )
        return result

    # =========================================================================
    # Moves
    # =========================================================================

    def execute_automatic_transition(
        self,
        application_id: str,
        current_stage_id: str,
        application_data: Mapping[str, Any],
        actor_id: Optional[str] = None
    ) -> Optional[TransitionOutcome]:
        """
        Take the first automatic transition whose conditions pass

        First match in retrieval order wins. Returns None when nothing
        qualifies; the application must then stay where it is.
        """
        for transition in self.get_transitions_for_stage(current_stage_id):
            if not transition.is_automatic:
                continue
            if not self.evaluator.evaluate_all(transition.conditions, application_data):
                continue

            self.history.record_transition(
                application_id, transition, actor_id=actor_id, is_automatic=True
            )
            logger.info(
                f"Automatic transition {transition.source_stage_id} -> {transition.target_stage_id}",
                extra={
                    "application_id": application_id,
                    "transition_id": transition.transition_id,
                    "stage_id": current_stage_id,
                }
            )
            return TransitionOutcome(
                new_stage_id=transition.target_stage_id,
                transition_id=transition.transition_id
            )

        logger.debug(
            f"No automatic transition applies for application {application_id}",
            extra={"application_id": application_id, "stage_id": current_stage_id}
        )
        return None

    def transition_application(
        self,
        application_id: str,
        current_stage_id: str,
        transition_id: str,
        application_data: Mapping[str, Any],
        actor_id: Optional[str] = None
    ) -> TransitionOutcome:
        """
        Perform a manual transition

        Permission checks against required_permissions belong to the caller.

        Raises:
            TransitionNotFoundError: If the transition does not exist
            InvalidTransitionError: If it does not leave current_stage_id
            ConditionNotMetError: If its conditions do not hold
        """
        transition = self.repo.get_transition_or_raise(transition_id)

        if transition.source_stage_id != current_stage_id:
            raise InvalidTransitionError(
                f"Transition {transition_id} does not start at stage {current_stage_id}",
                details={
                    "transition_id": transition_id,
                    "source_stage_id": transition.source_stage_id,
                    "current_stage_id": current_stage_id,
                }
            )

        failed = [
            condition.model_dump()
            for condition in transition.conditions
            if not self.evaluator.evaluate(condition, application_data)
        ]
        if failed:
            raise ConditionNotMetError(
                f"Conditions for transition {transition_id} are not met",
                details={"transition_id": transition_id, "failed_conditions": failed}
            )

        self.history.record_transition(application_id, transition, actor_id=actor_id)
        logger.info(
            f"Manual transition {transition.source_stage_id} -> {transition.target_stage_id}",
            extra={
                "application_id": application_id,
                "transition_id": transition_id,
                "actor_id": actor_id,
            }
        )
        return TransitionOutcome(
            new_stage_id=transition.target_stage_id,
            transition_id=transition.transition_id
        )

    def get_application_history(
        self,
        application_id: str,
        limit: int = 100
    ) -> List[TransitionHistoryRecord]:
        """Stage transition history of an application, newest first"""
        return self.history_repo.get_records_for_application(application_id, limit=limit)
