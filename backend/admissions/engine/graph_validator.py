"""Graph Validator - Structural checks run before a workflow is activated"""
from typing import List, Optional, Set

from .condition_evaluator import is_known_operator
from ..domain.models import WorkflowGraph, ValidationIssue, ValidationResult
from ..domain.enums import EntityType, ValidationCode
from ..repositories.workflow_repo import WorkflowRepository
from ..utils.logger import get_logger

logger = get_logger(__name__)


class GraphValidator:
    """
    Validate workflow graphs

    Structural problems are reported as data (errors and warnings), never
    raised. Only a missing workflow raises.
    """

    def __init__(self, repo: Optional[WorkflowRepository] = None):
        self.repo = repo or WorkflowRepository()

    def validate(self, workflow_id: str) -> ValidationResult:
        """Load and validate a workflow; raises WorkflowNotFoundError if absent"""
        graph = self.repo.get_workflow_or_raise(workflow_id)
        result = self.validate_graph(graph)
        logger.info(
            f"Validated workflow {workflow_id}: {len(result.errors)} errors, {len(result.warnings)} warnings",
            extra={"workflow_id": workflow_id}
        )
        return result

    def validate_graph(self, graph: WorkflowGraph) -> ValidationResult:
        """Pure validation of a hydrated graph"""
        errors: List[ValidationIssue] = []
        warnings: List[ValidationIssue] = []

        stage_ids = graph.stage_ids()

        if not graph.stages:
            errors.append(ValidationIssue(
                code=ValidationCode.NO_STAGES,
                message="Workflow must have at least one stage",
                entity_type=EntityType.WORKFLOW,
                entity_id=graph.workflow_id
            ))
        elif not graph.transitions:
            errors.append(ValidationIssue(
                code=ValidationCode.MISSING_TRANSITIONS,
                message="Workflow has stages but no transitions",
                entity_type=EntityType.WORKFLOW,
                entity_id=graph.workflow_id
            ))

        # Transition endpoints must be stages of this workflow
        for transition in graph.transitions:
            for side, stage_id in (("source", transition.source_stage_id),
                                   ("target", transition.target_stage_id)):
                if stage_id not in stage_ids:
                    errors.append(ValidationIssue(
                        code=ValidationCode.FOREIGN_STAGE_REFERENCE,
                        message=(
                            f"Transition '{transition.name}' {side} stage {stage_id} "
                            f"does not belong to this workflow"
                        ),
                        entity_type=EntityType.TRANSITION,
                        entity_id=transition.transition_id
                    ))

        if graph.entry_stage_id and graph.entry_stage_id not in stage_ids:
            errors.append(ValidationIssue(
                code=ValidationCode.INVALID_ENTRY_STAGE,
                message=f"Entry stage {graph.entry_stage_id} is not a stage of this workflow",
                entity_type=EntityType.WORKFLOW,
                entity_id=graph.workflow_id
            ))

        # Isolated stages, a lone stage included
        disconnected: Set[str] = set()
        for stage in graph.stages:
            if not graph.outgoing(stage.stage_id) and not graph.incoming(stage.stage_id):
                disconnected.add(stage.stage_id)
                errors.append(ValidationIssue(
                    code=ValidationCode.DISCONNECTED_STAGE,
                    message=f"Stage '{stage.name}' has no incoming or outgoing transitions",
                    entity_type=EntityType.STAGE,
                    entity_id=stage.stage_id
                ))

        # Reachability is a warning: runtime conditions decide actual paths
        entry = graph.get_entry_stage()
        if entry is not None:
            reachable = self._find_reachable_stages(graph, entry.stage_id, stage_ids)
            for stage in graph.stages:
                if stage.stage_id in reachable or stage.stage_id in disconnected:
                    continue
                warnings.append(ValidationIssue(
                    code=ValidationCode.UNREACHABLE_STAGE,
                    message=f"Stage '{stage.name}' is not reachable from entry stage '{entry.name}'",
                    entity_type=EntityType.STAGE,
                    entity_id=stage.stage_id
                ))

        if graph.stages and all(graph.outgoing(stage.stage_id) for stage in graph.stages):
            warnings.append(ValidationIssue(
                code=ValidationCode.NO_TERMINAL_STAGE,
                message="Every stage has an outgoing transition; no application can finish",
                entity_type=EntityType.WORKFLOW,
                entity_id=graph.workflow_id
            ))

        for transition in graph.transitions:
            for condition in transition.conditions:
                if not is_known_operator(condition.operator):
                    warnings.append(ValidationIssue(
                        code=ValidationCode.UNKNOWN_OPERATOR,
                        message=(
                            f"Transition '{transition.name}' uses unknown operator "
                            f"'{condition.operator}' and will never pass"
                        ),
                        entity_type=EntityType.TRANSITION,
                        entity_id=transition.transition_id
                    ))

        return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)

    def _find_reachable_stages(
        self,
        graph: WorkflowGraph,
        start_stage_id: str,
        stage_ids: Set[str]
    ) -> Set[str]:
        """Find all stages reachable from start over internal transitions"""
        reachable = {start_stage_id}
        to_visit = [start_stage_id]

        while to_visit:
            current = to_visit.pop()
            for transition in graph.outgoing(current):
                target = transition.target_stage_id
                if target in stage_ids and target not in reachable:
                    reachable.add(target)
                    to_visit.append(target)

        return reachable
