"""Workflow Service - Workflow management business logic"""
from typing import List, Optional

from ..domain.models import (
    Workflow, WorkflowGraph, WorkflowSpec, WorkflowFilters, ValidationResult
)
from ..domain.enums import ApplicationType
from ..domain.errors import NotFoundError, WorkflowValidationError, InvalidStateError
from ..engine.graph_validator import GraphValidator
from ..repositories.workflow_repo import WorkflowRepository
from ..templates import get_default_template
from ..utils.logger import get_logger

logger = get_logger(__name__)


class WorkflowService:
    """
    Service for workflow operations

    Owns the activation rules: a workflow must validate before it is
    activated, only one workflow per application type is active, and an
    active workflow cannot be deleted.
    """

    def __init__(
        self,
        repo: Optional[WorkflowRepository] = None,
        validator: Optional[GraphValidator] = None
    ):
        self.repo = repo or WorkflowRepository()
        self.validator = validator or GraphValidator(self.repo)

    def create_workflow(self, spec: WorkflowSpec, actor_id: Optional[str] = None) -> WorkflowGraph:
        """Create a new (inactive) workflow graph"""
        if actor_id and not spec.created_by:
            spec = spec.model_copy(update={"created_by": actor_id})
        return self.repo.create_workflow(spec)

    def get_workflow(self, workflow_id: str) -> WorkflowGraph:
        """Get workflow by ID"""
        return self.repo.get_workflow_or_raise(workflow_id)

    def list_workflows(self, filters: Optional[WorkflowFilters] = None) -> List[WorkflowGraph]:
        """List workflows matching filters"""
        return self.repo.get_all_workflows(filters)

    def count_workflows(self, filters: Optional[WorkflowFilters] = None) -> int:
        """Count workflows matching filters"""
        return self.repo.count_workflows(filters)

    def get_workflows_by_type(self, application_type: ApplicationType) -> List[WorkflowGraph]:
        """All workflows of an application type"""
        return self.repo.get_workflows_by_type(application_type)

    def get_active_workflow(self, application_type: ApplicationType) -> WorkflowGraph:
        """
        Get the active workflow of an application type

        Raises:
            NotFoundError: If no workflow is active for the type
        """
        workflow = self.repo.get_active_workflow_for_type(application_type)
        if workflow is None:
            raise NotFoundError(
                f"No active workflow for application type {ApplicationType(application_type).value}",
                details={"application_type": ApplicationType(application_type).value}
            )
        return workflow

    def update_workflow(
        self,
        workflow_id: str,
        spec: WorkflowSpec,
        expected_version: Optional[int] = None
    ) -> WorkflowGraph:
        """
        Replace a workflow graph (diff-upsert)

        Raises:
            InvalidStateError: If an active workflow would change application type
        """
        workflow = self.repo.update_workflow(workflow_id, spec, expected_version)
        if workflow.is_active:
            result = self.validator.validate_graph(workflow)
            if not result.is_valid:
                logger.warning(
                    f"Active workflow {workflow_id} no longer validates after update",
                    extra={"workflow_id": workflow_id}
                )
        return workflow

    def delete_workflow(self, workflow_id: str, actor_id: Optional[str] = None) -> None:
        """
        Delete a workflow and its stages and transitions

        Raises:
            InvalidStateError: If the workflow is active
        """
        workflow = self.repo.get_workflow_or_raise(workflow_id)
        if workflow.is_active:
            raise InvalidStateError(
                "Cannot delete an active workflow. Deactivate it first.",
                details={"workflow_id": workflow_id}
            )

        self.repo.delete_workflow(workflow_id)
        logger.info(
            f"Deleted workflow: {workflow_id}",
            extra={"workflow_id": workflow_id, "actor_id": actor_id}
        )

    def duplicate_workflow(
        self,
        workflow_id: str,
        new_name: str,
        actor_id: Optional[str] = None
    ) -> WorkflowGraph:
        """Duplicate a workflow; the copy is inactive"""
        return self.repo.duplicate_workflow(workflow_id, new_name, created_by=actor_id)

    def validate_workflow(self, workflow_id: str) -> ValidationResult:
        """Structural validation report"""
        return self.validator.validate(workflow_id)

    def activate_workflow(self, workflow_id: str, actor_id: Optional[str] = None) -> Workflow:
        """
        Activate a workflow after validating it

        Any other active workflow of the same application type is
        deactivated in the same transaction. The activation is refused if the
        graph changed after it was validated.

        Raises:
            WorkflowValidationError: If validation fails
            ConcurrencyError: If the graph was edited during activation
        """
        graph = self.repo.get_workflow_or_raise(workflow_id)
        validation = self.validator.validate_graph(graph)
        if not validation.is_valid:
            raise WorkflowValidationError(
                "Workflow validation failed",
                details={"errors": [issue.model_dump(mode="json") for issue in validation.errors]}
            )

        workflow = self.repo.set_active(
            workflow_id, True, deactivate_others=True, expected_version=graph.version
        )
        logger.info(
            f"Activated workflow: {workflow_id}",
            extra={
                "workflow_id": workflow_id,
                "application_type": workflow.application_type.value,
                "actor_id": actor_id,
            }
        )
        return workflow

    def deactivate_workflow(self, workflow_id: str, actor_id: Optional[str] = None) -> Workflow:
        """Deactivate a workflow"""
        workflow = self.repo.set_active(workflow_id, False)
        logger.info(
            f"Deactivated workflow: {workflow_id}",
            extra={"workflow_id": workflow_id, "actor_id": actor_id}
        )
        return workflow

    def create_from_template(
        self,
        application_type: ApplicationType,
        name: Optional[str] = None,
        actor_id: Optional[str] = None
    ) -> WorkflowGraph:
        """
        Create a workflow from the default template of an application type

        Raises:
            NotFoundError: If no template exists for the type
        """
        spec = get_default_template(application_type, name=name, created_by=actor_id)
        if spec is None:
            raise NotFoundError(
                f"No default template for application type {ApplicationType(application_type).value}",
                details={"application_type": ApplicationType(application_type).value}
            )
        return self.repo.create_workflow(spec)
