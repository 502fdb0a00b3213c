"""Workflow API Routes - Graph editor endpoints"""
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, status, Query
from pydantic import BaseModel, Field

from ..deps import get_actor_id_dep, get_correlation_id_dep, get_workflow_service
from ...domain.models import WorkflowSpec, WorkflowFilters, ValidationResult
from ...domain.enums import ApplicationType
from ...services.workflow_service import WorkflowService
from ...utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================

class WorkflowListResponse(BaseModel):
    """Response for workflow list"""
    items: List[Dict[str, Any]]
    page: int
    page_size: int
    total: int


class DuplicateWorkflowRequest(BaseModel):
    """Request to duplicate a workflow"""
    name: str = Field(..., min_length=1, max_length=100)


class CreateFromTemplateRequest(BaseModel):
    """Request to create a workflow from the default template"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)


class DeleteWorkflowResponse(BaseModel):
    """Response after deleting a workflow"""
    workflow_id: str
    deleted: bool


# ============================================================================
# Collection Routes
# ============================================================================

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_workflow(
    request: WorkflowSpec,
    actor_id: Optional[str] = Depends(get_actor_id_dep),
    correlation_id: str = Depends(get_correlation_id_dep),
    service: WorkflowService = Depends(get_workflow_service)
):
    """
    Create a workflow with its stages and transitions

    New stages are referenced from transitions by their `ref`.
    The workflow is created inactive.
    """
    workflow = service.create_workflow(request, actor_id=actor_id)
    return workflow.model_dump(mode="json")


@router.get("", response_model=WorkflowListResponse)
async def list_workflows(
    application_type: Optional[ApplicationType] = Query(None),
    is_active: Optional[bool] = Query(None),
    created_by: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="Search in name and description"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    correlation_id: str = Depends(get_correlation_id_dep),
    service: WorkflowService = Depends(get_workflow_service)
):
    """List workflows, newest first"""
    filters = WorkflowFilters(
        application_type=application_type,
        is_active=is_active,
        created_by=created_by,
        search=q,
        skip=(page - 1) * page_size,
        limit=page_size
    )
    workflows = service.list_workflows(filters)

    return WorkflowListResponse(
        items=[w.model_dump(mode="json") for w in workflows],
        page=page,
        page_size=page_size,
        total=service.count_workflows(filters)
    )


@router.get("/by-type/{application_type}")
async def get_workflows_by_type(
    application_type: ApplicationType,
    correlation_id: str = Depends(get_correlation_id_dep),
    service: WorkflowService = Depends(get_workflow_service)
):
    """All workflows of an application type"""
    workflows = service.get_workflows_by_type(application_type)
    return {"items": [w.model_dump(mode="json") for w in workflows], "total": len(workflows)}


@router.get("/active/{application_type}")
async def get_active_workflow(
    application_type: ApplicationType,
    correlation_id: str = Depends(get_correlation_id_dep),
    service: WorkflowService = Depends(get_workflow_service)
):
    """The active workflow of an application type"""
    return service.get_active_workflow(application_type).model_dump(mode="json")


@router.post("/templates/{application_type}", status_code=status.HTTP_201_CREATED)
async def create_from_template(
    application_type: ApplicationType,
    request: Optional[CreateFromTemplateRequest] = None,
    actor_id: Optional[str] = Depends(get_actor_id_dep),
    correlation_id: str = Depends(get_correlation_id_dep),
    service: WorkflowService = Depends(get_workflow_service)
):
    """Create a workflow from the default admissions template"""
    workflow = service.create_from_template(
        application_type,
        name=request.name if request else None,
        actor_id=actor_id
    )
    return workflow.model_dump(mode="json")


# ============================================================================
# Item Routes
# ============================================================================

@router.get("/{workflow_id}")
async def get_workflow(
    workflow_id: str,
    correlation_id: str = Depends(get_correlation_id_dep),
    service: WorkflowService = Depends(get_workflow_service)
):
    """Get a fully hydrated workflow graph"""
    return service.get_workflow(workflow_id).model_dump(mode="json")


@router.put("/{workflow_id}")
async def update_workflow(
    workflow_id: str,
    request: WorkflowSpec,
    expected_version: Optional[int] = Query(None, ge=1, description="Optimistic lock version"),
    correlation_id: str = Depends(get_correlation_id_dep),
    service: WorkflowService = Depends(get_workflow_service)
):
    """
    Replace the workflow graph

    Stages and transitions carrying an existing ID are updated, new ones
    are created and omitted ones are deleted, all in one transaction.
    """
    workflow = service.update_workflow(workflow_id, request, expected_version=expected_version)
    return workflow.model_dump(mode="json")


@router.delete("/{workflow_id}", response_model=DeleteWorkflowResponse)
async def delete_workflow(
    workflow_id: str,
    actor_id: Optional[str] = Depends(get_actor_id_dep),
    correlation_id: str = Depends(get_correlation_id_dep),
    service: WorkflowService = Depends(get_workflow_service)
):
    """Delete an inactive workflow with its stages and transitions"""
    service.delete_workflow(workflow_id, actor_id=actor_id)
    return DeleteWorkflowResponse(workflow_id=workflow_id, deleted=True)


@router.post("/{workflow_id}/duplicate", status_code=status.HTTP_201_CREATED)
async def duplicate_workflow(
    workflow_id: str,
    request: DuplicateWorkflowRequest,
    actor_id: Optional[str] = Depends(get_actor_id_dep),
    correlation_id: str = Depends(get_correlation_id_dep),
    service: WorkflowService = Depends(get_workflow_service)
):
    """Duplicate a workflow under a new name (inactive copy)"""
    workflow = service.duplicate_workflow(workflow_id, request.name, actor_id=actor_id)
    return workflow.model_dump(mode="json")


@router.post("/{workflow_id}/activate")
async def activate_workflow(
    workflow_id: str,
    actor_id: Optional[str] = Depends(get_actor_id_dep),
    correlation_id: str = Depends(get_correlation_id_dep),
    service: WorkflowService = Depends(get_workflow_service)
):
    """Validate and activate a workflow, deactivating others of its type"""
    return service.activate_workflow(workflow_id, actor_id=actor_id).model_dump(mode="json")


@router.post("/{workflow_id}/deactivate")
async def deactivate_workflow(
    workflow_id: str,
    actor_id: Optional[str] = Depends(get_actor_id_dep),
    correlation_id: str = Depends(get_correlation_id_dep),
    service: WorkflowService = Depends(get_workflow_service)
):
    """Deactivate a workflow"""
    return service.deactivate_workflow(workflow_id, actor_id=actor_id).model_dump(mode="json")


@router.get("/{workflow_id}/validate", response_model=ValidationResult)
async def validate_workflow(
    workflow_id: str,
    correlation_id: str = Depends(get_correlation_id_dep),
    service: WorkflowService = Depends(get_workflow_service)
):
    """Structural validation report (errors and warnings)"""
    return service.validate_workflow(workflow_id)
