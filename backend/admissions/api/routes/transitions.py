"""Transition API Routes - Runtime endpoints for the application-status service"""
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from ..deps import get_actor_id_dep, get_correlation_id_dep, get_transition_engine
from ...domain.models import StageRequirementsResult, TransitionOutcome
from ...engine.transition_engine import TransitionEngine
from ...utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================

class ApplicationDataRequest(BaseModel):
    """Snapshot of application data for condition checks"""
    application_data: Dict[str, Any] = Field(default_factory=dict)


class AutomaticTransitionRequest(ApplicationDataRequest):
    """Request to run automatic transition resolution"""
    current_stage_id: str


class ManualTransitionRequest(ApplicationDataRequest):
    """Request to take a specific transition"""
    current_stage_id: str
    transition_id: str


class TransitionListResponse(BaseModel):
    """Response for transition list"""
    items: List[Dict[str, Any]]
    total: int


class StageListResponse(BaseModel):
    """Response for stage list"""
    items: List[Dict[str, Any]]
    total: int


class TransitionCheckResponse(BaseModel):
    """Response for a condition check"""
    transition_id: str
    is_valid: bool


class AutomaticTransitionResponse(BaseModel):
    """Response for automatic transition resolution"""
    transitioned: bool
    outcome: Optional[TransitionOutcome] = None


# ============================================================================
# Stage & Transition Routes
# ============================================================================

@router.get("/stages/{stage_id}/transitions", response_model=TransitionListResponse)
async def get_transitions_for_stage(
    stage_id: str,
    correlation_id: str = Depends(get_correlation_id_dep),
    engine: TransitionEngine = Depends(get_transition_engine)
):
    """Outgoing transitions of a stage in resolution order"""
    transitions = engine.get_transitions_for_stage(stage_id)
    return TransitionListResponse(
        items=[t.model_dump(mode="json") for t in transitions],
        total=len(transitions)
    )


@router.post("/stages/{stage_id}/valid-transitions", response_model=TransitionListResponse)
async def get_valid_transitions_for_stage(
    stage_id: str,
    request: ApplicationDataRequest,
    correlation_id: str = Depends(get_correlation_id_dep),
    engine: TransitionEngine = Depends(get_transition_engine)
):
    """Transitions out of a stage whose conditions hold for the given data"""
    transitions = engine.get_valid_transitions_for_stage(stage_id, request.application_data)
    return TransitionListResponse(
        items=[t.model_dump(mode="json") for t in transitions],
        total=len(transitions)
    )


@router.post("/stages/{stage_id}/next-stages", response_model=StageListResponse)
async def get_next_stages(
    stage_id: str,
    request: ApplicationDataRequest,
    correlation_id: str = Depends(get_correlation_id_dep),
    engine: TransitionEngine = Depends(get_transition_engine)
):
    """Stages one valid transition away for the given data"""
    stages = engine.get_next_stages(stage_id, request.application_data)
    return StageListResponse(
        items=[s.model_dump(mode="json") for s in stages],
        total=len(stages)
    )


@router.post("/stages/{stage_id}/requirements", response_model=StageRequirementsResult)
async def evaluate_stage_requirements(
    stage_id: str,
    request: ApplicationDataRequest,
    correlation_id: str = Depends(get_correlation_id_dep),
    engine: TransitionEngine = Depends(get_transition_engine)
):
    """Required documents and actions the application still lacks for a stage"""
    return engine.evaluate_stage_requirements(stage_id, request.application_data)


@router.post("/transitions/{transition_id}/check", response_model=TransitionCheckResponse)
async def check_transition(
    transition_id: str,
    request: ApplicationDataRequest,
    correlation_id: str = Depends(get_correlation_id_dep),
    engine: TransitionEngine = Depends(get_transition_engine)
):
    """Evaluate a transition's conditions without taking it"""
    return TransitionCheckResponse(
        transition_id=transition_id,
        is_valid=engine.is_transition_valid(transition_id, request.application_data)
    )


# ============================================================================
# Application Routes
# ============================================================================

@router.post("/applications/{application_id}/automatic-transition", response_model=AutomaticTransitionResponse)
async def execute_automatic_transition(
    application_id: str,
    request: AutomaticTransitionRequest,
    actor_id: Optional[str] = Depends(get_actor_id_dep),
    correlation_id: str = Depends(get_correlation_id_dep),
    engine: TransitionEngine = Depends(get_transition_engine)
):
    """
    Take the first automatic transition whose conditions pass

    The caller persists the new stage; `transitioned` is false when the
    application stays where it is.
    """
    outcome = engine.execute_automatic_transition(
        application_id,
        request.current_stage_id,
        request.application_data,
        actor_id=actor_id
    )
    return AutomaticTransitionResponse(transitioned=outcome is not None, outcome=outcome)


@router.post("/applications/{application_id}/transitions", response_model=TransitionOutcome)
async def transition_application(
    application_id: str,
    request: ManualTransitionRequest,
    actor_id: Optional[str] = Depends(get_actor_id_dep),
    correlation_id: str = Depends(get_correlation_id_dep),
    engine: TransitionEngine = Depends(get_transition_engine)
):
    """
    Take a manual transition

    Permission checks against the transition's required_permissions are
    done by the caller before this request.
    """
    return engine.transition_application(
        application_id,
        request.current_stage_id,
        request.transition_id,
        request.application_data,
        actor_id=actor_id
    )


@router.get("/applications/{application_id}/history")
async def get_application_history(
    application_id: str,
    limit: int = Query(100, ge=1, le=500),
    correlation_id: str = Depends(get_correlation_id_dep),
    engine: TransitionEngine = Depends(get_transition_engine)
):
    """Stage transition history, newest first"""
    records = engine.get_application_history(application_id, limit=limit)
    return {"items": [r.model_dump(mode="json") for r in records], "total": len(records)}
