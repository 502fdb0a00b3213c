"""API Dependencies - Common dependencies for routes"""
from typing import Optional
from fastapi import Header

from ..engine.transition_engine import TransitionEngine
from ..services.workflow_service import WorkflowService
from ..utils.logger import set_correlation_id
from ..utils.idgen import generate_correlation_id


async def get_correlation_id_dep(
    x_correlation_id: Optional[str] = Header(None, alias="X-Correlation-Id")
) -> str:
    """
    Get or generate correlation ID for request tracing

    If client provides X-Correlation-Id, use it.
    Otherwise generate a new one.
    """
    correlation_id = x_correlation_id or generate_correlation_id()
    set_correlation_id(correlation_id)
    return correlation_id


async def get_actor_id_dep(
    x_actor_id: Optional[str] = Header(None, alias="X-Actor-Id")
) -> Optional[str]:
    """
    Caller identity forwarded by the gateway

    Authentication and permission checks happen upstream; the ID is only
    recorded as creator / history actor.
    """
    if x_actor_id:
        return x_actor_id.strip() or None
    return None


def get_workflow_service() -> WorkflowService:
    """Workflow service bound to the configured document store"""
    return WorkflowService()


def get_transition_engine() -> TransitionEngine:
    """Transition engine bound to the configured document store"""
    return TransitionEngine()
