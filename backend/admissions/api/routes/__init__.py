"""API Routes module"""
from fastapi import APIRouter

from .workflows import router as workflows_router
from .transitions import router as transitions_router

# Main API router
api_router = APIRouter()

# Include all route modules
api_router.include_router(workflows_router, prefix="/workflows", tags=["Workflows"])
api_router.include_router(transitions_router, tags=["Transitions"])

__all__ = ["api_router"]
