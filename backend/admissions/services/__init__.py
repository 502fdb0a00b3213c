"""Service modules - Business logic layer"""
from .workflow_service import WorkflowService

__all__ = [
    "WorkflowService",
]
