"""
Workflow Templates Package

Default admissions workflows that new deployments start from.
"""
from .default_workflows import (
    get_default_template,
    UNDERGRADUATE_TEMPLATE,
    GRADUATE_TEMPLATE,
    TEMPLATE_REGISTRY
)

__all__ = [
    "get_default_template",
    "UNDERGRADUATE_TEMPLATE",
    "GRADUATE_TEMPLATE",
    "TEMPLATE_REGISTRY"
]
