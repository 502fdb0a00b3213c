"""
Seed Data Script - Creates the default admissions workflows
Run: python -m scripts.seed_data [--activate]
"""
import argparse
import os
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from admissions.domain.models import WorkflowFilters
from admissions.services.workflow_service import WorkflowService
from admissions.templates import TEMPLATE_REGISTRY
from admissions.utils.logger import setup_logging, get_logger

logger = get_logger(__name__)


def seed_default_workflows(service: WorkflowService, activate: bool = False) -> int:
    """Create one workflow per default template unless the type already has workflows"""
    created = 0
    for application_type in TEMPLATE_REGISTRY:
        existing = service.count_workflows(WorkflowFilters(application_type=application_type))
        if existing:
            print(f"Skipping {application_type.value}: {existing} workflow(s) already present")
            continue

        workflow = service.create_from_template(application_type, actor_id="seed-script")
        print(f"Created {workflow.name} ({workflow.workflow_id}): "
              f"{len(workflow.stages)} stages, {len(workflow.transitions)} transitions")
        created += 1

        if activate:
            service.activate_workflow(workflow.workflow_id, actor_id="seed-script")
            print(f"  Activated {workflow.workflow_id}")

    return created


def main():
    parser = argparse.ArgumentParser(description="Seed default admissions workflows")
    parser.add_argument("--activate", action="store_true", help="Activate the seeded workflows")
    args = parser.parse_args()

    setup_logging()
    created = seed_default_workflows(WorkflowService(), activate=args.activate)
    print(f"\nSeeded {created} workflow(s)")


if __name__ == "__main__":
    main()
