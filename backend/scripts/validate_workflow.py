"""
Validate Workflow Script - Print a structural validation report
Run: python -m scripts.validate_workflow <workflow_id>
"""
import os
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from admissions.domain.errors import WorkflowNotFoundError
from admissions.domain.models import WorkflowGraph, ValidationResult
from admissions.engine.graph_validator import GraphValidator
from admissions.repositories.workflow_repo import WorkflowRepository


def print_report(graph: WorkflowGraph, result: ValidationResult) -> None:
    entry = graph.get_entry_stage()

    print(f"Workflow: {graph.name} ({graph.workflow_id})")
    print(f"  Type: {graph.application_type.value}   Active: {graph.is_active}   Version: {graph.version}")
    print(f"  Entry stage: {entry.name if entry else '-'}")
    print()

    print("=" * 60)
    print(f"STAGES ({len(graph.stages)})")
    print("=" * 60)
    for stage in graph.stages:
        outgoing = graph.outgoing(stage.stage_id)
        marker = " (terminal)" if not outgoing else ""
        print(f"{stage.sequence:>3}. {stage.name} [{stage.stage_id}]{marker}")
        for transition in outgoing:
            target = transition.target_stage.name if transition.target_stage else transition.target_stage_id
            kind = "auto" if transition.is_automatic else "manual"
            print(f"       -> {target} via '{transition.name}' ({kind}, "
                  f"{len(transition.conditions)} conditions, priority {transition.priority})")

    print()
    print("=" * 60)
    print("VALIDATION")
    print("=" * 60)
    print(f"Valid: {result.is_valid}")
    for issue in result.errors:
        print(f"  ERROR   {issue.code.value}: {issue.message} [{issue.entity_type.value} {issue.entity_id}]")
    for issue in result.warnings:
        print(f"  WARNING {issue.code.value}: {issue.message} [{issue.entity_type.value} {issue.entity_id}]")


def main() -> int:
    if len(sys.argv) < 2:
        print("Usage: python -m scripts.validate_workflow <workflow_id>")
        return 2

    repo = WorkflowRepository()
    try:
        graph = repo.get_workflow_or_raise(sys.argv[1])
    except WorkflowNotFoundError as e:
        print(e.message)
        return 1

    result = GraphValidator(repo).validate_graph(graph)
    print_report(graph, result)
    return 0 if result.is_valid else 1


if __name__ == "__main__":
    sys.exit(main())
