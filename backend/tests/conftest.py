"""
Pytest Configuration and Fixtures

Every test runs against a fresh in-memory document store; no MongoDB needed.
"""

import os

# Must be set before admissions.config.settings is imported
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("HISTORY_ENABLED", "true")

import pytest

from admissions.domain.enums import ApplicationType
from admissions.domain.models import WorkflowSpec
from admissions.engine.condition_evaluator import ConditionEvaluator
from admissions.engine.graph_validator import GraphValidator
from admissions.engine.history_writer import HistoryWriter
from admissions.engine.transition_engine import TransitionEngine
from admissions.repositories.document_store import InMemoryDocumentStore
from admissions.repositories.history_repo import HistoryRepository
from admissions.repositories.workflow_repo import WorkflowRepository
from admissions.services.workflow_service import WorkflowService


# ============================================================================
# Graph builders
# ============================================================================

def stage_spec(ref, sequence, name=None, **extra):
    """StageSpec dict keyed by ref"""
    return {"ref": ref, "name": name or ref.upper(), "sequence": sequence, **extra}


def transition_spec(source, target, name=None, conditions=None, is_automatic=False, priority=0, **extra):
    """TransitionSpec dict between two refs or stage IDs"""
    return {
        "source_stage_id": source,
        "target_stage_id": target,
        "name": name or f"{source}->{target}",
        "conditions": conditions or [],
        "is_automatic": is_automatic,
        "priority": priority,
        **extra,
    }


def make_spec(stages=None, transitions=None, name="Test Workflow",
              application_type=ApplicationType.UNDERGRADUATE, **extra):
    """WorkflowSpec with two stages S1 -> S2 unless told otherwise"""
    if stages is None:
        stages = [stage_spec("s1", 1), stage_spec("s2", 2)]
    if transitions is None:
        transitions = [transition_spec("s1", "s2")]
    return WorkflowSpec.model_validate({
        "name": name,
        "application_type": application_type,
        "stages": stages,
        "transitions": transitions,
        **extra,
    })


def stage_by_name(graph, name):
    return next(stage for stage in graph.stages if stage.name == name)


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def repo(store):
    return WorkflowRepository(store)


@pytest.fixture
def history_repo(store):
    return HistoryRepository(store)


@pytest.fixture
def evaluator():
    return ConditionEvaluator()


@pytest.fixture
def validator(repo):
    return GraphValidator(repo)


@pytest.fixture
def engine(repo, history_repo):
    return TransitionEngine(
        repo=repo,
        history_repo=history_repo,
        history_writer=HistoryWriter(history_repo, enabled=True)
    )


@pytest.fixture
def service(repo, validator):
    return WorkflowService(repo=repo, validator=validator)
