"""
TransitionEngine Tests

Transition resolution, manual moves and the history they leave behind.

Run with:
    pytest backend/tests/test_transition_engine.py -v
"""

from datetime import datetime, timezone

import pytest

from admissions.domain.errors import (
    ConditionNotMetError, InvalidTransitionError, StageNotFoundError, TransitionNotFoundError
)
from admissions.domain.models import TransitionHistoryRecord
from admissions.engine.history_writer import HistoryWriter
from admissions.engine.transition_engine import TransitionEngine
from admissions.repositories.document_store import TRANSITIONS

from tests.conftest import make_spec, stage_spec, transition_spec, stage_by_name

VERIFIED = [{"field": "documents_verified", "operator": "equals", "value": True}]


@pytest.fixture
def verified_graph(repo):
    """S1 -> S2 guarded by documents_verified == true"""
    return repo.create_workflow(make_spec(transitions=[
        transition_spec("s1", "s2", "Verify", conditions=VERIFIED)
    ]))


@pytest.fixture
def automatic_graph(repo):
    """S1 -> S2, automatic, no conditions"""
    return repo.create_workflow(make_spec(transitions=[
        transition_spec("s1", "s2", "Auto", is_automatic=True)
    ]))


class TestQueries:

    def test_transition_validity(self, engine, verified_graph):
        transition_id = verified_graph.transitions[0].transition_id

        assert engine.is_transition_valid(transition_id, {"documents_verified": True}) is True
        assert engine.is_transition_valid(transition_id, {"documents_verified": False}) is False
        assert engine.is_transition_valid(transition_id, {}) is False

    def test_unknown_transition(self, engine):
        with pytest.raises(TransitionNotFoundError):
            engine.is_transition_valid("TRN-missing", {})

    def test_unknown_stage(self, engine):
        with pytest.raises(StageNotFoundError):
            engine.get_transitions_for_stage("STG-missing")

    def test_order_is_priority_then_id(self, repo, engine):
        spec = make_spec(
            stages=[stage_spec("a", 1), stage_spec("b", 2), stage_spec("c", 3), stage_spec("d", 4)],
            transitions=[
                transition_spec("a", "b", "first-low", priority=0),
                transition_spec("a", "c", "high", priority=5),
                transition_spec("a", "d", "second-low", priority=0),
            ],
        )
        graph = repo.create_workflow(spec)
        stage_a = stage_by_name(graph, "A")

        transitions = engine.get_transitions_for_stage(stage_a.stage_id)

        assert transitions[0].name == "high"
        low_ids = [t.transition_id for t in transitions[1:]]
        assert low_ids == sorted(low_ids)

    def test_valid_transitions_filter_by_conditions(self, repo, engine):
        spec = make_spec(
            stages=[stage_spec("a", 1), stage_spec("b", 2), stage_spec("c", 3)],
            transitions=[
                transition_spec("a", "b", "Accept",
                                conditions=[{"field": "gpa", "operator": ">=", "value": 3.0}]),
                transition_spec("a", "c", "Reject",
                                conditions=[{"field": "gpa", "operator": "<", "value": 3.0}]),
            ],
        )
        graph = repo.create_workflow(spec)
        stage_a = stage_by_name(graph, "A")

        valid = engine.get_valid_transitions_for_stage(stage_a.stage_id, {"gpa": 3.4})

        assert [t.name for t in valid] == ["Accept"]

    def test_transitions_leaving_the_workflow_are_ignored(self, repo, store, engine, verified_graph):
        other = repo.create_workflow(make_spec(name="Other"))
        stray = verified_graph.transitions[0].model_dump(mode="json", exclude={"source_stage", "target_stage"})
        stray.update({
            "_id": "TRN-stray",
            "transition_id": "TRN-stray",
            "target_stage_id": other.stages[0].stage_id,
        })
        store.insert_one(TRANSITIONS, stray)

        transitions = engine.get_transitions_for_stage(verified_graph.stages[0].stage_id)

        assert [t.transition_id for t in transitions] == [verified_graph.transitions[0].transition_id]


class TestAutomaticTransitions:

    def test_unconditional_automatic_transition(self, engine, automatic_graph):
        s1, s2 = automatic_graph.stages

        outcome = engine.execute_automatic_transition("APP-1", s1.stage_id, {})

        assert outcome.new_stage_id == s2.stage_id
        history = engine.get_application_history("APP-1")
        assert len(history) == 1
        assert history[0].from_stage_id == s1.stage_id
        assert history[0].to_stage_id == s2.stage_id
        assert history[0].is_automatic is True
        assert history[0].workflow_id == automatic_graph.workflow_id

    def test_manual_transitions_are_not_taken(self, engine, verified_graph):
        outcome = engine.execute_automatic_transition(
            "APP-1", verified_graph.stages[0].stage_id, {"documents_verified": True}
        )
        assert outcome is None
        assert engine.get_application_history("APP-1") == []

    def test_first_match_wins(self, repo, engine):
        spec = make_spec(
            stages=[stage_spec("a", 1), stage_spec("b", 2, "B"), stage_spec("c", 3, "C")],
            transitions=[
                transition_spec("a", "b", "fallback", is_automatic=True, priority=0),
                transition_spec("a", "c", "preferred", is_automatic=True, priority=10,
                                conditions=[{"field": "fast_track", "operator": "equals", "value": True}]),
            ],
        )
        graph = repo.create_workflow(spec)
        stage_a = graph.stages[0].stage_id

        fast = engine.execute_automatic_transition("APP-1", stage_a, {"fast_track": True})
        normal = engine.execute_automatic_transition("APP-2", stage_a, {"fast_track": False})

        assert fast.new_stage_id == stage_by_name(graph, "C").stage_id
        assert normal.new_stage_id == stage_by_name(graph, "B").stage_id

    def test_no_candidate_stays_put(self, repo, engine):
        graph = repo.create_workflow(make_spec(transitions=[
            transition_spec("s1", "s2", is_automatic=True, conditions=VERIFIED)
        ]))
        assert engine.execute_automatic_transition("APP-1", graph.stages[0].stage_id, {}) is None

    def test_history_failure_does_not_fail_transition(self, repo, history_repo, automatic_graph, monkeypatch):
        def broken_insert(record):
            raise RuntimeError("history store offline")

        monkeypatch.setattr(history_repo, "create_record", broken_insert)
        engine = TransitionEngine(
            repo=repo, history_repo=history_repo,
            history_writer=HistoryWriter(history_repo, enabled=True)
        )
        s1, s2 = automatic_graph.stages

        outcome = engine.execute_automatic_transition("APP-1", s1.stage_id, {})

        assert outcome.new_stage_id == s2.stage_id

    def test_disabled_history(self, repo, history_repo, automatic_graph):
        engine = TransitionEngine(
            repo=repo, history_repo=history_repo,
            history_writer=HistoryWriter(history_repo, enabled=False)
        )
        engine.execute_automatic_transition("APP-1", automatic_graph.stages[0].stage_id, {})
        assert history_repo.count_records_for_application("APP-1") == 0


class TestManualTransitions:

    def test_transition_application(self, engine, verified_graph):
        transition = verified_graph.transitions[0]
        s1, s2 = verified_graph.stages

        outcome = engine.transition_application(
            "APP-1", s1.stage_id, transition.transition_id, {"documents_verified": True}, actor_id="USR-9"
        )

        assert outcome.new_stage_id == s2.stage_id
        assert outcome.transition_id == transition.transition_id
        history = engine.get_application_history("APP-1")
        assert [(h.actor_id, h.is_automatic) for h in history] == [("USR-9", False)]

    def test_wrong_source_stage(self, engine, verified_graph):
        transition = verified_graph.transitions[0]
        s2 = verified_graph.stages[1]

        with pytest.raises(InvalidTransitionError):
            engine.transition_application(
                "APP-1", s2.stage_id, transition.transition_id, {"documents_verified": True}
            )
        assert engine.get_application_history("APP-1") == []

    def test_unmet_conditions(self, engine, verified_graph):
        transition = verified_graph.transitions[0]

        with pytest.raises(ConditionNotMetError) as exc_info:
            engine.transition_application(
                "APP-1", verified_graph.stages[0].stage_id, transition.transition_id, {}
            )

        failed = exc_info.value.details["failed_conditions"]
        assert [c["field"] for c in failed] == ["documents_verified"]
        assert engine.get_application_history("APP-1") == []

    def test_unknown_transition(self, engine, verified_graph):
        with pytest.raises(TransitionNotFoundError):
            engine.transition_application("APP-1", verified_graph.stages[0].stage_id, "TRN-missing", {})

    def test_history_is_newest_first(self, engine, history_repo):
        for hour, target in ((9, "STG-b"), (11, "STG-d"), (10, "STG-c")):
            history_repo.create_record(TransitionHistoryRecord(
                history_id=f"HST-{hour}",
                application_id="APP-1",
                from_stage_id="STG-a",
                to_stage_id=target,
                transition_id="TRN-x",
                timestamp=datetime(2026, 9, 1, hour, tzinfo=timezone.utc),
            ))

        history = engine.get_application_history("APP-1")

        assert [h.to_stage_id for h in history] == ["STG-d", "STG-c", "STG-b"]
        assert len(engine.get_application_history("APP-1", limit=1)) == 1
        assert engine.get_application_history("APP-2") == []


class TestStageQueries:

    @pytest.fixture
    def review_graph(self, repo):
        """Submitted -> Review (verified) | Incomplete (not verified), plus a second route to Review"""
        return repo.create_workflow(make_spec(
            stages=[
                stage_spec("submitted", 1, "Submitted"),
                stage_spec("review", 2, "Review",
                           required_documents=["transcript", "passport"],
                           required_actions=["pay_application_fee"]),
                stage_spec("incomplete", 3, "Incomplete"),
            ],
            transitions=[
                transition_spec("submitted", "review", "Verified", conditions=VERIFIED, priority=5),
                transition_spec("submitted", "review", "Override", priority=1),
                transition_spec("submitted", "incomplete", "Missing documents",
                                conditions=[{"field": "documents_verified", "operator": "equals", "value": False}]),
            ],
        ))

    def test_next_stages_follow_valid_transitions(self, engine, review_graph):
        submitted = stage_by_name(review_graph, "Submitted").stage_id

        verified = engine.get_next_stages(submitted, {"documents_verified": True})
        unverified = engine.get_next_stages(submitted, {"documents_verified": False})

        assert [s.name for s in verified] == ["Review"]
        assert [s.name for s in unverified] == ["Review", "Incomplete"]

    def test_next_stages_of_terminal_stage(self, engine, review_graph):
        assert engine.get_next_stages(stage_by_name(review_graph, "Incomplete").stage_id, {}) == []

    def test_next_stages_unknown_stage(self, engine):
        with pytest.raises(StageNotFoundError):
            engine.get_next_stages("STG-missing", {})

    def test_requirements_met(self, engine, review_graph):
        review = stage_by_name(review_graph, "Review").stage_id

        result = engine.evaluate_stage_requirements(review, {
            "documents": ["transcript", "passport", "essay"],
            "completed_actions": {"pay_application_fee": True},
            "documents_verified": True,
        })

        assert result.met is True
        assert result.missing_documents == []
        assert result.missing_actions == []
        assert result.verification_pending is False

    def test_requirements_report_what_is_missing(self, engine, review_graph):
        review = stage_by_name(review_graph, "Review").stage_id

        result = engine.evaluate_stage_requirements(review, {
            "documents": {"transcript": True, "passport": False},
            "completed_actions": {"pay_application_fee": False},
        })

        assert result.met is False
        assert result.missing_documents == ["passport"]
        assert result.missing_actions == ["pay_application_fee"]
        assert result.verification_pending is True

    def test_stage_without_requirements(self, engine, review_graph):
        result = engine.evaluate_stage_requirements(stage_by_name(review_graph, "Submitted").stage_id, {})
        assert result.met is True
        assert result.verification_pending is False

    def test_requirements_unknown_stage(self, engine):
        with pytest.raises(StageNotFoundError):
            engine.evaluate_stage_requirements("STG-missing", {})
