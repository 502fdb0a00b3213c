"""
WorkflowService Tests

Activation rules (validate first, one active per type, no deleting an
active workflow) and default templates.

Run with:
    pytest backend/tests/test_workflow_service.py -v
"""

import pytest

from admissions.domain.enums import ApplicationType, ValidationCode
from admissions.domain.errors import (
    ConcurrencyError, InvalidStateError, NotFoundError, WorkflowValidationError, WorkflowNotFoundError
)
from admissions.domain.models import WorkflowFilters
from admissions.templates import get_default_template

from tests.conftest import make_spec, stage_spec, stage_by_name


class TestActivation:

    def test_invalid_workflow_cannot_be_activated(self, service):
        graph = service.create_workflow(make_spec(transitions=[]))

        with pytest.raises(WorkflowValidationError) as exc_info:
            service.activate_workflow(graph.workflow_id)

        codes = [issue["code"] for issue in exc_info.value.details["errors"]]
        assert ValidationCode.MISSING_TRANSITIONS.value in codes
        assert service.get_workflow(graph.workflow_id).is_active is False

    def test_one_active_workflow_per_type(self, service):
        first = service.create_workflow(make_spec(name="First"))
        second = service.create_workflow(make_spec(name="Second"))

        service.activate_workflow(first.workflow_id)
        activated = service.activate_workflow(second.workflow_id)

        assert activated.is_active is True
        assert service.get_workflow(first.workflow_id).is_active is False
        assert service.get_active_workflow(ApplicationType.UNDERGRADUATE).workflow_id == second.workflow_id
        assert service.count_workflows(WorkflowFilters(is_active=True)) == 1

    def test_activation_does_not_bump_version(self, service):
        graph = service.create_workflow(make_spec())
        service.activate_workflow(graph.workflow_id)
        assert service.get_workflow(graph.workflow_id).version == 1

    def test_deactivate(self, service):
        graph = service.create_workflow(make_spec())
        service.activate_workflow(graph.workflow_id)

        workflow = service.deactivate_workflow(graph.workflow_id)

        assert workflow.is_active is False
        with pytest.raises(NotFoundError):
            service.get_active_workflow(ApplicationType.UNDERGRADUATE)

    def test_active_workflow_cannot_move_to_another_type(self, service):
        undergraduate = service.create_workflow(make_spec(name="UG"))
        graduate = service.create_workflow(make_spec(name="GR", application_type=ApplicationType.GRADUATE))
        service.activate_workflow(undergraduate.workflow_id)
        service.activate_workflow(graduate.workflow_id)
        stages = [{"stage_id": s.stage_id, "name": s.name, "sequence": s.sequence} for s in graduate.stages]

        with pytest.raises(InvalidStateError):
            service.update_workflow(
                graduate.workflow_id,
                make_spec(name="GR", stages=stages, transitions=[], application_type=ApplicationType.UNDERGRADUATE)
            )

        active = WorkflowFilters(application_type=ApplicationType.UNDERGRADUATE, is_active=True)
        assert service.count_workflows(active) == 1
        assert service.get_workflow(graduate.workflow_id).application_type == ApplicationType.GRADUATE

    def test_deactivated_workflow_can_move_to_another_type(self, service):
        graph = service.create_workflow(make_spec(application_type=ApplicationType.GRADUATE))
        service.activate_workflow(graph.workflow_id)
        service.deactivate_workflow(graph.workflow_id)
        stages = [{"stage_id": s.stage_id, "name": s.name, "sequence": s.sequence} for s in graph.stages]

        updated = service.update_workflow(graph.workflow_id, make_spec(stages=stages, transitions=[]))

        assert updated.application_type == ApplicationType.UNDERGRADUATE

    def test_edit_between_validation_and_activation_is_refused(self, service, monkeypatch):
        graph = service.create_workflow(make_spec())
        stages = [{"stage_id": s.stage_id, "name": s.name, "sequence": s.sequence} for s in graph.stages]
        validate_graph = service.validator.validate_graph

        def validate_then_edit(candidate):
            result = validate_graph(candidate)
            service.repo.update_workflow(graph.workflow_id, make_spec(stages=stages, transitions=[]))
            return result

        monkeypatch.setattr(service.validator, "validate_graph", validate_then_edit)

        with pytest.raises(ConcurrencyError):
            service.activate_workflow(graph.workflow_id)
        assert service.get_workflow(graph.workflow_id).is_active is False

    def test_activate_missing(self, service):
        with pytest.raises(WorkflowNotFoundError):
            service.activate_workflow("WF-missing")


class TestLifecycle:

    def test_create_records_actor(self, service):
        graph = service.create_workflow(make_spec(), actor_id="USR-1")
        assert graph.created_by == "USR-1"
        assert graph.is_active is False

    def test_active_workflow_cannot_be_deleted(self, service):
        graph = service.create_workflow(make_spec())
        service.activate_workflow(graph.workflow_id)

        with pytest.raises(InvalidStateError):
            service.delete_workflow(graph.workflow_id)
        assert service.get_workflow(graph.workflow_id) is not None

    def test_delete_inactive(self, service):
        graph = service.create_workflow(make_spec())
        service.delete_workflow(graph.workflow_id)
        with pytest.raises(WorkflowNotFoundError):
            service.get_workflow(graph.workflow_id)

    def test_update_of_active_workflow_keeps_it_active(self, service):
        graph = service.create_workflow(make_spec())
        service.activate_workflow(graph.workflow_id)
        stages = [{"stage_id": s.stage_id, "name": s.name, "sequence": s.sequence} for s in graph.stages]

        updated = service.update_workflow(graph.workflow_id, make_spec(stages=stages, transitions=[]))

        assert updated.is_active is True
        assert updated.transitions == []
        assert service.validate_workflow(graph.workflow_id).is_valid is False

    def test_duplicate_records_actor(self, service):
        graph = service.create_workflow(make_spec(), actor_id="USR-1")
        copy = service.duplicate_workflow(graph.workflow_id, "Copy", actor_id="USR-2")
        assert copy.created_by == "USR-2"

    def test_list_and_by_type(self, service):
        service.create_workflow(make_spec(name="U"))
        service.create_workflow(make_spec(name="G", application_type=ApplicationType.GRADUATE))

        assert len(service.list_workflows()) == 2
        assert [w.name for w in service.get_workflows_by_type(ApplicationType.GRADUATE)] == ["G"]


class TestTemplates:

    @pytest.mark.parametrize("application_type,stage_count", [
        (ApplicationType.UNDERGRADUATE, 10),
        (ApplicationType.GRADUATE, 11),
    ])
    def test_templates_are_valid(self, service, application_type, stage_count):
        graph = service.create_from_template(application_type, actor_id="USR-1")

        assert len(graph.stages) == stage_count
        assert graph.application_type == application_type
        assert graph.get_entry_stage().name == "Draft"
        result = service.validate_workflow(graph.workflow_id)
        assert result.is_valid is True
        assert result.warnings == []

    def test_template_can_be_activated(self, service):
        graph = service.create_from_template(ApplicationType.GRADUATE, name="Grad 2027")

        service.activate_workflow(graph.workflow_id)

        active = service.get_active_workflow(ApplicationType.GRADUATE)
        assert active.name == "Grad 2027"
        interview = stage_by_name(active, "Interview")
        assert interview.required_actions == ["complete_interview"]

    def test_no_transfer_template(self, service):
        assert get_default_template(ApplicationType.TRANSFER) is None
        with pytest.raises(NotFoundError):
            service.create_from_template(ApplicationType.TRANSFER)

    def test_template_transitions_use_flags(self):
        spec = get_default_template(ApplicationType.UNDERGRADUATE)
        automatic = [t for t in spec.transitions if t.is_automatic]
        assert automatic
        assert all(len(t.conditions) == 1 for t in automatic)


def test_single_stage_workflow_is_rejected_for_activation(service):
    graph = service.create_workflow(make_spec(stages=[stage_spec("only", 1)], transitions=[]))
    with pytest.raises(WorkflowValidationError):
        service.activate_workflow(graph.workflow_id)
