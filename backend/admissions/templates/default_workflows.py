"""
Default Admissions Workflow Templates

Standard undergraduate and graduate admissions pipelines. Stages are
keyed by a ref so transitions can point at them before IDs exist.
"""
from typing import Any, Dict, List, Optional

from ..domain.enums import ApplicationType
from ..domain.models import WorkflowSpec


def _trigger(template: str, channels: List[str], event: str = "stage_entry") -> Dict[str, Any]:
    return {"event": event, "template": template, "channels": channels}


def _stage(
    ref: str,
    name: str,
    description: str,
    sequence: int,
    required_documents: Optional[List[str]] = None,
    required_actions: Optional[List[str]] = None,
    notification_triggers: Optional[List[Dict[str, Any]]] = None,
    assigned_role_id: Optional[str] = None
) -> Dict[str, Any]:
    return {
        "ref": ref,
        "name": name,
        "description": description,
        "sequence": sequence,
        "required_documents": required_documents or [],
        "required_actions": required_actions or [],
        "notification_triggers": notification_triggers or [],
        "assigned_role_id": assigned_role_id,
        # Simple two-column canvas layout
        "position": {"x": 250 * ((sequence - 1) % 2), "y": 120 * (sequence - 1)},
    }


def _transition(
    source: str,
    target: str,
    name: str,
    description: str,
    is_automatic: bool = False,
    flag: Optional[str] = None,
    permission: Optional[str] = None
) -> Dict[str, Any]:
    """Transition gated by an optional boolean flag and/or a permission"""
    return {
        "source_stage_id": source,
        "target_stage_id": target,
        "name": name,
        "description": description,
        "is_automatic": is_automatic,
        "conditions": [{"field": flag, "operator": "equals", "value": True}] if flag else [],
        "required_permissions": [permission] if permission else [],
    }


_DRAFT = _stage(
    "draft", "Draft", "Application is being prepared by the applicant", 1,
    notification_triggers=[_trigger("welcome_to_application", ["email"])]
)
_SUBMITTED = _stage(
    "submitted", "Submitted", "Application has been submitted and is awaiting initial screening", 2,
    required_actions=["submit_application", "pay_application_fee"],
    notification_triggers=[_trigger("application_received", ["email", "in_app"])]
)


def _document_verification(documents: List[str]) -> Dict[str, Any]:
    return _stage(
        "document_verification", "Document Verification", "Required documents are being verified", 3,
        required_documents=documents,
        notification_triggers=[
            _trigger("documents_required", ["email", "in_app"]),
            _trigger("document_verified", ["in_app"], event="document_verified"),
        ],
        assigned_role_id="verification_team"
    )


def _outcome_stages(first_sequence: int) -> List[Dict[str, Any]]:
    """Accepted, Waitlisted, Rejected and Enrollment"""
    return [
        _stage(
            "accepted", "Accepted", "Applicant has been accepted", first_sequence,
            notification_triggers=[_trigger("acceptance_notification", ["email", "in_app", "sms"])]
        ),
        _stage(
            "waitlisted", "Waitlisted", "Applicant has been placed on the waitlist", first_sequence + 1,
            notification_triggers=[_trigger("waitlist_notification", ["email", "in_app"])]
        ),
        _stage(
            "rejected", "Rejected", "Application has been rejected", first_sequence + 2,
            notification_triggers=[_trigger("rejection_notification", ["email", "in_app"])]
        ),
        _stage(
            "enrollment", "Enrollment", "Accepted applicant has confirmed enrollment", first_sequence + 3,
            required_actions=["pay_enrollment_deposit"],
            notification_triggers=[_trigger("enrollment_confirmation", ["email", "in_app"])]
        ),
    ]


_INTAKE_TRANSITIONS = [
    _transition("draft", "submitted", "Submit Application",
                "Applicant submits their application", flag="is_submitted"),
    _transition("submitted", "document_verification", "Initial Screening Passed",
                "Application passes initial screening", is_automatic=True, flag="application_fee_paid"),
]

_DECISION_TRANSITIONS = [
    _transition("decision", "accepted", "Accept", "Accept the applicant",
                permission="make_admission_decision"),
    _transition("decision", "waitlisted", "Waitlist", "Place the applicant on the waitlist",
                permission="make_admission_decision"),
    _transition("decision", "rejected", "Reject", "Reject the application",
                permission="make_admission_decision"),
    _transition("waitlisted", "accepted", "Accept from Waitlist", "Accept an applicant from the waitlist",
                permission="make_admission_decision"),
    _transition("waitlisted", "rejected", "Reject from Waitlist", "Reject an applicant from the waitlist",
                permission="make_admission_decision"),
    _transition("accepted", "enrollment", "Confirm Enrollment",
                "Applicant confirms enrollment by paying deposit",
                is_automatic=True, flag="enrollment_deposit_paid"),
]


UNDERGRADUATE_TEMPLATE: Dict[str, Any] = {
    "name": "Undergraduate Admissions",
    "description": "Standard workflow for undergraduate applications",
    "application_type": ApplicationType.UNDERGRADUATE.value,
    "entry_stage_id": "draft",
    "stages": [
        _DRAFT,
        _SUBMITTED,
        _document_verification(["transcript", "personal_statement", "recommendation_letters"]),
        _stage(
            "under_review", "Under Review", "Application is being reviewed by the admissions committee", 4,
            notification_triggers=[_trigger("application_under_review", ["email", "in_app"])],
            assigned_role_id="admissions_committee"
        ),
        _stage(
            "additional_information", "Additional Information",
            "Additional information is required from the applicant", 5,
            required_actions=["provide_additional_info"],
            notification_triggers=[_trigger("additional_information_required", ["email", "in_app", "sms"])]
        ),
        _stage(
            "decision", "Decision", "Final decision on the application", 6,
            assigned_role_id="admissions_director"
        ),
        *_outcome_stages(7),
    ],
    "transitions": [
        *_INTAKE_TRANSITIONS,
        _transition("document_verification", "under_review", "Documents Verified",
                    "All required documents have been verified", is_automatic=True, flag="all_documents_verified"),
        _transition("under_review", "additional_information", "Request Information",
                    "Request additional information from applicant", permission="request_additional_info"),
        _transition("additional_information", "under_review", "Information Provided",
                    "Applicant has provided the requested information",
                    is_automatic=True, flag="additional_info_provided"),
        _transition("under_review", "decision", "Review Complete",
                    "Application review is complete", permission="complete_review"),
        *_DECISION_TRANSITIONS,
    ],
}


GRADUATE_TEMPLATE: Dict[str, Any] = {
    "name": "Graduate Admissions",
    "description": "Standard workflow for graduate applications",
    "application_type": ApplicationType.GRADUATE.value,
    "entry_stage_id": "draft",
    "stages": [
        _DRAFT,
        _SUBMITTED,
        _document_verification([
            "transcript", "personal_statement", "recommendation_letters", "resume", "test_scores"
        ]),
        _stage(
            "department_review", "Department Review",
            "Application is being reviewed by the academic department", 4,
            notification_triggers=[_trigger("department_review", ["email", "in_app"])],
            assigned_role_id="department_reviewer"
        ),
        _stage(
            "interview", "Interview", "Applicant is scheduled for an interview", 5,
            required_actions=["complete_interview"],
            notification_triggers=[_trigger("interview_scheduled", ["email", "in_app", "sms"])],
            assigned_role_id="interview_committee"
        ),
        _stage(
            "committee_review", "Graduate Committee Review",
            "Application is being reviewed by the graduate committee", 6,
            notification_triggers=[_trigger("committee_review", ["email", "in_app"])],
            assigned_role_id="graduate_committee"
        ),
        _stage(
            "decision", "Decision", "Final decision on the application", 7,
            assigned_role_id="graduate_director"
        ),
        *_outcome_stages(8),
    ],
    "transitions": [
        *_INTAKE_TRANSITIONS,
        _transition("document_verification", "department_review", "Documents Verified",
                    "All required documents have been verified", is_automatic=True, flag="all_documents_verified"),
        _transition("department_review", "interview", "Schedule Interview",
                    "Department requests an interview with the applicant", permission="schedule_interview"),
        _transition("department_review", "committee_review", "Forward to Committee",
                    "Department forwards application to graduate committee", permission="forward_to_committee"),
        _transition("interview", "committee_review", "Interview Completed",
                    "Applicant has completed the interview", is_automatic=True, flag="interview_completed"),
        _transition("committee_review", "decision", "Review Complete",
                    "Graduate committee review is complete", permission="complete_committee_review"),
        *_DECISION_TRANSITIONS,
    ],
}


TEMPLATE_REGISTRY: Dict[ApplicationType, Dict[str, Any]] = {
    ApplicationType.UNDERGRADUATE: UNDERGRADUATE_TEMPLATE,
    ApplicationType.GRADUATE: GRADUATE_TEMPLATE,
}


def get_default_template(
    application_type: ApplicationType,
    name: Optional[str] = None,
    created_by: Optional[str] = None
) -> Optional[WorkflowSpec]:
    """
    Build a WorkflowSpec from the default template of an application type

    Returns:
        WorkflowSpec, or None if no template exists for the type
    """
    template = TEMPLATE_REGISTRY.get(ApplicationType(application_type))
    if template is None:
        return None

    spec = WorkflowSpec.model_validate(template)
    updates: Dict[str, Any] = {"created_by": created_by}
    if name:
        updates["name"] = name
    return spec.model_copy(update=updates)
