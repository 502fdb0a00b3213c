"""Domain Models - Pydantic schemas for all entities"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Union
from pydantic import (
    BaseModel, Field, ConfigDict, StrictBool, StrictFloat, StrictInt, StrictStr
)

from .enums import ApplicationType, EntityType, ValidationCode


# ============================================================================
# Condition
# ============================================================================

# Closed set of literal kinds a condition may compare against
ScalarValue = Union[StrictBool, StrictInt, StrictFloat, StrictStr]
ConditionValue = Optional[Union[ScalarValue, List[Optional[ScalarValue]]]]


class Condition(BaseModel):
    """Single comparison rule evaluated against application data"""
    model_config = ConfigDict(extra="forbid")

    field: str = Field(..., min_length=1, description="Key into the application data")
    operator: str = Field(..., min_length=1, description="Comparison operator")
    value: ConditionValue = Field(None, description="Literal to compare against")


# ============================================================================
# Stage
# ============================================================================

class NotificationTrigger(BaseModel):
    """Notification metadata forwarded to the notification dispatcher"""
    model_config = ConfigDict(extra="ignore")

    event: str = Field(..., description="Event name, e.g. stage_entry")
    recipient: Optional[str] = Field(None, description="Recipient role")
    template: str = Field(..., description="Notification template ID")
    channels: List[str] = Field(default_factory=list)


class CanvasPosition(BaseModel):
    """Editor canvas coordinates (presentation only)"""
    x: float = 0
    y: float = 0


class Stage(BaseModel):
    """Workflow stage (graph node)"""
    model_config = ConfigDict(extra="ignore")

    stage_id: str
    workflow_id: str
    name: str
    description: Optional[str] = None
    sequence: int = Field(..., ge=1, description="Ordering and layout only")
    required_documents: List[str] = Field(default_factory=list)
    required_actions: List[str] = Field(default_factory=list)
    notification_triggers: List[NotificationTrigger] = Field(default_factory=list)
    assigned_role_id: Optional[str] = None
    position: CanvasPosition = Field(default_factory=CanvasPosition)
    created_at: datetime
    updated_at: datetime


class StageSummary(BaseModel):
    """Minimal stage view attached to transitions"""
    stage_id: str
    name: str
    sequence: int


# ============================================================================
# Transition
# ============================================================================

class Transition(BaseModel):
    """Directed edge between two stages of one workflow"""
    model_config = ConfigDict(extra="ignore")

    transition_id: str
    workflow_id: str
    source_stage_id: str
    target_stage_id: str
    name: str
    description: Optional[str] = None
    conditions: List[Condition] = Field(default_factory=list, description="All must hold")
    required_permissions: List[str] = Field(default_factory=list, description="Checked by the caller")
    is_automatic: bool = False
    priority: int = Field(default=0, description="Higher priority transitions are considered first")
    created_at: datetime
    updated_at: datetime
    # Resolved on read, never persisted
    source_stage: Optional[StageSummary] = None
    target_stage: Optional[StageSummary] = None


# ============================================================================
# Workflow
# ============================================================================

class Workflow(BaseModel):
    """Workflow metadata"""
    model_config = ConfigDict(extra="ignore")

    workflow_id: str
    name: str
    description: Optional[str] = None
    application_type: ApplicationType
    is_active: bool = False
    entry_stage_id: Optional[str] = Field(None, description="Explicit entry stage")
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    version: int = Field(default=1, description="Optimistic concurrency version")


class WorkflowGraph(Workflow):
    """Fully hydrated workflow: metadata, stages by sequence, transitions"""
    stages: List[Stage] = Field(default_factory=list)
    transitions: List[Transition] = Field(default_factory=list)

    def get_stage(self, stage_id: str) -> Optional[Stage]:
        for stage in self.stages:
            if stage.stage_id == stage_id:
                return stage
        return None

    def stage_ids(self) -> set:
        return {stage.stage_id for stage in self.stages}

    def outgoing(self, stage_id: str) -> List[Transition]:
        return [t for t in self.transitions if t.source_stage_id == stage_id]

    def incoming(self, stage_id: str) -> List[Transition]:
        return [t for t in self.transitions if t.target_stage_id == stage_id]

    def get_entry_stage(self) -> Optional[Stage]:
        """Explicit entry stage if it resolves, otherwise the lowest sequence"""
        if self.entry_stage_id:
            stage = self.get_stage(self.entry_stage_id)
            if stage:
                return stage
        if not self.stages:
            return None
        return min(self.stages, key=lambda s: s.sequence)


# ============================================================================
# Graph Write Specs
# ============================================================================

class StageSpec(BaseModel):
    """Stage entry of a create/update request"""
    model_config = ConfigDict(extra="forbid")

    stage_id: Optional[str] = Field(None, description="Existing stage ID (update in place)")
    ref: Optional[str] = Field(None, description="Client-side key for a new stage")
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    sequence: int = Field(..., ge=1)
    required_documents: List[str] = Field(default_factory=list)
    required_actions: List[str] = Field(default_factory=list)
    notification_triggers: List[NotificationTrigger] = Field(default_factory=list)
    assigned_role_id: Optional[str] = None
    position: CanvasPosition = Field(default_factory=CanvasPosition)


class TransitionSpec(BaseModel):
    """Transition entry of a create/update request"""
    model_config = ConfigDict(extra="forbid")

    transition_id: Optional[str] = Field(None, description="Existing transition ID (update in place)")
    source_stage_id: str = Field(..., description="Stage ID or stage ref")
    target_stage_id: str = Field(..., description="Stage ID or stage ref")
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    conditions: List[Condition] = Field(default_factory=list)
    required_permissions: List[str] = Field(default_factory=list)
    is_automatic: bool = False
    priority: int = 0


class WorkflowSpec(BaseModel):
    """Complete workflow graph as submitted by the editor"""
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    application_type: ApplicationType
    entry_stage_id: Optional[str] = Field(None, description="Stage ID or stage ref")
    created_by: Optional[str] = None
    stages: List[StageSpec] = Field(default_factory=list)
    transitions: List[TransitionSpec] = Field(default_factory=list)


class WorkflowFilters(BaseModel):
    """Explicit workflow listing filters"""
    application_type: Optional[ApplicationType] = None
    is_active: Optional[bool] = None
    created_by: Optional[str] = None
    search: Optional[str] = None
    skip: int = Field(default=0, ge=0)
    limit: int = Field(default=50, ge=0)


# ============================================================================
# Validation
# ============================================================================

class ValidationIssue(BaseModel):
    """Single validation error or warning"""
    code: ValidationCode
    message: str
    entity_type: EntityType
    entity_id: Optional[str] = None


class ValidationResult(BaseModel):
    """Outcome of structural workflow validation"""
    is_valid: bool
    errors: List[ValidationIssue] = Field(default_factory=list)
    warnings: List[ValidationIssue] = Field(default_factory=list)


# ============================================================================
# Transition Runtime
# ============================================================================

class TransitionOutcome(BaseModel):
    """Result of a successful stage move"""
    new_stage_id: str
    transition_id: str


class StageRequirementsResult(BaseModel):
    """What an application still lacks to satisfy a stage"""
    stage_id: str
    met: bool
    missing_documents: List[str] = Field(default_factory=list)
    missing_actions: List[str] = Field(default_factory=list)
    verification_pending: bool = Field(
        default=False,
        description="Stage requires documents and documents_verified is not true"
    )


class TransitionHistoryRecord(BaseModel):
    """Stage transition history entry (append-only)"""
    model_config = ConfigDict(extra="ignore")

    history_id: str
    application_id: str
    workflow_id: Optional[str] = None
    from_stage_id: str
    to_stage_id: str
    transition_id: str
    is_automatic: bool = False
    actor_id: Optional[str] = None
    timestamp: datetime
    correlation_id: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)
