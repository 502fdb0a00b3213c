"""Workflow Repository - Atomic data access for workflow graphs

Sole mutator of Workflow, Stage and Transition documents. Every write
runs inside one DocumentStore transaction, so a failure part-way through
leaves the previous graph untouched.
"""
import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Set, Tuple

from .document_store import (
    DocumentStore, get_document_store, WORKFLOWS, STAGES, TRANSITIONS, ACTIVATION_GUARDS
)
from ..config.settings import settings
from ..domain.models import (
    Workflow, WorkflowGraph, Stage, StageSummary, Transition,
    WorkflowSpec, StageSpec, TransitionSpec, WorkflowFilters
)
from ..domain.enums import ApplicationType
from ..domain.errors import (
    ValidationError, WorkflowNotFoundError, StageNotFoundError,
    TransitionNotFoundError, ConcurrencyError, InvalidStateError
)
from ..utils.idgen import generate_workflow_id, generate_stage_id, generate_transition_id
from ..utils.logger import get_logger
from ..utils.time import utc_now, format_iso

logger = get_logger(__name__)

STAGE_ORDER = [("sequence", 1)]
TRANSITION_ORDER = [("priority", -1), ("transition_id", 1)]
WORKFLOW_ORDER = [("created_at", -1), ("workflow_id", 1)]


class WorkflowRepository:
    """Repository for workflow graph operations"""

    def __init__(self, store: Optional[DocumentStore] = None):
        self._store = store or get_document_store()

    # =========================================================================
    # Document Mapping
    # =========================================================================

    @staticmethod
    def _workflow_doc(workflow: Workflow) -> Dict[str, Any]:
        doc = workflow.model_dump(mode="json")
        doc["_id"] = workflow.workflow_id
        return doc

    @staticmethod
    def _stage_doc(stage: Stage) -> Dict[str, Any]:
        doc = stage.model_dump(mode="json")
        doc["_id"] = stage.stage_id
        return doc

    @staticmethod
    def _transition_doc(transition: Transition) -> Dict[str, Any]:
        doc = transition.model_dump(mode="json", exclude={"source_stage", "target_stage"})
        doc["_id"] = transition.transition_id
        return doc

    @staticmethod
    def _without_id(doc: Dict[str, Any]) -> Dict[str, Any]:
        doc = dict(doc)
        doc.pop("_id", None)
        return doc

    def _load_graph(self, reader, workflow_doc: Dict[str, Any]) -> WorkflowGraph:
        """Hydrate a workflow document: stages by sequence, transitions with endpoints"""
        workflow_id = workflow_doc["workflow_id"]
        stages = [
            Stage.model_validate(doc)
            for doc in reader.find(STAGES, {"workflow_id": workflow_id}, sort=STAGE_ORDER)
        ]
        summaries = {
            stage.stage_id: StageSummary(stage_id=stage.stage_id, name=stage.name, sequence=stage.sequence)
            for stage in stages
        }

        transitions = []
        for doc in reader.find(TRANSITIONS, {"workflow_id": workflow_id}, sort=TRANSITION_ORDER):
            transition = Transition.model_validate(doc)
            transition.source_stage = summaries.get(transition.source_stage_id)
            transition.target_stage = summaries.get(transition.target_stage_id)
            transitions.append(transition)

        return WorkflowGraph.model_validate({
            **workflow_doc,
            "stages": stages,
            "transitions": transitions,
        })

    # =========================================================================
    # WorkflowSpec Resolution
    # =========================================================================

    def _map_stages(
        self,
        spec: WorkflowSpec,
        existing_ids: Optional[Set[str]] = None
    ) -> Tuple[List[str], Dict[str, str]]:
        """
        Assign a stage ID to every StageSpec

        Args:
            spec: Submitted graph
            existing_ids: Stage IDs of the workflow being updated; None on create,
                where a supplied stage_id only acts as a client-side key

        Returns:
            (assigned IDs in spec order, key -> stage ID map for refs and IDs)
        """
        sequences = [stage.sequence for stage in spec.stages]
        duplicates = sorted({seq for seq in sequences if sequences.count(seq) > 1})
        if duplicates:
            raise ValidationError(
                "Stage sequence numbers must be unique within a workflow",
                details={"duplicate_sequences": duplicates}
            )

        assigned: List[str] = []
        key_map: Dict[str, str] = {}

        for stage_spec in spec.stages:
            if existing_ids is not None and stage_spec.stage_id:
                if stage_spec.stage_id not in existing_ids:
                    raise ValidationError(
                        f"Stage {stage_spec.stage_id} does not belong to this workflow",
                        details={"stage_id": stage_spec.stage_id}
                    )
                stage_id = stage_spec.stage_id
            else:
                stage_id = generate_stage_id()

            if stage_id in assigned:
                raise ValidationError(
                    f"Stage {stage_id} appears more than once",
                    details={"stage_id": stage_id}
                )
            assigned.append(stage_id)

            for key in (stage_spec.stage_id, stage_spec.ref):
                if key is None:
                    continue
                if key_map.get(key, stage_id) != stage_id:
                    raise ValidationError(
                        f"Stage reference '{key}' is declared more than once",
                        details={"ref": key}
                    )
                key_map[key] = stage_id

        return assigned, key_map

    def _resolve_transition(
        self,
        transition_spec: TransitionSpec,
        key_map: Dict[str, str]
    ) -> Tuple[str, str]:
        """Resolve both endpoints of a TransitionSpec to stage IDs"""
        endpoints = []
        for side, key in (("source", transition_spec.source_stage_id),
                          ("target", transition_spec.target_stage_id)):
            stage_id = key_map.get(key)
            if stage_id is None:
                raise ValidationError(
                    f"Transition '{transition_spec.name}' references unknown {side} stage '{key}'",
                    details={"transition": transition_spec.name, "side": side, "stage_ref": key}
                )
            endpoints.append(stage_id)

        source_id, target_id = endpoints
        if source_id == target_id:
            raise ValidationError(
                f"Transition '{transition_spec.name}' must connect two different stages",
                details={"transition": transition_spec.name, "stage_id": source_id}
            )
        return source_id, target_id

    def _resolve_entry_stage(self, spec: WorkflowSpec, key_map: Dict[str, str]) -> Optional[str]:
        if spec.entry_stage_id is None:
            return None
        stage_id = key_map.get(spec.entry_stage_id)
        if stage_id is None:
            raise ValidationError(
                f"Entry stage '{spec.entry_stage_id}' is not a stage of this workflow",
                details={"entry_stage_id": spec.entry_stage_id}
            )
        return stage_id

    @staticmethod
    def _build_stage(
        stage_id: str,
        workflow_id: str,
        stage_spec: StageSpec,
        created_at: datetime,
        now: datetime
    ) -> Stage:
        return Stage(
            stage_id=stage_id,
            workflow_id=workflow_id,
            created_at=created_at,
            updated_at=now,
            **stage_spec.model_dump(exclude={"stage_id", "ref"})
        )

    @staticmethod
    def _build_transition(
        transition_id: str,
        workflow_id: str,
        transition_spec: TransitionSpec,
        endpoints: Tuple[str, str],
        created_at: datetime,
        now: datetime
    ) -> Transition:
        source_id, target_id = endpoints
        data = transition_spec.model_dump(exclude={"transition_id", "source_stage_id", "target_stage_id"})
        return Transition(
            transition_id=transition_id,
            workflow_id=workflow_id,
            source_stage_id=source_id,
            target_stage_id=target_id,
            created_at=created_at,
            updated_at=now,
            **data
        )

    # =========================================================================
    # Graph Writes
    # =========================================================================

    def create_workflow(self, spec: WorkflowSpec) -> WorkflowGraph:
        """
        Create a workflow with its stages and transitions in one transaction

        New workflows are always inactive.

        Raises:
            ValidationError: Malformed WorkflowSpec (nothing is written)
            PersistenceError: Store failure (rolled back)
        """
        now = utc_now()
        workflow_id = generate_workflow_id()

        assigned, key_map = self._map_stages(spec)
        stages = [
            self._build_stage(stage_id, workflow_id, stage_spec, now, now)
            for stage_id, stage_spec in zip(assigned, spec.stages)
        ]
        transitions = [
            self._build_transition(
                generate_transition_id(), workflow_id, transition_spec,
                self._resolve_transition(transition_spec, key_map), now, now
            )
            for transition_spec in spec.transitions
        ]
        workflow = Workflow(
            workflow_id=workflow_id,
            name=spec.name,
            description=spec.description,
            application_type=spec.application_type,
            is_active=False,
            entry_stage_id=self._resolve_entry_stage(spec, key_map),
            created_by=spec.created_by,
            created_at=now,
            updated_at=now,
            version=1,
        )

        with self._store.transaction() as uow:
            uow.insert_many(WORKFLOWS, [self._workflow_doc(workflow)])
            uow.insert_many(STAGES, [self._stage_doc(stage) for stage in stages])
            uow.insert_many(TRANSITIONS, [self._transition_doc(t) for t in transitions])

        logger.info(
            f"Created workflow {workflow_id} with {len(stages)} stages and {len(transitions)} transitions",
            extra={"workflow_id": workflow_id, "application_type": spec.application_type.value}
        )
        return self.get_workflow_or_raise(workflow_id)

    def update_workflow(
        self,
        workflow_id: str,
        spec: WorkflowSpec,
        expected_version: Optional[int] = None
    ) -> WorkflowGraph:
        """
        Replace a workflow graph by diff-upsert

        Entries carrying an existing ID are updated in place, entries without
        one are created, existing entries missing from the WorkflowSpec are deleted
        together with every transition touching a deleted stage.

        Args:
            workflow_id: Workflow ID
            spec: Complete new graph
            expected_version: Expected version for optimistic lock

        Raises:
            WorkflowNotFoundError, ValidationError, ConcurrencyError, PersistenceError
            InvalidStateError: Active workflow whose application type would change
        """
        now = utc_now()

        with self._store.transaction() as uow:
            current = uow.find_one(WORKFLOWS, {"workflow_id": workflow_id})
            if current is None:
                raise WorkflowNotFoundError(f"Workflow {workflow_id} not found")

            current_version = current.get("version", 1)
            if expected_version is not None and current_version != expected_version:
                raise ConcurrencyError(
                    f"Workflow {workflow_id} was modified. Please refresh and try again.",
                    details={"expected_version": expected_version, "current_version": current_version}
                )

            if current.get("is_active") and current["application_type"] != spec.application_type.value:
                raise InvalidStateError(
                    "Cannot change the application type of an active workflow. Deactivate it first.",
                    details={
                        "workflow_id": workflow_id,
                        "application_type": current["application_type"],
                        "requested_application_type": spec.application_type.value,
                    }
                )

            existing_stages = {
                doc["stage_id"]: doc for doc in uow.find(STAGES, {"workflow_id": workflow_id})
            }
            existing_transitions = {
                doc["transition_id"]: doc for doc in uow.find(TRANSITIONS, {"workflow_id": workflow_id})
            }

            assigned, key_map = self._map_stages(spec, set(existing_stages))
            removed_stage_ids = [sid for sid in existing_stages if sid not in set(assigned)]

            # Stages
            new_stage_docs = []
            for stage_id, stage_spec in zip(assigned, spec.stages):
                previous = existing_stages.get(stage_id)
                created_at = previous["created_at"] if previous else now
                stage = self._build_stage(stage_id, workflow_id, stage_spec, created_at, now)
                if previous:
                    uow.update_one(STAGES, {"stage_id": stage_id}, self._without_id(self._stage_doc(stage)))
                else:
                    new_stage_docs.append(self._stage_doc(stage))

            # Transitions
            kept_transition_ids: Set[str] = set()
            new_transition_docs = []
            for transition_spec in spec.transitions:
                if (transition_spec.source_stage_id in removed_stage_ids
                        or transition_spec.target_stage_id in removed_stage_ids):
                    logger.warning(
                        f"Dropping transition '{transition_spec.name}' that touches a removed stage",
                        extra={"workflow_id": workflow_id, "transition_id": transition_spec.transition_id}
                    )
                    continue

                endpoints = self._resolve_transition(transition_spec, key_map)
                transition_id = transition_spec.transition_id
                if transition_id is not None:
                    if transition_id not in existing_transitions:
                        raise ValidationError(
                            f"Transition {transition_id} does not belong to this workflow",
                            details={"transition_id": transition_id}
                        )
                    if transition_id in kept_transition_ids:
                        raise ValidationError(
                            f"Transition {transition_id} appears more than once",
                            details={"transition_id": transition_id}
                        )
                    kept_transition_ids.add(transition_id)
                    transition = self._build_transition(
                        transition_id, workflow_id, transition_spec, endpoints,
                        existing_transitions[transition_id]["created_at"], now
                    )
                    uow.update_one(
                        TRANSITIONS, {"transition_id": transition_id},
                        self._without_id(self._transition_doc(transition))
                    )
                else:
                    transition = self._build_transition(
                        generate_transition_id(), workflow_id, transition_spec, endpoints, now, now
                    )
                    new_transition_docs.append(self._transition_doc(transition))

            removed_transition_ids = [tid for tid in existing_transitions if tid not in kept_transition_ids]
            deleted_transitions = 0
            if removed_transition_ids:
                deleted_transitions += uow.delete_many(
                    TRANSITIONS, {"transition_id": {"$in": removed_transition_ids}}
                )
            if removed_stage_ids:
                deleted_transitions += uow.delete_many(TRANSITIONS, {"$or": [
                    {"source_stage_id": {"$in": removed_stage_ids}},
                    {"target_stage_id": {"$in": removed_stage_ids}},
                ]})
                uow.delete_many(STAGES, {"stage_id": {"$in": removed_stage_ids}})

            uow.insert_many(STAGES, new_stage_docs)
            uow.insert_many(TRANSITIONS, new_transition_docs)

            entry_stage_id = None
            if spec.entry_stage_id not in removed_stage_ids:
                entry_stage_id = self._resolve_entry_stage(spec, key_map)

            matched = uow.update_one(
                WORKFLOWS,
                {"workflow_id": workflow_id, "version": current_version},
                {
                    "name": spec.name,
                    "description": spec.description,
                    "application_type": spec.application_type.value,
                    "entry_stage_id": entry_stage_id,
                    "updated_at": format_iso(now),
                    "version": current_version + 1,
                }
            )
            if matched == 0:
                raise ConcurrencyError(
                    f"Workflow {workflow_id} was modified. Please refresh and try again.",
                    details={"expected_version": current_version}
                )

        logger.info(
            f"Updated workflow {workflow_id}: {len(new_stage_docs)} stages added, "
            f"{len(removed_stage_ids)} removed, {deleted_transitions} transitions deleted",
            extra={"workflow_id": workflow_id}
        )
        return self.get_workflow_or_raise(workflow_id)

    def delete_workflow(self, workflow_id: str) -> None:
        """
        Delete a workflow, cascading explicitly to transitions then stages

        Raises:
            WorkflowNotFoundError: If the workflow does not exist
        """
        with self._store.transaction() as uow:
            if uow.find_one(WORKFLOWS, {"workflow_id": workflow_id}) is None:
                raise WorkflowNotFoundError(f"Workflow {workflow_id} not found")

            stage_ids = [doc["stage_id"] for doc in uow.find(STAGES, {"workflow_id": workflow_id})]
            deleted_transitions = uow.delete_many(TRANSITIONS, {"$or": [
                {"workflow_id": workflow_id},
                {"source_stage_id": {"$in": stage_ids}},
                {"target_stage_id": {"$in": stage_ids}},
            ]})
            deleted_stages = uow.delete_many(STAGES, {"workflow_id": workflow_id})
            uow.delete_many(WORKFLOWS, {"workflow_id": workflow_id})

        logger.info(
            f"Deleted workflow {workflow_id} ({deleted_stages} stages, {deleted_transitions} transitions)",
            extra={"workflow_id": workflow_id}
        )

    def duplicate_workflow(
        self,
        workflow_id: str,
        new_name: str,
        created_by: Optional[str] = None
    ) -> WorkflowGraph:
        """
        Deep-copy a workflow graph with fresh IDs

        Stage IDs are remapped old -> new and transitions are rewritten through
        that map. The copy is always inactive. Transitions whose endpoints do
        not map are skipped, or rejected when duplicate_dangling_policy is "error".
        """
        now = utc_now()
        new_workflow_id = generate_workflow_id()

        with self._store.transaction() as uow:
            source_doc = uow.find_one(WORKFLOWS, {"workflow_id": workflow_id})
            if source_doc is None:
                raise WorkflowNotFoundError(f"Workflow {workflow_id} not found")
            source = self._load_graph(uow, source_doc)

            stage_map: Dict[str, str] = {}
            stage_docs = []
            for stage in source.stages:
                new_stage = stage.model_copy(update={
                    "stage_id": generate_stage_id(),
                    "workflow_id": new_workflow_id,
                    "created_at": now,
                    "updated_at": now,
                })
                stage_map[stage.stage_id] = new_stage.stage_id
                stage_docs.append(self._stage_doc(new_stage))

            transition_docs = []
            for transition in source.transitions:
                source_id = stage_map.get(transition.source_stage_id)
                target_id = stage_map.get(transition.target_stage_id)
                if source_id is None or target_id is None:
                    if settings.duplicate_dangling_policy == "error":
                        raise ValidationError(
                            f"Transition {transition.transition_id} references a stage outside workflow {workflow_id}",
                            details={"transition_id": transition.transition_id}
                        )
                    logger.warning(
                        f"Skipping dangling transition {transition.transition_id} during duplication",
                        extra={"workflow_id": workflow_id, "transition_id": transition.transition_id}
                    )
                    continue

                new_transition = transition.model_copy(deep=True, update={
                    "transition_id": generate_transition_id(),
                    "workflow_id": new_workflow_id,
                    "source_stage_id": source_id,
                    "target_stage_id": target_id,
                    "created_at": now,
                    "updated_at": now,
                })
                transition_docs.append(self._transition_doc(new_transition))

            workflow = Workflow(
                workflow_id=new_workflow_id,
                name=new_name,
                description=source.description,
                application_type=source.application_type,
                is_active=False,
                entry_stage_id=stage_map.get(source.entry_stage_id) if source.entry_stage_id else None,
                created_by=created_by or source.created_by,
                created_at=now,
                updated_at=now,
                version=1,
            )

            uow.insert_many(WORKFLOWS, [self._workflow_doc(workflow)])
            uow.insert_many(STAGES, stage_docs)
            uow.insert_many(TRANSITIONS, transition_docs)

        logger.info(
            f"Duplicated workflow {workflow_id} as {new_workflow_id}",
            extra={"workflow_id": new_workflow_id}
        )
        return self.get_workflow_or_raise(new_workflow_id)

    def set_active(
        self,
        workflow_id: str,
        is_active: bool,
        deactivate_others: bool = False,
        expected_version: Optional[int] = None
    ) -> Workflow:
        """
        Set the activation flag

        With deactivate_others, every other active workflow of the same
        application type is deactivated in the same transaction. Activation
        also writes the type's guard document, so two activations of one
        application type running concurrently conflict and one is rolled back.

        Raises:
            WorkflowNotFoundError: If the workflow does not exist
            ConcurrencyError: If the graph changed since expected_version
        """
        now = format_iso(utc_now())

        with self._store.transaction() as uow:
            doc = uow.find_one(WORKFLOWS, {"workflow_id": workflow_id})
            if doc is None:
                raise WorkflowNotFoundError(f"Workflow {workflow_id} not found")

            current_version = doc.get("version", 1)
            if expected_version is not None and current_version != expected_version:
                raise ConcurrencyError(
                    f"Workflow {workflow_id} was modified. Please refresh and try again.",
                    details={"expected_version": expected_version, "current_version": current_version}
                )

            if is_active:
                uow.update_one(
                    ACTIVATION_GUARDS,
                    {"_id": doc["application_type"]},
                    {"workflow_id": workflow_id, "updated_at": now},
                    upsert=True
                )

            if is_active and deactivate_others:
                others = uow.find(WORKFLOWS, {
                    "application_type": doc["application_type"],
                    "is_active": True,
                    "workflow_id": {"$ne": workflow_id},
                })
                for other in others:
                    uow.update_one(
                        WORKFLOWS, {"workflow_id": other["workflow_id"]},
                        {"is_active": False, "updated_at": now}
                    )
                    logger.info(
                        f"Deactivated workflow {other['workflow_id']}",
                        extra={"workflow_id": other["workflow_id"]}
                    )

            uow.update_one(WORKFLOWS, {"workflow_id": workflow_id}, {"is_active": is_active, "updated_at": now})
            doc.update({"is_active": is_active, "updated_at": now})

        logger.info(
            f"Workflow {workflow_id} {'activated' if is_active else 'deactivated'}",
            extra={"workflow_id": workflow_id}
        )
        return Workflow.model_validate(doc)

    # =========================================================================
    # Graph Reads
    # =========================================================================

    def get_workflow_by_id(self, workflow_id: str) -> Optional[WorkflowGraph]:
        """Get hydrated workflow by ID"""
        doc = self._store.find_one(WORKFLOWS, {"workflow_id": workflow_id})
        if doc is None:
            return None
        return self._load_graph(self._store, doc)

    def get_workflow_or_raise(self, workflow_id: str) -> WorkflowGraph:
        """Get workflow by ID or raise error"""
        workflow = self.get_workflow_by_id(workflow_id)
        if not workflow:
            raise WorkflowNotFoundError(f"Workflow {workflow_id} not found")
        return workflow

    def get_workflows_by_type(self, application_type: ApplicationType) -> List[WorkflowGraph]:
        """All workflows of one application type, newest first"""
        docs = self._store.find(
            WORKFLOWS, {"application_type": ApplicationType(application_type).value}, sort=WORKFLOW_ORDER
        )
        return [self._load_graph(self._store, doc) for doc in docs]

    def get_active_workflow_for_type(self, application_type: ApplicationType) -> Optional[WorkflowGraph]:
        """The active workflow of an application type, if any"""
        docs = self._store.find(
            WORKFLOWS,
            {"application_type": ApplicationType(application_type).value, "is_active": True},
            sort=WORKFLOW_ORDER,
            limit=1
        )
        if not docs:
            return None
        return self._load_graph(self._store, docs[0])

    def _filters_query(self, filters: WorkflowFilters) -> Dict[str, Any]:
        query: Dict[str, Any] = {}
        if filters.application_type:
            query["application_type"] = filters.application_type.value
        if filters.is_active is not None:
            query["is_active"] = filters.is_active
        if filters.created_by:
            query["created_by"] = filters.created_by
        if filters.search:
            pattern = re.escape(filters.search)
            query["$or"] = [
                {"name": {"$regex": pattern, "$options": "i"}},
                {"description": {"$regex": pattern, "$options": "i"}}
            ]
        return query

    def get_all_workflows(self, filters: Optional[WorkflowFilters] = None) -> List[WorkflowGraph]:
        """List workflows with explicit filters, newest first"""
        filters = filters or WorkflowFilters()
        docs = self._store.find(
            WORKFLOWS,
            self._filters_query(filters),
            sort=WORKFLOW_ORDER,
            skip=filters.skip,
            limit=filters.limit
        )
        return [self._load_graph(self._store, doc) for doc in docs]

    def count_workflows(self, filters: Optional[WorkflowFilters] = None) -> int:
        """Count workflows matching filters (pagination ignored)"""
        return self._store.count(WORKFLOWS, self._filters_query(filters or WorkflowFilters()))

    # =========================================================================
    # Stage & Transition Reads
    # =========================================================================

    def get_stage(self, stage_id: str) -> Optional[Stage]:
        """Get stage by ID"""
        doc = self._store.find_one(STAGES, {"stage_id": stage_id})
        return Stage.model_validate(doc) if doc else None

    def get_stage_or_raise(self, stage_id: str) -> Stage:
        """Get stage by ID or raise error"""
        stage = self.get_stage(stage_id)
        if not stage:
            raise StageNotFoundError(f"Stage {stage_id} not found")
        return stage

    def get_stage_ids(self, workflow_id: str) -> Set[str]:
        """IDs of all stages owned by a workflow"""
        return {doc["stage_id"] for doc in self._store.find(STAGES, {"workflow_id": workflow_id})}

    def get_transition(self, transition_id: str) -> Optional[Transition]:
        """Get transition by ID"""
        doc = self._store.find_one(TRANSITIONS, {"transition_id": transition_id})
        return Transition.model_validate(doc) if doc else None

    def get_transition_or_raise(self, transition_id: str) -> Transition:
        """Get transition by ID or raise error"""
        transition = self.get_transition(transition_id)
        if not transition:
            raise TransitionNotFoundError(f"Transition {transition_id} not found")
        return transition

    def get_transitions_from_stage(self, stage_id: str) -> List[Transition]:
        """Outgoing transitions of a stage, by priority desc then transition ID"""
        docs = self._store.find(TRANSITIONS, {"source_stage_id": stage_id}, sort=TRANSITION_ORDER)
        return [Transition.model_validate(doc) for doc in docs]
