"""
Arrival Card Issuance Workflow

Linear state machine for one submission:

RECEIVED → VALIDATED → PERSONAL_PERSISTED → TRIP_PERSISTED →
CARD_NUMBER_ALLOCATED → RENDERED → PUBLISHED → LINKAGE_PERSISTED → COMPLETED

Any failing transition ends in FAILED carrying the error. There is no resume
and no rollback: rows inserted before the failure stay in the database, and a
PDF uploaded before a failed entry_form insert stays in storage. Only the
entry_form row marks a completed issuance.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from app.core.errors import ArrivalCardError
from app.schemas.arrival_card import EntryFormCreate
from app.services.arrival_card_number import ArrivalCardNumberAllocator, DEFAULT_DIGITS, DEFAULT_MAX_ATTEMPTS
from app.services.audit_service import IssuanceAuditService
from app.services.document_generator import ArrivalCardDocumentData
from app.services.object_storage import ArtifactPublisher, PublishedArtifact
from app.services.record_store import ArrivalRecordStore
from app.services.submission_validator import ValidatedSubmission, validate_submission

logger = logging.getLogger(__name__)

Renderer = Callable[[ArrivalCardDocumentData, Optional[datetime]], bytes]


class WorkflowState(str, Enum):
    RECEIVED = "RECEIVED"
    VALIDATED = "VALIDATED"
    PERSONAL_PERSISTED = "PERSONAL_PERSISTED"
    TRIP_PERSISTED = "TRIP_PERSISTED"
    CARD_NUMBER_ALLOCATED = "CARD_NUMBER_ALLOCATED"
    RENDERED = "RENDERED"
    PUBLISHED = "PUBLISHED"
    LINKAGE_PERSISTED = "LINKAGE_PERSISTED"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


@dataclass
class WorkflowContext:
    """In-memory state of one submission, owned by a single workflow run"""
    workflow_id: str
    personal_info: Any
    trip_info: Any
    health: Any
    submission: Optional[ValidatedSubmission] = None
    profile: Any = None
    travel: Any = None
    arrival_card_no: Optional[str] = None
    unique_id: Optional[str] = None
    pdf_data: Optional[bytes] = None
    artifact: Optional[PublishedArtifact] = None
    entry: Any = None


@dataclass(frozen=True)
class IssuanceResult:
    profile: Any
    travel: Any
    entry: Any
    unique_id: str
    pdf_url: str
    arrival_card_no: str

    def to_response(self) -> Dict[str, Any]:
        return {
            "success": True,
            "profile": self.profile.to_dict(),
            "travel": self.travel.to_dict(),
            "entry": self.entry.to_dict(),
            "uniqueId": self.unique_id,
            "pdfUrl": self.pdf_url,
            "publicUrl": self.pdf_url,
            "arrivalCardNo": self.arrival_card_no,
        }


@dataclass
class WorkflowOutcome:
    state: WorkflowState
    history: List[WorkflowState] = field(default_factory=list)
    result: Optional[IssuanceResult] = None
    error: Optional[Exception] = None
    failed_in: Optional[WorkflowState] = None  # last state reached before the failure

    @property
    def succeeded(self) -> bool:
        return self.state == WorkflowState.COMPLETED


class ArrivalCardWorkflow:
    """
    Runs the issuance workflow against injected collaborators

    Args:
        record_store: profiles/travel_information/entry_form persistence
        publisher: uploads the PDF and resolves its public URL
        renderer: builds the PDF bytes from the document data
        card_number_digits / max_allocation_attempts: allocator bounds
        clock: source of the transaction date printed on the PDF
        id_factory: source of document identifiers
    """

    def __init__(
        self,
        record_store: ArrivalRecordStore,
        publisher: ArtifactPublisher,
        renderer: Renderer,
        card_number_digits: int = DEFAULT_DIGITS,
        max_allocation_attempts: int = DEFAULT_MAX_ATTEMPTS,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
        audit: Optional[IssuanceAuditService] = None,
        rng=None
    ):
        self.record_store = record_store
        self.publisher = publisher
        self.renderer = renderer
        self.clock = clock
        self.id_factory = id_factory
        self.audit = audit or IssuanceAuditService()
        self.allocator = ArrivalCardNumberAllocator(
            is_taken=self._arrival_card_no_taken,
            digits=card_number_digits,
            max_attempts=max_allocation_attempts,
            rng=rng
        )
        self.transitions = (
            (WorkflowState.VALIDATED, self._validate),
            (WorkflowState.PERSONAL_PERSISTED, self._persist_profile),
            (WorkflowState.TRIP_PERSISTED, self._persist_travel_information),
            (WorkflowState.CARD_NUMBER_ALLOCATED, self._allocate_card_number),
            (WorkflowState.RENDERED, self._render_document),
            (WorkflowState.PUBLISHED, self._publish_document),
            (WorkflowState.LINKAGE_PERSISTED, self._persist_entry_form),
            (WorkflowState.COMPLETED, self._complete),
        )

    def _arrival_card_no_taken(self, candidate: str) -> bool:
        return self.record_store.find_entry_by_arrival_card_no(candidate) is not None

    # Transitions

    def _validate(self, ctx: WorkflowContext):
        ctx.submission = validate_submission(ctx.personal_info, ctx.trip_info, ctx.health)

    def _persist_profile(self, ctx: WorkflowContext):
        ctx.profile = self.record_store.insert_profile(ctx.submission.personal_info)
        return "PROFILE", ctx.profile.id

    def _persist_travel_information(self, ctx: WorkflowContext):
        ctx.travel = self.record_store.insert_travel_information(
            ctx.submission.trip_info,
            ctx.submission.health.countries_visited
        )
        return "TRAVEL_INFORMATION", ctx.travel.id

    def _allocate_card_number(self, ctx: WorkflowContext):
        ctx.arrival_card_no = self.allocator.allocate()

    def _render_document(self, ctx: WorkflowContext):
        ctx.unique_id = self.id_factory()
        data = ArrivalCardDocumentData(
            personal_info=ctx.submission.personal_info,
            trip_info=ctx.submission.trip_info,
            countries_visited=ctx.submission.health.countries_visited,
            arrival_card_no=ctx.arrival_card_no,
            unique_id=ctx.unique_id
        )
        ctx.pdf_data = self.renderer(data, self.clock())
        return "PDF", ctx.unique_id

    def _publish_document(self, ctx: WorkflowContext):
        ctx.artifact = self.publisher.publish(ctx.unique_id, ctx.pdf_data)
        return "PDF", ctx.artifact.key

    def _persist_entry_form(self, ctx: WorkflowContext):
        ctx.entry = self.record_store.insert_entry_form(EntryFormCreate(
            profile_id=ctx.profile.id,
            tr_id=ctx.travel.id,
            filepath=ctx.artifact.public_url,
            qrcode_data=ctx.unique_id,
            arrival_card_no=ctx.arrival_card_no
        ))
        return "ENTRY_FORM", ctx.entry.id

    def _complete(self, ctx: WorkflowContext):
        return None

    # Driver

    def run(self, personal_info: Any, trip_info: Any, health: Any) -> WorkflowOutcome:
        ctx = WorkflowContext(
            workflow_id=str(uuid.uuid4()),
            personal_info=personal_info,
            trip_info=trip_info,
            health=health
        )
        state = WorkflowState.RECEIVED
        history = [state]

        for next_state, transition in self.transitions:
            try:
                resource = transition(ctx)
            except Exception as e:
                if isinstance(e, ArrivalCardError):
                    logger.warning(f"Workflow {ctx.workflow_id} failed after {state.value}: {e.message}")
                else:
                    logger.error(f"Workflow {ctx.workflow_id} failed after {state.value}: {e}", exc_info=True)
                self.audit.log_failure(ctx.workflow_id, state.value, e)
                history.append(WorkflowState.FAILED)
                return WorkflowOutcome(
                    state=WorkflowState.FAILED,
                    history=history,
                    error=e,
                    failed_in=state
                )

            state = next_state
            history.append(state)
            resource_type, resource_id = resource if resource else (None, None)
            self.audit.log_transition(
                ctx.workflow_id,
                state.value,
                resource_type=resource_type,
                resource_id=str(resource_id) if resource_id is not None else None
            )

        logger.info(f"Issued arrival card {ctx.arrival_card_no} (document {ctx.unique_id})")
        return WorkflowOutcome(
            state=state,
            history=history,
            result=IssuanceResult(
                profile=ctx.profile,
                travel=ctx.travel,
                entry=ctx.entry,
                unique_id=ctx.unique_id,
                pdf_url=ctx.artifact.public_url,
                arrival_card_no=ctx.arrival_card_no
            )
        )
