"""
Arrival Card Issuance Audit Trail
Structured audit events for every issuance workflow transition
"""

from typing import Any, Dict, Optional
from dataclasses import dataclass, asdict, field
import structlog

logger = structlog.get_logger()


@dataclass
class IssuanceAuditEvent:
    """Data structure for one issuance audit entry"""
    workflow_id: str
    state: str  # WorkflowState value reached (or FAILED)
    success: bool = True
    resource_type: Optional[str] = None  # PROFILE, TRAVEL_INFORMATION, ENTRY_FORM, PDF
    resource_id: Optional[str] = None
    error_message: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def dict(self):
        return asdict(self)


class IssuanceAuditService:
    """
    Writes issuance audit events to the structured log

    Events are never persisted in the database: the only tables this service
    writes are the arrival card tables themselves.
    """

    def __init__(self, event_logger=None):
        self.logger = event_logger or logger

    def log_event(self, event: IssuanceAuditEvent) -> None:
        payload = event.dict()
        details = payload.pop("details") or {}
        if event.success:
            self.logger.info("Arrival card workflow transition", **payload, **details)
        else:
            self.logger.error("Arrival card workflow failed", **payload, **details)

    def log_transition(self, workflow_id: str, state: str, resource_type: Optional[str] = None,
                       resource_id: Optional[str] = None, **details) -> None:
        self.log_event(IssuanceAuditEvent(
            workflow_id=workflow_id,
            state=state,
            resource_type=resource_type,
            resource_id=resource_id,
            details=details
        ))

    def log_failure(self, workflow_id: str, failed_in: str, error: Exception) -> None:
        self.log_event(IssuanceAuditEvent(
            workflow_id=workflow_id,
            state="FAILED",
            success=False,
            error_message=str(error),
            details={"failed_in": failed_in, "error_type": type(error).__name__}
        ))
