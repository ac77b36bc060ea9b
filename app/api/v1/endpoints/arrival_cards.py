"""
Arrival Card API Endpoints
Submission of arrival declarations and issuance of the arrival card PDF
"""

from typing import Any, Dict, Tuple
import logging

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.errors import SubmissionValidationError
from app.schemas.arrival_card import (
    ArrivalCardCreateResponse, ArrivalCardValidationErrorResponse, ArrivalCardErrorResponse
)
from app.services.arrival_card_workflow import ArrivalCardWorkflow, WorkflowOutcome
from app.services.document_generator import DocumentGenerator
from app.services.object_storage import ArtifactPublisher, LocalObjectStore
from app.services.record_store import SqlAlchemyRecordStore

logger = logging.getLogger(__name__)
router = APIRouter()


def get_arrival_card_workflow(db: Session = Depends(get_db)) -> ArrivalCardWorkflow:
    """Wire the workflow to the request's database session and the configured storage"""
    settings = get_settings()
    return ArrivalCardWorkflow(
        record_store=SqlAlchemyRecordStore(db),
        publisher=ArtifactPublisher(LocalObjectStore.from_settings(settings)),
        renderer=DocumentGenerator.from_settings(settings).render_arrival_card,
        card_number_digits=settings.ARRIVAL_CARD_NUMBER_DIGITS,
        max_allocation_attempts=settings.ARRIVAL_CARD_MAX_ATTEMPTS
    )


def outcome_to_response(outcome: WorkflowOutcome) -> Tuple[int, Dict[str, Any]]:
    """Map a finished workflow to (HTTP status, JSON body)"""
    if outcome.succeeded:
        return status.HTTP_200_OK, outcome.result.to_response()

    error = outcome.error
    if isinstance(error, SubmissionValidationError):
        return status.HTTP_400_BAD_REQUEST, {"success": False, "errors": error.errors}

    return status.HTTP_500_INTERNAL_SERVER_ERROR, {"success": False, "message": str(error)}


@router.post(
    "/create",
    summary="Submit Arrival Declaration",
    responses={
        200: {"model": ArrivalCardCreateResponse},
        400: {"model": ArrivalCardValidationErrorResponse},
        500: {"model": ArrivalCardErrorResponse},
    }
)
def create_arrival_card(
    payload: Any = Body(None),
    workflow: ArrivalCardWorkflow = Depends(get_arrival_card_workflow)
) -> JSONResponse:
    """
    Validate and store an arrival declaration, then issue the arrival card PDF

    Body: {"personalInfo": {...}, "tripInfo": {...}, "health": {"countries_visited": [...]}}

    - 200: issued card with profile/travel/entry rows, document id, PDF URL and card number
    - 400: validation errors keyed by section
    - 500: any failure after validation
    """
    body = payload if isinstance(payload, dict) else {}
    outcome = workflow.run(body.get("personalInfo"), body.get("tripInfo"), body.get("health"))

    status_code, content = outcome_to_response(outcome)
    if status_code == status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(f"Error issuing arrival card: {content['message']}")
    return JSONResponse(status_code=status_code, content=content)
