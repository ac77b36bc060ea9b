"""
Submission validation for arrival declarations

Each section is validated on its own; failures are collected into one error map
keyed by section name so the client can highlight every bad field at once.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple, Type

from pydantic import BaseModel, ValidationError

from app.core.errors import SubmissionValidationError
from app.schemas.arrival_card import PersonalInfoCreate, TripInfoCreate, HealthDeclarationCreate

logger = logging.getLogger(__name__)

SECTION_FIELD = "_section"

SECTIONS: Tuple[Tuple[str, Type[BaseModel]], ...] = (
    ("personalInfo", PersonalInfoCreate),
    ("tripInfo", TripInfoCreate),
    ("health", HealthDeclarationCreate),
)


@dataclass(frozen=True)
class ValidatedSubmission:
    """Normalized sections of a valid declaration"""
    personal_info: PersonalInfoCreate
    trip_info: TripInfoCreate
    health: HealthDeclarationCreate


def _error_message(error: Dict[str, Any]) -> str:
    if error.get("type") == "value_error" and error.get("ctx", {}).get("error"):
        return str(error["ctx"]["error"])
    return error["msg"]


def flatten_field_errors(exc: ValidationError) -> Dict[str, List[str]]:
    """Map field name to its violation messages (list item errors roll up to the list field)"""
    field_errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        loc = error.get("loc") or ()
        field = str(loc[0]) if loc else SECTION_FIELD
        field_errors.setdefault(field, []).append(_error_message(error))
    return field_errors


def validate_section(raw: Any, schema: Type[BaseModel]):
    """Validate one section, returning (model, None) or (None, field_errors)"""
    if raw is None:
        return None, {SECTION_FIELD: ["Section is required"]}
    if not isinstance(raw, dict):
        return None, {SECTION_FIELD: ["Section must be an object"]}
    try:
        return schema(**raw), None
    except ValidationError as e:
        return None, flatten_field_errors(e)


def validate_submission(personal_info: Any, trip_info: Any, health: Any) -> ValidatedSubmission:
    """
    Validate the three declaration sections

    Raises:
        SubmissionValidationError: with errors keyed by every section name;
            sections that passed map to an empty dict
    """
    raw_sections = {"personalInfo": personal_info, "tripInfo": trip_info, "health": health}
    validated = {}
    errors: Dict[str, Dict[str, List[str]]] = {}
    failed = False

    for section, schema in SECTIONS:
        model, field_errors = validate_section(raw_sections[section], schema)
        validated[section] = model
        errors[section] = field_errors or {}
        failed = failed or field_errors is not None

    if failed:
        logger.info(f"Submission rejected: {sum(len(v) for v in errors.values())} invalid field(s)")
        raise SubmissionValidationError(errors)

    return ValidatedSubmission(
        personal_info=validated["personalInfo"],
        trip_info=validated["tripInfo"],
        health=validated["health"],
    )
