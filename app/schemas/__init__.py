"""
Pydantic schemas for request/response validation
"""

# Arrival card schemas
from app.schemas.arrival_card import (
    PersonalInfoCreate, TripInfoCreate, HealthDeclarationCreate, EntryFormCreate,
    ArrivalCardCreateResponse, ArrivalCardValidationErrorResponse, ArrivalCardErrorResponse
)
