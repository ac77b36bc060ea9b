"""
Arrival Card Schemas
Pydantic schemas for the three sections of an arrival declaration
(personal information, trip/accommodation, health) and the API responses
"""

from pydantic import BaseModel, Field, validator
from typing import Optional, List, Dict, Any
from datetime import date
from uuid import UUID


def _strip(v):
    return v.strip() if isinstance(v, str) else v


def _blank_to_none(v):
    """Optional free-text fields: missing, null and blank all become None"""
    if isinstance(v, str) and not v.strip():
        return None
    return v


class PersonalInfoCreate(BaseModel):
    """Personal information section"""
    family_name: str = Field(..., min_length=1, max_length=100, description="Family name/surname")
    first_name: str = Field(..., min_length=1, max_length=100, description="First/given name")
    middle_name: Optional[str] = Field(None, max_length=100)
    passport_no: str = Field(..., min_length=1, max_length=50, description="Passport number")
    selected_nationality: str = Field(..., min_length=1, max_length=100)
    occupation: str = Field(..., min_length=1, max_length=100)
    gender: str = Field(..., min_length=1, max_length=20)
    visa_no: Optional[str] = Field(None, max_length=50)
    selected_country: str = Field(..., min_length=1, max_length=100, description="Country/territory of residence")
    selected_city: str = Field(..., min_length=1, max_length=100, description="City/state of residence")
    phone_no_code: str = Field(..., min_length=1, max_length=10)
    phone_no: str = Field(..., min_length=1, max_length=30)
    date_of_birth: date

    @validator('*', pre=True)
    def strip_text_fields(cls, v):
        return _strip(v)

    @validator('middle_name', 'visa_no', pre=True)
    def optional_text_fields(cls, v):
        return _blank_to_none(v)

    @validator('phone_no_code')
    def validate_phone_code(cls, v):
        """Dialling code is stored without the leading +"""
        v = v.lstrip('+')
        if not v.isdigit():
            raise ValueError('Phone code must contain only digits')
        return v


class TripInfoCreate(BaseModel):
    """Trip and accommodation section

    Arrival leg and accommodation fields are mandatory; every departure
    field may be omitted.
    """
    # Arrival
    date_of_arrival: date
    country_boarded: str = Field(..., min_length=1, max_length=100)
    purpose_of_travel: str = Field(..., min_length=1, max_length=100)
    purpose_of_travel_other: Optional[str] = Field(None, max_length=200)
    mode_of_travel_arrival: str = Field(..., min_length=1, max_length=50)
    mode_of_transport_arrival: str = Field(..., min_length=1, max_length=50)
    mode_of_transport_arrival_other: Optional[str] = Field(None, max_length=200)
    flight_vehicle_no_arrival: str = Field(..., min_length=1, max_length=50)

    # Departure
    date_of_departure: Optional[date] = None
    mode_of_travel_departure: Optional[str] = Field(None, max_length=50)
    mode_of_transport_departure: Optional[str] = Field(None, max_length=50)
    mode_of_transport_departure_other: Optional[str] = Field(None, max_length=200)
    flight_vehicle_no_departure: Optional[str] = Field(None, max_length=50)

    # Accommodation
    type_of_accommodation: str = Field(..., min_length=1, max_length=100)
    type_other: Optional[str] = Field(None, max_length=200)
    province: str = Field(..., min_length=1, max_length=100)
    district_area: str = Field(..., min_length=1, max_length=100)
    sub_district: str = Field(..., min_length=1, max_length=100)
    post_code: str = Field(..., min_length=1, max_length=20)
    address: str = Field(..., min_length=1, max_length=500)

    @validator('*', pre=True)
    def strip_text_fields(cls, v):
        return _strip(v)

    @validator(
        'purpose_of_travel_other', 'mode_of_transport_arrival_other',
        'date_of_departure', 'mode_of_travel_departure', 'mode_of_transport_departure',
        'mode_of_transport_departure_other', 'flight_vehicle_no_departure', 'type_other',
        pre=True
    )
    def optional_fields(cls, v):
        return _blank_to_none(v)

    @validator('date_of_departure')
    def validate_departure_after_arrival(cls, v, values):
        arrival = values.get('date_of_arrival')
        if v and arrival and v < arrival:
            raise ValueError('Date of departure cannot be before date of arrival')
        return v


class HealthDeclarationCreate(BaseModel):
    """Health declaration section"""
    countries_visited: List[str] = Field(..., description="Countries visited in the past 21 days")

    @validator('countries_visited')
    def validate_countries_visited(cls, v):
        if not v:
            raise ValueError('Please select at least one country')
        cleaned = [country.strip() for country in v]
        if not all(cleaned):
            raise ValueError('Country names cannot be blank')
        return cleaned


class EntryFormCreate(BaseModel):
    """Linkage row tying a profile and trip to the issued PDF"""
    profile_id: UUID
    tr_id: UUID
    filepath: str
    qrcode_data: str
    arrival_card_no: str


class ArrivalCardCreateResponse(BaseModel):
    """Successful issuance response"""
    success: bool = True
    profile: Dict[str, Any]
    travel: Dict[str, Any]
    entry: Dict[str, Any]
    uniqueId: str
    pdfUrl: str
    publicUrl: str
    arrivalCardNo: str


class ArrivalCardValidationErrorResponse(BaseModel):
    """Response for submissions that failed validation"""
    success: bool = False
    errors: Dict[str, Dict[str, List[str]]]


class ArrivalCardErrorResponse(BaseModel):
    """Response for failures after validation"""
    success: bool = False
    message: str
