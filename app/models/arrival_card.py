"""
Arrival Card Models
Database models for traveller profiles, trip/accommodation details and the
entry form row that links them to an issued PDF
"""

from sqlalchemy import Column, String, Date, ForeignKey, JSON
from sqlalchemy.dialects.postgresql import UUID

from app.core.config import MAX_ARRIVAL_CARD_NUMBER_DIGITS
from app.models.base import BaseModel


class Profile(BaseModel):
    """
    Personal information of the traveller as declared on the form
    """
    __tablename__ = "profiles"

    # Names
    family_name = Column(String(100), nullable=False, comment="Family name/surname")
    first_name = Column(String(100), nullable=False, comment="First/given name")
    middle_name = Column(String(100), nullable=True, comment="Middle name(s)")

    # Travel document
    passport_no = Column(String(50), nullable=False, index=True, comment="Passport number")
    selected_nationality = Column(String(100), nullable=False, comment="Nationality/citizenship")
    visa_no = Column(String(50), nullable=True, comment="Visa number if any")

    occupation = Column(String(100), nullable=False)
    gender = Column(String(20), nullable=False)

    # Residence
    selected_country = Column(String(100), nullable=False, comment="Country/territory of residence")
    selected_city = Column(String(100), nullable=False, comment="City/state of residence")

    # Contact
    phone_no_code = Column(String(10), nullable=False, comment="International dialling code without +")
    phone_no = Column(String(30), nullable=False)

    date_of_birth = Column(Date, nullable=False)


class TravelInformation(BaseModel):
    """
    Arrival/departure legs, accommodation and the health declaration
    """
    __tablename__ = "travel_information"

    # Arrival leg
    date_of_arrival = Column(Date, nullable=False)
    country_boarded = Column(String(100), nullable=False)
    purpose_of_travel = Column(String(100), nullable=False)
    purpose_of_travel_other = Column(String(200), nullable=True)
    mode_of_travel_arrival = Column(String(50), nullable=False)
    mode_of_transport_arrival = Column(String(50), nullable=False)
    mode_of_transport_arrival_other = Column(String(200), nullable=True)
    flight_vehicle_no_arrival = Column(String(50), nullable=False)

    # Departure leg - nullable, travellers may not have booked yet
    date_of_departure = Column(Date, nullable=True)
    mode_of_travel_departure = Column(String(50), nullable=True)
    mode_of_transport_departure = Column(String(50), nullable=True)
    mode_of_transport_departure_other = Column(String(200), nullable=True)
    flight_vehicle_no_departure = Column(String(50), nullable=True)

    # Accommodation
    type_of_accommodation = Column(String(100), nullable=False)
    type_other = Column(String(200), nullable=True)
    province = Column(String(100), nullable=False)
    district_area = Column(String(100), nullable=False)
    sub_district = Column(String(100), nullable=False)
    post_code = Column(String(20), nullable=False)
    address = Column(String(500), nullable=False)

    # Health declaration
    countries_visited = Column(JSON, nullable=False, comment="Countries visited in the past 21 days, in declared order")


class EntryForm(BaseModel):
    """
    Linkage row written last; its existence marks a completed submission
    """
    __tablename__ = "entry_form"

    profile_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True)
    tr_id = Column(UUID(as_uuid=True), ForeignKey("travel_information.id"), nullable=False, index=True)
    filepath = Column(String(500), nullable=False, comment="Public URL of the issued PDF")
    qrcode_data = Column(String(36), nullable=False, unique=True, comment="Document identifier encoded in the QR code")
    arrival_card_no = Column(String(MAX_ARRIVAL_CARD_NUMBER_DIGITS), nullable=False, unique=True, index=True, comment="Public arrival card number")
