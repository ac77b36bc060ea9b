"""
CRUD operations for the arrival card service
"""

from app.crud.base import CRUDBase
from app.crud.crud_arrival_card import CRUDProfile, CRUDTravelInformation, CRUDEntryForm

# Import CRUD instances
from app.crud.crud_arrival_card import profile, travel_information, entry_form
