"""
Database models for the arrival card service
"""

from app.models.base import Base, BaseModel
from app.models.arrival_card import Profile, TravelInformation, EntryForm

__all__ = [
    "Base",
    "BaseModel",
    "Profile",
    "TravelInformation",
    "EntryForm",
]
