"""
CRUD operations for arrival card records
"""

from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.arrival_card import Profile, TravelInformation, EntryForm
from app.schemas.arrival_card import PersonalInfoCreate, TripInfoCreate, EntryFormCreate


class CRUDProfile(CRUDBase[Profile, PersonalInfoCreate]):
    """CRUD operations for traveller profiles"""
    pass


class CRUDTravelInformation(CRUDBase[TravelInformation, TripInfoCreate]):
    """CRUD operations for trip/accommodation rows"""

    def create_with_health(
        self, db: Session, *, obj_in: TripInfoCreate, countries_visited: list
    ) -> TravelInformation:
        """Insert trip details together with the health declaration countries"""
        data: Dict[str, Any] = obj_in.model_dump()
        data["countries_visited"] = list(countries_visited)
        return self.create(db, obj_in=data)


class CRUDEntryForm(CRUDBase[EntryForm, EntryFormCreate]):
    """CRUD operations for entry form linkage rows"""

    def get_by_arrival_card_no(self, db: Session, *, arrival_card_no: str) -> Optional[EntryForm]:
        return self.get_by_field(db, "arrival_card_no", arrival_card_no)


profile = CRUDProfile(Profile)
travel_information = CRUDTravelInformation(TravelInformation)
entry_form = CRUDEntryForm(EntryForm)
