"""
Record store for arrival card submissions

The workflow depends on the ArrivalRecordStore protocol only; the SQLAlchemy
implementation below is wired in by the API layer and replaced by an
in-memory fake in tests.
"""

import logging
from typing import Any, List, Optional, Protocol
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import PersistenceError
from app.crud import profile as crud_profile
from app.crud import travel_information as crud_travel_information
from app.crud import entry_form as crud_entry_form
from app.schemas.arrival_card import PersonalInfoCreate, TripInfoCreate, EntryFormCreate

logger = logging.getLogger(__name__)


class StoredRecord(Protocol):
    id: UUID

    def to_dict(self) -> dict: ...


class ArrivalRecordStore(Protocol):
    """Insert-with-identity and exact-match lookup for the three tables"""

    def insert_profile(self, personal_info: PersonalInfoCreate) -> StoredRecord: ...

    def insert_travel_information(self, trip_info: TripInfoCreate, countries_visited: List[str]) -> StoredRecord: ...

    def insert_entry_form(self, entry: EntryFormCreate) -> StoredRecord: ...

    def find_entry_by_arrival_card_no(self, arrival_card_no: str) -> Optional[StoredRecord]: ...


def _storage_message(e: SQLAlchemyError) -> str:
    original = getattr(e, "orig", None)
    return str(original) if original is not None else str(e)


class SqlAlchemyRecordStore:
    """ArrivalRecordStore backed by a SQLAlchemy session; every insert commits on its own"""

    def __init__(self, db: Session):
        self.db = db

    def _run(self, operation: str, func, *args, **kwargs) -> Any:
        try:
            return func(self.db, *args, **kwargs)
        except SQLAlchemyError as e:
            self.db.rollback()
            message = _storage_message(e)
            logger.error(f"Database error during {operation}: {message}")
            raise PersistenceError(message)

    def insert_profile(self, personal_info: PersonalInfoCreate):
        row = self._run("profile insert", crud_profile.create, obj_in=personal_info)
        logger.info(f"Inserted profile {row.id}")
        return row

    def insert_travel_information(self, trip_info: TripInfoCreate, countries_visited: List[str]):
        row = self._run(
            "travel information insert",
            crud_travel_information.create_with_health,
            obj_in=trip_info,
            countries_visited=countries_visited
        )
        logger.info(f"Inserted travel information {row.id}")
        return row

    def insert_entry_form(self, entry: EntryFormCreate):
        row = self._run("entry form insert", crud_entry_form.create, obj_in=entry)
        logger.info(f"Inserted entry form {row.id} for arrival card {row.arrival_card_no}")
        return row

    def find_entry_by_arrival_card_no(self, arrival_card_no: str):
        return self._run(
            "arrival card number lookup",
            crud_entry_form.get_by_arrival_card_no,
            arrival_card_no=arrival_card_no
        )
