"""
Shared pytest fixtures for the arrival card service

The environment is pointed at an in-memory SQLite database and a temporary
storage directory before any app module is imported.
"""

import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["FILE_STORAGE_PATH"] = tempfile.mkdtemp(prefix="arrival-card-test-")
os.environ["ENVIRONMENT"] = "test"

import copy
import uuid
from datetime import date, datetime

import pytest

from app.core.errors import PersistenceError, PublishError


SAMPLE_SUBMISSION = {
    "personalInfo": {
        "family_name": "Doe",
        "first_name": "Jane",
        "passport_no": "X1234567",
        "selected_nationality": "US",
        "occupation": "Engineer",
        "gender": "F",
        "selected_country": "US",
        "selected_city": "NYC",
        "phone_no_code": "1",
        "phone_no": "5551234",
        "date_of_birth": "1990-05-01",
    },
    "tripInfo": {
        "date_of_arrival": "2024-06-01",
        "country_boarded": "US",
        "purpose_of_travel": "Tourism",
        "mode_of_travel_arrival": "Air",
        "mode_of_transport_arrival": "Airplane",
        "flight_vehicle_no_arrival": "TG123",
        "type_of_accommodation": "Hotel",
        "province": "Bangkok",
        "district_area": "Pathumwan",
        "sub_district": "Lumphini",
        "post_code": "10330",
        "address": "123 Road",
    },
    "health": {"countries_visited": ["US"]},
}


class FakeRecord:
    """Stored row stand-in with an identity and to_dict()"""

    def __init__(self, **fields):
        self.id = uuid.uuid4()
        self.__dict__.update(fields)

    def to_dict(self):
        result = {}
        for key, value in vars(self).items():
            if isinstance(value, uuid.UUID):
                value = str(value)
            elif isinstance(value, (date, datetime)):
                value = value.isoformat()
            result[key] = value
        return result


class InMemoryRecordStore:
    """
    ArrivalRecordStore fake

    Args:
        taken_lookups: the first N card-number lookups report an existing entry
        fail_on: operations that raise PersistenceError
            ("profile", "travel", "entry", "lookup")
    """

    def __init__(self, taken_lookups: int = 0, fail_on=()):
        self.taken_lookups = taken_lookups
        self.fail_on = set(fail_on)
        self.profiles = []
        self.travel = []
        self.entries = []
        self.lookups = []

    @property
    def write_count(self) -> int:
        return len(self.profiles) + len(self.travel) + len(self.entries)

    def _check(self, operation):
        if operation in self.fail_on:
            raise PersistenceError(f"{operation} insert failed: connection reset")

    def insert_profile(self, personal_info):
        self._check("profile")
        row = FakeRecord(**personal_info.model_dump())
        self.profiles.append(row)
        return row

    def insert_travel_information(self, trip_info, countries_visited):
        self._check("travel")
        row = FakeRecord(**trip_info.model_dump(), countries_visited=list(countries_visited))
        self.travel.append(row)
        return row

    def insert_entry_form(self, entry):
        self._check("entry")
        if any(e.arrival_card_no == entry.arrival_card_no for e in self.entries):
            raise PersistenceError("duplicate key value violates unique constraint \"entry_form_arrival_card_no_key\"")
        row = FakeRecord(**entry.model_dump())
        self.entries.append(row)
        return row

    def find_entry_by_arrival_card_no(self, arrival_card_no):
        self.lookups.append(arrival_card_no)
        if "lookup" in self.fail_on:
            raise PersistenceError("permission denied for table entry_form")
        if len(self.lookups) <= self.taken_lookups:
            return FakeRecord(arrival_card_no=arrival_card_no)
        for entry in self.entries:
            if entry.arrival_card_no == arrival_card_no:
                return entry
        return None


class InMemoryObjectStore:
    """ObjectStore fake with upload-if-absent semantics"""

    def __init__(self, fail_uploads: bool = False):
        self.objects = {}
        self.fail_uploads = fail_uploads

    def upload(self, key, data, content_type):
        if self.fail_uploads:
            raise ConnectionError("storage endpoint unreachable")
        if key in self.objects:
            raise PublishError(f"The resource already exists: pdfs/{key}")
        self.objects[key] = (data, content_type)
        return key

    def public_url(self, key):
        return f"https://storage.test/files/pdfs/{key}"


class RecordingRenderer:
    """Renderer fake that records the document data it was asked to draw"""

    def __init__(self):
        self.calls = []

    def __call__(self, data, transaction_date=None):
        self.calls.append((data, transaction_date))
        return b"%PDF-1.4 fake " + data.arrival_card_no.encode()


@pytest.fixture
def submission():
    return copy.deepcopy(SAMPLE_SUBMISSION)


@pytest.fixture
def record_store():
    return InMemoryRecordStore()


@pytest.fixture
def object_store():
    return InMemoryObjectStore()


@pytest.fixture
def renderer():
    return RecordingRenderer()
