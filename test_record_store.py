#!/usr/bin/env python3
"""
Record Store Tests
SqlAlchemyRecordStore against a real SQLite schema
"""

import uuid

import pytest
from sqlalchemy.orm import sessionmaker

from app.core.database import build_engine, create_tables
from app.core.errors import PersistenceError
from app.schemas.arrival_card import EntryFormCreate
from app.services.record_store import SqlAlchemyRecordStore
from app.services.submission_validator import validate_submission


@pytest.fixture
def db():
    engine = build_engine("sqlite://")
    create_tables(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def store(db):
    return SqlAlchemyRecordStore(db)


@pytest.fixture
def stored_rows(store, submission):
    validated = validate_submission(submission["personalInfo"], submission["tripInfo"], submission["health"])
    profile = store.insert_profile(validated.personal_info)
    travel = store.insert_travel_information(validated.trip_info, ["US", "JP"])
    return profile, travel


def _entry(profile, travel, arrival_card_no):
    unique_id = str(uuid.uuid4())
    return EntryFormCreate(
        profile_id=profile.id,
        tr_id=travel.id,
        filepath=f"https://storage.test/files/pdfs/{unique_id}.pdf",
        qrcode_data=unique_id,
        arrival_card_no=arrival_card_no
    )


def test_inserts_return_rows_with_identity(stored_rows):
    profile, travel = stored_rows

    assert isinstance(profile.id, uuid.UUID)
    assert profile.family_name == "Doe"
    assert travel.countries_visited == ["US", "JP"]
    assert travel.date_of_departure is None


def test_entry_form_links_profile_and_travel(store, stored_rows):
    profile, travel = stored_rows

    entry = store.insert_entry_form(_entry(profile, travel, "12345"))

    assert entry.profile_id == profile.id
    assert entry.tr_id == travel.id
    assert store.find_entry_by_arrival_card_no("12345").id == entry.id


def test_lookup_of_unused_number_returns_none(store):
    assert store.find_entry_by_arrival_card_no("99999") is None


def test_duplicate_arrival_card_number_rejected_by_database(store, stored_rows):
    profile, travel = stored_rows
    first = store.insert_entry_form(_entry(profile, travel, "12345"))

    with pytest.raises(PersistenceError) as exc_info:
        store.insert_entry_form(_entry(profile, travel, "12345"))

    assert "UNIQUE constraint failed: entry_form.arrival_card_no" in exc_info.value.message
    assert store.find_entry_by_arrival_card_no("12345").id == first.id
    assert store.find_entry_by_arrival_card_no("99999") is None


def test_duplicate_document_id_rejected_by_database(store, stored_rows):
    profile, travel = stored_rows
    entry = _entry(profile, travel, "12345")
    store.insert_entry_form(entry)

    duplicate = entry.model_copy(update={"arrival_card_no": "54321"})
    with pytest.raises(PersistenceError) as exc_info:
        store.insert_entry_form(duplicate)

    assert "entry_form.qrcode_data" in exc_info.value.message


def test_missing_table_becomes_persistence_error(db, store):
    from app.models import Base

    Base.metadata.drop_all(bind=db.get_bind())

    with pytest.raises(PersistenceError) as exc_info:
        store.find_entry_by_arrival_card_no("12345")
    assert "no such table" in exc_info.value.message
