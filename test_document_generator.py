#!/usr/bin/env python3
"""
Arrival Card Document Tests
QR encoding and PDF rendering of the arrival card
"""

import io
import re
from datetime import date, datetime

import pytest
from pypdf import PdfReader

from app.core.errors import DocumentRenderError
from app.services.document_generator import (
    ArrivalCardDocumentData, ArrivalCardTemplate, DocumentGenerator, DocumentPresentationOptions,
    DOCUMENT_ID_PAYLOAD, format_document_date, with_other
)
from app.services.qr_code_service import QRCodeService, qr_code_service
from app.services.submission_validator import validate_submission

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
UNIQUE_ID = "3f1c8f6e-2a4b-4c55-9a0e-7d2b1e9f4c10"
TRANSACTION_DATE = datetime(2024, 5, 20, 9, 30)


def page_texts(pdf):
    return [page.extract_text() for page in PdfReader(io.BytesIO(pdf)).pages]


def departure_section(text):
    return text.split("Departure Information", 1)[1].split("Accommodation Information", 1)[0]


def standalone_dashes(text):
    return re.findall(r"(?<![\w/])-(?![\w/])", text)


class RecordingEncoder:
    def __init__(self):
        self.payloads = []

    def __call__(self, payload, size):
        self.payloads.append(payload)
        return qr_code_service.encode(payload, size)


@pytest.fixture
def document_data(submission):
    validated = validate_submission(submission["personalInfo"], submission["tripInfo"], submission["health"])
    return ArrivalCardDocumentData(
        personal_info=validated.personal_info,
        trip_info=validated.trip_info,
        countries_visited=["US", "JP"],
        arrival_card_no="48213",
        unique_id=UNIQUE_ID
    )


def test_qr_code_is_png():
    png = QRCodeService().encode("https://tdac.immigration.go.th/arrival-card", 150)
    assert png.startswith(PNG_SIGNATURE)


def test_qr_code_is_deterministic():
    assert qr_code_service.encode(UNIQUE_ID, 150) == qr_code_service.encode(UNIQUE_ID, 150)


def test_qr_code_rejects_empty_payload():
    with pytest.raises(DocumentRenderError):
        qr_code_service.encode("", 150)


@pytest.mark.parametrize("value,expected", [
    (date(2024, 6, 1), "2024/6/1"),
    (date(2024, 12, 25), "2024/12/25"),
    (datetime(2024, 1, 9, 23, 59), "2024/1/9"),
    ("2024-06-01", "2024/6/1"),
    (None, "-"),
    ("", "-"),
])
def test_format_document_date(value, expected):
    assert format_document_date(value) == expected


def test_with_other_substitutes_free_text():
    assert with_other("Others", "Medical treatment") == "Medical treatment"
    assert with_other("OTHER", "Yacht") == "Yacht"
    assert with_other("Tourism", "ignored") == "Tourism"
    assert with_other("Others", None) == "Others"


def test_values_are_uppercased_with_placeholder_for_missing():
    template = ArrivalCardTemplate(DocumentPresentationOptions(), qr_code_service.encode)
    assert template._text("Engineer") == "ENGINEER"
    assert template._text(None) == "-"
    assert template._text("  ") == "-"


def test_values_keep_case_when_uppercasing_disabled():
    template = ArrivalCardTemplate(DocumentPresentationOptions(uppercase_values=False), qr_code_service.encode)
    assert template._text("Engineer") == "Engineer"


def test_render_produces_pdf(document_data):
    pdf = DocumentGenerator().render_arrival_card(document_data, TRANSACTION_DATE)
    assert pdf.startswith(b"%PDF")
    assert pdf.rstrip().endswith(b"%%EOF")


def test_render_is_deterministic_for_fixed_inputs(document_data):
    generator = DocumentGenerator()
    first = generator.render_arrival_card(document_data, TRANSACTION_DATE)
    second = generator.render_arrival_card(document_data, TRANSACTION_DATE)
    assert first == second


def test_default_qr_payloads(document_data):
    encoder = RecordingEncoder()
    DocumentGenerator(qr_encoder=encoder).render_arrival_card(document_data, TRANSACTION_DATE)
    assert encoder.payloads == ["https://tdac.immigration.go.th/arrival-card", UNIQUE_ID]


def test_document_id_qr_payload(document_data):
    encoder = RecordingEncoder()
    options = DocumentPresentationOptions(update_qr_payload=DOCUMENT_ID_PAYLOAD)
    DocumentGenerator(options=options, qr_encoder=encoder).render_arrival_card(document_data, TRANSACTION_DATE)
    assert encoder.payloads == [UNIQUE_ID, UNIQUE_ID]


def test_unknown_qr_payload_kind_rejected():
    with pytest.raises(ValueError):
        DocumentPresentationOptions(update_qr_payload="website")


def test_missing_letterhead_is_skipped(document_data, tmp_path):
    options = DocumentPresentationOptions(letterhead_path=str(tmp_path / "missing.png"))
    pdf = DocumentGenerator(options=options).render_arrival_card(document_data, TRANSACTION_DATE)
    assert pdf.startswith(b"%PDF")


def test_encoder_failure_raises_render_error(document_data):
    def broken_encoder(payload, size):
        raise RuntimeError("encoder crashed")

    with pytest.raises(DocumentRenderError):
        DocumentGenerator(qr_encoder=broken_encoder).render_arrival_card(document_data, TRANSACTION_DATE)


def test_summary_page_content(document_data):
    pdf = DocumentGenerator().render_arrival_card(document_data, TRANSACTION_DATE)

    pages = page_texts(pdf)

    assert len(pages) == 2
    summary = pages[0]
    assert "Thailand Digital Arrival Card" in summary
    assert "Transaction Date: 2024/5/20" in summary
    assert "TDAC NO." in summary
    assert "48213" in summary
    assert "JANE DOE" in summary
    assert "2024/6/1" in summary
    assert "X1234567" in summary
    assert "TG123" in summary


def test_details_page_content(document_data):
    details = page_texts(DocumentGenerator().render_arrival_card(document_data, TRANSACTION_DATE))[1]

    assert "ENGINEER" in details
    assert "1990/5/1" in details
    assert "+1 5551234" in details
    assert "BANGKOK, PATHUMWAN, LUMPHINI, 123 ROAD" in details
    assert "US, JP" in details
    assert len(standalone_dashes(departure_section(details))) == 4


def test_values_keep_case_on_page_when_uppercasing_disabled(document_data):
    options = DocumentPresentationOptions(uppercase_values=False)
    details = page_texts(DocumentGenerator(options=options).render_arrival_card(document_data, TRANSACTION_DATE))[1]

    assert "Bangkok, Pathumwan, Lumphini, 123 Road" in details
    assert "Jane Doe" in details


def test_departure_fields_render_when_present(submission):
    submission["tripInfo"].update({
        "date_of_departure": "2024-06-15",
        "mode_of_travel_departure": "Air",
        "mode_of_transport_departure": "Others",
        "mode_of_transport_departure_other": "Charter",
        "flight_vehicle_no_departure": "TG124",
    })
    validated = validate_submission(submission["personalInfo"], submission["tripInfo"], submission["health"])
    data = ArrivalCardDocumentData(
        personal_info=validated.personal_info,
        trip_info=validated.trip_info,
        countries_visited=["US", "JP"],
        arrival_card_no="10001",
        unique_id=UNIQUE_ID
    )

    departure = departure_section(page_texts(DocumentGenerator().render_arrival_card(data, TRANSACTION_DATE))[1])

    assert "2024/6/15" in departure
    assert "AIR" in departure
    assert "CHARTER" in departure
    assert "OTHERS" not in departure
    assert "TG124" in departure
    assert standalone_dashes(departure) == []
