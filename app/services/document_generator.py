"""
Document Generation Service for the arrival card service
Arrival card PDF generation using ReportLab
"""

import io
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, Tuple
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer, PageBreak, Image as RLImage

from app.core.errors import DocumentRenderError
from app.schemas.arrival_card import PersonalInfoCreate, TripInfoCreate

logger = logging.getLogger(__name__)

PLACEHOLDER = "-"

UPDATE_URL_PAYLOAD = "update_url"
DOCUMENT_ID_PAYLOAD = "document_id"
QR_PAYLOAD_KINDS = (UPDATE_URL_PAYLOAD, DOCUMENT_ID_PAYLOAD)

OTHER_CHOICES = ("OTHER", "OTHERS")

NOTICE_PARAGRAPHS = (
    "Thank you for using the Thailand Digital Arrival Card. This Thailand Digital Arrival Card is only "
    "valid for one time use for travel on the expected date of arrival indicated below. You may choose to "
    "download or print a copy of this and retain it for the duration of your stay. Please note that the "
    "Thailand Digital Arrival Card is not a visa. The use of the Thailand Digital Arrival Card e-Service is "
    "free of charge.",
    "Kindly ensure that the information provided is accurate and aligns with your travel documents to "
    "avoid any issues upon your arrival in Thailand.",
    "You can update your Thailand Digital Arrival Card information through the official website at "
    "{update_url} or by scanning the QR code provided below, before entering Thailand. For more "
    "information on Thailand's entry requirements, please visit the official website.",
)

BAND_BACKGROUND = colors.HexColor("#1F3A68")
BAND_LABEL_BACKGROUND = colors.HexColor("#E8EEF7")


def format_document_date(value: Any) -> str:
    """Render a date as YYYY/M/D without zero padding, or '-' when absent"""
    if value is None or value == "":
        return PLACEHOLDER
    if isinstance(value, str):
        try:
            value = date.fromisoformat(value[:10])
        except ValueError:
            return value
    return f"{value.year}/{value.month}/{value.day}"


def with_other(value: Optional[str], other: Optional[str]) -> Optional[str]:
    """Use the free-text 'other' answer when the choice itself is Other/Others"""
    if other and value and value.strip().upper() in OTHER_CHOICES:
        return other
    return value


@dataclass(frozen=True)
class DocumentPresentationOptions:
    """Presentation switches for the arrival card document

    letterhead_path: image drawn above the title on page 1 (skipped if missing)
    uppercase_values: upper-case every field value
    update_qr_payload: what the page 1 QR code encodes, the official update
        URL or the document identifier
    invariant: produce byte-identical PDFs for identical inputs
    """
    letterhead_path: Optional[str] = None
    uppercase_values: bool = True
    update_qr_payload: str = UPDATE_URL_PAYLOAD
    update_url: str = "https://tdac.immigration.go.th/arrival-card"
    qr_size: int = 150
    invariant: bool = True

    def __post_init__(self):
        if self.update_qr_payload not in QR_PAYLOAD_KINDS:
            raise ValueError(f"Unsupported QR payload kind: {self.update_qr_payload}")


@dataclass(frozen=True)
class ArrivalCardDocumentData:
    """Everything printed on an arrival card"""
    personal_info: PersonalInfoCreate
    trip_info: TripInfoCreate
    countries_visited: Sequence[str]
    arrival_card_no: str
    unique_id: str


class DocumentTemplate:
    """Base class for document templates"""

    def __init__(self, title: str, page_size=A4):
        self.title = title
        self.page_size = page_size
        self.styles = getSampleStyleSheet()
        self.setup_custom_styles()

    def setup_custom_styles(self):
        """Setup custom styles for arrival card documents"""

        self.styles.add(ParagraphStyle(
            name='OfficialTitle',
            parent=self.styles['Heading1'],
            fontSize=20,
            fontName='Helvetica-Bold',
            alignment=TA_CENTER,
            spaceAfter=12,
            textColor=colors.black
        ))

        self.styles.add(ParagraphStyle(
            name='Notice',
            parent=self.styles['Normal'],
            fontSize=10,
            leading=13,
            fontName='Helvetica',
            alignment=TA_LEFT,
            spaceAfter=6
        ))

        self.styles.add(ParagraphStyle(
            name='SectionHeader',
            parent=self.styles['Heading2'],
            fontSize=14,
            fontName='Helvetica-Bold',
            alignment=TA_LEFT,
            spaceBefore=6,
            spaceAfter=6
        ))

        self.styles.add(ParagraphStyle(
            name='SubSectionHeader',
            parent=self.styles['Heading3'],
            fontSize=12,
            fontName='Helvetica-Bold',
            alignment=TA_LEFT,
            spaceBefore=4,
            spaceAfter=4
        ))

        self.styles.add(ParagraphStyle(
            name='FieldLabel',
            parent=self.styles['Normal'],
            fontSize=10,
            fontName='Helvetica',
            alignment=TA_RIGHT
        ))

        self.styles.add(ParagraphStyle(
            name='FieldValue',
            parent=self.styles['Normal'],
            fontSize=10,
            fontName='Helvetica',
            alignment=TA_LEFT
        ))

        self.styles.add(ParagraphStyle(
            name='BandLabel',
            parent=self.styles['Normal'],
            fontSize=8,
            fontName='Helvetica',
            alignment=TA_LEFT,
            textColor=colors.white
        ))

        self.styles.add(ParagraphStyle(
            name='BandValue',
            parent=self.styles['Normal'],
            fontSize=13,
            leading=16,
            fontName='Helvetica-Bold',
            alignment=TA_LEFT,
            textColor=colors.white
        ))

        self.styles.add(ParagraphStyle(
            name='QRCaption',
            parent=self.styles['Normal'],
            fontSize=8,
            fontName='Helvetica-Oblique',
            alignment=TA_CENTER
        ))


class ArrivalCardTemplate(DocumentTemplate):
    """Arrival card receipt: summary page followed by the full declaration"""

    def __init__(self, options: DocumentPresentationOptions, qr_encoder: Callable[[str, int], bytes]):
        super().__init__("Thailand Digital Arrival Card")
        self.options = options
        self.qr_encoder = qr_encoder

    # Field value helpers

    def _text(self, value: Any) -> str:
        if value is None or (isinstance(value, str) and not value.strip()):
            return PLACEHOLDER
        text = str(value)
        return text.upper() if self.options.uppercase_values else text

    def _paragraph(self, text: str, style: str) -> Paragraph:
        return Paragraph(escape(text), self.styles[style])

    def _qr_image(self, payload: str, size_mm: float) -> RLImage:
        png_data = self.qr_encoder(payload, self.options.qr_size)
        return RLImage(io.BytesIO(png_data), width=size_mm * mm, height=size_mm * mm)

    def _update_qr_payload(self, data: ArrivalCardDocumentData) -> str:
        if self.options.update_qr_payload == DOCUMENT_ID_PAYLOAD:
            return data.unique_id
        return self.options.update_url

    def _full_name(self, personal: PersonalInfoCreate) -> str:
        parts = [personal.first_name, personal.middle_name, personal.family_name]
        return self._text(" ".join(part for part in parts if part))

    def _field_table(self, rows: List[Tuple[str, str]]) -> Table:
        """Label : value rows, labels right-aligned against the colon"""
        table_data = [
            [self._paragraph(label, 'FieldLabel'), ':', self._paragraph(value, 'FieldValue')]
            for label, value in rows
        ]
        table = Table(table_data, colWidths=[70*mm, 5*mm, 95*mm])
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (-1, -1), 'Helvetica'),
            ('FONTSIZE', (0, 0), (-1, -1), 10),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('LEFTPADDING', (0, 0), (-1, -1), 2),
            ('RIGHTPADDING', (0, 0), (-1, -1), 2),
            ('TOPPADDING', (0, 0), (-1, -1), 2),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 2),
        ]))
        return table

    # Page 1

    def _summary_page(self, data: ArrivalCardDocumentData, transaction_date: datetime) -> list:
        story = []
        personal = data.personal_info
        trip = data.trip_info

        letterhead = self.options.letterhead_path
        if letterhead:
            if Path(letterhead).is_file():
                story.append(RLImage(letterhead, width=170*mm, height=25*mm, kind='proportional'))
                story.append(Spacer(1, 6))
            else:
                logger.warning(f"Letterhead image not found, skipping: {letterhead}")

        story.append(Paragraph(escape(self.title), self.styles['OfficialTitle']))

        for notice in NOTICE_PARAGRAPHS:
            story.append(self._paragraph(notice.format(update_url=self.options.update_url), 'Notice'))
        story.append(Spacer(1, 4))

        update_qr = Table(
            [[self._qr_image(self._update_qr_payload(data), 30)],
             [self._paragraph('Scan to update your arrival card', 'QRCaption')]],
            colWidths=[170*mm]
        )
        update_qr.setStyle(TableStyle([('ALIGN', (0, 0), (-1, -1), 'CENTER')]))
        story.append(update_qr)
        story.append(Spacer(1, 6))

        story.append(self._paragraph(f"Transaction Date: {format_document_date(transaction_date)}", 'Notice'))
        story.append(Spacer(1, 6))

        # Band 1: who and when
        name_band = Table(
            [[self._paragraph('FULL NAME', 'BandLabel'), self._paragraph('DATE OF ARRIVAL', 'BandLabel')],
             [self._paragraph(self._full_name(personal), 'BandValue'),
              self._paragraph(format_document_date(trip.date_of_arrival), 'BandValue')]],
            colWidths=[115*mm, 55*mm]
        )
        name_band.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, -1), BAND_BACKGROUND),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('LEFTPADDING', (0, 0), (-1, -1), 6),
            ('TOPPADDING', (0, 0), (-1, -1), 3),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 3),
        ]))
        story.append(name_band)
        story.append(Spacer(1, 4))

        # Band 2: identifiers next to the document QR code
        identifiers = Table(
            [[self._paragraph('TDAC NO.', 'BandLabel'), self._paragraph(data.arrival_card_no, 'BandValue')],
             [self._paragraph('PASSPORT NO.', 'BandLabel'), self._paragraph(self._text(personal.passport_no), 'BandValue')],
             [self._paragraph('FLIGHT NO./VEHICLE NO.', 'BandLabel'),
              self._paragraph(self._text(trip.flight_vehicle_no_arrival), 'BandValue')]],
            colWidths=[45*mm, 80*mm]
        )
        identifiers.setStyle(TableStyle([
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('LEFTPADDING', (0, 0), (-1, -1), 6),
        ]))
        id_band = Table(
            [[identifiers, self._qr_image(data.unique_id, 35)]],
            colWidths=[130*mm, 40*mm]
        )
        id_band.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (0, 0), BAND_BACKGROUND),
            ('BACKGROUND', (1, 0), (1, 0), BAND_LABEL_BACKGROUND),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('ALIGN', (1, 0), (1, 0), 'CENTER'),
            ('BOX', (0, 0), (-1, -1), 1, BAND_BACKGROUND),
        ]))
        story.append(id_band)
        return story

    # Page 2+

    def _details_pages(self, data: ArrivalCardDocumentData) -> list:
        personal = data.personal_info
        trip = data.trip_info
        story = []

        story.append(self._paragraph('Personal Information', 'SectionHeader'))
        story.append(self._field_table([
            ('Full Name', self._full_name(personal)),
            ('Gender', self._text(personal.gender)),
            ('Nationality/Citizenship', self._text(personal.selected_nationality)),
            ('Passport No.', self._text(personal.passport_no)),
            ('Date of Birth', format_document_date(personal.date_of_birth)),
            ('Occupation', self._text(personal.occupation)),
            ('Country/Territory of Residence', self._text(personal.selected_country)),
            ('City/State of Residence', self._text(personal.selected_city)),
            ('Visa No.', self._text(personal.visa_no)),
            ('Phone No.', self._text(f"+{personal.phone_no_code} {personal.phone_no}")),
        ]))
        story.append(Spacer(1, 8))

        story.append(self._paragraph('Trip Information', 'SectionHeader'))
        story.append(self._paragraph('Arrival Information', 'SubSectionHeader'))
        story.append(self._field_table([
            ('Date of Arrival', format_document_date(trip.date_of_arrival)),
            ('Country/Territory where you Boarded', self._text(trip.country_boarded)),
            ('Purpose of Travel', self._text(with_other(trip.purpose_of_travel, trip.purpose_of_travel_other))),
            ('Mode of Travel', self._text(trip.mode_of_travel_arrival)),
            ('Mode of Transport',
             self._text(with_other(trip.mode_of_transport_arrival, trip.mode_of_transport_arrival_other))),
            ('Flight No./Vehicle No.', self._text(trip.flight_vehicle_no_arrival)),
        ]))
        story.append(Spacer(1, 6))

        story.append(self._paragraph('Departure Information', 'SubSectionHeader'))
        story.append(self._field_table([
            ('Date of Departure', format_document_date(trip.date_of_departure)),
            ('Mode of Travel', self._text(trip.mode_of_travel_departure)),
            ('Mode of Transport',
             self._text(with_other(trip.mode_of_transport_departure, trip.mode_of_transport_departure_other))),
            ('Flight No./Vehicle No.', self._text(trip.flight_vehicle_no_departure)),
        ]))
        story.append(Spacer(1, 8))

        address = f"{trip.province}, {trip.district_area}, {trip.sub_district}, {trip.address}"
        story.append(self._paragraph('Accommodation Information', 'SectionHeader'))
        story.append(self._field_table([
            ('Type of Accommodation', self._text(with_other(trip.type_of_accommodation, trip.type_other))),
            ('Post Code', self._text(trip.post_code)),
            ('Address', self._text(address)),
        ]))
        story.append(Spacer(1, 8))

        story.append(self._paragraph('Health Declaration', 'SectionHeader'))
        story.append(self._field_table([
            ('Countries/Territories where you stayed within 21 days before arrival',
             self._text(", ".join(data.countries_visited))),
        ]))
        return story

    def generate(self, data: ArrivalCardDocumentData, transaction_date: Optional[datetime] = None) -> bytes:
        """Generate the arrival card PDF; bytes are returned only once the build completed"""
        transaction_date = transaction_date or datetime.now()
        try:
            logger.info(f"Generating arrival card PDF for document: {data.unique_id}")

            buffer = io.BytesIO()
            doc = SimpleDocTemplate(
                buffer,
                pagesize=self.page_size,
                rightMargin=20*mm,
                leftMargin=20*mm,
                topMargin=15*mm,
                bottomMargin=15*mm,
                title=self.title,
                invariant=1 if self.options.invariant else 0
            )

            story = self._summary_page(data, transaction_date)
            story.append(PageBreak())
            story.extend(self._details_pages(data))

            doc.build(story)
            pdf_data = buffer.getvalue()
            buffer.close()

            logger.info(f"Successfully generated arrival card PDF ({len(pdf_data)} bytes)")
            return pdf_data

        except DocumentRenderError:
            raise
        except Exception as e:
            logger.error(f"Error generating arrival card PDF: {e}")
            raise DocumentRenderError(f"PDF generation failed: {str(e)}")


@dataclass
class DocumentGenerator:
    """Main document generator service"""
    options: DocumentPresentationOptions = field(default_factory=DocumentPresentationOptions)
    qr_encoder: Optional[Callable[[str, int], bytes]] = None

    def __post_init__(self):
        if self.qr_encoder is None:
            from app.services.qr_code_service import qr_code_service
            self.qr_encoder = qr_code_service.encode

    @classmethod
    def from_settings(cls, settings) -> "DocumentGenerator":
        return cls(options=DocumentPresentationOptions(
            letterhead_path=settings.DOCUMENT_LETTERHEAD_PATH or None,
            uppercase_values=settings.DOCUMENT_UPPERCASE_VALUES,
            update_qr_payload=settings.DOCUMENT_UPDATE_QR_PAYLOAD,
            update_url=settings.ARRIVAL_CARD_UPDATE_URL,
            qr_size=settings.QR_CODE_SIZE,
        ))

    def render_arrival_card(self, data: ArrivalCardDocumentData, transaction_date: Optional[datetime] = None) -> bytes:
        """Generate arrival card PDF"""
        template = ArrivalCardTemplate(self.options, self.qr_encoder)
        return template.generate(data, transaction_date)
