"""
QR Code Service
Encodes payload strings as PNG QR code images for the arrival card PDF
"""

import io
import logging

import qrcode
from qrcode.constants import ERROR_CORRECT_M

from app.core.errors import DocumentRenderError

logger = logging.getLogger(__name__)


class QRCodeService:
    """Pure QR encoder: the same payload and size always give the same PNG bytes"""

    def __init__(self, border: int = 4, error_correction: int = ERROR_CORRECT_M):
        self.border = border
        self.error_correction = error_correction

    def encode(self, payload: str, size: int = 150) -> bytes:
        """
        Encode payload as a PNG QR code roughly ``size`` pixels wide

        The module size is the largest whole number of pixels that fits in
        ``size``, so small sizes never go below one pixel per module.
        """
        if not payload:
            raise DocumentRenderError("QR code payload cannot be empty")

        try:
            qr = qrcode.QRCode(
                version=None,
                error_correction=self.error_correction,
                box_size=1,
                border=self.border,
            )
            qr.add_data(payload)
            qr.make(fit=True)

            total_modules = qr.modules_count + 2 * self.border
            qr.box_size = max(1, size // total_modules)

            image = qr.make_image(fill_color="black", back_color="white")
            buffer = io.BytesIO()
            image.save(buffer)
            png_data = buffer.getvalue()
            buffer.close()
        except Exception as e:
            logger.error(f"Error generating QR code: {e}")
            raise DocumentRenderError(f"QR code generation failed: {str(e)}")

        logger.debug(f"Generated QR code ({len(png_data)} bytes, {qr.modules_count} modules)")
        return png_data


qr_code_service = QRCodeService()
