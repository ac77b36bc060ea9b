"""
Services package for the arrival card service
"""

from .audit_service import IssuanceAuditService, IssuanceAuditEvent
from .qr_code_service import qr_code_service

__all__ = [
    "IssuanceAuditService",
    "IssuanceAuditEvent",
    "qr_code_service"
]
