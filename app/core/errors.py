"""
Error taxonomy for the arrival card issuance workflow

SubmissionValidationError is the only client error (HTTP 400); every other
ArrivalCardError aborts the workflow and is reported as HTTP 500.
"""

from typing import Dict, List


class ArrivalCardError(Exception):
    """Base exception for arrival card issuance errors"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SubmissionValidationError(ArrivalCardError):
    """One or more submission sections failed validation"""
    status_code = 400

    def __init__(self, errors: Dict[str, Dict[str, List[str]]]):
        super().__init__("Submission validation failed")
        self.errors = errors


class AllocationExhaustedError(ArrivalCardError):
    """No free arrival card number was found within the attempt bound"""
    pass


class PersistenceError(ArrivalCardError):
    """An insert or lookup against the relational store failed"""
    pass


class PublishError(ArrivalCardError):
    """The rendered PDF could not be written to object storage"""
    pass


class DocumentRenderError(ArrivalCardError):
    """The arrival card PDF could not be composed"""
    pass
