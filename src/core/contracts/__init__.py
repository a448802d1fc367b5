"""
Contract Validation Module

JSON Schema contracts of the wire format and the codec between payloads
and domain models.
"""

from .codec import decode_request, encode_report, encode_result, encode_validation_report
from .validators import (
    ContractValidator,
    ContractViolation,
    RemanentReportValidator,
    RemanentRequestValidator,
    SchemaLoader,
    ValidationReportValidator,
    validate_remanent_report,
    validate_remanent_request,
    validate_validation_report,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "RemanentRequestValidator",
    "RemanentReportValidator",
    "ValidationReportValidator",
    # Exceptions
    "ContractViolation",
    # Functions
    "validate_remanent_request",
    "validate_remanent_report",
    "validate_validation_report",
    # Codec
    "decode_request",
    "encode_report",
    "encode_result",
    "encode_validation_report",
]
