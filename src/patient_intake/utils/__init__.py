"""Shared utilities."""

from patient_intake.utils.exceptions import (
    CardRenderError,
    ConfigurationError,
    ErrorCategory,
    ImageTooLargeError,
    MissingPlaceholderValueError,
    PatientIntakeError,
    SchemaFetchError,
    SubmissionInProgressError,
    TemplateError,
    TemplateLoadError,
    TransportError,
    ValidationError,
    categorize_error,
    get_remediation_message,
)

__all__ = [
    "CardRenderError",
    "ConfigurationError",
    "ErrorCategory",
    "ImageTooLargeError",
    "MissingPlaceholderValueError",
    "PatientIntakeError",
    "SchemaFetchError",
    "SubmissionInProgressError",
    "TemplateError",
    "TemplateLoadError",
    "TransportError",
    "ValidationError",
    "categorize_error",
    "get_remediation_message",
]
