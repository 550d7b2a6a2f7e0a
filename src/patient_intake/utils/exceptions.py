"""Custom exception classes for the patient intake workflow.

All exceptions inherit from PatientIntakeError to allow catching all custom exceptions.
"""

from enum import Enum

import requests


class PatientIntakeError(Exception):
    """Base exception for all patient intake custom exceptions."""

    pass


class ValidationError(PatientIntakeError):
    """Raised when registration input fails local validation.

    Examples:
        - Missing given name or family name
        - Missing date of birth
        - No operating location in the session context
    """

    pass


class ImageTooLargeError(ValidationError):
    """Raised when a profile image exceeds the 2 MiB upload limit."""

    pass


class SubmissionInProgressError(PatientIntakeError):
    """Raised when a submission is triggered while another is still in flight."""

    pass


class TransportError(PatientIntakeError):
    """Raised when network/transport issues occur.

    Examples:
        - Connection refused
        - Request timeout
        - Unparseable response body
    """

    pass


class SchemaFetchError(PatientIntakeError):
    """Raised when the person attribute type schema cannot be loaded.

    This is fatal to session start: the form cannot be used until the
    schema is fetched again (full reload).
    """

    pass


class ConfigurationError(PatientIntakeError):
    """Raised when configuration loading or validation fails.

    Examples:
        - Invalid configuration file format
        - Registry URL without http:// or https://
        - Configuration value out of range
    """

    pass


class TemplateError(PatientIntakeError):
    """Base exception for card template processing errors."""

    pass


class TemplateLoadError(TemplateError):
    """Raised when a card template file cannot be loaded.

    Examples:
        - File not found
        - Permission denied
        - Encoding errors
    """

    pass


class MissingPlaceholderValueError(TemplateError):
    """Raised when a template placeholder has no value during personalization."""

    pass


class CardRenderError(PatientIntakeError):
    """Raised when the PHN card cannot be rendered or written."""

    pass


class ErrorCategory(Enum):
    """Error categorization used for operator-facing reporting.

    Attributes:
        VALIDATION: Local pre-flight failure, never reached the network
        SCHEMA: Attribute type schema could not be loaded (session is unusable)
        SERVER: Registry rejected the request or could not be reached
        CONFIGURATION: Invalid or missing configuration
    """

    VALIDATION = "VALIDATION"
    SCHEMA = "SCHEMA"
    SERVER = "SERVER"
    CONFIGURATION = "CONFIGURATION"


def categorize_error(exception: Exception) -> ErrorCategory:
    """Categorize an exception for reporting.

    Args:
        exception: The exception to categorize

    Returns:
        ErrorCategory for the exception

    Example:
        >>> categorize_error(SchemaFetchError("boom"))
        <ErrorCategory.SCHEMA: 'SCHEMA'>
    """
    if isinstance(exception, ConfigurationError):
        return ErrorCategory.CONFIGURATION

    if isinstance(exception, SchemaFetchError):
        return ErrorCategory.SCHEMA

    if isinstance(exception, (ValidationError, SubmissionInProgressError)):
        return ErrorCategory.VALIDATION

    if isinstance(exception, (TransportError, requests.RequestException)):
        return ErrorCategory.SERVER

    # Anything unexpected is reported like a server failure: the operator may retry
    return ErrorCategory.SERVER


def get_remediation_message(exception: Exception) -> str:
    """Generate an actionable remediation message for an error.

    Args:
        exception: Exception that occurred

    Returns:
        Remediation guidance for the operator
    """
    category = categorize_error(exception)

    if isinstance(exception, ImageTooLargeError):
        return "Choose a profile image smaller than 2MB."

    if isinstance(exception, SubmissionInProgressError):
        return "Wait for the current registration to finish before submitting again."

    if category == ErrorCategory.CONFIGURATION:
        return (
            "Check config/config.json and PATIENT_INTAKE_* environment variables. "
            "Run 'patient-intake config validate <file>' to see validation details."
        )

    if category == ErrorCategory.SCHEMA:
        return (
            "Failed to load form data. Check the registry URL and credentials, "
            "then reload to try again."
        )

    if category == ErrorCategory.VALIDATION:
        return "Correct the highlighted fields and submit again."

    if isinstance(exception, requests.exceptions.SSLError):
        return (
            "TLS/SSL validation failed. For local development with self-signed "
            "certificates set transport.verify_tls=false."
        )

    return (
        "The registry did not accept the patient. Review the message, adjust the "
        "input if needed and resubmit. Check logs/ for the full exchange."
    )
