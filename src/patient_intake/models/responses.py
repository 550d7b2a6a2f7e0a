"""Registration outcome and registry response data models.

This module defines the tagged outcome of a submission (success, validation
failure, server failure), the orchestrator states, and the raw registry
response wrapper returned by the transport layer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class RegistrationState(Enum):
    """Registration session state."""

    IDLE = "IDLE"
    VALIDATING = "VALIDATING"
    SUBMITTING = "SUBMITTING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class Succeeded:
    """Patient was created in the registry.

    Attributes:
        phn: Effective PHN (supplied or allocated)
        display_name: Given name and family name
        location_display: Operating location name shown to the operator
        print_requested: Operator opted to print a PHN card
        photo: Profile photo data URI captured before the form reset
        patient_uuid: Registry uuid of the created patient, if returned
    """

    phn: str
    display_name: str
    location_display: Optional[str] = None
    print_requested: bool = False
    photo: Optional[str] = field(default=None, repr=False)
    patient_uuid: Optional[str] = None

    kind = "success"

    @property
    def is_success(self) -> bool:
        return True

    @property
    def message(self) -> str:
        return "Patient registered successfully"


@dataclass(frozen=True)
class ValidationFailure:
    """Input was rejected locally; no request was sent."""

    message: str

    kind = "validation_failure"

    @property
    def is_success(self) -> bool:
        return False


@dataclass(frozen=True)
class ServerFailure:
    """Registry rejected the request or could not be reached.

    Attributes:
        message: Human-readable error message
        status_code: HTTP status code, None for transport errors
    """

    message: str
    status_code: Optional[int] = None

    kind = "server_failure"

    @property
    def is_success(self) -> bool:
        return False


RegistrationOutcome = Union[Succeeded, ValidationFailure, ServerFailure]


@dataclass(frozen=True)
class CardRequest:
    """Input to the PHN card printer."""

    phn: str
    display_name: str
    photo: Optional[str] = field(default=None, repr=False)


@dataclass
class RegistryResponse:
    """Response from the registry patient creation call.

    Attributes:
        status_code: HTTP status code
        body: Parsed JSON body, None when the body is empty or not JSON
        processing_time_ms: Round-trip latency in milliseconds
    """

    status_code: int
    body: Optional[Any] = None
    processing_time_ms: int = 0

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300
