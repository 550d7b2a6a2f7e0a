"""Models module.

This module provides data models and dataclasses for the application.
"""

from patient_intake.models.attributes import AttributeAssignment, PersonAttributeType
from patient_intake.models.patient import (
    MAX_PROFILE_IMAGE_BYTES,
    ComputedAge,
    Gender,
    ProfileImage,
    RegistrationInput,
    SessionContext,
)
from patient_intake.models.responses import (
    CardRequest,
    RegistrationOutcome,
    RegistrationState,
    RegistryResponse,
    ServerFailure,
    Succeeded,
    ValidationFailure,
)

__all__ = [
    "AttributeAssignment",
    "CardRequest",
    "ComputedAge",
    "Gender",
    "MAX_PROFILE_IMAGE_BYTES",
    "PersonAttributeType",
    "ProfileImage",
    "RegistrationInput",
    "RegistrationOutcome",
    "RegistrationState",
    "RegistryResponse",
    "ServerFailure",
    "SessionContext",
    "Succeeded",
    "ValidationFailure",
]
