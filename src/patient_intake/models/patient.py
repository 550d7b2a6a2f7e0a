"""Patient registration input data models.

This module defines the form-session dataclasses used throughout the application
for capturing patient demographics before submission to the registry.
"""

import base64
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


# Profile images larger than this are rejected at attach time
MAX_PROFILE_IMAGE_BYTES = 2 * 1024 * 1024


class Gender(Enum):
    """Administrative gender as captured on the intake form."""

    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"

    @property
    def code(self) -> str:
        """Registry sex code (M, F or O)."""
        return {
            Gender.MALE: "M",
            Gender.FEMALE: "F",
            Gender.OTHER: "O",
        }[self]

    @classmethod
    def parse(cls, value: "str | Gender") -> "Gender":
        """Parse a gender from its form value, case-insensitively.

        Raises:
            ValueError: If value is not Male, Female or Other
        """
        if isinstance(value, Gender):
            return value
        for member in cls:
            if member.value.lower() == str(value).strip().lower():
                return member
        raise ValueError(
            f"Invalid gender: {value!r}. Must be one of: Male, Female, Other"
        )


@dataclass(frozen=True)
class ComputedAge:
    """Elapsed time between a date of birth and today.

    Attributes:
        years: Completed years
        months: Completed months after the last birthday
        days: Remaining days
    """

    years: int
    months: int
    days: int


@dataclass
class ProfileImage:
    """Profile photo attached to the intake form.

    Attributes:
        content: Raw image bytes
        mime_type: Image MIME type (e.g. image/png)
    """

    content: bytes
    mime_type: str = "image/png"

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def data_uri(self) -> str:
        """Inline base64 data URI suitable for embedding in the PHN card."""
        encoded = base64.b64encode(self.content).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


@dataclass(frozen=True)
class SessionContext:
    """Operator session context supplied by the host application.

    Attributes:
        location_uuid: Operating location identifier required on every PHN
        location_display: Human-readable location name
    """

    location_uuid: Optional[str] = None
    location_display: Optional[str] = None


@dataclass
class RegistrationInput:
    """Form state for a single patient registration.

    Owned exclusively by one registration session. The age_* fields are
    display-only values derived from date_of_birth and are recomputed by the
    session whenever the date changes.

    Attributes:
        existing_phn: PHN supplied by the operator (blank means allocate one)
        unknown_patient: Operator flagged the patient as unidentified
        baby_of: Registration is for a newborn recorded against a parent
        title: Mr, Mrs, Miss or empty
        given_name: Patient's given name (required)
        family_name: Patient's family name (required)
        nic_no: National identity card number (optional)
        date_of_birth: Date of birth (required)
        age_years: Derived completed years, as displayed
        age_months: Derived completed months, as displayed
        age_days: Derived remaining days, as displayed
        gender: Male, Female or Other
        telephone_residence: Residence telephone (optional)
        telephone_mobile: Mobile telephone (optional)
        guardian_name: Guardian name, free text
        guardian_relationship: Guardian relationship, free text
        guardian_contact_no: Guardian contact number, free text
        profile_image: Optional photo, at most 2 MiB
    """

    existing_phn: str = ""
    unknown_patient: bool = False
    baby_of: bool = False
    title: str = ""
    given_name: str = ""
    family_name: str = ""
    nic_no: str = ""
    date_of_birth: Optional[date] = None
    age_years: str = ""
    age_months: str = ""
    age_days: str = ""
    gender: Gender = Gender.MALE
    telephone_residence: str = ""
    telephone_mobile: str = ""
    guardian_name: str = ""
    guardian_relationship: str = ""
    guardian_contact_no: str = ""
    profile_image: Optional[ProfileImage] = field(default=None, repr=False)

    @classmethod
    def empty(cls) -> "RegistrationInput":
        """Return the empty baseline used for new and reset sessions."""
        return cls()

    @property
    def display_name(self) -> str:
        return f"{self.given_name} {self.family_name}"
