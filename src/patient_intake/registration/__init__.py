"""Registration business logic.

Age calculation, PHN allocation, attribute resolution, payload construction,
registry response parsing and the registration session orchestrator.
"""

from patient_intake.registration.age import age_fields, calculate_age
from patient_intake.registration.attribute_resolver import (
    ATTRIBUTE_RULES,
    AttributeRule,
    match_attribute_type,
    resolve_attributes,
)
from patient_intake.registration.parsers import extract_error_message, extract_patient_uuid
from patient_intake.registration.payload import (
    build_patient_payload,
    format_birthdate,
    parse_age_years,
)
from patient_intake.registration.phn_generator import generate_phn, is_valid_phn
from patient_intake.registration.session import RegistrationSession

__all__ = [
    "ATTRIBUTE_RULES",
    "AttributeRule",
    "RegistrationSession",
    "age_fields",
    "build_patient_payload",
    "calculate_age",
    "extract_error_message",
    "extract_patient_uuid",
    "format_birthdate",
    "generate_phn",
    "is_valid_phn",
    "match_attribute_type",
    "parse_age_years",
    "resolve_attributes",
]
