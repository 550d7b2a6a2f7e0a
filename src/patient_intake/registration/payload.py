"""Patient creation request construction.

This module builds the registry patient-creation JSON body from the intake
form, the effective PHN and the resolved person attributes.
"""

import logging
import re
from datetime import date, datetime, tzinfo
from typing import Any, Optional, Sequence

from patient_intake.models.attributes import AttributeAssignment
from patient_intake.models.patient import Gender, RegistrationInput

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_age_years(value: Any) -> int:
    """Integer years from the displayed age, truncated; 0 when unparsable.

    Example:
        >>> parse_age_years("26")
        26
        >>> parse_age_years("")
        0
    """
    if isinstance(value, int):
        return value
    match = _LEADING_INT.match(str(value or ""))
    if match is None:
        return 0
    return int(match.group(1))


def format_birthdate(birth_date: date, tz: Optional[tzinfo] = None) -> str:
    """Render a birth date as ISO-8601 local midnight with the UTC offset.

    Args:
        birth_date: Date of birth
        tz: Time zone whose offset is used; defaults to the local zone

    Returns:
        String like 2006-10-19T00:00:00.000+0530

    Example:
        >>> from datetime import timezone
        >>> format_birthdate(date(2006, 10, 19), timezone.utc)
        '2006-10-19T00:00:00.000+0000'
    """
    midnight = datetime(birth_date.year, birth_date.month, birth_date.day)
    if tz is None:
        local = midnight.astimezone()
    else:
        local = midnight.replace(tzinfo=tz)
    offset = local.strftime("%z") or "+0000"
    return f"{birth_date.isoformat()}T00:00:00.000{offset}"


def build_patient_payload(
    registration: RegistrationInput,
    phn: str,
    location_uuid: str,
    identifier_type: str,
    attributes: Sequence[AttributeAssignment] = (),
    tz: Optional[tzinfo] = None,
) -> dict[str, Any]:
    """Build the registry patient-creation request body.

    Args:
        registration: Validated form input (date_of_birth must be set)
        phn: Effective PHN, supplied or allocated
        location_uuid: Operating location identifier
        identifier_type: Identifier type uuid marking the PHN
        attributes: Resolved person attributes; omitted from the body when empty
        tz: Time zone for the birthdate offset, defaults to the local zone

    Returns:
        JSON-serializable request body

    Raises:
        ValueError: If date_of_birth is missing
    """
    if registration.date_of_birth is None:
        raise ValueError("date_of_birth is required to build a patient payload")

    gender = Gender.parse(registration.gender)

    person: dict[str, Any] = {
        "gender": gender.code,
        "age": parse_age_years(registration.age_years),
        "birthdate": format_birthdate(registration.date_of_birth, tz),
        "names": [
            {
                "givenName": registration.given_name,
                "familyName": registration.family_name,
            }
        ],
    }

    if attributes:
        person["attributes"] = [attribute.to_payload() for attribute in attributes]

    payload = {
        "identifiers": [
            {
                "identifier": phn,
                "identifierType": identifier_type,
                "location": location_uuid,
                "preferred": True,
            }
        ],
        "person": person,
    }

    logger.debug(
        f"Built patient payload: gender={gender.code}, "
        f"attributes={len(attributes)}, location={location_uuid}"
    )
    return payload
