"""Registration session orchestration.

A RegistrationSession owns one intake form: it loads the attribute type schema
once, keeps the derived age in step with the date of birth, validates and
submits the form to the registry, and resets the form after a successful
registration.

State machine:
    IDLE -> VALIDATING -> SUBMITTING -> SUCCEEDED | FAILED -> IDLE (on reset)
"""

import logging
import random
import threading
import time
from dataclasses import fields
from datetime import date, tzinfo
from typing import Callable, Optional, Protocol

from patient_intake.config.defaults import PHN_IDENTIFIER_TYPE
from patient_intake.logging_audit.audit import log_audit_event
from patient_intake.models.attributes import PersonAttributeType
from patient_intake.models.patient import (
    MAX_PROFILE_IMAGE_BYTES,
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
from patient_intake.registration.age import age_fields, calculate_age
from patient_intake.registration.attribute_resolver import resolve_attributes
from patient_intake.registration.parsers import extract_error_message, extract_patient_uuid
from patient_intake.registration.payload import build_patient_payload
from patient_intake.registration.phn_generator import generate_phn, is_valid_phn
from patient_intake.utils.exceptions import (
    ImageTooLargeError,
    SubmissionInProgressError,
    TransportError,
    ValidationError,
)

logger = logging.getLogger(__name__)

NAMES_REQUIRED_MESSAGE = "Given name and family name are required"
DOB_REQUIRED_MESSAGE = "Date of birth is required"
LOCATION_REQUIRED_MESSAGE = (
    "User location is not available. Please ensure you are logged in with a valid location."
)
INVALID_PHN_MESSAGE = "PHN must be exactly 10 digits"
NOT_READY_MESSAGE = "Form is not ready: attribute types have not been loaded"
IMAGE_TOO_LARGE_MESSAGE = "Image size should be less than 2MB"

# Fields derived from date_of_birth; not settable through update()
_DERIVED_FIELDS = {"age_years", "age_months", "age_days"}


class RegistryGateway(Protocol):
    """Registry operations the session depends on."""

    def fetch_attribute_types(self, limit: Optional[int] = None) -> list[PersonAttributeType]:
        ...

    def create_patient(self, payload: dict) -> RegistryResponse:
        ...


class RegistrationSession:
    """Single patient intake form session.

    Attributes:
        client: Registry gateway used for the schema fetch and patient creation
        context: Operator session context (operating location)
        identifier_type: Identifier type uuid marking the PHN
        attribute_types: Attribute type schema loaded by start()

    Example:
        >>> session = RegistrationSession(client, SessionContext("loc-1", "OPD"))
        >>> session.start()
        >>> session.update(given_name="Amal", family_name="Perera",
        ...                date_of_birth="2006-10-19")
        >>> outcome = session.submit(print_card=True)
    """

    def __init__(
        self,
        client: RegistryGateway,
        context: SessionContext,
        identifier_type: str = PHN_IDENTIFIER_TYPE,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], date]] = None,
        card_printer: Optional[Callable[[CardRequest], None]] = None,
        tz: Optional[tzinfo] = None,
        attribute_type_limit: int = 100,
    ) -> None:
        self.client = client
        self.context = context
        self.identifier_type = identifier_type
        self.attribute_types: list[PersonAttributeType] = []

        self._rng = rng
        self._clock = clock or date.today
        self._card_printer = card_printer
        self._tz = tz
        self._attribute_type_limit = attribute_type_limit

        self._input = RegistrationInput.empty()
        self._state = RegistrationState.IDLE
        self._last_outcome: Optional[RegistrationOutcome] = None
        self._ready = False
        self._submit_lock = threading.Lock()

    @property
    def state(self) -> RegistrationState:
        return self._state

    @property
    def last_outcome(self) -> Optional[RegistrationOutcome]:
        return self._last_outcome

    @property
    def input(self) -> RegistrationInput:
        return self._input

    @property
    def is_ready(self) -> bool:
        """True once the attribute type schema has been loaded."""
        return self._ready

    @property
    def is_submitting(self) -> bool:
        return self._submit_lock.locked()

    def start(self) -> None:
        """Load the attribute type schema, making the form ready.

        Raises:
            SchemaFetchError: If the schema cannot be loaded. The session stays
                              unusable; the operator must start a new one.
        """
        start_time = time.time()
        self._ready = False

        self.attribute_types = list(
            self.client.fetch_attribute_types(self._attribute_type_limit)
        )
        self._ready = True

        log_audit_event(
            "SCHEMA_LOADED",
            {
                "status": "success",
                "attribute_count": len(self.attribute_types),
                "duration": round(time.time() - start_time, 3),
            },
        )

    def update(self, **changes) -> RegistrationInput:
        """Set form fields.

        Setting date_of_birth (a date or an ISO YYYY-MM-DD string) recomputes
        the displayed age immediately; clearing it clears the age. None clears
        a text field to the empty string.

        Raises:
            ValidationError: On unknown or derived fields, unparseable dates
                             or invalid gender values
        """
        known = {f.name for f in fields(RegistrationInput)} - _DERIVED_FIELDS - {"profile_image"}

        for name, value in changes.items():
            if name not in known:
                raise ValidationError(f"Unknown or read-only form field: {name}")

            if name == "date_of_birth":
                self._set_date_of_birth(value)
            elif value is None and isinstance(getattr(RegistrationInput, name, None), str):
                setattr(self._input, name, "")
            elif name == "gender":
                try:
                    self._input.gender = Gender.parse(value)
                except ValueError as e:
                    raise ValidationError(str(e)) from e
            else:
                setattr(self._input, name, value)

        return self._input

    def _set_date_of_birth(self, value) -> None:
        if value in (None, ""):
            birth_date = None
        elif isinstance(value, date):
            birth_date = value
        else:
            try:
                birth_date = date.fromisoformat(str(value).strip())
            except ValueError as e:
                raise ValidationError(
                    f"Invalid date of birth: {value!r}. Use the YYYY-MM-DD format."
                ) from e

        self._input.date_of_birth = birth_date
        age = calculate_age(birth_date, self._clock()) if birth_date else None
        (
            self._input.age_years,
            self._input.age_months,
            self._input.age_days,
        ) = age_fields(age)

    def attach_profile_image(self, content: bytes, mime_type: str = "image/png") -> ProfileImage:
        """Attach a profile photo.

        Raises:
            ImageTooLargeError: If the image exceeds 2 MiB; the previously
                                attached image is kept
        """
        if len(content) > MAX_PROFILE_IMAGE_BYTES:
            logger.warning(f"Rejected profile image of {len(content)} bytes")
            raise ImageTooLargeError(IMAGE_TOO_LARGE_MESSAGE)

        image = ProfileImage(content=content, mime_type=mime_type)
        self._input.profile_image = image
        return image

    def _validate(self) -> Optional[str]:
        registration = self._input

        if not self._ready:
            return NOT_READY_MESSAGE
        if not registration.given_name.strip() or not registration.family_name.strip():
            return NAMES_REQUIRED_MESSAGE
        if registration.date_of_birth is None:
            return DOB_REQUIRED_MESSAGE
        if not self.context.location_uuid:
            return LOCATION_REQUIRED_MESSAGE
        existing_phn = registration.existing_phn.strip()
        if existing_phn and not is_valid_phn(existing_phn):
            return INVALID_PHN_MESSAGE
        return None

    def submit(self, print_card: bool = False) -> RegistrationOutcome:
        """Validate and submit the form to the registry.

        Exactly one create request is issued per call that passes validation;
        failures are never retried automatically.

        Args:
            print_card: Send the registered patient to the card printer

        Returns:
            Succeeded, ValidationFailure or ServerFailure

        Raises:
            SubmissionInProgressError: If another submission is in flight
        """
        if not self._submit_lock.acquire(blocking=False):
            raise SubmissionInProgressError("A submission is already in progress")

        try:
            self._state = RegistrationState.VALIDATING
            message = self._validate()
            if message is not None:
                logger.warning(f"Registration rejected: {message}")
                return self._finish(ValidationFailure(message))

            self._state = RegistrationState.SUBMITTING
            try:
                outcome = self._submit(print_card)
            except Exception:
                self._state = RegistrationState.FAILED
                raise
            return self._finish(outcome)
        finally:
            self._submit_lock.release()

    def _submit(self, print_card: bool) -> RegistrationOutcome:
        registration = self._input
        start_time = time.time()

        phn = registration.existing_phn.strip() or generate_phn(self._rng)
        attributes = resolve_attributes(self.attribute_types, vars(registration))
        payload = build_patient_payload(
            registration,
            phn=phn,
            location_uuid=self.context.location_uuid,
            identifier_type=self.identifier_type,
            attributes=attributes,
            tz=self._tz,
        )

        try:
            response = self.client.create_patient(payload)
        except TransportError as e:
            return self._server_failure(str(e), None, phn, start_time)

        if not response.ok:
            message = extract_error_message(response.body)
            return self._server_failure(message, response.status_code, phn, start_time)

        photo = registration.profile_image.data_uri if registration.profile_image else None
        outcome = Succeeded(
            phn=phn,
            display_name=registration.display_name,
            location_display=self.context.location_display,
            print_requested=print_card,
            photo=photo,
            patient_uuid=extract_patient_uuid(response.body),
        )

        log_audit_event(
            "PATIENT_REGISTERED",
            {
                "status": "success",
                "phn": phn,
                "location": self.context.location_uuid,
                "attribute_count": len(attributes),
                "duration": round(time.time() - start_time, 3),
            },
        )

        self._input = RegistrationInput.empty()

        if print_card and self._card_printer is not None:
            self._print_card(CardRequest(phn=phn, display_name=outcome.display_name, photo=photo))

        return outcome

    def _server_failure(
        self,
        message: str,
        status_code: Optional[int],
        phn: str,
        start_time: float,
    ) -> ServerFailure:
        logger.error(f"Patient creation failed (HTTP {status_code}): {message}")
        log_audit_event(
            "REGISTRATION_FAILED",
            {
                "status": "failure",
                "phn": phn,
                "location": self.context.location_uuid,
                "duration": round(time.time() - start_time, 3),
                "error_message": message,
            },
        )
        return ServerFailure(message=message, status_code=status_code)

    def _print_card(self, request: CardRequest) -> None:
        try:
            self._card_printer(request)
        except Exception as e:
            logger.error(f"PHN card printing failed for {request.phn}: {e}")

    def _finish(self, outcome: RegistrationOutcome) -> RegistrationOutcome:
        self._state = (
            RegistrationState.SUCCEEDED if outcome.is_success else RegistrationState.FAILED
        )
        self._last_outcome = outcome
        return outcome

    def reset(self, confirm: bool = True) -> bool:
        """Return the form to its empty baseline.

        Args:
            confirm: Operator confirmation; False leaves the form untouched

        Returns:
            True if the form was reset
        """
        if not confirm:
            return False
        if self.is_submitting:
            raise SubmissionInProgressError("Cannot reset while a submission is in progress")

        self._input = RegistrationInput.empty()
        self._state = RegistrationState.IDLE
        self._last_outcome = None
        logger.debug("Registration form reset")
        return True
