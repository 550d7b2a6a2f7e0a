"""Registration workflow examples.

Demonstrates registering patients programmatically with a
RegistrationSession: a successful registration with a PHN card, a local
validation failure, and a registry rejection.

Start the mock registry first:
    patient-intake mock start
"""

import logging
from pathlib import Path

from patient_intake.card import CardPrinter
from patient_intake.config import get_registry_password, load_config
from patient_intake.models.patient import SessionContext
from patient_intake.models.responses import ServerFailure, Succeeded
from patient_intake.registration import RegistrationSession
from patient_intake.transport import RegistryClient
from patient_intake.utils.exceptions import SchemaFetchError, get_remediation_message

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def example_1_register_and_print(session: RegistrationSession):
    """Example 1: Register a new patient and print the PHN card."""
    print("=" * 80)
    print("EXAMPLE 1: Register a New Patient")
    print("=" * 80)

    session.update(
        title="Mr",
        given_name="Amal",
        family_name="Perera",
        date_of_birth="2006-10-19",
        telephone_mobile="0771234567",
    )
    form = session.input
    print(f"Age: {form.age_years} years, {form.age_months} months, {form.age_days} days")

    outcome = session.submit(print_card=True)
    if isinstance(outcome, Succeeded):
        print(f"Registered {outcome.display_name} with PHN {outcome.phn}")
    else:
        print(f"Registration failed: {outcome.message}")
    print()


def example_2_validation_failure(session: RegistrationSession):
    """Example 2: Missing required fields are rejected before any request."""
    print("=" * 80)
    print("EXAMPLE 2: Local Validation Failure")
    print("=" * 80)

    session.reset()
    session.update(given_name="Nimali")

    outcome = session.submit()
    print(f"Outcome: {outcome.kind} - {outcome.message}")
    print()


def example_3_duplicate_phn(session: RegistrationSession):
    """Example 3: The registry rejects a PHN that is already in use."""
    print("=" * 80)
    print("EXAMPLE 3: Registry Rejection")
    print("=" * 80)

    for given_name in ("Kasun", "Saman"):
        session.reset()
        session.update(
            given_name=given_name,
            family_name="Silva",
            date_of_birth="2001-02-28",
            existing_phn="0123456789",
        )
        outcome = session.submit()
        if isinstance(outcome, ServerFailure):
            print(f"{given_name}: rejected (HTTP {outcome.status_code}) - {outcome.message}")
        else:
            print(f"{given_name}: {outcome.kind}")
    print()


def main():
    config = load_config(Path("examples/config.example.json"))
    context = SessionContext(
        location_uuid=config.session.location_uuid,
        location_display=config.session.location_display,
    )
    printer = CardPrinter(config.card.output_dir, open_browser=False)

    with RegistryClient(config, password=get_registry_password()) as client:
        session = RegistrationSession(client, context, card_printer=printer)
        try:
            session.start()
        except SchemaFetchError as e:
            print(f"Failed to load form data: {e}")
            print(get_remediation_message(e))
            return

        example_1_register_and_print(session)
        example_2_validation_failure(session)
        example_3_duplicate_phn(session)


if __name__ == "__main__":
    main()
