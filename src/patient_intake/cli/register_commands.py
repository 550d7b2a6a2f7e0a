"""Registration CLI commands module.

This module provides Click-based CLI commands for registering patients with
the registry, one at a time or in batch from CSV files, plus the age and PHN
helper commands.
"""

import json
import logging
import mimetypes
import random
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, NoReturn, Optional

import click

from patient_intake.card.renderer import CardPrinter
from patient_intake.config import get_registry_password, get_session_config
from patient_intake.config.schema import Config
from patient_intake.csv_parser.parser import parse_intake_csv
from patient_intake.models.patient import RegistrationInput, SessionContext
from patient_intake.models.responses import RegistrationOutcome, ServerFailure, Succeeded
from patient_intake.registration.age import calculate_age
from patient_intake.registration.phn_generator import generate_phn
from patient_intake.registration.session import RegistrationSession
from patient_intake.transport.registry_client import RegistryClient
from patient_intake.utils.exceptions import (
    ErrorCategory,
    PatientIntakeError,
    categorize_error,
    get_remediation_message,
)

logger = logging.getLogger(__name__)

# Form fields copied from parsed CSV rows into a session
BATCH_FIELDS = (
    "existing_phn",
    "title",
    "given_name",
    "family_name",
    "nic_no",
    "date_of_birth",
    "gender",
    "telephone_residence",
    "telephone_mobile",
    "guardian_name",
    "guardian_relationship",
    "guardian_contact_no",
)


def _exit_code_for(error: Exception) -> int:
    """Map an error to the CLI exit code (1 validation/config, 2 registry)."""
    category = categorize_error(error)
    if category in (ErrorCategory.VALIDATION, ErrorCategory.CONFIGURATION):
        return 1
    return 2


def _fail(error: PatientIntakeError) -> NoReturn:
    """Report an error with remediation and exit."""
    category = categorize_error(error)
    logger.error(f"{category.value} error: {error}")
    click.echo(
        click.style(f"✗ {category.value.title()} Error: ", fg="red", bold=True) + str(error),
        err=True,
    )
    click.echo(f"\nRemediation: {get_remediation_message(error)}", err=True)
    sys.exit(_exit_code_for(error))


def _build_session(
    config: Config,
    client: RegistryClient,
    location: Optional[str],
    location_name: Optional[str],
    print_cards: bool,
) -> RegistrationSession:
    session_config = get_session_config(config)
    context = SessionContext(
        location_uuid=location or session_config.location_uuid,
        location_display=location_name or session_config.location_display,
    )
    card_printer = None
    if print_cards:
        card_printer = CardPrinter(config.card.output_dir, open_browser=config.card.open_browser)

    return RegistrationSession(
        client,
        context,
        identifier_type=config.registry.identifier_type,
        card_printer=card_printer,
        attribute_type_limit=config.registry.attribute_type_limit,
    )


def _display_outcome(outcome: RegistrationOutcome) -> None:
    if isinstance(outcome, Succeeded):
        click.echo(click.style(f"✓ {outcome.message}", fg="green", bold=True))
        click.echo(f"  Name:     {outcome.display_name}")
        click.echo(f"  PHN:      {outcome.phn}")
        click.echo(f"  Location: {outcome.location_display or 'Unknown'}")
        if outcome.print_requested:
            click.echo("  PHN card sent to printer")
    elif isinstance(outcome, ServerFailure):
        status = f" (HTTP {outcome.status_code})" if outcome.status_code else ""
        click.echo(
            click.style(f"✗ Registration failed{status}: ", fg="red", bold=True) + outcome.message,
            err=True,
        )
    else:
        click.echo(
            click.style("✗ Validation Error: ", fg="red", bold=True) + outcome.message,
            err=True,
        )


def _outcome_exit_code(outcome: RegistrationOutcome) -> int:
    if outcome.is_success:
        return 0
    if isinstance(outcome, ServerFailure):
        return 2
    return 1


@click.command()
@click.option("--given", "given_name", default="", help="Given name (required)")
@click.option("--family", "family_name", default="", help="Family name (required)")
@click.option("--dob", "date_of_birth", default="", help="Date of birth, YYYY-MM-DD (required)")
@click.option(
    "--gender",
    type=click.Choice(["Male", "Female", "Other"], case_sensitive=False),
    default="Male",
    show_default=True,
)
@click.option("--title", type=click.Choice(["Mr", "Mrs", "Miss", ""]), default="")
@click.option("--phn", "existing_phn", default="", help="Existing PHN (allocated when omitted)")
@click.option("--phone", "telephone_residence", default="", help="Residence telephone")
@click.option("--mobile", "telephone_mobile", default="", help="Mobile telephone")
@click.option("--nic", "nic_no", default="", help="National identity card number")
@click.option("--guardian-name", default="", help="Guardian name")
@click.option("--guardian-relationship", default="", help="Guardian relationship")
@click.option("--guardian-contact", "guardian_contact_no", default="", help="Guardian contact number")
@click.option(
    "--photo",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Profile photo (at most 2MB)",
)
@click.option("--location", default=None, help="Operating location uuid (overrides config)")
@click.option("--location-name", default=None, help="Operating location name (overrides config)")
@click.option("--print-card", is_flag=True, help="Print a PHN card after registration")
@click.pass_context
def register(
    ctx: click.Context,
    photo: Optional[Path],
    location: Optional[str],
    location_name: Optional[str],
    print_card: bool,
    **form_fields: Any,
) -> None:
    """Register a single patient.

    Exit Codes:
        0: Patient registered
        1: Validation or configuration error
        2: Registry error (rejected, unreachable, schema unavailable)

    Examples:
        # Register with an allocated PHN
        $ patient-intake register --given Amal --family Perera --dob 2006-10-19

        # Register with an existing PHN and print the card
        $ patient-intake register --given Amal --family Perera --dob 2006-10-19 \\
              --phn 0123456789 --print-card
    """
    config: Config = ctx.obj["config"]

    try:
        with RegistryClient(config, password=get_registry_password()) as client:
            session = _build_session(config, client, location, location_name, print_card)
            session.start()

            session.update(**form_fields)
            if photo:
                mime_type = mimetypes.guess_type(photo.name)[0] or "image/png"
                session.attach_profile_image(photo.read_bytes(), mime_type)

            outcome = session.submit(print_card=print_card)
    except PatientIntakeError as e:
        _fail(e)

    _display_outcome(outcome)
    sys.exit(_outcome_exit_code(outcome))


@click.command(name="register-batch")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output JSON file path for registration results",
)
@click.option("--print-cards", is_flag=True, help="Print a PHN card for every registered patient")
@click.option("--location", default=None, help="Operating location uuid (overrides config)")
@click.option("--location-name", default=None, help="Operating location name (overrides config)")
@click.pass_context
def register_batch(
    ctx: click.Context,
    csv_file: Path,
    output: Optional[Path],
    print_cards: bool,
    location: Optional[str],
    location_name: Optional[str],
) -> None:
    """Register every patient in a CSV file.

    Each row is submitted through the same registration session. Rows that
    fail validation or are rejected by the registry are reported and the
    batch continues.

    Exit Codes:
        0: All patients registered
        1: CSV/configuration error, or only validation failures
        2: At least one registry failure
    """
    config: Config = ctx.obj["config"]
    start_time = time.time()

    try:
        registrations = parse_intake_csv(csv_file)
    except PatientIntakeError as e:
        _fail(e)

    click.echo()
    click.echo(click.style("=" * 80, fg="cyan"))
    click.echo(click.style("BATCH PATIENT REGISTRATION", fg="cyan", bold=True))
    click.echo(click.style("=" * 80, fg="cyan"))
    click.echo()
    click.echo(f"CSV File:       {csv_file}")
    click.echo(f"Total Patients: {len(registrations)}")
    click.echo(f"Registry:       {config.registry.api_url}")
    click.echo()

    results: list[dict[str, Any]] = []

    try:
        with RegistryClient(config, password=get_registry_password()) as client:
            session = _build_session(config, client, location, location_name, print_cards)
            session.start()

            for index, registration in enumerate(registrations, start=1):
                session.reset()
                session.update(**_form_fields(registration))
                outcome = session.submit(print_card=print_cards)
                results.append(_result_record(index, registration, outcome))
                _display_row(index, len(registrations), registration, outcome)
    except PatientIntakeError as e:
        _fail(e)

    successful = sum(1 for item in results if item["status"] == "success")
    server_failures = sum(1 for item in results if item["status"] == "server_failure")
    validation_failures = len(results) - successful - server_failures
    elapsed = time.time() - start_time

    click.echo()
    click.echo(click.style("SUMMARY", bold=True))
    click.echo(f"  Successful:          {successful}")
    click.echo(f"  Validation failures: {validation_failures}")
    click.echo(f"  Registry failures:   {server_failures}")
    click.echo(f"  Duration:            {elapsed:.1f}s")

    logger.info(
        f"Batch registration complete: {successful}/{len(results)} successful in {elapsed:.1f}s"
    )

    if output:
        _save_json_output(results, output, csv_file)
        click.echo(f"\nResults saved to: {output}")

    if server_failures:
        sys.exit(2)
    if validation_failures:
        sys.exit(1)
    sys.exit(0)


def _form_fields(registration: RegistrationInput) -> dict[str, Any]:
    return {name: getattr(registration, name) for name in BATCH_FIELDS}


def _result_record(
    row: int, registration: RegistrationInput, outcome: RegistrationOutcome
) -> dict[str, Any]:
    record: dict[str, Any] = {
        "row": row,
        "name": registration.display_name,
        "status": outcome.kind,
    }
    if isinstance(outcome, Succeeded):
        record["phn"] = outcome.phn
        record["patient_uuid"] = outcome.patient_uuid
    else:
        record["message"] = outcome.message
    return record


def _display_row(
    index: int, total: int, registration: RegistrationInput, outcome: RegistrationOutcome
) -> None:
    prefix = f"[{index}/{total}] {registration.display_name}"
    if isinstance(outcome, Succeeded):
        click.echo(click.style("✓ ", fg="green") + f"{prefix} - PHN {outcome.phn}")
    else:
        click.echo(click.style("✗ ", fg="red") + f"{prefix} - {outcome.message}")


def _save_json_output(results: list[dict[str, Any]], output: Path, csv_file: Path) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    document = {
        "csv_file": str(csv_file),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "total": len(results),
        "results": results,
    }
    with open(output, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=2)


@click.group(name="attributes")
def attributes_group() -> None:
    """Person attribute type commands."""
    pass


@attributes_group.command(name="list")
@click.pass_context
def list_attributes(ctx: click.Context) -> None:
    """Fetch and list the registry's person attribute types."""
    config: Config = ctx.obj["config"]

    try:
        with RegistryClient(config, password=get_registry_password()) as client:
            attribute_types = client.fetch_attribute_types()
    except PatientIntakeError as e:
        _fail(e)

    click.echo(f"{'UUID':<38} {'DISPLAY':<30} FORMAT")
    for attribute_type in attribute_types:
        click.echo(
            f"{attribute_type.uuid:<38} {attribute_type.display:<30} {attribute_type.format or ''}"
        )
    click.echo(f"\n{len(attribute_types)} attribute type(s)")


@click.group(name="phn")
def phn_group() -> None:
    """Personal health number commands."""
    pass


@phn_group.command(name="generate")
@click.option("--count", "-n", type=click.IntRange(min=1), default=1, show_default=True)
@click.option("--seed", type=int, default=None, help="Seed for reproducible PHNs")
def generate(count: int, seed: Optional[int]) -> None:
    """Generate random 10-digit PHNs (uniqueness is not checked)."""
    rng = random.Random(seed) if seed is not None else None
    for _ in range(count):
        click.echo(generate_phn(rng))


@click.command()
@click.argument("dob", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.option(
    "--today",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Reference date, YYYY-MM-DD (default: today)",
)
def age(dob: datetime, today: Optional[datetime]) -> None:
    """Show the age in years, months and days for a date of birth."""
    computed = calculate_age(dob.date(), today.date() if today else None)
    click.echo(f"{computed.years} years, {computed.months} months, {computed.days} days")
