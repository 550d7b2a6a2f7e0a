"""Main CLI entry point for patient-intake.

This module provides the main Click command group for the patient-intake CLI.
"""

from pathlib import Path
from typing import Optional

import click

from patient_intake import __version__
from patient_intake.cli.card_commands import card_group
from patient_intake.cli.mock_commands import mock_group
from patient_intake.cli.register_commands import (
    age,
    attributes_group,
    phn_group,
    register,
    register_batch,
)
from patient_intake.config import load_config
from patient_intake.logging_audit import configure_logging
from patient_intake.utils.exceptions import ConfigurationError


@click.group()
@click.version_option(version=__version__, prog_name="patient-intake")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: ./config/config.json)",
)
@click.option("--verbose", is_flag=True, help="Enable verbose logging (DEBUG level)")
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to log file (overrides config file)",
)
@click.option(
    "--redact-pii",
    is_flag=True,
    help="Redact PII (PHNs, NIC numbers, phone numbers, names) from logs",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: bool,
    log_file: Optional[Path],
    redact_pii: bool,
) -> None:
    """Patient Intake - register patients with a remote patient registry.

    Captures demographics, derives the patient's age, allocates a personal
    health number (PHN) and prints PHN cards.

    Common usage:

        # Register a patient
        patient-intake register --given Amal --family Perera --dob 2006-10-19

        # Register every row of a CSV file
        patient-intake register-batch examples/patients_sample.csv

        # Run the local mock registry
        patient-intake mock start

    Use --help with any command for more information.
    """
    ctx.ensure_object(dict)

    try:
        config_obj = load_config(config)
        ctx.obj["config"] = config_obj
    except ConfigurationError as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        ctx.exit(1)

    ctx.obj["verbose"] = verbose
    ctx.obj["redact_pii"] = redact_pii
    ctx.obj["log_file"] = log_file

    # Precedence: CLI flags > config file > defaults
    log_level = "DEBUG" if verbose else config_obj.logging.level
    log_file_path = log_file if log_file else config_obj.logging.log_file
    redact_pii_setting = redact_pii if redact_pii else config_obj.logging.redact_pii

    configure_logging(
        level=log_level, log_file=log_file_path, redact_pii=redact_pii_setting
    )


cli.add_command(age)
cli.add_command(attributes_group)
cli.add_command(card_group)
cli.add_command(mock_group)
cli.add_command(phn_group)
cli.add_command(register)
cli.add_command(register_batch)


@cli.group()
def config() -> None:
    """Configuration management commands."""
    pass


@config.command()
@click.argument("config_file", type=click.Path(exists=True, path_type=Path))
def validate(config_file: Path) -> None:
    """Validate a configuration file.

    Example:
        patient-intake config validate config/config.json
    """
    try:
        config_obj = load_config(config_file)
    except ConfigurationError as e:
        click.echo(click.style("✗", fg="red", bold=True) + " Configuration validation failed")
        click.echo(f"\n{e}", err=True)
        raise click.exceptions.Exit(1)

    click.echo(click.style("✓", fg="green", bold=True) + " Configuration is valid")
    click.echo(f"\nConfiguration file: {config_file}")
    click.echo("\nRegistry:")
    click.echo(f"  API URL:          {config_obj.registry.api_url}")
    click.echo(f"  Identifier type:  {config_obj.registry.identifier_type}")
    click.echo(f"  Attribute limit:  {config_obj.registry.attribute_type_limit}")
    click.echo(f"  Username:         {config_obj.registry.username or 'Not configured'}")

    click.echo("\nSession:")
    click.echo(f"  Location:         {config_obj.session.location_uuid or 'Not configured'}")
    click.echo(f"  Location name:    {config_obj.session.location_display or 'Not configured'}")

    click.echo("\nTransport:")
    click.echo(f"  Verify TLS:       {config_obj.transport.verify_tls}")
    click.echo(
        f"  Timeouts:         {config_obj.transport.timeout_connect}s connect, "
        f"{config_obj.transport.timeout_read}s read"
    )

    click.echo("\nLogging:")
    click.echo(f"  Level:            {config_obj.logging.level}")
    click.echo(f"  Log file:         {config_obj.logging.log_file}")
    click.echo(f"  Redact PII:       {config_obj.logging.redact_pii}")

    click.echo("\nCards:")
    click.echo(f"  Output dir:       {config_obj.card.output_dir}")
    click.echo(f"  Open browser:     {config_obj.card.open_browser}")


cli.add_command(config)


@cli.command()
def version() -> None:
    """Display version information."""
    click.echo(f"patient-intake version {__version__}")


if __name__ == "__main__":
    cli()
