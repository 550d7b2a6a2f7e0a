"""Mock registry CLI commands module."""

import logging
from pathlib import Path
from typing import Optional

import click

from patient_intake.mock_server.config import load_config as load_mock_config

logger = logging.getLogger(__name__)


@click.group(name="mock")
def mock_group() -> None:
    """Mock registry management commands.

    Runs a local registry exposing the attribute type schema and patient
    creation endpoints for development and testing.
    """
    pass


@mock_group.command(name="start")
@click.option("--host", default=None, help="Host address (default from mock config: 127.0.0.1)")
@click.option("--port", type=click.IntRange(1, 65535), default=None, help="Port (default: 8080)")
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Mock server configuration file (default: mocks/config.json)",
)
@click.option("--fail", "force_failure", is_flag=True, help="Reject every patient creation")
def start_server(
    host: Optional[str],
    port: Optional[int],
    config_file: Optional[Path],
    force_failure: bool,
) -> None:
    """Start the mock registry in the foreground.

    Example:
        $ patient-intake mock start --port 8080
    """
    from patient_intake.mock_server.app import run_server

    try:
        server_config = load_mock_config(config_file)
    except (ValueError, FileNotFoundError) as e:
        raise click.ClickException(f"Configuration error: {e}")

    overrides = {}
    if host:
        overrides["host"] = host
    if port:
        overrides["port"] = port
    if force_failure:
        overrides["force_failure"] = True
    if overrides:
        server_config = server_config.model_copy(update=overrides)

    base_url = f"http://{server_config.host}:{server_config.port}"

    click.echo("=" * 50)
    click.echo("Mock Patient Registry")
    click.echo("=" * 50)
    click.echo(f"Host: {server_config.host}")
    click.echo(f"Port: {server_config.port}")
    click.echo(f"Health Check: {base_url}/health")
    click.echo(f"Attribute types: {base_url}{server_config.rest_path}/personattributetype")
    click.echo(f"Patients: {base_url}{server_config.rest_path}/patient")
    if server_config.force_failure:
        click.echo("Mode: FAILING every patient creation")
    click.echo("=" * 50)
    click.echo("Starting server... (Press Ctrl+C to stop)")

    try:
        run_server(config=server_config)
    except KeyboardInterrupt:
        click.echo("\n\nServer stopped by user.")
    except OSError as e:
        raise click.ClickException(f"Failed to start server: {e}")
