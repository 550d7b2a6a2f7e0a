"""PHN card CLI commands module."""

import logging
import mimetypes
import sys
import webbrowser
from pathlib import Path
from typing import Optional

import click

from patient_intake.card.renderer import CardPrinter, render_card
from patient_intake.config.schema import Config
from patient_intake.models.patient import ProfileImage
from patient_intake.models.responses import CardRequest
from patient_intake.utils.exceptions import CardRenderError

logger = logging.getLogger(__name__)


@click.group(name="card")
def card_group() -> None:
    """PHN card commands."""
    pass


@card_group.command(name="render")
@click.option("--phn", required=True, help="Personal health number to encode")
@click.option("--name", "display_name", required=True, help="Patient display name")
@click.option(
    "--photo",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Profile photo to embed",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output HTML file (default: <card.output_dir>/phn-card-<PHN>.html)",
)
@click.option("--open", "open_browser", is_flag=True, help="Open the card in a browser to print")
@click.pass_context
def render(
    ctx: click.Context,
    phn: str,
    display_name: str,
    photo: Optional[Path],
    output: Optional[Path],
    open_browser: bool,
) -> None:
    """Render a printable 68mm x 43mm PHN card.

    Example:
        $ patient-intake card render --phn 0123456789 --name "Amal Perera"
    """
    config: Config = ctx.obj["config"]

    photo_uri = None
    if photo:
        mime_type = mimetypes.guess_type(photo.name)[0] or "image/png"
        photo_uri = ProfileImage(content=photo.read_bytes(), mime_type=mime_type).data_uri

    request = CardRequest(phn=phn, display_name=display_name, photo=photo_uri)

    try:
        if output:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(render_card(request), encoding="utf-8")
            path = output
        else:
            path = CardPrinter(config.card.output_dir, open_browser=False).write(request)
    except (CardRenderError, OSError) as e:
        logger.error(f"Card rendering failed: {e}")
        click.echo(click.style("✗ Card Error: ", fg="red", bold=True) + str(e), err=True)
        sys.exit(1)

    click.echo(click.style("✓", fg="green", bold=True) + f" PHN card written: {path}")

    if open_browser:
        webbrowser.open(path.resolve().as_uri())
