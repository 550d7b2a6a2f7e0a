"""PHN card rendering and printing.

Renders a registered patient as a self-contained 68mm x 43mm HTML card with
the PHN encoded as an inline SVG QR code, then hands it to the system browser
which prints and closes the page.
"""

import logging
import webbrowser
from html import escape as html_escape
from pathlib import Path
from typing import Optional

import qrcode
import qrcode.image.svg

from patient_intake.card.template_engine import TemplateLoader, TemplatePersonalizer
from patient_intake.logging_audit.audit import log_audit_event
from patient_intake.models.responses import CardRequest
from patient_intake.registration.phn_generator import is_valid_phn
from patient_intake.utils.exceptions import CardRenderError, TemplateError

logger = logging.getLogger(__name__)

TEMPLATE_PATH = Path(__file__).parent / "templates" / "phn_card.html"
PHOTO_PLACEHOLDER = "PHOTO"

_loader = TemplateLoader()
_personalizer = TemplatePersonalizer(raw_fields=("photo_html", "qr_svg"))


def render_qr_svg(data: str) -> str:
    """Encode data as an inline SVG QR code with a one-module quiet zone."""
    qr = qrcode.QRCode(border=1, image_factory=qrcode.image.svg.SvgPathImage)
    qr.add_data(data)
    qr.make(fit=True)
    return qr.make_image().to_string(encoding="unicode")


def _photo_html(photo: Optional[str]) -> str:
    if not photo:
        return PHOTO_PLACEHOLDER
    return f'<img src="{html_escape(photo, quote=True)}" alt="Patient Photo">'


def render_card(request: CardRequest, template_path: Path = TEMPLATE_PATH) -> str:
    """Render the printable PHN card for a registered patient.

    Args:
        request: PHN, display name and optional photo data URI
        template_path: Card template, defaults to the bundled phn_card.html

    Returns:
        Complete HTML document

    Raises:
        CardRenderError: If the template cannot be loaded or personalized
    """
    try:
        template = _loader.load_from_file(template_path)
        return _personalizer.personalize(
            template,
            {
                "phn": request.phn,
                "display_name": request.display_name.upper(),
                "photo_html": _photo_html(request.photo),
                "qr_svg": render_qr_svg(request.phn),
            },
        )
    except TemplateError as e:
        raise CardRenderError(f"Failed to render PHN card for {request.phn}: {e}") from e


class CardPrinter:
    """Writes PHN cards to disk and opens them for printing.

    Instances are callables accepting a CardRequest, so they can be passed to
    a RegistrationSession as its card printer. Printing is fire-and-forget:
    errors are logged and never propagate to the caller.

    Example:
        >>> printer = CardPrinter(Path("output/cards"), open_browser=False)
        >>> printer(CardRequest(phn="0123456789", display_name="Amal Perera"))
    """

    def __init__(self, output_dir: Path, open_browser: bool = True) -> None:
        self.output_dir = Path(output_dir)
        self.open_browser = open_browser

    def card_path(self, phn: str) -> Path:
        """Card file path inside output_dir.

        Raises:
            CardRenderError: If phn is not a 10-digit PHN
        """
        if not is_valid_phn(phn):
            raise CardRenderError(f"Invalid PHN for card file name: {phn!r}")
        return self.output_dir / f"phn-card-{phn}.html"

    def write(self, request: CardRequest) -> Path:
        """Render and write the card, returning its path.

        Raises:
            CardRenderError: If rendering or writing fails
        """
        path = self.card_path(request.phn)
        html = render_card(request)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(html, encoding="utf-8")
        except OSError as e:
            raise CardRenderError(f"Could not write PHN card to {path}: {e}") from e

        logger.info(f"PHN card written: {path}")
        return path

    def __call__(self, request: CardRequest) -> None:
        try:
            path = self.write(request)
        except CardRenderError as e:
            logger.error(str(e))
            log_audit_event(
                "CARD_PRINTED",
                {"status": "failure", "phn": request.phn, "error_message": str(e)},
            )
            return

        if self.open_browser:
            opened = webbrowser.open(path.resolve().as_uri())
            if not opened:
                logger.warning(f"No browser available to print {path}; print it manually")

        log_audit_event("CARD_PRINTED", {"status": "success", "phn": request.phn})
