"""PHN card rendering module."""

from patient_intake.card.renderer import CardPrinter, render_card, render_qr_svg
from patient_intake.card.template_engine import TemplateLoader, TemplatePersonalizer

__all__ = [
    "CardPrinter",
    "TemplateLoader",
    "TemplatePersonalizer",
    "render_card",
    "render_qr_svg",
]
