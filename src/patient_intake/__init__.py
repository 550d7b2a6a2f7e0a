"""Patient intake workflow: age derivation, PHN allocation and registry submission."""

__version__ = "0.1.0"
