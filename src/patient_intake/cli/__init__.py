"""CLI module.

This module provides the command-line interface for patient-intake.
"""

from patient_intake.cli.main import cli

__all__ = ["cli"]
