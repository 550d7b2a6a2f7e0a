"""CSV batch intake module."""

from patient_intake.csv_parser.parser import (
    OPTIONAL_COLUMNS,
    REQUIRED_COLUMNS,
    parse_intake_csv,
)

__all__ = [
    "OPTIONAL_COLUMNS",
    "REQUIRED_COLUMNS",
    "parse_intake_csv",
]
