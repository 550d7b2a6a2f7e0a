"""CSV parser for batch patient intake.

This module reads one registration per CSV row into RegistrationInput objects
so a batch can be submitted through a RegistrationSession row by row.
"""

import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from patient_intake.models.patient import Gender, RegistrationInput
from patient_intake.utils.exceptions import ValidationError

logger = logging.getLogger(__name__)

# Required CSV columns
REQUIRED_COLUMNS = ["given_name", "family_name", "date_of_birth"]

# Optional CSV columns, copied verbatim onto RegistrationInput
OPTIONAL_COLUMNS = [
    "gender",
    "existing_phn",
    "title",
    "nic_no",
    "telephone_residence",
    "telephone_mobile",
    "guardian_name",
    "guardian_relationship",
    "guardian_contact_no",
]


def parse_intake_csv(file_path: Path) -> list[RegistrationInput]:
    """Parse registrations from a CSV file.

    All cells are read as text so PHNs and phone numbers keep their leading
    zeros. Blank names are passed through unchanged: they are rejected per row
    by the registration session, not here.

    Args:
        file_path: Path to a UTF-8 CSV file with a header row

    Returns:
        One RegistrationInput per data row, in file order

    Raises:
        FileNotFoundError: If the CSV file does not exist
        ValidationError: If required columns are missing or any row has an
                         invalid date of birth or gender (all errors are
                         reported together)
    """
    logger.info(f"Loading intake CSV from {file_path}")

    if not file_path.exists():
        raise FileNotFoundError(f"CSV file not found: {file_path}")

    try:
        df = pd.read_csv(file_path, encoding="utf-8", dtype=str, keep_default_na=False)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise ValidationError(
            f"Failed to read CSV file {file_path}. Ensure file is valid CSV with UTF-8 encoding. Error: {e}"
        ) from e

    missing_columns = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing_columns:
        raise ValidationError(
            f"CSV validation failed:\n  - Missing required columns: {', '.join(missing_columns)}. "
            f"Required columns are: {', '.join(REQUIRED_COLUMNS)}"
        )

    unknown_columns = [
        col for col in df.columns if col not in REQUIRED_COLUMNS + OPTIONAL_COLUMNS
    ]
    if unknown_columns:
        logger.warning(
            f"CSV contains unknown columns that will be ignored: {', '.join(unknown_columns)}"
        )

    errors: list[str] = []
    registrations: list[RegistrationInput] = []

    for idx, row in df.iterrows():
        row_num = idx + 2  # +1 for header, +1 for 1-indexed
        row_errors: list[str] = []

        birth_date = _parse_date_of_birth(row["date_of_birth"], row_num, row_errors)
        gender = _parse_gender(row.get("gender", ""), row_num, row_errors)

        if row_errors:
            errors.extend(row_errors)
            continue

        registration = RegistrationInput(
            given_name=row["given_name"].strip(),
            family_name=row["family_name"].strip(),
            date_of_birth=birth_date,
            gender=gender,
        )
        for column in OPTIONAL_COLUMNS:
            if column != "gender" and column in df.columns:
                setattr(registration, column, row[column].strip())

        registrations.append(registration)

    if errors:
        raise ValidationError(
            f"Found {len(errors)} validation error(s) in CSV:\n  - " + "\n  - ".join(errors)
        )

    logger.info(f"Successfully parsed {len(registrations)} registration(s)")
    return registrations


def _parse_date_of_birth(value: str, row_num: int, errors: list[str]):
    value = value.strip()
    if not value:
        return None
    try:
        return pd.to_datetime(value, format="%Y-%m-%d").date()
    except (ValueError, TypeError):
        errors.append(
            f"Row {row_num}: Invalid date format '{value}'. "
            "Expected format: YYYY-MM-DD (e.g., 1980-01-15)"
        )
        return None


def _parse_gender(value: Optional[str], row_num: int, errors: list[str]) -> Gender:
    if value is None or not value.strip():
        return Gender.MALE
    try:
        return Gender.parse(value)
    except ValueError:
        errors.append(
            f"Row {row_num}: Invalid gender '{value}'. "
            "Must be one of: Male, Female, Other (case-insensitive)"
        )
        return Gender.MALE
