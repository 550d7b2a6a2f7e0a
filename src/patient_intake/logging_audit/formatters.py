"""Custom log formatters for the patient intake workflow.

This module provides specialized formatters for logging, including PII redaction.
"""

import logging
import re
from typing import List, Tuple


class PIIRedactingFormatter(logging.Formatter):
    """Formatter that redacts Personally Identifiable Information (PII) from log messages.

    Redacts PHNs, national identity card numbers, telephone numbers and patient
    names when enabled.

    Example:
        >>> formatter = PIIRedactingFormatter(redact_pii=True)
        >>> handler = logging.StreamHandler()
        >>> handler.setFormatter(formatter)
    """

    def __init__(
        self,
        fmt: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt: str | None = None,
        redact_pii: bool = False,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.redact_pii = redact_pii

        # Order matters: NIC (9 digits + V/X or 12 digits) before the 10-digit PHN
        self.patterns: List[Tuple[re.Pattern[str], str]] = [
            # NIC: 123456789V, 123456789X or 12-digit new format
            (re.compile(r'\b(?:\d{9}[VvXx]|\d{12})\b'), '[NIC-REDACTED]'),

            # PHN: exactly 10 digits
            (re.compile(r'\b\d{10}\b'), '[PHN-REDACTED]'),

            # Phone numbers with separators: +94 77 123 4567, 011-2345678
            (re.compile(r'\+?\d{2,4}[\s-]\d{2,4}[\s-]?\d{3,4}(?:[\s-]?\d{3,4})?'),
             '[PHONE-REDACTED]'),

            # name="Amal Perera", name='Amal', name=Amal
            (re.compile(r'name=["\']?([^"\'|,]+)["\']?'), 'name=[NAME-REDACTED]'),

            # "Patient: Amal Perera", "Name: Amal Perera"
            (re.compile(r'(Patient|Name):\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)+)'),
             r'\1: [NAME-REDACTED]'),
        ]

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with optional PII redaction."""
        original = super().format(record)

        if self.redact_pii:
            for pattern, replacement in self.patterns:
                original = pattern.sub(replacement, original)

        return original
