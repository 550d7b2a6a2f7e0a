"""Registry response parsing.

The registry reports failures as a structured error object:

    {"error": {"message": "...", "globalErrors": [{"message": "..."}, ...]}}
"""

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_MESSAGE = "Patient creation failed"


def extract_error_message(body: Any) -> str:
    """Operator-facing message from a registry error body.

    Global error messages, joined with ", ", take precedence over the
    top-level message. Falls back to "Patient creation failed".

    Example:
        >>> extract_error_message({"error": {"message": "Invalid Submission",
        ...     "globalErrors": [{"message": "Name required"}, {"message": "DOB required"}]}})
        'Name required, DOB required'
        >>> extract_error_message(None)
        'Patient creation failed'
    """
    if not isinstance(body, dict):
        return DEFAULT_FAILURE_MESSAGE

    error = body.get("error")
    if not isinstance(error, dict):
        return DEFAULT_FAILURE_MESSAGE

    global_errors = error.get("globalErrors")
    if isinstance(global_errors, list) and global_errors:
        messages = [
            str(item.get("message")) if isinstance(item, dict) else str(item)
            for item in global_errors
        ]
        return ", ".join(messages)

    message = error.get("message")
    if message:
        return str(message)

    return DEFAULT_FAILURE_MESSAGE


def extract_patient_uuid(body: Any) -> Optional[str]:
    """Uuid of the created patient from a success body, if present."""
    if isinstance(body, dict) and body.get("uuid"):
        return str(body["uuid"])
    return None
