"""Audit trail functionality for the patient intake workflow.

This module provides structured audit logging for tracking registrations,
registry exchanges, and compliance requirements.
"""

import time
import uuid
from typing import Any, Dict

from .logger import get_logger

logger = get_logger(__name__)

# Key fields are emitted first, in this order
FIELD_ORDER = [
    "status",
    "phn",
    "location",
    "attribute_count",
    "record_count",
    "duration",
    "error_message",
    "correlation_id",
]


def log_audit_event(event_type: str, details: Dict[str, Any]) -> None:
    """Log an audit trail event.

    Creates a structured audit log entry. Audit events are logged at INFO level
    for successful operations and ERROR level for failures.

    Args:
        event_type: Type of operation (e.g., "SCHEMA_LOADED", "PATIENT_REGISTERED",
                   "REGISTRATION_FAILED", "CARD_PRINTED")
        details: Dictionary with event details. Common fields include:
                - status: "success" or "failure"
                - phn: Effective PHN
                - location: Operating location uuid
                - duration: Operation duration in seconds
                - error_message: Error details (if status is failure)
                - correlation_id: Optional correlation ID for tracking related events

    Example:
        >>> log_audit_event("PATIENT_REGISTERED", {
        ...     "status": "success",
        ...     "phn": "0123456789",
        ...     "duration": 0.4
        ... })
    """
    if "timestamp" not in details:
        details["timestamp"] = time.time()

    if "correlation_id" not in details:
        details["correlation_id"] = str(uuid.uuid4())

    message_parts = [f"AUDIT [{event_type}]"]

    for field in FIELD_ORDER:
        if field in details:
            value = details[field]
            if field == "duration" and isinstance(value, (int, float)):
                message_parts.append(f"{field}={value:.2f}s")
            else:
                message_parts.append(f"{field}={value}")

    for key, value in details.items():
        if key not in FIELD_ORDER and key != "timestamp":
            message_parts.append(f"{key}={value}")

    audit_message = " | ".join(message_parts)

    if details.get("status") == "failure":
        logger.error(audit_message)
    else:
        logger.info(audit_message)


def log_transaction(
    transaction_type: str,
    request: str,
    response: str,
    status: str = "success",
) -> None:
    """Log a complete registry exchange with request and response bodies.

    The header line is logged at INFO; full bodies are logged at DEBUG to
    avoid cluttering INFO logs.

    Args:
        transaction_type: Type of exchange (e.g., "SCHEMA_QUERY", "PATIENT_CREATE")
        request: Request body (JSON text or query string)
        response: Response body text
        status: Exchange status ("success" or "failure")
    """
    correlation_id = str(uuid.uuid4())

    logger.info(
        f"TRANSACTION [{transaction_type}] | "
        f"status={status} | "
        f"correlation_id={correlation_id} | "
        f"request_size={len(request)} bytes | "
        f"response_size={len(response)} bytes"
    )

    logger.debug(
        f"TRANSACTION REQUEST [{transaction_type}] | "
        f"correlation_id={correlation_id}\n"
        f"{request}"
    )

    logger.debug(
        f"TRANSACTION RESPONSE [{transaction_type}] | "
        f"correlation_id={correlation_id}\n"
        f"{response}"
    )
