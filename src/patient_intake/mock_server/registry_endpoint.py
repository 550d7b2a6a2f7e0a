"""Mock registry REST endpoints for testing.

Serves the person attribute type schema and accepts patient creation
requests, answering with registry-style JSON bodies. Patients are kept in
memory for the lifetime of the process.
"""

import logging
import threading
import time
import uuid
from datetime import datetime, timezone
from typing import Any

from flask import Blueprint, Flask, Response, jsonify, request

from .config import MockServerConfig

registry_bp = Blueprint("registry", __name__)

registry_logger = logging.getLogger("patient_intake.mock_server.registry")

_config: MockServerConfig | None = None

# Registered patients keyed by PHN
_patients: dict[str, dict[str, Any]] = {}
_patients_lock = threading.Lock()

VALID_GENDER_CODES = ("M", "F", "O")


def error_response(
    message: str,
    global_errors: list[str] | None = None,
    http_status: int = 400,
) -> tuple[Response, int]:
    """Build a registry error body.

    Args:
        message: Top-level error message
        global_errors: Individual messages for the globalErrors list
        http_status: HTTP status code

    Returns:
        Tuple of (Response object, HTTP status code)
    """
    error: dict[str, Any] = {"message": message}
    if global_errors:
        error["globalErrors"] = [
            {"code": "error.general", "message": item} for item in global_errors
        ]
    registry_logger.warning(f"Error response ({http_status}): {message} {global_errors or ''}")
    return jsonify({"error": error}), http_status


def validate_patient_request(body: Any) -> list[str]:
    """Collect validation errors for a patient creation body.

    Returns:
        Error messages (empty if the body is acceptable)
    """
    if not isinstance(body, dict):
        return ["Request body must be a JSON object"]

    errors: list[str] = []

    identifiers = body.get("identifiers")
    if not isinstance(identifiers, list) or not identifiers:
        errors.append("Patient must have at least one identifier")
    else:
        for identifier in identifiers:
            if not isinstance(identifier, dict) or not identifier.get("identifier"):
                errors.append("Identifier value is required")
            elif not identifier.get("identifierType"):
                errors.append("Identifier type is required")
            elif not identifier.get("location"):
                errors.append("Identifier location is required")

    person = body.get("person")
    if not isinstance(person, dict):
        errors.append("Person is required")
        return errors

    names = person.get("names")
    name = names[0] if isinstance(names, list) and names and isinstance(names[0], dict) else {}
    if not name.get("givenName") or not name.get("familyName"):
        errors.append("Name required")
    if not person.get("birthdate"):
        errors.append("DOB required")
    if person.get("gender") not in VALID_GENDER_CODES:
        errors.append(f"Gender must be one of: {', '.join(VALID_GENDER_CODES)}")

    return errors


@registry_bp.route("/personattributetype", methods=["GET"])
def handle_attribute_types() -> tuple[Response, int]:
    """Return the configured person attribute types, honouring ?limit=."""
    attribute_types = _config.attribute_types if _config else []

    limit = request.args.get("limit", type=int)
    if limit is not None and limit >= 0:
        attribute_types = attribute_types[:limit]

    registry_logger.info(
        f"Attribute type query (v={request.args.get('v')}, limit={limit}): "
        f"{len(attribute_types)} result(s)"
    )
    return jsonify({"results": [item.model_dump() for item in attribute_types]}), 200


@registry_bp.route("/patient", methods=["POST"])
def handle_create_patient() -> tuple[Response, int]:
    """Handle a patient creation request.

    Returns:
        201 with the created patient, 400 with globalErrors on validation
        failure or duplicate PHN, 500 when failure is forced
    """
    start_time = datetime.now(timezone.utc)
    registry_logger.info("Received patient creation request")

    if _config and _config.response_delay_ms > 0:
        registry_logger.debug(f"Simulating network delay: {_config.response_delay_ms}ms")
        time.sleep(_config.response_delay_ms / 1000.0)

    if _config and _config.force_failure:
        return error_response(_config.failure_message, http_status=500)

    body = request.get_json(silent=True)
    errors = validate_patient_request(body)
    if errors:
        return error_response("Invalid Submission", errors)

    identifier = body["identifiers"][0]
    phn = identifier["identifier"]
    person = body["person"]
    name = person["names"][0]

    with _patients_lock:
        if phn in _patients:
            return error_response(
                "Invalid Submission",
                [f"Identifier {phn} is already in use by another patient"],
            )

        patient_uuid = str(uuid.uuid4())
        created = {
            "uuid": patient_uuid,
            "display": f"{phn} - {name['givenName']} {name['familyName']}",
            "identifiers": body["identifiers"],
            "person": {
                "uuid": patient_uuid,
                "display": f"{name['givenName']} {name['familyName']}",
                "gender": person["gender"],
                "age": person.get("age"),
                "birthdate": person["birthdate"],
                "attributes": person.get("attributes", []),
            },
        }
        _patients[phn] = created

    processing_time_ms = int((datetime.now(timezone.utc) - start_time).total_seconds() * 1000)
    registry_logger.info(
        f"Patient created - PHN: {phn}, uuid: {patient_uuid}, ProcessingTime: {processing_time_ms}ms"
    )
    return jsonify(created), 201


def get_registered_patients() -> dict[str, dict[str, Any]]:
    """Snapshot of registered patients keyed by PHN."""
    with _patients_lock:
        return dict(_patients)


def reset_registry() -> None:
    """Forget all registered patients."""
    with _patients_lock:
        _patients.clear()


def register_registry_endpoint(app: Flask, config: MockServerConfig) -> None:
    """Register the registry endpoints with the Flask app.

    Args:
        app: Flask application instance
        config: Mock server configuration
    """
    global _config
    _config = config

    if registry_bp.name not in app.blueprints:
        app.register_blueprint(registry_bp, url_prefix=config.rest_path)
        registry_logger.info(f"Registered registry endpoints under {config.rest_path}")
    else:
        registry_logger.debug("Registry endpoints already registered")
