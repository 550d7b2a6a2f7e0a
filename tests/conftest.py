"""
Shared pytest configuration and fixtures.

This module provides fixtures and configuration used across all test suites
(unit and integration tests).
"""

import logging
from datetime import date, timezone
from pathlib import Path
from typing import Any, Optional

import pytest

from patient_intake.models.attributes import PersonAttributeType
from patient_intake.models.patient import SessionContext
from patient_intake.models.responses import RegistryResponse

FIXED_TODAY = date(2026, 10, 19)
LOCATION_UUID = "44c3efb0-2583-4c80-a79e-1f756a03c0a1"


class StubRegistryClient:
    """In-memory registry gateway recording every call."""

    def __init__(
        self,
        attribute_types: Optional[list[PersonAttributeType]] = None,
        response: Optional[RegistryResponse] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.attribute_types = attribute_types or []
        self.response = response or RegistryResponse(status_code=201, body={"uuid": "patient-uuid-1"})
        self.error = error
        self.fetch_calls = 0
        self.create_calls = 0
        self.payloads: list[dict[str, Any]] = []

    def fetch_attribute_types(self, limit: Optional[int] = None) -> list[PersonAttributeType]:
        self.fetch_calls += 1
        return list(self.attribute_types)

    def create_patient(self, payload: dict[str, Any]) -> RegistryResponse:
        self.create_calls += 1
        self.payloads.append(payload)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def project_root() -> Path:
    """
    Return the project root directory.

    Returns:
        Path: Absolute path to the project root directory.
    """
    return Path(__file__).parent.parent


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the test fixtures directory path."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def attribute_types() -> list[PersonAttributeType]:
    """Attribute type schema as a typical registry returns it."""
    return [
        PersonAttributeType(uuid="attr-phone", display="Telephone Number", format="java.lang.String"),
        PersonAttributeType(uuid="attr-mobile", display="Mobile Number", format="java.lang.String"),
        PersonAttributeType(uuid="attr-nic", display="NIC Number", format="java.lang.String"),
        PersonAttributeType(uuid="attr-birthplace", display="Birthplace", format="java.lang.String"),
    ]


@pytest.fixture
def stub_client(attribute_types: list[PersonAttributeType]) -> StubRegistryClient:
    """Registry stub answering every creation with 201."""
    return StubRegistryClient(attribute_types=attribute_types)


@pytest.fixture
def session_context() -> SessionContext:
    return SessionContext(location_uuid=LOCATION_UUID, location_display="Outpatient Department")


@pytest.fixture
def fixed_today() -> date:
    return FIXED_TODAY


@pytest.fixture
def utc() -> timezone:
    return timezone.utc


@pytest.fixture
def make_stub_client(attribute_types: list[PersonAttributeType]):
    """Factory for registry stubs with a custom response or error."""

    def _make(
        response: Optional[RegistryResponse] = None,
        error: Optional[Exception] = None,
        types: Optional[list[PersonAttributeType]] = None,
    ) -> StubRegistryClient:
        return StubRegistryClient(
            attribute_types=attribute_types if types is None else types,
            response=response,
            error=error,
        )

    return _make


@pytest.fixture
def restore_root_logger():
    """Restore root logger handlers and level changed by configure_logging."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
