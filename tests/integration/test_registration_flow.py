"""End-to-end registration against the mock registry over HTTP."""

import json
import re
from datetime import date

import pytest
from click.testing import CliRunner

from patient_intake.cli.main import cli
from patient_intake.config.schema import Config, RegistryConfig
from patient_intake.mock_server import get_registered_patients
from patient_intake.models.patient import RegistrationInput, SessionContext
from patient_intake.models.responses import (
    RegistrationState,
    ServerFailure,
    Succeeded,
    ValidationFailure,
)
from patient_intake.registration import RegistrationSession
from patient_intake.transport import RegistryClient
from patient_intake.utils.exceptions import SchemaFetchError

LOCATION_UUID = "44c3efb0-2583-4c80-a79e-1f756a03c0a1"

pytestmark = [pytest.mark.integration, pytest.mark.usefixtures("restore_root_logger")]


@pytest.fixture
def session(registry_config):
    with RegistryClient(registry_config) as client:
        session = RegistrationSession(
            client,
            SessionContext(LOCATION_UUID, "Outpatient Department"),
            clock=lambda: date(2026, 10, 19),
        )
        session.start()
        yield session


class TestRegistrationFlow:
    """Complete intake workflow against the mock registry."""

    def test_register_new_patient(self, session):
        # Arrange
        session.update(
            given_name="Amal",
            family_name="Perera",
            date_of_birth="2006-10-19",
            telephone_mobile="0771234567",
        )
        assert session.input.age_years == "20"

        # Act
        outcome = session.submit()

        # Assert
        assert isinstance(outcome, Succeeded)
        assert re.fullmatch(r"\d{10}", outcome.phn)
        assert outcome.display_name == "Amal Perera"
        assert outcome.location_display == "Outpatient Department"
        assert outcome.patient_uuid

        stored = get_registered_patients()[outcome.phn]
        assert stored["identifiers"][0]["location"] == LOCATION_UUID
        assert stored["person"]["gender"] == "M"
        assert stored["person"]["attributes"] == [
            {"attributeType": "8f2c1e1a-6f3b-4f7e-9f1a-2b1f5d3c7a01", "value": "0771234567"}
        ]

        assert session.input == RegistrationInput.empty()
        assert session.state is RegistrationState.SUCCEEDED

    def test_schema_loaded_from_registry(self, session):
        assert [t.display for t in session.attribute_types] == [
            "Telephone Number",
            "Mobile Number",
            "NIC Number",
            "Birthplace",
        ]

    def test_duplicate_phn_reported_as_server_failure(self, session):
        # Arrange
        session.update(given_name="Amal", family_name="Perera", date_of_birth="2006-10-19",
                       existing_phn="0123456789")
        first = session.submit()

        # Act
        session.update(given_name="Nimali", family_name="Fernando", date_of_birth="1985-11-03",
                       existing_phn="0123456789")
        second = session.submit()

        # Assert
        assert isinstance(first, Succeeded)
        assert second == ServerFailure(
            message="Identifier 0123456789 is already in use by another patient",
            status_code=400,
        )
        assert session.input.given_name == "Nimali"
        assert len(get_registered_patients()) == 1

    def test_validation_failure_sends_nothing(self, session):
        session.update(given_name="Amal", date_of_birth="2006-10-19")

        outcome = session.submit()

        assert isinstance(outcome, ValidationFailure)
        assert get_registered_patients() == {}

    def test_reset_after_failure(self, session):
        session.update(given_name="Amal")
        session.submit()

        assert session.reset() is True
        assert session.input == RegistrationInput.empty()
        assert session.state is RegistrationState.IDLE


class TestUnreachableRegistry:
    """Behavior when nothing listens on the registry port."""

    def test_schema_fetch_fails(self, unused_registry_url):
        config = Config(registry=RegistryConfig(base_url=unused_registry_url))

        with RegistryClient(config) as client:
            session = RegistrationSession(client, SessionContext(LOCATION_UUID))
            with pytest.raises(SchemaFetchError):
                session.start()

        assert session.is_ready is False


class TestCliAgainstRegistry:
    """CLI commands talking to the mock registry."""

    def test_register_command(self, registry_config_file, tmp_path):
        result = CliRunner().invoke(
            cli,
            ["--config", str(registry_config_file), "--log-file", str(tmp_path / "cli.log"),
             "register", "--given", "Amal", "--family", "Perera", "--dob", "2006-10-19",
             "--phn", "0123456789", "--print-card"],
        )

        assert result.exit_code == 0, result.output
        assert "0123456789" in get_registered_patients()
        assert (tmp_path / "cards" / "phn-card-0123456789.html").exists()

    def test_register_batch_command(self, registry_config_file, patients_csv, tmp_path):
        # Arrange
        output = tmp_path / "results.json"

        # Act
        result = CliRunner().invoke(
            cli,
            ["--config", str(registry_config_file), "--log-file", str(tmp_path / "cli.log"),
             "register-batch", str(patients_csv), "-o", str(output)],
        )

        # Assert
        assert result.exit_code == 0, result.output
        document = json.loads(output.read_text(encoding="utf-8"))
        assert [r["status"] for r in document["results"]] == ["success"] * 3
        registered = get_registered_patients()
        assert {r["phn"] for r in document["results"]} == set(registered)
        names = sorted(p["person"]["display"] for p in registered.values())
        assert names == ["Amal Perera", "Kasun Silva", "Nimali Fernando"]

    def test_attributes_list_command(self, registry_config_file, tmp_path):
        result = CliRunner().invoke(
            cli,
            ["--config", str(registry_config_file), "--log-file", str(tmp_path / "cli.log"),
             "attributes", "list"],
        )

        assert result.exit_code == 0
        assert "NIC Number" in result.output
