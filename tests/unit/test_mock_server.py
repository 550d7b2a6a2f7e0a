"""Unit tests for the mock registry Flask application."""

import json

import pytest

from patient_intake.mock_server import (
    MockAttributeType,
    MockServerConfig,
    get_registered_patients,
    initialize_app,
    load_config,
    reset_registry,
)
from patient_intake.mock_server.registry_endpoint import validate_patient_request

PHN_TYPE = "05a29f94-c0ed-11e2-94be-8c13b969e334"


def patient_body(phn: str = "0123456789", given: str = "Amal", family: str = "Perera") -> dict:
    return {
        "identifiers": [
            {"identifier": phn, "identifierType": PHN_TYPE, "location": "loc-1", "preferred": True}
        ],
        "person": {
            "gender": "M",
            "age": 36,
            "birthdate": "1990-05-12T00:00:00.000+0530",
            "birthdateEstimated": False,
            "names": [{"givenName": given, "familyName": family}],
            "attributes": [],
        },
    }


@pytest.fixture
def mock_config(tmp_path) -> MockServerConfig:
    return MockServerConfig(log_path=str(tmp_path / "mock.log"))


@pytest.fixture
def client(mock_config):
    reset_registry()
    app = initialize_app(mock_config)
    app.config["TESTING"] = True
    yield app.test_client()
    reset_registry()


class TestHealth:
    """Test suite for the health endpoint."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.get_json()
        assert data["status"] == "healthy"
        assert "/ws/rest/v1/patient" in data["endpoints"]
        assert data["patient_count"] == 0

    def test_unknown_route_returns_json_404(self, client):
        response = client.get("/nope")

        assert response.status_code == 404
        assert "Resource not found" in response.get_json()["error"]["message"]


class TestAttributeTypes:
    """Test suite for the attribute type schema endpoint."""

    def test_returns_configured_types(self, client):
        response = client.get("/ws/rest/v1/personattributetype?v=custom:(uuid,display,format)&limit=100")

        assert response.status_code == 200
        results = response.get_json()["results"]
        assert [item["display"] for item in results] == [
            "Telephone Number",
            "Mobile Number",
            "NIC Number",
            "Birthplace",
        ]
        assert set(results[0]) == {"uuid", "display", "format"}

    def test_limit_is_honoured(self, client):
        response = client.get("/ws/rest/v1/personattributetype?limit=2")

        assert len(response.get_json()["results"]) == 2


class TestCreatePatient:
    """Test suite for the patient creation endpoint."""

    def test_created(self, client):
        # Act
        response = client.post("/ws/rest/v1/patient", json=patient_body())

        # Assert
        assert response.status_code == 201
        data = response.get_json()
        assert data["uuid"]
        assert data["display"] == "0123456789 - Amal Perera"
        assert "0123456789" in get_registered_patients()

    def test_duplicate_phn_rejected(self, client):
        client.post("/ws/rest/v1/patient", json=patient_body())

        response = client.post("/ws/rest/v1/patient", json=patient_body(given="Nimali"))

        assert response.status_code == 400
        error = response.get_json()["error"]
        assert error["message"] == "Invalid Submission"
        assert error["globalErrors"][0]["message"] == (
            "Identifier 0123456789 is already in use by another patient"
        )

    def test_missing_name_rejected(self, client):
        response = client.post("/ws/rest/v1/patient", json=patient_body(given=""))

        assert response.status_code == 400
        messages = [e["message"] for e in response.get_json()["error"]["globalErrors"]]
        assert "Name required" in messages

    def test_non_json_body_rejected(self, client):
        response = client.post(
            "/ws/rest/v1/patient", data="not json", content_type="text/plain"
        )

        assert response.status_code == 400

    def test_forced_failure(self, tmp_path):
        reset_registry()
        config = MockServerConfig(
            log_path=str(tmp_path / "mock.log"),
            force_failure=True,
            failure_message="Registry offline",
        )
        app = initialize_app(config)

        response = app.test_client().post("/ws/rest/v1/patient", json=patient_body())

        assert response.status_code == 500
        assert response.get_json() == {"error": {"message": "Registry offline"}}
        assert get_registered_patients() == {}


class TestValidatePatientRequest:
    """Test suite for request body validation."""

    def test_valid_body(self):
        assert validate_patient_request(patient_body()) == []

    def test_not_an_object(self):
        assert validate_patient_request([]) == ["Request body must be a JSON object"]

    def test_missing_fields(self):
        body = patient_body()
        body["identifiers"] = []
        body["person"]["birthdate"] = None
        body["person"]["gender"] = "X"

        errors = validate_patient_request(body)

        assert "Patient must have at least one identifier" in errors
        assert "DOB required" in errors
        assert "Gender must be one of: M, F, O" in errors


class TestMockConfig:
    """Test suite for mock registry configuration loading."""

    def test_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        config = load_config()

        assert config.port == 8080
        assert config.rest_path == "/ws/rest/v1"
        assert len(config.attribute_types) == 4

    def test_file_and_env(self, tmp_path, monkeypatch):
        # Arrange
        path = tmp_path / "mock.json"
        path.write_text(
            json.dumps({"port": 9090, "attribute_types": [{"uuid": "a", "display": "Birthplace"}]}),
            encoding="utf-8",
        )
        monkeypatch.setenv("MOCK_SERVER_FORCE_FAILURE", "true")

        # Act
        config = load_config(path)

        # Assert
        assert config.port == 9090
        assert config.force_failure is True
        assert config.attribute_types == [MockAttributeType(uuid="a", display="Birthplace")]

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.json")

    def test_invalid_port(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("MOCK_SERVER_PORT", "70000")

        with pytest.raises(ValueError, match="Configuration validation failed"):
            load_config()
