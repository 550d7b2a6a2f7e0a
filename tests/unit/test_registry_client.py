"""Unit tests for the registry REST client."""

import json
import logging
from unittest.mock import Mock

import pytest
import requests

from patient_intake.config.schema import Config, RegistryConfig, TransportConfig
from patient_intake.models.attributes import PersonAttributeType
from patient_intake.transport.registry_client import ATTRIBUTE_TYPE_VIEW, RegistryClient
from patient_intake.utils.exceptions import SchemaFetchError, TransportError


@pytest.fixture
def config() -> Config:
    return Config(
        registry=RegistryConfig(base_url="https://registry.example.org/openmrs/", username="admin"),
        transport=TransportConfig(timeout_connect=5, timeout_read=15),
    )


@pytest.fixture
def mock_session() -> Mock:
    session = Mock()
    session.headers = {}
    return session


def make_response(status_code: int, body=None, text: str | None = None) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    if body is not None:
        response.json.return_value = body
        response.text = json.dumps(body)
    else:
        response.json.side_effect = ValueError("No JSON")
        response.text = text or ""
    return response


class TestRegistryClientInit:
    """Test suite for client construction."""

    def test_session_configuration(self, config, mock_session):
        # Arrange & Act
        client = RegistryClient(config, password="secret", session=mock_session)

        # Assert
        assert client.api_url == "https://registry.example.org/openmrs/ws/rest/v1"
        assert client.timeout == (5, 15)
        assert mock_session.auth == ("admin", "secret")
        assert mock_session.verify is True
        assert mock_session.headers["Accept"] == "application/json"

    def test_no_auth_without_username(self, mock_session):
        config = Config(registry=RegistryConfig(base_url="https://registry.example.org"))

        RegistryClient(config, session=mock_session)

        assert not isinstance(mock_session.auth, tuple)

    def test_http_url_logs_security_warning(self, mock_session, caplog):
        config = Config(registry=RegistryConfig(base_url="http://localhost:8080"))

        with caplog.at_level(logging.WARNING):
            RegistryClient(config, session=mock_session)

        assert "SECURITY WARNING" in caplog.text

    def test_context_manager_closes_session(self, config, mock_session):
        with RegistryClient(config, session=mock_session):
            pass

        mock_session.close.assert_called_once()


class TestFetchAttributeTypes:
    """Test suite for the attribute type schema query."""

    def test_returns_types_in_registry_order(self, config, mock_session):
        # Arrange
        mock_session.get.return_value = make_response(
            200,
            {
                "results": [
                    {"uuid": "u1", "display": "Telephone Number", "format": "java.lang.String"},
                    {"uuid": "u2", "display": "Mobile Number", "format": None},
                ]
            },
        )
        client = RegistryClient(config, session=mock_session)

        # Act
        types = client.fetch_attribute_types()

        # Assert
        assert types == [
            PersonAttributeType("u1", "Telephone Number", "java.lang.String"),
            PersonAttributeType("u2", "Mobile Number", None),
        ]
        mock_session.get.assert_called_once_with(
            "https://registry.example.org/openmrs/ws/rest/v1/personattributetype",
            params={"v": ATTRIBUTE_TYPE_VIEW, "limit": 100},
            timeout=(5, 15),
        )

    def test_explicit_limit(self, config, mock_session):
        mock_session.get.return_value = make_response(200, {"results": []})
        client = RegistryClient(config, session=mock_session)

        assert client.fetch_attribute_types(limit=10) == []
        assert mock_session.get.call_args.kwargs["params"]["limit"] == 10

    def test_http_error_raises_schema_fetch_error(self, config, mock_session):
        mock_session.get.return_value = make_response(401, text="Unauthorized")
        client = RegistryClient(config, session=mock_session)

        with pytest.raises(SchemaFetchError, match="HTTP 401"):
            client.fetch_attribute_types()

    def test_connection_error_raises_schema_fetch_error(self, config, mock_session):
        mock_session.get.side_effect = requests.ConnectionError("refused")
        client = RegistryClient(config, session=mock_session)

        with pytest.raises(SchemaFetchError, match="could not reach registry"):
            client.fetch_attribute_types()

    def test_malformed_body_raises_schema_fetch_error(self, config, mock_session):
        mock_session.get.return_value = make_response(200, text="<html></html>")
        client = RegistryClient(config, session=mock_session)

        with pytest.raises(SchemaFetchError, match="malformed"):
            client.fetch_attribute_types()


class TestCreatePatient:
    """Test suite for patient creation."""

    def test_posts_json_payload(self, config, mock_session):
        # Arrange
        mock_session.post.return_value = make_response(201, {"uuid": "p-1"})
        client = RegistryClient(config, session=mock_session)
        payload = {"identifiers": [], "person": {"gender": "M"}}

        # Act
        response = client.create_patient(payload)

        # Assert
        assert response.status_code == 201
        assert response.ok
        assert response.body == {"uuid": "p-1"}
        args, kwargs = mock_session.post.call_args
        assert args[0] == "https://registry.example.org/openmrs/ws/rest/v1/patient"
        assert json.loads(kwargs["data"].decode("utf-8")) == payload
        assert kwargs["headers"]["Content-Type"] == "application/json"
        assert kwargs["timeout"] == (5, 15)

    def test_error_response_is_returned_not_raised(self, config, mock_session):
        body = {"error": {"message": "Invalid Submission", "globalErrors": [{"message": "Name required"}]}}
        mock_session.post.return_value = make_response(400, body)
        client = RegistryClient(config, session=mock_session)

        response = client.create_patient({})

        assert response.status_code == 400
        assert not response.ok
        assert response.body == body

    def test_non_json_body_is_none(self, config, mock_session):
        mock_session.post.return_value = make_response(502, text="Bad Gateway")
        client = RegistryClient(config, session=mock_session)

        response = client.create_patient({})

        assert response.body is None

    @pytest.mark.parametrize(
        "error",
        [
            requests.ConnectionError("refused"),
            requests.Timeout("slow"),
            requests.exceptions.SSLError("bad cert"),
        ],
    )
    def test_transport_errors_raise(self, config, mock_session, error):
        mock_session.post.side_effect = error
        client = RegistryClient(config, session=mock_session)

        with pytest.raises(TransportError):
            client.create_patient({})

    def test_single_request_per_call(self, config, mock_session):
        mock_session.post.return_value = make_response(500, text="boom")
        client = RegistryClient(config, session=mock_session)

        client.create_patient({})

        assert mock_session.post.call_count == 1
