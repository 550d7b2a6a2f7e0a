"""REST client for the remote patient registry.

This module provides the HTTP client used by registration sessions to fetch
the person attribute type schema and to create patients. Requests are never
retried automatically: every retry is operator-initiated.
"""

import json
import logging
import ssl
import time
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.ssl_ import create_urllib3_context

from patient_intake.config.schema import Config
from patient_intake.logging_audit.audit import log_transaction
from patient_intake.models.attributes import PersonAttributeType
from patient_intake.models.responses import RegistryResponse
from patient_intake.utils.exceptions import SchemaFetchError, TransportError

logger = logging.getLogger(__name__)

# Representation requested for attribute types
ATTRIBUTE_TYPE_VIEW = "custom:(uuid,display,format)"


class TLS12Adapter(HTTPAdapter):
    """Force TLS 1.2+ for HTTPS connections to the registry.

    Example:
        >>> session = requests.Session()
        >>> session.mount('https://', TLS12Adapter())
    """

    def init_poolmanager(self, *args, **kwargs):
        context = create_urllib3_context()
        context.minimum_version = ssl.TLSVersion.TLSv1_2
        kwargs['ssl_context'] = context
        return super().init_poolmanager(*args, **kwargs)


class RegistryClient:
    """Client for the registry REST API.

    Attributes:
        config: Application configuration
        api_url: REST API root (base_url + rest_path)
        timeout: (connect, read) timeout tuple in seconds
        session: Configured requests session

    Example:
        >>> from patient_intake.config import load_config
        >>> with RegistryClient(load_config()) as client:
        ...     types = client.fetch_attribute_types()
        ...     response = client.create_patient(payload)
    """

    def __init__(
        self,
        config: Config,
        password: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize registry client.

        Args:
            config: Application configuration with registry and transport sections
            password: Basic auth password, used together with registry.username
            session: Pre-built session (mainly for tests); a TLS 1.2+ session is
                     created when omitted
        """
        self.config = config
        self.api_url = config.registry.api_url
        self.timeout = (
            config.transport.timeout_connect,
            config.transport.timeout_read,
        )

        if session is None:
            session = requests.Session()
            session.mount('https://', TLS12Adapter())
        self.session = session

        self.session.verify = config.transport.verify_tls
        self.session.headers.update({"Accept": "application/json"})

        if config.registry.username:
            self.session.auth = (config.registry.username, password or "")

        if self.api_url.startswith('http://'):
            logger.warning(
                "SECURITY WARNING: Using HTTP transport (not HTTPS) for the patient registry. "
                "This is only acceptable for local development."
            )

        if not config.transport.verify_tls:
            logger.warning(
                "TLS certificate verification is DISABLED. "
                "This should only be used for development with self-signed certificates."
            )

        logger.info(f"Registry client initialized: endpoint={self.api_url}")

    def fetch_attribute_types(self, limit: Optional[int] = None) -> list[PersonAttributeType]:
        """Fetch person attribute type definitions.

        Args:
            limit: Maximum number of types, defaults to registry.attribute_type_limit

        Returns:
            Attribute types in registry order

        Raises:
            SchemaFetchError: On transport errors, HTTP errors or malformed bodies
        """
        if limit is None:
            limit = self.config.registry.attribute_type_limit

        url = f"{self.api_url}/personattributetype"
        params = {"v": ATTRIBUTE_TYPE_VIEW, "limit": limit}

        logger.info(f"Fetching person attribute types (limit={limit})")

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Could not reach registry at {url}: {e}")
            raise SchemaFetchError(
                f"Failed to load form data: could not reach registry at {url}. Error: {e}"
            ) from e

        log_transaction(
            "SCHEMA_QUERY",
            request=f"GET {url} {params}",
            response=response.text,
            status="success" if response.ok else "failure",
        )

        if not response.ok:
            raise SchemaFetchError(
                f"Failed to load form data: registry returned HTTP {response.status_code}"
            )

        try:
            results = response.json().get("results") or []
            attribute_types = [PersonAttributeType.from_dict(item) for item in results]
        except (ValueError, AttributeError, KeyError, TypeError) as e:
            raise SchemaFetchError(
                f"Failed to load form data: malformed attribute type response. Error: {e}"
            ) from e

        logger.info(f"Loaded {len(attribute_types)} person attribute types")
        return attribute_types

    def create_patient(self, payload: dict[str, Any]) -> RegistryResponse:
        """Submit a patient creation request.

        Non-2xx responses are returned rather than raised so the caller can
        interpret the structured error body.

        Args:
            payload: Patient creation body

        Returns:
            RegistryResponse with status code and parsed body

        Raises:
            TransportError: If the registry cannot be reached or times out
        """
        url = f"{self.api_url}/patient"
        request_body = json.dumps(payload)
        start_time = time.time()

        logger.info(f"Submitting patient creation request to {url}")

        try:
            response = self.session.post(
                url,
                data=request_body.encode("utf-8"),
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.exceptions.SSLError as e:
            logger.error(
                f"SSL certificate validation failed for {url}. "
                f"Check server certificate or TLS configuration. Error: {e}"
            )
            raise TransportError(f"TLS/SSL error contacting registry: {e}") from e
        except requests.Timeout as e:
            logger.error(
                f"Request timeout after {self.timeout[1]}s. "
                f"Consider increasing transport.timeout_read. Error: {e}"
            )
            raise TransportError(f"Registry request timed out: {e}") from e
        except requests.RequestException as e:
            logger.error(f"Could not connect to registry at {url}: {e}")
            raise TransportError(f"Could not connect to registry: {e}") from e

        processing_time_ms = int((time.time() - start_time) * 1000)

        log_transaction(
            "PATIENT_CREATE",
            request=request_body,
            response=response.text,
            status="success" if response.ok else "failure",
        )

        try:
            body = response.json()
        except ValueError:
            body = None
            logger.warning(f"Registry response (HTTP {response.status_code}) is not JSON")

        logger.info(
            f"Patient creation completed: HTTP {response.status_code}, time={processing_time_ms}ms"
        )

        return RegistryResponse(
            status_code=response.status_code,
            body=body,
            processing_time_ms=processing_time_ms,
        )

    def close(self) -> None:
        """Close the HTTP session and release connections."""
        self.session.close()
        logger.debug("Registry client session closed")

    def __enter__(self) -> "RegistryClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
