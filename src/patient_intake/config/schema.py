"""Configuration schema models using pydantic.

This module defines the configuration structure and validation rules using pydantic.
All configuration values are validated according to the schema defined here.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from patient_intake.config.defaults import PHN_IDENTIFIER_TYPE

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class RegistryConfig(BaseModel):
    """Configuration for the remote patient registry.

    Attributes:
        base_url: Registry server root URL
        rest_path: REST API prefix appended to base_url
        identifier_type: Identifier type uuid marking the PHN identifier
        attribute_type_limit: Maximum person attribute types fetched per session
        username: Basic auth username (password comes from the environment only)
    """

    base_url: str = Field(default="http://localhost:8080", description="Registry base URL")
    rest_path: str = Field(default="/ws/rest/v1", description="REST API prefix")
    identifier_type: str = Field(
        default=PHN_IDENTIFIER_TYPE,
        description="Identifier type uuid for PHN identifiers",
    )
    attribute_type_limit: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Maximum attribute types fetched at session start",
    )
    username: Optional[str] = Field(default=None, description="Basic auth username")

    @field_validator("base_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate URL is valid HTTP/HTTPS.

        Raises:
            ValueError: If URL does not start with http:// or https://
        """
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                f"Invalid URL: {v}. Must start with http:// or https://"
            )
        return v.rstrip("/")

    @field_validator("rest_path")
    @classmethod
    def validate_rest_path(cls, v: str) -> str:
        return "/" + v.strip("/")

    @property
    def api_url(self) -> str:
        """Full REST API root, e.g. http://localhost:8080/ws/rest/v1."""
        return f"{self.base_url}{self.rest_path}"


class SessionConfig(BaseModel):
    """Operator session context used when no host session supplies one.

    Attributes:
        location_uuid: Operating location identifier
        location_display: Operating location display name
    """

    location_uuid: Optional[str] = None
    location_display: Optional[str] = None


class TransportConfig(BaseModel):
    """Configuration for HTTP/HTTPS transport.

    Attributes:
        verify_tls: Whether to verify TLS certificates
        timeout_connect: Connection timeout in seconds
        timeout_read: Read timeout in seconds
    """

    verify_tls: bool = True
    timeout_connect: int = Field(
        default=10,
        ge=1,
        description="Connection timeout in seconds"
    )
    timeout_read: int = Field(
        default=30,
        ge=1,
        description="Read timeout in seconds"
    )


class LoggingConfig(BaseModel):
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file
        redact_pii: Whether to redact PII from logs
    """

    level: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )
    log_file: Path = Field(
        default=Path("logs/patient-intake.log"),
        description="Log file path"
    )
    redact_pii: bool = Field(
        default=False,
        description="Redact PII from logs"
    )

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level.

        Raises:
            ValueError: If log level is not valid
        """
        v_upper = v.upper()
        if v_upper not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
            )
        return v_upper


class CardConfig(BaseModel):
    """Configuration for PHN card output.

    Attributes:
        output_dir: Directory where rendered cards are written
        open_browser: Open rendered cards in the system browser to print
    """

    output_dir: Path = Field(default=Path("output/cards"), description="Card output directory")
    open_browser: bool = Field(default=True, description="Open cards in browser for printing")


class Config(BaseModel):
    """Root configuration model.

    Example:
        >>> config = Config(registry=RegistryConfig(base_url="http://localhost:8080"))
        >>> config.registry.api_url
        'http://localhost:8080/ws/rest/v1'
    """

    registry: RegistryConfig = RegistryConfig()
    session: SessionConfig = SessionConfig()
    transport: TransportConfig = TransportConfig()
    logging: LoggingConfig = LoggingConfig()
    card: CardConfig = CardConfig()
