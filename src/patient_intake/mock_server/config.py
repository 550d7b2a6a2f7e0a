"""Configuration management for the mock registry."""

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

DEFAULT_CONFIG_FILE = Path("mocks/config.json")


class MockAttributeType(BaseModel):
    """Person attribute type served by the mock registry."""

    uuid: str
    display: str
    format: Optional[str] = "java.lang.String"


def _default_attribute_types() -> list[MockAttributeType]:
    return [
        MockAttributeType(uuid="14d4f066-15f5-102d-96e4-000c29c2a5d7", display="Telephone Number"),
        MockAttributeType(uuid="8f2c1e1a-6f3b-4f7e-9f1a-2b1f5d3c7a01", display="Mobile Number"),
        MockAttributeType(uuid="3b0e1c5d-2a4f-4d8e-b6c7-9a1d2e3f4a5b", display="NIC Number"),
        MockAttributeType(uuid="8d871d18-c2cc-11de-8d13-0010c6dffd0f", display="Birthplace"),
    ]


class MockServerConfig(BaseModel):
    """Mock registry configuration model.

    Configuration precedence:
    1. Environment variables (MOCK_SERVER_* prefix)
    2. JSON config file
    3. Default values
    """

    host: str = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=8080, description="HTTP server port")
    log_level: str = Field(default="INFO", description="Logging level")
    log_path: str = Field(default="mocks/logs/mock-registry.log", description="Log file path")
    rest_path: str = Field(default="/ws/rest/v1", description="REST API root path")
    response_delay_ms: int = Field(
        default=0,
        ge=0,
        le=5000,
        description="Response delay in milliseconds",
    )
    force_failure: bool = Field(
        default=False,
        description="Reject every patient creation with a server error",
    )
    failure_message: str = Field(
        default="Patient creation failed",
        description="Error message returned when force_failure is set",
    )
    attribute_types: list[MockAttributeType] = Field(
        default_factory=_default_attribute_types,
        description="Person attribute types served by the schema endpoint",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of: {', '.join(valid_levels)}"
            )
        return v_upper

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 1 <= v <= 65535:
            raise ValueError(f"Invalid port {v}. Must be between 1 and 65535.")
        return v

    @field_validator("rest_path")
    @classmethod
    def normalize_rest_path(cls, v: str) -> str:
        return "/" + v.strip("/")


def load_config(config_file: Path | None = None) -> MockServerConfig:
    """Load mock registry configuration from file and environment variables.

    Args:
        config_file: Path to configuration JSON file. Defaults to mocks/config.json

    Returns:
        MockServerConfig instance with merged configuration

    Raises:
        FileNotFoundError: If config file specified but not found
        ValueError: If configuration is invalid
    """
    if config_file is None:
        config_file = DEFAULT_CONFIG_FILE

    config_data = {}
    if config_file.exists():
        try:
            with open(config_file) as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(
                f"Failed to parse configuration file '{config_file}': {e}. "
                f"Ensure the file contains valid JSON."
            ) from e
    elif config_file != DEFAULT_CONFIG_FILE:
        raise FileNotFoundError(
            f"Configuration file not found: '{config_file}'. "
            f"Ensure the file exists or check the path."
        )

    env_prefix = "MOCK_SERVER_"
    for key in ("host", "port", "log_level", "log_path", "rest_path",
                "response_delay_ms", "force_failure", "failure_message"):
        env_key = f"{env_prefix}{key.upper()}"
        if env_key not in os.environ:
            continue
        value = os.environ[env_key]
        if key in ("port", "response_delay_ms"):
            try:
                value = int(value)
            except ValueError as e:
                raise ValueError(
                    f"Invalid value for {env_key}: '{value}'. Must be an integer."
                ) from e
        elif key == "force_failure":
            value = value.strip().lower() in ("true", "1", "yes", "on")
        config_data[key] = value

    try:
        return MockServerConfig(**config_data)
    except ValidationError as e:
        raise ValueError(f"Configuration validation failed: {e}") from e
