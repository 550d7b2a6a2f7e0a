"""Configuration manager for loading and managing configuration.

This module provides the main configuration loading and management functionality,
including support for JSON configuration files, environment variable overrides,
and configuration validation.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from patient_intake.config.defaults import DEFAULT_CONFIG, DEFAULT_CONFIG_PATH
from patient_intake.config.schema import Config, RegistryConfig, SessionConfig
from patient_intake.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Environment variable prefix for all configuration overrides
ENV_PREFIX = "PATIENT_INTAKE_"

# Registry password is only ever read from this variable
PASSWORD_ENV_VAR = f"{ENV_PREFIX}REGISTRY_PASSWORD"


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file and environment variables.

    Configuration is loaded with the following precedence (highest to lowest):
    1. CLI arguments (handled by caller)
    2. Environment variables (PATIENT_INTAKE_* prefix)
    3. Configuration file (JSON)
    4. Default values

    Args:
        config_path: Path to configuration file. If None, uses ./config/config.json

    Returns:
        Validated Config instance

    Raises:
        ConfigurationError: If configuration is invalid or malformed

    Example:
        >>> config = load_config(Path("custom/config.json"))
        >>> config.registry.api_url
        'http://localhost:8080/ws/rest/v1'
    """
    # Load .env file if present in project root
    load_dotenv()

    if config_path is None:
        config_path = Path(DEFAULT_CONFIG_PATH)

    config_dict = _load_config_file(config_path)
    config_dict = _apply_env_overrides(config_dict)
    _check_sensitive_values(config_dict)

    try:
        return Config(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed:\n{e}\n\n"
            f"Fix: Check your configuration file at {config_path} and ensure all "
            f"values match the expected format."
        ) from e


def _load_config_file(config_path: Path) -> dict[str, Any]:
    """Load configuration file or return defaults.

    Raises:
        ConfigurationError: If JSON is malformed or the file cannot be read
    """
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_dict = json.load(f)
            logger.info(f"Loaded configuration from {config_path}")
            return config_dict
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check JSON syntax at line {e.lineno}, column {e.colno}"
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check file permissions and path"
            ) from e

    logger.info(
        f"Config file not found: {config_path}. Using default configuration."
    )
    # Deep copy so callers never mutate the defaults
    return json.loads(json.dumps(DEFAULT_CONFIG))


def _apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides with PATIENT_INTAKE_ prefix.

    Environment variables follow the pattern: PATIENT_INTAKE_<SECTION>_<FIELD>
    For example: PATIENT_INTAKE_REGISTRY_URL, PATIENT_INTAKE_LOG_LEVEL
    """
    # Registry section
    if base_url := os.getenv(f"{ENV_PREFIX}REGISTRY_URL"):
        config_dict.setdefault("registry", {})["base_url"] = base_url
        logger.debug("Override: registry base_url from environment")

    if identifier_type := os.getenv(f"{ENV_PREFIX}IDENTIFIER_TYPE"):
        config_dict.setdefault("registry", {})["identifier_type"] = identifier_type
        logger.debug("Override: identifier_type from environment")

    if username := os.getenv(f"{ENV_PREFIX}REGISTRY_USERNAME"):
        config_dict.setdefault("registry", {})["username"] = username
        logger.debug("Override: registry username from environment")

    # Session section
    if location_uuid := os.getenv(f"{ENV_PREFIX}LOCATION_UUID"):
        config_dict.setdefault("session", {})["location_uuid"] = location_uuid
        logger.debug("Override: location_uuid from environment")

    if location_display := os.getenv(f"{ENV_PREFIX}LOCATION_DISPLAY"):
        config_dict.setdefault("session", {})["location_display"] = location_display
        logger.debug("Override: location_display from environment")

    # Transport section
    if verify_tls := os.getenv(f"{ENV_PREFIX}VERIFY_TLS"):
        config_dict.setdefault("transport", {})["verify_tls"] = _parse_bool(verify_tls)
        logger.debug("Override: verify_tls from environment")

    if timeout_connect := os.getenv(f"{ENV_PREFIX}TIMEOUT_CONNECT"):
        config_dict.setdefault("transport", {})["timeout_connect"] = int(timeout_connect)
        logger.debug("Override: timeout_connect from environment")

    if timeout_read := os.getenv(f"{ENV_PREFIX}TIMEOUT_READ"):
        config_dict.setdefault("transport", {})["timeout_read"] = int(timeout_read)
        logger.debug("Override: timeout_read from environment")

    # Logging section
    if log_level := os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
        config_dict.setdefault("logging", {})["level"] = log_level
        logger.debug("Override: log_level from environment")

    if log_file := os.getenv(f"{ENV_PREFIX}LOG_FILE"):
        config_dict.setdefault("logging", {})["log_file"] = log_file
        logger.debug("Override: log_file from environment")

    if redact_pii := os.getenv(f"{ENV_PREFIX}REDACT_PII"):
        config_dict.setdefault("logging", {})["redact_pii"] = _parse_bool(redact_pii)
        logger.debug("Override: redact_pii from environment")

    # Card section
    if card_output_dir := os.getenv(f"{ENV_PREFIX}CARD_OUTPUT_DIR"):
        config_dict.setdefault("card", {})["output_dir"] = card_output_dir
        logger.debug("Override: card output_dir from environment")

    return config_dict


def _parse_bool(value: str) -> bool:
    """Parse boolean value from string (case-insensitive)."""
    return value.lower() in ("true", "1", "yes", "on")


def _check_sensitive_values(config_dict: dict[str, Any]) -> None:
    """Warn when a password is stored in the configuration file.

    The password is dropped so it never reaches the validated Config.
    """
    registry = config_dict.get("registry", {})
    if "password" in registry:
        registry.pop("password")
        logger.warning(
            "WARNING: Registry password found in configuration file! "
            "Passwords should be stored in environment variables, not config files. "
            f"Use {PASSWORD_ENV_VAR} environment variable instead."
        )


def get_registry_password() -> Optional[str]:
    """Read the registry password from the environment."""
    return os.getenv(PASSWORD_ENV_VAR)


def get_registry_config(config: Config) -> RegistryConfig:
    """Get registry configuration."""
    return config.registry


def get_session_config(config: Config) -> SessionConfig:
    """Get the configured operator session context."""
    return config.session
