"""Config module.

This module provides configuration management functionality.
"""

from patient_intake.config.manager import (
    get_registry_config,
    get_registry_password,
    get_session_config,
    load_config,
)
from patient_intake.config.schema import (
    CardConfig,
    Config,
    LoggingConfig,
    RegistryConfig,
    SessionConfig,
    TransportConfig,
)

__all__ = [
    # Main configuration loading
    "load_config",
    # Helper functions
    "get_registry_config",
    "get_registry_password",
    "get_session_config",
    # Configuration models
    "CardConfig",
    "Config",
    "LoggingConfig",
    "RegistryConfig",
    "SessionConfig",
    "TransportConfig",
]
