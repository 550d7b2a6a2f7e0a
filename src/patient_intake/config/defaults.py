"""Default configuration values.

This module defines the default configuration values used when no configuration
file is provided or when configuration values are not specified.
"""

from typing import Any

# Identifier type uuid that tags an identifier value as a PHN
PHN_IDENTIFIER_TYPE = "05a29f94-c0ed-11e2-94be-8c13b969e334"

# Default configuration dictionary
# This is used as a fallback when no configuration file is present
DEFAULT_CONFIG: dict[str, Any] = {
    "registry": {
        # Default to the local mock registry
        "base_url": "http://localhost:8080",
        "rest_path": "/ws/rest/v1",
        "identifier_type": PHN_IDENTIFIER_TYPE,
        "attribute_type_limit": 100,
        "username": None,
    },
    "session": {
        # Operating location must be supplied by the host session or config
        "location_uuid": None,
        "location_display": None,
    },
    "transport": {
        # Verify TLS certificates by default for security
        "verify_tls": True,
        # Connection timeout: 10 seconds
        "timeout_connect": 10,
        # Read timeout: 30 seconds
        "timeout_read": 30,
    },
    "logging": {
        "level": "INFO",
        "log_file": "logs/patient-intake.log",
        # Do not redact PII by default (user must opt-in for privacy)
        "redact_pii": False,
    },
    "card": {
        "output_dir": "output/cards",
        "open_browser": True,
    },
}

# Default configuration file path
DEFAULT_CONFIG_PATH = "config/config.json"
