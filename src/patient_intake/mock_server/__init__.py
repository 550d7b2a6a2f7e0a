"""Mock patient registry for local development and testing."""

from .app import app, initialize_app, run_server
from .config import MockAttributeType, MockServerConfig, load_config
from .registry_endpoint import get_registered_patients, reset_registry

__all__ = [
    "MockAttributeType",
    "MockServerConfig",
    "app",
    "get_registered_patients",
    "initialize_app",
    "load_config",
    "reset_registry",
    "run_server",
]
