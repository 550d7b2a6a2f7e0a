"""Transport module.

This module provides the HTTP client for the remote patient registry.
"""

from patient_intake.transport.registry_client import RegistryClient, TLS12Adapter

__all__ = [
    "RegistryClient",
    "TLS12Adapter",
]
