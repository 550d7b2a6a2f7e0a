"""Integration test fixtures.

Starts the Flask mock registry on a free local port in a background thread
so tests exercise the real HTTP client against real endpoints.
"""

import logging
import socket
import threading
import time
from pathlib import Path
from typing import Iterator

import pytest
import requests
from werkzeug.serving import make_server

from patient_intake.config.schema import Config, RegistryConfig, SessionConfig
from patient_intake.mock_server import MockServerConfig, initialize_app, reset_registry

logger = logging.getLogger(__name__)

LOCATION_UUID = "44c3efb0-2583-4c80-a79e-1f756a03c0a1"


def find_free_port() -> int:
    """Find an available port on localhost."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        s.listen(1)
        return s.getsockname()[1]


def wait_for_server(url: str, timeout: float = 10.0, interval: float = 0.1) -> bool:
    """Poll url until it answers 200 or timeout expires.

    Returns:
        bool: True if the server became available
    """
    start_time = time.time()
    while time.time() - start_time < timeout:
        try:
            if requests.get(url, timeout=1).status_code == 200:
                return True
        except requests.exceptions.RequestException:
            pass
        time.sleep(interval)
    return False


@pytest.fixture(scope="session")
def mock_registry_url(tmp_path_factory) -> Iterator[str]:
    """Base URL of a running mock registry shared by the test session."""
    port = find_free_port()
    log_dir = tmp_path_factory.mktemp("mock-logs")
    config = MockServerConfig(port=port, log_path=str(log_dir / "mock-registry.log"))

    server = make_server("127.0.0.1", port, initialize_app(config), threaded=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    base_url = f"http://127.0.0.1:{port}"
    if not wait_for_server(f"{base_url}/health"):
        server.shutdown()
        pytest.fail(f"Mock registry did not start on {base_url}")

    logger.info(f"Mock registry running at {base_url}")
    yield base_url

    server.shutdown()
    thread.join(timeout=5)


@pytest.fixture(autouse=True)
def clean_registry() -> Iterator[None]:
    reset_registry()
    yield
    reset_registry()


@pytest.fixture
def registry_config(mock_registry_url: str, tmp_path: Path) -> Config:
    return Config(
        registry=RegistryConfig(base_url=mock_registry_url),
        session=SessionConfig(location_uuid=LOCATION_UUID, location_display="Outpatient Department"),
        card={"output_dir": tmp_path / "cards", "open_browser": False},
    )


@pytest.fixture
def registry_config_file(registry_config: Config, tmp_path: Path) -> Path:
    path = tmp_path / "config.json"
    path.write_text(registry_config.model_dump_json(), encoding="utf-8")
    return path


@pytest.fixture
def patients_csv(tmp_path: Path) -> Path:
    path = tmp_path / "patients.csv"
    path.write_text(
        "given_name,family_name,date_of_birth,gender,telephone_mobile,nic_no\n"
        "Amal,Perera,1990-05-12,Male,0771234567,901234567V\n"
        "Nimali,Fernando,1985-11-03,Female,,\n"
        "Kasun,Silva,2001-02-28,Male,0719876543,\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def unused_registry_url() -> str:
    """URL of a local port nothing listens on."""
    return f"http://127.0.0.1:{find_free_port()}"
