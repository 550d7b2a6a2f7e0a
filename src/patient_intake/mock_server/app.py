"""Flask application for the mock patient registry."""

import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

from flask import Flask, jsonify, request

from .config import MockServerConfig, load_config
from .registry_endpoint import get_registered_patients, register_registry_endpoint

_server_start_time: datetime | None = None
_request_count: int = 0
_config: MockServerConfig | None = None

app = Flask(__name__)

logger = logging.getLogger("patient_intake.mock_server")


def setup_logging(config: MockServerConfig) -> logging.Logger:
    """Configure logging for the mock registry with rotation.

    Args:
        config: Mock server configuration

    Returns:
        Configured logger instance
    """
    logger.setLevel(config.log_level)
    logger.handlers.clear()

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_path = Path(config.log_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger


@app.before_request
def log_request():
    """Log all incoming requests."""
    global _request_count
    _request_count += 1

    logger.info(
        f"Request #{_request_count}: {request.method} {request.full_path.rstrip('?')} "
        f"(Content-Length: {request.content_length or 0})"
    )

    if request.data and logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"Request body: {request.get_data(as_text=True)[:500]}")


@app.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint.

    Returns JSON with server status, endpoints, uptime, request count,
    registered patient count and timestamp.
    """
    uptime_seconds = 0
    if _server_start_time:
        uptime_seconds = int((datetime.now(timezone.utc) - _server_start_time).total_seconds())

    endpoints = ["/health"]
    port = 8080
    if _config:
        port = _config.port
        endpoints.append(f"{_config.rest_path}/personattributetype")
        endpoints.append(f"{_config.rest_path}/patient")

    return jsonify({
        "status": "healthy",
        "version": "1.0.0",
        "port": port,
        "endpoints": endpoints,
        "uptime_seconds": uptime_seconds,
        "request_count": _request_count,
        "patient_count": len(get_registered_patients()),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }), 200


@app.errorhandler(404)
def not_found(error):
    return jsonify({"error": {"message": f"Resource not found: {request.path}"}}), 404


@app.errorhandler(500)
def internal_error(error):
    return jsonify({"error": {"message": "Internal Server Error"}}), 500


def initialize_app(config: MockServerConfig) -> Flask:
    """Initialize the Flask app with configuration.

    Args:
        config: Mock server configuration

    Returns:
        The configured Flask application
    """
    global _config, _server_start_time
    _config = config
    _server_start_time = datetime.now(timezone.utc)

    setup_logging(config)
    register_registry_endpoint(app, config)
    logger.info("Mock registry application initialized")
    return app


def run_server(
    host: str | None = None,
    port: int | None = None,
    config: MockServerConfig | None = None,
    debug: bool = False,
) -> None:
    """Run the Flask mock registry.

    Args:
        host: Host address, overrides config.host
        port: Port number, overrides config.port
        config: Mock server configuration (loads from file if not provided)
        debug: Enable debug mode (default: False)
    """
    if config is None:
        config = load_config()

    overrides = {}
    if host is not None:
        overrides["host"] = host
    if port is not None:
        overrides["port"] = port
    if overrides:
        config = config.model_copy(update=overrides)

    initialize_app(config)

    base_url = f"http://{config.host}:{config.port}"
    logger.info(f"Starting mock registry on {base_url}")
    logger.info(f"REST API root: {base_url}{config.rest_path}")
    logger.info(f"Health check available at: {base_url}/health")

    app.run(
        host=config.host,
        port=config.port,
        debug=debug,
        use_reloader=False,
    )


if __name__ == "__main__":
    run_server()
