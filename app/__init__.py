from __future__ import annotations

import atexit
import logging
import threading
from typing import Any

from flask import Flask, request
from werkzeug.exceptions import HTTPException

from app.blueprints.api.pickup import pickup_api
from app.config import load_config, setup_logging
from app.middleware.api_auth import init_api_auth
from app.utils.http import RowIdConverter


def create_app(config_overrides: dict[str, Any] | None = None) -> Flask:
    config = load_config()
    if config_overrides:
        config.apply_overrides(config_overrides)

    # Configure logging early so container startup is visible in the terminal
    setup_logging(debug=config.debug, log_file=config.log_file or None, level=config.log_level)

    flask_app = Flask(__name__)
    flask_app.url_map.converters["row_id"] = RowIdConverter
    flask_app.config.update(config.as_flask_config())
    flask_app.config["SESSION_COOKIE_HTTPONLY"] = True
    flask_app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
    flask_app.config["SESSION_COOKIE_SECURE"] = config.environment == "production"

    from app.services.container import ServiceContainer

    container = ServiceContainer.build(config)
    flask_app.config["CONTAINER"] = container
    flask_app.teardown_appcontext(container.database.close_db)

    # ── Graceful shutdown ───────────────────────────────────────────
    _shutdown_lock = threading.Lock()
    _shutdown_done = False

    def _graceful_shutdown(reason: str = "unknown") -> None:
        nonlocal _shutdown_done
        with _shutdown_lock:
            if _shutdown_done:
                return
            _shutdown_done = True
        logging.info("Graceful shutdown initiated (%s)", reason)
        container.shutdown()

    atexit.register(_graceful_shutdown, "atexit")

    # Require an authenticated principal on all API endpoints
    init_api_auth(flask_app)

    # Global JSON error handler: catches any unhandled exception on /api/
    # routes and returns a generic message instead of leaking stack traces.
    # Domain exceptions carry their own ``http_status``.
    @flask_app.errorhandler(Exception)
    def _handle_unhandled(exc):
        if not request.path.startswith("/api/"):
            if isinstance(exc, HTTPException):
                return exc
            raise exc
        from app.domain.exceptions import PickupError
        from app.utils.http import domain_error_response, error_response, generic_message, safe_error

        if isinstance(exc, HTTPException):
            status = int(exc.code or 500)
            if status >= 500:
                return safe_error(exc, status, context="http-exception")
            return error_response(generic_message(status), status)

        if isinstance(exc, PickupError):
            return domain_error_response(exc)

        return safe_error(exc, 500, context="unhandled")

    # ── API version prefix ──────────────────────────────────────────
    V1 = "/api/v1"
    flask_app.register_blueprint(pickup_api, url_prefix=V1)

    for bp_name, _bp in flask_app.blueprints.items():
        logging.info(" Registered blueprint: %s", bp_name)

    logger = logging.getLogger(__name__)
    logger.info("Pickup schedule application initialized successfully.")

    return flask_app


__all__ = ["create_app"]
