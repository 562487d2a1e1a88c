"""WSGI entry point for the pickup schedule backend.

Serves the Flask application with the built-in Werkzeug server. Use a
proper WSGI server in production and point it at ``run_server:app``.
"""

from __future__ import annotations

import logging

from app import create_app

app = create_app()


def main() -> int:
    config = app.config["CONTAINER"].config
    logging.info("Starting server on %s:%s", config.host, config.port)

    try:
        app.run(host=config.host, port=config.port, debug=config.debug, use_reloader=False)
        logging.info("Server stopped.")
        return 0
    except KeyboardInterrupt:
        logging.info("Server stopped by user.")
        return 0
    except OSError as exc:
        logging.exception("ERROR: Failed to start server: %s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
