"""
API Authentication Middleware
=============================
Enforces an authenticated principal on every API request.

Instead of decorating every individual endpoint, this middleware hooks into
Flask's ``before_request`` pipeline and rejects requests without an
``account_id`` in the session with a 401 JSON response. Pickup data is
never public, so reads are gated as well as writes.

Endpoints that must remain public can be exempted by blueprint name or
explicit endpoint name.

Usage in ``create_app``::

    from app.middleware.api_auth import init_api_auth

    init_api_auth(flask_app)
"""

from __future__ import annotations

import logging

from flask import Flask, request, session

from app.utils.http import error_response

logger = logging.getLogger(__name__)

# Blueprints that are completely exempt from authentication.
_EXEMPT_BLUEPRINTS: frozenset[str] = frozenset()

# Individual endpoints that are exempt even inside protected blueprints.
_EXEMPT_ENDPOINTS: frozenset[str] = frozenset()


def init_api_auth(app: Flask) -> None:
    """Register a ``before_request`` hook that protects API endpoints.

    Parameters
    ----------
    app:
        The Flask application instance.
    """

    @app.before_request
    def _enforce_api_auth():
        # CORS preflight carries no credentials
        if request.method == "OPTIONS":
            return None

        if request.blueprint in _EXEMPT_BLUEPRINTS:
            return None

        if request.endpoint in _EXEMPT_ENDPOINTS:
            return None

        # Only protect API routes (url starts with /api/)
        if not request.path.startswith("/api/"):
            return None

        # Authenticated? Let through.
        if session.get("account_id") is not None:
            return None

        logger.warning(
            "Blocked unauthenticated %s to %s from %s",
            request.method,
            request.path,
            request.remote_addr,
        )
        return error_response(
            "Authentication required",
            status=401,
            details={"code": "UNAUTHORIZED"},
        )
