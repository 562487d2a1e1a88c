"""
HTTP response helpers for the JSON API.

Every response uses the same envelope::

    {"ok": true,  "data": ..., "error": null, "message": "..."}
    {"ok": false, "data": null, "error": {"message": ..., "timestamp": ...}, "message": "..."}

Domain exceptions (:class:`~app.domain.exceptions.PickupError`) are turned
into responses by :func:`domain_error_response`; 4xx messages were written
for the caller and are returned as-is, 5xx details stay in the server log.
"""

from __future__ import annotations

import functools
import logging
from typing import TYPE_CHECKING, Any, Callable

from flask import Response, jsonify
from werkzeug.routing import IntegerConverter

from app.domain.pickup import MAX_ROW_ID
from app.utils.time import iso_now

if TYPE_CHECKING:
    from app.domain.exceptions import PickupError

_log = logging.getLogger(__name__)

# Client-facing text for server-side failures and bare HTTP errors
_GENERIC_MESSAGES: dict[int, str] = {
    400: "Invalid request",
    401: "Authentication required",
    403: "Access denied",
    404: "Resource not found",
    405: "Method not allowed",
    409: "Conflict",
    500: "An internal error occurred",
}


def generic_message(status: int) -> str:
    return _GENERIC_MESSAGES.get(status, _GENERIC_MESSAGES[500])


def success_response(
    data: dict | list | None = None,
    status: int = 200,
    *,
    message: str | None = None,
) -> Response:
    payload: dict[str, Any] = {"ok": True, "data": data, "error": None}
    if message is not None:
        payload["message"] = message
    response = jsonify(payload)
    response.status_code = status
    return response


def error_response(
    message: str,
    status: int = 500,
    *,
    details: dict | None = None,
) -> Response:
    """
    Failure envelope. ``details`` keys are merged into ``error`` and also
    returned under ``details`` (e.g. the field errors of a rejected body).
    """
    error: dict[str, Any] = {"message": message, "timestamp": iso_now()}
    body: dict[str, Any] = {"ok": False, "data": None, "error": error, "message": message}
    if details:
        error.update(details)
        body["details"] = details
    response = jsonify(body)
    response.status_code = status
    return response


def safe_error(exc: BaseException, status: int = 500, *, context: str = "") -> Response:
    """Log ``exc`` with traceback and answer with the generic text for ``status``."""
    _log.error("API error [%s] %s: %s", status, context, exc, exc_info=exc)
    return error_response(generic_message(status), status)


def domain_error_response(exc: "PickupError", fallback: str = "Request failed") -> Response:
    """Map a domain exception to its ``http_status``."""
    status = exc.http_status
    if status >= 500:
        return safe_error(exc, status, context=fallback)
    return error_response(str(exc) or fallback, status, details=exc.detail or None)


def safe_route(error_message: str = "An internal error occurred", *, error_status: int = 500) -> Callable:
    """Wrap a route so domain errors and unexpected failures become JSON envelopes.

    Usage::

        @pickup_api.get("/students/<row_id:student_id>/pickup-schedules")
        @safe_route("Failed to get pickup schedules")
        def get_pickup_schedules(student_id):
            ...

    ``error_message`` is logged with 5xx failures; ``error_status`` is the
    status used for exceptions outside the domain hierarchy.
    """
    from app.domain.exceptions import PickupError

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Response:
            try:
                return fn(*args, **kwargs)
            except PickupError as exc:
                return domain_error_response(exc, error_message)
            except Exception as exc:
                return safe_error(exc, error_status, context=error_message)

        return wrapper

    return decorator


class RowIdConverter(IntegerConverter):
    """``<row_id:name>``: positive integer within the SQLite INTEGER range.

    Anything else does not match the route, so the client gets a 404
    instead of a value the database cannot bind.
    """

    def __init__(self, map, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("min", 1)
        kwargs.setdefault("max", MAX_ROW_ID)
        super().__init__(map, *args, **kwargs)
