"""Centralized exception hierarchy for the pickup schedule backend.

All domain and service exceptions inherit from :class:`PickupError` so that
callers can catch a single base class when they need a broad safety net, yet
still match on specific subclasses where narrower handling is appropriate.

Blueprint-level error handling (see ``app/utils/http.safe_route``) maps these
to the correct HTTP status codes automatically.

Hierarchy
---------
::

    PickupError (base, maps to 500)
    ├── ValidationError          (400, bad input from caller)
    │   └── FormatError          (400, date / time string does not parse)
    ├── UnauthorizedError        (401, no authenticated principal)
    ├── ForbiddenError           (403, no full access / foreign resource)
    ├── NotFoundError            (404, entity does not exist)
    ├── ConflictError            (409, duplicate / state conflict)
    └── InternalError            (500, server-side failure)
        └── RepositoryError      (500, database / persistence)
"""

from __future__ import annotations


class PickupError(Exception):
    """Base exception for all pickup schedule errors.

    Parameters
    ----------
    message:
        Human-readable description. Client errors (4xx) send it to the
        caller; server errors (5xx) only log it.
    detail:
        Optional machine-readable context dict attached to the error for
        structured logging and 4xx response details.
    """

    http_status: int = 500

    def __init__(self, message: str = "", *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.detail = detail or {}


# ── Client errors (4xx) ──────────────────────────────────────────────


class ValidationError(PickupError):
    """Caller supplied invalid or incomplete input (HTTP 400)."""

    http_status: int = 400


class FormatError(ValidationError):
    """A date or time-of-day string does not match its wire format (HTTP 400)."""


class UnauthorizedError(PickupError):
    """No authenticated principal on the request (HTTP 401)."""

    http_status: int = 401


class ForbiddenError(PickupError):
    """Authenticated, but not allowed to act on the resource (HTTP 403)."""

    http_status: int = 403


class NotFoundError(PickupError):
    """Requested entity does not exist (HTTP 404)."""

    http_status: int = 404


class ConflictError(PickupError):
    """Operation conflicts with existing state (HTTP 409)."""

    http_status: int = 409


# ── Server errors (5xx) ──────────────────────────────────────────────


class InternalError(PickupError):
    """Server-side failure; details are logged, never sent (HTTP 500)."""

    http_status: int = 500


class RepositoryError(InternalError):
    """Database / persistence layer failure (HTTP 500)."""

    http_status: int = 500
