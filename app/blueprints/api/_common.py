"""
Blueprint Common Utilities
==========================

Shared helper functions for all API blueprints.
Import these instead of duplicating helper code in each blueprint.

Usage:
    from app.blueprints.api._common import (
        get_container, get_json, success,
        get_caller, get_pickup_schedule_service, ...
    )

This module centralizes:
- Service container access
- Request JSON parsing
- Standardized response helpers
- Caller resolution from the session
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from flask import current_app, request, session

from app.utils.http import success_response

if TYPE_CHECKING:
    from app.services.application.access_service import StudentAccessService
    from app.services.application.identity_service import CallerContext, IdentityService
    from app.services.application.pickup_schedule_service import PickupScheduleService
    from app.services.container import ServiceContainer

logger = logging.getLogger("api._common")

# ============================================================================
# CONTAINER ACCESS
# ============================================================================


def get_container() -> "ServiceContainer":
    """
    Get the service container from Flask app config.

    Returns:
        ServiceContainer: The application service container

    Raises:
        RuntimeError: If container is not configured
    """
    container = current_app.config.get("CONTAINER")
    if not container:
        raise RuntimeError("ServiceContainer not found in app config")
    return container


def get_pickup_schedule_service() -> "PickupScheduleService":
    return get_container().pickup_schedule_service


def get_access_service() -> "StudentAccessService":
    return get_container().access_service


def get_identity_service() -> "IdentityService":
    return get_container().identity_service


def get_reference_timezone() -> str:
    """Timezone whose calendar defines today."""
    return get_container().config.timezone


# ============================================================================
# CALLER
# ============================================================================


def get_caller() -> "CallerContext":
    """Caller context of the current request; raises UnauthorizedError without a principal."""
    return get_identity_service().caller_from_session(session)


# ============================================================================
# REQUEST HELPERS
# ============================================================================


def get_json() -> dict:
    """
    Get JSON request body with silent failure.

    Returns:
        dict: Parsed JSON body or empty dict if not available
    """
    return request.get_json(silent=True) or {}


# ============================================================================
# RESPONSE HELPERS
# ============================================================================


def success(data: dict | list | None = None, status: int = 200, *, message: str | None = None):
    """
    Standard success response wrapper.

    Args:
        data: Response data (dict or list)
        status: HTTP status code (default 200)
        message: Optional success message

    Returns:
        Flask Response with format: {"ok": true, "data": ..., "error": null}
    """
    return success_response(data, status, message=message)

