"""
Pickup Exceptions
=================

Endpoints for date exceptions that override the weekly schedule.
"""

from __future__ import annotations

import logging

from flask import Response, request

from app.blueprints.api._common import (
    get_access_service as _access,
    get_caller as _caller,
    get_identity_service as _identity,
    get_json as _json,
    get_pickup_schedule_service as _pickup_service,
    get_reference_timezone as _timezone,
    success as _success,
)
from app.domain.pickup import UNSET
from app.schemas.pickup import PickupExceptionRequest, parse_request
from app.utils.http import safe_route
from app.utils.time import parse_date, today

from . import pickup_api

logger = logging.getLogger("pickup_api.exceptions")


@pickup_api.get("/students/<row_id:student_id>/pickup-exceptions")
@safe_route("Failed to get pickup exceptions")
def list_upcoming_exceptions(student_id: int) -> Response:
    """Exceptions on or after ``?from=YYYY-MM-DD`` (default today)"""
    caller = _caller()
    _access().require_full_access(caller, student_id, "view pickup schedules")

    raw_from = request.args.get("from")
    from_date = parse_date(raw_from) if raw_from else today(_timezone())

    exceptions = _pickup_service().get_upcoming_exceptions(student_id, from_date)
    return _success([e.to_dict() for e in exceptions], message="Pickup exceptions retrieved successfully")


@pickup_api.post("/students/<row_id:student_id>/pickup-exceptions")
@safe_route("Failed to create pickup exception")
def create_pickup_exception(student_id: int) -> Response:
    """Create a date exception; no pickup_time means no pickup that day"""
    caller = _caller()
    _access().require_full_access(caller, student_id, "manage pickup exceptions")

    body = parse_request(PickupExceptionRequest, _json())
    staff_id = _identity().resolve_staff_id(caller)

    exception = _pickup_service().create_exception(
        student_id,
        body.exception_date,
        body.pickup_time,
        body.reason,
        staff_id=staff_id,
    )
    return _success(exception.to_dict(), 201, message="Pickup exception created successfully")


@pickup_api.put("/students/<row_id:student_id>/pickup-exceptions/<row_id:exception_id>")
@safe_route("Failed to update pickup exception")
def update_pickup_exception(student_id: int, exception_id: int) -> Response:
    """Update an exception; omitted fields keep their stored value"""
    caller = _caller()
    _access().require_full_access(caller, student_id, "manage pickup exceptions")

    # Existence and ownership are reported before body errors
    service = _pickup_service()
    service.get_owned_exception(student_id, exception_id)

    body = parse_request(PickupExceptionRequest, _json())
    provided = body.model_fields_set

    exception = service.update_exception(
        student_id,
        exception_id,
        body.exception_date,
        pickup_time=body.pickup_time if "pickup_time" in provided else UNSET,
        reason=body.reason if "reason" in provided else UNSET,
        staff_id=_identity().find_staff_id(caller),
    )
    return _success(exception.to_dict(), message="Pickup exception updated successfully")


@pickup_api.delete("/students/<row_id:student_id>/pickup-exceptions/<row_id:exception_id>")
@safe_route("Failed to delete pickup exception")
def delete_pickup_exception(student_id: int, exception_id: int) -> Response:
    caller = _caller()
    _access().require_full_access(caller, student_id, "manage pickup exceptions")

    _pickup_service().delete_exception(student_id, exception_id, staff_id=_identity().find_staff_id(caller))
    return _success(None, message="Pickup exception deleted successfully")
