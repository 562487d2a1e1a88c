"""
Weekly Pickup Schedules
=======================

Endpoints for reading a student's pickup data and replacing the weekly
schedule as a whole.
"""

from __future__ import annotations

import logging

from flask import Response

from app.blueprints.api._common import (
    get_access_service as _access,
    get_caller as _caller,
    get_identity_service as _identity,
    get_json as _json,
    get_pickup_schedule_service as _pickup_service,
    success as _success,
)
from app.schemas.pickup import BulkPickupScheduleRequest, parse_request
from app.utils.http import safe_route

from . import pickup_api

logger = logging.getLogger("pickup_api.schedules")


@pickup_api.get("/students/<row_id:student_id>/pickup-schedules")
@safe_route("Failed to get pickup schedules")
def get_pickup_schedules(student_id: int) -> Response:
    """Schedules, exceptions and notes of one student"""
    caller = _caller()
    _access().require_full_access(caller, student_id, "view pickup schedules")

    data = _pickup_service().get_student_pickup_data(student_id)
    return _success(data.to_dict(), message="Pickup schedules retrieved successfully")


@pickup_api.put("/students/<row_id:student_id>/pickup-schedules")
@safe_route("Failed to update pickup schedules")
def replace_pickup_schedules(student_id: int) -> Response:
    """Replace the whole weekly schedule; weekdays left out are removed"""
    caller = _caller()
    _access().require_full_access(caller, student_id, "manage pickup schedules")

    body = parse_request(BulkPickupScheduleRequest, _json())
    staff_id = _identity().resolve_staff_id(caller)

    data = _pickup_service().upsert_weekly_schedule(student_id, body.entries(), staff_id)
    return _success(data.to_dict(), message="Pickup schedules updated successfully")
