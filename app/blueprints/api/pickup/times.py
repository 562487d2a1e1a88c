"""
Effective Pickup Times
======================

Endpoints resolving the effective pickup time for one student or for many
students at once (dismissal lists).
"""

from __future__ import annotations

import logging

from flask import Response

from app.blueprints.api._common import (
    get_access_service as _access,
    get_caller as _caller,
    get_container as _container,
    get_json as _json,
    get_pickup_schedule_service as _pickup_service,
    get_reference_timezone as _timezone,
    success as _success,
)
from app.schemas.pickup import BulkPickupTimeRequest, parse_request
from app.utils.http import safe_route
from app.utils.time import parse_date, today

from . import pickup_api

logger = logging.getLogger("pickup_api.times")


@pickup_api.get("/students/<row_id:student_id>/pickup-times/<date_str>")
@safe_route("Failed to get pickup time")
def get_pickup_time(student_id: int, date_str: str) -> Response:
    """Effective pickup time of one student on a date"""
    caller = _caller()
    _access().require_full_access(caller, student_id, "view pickup schedules")

    target_date = parse_date(date_str)
    effective = _pickup_service().get_effective_pickup_time(student_id, target_date)
    return _success(effective.to_dict(), message="Pickup time retrieved successfully")


@pickup_api.post("/students/pickup-times/bulk")
@safe_route("Failed to get bulk pickup times")
def get_bulk_pickup_times() -> Response:
    """Effective pickup times for every requested student the caller may see"""
    caller = _caller()
    body = parse_request(
        BulkPickupTimeRequest,
        _json(),
        max_students=_container().config.bulk_max_students,
    )

    authorized_ids = _access().filter_authorized_student_ids(caller, body.student_ids)
    if not authorized_ids:
        return _success([], message="Bulk pickup times retrieved successfully")

    target_date = body.date or today(_timezone())
    results = _pickup_service().resolve_effective_pickup_times(authorized_ids, target_date)
    logger.debug(
        "Resolved %s pickup times for account %s on %s", len(results), caller.account_id, target_date
    )
    return _success(
        [effective.to_dict() for effective in results.values()],
        message="Bulk pickup times retrieved successfully",
    )
