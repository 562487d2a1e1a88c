"""
Pickup Day Notes
================

Endpoints for free-text notes attached to a student and date.
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
from app.schemas.pickup import PickupNoteRequest, parse_request
from app.utils.http import safe_route

from . import pickup_api

logger = logging.getLogger("pickup_api.notes")


@pickup_api.post("/students/<row_id:student_id>/pickup-notes")
@safe_route("Failed to create pickup note")
def create_pickup_note(student_id: int) -> Response:
    caller = _caller()
    _access().require_full_access(caller, student_id, "manage pickup notes")

    body = parse_request(PickupNoteRequest, _json())
    staff_id = _identity().resolve_staff_id(caller)

    note = _pickup_service().create_note(student_id, body.note_date, body.content, staff_id=staff_id)
    return _success(note.to_dict(), 201, message="Pickup note created successfully")


@pickup_api.put("/students/<row_id:student_id>/pickup-notes/<row_id:note_id>")
@safe_route("Failed to update pickup note")
def update_pickup_note(student_id: int, note_id: int) -> Response:
    caller = _caller()
    _access().require_full_access(caller, student_id, "manage pickup notes")

    # Existence and ownership are reported before body errors
    service = _pickup_service()
    service.get_owned_note(student_id, note_id)

    body = parse_request(PickupNoteRequest, _json())
    note = service.update_note(
        student_id,
        note_id,
        body.note_date,
        body.content,
        staff_id=_identity().find_staff_id(caller),
    )
    return _success(note.to_dict(), message="Pickup note updated successfully")


@pickup_api.delete("/students/<row_id:student_id>/pickup-notes/<row_id:note_id>")
@safe_route("Failed to delete pickup note")
def delete_pickup_note(student_id: int, note_id: int) -> Response:
    caller = _caller()
    _access().require_full_access(caller, student_id, "manage pickup notes")

    _pickup_service().delete_note(student_id, note_id, staff_id=_identity().find_staff_id(caller))
    return _success(None, message="Pickup note deleted successfully")
