"""
Schemas Module
==============

This module provides Pydantic models for request validation.
Schemas ensure data integrity and provide automatic validation.
"""

from app.schemas.pickup import (
    BulkPickupScheduleRequest,
    BulkPickupTimeRequest,
    PickupExceptionRequest,
    PickupNoteRequest,
    PickupScheduleEntry,
    parse_request,
    validation_error_from,
)

__all__ = [
    "BulkPickupScheduleRequest",
    "BulkPickupTimeRequest",
    "PickupExceptionRequest",
    "PickupNoteRequest",
    "PickupScheduleEntry",
    "parse_request",
    "validation_error_from",
]
