"""
Pickup Schemas
==============

Pydantic models for pickup schedule request validation.

The models check the shape of a request body. Domain rules (weekday range,
duplicate weekdays, time formats, length limits) are enforced by
``PickupScheduleService`` so that every entry point applies the same rules.
"""

from __future__ import annotations

import datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError

from app.domain.exceptions import FormatError, ValidationError
from app.domain.pickup import MAX_ROW_ID
from app.utils.time import parse_date

DEFAULT_BULK_MAX_STUDENTS = 500

# Positive and small enough to be stored as a SQLite row ID
StudentId = Annotated[int, Field(gt=0, le=MAX_ROW_ID)]


class PickupScheduleEntry(BaseModel):
    """One weekday of a weekly schedule."""

    weekday: int = Field(..., description="ISO weekday, 1 (Monday) to 5 (Friday)")
    pickup_time: str | None = Field(default=None, description="Pickup time as HH:MM")
    notes: str | None = Field(default=None, description="Optional note shown with the schedule")


class BulkPickupScheduleRequest(BaseModel):
    """Whole-week replace of a student's schedule."""

    schedules: list[PickupScheduleEntry] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "schedules": [
                    {"weekday": 1, "pickup_time": "15:30", "notes": "With sister"},
                    {"weekday": 3, "pickup_time": "14:00"},
                ]
            }
        }
    )

    def entries(self) -> list[dict[str, Any]]:
        return [entry.model_dump() for entry in self.schedules]


class PickupExceptionRequest(BaseModel):
    """Create or update a date exception; omitting pickup_time means no pickup."""

    exception_date: str | None = None
    pickup_time: str | None = None
    reason: str | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"exception_date": "2025-03-14", "pickup_time": "12:00", "reason": "Doctor"}
        }
    )


class PickupNoteRequest(BaseModel):
    """Create or update a day note."""

    note_date: str | None = None
    content: str | None = None


class BulkPickupTimeRequest(BaseModel):
    """
    Effective pickup times for many students.

    The student cap is read from the validation context key
    ``max_students`` and falls back to 500.
    """

    student_ids: list[StudentId]
    date: datetime.date | None = None

    @field_validator("student_ids")
    @classmethod
    def _check_student_ids(cls, value: list[int], info: ValidationInfo) -> list[int]:
        limit = (info.context or {}).get("max_students", DEFAULT_BULK_MAX_STUDENTS)
        if not value:
            raise ValueError("student_ids array cannot be empty")
        if len(value) > limit:
            raise ValueError(f"student_ids array cannot exceed {limit} items")
        return value

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> datetime.date | None:
        if value is None or value == "":
            return None
        try:
            return parse_date(value)
        except FormatError:
            raise ValueError("invalid date format, expected YYYY-MM-DD") from None


def parse_request(model: type[BaseModel], payload: Any, **context: Any) -> Any:
    """
    Validate ``payload`` against ``model``.

    Raises:
        ValidationError: The first violated rule as message, all pydantic
            errors under ``detail["errors"]``
    """
    try:
        return model.model_validate(payload if payload is not None else {}, context=context or None)
    except PydanticValidationError as ve:
        raise validation_error_from(ve) from None


def validation_error_from(ve: PydanticValidationError) -> ValidationError:
    errors = ve.errors(include_url=False, include_context=False)
    first = ve.errors(include_url=False)[0]
    if first["type"] == "value_error" and "error" in first.get("ctx", {}):
        message = str(first["ctx"]["error"])
    else:
        location = ".".join(str(part) for part in first["loc"])
        message = f"{location}: {first['msg']}" if location else first["msg"]
    return ValidationError(message, detail={"errors": errors})
