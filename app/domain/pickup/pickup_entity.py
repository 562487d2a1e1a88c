"""
Pickup Domain Entities
======================

Entities for student pickup planning:
- Weekly schedule entries (one pickup time per weekday, Monday to Friday)
- Date-specific exceptions that override the weekly schedule
- Free-text day notes attached to a date
- The derived effective pickup time for a (student, date) pair

Optional pickup values use two tags. ``None`` means the value is explicitly
absent (an exception with no pickup time means "no pickup that day").
``UNSET`` means the field was omitted from an update and the stored value
is kept.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field
from typing import Any, Final

from app.utils.time import (
    coerce_datetime,
    format_date,
    format_time_of_day,
    format_timestamp,
    weekday_name,
)

logger = logging.getLogger(__name__)

WEEKDAY_MONDAY: Final = 1
WEEKDAY_FRIDAY: Final = 5

MAX_NOTES_LENGTH: Final = 500
MAX_REASON_LENGTH: Final = 255
MAX_NOTE_CONTENT_LENGTH: Final = 500

# Largest value SQLite stores in an INTEGER column
MAX_ROW_ID: Final = 2**63 - 1


class _Unset:
    """Marker for a field omitted from an update request."""

    _instance: "_Unset" | None = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final = _Unset()


@dataclass
class WeeklySchedule:
    """
    Recurring pickup time for one weekday.

    Attributes:
        schedule_id: Unique identifier (None until stored)
        student_id: Student the entry belongs to
        weekday: ISO weekday, 1 (Monday) to 5 (Friday)
        pickup_time: Wall-clock pickup time
        notes: Optional free text shown with the schedule
        created_by: Staff member who wrote the entry
        created_at: Creation timestamp (UTC)
        updated_at: Last update timestamp (UTC)
    """

    student_id: int
    weekday: int
    pickup_time: datetime.time
    notes: str | None = None
    created_by: int | None = None
    schedule_id: int | None = None
    created_at: datetime.datetime | None = None
    updated_at: datetime.datetime | None = None

    @property
    def weekday_name(self) -> str:
        return weekday_name(self.weekday)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.schedule_id,
            "student_id": self.student_id,
            "weekday": self.weekday,
            "weekday_name": self.weekday_name,
            "pickup_time": format_time_of_day(self.pickup_time),
            "created_by": self.created_by,
            "created_at": format_timestamp(self.created_at),
            "updated_at": format_timestamp(self.updated_at),
        }
        if self.notes is not None:
            data["notes"] = self.notes
        return data

    @staticmethod
    def from_row(row: dict[str, Any]) -> "WeeklySchedule":
        return WeeklySchedule(
            schedule_id=row["id"],
            student_id=row["student_id"],
            weekday=row["weekday"],
            pickup_time=datetime.time.fromisoformat(row["pickup_time"]),
            notes=row.get("notes"),
            created_by=row.get("created_by"),
            created_at=coerce_datetime(row.get("created_at")),
            updated_at=coerce_datetime(row.get("updated_at")),
        )


@dataclass
class PickupException:
    """
    Date-specific override of the weekly schedule.

    A ``pickup_time`` of None means the student is explicitly not picked up
    on that date, which is different from having no schedule configured.
    """

    student_id: int
    exception_date: datetime.date
    pickup_time: datetime.time | None = None
    reason: str | None = None
    created_by: int | None = None
    exception_id: int | None = None
    created_at: datetime.datetime | None = None
    updated_at: datetime.datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.exception_id,
            "student_id": self.student_id,
            "exception_date": format_date(self.exception_date),
            "created_by": self.created_by,
            "created_at": format_timestamp(self.created_at),
            "updated_at": format_timestamp(self.updated_at),
        }
        if self.pickup_time is not None:
            data["pickup_time"] = format_time_of_day(self.pickup_time)
        if self.reason is not None:
            data["reason"] = self.reason
        return data

    @staticmethod
    def from_row(row: dict[str, Any]) -> "PickupException":
        raw_time = row.get("pickup_time")
        return PickupException(
            exception_id=row["id"],
            student_id=row["student_id"],
            exception_date=datetime.date.fromisoformat(row["exception_date"]),
            pickup_time=datetime.time.fromisoformat(raw_time) if raw_time else None,
            reason=row.get("reason"),
            created_by=row.get("created_by"),
            created_at=coerce_datetime(row.get("created_at")),
            updated_at=coerce_datetime(row.get("updated_at")),
        )


@dataclass
class DayNote:
    """Free-text annotation for one student on one date. Never affects the pickup time."""

    student_id: int
    note_date: datetime.date
    content: str
    created_by: int | None = None
    note_id: int | None = None
    created_at: datetime.datetime | None = None
    updated_at: datetime.datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.note_id,
            "student_id": self.student_id,
            "note_date": format_date(self.note_date),
            "content": self.content,
            "created_by": self.created_by,
            "created_at": format_timestamp(self.created_at),
            "updated_at": format_timestamp(self.updated_at),
        }

    @staticmethod
    def from_row(row: dict[str, Any]) -> "DayNote":
        return DayNote(
            note_id=row["id"],
            student_id=row["student_id"],
            note_date=datetime.date.fromisoformat(row["note_date"]),
            content=row["content"],
            created_by=row.get("created_by"),
            created_at=coerce_datetime(row.get("created_at")),
            updated_at=coerce_datetime(row.get("updated_at")),
        )


@dataclass(frozen=True)
class DayNoteRef:
    """Compact day note as attached to an effective pickup time."""

    note_id: int
    content: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.note_id, "content": self.content}


@dataclass
class EffectivePickupTime:
    """
    Resolved pickup outcome for one student on one date.

    Attributes:
        student_id: Student the result is for
        date: Target calendar date
        weekday_name: Localized name of the date's weekday
        pickup_time: Resolved time, None when there is no pickup
        is_exception: True when a date exception produced the result
        reason: Exception reason (only meaningful when is_exception)
        notes: Schedule note (only set when the weekly schedule fired)
        day_notes: Day notes for the date, independent of the branch
    """

    student_id: int
    date: datetime.date
    weekday_name: str
    pickup_time: datetime.time | None = None
    is_exception: bool = False
    reason: str = ""
    notes: str = ""
    day_notes: list[DayNoteRef] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "student_id": self.student_id,
            "date": format_date(self.date),
            "weekday_name": self.weekday_name,
            "pickup_time": format_time_of_day(self.pickup_time),
            "is_exception": self.is_exception,
            "day_notes": [note.to_dict() for note in self.day_notes],
        }
        if self.is_exception and self.reason:
            data["reason"] = self.reason
        if self.notes:
            data["notes"] = self.notes
        return data


@dataclass
class StudentPickupData:
    """Everything stored for one student: schedules, exceptions and notes."""

    schedules: list[WeeklySchedule] = field(default_factory=list)
    exceptions: list[PickupException] = field(default_factory=list)
    notes: list[DayNote] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "schedules": [s.to_dict() for s in self.schedules],
            "exceptions": [e.to_dict() for e in self.exceptions],
            "notes": [n.to_dict() for n in self.notes],
        }


@dataclass(frozen=True)
class Student:
    """Student as seen by the pickup domain: identity and current group."""

    student_id: int
    name: str = ""
    group_id: int | None = None
