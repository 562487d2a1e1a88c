"""
Pickup Domain Module
====================

Weekly pickup schedules, date exceptions, day notes and the resolution of
the effective pickup time for a student on a date.
"""

from app.domain.pickup.pickup_entity import (
    MAX_NOTE_CONTENT_LENGTH,
    MAX_NOTES_LENGTH,
    MAX_REASON_LENGTH,
    MAX_ROW_ID,
    UNSET,
    WEEKDAY_FRIDAY,
    WEEKDAY_MONDAY,
    DayNote,
    DayNoteRef,
    EffectivePickupTime,
    PickupException,
    Student,
    StudentPickupData,
    WeeklySchedule,
)
from app.domain.pickup.repository import PickupStore, StaffDirectory, StudentDirectory
from app.domain.pickup.resolution import merge_effective_pickup_times

__all__ = [
    "MAX_NOTE_CONTENT_LENGTH",
    "MAX_NOTES_LENGTH",
    "MAX_REASON_LENGTH",
    "MAX_ROW_ID",
    "UNSET",
    "WEEKDAY_FRIDAY",
    "WEEKDAY_MONDAY",
    "DayNote",
    "DayNoteRef",
    "EffectivePickupTime",
    "PickupException",
    "PickupStore",
    "StaffDirectory",
    "Student",
    "StudentDirectory",
    "StudentPickupData",
    "WeeklySchedule",
    "merge_effective_pickup_times",
]
