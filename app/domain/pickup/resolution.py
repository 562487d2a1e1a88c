"""
Effective pickup time resolution.

Precedence is strict: a date exception always wins (even when it carries
no pickup time), then the weekly schedule of the date's weekday, then
nothing. Day notes for the date are attached whichever branch fired.

This module is pure: it only merges collections that were already fetched.
"""

from __future__ import annotations

import datetime
from collections.abc import Iterable

from app.domain.pickup.pickup_entity import (
    DayNote,
    DayNoteRef,
    EffectivePickupTime,
    PickupException,
    WeeklySchedule,
)
from app.utils.time import iso_weekday, weekday_name


def merge_effective_pickup_times(
    student_ids: Iterable[int],
    target_date: datetime.date,
    exceptions: Iterable[PickupException],
    schedules: Iterable[WeeklySchedule],
    notes: Iterable[DayNote],
) -> dict[int, EffectivePickupTime]:
    """
    Merge fetched exceptions, schedules and notes into one result per student.

    Every requested student gets an entry, so "looked up, nothing configured"
    stays distinguishable from "not requested". Rows for other dates,
    weekdays or students are ignored.

    Args:
        student_ids: Requested students; duplicates collapse, first order wins
        target_date: Date being resolved
        exceptions: Exceptions fetched for the date
        schedules: Schedule entries fetched for the date's weekday
        notes: Day notes fetched for the date, in display order

    Returns:
        Mapping of student ID to its effective pickup time
    """
    weekday = iso_weekday(target_date)
    name = weekday_name(weekday)

    exception_map: dict[int, PickupException] = {}
    for exc in exceptions:
        if exc.exception_date == target_date:
            exception_map.setdefault(exc.student_id, exc)

    schedule_map: dict[int, WeeklySchedule] = {}
    for sched in schedules:
        if sched.weekday == weekday:
            schedule_map.setdefault(sched.student_id, sched)

    notes_map: dict[int, list[DayNoteRef]] = {}
    for note in notes:
        if note.note_date == target_date:
            notes_map.setdefault(note.student_id, []).append(DayNoteRef(note.note_id, note.content))

    result: dict[int, EffectivePickupTime] = {}
    for student_id in student_ids:
        if student_id in result:
            continue

        effective = EffectivePickupTime(
            student_id=student_id,
            date=target_date,
            weekday_name=name,
            day_notes=list(notes_map.get(student_id, [])),
        )

        exc = exception_map.get(student_id)
        sched = schedule_map.get(student_id)
        if exc is not None:
            effective.is_exception = True
            effective.pickup_time = exc.pickup_time
            effective.reason = exc.reason or ""
        elif sched is not None:
            effective.pickup_time = sched.pickup_time
            effective.notes = sched.notes or ""

        result[student_id] = effective

    return result
