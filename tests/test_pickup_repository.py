"""PickupScheduleRepository against a real in-memory SQLite database."""

from __future__ import annotations

import sqlite3
from datetime import date, time
from unittest.mock import patch

import pytest

from app.domain.exceptions import ConflictError, RepositoryError
from app.domain.pickup import DayNote, PickupException, WeeklySchedule

MONDAY = date(2025, 3, 10)
TUESDAY = date(2025, 3, 11)


def _week(student_id, *weekdays, at=time(15, 30)):
    return [WeeklySchedule(student_id=student_id, weekday=w, pickup_time=at, created_by=None) for w in weekdays]


def test_replace_schedules_assigns_ids_and_orders_by_weekday(pickup_repo, school):
    stored = pickup_repo.replace_schedules(school.alice, _week(school.alice, 3, 1))

    assert all(s.schedule_id is not None for s in stored)
    assert all(s.created_at is not None and s.created_at.tzinfo is not None for s in stored)

    loaded = pickup_repo.get_schedules_by_student(school.alice)
    assert [s.weekday for s in loaded] == [1, 3]
    assert loaded[0].pickup_time == time(15, 30)


def test_replace_schedules_removes_missing_weekdays(pickup_repo, school):
    pickup_repo.replace_schedules(school.alice, _week(school.alice, 1, 2, 3))
    pickup_repo.replace_schedules(school.alice, _week(school.alice, 5, at=time(13, 0)))

    loaded = pickup_repo.get_schedules_by_student(school.alice)
    assert [(s.weekday, s.pickup_time) for s in loaded] == [(5, time(13, 0))]


def test_replace_schedules_is_atomic(pickup_repo, school):
    pickup_repo.replace_schedules(school.alice, _week(school.alice, 1, 2))

    # Weekday 6 violates the CHECK constraint after the delete already ran
    with pytest.raises(RepositoryError):
        pickup_repo.replace_schedules(school.alice, _week(school.alice, 4, 6))

    assert [s.weekday for s in pickup_repo.get_schedules_by_student(school.alice)] == [1, 2]


def test_find_schedules_by_weekday_is_one_bulk_lookup(pickup_repo, school):
    pickup_repo.replace_schedules(school.alice, _week(school.alice, 1, 2))
    pickup_repo.replace_schedules(school.bob, _week(school.bob, 1))
    pickup_repo.replace_schedules(school.carol, _week(school.carol, 2))

    found = pickup_repo.find_schedules_by_weekday([school.alice, school.bob, school.carol], 1)
    assert sorted(s.student_id for s in found) == sorted([school.alice, school.bob])
    assert pickup_repo.find_schedules_by_weekday([], 1) == []


def test_exception_crud(pickup_repo, school):
    created = pickup_repo.create_exception(
        PickupException(
            student_id=school.alice,
            exception_date=MONDAY,
            pickup_time=time(12, 0),
            reason="Doctor",
            created_by=school.supervisor_staff,
        )
    )
    assert created.exception_id is not None

    loaded = pickup_repo.get_exception_by_id(created.exception_id)
    assert loaded.pickup_time == time(12, 0)
    assert loaded.reason == "Doctor"
    assert loaded.created_by == school.supervisor_staff
    assert pickup_repo.get_exception_by_student_and_date(school.alice, MONDAY).exception_id == created.exception_id

    loaded.pickup_time = None
    loaded.exception_date = TUESDAY
    pickup_repo.update_exception(loaded)
    updated = pickup_repo.get_exception_by_id(created.exception_id)
    assert updated.pickup_time is None
    assert updated.exception_date == TUESDAY
    assert updated.created_by == school.supervisor_staff
    assert updated.created_at == loaded.created_at

    assert pickup_repo.delete_exception(created.exception_id) is True
    assert pickup_repo.get_exception_by_id(created.exception_id) is None
    assert pickup_repo.delete_exception(created.exception_id) is False


def test_duplicate_exception_date_is_a_conflict(pickup_repo, school):
    pickup_repo.create_exception(PickupException(student_id=school.alice, exception_date=MONDAY))
    with pytest.raises(ConflictError):
        pickup_repo.create_exception(PickupException(student_id=school.alice, exception_date=MONDAY))

    # Same date for another student is fine
    pickup_repo.create_exception(PickupException(student_id=school.bob, exception_date=MONDAY))


def test_exceptions_by_student_with_from_date(pickup_repo, school):
    for day in (date(2025, 3, 3), MONDAY, date(2025, 3, 20)):
        pickup_repo.create_exception(PickupException(student_id=school.alice, exception_date=day))

    assert [e.exception_date for e in pickup_repo.get_exceptions_by_student(school.alice)] == [
        date(2025, 3, 3),
        MONDAY,
        date(2025, 3, 20),
    ]
    assert [e.exception_date for e in pickup_repo.get_exceptions_by_student(school.alice, MONDAY)] == [
        MONDAY,
        date(2025, 3, 20),
    ]


def test_notes_keep_creation_order(pickup_repo, school):
    first = pickup_repo.create_note(DayNote(student_id=school.alice, note_date=MONDAY, content="First"))
    second = pickup_repo.create_note(DayNote(student_id=school.alice, note_date=MONDAY, content="Second"))
    pickup_repo.create_note(DayNote(student_id=school.bob, note_date=TUESDAY, content="Other day"))

    found = pickup_repo.find_notes_by_date([school.alice, school.bob], MONDAY)
    assert [n.note_id for n in found] == [first.note_id, second.note_id]

    first.content = "First, edited"
    pickup_repo.update_note(first)
    assert pickup_repo.get_note_by_id(first.note_id).content == "First, edited"


def test_delete_before_date(pickup_repo, school):
    pickup_repo.create_exception(PickupException(student_id=school.alice, exception_date=date(2025, 3, 1)))
    pickup_repo.create_exception(PickupException(student_id=school.alice, exception_date=MONDAY))
    pickup_repo.create_note(DayNote(student_id=school.alice, note_date=date(2025, 3, 1), content="Old"))

    assert pickup_repo.delete_exceptions_before(MONDAY) == 1
    assert pickup_repo.delete_notes_before(MONDAY) == 1
    assert [e.exception_date for e in pickup_repo.get_exceptions_by_student(school.alice)] == [MONDAY]


def test_pickup_rows_are_removed_with_the_student(pickup_repo, db_handler, school):
    pickup_repo.replace_schedules(school.alice, _week(school.alice, 1))
    pickup_repo.create_note(DayNote(student_id=school.alice, note_date=MONDAY, content="Bye"))

    with db_handler.connection() as conn:
        conn.execute("DELETE FROM Students WHERE student_id = ?", (school.alice,))

    assert pickup_repo.get_schedules_by_student(school.alice) == []
    assert pickup_repo.get_notes_by_student(school.alice) == []


def test_store_failures_surface_as_repository_error(pickup_repo, db_handler):
    with patch.object(db_handler, "get_db", side_effect=_broken_connection):
        with pytest.raises(RepositoryError):
            pickup_repo.get_schedules_by_student(1)


def _broken_connection():
    conn = sqlite3.connect(":memory:")
    conn.close()
    return conn
