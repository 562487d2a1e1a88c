"""
Pickup Schedule Service
=======================

Application service for student pickup planning.

Responsibilities:
- Resolve the effective pickup time for one or many students on a date
- Replace a student's weekly schedule as a whole
- Create, update and delete date exceptions and day notes
- Purge exceptions and notes that lie in the past

Authorization is not checked here. Callers run the access guard
(``StudentAccessService.require_full_access``) or the bulk filter first;
this service only enforces that exceptions and notes belong to the student
named in the request.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from app.domain.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.domain.pickup import (
    MAX_NOTE_CONTENT_LENGTH,
    MAX_NOTES_LENGTH,
    MAX_REASON_LENGTH,
    UNSET,
    WEEKDAY_FRIDAY,
    WEEKDAY_MONDAY,
    DayNote,
    EffectivePickupTime,
    PickupException,
    StudentPickupData,
    WeeklySchedule,
    merge_effective_pickup_times,
)
from app.utils.time import iso_weekday, parse_date, parse_time_of_day

if TYPE_CHECKING:
    from app.domain.pickup import PickupStore
    from infrastructure.logging.audit import AuditLogger

logger = logging.getLogger(__name__)


def _require_date(value: Any, field_name: str) -> datetime.date:
    if isinstance(value, datetime.date):
        return value
    if value is None or value == "":
        raise ValidationError(f"{field_name} is required")
    try:
        return parse_date(value)
    except ValidationError:
        raise ValidationError(f"invalid {field_name} format, expected YYYY-MM-DD") from None


def _optional_time(value: Any, prefix: str = "") -> datetime.time | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime.time):
        return value
    try:
        return parse_time_of_day(value)
    except ValidationError:
        raise ValidationError(f"{prefix}invalid pickup_time format, expected HH:MM") from None


def _check_length(value: str | None, limit: int, message: str) -> None:
    if value is not None and len(value) > limit:
        raise ValidationError(message)


def validate_schedule_entries(entries: Sequence[Mapping[str, Any]]) -> list[WeeklySchedule]:
    """
    Validate a whole-week request and build the schedule entries.

    Rules are checked per entry in order and the first violation is reported
    with the entry index, e.g. ``"schedule 1: duplicate weekday 3"``.

    Raises:
        ValidationError: Empty list, weekday outside 1..5, duplicate weekday,
            missing or malformed pickup_time, notes too long
    """
    if not entries:
        raise ValidationError("schedules array cannot be empty")

    seen: set[int] = set()
    schedules: list[WeeklySchedule] = []
    for i, entry in enumerate(entries):
        weekday = entry.get("weekday")
        if not isinstance(weekday, int) or isinstance(weekday, bool) or not (
            WEEKDAY_MONDAY <= weekday <= WEEKDAY_FRIDAY
        ):
            raise ValidationError(f"schedule {i}: weekday must be between 1 (Monday) and 5 (Friday)")
        if weekday in seen:
            raise ValidationError(f"schedule {i}: duplicate weekday {weekday}")
        seen.add(weekday)

        raw_time = entry.get("pickup_time")
        if raw_time is None or raw_time == "":
            raise ValidationError(f"schedule {i}: pickup_time is required")
        pickup_time = _optional_time(raw_time, prefix=f"schedule {i}: ")

        notes = entry.get("notes")
        _check_length(notes, MAX_NOTES_LENGTH, f"schedule {i}: notes cannot exceed {MAX_NOTES_LENGTH} characters")

        schedules.append(
            WeeklySchedule(
                student_id=0,
                weekday=weekday,
                pickup_time=pickup_time,
                notes=notes,
            )
        )
    return schedules


class PickupScheduleService:
    """Resolution and maintenance of weekly schedules, exceptions and day notes."""

    def __init__(self, pickup_repo: "PickupStore", audit_logger: "AuditLogger" | None = None) -> None:
        """
        Args:
            pickup_repo: Store implementing the PickupStore protocol
            audit_logger: Optional structured audit trail for mutations
        """
        self._repo = pickup_repo
        self._audit = audit_logger

    # ==================== Resolution ====================

    def resolve_effective_pickup_times(
        self, student_ids: Iterable[int], target_date: datetime.date
    ) -> dict[int, EffectivePickupTime]:
        """
        Effective pickup time for every requested student on ``target_date``.

        Uses one bulk query each for exceptions, schedules and day notes,
        whatever the number of students. On Saturday and Sunday no schedule
        can apply, so the schedule query is skipped; exceptions and notes
        still do.

        Args:
            student_ids: Students to resolve (duplicates collapse)
            target_date: Calendar date to resolve

        Returns:
            Mapping of student ID to result, one entry per distinct student
        """
        ids = list(dict.fromkeys(student_ids))
        if not ids:
            return {}

        weekday = iso_weekday(target_date)
        exceptions = self._repo.find_exceptions_by_date(ids, target_date)
        if WEEKDAY_MONDAY <= weekday <= WEEKDAY_FRIDAY:
            schedules = self._repo.find_schedules_by_weekday(ids, weekday)
        else:
            schedules = []
        notes = self._repo.find_notes_by_date(ids, target_date)

        return merge_effective_pickup_times(ids, target_date, exceptions, schedules, notes)

    def get_effective_pickup_time(self, student_id: int, target_date: datetime.date) -> EffectivePickupTime:
        return self.resolve_effective_pickup_times([student_id], target_date)[student_id]

    # ==================== Reads ====================

    def get_student_pickup_data(self, student_id: int) -> StudentPickupData:
        """All schedules (by weekday), exceptions (by date) and notes (by date, then creation)."""
        return StudentPickupData(
            schedules=self._repo.get_schedules_by_student(student_id),
            exceptions=self._repo.get_exceptions_by_student(student_id),
            notes=self._repo.get_notes_by_student(student_id),
        )

    def get_upcoming_exceptions(self, student_id: int, from_date: datetime.date) -> list[PickupException]:
        return self._repo.get_exceptions_by_student(student_id, from_date)

    # ==================== Weekly schedule ====================

    def upsert_weekly_schedule(
        self, student_id: int, entries: Sequence[Mapping[str, Any]], staff_id: int
    ) -> StudentPickupData:
        """
        Replace the whole week of a student.

        Weekdays missing from ``entries`` are removed. The replace is atomic:
        a failure leaves the previous week untouched.

        Returns:
            Fresh pickup data bundle of the student
        """
        schedules = validate_schedule_entries(entries)
        for schedule in schedules:
            schedule.student_id = student_id
            schedule.created_by = staff_id

        self._repo.replace_schedules(student_id, schedules)
        logger.info(
            "Staff %s replaced weekly pickup schedule of student %s (%s weekdays)",
            staff_id,
            student_id,
            len(schedules),
        )
        self._record(staff_id, "replace_schedule", f"student:{student_id}", weekdays=[s.weekday for s in schedules])
        return self.get_student_pickup_data(student_id)

    # ==================== Exceptions ====================

    def create_exception(
        self,
        student_id: int,
        exception_date: Any,
        pickup_time: Any = None,
        reason: str | None = None,
        *,
        staff_id: int,
    ) -> PickupException:
        """
        Create a date exception. A missing ``pickup_time`` means no pickup that day.

        Raises:
            ValidationError: Bad date, time or reason
            ConflictError: The student already has an exception on that date
        """
        exc_date = _require_date(exception_date, "exception_date")
        exc_time = _optional_time(pickup_time)
        _check_length(reason, MAX_REASON_LENGTH, f"reason cannot exceed {MAX_REASON_LENGTH} characters")

        if self._repo.get_exception_by_student_and_date(student_id, exc_date) is not None:
            raise ConflictError("pickup exception already exists for this date")

        exception = self._repo.create_exception(
            PickupException(
                student_id=student_id,
                exception_date=exc_date,
                pickup_time=exc_time,
                reason=reason,
                created_by=staff_id,
            )
        )
        logger.info(
            "Staff %s created pickup exception %s for student %s on %s",
            staff_id,
            exception.exception_id,
            student_id,
            exc_date,
        )
        self._record(staff_id, "create_exception", f"exception:{exception.exception_id}", student_id=student_id)
        return exception

    def update_exception(
        self,
        student_id: int,
        exception_id: int,
        exception_date: Any,
        pickup_time: Any = UNSET,
        reason: Any = UNSET,
        *,
        staff_id: int | None = None,
    ) -> PickupException:
        """
        Update an exception of the given student.

        ``UNSET`` keeps the stored value; an explicit None pickup time clears
        it (no pickup that day). Creator and creation time never change.

        Raises:
            NotFoundError: Exception does not exist
            ForbiddenError: Exception belongs to another student
            ValidationError: Bad date, time or reason
            ConflictError: Another exception already uses the new date
        """
        existing = self.get_owned_exception(student_id, exception_id)

        exc_date = _require_date(exception_date, "exception_date")
        if pickup_time is not UNSET:
            existing.pickup_time = _optional_time(pickup_time)
        if reason is not UNSET:
            _check_length(reason, MAX_REASON_LENGTH, f"reason cannot exceed {MAX_REASON_LENGTH} characters")
            existing.reason = reason

        if exc_date != existing.exception_date:
            other = self._repo.get_exception_by_student_and_date(student_id, exc_date)
            if other is not None and other.exception_id != exception_id:
                raise ConflictError("pickup exception already exists for this date")
        existing.exception_date = exc_date

        updated = self._repo.update_exception(existing)
        logger.info("Updated pickup exception %s of student %s", exception_id, student_id)
        self._record(staff_id, "update_exception", f"exception:{exception_id}", student_id=student_id)
        return updated

    def delete_exception(self, student_id: int, exception_id: int, *, staff_id: int | None = None) -> None:
        self.get_owned_exception(student_id, exception_id)
        self._repo.delete_exception(exception_id)
        logger.info("Deleted pickup exception %s of student %s", exception_id, student_id)
        self._record(staff_id, "delete_exception", f"exception:{exception_id}", student_id=student_id)

    def get_owned_exception(self, student_id: int, exception_id: int) -> PickupException:
        """
        Exception ``exception_id`` if it belongs to ``student_id``.

        Raises:
            NotFoundError: Exception does not exist
            ForbiddenError: Exception belongs to another student
        """
        existing = self._repo.get_exception_by_id(exception_id)
        if existing is None:
            raise NotFoundError("pickup exception not found")
        if existing.student_id != student_id:
            logger.warning("Exception %s requested through student %s", exception_id, student_id)
            raise ForbiddenError("exception does not belong to this student")
        return existing

    # ==================== Day notes ====================

    @staticmethod
    def _validate_note(note_date: Any, content: Any) -> tuple[datetime.date, str]:
        parsed = _require_date(note_date, "note_date")
        if not isinstance(content, str) or not content.strip():
            raise ValidationError("content is required")
        _check_length(content, MAX_NOTE_CONTENT_LENGTH, f"content cannot exceed {MAX_NOTE_CONTENT_LENGTH} characters")
        return parsed, content

    def create_note(self, student_id: int, note_date: Any, content: Any, *, staff_id: int) -> DayNote:
        parsed_date, text = self._validate_note(note_date, content)
        note = self._repo.create_note(
            DayNote(student_id=student_id, note_date=parsed_date, content=text, created_by=staff_id)
        )
        logger.info("Staff %s created pickup note %s for student %s", staff_id, note.note_id, student_id)
        self._record(staff_id, "create_note", f"note:{note.note_id}", student_id=student_id)
        return note

    def update_note(
        self, student_id: int, note_id: int, note_date: Any, content: Any, *, staff_id: int | None = None
    ) -> DayNote:
        """
        Raises:
            NotFoundError: Note does not exist
            ForbiddenError: Note belongs to another student
            ValidationError: Bad date or content
        """
        existing = self.get_owned_note(student_id, note_id)
        existing.note_date, existing.content = self._validate_note(note_date, content)

        updated = self._repo.update_note(existing)
        logger.info("Updated pickup note %s of student %s", note_id, student_id)
        self._record(staff_id, "update_note", f"note:{note_id}", student_id=student_id)
        return updated

    def delete_note(self, student_id: int, note_id: int, *, staff_id: int | None = None) -> None:
        self.get_owned_note(student_id, note_id)
        self._repo.delete_note(note_id)
        logger.info("Deleted pickup note %s of student %s", note_id, student_id)
        self._record(staff_id, "delete_note", f"note:{note_id}", student_id=student_id)

    def get_owned_note(self, student_id: int, note_id: int) -> DayNote:
        """Note ``note_id`` if it belongs to ``student_id``; NotFoundError, then ForbiddenError."""
        existing = self._repo.get_note_by_id(note_id)
        if existing is None:
            raise NotFoundError("pickup note not found")
        if existing.student_id != student_id:
            logger.warning("Note %s requested through student %s", note_id, student_id)
            raise ForbiddenError("note does not belong to this student")
        return existing

    # ==================== Maintenance ====================

    def purge_past_entries(self, before_date: datetime.date) -> dict[str, int]:
        """Delete exceptions and day notes dated before ``before_date``."""
        exceptions = self._repo.delete_exceptions_before(before_date)
        notes = self._repo.delete_notes_before(before_date)
        logger.info("Purged %s pickup exceptions and %s notes before %s", exceptions, notes, before_date)
        self._record(None, "purge", "pickup", before=before_date, exceptions=exceptions, notes=notes)
        return {"exceptions": exceptions, "notes": notes}

    def _record(self, staff_id: int | None, action: str, resource: str, **metadata: Any) -> None:
        if self._audit is None:
            return
        actor = f"staff:{staff_id}" if staff_id is not None else "system"
        self._audit.log_event(actor=actor, action=action, resource=resource, outcome="success", **metadata)
