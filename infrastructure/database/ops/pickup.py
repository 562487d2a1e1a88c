"""
Pickup Database Operations
==========================

Database operations for the StudentPickupSchedules, StudentPickupExceptions
and StudentPickupNotes tables.

Bulk finders answer for many students with one ``IN (...)`` query each.
Store failures are logged and re-raised as RepositoryError; nothing here
swallows an error into an empty result.
"""

from __future__ import annotations

import datetime
import logging
import sqlite3
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from app.domain.exceptions import ConflictError, RepositoryError
from app.domain.pickup.pickup_entity import DayNote, PickupException, WeeklySchedule
from app.utils.time import coerce_datetime, format_date, format_time_of_day, iso_now
from infrastructure.database.utils import in_placeholders, row_to_dict

if TYPE_CHECKING:
    from contextlib import AbstractContextManager
    from sqlite3 import Connection

logger = logging.getLogger(__name__)


class PickupOperations:
    """Pickup-related CRUD helpers for database handlers."""

    def get_db(self) -> "Connection":
        """Get database connection. Must be implemented by mixing class."""
        raise NotImplementedError("Subclass must implement get_db()")

    def transaction(self) -> "AbstractContextManager[Connection]":
        """Atomic block. Must be implemented by mixing class."""
        raise NotImplementedError("Subclass must implement transaction()")

    # =========================================================================
    # Weekly schedules
    # =========================================================================

    def get_pickup_schedules_by_student(self, student_id: int) -> list[WeeklySchedule]:
        db = self.get_db()
        try:
            rows = db.execute(
                """
                SELECT * FROM StudentPickupSchedules
                WHERE student_id = ?
                ORDER BY weekday ASC
                """,
                (student_id,),
            ).fetchall()
        except sqlite3.Error as e:
            logger.error("Error getting pickup schedules for student %s: %s", student_id, e, exc_info=True)
            raise RepositoryError("get pickup schedules by student") from e
        return [WeeklySchedule.from_row(row_to_dict(row)) for row in rows]

    def find_pickup_schedules_by_weekday(self, student_ids: Sequence[int], weekday: int) -> list[WeeklySchedule]:
        if not student_ids:
            return []
        db = self.get_db()
        try:
            rows = db.execute(
                f"""
                SELECT * FROM StudentPickupSchedules
                WHERE weekday = ? AND student_id IN ({in_placeholders(student_ids)})
                """,
                (weekday, *student_ids),
            ).fetchall()
        except sqlite3.Error as e:
            logger.error("Error finding pickup schedules for weekday %s: %s", weekday, e, exc_info=True)
            raise RepositoryError("find pickup schedules by weekday") from e
        return [WeeklySchedule.from_row(row_to_dict(row)) for row in rows]

    def replace_pickup_schedules(self, student_id: int, schedules: Iterable[WeeklySchedule]) -> list[WeeklySchedule]:
        """
        Replace all weekday entries of a student in one transaction.

        Weekdays missing from ``schedules`` are removed. If any insert fails,
        the delete is rolled back too and the previous week stays intact.
        """
        now = iso_now(timespec="seconds")
        stored: list[WeeklySchedule] = []
        try:
            with self.transaction() as db:
                db.execute("DELETE FROM StudentPickupSchedules WHERE student_id = ?", (student_id,))
                for schedule in schedules:
                    cursor = db.execute(
                        """
                        INSERT INTO StudentPickupSchedules (
                            student_id, weekday, pickup_time, notes,
                            created_by, created_at, updated_at
                        ) VALUES (?, ?, ?, ?, ?, ?, ?)
                        """,
                        (
                            student_id,
                            schedule.weekday,
                            format_time_of_day(schedule.pickup_time),
                            schedule.notes,
                            schedule.created_by,
                            now,
                            now,
                        ),
                    )
                    schedule.student_id = student_id
                    schedule.schedule_id = cursor.lastrowid
                    schedule.created_at = coerce_datetime(now)
                    schedule.updated_at = schedule.created_at
                    stored.append(schedule)
        except sqlite3.Error as e:
            logger.error("Error replacing pickup schedules for student %s: %s", student_id, e, exc_info=True)
            raise RepositoryError("replace pickup schedules") from e

        logger.info("Replaced pickup schedules for student %s (%s weekdays)", student_id, len(stored))
        return stored

    # =========================================================================
    # Exceptions
    # =========================================================================

    def get_pickup_exception_by_id(self, exception_id: int) -> PickupException | None:
        db = self.get_db()
        try:
            row = db.execute(
                "SELECT * FROM StudentPickupExceptions WHERE id = ?",
                (exception_id,),
            ).fetchone()
        except sqlite3.Error as e:
            logger.error("Error getting pickup exception %s: %s", exception_id, e, exc_info=True)
            raise RepositoryError("get pickup exception by id") from e
        return PickupException.from_row(row_to_dict(row)) if row else None

    def get_pickup_exception_by_student_and_date(
        self, student_id: int, exception_date: datetime.date
    ) -> PickupException | None:
        db = self.get_db()
        try:
            row = db.execute(
                """
                SELECT * FROM StudentPickupExceptions
                WHERE student_id = ? AND exception_date = ?
                """,
                (student_id, format_date(exception_date)),
            ).fetchone()
        except sqlite3.Error as e:
            logger.error("Error getting pickup exception for student %s: %s", student_id, e, exc_info=True)
            raise RepositoryError("get pickup exception by student and date") from e
        return PickupException.from_row(row_to_dict(row)) if row else None

    def get_pickup_exceptions_by_student(
        self, student_id: int, from_date: datetime.date | None = None
    ) -> list[PickupException]:
        query = "SELECT * FROM StudentPickupExceptions WHERE student_id = ?"
        params: list[object] = [student_id]
        if from_date is not None:
            query += " AND exception_date >= ?"
            params.append(format_date(from_date))
        query += " ORDER BY exception_date ASC"

        db = self.get_db()
        try:
            rows = db.execute(query, params).fetchall()
        except sqlite3.Error as e:
            logger.error("Error getting pickup exceptions for student %s: %s", student_id, e, exc_info=True)
            raise RepositoryError("get pickup exceptions by student") from e
        return [PickupException.from_row(row_to_dict(row)) for row in rows]

    def find_pickup_exceptions_by_date(
        self, student_ids: Sequence[int], exception_date: datetime.date
    ) -> list[PickupException]:
        if not student_ids:
            return []
        db = self.get_db()
        try:
            rows = db.execute(
                f"""
                SELECT * FROM StudentPickupExceptions
                WHERE exception_date = ? AND student_id IN ({in_placeholders(student_ids)})
                """,
                (format_date(exception_date), *student_ids),
            ).fetchall()
        except sqlite3.Error as e:
            logger.error("Error finding pickup exceptions for %s: %s", exception_date, e, exc_info=True)
            raise RepositoryError("find pickup exceptions by date") from e
        return [PickupException.from_row(row_to_dict(row)) for row in rows]

    def create_pickup_exception(self, exception: PickupException) -> PickupException:
        now = iso_now(timespec="seconds")
        try:
            with self.transaction() as db:
                cursor = db.execute(
                    """
                    INSERT INTO StudentPickupExceptions (
                        student_id, exception_date, pickup_time, reason,
                        created_by, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        exception.student_id,
                        format_date(exception.exception_date),
                        format_time_of_day(exception.pickup_time),
                        exception.reason,
                        exception.created_by,
                        now,
                        now,
                    ),
                )
        except sqlite3.IntegrityError as e:
            if "UNIQUE" in str(e):
                raise ConflictError("pickup exception already exists for this date") from e
            logger.error("Integrity error writing pickup exception: %s", e, exc_info=True)
            raise RepositoryError("write pickup exception") from e
        except sqlite3.Error as e:
            logger.error("Error creating pickup exception: %s", e, exc_info=True)
            raise RepositoryError("create pickup exception") from e

        exception.exception_id = cursor.lastrowid
        exception.created_at = coerce_datetime(now)
        exception.updated_at = exception.created_at
        return exception

    def update_pickup_exception(self, exception: PickupException) -> PickupException:
        now = iso_now(timespec="seconds")
        try:
            with self.transaction() as db:
                db.execute(
                    """
                    UPDATE StudentPickupExceptions
                    SET exception_date = ?, pickup_time = ?, reason = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (
                        format_date(exception.exception_date),
                        format_time_of_day(exception.pickup_time),
                        exception.reason,
                        now,
                        exception.exception_id,
                    ),
                )
        except sqlite3.IntegrityError as e:
            if "UNIQUE" in str(e):
                raise ConflictError("pickup exception already exists for this date") from e
            logger.error("Integrity error writing pickup exception: %s", e, exc_info=True)
            raise RepositoryError("write pickup exception") from e
        except sqlite3.Error as e:
            logger.error("Error updating pickup exception %s: %s", exception.exception_id, e, exc_info=True)
            raise RepositoryError("update pickup exception") from e

        exception.updated_at = coerce_datetime(now)
        return exception

    def delete_pickup_exception(self, exception_id: int) -> bool:
        return self._delete_by_id("StudentPickupExceptions", exception_id)

    def delete_pickup_exceptions_before(self, before_date: datetime.date) -> int:
        return self._delete_before("StudentPickupExceptions", "exception_date", before_date)

    # =========================================================================
    # Day notes
    # =========================================================================

    def get_pickup_note_by_id(self, note_id: int) -> DayNote | None:
        db = self.get_db()
        try:
            row = db.execute("SELECT * FROM StudentPickupNotes WHERE id = ?", (note_id,)).fetchone()
        except sqlite3.Error as e:
            logger.error("Error getting pickup note %s: %s", note_id, e, exc_info=True)
            raise RepositoryError("get pickup note by id") from e
        return DayNote.from_row(row_to_dict(row)) if row else None

    def get_pickup_notes_by_student(self, student_id: int) -> list[DayNote]:
        db = self.get_db()
        try:
            rows = db.execute(
                """
                SELECT * FROM StudentPickupNotes
                WHERE student_id = ?
                ORDER BY note_date ASC, created_at ASC, id ASC
                """,
                (student_id,),
            ).fetchall()
        except sqlite3.Error as e:
            logger.error("Error getting pickup notes for student %s: %s", student_id, e, exc_info=True)
            raise RepositoryError("get pickup notes by student") from e
        return [DayNote.from_row(row_to_dict(row)) for row in rows]

    def find_pickup_notes_by_date(self, student_ids: Sequence[int], note_date: datetime.date) -> list[DayNote]:
        if not student_ids:
            return []
        db = self.get_db()
        try:
            rows = db.execute(
                f"""
                SELECT * FROM StudentPickupNotes
                WHERE note_date = ? AND student_id IN ({in_placeholders(student_ids)})
                ORDER BY created_at ASC, id ASC
                """,
                (format_date(note_date), *student_ids),
            ).fetchall()
        except sqlite3.Error as e:
            logger.error("Error finding pickup notes for %s: %s", note_date, e, exc_info=True)
            raise RepositoryError("find pickup notes by date") from e
        return [DayNote.from_row(row_to_dict(row)) for row in rows]

    def create_pickup_note(self, note: DayNote) -> DayNote:
        now = iso_now(timespec="seconds")
        try:
            with self.transaction() as db:
                cursor = db.execute(
                    """
                    INSERT INTO StudentPickupNotes (
                        student_id, note_date, content, created_by, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        note.student_id,
                        format_date(note.note_date),
                        note.content,
                        note.created_by,
                        now,
                        now,
                    ),
                )
        except sqlite3.Error as e:
            logger.error("Error creating pickup note: %s", e, exc_info=True)
            raise RepositoryError("create pickup note") from e

        note.note_id = cursor.lastrowid
        note.created_at = coerce_datetime(now)
        note.updated_at = note.created_at
        return note

    def update_pickup_note(self, note: DayNote) -> DayNote:
        now = iso_now(timespec="seconds")
        try:
            with self.transaction() as db:
                db.execute(
                    """
                    UPDATE StudentPickupNotes
                    SET note_date = ?, content = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (format_date(note.note_date), note.content, now, note.note_id),
                )
        except sqlite3.Error as e:
            logger.error("Error updating pickup note %s: %s", note.note_id, e, exc_info=True)
            raise RepositoryError("update pickup note") from e

        note.updated_at = coerce_datetime(now)
        return note

    def delete_pickup_note(self, note_id: int) -> bool:
        return self._delete_by_id("StudentPickupNotes", note_id)

    def delete_pickup_notes_before(self, before_date: datetime.date) -> int:
        return self._delete_before("StudentPickupNotes", "note_date", before_date)

    # =========================================================================
    # Helpers
    # =========================================================================

    # Table and column names below come from the call sites above, never from input.
    def _delete_by_id(self, table: str, row_id: int) -> bool:
        try:
            with self.transaction() as db:
                cursor = db.execute(f"DELETE FROM {table} WHERE id = ?", (row_id,))
        except sqlite3.Error as e:
            logger.error("Error deleting %s row %s: %s", table, row_id, e, exc_info=True)
            raise RepositoryError(f"delete from {table}") from e
        return cursor.rowcount > 0

    def _delete_before(self, table: str, date_column: str, before_date: datetime.date) -> int:
        try:
            with self.transaction() as db:
                cursor = db.execute(
                    f"DELETE FROM {table} WHERE {date_column} < ?",
                    (format_date(before_date),),
                )
        except sqlite3.Error as e:
            logger.error("Error purging %s before %s: %s", table, before_date, e, exc_info=True)
            raise RepositoryError(f"purge {table}") from e
        return cursor.rowcount

