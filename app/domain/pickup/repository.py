"""
Pickup Store Protocols
======================

Defines the interfaces for pickup persistence and the student / staff
lookups the authorization layer needs. Implementations live in
``infrastructure.database.repositories``.

The bulk finders take a collection of student IDs and answer with a single
query each; callers rely on that to keep resolution at a fixed number of
round-trips regardless of how many students are requested.
"""

from __future__ import annotations

import datetime
from abc import abstractmethod
from collections.abc import Iterable, Sequence
from typing import Protocol

from app.domain.pickup.pickup_entity import (
    DayNote,
    PickupException,
    Student,
    WeeklySchedule,
)


class PickupStore(Protocol):
    """Protocol for schedule / exception / note persistence."""

    # ==================== Bulk resolution queries ====================

    @abstractmethod
    def find_exceptions_by_date(
        self, student_ids: Sequence[int], exception_date: datetime.date
    ) -> list[PickupException]:
        """All exceptions on ``exception_date`` for any of the students (one query)."""
        ...

    @abstractmethod
    def find_schedules_by_weekday(self, student_ids: Sequence[int], weekday: int) -> list[WeeklySchedule]:
        """All schedule entries for ``weekday`` for any of the students (one query)."""
        ...

    @abstractmethod
    def find_notes_by_date(self, student_ids: Sequence[int], note_date: datetime.date) -> list[DayNote]:
        """All day notes on ``note_date`` for any of the students, oldest first (one query)."""
        ...

    # ==================== Weekly schedules ====================

    @abstractmethod
    def get_schedules_by_student(self, student_id: int) -> list[WeeklySchedule]:
        """All schedule entries of a student ordered by weekday."""
        ...

    @abstractmethod
    def replace_schedules(self, student_id: int, schedules: Iterable[WeeklySchedule]) -> list[WeeklySchedule]:
        """
        Replace the whole week of a student atomically.

        Existing rows for the student are removed and the new set inserted in
        one transaction; on failure nothing changes.

        Returns:
            The stored entries with IDs and timestamps assigned
        """
        ...

    # ==================== Exceptions ====================

    @abstractmethod
    def get_exception_by_id(self, exception_id: int) -> PickupException | None:
        ...

    @abstractmethod
    def get_exception_by_student_and_date(
        self, student_id: int, exception_date: datetime.date
    ) -> PickupException | None:
        ...

    @abstractmethod
    def get_exceptions_by_student(
        self, student_id: int, from_date: datetime.date | None = None
    ) -> list[PickupException]:
        """Exceptions of a student ordered by date, optionally only on/after ``from_date``."""
        ...

    @abstractmethod
    def create_exception(self, exception: PickupException) -> PickupException:
        ...

    @abstractmethod
    def update_exception(self, exception: PickupException) -> PickupException:
        """Write mutable fields (date, time, reason); creator and creation time are kept."""
        ...

    @abstractmethod
    def delete_exception(self, exception_id: int) -> bool:
        ...

    @abstractmethod
    def delete_exceptions_before(self, before_date: datetime.date) -> int:
        ...

    # ==================== Day notes ====================

    @abstractmethod
    def get_note_by_id(self, note_id: int) -> DayNote | None:
        ...

    @abstractmethod
    def get_notes_by_student(self, student_id: int) -> list[DayNote]:
        ...

    @abstractmethod
    def create_note(self, note: DayNote) -> DayNote:
        ...

    @abstractmethod
    def update_note(self, note: DayNote) -> DayNote:
        """Write mutable fields (date, content); creator and creation time are kept."""
        ...

    @abstractmethod
    def delete_note(self, note_id: int) -> bool:
        ...

    @abstractmethod
    def delete_notes_before(self, before_date: datetime.date) -> int:
        ...


class StudentDirectory(Protocol):
    """Student and supervision lookups used for authorization."""

    @abstractmethod
    def get_student(self, student_id: int) -> Student | None:
        ...

    @abstractmethod
    def find_student_ids_by_group_ids(self, group_ids: Sequence[int]) -> list[int]:
        """IDs of all students currently in any of the groups (one query)."""
        ...

    @abstractmethod
    def get_supervised_group_ids(self, staff_id: int) -> list[int]:
        ...


class StaffDirectory(Protocol):
    """Resolve authenticated accounts to staff members."""

    @abstractmethod
    def get_staff_id_by_account(self, account_id: int) -> int | None:
        ...
