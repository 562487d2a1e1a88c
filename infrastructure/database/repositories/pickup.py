"""
Pickup Repository
=================

Concrete implementation of the PickupStore protocol using SQLite.
Wraps the PickupOperations mixin from the infrastructure layer.

Reads are never cached: effective pickup times must reflect the store's
current contents on every request.
"""

from __future__ import annotations

import datetime
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from app.domain.pickup import DayNote, PickupException, WeeklySchedule

if TYPE_CHECKING:
    from infrastructure.database.ops.pickup import PickupOperations


class PickupScheduleRepository:
    """
    Concrete implementation of the PickupStore protocol.

    Wraps the PickupOperations mixin to provide repository pattern access.
    """

    def __init__(self, backend: "PickupOperations") -> None:
        """
        Initialize with database backend.

        Args:
            backend: Database handler that implements PickupOperations
        """
        self._backend = backend

    # ==================== Bulk resolution queries ====================

    def find_exceptions_by_date(
        self, student_ids: Sequence[int], exception_date: datetime.date
    ) -> list[PickupException]:
        return self._backend.find_pickup_exceptions_by_date(list(student_ids), exception_date)

    def find_schedules_by_weekday(self, student_ids: Sequence[int], weekday: int) -> list[WeeklySchedule]:
        return self._backend.find_pickup_schedules_by_weekday(list(student_ids), weekday)

    def find_notes_by_date(self, student_ids: Sequence[int], note_date: datetime.date) -> list[DayNote]:
        return self._backend.find_pickup_notes_by_date(list(student_ids), note_date)

    # ==================== Weekly schedules ====================

    def get_schedules_by_student(self, student_id: int) -> list[WeeklySchedule]:
        return self._backend.get_pickup_schedules_by_student(student_id)

    def replace_schedules(self, student_id: int, schedules: Iterable[WeeklySchedule]) -> list[WeeklySchedule]:
        return self._backend.replace_pickup_schedules(student_id, list(schedules))

    # ==================== Exceptions ====================

    def get_exception_by_id(self, exception_id: int) -> PickupException | None:
        return self._backend.get_pickup_exception_by_id(exception_id)

    def get_exception_by_student_and_date(
        self, student_id: int, exception_date: datetime.date
    ) -> PickupException | None:
        return self._backend.get_pickup_exception_by_student_and_date(student_id, exception_date)

    def get_exceptions_by_student(
        self, student_id: int, from_date: datetime.date | None = None
    ) -> list[PickupException]:
        return self._backend.get_pickup_exceptions_by_student(student_id, from_date)

    def create_exception(self, exception: PickupException) -> PickupException:
        return self._backend.create_pickup_exception(exception)

    def update_exception(self, exception: PickupException) -> PickupException:
        return self._backend.update_pickup_exception(exception)

    def delete_exception(self, exception_id: int) -> bool:
        return self._backend.delete_pickup_exception(exception_id)

    def delete_exceptions_before(self, before_date: datetime.date) -> int:
        return self._backend.delete_pickup_exceptions_before(before_date)

    # ==================== Day notes ====================

    def get_note_by_id(self, note_id: int) -> DayNote | None:
        return self._backend.get_pickup_note_by_id(note_id)

    def get_notes_by_student(self, student_id: int) -> list[DayNote]:
        return self._backend.get_pickup_notes_by_student(student_id)

    def create_note(self, note: DayNote) -> DayNote:
        return self._backend.create_pickup_note(note)

    def update_note(self, note: DayNote) -> DayNote:
        return self._backend.update_pickup_note(note)

    def delete_note(self, note_id: int) -> bool:
        return self._backend.delete_pickup_note(note_id)

    def delete_notes_before(self, before_date: datetime.date) -> int:
        return self._backend.delete_pickup_notes_before(before_date)
