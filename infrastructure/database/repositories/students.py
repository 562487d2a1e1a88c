"""
Student Repository
==================

Student, supervision and staff lookups backed by SQLite.
Implements the StudentDirectory and StaffDirectory protocols.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from app.domain.pickup import Student

if TYPE_CHECKING:
    from infrastructure.database.ops.students import StudentOperations


class StudentRepository:
    """Repository facade over the StudentOperations mixin."""

    def __init__(self, backend: "StudentOperations") -> None:
        self._backend = backend

    def get_student(self, student_id: int) -> Student | None:
        return self._backend.get_student(student_id)

    def find_student_ids_by_group_ids(self, group_ids: Sequence[int]) -> list[int]:
        return self._backend.find_student_ids_by_group_ids(list(group_ids))

    def get_supervised_group_ids(self, staff_id: int) -> list[int]:
        return self._backend.get_supervised_group_ids(staff_id)

    # ==================== Provisioning ====================
    # Seeding helpers for fixtures and local setup; the API never calls them.
    # Groups, students and supervision are owned by the school directory.

    def create_group(self, name: str) -> int:
        return self._backend.insert_group(name)

    def create_student(self, name: str, group_id: int | None = None) -> int:
        return self._backend.insert_student(name, group_id)

    def add_supervisor(self, group_id: int, staff_id: int) -> None:
        self._backend.assign_supervisor(group_id, staff_id)


class StaffRepository:
    """Resolves authenticated accounts to staff members."""

    def __init__(self, backend: "StudentOperations") -> None:
        self._backend = backend

    def get_staff_id_by_account(self, account_id: int) -> int | None:
        return self._backend.get_staff_id_by_account(account_id)

    def create_staff(self, account_id: int, name: str = "") -> int:
        """Seeding helper: register ``account_id`` as a staff member."""
        return self._backend.insert_staff(account_id, name)
