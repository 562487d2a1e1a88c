"""
Student / Supervision Database Operations
=========================================

Lookups over Students, Staff and GroupSupervisors used to decide who may
see or change a student's pickup data. Also holds the small write helpers
used to provision groups, students and staff.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Sequence
from typing import TYPE_CHECKING

from app.domain.exceptions import RepositoryError
from app.domain.pickup.pickup_entity import Student
from infrastructure.database.utils import in_placeholders

if TYPE_CHECKING:
    from contextlib import AbstractContextManager
    from sqlite3 import Connection

logger = logging.getLogger(__name__)


class StudentOperations:
    """Student, group and staff helpers for database handlers."""

    def get_db(self) -> "Connection":
        """Get database connection. Must be implemented by mixing class."""
        raise NotImplementedError("Subclass must implement get_db()")

    def connection(self) -> "AbstractContextManager[Connection]":
        """Committing connection block. Must be implemented by mixing class."""
        raise NotImplementedError("Subclass must implement connection()")

    # ==================== Lookups ====================

    def get_student(self, student_id: int) -> Student | None:
        db = self.get_db()
        try:
            row = db.execute(
                "SELECT student_id, name, group_id FROM Students WHERE student_id = ?",
                (student_id,),
            ).fetchone()
        except sqlite3.Error as e:
            logger.error("Error getting student %s: %s", student_id, e, exc_info=True)
            raise RepositoryError("get student") from e
        if row is None:
            return None
        return Student(student_id=row["student_id"], name=row["name"], group_id=row["group_id"])

    def find_student_ids_by_group_ids(self, group_ids: Sequence[int]) -> list[int]:
        if not group_ids:
            return []
        db = self.get_db()
        try:
            rows = db.execute(
                f"SELECT student_id FROM Students WHERE group_id IN ({in_placeholders(group_ids)})",
                tuple(group_ids),
            ).fetchall()
        except sqlite3.Error as e:
            logger.error("Error finding students for groups %s: %s", list(group_ids), e, exc_info=True)
            raise RepositoryError("find students by group ids") from e
        return [row["student_id"] for row in rows]

    def get_supervised_group_ids(self, staff_id: int) -> list[int]:
        db = self.get_db()
        try:
            rows = db.execute(
                "SELECT group_id FROM GroupSupervisors WHERE staff_id = ? ORDER BY group_id",
                (staff_id,),
            ).fetchall()
        except sqlite3.Error as e:
            logger.error("Error getting supervised groups for staff %s: %s", staff_id, e, exc_info=True)
            raise RepositoryError("get supervised group ids") from e
        return [row["group_id"] for row in rows]

    def get_staff_id_by_account(self, account_id: int) -> int | None:
        db = self.get_db()
        try:
            row = db.execute(
                "SELECT staff_id FROM Staff WHERE account_id = ?",
                (account_id,),
            ).fetchone()
        except sqlite3.Error as e:
            logger.error("Error resolving staff for account %s: %s", account_id, e, exc_info=True)
            raise RepositoryError("get staff by account") from e
        return row["staff_id"] if row else None

    # ==================== Provisioning ====================

    def insert_group(self, name: str) -> int:
        with self.connection() as db:
            cursor = db.execute("INSERT INTO EducationGroups (name) VALUES (?)", (name,))
        return int(cursor.lastrowid)

    def insert_student(self, name: str, group_id: int | None = None) -> int:
        with self.connection() as db:
            cursor = db.execute(
                "INSERT INTO Students (name, group_id) VALUES (?, ?)",
                (name, group_id),
            )
        return int(cursor.lastrowid)

    def insert_staff(self, account_id: int, name: str = "") -> int:
        with self.connection() as db:
            cursor = db.execute(
                "INSERT INTO Staff (account_id, name) VALUES (?, ?)",
                (account_id, name),
            )
        return int(cursor.lastrowid)

    def assign_supervisor(self, group_id: int, staff_id: int) -> None:
        with self.connection() as db:
            db.execute(
                "INSERT OR IGNORE INTO GroupSupervisors (group_id, staff_id) VALUES (?, ?)",
                (group_id, staff_id),
            )
