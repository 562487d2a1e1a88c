"""
Student Access Service
======================

Decides which students a caller may see or change.

Two policies apply:
- Administrators (``admin:*`` or ``*:*``) may act on every student.
- Everybody else may act on students whose current group they supervise.

Bulk reads narrow the requested ID list through
:meth:`StudentAccessService.filter_authorized_student_ids`; single-student
reads and every mutation go through :meth:`StudentAccessService.require_full_access`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from app.domain.exceptions import ForbiddenError, NotFoundError

if TYPE_CHECKING:
    from app.domain.pickup import Student, StudentDirectory
    from app.services.application.identity_service import CallerContext, IdentityService

logger = logging.getLogger(__name__)

ADMIN_PERMISSIONS = frozenset({"admin:*", "*:*"})


class StudentAccessService:
    """Authorization checks for student pickup data."""

    def __init__(self, student_repo: "StudentDirectory", identity_service: "IdentityService") -> None:
        self._student_repo = student_repo
        self._identity = identity_service

    @staticmethod
    def is_admin(permissions: Iterable[str]) -> bool:
        return any(p in ADMIN_PERMISSIONS for p in permissions)

    def filter_authorized_student_ids(self, caller: "CallerContext", requested_ids: Sequence[int]) -> list[int]:
        """
        Reduce ``requested_ids`` to the students the caller may see.

        Admins get the input back unchanged (no existence check). Callers
        without supervised groups get an empty list without further queries.
        Otherwise a single lookup fetches the students of all supervised
        groups and the input is intersected with it, keeping input order and
        duplicates.

        Args:
            caller: Authenticated caller
            requested_ids: Student IDs as supplied by the client

        Returns:
            Ordered subset of ``requested_ids``
        """
        if self.is_admin(caller.permissions):
            return list(requested_ids)

        group_ids = self._identity.get_supervised_group_ids(caller)
        if not group_ids:
            logger.debug("Account %s supervises no groups", caller.account_id)
            return []

        visible = set(self._student_repo.find_student_ids_by_group_ids(group_ids))
        return [student_id for student_id in requested_ids if student_id in visible]

    def has_full_access(self, caller: "CallerContext", student: "Student") -> bool:
        """Admin, or supervisor of the student's current group."""
        if self.is_admin(caller.permissions):
            return True
        if student.group_id is None:
            return False
        return student.group_id in self._identity.get_supervised_group_ids(caller)

    def require_full_access(
        self, caller: "CallerContext", student_id: int, action: str = "manage pickup schedules"
    ) -> "Student":
        """
        Guard for single-student reads and all mutations.

        Raises:
            NotFoundError: Student does not exist (checked first)
            ForbiddenError: Caller lacks full access to the student
        """
        student = self._student_repo.get_student(student_id)
        if student is None:
            raise NotFoundError("student not found")
        if not self.has_full_access(caller, student):
            logger.warning(
                "Account %s denied full access to student %s (%s)",
                caller.account_id,
                student_id,
                action,
            )
            raise ForbiddenError(f"full access required to {action}")
        return student
