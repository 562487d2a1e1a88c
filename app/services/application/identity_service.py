"""
Identity Service
================

Resolves the authenticated principal of a request into a caller context and
maps it to the staff member and supervised groups the authorization layer
works with.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from app.domain.exceptions import ForbiddenError, UnauthorizedError

if TYPE_CHECKING:
    from app.domain.pickup import StaffDirectory, StudentDirectory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallerContext:
    """Authenticated principal: account and its granted permission strings."""

    account_id: int
    permissions: frozenset[str] = field(default_factory=frozenset)


class IdentityService:
    """Caller resolution backed by the staff and student directories."""

    def __init__(self, staff_repo: "StaffDirectory", student_repo: "StudentDirectory") -> None:
        self._staff_repo = staff_repo
        self._student_repo = student_repo

    @staticmethod
    def caller_from_session(session: Mapping[str, Any]) -> CallerContext:
        """
        Build the caller context from session data.

        Raises:
            UnauthorizedError: No authenticated account in the session
        """
        account_id = session.get("account_id")
        if account_id is None:
            raise UnauthorizedError("Authentication required")
        try:
            account_id = int(account_id)
        except (TypeError, ValueError):
            raise UnauthorizedError("Authentication required") from None

        permissions = session.get("permissions") or ()
        if isinstance(permissions, str):
            permissions = (permissions,)
        return CallerContext(account_id=account_id, permissions=frozenset(permissions))

    def find_staff_id(self, caller: CallerContext) -> int | None:
        return self._staff_repo.get_staff_id_by_account(caller.account_id)

    def resolve_staff_id(self, caller: CallerContext) -> int:
        """
        Staff ID of the caller, recorded as ``created_by`` on writes.

        Raises:
            ForbiddenError: The account does not belong to a staff member
        """
        staff_id = self.find_staff_id(caller)
        if staff_id is None:
            logger.warning("Account %s is not a staff member", caller.account_id)
            raise ForbiddenError("user is not a staff member")
        return staff_id

    def get_supervised_group_ids(self, caller: CallerContext) -> list[int]:
        """Groups the caller supervises; empty when the caller is not staff."""
        staff_id = self.find_staff_id(caller)
        if staff_id is None:
            return []
        return self._student_repo.get_supervised_group_ids(staff_id)
