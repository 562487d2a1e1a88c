"""Caller resolution and student-level authorization."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from app.domain.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from app.domain.pickup import Student
from app.services.application.access_service import StudentAccessService
from app.services.application.identity_service import CallerContext, IdentityService
from conftest import NON_STAFF_ACCOUNT, SUPERVISOR_ACCOUNT

# ============================ IdentityService ==============================


def test_caller_from_session():
    caller = IdentityService.caller_from_session({"account_id": 7, "permissions": ["students:read", "admin:*"]})
    assert caller == CallerContext(account_id=7, permissions=frozenset({"students:read", "admin:*"}))


def test_caller_from_session_single_permission_string():
    caller = IdentityService.caller_from_session({"account_id": "7", "permissions": "admin:*"})
    assert caller.account_id == 7
    assert caller.permissions == frozenset({"admin:*"})


@pytest.mark.parametrize("session", [{}, {"account_id": None}, {"account_id": "abc"}])
def test_caller_from_session_requires_account(session):
    with pytest.raises(UnauthorizedError):
        IdentityService.caller_from_session(session)


def test_resolve_staff_id(identity_service, school, supervisor_caller):
    assert identity_service.resolve_staff_id(supervisor_caller) == school.supervisor_staff


def test_resolve_staff_id_rejects_non_staff(identity_service, school):
    caller = CallerContext(account_id=NON_STAFF_ACCOUNT)
    with pytest.raises(ForbiddenError) as excinfo:
        identity_service.resolve_staff_id(caller)
    assert str(excinfo.value) == "user is not a staff member"


def test_supervised_groups(identity_service, school, supervisor_caller, outsider_caller):
    assert identity_service.get_supervised_group_ids(supervisor_caller) == [school.group_a]
    assert identity_service.get_supervised_group_ids(outsider_caller) == []
    assert identity_service.get_supervised_group_ids(CallerContext(account_id=NON_STAFF_ACCOUNT)) == []


# ============================ Bulk filter ==================================


def test_admin_gets_input_unchanged(access_service, school, admin_caller):
    requested = [school.carol, 9999, school.alice, school.carol]
    assert access_service.filter_authorized_student_ids(admin_caller, requested) == requested


def test_wildcard_permission_is_admin(access_service, school):
    caller = CallerContext(account_id=NON_STAFF_ACCOUNT, permissions=frozenset({"*:*"}))
    assert access_service.filter_authorized_student_ids(caller, [school.carol]) == [school.carol]


def test_supervisor_sees_own_group_in_input_order(access_service, school, supervisor_caller):
    requested = [school.bob, school.carol, school.alice, school.bob, school.dave]
    assert access_service.filter_authorized_student_ids(supervisor_caller, requested) == [
        school.bob,
        school.alice,
        school.bob,
    ]


@pytest.mark.parametrize("caller_fixture", ["admin_caller", "supervisor_caller"])
def test_filter_is_idempotent(access_service, school, request, caller_fixture):
    caller = request.getfixturevalue(caller_fixture)
    requested = [school.bob, school.carol, school.alice, school.bob, school.dave]

    first = access_service.filter_authorized_student_ids(caller, requested)
    second = access_service.filter_authorized_student_ids(caller, requested)

    assert first == second
    if caller_fixture == "admin_caller":
        assert first == requested
    else:
        assert first == [school.bob, school.alice, school.bob]
    assert access_service.filter_authorized_student_ids(caller, first) == first


def test_caller_without_groups_gets_nothing(access_service, school, outsider_caller):
    assert access_service.filter_authorized_student_ids(outsider_caller, [school.alice, school.carol]) == []


def test_no_student_lookup_without_groups():
    student_repo = MagicMock()
    identity = MagicMock()
    identity.get_supervised_group_ids.return_value = []
    service = StudentAccessService(student_repo, identity)

    caller = CallerContext(account_id=SUPERVISOR_ACCOUNT)
    assert service.filter_authorized_student_ids(caller, [1, 2]) == []
    student_repo.find_student_ids_by_group_ids.assert_not_called()


def test_bulk_filter_uses_one_student_lookup():
    student_repo = MagicMock()
    student_repo.find_student_ids_by_group_ids.return_value = [1, 3]
    identity = MagicMock()
    identity.get_supervised_group_ids.return_value = [10, 11]
    service = StudentAccessService(student_repo, identity)

    caller = CallerContext(account_id=SUPERVISOR_ACCOUNT)
    assert service.filter_authorized_student_ids(caller, [3, 2, 1]) == [3, 1]
    student_repo.find_student_ids_by_group_ids.assert_called_once_with([10, 11])


# ============================ Full access guard ============================


def test_has_full_access(access_service, school, supervisor_caller, admin_caller):
    assert access_service.has_full_access(supervisor_caller, Student(school.alice, "Alice", school.group_a))
    assert not access_service.has_full_access(supervisor_caller, Student(school.carol, "Carol", school.group_b))
    assert access_service.has_full_access(admin_caller, Student(school.carol, "Carol", school.group_b))


def test_student_without_group_is_admin_only(access_service, school, supervisor_caller, admin_caller):
    with pytest.raises(ForbiddenError):
        access_service.require_full_access(supervisor_caller, school.dave)
    assert access_service.require_full_access(admin_caller, school.dave).student_id == school.dave


def test_require_full_access_returns_student(access_service, school, supervisor_caller):
    student = access_service.require_full_access(supervisor_caller, school.alice)
    assert student.student_id == school.alice
    assert student.group_id == school.group_a


def test_require_full_access_names_the_action(access_service, school, supervisor_caller):
    with pytest.raises(ForbiddenError) as excinfo:
        access_service.require_full_access(supervisor_caller, school.carol, "manage pickup exceptions")
    assert str(excinfo.value) == "full access required to manage pickup exceptions"


def test_missing_student_is_reported_before_access(access_service, school, outsider_caller, admin_caller):
    with pytest.raises(NotFoundError) as excinfo:
        access_service.require_full_access(outsider_caller, 9999)
    assert str(excinfo.value) == "student not found"

    with pytest.raises(NotFoundError):
        access_service.require_full_access(admin_caller, 9999)
