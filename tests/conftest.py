"""
Shared test fixtures for the pickup schedule test suite.

Provides:
- In-memory SQLite database with all tables created
- Repository instances wired to the test database
- Service instances built on those repositories
- A seeded school (groups, students, staff, supervision)

Usage:
    def test_example(school, pickup_service):
        data = pickup_service.get_student_pickup_data(school.alice)
        assert data.schedules == []
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass

# Ensure repository root is on sys.path so tests can import application modules
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import pytest

from app.services.application.access_service import StudentAccessService
from app.services.application.identity_service import CallerContext, IdentityService
from app.services.application.pickup_schedule_service import PickupScheduleService
from infrastructure.database.repositories.pickup import PickupScheduleRepository
from infrastructure.database.repositories.students import StaffRepository, StudentRepository
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler

# ---------------------------------------------------------------------------
# Logging: keep test output clean
# ---------------------------------------------------------------------------
logging.getLogger("infrastructure").setLevel(logging.WARNING)
logging.getLogger("app").setLevel(logging.WARNING)

ADMIN_ACCOUNT = 1
SUPERVISOR_ACCOUNT = 100
OUTSIDER_ACCOUNT = 200
NON_STAFF_ACCOUNT = 300


# ========================== Database Fixtures ==============================


@pytest.fixture()
def db_handler():
    """In-memory SQLite database with all tables created.

    Each test gets a fresh database.
    """
    handler = SQLiteDatabaseHandler(":memory:")
    handler.create_tables()
    yield handler
    handler.close_db()


# ========================== Repository Fixtures ============================


@pytest.fixture()
def pickup_repo(db_handler):
    """PickupScheduleRepository backed by the in-memory DB."""
    return PickupScheduleRepository(db_handler)


@pytest.fixture()
def student_repo(db_handler):
    return StudentRepository(db_handler)


@pytest.fixture()
def staff_repo(db_handler):
    return StaffRepository(db_handler)


# ========================== Service Fixtures ===============================


@pytest.fixture()
def pickup_service(pickup_repo):
    return PickupScheduleService(pickup_repo)


@pytest.fixture()
def identity_service(staff_repo, student_repo):
    return IdentityService(staff_repo, student_repo)


@pytest.fixture()
def access_service(student_repo, identity_service):
    return StudentAccessService(student_repo, identity_service)


# ========================== Seed Data ======================================


@dataclass
class School:
    """IDs of the seeded groups, students and staff."""

    group_a: int
    group_b: int
    alice: int
    bob: int
    carol: int
    dave: int
    supervisor_staff: int
    outsider_staff: int


def seed_school(student_repo: StudentRepository, staff_repo: StaffRepository) -> School:
    """
    Two groups. The supervisor account supervises group A only; the
    outsider is staff without groups. Alice and Bob are in group A, Carol
    in group B, Dave in no group.
    """
    group_a = student_repo.create_group("Sonnengruppe")
    group_b = student_repo.create_group("Mondgruppe")
    alice = student_repo.create_student("Alice", group_a)
    bob = student_repo.create_student("Bob", group_a)
    carol = student_repo.create_student("Carol", group_b)
    dave = student_repo.create_student("Dave", None)

    supervisor_staff = staff_repo.create_staff(SUPERVISOR_ACCOUNT, "Frau Schmidt")
    outsider_staff = staff_repo.create_staff(OUTSIDER_ACCOUNT, "Herr Weber")
    staff_repo.create_staff(ADMIN_ACCOUNT, "Admin")
    student_repo.add_supervisor(group_a, supervisor_staff)

    return School(
        group_a=group_a,
        group_b=group_b,
        alice=alice,
        bob=bob,
        carol=carol,
        dave=dave,
        supervisor_staff=supervisor_staff,
        outsider_staff=outsider_staff,
    )


@pytest.fixture()
def school(student_repo, staff_repo) -> School:
    return seed_school(student_repo, staff_repo)


@pytest.fixture()
def admin_caller() -> CallerContext:
    return CallerContext(account_id=ADMIN_ACCOUNT, permissions=frozenset({"admin:*"}))


@pytest.fixture()
def supervisor_caller() -> CallerContext:
    return CallerContext(account_id=SUPERVISOR_ACCOUNT, permissions=frozenset({"students:read"}))


@pytest.fixture()
def outsider_caller() -> CallerContext:
    return CallerContext(account_id=OUTSIDER_ACCOUNT, permissions=frozenset({"students:read"}))
