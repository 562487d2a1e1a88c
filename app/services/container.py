from __future__ import annotations

import logging
from dataclasses import dataclass

from app.config import AppConfig
from app.services.application.access_service import StudentAccessService
from app.services.application.identity_service import IdentityService
from app.services.application.pickup_schedule_service import PickupScheduleService
from infrastructure.database.repositories.pickup import PickupScheduleRepository
from infrastructure.database.repositories.students import StaffRepository, StudentRepository
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler
from infrastructure.logging.audit import AuditLogger

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Aggregate and manage core backend services."""

    config: AppConfig
    database: SQLiteDatabaseHandler
    pickup_repo: PickupScheduleRepository
    student_repo: StudentRepository
    staff_repo: StaffRepository
    audit_logger: AuditLogger
    identity_service: IdentityService
    access_service: StudentAccessService
    pickup_schedule_service: PickupScheduleService

    @classmethod
    def build(cls, config: AppConfig) -> "ServiceContainer":
        """Construct the service container with all dependencies.

        Args:
            config: Application configuration
        """
        logger.info("Building ServiceContainer...")

        audit_logger = AuditLogger(config.audit_log_path or None, config.log_level)
        database = SQLiteDatabaseHandler(config.database_path)
        database.init_app(None)

        pickup_repo = PickupScheduleRepository(database)
        student_repo = StudentRepository(database)
        staff_repo = StaffRepository(database)

        identity_service = IdentityService(staff_repo, student_repo)
        access_service = StudentAccessService(student_repo, identity_service)
        pickup_schedule_service = PickupScheduleService(pickup_repo, audit_logger=audit_logger)

        logger.info("ServiceContainer built successfully.")
        return cls(
            config=config,
            database=database,
            pickup_repo=pickup_repo,
            student_repo=student_repo,
            staff_repo=staff_repo,
            audit_logger=audit_logger,
            identity_service=identity_service,
            access_service=access_service,
            pickup_schedule_service=pickup_schedule_service,
        )

    def shutdown(self) -> None:
        """Release external resources before process exit."""
        self.database.close_db()
        logger.info("ServiceContainer shutdown complete.")
