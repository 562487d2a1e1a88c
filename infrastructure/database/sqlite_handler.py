import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from flask import Flask

from infrastructure.database.ops.pickup import PickupOperations
from infrastructure.database.ops.students import StudentOperations

logger = logging.getLogger(__name__)

_MEMORY_DATABASE = ":memory:"


class SQLiteDatabaseHandler(
    StudentOperations,
    PickupOperations,
):
    """Thread-safe SQLite handler decoupled from Flask globals."""

    def __init__(self, database_path: str) -> None:
        self._database_path = database_path
        self._local = threading.local()

        # Ensure the directory for the database file exists
        if database_path != _MEMORY_DATABASE:
            db_path = Path(database_path)
            if not db_path.parent.exists():
                db_path.parent.mkdir(parents=True, exist_ok=True)
                logger.info("Created database directory: %s", db_path.parent)

    # --- Lifecycle ------------------------------------------------------------
    def init_app(self, app: Flask | None = None) -> None:
        if app is not None:
            app.teardown_appcontext(self.close_db)
        self.create_tables()

    def get_db(self) -> sqlite3.Connection:
        connection: Optional[sqlite3.Connection] = getattr(self._local, "connection", None)
        if connection is None:
            connection = self._open_connection()
            self._local.connection = connection
        return connection

    def _open_connection(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._database_path, check_same_thread=False)
        try:
            connection.row_factory = sqlite3.Row
            self._configure_connection(connection)
            return connection
        except Exception:
            connection.close()
            raise

    def _configure_connection(self, connection: sqlite3.Connection) -> None:
        """Configure SQLite connection.

        - Foreign keys enforced (cascade pickup rows when a student goes away)
        - WAL mode for file databases: concurrent readers during writes
        - NORMAL synchronous: still safe with WAL
        """
        connection.execute("PRAGMA foreign_keys=ON")
        if self._database_path != _MEMORY_DATABASE:
            connection.execute("PRAGMA journal_mode=WAL")
            connection.execute("PRAGMA synchronous=NORMAL")
        connection.execute("PRAGMA temp_store=MEMORY")
        connection.commit()

    def close_db(self, _e: Optional[BaseException] = None) -> None:
        connection: Optional[sqlite3.Connection] = getattr(self._local, "connection", None)
        if connection is not None:
            connection.close()
            delattr(self._local, "connection")

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        conn = self.get_db()
        try:
            yield conn
        finally:
            conn.commit()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run a block atomically: commit on success, roll back on any error."""
        conn = self.get_db()
        try:
            yield conn
        except BaseException:
            conn.rollback()
            raise
        else:
            conn.commit()

    # --- Schema ----------------------------------------------------------------
    def create_tables(self) -> None:
        """Creates the necessary tables in the database if they do not already exist."""
        with self.connection() as db:
            # Education groups (classes / OGS groups)
            db.execute(
                """
                CREATE TABLE IF NOT EXISTS EducationGroups (
                    group_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            # Students with their current group
            db.execute(
                """
                CREATE TABLE IF NOT EXISTS Students (
                    student_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL DEFAULT '',
                    group_id INTEGER,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    FOREIGN KEY (group_id) REFERENCES EducationGroups(group_id) ON DELETE SET NULL
                )
                """
            )
            db.execute("CREATE INDEX IF NOT EXISTS idx_students_group ON Students(group_id)")

            # Staff members, resolved from the authenticated account
            db.execute(
                """
                CREATE TABLE IF NOT EXISTS Staff (
                    staff_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    account_id INTEGER UNIQUE NOT NULL,
                    name TEXT NOT NULL DEFAULT '',
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            # Group supervision (who may act on which group's students)
            db.execute(
                """
                CREATE TABLE IF NOT EXISTS GroupSupervisors (
                    group_id INTEGER NOT NULL,
                    staff_id INTEGER NOT NULL,
                    PRIMARY KEY (group_id, staff_id),
                    FOREIGN KEY (group_id) REFERENCES EducationGroups(group_id) ON DELETE CASCADE,
                    FOREIGN KEY (staff_id) REFERENCES Staff(staff_id) ON DELETE CASCADE
                )
                """
            )
            db.execute(
                "CREATE INDEX IF NOT EXISTS idx_group_supervisors_staff ON GroupSupervisors(staff_id)"
            )

            # =================================================================
            # Pickup planning
            # =================================================================
            db.execute(
                """
                CREATE TABLE IF NOT EXISTS StudentPickupSchedules (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    student_id INTEGER NOT NULL,
                    weekday INTEGER NOT NULL CHECK (weekday BETWEEN 1 AND 5),
                    pickup_time TEXT NOT NULL,
                    notes TEXT,
                    created_by INTEGER,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    UNIQUE (student_id, weekday),
                    FOREIGN KEY (student_id) REFERENCES Students(student_id) ON DELETE CASCADE
                )
                """
            )
            db.execute(
                "CREATE INDEX IF NOT EXISTS idx_pickup_schedules_weekday ON StudentPickupSchedules(weekday, student_id)"
            )

            db.execute(
                """
                CREATE TABLE IF NOT EXISTS StudentPickupExceptions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    student_id INTEGER NOT NULL,
                    exception_date TEXT NOT NULL,
                    pickup_time TEXT,
                    reason TEXT,
                    created_by INTEGER,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    UNIQUE (student_id, exception_date),
                    FOREIGN KEY (student_id) REFERENCES Students(student_id) ON DELETE CASCADE
                )
                """
            )
            db.execute(
                "CREATE INDEX IF NOT EXISTS idx_pickup_exceptions_date ON StudentPickupExceptions(exception_date, student_id)"
            )

            db.execute(
                """
                CREATE TABLE IF NOT EXISTS StudentPickupNotes (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    student_id INTEGER NOT NULL,
                    note_date TEXT NOT NULL,
                    content TEXT NOT NULL,
                    created_by INTEGER,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    FOREIGN KEY (student_id) REFERENCES Students(student_id) ON DELETE CASCADE
                )
                """
            )
            db.execute(
                "CREATE INDEX IF NOT EXISTS idx_pickup_notes_date ON StudentPickupNotes(note_date, student_id)"
            )
        logger.info("Database tables verified")
