from __future__ import annotations

from datetime import date

import pytest

from app.domain.pickup import DayNote, PickupException
from app.workers.cleanup_cli import main
from infrastructure.database.repositories.pickup import PickupScheduleRepository
from infrastructure.database.repositories.students import StudentRepository
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler


@pytest.fixture()
def database_file(tmp_path):
    path = tmp_path / "pickup.db"
    handler = SQLiteDatabaseHandler(str(path))
    handler.create_tables()
    student_id = StudentRepository(handler).create_student("Alice")
    repo = PickupScheduleRepository(handler)
    repo.create_exception(PickupException(student_id=student_id, exception_date=date(2025, 3, 3)))
    repo.create_exception(PickupException(student_id=student_id, exception_date=date(2025, 3, 20)))
    repo.create_note(DayNote(student_id=student_id, note_date=date(2025, 3, 3), content="Old"))
    handler.close_db()
    return path


def test_purges_entries_before_cutoff(database_file, capsys):
    assert main(["--before", "2025-03-10", "--database", str(database_file)]) == 0
    assert "Removed 1 exceptions and 1 notes dated before 2025-03-10" in capsys.readouterr().out

    handler = SQLiteDatabaseHandler(str(database_file))
    try:
        with handler.connection() as conn:
            remaining = conn.execute("SELECT exception_date FROM StudentPickupExceptions").fetchall()
        assert [row["exception_date"] for row in remaining] == ["2025-03-20"]
    finally:
        handler.close_db()


def test_rejects_malformed_cutoff(database_file):
    with pytest.raises(SystemExit) as excinfo:
        main(["--before", "10.03.2025", "--database", str(database_file)])
    assert excinfo.value.code == 2
