from __future__ import annotations

from datetime import date

import pytest

from app.domain.exceptions import ValidationError
from app.schemas.pickup import (
    BulkPickupScheduleRequest,
    BulkPickupTimeRequest,
    PickupExceptionRequest,
    parse_request,
)


def test_schedule_request_entries():
    request = parse_request(
        BulkPickupScheduleRequest,
        {"schedules": [{"weekday": 1, "pickup_time": "15:30", "notes": "With sister"}, {"weekday": 2}]},
    )
    assert request.entries() == [
        {"weekday": 1, "pickup_time": "15:30", "notes": "With sister"},
        {"weekday": 2, "pickup_time": None, "notes": None},
    ]


def test_missing_body_is_an_empty_request():
    assert parse_request(BulkPickupScheduleRequest, None).entries() == []


def test_schedule_entry_shape_errors_carry_details():
    with pytest.raises(ValidationError) as excinfo:
        parse_request(BulkPickupScheduleRequest, {"schedules": [{"pickup_time": "15:30"}]})

    assert str(excinfo.value).startswith("schedules.0.weekday:")
    errors = excinfo.value.detail["errors"]
    assert errors[0]["loc"] == ("schedules", 0, "weekday")
    assert "url" not in errors[0]


def test_exception_request_tracks_omitted_fields():
    request = parse_request(PickupExceptionRequest, {"exception_date": "2025-03-12", "pickup_time": None})
    assert request.model_fields_set == {"exception_date", "pickup_time"}
    assert request.reason is None


def test_bulk_request_parses_date():
    request = parse_request(BulkPickupTimeRequest, {"student_ids": [3, 1], "date": "2025-03-10"})
    assert request.student_ids == [3, 1]
    assert request.date == date(2025, 3, 10)


def test_bulk_request_date_is_optional():
    assert parse_request(BulkPickupTimeRequest, {"student_ids": [1]}).date is None
    assert parse_request(BulkPickupTimeRequest, {"student_ids": [1], "date": ""}).date is None


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"student_ids": []}, "student_ids array cannot be empty"),
        ({"student_ids": [1], "date": "10.03.2025"}, "invalid date format, expected YYYY-MM-DD"),
    ],
)
def test_bulk_request_rules(payload, message):
    with pytest.raises(ValidationError) as excinfo:
        parse_request(BulkPickupTimeRequest, payload)
    assert str(excinfo.value) == message


def test_bulk_request_cap_comes_from_context():
    payload = {"student_ids": [1, 2, 3]}
    assert parse_request(BulkPickupTimeRequest, payload, max_students=3).student_ids == [1, 2, 3]

    with pytest.raises(ValidationError) as excinfo:
        parse_request(BulkPickupTimeRequest, payload, max_students=2)
    assert str(excinfo.value) == "student_ids array cannot exceed 2 items"


def test_bulk_request_default_cap_is_500():
    parse_request(BulkPickupTimeRequest, {"student_ids": list(range(1, 501))})
    with pytest.raises(ValidationError):
        parse_request(BulkPickupTimeRequest, {"student_ids": list(range(1, 502))})


def test_bulk_request_rejects_non_positive_ids():
    with pytest.raises(ValidationError) as excinfo:
        parse_request(BulkPickupTimeRequest, {"student_ids": [1, 0]})
    assert str(excinfo.value).startswith("student_ids.1:")


def test_bulk_request_ids_must_fit_a_row_id():
    largest = 2**63 - 1
    assert parse_request(BulkPickupTimeRequest, {"student_ids": [largest]}).student_ids == [largest]

    with pytest.raises(ValidationError) as excinfo:
        parse_request(BulkPickupTimeRequest, {"student_ids": [1, largest + 1]})
    assert str(excinfo.value).startswith("student_ids.1:")
