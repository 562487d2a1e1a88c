from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

import pytest

from app.domain.exceptions import FormatError, ValidationError
from app.utils.time import (
    REFERENCE_DATE,
    anchor_time_of_day,
    coerce_datetime,
    format_date,
    format_time_of_day,
    format_timestamp,
    iso_now,
    iso_weekday,
    parse_date,
    parse_time_of_day,
    today,
    weekday_name,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("00:00", time(0, 0)),
        ("07:05", time(7, 5)),
        ("15:30", time(15, 30)),
        ("23:59", time(23, 59)),
    ],
)
def test_parse_time_of_day_accepts_strict_hh_mm(raw, expected):
    assert parse_time_of_day(raw) == expected


@pytest.mark.parametrize("raw", ["24:00", "9:30", "09:3", "12:60", "12:00:00", "", "noon", " 12:00"])
def test_parse_time_of_day_rejects_malformed(raw):
    with pytest.raises(FormatError):
        parse_time_of_day(raw)


def test_format_error_is_a_validation_error():
    with pytest.raises(ValidationError):
        parse_time_of_day("25:00")


def test_parse_time_of_day_rejects_non_strings():
    with pytest.raises(FormatError):
        parse_time_of_day(None)  # type: ignore[arg-type]


def test_anchor_time_of_day_uses_reference_date():
    anchored = anchor_time_of_day(time(12, 0))
    assert anchored == datetime(2000, 1, 1, 12, 0)
    assert anchored.date() == REFERENCE_DATE


def test_format_time_of_day():
    assert format_time_of_day(time(8, 5)) == "08:05"
    assert format_time_of_day(datetime(2000, 1, 1, 15, 30)) == "15:30"
    assert format_time_of_day(None) is None


def test_time_of_day_round_trip():
    assert format_time_of_day(parse_time_of_day("15:30")) == "15:30"


def test_parse_date_strict():
    assert parse_date("2025-03-10") == date(2025, 3, 10)
    for raw in ("2025-3-10", "10.03.2025", "2025-02-30", "2025-03-10T00:00", ""):
        with pytest.raises(FormatError):
            parse_date(raw)


def test_format_date():
    assert format_date(date(2025, 1, 5)) == "2025-01-05"
    assert format_date(None) is None


def test_iso_weekday_and_names():
    monday = date(2025, 3, 10)
    assert iso_weekday(monday) == 1
    assert iso_weekday(monday + timedelta(days=6)) == 7
    assert weekday_name(1) == "Montag"
    assert weekday_name(5) == "Freitag"
    assert weekday_name(6) == "Samstag"
    assert weekday_name(7) == "Sonntag"


@pytest.mark.parametrize("weekday", [0, 8, -1])
def test_weekday_name_out_of_range(weekday):
    with pytest.raises(KeyError):
        weekday_name(weekday)


def test_today_uses_reference_timezone():
    result = today("Europe/Berlin")
    assert isinstance(result, date)
    assert abs((result - datetime.now(timezone.utc).date()).days) <= 1


def test_iso_now_is_timezone_aware():
    parsed = datetime.fromisoformat(iso_now(timespec="seconds"))
    assert parsed.tzinfo is not None
    assert parsed.microsecond == 0


def test_format_timestamp_naive_values_are_utc():
    assert format_timestamp(datetime(2025, 3, 10, 8, 0, 0)) == "2025-03-10T08:00:00+00:00"
    assert format_timestamp(None) is None


def test_coerce_datetime():
    assert coerce_datetime("2025-03-10T08:00:00Z") == datetime(2025, 3, 10, 8, 0, tzinfo=timezone.utc)
    assert coerce_datetime("2025-03-10 08:00:00").tzinfo == timezone.utc
    assert coerce_datetime("not a date") is None
    assert coerce_datetime(None) is None
    assert coerce_datetime(42) is None
