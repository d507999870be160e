from datetime import date, datetime, time, timedelta, timezone

import pytest

from oee_dashboard.core.exceptions import ConfigurationError
from oee_dashboard.core.records import Shift, WorkingTimeType
from oee_dashboard.services.time_windows import TimeWindowResolver, parse_shift_timings

from conftest import TZ


def test_day_window_is_midnight_to_midnight(resolver):
    window = resolver.resolve_day_window(date(2024, 3, 4))

    assert window.start_date == datetime(2024, 3, 4, 0, 0, tzinfo=TZ)
    assert window.end_date == datetime.combine(date(2024, 3, 4), time.max, tzinfo=TZ)


def test_day_window_converts_aware_datetimes(resolver):
    # 2024-03-04 20:00 UTC is already 2024-03-05 03:00 in Bangkok
    window = resolver.resolve_day_window(datetime(2024, 3, 4, 20, 0, tzinfo=timezone.utc))
    assert window.start_date.date() == date(2024, 3, 5)


def test_day_shift_window(resolver):
    window = resolver.resolve_shift_window(Shift.DAY, WorkingTimeType.OVERTIME, date(2024, 3, 4))

    assert window.start_date == datetime(2024, 3, 4, 7, 0, tzinfo=TZ)
    assert window.end_date == datetime(2024, 3, 4, 19, 0, tzinfo=TZ)


@pytest.mark.parametrize("working_time_type, end_hour", [
    (WorkingTimeType.NOT_OVERTIME, 4),
    (WorkingTimeType.OVERTIME, 7),
])
def test_night_shift_crosses_midnight(resolver, working_time_type, end_hour):
    day_start = resolver.resolve_day_window(date(2024, 3, 4)).start_date
    window = resolver.resolve_shift_window(Shift.NIGHT, working_time_type, day_start)

    assert window.start_date == datetime(2024, 3, 4, 19, 0, tzinfo=TZ)
    assert window.end_date == datetime(2024, 3, 5, end_hour, 0, tzinfo=TZ)
    assert window.end_date > window.start_date


def test_unconfigured_shift_raises():
    resolver = TimeWindowResolver(TZ, parse_shift_timings({"DAY/NOT_OVERTIME": ["08:00", "17:00"]}))
    with pytest.raises(ConfigurationError):
        resolver.resolve_shift_window(Shift.NIGHT, WorkingTimeType.OVERTIME, date(2024, 3, 4))


@pytest.mark.parametrize("raw", [
    {"DAY": ["08:00", "17:00"]},
    {"EVENING/OVERTIME": ["08:00", "17:00"]},
    {"DAY/OVERTIME": ["8 o'clock", "17:00"]},
    {"DAY/OVERTIME": ["08:00"]},
])
def test_invalid_shift_timings(raw):
    with pytest.raises(ConfigurationError):
        parse_shift_timings(raw)


@pytest.mark.parametrize("year, month, days", [
    (2024, 2, 29),
    (2023, 2, 28),
    (2024, 4, 30),
    (2024, 12, 31),
])
def test_month_window_uses_calendar_length(resolver, year, month, days):
    window = resolver.resolve_month_window(year, month)

    assert window.start_date == datetime(year, month, 1, tzinfo=TZ)
    assert window.end_date.date() == date(year, month, days)
    assert window.end_date.time() == time.max
    assert (window.end_date.date() - window.start_date.date()).days + 1 == days


def test_month_window_rejects_bad_month(resolver):
    with pytest.raises(ValueError):
        resolver.resolve_month_window(2024, 13)


def test_elapsed_minutes():
    start = datetime(2024, 3, 4, 8, 0, tzinfo=TZ)
    assert TimeWindowResolver.elapsed_minutes(start, start + timedelta(minutes=47, seconds=30)) == 47.5


def test_elapsed_minutes_across_zones():
    start = datetime(2024, 3, 4, 8, 0, tzinfo=TZ)
    end = datetime(2024, 3, 4, 1, 10, tzinfo=timezone.utc)  # 08:10 Bangkok
    assert TimeWindowResolver.elapsed_minutes(start, end) == 10
