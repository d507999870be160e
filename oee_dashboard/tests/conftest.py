from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

import pytest

from oee_dashboard.core.config import DEFAULT_SHIFT_TIMINGS
from oee_dashboard.core.records import (
    DowntimeEvent,
    FailureEvent,
    ProductionPlan,
    ProductRecord,
    Shift,
    Station,
    WorkingTimeType,
)
from oee_dashboard.services.dashboard_service import DashboardService
from oee_dashboard.services.db_service import InMemoryDashboardRepository
from oee_dashboard.services.time_windows import TimeWindowResolver, parse_shift_timings

TZ = ZoneInfo("Asia/Bangkok")
LINE_ID = 1


def at(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime.combine(day, time(hour, minute), tzinfo=TZ)


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def add_day(
    repo: InMemoryDashboardRepository,
    day: date,
    goods: int = 0,
    failures=(),
    downtimes=(),
    target: int = 100,
    duration: int = 540,
    shift: Shift = Shift.DAY,
    working_time_type: WorkingTimeType = WorkingTimeType.NOT_OVERTIME,
    group: str = "A",
):
    """
    Seed one production day on LINE_ID.

    failures:  iterable of (failure_detail_id, count)
    downtimes: iterable of (availability_loss_id, minutes)
    Events are stamped between 08:00 and 15:00 so they fall inside the day shift.
    """
    repo.add_plan(ProductionPlan(
        line_id=LINE_ID,
        target=target,
        group=group,
        shift=shift,
        working_time_type=working_time_type,
        working_time_duration_minutes=duration,
        valid_date=at(day, 0),
    ))
    for i in range(goods):
        repo.add_product(ProductRecord(
            line_id=LINE_ID, timestamp=at(day, 8) + timedelta(seconds=30 * i), is_goods=True,
        ))
    for failure_detail_id, count in failures:
        for i in range(count):
            repo.add_failure(LINE_ID, FailureEvent(
                timestamp=at(day, 9, i),
                failure_detail_id=failure_detail_id,
                station_name=f"Station {failure_detail_id}",
                defect_type="VISUAL",
                details_text=f"defect {failure_detail_id}",
            ))
    for availability_loss_id, minutes in downtimes:
        repo.add_downtime(LINE_ID, DowntimeEvent(
            timestamp=at(day, 14),
            duration_minutes=minutes,
            availability_loss_id=availability_loss_id,
            station_id="S2",
            details_text=f"loss {availability_loss_id}",
        ))


@pytest.fixture
def resolver():
    return TimeWindowResolver(TZ, parse_shift_timings(DEFAULT_SHIFT_TIMINGS))


@pytest.fixture
def repo():
    repository = InMemoryDashboardRepository()
    repository.add_station(Station(station_id="S1", line_id=LINE_ID, cycle_time_seconds=60, station_name="Press"))
    repository.add_station(Station(station_id="S2", line_id=LINE_ID, cycle_time_seconds=300, station_name="Weld"))
    repository.add_station(Station(station_id="S3", line_id=LINE_ID, cycle_time_seconds=120, station_name="Paint"))
    return repository


@pytest.fixture
def clock():
    # well after every seeded day
    return FixedClock(datetime(2030, 1, 1, 12, 0, tzinfo=TZ))


@pytest.fixture
def service(repo, resolver, clock):
    return DashboardService(repo, resolver, clock=clock)
