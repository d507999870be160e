# oee_dashboard/services/time_windows.py
import calendar
import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, List, Mapping, Optional, Tuple, Union
from zoneinfo import ZoneInfo

from oee_dashboard.core.exceptions import ConfigurationError
from oee_dashboard.core.records import DateRange, Shift, WorkingTimeType

logger = logging.getLogger("time_windows")

ShiftTimingTable = Dict[Tuple[Shift, WorkingTimeType], Tuple[time, time]]


def parse_shift_timings(raw: Mapping[str, List[str]]) -> ShiftTimingTable:
    """
    Parse the SHIFT_TIMINGS setting into a lookup table.

    raw: {"DAY/OVERTIME": ["07:00", "19:00"], ...}
    """
    table: ShiftTimingTable = {}
    for key, bounds in raw.items():
        try:
            shift_name, type_name = key.split("/")
            shift = Shift(shift_name.strip().upper())
            working_time_type = WorkingTimeType(type_name.strip().upper())
            start_raw, end_raw = bounds
            start = time.fromisoformat(start_raw)
            end = time.fromisoformat(end_raw)
        except ValueError as e:
            raise ConfigurationError(f"invalid shift timing entry {key!r}: {e}") from e
        table[(shift, working_time_type)] = (start, end)
    return table


class TimeWindowResolver:
    """Turns dates, shifts and months into absolute windows in one reference zone."""

    def __init__(self, tz: Union[str, ZoneInfo], shift_timings: ShiftTimingTable):
        self.tz = ZoneInfo(tz) if isinstance(tz, str) else tz
        self.shift_timings = dict(shift_timings)

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def local_date(self, value: Union[date, datetime]) -> date:
        if isinstance(value, datetime):
            if value.tzinfo is not None:
                return value.astimezone(self.tz).date()
            return value.date()
        return value

    def resolve_day_window(self, target: Union[date, datetime]) -> DateRange:
        day = self.local_date(target)
        start = datetime.combine(day, time.min, tzinfo=self.tz)
        end = datetime.combine(day, time.max, tzinfo=self.tz)
        return DateRange(start_date=start, end_date=end)

    def resolve_shift_window(
        self,
        shift: Shift,
        working_time_type: WorkingTimeType,
        day_start: Union[date, datetime],
    ) -> DateRange:
        timing = self.shift_timings.get((shift, working_time_type))
        if timing is None:
            raise ConfigurationError(
                f"no time window configured for shift {shift.value} / {working_time_type.value}"
            )
        start_time, end_time = timing
        day = self.local_date(day_start)
        start = datetime.combine(day, start_time, tzinfo=self.tz)
        end_day = day if end_time > start_time else day + timedelta(days=1)
        end = datetime.combine(end_day, end_time, tzinfo=self.tz)
        return DateRange(start_date=start, end_date=end)

    def resolve_month_window(self, year: int, month: int) -> DateRange:
        if not 1 <= month <= 12:
            raise ValueError(f"month must be in 1..12, got {month}")
        last_day = calendar.monthrange(year, month)[1]
        start = datetime.combine(date(year, month, 1), time.min, tzinfo=self.tz)
        end = datetime.combine(date(year, month, last_day), time.max, tzinfo=self.tz)
        return DateRange(start_date=start, end_date=end)

    @staticmethod
    def elapsed_minutes(start: datetime, end: datetime) -> float:
        # compare in UTC so DST transitions are counted as real time
        delta = end.astimezone(timezone.utc) - start.astimezone(timezone.utc)
        return delta.total_seconds() / 60


def build_resolver(settings: Optional[object] = None) -> TimeWindowResolver:
    if settings is None:
        from oee_dashboard.core.config import get_settings
        settings = get_settings()
    table = parse_shift_timings(settings.SHIFT_TIMINGS)
    logger.debug("time_windows: %d shift timings loaded, tz=%s", len(table), settings.TIMEZONE)
    return TimeWindowResolver(settings.TIMEZONE, table)
