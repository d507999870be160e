# oee_dashboard/services/dashboard_service.py
import asyncio
import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from functools import reduce
from typing import Callable, List, Optional, Union

from oee_dashboard.api.v1.schemas import (
    DashboardMetrics,
    DateDashboard,
    DowntimeDefect,
    FailureDefect,
    WorkingTime,
)
from oee_dashboard.core.exceptions import NotFoundError
from oee_dashboard.core.records import DateRange, Shift, Station, WorkingTimeType
from oee_dashboard.services.db_service import DashboardRepository
from oee_dashboard.services.defects import aggregate_downtime, aggregate_failures
from oee_dashboard.services.metrics import compute_metrics, round_metrics
from oee_dashboard.services.time_windows import TimeWindowResolver

logger = logging.getLogger("dashboard_service")

ALL_DAY = "ALL_DAY"
WORKING_TIME_LABELS = {
    WorkingTimeType.NOT_OVERTIME: "NO OT",
    WorkingTimeType.OVERTIME: "OT",
}


@dataclass
class RollupTotals:
    """Raw totals carried through the week/month fold."""
    target: int = 0
    actual: int = 0
    failure_total: int = 0
    downtime_total: int = 0
    working_minutes: int = 0
    failure_defect: List[FailureDefect] = field(default_factory=list)
    downtime_defect: List[DowntimeDefect] = field(default_factory=list)


def merge_day_into_rollup(totals: RollupTotals, day: DateDashboard) -> RollupTotals:
    """Add one day into the accumulator in place and return it."""
    totals.target += day.target
    totals.actual += day.actual
    totals.failure_total += day.failure_total
    totals.downtime_total += day.downtime_total
    totals.working_minutes += day.working_time.minutes
    # defect entries are appended per day, never merged by id across days
    totals.failure_defect.extend(day.failure_defect)
    totals.downtime_defect.extend(day.downtime_defect)
    return totals


async def gather_or_cancel(*aws):
    """
    Run awaitables concurrently and return their results in input order.

    On the first failure every unfinished task is cancelled and awaited
    before the error is re-raised.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def live_plan(
    now: datetime,
    shift_window: DateRange,
    cycle_time_seconds: float,
    target: int,
) -> int:
    """
    Projected output so far for a shift.

    - before the shift starts: 0
    - during the shift: whole elapsed minutes / bottleneck cycle time (minutes)
    - after the shift ends: the plan target
    """
    if now < shift_window.start_date:
        return 0
    if now < shift_window.end_date:
        if cycle_time_seconds <= 0:
            return 0
        elapsed = TimeWindowResolver.elapsed_minutes(shift_window.start_date, now)
        plan = math.floor(math.floor(elapsed) / (cycle_time_seconds / 60))
        return max(plan, 0)
    return target


class DashboardService:
    def __init__(
        self,
        repository: DashboardRepository,
        resolver: TimeWindowResolver,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.repository = repository
        self.resolver = resolver
        self.clock = clock or resolver.now

    # ============================================================
    # Month / week rollups
    # ============================================================
    async def build_month_dashboard(self, line_id: int, shift: Shift, year: int, month: int) -> DashboardMetrics:
        window = self.resolver.resolve_month_window(year, month)
        return await self.build_week_dashboard(
            line_id,
            shift,
            self.resolver.local_date(window.start_date),
            self.resolver.local_date(window.end_date),
        )

    async def build_week_dashboard(
        self,
        line_id: int,
        shift: Shift,
        start_date: Union[date, datetime],
        end_date: Union[date, datetime],
    ) -> DashboardMetrics:
        first_day = self.resolver.local_date(start_date)
        last_day = self.resolver.local_date(end_date)
        days = (last_day - first_day).days + 1

        logger.debug("build_week_dashboard: line=%s shift=%s %s..%s (%d days)",
                     line_id, shift.value, first_day, last_day, max(days, 0))

        # results come back in chronological order
        results = await gather_or_cancel(*(
            self.build_day_dashboard(line_id, shift, first_day + timedelta(days=i))
            for i in range(max(days, 0))
        ))
        dashboard_dates = [d for d in results if d is not None]

        totals = reduce(merge_day_into_rollup, dashboard_dates, RollupTotals())
        metrics = round_metrics(compute_metrics(
            target=totals.target,
            actual=totals.actual,
            failure_total=totals.failure_total,
            downtime_total=totals.downtime_total,
            working_minutes=totals.working_minutes,
        ))
        return DashboardMetrics(
            target=totals.target,
            actual=totals.actual,
            failure_defect=totals.failure_defect,
            failure_total=totals.failure_total,
            downtime_defect=totals.downtime_defect,
            downtime_total=totals.downtime_total,
            working_time=WorkingTime(minutes=totals.working_minutes, label=shift.value),
            availability=metrics.availability,
            performance=metrics.performance,
            quality=metrics.quality,
            oee=metrics.oee,
        )

    # ============================================================
    # Single day
    # ============================================================
    async def build_day_dashboard(
        self,
        line_id: int,
        shift: Shift,
        target_date: Union[date, datetime],
    ) -> Optional[DateDashboard]:
        day = self.resolver.resolve_day_window(target_date)
        plans = await self.repository.find_plans(line_id, day)
        target_plan = next((p for p in plans if p.shift == shift), None)
        if target_plan is None:
            logger.info("build_day_dashboard: no %s plan for line %s on %s",
                        shift.value, line_id, day.start_date.date())
            return None

        time_shift = self.resolver.resolve_shift_window(shift, target_plan.working_time_type, day.start_date)
        bottleneck = await self.find_bottleneck_station(line_id)

        base = await self.mapping_dashboard(
            line_id,
            time_shift,
            shift,
            target_window=day,
            working_time_type=target_plan.working_time_type,
            scope_by_shift=True,
        )
        plan = live_plan(self.clock(), time_shift, bottleneck.cycle_time_seconds, base.target)

        return DateDashboard(
            **base.model_dump(),
            plan=plan,
            bottleneck_station_id=bottleneck.station_id,
            group=target_plan.group,
            start_at=time_shift.start_date,
            end_at=time_shift.end_date,
        )

    async def find_bottleneck_station(self, line_id: int) -> Station:
        stations = await self.repository.find_stations(line_id)
        if not stations:
            raise NotFoundError("bottleneck station")
        return max(stations, key=lambda s: s.cycle_time_seconds)

    async def mapping_working_time(
        self,
        line_id: int,
        window: DateRange,
        shift: Optional[Shift] = None,
        working_time_type: Optional[WorkingTimeType] = None,
    ) -> WorkingTime:
        plans = await self.repository.find_plans(line_id, window, shift)
        if working_time_type is not None:
            plans = [p for p in plans if p.working_time_type == working_time_type]
        mins = sum(p.working_time_duration_minutes for p in plans)

        label = ALL_DAY
        if shift and working_time_type:
            label = f"{WORKING_TIME_LABELS[working_time_type]} {shift.value}"
        return WorkingTime(
            minutes=mins,
            label=label,
            start_date=window.start_date,
            end_date=window.end_date,
        )

    async def mapping_dashboard(
        self,
        line_id: int,
        window: DateRange,
        shift: Optional[Shift] = None,
        target_window: Optional[DateRange] = None,
        working_time_type: Optional[WorkingTimeType] = None,
        scope_by_shift: bool = False,
    ) -> DashboardMetrics:
        """
        Base metrics for one window.

        Defects and goods are counted inside `window`; plan target and
        working minutes come from plans inside `target_window` (defaults to `window`).
        """
        plan_window = target_window or window

        failures, downtimes, plans, goods = await gather_or_cancel(
            self.repository.find_failure_events(line_id, window),
            self.repository.find_downtime_events(line_id, window),
            self.repository.find_plans(line_id, plan_window, shift if scope_by_shift else None),
            self.repository.find_products(line_id, window, True),
        )
        failure_defect, failure_total = aggregate_failures(failures)
        downtime_defect, downtime_total = aggregate_downtime(downtimes)
        target = sum(p.target for p in plans)
        actual = len(goods)
        working_time = await self.mapping_working_time(line_id, plan_window, shift, working_time_type)

        metrics = round_metrics(compute_metrics(
            target=target,
            actual=actual,
            failure_total=failure_total,
            downtime_total=downtime_total,
            working_minutes=working_time.minutes,
        ))
        return DashboardMetrics(
            target=target,
            actual=actual,
            failure_defect=failure_defect,
            failure_total=failure_total,
            downtime_defect=downtime_defect,
            downtime_total=downtime_total,
            working_time=working_time,
            availability=metrics.availability,
            performance=metrics.performance,
            quality=metrics.quality,
            oee=metrics.oee,
        )
