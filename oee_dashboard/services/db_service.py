# oee_dashboard/services/db_service.py
from dotenv import load_dotenv
load_dotenv()

import asyncio
import logging
import os
from functools import lru_cache
from typing import Any, Callable, List, Optional, Protocol

from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from oee_dashboard.core.config import get_settings
from oee_dashboard.core.records import (
    DateRange,
    DowntimeEvent,
    FailureEvent,
    ProductionPlan,
    ProductRecord,
    Shift,
    Station,
)
from oee_dashboard.db import models

logger = logging.getLogger("db_service")


class DashboardRepository(Protocol):
    """Read-only queries the dashboard core needs. Windows are inclusive."""

    async def find_plans(self, line_id: int, window: DateRange, shift: Optional[Shift] = None) -> List[ProductionPlan]: ...

    async def find_stations(self, line_id: int) -> List[Station]: ...

    async def find_products(self, line_id: int, window: DateRange, is_goods: bool) -> List[ProductRecord]: ...

    async def find_failure_events(self, line_id: int, window: DateRange) -> List[FailureEvent]: ...

    async def find_downtime_events(self, line_id: int, window: DateRange) -> List[DowntimeEvent]: ...


def _in_window(ts, window: DateRange) -> bool:
    return window.start_date <= ts <= window.end_date


# ============================================================
# In-memory store (no DB configured, tests)
# ============================================================
class InMemoryDashboardRepository:
    def __init__(self):
        self.plans: List[ProductionPlan] = []
        self.stations: List[Station] = []
        self.products: List[ProductRecord] = []
        # failures / downtimes are stored with the line they belong to
        self.failures: List[tuple] = []
        self.downtimes: List[tuple] = []

    def add_plan(self, plan: ProductionPlan) -> None:
        self.plans.append(plan)

    def add_station(self, station: Station) -> None:
        self.stations.append(station)

    def add_product(self, product: ProductRecord) -> None:
        self.products.append(product)

    def add_failure(self, line_id: int, event: FailureEvent) -> None:
        self.failures.append((line_id, event))

    def add_downtime(self, line_id: int, event: DowntimeEvent) -> None:
        self.downtimes.append((line_id, event))

    async def find_plans(self, line_id, window, shift=None):
        return [
            p for p in self.plans
            if p.line_id == line_id
            and _in_window(p.valid_date, window)
            and (shift is None or p.shift == shift)
        ]

    async def find_stations(self, line_id):
        return [s for s in self.stations if s.line_id == line_id]

    async def find_products(self, line_id, window, is_goods):
        return [
            p for p in self.products
            if p.line_id == line_id and p.is_goods == is_goods and _in_window(p.timestamp, window)
        ]

    async def find_failure_events(self, line_id, window):
        return [e for lid, e in self.failures if lid == line_id and _in_window(e.timestamp, window)]

    async def find_downtime_events(self, line_id, window):
        return [e for lid, e in self.downtimes if lid == line_id and _in_window(e.timestamp, window)]


# ============================================================
# SQLAlchemy-backed repository
# ============================================================
class SqlDashboardRepository:
    """
    Runs SQLAlchemy queries in worker threads so concurrent day builds
    do not block the event loop. Each query uses its own pooled connection.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def _fetch(self, stmt, mapper: Callable[[Any], Any]) -> List[Any]:
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).fetchall()
        except SQLAlchemyError:
            logger.exception("db_service: query failed")
            raise
        return [mapper(r._mapping) for r in rows]

    async def _run(self, stmt, mapper):
        return await asyncio.to_thread(self._fetch, stmt, mapper)

    async def find_plans(self, line_id, window, shift=None):
        plan, wt = models.ProductionPlan, models.WorkingTime
        stmt = (
            select(
                plan.line_id,
                plan.target,
                plan.group,
                plan.timestamp,
                wt.shift,
                wt.type,
                wt.duration,
            )
            .join(wt, plan.working_time_id == wt.working_time_id)
            .where(plan.line_id == line_id)
            .where(plan.timestamp >= window.start_date, plan.timestamp <= window.end_date)
            .order_by(plan.timestamp, plan.production_plan_id)
        )
        if shift is not None:
            stmt = stmt.where(wt.shift == shift)
        return await self._run(stmt, lambda m: ProductionPlan(
            line_id=m["line_id"],
            target=m["target"],
            group=m["group"],
            shift=m["shift"],
            working_time_type=m["type"],
            working_time_duration_minutes=m["duration"],
            valid_date=m["timestamp"],
        ))

    async def find_stations(self, line_id):
        st = models.Station
        stmt = (
            select(st.station_id, st.line_id, st.station_name, st.cycle_time)
            .where(st.line_id == line_id)
            .order_by(st.station_id)
        )
        return await self._run(stmt, lambda m: Station(
            station_id=m["station_id"],
            line_id=m["line_id"],
            cycle_time_seconds=m["cycle_time"],
            station_name=m["station_name"],
        ))

    async def find_products(self, line_id, window, is_goods):
        product, model = models.Product, models.Model
        stmt = (
            select(model.line_id, product.timestamp, product.is_goods)
            .join(model, product.model_id == model.model_id)
            .where(model.line_id == line_id)
            .where(product.is_goods == is_goods)
            .where(product.timestamp >= window.start_date, product.timestamp <= window.end_date)
        )
        return await self._run(stmt, lambda m: ProductRecord(
            line_id=m["line_id"],
            timestamp=m["timestamp"],
            is_goods=m["is_goods"],
        ))

    async def find_failure_events(self, line_id, window):
        pf, failure = models.ProductFailure, models.Failure
        detail, station = models.FailureDetail, models.Station
        stmt = (
            select(
                pf.timestamp,
                failure.failure_detail_id,
                station.station_name,
                detail.type,
                detail.details,
            )
            .join(failure, pf.failure_id == failure.failure_id)
            .join(detail, failure.failure_detail_id == detail.failure_detail_id)
            .join(station, failure.station_id == station.station_id)
            .where(detail.line_id == line_id)
            .where(pf.timestamp >= window.start_date, pf.timestamp <= window.end_date)
            .order_by(pf.timestamp, pf.id)
        )
        return await self._run(stmt, lambda m: FailureEvent(
            timestamp=m["timestamp"],
            failure_detail_id=m["failure_detail_id"],
            station_name=m["station_name"],
            defect_type=m["type"],
            details_text=m["details"],
        ))

    async def find_downtime_events(self, line_id, window):
        dt, loss, station = models.Downtime, models.AvailabilityLoss, models.Station
        stmt = (
            select(
                dt.timestamp,
                dt.duration,
                dt.availability_loss_id,
                dt.station_id,
                loss.details,
            )
            .join(loss, dt.availability_loss_id == loss.availability_loss_id)
            .join(station, dt.station_id == station.station_id)
            .where(station.line_id == line_id)
            .where(dt.timestamp >= window.start_date, dt.timestamp <= window.end_date)
            .order_by(dt.timestamp, dt.downtime_id)
        )
        return await self._run(stmt, lambda m: DowntimeEvent(
            timestamp=m["timestamp"],
            duration_minutes=m["duration"],
            availability_loss_id=m["availability_loss_id"],
            station_id=m["station_id"],
            details_text=m["details"],
        ))


# ============================================================
# Engine / repository selection
# ============================================================
def _build_database_url_from_settings(settings) -> Optional[str]:
    """
    Build a SQLAlchemy URL from individual DB settings.
    Returns None if not enough information.
    """
    host = settings.DB_HOST
    port = settings.DB_PORT
    dbname = settings.DB_NAME
    user = settings.DB_USER
    pwd = settings.DB_PASS

    if not (host and dbname and user):
        return None

    port_part = f":{port}" if port else ""
    # include password only if provided (non-empty)
    auth_part = f"{user}:{pwd}" if pwd else f"{user}"
    return f"postgresql+psycopg2://{auth_part}@{host}{port_part}/{dbname}"


def resolve_database_url(settings=None) -> Optional[str]:
    settings = settings or get_settings()
    # Prefer a full DATABASE_URL (if provided and looks like a URL)
    env_db_url = settings.DATABASE_URL or os.getenv("DATABASE_URL")
    if env_db_url and "://" in env_db_url:
        return env_db_url
    return _build_database_url_from_settings(settings)


@lru_cache()
def get_engine() -> Engine:
    url = resolve_database_url()
    if url is None:
        raise RuntimeError("database URL is not configured")
    logger.debug("db_service: final DATABASE_URL = %r", url)
    return create_engine(url, future=True, pool_pre_ping=True)


_memory_repository = InMemoryDashboardRepository()


def get_memory_store() -> InMemoryDashboardRepository:
    return _memory_repository


def get_repository() -> DashboardRepository:
    settings = get_settings()
    if settings.USE_MEMORY_STORE or resolve_database_url(settings) is None:
        logger.debug("db_service: using in-memory store.")
        return _memory_repository
    return SqlDashboardRepository(get_engine())
