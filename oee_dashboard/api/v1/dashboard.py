import logging
from datetime import date
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, Query

from oee_dashboard.api.v1.schemas import DashboardMetrics, DateDashboard
from oee_dashboard.core.exceptions import ConfigurationError, DashboardError, NotFoundError
from oee_dashboard.core.records import Shift
from oee_dashboard.services.dashboard_service import DashboardService
from oee_dashboard.services.db_service import get_repository
from oee_dashboard.services.time_windows import build_resolver

router = APIRouter(prefix="/dashboard", tags=["dashboard"])
logger = logging.getLogger("dashboard")


@lru_cache()
def get_dashboard_service() -> DashboardService:
    return DashboardService(get_repository(), build_resolver())


def _to_http_error(e: DashboardError) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(404, str(e))
    if isinstance(e, ConfigurationError):
        logger.error("dashboard configuration error: %s", e)
        return HTTPException(500, str(e))
    return HTTPException(400, str(e))


# ============================================================
# GET /dashboard/date
# ============================================================
@router.get("/date", response_model=DateDashboard)
async def dashboard_by_date(
    line_id: int = Query(..., alias="lineId"),
    shift: Shift = Query(...),
    target_date: date = Query(..., alias="targetDate"),
    service: DashboardService = Depends(get_dashboard_service),
):
    try:
        dashboard = await service.build_day_dashboard(line_id, shift, target_date)
    except DashboardError as e:
        raise _to_http_error(e)
    if dashboard is None:
        raise HTTPException(404, f"No {shift.value} production plan for line {line_id} on {target_date}")
    return dashboard


# ============================================================
# GET /dashboard/week
# ============================================================
@router.get("/week", response_model=DashboardMetrics)
async def dashboard_by_week(
    line_id: int = Query(..., alias="lineId"),
    shift: Shift = Query(...),
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    service: DashboardService = Depends(get_dashboard_service),
):
    if end_date < start_date:
        raise HTTPException(400, "endDate must not be before startDate")
    try:
        return await service.build_week_dashboard(line_id, shift, start_date, end_date)
    except DashboardError as e:
        raise _to_http_error(e)


# ============================================================
# GET /dashboard/month
# ============================================================
@router.get("/month", response_model=DashboardMetrics)
async def dashboard_by_month(
    line_id: int = Query(..., alias="lineId"),
    shift: Shift = Query(...),
    year: int = Query(..., ge=1970, le=9999),
    month: int = Query(..., ge=1, le=12),
    service: DashboardService = Depends(get_dashboard_service),
):
    try:
        return await service.build_month_dashboard(line_id, shift, year, month)
    except DashboardError as e:
        raise _to_http_error(e)
