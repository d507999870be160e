# oee_dashboard/core/records.py
import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class Shift(str, enum.Enum):
    DAY = "DAY"
    NIGHT = "NIGHT"


class WorkingTimeType(str, enum.Enum):
    NOT_OVERTIME = "NOT_OVERTIME"
    OVERTIME = "OVERTIME"


@dataclass(frozen=True)
class DateRange:
    """Absolute time window, inclusive on both ends."""
    start_date: datetime
    end_date: datetime


# ============================================================
# Records returned by the data-access layer
# ============================================================
class ProductionPlan(BaseModel):
    line_id: int
    target: int
    group: str
    shift: Shift
    working_time_type: WorkingTimeType
    working_time_duration_minutes: int
    valid_date: datetime


class Station(BaseModel):
    station_id: str
    line_id: int
    cycle_time_seconds: float
    station_name: Optional[str] = None


class FailureEvent(BaseModel):
    timestamp: datetime
    failure_detail_id: int
    station_name: str
    defect_type: str
    details_text: str


class DowntimeEvent(BaseModel):
    timestamp: datetime
    duration_minutes: int
    availability_loss_id: int
    station_id: str
    details_text: str


class ProductRecord(BaseModel):
    line_id: int
    timestamp: datetime
    is_goods: bool
