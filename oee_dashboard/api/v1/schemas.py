# oee_dashboard/api/v1/schemas.py
from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ==== Defects ====
class FailureDefect(CamelModel):
    failure_detail_id: int
    station_name: str
    defect_type: str
    details_text: str
    sum: int


class DowntimeDefect(CamelModel):
    availability_loss_id: int
    station_id: str
    details_text: str
    downtime_minutes: int


# ==== Dashboard ====
class WorkingTime(CamelModel):
    minutes: int = Field(0, alias="min")
    label: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class DashboardMetrics(CamelModel):
    target: int
    actual: int
    failure_defect: List[FailureDefect]
    failure_total: int
    downtime_defect: List[DowntimeDefect]
    downtime_total: int
    working_time: WorkingTime
    availability: float   # 0-100
    performance: float    # 0-100
    quality: float        # 0-100
    oee: float            # 0-100


class DateDashboard(DashboardMetrics):
    plan: int                   # live projected output
    bottleneck_station_id: str
    group: str
    start_at: datetime
    end_at: datetime
