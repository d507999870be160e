# oee_dashboard/db/models.py
from sqlalchemy import (
    Boolean,
    Column,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    TIMESTAMP,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

from oee_dashboard.core.records import Shift, WorkingTimeType

Base = declarative_base()


class Line(Base):
    __tablename__ = "lines"

    line_id = Column(Integer, primary_key=True, autoincrement=True)
    line_name = Column(String(100), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())


class Station(Base):
    __tablename__ = "stations"

    station_id = Column(String(50), primary_key=True)
    line_id = Column(Integer, ForeignKey("lines.line_id"), nullable=False, index=True)
    station_name = Column(String(200), nullable=False)
    cycle_time = Column(Float, nullable=False)  # seconds


class WorkingTime(Base):
    __tablename__ = "working_times"

    working_time_id = Column(Integer, primary_key=True, autoincrement=True)
    line_id = Column(Integer, ForeignKey("lines.line_id"), nullable=False, index=True)
    shift = Column(Enum(Shift), nullable=False)
    type = Column(Enum(WorkingTimeType), nullable=False)
    duration = Column(Integer, nullable=False)  # minutes


class ProductionPlan(Base):
    __tablename__ = "production_plans"

    production_plan_id = Column(Integer, primary_key=True, autoincrement=True)
    line_id = Column(Integer, ForeignKey("lines.line_id"), nullable=False, index=True)
    working_time_id = Column(Integer, ForeignKey("working_times.working_time_id"), nullable=False)
    target = Column(Integer, nullable=False)
    group = Column(String(20), nullable=False)
    timestamp = Column(TIMESTAMP(timezone=True), nullable=False, index=True)

    working_time = relationship(WorkingTime)


class Model(Base):
    __tablename__ = "models"

    model_id = Column(String(50), primary_key=True)
    line_id = Column(Integer, ForeignKey("lines.line_id"), nullable=False, index=True)
    model_name = Column(String(200))


class Product(Base):
    __tablename__ = "products"

    product_id = Column(Integer, primary_key=True, autoincrement=True)
    serial_number = Column(String(100), unique=True, nullable=False)
    model_id = Column(String(50), ForeignKey("models.model_id"), nullable=False, index=True)
    is_goods = Column(Boolean, nullable=False, default=False)
    timestamp = Column(TIMESTAMP(timezone=True), nullable=False, index=True)


class FailureDetail(Base):
    __tablename__ = "failure_details"

    failure_detail_id = Column(Integer, primary_key=True, autoincrement=True)
    line_id = Column(Integer, ForeignKey("lines.line_id"), nullable=False, index=True)
    type = Column(String(100), nullable=False)
    details = Column(Text, nullable=False)


class Failure(Base):
    __tablename__ = "failures"

    failure_id = Column(Integer, primary_key=True, autoincrement=True)
    failure_detail_id = Column(Integer, ForeignKey("failure_details.failure_detail_id"), nullable=False)
    station_id = Column(String(50), ForeignKey("stations.station_id"), nullable=False)
    position = Column(String(100))


class ProductFailure(Base):
    __tablename__ = "product_failures"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.product_id"), nullable=False)
    failure_id = Column(Integer, ForeignKey("failures.failure_id"), nullable=False)
    timestamp = Column(TIMESTAMP(timezone=True), nullable=False, index=True)


class AvailabilityLoss(Base):
    __tablename__ = "availability_losses"

    availability_loss_id = Column(Integer, primary_key=True, autoincrement=True)
    details = Column(Text, nullable=False)


class Downtime(Base):
    __tablename__ = "downtimes"

    downtime_id = Column(Integer, primary_key=True, autoincrement=True)
    station_id = Column(String(50), ForeignKey("stations.station_id"), nullable=False, index=True)
    availability_loss_id = Column(
        Integer, ForeignKey("availability_losses.availability_loss_id"), nullable=False
    )
    duration = Column(Integer, nullable=False)  # minutes
    timestamp = Column(TIMESTAMP(timezone=True), nullable=False, index=True)
