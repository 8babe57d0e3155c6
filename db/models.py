"""
SQLAlchemy ↔️ Pydantic mapping for symptom logs, reports and cycle profiles.
"""
from uuid import uuid4

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.sqlite import JSON

from db.engine import Base
from tools.health_schema import DEFAULT_CYCLE_LENGTH, FlowLevel, Mood


class SymptomLogORM(Base):
    __tablename__ = "symptom_logs"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String, nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    flow_level = Column(Enum(FlowLevel), nullable=False)
    pain_scale = Column(Integer, nullable=False)
    mood = Column(Enum(Mood), nullable=False)
    energy_level = Column(Integer, nullable=False)
    sleep_hours = Column(Float, nullable=False)
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True))


class HealthReportORM(Base):
    __tablename__ = "health_reports"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String, index=True)
    generated_at = Column(DateTime(timezone=True), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    cycle_data = Column(JSON, nullable=False)
    symptoms = Column(JSON, nullable=False)
    risks = Column(JSON, nullable=False)


class CycleProfileORM(Base):
    __tablename__ = "cycle_profiles"

    user_id = Column(String, primary_key=True)
    last_period_start = Column(Date)
    average_cycle_length = Column(Integer, nullable=False, default=DEFAULT_CYCLE_LENGTH)
