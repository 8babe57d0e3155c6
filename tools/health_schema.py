from __future__ import annotations

from datetime import date as Date, datetime
from enum import Enum
from typing import List, Optional
from uuid import uuid4
from zoneinfo import ZoneInfo

from dateutil.parser import parse
from pydantic import BaseModel, Field, field_validator

__all__ = [
    "FlowLevel",
    "Mood",
    "RiskLevel",
    "SymptomLog",
    "SymptomLogUpdate",
    "CycleProfile",
    "HealthRisk",
    "CyclePrediction",
    "CycleData",
    "SymptomSummary",
    "RiskSummary",
    "HealthReport",
    "to_calendar_date",
    "DEFAULT_CYCLE_LENGTH",
    "new_id",
]

DEFAULT_CYCLE_LENGTH = 28

_DEF_TZ = ZoneInfo("UTC")


def _utcnow() -> datetime:
    return datetime.now(_DEF_TZ)


def _to_utc(v: datetime | str | None) -> datetime | None:
    """Parse strings and make datetimes timezone-aware UTC (naive means UTC)."""
    if v is None:
        return v
    if isinstance(v, str):
        v = parse(v)
    if v.tzinfo is None:
        v = v.replace(tzinfo=_DEF_TZ)
    return v.astimezone(_DEF_TZ)


class FlowLevel(str, Enum):
    """Menstrual flow intensity, ordered none < light < medium < heavy."""

    none = "none"
    light = "light"
    medium = "medium"
    heavy = "heavy"

    @classmethod
    def _missing_(cls, value: object) -> "FlowLevel":
        if not isinstance(value, str):
            raise ValueError(f"Unknown flow level: {value}")
        val = value.strip().lower()
        synonyms = {
            "no flow": "none",
            "spotting": "light",
            "moderate": "medium",
            "very heavy": "heavy",
        }
        if val in synonyms:
            return cls(synonyms[val])
        if val in cls._value2member_map_:
            return cls(val)
        return super()._missing_(val)


class Mood(str, Enum):
    """Mood vocabulary offered by the logging form."""

    happy = "happy"
    calm = "calm"
    neutral = "neutral"
    anxious = "anxious"
    sad = "sad"
    irritable = "irritable"
    energetic = "energetic"

    @classmethod
    def _missing_(cls, value: object) -> "Mood":
        if not isinstance(value, str):
            raise ValueError(f"Unknown mood: {value}")
        val = value.strip().lower()
        synonyms = {
            "ok": "neutral",
            "fine": "neutral",
            "relaxed": "calm",
            "worried": "anxious",
            "nervous": "anxious",
            "down": "sad",
            "low": "sad",
            "angry": "irritable",
            "cranky": "irritable",
        }
        if val in synonyms:
            return cls(synonyms[val])
        if val in cls._value2member_map_:
            return cls(val)
        return super()._missing_(val)


class RiskLevel(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


def to_calendar_date(v: Date | datetime | str) -> Date:
    """Reduce a date, datetime or parseable string to a calendar date."""
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, Date):
        return v
    if isinstance(v, str):
        return parse(v).date()
    raise ValueError(f"Invalid date: {v!r}")


class SymptomLog(BaseModel):
    """One day's entry from the symptom logging form."""

    id: Optional[str] = None
    user_id: str
    date: Date
    flow_level: FlowLevel = FlowLevel.none
    pain_scale: int = Field(ge=0, le=10)
    mood: Mood
    energy_level: int = Field(ge=1, le=10)
    sleep_hours: float = Field(ge=0, le=24)
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: Optional[datetime] = None

    @field_validator("date", mode="before")
    def _parse_date(cls, v: Date | datetime | str) -> Date:
        return to_calendar_date(v)

    @field_validator("created_at", "updated_at", mode="before")
    def _parse_timestamps(cls, v: datetime | str | None) -> datetime | None:
        return _to_utc(v)


class SymptomLogUpdate(BaseModel):
    """Partial edit of a ``SymptomLog``; unset fields are left unchanged."""

    date: Optional[Date] = None
    flow_level: Optional[FlowLevel] = None
    pain_scale: Optional[int] = Field(default=None, ge=0, le=10)
    mood: Optional[Mood] = None
    energy_level: Optional[int] = Field(default=None, ge=1, le=10)
    sleep_hours: Optional[float] = Field(default=None, ge=0, le=24)
    notes: Optional[str] = None

    # Omitted means unchanged; only notes can be cleared.
    @field_validator("flow_level", "pain_scale", "mood", "energy_level", "sleep_hours", mode="before")
    def _reject_null(cls, v: object, info) -> object:
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator("date", mode="before")
    def _parse_date(cls, v: Date | datetime | str | None) -> Date:
        if v is None:
            raise ValueError("date cannot be null")
        return to_calendar_date(v)


class CycleProfile(BaseModel):
    """The profile fields the cycle predictor reads."""

    user_id: str
    last_period_start: Optional[Date] = None
    average_cycle_length: int = Field(default=DEFAULT_CYCLE_LENGTH, ge=1)

    @field_validator("last_period_start", mode="before")
    def _parse_date(cls, v: Date | datetime | str | None) -> Date | None:
        if v is None:
            return v
        return to_calendar_date(v)


class HealthRisk(BaseModel):
    level: RiskLevel
    flags: List[str]
    explanation: str
    disclaimer: str


class CyclePrediction(BaseModel):
    current_day: int
    days_until: int
    next_period: Date


class CycleData(BaseModel):
    average_length: int
    period_days: int


class SymptomSummary(BaseModel):
    average_pain: float
    common_moods: List[Mood]
    average_energy: float
    average_sleep: float


class RiskSummary(BaseModel):
    level: RiskLevel
    flags: List[str]


class HealthReport(BaseModel):
    """Snapshot produced by one "generate report" action. Never updated."""

    id: Optional[str] = None
    user_id: Optional[str] = None
    generated_at: datetime
    start_date: Date
    end_date: Date
    cycle_data: CycleData
    symptoms: SymptomSummary
    risks: RiskSummary

    @field_validator("generated_at", mode="before")
    def _parse_generated_at(cls, v: datetime | str) -> datetime:
        return _to_utc(v)

    @field_validator("start_date", "end_date", mode="before")
    def _parse_dates(cls, v: Date | datetime | str) -> Date:
        return to_calendar_date(v)


def new_id() -> str:
    return str(uuid4())
