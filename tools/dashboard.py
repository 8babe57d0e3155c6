from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel

from db.base import DEFAULT_LOG_WINDOW, SymptomStore
from tools.health_analyzer import analyze_health_risks, predict_next_period
from tools.health_schema import CyclePrediction, HealthRisk, SymptomLog
from tools.streak import STREAK_WINDOW_DAYS, calculate_streak


class DashboardSnapshot(BaseModel):
    risk: HealthRisk
    cycle: Optional[CyclePrediction] = None
    streak: int
    latest_log: Optional[SymptomLog] = None


def cycle_for_user(store: SymptomStore, user_id: str, today: date) -> Optional[CyclePrediction]:
    """Predict from the stored profile; None when there is no period start on file."""
    profile = store.get_profile(user_id)
    if profile is None:
        return None
    return predict_next_period(profile.last_period_start, profile.average_cycle_length, today)


def streak_for_user(store: SymptomStore, user_id: str, today: date) -> int:
    logs = store.list_recent_logs(user_id, limit=STREAK_WINDOW_DAYS)
    return calculate_streak(logs, today)


def dashboard_snapshot(store: SymptomStore, user_id: str, today: date) -> DashboardSnapshot:
    logs = store.list_recent_logs(user_id, limit=DEFAULT_LOG_WINDOW)
    return DashboardSnapshot(
        risk=analyze_health_risks(logs),
        cycle=cycle_for_user(store, user_id, today),
        streak=streak_for_user(store, user_id, today),
        latest_log=logs[0] if logs else None,
    )
