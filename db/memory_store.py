"""
In-process ``SymptomStore`` for tests and the demo mode.

State lives on the instance; two stores never share data.
"""
from __future__ import annotations

import logging
import random
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional

from db.base import DEFAULT_LOG_WINDOW, SymptomStore, apply_update
from tools.health_schema import (
    CycleProfile,
    FlowLevel,
    HealthReport,
    Mood,
    SymptomLog,
    SymptomLogUpdate,
    new_id,
)

logger = logging.getLogger(__name__)

DEMO_DAYS = 14
_DEMO_MOODS = [Mood.happy, Mood.calm, Mood.anxious, Mood.irritable, Mood.sad, Mood.energetic]
_DEMO_FLOWS = [FlowLevel.none, FlowLevel.light, FlowLevel.medium, FlowLevel.heavy]


def _newest_first(logs: List[SymptomLog]) -> List[SymptomLog]:
    return sorted(logs, key=lambda log: (log.date, log.created_at), reverse=True)


class InMemoryStore(SymptomStore):
    def __init__(self) -> None:
        self._logs: Dict[str, SymptomLog] = {}
        self._reports: Dict[str, HealthReport] = {}
        self._profiles: Dict[str, CycleProfile] = {}

    def add_log(self, log: SymptomLog) -> SymptomLog:
        saved = log.model_copy(update={"id": log.id or new_id()})
        self._logs[saved.id] = saved
        return saved

    def get_log(self, log_id: str) -> Optional[SymptomLog]:
        return self._logs.get(log_id)

    def update_log(self, log_id: str, changes: SymptomLogUpdate) -> Optional[SymptomLog]:
        current = self._logs.get(log_id)
        if current is None:
            return None
        updated = apply_update(current, changes, datetime.now(timezone.utc))
        self._logs[log_id] = updated
        return updated

    def delete_log(self, log_id: str) -> bool:
        return self._logs.pop(log_id, None) is not None

    def list_recent_logs(self, user_id: str, limit: int = DEFAULT_LOG_WINDOW) -> List[SymptomLog]:
        mine = [log for log in self._logs.values() if log.user_id == user_id]
        return _newest_first(mine)[:limit]

    def list_logs_between(self, user_id: str, start: date, end: date) -> List[SymptomLog]:
        mine = [
            log
            for log in self._logs.values()
            if log.user_id == user_id and start <= log.date <= end
        ]
        return _newest_first(mine)

    def add_report(self, report: HealthReport) -> HealthReport:
        saved = report.model_copy(update={"id": report.id or new_id()})
        self._reports[saved.id] = saved
        return saved

    def get_report(self, report_id: str) -> Optional[HealthReport]:
        return self._reports.get(report_id)

    def list_reports(self, user_id: str) -> List[HealthReport]:
        mine = [r for r in self._reports.values() if r.user_id == user_id]
        return sorted(mine, key=lambda r: r.generated_at, reverse=True)

    def get_profile(self, user_id: str) -> Optional[CycleProfile]:
        return self._profiles.get(user_id)

    def save_profile(self, profile: CycleProfile) -> CycleProfile:
        self._profiles[profile.user_id] = profile
        return profile


def generate_demo_logs(user_id: str, today: date, seed: int = 0) -> List[SymptomLog]:
    """Two weeks of plausible entries ending at ``today``; the period falls on cycle days 1-5."""
    rng = random.Random(seed)
    logs: List[SymptomLog] = []
    for i in range(DEMO_DAYS):
        day = today - timedelta(days=i)
        cycle_day = (DEMO_DAYS - i) % 28
        on_period = 1 <= cycle_day <= 5
        logs.append(
            SymptomLog(
                id=f"demo-log-{i}",
                user_id=user_id,
                date=day,
                flow_level=_DEMO_FLOWS[min(cycle_day, 3)] if on_period else FlowLevel.none,
                pain_scale=rng.randint(3, 7) if on_period else rng.randint(0, 2),
                mood=rng.choice(_DEMO_MOODS),
                energy_level=rng.randint(5, 8),
                sleep_hours=rng.randint(6, 8),
                notes="Feeling good today!" if i == 0 else None,
                created_at=datetime.combine(day, datetime.min.time(), tzinfo=timezone.utc),
            )
        )
    return logs


def seed_demo_logs(store: SymptomStore, user_id: str, today: date, seed: int = 0) -> int:
    logs = generate_demo_logs(user_id, today, seed=seed)
    for log in logs:
        store.add_log(log)
    logger.info("Seeded %s demo logs for user %s", len(logs), user_id)
    return len(logs)
