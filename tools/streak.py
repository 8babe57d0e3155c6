from __future__ import annotations

from datetime import date, timedelta
from typing import Sequence

from tools.health_schema import SymptomLog

STREAK_WINDOW_DAYS = 60


def calculate_streak(
    logs: Sequence[SymptomLog],
    today: date,
    window: int = STREAK_WINDOW_DAYS,
) -> int:
    """
    Count consecutive logged calendar days ending at ``today``.

    Scans backward at most ``window`` days. No entry for ``today`` means a
    streak of 0; the first missing earlier day ends the count.
    """
    logged_days = {log.date for log in logs}

    streak = 0
    for offset in range(window):
        if today - timedelta(days=offset) not in logged_days:
            break
        streak += 1
    return streak
