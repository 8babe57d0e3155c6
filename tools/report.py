from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Optional, Sequence, Tuple

from db.base import DEFAULT_LOG_WINDOW, SymptomStore
from tools.health_analyzer import analyze_health_risks
from tools.health_schema import (
    DEFAULT_CYCLE_LENGTH,
    CycleData,
    FlowLevel,
    HealthReport,
    HealthRisk,
    RiskSummary,
    SymptomLog,
    SymptomSummary,
)
from tools.render_report import render_report

logger = logging.getLogger(__name__)

COMMON_MOOD_COUNT = 3
REPORT_SPAN_DAYS = 30


class NoLogsToReportError(ValueError):
    """Raised when a report is requested for a user with no logs."""

    def __init__(self, user_id: str):
        super().__init__(
            "No symptom logs found. Please log some symptoms first to generate a report."
        )
        self.user_id = user_id


def round_one_decimal(value: float) -> float:
    """Round to one decimal place, halves away from zero."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def aggregate_report(
    logs: Sequence[SymptomLog],
    risk: HealthRisk,
    start_date: date,
    end_date: date,
    generated_at: datetime,
    user_id: Optional[str] = None,
    average_cycle_length: int = DEFAULT_CYCLE_LENGTH,
) -> HealthReport:
    """
    Summarise a non-empty log window into a ``HealthReport``.

    The caller checks that ``logs`` is non-empty. ``risk`` level and flags are
    embedded as given. ``average_cycle_length`` is taken as supplied; it is
    not derived from the logs. The returned report has no id.
    """
    total = len(logs)
    moods = Counter(log.mood for log in logs)

    return HealthReport(
        user_id=user_id,
        generated_at=generated_at,
        start_date=start_date,
        end_date=end_date,
        cycle_data=CycleData(
            average_length=average_cycle_length,
            period_days=sum(1 for log in logs if log.flow_level is not FlowLevel.none),
        ),
        symptoms=SymptomSummary(
            average_pain=round_one_decimal(sum(log.pain_scale for log in logs) / total),
            common_moods=[mood for mood, _ in moods.most_common(COMMON_MOOD_COUNT)],
            average_energy=round_one_decimal(sum(log.energy_level for log in logs) / total),
            average_sleep=round_one_decimal(sum(log.sleep_hours for log in logs) / total),
        ),
        risks=RiskSummary(level=risk.level, flags=list(risk.flags)),
    )


def generate_report(
    store: SymptomStore,
    user_id: str,
    generated_at: datetime,
    window: int = DEFAULT_LOG_WINDOW,
    span_days: int = REPORT_SPAN_DAYS,
    average_cycle_length: int = DEFAULT_CYCLE_LENGTH,
    renderer: Callable[[HealthReport, Sequence[SymptomLog]], str] = render_report,
) -> Tuple[HealthReport, str]:
    """
    Build, persist and render a report from the user's most recent logs.

    Returns:
        (HealthReport, str): the stored report (with id) and the rendered document.

    Raises:
        NoLogsToReportError: if the user has no logs.
    """
    logs = store.list_recent_logs(user_id, limit=window)
    if not logs:
        raise NoLogsToReportError(user_id)

    end_date = generated_at.date()
    report = aggregate_report(
        logs,
        analyze_health_risks(logs),
        start_date=end_date - timedelta(days=span_days),
        end_date=end_date,
        generated_at=generated_at,
        user_id=user_id,
        average_cycle_length=average_cycle_length,
    )
    document = renderer(report, logs)
    saved = store.add_report(report)
    logger.info(
        "Generated report %s for user %s from %s logs (risk=%s)",
        saved.id, user_id, len(logs), saved.risks.level.value,
    )
    return saved, document
