"""
Rule-based health-pattern flags and the calendar cycle model.

Both functions are pure: they take a materialised log window (or profile
fields) and return a fresh result. Windowing is the caller's job.
"""
from __future__ import annotations

from collections import Counter
from datetime import date, timedelta
from typing import Optional, Sequence

from tools.health_schema import (
    DEFAULT_CYCLE_LENGTH,
    CyclePrediction,
    FlowLevel,
    HealthRisk,
    Mood,
    RiskLevel,
    SymptomLog,
)

__all__ = [
    "analyze_health_risks",
    "predict_next_period",
    "DISCLAIMER",
    "NOT_ENOUGH_DATA",
]

NOT_ENOUGH_DATA = (
    "Not enough data to analyze. Keep logging your symptoms for personalized insights."
)
DISCLAIMER = (
    "This is not a medical diagnosis. The analysis is based on general health patterns "
    "and should not replace professional medical advice. Always consult a qualified "
    "healthcare provider for medical concerns."
)

ANEMIA_FLAG = "Possible anemia indicator: Heavy bleeding combined with low energy levels"
HIGH_PAIN_FLAG = "High pain levels detected: Average pain score is above 7/10"
SLEEP_FLAG = "Sleep deprivation: Average sleep is below recommended levels"
MOOD_FLAG = "Mood patterns: More than half of logged days show sad or anxious mood"
PROLONGED_BLEEDING_FLAG = (
    "Prolonged heavy bleeding: Consider discussing with a healthcare provider"
)

HEALTHY_PATTERN = (
    "Your recent logs show a healthy pattern. Keep up the great work with tracking your health!"
)
MINOR_PATTERNS = "Minor patterns detected. Continue logging to help identify trends."


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def _explain(level: RiskLevel, flags: list[str]) -> str:
    if not flags:
        return HEALTHY_PATTERN
    if level is RiskLevel.high:
        return (
            f"We've identified {len(flags)} potential concern(s) that may need attention. "
            "While these are not diagnoses, we recommend discussing these patterns with "
            "your healthcare provider soon."
        )
    if level is RiskLevel.medium:
        return (
            f"We've noticed {len(flags)} pattern(s) worth monitoring. These aren't "
            "necessarily concerning but tracking them over time can provide valuable "
            "insights for you and your doctor."
        )
    return MINOR_PATTERNS


def analyze_health_risks(logs: Sequence[SymptomLog]) -> HealthRisk:
    """
    Evaluate the heuristic rules over a log window.

    Rules run in a fixed order and append to ``flags`` in that order:
    anemia indicator, high pain, sleep deprivation, mood pattern, prolonged
    heavy bleeding. Only the last one can set ``high``; the others raise a
    ``low`` level to ``medium`` and never lower it.

    Parameters:
        logs: Any finite sequence of entries, in any order. May be empty.

    Returns:
        HealthRisk: level, ordered flags, an explanation and the disclaimer.
    """
    if not logs:
        return HealthRisk(
            level=RiskLevel.low,
            flags=[],
            explanation=NOT_ENOUGH_DATA,
            disclaimer=DISCLAIMER,
        )

    total = len(logs)
    avg_pain = _mean([log.pain_scale for log in logs])
    avg_energy = _mean([log.energy_level for log in logs])
    avg_sleep = _mean([log.sleep_hours for log in logs])
    heavy_days = sum(1 for log in logs if log.flow_level is FlowLevel.heavy)
    heavy_flow_percentage = heavy_days / total * 100
    moods = Counter(log.mood for log in logs)

    flags: list[str] = []
    level = RiskLevel.low

    if heavy_flow_percentage > 30 and avg_energy < 4:
        flags.append(ANEMIA_FLAG)
        level = RiskLevel.medium

    if avg_pain >= 7:
        flags.append(HIGH_PAIN_FLAG)
        if level is not RiskLevel.high:
            level = RiskLevel.medium

    if avg_sleep < 5:
        flags.append(SLEEP_FLAG)
        if level is RiskLevel.low:
            level = RiskLevel.medium

    if (moods[Mood.sad] + moods[Mood.anxious]) / total > 0.5:
        flags.append(MOOD_FLAG)
        if level is RiskLevel.low:
            level = RiskLevel.medium

    if heavy_flow_percentage > 50:
        flags.append(PROLONGED_BLEEDING_FLAG)
        level = RiskLevel.high

    return HealthRisk(
        level=level,
        flags=flags,
        explanation=_explain(level, flags),
        disclaimer=DISCLAIMER,
    )


def predict_next_period(
    last_period_start: Optional[date],
    average_cycle_length: int = DEFAULT_CYCLE_LENGTH,
    today: Optional[date] = None,
) -> Optional[CyclePrediction]:
    """
    Project the current cycle day and the next period start.

    ``average_cycle_length`` must be >= 1; ``CycleProfile`` enforces that.
    Day arithmetic uses floor division and floor modulo, so a
    ``last_period_start`` in the future still yields a ``current_day`` in
    ``[1, average_cycle_length]``.

    Returns:
        CyclePrediction | None: ``None`` when ``last_period_start`` is absent.
    """
    if last_period_start is None:
        return None
    if today is None:
        today = date.today()

    days_since = (today - last_period_start).days
    current_day = days_since % average_cycle_length + 1
    cycles_since = days_since // average_cycle_length
    next_period = last_period_start + timedelta(
        days=(cycles_since + 1) * average_cycle_length
    )
    days_until = max(0, (next_period - today).days)

    return CyclePrediction(
        current_day=current_day,
        days_until=days_until,
        next_period=next_period,
    )
