import sys
from datetime import date, timedelta
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import pytest

from tools.health_analyzer import (
    ANEMIA_FLAG,
    DISCLAIMER,
    HEALTHY_PATTERN,
    HIGH_PAIN_FLAG,
    MINOR_PATTERNS,
    MOOD_FLAG,
    NOT_ENOUGH_DATA,
    PROLONGED_BLEEDING_FLAG,
    SLEEP_FLAG,
    _explain,
    analyze_health_risks,
    predict_next_period,
)
from tools.health_schema import CyclePrediction, RiskLevel, SymptomLog

START = date(2025, 1, 1)


def make_log(offset=0, **overrides):
    data = dict(
        user_id="u1",
        date=START + timedelta(days=offset),
        flow_level="none",
        pain_scale=2,
        mood="calm",
        energy_level=7,
        sleep_hours=8,
    )
    data.update(overrides)
    return SymptomLog(**data)


# ---------- risk analyzer ----------------------------------------------

def test_empty_window_not_enough_data():
    risk = analyze_health_risks([])
    assert risk.level is RiskLevel.low
    assert risk.flags == []
    assert risk.explanation == NOT_ENOUGH_DATA
    assert risk.disclaimer == DISCLAIMER


def test_healthy_window():
    risk = analyze_health_risks([make_log(i) for i in range(5)])
    assert risk.level is RiskLevel.low
    assert risk.flags == []
    assert risk.explanation == HEALTHY_PATTERN
    assert risk.disclaimer == DISCLAIMER


def test_anemia_indicator_is_medium():
    logs = [
        make_log(0, flow_level="heavy", energy_level=3),
        make_log(1, flow_level="heavy", energy_level=3),
        make_log(2, energy_level=3),
        make_log(3, energy_level=3),
    ]
    risk = analyze_health_risks(logs)
    assert risk.flags == [ANEMIA_FLAG]
    assert risk.level is RiskLevel.medium
    assert risk.explanation.startswith("We've noticed 1 pattern(s) worth monitoring.")


def test_heavy_flow_without_fatigue_is_not_anemia():
    logs = [make_log(0, flow_level="heavy"), make_log(1, flow_level="heavy"), make_log(2), make_log(3)]
    assert analyze_health_risks(logs).flags == []


def test_pain_threshold_is_inclusive():
    assert analyze_health_risks([make_log(pain_scale=7)]).flags == [HIGH_PAIN_FLAG]
    assert analyze_health_risks([make_log(pain_scale=6)]).flags == []


def test_sleep_threshold_is_exclusive():
    assert analyze_health_risks([make_log(sleep_hours=4.9)]).flags == [SLEEP_FLAG]
    assert analyze_health_risks([make_log(sleep_hours=5)]).flags == []


def test_mood_pattern_needs_more_than_half():
    half = [make_log(0, mood="sad"), make_log(1, mood="anxious"), make_log(2), make_log(3)]
    assert analyze_health_risks(half).flags == []

    most = half + [make_log(4, mood="sad")]
    risk = analyze_health_risks(most)
    assert risk.flags == [MOOD_FLAG]
    assert risk.level is RiskLevel.medium


def test_prolonged_bleeding_forces_high():
    logs = [make_log(i, flow_level="heavy") for i in range(3)] + [make_log(3), make_log(4)]
    risk = analyze_health_risks(logs)
    assert risk.flags == [PROLONGED_BLEEDING_FLAG]
    assert risk.level is RiskLevel.high
    assert risk.explanation.startswith("We've identified 1 potential concern(s)")


def test_all_rules_fire_in_order():
    logs = [
        make_log(i, flow_level="heavy", pain_scale=8, energy_level=2, sleep_hours=4, mood="sad")
        for i in range(4)
    ]
    risk = analyze_health_risks(logs)
    assert risk.flags == [
        ANEMIA_FLAG,
        HIGH_PAIN_FLAG,
        SLEEP_FLAG,
        MOOD_FLAG,
        PROLONGED_BLEEDING_FLAG,
    ]
    assert risk.level is RiskLevel.high
    assert "5 potential concern(s)" in risk.explanation


def test_heavy_flow_dominates_other_fields():
    logs = [make_log(i, flow_level="heavy", pain_scale=0, energy_level=10, sleep_hours=9, mood="happy") for i in range(3)]
    assert analyze_health_risks(logs).level is RiskLevel.high


def test_appending_heavy_log_keeps_high():
    logs = [make_log(i, flow_level="heavy") for i in range(2)] + [make_log(2)]
    assert analyze_health_risks(logs).level is RiskLevel.high
    logs.append(make_log(3, flow_level="heavy"))
    assert analyze_health_risks(logs).level is RiskLevel.high


def test_order_of_window_does_not_matter():
    logs = [make_log(0, flow_level="heavy", energy_level=2), make_log(1, mood="sad"), make_log(2, pain_scale=9)]
    assert analyze_health_risks(logs) == analyze_health_risks(list(reversed(logs)))


def test_minor_patterns_message_for_low_level_with_flags():
    assert _explain(RiskLevel.low, ["something"]) == MINOR_PATTERNS


# ---------- cycle predictor --------------------------------------------

def test_no_period_start_no_prediction():
    assert predict_next_period(None, 28, START) is None


def test_first_day_of_cycle():
    assert predict_next_period(START, 28, START) == CyclePrediction(
        current_day=1, days_until=28, next_period=START + timedelta(days=28)
    )


def test_exact_cycle_boundary_wraps():
    assert predict_next_period(START, 28, START + timedelta(days=28)) == CyclePrediction(
        current_day=1, days_until=28, next_period=START + timedelta(days=56)
    )


def test_mid_cycle():
    prediction = predict_next_period(START, 30, START + timedelta(days=10))
    assert prediction.current_day == 11
    assert prediction.days_until == 20
    assert prediction.next_period == START + timedelta(days=30)


def test_last_day_of_cycle():
    prediction = predict_next_period(START, 28, START + timedelta(days=27))
    assert prediction.current_day == 28
    assert prediction.days_until == 1


def test_future_period_start_uses_floor_modulo():
    today = START
    last_start = today + timedelta(days=3)
    prediction = predict_next_period(last_start, 28, today)
    assert prediction.current_day == 26
    assert prediction.next_period == last_start
    assert prediction.days_until == 3


@pytest.mark.parametrize("days_ahead", [1, 27, 28, 29, 100])
def test_current_day_stays_in_range_for_future_start(days_ahead):
    prediction = predict_next_period(START + timedelta(days=days_ahead), 28, START)
    assert 1 <= prediction.current_day <= 28
    assert prediction.days_until >= 0


def test_one_day_cycle():
    prediction = predict_next_period(START, 1, START + timedelta(days=5))
    assert prediction.current_day == 1
    assert prediction.days_until == 1


def test_package_level_shortcuts():
    import tools

    assert tools.predict_next_period(START, 28, START).current_day == 1
    assert tools.analyze_health_risks([]).level is RiskLevel.low
    assert tools.calculate_streak([make_log(0)], START) == 1
