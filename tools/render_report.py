from __future__ import annotations

from typing import Sequence

from tools.health_schema import HealthReport, SymptomLog

REPORT_TITLE = "Ovira Health Report"
MAX_TABLE_ROWS = 15
DOCTOR_NOTE_LINES = 5
REPORT_DISCLAIMER = (
    "DISCLAIMER: This report is generated for informational purposes only. "
    "It is not a medical diagnosis. Please consult a qualified healthcare provider "
    "for medical advice, diagnosis, or treatment."
)


def _fmt_day(d) -> str:
    return f"{d:%b} {d.day}"


def _fmt_period(start, end) -> str:
    if start.year != end.year:
        return f"{_fmt_day(start)}, {start:%Y} - {_fmt_day(end)}, {end:%Y}"
    return f"{_fmt_day(start)} - {_fmt_day(end)}, {end:%Y}"


def _format_log_table(logs: Sequence[SymptomLog]) -> str:
    """Markdown table of the first entries of the window."""

    def fmt(log: SymptomLog) -> str:
        sleep = f"{log.sleep_hours:g}h"
        return (
            f"| {_fmt_day(log.date)} | {log.flow_level.value} | {log.pain_scale}/10 "
            f"| {log.mood.value} | {log.energy_level}/10 | {sleep} |"
        )

    rows = [
        "| Date | Flow | Pain | Mood | Energy | Sleep |",
        "|---|---|---|---|---|---|",
    ]
    rows.extend(fmt(log) for log in logs[:MAX_TABLE_ROWS])
    return "\n".join(rows)


def render_report(report: HealthReport, logs: Sequence[SymptomLog]) -> str:
    """
    Render a doctor-ready markdown document from a report and its log window.

    Parameters:
        report (HealthReport): The aggregated report.
        logs (Sequence[SymptomLog]): The window the report was built from.

    Returns:
        str: The document text.
    """
    generated = report.generated_at
    moods = ", ".join(m.value for m in report.symptoms.common_moods) or "N/A"

    parts: list[str] = [
        f"# {REPORT_TITLE}",
        "",
        f"Report Generated: {generated:%B} {generated.day}, {generated:%Y}",
        f"Period: {_fmt_period(report.start_date, report.end_date)}",
        "",
        "## Cycle Overview",
        f"- Average Cycle Length: {report.cycle_data.average_length} days",
        f"- Period Days Logged: {report.cycle_data.period_days} days",
        "",
        "## Symptom Summary",
        f"- Average Pain Level: {report.symptoms.average_pain:g}/10",
        f"- Average Energy Level: {report.symptoms.average_energy:g}/10",
        f"- Average Sleep: {report.symptoms.average_sleep:g} hours/night",
        f"- Common Moods: {moods}",
        "",
        "## Health Risk Assessment",
        f"Risk Level: {report.risks.level.value.upper()}",
        "",
    ]
    if report.risks.flags:
        parts.extend(f"- {flag}" for flag in report.risks.flags)
    else:
        parts.append("No significant risk factors identified.")

    if logs:
        parts.extend(["", "## Symptom Log Details", _format_log_table(logs)])

    parts.extend(["", "## Doctor's Notes"])
    parts.extend("_" * 60 for _ in range(DOCTOR_NOTE_LINES))
    parts.extend(["", f"_{REPORT_DISCLAIMER}_", ""])
    return "\n".join(parts)
