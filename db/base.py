"""
Store interface shared by the SQLite and in-memory backends.

Tools and the API receive a ``SymptomStore`` instance; nothing reaches for a
module-level store.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from tools.health_schema import (
    CycleProfile,
    HealthReport,
    SymptomLog,
    SymptomLogUpdate,
)

DEFAULT_LOG_WINDOW = 30


class SymptomStore(ABC):
    """Persistence for symptom logs, health reports and cycle profiles."""

    # ---------- symptom logs -------------------------------------------

    @abstractmethod
    def add_log(self, log: SymptomLog) -> SymptomLog:
        """Persist ``log`` and return it with its assigned id."""

    @abstractmethod
    def get_log(self, log_id: str) -> Optional[SymptomLog]:
        ...

    @abstractmethod
    def update_log(self, log_id: str, changes: SymptomLogUpdate) -> Optional[SymptomLog]:
        """Apply the set fields of ``changes`` and stamp ``updated_at``.

        Returns None when no log has ``log_id``.
        """

    @abstractmethod
    def delete_log(self, log_id: str) -> bool:
        ...

    @abstractmethod
    def list_recent_logs(self, user_id: str, limit: int = DEFAULT_LOG_WINDOW) -> List[SymptomLog]:
        """Most recent ``limit`` logs for ``user_id``, newest date first."""

    @abstractmethod
    def list_logs_between(self, user_id: str, start: date, end: date) -> List[SymptomLog]:
        """Logs dated within ``[start, end]``, newest date first."""

    # ---------- reports ------------------------------------------------

    @abstractmethod
    def add_report(self, report: HealthReport) -> HealthReport:
        """Persist ``report`` and return it with its assigned id."""

    @abstractmethod
    def get_report(self, report_id: str) -> Optional[HealthReport]:
        ...

    @abstractmethod
    def list_reports(self, user_id: str) -> List[HealthReport]:
        """Reports for ``user_id``, newest ``generated_at`` first."""

    # ---------- profile ------------------------------------------------

    @abstractmethod
    def get_profile(self, user_id: str) -> Optional[CycleProfile]:
        ...

    @abstractmethod
    def save_profile(self, profile: CycleProfile) -> CycleProfile:
        ...


def apply_update(log: SymptomLog, changes: SymptomLogUpdate, now) -> SymptomLog:
    """Return a validated copy of ``log`` with ``changes`` applied."""
    data = log.model_dump()
    data.update(changes.model_dump(exclude_unset=True))
    data["updated_at"] = now
    return SymptomLog.model_validate(data)
