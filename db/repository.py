"""
SQLAlchemy-backed ``SymptomStore`` on a SQLite file.
"""
import logging
from contextlib import contextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import List, Optional

from sqlalchemy.orm import Session, sessionmaker

from db.base import DEFAULT_LOG_WINDOW, SymptomStore, apply_update
from db.engine import get_engine, init_db
from db.models import CycleProfileORM, HealthReportORM, SymptomLogORM
from tools.health_schema import (
    CycleProfile,
    HealthReport,
    SymptomLog,
    SymptomLogUpdate,
    new_id,
)

logger = logging.getLogger(__name__)


def _report_row(report: HealthReport) -> HealthReportORM:
    data = report.model_dump(mode="json")
    return HealthReportORM(
        id=report.id,
        user_id=report.user_id,
        generated_at=report.generated_at,
        start_date=report.start_date,
        end_date=report.end_date,
        cycle_data=data["cycle_data"],
        symptoms=data["symptoms"],
        risks=data["risks"],
    )


class SqlStore(SymptomStore):
    """Persist logs, reports and profiles through SQLAlchemy sessions."""

    def __init__(self, db_path: Path | str | None = None):
        self.engine = init_db(get_engine(db_path))
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        logger.info("SQLite store ready at %s", self.engine.url.database)

    @contextmanager
    def session_scope(self):
        """
        Provide a transactional session.

        Commits on successful exit, rolls back and re-raises on exception, and
        always closes the session.
        """
        db: Session = self._session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    # ---------- symptom logs -------------------------------------------

    def add_log(self, log: SymptomLog) -> SymptomLog:
        saved = log.model_copy(update={"id": log.id or new_id()})
        with self.session_scope() as db:
            db.add(SymptomLogORM(**saved.model_dump()))
        return saved

    def get_log(self, log_id: str) -> Optional[SymptomLog]:
        with self.session_scope() as db:
            row = db.get(SymptomLogORM, log_id)
            return SymptomLog.model_validate(row, from_attributes=True) if row else None

    def update_log(self, log_id: str, changes: SymptomLogUpdate) -> Optional[SymptomLog]:
        with self.session_scope() as db:
            row = db.get(SymptomLogORM, log_id)
            if row is None:
                return None
            current = SymptomLog.model_validate(row, from_attributes=True)
            updated = apply_update(current, changes, datetime.now(timezone.utc))
            for key, value in updated.model_dump(exclude={"id", "user_id", "created_at"}).items():
                setattr(row, key, value)
            return updated

    def delete_log(self, log_id: str) -> bool:
        with self.session_scope() as db:
            row = db.get(SymptomLogORM, log_id)
            if row is None:
                return False
            db.delete(row)
            return True

    def list_recent_logs(self, user_id: str, limit: int = DEFAULT_LOG_WINDOW) -> List[SymptomLog]:
        with self.session_scope() as db:
            rows = (
                db.query(SymptomLogORM)
                .filter(SymptomLogORM.user_id == user_id)
                .order_by(SymptomLogORM.date.desc(), SymptomLogORM.created_at.desc())
                .limit(limit)
                .all()
            )
            return [SymptomLog.model_validate(r, from_attributes=True) for r in rows]

    def list_logs_between(self, user_id: str, start: date, end: date) -> List[SymptomLog]:
        with self.session_scope() as db:
            rows = (
                db.query(SymptomLogORM)
                .filter(
                    SymptomLogORM.user_id == user_id,
                    SymptomLogORM.date >= start,
                    SymptomLogORM.date <= end,
                )
                .order_by(SymptomLogORM.date.desc(), SymptomLogORM.created_at.desc())
                .all()
            )
            return [SymptomLog.model_validate(r, from_attributes=True) for r in rows]

    # ---------- reports ------------------------------------------------

    def add_report(self, report: HealthReport) -> HealthReport:
        saved = report.model_copy(update={"id": report.id or new_id()})
        with self.session_scope() as db:
            db.add(_report_row(saved))
        return saved

    def get_report(self, report_id: str) -> Optional[HealthReport]:
        with self.session_scope() as db:
            row = db.get(HealthReportORM, report_id)
            return HealthReport.model_validate(row, from_attributes=True) if row else None

    def list_reports(self, user_id: str) -> List[HealthReport]:
        with self.session_scope() as db:
            rows = (
                db.query(HealthReportORM)
                .filter(HealthReportORM.user_id == user_id)
                .order_by(HealthReportORM.generated_at.desc())
                .all()
            )
            return [HealthReport.model_validate(r, from_attributes=True) for r in rows]

    # ---------- profile ------------------------------------------------

    def get_profile(self, user_id: str) -> Optional[CycleProfile]:
        with self.session_scope() as db:
            row = db.get(CycleProfileORM, user_id)
            return CycleProfile.model_validate(row, from_attributes=True) if row else None

    def save_profile(self, profile: CycleProfile) -> CycleProfile:
        with self.session_scope() as db:
            db.merge(CycleProfileORM(**profile.model_dump()))
        return profile
