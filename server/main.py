# server/main.py
from __future__ import annotations

import logging
from datetime import date as Date, datetime, timezone
from typing import Optional

import dateparser
from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field, ValidationError, field_validator

from db import DEFAULT_LOG_WINDOW, SymptomStore, build_store
from server.settings import Settings
from tools.dashboard import cycle_for_user, dashboard_snapshot, streak_for_user
from tools.get_entries import get_entries_between, tool_get_entries
from tools.health_analyzer import analyze_health_risks
from tools.health_schema import (
    DEFAULT_CYCLE_LENGTH,
    CycleProfile,
    FlowLevel,
    Mood,
    SymptomLog,
    SymptomLogUpdate,
    to_calendar_date,
)
from tools.log_entry import delete_entry, edit_entry, log_entry
from tools.report import REPORT_SPAN_DAYS, NoLogsToReportError, generate_report

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


# --- Helpers ---
def _parse_day(value: Optional[str], name: str) -> Optional[Date]:
    """
    Parse an ISO or natural-language date ("yesterday", "3 days ago") into a calendar date.

    Returns None when ``value`` is falsy.

    Raises:
        HTTPException: 400 Bad Request if ``value`` cannot be parsed.
    """
    if not value:
        return None
    dt = dateparser.parse(value)
    if dt is None:
        raise HTTPException(status_code=400, detail=f"Invalid '{name}' date format.")
    return dt.date()


def _today(value: Optional[str]) -> Date:
    return _parse_day(value, "today") or Date.today()


def get_store(request: Request) -> SymptomStore:
    return request.app.state.store


def auth_guard(request: Request, creds: Optional[HTTPAuthorizationCredentials] = Depends(security)):
    """
    Enforces optional Bearer token authentication based on the configured API token.

    If no token is configured, allows access. Otherwise requires a matching
    Bearer token and raises HTTP 401 Unauthorized on mismatch.
    """
    api_token = request.app.state.settings.api_token
    if not api_token:
        return True
    if creds is None or creds.scheme.lower() != "bearer" or creds.credentials != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return True


class LogRequest(BaseModel):
    user_id: str
    date: Date
    flow_level: FlowLevel = FlowLevel.none
    pain_scale: int = Field(ge=0, le=10)
    mood: Mood
    energy_level: int = Field(ge=1, le=10)
    sleep_hours: float = Field(ge=0, le=24)
    notes: Optional[str] = None

    @field_validator("date", mode="before")
    def _parse_date(cls, v: Date | datetime | str) -> Date:
        return to_calendar_date(v)


class ProfileRequest(BaseModel):
    last_period_start: Optional[str] = None
    average_cycle_length: int = Field(default=DEFAULT_CYCLE_LENGTH, ge=1)


class ReportRequest(BaseModel):
    user_id: str
    window: int = Field(default=DEFAULT_LOG_WINDOW, ge=1, le=365)
    span_days: int = Field(default=REPORT_SPAN_DAYS, ge=1, le=365)


def create_app(settings: Optional[Settings] = None, store: Optional[SymptomStore] = None) -> FastAPI:
    """Build the API with its store selected from ``settings`` unless one is given."""
    settings = settings or Settings.from_env()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(title="Ovira Health API", version="0.1.0")
    app.state.settings = settings
    app.state.store = store or build_store(
        settings.store_backend, settings.db_path, settings.demo_user_id
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,   # using Bearer token; no cookies needed
        allow_methods=["*"],
        allow_headers=["*"],       # includes 'Authorization'
    )
    if settings.cors_origins == ["*"]:
        logger.warning("CORS is permissive ('*'). This is fine for dev but restrict in production via CORS_ORIGINS.")
    else:
        logger.info("CORS allowed origins: %s", settings.cors_origins)

    # --- Routes ---
    @app.get("/health")
    def health():
        return {"ok": True}

    # ---------- logs ---------------------------------------------------

    @app.post("/logs", status_code=status.HTTP_201_CREATED)
    def api_log(payload: LogRequest, store: SymptomStore = Depends(get_store), _auth=Depends(auth_guard)):
        """Create a symptom log and return the stored entry."""
        entry = SymptomLog.model_validate(payload.model_dump())
        return log_entry(store, entry).model_dump(mode="json")

    @app.get("/logs")
    def api_logs(
        user_id: str,
        limit: int = Query(default=DEFAULT_LOG_WINDOW, ge=1, le=365),
        store: SymptomStore = Depends(get_store),
        _auth=Depends(auth_guard),
    ):
        return tool_get_entries(store, user_id, limit=limit)

    @app.get("/logs/range")
    def api_logs_range(
        user_id: str,
        start: str,
        end: str,
        store: SymptomStore = Depends(get_store),
        _auth=Depends(auth_guard),
    ):
        """Logs dated between ``start`` and ``end`` inclusive."""
        logs = get_entries_between(store, user_id, _parse_day(start, "start"), _parse_day(end, "end"))
        return [log.model_dump(mode="json") for log in logs]

    @app.patch("/logs/{log_id}")
    def api_edit_log(
        log_id: str,
        changes: SymptomLogUpdate,
        store: SymptomStore = Depends(get_store),
        _auth=Depends(auth_guard),
    ):
        try:
            updated = edit_entry(store, log_id, changes)
        except ValidationError as exc:
            raise HTTPException(
                status_code=422, detail=exc.errors(include_url=False, include_context=False)
            ) from exc
        if updated is None:
            raise HTTPException(status_code=404, detail="Log not found")
        return updated.model_dump(mode="json")

    @app.delete("/logs/{log_id}", status_code=status.HTTP_204_NO_CONTENT)
    def api_delete_log(log_id: str, store: SymptomStore = Depends(get_store), _auth=Depends(auth_guard)):
        if not delete_entry(store, log_id):
            raise HTTPException(status_code=404, detail="Log not found")

    # ---------- profile ------------------------------------------------

    @app.get("/profile/{user_id}")
    def api_get_profile(user_id: str, store: SymptomStore = Depends(get_store), _auth=Depends(auth_guard)):
        profile = store.get_profile(user_id) or CycleProfile(user_id=user_id)
        return profile.model_dump(mode="json")

    @app.put("/profile/{user_id}")
    def api_put_profile(
        user_id: str,
        payload: ProfileRequest,
        store: SymptomStore = Depends(get_store),
        _auth=Depends(auth_guard),
    ):
        profile = CycleProfile(
            user_id=user_id,
            last_period_start=_parse_day(payload.last_period_start, "last_period_start"),
            average_cycle_length=payload.average_cycle_length,
        )
        return store.save_profile(profile).model_dump(mode="json")

    # ---------- analysis -----------------------------------------------

    @app.get("/risk")
    def api_risk(user_id: str, store: SymptomStore = Depends(get_store), _auth=Depends(auth_guard)):
        logs = store.list_recent_logs(user_id, limit=DEFAULT_LOG_WINDOW)
        return analyze_health_risks(logs).model_dump(mode="json")

    @app.get("/cycle")
    def api_cycle(
        user_id: str,
        today: Optional[str] = Query(default=None, description="Reference date, defaults to today"),
        store: SymptomStore = Depends(get_store),
        _auth=Depends(auth_guard),
    ):
        prediction = cycle_for_user(store, user_id, _today(today))
        return {"cycle": prediction.model_dump(mode="json") if prediction else None}

    @app.get("/streak")
    def api_streak(
        user_id: str,
        today: Optional[str] = Query(default=None, description="Reference date, defaults to today"),
        store: SymptomStore = Depends(get_store),
        _auth=Depends(auth_guard),
    ):
        return {"streak": streak_for_user(store, user_id, _today(today))}

    @app.get("/dashboard")
    def api_dashboard(
        user_id: str,
        today: Optional[str] = Query(default=None, description="Reference date, defaults to today"),
        store: SymptomStore = Depends(get_store),
        _auth=Depends(auth_guard),
    ):
        return dashboard_snapshot(store, user_id, _today(today)).model_dump(mode="json")

    # ---------- reports ------------------------------------------------

    @app.post("/reports", status_code=status.HTTP_201_CREATED)
    def api_generate_report(
        payload: ReportRequest,
        store: SymptomStore = Depends(get_store),
        _auth=Depends(auth_guard),
    ):
        """Generate, store and render a doctor-ready report from recent logs."""
        try:
            report, document = generate_report(
                store,
                payload.user_id,
                generated_at=datetime.now(timezone.utc),
                window=payload.window,
                span_days=payload.span_days,
            )
        except NoLogsToReportError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except Exception as exc:  # pragma: no cover - defensive
            logger.exception("Report generation failed")
            raise HTTPException(status_code=500, detail="Internal Server Error") from exc
        return {"report": report.model_dump(mode="json"), "document": document}

    @app.get("/reports")
    def api_reports(user_id: str, store: SymptomStore = Depends(get_store), _auth=Depends(auth_guard)):
        return [r.model_dump(mode="json") for r in store.list_reports(user_id)]

    @app.get("/reports/{report_id}")
    def api_report(report_id: str, store: SymptomStore = Depends(get_store), _auth=Depends(auth_guard)):
        report = store.get_report(report_id)
        if report is None:
            raise HTTPException(status_code=404, detail="Report not found")
        return report.model_dump(mode="json")

    return app


app = create_app()
