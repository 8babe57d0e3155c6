from datetime import date
from typing import List

from db.base import DEFAULT_LOG_WINDOW, SymptomStore
from tools.health_schema import SymptomLog


def get_entries(store: SymptomStore, user_id: str, limit: int = DEFAULT_LOG_WINDOW) -> List[SymptomLog]:
    """Return the user's most recent symptom logs, newest first.

    Ordering and limiting are delegated to the store so that SQL handles it.
    """

    return store.list_recent_logs(user_id, limit=limit)


def get_entries_between(store: SymptomStore, user_id: str, start: date, end: date) -> List[SymptomLog]:
    """Return the user's logs dated within ``[start, end]``, newest first."""

    if start > end:
        start, end = end, start
    return store.list_logs_between(user_id, start, end)


def tool_get_entries(store: SymptomStore, user_id: str, limit: int = DEFAULT_LOG_WINDOW) -> List[dict]:
    """Compatibility wrapper that returns serialisable dictionaries."""

    return [
        entry.model_dump(mode="json", exclude_none=True)
        for entry in get_entries(store, user_id, limit=limit)
    ]
