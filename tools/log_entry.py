import logging
from typing import Optional

from db.base import SymptomStore
from tools.health_schema import SymptomLog, SymptomLogUpdate

logger = logging.getLogger(__name__)


def log_entry(store: SymptomStore, entry: SymptomLog) -> SymptomLog:
    """
    Persist a day's symptom entry for a user.

    Returns:
        SymptomLog: The stored entry, with its id assigned.
    """
    try:
        saved = store.add_log(entry)
    except Exception as exc:
        logger.error("Failed to log symptom entry: %s", exc)
        raise
    logger.debug("Logged entry %s for user %s on %s", saved.id, saved.user_id, saved.date)
    return saved


def edit_entry(store: SymptomStore, log_id: str, changes: SymptomLogUpdate) -> Optional[SymptomLog]:
    """Apply an explicit edit; returns None when the entry does not exist."""
    return store.update_log(log_id, changes)


def delete_entry(store: SymptomStore, log_id: str) -> bool:
    return store.delete_log(log_id)
