import logging
from datetime import date
from typing import Optional

from .base import SymptomStore, DEFAULT_LOG_WINDOW  # noqa: F401
from .engine import Base  # noqa: F401
from .memory_store import InMemoryStore, seed_demo_logs  # noqa: F401
from .repository import SqlStore  # noqa: F401

__all__ = [
    "Base",
    "SymptomStore",
    "SqlStore",
    "InMemoryStore",
    "DEFAULT_LOG_WINDOW",
    "build_store",
    "seed_demo_logs",
]

logger = logging.getLogger(__name__)


def build_store(
    backend: str = "sqlite",
    db_path: Optional[str] = None,
    demo_user_id: Optional[str] = None,
) -> SymptomStore:
    """Construct the store selected by configuration."""
    if backend == "memory":
        store: SymptomStore = InMemoryStore()
        if demo_user_id:
            seed_demo_logs(store, demo_user_id, date.today())
        logger.info("Using in-memory store")
        return store
    if backend == "sqlite":
        if demo_user_id:
            logger.warning("DEMO_USER_ID is ignored by the sqlite backend")
        return SqlStore(db_path)
    raise ValueError(f"Unknown store backend: {backend!r}")
