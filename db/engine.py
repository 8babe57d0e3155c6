"""SQLAlchemy engine utilities."""

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass


def default_db_path() -> Path:
    return Path.cwd() / "health.db"


def get_engine(db_path: Path | str | None = None) -> Engine:
    """Return an engine bound to ``db_path`` (``health.db`` in the cwd by default)."""

    path = Path(db_path).expanduser().resolve() if db_path else default_db_path()
    url = f"sqlite:///{path}"
    return create_engine(
        url,
        connect_args={"check_same_thread": False},
        echo=False,
    )


def init_db(engine: Engine) -> Engine:
    """Create any missing tables on ``engine``."""

    from db import models  # noqa: F401 – ensure model import for metadata

    Base.metadata.create_all(engine)
    return engine
