"""Runtime configuration read from environment variables."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional


def _parse_cors_origins(env_val: str | None) -> List[str]:
    """
    Parse comma-separated origins. If env is None or '*', return ['*'] (dev).
    Otherwise, return a cleaned list like ['https://app.example.com', 'https://example.com'].
    """
    if not env_val or env_val.strip() == "*":
        return ["*"]
    parts = [p.strip() for p in env_val.split(",")]
    return [p for p in parts if p] or ["*"]


@dataclass
class Settings:
    store_backend: str = "sqlite"  # "sqlite" or "memory"
    db_path: Optional[str] = None
    api_token: Optional[str] = None
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    demo_user_id: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            store_backend=os.getenv("STORE_BACKEND", "sqlite").strip().lower(),
            db_path=os.getenv("HEALTH_DB_PATH") or None,
            api_token=os.getenv("API_TOKEN") or None,
            cors_origins=_parse_cors_origins(os.getenv("CORS_ORIGINS")),
            demo_user_id=os.getenv("DEMO_USER_ID") or None,
            log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
        )
