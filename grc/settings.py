from __future__ import annotations

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    # Event journal
    db_path: str = os.getenv("GRC_DB_PATH", "grc.db")
    record_events: bool = _env_bool("GRC_RECORD_EVENTS", True)

    # Reconciliation loop
    poll_interval_s: int = _env_int("GRC_POLL_INTERVAL_S", 5)
    # Extra attempts after a stale status write.
    conflict_retries: int = _env_int("GRC_CONFLICT_RETRIES", 3)

    # CLI
    api_url: str = os.getenv("GRC_API_URL", "http://localhost:8000")


settings = Settings()
