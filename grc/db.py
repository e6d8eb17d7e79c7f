from __future__ import annotations

import os
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone

from .settings import settings


def utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _resolve_db_path() -> str:
    """Return a file path usable by sqlite.

    If the configured path is an existing directory (a bind mount created
    before the file existed), the journal file is placed inside it.
    """

    p = os.path.abspath(settings.db_path)

    if os.path.isdir(p):
        p = os.path.join(p, "grc.db")

    parent = os.path.dirname(p)
    if parent and not os.path.exists(parent):
        os.makedirs(parent, exist_ok=True)

    return p


def connect() -> sqlite3.Connection:
    conn = sqlite3.connect(_resolve_db_path(), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


def init_db() -> None:
    """Create the event journal if it does not exist."""
    with connect() as conn:
        conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS events (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              ts TEXT NOT NULL,
              level TEXT NOT NULL,
              workload TEXT,
              condition_type TEXT,
              message TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_events_ts ON events(ts);
            CREATE INDEX IF NOT EXISTS idx_events_workload ON events(workload);
            """
        )


def log_event(level: str, message: str, workload: str | None = None, condition_type: str | None = None) -> None:
    if not settings.record_events:
        return
    with connect() as conn:
        conn.execute(
            "INSERT INTO events (ts, level, workload, condition_type, message) VALUES (?, ?, ?, ?, ?)",
            (utc_now(), level.upper(), workload, condition_type, message),
        )


@dataclass(frozen=True)
class EventRow:
    id: int
    ts: str
    level: str
    workload: str | None
    condition_type: str | None
    message: str


def list_events(limit: int = 100, workload: str | None = None) -> list[EventRow]:
    """Newest first."""
    with connect() as conn:
        if workload:
            rows = conn.execute(
                "SELECT * FROM events WHERE workload=? ORDER BY id DESC LIMIT ?",
                (workload, limit),
            ).fetchall()
        else:
            rows = conn.execute("SELECT * FROM events ORDER BY id DESC LIMIT ?", (limit,)).fetchall()
        return [EventRow(**dict(r)) for r in rows]
