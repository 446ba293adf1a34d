"""
Scout Market Persistence Layer
===============================

SQLite-backed JSON blob store for career snapshots.

Design:
  - Each save is one ``GameState.to_dict()`` document in a single row
  - Rows are keyed by (user_id, save_key)
  - No ORM: plain sqlite3 + json
  - Connection-per-call with WAL mode
  - Snapshots are migrated to the current schema on load

The database path defaults to ``data/market.db`` next to the package and
can be overridden with ``MARKET_DB_PATH`` or ``set_db_path()``.
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import time
from pathlib import Path
from typing import Optional, Union

from market.migrations import migrate_state_dict
from market.models import GameState

_log = logging.getLogger("market.db")

_DEFAULT_DB_PATH = Path(__file__).parent.parent / "data" / "market.db"

_db_path: Path = Path(os.environ.get("MARKET_DB_PATH", _DEFAULT_DB_PATH))


def set_db_path(path: Union[str, Path]):
    """Override the database file path (e.g. for testing)."""
    global _db_path
    _db_path = Path(path)


def get_db_path() -> Path:
    return _db_path


def _connect() -> sqlite3.Connection:
    _db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(_db_path), timeout=10)
    conn.execute("PRAGMA journal_mode=WAL")
    conn.row_factory = sqlite3.Row
    return conn


def init_db():
    """Create tables if they don't exist. Safe to call multiple times."""
    conn = _connect()
    try:
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS careers (
                id          INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id     TEXT    NOT NULL DEFAULT 'default',
                save_key    TEXT    NOT NULL,
                label       TEXT    NOT NULL DEFAULT '',
                season      INTEGER NOT NULL,
                week        INTEGER NOT NULL,
                data        TEXT    NOT NULL,
                created_at  REAL    NOT NULL,
                updated_at  REAL    NOT NULL,
                UNIQUE(user_id, save_key)
            );

            CREATE INDEX IF NOT EXISTS idx_careers_updated
                ON careers(updated_at DESC);
        """)
        conn.commit()
        _log.debug(f"Database initialized at {_db_path}")
    finally:
        conn.close()


# ═══════════════════════════════════════════════════════════════
# CRUD
# ═══════════════════════════════════════════════════════════════

def save_state(save_key: str, state: GameState, label: str = "", user_id: str = "default"):
    """Upsert a snapshot.  Overwrites an existing (user_id, save_key)."""
    init_db()
    now = time.time()
    blob = json.dumps(state.to_dict())
    conn = _connect()
    try:
        conn.execute(
            """
            INSERT INTO careers (user_id, save_key, label, season, week, data, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id, save_key)
            DO UPDATE SET data=excluded.data, label=excluded.label, season=excluded.season,
                          week=excluded.week, updated_at=excluded.updated_at
            """,
            (user_id, save_key, label, state.current_season, state.current_week, blob, now, now),
        )
        conn.commit()
        _log.debug(f"Saved {save_key} for user={user_id} ({len(blob)} bytes)")
    finally:
        conn.close()


def load_state(save_key: str, user_id: str = "default") -> Optional[GameState]:
    """Load and migrate a snapshot. Returns None if not found."""
    init_db()
    conn = _connect()
    try:
        row = conn.execute(
            "SELECT data FROM careers WHERE user_id=? AND save_key=?",
            (user_id, save_key),
        ).fetchone()
    finally:
        conn.close()
    if row is None:
        return None
    return GameState.from_dict(migrate_state_dict(json.loads(row["data"])))


def list_saves(user_id: str = "default") -> list:
    """Metadata for every save, newest first, without loading the blobs."""
    init_db()
    conn = _connect()
    try:
        rows = conn.execute(
            """
            SELECT save_key, label, season, week, created_at, updated_at,
                   length(data) as data_size
            FROM careers WHERE user_id=?
            ORDER BY updated_at DESC
            """,
            (user_id,),
        ).fetchall()
        return [dict(r) for r in rows]
    finally:
        conn.close()


def delete_save(save_key: str, user_id: str = "default") -> bool:
    init_db()
    conn = _connect()
    try:
        cursor = conn.execute(
            "DELETE FROM careers WHERE user_id=? AND save_key=?",
            (user_id, save_key),
        )
        conn.commit()
        return cursor.rowcount > 0
    finally:
        conn.close()
