"""Process-level settings for the career simulation server.

Only paths, environment switches and clock constants live here. Game balance
tables are in career/config.py and are passed explicitly to the engine.
"""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent

SCHEMA_VERSION = "career-1.0"

# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------

# One in-game day per 4 real seconds at time scale 1.
GAME_MS_PER_DAY: int = 4_000

# Day 0 of every profile maps to this calendar date.
IN_GAME_START_DATE: str = "2026-01-01"

# Soft pauses (MODAL / SUBPAGE) auto-resume after this many real minutes.
DEFAULT_PAUSE_TIMEOUT_MINUTES: int = 30

ALLOWED_TIME_SCALES = (1, 3)


def get_db_path() -> str:
    """Resolve the SQLite path (env override first)."""
    raw = (os.environ.get("CAREER_DB_PATH") or "").strip()
    if raw:
        return raw
    return str(BASE_DIR / "data" / "career.sqlite3")


def get_ms_per_day() -> int:
    raw = (os.environ.get("GAME_MS_PER_DAY") or "").strip()
    if not raw:
        return GAME_MS_PER_DAY
    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"GAME_MS_PER_DAY must be an integer, got: {raw!r}") from exc
    if value <= 0:
        raise RuntimeError(f"GAME_MS_PER_DAY must be positive, got: {value}")
    return value


def get_pause_timeout_minutes() -> int:
    raw = (os.environ.get("PAUSE_TIMEOUT_MINUTES") or "").strip()
    if not raw:
        return DEFAULT_PAUSE_TIMEOUT_MINUTES
    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"PAUSE_TIMEOUT_MINUTES must be an integer, got: {raw!r}") from exc
    if value <= 0:
        raise RuntimeError(f"PAUSE_TIMEOUT_MINUTES must be positive, got: {value}")
    return value
