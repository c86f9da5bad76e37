# db_schema/events.py
"""SQLite SSOT schema: random-event pool and the append-only decision log."""

from __future__ import annotations


def ddl(*, now: str, schema_version: str) -> str:
    """Return DDL SQL for event tables."""
    _ = (now, schema_version)
    return """
                CREATE TABLE IF NOT EXISTS events (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    code TEXT NOT NULL UNIQUE,
                    country TEXT NOT NULL,
                    branch TEXT NOT NULL,
                    rank_min INTEGER NOT NULL DEFAULT 0,
                    rank_max INTEGER NOT NULL DEFAULT 99,
                    base_weight REAL NOT NULL DEFAULT 1,
                    cooldown_days INTEGER NOT NULL DEFAULT 0,
                    title TEXT NOT NULL,
                    description TEXT NOT NULL,
                    options_json TEXT NOT NULL DEFAULT '[]',
                    is_active INTEGER NOT NULL DEFAULT 1,
                    created_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_events_pool ON events(country, branch, is_active);

                CREATE TABLE IF NOT EXISTS decision_logs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    profile_id TEXT NOT NULL,
                    event_id INTEGER NOT NULL,
                    game_day INTEGER NOT NULL,
                    selected_option TEXT NOT NULL,
                    consequences_json TEXT NOT NULL,
                    state_before_json TEXT NOT NULL,
                    state_after_json TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY(profile_id) REFERENCES profiles(profile_id) ON DELETE CASCADE,
                    FOREIGN KEY(event_id) REFERENCES events(id)
                );

                CREATE INDEX IF NOT EXISTS idx_decision_logs_profile ON decision_logs(profile_id, id);
                CREATE INDEX IF NOT EXISTS idx_decision_logs_event ON decision_logs(profile_id, event_id, game_day);
"""
