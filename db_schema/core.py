# db_schema/core.py
"""SQLite SSOT schema: profiles and per-profile game state.

This module contains *only* DDL.
It must not import CareerRepo (to avoid circular imports).
"""

from __future__ import annotations


def ddl(*, now: str, schema_version: str) -> str:
    """Return DDL SQL for core tables (as a single executescript string)."""
    return f"""
                CREATE TABLE IF NOT EXISTS meta (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );

                INSERT INTO meta(key, value) VALUES ('schema_version', '{schema_version}')
                ON CONFLICT(key) DO UPDATE SET value=excluded.value;
                INSERT OR IGNORE INTO meta(key, value) VALUES ('created_at', '{now}');

                CREATE TABLE IF NOT EXISTS profiles (
                    profile_id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    country TEXT NOT NULL,
                    branch TEXT NOT NULL,
                    start_age INTEGER NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS game_states (
                    profile_id TEXT PRIMARY KEY,
                    current_day INTEGER NOT NULL DEFAULT 0,
                    server_reference_time_ms INTEGER NOT NULL,
                    paused_at_ms INTEGER,
                    pause_reason TEXT,
                    pause_token TEXT,
                    pause_expires_at_ms INTEGER,
                    pending_event_id INTEGER,
                    pending_event_json TEXT,
                    rank_index INTEGER NOT NULL DEFAULT 0,
                    money_cents INTEGER NOT NULL DEFAULT 0,
                    morale INTEGER NOT NULL DEFAULT 70,
                    health INTEGER NOT NULL DEFAULT 80,
                    promotion_points INTEGER NOT NULL DEFAULT 0,
                    days_in_rank INTEGER NOT NULL DEFAULT 0,
                    player_position TEXT NOT NULL,
                    player_division TEXT NOT NULL,
                    next_event_day INTEGER NOT NULL DEFAULT 3,
                    last_mission_day INTEGER NOT NULL DEFAULT -10,
                    player_medals_json TEXT NOT NULL DEFAULT '[]',
                    player_ribbons_json TEXT NOT NULL DEFAULT '[]',
                    npc_award_history_json TEXT NOT NULL DEFAULT '{{}}',
                    game_time_scale INTEGER NOT NULL DEFAULT 1,
                    ceremony_completed_day INTEGER NOT NULL DEFAULT 0,
                    ceremony_recent_awards_json TEXT NOT NULL DEFAULT '[]',
                    academy_tier INTEGER NOT NULL DEFAULT 0,
                    certificate_inventory_json TEXT NOT NULL DEFAULT '[]',
                    last_travel_place TEXT NOT NULL DEFAULT 'BASE_HQ',
                    command_authority INTEGER NOT NULL DEFAULT 10,
                    mission_participants_json TEXT NOT NULL DEFAULT '[]',
                    last_mission_json TEXT,
                    raider_last_attack_day INTEGER NOT NULL DEFAULT 0,
                    raider_casualties_json TEXT NOT NULL DEFAULT '[]',
                    version INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    FOREIGN KEY(profile_id) REFERENCES profiles(profile_id) ON DELETE CASCADE,
                    CHECK (morale BETWEEN 0 AND 100),
                    CHECK (health BETWEEN 0 AND 100),
                    CHECK ((pause_token IS NULL) = (pause_reason IS NULL))
                );
"""

