# db_schema/npcs.py
"""SQLite SSOT schema: per-profile NPC runtime state and the replacement queue."""

from __future__ import annotations


def ddl(*, now: str, schema_version: str) -> str:
    """Return DDL SQL for NPC tables."""
    _ = (now, schema_version)
    return """
                CREATE TABLE IF NOT EXISTS npc_runtime (
                    profile_id TEXT NOT NULL,
                    npc_id TEXT NOT NULL,
                    slot INTEGER NOT NULL,
                    generation INTEGER NOT NULL DEFAULT 0,
                    name TEXT NOT NULL,
                    division TEXT NOT NULL,
                    subdivision TEXT,
                    unit TEXT NOT NULL,
                    position TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'ACTIVE',
                    competence INTEGER NOT NULL DEFAULT 50,
                    loyalty INTEGER NOT NULL DEFAULT 50,
                    fatigue INTEGER NOT NULL DEFAULT 0,
                    relation_to_player INTEGER NOT NULL DEFAULT 0,
                    promotion_points INTEGER NOT NULL DEFAULT 0,
                    joined_day INTEGER NOT NULL DEFAULT 0,
                    death_day INTEGER,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY(profile_id, npc_id),
                    FOREIGN KEY(profile_id) REFERENCES profiles(profile_id) ON DELETE CASCADE,
                    CHECK (status IN ('ACTIVE', 'KIA'))
                );

                CREATE INDEX IF NOT EXISTS idx_npc_runtime_slot ON npc_runtime(profile_id, slot, generation);

                CREATE TABLE IF NOT EXISTS recruitment_queue (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    profile_id TEXT NOT NULL,
                    slot INTEGER NOT NULL,
                    generation_next INTEGER NOT NULL,
                    enqueued_day INTEGER NOT NULL,
                    due_day INTEGER NOT NULL,
                    replaced_npc_id TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'QUEUED',
                    filled_npc_id TEXT,
                    filled_at TEXT,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY(profile_id) REFERENCES profiles(profile_id) ON DELETE CASCADE,
                    CHECK (status IN ('QUEUED', 'FILLED'))
                );

                CREATE INDEX IF NOT EXISTS idx_recruitment_queue_due ON recruitment_queue(profile_id, status, due_day);
"""
