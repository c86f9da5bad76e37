# career_repo.py
# Developer note:
# - SQLite DB is the single source of truth (SSOT) for every profile's game state.
# - Requests read through read() (BEGIN DEFERRED, WAL: never waits on writers) and
#   write through transaction(), whose outermost level takes the write lock up front
#   (BEGIN IMMEDIATE) so concurrent writers queue instead of failing mid-way.
#   Keep write transactions short: the lock is shared by every profile in the file.
# - Table access lives in per-package repo modules (career.repo, decisions.repo, npcs.repo);
#   this class owns the connection, transactions, schema and integrity checks.
"""
CareerRepo: persisted-data SSOT (SQLite)

Usage (CLI):
  python career_repo.py init --db <db_path>
  python career_repo.py validate --db <db_path>

Python:
  from career_repo import CareerRepo
  with CareerRepo("<db_path>") as repo:
      repo.init_db()
      with repo.transaction() as cur:
          ...
"""

from __future__ import annotations

import argparse
import contextlib
import logging
import sqlite3
from collections import Counter
from pathlib import Path
from typing import Dict, Optional, Sequence

import game_time
from config import SCHEMA_VERSION

logger = logging.getLogger(__name__)


def _utc_now_iso() -> str:
    return game_time.iso_from_ms(game_time.now_ms())


class CareerRepo:
    def __init__(self, db_path: str | Path):
        self.db_path = str(db_path)
        parent = Path(self.db_path).parent
        if str(parent) and not parent.exists():
            parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(self.db_path, timeout=30.0)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON;")
        self._conn.execute("PRAGMA journal_mode = WAL;")
        # Nested transaction support (SAVEPOINT) for callers that compose repo functions.
        self._savepoint_seq = 0

    def close(self) -> None:
        try:
            self._conn.close()
        except sqlite3.Error:
            logger.warning("CareerRepo.close failed for %s", self.db_path, exc_info=True)

    @contextlib.contextmanager
    def transaction(self):
        """
        Atomic transaction helper.

        Supports nesting via SAVEPOINT:
        - outermost: BEGIN IMMEDIATE ... COMMIT/ROLLBACK
        - nested: SAVEPOINT ... RELEASE (or ROLLBACK TO + RELEASE on error)
        """
        cur = self._conn.cursor()
        nested = bool(self._conn.in_transaction)
        sp_name = None
        try:
            if nested:
                self._savepoint_seq += 1
                sp_name = f"sp_{self._savepoint_seq}"
                cur.execute(f"SAVEPOINT {sp_name};")
            else:
                self._conn.execute("BEGIN IMMEDIATE;")

            yield cur

            if nested and sp_name:
                cur.execute(f"RELEASE SAVEPOINT {sp_name};")
            else:
                self._conn.commit()
        except BaseException:
            if nested and sp_name:
                # Roll back to the savepoint only; the outer transaction decides for itself.
                try:
                    cur.execute(f"ROLLBACK TO SAVEPOINT {sp_name};")
                finally:
                    cur.execute(f"RELEASE SAVEPOINT {sp_name};")
            else:
                self._conn.rollback()
            raise
        finally:
            cur.close()

    @contextlib.contextmanager
    def read(self):
        """
        Consistent read-only view (BEGIN DEFERRED ... ROLLBACK).

        Takes no write lock. In WAL mode it neither waits for nor blocks writers.
        """
        if self._conn.in_transaction:
            raise RuntimeError("read() cannot be nested inside another transaction")
        cur = self._conn.cursor()
        self._conn.execute("BEGIN DEFERRED;")
        try:
            yield cur
        finally:
            try:
                self._conn.rollback()
            finally:
                cur.close()

    # ------------------------
    # Schema
    # ------------------------

    def init_db(self) -> None:
        """Apply the schema and seed the event pool."""
        from db_schema import apply_schema
        from decisions.catalog import SEED_EVENTS
        from decisions.repo import seed_events

        now = _utc_now_iso()
        with self.transaction() as cur:
            apply_schema(cur, now=now, schema_version=SCHEMA_VERSION)
            inserted = seed_events(cur, SEED_EVENTS, now=now)
        if inserted:
            logger.info("seeded %s event(s) into %s", inserted, self.db_path)

    # ------------------------
    # Integrity
    # ------------------------

    def validate_integrity(self) -> None:
        """Fail loudly on persisted states the engine would never write."""
        row = self._conn.execute("SELECT value FROM meta WHERE key='schema_version';").fetchone()
        if not row or row["value"] != SCHEMA_VERSION:
            raise ValueError(f"schema_version mismatch: got={row['value'] if row else None} expected={SCHEMA_VERSION}")

        bad = self._conn.execute(
            """
            SELECT profile_id FROM game_states
            WHERE (pause_reason = 'DECISION') != (pending_event_id IS NOT NULL)
               OR (pause_reason IS NULL) != (paused_at_ms IS NULL);
            """
        ).fetchall()
        if bad:
            raise ValueError(f"inconsistent pause columns: {[r['profile_id'] for r in bad]}")

        orphans = self._conn.execute(
            "SELECT g.profile_id FROM game_states g LEFT JOIN profiles p ON p.profile_id=g.profile_id WHERE p.profile_id IS NULL;"
        ).fetchall()
        if orphans:
            raise ValueError(f"game_states without profile: {[r['profile_id'] for r in orphans]}")

        names: Dict[str, Counter] = {}
        for r in self._conn.execute("SELECT profile_id, name FROM npc_runtime WHERE status='ACTIVE';"):
            names.setdefault(r["profile_id"], Counter())[r["name"]] += 1
        dupes = {pid: [n for n, c in counts.items() if c > 1] for pid, counts in names.items()}
        dupes = {pid: ns for pid, ns in dupes.items() if ns}
        if dupes:
            raise ValueError(f"duplicate active NPC names: {dupes}")

    # ------------------------
    # Convenience
    # ------------------------

    def __enter__(self) -> "CareerRepo":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


# ----------------------------
# CLI
# ----------------------------

def _cmd_init(args) -> None:
    with CareerRepo(args.db) as repo:
        repo.init_db()
    print(f"OK: initialized {args.db}")

def _cmd_validate(args) -> None:
    with CareerRepo(args.db) as repo:
        repo.validate_integrity()
    print(f"OK: validation passed for {args.db}")

def main(argv: Optional[Sequence[str]] = None) -> None:
    p = argparse.ArgumentParser(description="CareerRepo (SQLite single source of truth)")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_init = sub.add_parser("init", help="initialize DB schema and seed events")
    p_init.add_argument("--db", required=True, help="path to sqlite db file")
    p_init.set_defaults(func=_cmd_init)

    p_val = sub.add_parser("validate", help="validate DB integrity")
    p_val.add_argument("--db", required=True, help="path to sqlite db file")
    p_val.set_defaults(func=_cmd_validate)

    args = p.parse_args(argv)
    args.func(args)

if __name__ == "__main__":
    main()
