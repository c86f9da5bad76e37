# db_schema/init.py
"""Public entrypoint for applying the SQLite schema."""

from __future__ import annotations

import sqlite3
from typing import Iterable

from . import core, events, npcs
from .registry import apply_all


# Order matters:
# - core must come first (profiles is referenced by every other table)
# - events before npcs only for readability; they do not reference each other.
DEFAULT_MODULES = (
    core,
    events,
    npcs,
)


def apply_schema(
    cur: sqlite3.Cursor,
    *,
    now: str,
    schema_version: str,
    modules: Iterable[object] = DEFAULT_MODULES,
) -> None:
    """Apply the schema (core -> events -> npcs)."""
    apply_all(
        cur,
        modules=modules,  # type: ignore[arg-type]
        now=now,
        schema_version=schema_version,
    )
