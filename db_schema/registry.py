# db_schema/registry.py
"""Schema registry + applier.

Applies each module's DDL statement by statement.
"""

from __future__ import annotations

import sqlite3
from types import ModuleType
from typing import Iterable


def apply_all(
    cur: sqlite3.Cursor,
    *,
    modules: Iterable[ModuleType],
    now: str,
    schema_version: str,
) -> None:
    """Apply schema modules in order.

    Statements are executed one by one (not executescript) so that the
    caller's open transaction is not implicitly committed.
    """
    for m in modules:
        for stmt in _split_statements(m.ddl(now=now, schema_version=schema_version)):
            cur.execute(stmt)


def _split_statements(script: str) -> list[str]:
    out: list[str] = []
    buf = ""
    for line in script.splitlines(keepends=True):
        buf += line
        if sqlite3.complete_statement(buf):
            stmt = buf.strip()
            if stmt:
                out.append(stmt)
            buf = ""
    if buf.strip():
        out.append(buf.strip())
    return out
