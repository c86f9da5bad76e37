"""DB access for the event pool and the decision log.

Pure cursor functions; the caller owns the transaction.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .types import EventCandidate, EventDefinition, EventEffects, EventOption

logger = logging.getLogger(__name__)

MAX_LOG_PAGE = 50


def _json_dumps(obj: Any) -> str:
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"), sort_keys=True, default=str)


def _json_loads(value: Any, default: Any) -> Any:
    if value is None:
        return default
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        logger.warning("decision repo: undecodable JSON column, using default")
        return default


def _options_from_json(raw: Any) -> Tuple[EventOption, ...]:
    out = []
    for item in _json_loads(raw, []) or []:
        if not isinstance(item, dict) or not item.get("id"):
            continue
        out.append(
            EventOption(
                id=str(item["id"]),
                label=str(item.get("label") or item["id"]),
                effects=EventEffects.from_dict(item.get("effects") or {}),
            )
        )
    return tuple(out)


def _event_from_row(row: sqlite3.Row) -> EventDefinition:
    return EventDefinition(
        id=int(row["id"]),
        code=str(row["code"]),
        country=str(row["country"]),
        branch=str(row["branch"]),
        rank_min=int(row["rank_min"]),
        rank_max=int(row["rank_max"]),
        base_weight=float(row["base_weight"]),
        cooldown_days=int(row["cooldown_days"]),
        title=str(row["title"]),
        description=str(row["description"]),
        options=_options_from_json(row["options_json"]),
        is_active=bool(row["is_active"]),
    )


def seed_events(cur: sqlite3.Cursor, events: Sequence[EventDefinition], *, now: str) -> int:
    """Insert catalog rows that are not present yet (matched by code). Returns rows inserted."""
    inserted = 0
    for ev in events:
        cur.execute(
            """
            INSERT OR IGNORE INTO events(
                code, country, branch, rank_min, rank_max, base_weight, cooldown_days,
                title, description, options_json, is_active, created_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
            """,
            (
                ev.code,
                ev.country,
                ev.branch,
                int(ev.rank_min),
                int(ev.rank_max),
                float(ev.base_weight),
                int(ev.cooldown_days),
                ev.title,
                ev.description,
                _json_dumps([o.to_dict() for o in ev.options]),
                1 if ev.is_active else 0,
                str(now),
            ),
        )
        inserted += int(cur.rowcount or 0)
    return inserted


def get_event_by_id(cur: sqlite3.Cursor, event_id: int) -> Optional[EventDefinition]:
    row = cur.execute("SELECT * FROM events WHERE id=?;", (int(event_id),)).fetchone()
    return _event_from_row(row) if row else None


def fetch_candidate_events(
    cur: sqlite3.Cursor,
    *,
    profile_id: str,
    country: str,
    branch: str,
    rank_index: int,
) -> List[EventCandidate]:
    """Active events for (country, branch, rank), with the last day each was resolved by the profile."""
    rows = cur.execute(
        """
        SELECT e.*, (
            SELECT MAX(l.game_day) FROM decision_logs l
            WHERE l.profile_id = ? AND l.event_id = e.id
        ) AS last_seen_day
        FROM events e
        WHERE e.is_active = 1
          AND e.country = ?
          AND e.branch = ?
          AND e.rank_min <= ?
          AND e.rank_max >= ?
        ORDER BY e.id ASC;
        """,
        (str(profile_id), str(country), str(branch), int(rank_index), int(rank_index)),
    ).fetchall()
    out: List[EventCandidate] = []
    for r in rows:
        last = r["last_seen_day"]
        out.append(EventCandidate(event=_event_from_row(r), last_seen_day=int(last) if last is not None else -9999))
    return out


def insert_decision_log(
    cur: sqlite3.Cursor,
    *,
    profile_id: str,
    event_id: int,
    game_day: int,
    selected_option: str,
    consequences: Dict[str, Any],
    state_before: Dict[str, Any],
    state_after: Dict[str, Any],
    now: str,
) -> int:
    cur.execute(
        """
        INSERT INTO decision_logs(
            profile_id, event_id, game_day, selected_option,
            consequences_json, state_before_json, state_after_json, created_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?);
        """,
        (
            str(profile_id),
            int(event_id),
            int(game_day),
            str(selected_option),
            _json_dumps(consequences),
            _json_dumps(state_before),
            _json_dumps(state_after),
            str(now),
        ),
    )
    return int(cur.lastrowid)


def list_decision_logs(
    cur: sqlite3.Cursor,
    *,
    profile_id: str,
    cursor: Optional[int] = None,
    limit: int = 20,
) -> Tuple[List[Dict[str, Any]], Optional[int]]:
    """Newest first. `cursor` is exclusive (id < cursor). Returns (items, next_cursor)."""
    limit = max(1, min(MAX_LOG_PAGE, int(limit)))
    params: List[Any] = [str(profile_id)]
    where = "profile_id = ?"
    if cursor is not None:
        where += " AND id < ?"
        params.append(int(cursor))
    params.append(limit)
    rows = cur.execute(
        f"""
        SELECT id, event_id, game_day, selected_option, consequences_json,
               state_before_json, state_after_json, created_at
        FROM decision_logs
        WHERE {where}
        ORDER BY id DESC
        LIMIT ?;
        """,
        params,
    ).fetchall()
    items = [
        {
            "id": int(r["id"]),
            "event_id": int(r["event_id"]),
            "game_day": int(r["game_day"]),
            "selected_option": str(r["selected_option"]),
            "consequences": _json_loads(r["consequences_json"], {}),
            "state_before": _json_loads(r["state_before_json"], {}),
            "state_after": _json_loads(r["state_after_json"], {}),
            "created_at": r["created_at"],
        }
        for r in rows
    ]
    next_cursor = items[-1]["id"] if len(items) == limit else None
    return items, next_cursor


def delete_decision_logs(cur: sqlite3.Cursor, *, profile_id: str) -> int:
    cur.execute("DELETE FROM decision_logs WHERE profile_id=?;", (str(profile_id),))
    return int(cur.rowcount or 0)
