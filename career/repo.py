"""DB access for profiles and game_states.

Pure cursor functions; the caller owns the transaction. The pause is stored in
flat columns and rebuilt into a single PauseState on load.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any, Dict, Optional

from .types import AwardHistory, Certificate, GameState, MissionBrief, PauseState, PendingDecision, RaiderCasualty

logger = logging.getLogger(__name__)
_WARN_COUNTS: Dict[str, int] = {}


def _warn_limited(code: str, msg: str, *, limit: int = 5) -> None:
    n = _WARN_COUNTS.get(code, 0)
    if n < limit:
        logger.warning("%s %s", code, msg)
    _WARN_COUNTS[code] = n + 1


def _json_dumps(obj: Any) -> str:
    return json.dumps(
        obj,
        ensure_ascii=False,
        separators=(",", ":"),
        sort_keys=True,
        default=str,
    )


def _json_loads(value: Any, default: Any):
    if value is None:
        return default
    if isinstance(value, (dict, list)):
        return value
    try:
        return json.loads(value)
    except (json.JSONDecodeError, TypeError):
        _warn_limited("JSON_DECODE_FAILED", f"value_preview={repr(str(value))[:120]}", limit=3)
        return default


def _str_tuple(value: Any) -> tuple:
    raw = _json_loads(value, [])
    if not isinstance(raw, list):
        return ()
    out = []
    for item in raw:
        s = str(item)
        if s not in out:
            out.append(s)
    return tuple(out)


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


def get_profile(cur: sqlite3.Cursor, profile_id: str) -> Optional[Dict[str, Any]]:
    row = cur.execute(
        "SELECT profile_id, name, country, branch, start_age, created_at FROM profiles WHERE profile_id=?;",
        (str(profile_id),),
    ).fetchone()
    return dict(row) if row else None


def insert_profile(
    cur: sqlite3.Cursor,
    *,
    profile_id: str,
    name: str,
    country: str,
    branch: str,
    start_age: int,
    now: str,
) -> None:
    cur.execute(
        """
        INSERT INTO profiles(profile_id, name, country, branch, start_age, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?);
        """,
        (str(profile_id), str(name), str(country), str(branch), int(start_age), str(now), str(now)),
    )


# ---------------------------------------------------------------------------
# Game state
# ---------------------------------------------------------------------------


def _pause_from_row(r: sqlite3.Row) -> Optional[PauseState]:
    reason = r["pause_reason"]
    if reason is None:
        return None
    decision = None
    if reason == "DECISION":
        payload = _json_loads(r["pending_event_json"], {})
        if r["pending_event_id"] is None or not isinstance(payload, dict):
            raise ValueError(f"game_states row has a DECISION pause without its decision (profile_id={r['profile_id']})")
        decision = PendingDecision.from_dict(int(r["pending_event_id"]), payload)
    return PauseState(
        reason=str(reason),
        token=str(r["pause_token"]),
        paused_at_ms=int(r["paused_at_ms"]),
        expires_at_ms=int(r["pause_expires_at_ms"]) if r["pause_expires_at_ms"] is not None else None,
        decision=decision,
    )


def _history_from_json(value: Any) -> Dict[str, AwardHistory]:
    raw = _json_loads(value, {})
    if not isinstance(raw, dict):
        return {}
    out: Dict[str, AwardHistory] = {}
    for name, item in raw.items():
        if not isinstance(item, dict):
            continue
        out[str(name)] = AwardHistory(
            medals=tuple(str(m) for m in (item.get("medals") or [])),
            ribbons=tuple(str(x) for x in (item.get("ribbons") or [])),
        )
    return out


def load_state(cur: sqlite3.Cursor, profile_id: str) -> Optional[GameState]:
    r = cur.execute(
        """
        SELECT g.*, p.name AS player_name, p.country, p.branch, p.start_age
        FROM game_states g
        JOIN profiles p ON p.profile_id = g.profile_id
        WHERE g.profile_id=?;
        """,
        (str(profile_id),),
    ).fetchone()
    if r is None:
        return None

    certificates = []
    for raw in _json_loads(r["certificate_inventory_json"], []) or []:
        try:
            certificates.append(Certificate.from_dict(raw))
        except (KeyError, TypeError, ValueError):
            _warn_limited("CERTIFICATE_DECODE_FAILED", f"profile_id={profile_id} raw={raw!r}")

    last_mission = None
    raw_mission = _json_loads(r["last_mission_json"], None)
    if raw_mission is not None:
        try:
            last_mission = MissionBrief.from_dict(raw_mission)
        except (KeyError, TypeError, ValueError):
            _warn_limited("MISSION_DECODE_FAILED", f"profile_id={profile_id} raw={raw_mission!r}")

    casualties = []
    for raw in _json_loads(r["raider_casualties_json"], []) or []:
        try:
            casualties.append(RaiderCasualty.from_dict(raw))
        except (KeyError, TypeError, ValueError):
            _warn_limited("RAIDER_CASUALTY_DECODE_FAILED", f"profile_id={profile_id} raw={raw!r}")

    recent = _json_loads(r["ceremony_recent_awards_json"], [])
    return GameState(
        profile_id=str(r["profile_id"]),
        player_name=str(r["player_name"]),
        country=str(r["country"]),
        branch=str(r["branch"]),
        start_age=int(r["start_age"]),
        current_day=int(r["current_day"]),
        server_reference_time_ms=int(r["server_reference_time_ms"]),
        rank_index=int(r["rank_index"]),
        money_cents=int(r["money_cents"]),
        morale=int(r["morale"]),
        health=int(r["health"]),
        promotion_points=int(r["promotion_points"]),
        days_in_rank=int(r["days_in_rank"]),
        player_position=str(r["player_position"]),
        player_division=str(r["player_division"]),
        next_event_day=int(r["next_event_day"]),
        last_mission_day=int(r["last_mission_day"]),
        pause=_pause_from_row(r),
        player_medals=_str_tuple(r["player_medals_json"]),
        player_ribbons=_str_tuple(r["player_ribbons_json"]),
        npc_award_history=_history_from_json(r["npc_award_history_json"]),
        game_time_scale=int(r["game_time_scale"]),
        ceremony_completed_day=int(r["ceremony_completed_day"]),
        ceremony_recent_awards=tuple(x for x in recent if isinstance(x, dict)) if isinstance(recent, list) else (),
        academy_tier=int(r["academy_tier"]),
        certificate_inventory=tuple(certificates),
        last_travel_place=str(r["last_travel_place"]),
        command_authority=int(r["command_authority"]),
        mission_participants=_str_tuple(r["mission_participants_json"]),
        last_mission=last_mission,
        raider_last_attack_day=int(r["raider_last_attack_day"]),
        raider_casualties=tuple(casualties),
        version=int(r["version"]),
    )


def get_state_version(cur: sqlite3.Cursor, profile_id: str) -> Optional[int]:
    row = cur.execute("SELECT version FROM game_states WHERE profile_id=?;", (str(profile_id),)).fetchone()
    return int(row["version"]) if row else None


def save_state(cur: sqlite3.Cursor, state: GameState, *, now: str) -> None:
    """Insert or overwrite the state row. `version` is written as given; callers bump it."""
    pause = state.pause
    decision = state.pending_decision
    cur.execute(
        """
        INSERT INTO game_states(
            profile_id, current_day, server_reference_time_ms,
            paused_at_ms, pause_reason, pause_token, pause_expires_at_ms,
            pending_event_id, pending_event_json,
            rank_index, money_cents, morale, health, promotion_points, days_in_rank,
            player_position, player_division, next_event_day, last_mission_day,
            player_medals_json, player_ribbons_json, npc_award_history_json, game_time_scale,
            ceremony_completed_day, ceremony_recent_awards_json, academy_tier,
            certificate_inventory_json, last_travel_place, command_authority,
            mission_participants_json, last_mission_json, raider_last_attack_day, raider_casualties_json,
            version, created_at, updated_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(profile_id) DO UPDATE SET
            current_day=excluded.current_day,
            server_reference_time_ms=excluded.server_reference_time_ms,
            paused_at_ms=excluded.paused_at_ms,
            pause_reason=excluded.pause_reason,
            pause_token=excluded.pause_token,
            pause_expires_at_ms=excluded.pause_expires_at_ms,
            pending_event_id=excluded.pending_event_id,
            pending_event_json=excluded.pending_event_json,
            rank_index=excluded.rank_index,
            money_cents=excluded.money_cents,
            morale=excluded.morale,
            health=excluded.health,
            promotion_points=excluded.promotion_points,
            days_in_rank=excluded.days_in_rank,
            player_position=excluded.player_position,
            player_division=excluded.player_division,
            next_event_day=excluded.next_event_day,
            last_mission_day=excluded.last_mission_day,
            player_medals_json=excluded.player_medals_json,
            player_ribbons_json=excluded.player_ribbons_json,
            npc_award_history_json=excluded.npc_award_history_json,
            game_time_scale=excluded.game_time_scale,
            ceremony_completed_day=excluded.ceremony_completed_day,
            ceremony_recent_awards_json=excluded.ceremony_recent_awards_json,
            academy_tier=excluded.academy_tier,
            certificate_inventory_json=excluded.certificate_inventory_json,
            last_travel_place=excluded.last_travel_place,
            command_authority=excluded.command_authority,
            mission_participants_json=excluded.mission_participants_json,
            last_mission_json=excluded.last_mission_json,
            raider_last_attack_day=excluded.raider_last_attack_day,
            raider_casualties_json=excluded.raider_casualties_json,
            version=excluded.version,
            updated_at=excluded.updated_at;
        """,
        (
            state.profile_id,
            int(state.current_day),
            int(state.server_reference_time_ms),
            pause.paused_at_ms if pause else None,
            pause.reason if pause else None,
            pause.token if pause else None,
            pause.expires_at_ms if pause else None,
            decision.event_id if decision else None,
            _json_dumps(decision.to_dict()) if decision else None,
            int(state.rank_index),
            int(state.money_cents),
            int(state.morale),
            int(state.health),
            int(state.promotion_points),
            int(state.days_in_rank),
            state.player_position,
            state.player_division,
            int(state.next_event_day),
            int(state.last_mission_day),
            _json_dumps(list(state.player_medals)),
            _json_dumps(list(state.player_ribbons)),
            _json_dumps({k: v.to_dict() for k, v in state.npc_award_history.items()}),
            int(state.game_time_scale),
            int(state.ceremony_completed_day),
            _json_dumps(list(state.ceremony_recent_awards)),
            int(state.academy_tier),
            _json_dumps([c.to_dict() for c in state.certificate_inventory]),
            state.last_travel_place,
            int(state.command_authority),
            _json_dumps(list(state.mission_participants)),
            _json_dumps(state.last_mission.to_dict()) if state.last_mission else None,
            int(state.raider_last_attack_day),
            _json_dumps([c.to_dict() for c in state.raider_casualties]),
            int(state.version),
            str(now),
            str(now),
        ),
    )
