"""Serialized view of a GameState as returned to clients."""

from __future__ import annotations

from typing import Any, Dict

import game_time
from ceremony.engine import ceremony_day, is_ceremony_due

from .actions import days_until_next_mission
from .config import GameConfig
from .rules import promotion_requirements
from .types import GameState


def build_snapshot(state: GameState, *, now_ms: int, cfg: GameConfig) -> Dict[str, Any]:
    req_days, req_points = promotion_requirements(state, cfg)
    pending = state.pending_decision
    return {
        "profile_id": state.profile_id,
        "player_name": state.player_name,
        "country": state.country,
        "branch": state.branch,
        "server_now_ms": int(now_ms),
        "server_reference_time_ms": state.server_reference_time_ms,
        "game_day": state.current_day,
        "in_game_date": game_time.to_in_game_date(state.current_day),
        "age": game_time.compute_age(state.start_age, state.current_day),
        "game_time_scale": state.game_time_scale,
        "ms_per_day": cfg.ms_per_day,
        "rank_index": state.rank_index,
        "rank_code": cfg.rank_label(state.rank_index),
        "money_cents": state.money_cents,
        "morale": state.morale,
        "health": state.health,
        "promotion_points": state.promotion_points,
        "days_in_rank": state.days_in_rank,
        "next_promotion": {"min_days": req_days, "min_points": req_points},
        "player_position": state.player_position,
        "player_division": state.player_division,
        "player_medals": list(state.player_medals),
        "player_ribbons": list(state.player_ribbons),
        "paused": state.paused,
        "pause_reason": state.pause_reason,
        "pause_token": state.pause_token,
        "pause_expires_at_ms": state.pause_expires_at_ms,
        "pending_decision": pending.to_dict() if pending is not None else None,
        "next_event_day": state.next_event_day,
        "last_mission_day": state.last_mission_day,
        "next_mission_in_days": days_until_next_mission(state, cfg),
        "ceremony_day": ceremony_day(state.current_day, cfg.ceremony),
        "ceremony_due": is_ceremony_due(state, cfg.ceremony),
        "ceremony_completed_day": state.ceremony_completed_day,
        "ceremony_recent_awards": list(state.ceremony_recent_awards),
        "academy_tier": state.academy_tier,
        "certificate_inventory": [c.to_dict() for c in state.certificate_inventory],
        "last_travel_place": state.last_travel_place,
        "command_authority": state.command_authority,
        "last_mission": state.last_mission.to_dict() if state.last_mission is not None else None,
        "raider_last_attack_day": state.raider_last_attack_day,
        "version": state.version,
    }
