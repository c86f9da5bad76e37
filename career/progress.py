"""Clock-driven progression: day sync, explicit day advancement, time scale, fresh worlds."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Tuple

import game_time
from config import ALLOWED_TIME_SCALES

from .config import GameConfig
from .errors import INVALID_INPUT, ValidationError
from .types import GameState

logger = logging.getLogger(__name__)


def _accrue_days(state: GameState, days: int, cfg: GameConfig) -> GameState:
    salary = cfg.branch(state.branch).salary_for_rank(state.rank_index)
    return replace(
        state,
        current_day=state.current_day + days,
        money_cents=state.money_cents + salary * days,
        days_in_rank=state.days_in_rank + days,
    )


def target_day(state: GameState, *, now_ms: int, cfg: GameConfig) -> int:
    """Day implied by the clock. Frozen at paused_at while paused."""
    effective_now = state.pause.paused_at_ms if state.pause is not None else int(now_ms)
    return game_time.compute_game_day(
        effective_now,
        state.server_reference_time_ms,
        ms_per_day=cfg.ms_per_day,
        time_scale=state.game_time_scale,
    )


def synchronize_progress(state: GameState, *, now_ms: int, cfg: GameConfig) -> Tuple[GameState, int]:
    """Catch current_day up with the clock (never backwards). Salary and tenure accrue per day."""
    elapsed = max(0, target_day(state, now_ms=now_ms, cfg=cfg) - state.current_day)
    if elapsed == 0:
        return state, 0
    return _accrue_days(state, elapsed, cfg), elapsed


def advance_game_days(state: GameState, days: int, *, cfg: GameConfig) -> Tuple[GameState, int]:
    """Advance the day counter explicitly (missions, travel, academy).

    The reference anchor is left alone. Until real time catches up, the clock
    implies a day below current_day and sync (which never moves backwards)
    adds nothing, so the jump is absorbed by the live clock.
    """
    advanced = max(0, int(days))
    if advanced == 0:
        return state, 0
    return _accrue_days(state, advanced, cfg), advanced


def set_time_scale(state: GameState, scale: int, *, now_ms: int, cfg: GameConfig) -> GameState:
    """Switch 1x/3x: re-anchor so the clock keeps implying the same day.

    The anchor is derived from the clock day, not current_day, so a stall left
    by an explicit day advance survives the switch.
    """
    try:
        value = int(scale)
    except (TypeError, ValueError):
        value = -1
    if value not in ALLOWED_TIME_SCALES:
        raise ValidationError(INVALID_INPUT, f"Invalid time scale: {scale!r}", {"allowed": list(ALLOWED_TIME_SCALES)})
    if value == state.game_time_scale:
        return state
    effective_now = state.pause.paused_at_ms if state.pause is not None else int(now_ms)
    clock_day = min(state.current_day, target_day(state, now_ms=now_ms, cfg=cfg))
    anchor = effective_now - game_time.ms_to_reanchor(clock_day, ms_per_day=cfg.ms_per_day, time_scale=value)
    logger.info("TIME_SCALE profile_id=%s %s->%s day=%s", state.profile_id, state.game_time_scale, value, state.current_day)
    return replace(state, game_time_scale=value, server_reference_time_ms=anchor)


def new_game_state(
    *,
    profile_id: str,
    player_name: str,
    country: str,
    branch: str,
    start_age: int,
    now_ms: int,
    cfg: GameConfig,
) -> GameState:
    """Day-0 state for a new profile."""
    return GameState(
        profile_id=str(profile_id),
        player_name=str(player_name),
        country=str(country),
        branch=str(branch),
        start_age=int(start_age),
        current_day=0,
        server_reference_time_ms=int(now_ms),
        rank_index=0,
        money_cents=0,
        morale=cfg.start_morale,
        health=cfg.start_health,
        promotion_points=0,
        days_in_rank=0,
        player_position=cfg.start_position,
        player_division=cfg.country(country).start_division,
        next_event_day=cfg.start_next_event_day,
        last_mission_day=cfg.start_last_mission_day,
        command_authority=cfg.start_command_authority,
        last_travel_place=cfg.start_place,
    )


def restart_world(state: GameState, *, now_ms: int, cfg: GameConfig) -> GameState:
    """Reset progression to day 0. Profile identity and time scale are kept."""
    fresh = new_game_state(
        profile_id=state.profile_id,
        player_name=state.player_name,
        country=state.country,
        branch=state.branch,
        start_age=state.start_age,
        now_ms=now_ms,
        cfg=cfg,
    )
    return replace(fresh, game_time_scale=state.game_time_scale, version=state.version)
