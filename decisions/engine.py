"""Random decision events: queueing on day boundaries and resolving the player's choice.

Queueing (lazy, on a state-reading request):
  1) skip if a system pause is active or current_day < next_event_day
  2) one Bernoulli(chance) roll per elapsed day; a miss reschedules to tomorrow
  3) filter the pool (country, branch, active, rank window, cooldown), order by id
  4) sample_weighted on base_weight -> PendingDecision + forced DECISION pause
  5) nothing eligible -> reschedule by a geometric gap
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from career.config import GameConfig
from career.errors import (
    DECISION_MISMATCH,
    EVENT_NOT_FOUND,
    OPTION_NOT_FOUND,
    ConflictError,
    NotFoundError,
)
from career.pause import force_pause, new_pause_token, release_pause, TokenFactory
from career.progress import synchronize_progress
from career.rng import clamp, roll, sample_geometric_gap, sample_weighted
from career.rules import apply_stat_deltas, try_promotion
from career.types import DecisionOptionPreview, GameState, PendingDecision

from .types import EventCandidate, EventDefinition, EventEffects

logger = logging.getLogger(__name__)


def event_chance(state: GameState, cfg: GameConfig) -> float:
    lo, hi = cfg.event_chance_bounds
    country = cfg.country(state.country)
    branch = cfg.branch(state.branch)
    return float(clamp(country.daily_event_probability * branch.event_chance_modifier, lo, hi))


def next_event_gap(state: GameState, cfg: GameConfig, rng: random.Random) -> int:
    lo, hi = cfg.event_gap_bounds
    return sample_geometric_gap(event_chance(state, cfg), lo, hi, rng)


def impact_scope(effects: EventEffects) -> str:
    if effects.promotion_points + effects.morale >= 4 or abs(effects.money) >= 1200:
        return "ORGANIZATION"
    return "SELF"


def effect_preview(effects: EventEffects) -> str:
    dollars = int((effects.money + 50) // 100) if effects.money >= 0 else -int((-effects.money + 50) // 100)
    return f"Δ${dollars} · M {effects.morale} · H {effects.health} · P {effects.promotion_points}"


def materialize_decision(event: EventDefinition, state: GameState, chance: float, cfg: GameConfig) -> PendingDecision:
    return PendingDecision(
        event_id=int(event.id),
        title=event.title,
        description=event.description,
        chance_percent=int(chance * 100 + 0.5),
        condition_label=(
            f"Rank {cfg.rank_label(state.rank_index)} · Day {state.current_day} · "
            f"Readiness {state.health}/{state.morale}"
        ),
        options=tuple(
            DecisionOptionPreview(
                id=opt.id,
                label=opt.label,
                impact_scope=impact_scope(opt.effects),
                effect_preview=effect_preview(opt.effects),
            )
            for opt in event.options
        ),
    )


def eligible_events(state: GameState, candidates: Sequence[EventCandidate]) -> List[EventDefinition]:
    out = []
    for cand in sorted(candidates, key=lambda c: int(c.event.id)):
        ev = cand.event
        if not ev.is_active:
            continue
        if ev.country != state.country or ev.branch != state.branch:
            continue
        if not (ev.rank_min <= state.rank_index <= ev.rank_max):
            continue
        if state.current_day - int(cand.last_seen_day) < ev.cooldown_days:
            continue
        out.append(ev)
    return out


def maybe_queue_decision(
    state: GameState,
    candidates: Sequence[EventCandidate],
    *,
    cfg: GameConfig,
    rng: random.Random,
    now_ms: int,
    token_factory: TokenFactory = new_pause_token,
) -> Tuple[GameState, Optional[PendingDecision]]:
    if state.pause is not None and state.pause.is_blocking:
        return state, None
    if state.current_day < state.next_event_day:
        return state, None

    chance = event_chance(state, cfg)
    triggered = False
    for _day in range(state.next_event_day, state.current_day + 1):
        if roll(chance, rng):
            triggered = True
            break
    if not triggered:
        return replace(state, next_event_day=state.current_day + 1), None

    pool = eligible_events(state, candidates)
    picked = sample_weighted([(ev, ev.base_weight) for ev in pool], rng) if pool else None
    if picked is None:
        return replace(state, next_event_day=state.current_day + next_event_gap(state, cfg, rng)), None

    decision = materialize_decision(picked, state, chance, cfg)
    logger.info(
        "DECISION_QUEUED profile_id=%s event_id=%s code=%s day=%s",
        state.profile_id,
        picked.id,
        picked.code,
        state.current_day,
    )
    return force_pause(state, "DECISION", now_ms=now_ms, decision=decision, token_factory=token_factory), decision


def state_for_log(state: GameState) -> Dict[str, Any]:
    return {
        "current_day": state.current_day,
        "server_reference_time_ms": state.server_reference_time_ms,
        "rank_index": state.rank_index,
        "money_cents": state.money_cents,
        "morale": state.morale,
        "health": state.health,
        "promotion_points": state.promotion_points,
        "days_in_rank": state.days_in_rank,
        "next_event_day": state.next_event_day,
        "pending_event_id": state.pending_decision.event_id if state.pending_decision else None,
        "pause_reason": state.pause_reason,
        "last_mission_day": state.last_mission_day,
    }


@dataclass(frozen=True, slots=True)
class DecisionLogDraft:
    event_id: int
    game_day: int
    selected_option: str
    consequences: Dict[str, Any]
    state_before: Dict[str, Any]
    state_after: Dict[str, Any]


def resolve_decision_choice(
    state: GameState,
    event_id: int,
    option_id: str,
    event: Optional[EventDefinition],
    *,
    cfg: GameConfig,
    rng: random.Random,
    now_ms: int,
) -> Tuple[GameState, Dict[str, Any], DecisionLogDraft]:
    """Apply the chosen option, release the DECISION pause and reschedule, atomically."""
    pending = state.pending_decision
    if pending is None or int(pending.event_id) != int(event_id):
        raise ConflictError(
            DECISION_MISMATCH,
            "Pending decision changed on server." if pending is not None else "No pending decision available.",
            {"pending_event_id": pending.event_id if pending else None},
        )
    if event is None:
        raise NotFoundError(EVENT_NOT_FOUND, f"Event not found: {event_id}", {"event_id": int(event_id)})
    option = event.option(option_id)
    if option is None:
        raise NotFoundError(OPTION_NOT_FOUND, f"Option not found: {option_id!r}", {"option_id": str(option_id)})

    before = state_for_log(state)
    fx = option.effects
    new_state = apply_stat_deltas(
        state,
        money_cents=fx.money,
        morale=fx.morale,
        health=fx.health,
        promotion_points=fx.promotion_points,
    )
    new_state, promoted = try_promotion(new_state, cfg)
    new_state = replace(new_state, next_event_day=new_state.current_day + next_event_gap(new_state, cfg, rng))
    new_state = release_pause(new_state, now_ms=now_ms)
    new_state, _ = synchronize_progress(new_state, now_ms=now_ms, cfg=cfg)

    applied = {
        "money_delta": fx.money,
        "morale_delta": fx.morale,
        "health_delta": fx.health,
        "promotion_point_delta": fx.promotion_points,
    }
    draft = DecisionLogDraft(
        event_id=int(event_id),
        game_day=new_state.current_day,
        selected_option=option.id,
        consequences=applied,
        state_before=before,
        state_after=state_for_log(new_state),
    )
    result = {
        "applied": applied,
        "promoted": promoted,
        "new_rank_code": cfg.rank_label(new_state.rank_index),
    }
    return new_state, result, draft
