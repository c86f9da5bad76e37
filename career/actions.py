"""Action resolvers: training, deployment, career review, travel.

Contract: resolve_*(state, params, *, cfg, rng, ...) -> (new_state, details).
The input state is never mutated. A resolver raises PreconditionError when
the current state forbids the action and ValidationError for bad params.
"""

from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import Any, Dict, Optional, Sequence, Tuple

from npcs.lifecycle import pick_mission_squad
from npcs.types import NpcRuntime

from .config import GameConfig
from .errors import (
    ALREADY_AT_PLACE,
    INSUFFICIENT_FUNDS,
    INVALID_INPUT,
    MISSION_COOLDOWN,
    PreconditionError,
    ValidationError,
)
from .missions import generate_mission, with_participant_stats
from .pause import ensure_actionable
from .progress import advance_game_days
from .rng import rand_between, roll
from .rules import apply_stat_deltas, evaluate_promotion, try_promotion
from .types import GameState

logger = logging.getLogger(__name__)

MISSION_TYPES = ("PATROL", "SUPPORT")


def normalize_choice(value: Any, allowed, *, field: str) -> str:
    s = str(value or "").strip().upper()
    if s not in allowed:
        raise ValidationError(INVALID_INPUT, f"Invalid {field}: {value!r}", {"field": field, "allowed": list(allowed)})
    return s


def require_funds(state: GameState, cost_cents: int, *, what: str) -> None:
    if int(cost_cents) > state.money_cents:
        raise PreconditionError(
            INSUFFICIENT_FUNDS,
            f"Insufficient funds for {what}.",
            {"cost_cents": int(cost_cents), "money_cents": state.money_cents},
        )


# ---------------------------------------------------------------------------
# Training
# ---------------------------------------------------------------------------


def resolve_training(
    state: GameState,
    intensity: str,
    *,
    cfg: GameConfig,
    rng: random.Random,
) -> Tuple[GameState, Dict[str, Any]]:
    """Point-in-time drill. Does not advance the day."""
    ensure_actionable(state)
    intensity = normalize_choice(intensity, tuple(cfg.training), field="intensity")
    profile = cfg.training[intensity]
    require_funds(state, profile.cost_cents, what=f"{intensity} training")

    new_state = apply_stat_deltas(
        state,
        money_cents=-profile.cost_cents,
        health=profile.health,
        morale=profile.morale,
        promotion_points=profile.points,
    )

    injury = roll(profile.injury_chance, rng)
    health_loss = morale_loss = 0
    if injury:
        health_loss = rand_between(*cfg.training_injury_health_loss, rng)
        morale_loss = rand_between(*cfg.training_injury_morale_loss, rng)
        new_state = apply_stat_deltas(new_state, health=-health_loss, morale=-morale_loss)

    new_state, promoted = try_promotion(new_state, cfg)
    return new_state, {
        "type": "TRAINING",
        "intensity": intensity,
        "cost_cents": profile.cost_cents,
        "injury": injury,
        "injury_health_loss": health_loss,
        "injury_morale_loss": morale_loss,
        "promoted": promoted,
        "rank_code": cfg.rank_label(new_state.rank_index),
    }


# ---------------------------------------------------------------------------
# Deployment
# ---------------------------------------------------------------------------


def days_until_next_mission(state: GameState, cfg: GameConfig) -> int:
    since = max(0, state.current_day - state.last_mission_day)
    return max(0, cfg.mission_cooldown_days - since)


def resolve_deployment(
    state: GameState,
    mission_type: str,
    duration_days: Optional[int] = None,
    *,
    cfg: GameConfig,
    rng: random.Random,
    roster: Sequence[NpcRuntime] = (),
) -> Tuple[GameState, Dict[str, Any]]:
    """Run a mission: rolls, rewards/penalties, day advancement, squad and casualty selection.

    The casualty (if any) is reported by npc_id; the caller applies the NPC lifecycle.
    """
    ensure_actionable(state)
    mission_type = normalize_choice(mission_type, MISSION_TYPES, field="mission_type")
    lo, hi = cfg.mission_duration_bounds
    duration = cfg.default_mission_duration_days if duration_days is None else duration_days
    if isinstance(duration, bool) or not isinstance(duration, int) or not (lo <= duration <= hi):
        raise ValidationError(
            INVALID_INPUT,
            f"mission duration must be an integer in [{lo}, {hi}]",
            {"field": "duration_days", "value": duration_days},
        )

    wait = days_until_next_mission(state, cfg)
    if wait > 0:
        raise PreconditionError(
            MISSION_COOLDOWN,
            f"Mission assignment not ready. Next assignment available in {wait} in-game day(s).",
            {"days_until_next_mission": wait},
        )

    mission = generate_mission(state, mission_type)
    profile = cfg.branch(state.branch).deployment(mission_type)
    injured = roll(profile.injury_chance, rng)
    succeeded = roll(profile.success_chance, rng)

    if succeeded:
        reward = rand_between(*profile.reward_cents, rng)
        points = rand_between(*profile.promotion_points, rng)
    else:
        reward = rand_between(*cfg.failed_mission_reward_cents, rng)
        points = rand_between(0, max(profile.promotion_points[1] - 2, 1), rng)
    if injured:
        health_loss = rand_between(*profile.health_loss, rng)
        morale_loss = rand_between(*profile.morale_loss, rng)
    else:
        health_loss = rand_between(*cfg.minor_loss_range, rng)
        morale_loss = rand_between(*cfg.minor_loss_range, rng)

    squad = pick_mission_squad(roster, profile_id=state.profile_id, day=state.current_day, mission_type=mission_type)
    mission = with_participant_stats(mission, state, squad)
    casualty: Optional[NpcRuntime] = None
    if squad and injured and not succeeded and roll(cfg.casualty_chance, rng):
        casualty = squad[rng.randrange(len(squad))]

    new_state = apply_stat_deltas(
        state,
        money_cents=reward,
        health=-health_loss,
        morale=-morale_loss,
        promotion_points=points,
    )
    new_state, advanced = advance_game_days(new_state, duration, cfg=cfg)
    new_state = replace(
        new_state,
        last_mission_day=new_state.current_day,
        mission_participants=tuple(n.name for n in squad),
        last_mission=mission,
    )
    new_state, promoted = try_promotion(new_state, cfg)

    if casualty is not None:
        logger.info("MISSION_CASUALTY profile_id=%s npc_id=%s day=%s", state.profile_id, casualty.npc_id, new_state.current_day)

    return new_state, {
        "type": "DEPLOYMENT",
        "mission_type": mission_type,
        "mission_id": mission.mission_id,
        "terrain": mission.terrain,
        "objective": mission.objective,
        "enemy_strength": mission.enemy_strength,
        "difficulty_rating": mission.difficulty_rating,
        "equipment_quality": mission.equipment_quality,
        "succeeded": succeeded,
        "injured": injured,
        "reward_cents": reward,
        "health_loss": health_loss,
        "morale_loss": morale_loss,
        "promotion_points": points,
        "mission_duration_days": duration,
        "advanced_days": advanced,
        "next_mission_in_days": cfg.mission_cooldown_days,
        "participants": [n.npc_id for n in squad],
        "participant_stats": [p.to_dict() for p in mission.participant_stats],
        "casualty_npc_id": casualty.npc_id if casualty is not None else None,
        "promoted": promoted,
        "rank_code": cfg.rank_label(new_state.rank_index),
        "promotion_recommendation": "PROMOTION_CONFIRMED"
        if promoted
        else evaluate_promotion(new_state, cfg).recommendation,
    }


# ---------------------------------------------------------------------------
# Career review
# ---------------------------------------------------------------------------


def resolve_career_review(state: GameState, *, cfg: GameConfig) -> Tuple[GameState, Dict[str, Any]]:
    """Promotion board. A refusal costs a little morale."""
    ensure_actionable(state)
    evaluation = evaluate_promotion(state, cfg)
    new_state, promoted = try_promotion(state, cfg)
    if not promoted:
        new_state = apply_stat_deltas(new_state, morale=-cfg.review_refusal_morale_penalty)
    details = {"type": "CAREER_REVIEW", "promoted": promoted, "rank_code": cfg.rank_label(new_state.rank_index)}
    details.update(evaluation.to_dict())
    if promoted:
        details["rejection_letter"] = None
    return new_state, details


# ---------------------------------------------------------------------------
# Travel
# ---------------------------------------------------------------------------


def resolve_travel(state: GameState, place: str, *, cfg: GameConfig) -> Tuple[GameState, Dict[str, Any]]:
    ensure_actionable(state)
    place = normalize_choice(place, tuple(cfg.travel), field="place")
    if place == state.last_travel_place:
        raise PreconditionError(ALREADY_AT_PLACE, f"Already stationed at {place}.", {"place": place})
    profile = cfg.travel[place]
    require_funds(state, profile.cost_cents, what=f"travel to {place}")

    new_state = apply_stat_deltas(
        state,
        money_cents=-profile.cost_cents,
        morale=profile.morale,
        health=profile.health,
    )
    new_state, advanced = advance_game_days(new_state, profile.days, cfg=cfg)
    new_state = replace(new_state, last_travel_place=place)
    return new_state, {
        "type": "TRAVEL",
        "place": place,
        "from_place": state.last_travel_place,
        "cost_cents": profile.cost_cents,
        "advanced_days": advanced,
    }
