"""Progression rules: stat clamping and promotion.

Promotion is deterministic. Leaving rank tier i requires:
    days_in_rank >= country.promotion_min_days[i]
    promotion_points >= country.promotion_min_points[i]
    morale >= country.min_morale and health >= country.min_health
    i < max rank index
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Tuple

from .config import GameConfig
from .rng import clamp
from .types import GameState

STAT_MIN = 0
STAT_MAX = 100


def apply_stat_deltas(
    state: GameState,
    *,
    money_cents: int = 0,
    morale: int = 0,
    health: int = 0,
    promotion_points: int = 0,
) -> GameState:
    """Apply deltas and clamp: morale/health to [0, 100], money and points to >= 0."""
    return replace(
        state,
        money_cents=max(0, int(state.money_cents) + int(money_cents)),
        morale=int(clamp(int(state.morale) + int(morale), STAT_MIN, STAT_MAX)),
        health=int(clamp(int(state.health) + int(health), STAT_MIN, STAT_MAX)),
        promotion_points=max(0, int(state.promotion_points) + int(promotion_points)),
    )


def promotion_requirements(state: GameState, cfg: GameConfig) -> Tuple[int, int]:
    """(min_days, min_points) to leave the current tier; 9999 past the table end."""
    country = cfg.country(state.country)
    idx = int(state.rank_index)
    req_days = country.promotion_min_days[idx] if idx < len(country.promotion_min_days) else 9999
    req_points = country.promotion_min_points[idx] if idx < len(country.promotion_min_points) else 9999
    return int(req_days), int(req_points)


def readiness_ok(state: GameState, cfg: GameConfig) -> bool:
    country = cfg.country(state.country)
    return state.morale >= country.min_morale and state.health >= country.min_health


def can_promote(state: GameState, cfg: GameConfig) -> bool:
    if state.rank_index >= cfg.max_rank_index(state.country):
        return False
    req_days, req_points = promotion_requirements(state, cfg)
    if state.days_in_rank < req_days or state.promotion_points < req_points:
        return False
    return readiness_ok(state, cfg)


def try_promotion(state: GameState, cfg: GameConfig) -> Tuple[GameState, bool]:
    """Promote one tier if eligible. Points carry over (minus the requirement) unless disabled."""
    if not can_promote(state, cfg):
        return state, False
    _, req_points = promotion_requirements(state, cfg)
    points = max(0, state.promotion_points - req_points) if cfg.carry_over_points else 0
    promoted = replace(
        state,
        rank_index=state.rank_index + 1,
        days_in_rank=0,
        promotion_points=points,
    )
    return apply_stat_deltas(promoted, morale=cfg.promotion_morale_bonus), True


@dataclass(frozen=True, slots=True)
class PromotionEvaluation:
    recommendation: str  # STRONG_RECOMMEND | RECOMMEND | HOLD | NOT_RECOMMENDED
    days_in_rank: int
    minimum_days: int
    merit_points: int
    minimum_points: int
    readiness_ok: bool
    at_max_rank: bool
    rejection_letter: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recommendation": self.recommendation,
            "days_in_rank": self.days_in_rank,
            "minimum_days": self.minimum_days,
            "merit_points": self.merit_points,
            "minimum_points": self.minimum_points,
            "readiness_ok": self.readiness_ok,
            "at_max_rank": self.at_max_rank,
            "rejection_letter": self.rejection_letter,
        }


def evaluate_promotion(state: GameState, cfg: GameConfig) -> PromotionEvaluation:
    """Board recommendation for the next tier, with a rejection letter when not granted."""
    req_days, req_points = promotion_requirements(state, cfg)
    at_max = state.rank_index >= cfg.max_rank_index(state.country)
    ready = readiness_ok(state, cfg)

    if at_max:
        rec = "NOT_RECOMMENDED"
        letter = "Promotion board notice: you already hold the highest tier open to your service track."
    elif can_promote(state, cfg):
        rec = "STRONG_RECOMMEND" if state.promotion_points >= req_points + 8 else "RECOMMEND"
        letter = None
    else:
        near_days = state.days_in_rank * 4 >= req_days * 3
        near_points = state.promotion_points * 4 >= req_points * 3
        rec = "HOLD" if near_days and near_points else "NOT_RECOMMENDED"
        gaps = []
        if state.days_in_rank < req_days:
            gaps.append(f"{req_days - state.days_in_rank} more day(s) in rank")
        if state.promotion_points < req_points:
            gaps.append(f"{req_points - state.promotion_points} more merit point(s)")
        if not ready:
            gaps.append("restored morale and health readiness")
        letter = "Promotion board notice: request deferred. Required: " + ", ".join(gaps) + "."

    return PromotionEvaluation(
        recommendation=rec,
        days_in_rank=int(state.days_in_rank),
        minimum_days=req_days,
        merit_points=int(state.promotion_points),
        minimum_points=req_points,
        readiness_ok=ready,
        at_max_rank=at_max,
        rejection_letter=letter,
    )
