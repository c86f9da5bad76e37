"""Raider attacks on the base.

Threat comes from the player's readiness, command authority and the roster's
condition. Once the attack window opens, the player leads the defense: the
most exhausted and least committed personnel fall, each one queues a
replacement, and the player pays in morale, health and authority.
"""

from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import Any, Dict, List, Sequence, Tuple

from npcs.lifecycle import mark_kia
from npcs.types import NpcRuntime, RecruitmentTicket

from .errors import NO_DEFENDERS, RAIDERS_NOT_READY, PreconditionError
from .pause import ensure_actionable
from .rng import clamp
from .rules import apply_stat_deltas
from .types import GameState, RaiderCasualty

logger = logging.getLogger(__name__)

FIRST_ATTACK_DAY = 3
CASUALTY_HISTORY_LIMIT = 20


def threat_score(state: GameState, roster: Sequence[NpcRuntime]) -> int:
    alive = [n for n in roster if n.alive]
    avg_fatigue = sum(n.fatigue for n in alive) / len(alive) if alive else 0.0
    avg_loyalty = sum(n.loyalty for n in alive) / len(alive) if alive else 0.0
    instability = ((100 - state.morale) + (100 - state.health)) / 2
    return int(
        clamp(
            round(
                instability * 0.32
                + (100 - state.command_authority) * 0.34
                + avg_fatigue * 0.16
                + (100 - avg_loyalty) * 0.18
            ),
            0,
            100,
        )
    )


def threat_level(score: int) -> str:
    if score >= 75:
        return "HIGH"
    if score >= 50:
        return "MEDIUM"
    return "LOW"


def cadence_days(score: int) -> int:
    if score >= 75:
        return 7
    if score >= 50:
        return 9
    return 11


def next_attack_day(state: GameState, score: int) -> int:
    if state.raider_last_attack_day > 0:
        return state.raider_last_attack_day + cadence_days(score)
    return FIRST_ATTACK_DAY


def raider_outlook(state: GameState, roster: Sequence[NpcRuntime], *, pending_replacements: int = 0) -> Dict[str, Any]:
    score = threat_score(state, roster)
    nxt = next_attack_day(state, score)
    return {
        "threat_level": threat_level(score),
        "threat_score": score,
        "cadence_days": cadence_days(score),
        "last_attack_day": state.raider_last_attack_day or None,
        "next_attack_day": nxt,
        "days_until_next": max(0, nxt - state.current_day),
        "pending_replacement_count": int(pending_replacements),
        "recent_casualties": [c.to_dict() for c in state.raider_casualties],
    }


def casualty_target(score: int, rng: random.Random) -> int:
    if score >= 82:
        return min(4, 2 + int(rng.random() * 3))
    if score >= 65:
        return min(3, 1 + int(rng.random() * 2))
    return min(2, 1 + int(rng.random() * 2))


def _exposure(npc: NpcRuntime) -> float:
    return npc.fatigue * 0.55 + (100 - npc.loyalty) * 0.35 + (100 - npc.competence) * 0.1


def resolve_raider_defense(
    state: GameState,
    *,
    roster: Sequence[NpcRuntime],
    rng: random.Random,
) -> Tuple[GameState, List[Tuple[NpcRuntime, RecruitmentTicket]], Dict[str, Any]]:
    """Resolve the due raider attack.

    Returns the new state, (fallen NPC, replacement ticket) pairs for the caller
    to persist, and the action details.
    """
    ensure_actionable(state)
    alive = sorted((n for n in roster if n.alive), key=lambda n: (n.slot, n.generation))
    if not alive:
        raise PreconditionError(NO_DEFENDERS, "No personnel on active duty to defend the base.")

    score = threat_score(state, alive)
    due = next_attack_day(state, score)
    if state.current_day < due:
        raise PreconditionError(
            RAIDERS_NOT_READY,
            f"No raider activity yet. Next attack window opens in {due - state.current_day} in-game day(s).",
            {"next_attack_day": due, "days_until_next": due - state.current_day},
        )

    target = min(len(alive), casualty_target(score, rng))
    # sorted() is stable: equal exposure keeps slot order.
    victims = sorted(alive, key=lambda n: -_exposure(n))[:target]
    day = state.current_day
    fallen: List[Tuple[NpcRuntime, RecruitmentTicket]] = [mark_kia(n, day=day) for n in victims]
    n = len(fallen)

    high = score >= 75
    new_state = apply_stat_deltas(state, morale=-(2 + 2 * n + (2 if high else 0)), health=-(1 + n))
    records = tuple(
        RaiderCasualty(slot=npc.slot, npc_name=npc.name, division=npc.division, unit=npc.unit, role=npc.position, day=day)
        for npc, _ in fallen
    )
    new_state = replace(
        new_state,
        command_authority=int(clamp(new_state.command_authority - (2 + n), 0, 100)),
        raider_last_attack_day=day,
        raider_casualties=(state.raider_casualties + records)[-CASUALTY_HISTORY_LIMIT:],
    )
    severity = threat_level(score)
    survivors = [npc for npc in alive if npc not in victims]
    next_day = next_attack_day(new_state, threat_score(new_state, survivors))
    logger.info(
        "RAIDER_ATTACK profile_id=%s day=%s severity=%s threat=%s casualties=%s",
        state.profile_id,
        day,
        severity,
        score,
        n,
    )
    return new_state, fallen, {
        "type": "RAIDER_DEFENSE",
        "severity": severity,
        "threat_score": score,
        "next_attack_day": next_day,
        "days_until_next": next_day - day,
        "casualties": [
            dict(c.to_dict(), npc_id=npc.npc_id, replacement_due_day=ticket.due_day)
            for c, (npc, ticket) in zip(records, fallen)
        ],
        "morale": new_state.morale,
        "health": new_state.health,
        "command_authority": new_state.command_authority,
    }
