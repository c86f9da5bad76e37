"""Social interactions with NPCs and command actions over them."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Mapping, Optional, Tuple

from npcs.lifecycle import adjust_npc, require_npc
from npcs.registry import bump_position
from npcs.types import NpcRuntime

from .actions import normalize_choice, require_funds
from .config import GameConfig
from .errors import RANK_TOO_LOW, TARGET_REQUIRED, PreconditionError
from .pause import ensure_actionable
from .rng import clamp
from .rules import apply_stat_deltas
from .types import GameState


def resolve_social_interaction(
    state: GameState,
    npc_id: str,
    interaction: str,
    *,
    roster: Mapping[str, NpcRuntime],
    cfg: GameConfig,
) -> Tuple[GameState, NpcRuntime, Dict[str, Any]]:
    ensure_actionable(state)
    interaction = normalize_choice(interaction, tuple(cfg.interactions), field="interaction")
    npc = require_npc(roster, npc_id)
    profile = cfg.interactions[interaction]
    require_funds(state, profile.cost_cents, what=interaction.lower())

    new_state = apply_stat_deltas(
        state,
        money_cents=-profile.cost_cents,
        morale=profile.morale,
        health=profile.health,
        promotion_points=profile.points,
    )
    new_npc = adjust_npc(
        npc,
        competence=profile.npc_competence,
        loyalty=profile.npc_loyalty,
        fatigue=profile.npc_fatigue,
        relation=profile.relation,
    )
    return new_state, new_npc, {
        "type": "SOCIAL_INTERACTION",
        "interaction": interaction,
        "npc_id": new_npc.npc_id,
        "npc_name": new_npc.name,
        "relation_to_player": new_npc.relation_to_player,
        "cost_cents": profile.cost_cents,
    }


def resolve_command_action(
    state: GameState,
    action: str,
    target_npc_id: Optional[str] = None,
    *,
    roster: Mapping[str, NpcRuntime],
    cfg: GameConfig,
    note: Optional[str] = None,
) -> Tuple[GameState, Optional[NpcRuntime], Dict[str, Any]]:
    ensure_actionable(state)
    action = normalize_choice(action, tuple(cfg.commands), field="action")
    profile = cfg.commands[action]
    if state.rank_index < profile.min_rank:
        raise PreconditionError(
            RANK_TOO_LOW,
            f"{action} requires rank {cfg.rank_label(profile.min_rank)} or higher.",
            {"min_rank": profile.min_rank, "rank_index": state.rank_index},
        )

    target: Optional[NpcRuntime] = None
    if profile.requires_target:
        if not target_npc_id:
            raise PreconditionError(TARGET_REQUIRED, f"{action} requires a target NPC.")
        target = require_npc(roster, target_npc_id)
    elif target_npc_id:
        target = require_npc(roster, target_npc_id)

    new_state = apply_stat_deltas(state, morale=profile.morale, promotion_points=profile.points)
    new_state = replace(
        new_state,
        command_authority=int(clamp(new_state.command_authority + profile.authority, 0, 100)),
    )

    new_target = target
    if target is not None and profile.requires_target:
        new_target = adjust_npc(
            target,
            loyalty=profile.npc_loyalty,
            relation=profile.relation,
            promotion_points=profile.npc_promotion_points,
        )
        if action == "ISSUE_PROMOTION":
            new_target = replace(new_target, position=bump_position(new_target.position))

    return new_state, new_target, {
        "type": "COMMAND",
        "action": action,
        "target_npc_id": new_target.npc_id if new_target else None,
        "target_position": new_target.position if new_target else None,
        "command_authority": new_state.command_authority,
        "note": note,
    }
