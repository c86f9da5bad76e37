"""Mission briefings and per-participant contribution stats.

Both are derived from stable hashes of the profile, day and mission type, so a
deployment's briefing never consumes the request's random stream and replays
identically.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Sequence, Tuple

from npcs.types import NpcRuntime

from .rng import clamp, hash_seed
from .types import GameState, MissionBrief, MissionParticipantStats

TERRAINS: Tuple[str, ...] = ("URBAN", "FOREST", "DESERT", "MOUNTAIN", "COASTAL", "RIVERLAND")

OBJECTIVES: Dict[str, Tuple[str, ...]] = {
    "PATROL": (
        "Route reconnaissance",
        "Checkpoint security",
        "Border sweep",
        "Night observation post",
    ),
    "SUPPORT": (
        "Supply convoy escort",
        "Field hospital setup",
        "Civilian evacuation",
        "Bridge repair cover",
    ),
}

ENEMY_STRENGTH_RANGE = (20, 80)
EQUIPMENT_QUALITY_RANGE = (40, 90)
STAT_JITTER = 10


def _pick(seed: int, shift: int, lo: int, hi: int) -> int:
    return lo + (seed >> shift) % (hi - lo + 1)


def difficulty_rating(enemy_strength: int, equipment_quality: int) -> int:
    """1..10: strong enemies and poor equipment make a mission harder."""
    raw = (int(enemy_strength) * 6 + (100 - int(equipment_quality)) * 4 + 50) // 100
    return int(clamp(raw, 1, 10))


def generate_mission(state: GameState, mission_type: str) -> MissionBrief:
    """Briefing for a deployment issued on `state.current_day`."""
    seed = hash_seed(f"mission:{state.profile_id}:{state.current_day}:{mission_type}")
    objectives = OBJECTIVES.get(mission_type) or OBJECTIVES["PATROL"]
    enemy = _pick(seed, 4, *ENEMY_STRENGTH_RANGE)
    equipment = _pick(seed, 12, *EQUIPMENT_QUALITY_RANGE)
    return MissionBrief(
        mission_id=f"MSN-D{state.current_day}-{seed % 10_000:04d}",
        mission_type=mission_type,
        issued_day=state.current_day,
        terrain=TERRAINS[seed % len(TERRAINS)],
        objective=objectives[(seed >> 20) % len(objectives)],
        enemy_strength=enemy,
        difficulty_rating=difficulty_rating(enemy, equipment),
        equipment_quality=equipment,
    )


def _jitter(seed: int, k: int) -> int:
    return (seed >> (5 * k)) % (2 * STAT_JITTER + 1) - STAT_JITTER


def _stat(value: float) -> int:
    return int(clamp(round(value), 0, 100))


def npc_contribution(npc: NpcRuntime, mission: MissionBrief) -> MissionParticipantStats:
    seed = hash_seed(f"mission-stats:{mission.mission_id}:{npc.npc_id}")
    return MissionParticipantStats(
        name=npc.name,
        role="NPC",
        tactical=_stat(npc.competence - npc.fatigue / 5 + _jitter(seed, 0)),
        support=_stat(npc.loyalty + _jitter(seed, 1)),
        leadership=_stat((npc.competence + npc.loyalty) / 2 + _jitter(seed, 2)),
        resilience=_stat(100 - npc.fatigue - mission.difficulty_rating * 3 + _jitter(seed, 3)),
    )


def player_contribution(state: GameState, mission: MissionBrief) -> MissionParticipantStats:
    seed = hash_seed(f"mission-stats:{mission.mission_id}:player")
    return MissionParticipantStats(
        name=state.player_name,
        role="PLAYER",
        tactical=_stat(40 + state.rank_index * 6 + state.health / 5 + _jitter(seed, 0)),
        support=_stat(35 + state.command_authority / 2 + _jitter(seed, 1)),
        leadership=_stat(30 + state.rank_index * 8 + state.command_authority / 3 + _jitter(seed, 2)),
        resilience=_stat(state.health * 0.6 + state.morale * 0.3 - mission.difficulty_rating + _jitter(seed, 3)),
    )


def with_participant_stats(mission: MissionBrief, state: GameState, squad: Sequence[NpcRuntime]) -> MissionBrief:
    """Attach contribution stats for the player and every squad member."""
    stats = [player_contribution(state, mission)] + [npc_contribution(n, mission) for n in squad]
    return replace(mission, participant_stats=tuple(stats))
