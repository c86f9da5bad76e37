"""NPC runtime lifecycle: seed roster -> mutate -> KIA (soft delete) -> queued replacement.

Pure functions over `NpcRuntime` values; persistence lives in npcs/repo.py.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from career.errors import NPC_NOT_FOUND, NPC_UNAVAILABLE, NotFoundError, PreconditionError
from career.rng import clamp, hash_seed

from . import config as npc_config
from .catalog import DEFAULT_NPC_CATALOG, NpcCatalog
from .registry import NpcIdentity, assert_unique_names, build_npc_registry, replacement_identity
from .types import NpcRuntime, RecruitmentTicket

logger = logging.getLogger(__name__)


def npc_id_for(slot: int, generation: int) -> str:
    if int(generation) <= 0:
        return f"npc-{int(slot) + 1}"
    return f"npc-{int(slot) + 1}-g{int(generation)}"


def runtime_from_identity(ident: NpcIdentity, *, generation: int, joined_day: int) -> NpcRuntime:
    slot = int(ident.slot)
    gen = int(generation)
    return NpcRuntime(
        npc_id=npc_id_for(slot, gen),
        slot=slot,
        generation=gen,
        name=ident.name,
        division=ident.division,
        subdivision=ident.subdivision,
        unit=ident.unit,
        position=ident.position,
        competence=npc_config.COMPETENCE_BASE + (slot * 13 + gen * 7) % npc_config.COMPETENCE_SPREAD,
        loyalty=npc_config.LOYALTY_BASE + (slot * 7 + gen * 5) % npc_config.LOYALTY_SPREAD,
        joined_day=int(joined_day),
    )


def seed_roster(
    branch: str,
    *,
    joined_day: int = 0,
    catalog: NpcCatalog = DEFAULT_NPC_CATALOG,
) -> List[NpcRuntime]:
    """Generation-0 runtime roster for a new (or restarted) profile."""
    return [
        runtime_from_identity(ident, generation=0, joined_day=joined_day)
        for ident in build_npc_registry(branch, catalog=catalog)
    ]


def require_npc(roster: Mapping[str, NpcRuntime], npc_id: str, *, alive: bool = True) -> NpcRuntime:
    npc = roster.get(str(npc_id))
    if npc is None:
        raise NotFoundError(NPC_NOT_FOUND, f"NPC not found: {npc_id}", {"npc_id": str(npc_id)})
    if alive and not npc.alive:
        raise PreconditionError(
            NPC_UNAVAILABLE,
            f"{npc.name} is no longer on active duty.",
            {"npc_id": npc.npc_id, "status": npc.status},
        )
    return npc


def adjust_npc(
    npc: NpcRuntime,
    *,
    competence: int = 0,
    loyalty: int = 0,
    fatigue: int = 0,
    relation: int = 0,
    promotion_points: int = 0,
) -> NpcRuntime:
    lo, hi = npc_config.STAT_MIN, npc_config.STAT_MAX
    return replace(
        npc,
        competence=int(clamp(npc.competence + int(competence), lo, hi)),
        loyalty=int(clamp(npc.loyalty + int(loyalty), lo, hi)),
        fatigue=int(clamp(npc.fatigue + int(fatigue), lo, hi)),
        relation_to_player=int(
            clamp(npc.relation_to_player + int(relation), npc_config.RELATION_MIN, npc_config.RELATION_MAX)
        ),
        promotion_points=max(0, npc.promotion_points + int(promotion_points)),
    )


def mark_kia(npc: NpcRuntime, *, day: int) -> Tuple[NpcRuntime, RecruitmentTicket]:
    """Soft-delete an NPC and queue its replacement."""
    if not npc.alive:
        raise PreconditionError(NPC_UNAVAILABLE, f"{npc.name} is already KIA.", {"npc_id": npc.npc_id})
    fallen = replace(npc, status="KIA", death_day=int(day))
    due = int(day) + npc_config.REPLACEMENT_BASE_DELAY_DAYS + int(npc.slot) % npc_config.REPLACEMENT_SLOT_SPREAD
    ticket = RecruitmentTicket(
        slot=int(npc.slot),
        generation_next=int(npc.generation) + 1,
        enqueued_day=int(day),
        due_day=due,
        replaced_npc_id=npc.npc_id,
    )
    logger.info("NPC_KIA npc_id=%s day=%s replacement_due=%s", npc.npc_id, day, due)
    return fallen, ticket


def fill_due_recruits(
    branch: str,
    tickets: Iterable[RecruitmentTicket],
    *,
    current_day: int,
    existing: Sequence[NpcRuntime] = (),
    catalog: NpcCatalog = DEFAULT_NPC_CATALOG,
) -> List[Tuple[RecruitmentTicket, NpcRuntime]]:
    """Materialize every ticket whose due_day has arrived."""
    filled: List[Tuple[RecruitmentTicket, NpcRuntime]] = []
    for ticket in sorted(tickets, key=lambda t: (t.due_day, t.slot)):
        if ticket.due_day > int(current_day):
            continue
        ident = replacement_identity(branch, ticket.slot, ticket.generation_next, catalog=catalog)
        recruit = runtime_from_identity(ident, generation=ticket.generation_next, joined_day=ticket.due_day)
        filled.append((ticket, recruit))

    if filled:
        assert_unique_names(roster_identities(list(existing) + [recruit for _, recruit in filled]))
    return filled


def pick_mission_squad(
    roster: Sequence[NpcRuntime],
    *,
    profile_id: str,
    day: int,
    mission_type: str,
    size: Optional[int] = None,
) -> List[NpcRuntime]:
    """Deterministic squad for a deployment: a contiguous window over the live roster by slot."""
    alive = sorted((n for n in roster if n.alive), key=lambda n: (n.slot, n.generation))
    if not alive:
        return []
    want = min(len(alive), int(size if size is not None else npc_config.MISSION_SQUAD_SIZE))
    start = hash_seed(f"squad:{profile_id}:{int(day)}:{mission_type}") % len(alive)
    return [alive[(start + i) % len(alive)] for i in range(want)]


def roster_identities(roster: Sequence[NpcRuntime]) -> List[NpcIdentity]:
    """Live NPCs as identities (for ceremony ranking)."""
    return [
        NpcIdentity(slot=n.slot, name=n.name, division=n.division, subdivision=n.subdivision, unit=n.unit, position=n.position)
        for n in sorted(roster, key=lambda n: (n.slot, n.generation))
        if n.alive
    ]
