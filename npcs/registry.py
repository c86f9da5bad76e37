"""Deterministic NPC identities.

An identity is a pure function of (branch, slot): the same pair always yields
the same name, division, unit and position, so a roster can be rebuilt on
demand without storing every field.

Name pools are short, so raw names repeat every len(FIRST_NAMES) slots. A
registry disambiguates every member of a duplicate group with a " [S<slot>]"
suffix and then verifies uniqueness; a collision that survives that step is
a defect and raises.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .catalog import DEFAULT_NPC_CATALOG, NpcCatalog

logger = logging.getLogger(__name__)


class NpcIdentityCollisionError(RuntimeError):
    """Two NPCs in one roster resolved to the same display name."""


@dataclass(frozen=True, slots=True)
class NpcIdentity:
    slot: int
    name: str
    division: str
    subdivision: str
    unit: str
    position: str


def _pick(values: Sequence[str], idx: int) -> str:
    return values[abs(int(idx)) % len(values)]


def branch_seed(branch: str) -> int:
    return sum(ord(ch) for ch in str(branch))


def get_npc_identity(branch: str, slot: int, *, catalog: NpcCatalog = DEFAULT_NPC_CATALOG) -> NpcIdentity:
    """Raw identity for (branch, slot). Names are not disambiguated here."""
    seed = branch_seed(branch) + int(slot) * 17
    return NpcIdentity(
        slot=int(slot),
        name=f"{_pick(catalog.first_names, seed)} {_pick(catalog.last_names, seed * 3)}",
        division=_pick(catalog.divisions, seed * 5),
        subdivision=_pick(catalog.subdivisions, seed * 7),
        unit=_pick(catalog.units, seed * 11),
        position=_pick(catalog.positions, seed * 13),
    )


def build_npc_registry(
    branch: str,
    count: Optional[int] = None,
    *,
    catalog: NpcCatalog = DEFAULT_NPC_CATALOG,
) -> Tuple[NpcIdentity, ...]:
    """Full roster for a branch with unique display names."""
    n = max(1, int(catalog.max_active if count is None else count))
    raw = [get_npc_identity(branch, slot, catalog=catalog) for slot in range(n)]

    by_name: Dict[str, List[int]] = defaultdict(list)
    for ident in raw:
        by_name[ident.name].append(ident.slot)

    out: List[NpcIdentity] = []
    for ident in raw:
        if len(by_name[ident.name]) > 1:
            ident = NpcIdentity(
                slot=ident.slot,
                name=f"{ident.name} [S{ident.slot}]",
                division=ident.division,
                subdivision=ident.subdivision,
                unit=ident.unit,
                position=ident.position,
            )
        out.append(ident)

    assert_unique_names(out)
    return tuple(out)


def replacement_identity(
    branch: str,
    slot: int,
    generation: int,
    *,
    catalog: NpcCatalog = DEFAULT_NPC_CATALOG,
) -> NpcIdentity:
    """Identity for the recruit that refills `slot` after a KIA.

    Generation 0 is the original registry member. Later generations draw from
    a shifted seed so the recruit is a different person, and always carry a
    slot/generation suffix because raw names repeat.
    """
    if generation <= 0:
        return build_npc_registry(branch, catalog=catalog)[int(slot)]
    virtual = get_npc_identity(branch, int(slot) + int(generation) * catalog.max_active, catalog=catalog)
    return NpcIdentity(
        slot=int(slot),
        name=f"{virtual.name} [S{int(slot)}G{int(generation)}]",
        division=virtual.division,
        subdivision=virtual.subdivision,
        unit=virtual.unit,
        position=virtual.position,
    )


def assert_unique_names(identities: Sequence[NpcIdentity]) -> None:
    seen: Dict[str, int] = {}
    for ident in identities:
        prev = seen.get(ident.name)
        if prev is not None:
            logger.error("NPC_NAME_COLLISION name=%s slots=%s,%s", ident.name, prev, ident.slot)
            raise NpcIdentityCollisionError(
                f"NPC name collision: {ident.name!r} (slots {prev} and {ident.slot})"
            )
        seen[ident.name] = ident.slot


def bump_position(position: str) -> str:
    """Promote a position title one step: X -> Senior X -> Lead X (then stays)."""
    title = str(position or "").strip()
    if title.startswith("Lead "):
        return title
    if title.startswith("Senior "):
        return "Lead " + title[len("Senior "):]
    return "Senior " + title
