"""NPC roster: deterministic identities and per-profile runtime lifecycle.

Public API
----------
- build_npc_registry / get_npc_identity
- seed_roster / mark_kia / fill_due_recruits
- npc_background_activity (read-only activity feed)

Persistence lives in npcs.repo.
"""

from .activity import npc_background_activity
from .catalog import DEFAULT_NPC_CATALOG, MAX_ACTIVE_NPCS, NpcCatalog
from .lifecycle import fill_due_recruits, mark_kia, seed_roster
from .registry import NpcIdentity, NpcIdentityCollisionError, build_npc_registry, get_npc_identity
from .types import NpcRuntime, RecruitmentTicket

__all__ = [
    "DEFAULT_NPC_CATALOG",
    "MAX_ACTIVE_NPCS",
    "NpcCatalog",
    "NpcIdentity",
    "NpcIdentityCollisionError",
    "NpcRuntime",
    "RecruitmentTicket",
    "build_npc_registry",
    "fill_due_recruits",
    "get_npc_identity",
    "mark_kia",
    "npc_background_activity",
    "seed_roster",
]
