from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

NpcStatus = Literal["ACTIVE", "KIA"]
NPC_STATUSES = ("ACTIVE", "KIA")


@dataclass(frozen=True, slots=True)
class NpcRuntime:
    """Mutable-by-replacement NPC state owned by one profile."""

    npc_id: str
    slot: int
    generation: int
    name: str
    division: str
    subdivision: str
    unit: str
    position: str
    status: str = "ACTIVE"
    competence: int = 50
    loyalty: int = 50
    fatigue: int = 0
    relation_to_player: int = 0
    promotion_points: int = 0
    joined_day: int = 0
    death_day: Optional[int] = None

    @property
    def alive(self) -> bool:
        return self.status != "KIA"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "npc_id": self.npc_id,
            "slot": int(self.slot),
            "generation": int(self.generation),
            "name": self.name,
            "division": self.division,
            "subdivision": self.subdivision,
            "unit": self.unit,
            "position": self.position,
            "status": self.status,
            "competence": int(self.competence),
            "loyalty": int(self.loyalty),
            "fatigue": int(self.fatigue),
            "relation_to_player": int(self.relation_to_player),
            "promotion_points": int(self.promotion_points),
            "joined_day": int(self.joined_day),
            "death_day": self.death_day,
        }


@dataclass(frozen=True, slots=True)
class RecruitmentTicket:
    """A queued replacement for a fallen NPC."""

    slot: int
    generation_next: int
    enqueued_day: int
    due_day: int
    replaced_npc_id: str
    ticket_id: Optional[int] = None
