from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple


@dataclass(frozen=True, slots=True)
class EventEffects:
    money: int = 0
    morale: int = 0
    health: int = 0
    promotion_points: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "money": int(self.money),
            "morale": int(self.morale),
            "health": int(self.health),
            "promotion_points": int(self.promotion_points),
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "EventEffects":
        raw = raw or {}
        return cls(
            money=int(raw.get("money") or 0),
            morale=int(raw.get("morale") or 0),
            health=int(raw.get("health") or 0),
            promotion_points=int(raw.get("promotion_points") or 0),
        )


@dataclass(frozen=True, slots=True)
class EventOption:
    id: str
    label: str
    effects: EventEffects

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "label": self.label, "effects": self.effects.to_dict()}


@dataclass(frozen=True, slots=True)
class EventDefinition:
    """One row of the random-event pool."""

    code: str
    country: str
    branch: str
    rank_min: int
    rank_max: int
    base_weight: float
    cooldown_days: int
    title: str
    description: str
    options: Tuple[EventOption, ...]
    id: int = 0
    is_active: bool = True

    def option(self, option_id: str):
        for opt in self.options:
            if opt.id == str(option_id):
                return opt
        return None


@dataclass(frozen=True, slots=True)
class EventCandidate:
    event: EventDefinition
    # Most recent day this event was resolved for the profile; very negative if never.
    last_seen_day: int = -9999
