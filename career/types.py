"""Public data types for the career engine.

`GameState` is immutable; resolvers return a new instance via
`dataclasses.replace`. The pause is a single optional tagged value so that a
pending decision can never exist without its DECISION pause (and vice versa).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Mapping, Optional, Tuple


PauseReason = Literal["DECISION", "MODAL", "SUBPAGE", "CEREMONY"]
ImpactScope = Literal["SELF", "ORGANIZATION"]
DivisionFreedom = Literal["LIMITED", "STANDARD", "ADVANCED", "ELITE"]

PAUSE_REASONS: Tuple[str, ...] = ("DECISION", "MODAL", "SUBPAGE", "CEREMONY")

# Soft pauses come from client navigation and may expire; they never block actions.
SOFT_PAUSE_REASONS = frozenset({"MODAL", "SUBPAGE"})
# System pauses block every mutating action until the engine releases them.
BLOCKING_PAUSE_REASONS = frozenset({"DECISION", "CEREMONY"})

DIVISION_FREEDOM_ORDER: Tuple[str, ...] = ("LIMITED", "STANDARD", "ADVANCED", "ELITE")


@dataclass(frozen=True, slots=True)
class DecisionOptionPreview:
    id: str
    label: str
    impact_scope: str
    effect_preview: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "impact_scope": self.impact_scope,
            "effect_preview": self.effect_preview,
        }


@dataclass(frozen=True, slots=True)
class PendingDecision:
    """A materialized random event waiting for the player's choice."""

    event_id: int
    title: str
    description: str
    chance_percent: int
    condition_label: str
    options: Tuple[DecisionOptionPreview, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_id": int(self.event_id),
            "title": self.title,
            "description": self.description,
            "chance_percent": int(self.chance_percent),
            "condition_label": self.condition_label,
            "options": [o.to_dict() for o in self.options],
        }

    @classmethod
    def from_dict(cls, event_id: int, payload: Mapping[str, Any]) -> "PendingDecision":
        options = []
        for idx, raw in enumerate(payload.get("options") or []):
            scope = str(raw.get("impact_scope") or "SELF").upper()
            options.append(
                DecisionOptionPreview(
                    id=str(raw.get("id") or f"option-{idx + 1}"),
                    label=str(raw.get("label") or f"Option {idx + 1}"),
                    impact_scope="ORGANIZATION" if scope == "ORGANIZATION" else "SELF",
                    effect_preview=str(raw.get("effect_preview") or ""),
                )
            )
        return cls(
            event_id=int(event_id),
            title=str(payload.get("title") or "Operational Event"),
            description=str(payload.get("description") or ""),
            chance_percent=int(payload.get("chance_percent") or 0),
            condition_label=str(payload.get("condition_label") or ""),
            options=tuple(options),
        )


@dataclass(frozen=True, slots=True)
class PauseState:
    """One pause episode. `decision` is present iff reason == DECISION."""

    reason: str
    token: str
    paused_at_ms: int
    expires_at_ms: Optional[int] = None
    decision: Optional[PendingDecision] = None

    def __post_init__(self) -> None:
        if self.reason not in PAUSE_REASONS:
            raise ValueError(f"unknown pause reason: {self.reason!r}")
        if not self.token:
            raise ValueError("pause token is required")
        if (self.reason == "DECISION") != (self.decision is not None):
            raise ValueError("a pending decision must be carried by exactly the DECISION pause")

    @property
    def is_blocking(self) -> bool:
        return self.reason in BLOCKING_PAUSE_REASONS


@dataclass(frozen=True, slots=True)
class AwardHistory:
    medals: Tuple[str, ...] = ()
    ribbons: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"medals": list(self.medals), "ribbons": list(self.ribbons)}


@dataclass(frozen=True, slots=True)
class Certificate:
    """Academy certificate held in the player's inventory."""

    certificate_id: str
    tier: int
    score: int
    grade: str
    division_freedom: str
    issued_day: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "certificate_id": self.certificate_id,
            "tier": int(self.tier),
            "score": int(self.score),
            "grade": self.grade,
            "division_freedom": self.division_freedom,
            "issued_day": int(self.issued_day),
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Certificate":
        return cls(
            certificate_id=str(raw["certificate_id"]),
            tier=int(raw["tier"]),
            score=int(raw["score"]),
            grade=str(raw["grade"]),
            division_freedom=str(raw["division_freedom"]),
            issued_day=int(raw["issued_day"]),
        )


@dataclass(frozen=True, slots=True)
class MissionParticipantStats:
    """Per-mission contribution of one squad member (or the player)."""

    name: str
    role: str  # PLAYER | NPC
    tactical: int
    support: int
    leadership: int
    resilience: int

    @property
    def total(self) -> int:
        return self.tactical + self.support + self.leadership + self.resilience

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "role": self.role,
            "tactical": int(self.tactical),
            "support": int(self.support),
            "leadership": int(self.leadership),
            "resilience": int(self.resilience),
            "total": int(self.total),
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "MissionParticipantStats":
        return cls(
            name=str(raw["name"]),
            role=str(raw.get("role") or "NPC"),
            tactical=int(raw.get("tactical") or 0),
            support=int(raw.get("support") or 0),
            leadership=int(raw.get("leadership") or 0),
            resilience=int(raw.get("resilience") or 0),
        )


@dataclass(frozen=True, slots=True)
class MissionBrief:
    """The most recent deployment: generated briefing plus participant stats."""

    mission_id: str
    mission_type: str
    issued_day: int
    terrain: str
    objective: str
    enemy_strength: int
    difficulty_rating: int
    equipment_quality: int
    participant_stats: Tuple[MissionParticipantStats, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mission_id": self.mission_id,
            "mission_type": self.mission_type,
            "issued_day": int(self.issued_day),
            "terrain": self.terrain,
            "objective": self.objective,
            "enemy_strength": int(self.enemy_strength),
            "difficulty_rating": int(self.difficulty_rating),
            "equipment_quality": int(self.equipment_quality),
            "participant_stats": [p.to_dict() for p in self.participant_stats],
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "MissionBrief":
        return cls(
            mission_id=str(raw["mission_id"]),
            mission_type=str(raw["mission_type"]),
            issued_day=int(raw["issued_day"]),
            terrain=str(raw["terrain"]),
            objective=str(raw["objective"]),
            enemy_strength=int(raw["enemy_strength"]),
            difficulty_rating=int(raw["difficulty_rating"]),
            equipment_quality=int(raw["equipment_quality"]),
            participant_stats=tuple(MissionParticipantStats.from_dict(p) for p in raw.get("participant_stats") or ()),
        )


@dataclass(frozen=True, slots=True)
class RaiderCasualty:
    slot: int
    npc_name: str
    division: str
    unit: str
    role: str
    day: int
    cause: str = "RAIDER_ATTACK"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slot": int(self.slot),
            "npc_name": self.npc_name,
            "division": self.division,
            "unit": self.unit,
            "role": self.role,
            "day": int(self.day),
            "cause": self.cause,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "RaiderCasualty":
        return cls(
            slot=int(raw["slot"]),
            npc_name=str(raw["npc_name"]),
            division=str(raw.get("division") or ""),
            unit=str(raw.get("unit") or ""),
            role=str(raw.get("role") or ""),
            day=int(raw["day"]),
            cause=str(raw.get("cause") or "RAIDER_ATTACK"),
        )


@dataclass(frozen=True, slots=True)
class GameState:
    """Authoritative per-profile game state (one row in game_states)."""

    profile_id: str
    player_name: str
    country: str
    branch: str
    start_age: int

    current_day: int
    server_reference_time_ms: int

    rank_index: int
    money_cents: int
    morale: int
    health: int
    promotion_points: int
    days_in_rank: int

    player_position: str
    player_division: str
    next_event_day: int
    last_mission_day: int

    pause: Optional[PauseState] = None
    player_medals: Tuple[str, ...] = ()
    player_ribbons: Tuple[str, ...] = ()
    npc_award_history: Dict[str, AwardHistory] = field(default_factory=dict)
    game_time_scale: int = 1

    ceremony_completed_day: int = 0
    ceremony_recent_awards: Tuple[Dict[str, Any], ...] = ()
    academy_tier: int = 0
    certificate_inventory: Tuple[Certificate, ...] = ()
    last_travel_place: str = "BASE_HQ"
    command_authority: int = 10
    mission_participants: Tuple[str, ...] = ()
    last_mission: Optional[MissionBrief] = None
    raider_last_attack_day: int = 0
    raider_casualties: Tuple[RaiderCasualty, ...] = ()
    version: int = 0

    # -- derived pause views -------------------------------------------------

    @property
    def paused(self) -> bool:
        return self.pause is not None

    @property
    def pause_reason(self) -> Optional[str]:
        return self.pause.reason if self.pause else None

    @property
    def pause_token(self) -> Optional[str]:
        return self.pause.token if self.pause else None

    @property
    def pause_expires_at_ms(self) -> Optional[int]:
        return self.pause.expires_at_ms if self.pause else None

    @property
    def pending_decision(self) -> Optional[PendingDecision]:
        return self.pause.decision if self.pause else None

    def owned_awards(self, name: str) -> AwardHistory:
        if name == self.player_name:
            return AwardHistory(medals=self.player_medals, ribbons=self.player_ribbons)
        return self.npc_award_history.get(name) or AwardHistory()
