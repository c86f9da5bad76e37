"""Balance tables for the career engine.

Everything here is pure data. The engine never imports these tables inline:
callers build one `GameConfig` per process (normally `DEFAULT_GAME_CONFIG`)
and pass it into every resolver. Tests pass their own variants.

Units
-----
- money: cents
- durations: in-game days
- chances: probability in [0, 1]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from ceremony.config import CeremonyConfig
from config import DEFAULT_PAUSE_TIMEOUT_MINUTES, GAME_MS_PER_DAY
from npcs.catalog import DEFAULT_NPC_CATALOG, NpcCatalog


@dataclass(frozen=True, slots=True)
class DeploymentProfile:
    success_chance: float
    injury_chance: float
    reward_cents: Tuple[int, int]
    health_loss: Tuple[int, int]
    morale_loss: Tuple[int, int]
    promotion_points: Tuple[int, int]


@dataclass(frozen=True, slots=True)
class BranchConfig:
    code: str
    country: str
    salary_per_day_cents: Tuple[int, ...]
    event_chance_modifier: float
    patrol: DeploymentProfile
    support: DeploymentProfile

    def deployment(self, mission_type: str) -> DeploymentProfile:
        return self.patrol if str(mission_type).upper() == "PATROL" else self.support

    def salary_for_rank(self, rank_index: int) -> int:
        if not self.salary_per_day_cents:
            return 0
        idx = min(max(0, int(rank_index)), len(self.salary_per_day_cents) - 1)
        return int(self.salary_per_day_cents[idx])


@dataclass(frozen=True, slots=True)
class CountryConfig:
    code: str
    daily_event_probability: float
    # Index i = requirement to leave rank tier i.
    promotion_min_days: Tuple[int, ...]
    promotion_min_points: Tuple[int, ...]
    # Readiness gate checked on every promotion attempt.
    min_morale: int
    min_health: int
    start_division: str = "Infantry Division"


@dataclass(frozen=True, slots=True)
class TrainingProfile:
    cost_cents: int
    health: int
    morale: int
    points: int
    injury_chance: float


@dataclass(frozen=True, slots=True)
class TravelProfile:
    cost_cents: int
    days: int
    morale: int
    health: int


@dataclass(frozen=True, slots=True)
class InteractionProfile:
    morale: int
    health: int
    points: int
    cost_cents: int
    relation: int
    npc_competence: int
    npc_loyalty: int
    npc_fatigue: int


@dataclass(frozen=True, slots=True)
class CommandProfile:
    min_rank: int
    requires_target: bool
    morale: int
    points: int
    authority: int
    relation: int
    npc_loyalty: int
    npc_promotion_points: int


@dataclass(frozen=True, slots=True)
class DivisionEntry:
    division_id: str
    name: str
    kind: str


# ---------------------------------------------------------------------------
# Default tables
# ---------------------------------------------------------------------------

RANK_LABELS: Tuple[str, ...] = (
    "Recruit",
    "Private",
    "Corporal",
    "Sergeant",
    "Staff Sergeant",
    "Warrant Officer",
    "Lieutenant",
    "Captain",
    "Major",
    "Colonel",
    "Brigadier General",
    "Major General",
    "Lieutenant General",
    "General",
)

_BRANCHES = {
    "US_ARMY": BranchConfig(
        code="US_ARMY",
        country="US",
        salary_per_day_cents=(4200, 4600, 5100, 5700, 6400, 7200, 8100),
        event_chance_modifier=1.08,
        patrol=DeploymentProfile(0.62, 0.21, (3500, 12000), (4, 18), (2, 10), (2, 8)),
        support=DeploymentProfile(0.78, 0.11, (2400, 8500), (2, 10), (1, 6), (1, 5)),
    ),
    "US_NAVY": BranchConfig(
        code="US_NAVY",
        country="US",
        salary_per_day_cents=(4300, 4700, 5200, 5800, 6500, 7300, 8200),
        event_chance_modifier=0.97,
        patrol=DeploymentProfile(0.68, 0.16, (3100, 10000), (3, 14), (2, 8), (2, 7)),
        support=DeploymentProfile(0.82, 0.09, (2200, 7600), (2, 8), (1, 5), (1, 4)),
    ),
    "ID_TNI_AD": BranchConfig(
        code="ID_TNI_AD",
        country="ID",
        salary_per_day_cents=(1200, 1350, 1500, 1700, 1900, 2150, 2400),
        event_chance_modifier=1.05,
        patrol=DeploymentProfile(0.58, 0.24, (1300, 5200), (5, 18), (3, 10), (2, 7)),
        support=DeploymentProfile(0.74, 0.13, (900, 3500), (2, 9), (1, 6), (1, 4)),
    ),
    "ID_TNI_AL": BranchConfig(
        code="ID_TNI_AL",
        country="ID",
        salary_per_day_cents=(1250, 1400, 1550, 1750, 1950, 2200, 2450),
        event_chance_modifier=0.96,
        patrol=DeploymentProfile(0.63, 0.18, (1200, 4700), (4, 14), (2, 8), (2, 6)),
        support=DeploymentProfile(0.79, 0.10, (950, 3600), (2, 8), (1, 5), (1, 4)),
    ),
}

_COUNTRIES = {
    "US": CountryConfig(
        code="US",
        daily_event_probability=0.18,
        promotion_min_days=(30, 45, 60, 75, 95, 120, 9999),
        promotion_min_points=(8, 12, 18, 24, 32, 40, 9999),
        min_morale=55,
        min_health=55,
    ),
    "ID": CountryConfig(
        code="ID",
        daily_event_probability=0.14,
        promotion_min_days=(36, 52, 70, 90, 115, 145, 9999),
        promotion_min_points=(10, 15, 21, 28, 36, 45, 9999),
        min_morale=60,
        min_health=60,
    ),
}

_TRAINING = {
    "LOW": TrainingProfile(cost_cents=500, health=1, morale=2, points=2, injury_chance=0.01),
    "MEDIUM": TrainingProfile(cost_cents=1000, health=2, morale=1, points=4, injury_chance=0.03),
    "HIGH": TrainingProfile(cost_cents=1600, health=3, morale=-1, points=6, injury_chance=0.06),
}

_TRAVEL = {
    "BASE_HQ": TravelProfile(cost_cents=0, days=1, morale=1, health=1),
    "BORDER_OUTPOST": TravelProfile(cost_cents=900, days=2, morale=-1, health=-1),
    "LOGISTICS_HUB": TravelProfile(cost_cents=600, days=1, morale=1, health=0),
    "TACTICAL_TOWN": TravelProfile(cost_cents=1200, days=2, morale=4, health=2),
}

_INTERACTIONS = {
    "MENTOR": InteractionProfile(morale=1, health=0, points=1, cost_cents=0, relation=4, npc_competence=2, npc_loyalty=1, npc_fatigue=2),
    "SUPPORT": InteractionProfile(morale=2, health=0, points=0, cost_cents=300, relation=5, npc_competence=0, npc_loyalty=3, npc_fatigue=-4),
    "BOND": InteractionProfile(morale=3, health=1, points=0, cost_cents=0, relation=6, npc_competence=0, npc_loyalty=2, npc_fatigue=0),
    "DEBRIEF": InteractionProfile(morale=0, health=0, points=2, cost_cents=0, relation=2, npc_competence=1, npc_loyalty=0, npc_fatigue=1),
}

_COMMANDS = {
    "PLAN_MISSION": CommandProfile(min_rank=2, requires_target=False, morale=-1, points=2, authority=3, relation=0, npc_loyalty=0, npc_promotion_points=0),
    "ISSUE_SANCTION": CommandProfile(min_rank=3, requires_target=True, morale=0, points=1, authority=2, relation=-8, npc_loyalty=-6, npc_promotion_points=0),
    "ISSUE_PROMOTION": CommandProfile(min_rank=4, requires_target=True, morale=1, points=1, authority=-4, relation=6, npc_loyalty=5, npc_promotion_points=5),
}

REGISTERED_DIVISIONS: Tuple[DivisionEntry, ...] = (
    DivisionEntry("special-forces", "Special Operations Division", "TASK_FORCE"),
    DivisionEntry("military-police-division", "Military Police HQ", "DIVISION"),
    DivisionEntry("armored-division", "Armored Command", "DIVISION"),
    DivisionEntry("air-defense-division", "Air Defense HQ", "DIVISION"),
    DivisionEntry("engineering-command", "Engineer Command HQ", "DIVISION"),
    DivisionEntry("medical-support-division", "Medical Command HQ", "DIVISION"),
    DivisionEntry("signal-cyber-corps", "Signal Cyber HQ", "CORPS"),
    DivisionEntry("military-judge-corps", "Military Court Division", "CORPS"),
)


@dataclass(frozen=True, slots=True)
class GameConfig:
    branches: Mapping[str, BranchConfig]
    countries: Mapping[str, CountryConfig]
    training: Mapping[str, TrainingProfile]
    travel: Mapping[str, TravelProfile]
    interactions: Mapping[str, InteractionProfile]
    commands: Mapping[str, CommandProfile]
    divisions: Tuple[DivisionEntry, ...] = REGISTERED_DIVISIONS
    rank_labels: Tuple[str, ...] = RANK_LABELS
    ceremony: CeremonyConfig = field(default_factory=CeremonyConfig)
    npc_catalog: NpcCatalog = DEFAULT_NPC_CATALOG

    # Clock
    ms_per_day: int = GAME_MS_PER_DAY
    pause_timeout_minutes: int = DEFAULT_PAUSE_TIMEOUT_MINUTES

    # Promotion
    carry_over_points: bool = True
    promotion_morale_bonus: int = 2
    review_refusal_morale_penalty: int = 1

    # Training injury damage ranges
    training_injury_health_loss: Tuple[int, int] = (4, 9)
    training_injury_morale_loss: Tuple[int, int] = (2, 5)

    # Deployment
    mission_cooldown_days: int = 10
    mission_duration_bounds: Tuple[int, int] = (1, 14)
    default_mission_duration_days: int = 2
    failed_mission_reward_cents: Tuple[int, int] = (200, 700)
    minor_loss_range: Tuple[int, int] = (0, 2)
    casualty_chance: float = 0.35

    # Random events
    event_chance_bounds: Tuple[float, float] = (0.05, 0.55)
    event_gap_bounds: Tuple[int, int] = (2, 8)

    # Academy
    academy_pass_score: int = 68
    academy_fee_cents: Tuple[int, ...] = (2500, 4500)
    academy_days: Tuple[int, ...] = (3, 5)

    # Fresh world
    start_morale: int = 70
    start_health: int = 80
    start_next_event_day: int = 3
    start_last_mission_day: int = -10
    start_position: str = "Trainee Officer"
    start_command_authority: int = 10
    start_place: str = "BASE_HQ"

    def branch(self, code: str) -> BranchConfig:
        try:
            return self.branches[str(code)]
        except KeyError as exc:
            raise KeyError(f"unknown branch: {code!r}") from exc

    def country(self, code: str) -> CountryConfig:
        try:
            return self.countries[str(code)]
        except KeyError as exc:
            raise KeyError(f"unknown country: {code!r}") from exc

    def max_rank_index(self, country: str) -> int:
        return len(self.country(country).promotion_min_days) - 1

    def rank_label(self, rank_index: int) -> str:
        idx = min(max(0, int(rank_index)), len(self.rank_labels) - 1)
        return self.rank_labels[idx]

    def find_division(self, key: str) -> Optional[DivisionEntry]:
        needle = str(key or "").strip().lower()
        for entry in self.divisions:
            if needle in (entry.division_id.lower(), entry.name.lower()):
                return entry
        return None


def build_default_config(**overrides) -> GameConfig:
    """Default tables wrapped read-only. Keyword overrides replace top-level fields."""
    base = dict(
        branches=MappingProxyType(dict(_BRANCHES)),
        countries=MappingProxyType(dict(_COUNTRIES)),
        training=MappingProxyType(dict(_TRAINING)),
        travel=MappingProxyType(dict(_TRAVEL)),
        interactions=MappingProxyType(dict(_INTERACTIONS)),
        commands=MappingProxyType(dict(_COMMANDS)),
    )
    base.update(overrides)
    return GameConfig(**base)


DEFAULT_GAME_CONFIG = build_default_config()
