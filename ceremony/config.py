"""Ceremony tuning.

The scoring arithmetic in ceremony/engine.py depends on these constants;
changing one is a behavior change (rankings and quotas shift), not a refactor.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

MEDALS: Tuple[str, ...] = (
    "Distinguished Service Medal",
    "Meritorious Service Medal",
    "Combat Readiness Medal",
    "Joint Commendation Medal",
    "Leadership Ribbon",
)

RIBBONS: Tuple[str, ...] = ("Ribbon-1", "Ribbon-2", "Ribbon-3", "Ribbon-4", "Ribbon-5")


@dataclass(frozen=True, slots=True)
class CeremonyConfig:
    # Ceremonies fall on multiples of this many days (first one on day `interval_days`).
    interval_days: int = 12

    # Awards are granted only if a mission ended within this many days.
    mission_window_days: int = 24

    # NPC score = npc_base + day // npc_growth_div + ((slot * slot_mult + day * day_mult) % personality_mod)
    #             + (morale + health) // readiness_div
    npc_base: int = 45
    npc_growth_div: int = 3
    slot_mult: int = 17
    day_mult: int = 7
    personality_mod: int = 35
    readiness_div: int = 12

    # Player score = player_base + rank * rank_mult + (morale + health) // player_readiness_div
    #                + current_day // service_div
    player_base: int = 40
    rank_mult: int = 5
    player_readiness_div: int = 3
    service_div: int = 4

    # Quota = chief // chief_score_div + high_performers // high_performer_div
    #         - saturation - strictness, clamped to [quota_min, quota_max] when eligible.
    chief_score_div: int = 28
    high_performer_margin: int = 6
    high_performer_div: int = 6
    saturation_cap: int = 8
    strictness_morale_threshold: int = 68
    quota_min: int = 1
    quota_max: int = 8

    # Candidates scoring below chief - eligibility_margin are skipped.
    eligibility_margin: int = 16

    # Rewards applied when the player completes the ceremony.
    completion_money_cents: int = 6000
    completion_morale: int = 8
    completion_health: int = 2

    medals: Tuple[str, ...] = MEDALS
    ribbons: Tuple[str, ...] = RIBBONS

    def __post_init__(self) -> None:
        if self.interval_days <= 0:
            raise ValueError("interval_days must be positive")
        for name in (
            "npc_growth_div",
            "personality_mod",
            "readiness_div",
            "player_readiness_div",
            "service_div",
            "chief_score_div",
            "high_performer_div",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        if not (0 <= self.quota_min <= self.quota_max):
            raise ValueError("quota bounds must satisfy 0 <= quota_min <= quota_max")
        if not self.medals or not self.ribbons:
            raise ValueError("medal and ribbon catalogs must not be empty")
