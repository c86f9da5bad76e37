"""Name pools and organization catalogs used to derive NPC identities.

Changing any list (or its order) changes every generated roster.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

# Active NPC slots per profile roster.
MAX_ACTIVE_NPCS: int = 30

FIRST_NAMES: Tuple[str, ...] = (
    "James",
    "Michael",
    "William",
    "David",
    "Joseph",
    "Daniel",
    "Matthew",
    "Anthony",
    "Andrew",
    "Christopher",
    "Robert",
    "Thomas",
    "Ryan",
    "Logan",
    "Nathan",
)

LAST_NAMES: Tuple[str, ...] = (
    "Anderson",
    "Walker",
    "Rodriguez",
    "Bennett",
    "Parker",
    "Morgan",
    "Hughes",
    "Cooper",
    "Price",
    "Foster",
    "Sullivan",
    "Reed",
    "Campbell",
    "Brooks",
    "Hayes",
)

DIVISIONS: Tuple[str, ...] = ("Infantry Division", "Naval Operations", "Logistics Command", "Signals & Cyber")

SUBDIVISIONS: Tuple[str, ...] = ("Recon", "Cyber", "Support", "Training", "Forward Command", "Rapid Response")

UNITS: Tuple[str, ...] = (
    "1st Brigade",
    "2nd Fleet Group",
    "Joint Recon Unit",
    "Medical Support Unit",
    "Rapid Response Group",
    "Engineering Task Unit",
)

POSITIONS: Tuple[str, ...] = (
    "Division Commander",
    "Deputy Commander",
    "Operations Officer",
    "Intel Officer",
    "Logistics Officer",
    "Medical Officer",
)


@dataclass(frozen=True, slots=True)
class NpcCatalog:
    first_names: Tuple[str, ...] = FIRST_NAMES
    last_names: Tuple[str, ...] = LAST_NAMES
    divisions: Tuple[str, ...] = DIVISIONS
    subdivisions: Tuple[str, ...] = SUBDIVISIONS
    units: Tuple[str, ...] = UNITS
    positions: Tuple[str, ...] = POSITIONS
    max_active: int = MAX_ACTIVE_NPCS

    def __post_init__(self) -> None:
        for name in ("first_names", "last_names", "divisions", "subdivisions", "units", "positions"):
            if not getattr(self, name):
                raise ValueError(f"NpcCatalog.{name} must not be empty")
        if self.max_active <= 0:
            raise ValueError("NpcCatalog.max_active must be positive")


DEFAULT_NPC_CATALOG = NpcCatalog()
