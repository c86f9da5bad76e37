from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class CareerError(Exception):
    """Structured error for career engine flows.

    The server layer maps the subclass to an HTTP status while keeping a
    stable machine-readable code for the client.
    """

    code: str
    message: str
    details: Optional[Any] = None

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.code}: {self.message}"


class ValidationError(CareerError):
    """Malformed or out-of-range input."""


class PreconditionError(CareerError):
    """Legal input, but the current state forbids the action."""


class NotFoundError(CareerError):
    """A referenced id (profile, event, option, NPC, division) does not exist."""


class ConflictError(CareerError):
    """Lost a race on shared state (stale pause token, pending decision changed, duplicate profile).

    Callers should re-fetch the snapshot before retrying their intent.
    """


# Error codes (stable API surface)
INVALID_INPUT = "INVALID_INPUT"

PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
PROFILE_EXISTS = "PROFILE_EXISTS"
STATE_CHANGED = "STATE_CHANGED"

NOT_PAUSED = "NOT_PAUSED"
PAUSE_TOKEN_MISMATCH = "PAUSE_TOKEN_MISMATCH"
PAUSE_CONFLICT = "PAUSE_CONFLICT"
PAUSE_BLOCKING = "PAUSE_BLOCKING"
PAUSE_REASON_RESERVED = "PAUSE_REASON_RESERVED"

DECISION_PENDING = "DECISION_PENDING"
DECISION_MISMATCH = "DECISION_MISMATCH"
EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
OPTION_NOT_FOUND = "OPTION_NOT_FOUND"

CEREMONY_PENDING = "CEREMONY_PENDING"
CEREMONY_NOT_PENDING = "CEREMONY_NOT_PENDING"

INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
MISSION_COOLDOWN = "MISSION_COOLDOWN"
ALREADY_AT_PLACE = "ALREADY_AT_PLACE"
RANK_TOO_LOW = "RANK_TOO_LOW"
TARGET_REQUIRED = "TARGET_REQUIRED"

NPC_NOT_FOUND = "NPC_NOT_FOUND"
NPC_UNAVAILABLE = "NPC_UNAVAILABLE"

ACADEMY_TIER_LOCKED = "ACADEMY_TIER_LOCKED"
DIVISION_NOT_FOUND = "DIVISION_NOT_FOUND"
CERTIFICATE_REQUIRED = "CERTIFICATE_REQUIRED"
ALREADY_IN_DIVISION = "ALREADY_IN_DIVISION"

RAIDERS_NOT_READY = "RAIDERS_NOT_READY"
NO_DEFENDERS = "NO_DEFENDERS"
