"""Division recruitment: certificate gate + short placement exam."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Optional, Sequence, Tuple

from .academy import score_answers, validate_answer_sheet
from .config import DivisionEntry, GameConfig
from .errors import (
    ALREADY_IN_DIVISION,
    CERTIFICATE_REQUIRED,
    DIVISION_NOT_FOUND,
    NotFoundError,
    PreconditionError,
)
from .pause import ensure_actionable
from .rng import hash_seed
from .rules import apply_stat_deltas
from .types import DIVISION_FREEDOM_ORDER, Certificate, GameState

RECRUITMENT_QUESTION_COUNT = 3
RECRUITMENT_PASS_SCORE = 67

# Division name tokens -> required freedom level (first match wins, checked in this order).
_ELITE_TOKENS = ("judge", "court", "cyber", "air defense")
_ADVANCED_TOKENS = ("armored", "special", "signal")

_EXTRA_CERTS = {"ELITE": 3, "ADVANCED": 2, "STANDARD": 1}


def division_requirement(entry: DivisionEntry) -> Dict[str, Any]:
    """Minimum certificate freedom level and the paperwork count a division asks for."""
    text = f"{entry.division_id} {entry.name}".lower().replace("-", " ")
    if any(tok in text for tok in _ELITE_TOKENS):
        level = "ELITE"
    elif any(tok in text for tok in _ADVANCED_TOKENS):
        level = "ADVANCED"
    else:
        level = "STANDARD"
    return {"min_freedom": level, "extra_certifications": _EXTRA_CERTS[level]}


def recruitment_answer_key(division_name: str) -> Tuple[int, ...]:
    seed = hash_seed(f"recruitment:{division_name}")
    return ((seed % 4) + 1, ((seed + 3) % 4) + 1, ((seed + 7) % 4) + 1)


def freedom_rank(level: str) -> int:
    try:
        return DIVISION_FREEDOM_ORDER.index(str(level).upper())
    except ValueError:
        return 0


def best_certificate(inventory: Sequence[Certificate]) -> Optional[Certificate]:
    if not inventory:
        return None
    return max(inventory, key=lambda c: (freedom_rank(c.division_freedom), c.tier, c.score, c.issued_day))


def resolve_recruitment(
    state: GameState,
    division: str,
    answers: Sequence[int],
    *,
    cfg: GameConfig,
) -> Tuple[GameState, Dict[str, Any]]:
    ensure_actionable(state)
    entry = cfg.find_division(division)
    if entry is None:
        raise NotFoundError(DIVISION_NOT_FOUND, f"Division not found: {division!r}", {"division": division})
    if entry.name == state.player_division:
        raise PreconditionError(ALREADY_IN_DIVISION, f"Already serving in {entry.name}.")
    answers = validate_answer_sheet(answers, RECRUITMENT_QUESTION_COUNT)

    requirement = division_requirement(entry)
    cert = best_certificate(state.certificate_inventory)
    if cert is None or freedom_rank(cert.division_freedom) < freedom_rank(requirement["min_freedom"]):
        raise PreconditionError(
            CERTIFICATE_REQUIRED,
            f"{entry.name} requires a {requirement['min_freedom']} academy certificate.",
            {
                "required_freedom": requirement["min_freedom"],
                "held_freedom": cert.division_freedom if cert else None,
            },
        )

    score = score_answers(answers, recruitment_answer_key(entry.name))
    passed = score >= RECRUITMENT_PASS_SCORE
    if passed:
        new_state = replace(state, player_division=entry.name)
        new_state = apply_stat_deltas(new_state, morale=2)
    else:
        new_state = apply_stat_deltas(state, morale=-1)

    return new_state, {
        "type": "RECRUITMENT",
        "division": entry.name,
        "division_id": entry.division_id,
        "score": score,
        "passed": passed,
        "required_freedom": requirement["min_freedom"],
        "extra_certifications": requirement["extra_certifications"],
        "certificate_id": cert.certificate_id,
    }
