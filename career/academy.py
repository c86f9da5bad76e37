"""Military academy exam: scoring, grades, division freedom, certificates."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Sequence, Tuple

from .actions import require_funds
from .config import GameConfig
from .errors import ACADEMY_TIER_LOCKED, INVALID_INPUT, PreconditionError, ValidationError
from .pause import ensure_actionable
from .progress import advance_game_days
from .rng import hash_seed
from .rules import apply_stat_deltas
from .types import Certificate, GameState

ACADEMY_TIERS = (1, 2)
ACADEMY_QUESTION_COUNT = 5
ANSWER_CHOICES = 4

# Offsets applied to the tier seed to derive each question's correct option.
_KEY_OFFSETS = (0, 3, 7, 11, 13)

# Stat rewards on a passed exam, per tier.
_PASS_MORALE = 3
_PASS_POINTS_PER_TIER = 3
_FAIL_MORALE = -2


def academy_answer_key(tier: int) -> Tuple[int, ...]:
    seed = hash_seed(f"academy:tier:{int(tier)}")
    return tuple(((seed + off) % ANSWER_CHOICES) + 1 for off in _KEY_OFFSETS)


def score_answers(answers: Sequence[int], key: Sequence[int]) -> int:
    """Percentage of correct answers, rounded half up."""
    if not key:
        return 0
    correct = sum(1 for a, k in zip(answers, key) if int(a) == int(k))
    return (correct * 200 + len(key)) // (2 * len(key))


def grade_for(score: int) -> str:
    if score >= 90:
        return "A"
    if score >= 80:
        return "B"
    if score >= 70:
        return "C"
    return "D"


def division_freedom_level(tier: int, grade: str) -> str:
    """How freely the certificate holder may pick a division."""
    try:
        tier = int(tier)
    except (TypeError, ValueError):
        return "LIMITED"
    grade = str(grade or "").upper()
    if tier <= 0 or grade not in {"A", "B", "C", "D"}:
        return "LIMITED"
    if tier >= 3:
        return "ELITE" if grade == "A" else "ADVANCED"
    if tier == 2:
        return "ADVANCED" if grade in {"A", "B"} else "STANDARD"
    return "STANDARD" if grade == "A" else "LIMITED"


def validate_answer_sheet(answers: Any, count: int) -> Tuple[int, ...]:
    """Exactly `count` multiple-choice answers, each in 1..ANSWER_CHOICES."""
    if not isinstance(answers, (list, tuple)) or len(answers) != count:
        raise ValidationError(INVALID_INPUT, f"answers must contain exactly {count} entries", {"field": "answers"})
    out = []
    for a in answers:
        if isinstance(a, bool) or not isinstance(a, int) or not (1 <= a <= ANSWER_CHOICES):
            raise ValidationError(INVALID_INPUT, f"answer out of range: {a!r}", {"field": "answers"})
        out.append(int(a))
    return tuple(out)


def _validate_answers(tier: Any, answers: Any) -> Tuple[int, Tuple[int, ...]]:
    try:
        tier_i = int(tier)
    except (TypeError, ValueError):
        tier_i = -1
    if tier_i not in ACADEMY_TIERS:
        raise ValidationError(INVALID_INPUT, f"Invalid academy tier: {tier!r}", {"allowed": list(ACADEMY_TIERS)})
    return tier_i, validate_answer_sheet(answers, ACADEMY_QUESTION_COUNT)


def resolve_academy_exam(
    state: GameState,
    tier: int,
    answers: Sequence[int],
    *,
    cfg: GameConfig,
) -> Tuple[GameState, Dict[str, Any]]:
    ensure_actionable(state)
    tier, answers = _validate_answers(tier, answers)
    if tier > state.academy_tier + 1:
        raise PreconditionError(
            ACADEMY_TIER_LOCKED,
            f"Academy tier {tier} requires a tier {tier - 1} certificate.",
            {"academy_tier": state.academy_tier},
        )
    fee = cfg.academy_fee_cents[min(tier, len(cfg.academy_fee_cents)) - 1]
    require_funds(state, fee, what=f"academy tier {tier}")

    score = score_answers(answers, academy_answer_key(tier))
    grade = grade_for(score)
    passed = score >= cfg.academy_pass_score
    freedom = division_freedom_level(tier, grade)

    new_state = apply_stat_deltas(state, money_cents=-fee)
    new_state, advanced = advance_game_days(new_state, cfg.academy_days[min(tier, len(cfg.academy_days)) - 1], cfg=cfg)

    certificate = None
    if passed:
        certificate = Certificate(
            certificate_id=f"ACAD-T{tier}-D{new_state.current_day}-{len(new_state.certificate_inventory) + 1}",
            tier=tier,
            score=score,
            grade=grade,
            division_freedom=freedom,
            issued_day=new_state.current_day,
        )
        new_state = apply_stat_deltas(new_state, morale=_PASS_MORALE, promotion_points=_PASS_POINTS_PER_TIER * tier)
        new_state = replace(
            new_state,
            academy_tier=max(new_state.academy_tier, tier),
            certificate_inventory=new_state.certificate_inventory + (certificate,),
        )
    else:
        new_state = apply_stat_deltas(new_state, morale=_FAIL_MORALE)

    return new_state, {
        "type": "MILITARY_ACADEMY",
        "tier": tier,
        "score": score,
        "grade": grade,
        "passed": passed,
        "division_freedom": freedom,
        "fee_cents": fee,
        "advanced_days": advanced,
        "certificate": certificate.to_dict() if certificate else None,
    }
