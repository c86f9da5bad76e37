"""Periodic award ceremony.

Every `interval_days` the game stops for a mandatory CEREMONY pause. The report is
deterministic: identical state -> identical chief, quota and recipients.

Algorithm
---------
1) roster: live NPC identities (or the seeded registry when no runtime roster exists)
2) score every NPC for the ceremony day, the player from rank/readiness/service
3) stable descending sort; chief of staff = top NPC; previous chief from the previous cycle
4) eligibility: a mission ended within `mission_window_days`
5) quota: chief score, high performers, award saturation and strictness, clamped when eligible
6) mission leaders: the top contributor per field of the last mission is awarded first
7) sequential allocation over the candidate pool with a rotating catalog start index
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from career.errors import CEREMONY_NOT_PENDING, DECISION_PENDING, ConflictError, PreconditionError
from career.pause import TokenFactory, force_pause, new_pause_token, release_pause
from career.rules import apply_stat_deltas
from career.types import AwardHistory, GameState, MissionParticipantStats
from npcs.catalog import DEFAULT_NPC_CATALOG, NpcCatalog
from npcs.lifecycle import roster_identities
from npcs.registry import NpcIdentity, build_npc_registry
from npcs.types import NpcRuntime

from .config import CeremonyConfig

logger = logging.getLogger(__name__)

DEFAULT_CEREMONY_CONFIG = CeremonyConfig()


class CeremonyInvariantError(RuntimeError):
    """Raised when a report breaks quota bounds or award uniqueness. Never clamped away."""


@dataclass(frozen=True, slots=True)
class CeremonyRecipient:
    order: int
    name: str
    division: str
    unit: str
    position: str
    medal_name: str
    ribbon_name: str
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "order": self.order,
            "npc_name": self.name,
            "division": self.division,
            "unit": self.unit,
            "position": self.position,
            "medal_name": self.medal_name,
            "ribbon_name": self.ribbon_name,
            "reason": self.reason,
        }


@dataclass(frozen=True, slots=True)
class ChiefOfStaff:
    name: str
    competence_score: int
    previous_chief_name: Optional[str]
    replaced_previous_chief: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "competence_score": self.competence_score,
            "previous_chief_name": self.previous_chief_name,
            "replaced_previous_chief": self.replaced_previous_chief,
        }


@dataclass(frozen=True, slots=True)
class CeremonyReport:
    ceremony_day: int
    attendance: int
    medal_quota: int
    chief_of_staff: ChiefOfStaff
    logs: Tuple[str, ...]
    recipients: Tuple[CeremonyRecipient, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ceremony_day": self.ceremony_day,
            "attendance": self.attendance,
            "medal_quota": self.medal_quota,
            "chief_of_staff": self.chief_of_staff.to_dict(),
            "logs": list(self.logs),
            "recipients": [r.to_dict() for r in self.recipients],
        }


@dataclass(frozen=True, slots=True)
class _Candidate:
    name: str
    division: str
    unit: str
    position: str
    score: int


# ---------------------------------------------------------------------------
# Schedule
# ---------------------------------------------------------------------------


def ceremony_day(game_day: int, cfg: CeremonyConfig = DEFAULT_CEREMONY_CONFIG) -> int:
    n = cfg.interval_days
    if game_day < n:
        return n
    return (int(game_day) // n) * n


def is_ceremony_due(state: GameState, cfg: CeremonyConfig = DEFAULT_CEREMONY_CONFIG) -> bool:
    cd = ceremony_day(state.current_day, cfg)
    return state.current_day >= cd and state.ceremony_completed_day < cd


def enforce_ceremony_pause(
    state: GameState,
    *,
    now_ms: int,
    cfg: CeremonyConfig = DEFAULT_CEREMONY_CONFIG,
    token_factory: TokenFactory = new_pause_token,
) -> Tuple[GameState, bool]:
    """Force the CEREMONY pause when due. A pending decision is resolved first."""
    if not is_ceremony_due(state, cfg):
        return state, False
    if state.pause is not None and state.pause.is_blocking:
        return state, False
    logger.info(
        "CEREMONY_PAUSE profile_id=%s ceremony_day=%s",
        state.profile_id,
        ceremony_day(state.current_day, cfg),
    )
    return force_pause(state, "CEREMONY", now_ms=now_ms, token_factory=token_factory), True


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


def score_npc(day: int, slot: int, morale: int, health: int, cfg: CeremonyConfig = DEFAULT_CEREMONY_CONFIG) -> int:
    growth = day // cfg.npc_growth_div
    personality = (slot * cfg.slot_mult + day * cfg.day_mult) % cfg.personality_mod
    return cfg.npc_base + growth + personality + (morale + health) // cfg.readiness_div


def score_player(state: GameState, cfg: CeremonyConfig = DEFAULT_CEREMONY_CONFIG) -> int:
    base = cfg.player_base + state.rank_index * cfg.rank_mult
    readiness = (state.morale + state.health) // cfg.player_readiness_div
    service = state.current_day // cfg.service_div
    return base + readiness + service


def _rank(identities: Sequence[NpcIdentity], day: int, state: GameState, cfg: CeremonyConfig) -> List[_Candidate]:
    scored = [
        _Candidate(
            name=ident.name,
            division=ident.division,
            unit=ident.unit,
            position=ident.position,
            score=score_npc(day, ident.slot, state.morale, state.health, cfg),
        )
        for ident in identities
    ]
    # sorted() is stable: ties keep slot order.
    return sorted(scored, key=lambda c: -c.score)


def pick_unique_award(
    owned: AwardHistory,
    seed: int,
    cfg: CeremonyConfig = DEFAULT_CEREMONY_CONFIG,
) -> Optional[Tuple[str, str]]:
    """First medal and ribbon not yet owned, scanning each catalog from `seed`."""
    medals, ribbons = cfg.medals, cfg.ribbons
    medal = next(
        (medals[(seed + i) % len(medals)] for i in range(len(medals)) if medals[(seed + i) % len(medals)] not in owned.medals),
        None,
    )
    ribbon = next(
        (ribbons[(seed + i) % len(ribbons)] for i in range(len(ribbons)) if ribbons[(seed + i) % len(ribbons)] not in owned.ribbons),
        None,
    )
    if medal is None or ribbon is None:
        return None
    return medal, ribbon


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------


LEADER_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("tactical", "tactical execution"),
    ("support", "support logistics"),
    ("leadership", "leadership command"),
    ("resilience", "resilience under fire"),
)


def mission_leaders(
    stats: Sequence[MissionParticipantStats],
) -> List[Tuple[str, str, Optional[MissionParticipantStats]]]:
    """(field, label, winner) per contribution field; ties go to the earlier participant."""
    return [
        (field, label, max(stats, key=lambda s, f=field: getattr(s, f)) if stats else None)
        for field, label in LEADER_FIELDS
    ]




def build_ceremony_report(
    state: GameState,
    *,
    cfg: CeremonyConfig = DEFAULT_CEREMONY_CONFIG,
    roster: Optional[Sequence[NpcRuntime]] = None,
    catalog: NpcCatalog = DEFAULT_NPC_CATALOG,
) -> CeremonyReport:
    cd = ceremony_day(state.current_day, cfg)
    previous_cd = max(cfg.interval_days, cd - cfg.interval_days)

    identities = roster_identities(roster) if roster else build_npc_registry(state.branch, catalog=catalog)
    if not identities:
        raise CeremonyInvariantError(f"no active personnel for ceremony (profile_id={state.profile_id})")

    ranked = _rank(identities, cd, state, cfg)
    previous_ranked = _rank(identities, previous_cd, state, cfg)
    chief = ranked[0]
    previous_chief = previous_ranked[0] if previous_ranked else None

    player = _Candidate(
        name=state.player_name,
        division=state.player_division,
        unit=ranked[1].unit if len(ranked) > 1 else "1st Brigade",
        position=state.player_position,
        score=score_player(state, cfg),
    )
    pool = sorted(ranked[1:] + [player], key=lambda c: -c.score)

    participants = set(state.mission_participants)
    has_mission = state.last_mission_day >= 0 and state.current_day - state.last_mission_day <= cfg.mission_window_days
    high_performers = sum(1 for c in pool if c.score >= chief.score - cfg.high_performer_margin)
    saturation = min(cfg.saturation_cap, (len(state.npc_award_history) + len(state.player_medals)) // 2)
    strictness = 1 if state.morale < cfg.strictness_morale_threshold else 0
    if chief.score < 0:
        raise CeremonyInvariantError(f"chief of staff score {chief.score} is negative; check the scoring constants")
    raw_quota = chief.score // cfg.chief_score_div + high_performers // cfg.high_performer_div - saturation - strictness
    if has_mission:
        quota = max(cfg.quota_min, min(cfg.quota_max, raw_quota))
    else:
        quota = 0

    leaders = mission_leaders(state.last_mission.participant_stats if state.last_mission else ())
    by_name = {c.name: c for c in pool}

    recipients: List[CeremonyRecipient] = []
    awarded = set()
    if has_mission:
        for field, label, winner in leaders:
            if winner is None or winner.name in awarded:
                continue
            if len(recipients) >= quota:
                break
            cand = by_name.get(winner.name)
            if cand is None:
                continue
            award = pick_unique_award(state.owned_awards(cand.name), len(recipients) + cd, cfg)
            if award is None:
                continue
            recipients.append(
                CeremonyRecipient(
                    order=len(recipients) + 1,
                    name=cand.name,
                    division=cand.division,
                    unit=cand.unit,
                    position=cand.position,
                    medal_name=award[0],
                    ribbon_name=award[1],
                    reason=f"Top mission contributor in {label} ({getattr(winner, field)}) with total score {winner.total}.",
                )
            )
            awarded.add(cand.name)

        for cand in pool:
            if len(recipients) >= quota:
                break
            if cand.name in awarded:
                continue
            award = pick_unique_award(state.owned_awards(cand.name), len(recipients) + cd, cfg)
            if award is None:
                continue
            if cand.score < chief.score - cfg.eligibility_margin:
                continue
            if cand.name not in participants and cand.name != state.player_name:
                continue
            recipients.append(
                CeremonyRecipient(
                    order=len(recipients) + 1,
                    name=cand.name,
                    division=cand.division,
                    unit=cand.unit,
                    position=cand.position,
                    medal_name=award[0],
                    ribbon_name=award[1],
                    reason=f"Mission and command score {cand.score} kept operations stable this cycle.",
                )
            )
            awarded.add(cand.name)

    _check_recipients(state, recipients, quota)

    attendance = len(identities) + 1
    logs = (
        f"Ceremony starts on Day {cd}. All {attendance} personnel are assembled for formation.",
        f"Chief of Staff {chief.name} sets quota {quota} from competence, saturation and excellence threshold.",
        "Mission achievement detected. Medal board is active for this cycle."
        if has_mission
        else "No mission achievement in the active window. Medal board is locked this cycle.",
        f"Recipients selected: {len(recipients)}.",
        f"Mission participants: {', '.join(sorted(participants)) if participants else 'none'}.",
        "Mission leaders: "
        + (", ".join(f"{field}={w.name}" for field, _, w in leaders if w is not None) or "none recorded")
        + ".",
        f"Ceremony closes with directives for the next {cfg.interval_days}-day cycle.",
    )
    return CeremonyReport(
        ceremony_day=cd,
        attendance=attendance,
        medal_quota=quota,
        chief_of_staff=ChiefOfStaff(
            name=chief.name,
            competence_score=chief.score,
            previous_chief_name=previous_chief.name if previous_chief else None,
            replaced_previous_chief=bool(previous_chief and previous_chief.name != chief.name),
        ),
        logs=logs,
        recipients=tuple(recipients),
    )


def _check_recipients(state: GameState, recipients: Sequence[CeremonyRecipient], quota: int) -> None:
    if len(recipients) > quota:
        raise CeremonyInvariantError(f"{len(recipients)} recipients exceed quota {quota}")
    names = [r.name for r in recipients]
    if len(set(names)) != len(names):
        raise CeremonyInvariantError(f"duplicate ceremony recipient in {names!r}")
    for r in recipients:
        owned = state.owned_awards(r.name)
        if r.medal_name in owned.medals or r.ribbon_name in owned.ribbons:
            raise CeremonyInvariantError(f"{r.name} already holds {r.medal_name!r} or {r.ribbon_name!r}")


# ---------------------------------------------------------------------------
# Completion
# ---------------------------------------------------------------------------


def _with_award(history: AwardHistory, medal: str, ribbon: str) -> AwardHistory:
    return AwardHistory(
        medals=history.medals + ((medal,) if medal not in history.medals else ()),
        ribbons=history.ribbons + ((ribbon,) if ribbon not in history.ribbons else ()),
    )


def complete_ceremony(
    state: GameState,
    report: CeremonyReport,
    *,
    now_ms: int,
    cfg: CeremonyConfig = DEFAULT_CEREMONY_CONFIG,
) -> GameState:
    """Record the awards, grant the attendance bonus and release the CEREMONY pause."""
    if state.pause is not None and state.pause.reason == "DECISION":
        raise PreconditionError(DECISION_PENDING, "Resolve the pending decision before the ceremony.")
    if state.pause_reason != "CEREMONY" and not is_ceremony_due(state, cfg):
        raise ConflictError(
            CEREMONY_NOT_PENDING,
            "No ceremony is pending.",
            {"ceremony_completed_day": state.ceremony_completed_day},
        )

    medals, ribbons = state.player_medals, state.player_ribbons
    history: Dict[str, AwardHistory] = dict(state.npc_award_history)
    for r in report.recipients:
        if r.name == state.player_name:
            owned = _with_award(AwardHistory(medals=medals, ribbons=ribbons), r.medal_name, r.ribbon_name)
            medals, ribbons = owned.medals, owned.ribbons
        else:
            history[r.name] = _with_award(history.get(r.name) or AwardHistory(), r.medal_name, r.ribbon_name)

    new_state = replace(
        state,
        player_medals=medals,
        player_ribbons=ribbons,
        npc_award_history=history,
        ceremony_completed_day=report.ceremony_day,
        ceremony_recent_awards=tuple(r.to_dict() for r in report.recipients),
    )
    new_state = apply_stat_deltas(
        new_state,
        money_cents=cfg.completion_money_cents,
        morale=cfg.completion_morale,
        health=cfg.completion_health,
    )
    if new_state.pause_reason == "CEREMONY":
        new_state = release_pause(new_state, now_ms=now_ms)
    logger.info(
        "CEREMONY_COMPLETED profile_id=%s ceremony_day=%s recipients=%s",
        state.profile_id,
        report.ceremony_day,
        len(report.recipients),
    )
    return new_state
