"""Request-level orchestration for the career engine.

Every public function is one request:

    profile_serial_lock(profile_id)
      -> CareerRepo.read()                   (BEGIN DEFERRED, no write lock)
        -> load state + roster
        -> auto-resume an expired soft pause, sync the clock, fill due recruits
        -> force the CEREMONY pause if one is due
        -> run the action
        -> re-check the ceremony, optionally queue a random decision
      -> CareerRepo.transaction()            (BEGIN IMMEDIATE, only if something changed)
        -> check the stored version, write state (version + 1), NPCs, tickets, logs

Writes are buffered on the session, so the shared write lock is held only
for the final flush. Any exception before or during the flush leaves the
database untouched.
"""

from __future__ import annotations

import contextlib
import functools
import logging
import random
from dataclasses import replace
from typing import Any, Dict, Iterator, List, Optional, Sequence, Set, Tuple

import game_time
from career_repo import CareerRepo
from ceremony import engine as ceremony_engine
from config import get_db_path, get_ms_per_day, get_pause_timeout_minutes
from decisions import engine as decision_engine
from decisions import repo as decision_repo
from decisions.engine import DecisionLogDraft
from npcs import repo as npc_repo
from npcs.activity import npc_background_activity
from npcs.lifecycle import fill_due_recruits, mark_kia, seed_roster
from npcs.types import NpcRuntime, RecruitmentTicket

from . import repo as state_repo
from .academy import resolve_academy_exam
from .actions import resolve_career_review, resolve_deployment, resolve_training, resolve_travel
from .bootstrap import ensure_db_initialized
from .config import GameConfig, build_default_config
from .errors import (
    INVALID_INPUT,
    PROFILE_EXISTS,
    PROFILE_NOT_FOUND,
    STATE_CHANGED,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from .interactions import resolve_command_action, resolve_social_interaction
from .locks import profile_serial_lock
from .pause import TokenFactory, auto_resume_if_expired, new_pause_token, request_pause, resume
from .progress import new_game_state, restart_world as _restart_state, set_time_scale as _set_scale, synchronize_progress
from .raiders import raider_outlook, resolve_raider_defense
from .recruitment import resolve_recruitment
from .snapshot import build_snapshot
from .types import GameState

logger = logging.getLogger(__name__)

MIN_START_AGE = 17
MAX_START_AGE = 40
MAX_NAME_LENGTH = 64


@functools.lru_cache(maxsize=1)
def default_game_config() -> GameConfig:
    """Process-wide tables with env overrides applied once."""
    return build_default_config(
        ms_per_day=get_ms_per_day(),
        pause_timeout_minutes=get_pause_timeout_minutes(),
    )


class _Session:
    """Mutable working set of one request. Only the orchestrator touches it.

    `cur` is a read cursor; it is closed by the time flush() runs. Every
    write goes through the buffers below.
    """

    def __init__(
        self,
        cur,
        state: GameState,
        roster: Dict[str, NpcRuntime],
        *,
        cfg: GameConfig,
        rng: random.Random,
        now_ms: int,
        token_factory: TokenFactory,
    ) -> None:
        self.cur = cur
        self.state = state
        self.loaded = state
        self.roster = roster
        self.cfg = cfg
        self.rng = rng
        self.now_ms = int(now_ms)
        self.now_iso = game_time.iso_from_ms(self.now_ms)
        self.token_factory = token_factory
        self.changed_npcs: Dict[str, NpcRuntime] = {}
        self.filled_tickets: List[Tuple[int, str]] = []
        self.new_tickets: List[RecruitmentTicket] = []
        self.log_drafts: List[DecisionLogDraft] = []
        self.log_ids: List[int] = []
        self.reset_world = False

    def put_npc(self, npc: NpcRuntime) -> None:
        self.roster[npc.npc_id] = npc
        self.changed_npcs[npc.npc_id] = npc

    def live_roster(self) -> List[NpcRuntime]:
        return sorted((n for n in self.roster.values() if n.alive), key=lambda n: (n.slot, n.generation))

    def filled_ticket_ids(self) -> Set[int]:
        return {ticket_id for ticket_id, _ in self.filled_tickets}

    def has_writes(self) -> bool:
        return bool(
            self.state != self.loaded
            or self.changed_npcs
            or self.filled_tickets
            or self.new_tickets
            or self.log_drafts
            or self.reset_world
        )

    # -- lifecycle ----------------------------------------------------------

    def prepare(self) -> None:
        self.state, _ = auto_resume_if_expired(self.state, now_ms=self.now_ms)
        self.state, elapsed = synchronize_progress(self.state, now_ms=self.now_ms, cfg=self.cfg)
        if elapsed:
            logger.debug("SYNC profile_id=%s elapsed_days=%s day=%s", self.state.profile_id, elapsed, self.state.current_day)
        self.fill_recruits()
        self.enforce_ceremony()

    def fill_recruits(self) -> None:
        tickets = npc_repo.list_pending_tickets(self.cur, self.state.profile_id, due_by=self.state.current_day)
        if not tickets:
            return
        filled = fill_due_recruits(
            self.state.branch,
            tickets,
            current_day=self.state.current_day,
            existing=self.live_roster(),
            catalog=self.cfg.npc_catalog,
        )
        for ticket, recruit in filled:
            self.put_npc(recruit)
            self.filled_tickets.append((int(ticket.ticket_id), recruit.npc_id))
            logger.info("NPC_RECRUITED profile_id=%s npc_id=%s replaced=%s", self.state.profile_id, recruit.npc_id, ticket.replaced_npc_id)

    def enforce_ceremony(self) -> None:
        self.state, _ = ceremony_engine.enforce_ceremony_pause(
            self.state,
            now_ms=self.now_ms,
            cfg=self.cfg.ceremony,
            token_factory=self.token_factory,
        )

    def queue_decision(self) -> None:
        if self.state.pause is not None and self.state.pause.is_blocking:
            return
        candidates = decision_repo.fetch_candidate_events(
            self.cur,
            profile_id=self.state.profile_id,
            country=self.state.country,
            branch=self.state.branch,
            rank_index=self.state.rank_index,
        )
        self.state, _ = decision_engine.maybe_queue_decision(
            self.state,
            candidates,
            cfg=self.cfg,
            rng=self.rng,
            now_ms=self.now_ms,
            token_factory=self.token_factory,
        )

    def flush(self, cur) -> None:
        """Write the buffered changes. Runs inside the short write transaction."""
        profile_id = self.state.profile_id
        stored = state_repo.get_state_version(cur, profile_id)
        if stored != self.loaded.version:
            raise ConflictError(
                STATE_CHANGED,
                "Profile state changed by another request; re-fetch the snapshot.",
                {"profile_id": profile_id, "expected_version": self.loaded.version, "stored_version": stored},
            )
        if self.reset_world:
            removed = decision_repo.delete_decision_logs(cur, profile_id=profile_id)
            npc_repo.delete_roster(cur, profile_id)
            logger.info("WORLD_RESTARTED profile_id=%s removed_logs=%s", profile_id, removed)

        self.state = replace(self.state, version=self.loaded.version + 1)
        state_repo.save_state(cur, self.state, now=self.now_iso)
        if self.changed_npcs:
            npc_repo.upsert_npcs(cur, profile_id, self.changed_npcs.values(), now=self.now_iso)
        for ticket_id, npc_id in self.filled_tickets:
            npc_repo.mark_ticket_filled(cur, ticket_id, filled_npc_id=npc_id, now=self.now_iso)
        for ticket in self.new_tickets:
            npc_repo.enqueue_ticket(cur, profile_id, ticket, now=self.now_iso)
        for draft in self.log_drafts:
            self.log_ids.append(
                decision_repo.insert_decision_log(
                    cur,
                    profile_id=profile_id,
                    event_id=draft.event_id,
                    game_day=draft.game_day,
                    selected_option=draft.selected_option,
                    consequences=draft.consequences,
                    state_before=draft.state_before,
                    state_after=draft.state_after,
                    now=self.now_iso,
                )
            )

    def snapshot(self) -> Dict[str, Any]:
        return build_snapshot(self.state, now_ms=self.now_ms, cfg=self.cfg)


@contextlib.contextmanager
def _profile_session(
    profile_id: str,
    *,
    db_path: Optional[str],
    now_ms: Optional[int],
    cfg: Optional[GameConfig],
    rng: Optional[random.Random],
    token_factory: TokenFactory,
    queue_events: bool = True,
    reason: str = "",
) -> Iterator[_Session]:
    cfg = cfg or default_game_config()
    db_path = db_path or get_db_path()
    ensure_db_initialized(db_path)
    with profile_serial_lock(profile_id, reason=reason):
        with CareerRepo(db_path) as repo:
            with repo.read() as cur:
                state = state_repo.load_state(cur, profile_id)
                if state is None:
                    raise NotFoundError(PROFILE_NOT_FOUND, f"Profile not found: {profile_id}", {"profile_id": profile_id})
                roster = npc_repo.roster_by_id(npc_repo.load_roster(cur, profile_id))
                session = _Session(
                    cur,
                    state,
                    roster,
                    cfg=cfg,
                    rng=rng or random.Random(),
                    now_ms=game_time.now_ms() if now_ms is None else now_ms,
                    token_factory=token_factory,
                )
                session.prepare()

                yield session

                session.enforce_ceremony()
                if queue_events:
                    session.queue_decision()

            if session.has_writes():
                with repo.transaction() as cur:
                    session.flush(cur)
def _result(session: _Session, **extra: Any) -> Dict[str, Any]:
    out: Dict[str, Any] = dict(extra)
    out["snapshot"] = session.snapshot()
    return out


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


def create_profile(
    profile_id: str,
    name: str,
    country: str,
    branch: str,
    start_age: int = 18,
    *,
    db_path: Optional[str] = None,
    now_ms: Optional[int] = None,
    cfg: Optional[GameConfig] = None,
) -> Dict[str, Any]:
    """Create a profile, its day-0 state and a generation-0 NPC roster."""
    cfg = cfg or default_game_config()
    db_path = db_path or get_db_path()
    profile_id = str(profile_id or "").strip()
    name = str(name or "").strip()
    country = str(country or "").strip().upper()
    branch = str(branch or "").strip().upper()
    if not profile_id:
        raise ValidationError(INVALID_INPUT, "profile_id is required", {"field": "profile_id"})
    if not name or len(name) > MAX_NAME_LENGTH:
        raise ValidationError(INVALID_INPUT, f"name must be 1..{MAX_NAME_LENGTH} characters", {"field": "name"})
    if country not in cfg.countries:
        raise ValidationError(INVALID_INPUT, f"Invalid country: {country!r}", {"field": "country", "allowed": list(cfg.countries)})
    if branch not in cfg.branches or cfg.branches[branch].country != country:
        allowed = [code for code, b in cfg.branches.items() if b.country == country]
        raise ValidationError(INVALID_INPUT, f"Invalid branch for {country}: {branch!r}", {"field": "branch", "allowed": allowed})
    if isinstance(start_age, bool) or not isinstance(start_age, int) or not (MIN_START_AGE <= start_age <= MAX_START_AGE):
        raise ValidationError(
            INVALID_INPUT,
            f"start_age must be an integer in [{MIN_START_AGE}, {MAX_START_AGE}]",
            {"field": "start_age"},
        )

    now_value = game_time.now_ms() if now_ms is None else int(now_ms)
    now_iso = game_time.iso_from_ms(now_value)
    ensure_db_initialized(db_path)
    with profile_serial_lock(profile_id, reason="CREATE_PROFILE"):
        with CareerRepo(db_path) as repo:
            with repo.transaction() as cur:
                if state_repo.get_profile(cur, profile_id) is not None:
                    raise ConflictError(PROFILE_EXISTS, f"Profile already exists: {profile_id}", {"profile_id": profile_id})
                state_repo.insert_profile(
                    cur,
                    profile_id=profile_id,
                    name=name,
                    country=country,
                    branch=branch,
                    start_age=start_age,
                    now=now_iso,
                )
                state = new_game_state(
                    profile_id=profile_id,
                    player_name=name,
                    country=country,
                    branch=branch,
                    start_age=start_age,
                    now_ms=now_value,
                    cfg=cfg,
                )
                state_repo.save_state(cur, state, now=now_iso)
                npc_repo.upsert_npcs(cur, profile_id, seed_roster(branch, catalog=cfg.npc_catalog), now=now_iso)
    logger.info("PROFILE_CREATED profile_id=%s country=%s branch=%s", profile_id, country, branch)
    return {"snapshot": build_snapshot(state, now_ms=now_value, cfg=cfg)}


# ---------------------------------------------------------------------------
# Snapshot / pause
# ---------------------------------------------------------------------------


def get_snapshot(
    profile_id: str,
    *,
    db_path: Optional[str] = None,
    now_ms: Optional[int] = None,
    cfg: Optional[GameConfig] = None,
    rng: Optional[random.Random] = None,
    token_factory: TokenFactory = new_pause_token,
) -> Dict[str, Any]:
    with _profile_session(
        profile_id, db_path=db_path, now_ms=now_ms, cfg=cfg, rng=rng, token_factory=token_factory, reason="SNAPSHOT"
    ) as s:
        pass
    return _result(s)


def pause_game(
    profile_id: str,
    reason: str,
    *,
    db_path: Optional[str] = None,
    now_ms: Optional[int] = None,
    cfg: Optional[GameConfig] = None,
    rng: Optional[random.Random] = None,
    token_factory: TokenFactory = new_pause_token,
) -> Dict[str, Any]:
    with _profile_session(
        profile_id,
        db_path=db_path,
        now_ms=now_ms,
        cfg=cfg,
        rng=rng,
        token_factory=token_factory,
        queue_events=False,
        reason="PAUSE",
    ) as s:
        s.state, token = request_pause(
            s.state,
            reason,
            now_ms=s.now_ms,
            timeout_minutes=s.cfg.pause_timeout_minutes,
            token_factory=token_factory,
        )
    return _result(s, pause_token=token)


def resume_game(
    profile_id: str,
    pause_token: str,
    *,
    db_path: Optional[str] = None,
    now_ms: Optional[int] = None,
    cfg: Optional[GameConfig] = None,
    rng: Optional[random.Random] = None,
    token_factory: TokenFactory = new_pause_token,
) -> Dict[str, Any]:
    with _profile_session(
        profile_id,
        db_path=db_path,
        now_ms=now_ms,
        cfg=cfg,
        rng=rng,
        token_factory=token_factory,
        queue_events=False,
        reason="RESUME",
    ) as s:
        s.state = resume(s.state, pause_token, now_ms=s.now_ms)
        s.state, _ = synchronize_progress(s.state, now_ms=s.now_ms, cfg=s.cfg)
    return _result(s)


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


def run_training(
    profile_id: str,
    intensity: str,
    *,
    db_path: Optional[str] = None,
    now_ms: Optional[int] = None,
    cfg: Optional[GameConfig] = None,
    rng: Optional[random.Random] = None,
    token_factory: TokenFactory = new_pause_token,
) -> Dict[str, Any]:
    with _profile_session(
        profile_id, db_path=db_path, now_ms=now_ms, cfg=cfg, rng=rng, token_factory=token_factory, reason="TRAINING"
    ) as s:
        s.state, details = resolve_training(s.state, intensity, cfg=s.cfg, rng=s.rng)
    return _result(s, details=details)


def run_deployment(
    profile_id: str,
    mission_type: str,
    duration_days: Optional[int] = None,
    *,
    db_path: Optional[str] = None,
    now_ms: Optional[int] = None,
    cfg: Optional[GameConfig] = None,
    rng: Optional[random.Random] = None,
    token_factory: TokenFactory = new_pause_token,
) -> Dict[str, Any]:
    with _profile_session(
        profile_id, db_path=db_path, now_ms=now_ms, cfg=cfg, rng=rng, token_factory=token_factory, reason="DEPLOYMENT"
    ) as s:
        s.state, details = resolve_deployment(
            s.state,
            mission_type,
            duration_days,
            cfg=s.cfg,
            rng=s.rng,
            roster=s.live_roster(),
        )
        casualty_id = details.get("casualty_npc_id")
        if casualty_id:
            fallen, ticket = mark_kia(s.roster[casualty_id], day=s.state.current_day)
            s.put_npc(fallen)
            s.new_tickets.append(ticket)
            details = dict(details, casualty_name=fallen.name, replacement_due_day=ticket.due_day)
    return _result(s, details=details)


def run_career_review(
    profile_id: str,
    *,
    db_path: Optional[str] = None,
    now_ms: Optional[int] = None,
    cfg: Optional[GameConfig] = None,
    rng: Optional[random.Random] = None,
    token_factory: TokenFactory = new_pause_token,
) -> Dict[str, Any]:
    with _profile_session(
        profile_id, db_path=db_path, now_ms=now_ms, cfg=cfg, rng=rng, token_factory=token_factory, reason="CAREER_REVIEW"
    ) as s:
        s.state, details = resolve_career_review(s.state, cfg=s.cfg)
    return _result(s, details=details)


def run_academy(
    profile_id: str,
    tier: int,
    answers: Sequence[int],
    *,
    db_path: Optional[str] = None,
    now_ms: Optional[int] = None,
    cfg: Optional[GameConfig] = None,
    rng: Optional[random.Random] = None,
    token_factory: TokenFactory = new_pause_token,
) -> Dict[str, Any]:
    with _profile_session(
        profile_id, db_path=db_path, now_ms=now_ms, cfg=cfg, rng=rng, token_factory=token_factory, reason="ACADEMY"
    ) as s:
        s.state, details = resolve_academy_exam(s.state, tier, answers, cfg=s.cfg)
    return _result(s, details=details)


def run_travel(
    profile_id: str,
    place: str,
    *,
    db_path: Optional[str] = None,
    now_ms: Optional[int] = None,
    cfg: Optional[GameConfig] = None,
    rng: Optional[random.Random] = None,
    token_factory: TokenFactory = new_pause_token,
) -> Dict[str, Any]:
    with _profile_session(
        profile_id, db_path=db_path, now_ms=now_ms, cfg=cfg, rng=rng, token_factory=token_factory, reason="TRAVEL"
    ) as s:
        s.state, details = resolve_travel(s.state, place, cfg=s.cfg)
    return _result(s, details=details)


def run_social_interaction(
    profile_id: str,
    npc_id: str,
    interaction: str,
    *,
    db_path: Optional[str] = None,
    now_ms: Optional[int] = None,
    cfg: Optional[GameConfig] = None,
    rng: Optional[random.Random] = None,
    token_factory: TokenFactory = new_pause_token,
) -> Dict[str, Any]:
    with _profile_session(
        profile_id, db_path=db_path, now_ms=now_ms, cfg=cfg, rng=rng, token_factory=token_factory, reason="SOCIAL"
    ) as s:
        s.state, npc, details = resolve_social_interaction(
            s.state, npc_id, interaction, roster=s.roster, cfg=s.cfg
        )
        s.put_npc(npc)
    return _result(s, details=details, npc=npc.to_dict())


def run_command(
    profile_id: str,
    action: str,
    target_npc_id: Optional[str] = None,
    note: Optional[str] = None,
    *,
    db_path: Optional[str] = None,
    now_ms: Optional[int] = None,
    cfg: Optional[GameConfig] = None,
    rng: Optional[random.Random] = None,
    token_factory: TokenFactory = new_pause_token,
) -> Dict[str, Any]:
    with _profile_session(
        profile_id, db_path=db_path, now_ms=now_ms, cfg=cfg, rng=rng, token_factory=token_factory, reason="COMMAND"
    ) as s:
        s.state, target, details = resolve_command_action(
            s.state, action, target_npc_id, roster=s.roster, cfg=s.cfg, note=note
        )
        if target is not None:
            s.put_npc(target)
    return _result(s, details=details)


def run_recruitment(
    profile_id: str,
    division: str,
    answers: Sequence[int],
    *,
    db_path: Optional[str] = None,
    now_ms: Optional[int] = None,
    cfg: Optional[GameConfig] = None,
    rng: Optional[random.Random] = None,
    token_factory: TokenFactory = new_pause_token,
) -> Dict[str, Any]:
    with _profile_session(
        profile_id, db_path=db_path, now_ms=now_ms, cfg=cfg, rng=rng, token_factory=token_factory, reason="RECRUITMENT"
    ) as s:
        s.state, details = resolve_recruitment(s.state, division, answers, cfg=s.cfg)
    return _result(s, details=details)


def run_raider_defense(
    profile_id: str,
    *,
    db_path: Optional[str] = None,
    now_ms: Optional[int] = None,
    cfg: Optional[GameConfig] = None,
    rng: Optional[random.Random] = None,
    token_factory: TokenFactory = new_pause_token,
) -> Dict[str, Any]:
    with _profile_session(
        profile_id, db_path=db_path, now_ms=now_ms, cfg=cfg, rng=rng, token_factory=token_factory, reason="RAIDER_DEFENSE"
    ) as s:
        s.state, fallen, details = resolve_raider_defense(s.state, roster=s.live_roster(), rng=s.rng)
        for npc, ticket in fallen:
            s.put_npc(npc)
            s.new_tickets.append(ticket)
    return _result(s, details=details)


# ---------------------------------------------------------------------------
# Decisions
# ---------------------------------------------------------------------------


def choose_decision(
    profile_id: str,
    event_id: int,
    option_id: str,
    *,
    db_path: Optional[str] = None,
    now_ms: Optional[int] = None,
    cfg: Optional[GameConfig] = None,
    rng: Optional[random.Random] = None,
    token_factory: TokenFactory = new_pause_token,
) -> Dict[str, Any]:
    """Apply the chosen option, release the DECISION pause and append a decision log, in one transaction."""
    with _profile_session(
        profile_id,
        db_path=db_path,
        now_ms=now_ms,
        cfg=cfg,
        rng=rng,
        token_factory=token_factory,
        queue_events=False,
        reason="DECISION",
    ) as s:
        event = decision_repo.get_event_by_id(s.cur, int(event_id))
        s.state, result, draft = decision_engine.resolve_decision_choice(
            s.state,
            int(event_id),
            option_id,
            event,
            cfg=s.cfg,
            rng=s.rng,
            now_ms=s.now_ms,
        )
        s.log_drafts.append(draft)
    log_id = s.log_ids[0]
    logger.info("DECISION_RESOLVED profile_id=%s event_id=%s option=%s log_id=%s", profile_id, event_id, option_id, log_id)
    return _result(s, details=dict(result, decision_log_id=log_id))


def list_decision_logs(
    profile_id: str,
    *,
    cursor: Optional[int] = None,
    limit: int = 20,
    db_path: Optional[str] = None,
) -> Dict[str, Any]:
    if isinstance(limit, bool) or not isinstance(limit, int) or not (1 <= limit <= decision_repo.MAX_LOG_PAGE):
        raise ValidationError(INVALID_INPUT, f"limit must be an integer in [1, {decision_repo.MAX_LOG_PAGE}]", {"field": "limit"})
    if cursor is not None and (isinstance(cursor, bool) or not isinstance(cursor, int) or cursor <= 0):
        raise ValidationError(INVALID_INPUT, "cursor must be a positive integer", {"field": "cursor"})
    db_path = db_path or get_db_path()
    ensure_db_initialized(db_path)
    with CareerRepo(db_path) as repo:
        with repo.read() as cur:
            if state_repo.get_profile(cur, profile_id) is None:
                raise NotFoundError(PROFILE_NOT_FOUND, f"Profile not found: {profile_id}", {"profile_id": profile_id})
            items, next_cursor = decision_repo.list_decision_logs(cur, profile_id=profile_id, cursor=cursor, limit=limit)
    return {"items": items, "next_cursor": next_cursor}


# ---------------------------------------------------------------------------
# Ceremony
# ---------------------------------------------------------------------------


def get_ceremony(
    profile_id: str,
    *,
    db_path: Optional[str] = None,
    now_ms: Optional[int] = None,
    cfg: Optional[GameConfig] = None,
    rng: Optional[random.Random] = None,
    token_factory: TokenFactory = new_pause_token,
) -> Dict[str, Any]:
    """Report for the current ceremony cycle (read-only preview when none is due)."""
    with _profile_session(
        profile_id,
        db_path=db_path,
        now_ms=now_ms,
        cfg=cfg,
        rng=rng,
        token_factory=token_factory,
        queue_events=False,
        reason="CEREMONY_VIEW",
    ) as s:
        report = ceremony_engine.build_ceremony_report(
            s.state, cfg=s.cfg.ceremony, roster=s.live_roster(), catalog=s.cfg.npc_catalog
        )
        due = ceremony_engine.is_ceremony_due(s.state, s.cfg.ceremony)
    return _result(s, ceremony_due=due, report=report.to_dict())


def complete_ceremony(
    profile_id: str,
    *,
    db_path: Optional[str] = None,
    now_ms: Optional[int] = None,
    cfg: Optional[GameConfig] = None,
    rng: Optional[random.Random] = None,
    token_factory: TokenFactory = new_pause_token,
) -> Dict[str, Any]:
    with _profile_session(
        profile_id,
        db_path=db_path,
        now_ms=now_ms,
        cfg=cfg,
        rng=rng,
        token_factory=token_factory,
        queue_events=False,
        reason="CEREMONY_COMPLETE",
    ) as s:
        report = ceremony_engine.build_ceremony_report(
            s.state, cfg=s.cfg.ceremony, roster=s.live_roster(), catalog=s.cfg.npc_catalog
        )
        s.state = ceremony_engine.complete_ceremony(s.state, report, now_ms=s.now_ms, cfg=s.cfg.ceremony)
        s.state, _ = synchronize_progress(s.state, now_ms=s.now_ms, cfg=s.cfg)
    return _result(s, report=report.to_dict())


# ---------------------------------------------------------------------------
# World
# ---------------------------------------------------------------------------


def set_time_scale(
    profile_id: str,
    scale: int,
    *,
    db_path: Optional[str] = None,
    now_ms: Optional[int] = None,
    cfg: Optional[GameConfig] = None,
    rng: Optional[random.Random] = None,
    token_factory: TokenFactory = new_pause_token,
) -> Dict[str, Any]:
    with _profile_session(
        profile_id,
        db_path=db_path,
        now_ms=now_ms,
        cfg=cfg,
        rng=rng,
        token_factory=token_factory,
        queue_events=False,
        reason="TIME_SCALE",
    ) as s:
        s.state = _set_scale(s.state, scale, now_ms=s.now_ms, cfg=s.cfg)
    return _result(s)


def restart_world(
    profile_id: str,
    *,
    db_path: Optional[str] = None,
    now_ms: Optional[int] = None,
    cfg: Optional[GameConfig] = None,
    rng: Optional[random.Random] = None,
    token_factory: TokenFactory = new_pause_token,
) -> Dict[str, Any]:
    """Back to day 0: fresh state, fresh roster, empty decision log and recruitment queue."""
    with _profile_session(
        profile_id,
        db_path=db_path,
        now_ms=now_ms,
        cfg=cfg,
        rng=rng,
        token_factory=token_factory,
        queue_events=False,
        reason="RESTART",
    ) as s:
        s.state = _restart_state(s.state, now_ms=s.now_ms, cfg=s.cfg)
        s.reset_world = True
        s.roster = {}
        s.changed_npcs = {}
        s.filled_tickets = []
        s.new_tickets = []
        for npc in seed_roster(s.state.branch, catalog=s.cfg.npc_catalog):
            s.put_npc(npc)
    return _result(s)


def list_npcs(
    profile_id: str,
    *,
    include_fallen: bool = True,
    db_path: Optional[str] = None,
    now_ms: Optional[int] = None,
    cfg: Optional[GameConfig] = None,
    rng: Optional[random.Random] = None,
    token_factory: TokenFactory = new_pause_token,
) -> Dict[str, Any]:
    with _profile_session(
        profile_id,
        db_path=db_path,
        now_ms=now_ms,
        cfg=cfg,
        rng=rng,
        token_factory=token_factory,
        queue_events=False,
        reason="NPC_LIST",
    ) as s:
        npcs = sorted(s.roster.values(), key=lambda n: (n.slot, n.generation))
        filled = s.filled_ticket_ids()
        pending = [t for t in npc_repo.list_pending_tickets(s.cur, s.state.profile_id) if t.ticket_id not in filled]
    items = [n.to_dict() for n in npcs if include_fallen or n.alive]
    queue = [
        {"slot": t.slot, "generation_next": t.generation_next, "due_day": t.due_day, "replaced_npc_id": t.replaced_npc_id}
        for t in pending
    ]
    return {"items": items, "recruitment_queue": queue}


def get_raider_outlook(
    profile_id: str,
    *,
    db_path: Optional[str] = None,
    now_ms: Optional[int] = None,
    cfg: Optional[GameConfig] = None,
    rng: Optional[random.Random] = None,
    token_factory: TokenFactory = new_pause_token,
) -> Dict[str, Any]:
    with _profile_session(
        profile_id,
        db_path=db_path,
        now_ms=now_ms,
        cfg=cfg,
        rng=rng,
        token_factory=token_factory,
        queue_events=False,
        reason="RAIDER_OUTLOOK",
    ) as s:
        filled = s.filled_ticket_ids()
        pending = [t for t in npc_repo.list_pending_tickets(s.cur, s.state.profile_id) if t.ticket_id not in filled]
        outlook = raider_outlook(s.state, s.live_roster(), pending_replacements=len(pending))
    return outlook


def get_npc_background_activity(
    profile_id: str,
    *,
    db_path: Optional[str] = None,
    now_ms: Optional[int] = None,
    cfg: Optional[GameConfig] = None,
    rng: Optional[random.Random] = None,
    token_factory: TokenFactory = new_pause_token,
) -> Dict[str, Any]:
    with _profile_session(
        profile_id,
        db_path=db_path,
        now_ms=now_ms,
        cfg=cfg,
        rng=rng,
        token_factory=token_factory,
        queue_events=False,
        reason="NPC_ACTIVITY",
    ) as s:
        items = npc_background_activity(s.live_roster(), game_day=s.state.current_day)
    return {"items": items, "game_day": s.state.current_day, "generated_at_ms": s.now_ms}
