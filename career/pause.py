"""Pause/resume coordinator.

State machine per profile:

    RUNNING --request_pause(reason)--> PAUSED[reason, token] --resume(token)--> RUNNING

- Client pauses are soft (MODAL, SUBPAGE). Two soft reasons share one
  episode: asking for either while the other is active returns the live token.
- System pauses (DECISION, CEREMONY) are only issued through `force_pause`.
  They replace a soft pause (the old token dies, the clock stays frozen from
  the original paused_at) and are released by the engine, never by resume().
- While paused the clock is frozen; resuming shifts the reference anchor
  forward by the paused duration.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from typing import Callable, Optional, Tuple

from .errors import (
    CEREMONY_PENDING,
    DECISION_PENDING,
    INVALID_INPUT,
    NOT_PAUSED,
    PAUSE_BLOCKING,
    PAUSE_CONFLICT,
    PAUSE_REASON_RESERVED,
    PAUSE_TOKEN_MISMATCH,
    ConflictError,
    PreconditionError,
    ValidationError,
)
from .types import (
    BLOCKING_PAUSE_REASONS,
    PAUSE_REASONS,
    SOFT_PAUSE_REASONS,
    GameState,
    PauseState,
    PendingDecision,
)

logger = logging.getLogger(__name__)

TokenFactory = Callable[[], str]


def new_pause_token() -> str:
    return str(uuid.uuid4())


def normalize_pause_reason(value: object) -> str:
    reason = str(value or "").strip().upper()
    if reason not in PAUSE_REASONS:
        raise ValidationError(INVALID_INPUT, f"Invalid pause reason: {value!r}", {"allowed": list(PAUSE_REASONS)})
    return reason


def request_pause(
    state: GameState,
    reason: str,
    *,
    now_ms: int,
    timeout_minutes: int,
    token_factory: TokenFactory = new_pause_token,
) -> Tuple[GameState, str]:
    """Client-initiated pause. Idempotent for the live episode."""
    reason = normalize_pause_reason(reason)
    current = state.pause
    if current is not None:
        if current.reason == reason:
            return state, current.token
        if current.reason in SOFT_PAUSE_REASONS and reason in SOFT_PAUSE_REASONS:
            return state, current.token
        raise ConflictError(
            PAUSE_CONFLICT,
            f"Game is paused for {current.reason}; cannot pause for {reason}.",
            {"active_reason": current.reason, "requested_reason": reason},
        )

    if reason in BLOCKING_PAUSE_REASONS:
        raise PreconditionError(
            PAUSE_REASON_RESERVED,
            f"{reason} pauses are issued by the server only.",
            {"requested_reason": reason},
        )

    pause = PauseState(
        reason=reason,
        token=token_factory(),
        paused_at_ms=int(now_ms),
        expires_at_ms=int(now_ms) + int(timeout_minutes) * 60_000,
    )
    return replace(state, pause=pause), pause.token


def force_pause(
    state: GameState,
    reason: str,
    *,
    now_ms: int,
    decision: Optional[PendingDecision] = None,
    token_factory: TokenFactory = new_pause_token,
) -> GameState:
    """System pause (DECISION / CEREMONY). Supersedes a soft pause; never another system pause."""
    if reason not in BLOCKING_PAUSE_REASONS:
        raise ValueError(f"force_pause only issues system pauses, got: {reason!r}")
    current = state.pause
    if current is not None and current.is_blocking:
        raise ConflictError(
            PAUSE_CONFLICT,
            f"Game is already paused for {current.reason}.",
            {"active_reason": current.reason, "requested_reason": reason},
        )

    paused_at = current.paused_at_ms if current is not None else int(now_ms)
    if current is not None:
        logger.info(
            "PAUSE_SUPERSEDED profile_id=%s old_reason=%s new_reason=%s",
            state.profile_id,
            current.reason,
            reason,
        )
    pause = PauseState(
        reason=reason,
        token=token_factory(),
        paused_at_ms=paused_at,
        expires_at_ms=None,
        decision=decision,
    )
    return replace(state, pause=pause)


def release_pause(state: GameState, *, now_ms: int) -> GameState:
    """End the live episode and shift the clock anchor by the paused duration."""
    if state.pause is None:
        return state
    paused_for = max(0, int(now_ms) - int(state.pause.paused_at_ms))
    return replace(
        state,
        pause=None,
        server_reference_time_ms=int(state.server_reference_time_ms) + paused_for,
    )


def resume(state: GameState, token: str, *, now_ms: int) -> GameState:
    """Client resume. Exact token match only."""
    current = state.pause
    if current is None:
        raise ConflictError(NOT_PAUSED, "Game is not paused.")
    if str(token) != current.token:
        raise ConflictError(
            PAUSE_TOKEN_MISMATCH,
            "Pause token is stale; re-fetch the snapshot.",
            {"active_reason": current.reason},
        )
    if current.is_blocking:
        raise PreconditionError(
            PAUSE_BLOCKING,
            f"A {current.reason} pause is released by resolving it, not by resume.",
            {"active_reason": current.reason},
        )
    return release_pause(state, now_ms=now_ms)


def auto_resume_if_expired(state: GameState, *, now_ms: int) -> Tuple[GameState, bool]:
    """Soft pauses past their deadline resume on the next request. System pauses never expire."""
    current = state.pause
    if current is None or current.is_blocking or current.expires_at_ms is None:
        return state, False
    if int(now_ms) <= int(current.expires_at_ms):
        return state, False
    logger.info("PAUSE_EXPIRED profile_id=%s reason=%s", state.profile_id, current.reason)
    return release_pause(state, now_ms=now_ms), True


def ensure_actionable(state: GameState) -> None:
    """Reject mutating actions while a system pause is active."""
    current = state.pause
    if current is None or not current.is_blocking:
        return
    if current.reason == "DECISION":
        raise PreconditionError(
            DECISION_PENDING,
            "Resolve the pending decision before taking actions.",
            {"event_id": current.decision.event_id if current.decision else None},
        )
    raise PreconditionError(CEREMONY_PENDING, "Attend the ceremony before taking actions.")
