"""Per-profile critical sections.

Every state-reading or state-writing request for one profile runs inside
`profile_serial_lock(profile_id)`. Requests for different profiles take
different locks.

Constraints:
- Locks are process-local (threading.RLock). With several uvicorn workers,
  the version check in the final write transaction is the only
  cross-process guard.
- Lock order: profile_serial_lock -> repo.read() / repo.transaction().
  Never acquire a profile lock while already inside a transaction.
- An entry lives in the registry only while some thread holds or waits for
  it; the last user removes it.
"""

from __future__ import annotations

from contextlib import contextmanager
from threading import Lock, RLock
from typing import Dict, Iterator, List

_REGISTRY_GUARD = Lock()
# profile_id -> [lock, holders + waiters]
_PROFILE_LOCKS: Dict[str, List] = {}


def _checkout(profile_id: str) -> RLock:
    with _REGISTRY_GUARD:
        entry = _PROFILE_LOCKS.get(profile_id)
        if entry is None:
            entry = [RLock(), 0]
            _PROFILE_LOCKS[profile_id] = entry
        entry[1] += 1
        return entry[0]


def _checkin(profile_id: str) -> None:
    with _REGISTRY_GUARD:
        entry = _PROFILE_LOCKS.get(profile_id)
        if entry is None:
            return
        entry[1] -= 1
        if entry[1] <= 0:
            del _PROFILE_LOCKS[profile_id]


def registered_profile_count() -> int:
    """Number of profiles with a live lock entry (held or awaited)."""
    with _REGISTRY_GUARD:
        return len(_PROFILE_LOCKS)


@contextmanager
def profile_serial_lock(profile_id: str, *, reason: str = "", timeout_s: float | None = None) -> Iterator[None]:
    """Serialize read-modify-write cycles for one profile within this process.

    Args:
        profile_id: lock key.
        reason: free text for the timeout message.
        timeout_s: acquisition timeout in seconds. None waits forever.

    Raises:
        TimeoutError: the lock was not acquired within timeout_s.
        ValueError: timeout_s is not a number.
    """
    key = str(profile_id)
    timeout = None
    if timeout_s is not None:
        try:
            timeout = max(0.0, float(timeout_s))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"timeout_s must be a float seconds value, got: {timeout_s!r}") from exc

    lock = _checkout(key)
    try:
        acquired = lock.acquire() if timeout is None else lock.acquire(timeout=timeout)
        if not acquired:
            msg = f"profile_serial_lock timeout (profile_id={profile_id}, timeout_s={timeout_s})"
            if reason:
                msg += f": {reason}"
            raise TimeoutError(msg)
        try:
            yield
        finally:
            lock.release()
    finally:
        _checkin(key)


__all__ = [
    "profile_serial_lock",
    "registered_profile_count",
]
