from __future__ import annotations

import datetime as _dt
import math
import time
from typing import Any

from config import GAME_MS_PER_DAY, IN_GAME_START_DATE


def now_ms() -> int:
    # The only wall-clock read in the engine. Services accept an explicit now_ms.
    return int(time.time() * 1000)


def iso_from_ms(value_ms: int) -> str:
    """UTC timestamp string for audit columns (created_at / updated_at)."""
    dt = _dt.datetime.fromtimestamp(int(value_ms) / 1000.0, tz=_dt.timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%SZ")


def compute_game_day(
    now_ms_value: int,
    reference_ms: int,
    *,
    ms_per_day: int = GAME_MS_PER_DAY,
    time_scale: int = 1,
) -> int:
    """Whole in-game days elapsed since the reference anchor. Never negative."""
    if ms_per_day <= 0:
        raise ValueError(f"ms_per_day must be positive, got: {ms_per_day}")
    elapsed = int(now_ms_value) - int(reference_ms)
    return max(0, (elapsed * int(time_scale)) // int(ms_per_day))


def ms_to_reanchor(days: int, *, ms_per_day: int = GAME_MS_PER_DAY, time_scale: int = 1) -> int:
    """Real milliseconds that correspond to `days` in-game days at `time_scale`.

    Rounded up so that shifting the anchor by this amount never loses a day.
    """
    if days <= 0:
        return 0
    return int(math.ceil(int(days) * int(ms_per_day) / float(time_scale)))


def to_in_game_date(day: int, *, start_date: str = IN_GAME_START_DATE) -> str:
    start = _dt.date.fromisoformat(require_date_iso(start_date, field="start_date"))
    return (start + _dt.timedelta(days=max(0, int(day)))).isoformat()


def compute_age(start_age: int, day: int) -> int:
    return int(start_age) + max(0, int(day)) // 365


def derive_live_game_day(
    *,
    snapshot_day: int,
    paused: bool,
    reference_ms: int,
    now_ms_value: int,
    time_scale: int = 1,
    ms_per_day: int = GAME_MS_PER_DAY,
) -> int:
    """Display day between syncs: ticks locally but never falls behind the persisted day."""
    if paused:
        return int(snapshot_day)
    live = compute_game_day(now_ms_value, reference_ms, ms_per_day=ms_per_day, time_scale=time_scale)
    return max(int(snapshot_day), live)


def require_date_iso(value: Any, *, field: str = "date_iso") -> str:
    """
    Ensure value is a valid YYYY-MM-DD (ISO date) and return normalized date ISO.
    Fail-loud.
    """
    if value is None:
        raise ValueError(f"{field} is required")
    s = str(value)[:10]
    try:
        _dt.date.fromisoformat(s)
    except ValueError as exc:
        raise ValueError(f"Invalid {field}: {value!r}") from exc
    return s
