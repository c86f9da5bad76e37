"""Randomization and hashing primitives shared by every rule module.

Every sampler takes the `random.Random` to draw from so that callers (and
tests) control the stream. Nothing here reads global random state.
"""

from __future__ import annotations

import hashlib
import random
from typing import Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")


def clamp(value, lo, hi):
    return max(lo, min(hi, value))


def roll(p: float, rng: random.Random) -> bool:
    """True with probability p."""
    return rng.random() < float(p)


def rand_between(lo: int, hi: int, rng: random.Random) -> int:
    """Uniform integer in [min(lo, hi), max(lo, hi)], both ends inclusive."""
    low = min(int(lo), int(hi))
    high = max(int(lo), int(hi))
    return rng.randint(low, high)


def sample_weighted(items: Sequence[Tuple[T, float]], rng: random.Random) -> Optional[T]:
    """Pick one item with probability proportional to its weight.

    Weights <= 0 never win. Returns None only when no item has positive weight.
    """
    positive = [(item, float(weight)) for item, weight in items if float(weight) > 0]
    total = sum(weight for _, weight in positive)
    if total <= 0:
        return None

    threshold = rng.random() * total
    for item, weight in positive:
        threshold -= weight
        if threshold <= 0:
            return item
    # float drift
    return positive[-1][0]


def sample_geometric_gap(p: float, min_gap: int, max_gap: int, rng: random.Random) -> int:
    """Geometric-like gap: start at min_gap, add one per failed Bernoulli(p) trial, cap at max_gap."""
    prob = clamp(float(p), 0.05, 0.95)
    gap = int(min_gap)
    while gap < int(max_gap) and rng.random() > prob:
        gap += 1
    return gap


def hash_seed(text: str) -> int:
    """32-bit FNV-1a. Used for answer keys and other stable per-string choices."""
    h = 2166136261
    for ch in str(text):
        h ^= ord(ch)
        h = (h * 16777619) & 0xFFFFFFFF
    return h


def stable_seed(*parts: object) -> int:
    """Deterministic seed from parts (stable across runs)."""
    h = hashlib.sha256("|".join([str(p) for p in parts]).encode("utf-8")).hexdigest()
    return int(h[:16], 16)
