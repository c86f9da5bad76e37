"""Background activity feed for the roster.

A read-only digest of what each active NPC has been doing. Entries are a pure
function of the game day and the NPC's own stats, so repeated reads on the
same day agree.
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from .types import NpcRuntime

ACTIVITY_LIMIT = 18

OPERATIONS = ("training", "deployment", "career-review", "resupply", "medical", "intel")
IMPACTS = ("morale+", "health+", "funds+", "promotion+", "coordination+", "readiness+")
RECOMMENDATIONS = ("STRONG_RECOMMEND", "RECOMMEND", "HOLD", "NOT_RECOMMENDED")


def _bounded(value: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, int(value)))


def npc_background_activity(
    roster: Sequence[NpcRuntime],
    *,
    game_day: int,
    limit: int = ACTIVITY_LIMIT,
) -> List[Dict[str, Any]]:
    """One entry per active NPC in slot order, at most `limit` entries."""
    day = max(0, int(game_day))
    active = sorted((n for n in roster if n.alive), key=lambda n: (n.slot, n.generation))
    items: List[Dict[str, Any]] = []
    for i, npc in enumerate(active[: max(0, int(limit))]):
        seed = day * 37 + i * 11 + int(npc.competence) + int(npc.loyalty)
        op = OPERATIONS[seed % len(OPERATIONS)]
        impact = IMPACTS[(seed + 3) % len(IMPACTS)]
        letter = None
        if seed % 4 == 3:
            letter = f"Administrative Letter: {npc.name} promotion request postponed due to vacancy constraints."
        items.append(
            {
                "npc_id": npc.npc_id,
                "name": npc.name,
                "division": npc.division,
                "unit": npc.unit,
                "last_tick_day": max(1, day - (i % 3)),
                "operation": op,
                "impact": impact,
                "result": f"{op} completed ({impact})",
                "readiness": _bounded(100 - npc.fatigue + (seed % 19) - 9, 25, 100),
                "morale": _bounded(npc.loyalty + (seed % 15) - 7, 20, 100),
                "rank_influence": max(1, npc.promotion_points // 10 + i % 4),
                "promotion_recommendation": RECOMMENDATIONS[seed % len(RECOMMENDATIONS)],
                "notification_letter": letter,
            }
        )
    return items
