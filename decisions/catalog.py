"""Seed content for the random-event pool.

Rows are inserted once (by code) when the DB is initialized; editing an entry
here does not rewrite an existing DB row.
"""

from __future__ import annotations

from typing import Sequence, Tuple

from .types import EventDefinition, EventEffects, EventOption


def _opts(*rows: Tuple[str, str, int, int, int, int]) -> Tuple[EventOption, ...]:
    return tuple(
        EventOption(id=oid, label=label, effects=EventEffects(money=m, morale=mo, health=h, promotion_points=p))
        for oid, label, m, mo, h, p in rows
    )


SEED_EVENTS: Sequence[EventDefinition] = (
    EventDefinition(
        code="US_ARMY_DISCIPLINE_CHECK",
        country="US",
        branch="US_ARMY",
        rank_min=0,
        rank_max=6,
        base_weight=4,
        cooldown_days=25,
        title="Discipline Inspection",
        description="Your unit commander announces an unplanned discipline inspection before weekend leave.",
        options=_opts(
            ("A", "Volunteer to lead prep", 600, -3, 0, 4),
            ("B", "Do standard compliance", 300, 0, 0, 2),
            ("C", "Push back on timeline", 0, -5, 0, -2),
        ),
    ),
    EventDefinition(
        code="US_ARMY_FIELD_MED",
        country="US",
        branch="US_ARMY",
        rank_min=1,
        rank_max=6,
        base_weight=3,
        cooldown_days=30,
        title="Field Medical Drill",
        description="A live field drill opens a temporary leadership slot for med-evac coordination.",
        options=_opts(
            ("A", "Take the lead", 800, 2, -2, 5),
            ("B", "Support logistics", 450, 1, 0, 3),
            ("C", "Sit out due fatigue", 0, -2, 2, 0),
        ),
    ),
    EventDefinition(
        code="US_ARMY_SUPPLY_SHORT",
        country="US",
        branch="US_ARMY",
        rank_min=0,
        rank_max=6,
        base_weight=2,
        cooldown_days=18,
        title="Supply Chain Shortage",
        description="Critical supplies are delayed and your squad must reprioritize operational readiness.",
        options=_opts(
            ("A", "Work overtime to recover", 650, -2, -1, 4),
            ("B", "Follow normal queue", 280, 0, 0, 2),
            ("C", "Escalate aggressively", 100, -3, 0, 1),
        ),
    ),
    EventDefinition(
        code="US_NAVY_ENGINE_ALERT",
        country="US",
        branch="US_NAVY",
        rank_min=0,
        rank_max=6,
        base_weight=4,
        cooldown_days=22,
        title="Engine Room Alert",
        description="A systems alert triggers emergency maintenance during off-shift hours.",
        options=_opts(
            ("A", "Take emergency shift", 700, -2, -1, 4),
            ("B", "Assist scheduled crew", 420, 0, 0, 2),
            ("C", "Request exemption", 0, -3, 1, -1),
        ),
    ),
    EventDefinition(
        code="US_NAVY_PORT_SECURITY",
        country="US",
        branch="US_NAVY",
        rank_min=2,
        rank_max=6,
        base_weight=3,
        cooldown_days=28,
        title="Port Security Rotation",
        description="A high-traffic port requires extra watch rotations for three nights.",
        options=_opts(
            ("A", "Take extra watch", 900, -3, -1, 5),
            ("B", "Take normal assignment", 500, 0, 0, 3),
            ("C", "Swap out last minute", 150, -2, 0, 0),
        ),
    ),
    EventDefinition(
        code="US_NAVY_CREW_RESHUFFLE",
        country="US",
        branch="US_NAVY",
        rank_min=0,
        rank_max=6,
        base_weight=2,
        cooldown_days=19,
        title="Crew Reshuffle",
        description="Your vessel receives a short-notice crew reshuffle before a patrol cycle.",
        options=_opts(
            ("A", "Take extra responsibility", 620, -1, -1, 4),
            ("B", "Keep current duties", 290, 1, 0, 2),
            ("C", "Request transfer", 0, -2, 0, -1),
        ),
    ),
    EventDefinition(
        code="ID_AD_BORDER_PATROL",
        country="ID",
        branch="ID_TNI_AD",
        rank_min=0,
        rank_max=6,
        base_weight=5,
        cooldown_days=20,
        title="Border Patrol Rotation",
        description="Your platoon receives a sudden assignment to reinforce a remote border checkpoint.",
        options=_opts(
            ("A", "Lead the patrol unit", 420, 1, -2, 5),
            ("B", "Take standard role", 260, 0, -1, 3),
            ("C", "Request reserve duty", 80, -2, 1, 0),
        ),
    ),
    EventDefinition(
        code="ID_AD_CIVIL_SUPPORT",
        country="ID",
        branch="ID_TNI_AD",
        rank_min=1,
        rank_max=6,
        base_weight=3,
        cooldown_days=24,
        title="Civil Support Mission",
        description="Local authorities request military assistance for flood response logistics.",
        options=_opts(
            ("A", "Coordinate volunteers", 340, 2, -1, 4),
            ("B", "Handle supply lanes", 230, 1, 0, 2),
            ("C", "Stay in base reserve", 120, -1, 1, 0),
        ),
    ),
    EventDefinition(
        code="ID_AD_TRAINING_AUDIT",
        country="ID",
        branch="ID_TNI_AD",
        rank_min=0,
        rank_max=6,
        base_weight=2,
        cooldown_days=17,
        title="Training Audit",
        description="Regional command launches a surprise training compliance audit.",
        options=_opts(
            ("A", "Lead remediation team", 360, 0, -1, 4),
            ("B", "Handle own unit only", 220, 1, 0, 2),
            ("C", "Minimal response", 0, -2, 0, -1),
        ),
    ),
    EventDefinition(
        code="ID_AL_HARBOR_INSPECTION",
        country="ID",
        branch="ID_TNI_AL",
        rank_min=0,
        rank_max=6,
        base_weight=4,
        cooldown_days=21,
        title="Harbor Inspection Surge",
        description="An unexpected harbor inspection requires extra naval personnel overnight.",
        options=_opts(
            ("A", "Take inspection lead", 390, 0, -1, 4),
            ("B", "Assist technical checks", 260, 1, 0, 3),
            ("C", "Stay with routine shift", 130, 0, 1, 1),
        ),
    ),
    EventDefinition(
        code="ID_AL_COAST_GUARD_SYNC",
        country="ID",
        branch="ID_TNI_AL",
        rank_min=2,
        rank_max=6,
        base_weight=3,
        cooldown_days=27,
        title="Coast Guard Joint Drill",
        description="A joint drill opens temporary slots for coordination and vessel command support.",
        options=_opts(
            ("A", "Take coordination role", 470, 1, -2, 5),
            ("B", "Support operations desk", 300, 1, 0, 3),
            ("C", "Decline due readiness gap", 0, -2, 0, -1),
        ),
    ),
    EventDefinition(
        code="ID_AL_NAV_AID_MAINT",
        country="ID",
        branch="ID_TNI_AL",
        rank_min=0,
        rank_max=6,
        base_weight=2,
        cooldown_days=20,
        title="Navigation Aid Maintenance",
        description="Offshore navigation aids need urgent maintenance before heavy weather arrives.",
        options=_opts(
            ("A", "Join offshore repair crew", 410, 0, -2, 4),
            ("B", "Manage dockside prep", 250, 1, 0, 2),
            ("C", "Delay until next cycle", 0, -3, 0, -2),
        ),
    ),
)
