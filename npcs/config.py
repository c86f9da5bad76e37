"""Tuning parameters for the NPC lifecycle.

All values are in in-game days or 0..100 stat points.
"""

# ---------------------------------------------------------------------------
# Initial stats (derived from slot so a fresh roster is reproducible)
# ---------------------------------------------------------------------------

# competence = BASE + (slot * 13 + generation * 7) % SPREAD
COMPETENCE_BASE: int = 40
COMPETENCE_SPREAD: int = 30

# loyalty = BASE + (slot * 7 + generation * 5) % SPREAD
LOYALTY_BASE: int = 50
LOYALTY_SPREAD: int = 25

STAT_MIN: int = 0
STAT_MAX: int = 100

# relation_to_player lives in a signed range.
RELATION_MIN: int = -100
RELATION_MAX: int = 100

# ---------------------------------------------------------------------------
# Replacement queue
# ---------------------------------------------------------------------------

# due_day = death_day + REPLACEMENT_BASE_DELAY_DAYS + slot % REPLACEMENT_SLOT_SPREAD
REPLACEMENT_BASE_DELAY_DAYS: int = 2
REPLACEMENT_SLOT_SPREAD: int = 5

# Deployment squad size drawn from the live roster.
MISSION_SQUAD_SIZE: int = 4
