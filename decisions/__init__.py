"""Random decision events.

Public API
----------
- maybe_queue_decision
- resolve_decision_choice
- event_chance
- SEED_EVENTS

Persistence lives in decisions.repo.
"""

from .catalog import SEED_EVENTS
from .engine import DecisionLogDraft, event_chance, maybe_queue_decision, resolve_decision_choice
from .types import EventCandidate, EventDefinition, EventEffects, EventOption

__all__ = [
    "SEED_EVENTS",
    "DecisionLogDraft",
    "EventCandidate",
    "EventDefinition",
    "EventEffects",
    "EventOption",
    "event_chance",
    "maybe_queue_decision",
    "resolve_decision_choice",
]
