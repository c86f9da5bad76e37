"""Career progression engine.

Public API
----------
- GameState / PauseState / PendingDecision (career.types)
- CareerError and its subclasses (career.errors)

Request-level operations live in career.service; pure resolvers in
career.actions, career.academy, career.interactions, career.recruitment and
career.raiders. Mission briefings come from career.missions.
"""

from .errors import CareerError, ConflictError, NotFoundError, PreconditionError, ValidationError
from .types import Certificate, GameState, PauseState, PendingDecision

__all__ = [
    "CareerError",
    "Certificate",
    "ConflictError",
    "GameState",
    "NotFoundError",
    "PauseState",
    "PendingDecision",
    "PreconditionError",
    "ValidationError",
]
