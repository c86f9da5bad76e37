"""Once-per-process database bootstrap (schema, seeds, integrity)."""

from __future__ import annotations

import logging
import os
import threading
from typing import Set

logger = logging.getLogger(__name__)

_GUARD = threading.Lock()
_INITIALIZED: Set[str] = set()
_VALIDATED: Set[str] = set()


def _key(db_path: str) -> str:
    if not db_path:
        raise ValueError("db_path is required")
    return os.path.abspath(str(db_path))


def ensure_db_initialized(db_path: str) -> None:
    """Apply the schema and seed events once per db_path (startup-only work)."""
    key = _key(db_path)
    if key in _INITIALIZED:
        return
    from career_repo import CareerRepo

    with _GUARD:
        if key in _INITIALIZED:
            return
        with CareerRepo(db_path) as repo:
            repo.init_db()
        _INITIALIZED.add(key)
    logger.info("DB_INITIALIZED db_path=%s", key)


def validate_repo_integrity_once(db_path: str) -> None:
    """Validate DB integrity once per db_path."""
    key = _key(db_path)
    if key in _VALIDATED:
        return
    from career_repo import CareerRepo

    with _GUARD:
        if key in _VALIDATED:
            return
        with CareerRepo(db_path) as repo:
            repo.validate_integrity()
        _VALIDATED.add(key)
