"""Periodic award ceremony.

Public API
----------
- CeremonyConfig (tuning; injected through career.config.GameConfig)

The engine (report building, pause enforcement, completion) lives in
ceremony.engine and is imported explicitly: career.config depends on this
package for its tuning, so the package root stays import-light.
"""

from .config import MEDALS, RIBBONS, CeremonyConfig

__all__ = ["MEDALS", "RIBBONS", "CeremonyConfig"]
