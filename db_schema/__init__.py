"""db_schema package.

SQLite DDL for the career DB, one module per table group.

Public API:
- apply_schema(...)
"""

from .init import apply_schema  # noqa: F401

__all__ = ["apply_schema"]
