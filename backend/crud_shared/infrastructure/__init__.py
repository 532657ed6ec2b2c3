"""
Infrastructure: database sessions, units of work, request correlation.
"""

from crud_shared.infrastructure.db import (
    SessionLocal,
    engine,
    get_db,
    get_db_context,
    safe_commit,
    unit_of_work,
)

__all__ = [
    "SessionLocal",
    "engine",
    "get_db",
    "get_db_context",
    "safe_commit",
    "unit_of_work",
]
