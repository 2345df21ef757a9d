"""
Infrastructure module: Database sessions and request correlation.

Provides:
- Database engine, sessions and safe commits (db.py)
- Correlation IDs for request-scoped logging (correlation.py)
"""

from shared.infrastructure.db import (
    get_engine,
    get_session_factory,
    get_db,
    get_db_context,
    safe_commit,
)

__all__ = [
    "get_engine",
    "get_session_factory",
    "get_db",
    "get_db_context",
    "safe_commit",
]
