"""
Database module.
Contains database connection, models, and repository implementations.
"""

from jobqueue.db.connection import (
    close_db,
    create_session_factory,
    get_engine,
    get_session_context,
    get_test_engine,
    init_db,
)
from jobqueue.db.models import Base, Job

__all__ = [
    "get_session_context",
    "get_engine",
    "get_test_engine",
    "create_session_factory",
    "init_db",
    "close_db",
    "Job",
    "Base",
]
