"""
Database infrastructure for taskhub.
"""

from .database import Base, create_db_engine, create_session_factory, init_db, get_db
from .models import *

__all__ = [
    "Base",
    "create_db_engine",
    "create_session_factory",
    "init_db",
    "get_db",
]
