"""
Persistence layer: the SQL engine and session factory, the ``users`` and
``documents`` tables, and the camelCase record schemas served by the API.
"""

from courtbell.db.database import Base, engine, SessionLocal, get_db, init_db
from courtbell.db.models import StoredDocument, User
from courtbell.db import schemas

__all__ = [
    "Base",
    "engine",
    "SessionLocal",
    "get_db",
    "init_db",
    "User",
    "StoredDocument",
    "schemas",
]
