"""
SQLAlchemy ORM Models
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    TIMESTAMP,
    Boolean,
    Column,
    Index,
    Integer,
    String,
    UniqueConstraint,
)

from courtbell.db.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


# ============================================================================
# Models
# ============================================================================

class User(Base):
    """Lawyer account"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)

    # Authentication
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    display_name = Column(String(255), nullable=True)

    # Password reset
    reset_token = Column(String(64), nullable=True, index=True)
    reset_token_expires_at = Column(TIMESTAMP, nullable=True)

    # Status
    is_active = Column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at = Column(TIMESTAMP, default=datetime.utcnow, nullable=False)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login_at = Column(TIMESTAMP, nullable=True)

    def __repr__(self):
        return f"<User {self.email}>"


class StoredDocument(Base):
    """
    One record of a document collection (cases, clients, juniors,
    transactions, profiles). ``seq`` keeps insertion order.
    """
    __tablename__ = "documents"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    doc_id = Column(String(64), nullable=False)
    collection = Column(String(64), nullable=False)
    owner_id = Column(String(64), nullable=False, default="")
    data = Column(JSON, nullable=False, default=dict)

    created_at = Column(TIMESTAMP, default=datetime.utcnow, nullable=False)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("collection", "owner_id", "doc_id", name="uq_document_key"),
        Index("idx_document_collection_owner", "collection", "owner_id", "seq"),
    )

    def __repr__(self):
        return f"<StoredDocument {self.collection}/{self.doc_id}>"
