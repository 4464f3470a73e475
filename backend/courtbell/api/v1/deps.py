# courtbell/api/v1/deps.py

from functools import lru_cache

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
import jwt

from courtbell.core.config import settings
from courtbell.core.security import decode_access_token
from courtbell.db.database import SessionLocal, get_db
from courtbell.db.models import User
from courtbell.services.ai_service import LegalToolsService
from courtbell.services.background_jobs import get_scheduler
from courtbell.services.document_store import DocumentStore
from courtbell.services.local_document_store import LocalDocumentStore
from courtbell.services.session_service import SessionRegistry, UserSession
from courtbell.services.sql_document_store import SqlDocumentStore
from courtbell.utils.exceptions import InvalidCredentialsError, UnauthorizedError

security = HTTPBearer()

# ============================================================================
# Singletons
# ============================================================================

@lru_cache
def get_document_store() -> DocumentStore:
    """The configured persistence backend."""
    if settings.STORAGE_BACKEND == "local":
        return LocalDocumentStore(settings.LOCAL_STORAGE_DIR)
    return SqlDocumentStore(SessionLocal)


@lru_cache
def get_session_registry() -> SessionRegistry:
    return SessionRegistry(get_document_store(), get_scheduler())


@lru_cache
def get_legal_tools_service() -> LegalToolsService:
    return LegalToolsService()

# ============================================================================
# JWT Dependency
# ============================================================================

def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Validate JWT token and return current user.
    """
    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.PyJWTError:
        raise InvalidCredentialsError("Invalid token")

    user_id = payload.get("sub")
    if user_id is None:
        raise InvalidCredentialsError("Invalid token")

    user = db.query(User).filter(User.id == user_id).first()

    if not user:
        raise InvalidCredentialsError("User not found")

    if not user.is_active:
        raise UnauthorizedError("User account is deactivated")

    return user


async def get_current_session(
    current_user: User = Depends(get_current_user),
    registry: SessionRegistry = Depends(get_session_registry),
) -> UserSession:
    """
    The signed-in user's session. Opened at login; re-opened lazily when a
    valid token arrives without one (e.g. after a server restart).
    """
    return registry.open(
        current_user.id,
        email=current_user.email,
        display_name=current_user.display_name,
    )
