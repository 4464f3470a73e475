"""
Custom exception classes
"""
from fastapi import HTTPException


class EntityNotFoundError(HTTPException):
    """Raised when a record doesn't exist in its collection"""
    def __init__(self, collection: str, entity_id: str):
        self.collection = collection
        self.entity_id = entity_id
        super().__init__(
            status_code=404,
            detail=f"{collection.rstrip('s').capitalize()} {entity_id} not found"
        )


class UnauthorizedError(HTTPException):
    """Raised when the caller has no active session"""
    def __init__(self, detail: str = "You don't have permission to access this resource"):
        super().__init__(
            status_code=403,
            detail=detail
        )


class InvalidCredentialsError(HTTPException):
    """Raised on failed login or invalid bearer token"""
    def __init__(self, detail: str = "Incorrect email or password"):
        super().__init__(
            status_code=401,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class PersistenceError(HTTPException):
    """Raised when the document store fails; surfaced as a non-blocking notice"""
    def __init__(self, operation: str, collection: str, reason: str = "storage unavailable"):
        self.operation = operation
        self.collection = collection
        super().__init__(
            status_code=503,
            detail=f"Could not {operation} {collection}: {reason}"
        )


class AIServiceError(HTTPException):
    """Raised when AI service fails"""
    def __init__(self, reason: str = "AI service unavailable"):
        super().__init__(
            status_code=503,
            detail=f"AI service error: {reason}"
        )
