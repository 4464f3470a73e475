from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from datetime import timedelta, datetime

from courtbell.db.database import get_db
from courtbell.db import models, schemas
from courtbell.core.security import (
    create_access_token,
    generate_reset_token,
    get_password_hash,
    verify_password,
)
from courtbell.core.config import settings
from courtbell.core.logger import logger
from courtbell.api.v1.deps import get_current_user, get_session_registry
from courtbell.services.session_service import SessionRegistry
from courtbell.utils.exceptions import InvalidCredentialsError, UnauthorizedError

router = APIRouter()


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _token_response(user: models.User) -> schemas.TokenResponse:
    access_token = create_access_token(
        data={"sub": str(user.id)},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    return schemas.TokenResponse(
        access_token=access_token,
        user=schemas.UserOut.model_validate(user),
    )


@router.post("/signup", response_model=schemas.TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    body: schemas.SignupRequest,
    db: Session = Depends(get_db),
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Create an account and sign in."""
    email = _normalize_email(body.email)

    existing_user = db.query(models.User).filter(models.User.email == email).first()
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An account with this email already exists"
        )

    user = models.User(
        email=email,
        password_hash=get_password_hash(body.password),
        display_name=(body.display_name or "").strip() or None,
        is_active=True,
        last_login_at=datetime.utcnow(),
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    registry.open(user.id, email=user.email, display_name=user.display_name)
    logger.info("User signed up: %s", user.id)
    return _token_response(user)


@router.post("/login", response_model=schemas.TokenResponse)
async def login(
    form_data: schemas.UserLogin,
    db: Session = Depends(get_db),
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Login endpoint. Email is normalized to lowercase for consistency with signup."""
    email = _normalize_email(form_data.email)

    user = db.query(models.User).filter(models.User.email == email).first()

    if not user or not verify_password(form_data.password, user.password_hash):
        raise InvalidCredentialsError()

    if not user.is_active:
        raise UnauthorizedError("Account is inactive")

    # Update last login
    user.last_login_at = datetime.utcnow()
    db.commit()
    db.refresh(user)

    registry.open(user.id, email=user.email, display_name=user.display_name)
    logger.info("User logged in: %s", user.id)
    return _token_response(user)


@router.get("/me", response_model=schemas.UserOut)
def get_current_user_info(
    current_user: models.User = Depends(get_current_user)
):
    """Get current user"""
    return current_user


@router.post("/logout")
async def logout(
    current_user: models.User = Depends(get_current_user),
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Tear down the user's session (cancels reminders, drops cached data). The client deletes its token."""
    closed = registry.close(current_user.id)
    logger.info("User logged out: %s (session closed=%s)", current_user.id, closed)
    return {"message": "Logged out successfully"}


@router.post("/forgot-password")
def forgot_password(body: schemas.ForgotPasswordRequest, db: Session = Depends(get_db)):
    """
    Request password reset. Always returns success to prevent email enumeration.
    If user exists, stores a reset token valid for PASSWORD_RESET_EXPIRY_HOURS.
    """
    email = _normalize_email(body.email)
    user = db.query(models.User).filter(models.User.email == email).first()

    if user:
        user.reset_token = generate_reset_token()
        user.reset_token_expires_at = datetime.utcnow() + timedelta(hours=settings.PASSWORD_RESET_EXPIRY_HOURS)
        db.commit()
        # Delivery of the reset link is handled by the mail relay reading this token
        logger.info("Password reset requested for user %s", user.id)

    return {"message": "If an account exists for this email, a reset link has been sent"}


@router.post("/reset-password")
def reset_password(body: schemas.ResetPasswordRequest, db: Session = Depends(get_db)):
    """Set a new password using a reset token."""
    user = db.query(models.User).filter(models.User.reset_token == body.token).first()

    if (
        not user
        or user.reset_token_expires_at is None
        or user.reset_token_expires_at < datetime.utcnow()
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Reset link is invalid or has expired"
        )

    user.password_hash = get_password_hash(body.password)
    user.reset_token = None
    user.reset_token_expires_at = None
    db.commit()

    logger.info("Password reset completed for user %s", user.id)
    return {"message": "Password has been reset"}
