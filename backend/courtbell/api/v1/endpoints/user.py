from __future__ import annotations

from fastapi import APIRouter, Depends

from courtbell.api.v1.deps import get_current_session
from courtbell.db.schemas import UserProfile
from courtbell.services.session_service import UserSession

router = APIRouter()


@router.get("/profile", response_model=UserProfile)
async def get_profile(session: UserSession = Depends(get_current_session)) -> UserProfile:
    return session.profile


@router.put("/profile", response_model=UserProfile)
async def update_profile(
    payload: UserProfile,
    session: UserSession = Depends(get_current_session),
) -> UserProfile:
    """Merge the sent fields into the stored profile; omitted fields are kept."""
    return session.save_profile(payload)
