"""
Junior advocate endpoints
"""
from fastapi import APIRouter, Depends, status
from typing import List

from courtbell.api.v1.deps import get_current_session
from courtbell.db.schemas import Case, Junior, JuniorCreate, JuniorPatch
from courtbell.services.session_service import UserSession

router = APIRouter()


@router.get("/", response_model=List[Junior])
async def list_juniors(session: UserSession = Depends(get_current_session)):
    return session.juniors.list()


@router.post("/", response_model=Junior, status_code=status.HTTP_201_CREATED)
async def create_junior(
    junior_data: JuniorCreate,
    session: UserSession = Depends(get_current_session),
):
    return session.juniors.add(junior_data)


@router.get("/{junior_id}", response_model=Junior)
async def get_junior(junior_id: str, session: UserSession = Depends(get_current_session)):
    return session.juniors.require(junior_id)


@router.get("/{junior_id}/cases", response_model=List[Case])
async def get_junior_cases(junior_id: str, session: UserSession = Depends(get_current_session)):
    return session.cases.cases_for_junior(junior_id)


@router.patch("/{junior_id}", response_model=Junior)
async def update_junior(
    junior_id: str,
    patch: JuniorPatch,
    session: UserSession = Depends(get_current_session),
):
    return session.juniors.update(junior_id, patch)


@router.delete("/{junior_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_junior(junior_id: str, session: UserSession = Depends(get_current_session)):
    session.juniors.delete(junior_id)
