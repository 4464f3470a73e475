"""
Client endpoints
"""
from fastapi import APIRouter, Depends, status
from typing import List

from courtbell.api.v1.deps import get_current_session
from courtbell.db.schemas import Case, Client, ClientCreate, ClientPatch
from courtbell.services.session_service import UserSession

router = APIRouter()


@router.get("/", response_model=List[Client])
async def list_clients(session: UserSession = Depends(get_current_session)):
    return session.clients.list()


@router.post("/", response_model=Client, status_code=status.HTTP_201_CREATED)
async def create_client(
    client_data: ClientCreate,
    session: UserSession = Depends(get_current_session),
):
    return session.clients.add(client_data)


@router.get("/{client_id}", response_model=Client)
async def get_client(client_id: str, session: UserSession = Depends(get_current_session)):
    return session.clients.require(client_id)


@router.get("/{client_id}/cases", response_model=List[Case])
async def get_client_cases(client_id: str, session: UserSession = Depends(get_current_session)):
    return session.cases.cases_for_client(client_id)


@router.patch("/{client_id}", response_model=Client)
async def update_client(
    client_id: str,
    patch: ClientPatch,
    session: UserSession = Depends(get_current_session),
):
    return session.clients.update(client_id, patch)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(client_id: str, session: UserSession = Depends(get_current_session)):
    """Cases referencing the client are left as they are."""
    session.clients.delete(client_id)
