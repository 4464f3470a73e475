"""
Payment endpoints: money in from clients, money out to juniors and expenses
"""
from fastapi import APIRouter, Depends, Query, status
from typing import List, Literal, Optional

from courtbell.api.v1.deps import get_current_session
from courtbell.db.schemas import Transaction, TransactionCreate, TransactionSummary
from courtbell.services.session_service import UserSession

router = APIRouter()


@router.get("/", response_model=List[Transaction])
async def list_transactions(
    type: Optional[Literal["in", "out"]] = Query(None, description="Only incoming or outgoing payments"),
    session: UserSession = Depends(get_current_session),
):
    """Newest first."""
    return session.transactions.filter(type)


# Declared before /{transaction_id} so "summary" is not taken as an id
@router.get("/summary", response_model=TransactionSummary)
async def get_summary(session: UserSession = Depends(get_current_session)):
    return session.transactions.summary()


@router.post("/", response_model=Transaction, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    transaction_data: TransactionCreate,
    session: UserSession = Depends(get_current_session),
):
    """The date is stamped server-side; any ``date`` in the body is ignored."""
    return session.transactions.add(transaction_data)


@router.get("/{transaction_id}", response_model=Transaction)
async def get_transaction(transaction_id: str, session: UserSession = Depends(get_current_session)):
    return session.transactions.require(transaction_id)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(transaction_id: str, session: UserSession = Depends(get_current_session)):
    session.transactions.delete(transaction_id)
