"""
Case management endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Literal, Optional

from courtbell.api.v1.deps import get_current_session
from courtbell.db.schemas import Case, CaseCreate, CasePatch, Expense, Hearing
from courtbell.services.session_service import UserSession

router = APIRouter()

# ============================================================================
# List & CRUD Endpoints
# ============================================================================

@router.get("/", response_model=List[Case])
async def get_cases(
    when: Literal["all", "upcoming", "past"] = Query("all", description="Split by the hearing time"),
    client_id: Optional[str] = Query(None, alias="clientId", description="Only cases of this client"),
    junior_id: Optional[str] = Query(None, alias="juniorId", description="Only cases assigned to this junior"),
    session: UserSession = Depends(get_current_session),
):
    """
    Cases of the signed-in user. ``upcoming`` is soonest first, ``past`` most
    recent first, ``all`` keeps insertion order.
    """
    if when == "upcoming":
        cases = session.cases.upcoming()
    elif when == "past":
        cases = session.cases.past()
    else:
        cases = session.cases.list()

    if client_id:
        cases = [c for c in cases if c.client_id == client_id]
    if junior_id:
        cases = [c for c in cases if c.junior_id == junior_id]
    return cases


@router.post("/", response_model=Case, status_code=status.HTTP_201_CREATED)
async def create_case(
    case_data: CaseCreate,
    session: UserSession = Depends(get_current_session),
):
    return session.cases.add(case_data)


@router.get("/{case_id}", response_model=Case)
async def get_case(case_id: str, session: UserSession = Depends(get_current_session)):
    return session.cases.require(case_id)


@router.put("/{case_id}", response_model=Case)
async def replace_case(
    case_id: str,
    case_data: CaseCreate,
    session: UserSession = Depends(get_current_session),
):
    return session.cases.replace(case_id, case_data)


@router.patch("/{case_id}", response_model=Case)
async def update_case(
    case_id: str,
    patch: CasePatch,
    session: UserSession = Depends(get_current_session),
):
    """Only the fields present in the body are changed."""
    return session.cases.update(case_id, patch)


@router.delete("/{case_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_case(case_id: str, session: UserSession = Depends(get_current_session)):
    session.cases.delete(case_id)

# ============================================================================
# Hearing history & expenses
# ============================================================================

@router.post("/{case_id}/hearings", response_model=Case, status_code=status.HTTP_201_CREATED)
async def add_hearing(
    case_id: str,
    hearing: Hearing,
    session: UserSession = Depends(get_current_session),
):
    return session.cases.add_hearing(case_id, hearing)


@router.delete("/{case_id}/hearings/{index}", response_model=Case)
async def remove_hearing(
    case_id: str,
    index: int,
    session: UserSession = Depends(get_current_session),
):
    try:
        return session.cases.remove_hearing(case_id, index)
    except IndexError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/{case_id}/expenses", response_model=Case, status_code=status.HTTP_201_CREATED)
async def add_expense(
    case_id: str,
    expense: Expense,
    session: UserSession = Depends(get_current_session),
):
    return session.cases.add_expense(case_id, expense)


@router.delete("/{case_id}/expenses/{index}", response_model=Case)
async def remove_expense(
    case_id: str,
    index: int,
    session: UserSession = Depends(get_current_session),
):
    try:
        return session.cases.remove_expense(case_id, index)
    except IndexError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/{case_id}/expenses/total")
async def get_expense_total(case_id: str, session: UserSession = Depends(get_current_session)):
    case = session.cases.require(case_id)
    return {"caseId": case.id, "total": session.cases.total_expenses(case)}
