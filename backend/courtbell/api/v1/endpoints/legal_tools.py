"""
Legal tools suggestion endpoint (Bedrock)
"""
from fastapi import APIRouter, Depends, HTTPException, status

from courtbell.api.v1.deps import get_current_user, get_legal_tools_service
from courtbell.db.models import User
from courtbell.db.schemas import LegalToolSuggestions, LegalToolsRequest
from courtbell.services.ai_service import LegalToolsService

router = APIRouter()


@router.post("/suggest", response_model=LegalToolSuggestions)
def suggest_legal_tools(
    request: LegalToolsRequest,
    current_user: User = Depends(get_current_user),
    service: LegalToolsService = Depends(get_legal_tools_service),
):
    """
    Suggest statutes, case law and drafting templates for a case description.
    Runs in the threadpool; the Bedrock call blocks.
    """
    try:
        return service.suggest(request.case_details)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
