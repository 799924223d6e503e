from fastapi import APIRouter, Depends, HTTPException, status

from scoreverse.core.exceptions import AISuggestionError
from scoreverse.models.user_model import UserModel
from scoreverse.schemas import ai_schemas
from scoreverse.services.ai_service import AIService, NOT_CONFIGURED_MESSAGE
from scoreverse.api.dependencies import get_ai_service, get_current_user

router = APIRouter()

def _require_enabled(ai_service: AIService):
    if not ai_service.enabled:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=NOT_CONFIGURED_MESSAGE)

@router.post("/handicap", response_model=ai_schemas.SuggestHandicapOutput)
async def suggest_handicap(
    request: ai_schemas.SuggestHandicapInput,
    current_user: UserModel = Depends(get_current_user),
    ai_service: AIService = Depends(get_ai_service),
):
    _require_enabled(ai_service)
    try:
        return await ai_service.suggest_handicap(request)
    except AISuggestionError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

@router.post("/matchups", response_model=ai_schemas.SuggestMatchupsOutput)
async def suggest_matchups(
    request: ai_schemas.SuggestMatchupsInput,
    current_user: UserModel = Depends(get_current_user),
    ai_service: AIService = Depends(get_ai_service),
):
    _require_enabled(ai_service)
    try:
        return await ai_service.suggest_matchups(request)
    except AISuggestionError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
