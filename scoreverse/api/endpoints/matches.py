from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from scoreverse.core.exceptions import MatchValidationError
from scoreverse.models.match_model import MatchModel
from scoreverse.schemas import match_schemas
from scoreverse.services.app_state import AppState
from scoreverse.api.dependencies import get_app_state

router = APIRouter()

@router.get("", response_model=List[MatchModel])
async def list_matches(game_id: Optional[str] = None, state: AppState = Depends(get_app_state)):
    """Match history for the active space (or the global context), newest first."""
    return state.scoped_matches(game_id)

@router.post("", response_model=match_schemas.MatchRecorded, status_code=status.HTTP_201_CREATED)
async def record_match(match_in: match_schemas.MatchCreate, state: AppState = Depends(get_app_state)):
    """
    Records a match in the active scope.

    The response also lists any tournaments this result completed, so the
    client can announce the winners.
    """
    try:
        return state.add_match(match_in)
    except MatchValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

@router.get("/{match_id}", response_model=MatchModel)
async def get_match(match_id: str, state: AppState = Depends(get_app_state)):
    match = state.get_match(match_id)
    if not match:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Match not found")
    return match

@router.patch("/{match_id}", response_model=MatchModel)
async def correct_match(match_id: str, match_in: match_schemas.MatchUpdate, state: AppState = Depends(get_app_state)):
    try:
        match = state.update_match(match_id, match_in)
    except MatchValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    if not match:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Match not found")
    return match

@router.delete("/{match_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_match(match_id: str, state: AppState = Depends(get_app_state)):
    if not state.delete_match(match_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Match not found")
