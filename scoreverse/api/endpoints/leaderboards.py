from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from scoreverse.models.stats_model import ScoreData
from scoreverse.services.app_state import AppState
from scoreverse.api.dependencies import get_app_state

router = APIRouter()

@router.get("", response_model=List[ScoreData])
async def overall_leaderboard(state: AppState = Depends(get_app_state)):
    return state.leaderboard()

@router.get("/{game_id}", response_model=List[ScoreData])
async def game_leaderboard(game_id: str, state: AppState = Depends(get_app_state)):
    if not state.get_game(game_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Game not found")
    return state.leaderboard(game_id)
