from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from scoreverse.core.exceptions import ReferentialConflictError
from scoreverse.models.game_model import GameModel
from scoreverse.schemas import game_schemas
from scoreverse.services.app_state import AppState
from scoreverse.api.dependencies import get_app_state

router = APIRouter()

@router.get("", response_model=List[GameModel])
async def list_games(state: AppState = Depends(get_app_state)):
    return sorted(state.games, key=lambda g: g.name.lower())

@router.post("", response_model=GameModel, status_code=status.HTTP_201_CREATED)
async def create_game(game_in: game_schemas.GameCreate, state: AppState = Depends(get_app_state)):
    try:
        return state.add_game(game_in)
    except ValueError as e: # e.g. max_players below min_players
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

@router.get("/{game_id}", response_model=GameModel)
async def get_game(game_id: str, state: AppState = Depends(get_app_state)):
    game = state.get_game(game_id)
    if not game:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Game not found")
    return game

@router.patch("/{game_id}", response_model=GameModel)
async def update_game(game_id: str, game_in: game_schemas.GameUpdate, state: AppState = Depends(get_app_state)):
    try:
        game = state.update_game(game_id, game_in)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not game:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Game not found")
    return game

@router.delete("/{game_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_game(game_id: str, state: AppState = Depends(get_app_state)):
    try:
        deleted = state.delete_game(game_id)
    except ReferentialConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Game not found")
