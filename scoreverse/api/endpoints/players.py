from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from scoreverse.models.player_model import PlayerModel
from scoreverse.schemas import player_schemas
from scoreverse.services.app_state import AppState
from scoreverse.api.dependencies import get_app_state

router = APIRouter()

@router.get("", response_model=List[PlayerModel])
async def list_players(state: AppState = Depends(get_app_state)):
    return sorted(state.players, key=lambda p: p.name.lower())

@router.post("", response_model=PlayerModel, status_code=status.HTTP_201_CREATED)
async def create_player(player_in: player_schemas.PlayerCreate, state: AppState = Depends(get_app_state)):
    return state.add_player(player_in)

@router.get("/{player_id}", response_model=PlayerModel)
async def get_player(player_id: str, state: AppState = Depends(get_app_state)):
    player = state.get_player(player_id)
    if not player:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Player not found")
    return player

@router.patch("/{player_id}", response_model=PlayerModel)
async def update_player(player_id: str, player_in: player_schemas.PlayerUpdate, state: AppState = Depends(get_app_state)):
    try:
        player = state.update_player(player_id, player_in)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not player:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Player not found")
    return player

@router.delete("/{player_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_player(player_id: str, state: AppState = Depends(get_app_state)):
    if not state.delete_player(player_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Player not found")
