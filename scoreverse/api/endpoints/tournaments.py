from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from scoreverse.models.stats_model import TrophyShelf
from scoreverse.models.tournament_model import TournamentModel
from scoreverse.schemas import tournament_schemas
from scoreverse.services.app_state import AppState
from scoreverse.api.dependencies import get_app_state

router = APIRouter()

@router.get("", response_model=List[TournamentModel])
async def list_tournaments(state: AppState = Depends(get_app_state)):
    return state.scoped_tournaments()

@router.post("", response_model=TournamentModel, status_code=status.HTTP_201_CREATED)
async def create_tournament(tournament_in: tournament_schemas.TournamentCreate, state: AppState = Depends(get_app_state)):
    try:
        return state.add_tournament(tournament_in)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

# Declared before /{tournament_id} so "trophies" is not taken for an id
@router.get("/trophies", response_model=List[TrophyShelf])
async def get_trophy_room(state: AppState = Depends(get_app_state)):
    return state.trophy_room()

@router.get("/{tournament_id}", response_model=tournament_schemas.TournamentStandings)
async def get_tournament(tournament_id: str, state: AppState = Depends(get_app_state)):
    standings = state.tournament_standings(tournament_id)
    if not standings:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tournament not found")
    return standings

@router.patch("/{tournament_id}", response_model=TournamentModel)
async def update_tournament(tournament_id: str, tournament_in: tournament_schemas.TournamentUpdate, state: AppState = Depends(get_app_state)):
    try:
        tournament = state.update_tournament(tournament_id, tournament_in)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not tournament:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tournament not found")
    return tournament

@router.delete("/{tournament_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tournament(tournament_id: str, state: AppState = Depends(get_app_state)):
    if not state.delete_tournament(tournament_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tournament not found")
