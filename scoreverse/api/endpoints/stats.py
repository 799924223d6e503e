from fastapi import APIRouter, Depends, HTTPException, status

from scoreverse.models.stats_model import PlayerStats
from scoreverse.services.app_state import AppState
from scoreverse.api.dependencies import get_app_state

router = APIRouter()

@router.get("/{player_id}", response_model=PlayerStats)
async def get_player_stats(player_id: str, state: AppState = Depends(get_app_state)):
    stats = state.player_stats(player_id)
    if not stats:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Player not found")
    return stats
