from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from scoreverse.core.scope import space_id_of
from scoreverse.models.space_model import SpaceModel
from scoreverse.schemas import share_schemas, space_schemas
from scoreverse.services.app_state import AppState
from scoreverse.api.dependencies import get_app_state

router = APIRouter()

@router.get("", response_model=List[SpaceModel])
async def list_spaces(state: AppState = Depends(get_app_state)):
    return sorted(state.spaces, key=lambda s: s.name.lower())

@router.post("", response_model=SpaceModel, status_code=status.HTTP_201_CREATED)
async def create_space(space_in: space_schemas.SpaceCreate, state: AppState = Depends(get_app_state)):
    return state.add_space(space_in)

@router.get("/active", response_model=space_schemas.ActiveSpaceRead)
async def get_active_space(state: AppState = Depends(get_app_state)):
    return space_schemas.ActiveSpaceRead(space_id=state.active_space_id, scope=str(state.scope))

@router.put("/active", response_model=space_schemas.ActiveSpaceRead)
async def set_active_space(request: space_schemas.ActiveSpaceRequest, state: AppState = Depends(get_app_state)):
    try:
        scope = state.set_active_space(request.space_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return space_schemas.ActiveSpaceRead(space_id=space_id_of(scope), scope=str(scope))

@router.patch("/{space_id}", response_model=SpaceModel)
async def update_space(space_id: str, space_in: space_schemas.SpaceUpdate, state: AppState = Depends(get_app_state)):
    space = state.update_space(space_id, space_in)
    if not space:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Space not found")
    return space

@router.delete("/{space_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_space(space_id: str, state: AppState = Depends(get_app_state)):
    if not state.delete_space(space_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Space not found")

@router.post("/{space_id}/share", response_model=share_schemas.ShareLink)
async def share_space(space_id: str, state: AppState = Depends(get_app_state)):
    share_id = state.share_space(space_id)
    if not share_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Space not found")
    return share_schemas.ShareLink(share_id=share_id)

@router.delete("/{space_id}/share", status_code=status.HTTP_204_NO_CONTENT)
async def unshare_space(space_id: str, state: AppState = Depends(get_app_state)):
    if not state.unshare_space(space_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Space not found")
