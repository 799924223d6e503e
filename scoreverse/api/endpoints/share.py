from fastapi import APIRouter, Depends, HTTPException, status

from scoreverse.models.user_model import UserModel
from scoreverse.schemas import share_schemas
from scoreverse.services.share_service import ShareService
from scoreverse.api.dependencies import get_current_user, get_share_service

router = APIRouter()

@router.post("", response_model=share_schemas.ShareLink)
async def create_share_link(
    current_user: UserModel = Depends(get_current_user),
    shares: ShareService = Depends(get_share_service),
):
    return share_schemas.ShareLink(share_id=shares.create_share(current_user))

# Public, read-only: no authentication on the routes below

@router.get("/spaces/{share_id}", response_model=share_schemas.SharedSpaceData)
async def get_shared_space(share_id: str, shares: ShareService = Depends(get_share_service)):
    data = shares.get_shared_space(share_id)
    if not data:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Space not found")
    return data

@router.get("/{share_id}", response_model=share_schemas.PublicShareData)
async def get_shared_data(share_id: str, shares: ShareService = Depends(get_share_service)):
    data = shares.get_shared_data(share_id)
    if not data:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Share link not found or invalid.")
    return data
