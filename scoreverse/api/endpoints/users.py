from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from scoreverse.models.user_model import UserModel
from scoreverse.schemas import user_schemas
from scoreverse.services.user_service import UserService
from scoreverse.api.dependencies import get_current_user, get_user_service, session_registry

router = APIRouter()

@router.get("/me", response_model=user_schemas.UserRead)
async def read_users_me(current_user: UserModel = Depends(get_current_user)):
    return current_user

@router.get("", response_model=List[user_schemas.UserRead])
async def list_users(
    current_user: UserModel = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return users.list_users()

@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    current_user: UserModel = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    try:
        deleted = users.delete_user(user_id, current_user)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    session_registry.close(user_id)
