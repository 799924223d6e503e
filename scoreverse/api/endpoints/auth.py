import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from scoreverse.core import security
from scoreverse.models.user_model import UserModel
from scoreverse.schemas import auth_schemas
from scoreverse.services.user_service import UserService
from scoreverse.api.dependencies import get_current_user, get_user_service, session_registry

logger = logging.getLogger(__name__)

router = APIRouter()

def _token_for(user: UserModel) -> auth_schemas.Token:
    access_token = security.create_access_token(data={"sub": user.id})
    return auth_schemas.Token(access_token=access_token, token_type="bearer")

@router.post("/signup", response_model=auth_schemas.Token, status_code=status.HTTP_201_CREATED)
async def signup(
    request: auth_schemas.SignupRequest,
    users: UserService = Depends(get_user_service),
):
    try:
        user = users.create_user(request.username, request.password, email=request.email)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return _token_for(user)

@router.post("/login", response_model=auth_schemas.Token)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    users: UserService = Depends(get_user_service),
):
    user = users.authenticate(form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    logger.info("User %s logged in", user.username)
    return _token_for(user)

@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(current_user: UserModel = Depends(get_current_user)):
    session_registry.close(current_user.id)

