from typing import Optional

from fastapi import Depends, HTTPException, status

from scoreverse.core import security
from scoreverse.models.user_model import UserModel
from scoreverse.services.ai_service import AIService
from scoreverse.services.app_state import AppState, SessionRegistry
from scoreverse.services.document_store import DocumentStore
from scoreverse.services.share_service import ShareService
from scoreverse.services.user_service import UserService

_store: Optional[DocumentStore] = None
session_registry = SessionRegistry()

def get_store() -> DocumentStore:
    global _store
    if _store is None:
        _store = DocumentStore()
    return _store

def get_user_service(store: DocumentStore = Depends(get_store)) -> UserService:
    return UserService(store)

def get_share_service(store: DocumentStore = Depends(get_store)) -> ShareService:
    return ShareService(store)

def get_ai_service() -> AIService:
    return AIService()

def get_current_user(
    token: str = Depends(security.oauth2_scheme),
    users: UserService = Depends(get_user_service),
) -> UserModel:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    token_data = security.verify_token(token, credentials_exception)
    user = users.get_user(token_data.user_id)
    if user is None:
        raise credentials_exception
    return user

def get_app_state(
    current_user: UserModel = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> AppState:
    # Session state is created on the first authenticated request and dropped at logout
    return session_registry.get_or_create(store, current_user)
