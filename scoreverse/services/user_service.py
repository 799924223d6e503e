import logging
from typing import List, Optional

from pydantic import ValidationError

from scoreverse.core import security
from scoreverse.core.config import settings
from scoreverse.models.user_model import UserModel
from scoreverse.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

class UserService:
    def __init__(self, store: DocumentStore):
        self.store = store

    def _to_model(self, user_dict) -> Optional[UserModel]:
        try:
            return UserModel(**user_dict)
        except ValidationError as e:
            logger.warning("Ignoring malformed user record %s: %s", user_dict.get("id"), e)
            return None

    def create_user(self, username: str, password: str, email: Optional[str] = None) -> UserModel:
        username = username.strip()
        # Usernames are unique regardless of case
        if self.get_user_by_username(username) is not None:
            raise ValueError(f"Username {username} is already taken.")
        if email:
            for u_dict in self.store.list("users"):
                if u_dict.get("email") and u_dict["email"].lower() == email.lower():
                    raise ValueError(f"User with email {email} already exists.")

        admin_names = {name.lower() for name in settings.ADMIN_USERNAMES}
        user = UserModel(
            username=username,
            email=email,
            hashed_password=security.get_password_hash(password),
            is_admin=username.lower() in admin_names,
        )
        self.store.create("users", user.model_dump(mode="json"))
        logger.info("Created user account %s (%s)", user.username, user.id)
        return user

    def authenticate(self, username: str, password: str) -> Optional[UserModel]:
        user = self.get_user_by_username(username)
        if user is None or not security.verify_password(password, user.hashed_password):
            return None
        return user

    def get_user(self, user_id: str) -> Optional[UserModel]:
        user_dict = self.store.get("users", user_id)
        return self._to_model(user_dict) if user_dict else None

    def get_user_by_username(self, username: str) -> Optional[UserModel]:
        wanted = username.strip().lower()
        for user_dict in self.store.list("users"):
            if str(user_dict.get("username", "")).lower() == wanted:
                return self._to_model(user_dict)
        return None

    def list_users(self) -> List[UserModel]:
        users = [self._to_model(u) for u in self.store.list("users")]
        return sorted((u for u in users if u is not None), key=lambda u: u.username.lower())

    def delete_user(self, user_id: str, acting_user: UserModel) -> bool:
        """Admin-only. Removes the account together with all of its data and share links."""
        if not acting_user.is_admin:
            raise PermissionError("User is not authorized to delete accounts.")
        if user_id == acting_user.id:
            raise PermissionError("You cannot delete your own account.")
        if self.get_user(user_id) is None:
            return False

        for share in self.store.query("shares", user_id=user_id):
            self.store.delete("shares", share["id"])
        self.store.delete_owner(user_id)
        self.store.delete("users", user_id)
        logger.info("User %s deleted account %s", acting_user.id, user_id)
        return True
