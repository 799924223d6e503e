import logging
from typing import Optional
from uuid import uuid4

from scoreverse.models import GameModel, MatchModel, PlayerModel, SpaceModel, TournamentModel, UserModel
from scoreverse.schemas.share_schemas import PublicShareData, ShareOwner, SharedSpaceData
from scoreverse.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

class ShareService:
    """Read-only public views of a user's data, addressed by an opaque share id."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def create_share(self, user: UserModel) -> str:
        # Share ids are append-only: an existing link is always reused
        if user.share_id and self.store.get("shares", user.share_id):
            return user.share_id
        # space_id=None keeps per-space shares out of the account-wide link
        existing = self.store.query("shares", user_id=user.id, space_id=None)
        if existing:
            share_id = existing[0]["id"]
        else:
            share_id = uuid4().hex
            self.store.create("shares", {"id": share_id, "user_id": user.id})
        self.store.update("users", user.id, {"share_id": share_id})
        user.share_id = share_id
        return share_id

    def get_shared_data(self, share_id: str) -> Optional[PublicShareData]:
        share = self.store.get("shares", share_id)
        if share is None or share.get("space_id"):
            return None
        owner_id = share.get("user_id")
        if not owner_id:
            logger.error("Share %s has no owner and cannot be served", share_id)
            return None
        owner = self.store.get("users", owner_id)
        if owner is None:
            return None

        return PublicShareData(
            owner=ShareOwner(username=owner["username"]),
            players=[PlayerModel(**d) for d in self.store.list("players", owner_id)],
            games=[GameModel(**d) for d in self.store.list("games", owner_id)],
            matches=[MatchModel(**d) for d in self.store.list("matches", owner_id)],
            spaces=[SpaceModel(**d) for d in self.store.list("spaces", owner_id)],
            tournaments=[TournamentModel(**d) for d in self.store.list("tournaments", owner_id)],
        )

    def get_shared_space(self, share_id: str) -> Optional[SharedSpaceData]:
        """Served only while the owner keeps the space shared."""
        share = self.store.get("shares", share_id)
        if share is None or not share.get("space_id"):
            return None
        owner_id, space_id = share.get("user_id"), share["space_id"]
        if not owner_id or self.store.get("users", owner_id) is None:
            return None
        space = self.store.get("spaces", space_id, owner_id)
        if space is None:
            return None
        return SharedSpaceData(
            space=SpaceModel(**space),
            players=[PlayerModel(**d) for d in self.store.list("players", owner_id)],
            games=[GameModel(**d) for d in self.store.list("games", owner_id)],
            matches=[MatchModel(**d) for d in self.store.query("matches", owner_id, space_id=space_id)],
            tournaments=[TournamentModel(**d) for d in self.store.query("tournaments", owner_id, space_id=space_id)],
        )
