import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional
from uuid import uuid4

from pydantic import ValidationError

from scoreverse.core.exceptions import MatchValidationError, ReferentialConflictError, StoreWriteError
from scoreverse.core.scope import Scope, scope_for
from scoreverse.models import (
    GameModel,
    MatchModel,
    PlayerModel,
    PointsAward,
    SpaceModel,
    TournamentModel,
    UserModel,
)
from scoreverse.models.player_model import DEFAULT_WIN_RATE
from scoreverse.models.stats_model import PlayerStats, ScoreData, TrophyShelf, UNKNOWN_PLAYER_NAME
from scoreverse.models.tournament_model import TournamentStatus
from scoreverse.schemas import (
    game_schemas,
    match_schemas,
    player_schemas,
    space_schemas,
    tournament_schemas,
)
from scoreverse.services import scoring_service, stats_service
from scoreverse.services.document_store import DocumentStore, Subscription
from scoreverse.services.tournament_monitor import run_tournament_monitor

logger = logging.getLogger(__name__)

COLLECTION_MODELS = {
    "players": PlayerModel,
    "games": GameModel,
    "matches": MatchModel,
    "spaces": SpaceModel,
    "tournaments": TournamentModel,
}


def validate_match(game: GameModel, player_ids: List[str], winner_ids: List[str], points_awarded: List[PointsAward]):
    """Raises MatchValidationError when a match cannot be recorded for ``game``."""
    if len(player_ids) < game.min_players:
        raise MatchValidationError(f"{game.name} needs at least {game.min_players} players.")
    if game.max_players is not None and len(player_ids) > game.max_players:
        raise MatchValidationError(f"{game.name} allows at most {game.max_players} players.")
    if not winner_ids:
        raise MatchValidationError("At least one winner is required.")
    if len(winner_ids) > len(player_ids):
        raise MatchValidationError("There cannot be more winners than players.")
    participants = set(player_ids)
    if any(winner_id not in participants for winner_id in winner_ids):
        raise MatchValidationError("Every winner must be one of the players in the match.")
    if any(award.player_id not in participants for award in points_awarded):
        raise MatchValidationError("Points can only be awarded to players in the match.")


class AppState:
    """
    Session state for one signed-in user.

    Holds the user's players, games, matches, spaces and tournaments in memory.
    The lists are only ever replaced by store snapshot callbacks; commands write
    to the store and the callback refreshes the list. Leaderboards and stats are
    computed on demand from these lists.
    """

    def __init__(self, store: DocumentStore, user: UserModel):
        self.store = store
        self.user = user
        self.players: List[PlayerModel] = []
        self.games: List[GameModel] = []
        self.matches: List[MatchModel] = []
        self.spaces: List[SpaceModel] = []
        self.tournaments: List[TournamentModel] = []
        self.active_space_id: Optional[str] = None
        self._completion_listeners: List[Callable[[TournamentModel], None]] = []
        self._subscriptions: List[Subscription] = [
            store.subscribe(user.id, collection, self._snapshot_listener(collection))
            for collection in COLLECTION_MODELS
        ]

    @property
    def owner_id(self) -> str:
        return self.user.id

    @property
    def scope(self) -> Scope:
        return scope_for(self.active_space_id)

    def close(self):
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions = []
        self._completion_listeners = []

    def _snapshot_listener(self, collection: str):
        model = COLLECTION_MODELS[collection]

        def on_snapshot(documents):
            records = []
            for doc in documents:
                try:
                    records.append(model(**doc))
                except ValidationError as e:
                    logger.warning("Skipping invalid %s document %s: %s", collection, doc.get("id"), e)
            setattr(self, collection, records)

        return on_snapshot

    def on_tournament_completed(self, listener: Callable[[TournamentModel], None]):
        self._completion_listeners.append(listener)

    def _notify_completion(self, tournament: TournamentModel):
        for listener in self._completion_listeners:
            listener(tournament)

    # --- Lookups ---

    def get_player(self, player_id: str) -> Optional[PlayerModel]:
        return next((p for p in self.players if p.id == player_id), None)

    def get_game(self, game_id: str) -> Optional[GameModel]:
        return next((g for g in self.games if g.id == game_id), None)

    def get_match(self, match_id: str) -> Optional[MatchModel]:
        return next((m for m in self.matches if m.id == match_id), None)

    def get_space(self, space_id: str) -> Optional[SpaceModel]:
        return next((s for s in self.spaces if s.id == space_id), None)

    def get_tournament(self, tournament_id: str) -> Optional[TournamentModel]:
        return next((t for t in self.tournaments if t.id == tournament_id), None)

    def player_name(self, player_id: str) -> str:
        player = self.get_player(player_id)
        return player.name if player else UNKNOWN_PLAYER_NAME

    # --- Players ---

    def add_player(self, data: player_schemas.PlayerCreate) -> PlayerModel:
        player = PlayerModel(owner_id=self.owner_id, **data.model_dump(exclude_none=True))
        self.store.create("players", player.model_dump(mode="json"), owner_id=self.owner_id)
        return player

    def update_player(self, player_id: str, data: player_schemas.PlayerUpdate) -> Optional[PlayerModel]:
        return self._update("players", self.get_player(player_id), data.model_dump(exclude_unset=True))

    def delete_player(self, player_id: str) -> bool:
        # Matches keep the id; names then resolve to "Unknown Player"
        return self.store.delete("players", player_id, owner_id=self.owner_id)

    # --- Games ---

    def add_game(self, data: game_schemas.GameCreate) -> GameModel:
        game = GameModel(owner_id=self.owner_id, **data.model_dump())
        self.store.create("games", game.model_dump(mode="json"), owner_id=self.owner_id)
        return game

    def update_game(self, game_id: str, data: game_schemas.GameUpdate) -> Optional[GameModel]:
        return self._update("games", self.get_game(game_id), data.model_dump(exclude_unset=True))

    def delete_game(self, game_id: str) -> bool:
        if self.get_game(game_id) is None:
            return False
        if self.store.exists("matches", owner_id=self.owner_id, game_id=game_id):
            logger.warning("Declined deleting game %s: it is referenced by recorded matches", game_id)
            raise ReferentialConflictError("This game has recorded matches and cannot be deleted.")
        return self.store.delete("games", game_id, owner_id=self.owner_id)

    # --- Matches ---

    def add_match(self, data: match_schemas.MatchCreate) -> match_schemas.MatchRecorded:
        game = self.get_game(data.game_id)
        if game is None:
            raise MatchValidationError("Game not found.")

        if data.points_awarded is None:
            points_awarded = [PointsAward(player_id=winner_id, points=game.points_per_win) for winner_id in data.winner_ids]
        else:
            points_awarded = list(data.points_awarded)
        if data.apply_handicaps and data.handicap_suggestions:
            points_awarded.extend(self._handicap_awards(data))

        validate_match(game, data.player_ids, data.winner_ids, points_awarded)

        match_fields = dict(
            owner_id=self.owner_id,
            game_id=game.id,
            player_ids=list(data.player_ids),
            winner_ids=list(data.winner_ids),
            points_awarded=points_awarded,
            handicap_suggestions=data.handicap_suggestions,
            space_id=self.active_space_id,
        )
        if data.date is not None:
            match_fields["date"] = data.date
        match = MatchModel(**match_fields)

        # The monitor works on the list as it was before the write, plus the new match
        previous_matches = list(self.matches)
        self.store.create("matches", match.model_dump(mode="json"), owner_id=self.owner_id)

        completed = run_tournament_monitor(
            match,
            previous_matches + [match],
            list(self.tournaments),
            list(self.players),
            persist=self._persist_completion,
            notify=self._notify_completion,
        )
        self._refresh_win_rates(match, previous_matches)
        return match_schemas.MatchRecorded(match=match, completed_tournaments=completed)

    def _handicap_awards(self, data: match_schemas.MatchCreate) -> List[PointsAward]:
        by_name = {}
        for player_id in data.player_ids:
            player = self.get_player(player_id)
            if player is not None:
                by_name[player.name.lower()] = player.id
        awards = []
        for suggestion in data.handicap_suggestions:
            player_id = by_name.get(suggestion.player_name.lower())
            if player_id is None or not suggestion.handicap:
                continue
            points = round(suggestion.handicap)
            if points:
                awards.append(PointsAward(player_id=player_id, points=points))
        return awards

    def _persist_completion(self, tournament: TournamentModel):
        updated = self.store.update(
            "tournaments",
            tournament.id,
            {
                "status": TournamentStatus.COMPLETED.value,
                "winner_player_id": tournament.winner_player_id,
                "date_completed": tournament.date_completed.isoformat(),
            },
            owner_id=self.owner_id,
        )
        if updated is None:
            raise StoreWriteError(f"Tournament {tournament.id} no longer exists.")

    def _refresh_win_rates(self, match: MatchModel, previous_matches: List[MatchModel]):
        """Keeps each participant's per-game win rate current for the AI prompt defaults."""
        for player_id in set(match.player_ids):
            if self.get_player(player_id) is None:
                continue
            history = [m for m in previous_matches if m.game_id == match.game_id and player_id in m.player_ids]
            history.append(match)
            won = sum(1 for m in history if player_id in m.winner_ids)
            win_rate = won / len(history) if history else DEFAULT_WIN_RATE
            try:
                self.store.update("players", player_id, {"win_rate": win_rate}, owner_id=self.owner_id)
            except StoreWriteError as e:
                logger.error("Could not refresh win rate for player %s: %s", player_id, e)

    def update_match(self, match_id: str, data: match_schemas.MatchUpdate) -> Optional[MatchModel]:
        match = self.get_match(match_id)
        if match is None:
            return None
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        if not update_data:
            return match

        winner_ids = update_data.get("winner_ids", match.winner_ids)
        game = self.get_game(match.game_id)
        if "points_awarded" in update_data:
            points_awarded = [PointsAward(**a) for a in update_data["points_awarded"]]
        elif "winner_ids" in update_data and game is not None:
            # New winners without explicit awards get the game's default points
            points_awarded = [PointsAward(player_id=winner_id, points=game.points_per_win) for winner_id in winner_ids]
            update_data["points_awarded"] = [award.model_dump() for award in points_awarded]
        else:
            points_awarded = match.points_awarded
        if game is not None:
            validate_match(game, match.player_ids, winner_ids, points_awarded)
        elif any(w not in match.player_ids for w in winner_ids):
            raise MatchValidationError("Every winner must be one of the players in the match.")

        return self._update("matches", match, update_data)

    def delete_match(self, match_id: str) -> bool:
        return self.store.delete("matches", match_id, owner_id=self.owner_id)

    # --- Spaces ---

    def add_space(self, data: space_schemas.SpaceCreate) -> SpaceModel:
        space = SpaceModel(owner_id=self.owner_id, name=data.name)
        self.store.create("spaces", space.model_dump(mode="json"), owner_id=self.owner_id)
        return space

    def update_space(self, space_id: str, data: space_schemas.SpaceUpdate) -> Optional[SpaceModel]:
        return self._update("spaces", self.get_space(space_id), data.model_dump(exclude_unset=True))

    def delete_space(self, space_id: str) -> bool:
        space = self.get_space(space_id)
        if space is not None and space.share_id:
            self.store.delete("shares", space.share_id)
        deleted = self.store.delete("spaces", space_id, owner_id=self.owner_id)
        if deleted and self.active_space_id == space_id:
            self.active_space_id = None
        return deleted

    def set_active_space(self, space_id: Optional[str]) -> Scope:
        if space_id and self.get_space(space_id) is None:
            raise ValueError("Space not found.")
        self.active_space_id = space_id or None
        return self.scope

    def share_space(self, space_id: str) -> Optional[str]:
        """Publishes a read-only view of the space. Returns the share id, reusing a live one."""
        space = self.get_space(space_id)
        if space is None:
            return None
        if space.share_id and self.store.get("shares", space.share_id):
            return space.share_id
        share_id = uuid4().hex
        self.store.create("shares", {"id": share_id, "user_id": self.owner_id, "space_id": space.id})
        self.store.update("spaces", space.id, {"share_id": share_id}, owner_id=self.owner_id)
        logger.info("Space %s shared as %s", space.id, share_id)
        return share_id

    def unshare_space(self, space_id: str) -> bool:
        space = self.get_space(space_id)
        if space is None:
            return False
        if space.share_id:
            self.store.delete("shares", space.share_id)
            self.store.update("spaces", space.id, {"share_id": None}, owner_id=self.owner_id)
            logger.info("Space %s is no longer shared", space.id)
        return True

    # --- Tournaments ---

    def add_tournament(self, data: tournament_schemas.TournamentCreate) -> TournamentModel:
        if self.get_game(data.game_id) is None:
            raise ValueError("Game not found.")
        tournament = TournamentModel(
            owner_id=self.owner_id,
            name=data.name,
            game_id=data.game_id,
            target_points=data.target_points,
            space_id=self.active_space_id,
        )
        self.store.create("tournaments", tournament.model_dump(mode="json"), owner_id=self.owner_id)
        return tournament

    def update_tournament(self, tournament_id: str, data: tournament_schemas.TournamentUpdate) -> Optional[TournamentModel]:
        tournament = self.get_tournament(tournament_id)
        if tournament is None:
            return None
        if not tournament.is_active:
            raise ValueError("Completed tournaments cannot be edited.")
        return self._update("tournaments", tournament, data.model_dump(exclude_unset=True, exclude_none=True))

    def delete_tournament(self, tournament_id: str) -> bool:
        return self.store.delete("tournaments", tournament_id, owner_id=self.owner_id)

    # --- Derived reads ---

    def scoped_matches(self, game_id: Optional[str] = None) -> List[MatchModel]:
        """Match history for the active scope, newest first."""
        matches = scoring_service.filter_matches(self.matches, self.scope, game_id)
        return sorted(matches, key=lambda m: m.date, reverse=True)

    def scoped_tournaments(self) -> List[TournamentModel]:
        return scoring_service.filter_tournaments(self.tournaments, self.scope)

    def leaderboard(self, game_id: Optional[str] = None) -> List[ScoreData]:
        return scoring_service.scoped_leaderboard(self.matches, self.players, self.scope, game_id)

    def player_stats(self, player_id: str) -> Optional[PlayerStats]:
        # Unscoped: lifetime stats span every space
        return stats_service.calculate_player_stats(player_id, self.players, self.matches, self.games)

    def trophy_room(self) -> List[TrophyShelf]:
        return stats_service.trophy_room(self.players, self.tournaments)

    def tournament_standings(self, tournament_id: str) -> Optional[tournament_schemas.TournamentStandings]:
        tournament = self.get_tournament(tournament_id)
        if tournament is None:
            return None
        leaderboard = scoring_service.scoped_leaderboard(
            self.matches, self.players, scope_for(tournament.space_id), tournament.game_id
        )
        return tournament_schemas.TournamentStandings(tournament=tournament, leaderboard=leaderboard)

    # --- Helpers ---

    def _update(self, collection: str, record, update_data: Dict):
        """Validates the merged record before issuing a partial update."""
        if record is None:
            return None
        if not update_data:
            return record
        model = COLLECTION_MODELS[collection]
        merged = model(**{**record.model_dump(), **update_data})
        changed = merged.model_dump(mode="json", include=set(update_data))
        self.store.update(collection, record.id, changed, owner_id=self.owner_id)
        return merged


class SessionRegistry:
    """Live AppState instances, one per signed-in user."""

    def __init__(self):
        self._sessions: Dict[str, AppState] = {}
        self._lock = threading.Lock()

    def get_or_create(self, store: DocumentStore, user: UserModel) -> AppState:
        with self._lock:
            state = self._sessions.get(user.id)
            if state is not None and state.store is store:
                state.user = user
                return state
            if state is not None:
                state.close()
            state = AppState(store, user)
            self._sessions[user.id] = state
            return state

    def close(self, user_id: str) -> bool:
        with self._lock:
            state = self._sessions.pop(user_id, None)
        if state is None:
            return False
        state.close()
        return True

    def close_all(self):
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for state in sessions:
            state.close()
