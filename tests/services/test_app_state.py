import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from scoreverse.core.exceptions import MatchValidationError, ReferentialConflictError, StoreWriteError
from scoreverse.core.scope import GLOBAL, SpaceScope
from scoreverse.models import HandicapSuggestion, PointsAward, UserModel
from scoreverse.schemas.game_schemas import GameCreate
from scoreverse.schemas.match_schemas import MatchCreate, MatchUpdate
from scoreverse.schemas.player_schemas import PlayerCreate, PlayerUpdate
from scoreverse.schemas.space_schemas import SpaceCreate
from scoreverse.schemas.tournament_schemas import TournamentCreate, TournamentUpdate
from scoreverse.services.app_state import AppState, SessionRegistry
from scoreverse.services.document_store import DocumentStore

@pytest.fixture
def store(tmp_path):
    return DocumentStore(data_dir=str(tmp_path))

@pytest.fixture
def user():
    return UserModel(id="user_1", username="organiser", hashed_password="x")

@pytest.fixture
def state(store, user):
    app_state = AppState(store, user)
    yield app_state
    app_state.close()

@pytest.fixture
def roster(state: AppState):
    alice = state.add_player(PlayerCreate(name="Alice"))
    bob = state.add_player(PlayerCreate(name="Bob"))
    carol = state.add_player(PlayerCreate(name="Carol"))
    chess = state.add_game(GameCreate(name="Chess", points_per_win=3, min_players=2, max_players=2))
    return alice, bob, carol, chess


class TestSnapshots:

    def test_commands_refresh_lists_through_store_callbacks(self, state: AppState, store: DocumentStore):
        player = state.add_player(PlayerCreate(name="Alice"))
        assert [p.id for p in state.players] == [player.id]

        # writes from elsewhere reach this session too
        store.create("players", {"id": "p2", "name": "Bob", "owner_id": "user_1"}, owner_id="user_1")
        assert {p.name for p in state.players} == {"Alice", "Bob"}

    def test_invalid_documents_are_skipped(self, state: AppState, store: DocumentStore):
        store.create("players", {"id": "bad", "name": "", "owner_id": "user_1"}, owner_id="user_1")
        assert state.players == []

    def test_close_stops_updates(self, state: AppState, store: DocumentStore):
        state.close()
        store.create("players", {"id": "p1", "name": "Alice", "owner_id": "user_1"}, owner_id="user_1")
        assert state.players == []

    def test_player_update_and_delete(self, state: AppState):
        player = state.add_player(PlayerCreate(name="Alice"))
        updated = state.update_player(player.id, PlayerUpdate(name="Alicia"))
        assert updated.name == "Alicia"
        assert state.get_player(player.id).name == "Alicia"
        assert state.update_player("missing", PlayerUpdate(name="x")) is None
        assert state.delete_player(player.id) is True
        assert state.player_name(player.id) == "Unknown Player"


class TestRecordMatch:

    def test_default_points_come_from_game(self, state: AppState, roster):
        alice, bob, _, chess = roster
        recorded = state.add_match(MatchCreate(game_id=chess.id, player_ids=[alice.id, bob.id], winner_ids=[alice.id]))

        assert recorded.match.points_awarded == [PointsAward(player_id=alice.id, points=3)]
        assert recorded.match.space_id is None
        assert state.get_match(recorded.match.id) is not None
        assert state.leaderboard()[0].player_id == alice.id

    @pytest.mark.parametrize("player_count, winners, message", [
        (1, 1, "at least 2 players"),
        (3, 1, "at most 2 players"),
        (2, 0, "At least one winner"),
    ])
    def test_player_count_and_winner_rules(self, state: AppState, roster, player_count, winners, message):
        players = list(roster[:3])[:player_count]
        data = MatchCreate(
            game_id=roster[3].id,
            player_ids=[p.id for p in players],
            winner_ids=[p.id for p in players[:winners]],
        )
        with pytest.raises(MatchValidationError, match=message):
            state.add_match(data)
        assert state.matches == []

    def test_winner_must_be_participant(self, state: AppState, roster):
        alice, bob, carol, chess = roster
        with pytest.raises(MatchValidationError, match="Every winner"):
            state.add_match(MatchCreate(game_id=chess.id, player_ids=[alice.id, bob.id], winner_ids=[carol.id]))

    def test_points_for_non_participant_rejected(self, state: AppState, roster):
        alice, bob, carol, chess = roster
        data = MatchCreate(
            game_id=chess.id, player_ids=[alice.id, bob.id], winner_ids=[alice.id],
            points_awarded=[PointsAward(player_id=carol.id, points=1)],
        )
        with pytest.raises(MatchValidationError, match="Points can only"):
            state.add_match(data)

    def test_unknown_game(self, state: AppState, roster):
        alice, bob, _, _ = roster
        with pytest.raises(MatchValidationError, match="Game not found"):
            state.add_match(MatchCreate(game_id="nope", player_ids=[alice.id, bob.id], winner_ids=[alice.id]))

    def test_applied_handicaps_add_point_awards(self, state: AppState, roster):
        alice, bob, _, chess = roster
        data = MatchCreate(
            game_id=chess.id, player_ids=[alice.id, bob.id], winner_ids=[alice.id],
            handicap_suggestions=[
                HandicapSuggestion(player_name="alice", handicap=-1.6, reason="Too strong"),
                HandicapSuggestion(player_name="Bob"),
            ],
            apply_handicaps=True,
        )
        recorded = state.add_match(data)
        assert PointsAward(player_id=alice.id, points=-2) in recorded.match.points_awarded
        assert all(a.player_id != bob.id for a in recorded.match.points_awarded)
        assert recorded.match.handicap_suggestions[0].reason == "Too strong"

    def test_match_is_stamped_with_active_space(self, state: AppState, roster):
        alice, bob, _, chess = roster
        club = state.add_space(SpaceCreate(name="Club"))
        state.set_active_space(club.id)

        recorded = state.add_match(MatchCreate(game_id=chess.id, player_ids=[alice.id, bob.id], winner_ids=[bob.id]))

        assert recorded.match.space_id == club.id
        assert [m.id for m in state.scoped_matches()] == [recorded.match.id]
        state.set_active_space(None)
        assert state.scoped_matches() == []
        assert state.leaderboard() == []

    def test_scoped_matches_newest_first(self, state: AppState, roster):
        alice, bob, _, chess = roster
        older = datetime(2024, 1, 1, tzinfo=timezone.utc)
        first = state.add_match(MatchCreate(game_id=chess.id, player_ids=[alice.id, bob.id], winner_ids=[alice.id], date=older))
        second = state.add_match(MatchCreate(game_id=chess.id, player_ids=[alice.id, bob.id], winner_ids=[bob.id],
                                             date=older + timedelta(days=1)))
        assert [m.id for m in state.scoped_matches()] == [second.match.id, first.match.id]

    def test_win_rates_are_refreshed(self, state: AppState, roster):
        alice, bob, _, chess = roster
        state.add_match(MatchCreate(game_id=chess.id, player_ids=[alice.id, bob.id], winner_ids=[alice.id]))
        assert state.get_player(alice.id).win_rate == 1.0
        assert state.get_player(bob.id).win_rate == 0.0

    def test_correcting_a_match(self, state: AppState, roster):
        alice, bob, carol, chess = roster
        recorded = state.add_match(MatchCreate(game_id=chess.id, player_ids=[alice.id, bob.id], winner_ids=[alice.id]))

        corrected = state.update_match(recorded.match.id, MatchUpdate(
            winner_ids=[bob.id], points_awarded=[PointsAward(player_id=bob.id, points=3)]
        ))
        assert corrected.winner_ids == [bob.id]
        assert state.leaderboard()[0].player_id == bob.id

        with pytest.raises(MatchValidationError):
            state.update_match(recorded.match.id, MatchUpdate(winner_ids=[carol.id]))

    def test_correcting_winners_moves_default_points(self, state: AppState, roster):
        alice, bob, _, chess = roster
        recorded = state.add_match(MatchCreate(game_id=chess.id, player_ids=[alice.id, bob.id], winner_ids=[alice.id]))

        corrected = state.update_match(recorded.match.id, MatchUpdate(winner_ids=[bob.id]))

        assert corrected.points_awarded == [PointsAward(player_id=bob.id, points=3)]
        board = {s.player_id: (s.total_points, s.wins) for s in state.leaderboard()}
        assert board == {bob.id: (3, 1), alice.id: (0, 0)}


class TestTournaments:

    def test_match_completes_tournament(self, state: AppState, roster):
        alice, bob, _, chess = roster
        cup = state.add_tournament(TournamentCreate(name="Cup", game_id=chess.id, target_points=6))
        announced = []
        state.on_tournament_completed(announced.append)

        first = state.add_match(MatchCreate(game_id=chess.id, player_ids=[alice.id, bob.id], winner_ids=[alice.id]))
        assert first.completed_tournaments == []
        second = state.add_match(MatchCreate(game_id=chess.id, player_ids=[alice.id, bob.id], winner_ids=[alice.id]))

        assert [t.id for t in second.completed_tournaments] == [cup.id]
        stored = state.get_tournament(cup.id)
        assert stored.status == "completed"
        assert stored.winner_player_id == alice.id
        assert stored.date_completed is not None
        assert announced[0].id == cup.id
        assert [shelf.player.id for shelf in state.trophy_room()] == [alice.id]

        # a completed tournament is never reprocessed
        third = state.add_match(MatchCreate(game_id=chess.id, player_ids=[alice.id, bob.id], winner_ids=[bob.id]))
        assert third.completed_tournaments == []

    def test_failed_completion_write_keeps_the_match(self, state: AppState, store: DocumentStore, roster):
        alice, bob, _, chess = roster
        cup = state.add_tournament(TournamentCreate(name="Cup", game_id=chess.id, target_points=3))
        original_update = store.update

        def failing_update(collection, *args, **kwargs):
            if collection == "tournaments":
                raise StoreWriteError("disk full")
            return original_update(collection, *args, **kwargs)

        with patch.object(store, "update", side_effect=failing_update):
            recorded = state.add_match(MatchCreate(game_id=chess.id, player_ids=[alice.id, bob.id], winner_ids=[alice.id]))

        assert recorded.completed_tournaments == []
        assert state.get_match(recorded.match.id) is not None
        assert state.get_tournament(cup.id).is_active

    def test_tournament_deleted_before_completion_is_not_announced(self, state: AppState, store: DocumentStore, roster):
        alice, bob, _, chess = roster
        cup = state.add_tournament(TournamentCreate(name="Cup", game_id=chess.id, target_points=3))
        announced = []
        state.on_tournament_completed(announced.append)
        # removed from the store behind the session's back
        with patch.object(store, "_notify"):
            store.delete("tournaments", cup.id, owner_id=state.owner_id)

        recorded = state.add_match(MatchCreate(game_id=chess.id, player_ids=[alice.id, bob.id], winner_ids=[alice.id]))

        assert recorded.completed_tournaments == []
        assert announced == []
        assert store.list("tournaments", owner_id=state.owner_id) == []

    def test_tournament_uses_active_space(self, state: AppState, roster):
        chess = roster[3]
        club = state.add_space(SpaceCreate(name="Club"))
        state.set_active_space(club.id)
        cup = state.add_tournament(TournamentCreate(name="Cup", game_id=chess.id, target_points=10))
        assert cup.space_id == club.id
        assert [t.id for t in state.scoped_tournaments()] == [cup.id]
        state.set_active_space(None)
        assert state.scoped_tournaments() == []

    def test_tournament_for_unknown_game(self, state: AppState):
        with pytest.raises(ValueError, match="Game not found"):
            state.add_tournament(TournamentCreate(name="Cup", game_id="nope", target_points=10))

    def test_completed_tournament_cannot_be_edited(self, state: AppState, roster):
        alice, bob, _, chess = roster
        cup = state.add_tournament(TournamentCreate(name="Cup", game_id=chess.id, target_points=3))
        state.add_match(MatchCreate(game_id=chess.id, player_ids=[alice.id, bob.id], winner_ids=[alice.id]))
        with pytest.raises(ValueError, match="cannot be edited"):
            state.update_tournament(cup.id, TournamentUpdate(target_points=10))

    def test_standings_use_tournament_scope(self, state: AppState, roster):
        alice, bob, _, chess = roster
        state.add_match(MatchCreate(game_id=chess.id, player_ids=[alice.id, bob.id], winner_ids=[bob.id]))
        club = state.add_space(SpaceCreate(name="Club"))
        state.set_active_space(club.id)
        cup = state.add_tournament(TournamentCreate(name="Cup", game_id=chess.id, target_points=10))
        state.add_match(MatchCreate(game_id=chess.id, player_ids=[alice.id, bob.id], winner_ids=[alice.id]))

        state.set_active_space(None)
        standings = state.tournament_standings(cup.id)
        assert [s.player_id for s in standings.leaderboard] == [alice.id, bob.id]
        assert standings.leaderboard[0].total_points == 3
        assert state.tournament_standings("missing") is None


class TestGamesAndSpaces:

    def test_game_with_matches_cannot_be_deleted(self, state: AppState, roster):
        alice, bob, _, chess = roster
        state.add_match(MatchCreate(game_id=chess.id, player_ids=[alice.id, bob.id], winner_ids=[alice.id]))
        with pytest.raises(ReferentialConflictError):
            state.delete_game(chess.id)
        assert state.get_game(chess.id) is not None

    def test_unused_game_can_be_deleted(self, state: AppState, roster):
        chess = roster[3]
        assert state.delete_game(chess.id) is True
        assert state.delete_game(chess.id) is False

    def test_active_space(self, state: AppState):
        assert state.scope == GLOBAL
        club = state.add_space(SpaceCreate(name="Club"))
        assert state.set_active_space(club.id) == SpaceScope(club.id)
        with pytest.raises(ValueError, match="Space not found"):
            state.set_active_space("nowhere")
        assert state.scope == SpaceScope(club.id)

    def test_share_and_unshare_space(self, state: AppState, store: DocumentStore):
        club = state.add_space(SpaceCreate(name="Club"))

        share_id = state.share_space(club.id)
        assert state.get_space(club.id).share_id == share_id
        assert store.get("shares", share_id) == {"id": share_id, "user_id": state.owner_id, "space_id": club.id}
        assert state.share_space(club.id) == share_id

        assert state.unshare_space(club.id) is True
        assert state.get_space(club.id).share_id is None
        assert store.get("shares", share_id) is None
        assert state.share_space("nowhere") is None
        assert state.unshare_space("nowhere") is False

    def test_deleting_shared_space_revokes_link(self, state: AppState, store: DocumentStore):
        club = state.add_space(SpaceCreate(name="Club"))
        share_id = state.share_space(club.id)
        state.delete_space(club.id)
        assert store.get("shares", share_id) is None

    def test_deleting_active_space_returns_to_global(self, state: AppState):
        club = state.add_space(SpaceCreate(name="Club"))
        state.set_active_space(club.id)
        assert state.delete_space(club.id) is True
        assert state.scope == GLOBAL


class TestSessionRegistry:

    def test_one_state_per_user(self, store, user):
        registry = SessionRegistry()
        first = registry.get_or_create(store, user)
        assert registry.get_or_create(store, user) is first
        assert registry.close(user.id) is True
        assert registry.close(user.id) is False
        assert registry.get_or_create(store, user) is not first
        registry.close_all()
