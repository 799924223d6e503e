import pytest
from fastapi.testclient import TestClient

from scoreverse.main import app
from scoreverse.api.dependencies import get_ai_service, get_store, session_registry
from scoreverse.services.ai_service import AIService
from scoreverse.services.document_store import DocumentStore

# --- Test Client Fixtures ---
@pytest.fixture
def store(tmp_path):
    return DocumentStore(data_dir=str(tmp_path))

@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_ai_service] = lambda: AIService(api_key="")
    yield TestClient(app)
    app.dependency_overrides.clear()
    session_registry.close_all()

def signup(client: TestClient, username: str = "organiser") -> dict:
    response = client.post("/auth/signup", json={"username": username, "password": "secret-pass"})
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['access_token']}"}

@pytest.fixture
def auth_headers(client):
    return signup(client)

@pytest.fixture
def roster(client, auth_headers):
    alice = client.post("/players", json={"name": "Alice"}, headers=auth_headers).json()
    bob = client.post("/players", json={"name": "Bob"}, headers=auth_headers).json()
    chess = client.post("/games", json={"name": "Chess", "points_per_win": 2}, headers=auth_headers).json()
    return alice, bob, chess


class TestAuthRoutes:

    def test_login_and_me(self, client: TestClient):
        signup(client, "alice")
        response = client.post("/auth/login", data={"username": "alice", "password": "secret-pass"})
        assert response.status_code == 200
        token = response.json()["access_token"]

        me = client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["username"] == "alice"
        assert "hashed_password" not in me.json()

    def test_bad_credentials(self, client: TestClient):
        signup(client, "alice")
        response = client.post("/auth/login", data={"username": "alice", "password": "wrong-pass"})
        assert response.status_code == 401

    def test_duplicate_signup(self, client: TestClient):
        signup(client, "alice")
        response = client.post("/auth/signup", json={"username": "ALICE", "password": "secret-pass"})
        assert response.status_code == 400

    def test_requires_token(self, client: TestClient):
        assert client.get("/players").status_code == 401
        assert client.get("/players", headers={"Authorization": "Bearer not-a-token"}).status_code == 401

    def test_user_list_is_admin_only(self, client: TestClient, auth_headers):
        assert client.get("/users", headers=auth_headers).status_code == 403


class TestMatchRoutes:

    def test_record_match_and_leaderboard(self, client: TestClient, auth_headers, roster):
        alice, bob, chess = roster
        response = client.post("/matches", json={
            "game_id": chess["id"], "player_ids": [alice["id"], bob["id"]], "winner_ids": [alice["id"]],
        }, headers=auth_headers)
        assert response.status_code == 201
        assert response.json()["completed_tournaments"] == []

        board = client.get("/leaderboards", headers=auth_headers).json()
        assert [(row["player_name"], row["total_points"]) for row in board] == [("Alice", 2), ("Bob", 0)]

        per_game = client.get(f"/leaderboards/{chess['id']}", headers=auth_headers).json()
        assert per_game == board
        assert client.get("/leaderboards/unknown", headers=auth_headers).status_code == 404

    def test_invalid_match_is_422(self, client: TestClient, auth_headers, roster):
        alice, _, chess = roster
        response = client.post("/matches", json={
            "game_id": chess["id"], "player_ids": [alice["id"]], "winner_ids": [alice["id"]],
        }, headers=auth_headers)
        assert response.status_code == 422
        assert client.get("/matches", headers=auth_headers).json() == []

    def test_game_with_matches_is_409_on_delete(self, client: TestClient, auth_headers, roster):
        alice, bob, chess = roster
        client.post("/matches", json={
            "game_id": chess["id"], "player_ids": [alice["id"], bob["id"]], "winner_ids": [bob["id"]],
        }, headers=auth_headers)
        assert client.delete(f"/games/{chess['id']}", headers=auth_headers).status_code == 409

    def test_player_stats(self, client: TestClient, auth_headers, roster):
        alice, bob, chess = roster
        for winner in (alice, alice, bob):
            client.post("/matches", json={
                "game_id": chess["id"], "player_ids": [alice["id"], bob["id"]], "winner_ids": [winner["id"]],
            }, headers=auth_headers)

        stats = client.get(f"/stats/{bob['id']}", headers=auth_headers).json()
        assert stats["total_games"] == 3
        assert stats["current_streak"] == {"type": "W", "count": 1}
        assert stats["longest_loss_streak"] == 2
        assert client.get("/stats/unknown", headers=auth_headers).status_code == 404


class TestSpaceAndTournamentRoutes:

    def test_tournament_completes_inside_space(self, client: TestClient, auth_headers, roster):
        alice, bob, chess = roster
        club = client.post("/spaces", json={"name": "Club"}, headers=auth_headers).json()
        active = client.put("/spaces/active", json={"space_id": club["id"]}, headers=auth_headers).json()
        assert active == {"space_id": club["id"], "scope": f"space:{club['id']}"}

        cup = client.post("/tournaments", json={"name": "Cup", "game_id": chess["id"], "target_points": 4},
                          headers=auth_headers).json()
        assert cup["space_id"] == club["id"]

        match_body = {"game_id": chess["id"], "player_ids": [alice["id"], bob["id"]], "winner_ids": [alice["id"]]}
        client.post("/matches", json=match_body, headers=auth_headers)
        recorded = client.post("/matches", json=match_body, headers=auth_headers).json()

        assert [t["id"] for t in recorded["completed_tournaments"]] == [cup["id"]]
        standings = client.get(f"/tournaments/{cup['id']}", headers=auth_headers).json()
        assert standings["tournament"]["status"] == "completed"
        assert standings["tournament"]["winner_player_id"] == alice["id"]
        trophies = client.get("/tournaments/trophies", headers=auth_headers).json()
        assert trophies[0]["player"]["id"] == alice["id"]

        # the global context sees none of the space's records
        client.put("/spaces/active", json={"space_id": None}, headers=auth_headers)
        assert client.get("/matches", headers=auth_headers).json() == []
        assert client.get("/tournaments", headers=auth_headers).json() == []
        assert client.get("/leaderboards", headers=auth_headers).json() == []

    def test_unknown_active_space(self, client: TestClient, auth_headers):
        response = client.put("/spaces/active", json={"space_id": "nowhere"}, headers=auth_headers)
        assert response.status_code == 404


class TestShareAndAIRoutes:

    def test_public_share(self, client: TestClient, auth_headers, roster):
        share_id = client.post("/share", headers=auth_headers).json()["share_id"]

        public = client.get(f"/share/{share_id}")
        assert public.status_code == 200
        assert public.json()["owner"]["username"] == "organiser"
        assert "owner_id" not in public.json()
        assert len(public.json()["players"]) == 2
        assert client.get("/share/unknown").status_code == 404

    def test_ai_disabled_is_503(self, client: TestClient, auth_headers):
        response = client.post("/ai/matchups", json={"game_name": "Chess", "player_names": ["A", "B"]},
                               headers=auth_headers)
        assert response.status_code == 503

    def test_space_is_only_public_while_shared(self, client: TestClient, auth_headers):
        me = client.get("/users/me", headers=auth_headers).json()
        space = client.post("/spaces", json={"name": "Private"}, headers=auth_headers).json()
        assert client.get(f"/share/spaces/{me['id']}/{space['id']}").status_code == 404
        assert client.get(f"/share/spaces/{space['id']}").status_code == 404

        share_id = client.post(f"/spaces/{space['id']}/share", headers=auth_headers).json()["share_id"]
        shared = client.get(f"/share/spaces/{share_id}")
        assert shared.status_code == 200
        assert shared.json()["space"]["name"] == "Private"

        assert client.delete(f"/spaces/{space['id']}/share", headers=auth_headers).status_code == 204
        assert client.get(f"/share/spaces/{share_id}").status_code == 404

    def test_sharing_requires_owner_session(self, client: TestClient, auth_headers):
        space = client.post("/spaces", json={"name": "Club"}, headers=auth_headers).json()
        assert client.post(f"/spaces/{space['id']}/share").status_code == 401
        other = signup(client, "intruder")
        assert client.post(f"/spaces/{space['id']}/share", headers=other).status_code == 404
