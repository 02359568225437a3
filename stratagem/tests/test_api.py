"""
Tests for the HTTP API.

Tests:
- System routes, request ids and the error envelope
- Catalog, players and game-instance play
- Challenges, tournaments and events end to end
- Explorations, push settings, webhooks, federation and the bot
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

FAR_FUTURE_MS = 4_102_444_800_000  # 2100-01-01


def two_players():
    return [{"id": "user1", "name": "Alice"}, {"id": "user2", "name": "Bob"}]


class TestSystem:

    def test_health(self, client):
        """Health reports ok with the package version."""
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["version"] == "1.0.0"
        assert body["timestamp"].endswith("Z")

    def test_root_redirects_to_docs(self, client):
        """The root path points at the API documentation."""
        response = client.get("/", follow_redirects=False)
        assert response.status_code in (302, 307)
        assert response.headers["location"] == "/docs"

    def test_request_id_generated(self, client):
        """Every response carries a request id."""
        assert client.get("/health").headers["x-request-id"]

    def test_request_id_echoed(self, client):
        """A supplied request id is echoed back, in errors too."""
        response = client.get("/v1/games/nope", headers={"x-request-id": "req-42"})
        assert response.headers["x-request-id"] == "req-42"
        assert response.json()["requestId"] == "req-42"

    def test_unknown_route(self, client):
        """Unknown routes get the envelope with the path in details."""
        response = client.get("/v1/nothing-here")
        assert response.status_code == 404
        body = response.json()
        assert body["error"]["code"] == "NOT_FOUND"
        assert body["error"]["message"] == "Route not found"
        assert body["error"]["details"] == {"path": "/v1/nothing-here"}
        assert "timestamp" in body

    def test_method_not_allowed(self, client):
        """Wrong methods map to METHOD_NOT_ALLOWED."""
        response = client.delete("/v1/games")
        assert response.status_code == 405
        assert response.json()["error"]["code"] == "METHOD_NOT_ALLOWED"

    def test_unexpected_error_is_hidden(self, app):
        """Unhandled exceptions become a 500 envelope without internals."""
        async def explode():
            raise RuntimeError("secret detail")

        app.add_api_route("/v1/explode", explode)
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/v1/explode", headers={"x-request-id": "boom-1"})

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == {"code": "INTERNAL_ERROR", "message": "Internal server error"}
        assert body["requestId"] == "boom-1"
        assert "secret" not in response.text


class TestValidation:

    def test_missing_field_rejected_before_handler(self, client, services):
        """A body missing a required field is a 400 and changes nothing."""
        response = client.post("/v1/challenges", json={"numPlayers": 2})
        assert response.status_code == 400
        body = response.json()
        assert body["error"]["code"] == "VALIDATION_ERROR"
        locations = [e["loc"] for e in body["error"]["details"]["errors"]]
        assert ["body", "metaGame"] in locations

        assert asyncio.run(services.challenge.list_challenges()) == []

    def test_game_instance_needs_two_players(self, client, services, user1_headers):
        """Player count is validated by the schema."""
        response = client.post(
            "/v1/game-instances",
            json={"gameId": "chess", "players": [{"id": "user1", "name": "Alice"}]},
            headers=user1_headers,
        )
        assert response.status_code == 400
        assert asyncio.run(services.game.list_game_instances()) == []

    def test_bad_query_parameter(self, client):
        """Query parameters are validated too."""
        response = client.get("/v1/games", params={"pageSize": 1000})
        assert response.status_code == 400


class TestCatalogAndPlayers:

    def test_list_games(self, client):
        """The catalog is paginated and camelCased."""
        response = client.get("/v1/games", params={"pageSize": 2})
        body = response.json()
        assert body["total"] == 3
        assert len(body["games"]) == 2
        assert body["pageSize"] == 2
        assert "minPlayers" in body["games"][0]

    def test_game_details(self, client):
        """Details include tags and capabilities."""
        body = client.get("/v1/games/chess").json()
        assert body["variants"] == ["standard", "chess960"]
        assert body["capabilities"]["timeControl"] is True

    def test_unknown_game(self, client):
        """Unknown games are GAME_NOT_FOUND."""
        response = client.get("/v1/games/nope")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "GAME_NOT_FOUND"

    def test_player_profile(self, client):
        """Profiles expose ratings and stats."""
        body = client.get("/v1/players/user1").json()
        assert body["name"] == "Alice"
        assert body["rating"]["chess"] == 1650
        assert body["stats"]["gamesPlayed"] == 150

    def test_unknown_player(self, client):
        """Unknown players are PLAYER_NOT_FOUND."""
        response = client.get("/v1/players/ghost")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "PLAYER_NOT_FOUND"


class TestGameInstances:

    @pytest.fixture
    def instance_id(self, client, user1_headers):
        response = client.post(
            "/v1/game-instances",
            json={"gameId": "tic-tac-toe", "players": two_players()},
            headers=user1_headers,
        )
        assert response.status_code == 201
        return response.json()["instanceId"]

    def test_play_moves(self, client, instance_id, user1_headers, user2_headers):
        """Moves alternate between seats and are recorded."""
        first = client.post(
            f"/v1/game-instances/{instance_id}/moves",
            json={"playerId": "user1", "notation": "b2"},
            headers=user1_headers,
        ).json()
        assert first["success"] is True
        assert first["gameOver"] is False
        assert len(first["legalMoves"]) == 8

        again = client.post(
            f"/v1/game-instances/{instance_id}/moves",
            json={"playerId": "user1", "notation": "a1"},
            headers=user1_headers,
        )
        assert again.status_code == 403
        assert again.json()["error"]["code"] == "NOT_YOUR_TURN"

        client.post(
            f"/v1/game-instances/{instance_id}/moves",
            json={"playerId": "user2", "notation": "a1"},
            headers=user2_headers,
        )
        state = client.get(f"/v1/game-instances/{instance_id}", headers=user1_headers).json()
        assert state["moveCount"] == 2
        assert state["currentPlayer"] == 1
        assert [h["move"] for h in state["history"]] == ["b2", "a1"]

    def test_token_identity_wins_over_body(self, client, instance_id, user2_headers):
        """The authenticated user moves, whatever playerId says."""
        response = client.post(
            f"/v1/game-instances/{instance_id}/moves",
            json={"playerId": "user1", "notation": "b2"},
            headers=user2_headers,
        )
        assert response.status_code == 403

    def test_resign(self, client, instance_id, user2_headers):
        """Resigning completes the game for the opponent."""
        body = client.post(f"/v1/game-instances/{instance_id}/resign", headers=user2_headers).json()
        assert body["state"] == "completed"
        assert body["winners"] == [1]

    def test_render_ascii(self, client, instance_id, user1_headers):
        """ASCII rendering draws the board."""
        body = client.get(
            f"/v1/game-instances/{instance_id}/render",
            params={"format": "ascii", "size": 100},
            headers=user1_headers,
        ).json()
        assert body["format"] == "ascii"
        assert body["metadata"] == {"width": 100, "height": 100}

    def test_unknown_instance(self, client, user1_headers):
        """Unknown instances are GAME_NOT_FOUND."""
        response = client.get(
            "/v1/game-instances/00000000-0000-4000-8000-000000000000", headers=user1_headers
        )
        assert response.status_code == 404


class TestChallenges:

    @pytest.fixture
    def challenge_id(self, client, user1_headers):
        response = client.post(
            "/v1/challenges",
            json={"metaGame": "chess", "challengees": ["user2"], "comment": "gl"},
            headers=user1_headers,
        )
        assert response.status_code == 201
        return response.json()["challengeId"]

    def test_revoke_as_non_issuer(self, client, challenge_id, user2_headers):
        """Only the issuer can revoke; the challenge stays retrievable."""
        response = client.delete(f"/v1/challenges/{challenge_id}", headers=user2_headers)
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"

        still_there = client.get(f"/v1/challenges/{challenge_id}")
        assert still_there.status_code == 200
        assert still_there.json()["challenger"]["id"] == "user1"

    def test_revoke_as_issuer(self, client, challenge_id, user1_headers):
        """The issuer can revoke."""
        assert client.delete(f"/v1/challenges/{challenge_id}", headers=user1_headers).status_code == 200
        assert client.get(f"/v1/challenges/{challenge_id}").status_code == 404

    def test_accept_creates_game(self, client, challenge_id, user1_headers, user2_headers):
        """Filling the challenge starts a game and removes the challenge."""
        result = client.post(
            f"/v1/challenges/{challenge_id}/respond", json={"accept": True}, headers=user2_headers
        ).json()
        assert result["success"] is True
        game_id = result["gameId"]
        assert game_id

        assert client.get(f"/v1/challenges/{challenge_id}").status_code == 404
        game = client.get(f"/v1/game-instances/{game_id}", headers=user1_headers).json()
        assert game["metadata"]["challengeId"] == challenge_id
        assert {p["id"] for p in game["players"]} == {"user1", "user2"}

    def test_decline_removes_challenge(self, client, challenge_id, user2_headers):
        """Declining deletes the challenge without a game."""
        result = client.post(
            f"/v1/challenges/{challenge_id}/respond", json={"accept": False}, headers=user2_headers
        ).json()
        assert result == {"success": True, "gameId": None}
        assert client.get(f"/v1/challenges/{challenge_id}").status_code == 404

    def test_decline_open_challenge(self, client, user1_headers, user2_headers):
        """An open challenge cannot be declined away by another player."""
        created = client.post("/v1/challenges", json={"metaGame": "go"}, headers=user1_headers)
        challenge_id = created.json()["challengeId"]

        response = client.post(
            f"/v1/challenges/{challenge_id}/respond", json={"accept": False}, headers=user2_headers
        )
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"
        assert client.get(f"/v1/challenges/{challenge_id}").status_code == 200

    def test_unknown_challengee(self, client):
        """Challenging an unknown player is a validation error."""
        response = client.post("/v1/challenges", json={"metaGame": "go", "challengees": ["nobody"]})
        assert response.status_code == 400
        assert response.json()["error"]["details"] == {"challengee": "nobody"}

    def test_list_mine(self, client, challenge_id, user2_headers):
        """Challenges can be filtered to those involving the caller."""
        body = client.get("/v1/challenges", params={"mine": True}, headers=user2_headers).json()
        assert body["total"] == 1
        assert body["challenges"][0]["id"] == challenge_id

    def test_standing_challenges(self, client, user2_headers):
        """Standing challenges are replaced as a whole and listed publicly."""
        payload = {"standing": [{"id": "s1", "metaGame": "go", "limit": 2}]}
        assert client.put("/v1/standing-challenges", json=payload, headers=user2_headers).status_code == 200
        listed = client.get("/v1/standing-challenges", params={"metaGame": "go"}).json()
        assert [c["id"] for c in listed["challenges"]] == ["s1"]

    def test_own_standing_includes_suspended(self, client, user2_headers):
        """The caller's own list shows suspended entries the public list hides."""
        payload = {"standing": [{"id": "s2", "metaGame": "chess", "suspended": True}]}
        client.put("/v1/standing-challenges", json=payload, headers=user2_headers)

        assert client.get("/v1/standing-challenges").json()["challenges"] == []
        own = client.get("/v1/standing-challenges", params={"mine": True}, headers=user2_headers).json()
        assert [c["id"] for c in own["challenges"]] == ["s2"]


class TestTournaments:

    def test_list_active(self, client):
        """The seed tournament is active."""
        body = client.get("/v1/tournaments").json()
        assert body["total"] == 1
        assert body["tournaments"][0]["status"] == "active"

    def test_create_join_and_start(self, client, user1_headers, user2_headers):
        """A new tournament can be joined once per player and started."""
        created = client.post("/v1/tournaments", json={"name": "Cup", "metaGame": "chess"})
        assert created.status_code == 201
        tournament_id = created.json()["tournamentId"]
        assert created.json()["tournament"]["status"] == "waiting"

        joined = client.post(f"/v1/tournaments/{tournament_id}/join", headers=user2_headers)
        assert joined.json() == {"success": True, "division": 1}
        again = client.post(f"/v1/tournaments/{tournament_id}/join", headers=user2_headers)
        assert again.status_code == 400
        assert again.json()["error"]["code"] == "ALREADY_JOINED"

        client.post(f"/v1/tournaments/{tournament_id}/join", headers=user1_headers)
        started = client.post(f"/v1/tournaments/{tournament_id}/start").json()
        assert started["status"] == "active"
        games = client.get(f"/v1/tournaments/{tournament_id}/games", params={"round": 1}).json()
        assert len(games["games"]) == 1

    def test_report_result_and_standings(self, client):
        """Reported results feed the standings."""
        response = client.put(
            "/v1/tournaments/mock-tournament-1/results",
            json={"gameId": "game2", "winner": ["user3"]},
        )
        assert response.status_code == 200
        standings = client.get("/v1/tournaments/mock-tournament-1/standings").json()["standings"]
        winners = {row["playerId"] for row in standings if row["wins"] == 1}
        assert winners == {"user1", "user3"}

    def test_division_keys_must_be_numbers(self, client):
        """Division keys that are not numbers are rejected at creation."""
        response = client.post(
            "/v1/tournaments",
            json={"name": "Open", "metaGame": "chess", "divisions": {"open": {"minRating": 0}}},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"]["code"] == "VALIDATION_ERROR"
        assert any(e["loc"][:3] == ["body", "divisions", "open"] for e in body["error"]["details"]["errors"])

    def test_numbered_divisions_place_by_rating(self, client, user1_headers, user2_headers):
        """Joining places each player in the highest division their rating reaches."""
        created = client.post(
            "/v1/tournaments",
            json={"name": "Open", "metaGame": "chess", "divisions": {"1": {"minRating": 1600}, "2": {}}},
        )
        assert created.status_code == 201
        tournament_id = created.json()["tournamentId"]

        alice = client.post(f"/v1/tournaments/{tournament_id}/join", headers=user1_headers)
        bob = client.post(f"/v1/tournaments/{tournament_id}/join", headers=user2_headers)
        assert alice.json() == {"success": True, "division": 1}
        assert bob.json() == {"success": True, "division": 2}

    def test_end_leaves_unplayed_games_unscored(self, client):
        """Games still running when the tournament ends count as neither draws nor losses."""
        assert client.post("/v1/tournaments/mock-tournament-1/end").status_code == 200

        standings = client.get("/v1/tournaments/mock-tournament-1/standings").json()["standings"]
        rows = {row["playerId"]: row for row in standings}
        for player_id in ("user3", "user4"):
            assert (rows[player_id]["wins"], rows[player_id]["losses"], rows[player_id]["draws"]) == (0, 0, 0)
            assert rows[player_id]["points"] == 0
        assert rows["user1"]["points"] == 1.0
        assert rows["user2"]["losses"] == 1

        games = client.get("/v1/tournaments/mock-tournament-1/games").json()["games"]
        unplayed = next(g for g in games if g["gameId"] == "game2")
        assert unplayed["winner"] == []
        assert unplayed["draw"] is False

    def test_reported_draw(self, client):
        """A result with no winner is a draw worth half a point each."""
        client.put("/v1/tournaments/mock-tournament-1/results", json={"gameId": "game2", "winner": []})
        standings = client.get("/v1/tournaments/mock-tournament-1/standings").json()["standings"]
        rows = {row["playerId"]: row for row in standings}
        assert rows["user3"]["draws"] == 1
        assert rows["user4"]["points"] == 0.5

    def test_unknown_tournament(self, client):
        """Unknown tournaments are 404."""
        assert client.get("/v1/tournaments/nope").status_code == 404


class TestEvents:

    @pytest.fixture
    def event_id(self, client, user1_headers):
        created = client.post(
            "/v1/events",
            json={"name": "Spring Open", "dateStart": FAR_FUTURE_MS},
            headers=user1_headers,
        )
        assert created.status_code == 201
        event_id = created.json()["id"]
        assert client.post(f"/v1/events/{event_id}/publish", headers=user1_headers).status_code == 200
        return event_id

    def test_register_twice_then_withdraw(self, client, event_id, user2_headers):
        """Second registration fails; after withdrawing it succeeds again."""
        url = f"/v1/events/{event_id}/register"
        assert client.post(url, headers=user2_headers).status_code == 200

        second = client.post(url, headers=user2_headers)
        assert second.status_code == 400
        assert second.json()["error"]["code"] == "ALREADY_REGISTERED"

        assert client.post(f"/v1/events/{event_id}/withdraw", headers=user2_headers).status_code == 200
        assert client.post(url, headers=user2_headers).status_code == 200
        players = client.get(f"/v1/events/{event_id}/players").json()["players"]
        assert [p["playerId"] for p in players] == ["user2"]

    def test_draft_is_hidden(self, client, user1_headers, user2_headers):
        """Unpublished events are visible to the organizer only."""
        draft = client.post(
            "/v1/events", json={"name": "Draft", "dateStart": FAR_FUTURE_MS}, headers=user1_headers
        ).json()
        assert client.get(f"/v1/events/{draft['id']}", headers=user1_headers).status_code == 200
        assert client.get(f"/v1/events/{draft['id']}", headers=user2_headers).status_code == 404

    def test_listed_as_upcoming(self, client, event_id):
        """Published future events are listed by default."""
        body = client.get("/v1/events").json()
        assert [e["id"] for e in body["events"]] == [event_id]
        assert body["events"][0]["status"] == "upcoming"

    def test_pairings_create_games(self, client, event_id, user1_headers):
        """Posting pairings creates one game instance per pairing."""
        response = client.post(
            f"/v1/events/{event_id}/games",
            json={"round": 1, "pairings": [{"player1": "user1", "player2": "user2", "metaGame": "chess"}]},
            headers=user1_headers,
        )
        assert response.status_code == 201
        game_id = response.json()["games"][0]["gameId"]
        game = client.get(f"/v1/game-instances/{game_id}", headers=user1_headers).json()
        assert game["event"] == event_id

    def test_pairings_by_non_organizer(self, client, event_id, user2_headers, services):
        """Only the organizer may post pairings; no games are created otherwise."""
        response = client.post(
            f"/v1/events/{event_id}/games",
            json={"round": 1, "pairings": [{"player1": "user1", "player2": "user2", "metaGame": "chess"}]},
            headers=user2_headers,
        )
        assert response.status_code == 403
        assert asyncio.run(services.game.list_game_instances()) == []

    def test_close_requires_identity(self, client, event_id):
        """Closing needs an authenticated organizer."""
        assert client.post(f"/v1/events/{event_id}/close").status_code == 401


class TestExplorations:

    def test_share_flow(self, client, user1_headers):
        """A private exploration is reachable through its share link."""
        saved = client.post(
            "/v1/explorations",
            json={"metaGame": "go", "state": {"moves": ["D4"]}, "title": "Opening"},
            headers=user1_headers,
        ).json()
        shared = client.post(f"/v1/explorations/{saved['id']}/share", headers=user1_headers).json()
        assert shared["url"] == f"http://testserver/v1/shared/{shared['shareId']}"

        public = client.get(f"/v1/shared/{shared['shareId']}")
        assert public.status_code == 200
        assert public.json()["state"] == {"moves": ["D4"]}

    @pytest.mark.parametrize("suffix", ["!!", "=="])
    def test_altered_share_id(self, client, user1_headers, suffix):
        """Only the exact share id opens a shared exploration."""
        saved = client.post(
            "/v1/explorations", json={"metaGame": "go", "state": {}}, headers=user1_headers
        ).json()
        share_id = client.post(f"/v1/explorations/{saved['id']}/share", headers=user1_headers).json()["shareId"]

        response = client.get(f"/v1/shared/{share_id}{suffix}")
        assert response.status_code == 404

    def test_private_exploration_forbidden(self, client, user1_headers, user2_headers):
        """Other users cannot read a private exploration."""
        saved = client.post(
            "/v1/explorations", json={"metaGame": "go", "state": {}}, headers=user1_headers
        ).json()
        response = client.get(f"/v1/explorations/{saved['id']}", headers=user2_headers)
        assert response.status_code == 403

    def test_playground(self, client, user2_headers):
        """Playground positions are stored per game and cleared together."""
        client.put("/v1/playground/chess", json={"state": {"fen": "x"}}, headers=user2_headers)
        body = client.get("/v1/playground", headers=user2_headers).json()
        assert body["games"] == {"chess": {"fen": "x"}}
        client.delete("/v1/playground", headers=user2_headers)
        assert client.get("/v1/playground", headers=user2_headers).json()["games"] == {}

    def test_notes_are_private(self, client, user1_headers, user2_headers):
        """Notes belong to the user who wrote them."""
        client.put("/v1/games/g1/notes", json={"note": "watch the h-file"}, headers=user1_headers)
        assert client.get("/v1/games/g1/notes", headers=user1_headers).json()["note"]["note"] == "watch the h-file"
        assert client.get("/v1/games/g1/notes", headers=user2_headers).json()["note"] is None

    def test_comments(self, client, user2_headers):
        """Comments are public and length-limited."""
        assert client.post("/v1/games/g1/comments", json={"comment": "gg"}, headers=user2_headers).status_code == 201
        assert client.post("/v1/games/g1/comments", json={"comment": ""}).status_code == 400
        comments = client.get("/v1/games/g1/comments").json()["comments"]
        assert [(c["user"], c["comment"]) for c in comments] == [("user2", "gg")]


class TestPushAndWebhooks:

    def test_notification_settings(self, client, user2_headers):
        """Updates merge into the stored preferences."""
        body = client.put("/v1/push/settings", json={"yourturn": False}, headers=user2_headers).json()
        assert body["yourturn"] is False
        assert body["gameStart"] is True

    def test_test_notification_needs_subscription(self, client, user2_headers):
        """Nothing is sent until a subscription exists."""
        assert client.post("/v1/push/test", headers=user2_headers).json()["sent"] == 0
        subscription = {"endpoint": "https://push.example/1", "keys": {"p256dh": "k", "auth": "a"}}
        client.post("/v1/push/subscribe", json=subscription, headers=user2_headers)
        assert client.post("/v1/push/test", headers=user2_headers).json()["sent"] == 1

    def test_webhooks(self, client, user1_headers):
        """Webhooks need an http(s) URL and are listed per owner."""
        bad = client.post(
            "/v1/webhooks", json={"url": "ftp://x", "events": ["move.made"]}, headers=user1_headers
        )
        assert bad.status_code == 400

        created = client.post(
            "/v1/webhooks",
            json={"url": "https://hooks.example/in", "events": ["move.made", "game.over"]},
            headers=user1_headers,
        )
        assert created.status_code == 201
        assert "secret" not in created.json()
        listed = client.get("/v1/webhooks", headers=user1_headers).json()["webhooks"]
        assert [w["id"] for w in listed] == [created.json()["id"]]


class TestFederationAndBot:

    def test_list_servers(self, client):
        """Known servers are listed with their status."""
        servers = client.get("/v1/federation/servers").json()["servers"]
        assert {s["id"] for s in servers} == {"abstractplay", "boardgamearena", "playdiplomacy"}

    def test_get_server(self, client):
        """A single server is looked up by id."""
        assert client.get("/v1/federation/servers/playdiplomacy").json()["status"] == "maintenance"
        assert client.get("/v1/federation/servers/nowhere").status_code == 404

    def test_federated_game(self, client):
        """A remote server ticket becomes a local game with a join URL."""
        response = client.post(
            "/v1/federation/games",
            json={"gameId": "chess", "remotePlayer": "bob@bga", "remoteServer": "boardgamearena"},
        )
        assert response.status_code == 201
        assert response.json()["joinUrl"].startswith("https://boardgamearena.com/games/chess/")

    def test_federated_game_refused(self, client):
        """Servers in maintenance refuse games."""
        response = client.post(
            "/v1/federation/games",
            json={"gameId": "diplomacy", "remotePlayer": "x@y", "remoteServer": "playdiplomacy"},
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "FEDERATION_ERROR"

    def test_bot_move(self, client):
        """Supported games get a suggestion; others get 501."""
        move = client.post("/v1/bot/move", json={"game": "chess", "state": {"fen": "start"}, "level": 10})
        assert move.status_code == 200
        assert move.json()["confidence"] == 1.0

        unsupported = client.post("/v1/bot/move", json={"game": "tic-tac-toe"})
        assert unsupported.status_code == 501
        assert unsupported.json()["error"]["code"] == "GAME_NOT_SUPPORTED"

    def test_bot_game(self, client):
        """Bot games seat the human as requested and are counted."""
        response = client.post("/v1/bot/games", json={"gameId": "go", "level": 3, "playerColor": "second"})
        assert response.status_code == 201
        assert response.json()["playerColor"] == "second"

        stats = client.get("/v1/bot/stats").json()
        assert stats["totalGames"] == 1
        assert stats["levelDistribution"] == {"3": 1}

    def test_bot_info(self, client):
        """Info lists the supported games."""
        games = {g["game"] for g in client.get("/v1/bot/info").json()["supportedGames"]}
        assert games == {"chess", "checkers", "go", "hex"}
