"""
Tests for the in-memory mock services.

Service methods are coroutines; each test drives one scenario with
asyncio.run so no event-loop plugin is needed.
"""

import asyncio

import pytest

from ..services.errors import (
    ConflictError,
    InvalidOperationError,
    NotFoundError,
    NotSupportedError,
    PermissionDeniedError,
)
from ..services.mock import (
    MockBotService,
    MockChallengeService,
    MockEventService,
    MockExplorationService,
    MockFederationService,
    MockGameService,
    MockTournamentService,
    MockUserService,
    MockWebhookService,
)
from ..services.mock.explorations import decode_share_id, encode_share_id
from ..services.models import Division, GameStatus, PlayerRef, WebhookEvent
from ..services.store import InMemoryStore

ALICE = PlayerRef(id="user1", name="Alice")
BOB = PlayerRef(id="user2", name="Bob")
CAROL = PlayerRef(id="user3", name="Carol")


def run(coro):
    return asyncio.run(coro)


class TestGameService:

    @pytest.fixture
    def games(self):
        return MockGameService()

    def test_catalog_filter_by_tag(self, games):
        """Tag filtering is case-insensitive."""
        territory = run(games.list_games(tag="territory"))
        assert [g.id for g in territory] == ["go"]

    def test_unknown_game(self, games):
        """Unknown catalog ids raise GAME_NOT_FOUND."""
        with pytest.raises(NotFoundError) as excinfo:
            run(games.get_game("nope"))
        assert excinfo.value.code == "GAME_NOT_FOUND"

    def test_tic_tac_toe_win(self, games):
        """Three in a row completes the game for the mover."""
        async def scenario():
            instance = await games.create_game_instance("tic-tac-toe", [ALICE, BOB])
            for player, cell in [("user1", "a1"), ("user2", "b1"), ("user1", "a2"),
                                 ("user2", "b2"), ("user1", "a3")]:
                instance = await games.make_move(instance.instance_id, player, cell)
            return instance

        instance = run(scenario())
        assert instance.state == GameStatus.COMPLETED
        assert instance.winners == [1]
        assert instance.move_count == 5

    def test_wrong_turn(self, games):
        """Only the seat to move may move."""
        async def scenario():
            instance = await games.create_game_instance("chess", [ALICE, BOB])
            await games.make_move(instance.instance_id, "user2", "e4")

        with pytest.raises(PermissionDeniedError) as excinfo:
            run(scenario())
        assert excinfo.value.code == "NOT_YOUR_TURN"

    def test_occupied_cell(self, games):
        """A tic-tac-toe cell cannot be played twice."""
        async def scenario():
            instance = await games.create_game_instance("tic-tac-toe", [ALICE, BOB])
            await games.make_move(instance.instance_id, "user1", "b2")
            await games.make_move(instance.instance_id, "user2", "b2")

        with pytest.raises(InvalidOperationError):
            run(scenario())

    def test_duplicate_seat(self, games):
        """A player cannot be seated twice."""
        with pytest.raises(InvalidOperationError):
            run(games.create_game_instance("chess", [ALICE, ALICE]))

    def test_draw_offer_and_accept(self, games):
        """An accepted draw completes the game with no winners."""
        async def scenario():
            instance = await games.create_game_instance("chess", [ALICE, BOB])
            await games.offer_draw(instance.instance_id, "user1")
            return await games.accept_draw(instance.instance_id, "user2")

        instance = run(scenario())
        assert instance.state == GameStatus.COMPLETED
        assert instance.winners == []

    def test_cannot_accept_own_draw(self, games):
        """The offering player cannot accept their own offer."""
        async def scenario():
            instance = await games.create_game_instance("chess", [ALICE, BOB])
            await games.offer_draw(instance.instance_id, "user1")
            await games.accept_draw(instance.instance_id, "user1")

        with pytest.raises(InvalidOperationError):
            run(scenario())

    def test_resign(self, games):
        """Resigning hands the win to the other seat."""
        async def scenario():
            instance = await games.create_game_instance("chess", [ALICE, BOB])
            return await games.resign(instance.instance_id, "user1")

        assert run(scenario()).winners == [2]

    def test_png_render_not_supported(self, games):
        """Only ascii and svg are rendered."""
        async def scenario():
            instance = await games.create_game_instance("chess", [ALICE, BOB])
            await games.render(instance.instance_id, "png", 800)

        with pytest.raises(NotSupportedError):
            run(scenario())


class TestUserService:

    @pytest.fixture
    def users(self):
        return MockUserService()

    def test_get_or_create(self, users):
        """Unknown users are created on first reference."""
        user = run(users.get_or_create_user("newbie", "Newbie"))
        assert user.name == "Newbie"
        assert run(users.find_user("newbie")) is user

    def test_unknown_profile_field(self, users):
        """Profile updates reject unknown fields."""
        with pytest.raises(InvalidOperationError):
            run(users.update_profile("user1", {"ratings": {}}))

    def test_toggle_star(self, users):
        """Starring twice removes the star."""
        assert run(users.toggle_star("user1", "go")) is True
        assert run(users.toggle_star("user1", "go")) is False

    def test_ratings_sorted(self, users):
        """Ratings are listed best first."""
        ratings = run(users.get_ratings("chess"))
        assert [r["userid"] for r in ratings] == ["bot", "user1", "user2"]

    def test_notification_settings_merge(self, users):
        """Unset preferences are left unchanged."""
        run(users.update_notification_settings("user1", {"yourturn": False}))
        merged = run(users.update_notification_settings("user1", {"challenges": True, "yourturn": None}))
        assert merged["yourturn"] is False
        assert merged["challenges"] is True


class TestChallengeService:

    @pytest.fixture
    def challenges(self):
        return MockChallengeService()

    def test_revoke_by_non_issuer(self, challenges):
        """Only the challenger can revoke; the challenge survives a failed attempt."""
        challenge = run(challenges.create_challenge(ALICE, [BOB], "chess", 2))
        with pytest.raises(PermissionDeniedError):
            run(challenges.revoke_challenge(challenge.id, "user2"))
        assert run(challenges.get_challenge(challenge.id)).id == challenge.id

    def test_accept_fills_challenge(self, challenges):
        """The last acceptance fills the challenge."""
        challenge = run(challenges.create_challenge(ALICE, [BOB], "chess", 2))
        accepted = run(challenges.accept_challenge(challenge.id, BOB))
        assert accepted.is_full
        assert [p.id for p in accepted.players] == ["user1", "user2"]

    def test_uninvited_cannot_accept(self, challenges):
        """A directed challenge is closed to other players."""
        challenge = run(challenges.create_challenge(ALICE, [BOB], "chess", 2))
        with pytest.raises(PermissionDeniedError):
            run(challenges.accept_challenge(challenge.id, CAROL))

    def test_double_accept(self, challenges):
        """Accepting twice is a conflict."""
        challenge = run(challenges.create_challenge(ALICE, [], "go", 3))
        run(challenges.accept_challenge(challenge.id, BOB))
        with pytest.raises(ConflictError):
            run(challenges.accept_challenge(challenge.id, BOB))

    def test_open_challenge_cannot_be_declined(self, challenges):
        """Declining an open challenge is refused and leaves it in place."""
        challenge = run(challenges.create_challenge(ALICE, [], "go", 2))
        with pytest.raises(PermissionDeniedError):
            run(challenges.decline_challenge(challenge.id, "user2"))
        assert run(challenges.get_challenge(challenge.id)).id == challenge.id

    def test_invited_player_declines(self, challenges):
        """An invited player's decline removes a directed challenge."""
        challenge = run(challenges.create_challenge(ALICE, [BOB], "chess", 2))
        run(challenges.decline_challenge(challenge.id, "user2"))
        with pytest.raises(NotFoundError):
            run(challenges.get_challenge(challenge.id))

    def test_self_challenge(self, challenges):
        """A player cannot challenge themselves."""
        with pytest.raises(InvalidOperationError):
            run(challenges.create_challenge(ALICE, [ALICE], "chess", 2))

    def test_standing_ids_unique(self, challenges):
        """Standing challenge ids must be unique per user."""
        from ..services.models import StandingChallenge
        entries = [StandingChallenge(id="s1", meta_game="go"), StandingChallenge(id="s1", meta_game="chess")]
        with pytest.raises(InvalidOperationError):
            run(challenges.update_standing_challenges("user1", entries))


class TestTournamentService:

    @pytest.fixture
    def tournaments(self):
        return MockTournamentService()

    def test_seeded_tournament_is_active(self, tournaments):
        """The seed tournament is listed as active."""
        active = run(tournaments.list_tournaments("active"))
        assert [t.id for t in active] == ["mock-tournament-1"]

    def test_division_assignment_by_rating(self, tournaments):
        """Players land in the highest division whose floor they meet."""
        async def scenario():
            tournament = await tournaments.create_tournament(
                "Open", "chess",
                divisions={"1": Division(min_rating=1600), "2": Division()},
            )
            strong = await tournaments.join_tournament(tournament.id, ALICE, 1650)
            weak = await tournaments.join_tournament(tournament.id, BOB, 1400)
            return strong, weak

        strong, weak = run(scenario())
        assert strong.division == 1
        assert weak.division == 2

    def test_full_division(self, tournaments):
        """A player with no division left to join gets TOURNAMENT_FULL."""
        async def scenario():
            tournament = await tournaments.create_tournament(
                "Small", "go", divisions={"1": Division(max_players=1)}
            )
            await tournaments.join_tournament(tournament.id, ALICE, 1500)
            await tournaments.join_tournament(tournament.id, BOB, 1500)

        with pytest.raises(ConflictError) as excinfo:
            run(scenario())
        assert excinfo.value.code == "TOURNAMENT_FULL"

    def test_start_pairs_round_one(self, tournaments):
        """Starting pairs the first round and advances the round counter."""
        async def scenario():
            tournament = await tournaments.create_tournament("Cup", "chess")
            for player in (ALICE, BOB):
                await tournaments.join_tournament(tournament.id, player, 1500)
            started = await tournaments.start_tournament(tournament.id)
            return started

        started = run(scenario())
        assert started.status == "active"
        assert started.next_round == 2
        assert len(started.games) == 1

    def test_join_after_start(self, tournaments):
        """Nobody can join a started tournament."""
        with pytest.raises(InvalidOperationError):
            run(tournaments.join_tournament("mock-tournament-1", CAROL, 1500))

    def test_report_and_standings(self, tournaments):
        """A reported win moves the winner up the standings."""
        async def scenario():
            await tournaments.report_result("mock-tournament-1", "game2", ["user4"])
            return await tournaments.get_tournament_standings("mock-tournament-1")

        standings = run(scenario())
        top = [row.player_id for row in standings[:2]]
        assert set(top) == {"user1", "user4"}
        assert standings[0].rank == 1

    def test_result_reported_twice(self, tournaments):
        """A completed game cannot be reported again."""
        with pytest.raises(ConflictError):
            run(tournaments.report_result("mock-tournament-1", "game1", ["user2"]))

    def test_division_keys_must_be_numbers(self, tournaments):
        """Division keys name division numbers."""
        with pytest.raises(InvalidOperationError):
            run(tournaments.create_tournament("Open", "chess", divisions={"open": Division()}))

    def test_end_does_not_invent_draws(self, tournaments):
        """Ending a tournament closes unfinished games without scoring them."""
        async def scenario():
            await tournaments.end_tournament("mock-tournament-1")
            return await tournaments.get_tournament_standings("mock-tournament-1")

        rows = {row.player_id: row for row in run(scenario())}
        assert (rows["user3"].wins, rows["user3"].losses, rows["user3"].draws) == (0, 0, 0)
        assert rows["user4"].points == 0
        assert rows["user1"].wins == 1
        assert rows["user2"].losses == 1

    def test_reported_draw_is_flagged(self, tournaments):
        """An empty winner list records a draw and half a point each."""
        async def scenario():
            game = await tournaments.report_result("mock-tournament-1", "game2", [])
            tournament = await tournaments.get_tournament("mock-tournament-1")
            return game, tournament

        game, tournament = run(scenario())
        assert game.draw is True
        assert tournament.player("user3").score == 0.5
        assert tournament.player("user4").score == 0.5

    def test_archive_requires_end(self, tournaments):
        """Only ended tournaments can be archived."""
        with pytest.raises(InvalidOperationError):
            run(tournaments.archive_tournament("mock-tournament-1"))
        run(tournaments.end_tournament("mock-tournament-1"))
        assert run(tournaments.archive_tournament("mock-tournament-1")).archived


class TestEventService:

    @pytest.fixture
    def events(self):
        return MockEventService(clock=lambda: 1_000)

    @pytest.fixture
    def event(self, events):
        async def scenario():
            event = await events.create_event("user1", "Spring Open", "", 5_000)
            return await events.publish_event(event.id, "user1")
        return run(scenario())

    def test_draft_hidden_from_others(self, events):
        """A draft is visible only to its organizer."""
        draft = run(events.create_event("user1", "Draft", "", 5_000))
        assert run(events.get_event(draft.id, "user1")).id == draft.id
        with pytest.raises(NotFoundError):
            run(events.get_event(draft.id, "user2"))

    def test_double_registration(self, events, event):
        """Registering twice is rejected; after withdrawing it succeeds again."""
        run(events.register_player(event.id, "user2"))
        with pytest.raises(ConflictError):
            run(events.register_player(event.id, "user2"))
        run(events.withdraw_player(event.id, "user2"))
        assert run(events.register_player(event.id, "user2")).player_id == "user2"

    def test_status_from_clock(self, events, event):
        """An event in the future is upcoming."""
        assert event.status(1_000) == "upcoming"
        assert [e.id for e in run(events.list_events("upcoming"))] == [event.id]
        assert run(events.list_events("ongoing")) == []

    def test_only_organizer_closes(self, events, event):
        """Closing is reserved to the organizer and happens once."""
        with pytest.raises(PermissionDeniedError):
            run(events.close_event(event.id, "user2"))
        closed = run(events.close_event(event.id, "user1", ["user2"]))
        assert closed.date_end == 1_000
        assert closed.winner == ["user2"]
        with pytest.raises(InvalidOperationError):
            run(events.close_event(event.id, "user1"))

    def test_closed_event_refuses_registration(self, events, event):
        """No registrations after closing."""
        run(events.close_event(event.id, "user1"))
        with pytest.raises(InvalidOperationError):
            run(events.register_player(event.id, "user3"))


class TestExplorationService:

    @pytest.fixture
    def explorations(self):
        return MockExplorationService()

    def test_private_exploration(self, explorations):
        """Private explorations are readable by their owner only."""
        saved = run(explorations.save_exploration(ALICE, "chess", {"fen": "start"}))
        assert run(explorations.get_exploration(saved.id, "user1")).id == saved.id
        with pytest.raises(PermissionDeniedError):
            run(explorations.get_exploration(saved.id, "user2"))

    def test_overwrite_by_other_user(self, explorations):
        """Only the owner can overwrite an exploration."""
        saved = run(explorations.save_exploration(ALICE, "chess", {}))
        with pytest.raises(PermissionDeniedError):
            run(explorations.save_exploration(BOB, "chess", {}, exploration_id=saved.id))

    def test_share_id(self, explorations):
        """A share id opens a private exploration."""
        saved = run(explorations.save_exploration(ALICE, "go", {"moves": []}))
        share_id = run(explorations.share_exploration(saved.id, "user1"))
        assert share_id == encode_share_id(saved.id)
        assert "=" not in share_id
        assert run(explorations.get_shared_exploration(share_id)).id == saved.id

    def test_unshared_id(self, explorations):
        """A share id that was never issued is not found."""
        saved = run(explorations.save_exploration(ALICE, "go", {}))
        with pytest.raises(NotFoundError):
            run(explorations.get_shared_exploration(encode_share_id(saved.id)))

    def test_decode_garbage(self):
        """Malformed share ids decode to None."""
        assert decode_share_id("%%%") is None

    @pytest.mark.parametrize("share_id", ["%%%", "", "YQ=", "YR"])
    def test_decode_rejects_non_canonical(self, share_id):
        """Only ids encode_share_id could have produced decode."""
        assert decode_share_id(share_id) is None

    def test_altered_share_id(self, explorations):
        """Extra characters on a share id do not open the exploration."""
        saved = run(explorations.save_exploration(ALICE, "go", {}))
        share_id = run(explorations.share_exploration(saved.id, "user1"))
        with pytest.raises(NotFoundError):
            run(explorations.get_shared_exploration(share_id + "!!"))

    def test_shares_kept_in_store(self):
        """Share grants go through the injected store and are dropped with the exploration."""
        shares = InMemoryStore("shares")
        explorations = MockExplorationService(shares=shares)
        saved = run(explorations.save_exploration(ALICE, "go", {}))
        run(explorations.share_exploration(saved.id, "user1"))
        assert run(shares.exists(saved.id))

        run(explorations.delete_exploration(saved.id, "user1"))
        assert len(shares) == 0

    def test_comments_accumulate(self, explorations):
        """Comments are kept in order per game."""
        run(explorations.add_comment("g1", "user1", "first"))
        run(explorations.add_comment("g1", "user2", "second"))
        assert [c.comment for c in run(explorations.list_comments("g1"))] == ["first", "second"]


class TestBotService:

    @pytest.fixture
    def bot(self):
        return MockBotService()

    def test_deterministic(self, bot):
        """The same request yields the same move."""
        first = run(bot.suggest_move("chess", {"fen": "x"}, 3))
        second = run(bot.suggest_move("chess", {"fen": "x"}, 3))
        assert first == second
        assert first.confidence == pytest.approx(0.65)
        assert len(first.alternatives) == 3

    def test_unsupported_game(self, bot):
        """Unsupported games raise GAME_NOT_SUPPORTED."""
        with pytest.raises(NotSupportedError) as excinfo:
            run(bot.suggest_move("tic-tac-toe", None))
        assert excinfo.value.code == "GAME_NOT_SUPPORTED"

    def test_stats(self, bot):
        """Stats count suggestions, analyses and games by level."""
        run(bot.suggest_move("go", None))
        run(bot.analyze("go", None, depth=2))
        run(bot.record_game("go", 4))
        stats = run(bot.stats())
        assert stats["moves_suggested"] == 1
        assert stats["analyses"] == 1
        assert stats["level_distribution"] == {"4": 1}
        assert stats["game_distribution"] == {"go": 1}


class TestFederationAndWebhooks:

    def test_request_game_on_online_server(self):
        """An online server hosting the game issues a ticket."""
        ticket = run(MockFederationService().request_game("chess", "user1", "bob@bga", "boardgamearena"))
        assert ticket.join_url.startswith("https://boardgamearena.com/games/chess/")

    def test_server_in_maintenance(self):
        """Servers under maintenance refuse games."""
        with pytest.raises(InvalidOperationError):
            run(MockFederationService().request_game("diplomacy", "user1", "x@y", "playdiplomacy"))

    def test_webhook_owner_only_delete(self):
        """Only the owner can delete a webhook."""
        webhooks = MockWebhookService()
        hook = run(webhooks.register_webhook("user1", "https://h.example", [WebhookEvent.MOVE_MADE]))
        with pytest.raises(PermissionDeniedError):
            run(webhooks.delete_webhook(hook.id, "user2"))
        run(webhooks.delete_webhook(hook.id, "user1"))
        assert run(webhooks.list_webhooks("user1")) == []
