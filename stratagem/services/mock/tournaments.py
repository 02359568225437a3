"""
Mock tournament service - Registration, rounds, results and standings.

Pairing is deliberately naive: within each division, players are paired in
join order (1v2, 3v4, ...) and an odd player out sits the round out.

Division assignment happens inside join_tournament, in the same call that
records the player, so the two can never disagree.
"""

from __future__ import annotations
from typing import Any, Optional
import logging

from ..errors import ConflictError, InvalidOperationError, NotFoundError
from ..interfaces import Standing, TournamentService
from ..models import (
    Division,
    PlayerRef,
    Tournament,
    TournamentGame,
    TournamentGameState,
    TournamentPlayer,
    new_id,
    now_ms,
)
from ..store import InMemoryStore, Store

logger = logging.getLogger(__name__)


TOURNAMENT_OPTIONS = {
    "variants",
    "clock_start",
    "clock_inc",
    "clock_max",
    "clock_hard",
    "no_explore",
    "divisions",
}

TOURNAMENT_STATUSES = ("waiting", "active", "completed", "all")


def seed_tournament() -> Tournament:
    hour_ms = 3_600_000
    tournament = Tournament(
        id="mock-tournament-1",
        name="Weekly Chess Championship",
        meta_game="chess",
        variants=["standard"],
        date_created=now_ms() - 24 * hour_ms,
        date_started=now_ms() - 12 * hour_ms,
        started=True,
        next_round=2,
        divisions={"1": Division(started=True)},
        players=[
            TournamentPlayer(player_id="user1", player_name="Alice", rating=1500, score=1.0),
            TournamentPlayer(player_id="user2", player_name="Bob", rating=1450),
            TournamentPlayer(player_id="user3", player_name="Charlie", rating=1600),
            TournamentPlayer(player_id="user4", player_name="Diana", rating=1550),
        ],
    )
    tournament.games = [
        TournamentGame(
            game_id="game1",
            round=1,
            division=1,
            player1="user1",
            player2="user2",
            state=TournamentGameState.COMPLETED,
            winner=["user1"],
        ),
        TournamentGame(
            game_id="game2",
            round=1,
            division=1,
            player1="user3",
            player2="user4",
            state=TournamentGameState.STARTED,
        ),
    ]
    return tournament


class MockTournamentService(TournamentService):
    """In-memory tournaments. Each tournament record owns its players and games."""

    def __init__(self, tournaments: Optional[Store[Tournament]] = None):
        if tournaments is None:
            seed = seed_tournament()
            tournaments = InMemoryStore("tournaments", {seed.id: seed})
        self._tournaments: Store[Tournament] = tournaments

    async def create_tournament(self, name: str, meta_game: str, **options: Any) -> Tournament:
        unknown = set(options) - TOURNAMENT_OPTIONS
        if unknown:
            raise TypeError(f"Unknown tournament options: {', '.join(sorted(unknown))}")
        if not options.get("divisions"):
            options.pop("divisions", None)
        elif not all(str(key).isdecimal() for key in options["divisions"]):
            raise InvalidOperationError("Division keys must be division numbers", code="VALIDATION_ERROR")

        tournament = Tournament(id=new_id(), name=name, meta_game=meta_game, **options)
        await self._tournaments.put(tournament.id, tournament)
        logger.info("Created tournament %s (%s)", tournament.id, meta_game)
        return tournament

    async def get_tournament(self, tournament_id: str) -> Tournament:
        tournament = await self._tournaments.get(tournament_id)
        if tournament is None:
            raise NotFoundError("Tournament not found", code="NOT_FOUND")
        return tournament

    async def list_tournaments(
        self, status: str = "active", meta_game: Optional[str] = None
    ) -> list[Tournament]:
        if status not in TOURNAMENT_STATUSES:
            raise InvalidOperationError(f"Unknown tournament status {status!r}", code="VALIDATION_ERROR")

        def matches(tournament: Tournament) -> bool:
            if meta_game is not None and tournament.meta_game != meta_game:
                return False
            return status == "all" or tournament.status == status

        return await self._tournaments.list(matches)

    async def join_tournament(
        self, tournament_id: str, player: PlayerRef, rating: int, once: bool = False
    ) -> TournamentPlayer:
        tournament = await self.get_tournament(tournament_id)
        if tournament.started:
            raise InvalidOperationError("Tournament already started", code="TOURNAMENT_STARTED")
        if tournament.player(player.id) is not None:
            raise ConflictError("Already joined this tournament", code="ALREADY_JOINED")

        entry = TournamentPlayer(
            player_id=player.id,
            player_name=player.name,
            division=self._assign_division(tournament, rating),
            rating=rating,
            once=once,
        )
        tournament.players.append(entry)
        await self._tournaments.put(tournament.id, tournament)
        return entry

    async def withdraw_from_tournament(self, tournament_id: str, user_id: str) -> None:
        tournament = await self.get_tournament(tournament_id)
        if tournament.started:
            raise InvalidOperationError("Cannot withdraw from started tournament", code="TOURNAMENT_STARTED")
        if tournament.player(user_id) is None:
            raise InvalidOperationError("Not registered in this tournament", code="NOT_JOINED")
        tournament.players = [p for p in tournament.players if p.player_id != user_id]
        await self._tournaments.put(tournament.id, tournament)

    async def start_tournament(self, tournament_id: str) -> Tournament:
        tournament = await self.get_tournament(tournament_id)
        if tournament.started:
            raise InvalidOperationError("Tournament already started", code="TOURNAMENT_STARTED")
        if len(tournament.players) < 2:
            raise InvalidOperationError("At least two players are needed to start", code="NOT_ENOUGH_PLAYERS")

        tournament.started = True
        tournament.date_started = now_ms()
        for division in tournament.divisions.values():
            division.started = True
        await self._tournaments.put(tournament.id, tournament)
        await self.create_tournament_round(tournament.id)
        return tournament

    async def create_tournament_round(self, tournament_id: str) -> list[TournamentGame]:
        tournament = await self.get_tournament(tournament_id)
        if not tournament.started:
            raise InvalidOperationError("Tournament has not started", code="TOURNAMENT_NOT_STARTED")
        if tournament.date_ended is not None:
            raise InvalidOperationError("Tournament has ended", code="TOURNAMENT_ENDED")

        round_number = tournament.next_round
        created: list[TournamentGame] = []
        for division in sorted({p.division for p in tournament.players}):
            seats = [p for p in tournament.players if p.division == division]
            for first, second in zip(seats[0::2], seats[1::2]):
                created.append(TournamentGame(
                    game_id=new_id(),
                    round=round_number,
                    division=division,
                    player1=first.player_id,
                    player2=second.player_id,
                ))

        tournament.games.extend(created)
        tournament.next_round = round_number + 1
        await self._tournaments.put(tournament.id, tournament)
        logger.info("Tournament %s round %d: %d games", tournament.id, round_number, len(created))
        return created

    async def get_tournament_games(
        self, tournament_id: str, round: Optional[int] = None, player_id: Optional[str] = None
    ) -> list[TournamentGame]:
        tournament = await self.get_tournament(tournament_id)
        games = tournament.games
        if round is not None:
            games = [g for g in games if g.round == round]
        if player_id is not None:
            games = [g for g in games if player_id in (g.player1, g.player2)]
        return list(games)

    async def report_result(self, tournament_id: str, game_id: str, winner: list[str]) -> TournamentGame:
        tournament = await self.get_tournament(tournament_id)
        game = next((g for g in tournament.games if g.game_id == game_id), None)
        if game is None:
            raise NotFoundError("Tournament game not found", code="NOT_FOUND")
        if game.state == TournamentGameState.COMPLETED:
            raise ConflictError("Result already reported", code="RESULT_ALREADY_REPORTED")
        seated = {game.player1, game.player2}
        if not set(winner) <= seated:
            raise InvalidOperationError("Winner must be one of the game's players", code="VALIDATION_ERROR")

        game.state = TournamentGameState.COMPLETED
        game.winner = list(winner)
        game.draw = not winner
        for player_id in seated:
            player = tournament.player(player_id)
            if player is None:
                continue
            if game.draw:
                player.score += 0.5
            elif player_id in winner:
                player.score += 1.0
        await self._tournaments.put(tournament.id, tournament)
        return game

    async def get_tournament_standings(
        self, tournament_id: str, division: Optional[int] = None
    ) -> list[Standing]:
        tournament = await self.get_tournament(tournament_id)
        players = tournament.players
        if division is not None:
            players = [p for p in players if p.division == division]

        completed = [g for g in tournament.games if g.state == TournamentGameState.COMPLETED]
        rows: list[Standing] = []
        for player in players:
            played = [g for g in completed if player.player_id in (g.player1, g.player2)]
            wins = sum(1 for g in played if player.player_id in g.winner)
            draws = sum(1 for g in played if g.draw)
            losses = sum(1 for g in played if g.winner and player.player_id not in g.winner)
            rows.append(Standing(
                rank=0,
                player_id=player.player_id,
                player_name=player.player_name,
                division=player.division,
                wins=wins,
                losses=losses,
                draws=draws,
                points=wins * 1.0 + draws * 0.5,
            ))

        rows.sort(key=lambda s: (-s.points, -s.wins, s.player_name))
        for rank, row in enumerate(rows, start=1):
            row.rank = rank
        return rows

    async def end_tournament(self, tournament_id: str) -> Tournament:
        tournament = await self.get_tournament(tournament_id)
        if tournament.date_ended is not None:
            raise InvalidOperationError("Tournament has ended", code="TOURNAMENT_ENDED")
        tournament.date_ended = now_ms()
        # Unfinished games close with no result: neither a win nor a draw.
        for game in tournament.games:
            if game.state != TournamentGameState.COMPLETED:
                game.state = TournamentGameState.COMPLETED
        await self._tournaments.put(tournament.id, tournament)
        return tournament

    async def archive_tournament(self, tournament_id: str) -> Tournament:
        tournament = await self.get_tournament(tournament_id)
        if tournament.date_ended is None:
            raise InvalidOperationError("Only ended tournaments can be archived", code="TOURNAMENT_NOT_ENDED")
        tournament.archived = True
        await self._tournaments.put(tournament.id, tournament)
        return tournament

    @staticmethod
    def _assign_division(tournament: Tournament, rating: int) -> int:
        """Highest division whose rating floor the player meets and that has room."""
        counts: dict[int, int] = {}
        for player in tournament.players:
            counts[player.division] = counts.get(player.division, 0) + 1

        eligible = []
        for key, division in tournament.divisions.items():
            number = int(key)
            if rating < division.min_rating:
                continue
            if division.max_players and counts.get(number, 0) >= division.max_players:
                continue
            eligible.append((division.min_rating, -number, number))
        if not eligible:
            raise ConflictError("No division has room for this player", code="TOURNAMENT_FULL")
        return max(eligible)[2]
