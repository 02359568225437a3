"""
Mock game service - In-memory catalog and game instances.

Only tic-tac-toe carries real board bookkeeping (occupied cells, three in a
row, full board). Every other game accepts any non-empty notation: there
is no rules engine behind this service.
"""

from __future__ import annotations
from typing import Any, Optional
import logging

from ..errors import InvalidOperationError, NotFoundError, NotSupportedError, PermissionDeniedError
from ..interfaces import GameService
from ..models import (
    GameInfo,
    GameInstance,
    GameStatus,
    MoveRecord,
    PlayerRef,
    TimeControl,
    new_id,
    utc_now_iso,
)
from ..store import InMemoryStore, Store

logger = logging.getLogger(__name__)


TIC_TAC_TOE_CELLS = ["a1", "a2", "a3", "b1", "b2", "b3", "c1", "c2", "c3"]

TIC_TAC_TOE_LINES = [
    ("a1", "a2", "a3"), ("b1", "b2", "b3"), ("c1", "c2", "c3"),
    ("a1", "b1", "c1"), ("a2", "b2", "c2"), ("a3", "b3", "c3"),
    ("a1", "b2", "c3"), ("a3", "b2", "c1"),
]

SEAT_MARKS = {1: "X", 2: "O"}


def default_catalog() -> list[GameInfo]:
    return [
        GameInfo(
            id="tic-tac-toe",
            name="Tic-Tac-Toe",
            description="The classic game of Xs and Os",
            rules="https://en.wikipedia.org/wiki/Tic-tac-toe",
            protocol="asg/1",
            capabilities={"ai": False, "variants": False, "analysis": False, "timeControl": False},
            tags=["Classic", "Quick", "Abstract"],
            urls=["https://en.wikipedia.org/wiki/Tic-tac-toe"],
            people=[{"type": "designer", "name": "Traditional"}],
            categories=["classic", "perfect-information"],
            mechanics=["placement", "pattern-building"],
        ),
        GameInfo(
            id="chess",
            name="Chess",
            variants=["standard", "chess960"],
            description="Classic strategy game",
            rules="https://en.wikipedia.org/wiki/Rules_of_chess",
            protocol="asg/1",
            capabilities={"ai": True, "variants": True, "analysis": True, "timeControl": True},
            tags=["Classic", "Strategic", "Abstract"],
            urls=["https://en.wikipedia.org/wiki/Chess"],
            people=[{"type": "designer", "name": "Traditional"}],
            flags=["check", "custom-buttons"],
            categories=["classic", "perfect-information"],
            mechanics=["capture", "different-pieces"],
        ),
        GameInfo(
            id="go",
            name="Go",
            variants=["9x9", "13x13", "19x19"],
            description="Ancient territorial game",
            rules="https://en.wikipedia.org/wiki/Rules_of_Go",
            protocol="asg/1",
            capabilities={"ai": True, "variants": True, "analysis": True, "timeControl": True},
            tags=["Classic", "Strategic", "Abstract", "Territory"],
            urls=["https://en.wikipedia.org/wiki/Go_(game)"],
            people=[{"type": "designer", "name": "Traditional"}],
            flags=["scores", "custom-buttons"],
            categories=["classic", "perfect-information"],
            mechanics=["surround", "pattern-building"],
        ),
    ]


class MockGameService(GameService):
    """
    In-memory game catalog and instance store.

    Usage:
        service = MockGameService()
        instance = await service.create_game_instance("chess", players)
        instance = await service.make_move(instance.instance_id, "user1", "e4")
    """

    def __init__(
        self,
        catalog: Optional[list[GameInfo]] = None,
        instances: Optional[Store[GameInstance]] = None,
    ):
        self._catalog: dict[str, GameInfo] = {
            game.id: game for game in (catalog if catalog is not None else default_catalog())
        }
        self._instances: Store[GameInstance] = (
            instances if instances is not None else InMemoryStore("game_instances")
        )

    # =========================================================================
    # Catalog
    # =========================================================================

    async def list_games(self, tag: Optional[str] = None) -> list[GameInfo]:
        games = list(self._catalog.values())
        if tag:
            wanted = tag.lower()
            games = [g for g in games if wanted in (t.lower() for t in g.tags)]
        return games

    async def get_game(self, game_id: str) -> GameInfo:
        game = self._catalog.get(game_id)
        if game is None:
            raise NotFoundError(f"Game {game_id} not found", code="GAME_NOT_FOUND")
        return game

    # =========================================================================
    # Instances
    # =========================================================================

    async def create_game_instance(
        self,
        game_id: str,
        players: list[PlayerRef],
        variant: Optional[str] = None,
        time_control: Optional[TimeControl] = None,
        metadata: Optional[dict[str, Any]] = None,
        join_url: Optional[str] = None,
        tournament: Optional[str] = None,
        event: Optional[str] = None,
    ) -> GameInstance:
        if len(players) < 2:
            raise InvalidOperationError("A game needs at least two players", code="INVALID_PLAYERS")
        seen: set[str] = set()
        for player in players:
            if player.id in seen:
                raise InvalidOperationError(
                    f"Player {player.id} is seated twice", code="INVALID_PLAYERS"
                )
            seen.add(player.id)

        game = self._catalog.get(game_id)
        if game is not None and not game.min_players <= len(players) <= game.max_players:
            raise InvalidOperationError(
                f"{game.name} takes {game.min_players}-{game.max_players} players",
                code="INVALID_PLAYERS",
            )

        instance = GameInstance(
            instance_id=new_id(),
            game_id=game_id,
            players=list(players),
            created_at=utc_now_iso(),
            variant=variant,
            time_control=time_control,
            metadata=dict(metadata or {}),
            join_url=join_url,
            game_state=self._initial_state(game_id),
            tournament=tournament,
            event=event,
        )
        await self._instances.put(instance.instance_id, instance)
        logger.info(
            "Created %s instance %s for %s",
            game_id, instance.instance_id, ", ".join(p.id for p in players),
        )
        return instance

    async def get_game_instance(self, instance_id: str) -> GameInstance:
        instance = await self._instances.get(instance_id)
        if instance is None:
            raise NotFoundError(f"Game instance {instance_id} not found", code="GAME_NOT_FOUND")
        return instance

    async def list_game_instances(
        self,
        player_id: Optional[str] = None,
        status: Optional[GameStatus] = None,
        game_id: Optional[str] = None,
    ) -> list[GameInstance]:
        def matches(instance: GameInstance) -> bool:
            if player_id is not None and not instance.has_player(player_id):
                return False
            if status is not None and instance.state != status:
                return False
            if game_id is not None and instance.game_id != game_id:
                return False
            return True

        return await self._instances.list(matches)

    async def make_move(self, instance_id: str, player_id: str, notation: str) -> GameInstance:
        instance = await self.get_game_instance(instance_id)
        if instance.is_over:
            raise InvalidOperationError("Game is already over", code="INVALID_MOVE")

        seat = instance.seat_of(player_id)
        if seat != instance.current_player:
            raise PermissionDeniedError("Not your turn", code="NOT_YOUR_TURN")

        notation = notation.strip()
        if not notation:
            raise InvalidOperationError("Move notation is empty", code="INVALID_MOVE")

        if instance.game_id == "tic-tac-toe":
            self._apply_tic_tac_toe(instance, seat, notation)

        instance.history.append(MoveRecord(player=seat, move=notation, timestamp=utc_now_iso()))
        instance.move_count += 1
        instance.last_move = notation
        instance.draw_offered_by = None
        if not instance.is_over:
            instance.current_player = seat % len(instance.players) + 1

        await self._instances.put(instance.instance_id, instance)
        return instance

    async def get_legal_moves(self, instance_id: str) -> list[str]:
        instance = await self.get_game_instance(instance_id)
        if instance.is_over:
            return []
        if instance.game_id == "tic-tac-toe":
            board = instance.game_state["board"]
            return [cell for cell in TIC_TAC_TOE_CELLS if board[cell] is None]
        return list(TIC_TAC_TOE_CELLS)

    async def render(self, instance_id: str, fmt: str, size: int, style: Optional[str] = None) -> dict[str, Any]:
        instance = await self.get_game_instance(instance_id)
        if fmt == "ascii":
            data = self._render_ascii(instance)
        elif fmt == "svg":
            data = self._render_svg(instance, size, style)
        else:
            raise NotSupportedError(
                f"Rendering to {fmt} is not available", code="RENDER_FORMAT_UNSUPPORTED"
            )
        metadata: dict[str, Any] = {"width": size, "height": size}
        return {"format": fmt, "data": data, "metadata": metadata}

    async def resign(self, instance_id: str, player_id: str) -> GameInstance:
        instance = await self._require_seated_active(instance_id, player_id)
        seat = instance.seat_of(player_id)
        instance.state = GameStatus.COMPLETED
        instance.winners = [s for s in range(1, len(instance.players) + 1) if s != seat]
        instance.game_state["resigned"] = seat
        await self._instances.put(instance.instance_id, instance)
        return instance

    async def offer_draw(self, instance_id: str, player_id: str) -> GameInstance:
        instance = await self._require_seated_active(instance_id, player_id)
        instance.draw_offered_by = instance.seat_of(player_id)
        await self._instances.put(instance.instance_id, instance)
        return instance

    async def accept_draw(self, instance_id: str, player_id: str) -> GameInstance:
        instance = await self._require_seated_active(instance_id, player_id)
        seat = instance.seat_of(player_id)
        if instance.draw_offered_by is None or instance.draw_offered_by == seat:
            raise InvalidOperationError("No draw offer to accept", code="NO_DRAW_OFFER")
        instance.state = GameStatus.COMPLETED
        instance.winners = []
        instance.draw_offered_by = None
        instance.game_state["draw"] = True
        await self._instances.put(instance.instance_id, instance)
        return instance

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _require_seated_active(self, instance_id: str, player_id: str) -> GameInstance:
        instance = await self.get_game_instance(instance_id)
        if not instance.has_player(player_id):
            raise PermissionDeniedError("You are not playing in this game", code="FORBIDDEN")
        if instance.is_over:
            raise InvalidOperationError("Game is already over", code="GAME_OVER")
        return instance

    @staticmethod
    def _initial_state(game_id: str) -> dict[str, Any]:
        if game_id == "tic-tac-toe":
            return {"board": {cell: None for cell in TIC_TAC_TOE_CELLS}}
        return {}

    @staticmethod
    def _apply_tic_tac_toe(instance: GameInstance, seat: int, notation: str) -> None:
        board = instance.game_state["board"]
        cell = notation.lower()
        if cell not in board:
            raise InvalidOperationError(f"Unknown cell {notation}", code="INVALID_MOVE")
        if board[cell] is not None:
            raise InvalidOperationError(f"Cell {notation} is occupied", code="INVALID_MOVE")
        board[cell] = SEAT_MARKS.get(seat, str(seat))

        mark = board[cell]
        if any(all(board[c] == mark for c in line) for line in TIC_TAC_TOE_LINES):
            instance.state = GameStatus.COMPLETED
            instance.winners = [seat]
        elif all(value is not None for value in board.values()):
            instance.state = GameStatus.COMPLETED
            instance.winners = []

    @staticmethod
    def _render_ascii(instance: GameInstance) -> str:
        board = instance.game_state.get("board")
        if board is None:
            lines = [f"{instance.game_id} after {instance.move_count} moves"]
            lines.extend(f"{r.player}: {r.move}" for r in instance.history)
            return "\n".join(lines)
        rows = []
        for row in "abc":
            rows.append(" | ".join(board[f"{row}{col}"] or "." for col in "123"))
        return "\n---------\n".join(rows)

    @staticmethod
    def _render_svg(instance: GameInstance, size: int, style: Optional[str]) -> str:
        theme = style or "default"
        return (
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{size}" height="{size}" '
            f'data-game="{instance.game_id}" data-style="{theme}">'
            f'<rect width="100%" height="100%" fill="#f0d9b5"/>'
            f'<text x="10" y="20">{instance.game_id} move {instance.move_count}</text>'
            f"</svg>"
        )
