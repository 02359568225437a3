"""
Mock bot service - Canned move suggestions for the supported games.

Suggestions are drawn from a small per-game opening list with a generator
seeded from (game, state, level), so the same request always yields the
same answer. No position is actually evaluated.
"""

from __future__ import annotations
from collections import Counter
from typing import Any
import hashlib
import json
import random

from ..errors import NotSupportedError
from ..interfaces import BotAnalysis, BotMove, BotService

BOT_USER_ID = "bot"
BOT_LEVELS = 10

CANDIDATE_MOVES: dict[str, list[str]] = {
    "chess": ["e2-e4", "d2-d4", "Nf3", "c2-c4"],
    "checkers": ["11-15", "9-13", "10-14", "12-16"],
    "go": ["D4", "Q16", "C3", "R17"],
    "hex": ["f6", "e5", "g7", "d4"],
}

FEATURES: dict[str, list[str]] = {
    "chess": ["opening-book", "endgame-tables", "position-analysis"],
    "checkers": ["perfect-play", "position-analysis"],
    "go": ["neural-network", "pattern-matching"],
    "hex": ["monte-carlo", "virtual-connections"],
}


def _seeded_rng(*parts: Any) -> random.Random:
    payload = json.dumps(parts, sort_keys=True, default=str).encode("utf-8")
    return random.Random(int.from_bytes(hashlib.sha256(payload).digest()[:8], "big"))


class MockBotService(BotService):
    """Deterministic stand-in for the game AI."""

    supported_games = tuple(CANDIDATE_MOVES)

    def __init__(self) -> None:
        self._games_by_level: Counter[int] = Counter()
        self._games_by_id: Counter[str] = Counter()
        self._moves_suggested = 0
        self._analyses = 0

    def _require_supported(self, game: str) -> list[str]:
        moves = CANDIDATE_MOVES.get(game)
        if moves is None:
            raise NotSupportedError(
                f"Game {game} is not supported by the bot", code="GAME_NOT_SUPPORTED"
            )
        return moves

    async def suggest_move(self, game: str, state: Any, level: int = 5) -> BotMove:
        moves = self._require_supported(game)
        rng = _seeded_rng(game, state, level)
        ranked = rng.sample(moves, len(moves))
        self._moves_suggested += 1
        return BotMove(
            move=ranked[0],
            evaluation=round(rng.uniform(-1.0, 1.0), 3),
            confidence=round(min(1.0, 0.5 + level * 0.05), 3),
            alternatives=[
                {"move": move, "evaluation": round(rng.uniform(-1.0, 1.0), 3)}
                for move in ranked[1:]
            ],
        )

    async def analyze(self, game: str, state: Any, depth: int = 10) -> BotAnalysis:
        moves = self._require_supported(game)
        rng = _seeded_rng("analyze", game, state, depth)
        line = [rng.choice(moves) for _ in range(min(depth, 4))]
        self._analyses += 1
        return BotAnalysis(
            best_move=line[0],
            evaluation=round(rng.uniform(-1.0, 1.0), 3),
            depth=depth,
            principal_variation=line,
        )

    async def record_game(self, game_id: str, level: int) -> None:
        self._games_by_level[level] += 1
        self._games_by_id[game_id] += 1

    async def info(self) -> dict[str, Any]:
        return {
            "id": BOT_USER_ID,
            "name": "Abstract AI",
            "supported_games": [
                {"game": game, "levels": BOT_LEVELS, "features": FEATURES[game]}
                for game in self.supported_games
            ],
            "description": "AI bot for various abstract strategy games with adjustable difficulty levels",
        }

    async def stats(self) -> dict[str, Any]:
        return {
            "total_games": sum(self._games_by_level.values()),
            "moves_suggested": self._moves_suggested,
            "analyses": self._analyses,
            "level_distribution": {str(k): v for k, v in sorted(self._games_by_level.items())},
            "game_distribution": dict(self._games_by_id),
        }
