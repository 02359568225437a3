"""
Mock challenge service - Directed, open and standing challenges.

Lifecycle of a challenge:
    pending --accept (last seat)--> removed by caller after the game exists
    pending --decline-----------> removed
    pending --revoke------------> removed

Acceptance only records the player; creating the game and removing the
filled challenge are separate steps driven by the API layer.
"""

from __future__ import annotations
from typing import Any, Optional

from ..errors import ConflictError, InvalidOperationError, NotFoundError, PermissionDeniedError
from ..interfaces import ChallengeService
from ..models import Challenge, PlayerRef, StandingChallenge, new_id
from ..store import InMemoryStore, Store


CHALLENGE_OPTIONS = {
    "variants",
    "seating",
    "clock_start",
    "clock_inc",
    "clock_max",
    "clock_hard",
    "rated",
    "no_explore",
    "comment",
}


class MockChallengeService(ChallengeService):
    """In-memory challenge store plus per-user standing challenge lists."""

    def __init__(
        self,
        challenges: Optional[Store[Challenge]] = None,
        standing: Optional[Store[list[StandingChallenge]]] = None,
    ):
        self._challenges: Store[Challenge] = (
            challenges if challenges is not None else InMemoryStore("challenges")
        )
        self._standing: Store[list[StandingChallenge]] = (
            standing if standing is not None else InMemoryStore("standing_challenges")
        )

    async def create_challenge(
        self,
        challenger: PlayerRef,
        challengees: list[PlayerRef],
        meta_game: str,
        num_players: int,
        **options: Any,
    ) -> Challenge:
        unknown = set(options) - CHALLENGE_OPTIONS
        if unknown:
            raise TypeError(f"Unknown challenge options: {', '.join(sorted(unknown))}")
        if num_players < 2:
            raise InvalidOperationError("A challenge needs at least two players", code="VALIDATION_ERROR")
        if any(c.id == challenger.id for c in challengees):
            raise InvalidOperationError("You cannot challenge yourself", code="VALIDATION_ERROR")
        if len(challengees) > num_players - 1:
            raise InvalidOperationError(
                f"Too many challengees for a {num_players} player game",
                code="VALIDATION_ERROR",
            )

        challenge = Challenge(
            id=new_id(),
            meta_game=meta_game,
            num_players=num_players,
            challenger=challenger,
            challengees=list(challengees),
            players=[challenger],
            standing=not challengees,
            **options,
        )
        await self._challenges.put(challenge.id, challenge)
        return challenge

    async def get_challenge(self, challenge_id: str) -> Challenge:
        challenge = await self._challenges.get(challenge_id)
        if challenge is None:
            raise NotFoundError("Challenge not found", code="NOT_FOUND")
        return challenge

    async def list_challenges(
        self, meta_game: Optional[str] = None, user_id: Optional[str] = None
    ) -> list[Challenge]:
        def matches(challenge: Challenge) -> bool:
            if meta_game is not None and challenge.meta_game != meta_game:
                return False
            if user_id is not None:
                involved = {challenge.challenger.id}
                involved.update(c.id for c in challenge.challengees)
                involved.update(p.id for p in challenge.players)
                if user_id not in involved:
                    return False
            return True

        challenges = await self._challenges.list(matches)
        return sorted(challenges, key=lambda c: c.date_issued, reverse=True)

    async def accept_challenge(self, challenge_id: str, user: PlayerRef) -> Challenge:
        challenge = await self.get_challenge(challenge_id)
        if user.id == challenge.challenger.id:
            raise PermissionDeniedError("The challenger cannot accept their own challenge")
        if not challenge.is_invited(user.id):
            raise PermissionDeniedError("You are not invited to this challenge")
        if challenge.has_accepted(user.id):
            raise ConflictError("Challenge already accepted", code="ALREADY_ACCEPTED")
        if challenge.is_full:
            raise ConflictError("Challenge is already full", code="CHALLENGE_FULL")

        challenge.players.append(user)
        await self._challenges.put(challenge.id, challenge)
        return challenge

    async def decline_challenge(self, challenge_id: str, user_id: str) -> None:
        challenge = await self.get_challenge(challenge_id)
        if not challenge.challengees:
            raise PermissionDeniedError("Open challenges cannot be declined")
        if user_id == challenge.challenger.id or not challenge.is_invited(user_id):
            raise PermissionDeniedError("Only an invited player can decline")
        await self._challenges.delete(challenge.id)

    async def revoke_challenge(self, challenge_id: str, user_id: str) -> None:
        challenge = await self.get_challenge(challenge_id)
        if user_id != challenge.challenger.id:
            raise PermissionDeniedError("Only the challenger can revoke")
        await self._challenges.delete(challenge.id)

    async def remove_challenge(self, challenge_id: str) -> bool:
        return await self._challenges.delete(challenge_id)

    # =========================================================================
    # Standing challenges
    # =========================================================================

    async def get_standing_challenges(self, user_id: str) -> list[StandingChallenge]:
        return list(await self._standing.get(user_id) or [])

    async def update_standing_challenges(
        self, user_id: str, standing: list[StandingChallenge]
    ) -> list[StandingChallenge]:
        ids = [entry.id for entry in standing]
        if len(ids) != len(set(ids)):
            raise InvalidOperationError("Standing challenge ids must be unique", code="VALIDATION_ERROR")
        await self._standing.put(user_id, list(standing))
        return list(standing)

    async def list_standing_challenges(self, meta_game: Optional[str] = None) -> list[StandingChallenge]:
        result: list[StandingChallenge] = []
        for entries in await self._standing.list():
            result.extend(
                entry for entry in entries
                if not entry.suspended and (meta_game is None or entry.meta_game == meta_game)
            )
        return result
