"""
Mock event service - Organizer-owned events with registration and pairings.

An event starts as an invisible draft. Only its organizer can see the draft,
publish it, post pairings, report results and close it. Players can
register only for published events that are not closed.
"""

from __future__ import annotations
from typing import Callable, Optional

from ..errors import ConflictError, InvalidOperationError, NotFoundError, PermissionDeniedError
from ..interfaces import EventService
from ..models import Event, EventGame, EventPlayer, new_id, now_ms
from ..store import InMemoryStore, Store

EVENT_STATUSES = ("upcoming", "ongoing", "completed", "all")


class MockEventService(EventService):
    """In-memory events; players and games are stored per event id."""

    def __init__(
        self,
        events: Optional[Store[Event]] = None,
        players: Optional[Store[list[EventPlayer]]] = None,
        games: Optional[Store[list[EventGame]]] = None,
        clock: Callable[[], int] = now_ms,
    ):
        self._events: Store[Event] = events if events is not None else InMemoryStore("events")
        self._players: Store[list[EventPlayer]] = (
            players if players is not None else InMemoryStore("event_players")
        )
        self._games: Store[list[EventGame]] = (
            games if games is not None else InMemoryStore("event_games")
        )
        self._clock = clock

    async def create_event(self, organizer: str, name: str, description: str, date_start: int) -> Event:
        event = Event(
            id=new_id(),
            name=name,
            description=description,
            organizer=organizer,
            date_start=date_start,
        )
        await self._events.put(event.id, event)
        await self._players.put(event.id, [])
        await self._games.put(event.id, [])
        return event

    async def _load(self, event_id: str) -> Event:
        event = await self._events.get(event_id)
        if event is None:
            raise NotFoundError("Event not found", code="NOT_FOUND")
        return event

    async def get_event(self, event_id: str, viewer_id: Optional[str] = None) -> Event:
        event = await self._load(event_id)
        if not event.visible and event.organizer != viewer_id:
            raise NotFoundError("Event not found", code="NOT_FOUND")
        return event

    async def list_events(self, status: str = "all", organizer_id: Optional[str] = None) -> list[Event]:
        if status not in EVENT_STATUSES:
            raise InvalidOperationError(f"Unknown event status {status!r}", code="VALIDATION_ERROR")
        now = self._clock()

        def matches(event: Event) -> bool:
            if not event.visible:
                return False
            if organizer_id is not None and event.organizer != organizer_id:
                return False
            return status == "all" or event.status(now) == status

        events = await self._events.list(matches)
        return sorted(events, key=lambda e: e.date_start)

    async def require_organizer(self, event_id: str, user_id: str) -> Event:
        event = await self._load(event_id)
        if event.organizer != user_id:
            raise PermissionDeniedError("Only the organizer can manage this event")
        return event

    async def publish_event(self, event_id: str, user_id: str) -> Event:
        event = await self.require_organizer(event_id, user_id)
        event.visible = True
        await self._events.put(event.id, event)
        return event

    async def register_player(
        self, event_id: str, user_id: str, division: Optional[int] = None, seed: Optional[int] = None
    ) -> EventPlayer:
        event = await self._load(event_id)
        if not event.visible:
            raise NotFoundError("Event not found", code="NOT_FOUND")
        if event.date_end is not None:
            raise InvalidOperationError("Event is closed", code="EVENT_CLOSED")

        players = await self._players.get(event.id) or []
        if any(p.player_id == user_id for p in players):
            raise ConflictError("Already registered for this event", code="ALREADY_REGISTERED")

        entry = EventPlayer(player_id=user_id, division=division, seed=seed)
        players.append(entry)
        await self._players.put(event.id, players)
        return entry

    async def withdraw_player(self, event_id: str, user_id: str) -> None:
        event = await self._load(event_id)
        players = await self._players.get(event.id) or []
        remaining = [p for p in players if p.player_id != user_id]
        if len(remaining) == len(players):
            raise InvalidOperationError("Not registered for this event", code="NOT_REGISTERED")
        await self._players.put(event.id, remaining)

    async def list_players(self, event_id: str) -> list[EventPlayer]:
        event = await self._load(event_id)
        return list(await self._players.get(event.id) or [])

    async def add_games(self, event_id: str, user_id: str, games: list[EventGame]) -> list[EventGame]:
        event = await self.require_organizer(event_id, user_id)
        if event.date_end is not None:
            raise InvalidOperationError("Event is closed", code="EVENT_CLOSED")
        existing = await self._games.get(event.id) or []
        existing.extend(games)
        await self._games.put(event.id, existing)
        return list(games)

    async def list_games(
        self, event_id: str, round: Optional[int] = None, player_id: Optional[str] = None
    ) -> list[EventGame]:
        event = await self._load(event_id)
        games = await self._games.get(event.id) or []
        if round is not None:
            games = [g for g in games if g.round == round]
        if player_id is not None:
            games = [g for g in games if player_id in (g.player1, g.player2)]
        return list(games)

    async def report_result(
        self, event_id: str, user_id: str, game_id: str, winner: list[str], arbitrated: bool = False
    ) -> EventGame:
        event = await self.require_organizer(event_id, user_id)
        games = await self._games.get(event.id) or []
        game = next((g for g in games if g.game_id == game_id), None)
        if game is None:
            raise NotFoundError("Game not found in this event", code="NOT_FOUND")
        if not set(winner) <= {game.player1, game.player2}:
            raise InvalidOperationError("Winner must be one of the game's players", code="VALIDATION_ERROR")
        game.winner = list(winner)
        game.arbitrated = arbitrated
        await self._games.put(event.id, games)
        return game

    async def close_event(self, event_id: str, user_id: str, winner: Optional[list[str]] = None) -> Event:
        event = await self.require_organizer(event_id, user_id)
        if event.date_end is not None:
            raise InvalidOperationError("Event is already closed", code="EVENT_CLOSED")
        event.date_end = self._clock()
        if winner:
            event.winner = list(winner)
        await self._events.put(event.id, event)
        return event
