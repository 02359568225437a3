"""
Domain records - Plain dataclasses held by the service stores.

These records are framework-agnostic. The API layer serializes them through
the pydantic schemas in ``stratagem.api.schemas`` (snake_case here,
camelCase on the wire).

Timestamps follow the platform conventions:
- epoch milliseconds (int) for lobby records (challenges, tournaments, events,
  explorations, comments)
- ISO-8601 strings for game-instance records (createdAt, move history)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
import time
import uuid


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def utc_now_iso() -> str:
    """Current time as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def new_id() -> str:
    return str(uuid.uuid4())


# =============================================================================
# Enums
# =============================================================================

class GameStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class TimeControlType(str, Enum):
    NONE = "none"
    ABSOLUTE = "absolute"
    INCREMENT = "increment"
    BYOYOMI = "byoyomi"


class Seating(str, Enum):
    RANDOM = "random"
    AS_ENTERED = "as-entered"


class StandingSensitivity(str, Enum):
    META = "meta"
    VARIANTS = "variants"


class TournamentGameState(str, Enum):
    CREATED = "created"
    STARTED = "started"
    COMPLETED = "completed"


class ServerStatus(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"
    MAINTENANCE = "maintenance"


class WebhookEvent(str, Enum):
    MOVE_MADE = "move.made"
    GAME_OVER = "game.over"
    PLAYER_JOINED = "player.joined"
    PLAYER_LEFT = "player.left"
    GAME_ABANDONED = "game.abandoned"


# =============================================================================
# Catalog
# =============================================================================

@dataclass
class GameInfo:
    """A game offered by the platform catalog."""
    id: str
    name: str
    version: str = "1.0.0"
    min_players: int = 2
    max_players: int = 2
    variants: list[str] = field(default_factory=list)
    plugin_url: str | None = None
    description: str | None = None
    rules: str | None = None
    protocol: str | None = None
    capabilities: dict[str, bool] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)
    # AbstractPlay meta-game details
    urls: list[str] = field(default_factory=list)
    people: list[dict[str, str]] = field(default_factory=list)
    flags: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    mechanics: list[str] = field(default_factory=list)


# =============================================================================
# Users
# =============================================================================

@dataclass
class PlayerRef:
    """Minimal reference to a user: id and display name."""
    id: str
    name: str


@dataclass
class PushSubscription:
    """Web push subscription as produced by the browser Push API."""
    endpoint: str
    keys: dict[str, str]
    expiration_time: int | None = None


def default_user_settings() -> dict[str, Any]:
    return {
        "all": {
            "color": "#007bff",
            "annotate": True,
            "notifications": {
                "gameStart": True,
                "gameEnd": True,
                "challenges": True,
                "yourturn": True,
                "tournamentStart": True,
                "tournamentEnd": True,
            },
        }
    }


@dataclass
class User:
    """A platform user. Created on first reference, never deleted."""
    id: str
    name: str
    email: str | None = None
    country: str | None = None
    about: str | None = None
    bggid: str | None = None
    anonymous: bool = False
    last_seen: int = field(default_factory=now_ms)
    stars: int = 0
    ratings: dict[str, int] = field(default_factory=dict)
    games_played: int = 0
    wins: int = 0
    settings: dict[str, Any] = field(default_factory=default_user_settings)
    starred: list[str] = field(default_factory=list)
    tags: list[dict[str, Any]] = field(default_factory=list)
    palettes: list[dict[str, Any]] = field(default_factory=list)
    push_subscription: PushSubscription | None = None

    def ref(self) -> PlayerRef:
        return PlayerRef(id=self.id, name=self.name)

    @property
    def win_rate(self) -> float:
        if self.games_played == 0:
            return 0.0
        return round(self.wins / self.games_played, 4)


# =============================================================================
# Game instances
# =============================================================================

@dataclass
class TimeControl:
    type: TimeControlType = TimeControlType.NONE
    initial: int | None = None
    increment: int | None = None


@dataclass
class MoveRecord:
    """One entry of a game's move history."""
    player: int  # 1-based seat
    move: str
    timestamp: str


@dataclass
class GameInstance:
    """
    One play-through of a game between specific players.

    ``current_player`` and ``winners`` are 1-based seat numbers into
    ``players``. ``game_state`` is an opaque, game-specific blob.
    """
    instance_id: str
    game_id: str
    players: list[PlayerRef]
    created_at: str
    state: GameStatus = GameStatus.ACTIVE
    current_player: int = 1
    variant: str | None = None
    time_control: TimeControl | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    join_url: str | None = None
    move_count: int = 0
    last_move: str | None = None
    game_state: dict[str, Any] = field(default_factory=dict)
    history: list[MoveRecord] = field(default_factory=list)
    winners: list[int] = field(default_factory=list)
    draw_offered_by: int | None = None
    tournament: str | None = None
    event: str | None = None
    no_explore: bool = False

    def seat_of(self, player_id: str) -> int | None:
        """1-based seat of a player id, or None when not seated."""
        for index, player in enumerate(self.players, start=1):
            if player.id == player_id:
                return index
        return None

    def has_player(self, player_id: str) -> bool:
        return self.seat_of(player_id) is not None

    @property
    def is_over(self) -> bool:
        return self.state != GameStatus.ACTIVE


# =============================================================================
# Challenges
# =============================================================================

@dataclass
class Challenge:
    """
    An invitation to start a game with fixed parameters.

    ``players`` holds everyone who has accepted so far, challenger first.
    A standing (open) challenge has no challengees and is open to anyone.
    """
    id: str
    meta_game: str
    num_players: int
    challenger: PlayerRef
    challengees: list[PlayerRef] = field(default_factory=list)
    players: list[PlayerRef] = field(default_factory=list)
    variants: list[str] = field(default_factory=list)
    seating: Seating = Seating.RANDOM
    clock_start: int = 172800
    clock_inc: int = 0
    clock_max: int = 604800
    clock_hard: bool = False
    rated: bool = True
    no_explore: bool = False
    comment: str | None = None
    standing: bool = False
    date_issued: int = field(default_factory=now_ms)

    def is_invited(self, user_id: str) -> bool:
        if not self.challengees:
            return True
        return any(c.id == user_id for c in self.challengees)

    def has_accepted(self, user_id: str) -> bool:
        return any(p.id == user_id for p in self.players)

    @property
    def is_full(self) -> bool:
        return len(self.players) >= self.num_players


@dataclass
class StandingChallenge:
    """A repeatable open challenge kept in a user's standing list."""
    id: str
    meta_game: str
    num_players: int = 2
    variants: list[str] = field(default_factory=list)
    clock_start: int = 172800
    clock_inc: int = 0
    clock_max: int = 604800
    clock_hard: bool = False
    rated: bool = True
    no_explore: bool = False
    limit: int = 1
    sensitivity: StandingSensitivity = StandingSensitivity.META
    suspended: bool = False


# =============================================================================
# Tournaments
# =============================================================================

@dataclass
class Division:
    min_rating: int = 0
    max_players: int = 0  # 0 means unlimited
    started: bool = False


@dataclass
class TournamentPlayer:
    player_id: str
    player_name: str
    division: int = 1
    rating: int = 1500
    once: bool = False
    score: float = 0.0
    tiebreak: float = 0.0
    timeout: bool = False


@dataclass
class TournamentGame:
    game_id: str
    round: int
    division: int
    player1: str
    player2: str
    state: TournamentGameState = TournamentGameState.CREATED
    winner: list[str] = field(default_factory=list)
    draw: bool = False


@dataclass
class Tournament:
    """A tournament. Players join and withdraw only before it starts."""
    id: str
    name: str
    meta_game: str
    variants: list[str] = field(default_factory=list)
    clock_start: int = 172800
    clock_inc: int = 0
    clock_max: int = 604800
    clock_hard: bool = False
    no_explore: bool = False
    date_created: int = field(default_factory=now_ms)
    date_started: int | None = None
    date_ended: int | None = None
    started: bool = False
    archived: bool = False
    next_round: int = 1
    divisions: dict[str, Division] = field(default_factory=lambda: {"1": Division()})
    players: list[TournamentPlayer] = field(default_factory=list)
    games: list[TournamentGame] = field(default_factory=list)

    def player(self, player_id: str) -> TournamentPlayer | None:
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    @property
    def status(self) -> str:
        if not self.started:
            return "waiting"
        if self.date_ended is None:
            return "active"
        return "completed"


# =============================================================================
# Events
# =============================================================================

@dataclass
class Event:
    """An organized event. Draft (invisible) until published."""
    id: str
    name: str
    description: str
    organizer: str
    date_start: int
    date_end: int | None = None
    winner: list[str] = field(default_factory=list)
    visible: bool = False

    def status(self, now: int) -> str:
        if self.date_end is not None and self.date_end <= now:
            return "completed"
        if self.date_start > now:
            return "upcoming"
        return "ongoing"


@dataclass
class EventPlayer:
    player_id: str
    division: int | None = None
    seed: int | None = None


@dataclass
class EventGame:
    game_id: str
    round: int
    meta_game: str
    player1: str
    player2: str
    variants: list[str] = field(default_factory=list)
    winner: list[str] = field(default_factory=list)
    arbitrated: bool = False


# =============================================================================
# Explorations
# =============================================================================

@dataclass
class Exploration:
    id: str
    meta_game: str
    state: Any
    user_id: str
    user_name: str | None = None
    is_public: bool = False
    title: str | None = None
    description: str | None = None
    published: bool = False
    date_created: int = field(default_factory=now_ms)
    date_modified: int = field(default_factory=now_ms)


@dataclass
class Playground:
    user_id: str
    games: dict[str, Any] = field(default_factory=dict)


@dataclass
class GameNote:
    game_id: str
    user_id: str
    note: str
    last_updated: int = field(default_factory=now_ms)


@dataclass
class Comment:
    user: str
    comment: str
    timestamp: int = field(default_factory=now_ms)


# =============================================================================
# Federation and webhooks
# =============================================================================

@dataclass
class FederatedServer:
    id: str
    name: str
    url: str
    status: ServerStatus = ServerStatus.ONLINE
    games: list[str] = field(default_factory=list)


@dataclass
class Webhook:
    id: str
    url: str
    events: list[WebhookEvent]
    owner_id: str
    created_at: str = field(default_factory=utc_now_iso)
    secret: str | None = None
