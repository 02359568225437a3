"""
Service interfaces - Contracts every backing implementation must honour.

All operations are asynchronous so that a database or remote backend can
replace the in-memory implementations without touching the API layer.

Failures are reported with the exceptions in ``stratagem.services.errors``;
methods never return error objects.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

from .models import (
    Challenge,
    Comment,
    Event,
    EventGame,
    EventPlayer,
    Exploration,
    FederatedServer,
    GameInfo,
    GameInstance,
    GameNote,
    GameStatus,
    PlayerRef,
    Playground,
    PushSubscription,
    StandingChallenge,
    TimeControl,
    Tournament,
    TournamentGame,
    TournamentPlayer,
    User,
    Webhook,
    WebhookEvent,
)


# =============================================================================
# Result types shared by several services
# =============================================================================

@dataclass
class Standing:
    rank: int
    player_id: str
    player_name: str
    division: int
    wins: int = 0
    losses: int = 0
    draws: int = 0
    points: float = 0.0


@dataclass
class FederatedGameTicket:
    """What a remote server hands back when it agrees to host a game."""
    server: FederatedServer
    remote_game_id: str
    join_url: str


@dataclass
class BotMove:
    move: str
    evaluation: float
    confidence: float
    alternatives: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class BotAnalysis:
    best_move: str
    evaluation: float
    depth: int
    principal_variation: list[str] = field(default_factory=list)
    threats: list[str] = field(default_factory=list)


# =============================================================================
# Interfaces
# =============================================================================

class GameService(ABC):
    """Catalog and game-instance lifecycle."""

    @abstractmethod
    async def list_games(self, tag: Optional[str] = None) -> list[GameInfo]: ...

    @abstractmethod
    async def get_game(self, game_id: str) -> GameInfo: ...

    @abstractmethod
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
    ) -> GameInstance: ...

    @abstractmethod
    async def get_game_instance(self, instance_id: str) -> GameInstance: ...

    @abstractmethod
    async def list_game_instances(
        self,
        player_id: Optional[str] = None,
        status: Optional[GameStatus] = None,
        game_id: Optional[str] = None,
    ) -> list[GameInstance]: ...

    @abstractmethod
    async def make_move(self, instance_id: str, player_id: str, notation: str) -> GameInstance: ...

    @abstractmethod
    async def get_legal_moves(self, instance_id: str) -> list[str]: ...

    @abstractmethod
    async def render(self, instance_id: str, fmt: str, size: int, style: Optional[str] = None) -> dict[str, Any]: ...

    @abstractmethod
    async def resign(self, instance_id: str, player_id: str) -> GameInstance: ...

    @abstractmethod
    async def offer_draw(self, instance_id: str, player_id: str) -> GameInstance: ...

    @abstractmethod
    async def accept_draw(self, instance_id: str, player_id: str) -> GameInstance: ...


class UserService(ABC):
    """Profiles, settings, stars and push subscriptions."""

    @abstractmethod
    async def get_user(self, user_id: str) -> User: ...

    @abstractmethod
    async def find_user(self, user_id: str) -> Optional[User]: ...

    @abstractmethod
    async def get_or_create_user(self, user_id: str, name: Optional[str] = None) -> User: ...

    @abstractmethod
    async def list_users(self) -> list[User]: ...

    @abstractmethod
    async def update_profile(self, user_id: str, updates: dict[str, Any]) -> User: ...

    @abstractmethod
    async def get_settings(self, user_id: str) -> dict[str, Any]: ...

    @abstractmethod
    async def update_setting(
        self, user_id: str, setting: str, value: Any, meta_game: Optional[str] = None
    ) -> dict[str, Any]: ...

    @abstractmethod
    async def get_notification_settings(self, user_id: str) -> dict[str, bool]: ...

    @abstractmethod
    async def update_notification_settings(self, user_id: str, updates: dict[str, bool]) -> dict[str, bool]: ...

    @abstractmethod
    async def toggle_star(self, user_id: str, meta_game: str) -> bool: ...

    @abstractmethod
    async def save_push_subscription(self, user_id: str, subscription: PushSubscription) -> None: ...

    @abstractmethod
    async def delete_push_subscription(self, user_id: str) -> bool: ...

    @abstractmethod
    async def get_push_subscription(self, user_id: str) -> Optional[PushSubscription]: ...

    @abstractmethod
    async def get_ratings(self, meta_game: str) -> list[dict[str, Any]]: ...


class ChallengeService(ABC):
    """Directed, open and standing challenges."""

    @abstractmethod
    async def create_challenge(
        self,
        challenger: PlayerRef,
        challengees: list[PlayerRef],
        meta_game: str,
        num_players: int,
        **options: Any,
    ) -> Challenge: ...

    @abstractmethod
    async def get_challenge(self, challenge_id: str) -> Challenge: ...

    @abstractmethod
    async def list_challenges(
        self, meta_game: Optional[str] = None, user_id: Optional[str] = None
    ) -> list[Challenge]: ...

    @abstractmethod
    async def accept_challenge(self, challenge_id: str, user: PlayerRef) -> Challenge: ...

    @abstractmethod
    async def decline_challenge(self, challenge_id: str, user_id: str) -> None: ...

    @abstractmethod
    async def revoke_challenge(self, challenge_id: str, user_id: str) -> None: ...

    @abstractmethod
    async def remove_challenge(self, challenge_id: str) -> bool: ...

    @abstractmethod
    async def get_standing_challenges(self, user_id: str) -> list[StandingChallenge]: ...

    @abstractmethod
    async def update_standing_challenges(
        self, user_id: str, standing: list[StandingChallenge]
    ) -> list[StandingChallenge]: ...

    @abstractmethod
    async def list_standing_challenges(self, meta_game: Optional[str] = None) -> list[StandingChallenge]: ...


class TournamentService(ABC):
    """Tournament registration, rounds and standings."""

    @abstractmethod
    async def create_tournament(self, name: str, meta_game: str, **options: Any) -> Tournament: ...

    @abstractmethod
    async def get_tournament(self, tournament_id: str) -> Tournament: ...

    @abstractmethod
    async def list_tournaments(
        self, status: str = "active", meta_game: Optional[str] = None
    ) -> list[Tournament]: ...

    @abstractmethod
    async def join_tournament(
        self, tournament_id: str, player: PlayerRef, rating: int, once: bool = False
    ) -> TournamentPlayer: ...

    @abstractmethod
    async def withdraw_from_tournament(self, tournament_id: str, user_id: str) -> None: ...

    @abstractmethod
    async def start_tournament(self, tournament_id: str) -> Tournament: ...

    @abstractmethod
    async def create_tournament_round(self, tournament_id: str) -> list[TournamentGame]: ...

    @abstractmethod
    async def get_tournament_games(
        self, tournament_id: str, round: Optional[int] = None, player_id: Optional[str] = None
    ) -> list[TournamentGame]: ...

    @abstractmethod
    async def report_result(self, tournament_id: str, game_id: str, winner: list[str]) -> TournamentGame: ...

    @abstractmethod
    async def get_tournament_standings(
        self, tournament_id: str, division: Optional[int] = None
    ) -> list[Standing]: ...

    @abstractmethod
    async def end_tournament(self, tournament_id: str) -> Tournament: ...

    @abstractmethod
    async def archive_tournament(self, tournament_id: str) -> Tournament: ...


class EventService(ABC):
    """Organized events: drafts, registration, pairings and results."""

    @abstractmethod
    async def create_event(self, organizer: str, name: str, description: str, date_start: int) -> Event: ...

    @abstractmethod
    async def get_event(self, event_id: str, viewer_id: Optional[str] = None) -> Event: ...

    @abstractmethod
    async def list_events(self, status: str = "all", organizer_id: Optional[str] = None) -> list[Event]: ...

    @abstractmethod
    async def require_organizer(self, event_id: str, user_id: str) -> Event: ...

    @abstractmethod
    async def publish_event(self, event_id: str, user_id: str) -> Event: ...

    @abstractmethod
    async def register_player(
        self, event_id: str, user_id: str, division: Optional[int] = None, seed: Optional[int] = None
    ) -> EventPlayer: ...

    @abstractmethod
    async def withdraw_player(self, event_id: str, user_id: str) -> None: ...

    @abstractmethod
    async def list_players(self, event_id: str) -> list[EventPlayer]: ...

    @abstractmethod
    async def add_games(self, event_id: str, user_id: str, games: list[EventGame]) -> list[EventGame]: ...

    @abstractmethod
    async def list_games(
        self, event_id: str, round: Optional[int] = None, player_id: Optional[str] = None
    ) -> list[EventGame]: ...

    @abstractmethod
    async def report_result(
        self, event_id: str, user_id: str, game_id: str, winner: list[str], arbitrated: bool = False
    ) -> EventGame: ...

    @abstractmethod
    async def close_event(self, event_id: str, user_id: str, winner: Optional[list[str]] = None) -> Event: ...


class ExplorationService(ABC):
    """Explorations, playground, private notes and public comments."""

    @abstractmethod
    async def save_exploration(
        self,
        owner: PlayerRef,
        meta_game: str,
        state: Any,
        exploration_id: Optional[str] = None,
        is_public: bool = False,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Exploration: ...

    @abstractmethod
    async def get_exploration(self, exploration_id: str, viewer_id: Optional[str] = None) -> Exploration: ...

    @abstractmethod
    async def list_explorations(
        self,
        viewer_id: Optional[str] = None,
        meta_game: Optional[str] = None,
        user_id: Optional[str] = None,
        public_only: bool = False,
    ) -> list[Exploration]: ...

    @abstractmethod
    async def delete_exploration(self, exploration_id: str, user_id: str) -> None: ...

    @abstractmethod
    async def share_exploration(self, exploration_id: str, user_id: str) -> str: ...

    @abstractmethod
    async def get_shared_exploration(self, share_id: str) -> Exploration: ...

    @abstractmethod
    async def get_playground(self, user_id: str) -> Playground: ...

    @abstractmethod
    async def save_playground(self, user_id: str, meta_game: str, state: Any) -> Playground: ...

    @abstractmethod
    async def clear_playground(self, user_id: str) -> None: ...

    @abstractmethod
    async def get_note(self, game_id: str, user_id: str) -> Optional[GameNote]: ...

    @abstractmethod
    async def save_note(self, game_id: str, user_id: str, note: str) -> GameNote: ...

    @abstractmethod
    async def add_comment(self, game_id: str, user_id: str, comment: str) -> Comment: ...

    @abstractmethod
    async def list_comments(self, game_id: str) -> list[Comment]: ...


class FederationService(ABC):
    """Known external servers and delegated game creation."""

    @abstractmethod
    async def list_servers(self) -> list[FederatedServer]: ...

    @abstractmethod
    async def get_server(self, server_id: str) -> FederatedServer: ...

    @abstractmethod
    async def request_game(
        self, game_id: str, local_player: str, remote_player: str, remote_server: str
    ) -> FederatedGameTicket: ...


class WebhookService(ABC):
    """Webhook subscriptions. Delivery is not implemented."""

    @abstractmethod
    async def register_webhook(
        self, owner_id: str, url: str, events: list[WebhookEvent], secret: Optional[str] = None
    ) -> Webhook: ...

    @abstractmethod
    async def list_webhooks(self, owner_id: str) -> list[Webhook]: ...

    @abstractmethod
    async def delete_webhook(self, webhook_id: str, owner_id: str) -> None: ...


class BotService(ABC):
    """Opponent AI stub."""

    supported_games: tuple[str, ...] = ()

    @abstractmethod
    async def suggest_move(self, game: str, state: Any, level: int = 5) -> BotMove: ...

    @abstractmethod
    async def analyze(self, game: str, state: Any, depth: int = 10) -> BotAnalysis: ...

    @abstractmethod
    async def record_game(self, game_id: str, level: int) -> None: ...

    @abstractmethod
    async def info(self) -> dict[str, Any]: ...

    @abstractmethod
    async def stats(self) -> dict[str, Any]: ...
