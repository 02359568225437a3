"""
Pydantic Schemas for API - Request/response models for every route.

These models are the wire contract of the gateway. They are used in both
directions: request bodies are validated before a handler runs, and every
route declares a ``response_model`` so outbound payloads are validated and
serialized too.

Field names are snake_case in Python and camelCase on the wire
(``meta_game`` <-> ``metaGame``). Both spellings are accepted on input.

Error envelope (every non-2xx response):

    {
        "error": {"code": "NOT_FOUND", "message": "...", "details": {...}},
        "timestamp": "2024-01-01T00:00:00.000Z",
        "requestId": "..."
    }
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

from ..services.models import (
    GameStatus,
    Seating,
    ServerStatus,
    StandingSensitivity,
    TimeControlType,
    TournamentGameState,
    WebhookEvent,
)


class CamelModel(BaseModel):
    """Base model: camelCase aliases, populated by either name."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Error codes produced by the API layer itself.

    Services add their own codes (``ALREADY_REGISTERED``, ``NOT_YOUR_TURN``,
    ...) which are passed through unchanged.
    """
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNKNOWN_QUERY = "UNKNOWN_QUERY"
    GAME_NOT_FOUND = "GAME_NOT_FOUND"
    PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"


class RenderFormat(str, Enum):
    SVG = "svg"
    PNG = "png"
    ASCII = "ascii"


# =============================================================================
# Shared Models
# =============================================================================

class ErrorBody(BaseModel):
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Any] = Field(None, description="Additional error context")


class ErrorResponse(CamelModel):
    """Standard error response."""
    error: ErrorBody
    timestamp: str = Field(..., description="ISO-8601 time the error was produced")
    request_id: Optional[str] = Field(None, description="Correlation id, echoed in x-request-id")


class SuccessResponse(CamelModel):
    success: bool


class HealthResponse(CamelModel):
    """Health check response."""
    status: str
    timestamp: str
    version: str


class PlayerInfo(CamelModel):
    """A player reference: id and display name."""
    id: str = Field(..., min_length=1)
    name: str


# =============================================================================
# Catalog
# =============================================================================

class GameCapabilities(CamelModel):
    ai: Optional[bool] = None
    variants: Optional[bool] = None
    analysis: Optional[bool] = None
    time_control: Optional[bool] = None


class GameSummary(CamelModel):
    id: str = Field(..., examples=["chess"])
    name: str = Field(..., examples=["Chess"])
    version: str = "1.0.0"
    min_players: int = Field(..., ge=2)
    max_players: int = Field(..., ge=2)
    variants: list[str] = Field(default_factory=list)
    plugin_url: Optional[str] = None


class GameDetails(GameSummary):
    description: Optional[str] = None
    rules: Optional[str] = None
    protocol: Optional[str] = None
    capabilities: Optional[GameCapabilities] = None
    tags: list[str] = Field(default_factory=list)


class GameList(CamelModel):
    games: list[GameSummary]
    total: int
    page: int
    page_size: int


class PersonInfo(CamelModel):
    type: str
    name: str


class VariantInfo(CamelModel):
    name: str
    description: Optional[str] = None


class GameMetaInfo(CamelModel):
    """Meta-game description used by the legacy ``meta_games`` query."""
    id: str
    name: str
    description: Optional[str] = None
    urls: list[str] = Field(default_factory=list)
    people: list[PersonInfo] = Field(default_factory=list)
    flags: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    mechanics: list[str] = Field(default_factory=list)
    variants: list[VariantInfo] = Field(default_factory=list)


# =============================================================================
# Game Instances
# =============================================================================

class TimeControlSchema(CamelModel):
    type: TimeControlType = TimeControlType.NONE
    initial: Optional[int] = Field(None, ge=0)
    increment: Optional[int] = Field(None, ge=0)


class CreateGameRequest(CamelModel):
    """Create a game instance directly."""
    game_id: str = Field(..., min_length=1)
    variant: Optional[str] = None
    players: list[PlayerInfo] = Field(..., min_length=2)
    time_control: Optional[TimeControlSchema] = None
    metadata: Optional[dict[str, Any]] = None


class GameInstanceResponse(CamelModel):
    instance_id: str
    game_id: str
    state: GameStatus
    current_player: int = Field(..., ge=1, description="1-based seat of the player to move")
    created_at: str
    join_url: Optional[str] = None
    variant: Optional[str] = None
    players: list[PlayerInfo] = Field(default_factory=list)


class MoveHistory(CamelModel):
    player: int
    move: str
    timestamp: str


class GameStateResponse(GameInstanceResponse):
    """Full state of a game instance."""
    move_count: int
    last_move: Optional[str] = None
    game_state: Any = None
    history: list[MoveHistory] = Field(default_factory=list)
    winners: list[int] = Field(default_factory=list)
    draw_offered_by: Optional[int] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    no_explore: bool = False
    tournament: Optional[str] = None
    event: Optional[str] = None


class MoveRequest(CamelModel):
    player_id: str = Field(..., description="Used only when the request carries no identity")
    notation: str = Field(..., min_length=1)
    timestamp: Optional[str] = None


class MoveResponse(CamelModel):
    success: bool
    game_state: Any = None
    game_over: bool
    winners: Optional[list[int]] = None
    legal_moves: Optional[list[str]] = None


class MoveDetail(CamelModel):
    notation: str


class LegalMovesResponse(CamelModel):
    moves: list[MoveDetail]
    count: int


class RenderMetadata(CamelModel):
    width: Optional[int] = None
    height: Optional[int] = None


class RenderResponse(CamelModel):
    format: RenderFormat
    data: str
    metadata: Optional[RenderMetadata] = None


# =============================================================================
# Players
# =============================================================================

class PlayerStats(CamelModel):
    games_played: int
    win_rate: float


class PlayerProfile(CamelModel):
    id: str
    name: str
    country: Optional[str] = None
    rating: dict[str, int] = Field(default_factory=dict)
    stats: PlayerStats


class PlayerGameList(CamelModel):
    games: list[GameInstanceResponse]
    total: int
    page: int


class UserProfile(CamelModel):
    """A user record as returned to that user."""
    id: str
    name: str
    email: Optional[str] = None
    country: Optional[str] = None
    about: Optional[str] = None
    bggid: Optional[str] = None
    last_seen: int
    stars: int = 0
    ratings: dict[str, int] = Field(default_factory=dict)
    settings: dict[str, Any] = Field(default_factory=dict)
    starred: list[str] = Field(default_factory=list)
    tags: list[dict[str, Any]] = Field(default_factory=list)
    palettes: list[dict[str, Any]] = Field(default_factory=list)


class RatingEntry(BaseModel):
    userid: str
    rating: int
    games: int


# =============================================================================
# Challenges
# =============================================================================

class NewChallengeRequest(CamelModel):
    meta_game: str = Field(..., min_length=1)
    num_players: int = Field(2, ge=2)
    challengees: list[str] = Field(default_factory=list, description="Empty for an open challenge")
    variants: list[str] = Field(default_factory=list)
    clock_start: int = Field(172800, ge=0, description="Seconds on the clock at start")
    clock_inc: int = Field(0, ge=0)
    clock_max: int = Field(604800, ge=0)
    clock_hard: bool = False
    rated: bool = True
    no_explore: bool = False
    seating: Seating = Seating.RANDOM
    comment: Optional[str] = None


class ChallengeSchema(CamelModel):
    id: str
    meta_game: str
    num_players: int
    challenger: PlayerInfo
    challengees: list[PlayerInfo] = Field(default_factory=list)
    players: list[PlayerInfo] = Field(default_factory=list)
    variants: list[str] = Field(default_factory=list)
    seating: Seating
    clock_start: int
    clock_inc: int
    clock_max: int
    clock_hard: bool
    rated: bool
    no_explore: bool
    comment: Optional[str] = None
    standing: bool
    date_issued: int


class ChallengeCreated(CamelModel):
    challenge_id: str
    challenge: ChallengeSchema


class ChallengeList(CamelModel):
    challenges: list[ChallengeSchema]
    total: int


class RespondRequest(CamelModel):
    accept: bool


class ChallengeDecision(RespondRequest):
    """Challenge response in the legacy protocol, which names the challenge in the body."""
    challenge_id: str


class RespondResult(CamelModel):
    success: bool
    game_id: Optional[str] = None


class StandingChallengeSchema(CamelModel):
    id: str = Field(..., min_length=1)
    meta_game: str
    num_players: int = Field(2, ge=2)
    variants: list[str] = Field(default_factory=list)
    clock_start: int = 172800
    clock_inc: int = 0
    clock_max: int = 604800
    clock_hard: bool = False
    rated: bool = True
    no_explore: bool = False
    limit: int = Field(1, ge=1)
    sensitivity: StandingSensitivity = StandingSensitivity.META
    suspended: bool = False


class StandingUpdateRequest(CamelModel):
    standing: list[StandingChallengeSchema]


class StandingChallengeList(CamelModel):
    challenges: list[StandingChallengeSchema]


# =============================================================================
# Tournaments
# =============================================================================

class DivisionSchema(CamelModel):
    min_rating: int = Field(0, ge=0)
    max_players: int = Field(0, ge=0, description="0 means unlimited")
    started: bool = False


# Division numbers travel as JSON object keys.
DivisionKey = Annotated[str, StringConstraints(pattern=r"^[0-9]+$")]


class NewTournamentRequest(CamelModel):
    name: str = Field(..., min_length=1)
    meta_game: str = Field(..., min_length=1)
    variants: list[str] = Field(default_factory=list)
    clock_start: int = Field(172800, ge=0)
    clock_inc: int = Field(0, ge=0)
    clock_max: int = Field(604800, ge=0)
    clock_hard: bool = False
    no_explore: bool = False
    divisions: Optional[dict[DivisionKey, DivisionSchema]] = None


class TournamentPlayerSchema(CamelModel):
    player_id: str
    player_name: str
    division: int
    rating: int
    once: bool = False
    score: float = 0.0
    tiebreak: float = 0.0
    timeout: bool = False


class TournamentGameSchema(CamelModel):
    game_id: str
    round: int
    division: int
    player1: str
    player2: str
    state: TournamentGameState
    winner: list[str] = Field(default_factory=list)
    draw: bool = False


class TournamentSchema(CamelModel):
    id: str
    name: str
    meta_game: str
    status: Literal["waiting", "active", "completed"]
    variants: list[str] = Field(default_factory=list)
    clock_start: int
    clock_inc: int
    clock_max: int
    clock_hard: bool
    no_explore: bool
    date_created: int
    date_started: Optional[int] = None
    date_ended: Optional[int] = None
    started: bool
    archived: bool
    next_round: int
    divisions: dict[str, DivisionSchema]
    players: list[TournamentPlayerSchema] = Field(default_factory=list)
    games: list[TournamentGameSchema] = Field(default_factory=list)


class TournamentCreated(CamelModel):
    tournament_id: str
    tournament: TournamentSchema


class TournamentList(CamelModel):
    tournaments: list[TournamentSchema]
    total: int
    page: int
    page_size: int


class JoinTournamentRequest(CamelModel):
    once: bool = Field(False, description="Leave automatically after this tournament")


class LegacyJoinTournamentRequest(JoinTournamentRequest):
    tournament_id: str


class JoinTournamentResponse(CamelModel):
    success: bool
    division: int


class RoundResponse(CamelModel):
    round: int
    games: list[TournamentGameSchema]


class TournamentGameList(CamelModel):
    games: list[TournamentGameSchema]


class ReportResultRequest(CamelModel):
    game_id: str
    winner: list[str] = Field(default_factory=list, description="Empty for a draw")


class StandingSchema(CamelModel):
    rank: int
    player_id: str
    player_name: str
    division: int
    wins: int
    losses: int
    draws: int
    points: float


class StandingsResponse(CamelModel):
    standings: list[StandingSchema]


# =============================================================================
# Events
# =============================================================================

class NewEventRequest(CamelModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    date_start: int = Field(..., ge=0, description="Epoch milliseconds")


class EventSchema(CamelModel):
    id: str
    name: str
    description: str
    organizer: str
    date_start: int
    date_end: Optional[int] = None
    winner: list[str] = Field(default_factory=list)
    visible: bool
    status: Literal["upcoming", "ongoing", "completed"]


class EventList(CamelModel):
    events: list[EventSchema]
    total: int
    page: int
    page_size: int


class EventRegisterRequest(CamelModel):
    division: Optional[int] = Field(None, ge=1)
    seed: Optional[int] = Field(None, ge=1)


class EventPlayerSchema(CamelModel):
    player_id: str
    division: Optional[int] = None
    seed: Optional[int] = None


class EventPlayerList(CamelModel):
    players: list[EventPlayerSchema]


class Pairing(CamelModel):
    player1: str = Field(..., min_length=1)
    player2: str = Field(..., min_length=1)
    meta_game: str = Field(..., min_length=1)
    variants: list[str] = Field(default_factory=list)


class PairingsRequest(CamelModel):
    round: int = Field(..., ge=1)
    pairings: list[Pairing] = Field(..., min_length=1)


class CreatedPairing(CamelModel):
    game_id: str
    player1: str
    player2: str


class PairingsResponse(CamelModel):
    games: list[CreatedPairing]


class EventGameSchema(CamelModel):
    game_id: str
    round: int
    meta_game: str
    player1: str
    player2: str
    variants: list[str] = Field(default_factory=list)
    winner: list[str] = Field(default_factory=list)
    arbitrated: bool = False


class EventGameList(CamelModel):
    games: list[EventGameSchema]


class EventResultRequest(CamelModel):
    game_id: str
    winner: list[str]
    arbitrated: bool = False


class CloseEventRequest(CamelModel):
    winner: Optional[list[str]] = None


# =============================================================================
# Explorations
# =============================================================================

class SaveExplorationRequest(CamelModel):
    id: Optional[str] = Field(None, description="Existing exploration to overwrite")
    meta_game: str = Field(..., min_length=1)
    state: Any = Field(..., description="Opaque game-specific position")
    is_public: bool = False
    title: Optional[str] = None
    description: Optional[str] = None


class ExplorationSchema(CamelModel):
    id: str
    meta_game: str
    state: Any = None
    user_id: str
    user_name: Optional[str] = None
    is_public: bool
    title: Optional[str] = None
    description: Optional[str] = None
    published: bool
    date_created: int
    date_modified: int


class ExplorationList(CamelModel):
    explorations: list[ExplorationSchema]


class ShareResponse(CamelModel):
    share_id: str
    url: str


class PlaygroundSchema(CamelModel):
    user_id: str
    games: dict[str, Any] = Field(default_factory=dict)


class PlaygroundSaveRequest(CamelModel):
    state: Any = Field(..., description="Opaque game-specific position")


class NoteRequest(CamelModel):
    note: str


class GameNoteSchema(CamelModel):
    game_id: str
    user_id: str
    note: str
    last_updated: int


class NoteResponse(CamelModel):
    note: Optional[GameNoteSchema] = None


class CommentRequest(CamelModel):
    comment: str = Field(..., min_length=1, max_length=4000)


class CommentSchema(CamelModel):
    user: str
    comment: str
    timestamp: int


class CommentList(CamelModel):
    comments: list[CommentSchema]


# =============================================================================
# Push Notifications and Settings
# =============================================================================

class PushKeys(CamelModel):
    p256dh: str
    auth: str


class PushSubscriptionSchema(CamelModel):
    endpoint: str = Field(..., min_length=1)
    keys: PushKeys
    expiration_time: Optional[int] = None


class PushTestRequest(CamelModel):
    title: str = "Test Notification"
    body: str = "This is a test push notification"
    data: Optional[Any] = None


class PushTestResponse(CamelModel):
    success: bool
    sent: int


class NotificationSettings(CamelModel):
    game_start: Optional[bool] = None
    game_end: Optional[bool] = None
    challenges: Optional[bool] = None
    yourturn: Optional[bool] = None
    tournament_start: Optional[bool] = None
    tournament_end: Optional[bool] = None


class NewSettingRequest(CamelModel):
    meta_game: Optional[str] = None
    setting: str = Field(..., min_length=1)
    value: Any


class NewProfileRequest(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    country: Optional[str] = None
    about: Optional[str] = None
    bggid: Optional[str] = None


class ToggleStarRequest(CamelModel):
    meta_game: str = Field(..., min_length=1)


class ToggleStarResponse(CamelModel):
    starred: bool


# =============================================================================
# Federation and Webhooks
# =============================================================================

class FederatedServerSchema(CamelModel):
    id: str
    name: str
    url: str
    status: ServerStatus
    games: list[str] = Field(default_factory=list)


class ServerList(CamelModel):
    servers: list[FederatedServerSchema]


class FederatedGameRequest(CamelModel):
    game_id: str = Field(..., min_length=1)
    local_player: Optional[str] = Field(None, description="Defaults to the caller")
    remote_player: str = Field(..., description="player@server")
    remote_server: str


class WebhookRequest(CamelModel):
    url: str = Field(..., pattern=r"^https?://", description="Delivery endpoint")
    events: list[WebhookEvent] = Field(..., min_length=1)
    secret: Optional[str] = Field(None, description="Shared secret for payload signing")


class WebhookSchema(CamelModel):
    id: str
    url: str
    events: list[WebhookEvent]
    created_at: str


class WebhookList(CamelModel):
    webhooks: list[WebhookSchema]


# =============================================================================
# Bot
# =============================================================================

class BotMoveRequest(CamelModel):
    game: str = Field(..., min_length=1)
    state: Any = None
    level: int = Field(5, ge=0, le=10)


class BotAlternative(CamelModel):
    move: str
    evaluation: float


class BotMoveResponse(CamelModel):
    move: str
    evaluation: float
    confidence: float
    alternatives: list[BotAlternative] = Field(default_factory=list)


class BotAnalyzeRequest(CamelModel):
    game: str = Field(..., min_length=1)
    state: Any = None
    depth: int = Field(10, ge=1, le=20)


class BotAnalysisResponse(CamelModel):
    best_move: str
    evaluation: float
    depth: int
    principal_variation: list[str] = Field(default_factory=list)
    threats: list[str] = Field(default_factory=list)


class BotGameRequest(CamelModel):
    game_id: str = Field(..., min_length=1)
    level: int = Field(5, ge=0, le=9)
    player_color: Literal["first", "second", "random"] = "random"
    time_control: Optional[TimeControlSchema] = None
    variants: list[str] = Field(default_factory=list)


class BotGameResponse(CamelModel):
    game_id: str
    instance_id: str
    player_color: Literal["first", "second"]


class BotGameSupport(CamelModel):
    game: str
    levels: int
    features: list[str]


class BotInfo(CamelModel):
    id: str
    name: str
    supported_games: list[BotGameSupport]
    description: str


class BotStats(CamelModel):
    total_games: int
    moves_suggested: int
    analyses: int
    level_distribution: dict[str, int] = Field(default_factory=dict)
    game_distribution: dict[str, int] = Field(default_factory=dict)


class BotPing(CamelModel):
    status: Literal["active"]
    timestamp: int


# =============================================================================
# Legacy Dispatchers
# =============================================================================

class AuthQueryRequest(CamelModel):
    query: str = Field(..., min_length=1)
    pars: dict[str, Any] = Field(default_factory=dict)


class SubmitMoveRequest(CamelModel):
    move: str = Field(..., min_length=1)
    game_id: str


class SubmitMoveResponse(CamelModel):
    success: bool
    game_over: bool
    winner: Optional[list[int]] = None


class NextGameResponse(CamelModel):
    game_id: Optional[str] = None
    meta_game: Optional[str] = None


class ProblemReport(CamelModel):
    type: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    details: Optional[Any] = None


class ProblemReportResponse(CamelModel):
    success: bool
    id: str


class ChallengeRef(CamelModel):
    id: str = Field(..., min_length=1)


class TournamentRef(CamelModel):
    tournament_id: str = Field(..., min_length=1)


class EventRef(CamelModel):
    event_id: str = Field(..., min_length=1)


class LegacyEventRegisterRequest(EventRegisterRequest):
    event_id: str = Field(..., min_length=1)


class LegacyNoteRequest(NoteRequest):
    game_id: str = Field(..., min_length=1)


class LegacyCommentRequest(CommentRequest):
    id: str = Field(..., min_length=1, description="Game id")


class LegacyPlaygroundRequest(PlaygroundSaveRequest):
    meta_game: str = Field(..., min_length=1)
