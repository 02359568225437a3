"""
Legacy dispatchers - The ``query`` / ``authQuery`` protocol of older clients.

Both endpoints name an operation in a single field and carry its parameters
alongside: ``GET /query?query=<name>&...`` for public reads and
``POST /authQuery`` with ``{"query": <name>, "pars": {...}}`` for operations
on behalf of the caller. Each handler validates its parameters with the same
model as the equivalent REST route and delegates to the services, so both
surfaces behave identically.

Handlers return pydantic models (or lists and dicts of them), which FastAPI
serializes by alias.
"""

from typing import Any, Awaitable, Callable, Optional, TypeVar
import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

from ...services.models import GameStatus, StandingChallenge, new_id
from ..auth import OptionalUser, RequiredUser, require_bearer
from ..deps import Services
from ..errors import APIError
from ..schemas import (
    AuthQueryRequest,
    BotMoveResponse,
    ChallengeDecision,
    ChallengeRef,
    ChallengeSchema,
    CommentSchema,
    ErrorCode,
    ErrorResponse,
    EventPlayerSchema,
    EventRef,
    ExplorationSchema,
    GameInstanceResponse,
    GameMetaInfo,
    GameNoteSchema,
    GameStateResponse,
    LegacyCommentRequest,
    LegacyEventRegisterRequest,
    LegacyJoinTournamentRequest,
    LegacyNoteRequest,
    LegacyPlaygroundRequest,
    NewChallengeRequest,
    NewEventRequest,
    NewProfileRequest,
    NewSettingRequest,
    NewTournamentRequest,
    NextGameResponse,
    PlayerInfo,
    PlaygroundSchema,
    ProblemReport,
    ProblemReportResponse,
    PushSubscriptionSchema,
    RatingEntry,
    RespondResult,
    SaveExplorationRequest,
    StandingChallengeSchema,
    StandingUpdateRequest,
    SubmitMoveRequest,
    SubmitMoveResponse,
    SuccessResponse,
    ToggleStarRequest,
    ToggleStarResponse,
    TournamentRef,
    UserProfile,
)
from ..workflows import (
    create_tournament_from,
    issue_challenge,
    join_tournament_as,
    next_game_for,
    respond_to_challenge,
)
from .events import event_out
from .explorations import save_for
from .push import to_subscription
from .tournaments import tournament_out

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

QueryHandler = Callable[[Any, dict[str, str], Optional[str]], Awaitable[Any]]
AuthHandler = Callable[[Any, dict[str, Any], str], Awaitable[Any]]

QUERIES: dict[str, QueryHandler] = {}
AUTH_QUERIES: dict[str, AuthHandler] = {}

router = APIRouter(tags=["Legacy"])
auth_router = APIRouter(
    tags=["Legacy"],
    dependencies=[Depends(require_bearer)],
    responses={401: {"model": ErrorResponse, "description": "Unauthorized"}},
)

DISPATCH_ERRORS = {400: {"model": ErrorResponse, "description": "Unknown query or invalid parameters"}}


def public_query(name: str):
    def register(handler: QueryHandler) -> QueryHandler:
        QUERIES[name] = handler
        return handler
    return register


def auth_query(name: str):
    def register(handler: AuthHandler) -> AuthHandler:
        AUTH_QUERIES[name] = handler
        return handler
    return register


def parse_pars(model: type[M], pars: dict[str, Any]) -> M:
    """Validate dispatcher parameters, reporting failures like a bad request body."""
    try:
        return model.model_validate(pars)
    except ValidationError as exc:
        errors = [{**error, "loc": ("pars", *error["loc"])} for error in exc.errors()]
        raise RequestValidationError(errors) from exc


def required(params: dict[str, str], name: str) -> str:
    value = params.get(name)
    if not value:
        raise APIError(
            400,
            ErrorCode.VALIDATION_ERROR.value,
            f"Missing query parameter '{name}'",
            details={"parameter": name},
        )
    return value


def int_param(params: dict[str, str], name: str, default: int) -> int:
    value = params.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise APIError(
            400,
            ErrorCode.VALIDATION_ERROR.value,
            f"Query parameter '{name}' must be an integer",
            details={"parameter": name},
        ) from None


def unknown_query(name: str) -> APIError:
    return APIError(
        400,
        ErrorCode.UNKNOWN_QUERY.value,
        f"Unable to execute unknown query '{name}'",
        details={"query": name},
    )


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/query", response_model=None, responses=DISPATCH_ERRORS, summary="Legacy public query")
@router.get("/legacy/query", response_model=None, include_in_schema=False)
async def query(
    request: Request,
    services: Services,
    viewer_id: OptionalUser,
    name: str = Query(..., alias="query", min_length=1),
):
    handler = QUERIES.get(name)
    if handler is None:
        raise unknown_query(name)
    params = {k: v for k, v in request.query_params.items() if k != "query"}
    return await handler(services, params, viewer_id)


@auth_router.post("/authQuery", response_model=None, responses=DISPATCH_ERRORS, summary="Legacy authenticated query")
@auth_router.post("/legacy/authQuery", response_model=None, include_in_schema=False)
async def authenticated_query(body: AuthQueryRequest, services: Services, user_id: RequiredUser):
    handler = AUTH_QUERIES.get(body.query)
    if handler is None:
        raise unknown_query(body.query)
    logger.debug("authQuery %s for %s", body.query, user_id)
    return await handler(services, body.pars, user_id)


# =============================================================================
# Public queries
# =============================================================================

@public_query("user_names")
async def user_names(services, params, viewer_id):
    users = await services.user.list_users()
    return [PlayerInfo(id=u.id, name=u.name) for u in users if not u.anonymous]


@public_query("challenge_details")
async def challenge_details(services, params, viewer_id):
    challenge = await services.challenge.get_challenge(required(params, "id"))
    return ChallengeSchema.model_validate(challenge)


@public_query("standing_challenges")
async def standing_challenges(services, params, viewer_id):
    standing = await services.challenge.list_standing_challenges(params.get("metaGame"))
    return [StandingChallengeSchema.model_validate(s) for s in standing]


@public_query("games")
async def games(services, params, viewer_id):
    meta_game = required(params, "metaGame")
    kind = params.get("type", "current")
    if kind not in ("current", "completed"):
        raise APIError(
            400,
            ErrorCode.VALIDATION_ERROR.value,
            "Query parameter 'type' must be 'current' or 'completed'",
            details={"parameter": "type"},
        )
    instances = await services.game.list_game_instances(game_id=meta_game)
    if kind == "current":
        instances = [g for g in instances if g.state == GameStatus.ACTIVE]
    else:
        instances = [g for g in instances if g.is_over]
    return [GameInstanceResponse.model_validate(g) for g in instances]


@public_query("ratings")
async def ratings(services, params, viewer_id):
    entries = await services.user.get_ratings(required(params, "metaGame"))
    return [RatingEntry.model_validate(entry) for entry in entries]


@public_query("meta_games")
async def meta_games(services, params, viewer_id):
    catalog = await services.game.list_games()
    return {
        game.id: GameMetaInfo(
            id=game.id,
            name=game.name,
            description=game.description,
            urls=game.urls,
            people=game.people,
            flags=game.flags,
            categories=game.categories,
            mechanics=game.mechanics,
            variants=[{"name": variant} for variant in game.variants],
        )
        for game in catalog
    }


@public_query("get_game")
async def get_game(services, params, viewer_id):
    instance = await services.game.get_game_instance(required(params, "id"))
    return GameStateResponse.model_validate(instance)


@public_query("get_public_exploration")
async def get_public_exploration(services, params, viewer_id):
    exploration = await services.exploration.get_exploration(required(params, "id"))
    return ExplorationSchema.model_validate(exploration)


@public_query("bot_move")
async def bot_move(services, params, viewer_id):
    move = await services.bot.suggest_move(
        required(params, "game"),
        params.get("state"),
        int_param(params, "level", 5),
    )
    return BotMoveResponse.model_validate(move)


@public_query("get_tournaments")
async def get_tournaments(services, params, viewer_id):
    tournaments = await services.tournament.list_tournaments(
        status=params.get("status", "all"), meta_game=params.get("metaGame")
    )
    return [tournament_out(t) for t in tournaments]


@public_query("get_tournament")
async def get_tournament(services, params, viewer_id):
    return tournament_out(await services.tournament.get_tournament(required(params, "tournamentId")))


@public_query("get_events")
async def get_events(services, params, viewer_id):
    events = await services.event.list_events(status=params.get("status", "upcoming"))
    return [event_out(e) for e in events]


@public_query("get_event")
async def get_event(services, params, viewer_id):
    return event_out(await services.event.get_event(required(params, "eventId"), viewer_id))


@public_query("report_problem")
async def report_problem(services, params, viewer_id):
    report = parse_pars(ProblemReport, params)
    report_id = new_id()
    logger.warning(
        "Problem report %s from %s [%s]: %s",
        report_id, viewer_id or "anonymous", report.type, report.message,
    )
    return ProblemReportResponse(success=True, id=report_id)


# =============================================================================
# Authenticated queries
# =============================================================================

@auth_query("me")
async def me(services, pars, user_id):
    return UserProfile.model_validate(await services.user.get_or_create_user(user_id))


@auth_query("next_game")
async def next_game(services, pars, user_id):
    game = await next_game_for(services, user_id)
    if game is None:
        return NextGameResponse()
    return NextGameResponse(game_id=game.instance_id, meta_game=game.game_id)


@auth_query("my_settings")
async def my_settings(services, pars, user_id):
    return await services.user.get_settings(user_id)


@auth_query("new_setting")
async def new_setting(services, pars, user_id):
    body = parse_pars(NewSettingRequest, pars)
    return await services.user.update_setting(user_id, body.setting, body.value, meta_game=body.meta_game)


@auth_query("new_profile")
async def new_profile(services, pars, user_id):
    body = parse_pars(NewProfileRequest, pars)
    user = await services.user.update_profile(user_id, body.model_dump(exclude_none=True))
    return UserProfile.model_validate(user)


@auth_query("save_push")
async def save_push(services, pars, user_id):
    body = parse_pars(PushSubscriptionSchema, pars)
    await services.user.save_push_subscription(user_id, to_subscription(body))
    return SuccessResponse(success=True)


@auth_query("new_challenge")
async def new_challenge(services, pars, user_id):
    challenge = await issue_challenge(services, user_id, parse_pars(NewChallengeRequest, pars))
    return {"challengeId": challenge.id}


@auth_query("challenge_response")
async def challenge_response(services, pars, user_id):
    body = parse_pars(ChallengeDecision, pars)
    game_id = await respond_to_challenge(services, body.challenge_id, user_id, body.accept)
    return RespondResult(success=True, game_id=game_id)


@auth_query("challenge_revoke")
async def challenge_revoke(services, pars, user_id):
    body = parse_pars(ChallengeRef, pars)
    await services.challenge.revoke_challenge(body.id, user_id)
    return SuccessResponse(success=True)


@auth_query("update_standing")
async def update_standing(services, pars, user_id):
    body = parse_pars(StandingUpdateRequest, pars)
    await services.challenge.update_standing_challenges(
        user_id, [StandingChallenge(**entry.model_dump()) for entry in body.standing]
    )
    return SuccessResponse(success=True)


@auth_query("submit_move")
async def submit_move(services, pars, user_id):
    body = parse_pars(SubmitMoveRequest, pars)
    instance = await services.game.make_move(body.game_id, user_id, body.move)
    return SubmitMoveResponse(
        success=True,
        game_over=instance.is_over,
        winner=instance.winners or None,
    )


@auth_query("update_note")
async def update_note(services, pars, user_id):
    body = parse_pars(LegacyNoteRequest, pars)
    return GameNoteSchema.model_validate(await services.exploration.save_note(body.game_id, user_id, body.note))


@auth_query("submit_comment")
async def submit_comment(services, pars, user_id):
    body = parse_pars(LegacyCommentRequest, pars)
    return CommentSchema.model_validate(await services.exploration.add_comment(body.id, user_id, body.comment))


@auth_query("save_exploration")
async def save_exploration(services, pars, user_id):
    exploration = await save_for(services, user_id, parse_pars(SaveExplorationRequest, pars))
    return {"explorationId": exploration.id}


@auth_query("get_playground")
async def get_playground(services, pars, user_id):
    return PlaygroundSchema.model_validate(await services.exploration.get_playground(user_id))


@auth_query("new_playground")
async def new_playground(services, pars, user_id):
    body = parse_pars(LegacyPlaygroundRequest, pars)
    playground = await services.exploration.save_playground(user_id, body.meta_game, body.state)
    return PlaygroundSchema.model_validate(playground)


@auth_query("reset_playground")
async def reset_playground(services, pars, user_id):
    await services.exploration.clear_playground(user_id)
    return SuccessResponse(success=True)


@auth_query("toggle_star")
async def toggle_star(services, pars, user_id):
    body = parse_pars(ToggleStarRequest, pars)
    return ToggleStarResponse(starred=await services.user.toggle_star(user_id, body.meta_game))


@auth_query("new_tournament")
async def new_tournament(services, pars, user_id):
    tournament = await create_tournament_from(services, parse_pars(NewTournamentRequest, pars))
    return {"tournamentId": tournament.id}


@auth_query("join_tournament")
async def join_tournament(services, pars, user_id):
    body = parse_pars(LegacyJoinTournamentRequest, pars)
    await join_tournament_as(services, body.tournament_id, user_id, once=body.once)
    return SuccessResponse(success=True)


@auth_query("withdraw_tournament")
async def withdraw_tournament(services, pars, user_id):
    body = parse_pars(TournamentRef, pars)
    await services.tournament.withdraw_from_tournament(body.tournament_id, user_id)
    return SuccessResponse(success=True)


@auth_query("event_create")
async def event_create(services, pars, user_id):
    body = parse_pars(NewEventRequest, pars)
    event = await services.event.create_event(user_id, body.name, body.description, body.date_start)
    return {"eventId": event.id}


@auth_query("event_publish")
async def event_publish(services, pars, user_id):
    body = parse_pars(EventRef, pars)
    return event_out(await services.event.publish_event(body.event_id, user_id))


@auth_query("event_register")
async def event_register(services, pars, user_id):
    body = parse_pars(LegacyEventRegisterRequest, pars)
    player = await services.event.register_player(body.event_id, user_id, body.division, body.seed)
    return EventPlayerSchema.model_validate(player)


@auth_query("event_withdraw")
async def event_withdraw(services, pars, user_id):
    body = parse_pars(EventRef, pars)
    await services.event.withdraw_player(body.event_id, user_id)
    return SuccessResponse(success=True)
