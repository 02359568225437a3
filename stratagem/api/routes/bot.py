"""Bot routes - move suggestions, analysis and games against the AI stub."""

from fastapi import APIRouter

from ...services.models import now_ms
from ..auth import ActingUser
from ..deps import Services
from ..schemas import (
    BotAnalysisResponse,
    BotAnalyzeRequest,
    BotGameRequest,
    BotGameResponse,
    BotInfo,
    BotMoveRequest,
    BotMoveResponse,
    BotPing,
    BotStats,
    ErrorResponse,
)
from ..workflows import start_bot_game

router = APIRouter(prefix="/bot", tags=["Bot"])

UNSUPPORTED = {501: {"model": ErrorResponse, "description": "Game not supported by the bot"}}


@router.post("/move", response_model=BotMoveResponse, responses=UNSUPPORTED, summary="Suggest a move")
async def suggest_move(body: BotMoveRequest, services: Services):
    return await services.bot.suggest_move(body.game, body.state, body.level)


@router.get("/info", response_model=BotInfo, summary="Describe the bot")
async def bot_info(services: Services):
    return await services.bot.info()


@router.post("/analyze", response_model=BotAnalysisResponse, responses=UNSUPPORTED, summary="Analyze a position")
async def analyze(body: BotAnalyzeRequest, services: Services):
    return await services.bot.analyze(body.game, body.state, body.depth)


@router.post(
    "/games",
    status_code=201,
    response_model=BotGameResponse,
    responses=UNSUPPORTED,
    summary="Create a game against the bot",
)
async def create_bot_game(body: BotGameRequest, services: Services, user_id: ActingUser):
    instance, color = await start_bot_game(services, user_id, body)
    return BotGameResponse(game_id=instance.game_id, instance_id=instance.instance_id, player_color=color)


@router.get("/stats", response_model=BotStats, summary="Bot statistics")
async def bot_stats(services: Services):
    return await services.bot.stats()


@router.post("/ping", response_model=BotPing, summary="Keep the bot awake")
async def ping():
    return BotPing(status="active", timestamp=now_ms())
