"""Player routes - public profiles and game history."""

from typing import Literal, Optional

from fastapi import APIRouter, Query

from ...services.errors import NotFoundError
from ...services.models import GameStatus
from ..deps import Page, PageSize, Services, paginate
from ..schemas import ErrorResponse, PlayerGameList, PlayerProfile, PlayerStats

router = APIRouter(tags=["Players"])


async def _load_player(services, player_id: str):
    try:
        return await services.user.get_user(player_id)
    except NotFoundError as exc:
        raise NotFoundError(f"Player {player_id} not found", code="PLAYER_NOT_FOUND") from exc


@router.get(
    "/players/{player_id}",
    response_model=PlayerProfile,
    responses={404: {"model": ErrorResponse, "description": "Player not found"}},
    summary="Get player profile",
)
async def get_player(player_id: str, services: Services):
    user = await _load_player(services, player_id)
    return PlayerProfile(
        id=user.id,
        name=user.name,
        country=user.country,
        rating=user.ratings,
        stats=PlayerStats(games_played=user.games_played, win_rate=user.win_rate),
    )


@router.get(
    "/players/{player_id}/games",
    response_model=PlayerGameList,
    responses={404: {"model": ErrorResponse, "description": "Player not found"}},
    summary="List a player's games",
)
async def list_player_games(
    player_id: str,
    services: Services,
    status: Literal["active", "completed", "all"] = "all",
    game_id: Optional[str] = Query(None, alias="gameId"),
    page: Page = 1,
    page_size: PageSize = 20,
):
    await _load_player(services, player_id)
    games = await services.game.list_game_instances(
        player_id=player_id,
        status=None if status == "all" else GameStatus(status),
        game_id=game_id,
    )
    games.sort(key=lambda g: g.created_at, reverse=True)
    return {"games": paginate(games, page, page_size), "total": len(games), "page": page}
