"""Catalog routes - public game listing and details."""

from typing import Optional

from fastapi import APIRouter, Query

from ..deps import Page, PageSize, Services, paginate
from ..schemas import ErrorResponse, GameDetails, GameList

router = APIRouter(tags=["Games"])


@router.get(
    "/games",
    response_model=GameList,
    summary="List available games",
)
async def list_games(
    services: Services,
    page: Page = 1,
    page_size: PageSize = 20,
    tag: Optional[str] = Query(None, description="Only games carrying this tag (case-insensitive)"),
):
    games = await services.game.list_games(tag=tag)
    return {
        "games": paginate(games, page, page_size),
        "total": len(games),
        "page": page,
        "page_size": page_size,
    }


@router.get(
    "/games/{game_id}",
    response_model=GameDetails,
    responses={404: {"model": ErrorResponse, "description": "Game not found"}},
    summary="Get game details",
)
async def get_game(game_id: str, services: Services):
    return await services.game.get_game(game_id)
