"""
Game instance routes - create, inspect and play games.

Every route in this group requires a known bearer token. The acting player
for moves, resignations and draws is the authenticated identity.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from ...services.models import PlayerRef, TimeControl
from ..auth import OptionalUser, RequiredUser, require_bearer
from ..deps import Services
from ..schemas import (
    CreateGameRequest,
    ErrorResponse,
    GameInstanceResponse,
    GameStateResponse,
    LegalMovesResponse,
    MoveDetail,
    MoveRequest,
    MoveResponse,
    RenderFormat,
    RenderResponse,
)

router = APIRouter(
    tags=["Game Instances"],
    dependencies=[Depends(require_bearer)],
    responses={401: {"model": ErrorResponse, "description": "Unauthorized"}},
)

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Game instance not found"}}


@router.post(
    "/game-instances",
    status_code=201,
    response_model=GameInstanceResponse,
    responses={400: {"model": ErrorResponse, "description": "Bad request"}},
    summary="Create new game instance",
)
async def create_game_instance(body: CreateGameRequest, services: Services):
    time_control = None
    if body.time_control is not None:
        time_control = TimeControl(
            type=body.time_control.type,
            initial=body.time_control.initial,
            increment=body.time_control.increment,
        )
    return await services.game.create_game_instance(
        body.game_id,
        [PlayerRef(id=p.id, name=p.name) for p in body.players],
        variant=body.variant,
        time_control=time_control,
        metadata=body.metadata,
    )


@router.get(
    "/game-instances/{instance_id}",
    response_model=GameStateResponse,
    responses=NOT_FOUND,
    summary="Get game state",
)
async def get_game_state(instance_id: UUID, services: Services):
    return await services.game.get_game_instance(str(instance_id))


@router.post(
    "/game-instances/{instance_id}/moves",
    response_model=MoveResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid move"},
        403: {"model": ErrorResponse, "description": "Not your turn"},
        **NOT_FOUND,
    },
    summary="Make a move",
)
async def make_move(instance_id: UUID, body: MoveRequest, services: Services, user_id: OptionalUser):
    instance = await services.game.make_move(str(instance_id), user_id or body.player_id, body.notation)
    return MoveResponse(
        success=True,
        game_state=instance.game_state,
        game_over=instance.is_over,
        winners=instance.winners if instance.is_over else None,
        legal_moves=await services.game.get_legal_moves(instance.instance_id),
    )


@router.get(
    "/game-instances/{instance_id}/legal-moves",
    response_model=LegalMovesResponse,
    responses=NOT_FOUND,
    summary="Get legal moves",
)
async def get_legal_moves(instance_id: UUID, services: Services):
    moves = await services.game.get_legal_moves(str(instance_id))
    return LegalMovesResponse(moves=[MoveDetail(notation=m) for m in moves], count=len(moves))


@router.get(
    "/game-instances/{instance_id}/render",
    response_model=RenderResponse,
    responses={**NOT_FOUND, 501: {"model": ErrorResponse, "description": "Format not available"}},
    summary="Render game state",
)
async def render_game(
    instance_id: UUID,
    services: Services,
    format: RenderFormat = RenderFormat.SVG,
    size: int = Query(800, ge=16, le=4096),
    style: Optional[str] = None,
):
    return await services.game.render(str(instance_id), format.value, size, style)


@router.post(
    "/game-instances/{instance_id}/resign",
    response_model=GameStateResponse,
    responses={**NOT_FOUND, 403: {"model": ErrorResponse}},
    summary="Resign the game",
)
async def resign(instance_id: UUID, services: Services, user_id: RequiredUser):
    return await services.game.resign(str(instance_id), user_id)


@router.post(
    "/game-instances/{instance_id}/draw-offer",
    response_model=GameStateResponse,
    responses={**NOT_FOUND, 403: {"model": ErrorResponse}},
    summary="Offer a draw",
)
async def offer_draw(instance_id: UUID, services: Services, user_id: RequiredUser):
    return await services.game.offer_draw(str(instance_id), user_id)


@router.post(
    "/game-instances/{instance_id}/draw-accept",
    response_model=GameStateResponse,
    responses={**NOT_FOUND, 400: {"model": ErrorResponse, "description": "No pending draw offer"}},
    summary="Accept a pending draw offer",
)
async def accept_draw(instance_id: UUID, services: Services, user_id: RequiredUser):
    return await services.game.accept_draw(str(instance_id), user_id)
