"""Federation routes - known servers and games hosted remotely."""

from fastapi import APIRouter

from ..auth import ActingUser
from ..deps import Services
from ..schemas import (
    ErrorResponse,
    FederatedGameRequest,
    FederatedServerSchema,
    GameInstanceResponse,
    ServerList,
)
from ..workflows import start_federated_game

router = APIRouter(prefix="/federation", tags=["Federation"])


@router.get("/servers", response_model=ServerList, summary="List federated servers")
async def list_servers(services: Services):
    return {"servers": await services.federation.list_servers()}


@router.get(
    "/servers/{server_id}",
    response_model=FederatedServerSchema,
    responses={404: {"model": ErrorResponse, "description": "Unknown server"}},
    summary="Get a federated server",
)
async def get_server(server_id: str, services: Services):
    return await services.federation.get_server(server_id)


@router.post(
    "/games",
    status_code=201,
    response_model=GameInstanceResponse,
    responses={400: {"model": ErrorResponse, "description": "Remote server refused the game"}},
    summary="Start a game with a remote player",
)
async def create_federated_game(body: FederatedGameRequest, services: Services, user_id: ActingUser):
    instance, _ = await start_federated_game(services, user_id, body)
    return instance
