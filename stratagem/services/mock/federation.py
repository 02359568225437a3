"""
Mock federation service - Known servers and delegated game creation.

No network traffic happens: a request to an online server is answered with
a locally generated remote game id and join URL.
"""

from __future__ import annotations
from typing import Optional

from ..errors import InvalidOperationError, NotFoundError
from ..interfaces import FederatedGameTicket, FederationService
from ..models import FederatedServer, ServerStatus, new_id


def default_servers() -> list[FederatedServer]:
    return [
        FederatedServer(
            id="abstractplay",
            name="Abstract Play",
            url="https://play.abstractplay.com",
            status=ServerStatus.ONLINE,
            games=["chess", "go", "hex", "tic-tac-toe"],
        ),
        FederatedServer(
            id="boardgamearena",
            name="Board Game Arena",
            url="https://boardgamearena.com",
            status=ServerStatus.ONLINE,
            games=["chess", "go", "checkers"],
        ),
        FederatedServer(
            id="playdiplomacy",
            name="Play Diplomacy",
            url="https://www.playdiplomacy.com",
            status=ServerStatus.MAINTENANCE,
            games=["diplomacy"],
        ),
    ]


class MockFederationService(FederationService):
    """Static server directory."""

    def __init__(self, servers: Optional[list[FederatedServer]] = None):
        self._servers = {s.id: s for s in (servers if servers is not None else default_servers())}

    async def list_servers(self) -> list[FederatedServer]:
        return list(self._servers.values())

    async def get_server(self, server_id: str) -> FederatedServer:
        server = self._servers.get(server_id)
        if server is None:
            raise NotFoundError(f"Unknown server {server_id}", code="NOT_FOUND")
        return server

    async def request_game(
        self, game_id: str, local_player: str, remote_player: str, remote_server: str
    ) -> FederatedGameTicket:
        server = self._servers.get(remote_server)
        if server is None:
            raise InvalidOperationError(f"Unknown server {remote_server}", code="FEDERATION_ERROR")
        if server.status != ServerStatus.ONLINE:
            raise InvalidOperationError(
                f"Server {remote_server} is {server.status.value}", code="FEDERATION_ERROR"
            )
        if server.games and game_id not in server.games:
            raise InvalidOperationError(
                f"Server {remote_server} does not host {game_id}", code="FEDERATION_ERROR"
            )
        if "@" not in remote_player:
            raise InvalidOperationError(
                "Remote player must use the player@server format", code="FEDERATION_ERROR"
            )

        remote_game_id = new_id()
        return FederatedGameTicket(
            server=server,
            remote_game_id=remote_game_id,
            join_url=f"{server.url.rstrip('/')}/games/{game_id}/{remote_game_id}",
        )
