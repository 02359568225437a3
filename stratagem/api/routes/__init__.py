"""
API routers, one module per resource group.

Every router is mounted under ``/v1`` by the application factory, in the
order listed in ``ROUTERS``.
"""

from . import (
    bot,
    challenges,
    events,
    explorations,
    federation,
    game_instances,
    games,
    players,
    push,
    query,
    tournaments,
    webhooks,
)

ROUTERS = [
    games.router,
    game_instances.router,
    players.router,
    challenges.router,
    tournaments.router,
    events.router,
    explorations.router,
    push.router,
    federation.router,
    webhooks.router,
    bot.router,
    query.router,
    query.auth_router,
]

__all__ = ["ROUTERS"]
