"""
Service Registry - Named service implementations composed at startup.

The registry is built once when the application is created:

    registry = ServiceRegistry()
    registry.register("game", MockGameService())
    ...
    services = registry.get_all()      # fails fast if anything is missing
    app.state.services = services

Routes receive the resulting ``ServiceContext`` through a dependency; there
is no module-level singleton, so tests can build as many independent
registries as they need.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any
import logging

from .errors import ServiceConfigurationError
from .interfaces import (
    BotService,
    ChallengeService,
    EventService,
    ExplorationService,
    FederationService,
    GameService,
    TournamentService,
    UserService,
    WebhookService,
)

logger = logging.getLogger(__name__)


REQUIRED_SERVICES: tuple[str, ...] = (
    "federation",
    "game",
    "user",
    "challenge",
    "tournament",
    "exploration",
    "event",
    "webhook",
    "bot",
)


@dataclass(frozen=True)
class ServiceContext:
    """Immutable bundle of every service a request handler may use."""
    federation: FederationService
    game: GameService
    user: UserService
    challenge: ChallengeService
    tournament: TournamentService
    exploration: ExplorationService
    event: EventService
    webhook: WebhookService
    bot: BotService


class ServiceRegistry:
    """
    Holds one implementation per logical service name.

    Usage:
        registry = ServiceRegistry()
        registry.register("user", MockUserService())
        user_service = registry.get("user")
        context = registry.get_all()
    """

    def __init__(self) -> None:
        self._services: dict[str, Any] = {}

    def register(self, name: str, implementation: Any) -> None:
        """Register (or replace) the implementation for a service name."""
        if name in self._services:
            logger.info("Replacing service %r with %s", name, type(implementation).__name__)
        self._services[name] = implementation

    def get(self, name: str) -> Any:
        """Return a registered implementation or raise ServiceConfigurationError."""
        try:
            return self._services[name]
        except KeyError:
            raise ServiceConfigurationError(
                f"Service {name!r} has not been registered"
            ) from None

    def has(self, name: str) -> bool:
        return name in self._services

    def missing(self) -> list[str]:
        """Required service names that are not registered yet."""
        return [name for name in REQUIRED_SERVICES if name not in self._services]

    def get_all(self) -> ServiceContext:
        """
        Resolve every required service into a ServiceContext.

        Raises:
            ServiceConfigurationError: listing the missing names and the full
                required set, when any required service is absent.
        """
        missing = self.missing()
        if missing:
            raise ServiceConfigurationError(
                f"Missing required services: {', '.join(missing)} "
                f"(required: {', '.join(REQUIRED_SERVICES)})"
            )
        return ServiceContext(**{name: self._services[name] for name in REQUIRED_SERVICES})

    def __contains__(self, name: str) -> bool:
        return self.has(name)


def build_mock_registry() -> ServiceRegistry:
    """Registry with every in-memory mock service registered."""
    from .mock import (
        MockBotService,
        MockChallengeService,
        MockEventService,
        MockExplorationService,
        MockFederationService,
        MockGameService,
        MockTournamentService,
        MockUserService,
        MockWebhookService,
    )

    registry = ServiceRegistry()
    registry.register("federation", MockFederationService())
    registry.register("game", MockGameService())
    registry.register("user", MockUserService())
    registry.register("challenge", MockChallengeService())
    registry.register("tournament", MockTournamentService())
    registry.register("exploration", MockExplorationService())
    registry.register("event", MockEventService())
    registry.register("webhook", MockWebhookService())
    registry.register("bot", MockBotService())
    return registry
