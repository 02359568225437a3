"""
Mock services - In-memory implementations of every service interface.

Nothing here is persisted. Each service owns its own stores; there is no
cross-service transaction.
"""

from .bot import MockBotService
from .challenges import MockChallengeService
from .events import MockEventService
from .explorations import MockExplorationService
from .federation import MockFederationService
from .games import MockGameService
from .tournaments import MockTournamentService
from .users import MockUserService
from .webhooks import MockWebhookService

__all__ = [
    "MockBotService",
    "MockChallengeService",
    "MockEventService",
    "MockExplorationService",
    "MockFederationService",
    "MockGameService",
    "MockTournamentService",
    "MockUserService",
    "MockWebhookService",
]
