"""
Workflows - Operations that span more than one service.

Each service owns its own store and there is no cross-service transaction,
so the order of the steps below is the consistency boundary:

    challenge acceptance   accept (challenge) -> create game -> remove challenge
    event pairings         check organizer -> create games -> record pairings
    federated game         ticket from remote server -> create local game
    bot game               create game -> record in bot stats
    tournament entry       rating lookup (user) -> join (tournament)

If a later step fails, earlier steps stay applied. For a filled challenge
that means the acceptance is kept and the challenge remains listed.

Both the REST routes and the legacy ``authQuery`` dispatcher call these, so
the two surfaces cannot drift apart.
"""

from typing import Optional
import logging
import random

from ..services.errors import InvalidOperationError, NotSupportedError
from ..services.interfaces import FederatedGameTicket
from ..services.models import (
    Challenge,
    Division,
    EventGame,
    GameInstance,
    GameStatus,
    PlayerRef,
    Seating,
    TimeControl,
    TimeControlType,
    Tournament,
    TournamentPlayer,
)
from ..services.registry import ServiceContext
from .schemas import (
    BotGameRequest,
    FederatedGameRequest,
    NewChallengeRequest,
    NewTournamentRequest,
    PairingsRequest,
    TimeControlSchema,
)

logger = logging.getLogger(__name__)

BOT_USER_ID = "bot"


def _time_control(schema: Optional[TimeControlSchema]) -> Optional[TimeControl]:
    if schema is None:
        return None
    return TimeControl(type=schema.type, initial=schema.initial, increment=schema.increment)


# =============================================================================
# Challenges
# =============================================================================

async def issue_challenge(services: ServiceContext, user_id: str, body: NewChallengeRequest) -> Challenge:
    challenger = await services.user.get_or_create_user(user_id)
    challengees: list[PlayerRef] = []
    for challengee_id in body.challengees:
        user = await services.user.find_user(challengee_id)
        if user is None:
            raise InvalidOperationError(
                f"Unknown player {challengee_id}",
                code="VALIDATION_ERROR",
                details={"challengee": challengee_id},
            )
        challengees.append(user.ref())

    challenge = await services.challenge.create_challenge(
        challenger.ref(),
        challengees,
        body.meta_game,
        body.num_players,
        variants=list(body.variants),
        seating=body.seating,
        clock_start=body.clock_start,
        clock_inc=body.clock_inc,
        clock_max=body.clock_max,
        clock_hard=body.clock_hard,
        rated=body.rated,
        no_explore=body.no_explore,
        comment=body.comment,
    )
    logger.info("Challenge %s issued by %s for %s", challenge.id, user_id, body.meta_game)
    return challenge


async def start_game_from_challenge(services: ServiceContext, challenge: Challenge) -> GameInstance:
    players = list(challenge.players)
    if challenge.seating == Seating.RANDOM:
        random.shuffle(players)
    instance = await services.game.create_game_instance(
        challenge.meta_game,
        players,
        variant=challenge.variants[0] if challenge.variants else None,
        time_control=TimeControl(
            type=TimeControlType.INCREMENT,
            initial=challenge.clock_start,
            increment=challenge.clock_inc,
        ),
        metadata={
            "challengeId": challenge.id,
            "variants": list(challenge.variants),
            "rated": challenge.rated,
            "clockMax": challenge.clock_max,
            "clockHard": challenge.clock_hard,
            "noExplore": challenge.no_explore,
        },
    )
    await services.challenge.remove_challenge(challenge.id)
    return instance


async def respond_to_challenge(
    services: ServiceContext, challenge_id: str, user_id: str, accept: bool
) -> Optional[str]:
    """Accept or decline. Returns the new game id when the last seat was filled."""
    if not accept:
        await services.challenge.decline_challenge(challenge_id, user_id)
        logger.info("Challenge %s declined by %s", challenge_id, user_id)
        return None

    user = await services.user.get_or_create_user(user_id)
    challenge = await services.challenge.accept_challenge(challenge_id, user.ref())
    if not challenge.is_full:
        return None

    instance = await start_game_from_challenge(services, challenge)
    logger.info("Challenge %s filled, started game %s", challenge_id, instance.instance_id)
    return instance.instance_id


# =============================================================================
# Games
# =============================================================================

async def next_game_for(services: ServiceContext, user_id: str) -> Optional[GameInstance]:
    """Oldest active game where it is ``user_id``'s turn."""
    games = await services.game.list_game_instances(player_id=user_id, status=GameStatus.ACTIVE)
    waiting = [g for g in games if g.seat_of(user_id) == g.current_player]
    waiting.sort(key=lambda g: g.created_at)
    return waiting[0] if waiting else None


async def create_event_pairings(
    services: ServiceContext, event_id: str, user_id: str, body: PairingsRequest
) -> list[EventGame]:
    event = await services.event.require_organizer(event_id, user_id)
    if event.date_end is not None:
        raise InvalidOperationError("Event is closed", code="EVENT_CLOSED")

    games: list[EventGame] = []
    for pairing in body.pairings:
        first = await services.user.get_or_create_user(pairing.player1)
        second = await services.user.get_or_create_user(pairing.player2)
        instance = await services.game.create_game_instance(
            pairing.meta_game,
            [first.ref(), second.ref()],
            variant=pairing.variants[0] if pairing.variants else None,
            event=event.id,
        )
        games.append(EventGame(
            game_id=instance.instance_id,
            round=body.round,
            meta_game=pairing.meta_game,
            player1=first.id,
            player2=second.id,
            variants=list(pairing.variants),
        ))
    return await services.event.add_games(event.id, user_id, games)


async def start_federated_game(
    services: ServiceContext, user_id: str, body: FederatedGameRequest
) -> tuple[GameInstance, FederatedGameTicket]:
    local_id = body.local_player or user_id
    ticket = await services.federation.request_game(
        body.game_id, local_id, body.remote_player, body.remote_server
    )
    local = await services.user.get_or_create_user(local_id)
    instance = await services.game.create_game_instance(
        body.game_id,
        [local.ref(), PlayerRef(id=body.remote_player, name=body.remote_player)],
        join_url=ticket.join_url,
        metadata={"remoteServer": ticket.server.id, "remoteGameId": ticket.remote_game_id},
    )
    logger.info(
        "Federated game %s on %s (remote id %s)",
        instance.instance_id, ticket.server.id, ticket.remote_game_id,
    )
    return instance, ticket


async def start_bot_game(
    services: ServiceContext, user_id: str, body: BotGameRequest
) -> tuple[GameInstance, str]:
    if body.game_id not in services.bot.supported_games:
        raise NotSupportedError(
            f"Game {body.game_id} is not supported by the bot", code="GAME_NOT_SUPPORTED"
        )
    color = body.player_color
    if color == "random":
        color = random.choice(["first", "second"])

    human = await services.user.get_or_create_user(user_id)
    bot = await services.user.get_or_create_user(BOT_USER_ID, "AI Bot")
    players = [human.ref(), bot.ref()] if color == "first" else [bot.ref(), human.ref()]
    instance = await services.game.create_game_instance(
        body.game_id,
        players,
        variant=body.variants[0] if body.variants else None,
        time_control=_time_control(body.time_control),
        metadata={"botLevel": body.level, "variants": list(body.variants)},
    )
    await services.bot.record_game(body.game_id, body.level)
    return instance, color


# =============================================================================
# Tournaments
# =============================================================================

DEFAULT_RATING = 1500


async def create_tournament_from(services: ServiceContext, body: NewTournamentRequest) -> Tournament:
    divisions = None
    if body.divisions:
        divisions = {key: Division(**division.model_dump()) for key, division in body.divisions.items()}
    return await services.tournament.create_tournament(
        body.name,
        body.meta_game,
        variants=list(body.variants),
        clock_start=body.clock_start,
        clock_inc=body.clock_inc,
        clock_max=body.clock_max,
        clock_hard=body.clock_hard,
        no_explore=body.no_explore,
        divisions=divisions,
    )


async def join_tournament_as(
    services: ServiceContext, tournament_id: str, user_id: str, once: bool = False
) -> TournamentPlayer:
    """Join with the user's rating for the tournament's game, used for division placement."""
    tournament = await services.tournament.get_tournament(tournament_id)
    user = await services.user.get_or_create_user(user_id)
    rating = user.ratings.get(tournament.meta_game, DEFAULT_RATING)
    return await services.tournament.join_tournament(tournament_id, user.ref(), rating, once=once)
