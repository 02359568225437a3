"""
Event routes - organizer-managed events.

Events are created as drafts owned by the caller. Publishing, pairing,
reporting results and closing are restricted to the organizer; anyone can
register for a published event that is still open.
"""

from dataclasses import asdict
from typing import Literal, Optional

from fastapi import APIRouter, Query

from ...services.models import Event, now_ms
from ..auth import ActingUser, OptionalUser, RequiredUser
from ..deps import Page, PageSize, Services, paginate
from ..schemas import (
    CloseEventRequest,
    CreatedPairing,
    ErrorResponse,
    EventGameList,
    EventList,
    EventPlayerList,
    EventRegisterRequest,
    EventResultRequest,
    EventSchema,
    NewEventRequest,
    PairingsRequest,
    PairingsResponse,
    SuccessResponse,
)
from ..workflows import create_event_pairings

router = APIRouter(tags=["Events"])

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Event not found"}}
ORGANIZER_ONLY = {403: {"model": ErrorResponse, "description": "Only the organizer can do this"}}


def event_out(event: Event, now: Optional[int] = None) -> EventSchema:
    return EventSchema.model_validate({**asdict(event), "status": event.status(now or now_ms())})


@router.post(
    "/events",
    status_code=201,
    response_model=EventSchema,
    responses={400: {"model": ErrorResponse}},
    summary="Create a draft event",
)
async def create_event(body: NewEventRequest, services: Services, user_id: ActingUser):
    event = await services.event.create_event(user_id, body.name, body.description, body.date_start)
    return event_out(event)


@router.get(
    "/events",
    response_model=EventList,
    summary="List published events",
)
async def list_events(
    services: Services,
    status: Literal["upcoming", "ongoing", "completed", "all"] = "upcoming",
    organizer_id: Optional[str] = Query(None, alias="organizerId"),
    page: Page = 1,
    page_size: PageSize = 20,
):
    events = await services.event.list_events(status=status, organizer_id=organizer_id)
    now = now_ms()
    return EventList(
        events=[event_out(e, now) for e in paginate(events, page, page_size)],
        total=len(events),
        page=page,
        page_size=page_size,
    )


@router.get(
    "/events/{event_id}",
    response_model=EventSchema,
    responses=NOT_FOUND,
    summary="Get event details",
)
async def get_event(event_id: str, services: Services, viewer_id: OptionalUser):
    return event_out(await services.event.get_event(event_id, viewer_id))


@router.post(
    "/events/{event_id}/publish",
    response_model=EventSchema,
    responses={**NOT_FOUND, **ORGANIZER_ONLY},
    summary="Publish a draft event",
)
async def publish_event(event_id: str, services: Services, user_id: RequiredUser):
    return event_out(await services.event.publish_event(event_id, user_id))


@router.post(
    "/events/{event_id}/register",
    response_model=SuccessResponse,
    responses={**NOT_FOUND, 400: {"model": ErrorResponse, "description": "Already registered or closed"}},
    summary="Register for an event",
)
async def register(
    event_id: str, services: Services, user_id: ActingUser, body: Optional[EventRegisterRequest] = None
):
    body = body or EventRegisterRequest()
    await services.event.register_player(event_id, user_id, division=body.division, seed=body.seed)
    return SuccessResponse(success=True)


@router.post(
    "/events/{event_id}/withdraw",
    response_model=SuccessResponse,
    responses={**NOT_FOUND, 400: {"model": ErrorResponse, "description": "Not registered"}},
    summary="Withdraw from an event",
)
async def withdraw(event_id: str, services: Services, user_id: ActingUser):
    await services.event.withdraw_player(event_id, user_id)
    return SuccessResponse(success=True)


@router.get(
    "/events/{event_id}/players",
    response_model=EventPlayerList,
    responses=NOT_FOUND,
    summary="List registered players",
)
async def list_players(event_id: str, services: Services):
    return {"players": await services.event.list_players(event_id)}


@router.post(
    "/events/{event_id}/games",
    status_code=201,
    response_model=PairingsResponse,
    responses={**NOT_FOUND, **ORGANIZER_ONLY},
    summary="Create pairings for a round",
)
async def create_pairings(event_id: str, body: PairingsRequest, services: Services, user_id: RequiredUser):
    games = await create_event_pairings(services, event_id, user_id, body)
    return PairingsResponse(games=[
        CreatedPairing(game_id=g.game_id, player1=g.player1, player2=g.player2) for g in games
    ])


@router.get(
    "/events/{event_id}/games",
    response_model=EventGameList,
    responses=NOT_FOUND,
    summary="List event games",
)
async def list_games(
    event_id: str,
    services: Services,
    round: Optional[int] = Query(None, ge=1),
    player_id: Optional[str] = Query(None, alias="playerId"),
):
    return {"games": await services.event.list_games(event_id, round=round, player_id=player_id)}


@router.put(
    "/events/{event_id}/results",
    response_model=SuccessResponse,
    responses={**NOT_FOUND, **ORGANIZER_ONLY},
    summary="Report a game result",
)
async def report_result(event_id: str, body: EventResultRequest, services: Services, user_id: RequiredUser):
    await services.event.report_result(
        event_id, user_id, body.game_id, body.winner, arbitrated=body.arbitrated
    )
    return SuccessResponse(success=True)


@router.post(
    "/events/{event_id}/close",
    response_model=EventSchema,
    responses={**NOT_FOUND, **ORGANIZER_ONLY},
    summary="Close an event",
)
async def close_event(
    event_id: str, services: Services, user_id: RequiredUser, body: Optional[CloseEventRequest] = None
):
    winner = body.winner if body else None
    return event_out(await services.event.close_event(event_id, user_id, winner))
