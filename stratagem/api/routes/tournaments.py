"""Tournament routes - registration, rounds, results and standings."""

from typing import Literal, Optional

from fastapi import APIRouter, Query

from ..auth import ActingUser
from ..deps import Page, PageSize, Services, paginate
from ..schemas import (
    ErrorResponse,
    JoinTournamentRequest,
    JoinTournamentResponse,
    NewTournamentRequest,
    ReportResultRequest,
    RoundResponse,
    StandingsResponse,
    SuccessResponse,
    TournamentCreated,
    TournamentGameList,
    TournamentList,
    TournamentSchema,
)
from ..workflows import create_tournament_from, join_tournament_as

router = APIRouter(tags=["Tournaments"])

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Tournament not found"}}
BAD_STATE = {400: {"model": ErrorResponse, "description": "Not allowed in the tournament's current state"}}


def tournament_out(tournament) -> TournamentSchema:
    return TournamentSchema.model_validate(tournament)


@router.post(
    "/tournaments",
    status_code=201,
    response_model=TournamentCreated,
    responses={400: {"model": ErrorResponse}},
    summary="Create a tournament",
)
async def create_tournament(body: NewTournamentRequest, services: Services):
    tournament = await create_tournament_from(services, body)
    return TournamentCreated(tournament_id=tournament.id, tournament=tournament_out(tournament))


@router.get(
    "/tournaments",
    response_model=TournamentList,
    summary="List tournaments",
)
async def list_tournaments(
    services: Services,
    status: Literal["active", "waiting", "completed", "all"] = "active",
    meta_game: Optional[str] = Query(None, alias="metaGame"),
    page: Page = 1,
    page_size: PageSize = 20,
):
    tournaments = await services.tournament.list_tournaments(status=status, meta_game=meta_game)
    tournaments.sort(key=lambda t: t.date_created, reverse=True)
    return TournamentList(
        tournaments=[tournament_out(t) for t in paginate(tournaments, page, page_size)],
        total=len(tournaments),
        page=page,
        page_size=page_size,
    )


@router.get(
    "/tournaments/{tournament_id}",
    response_model=TournamentSchema,
    responses=NOT_FOUND,
    summary="Get tournament details",
)
async def get_tournament(tournament_id: str, services: Services):
    return tournament_out(await services.tournament.get_tournament(tournament_id))


@router.post(
    "/tournaments/{tournament_id}/join",
    response_model=JoinTournamentResponse,
    responses={**NOT_FOUND, **BAD_STATE},
    summary="Join a tournament",
)
async def join_tournament(
    tournament_id: str, services: Services, user_id: ActingUser, body: Optional[JoinTournamentRequest] = None
):
    entry = await join_tournament_as(services, tournament_id, user_id, once=body.once if body else False)
    return JoinTournamentResponse(success=True, division=entry.division)


@router.post(
    "/tournaments/{tournament_id}/withdraw",
    response_model=SuccessResponse,
    responses={**NOT_FOUND, **BAD_STATE},
    summary="Withdraw from a tournament",
)
async def withdraw(tournament_id: str, services: Services, user_id: ActingUser):
    await services.tournament.withdraw_from_tournament(tournament_id, user_id)
    return SuccessResponse(success=True)


@router.post(
    "/tournaments/{tournament_id}/start",
    response_model=TournamentSchema,
    responses={**NOT_FOUND, **BAD_STATE},
    summary="Start a tournament and pair round 1",
)
async def start_tournament(tournament_id: str, services: Services):
    return tournament_out(await services.tournament.start_tournament(tournament_id))


@router.post(
    "/tournaments/{tournament_id}/rounds",
    response_model=RoundResponse,
    responses={**NOT_FOUND, **BAD_STATE},
    summary="Pair the next round",
)
async def create_round(tournament_id: str, services: Services):
    games = await services.tournament.create_tournament_round(tournament_id)
    tournament = await services.tournament.get_tournament(tournament_id)
    return {"round": tournament.next_round - 1, "games": games}


@router.get(
    "/tournaments/{tournament_id}/games",
    response_model=TournamentGameList,
    responses=NOT_FOUND,
    summary="List tournament games",
)
async def list_games(
    tournament_id: str,
    services: Services,
    round: Optional[int] = Query(None, ge=1),
    player_id: Optional[str] = Query(None, alias="playerId"),
):
    games = await services.tournament.get_tournament_games(tournament_id, round=round, player_id=player_id)
    return {"games": games}


@router.put(
    "/tournaments/{tournament_id}/results",
    response_model=SuccessResponse,
    responses={**NOT_FOUND, **BAD_STATE},
    summary="Report a game result",
)
async def report_result(tournament_id: str, body: ReportResultRequest, services: Services):
    await services.tournament.report_result(tournament_id, body.game_id, body.winner)
    return SuccessResponse(success=True)


@router.get(
    "/tournaments/{tournament_id}/standings",
    response_model=StandingsResponse,
    responses=NOT_FOUND,
    summary="Get tournament standings",
)
async def get_standings(
    tournament_id: str, services: Services, division: Optional[int] = Query(None, ge=1)
):
    return {"standings": await services.tournament.get_tournament_standings(tournament_id, division)}


@router.post(
    "/tournaments/{tournament_id}/end",
    response_model=TournamentSchema,
    responses={**NOT_FOUND, **BAD_STATE},
    summary="End a tournament",
)
async def end_tournament(tournament_id: str, services: Services):
    return tournament_out(await services.tournament.end_tournament(tournament_id))


@router.post(
    "/tournaments/{tournament_id}/archive",
    response_model=TournamentSchema,
    responses={**NOT_FOUND, **BAD_STATE},
    summary="Archive an ended tournament",
)
async def archive_tournament(tournament_id: str, services: Services):
    return tournament_out(await services.tournament.archive_tournament(tournament_id))
