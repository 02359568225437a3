"""Challenge routes - directed, open and standing challenges."""

from typing import Literal, Optional

from fastapi import APIRouter, Query

from ...services.models import StandingChallenge
from ..auth import ActingUser
from ..deps import Services
from ..schemas import (
    ChallengeCreated,
    ChallengeList,
    ChallengeSchema,
    ErrorResponse,
    NewChallengeRequest,
    RespondRequest,
    RespondResult,
    StandingChallengeList,
    StandingUpdateRequest,
    SuccessResponse,
)
from ..workflows import issue_challenge, respond_to_challenge

router = APIRouter(tags=["Challenges"])

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Challenge not found"}}


@router.post(
    "/challenges",
    status_code=201,
    response_model=ChallengeCreated,
    responses={400: {"model": ErrorResponse}},
    summary="Issue a challenge",
)
async def create_challenge(body: NewChallengeRequest, services: Services, user_id: ActingUser):
    challenge = await issue_challenge(services, user_id, body)
    return {"challenge_id": challenge.id, "challenge": challenge}


@router.get(
    "/challenges",
    response_model=ChallengeList,
    summary="List pending challenges",
)
async def list_challenges(
    services: Services,
    user_id: ActingUser,
    status: Literal["pending"] = "pending",
    meta_game: Optional[str] = Query(None, alias="metaGame"),
    mine: bool = Query(False, description="Only challenges involving the caller"),
):
    challenges = await services.challenge.list_challenges(
        meta_game=meta_game, user_id=user_id if mine else None
    )
    return {"challenges": challenges, "total": len(challenges)}


@router.get(
    "/challenges/{challenge_id}",
    response_model=ChallengeSchema,
    responses=NOT_FOUND,
    summary="Get challenge details",
)
async def get_challenge(challenge_id: str, services: Services):
    return await services.challenge.get_challenge(challenge_id)


@router.post(
    "/challenges/{challenge_id}/respond",
    response_model=RespondResult,
    responses={
        **NOT_FOUND,
        400: {"model": ErrorResponse, "description": "Already accepted"},
        403: {"model": ErrorResponse, "description": "Not invited"},
    },
    summary="Accept or decline a challenge",
)
async def respond(challenge_id: str, body: RespondRequest, services: Services, user_id: ActingUser):
    game_id = await respond_to_challenge(services, challenge_id, user_id, body.accept)
    return RespondResult(success=True, game_id=game_id)


@router.delete(
    "/challenges/{challenge_id}",
    response_model=SuccessResponse,
    responses={**NOT_FOUND, 403: {"model": ErrorResponse, "description": "Not the challenger"}},
    summary="Revoke a challenge",
)
async def revoke(challenge_id: str, services: Services, user_id: ActingUser):
    await services.challenge.revoke_challenge(challenge_id, user_id)
    return SuccessResponse(success=True)


# =============================================================================
# Standing challenges
# =============================================================================

@router.get(
    "/standing-challenges",
    response_model=StandingChallengeList,
    summary="List active standing challenges",
)
async def list_standing(
    services: Services,
    user_id: ActingUser,
    meta_game: Optional[str] = Query(None, alias="metaGame"),
    mine: bool = Query(False, description="The caller's own list, suspended entries included"),
):
    if mine:
        standing = await services.challenge.get_standing_challenges(user_id)
        if meta_game is not None:
            standing = [s for s in standing if s.meta_game == meta_game]
        return {"challenges": standing}
    return {"challenges": await services.challenge.list_standing_challenges(meta_game)}


@router.put(
    "/standing-challenges",
    response_model=SuccessResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Replace the caller's standing challenges",
)
async def update_standing(body: StandingUpdateRequest, services: Services, user_id: ActingUser):
    await services.challenge.update_standing_challenges(
        user_id, [StandingChallenge(**entry.model_dump()) for entry in body.standing]
    )
    return SuccessResponse(success=True)
