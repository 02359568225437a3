"""
Exploration routes - explorations, sharing, playground, notes and comments.

Reads use the caller's identity only when there is one: anonymous callers
see public explorations and nothing else.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from ...config import Settings
from ..auth import ActingUser, OptionalUser, RequiredUser
from ..deps import Services, get_settings
from ..schemas import (
    CommentList,
    CommentRequest,
    CommentSchema,
    ErrorResponse,
    ExplorationList,
    ExplorationSchema,
    GameNoteSchema,
    NoteRequest,
    NoteResponse,
    PlaygroundSaveRequest,
    PlaygroundSchema,
    SaveExplorationRequest,
    ShareResponse,
    SuccessResponse,
)

router = APIRouter(tags=["Explorations"])

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Exploration not found"}}
FORBIDDEN = {403: {"model": ErrorResponse, "description": "Not the owner"}}


async def save_for(services, user_id: str, body: SaveExplorationRequest):
    owner = await services.user.get_or_create_user(user_id)
    return await services.exploration.save_exploration(
        owner.ref(),
        body.meta_game,
        body.state,
        exploration_id=body.id,
        is_public=body.is_public,
        title=body.title,
        description=body.description,
    )


@router.post(
    "/explorations",
    status_code=201,
    response_model=ExplorationSchema,
    responses=FORBIDDEN,
    summary="Save an exploration",
)
async def save_exploration(body: SaveExplorationRequest, services: Services, user_id: ActingUser):
    return await save_for(services, user_id, body)


@router.get(
    "/explorations",
    response_model=ExplorationList,
    summary="List explorations",
)
async def list_explorations(
    services: Services,
    viewer_id: OptionalUser,
    meta_game: Optional[str] = Query(None, alias="metaGame"),
    user_id: Optional[str] = Query(None, alias="userId"),
    public_only: bool = Query(False, alias="publicOnly"),
):
    explorations = await services.exploration.list_explorations(
        viewer_id=viewer_id, meta_game=meta_game, user_id=user_id, public_only=public_only
    )
    return {"explorations": explorations}


@router.get(
    "/explorations/{exploration_id}",
    response_model=ExplorationSchema,
    responses={**NOT_FOUND, 403: {"model": ErrorResponse, "description": "Private exploration"}},
    summary="Get an exploration",
)
async def get_exploration(exploration_id: str, services: Services, viewer_id: OptionalUser):
    return await services.exploration.get_exploration(exploration_id, viewer_id)


@router.delete(
    "/explorations/{exploration_id}",
    response_model=SuccessResponse,
    responses={**NOT_FOUND, **FORBIDDEN, 401: {"model": ErrorResponse}},
    summary="Delete an exploration",
)
async def delete_exploration(exploration_id: str, services: Services, user_id: RequiredUser):
    await services.exploration.delete_exploration(exploration_id, user_id)
    return SuccessResponse(success=True)


@router.post(
    "/explorations/{exploration_id}/share",
    response_model=ShareResponse,
    responses={**NOT_FOUND, **FORBIDDEN},
    summary="Create a share link",
)
async def share_exploration(
    exploration_id: str,
    services: Services,
    user_id: ActingUser,
    settings: Annotated[Settings, Depends(get_settings)],
):
    share_id = await services.exploration.share_exploration(exploration_id, user_id)
    return ShareResponse(share_id=share_id, url=f"{settings.base_url.rstrip('/')}/shared/{share_id}")


@router.get(
    "/shared/{share_id}",
    response_model=ExplorationSchema,
    responses=NOT_FOUND,
    summary="Open a shared exploration",
)
async def get_shared(share_id: str, services: Services):
    return await services.exploration.get_shared_exploration(share_id)


# =============================================================================
# Playground
# =============================================================================

@router.get("/playground", response_model=PlaygroundSchema, summary="Get the caller's playground")
async def get_playground(services: Services, user_id: ActingUser):
    return await services.exploration.get_playground(user_id)


@router.put("/playground/{meta_game}", response_model=PlaygroundSchema, summary="Save a playground position")
async def save_playground(meta_game: str, body: PlaygroundSaveRequest, services: Services, user_id: ActingUser):
    return await services.exploration.save_playground(user_id, meta_game, body.state)


@router.delete("/playground", response_model=SuccessResponse, summary="Clear the caller's playground")
async def clear_playground(services: Services, user_id: ActingUser):
    await services.exploration.clear_playground(user_id)
    return SuccessResponse(success=True)


# =============================================================================
# Notes and comments
# =============================================================================

@router.get("/games/{game_id}/notes", response_model=NoteResponse, summary="Get the caller's private note")
async def get_note(game_id: str, services: Services, user_id: ActingUser):
    return {"note": await services.exploration.get_note(game_id, user_id)}


@router.put("/games/{game_id}/notes", response_model=GameNoteSchema, summary="Save the caller's private note")
async def save_note(game_id: str, body: NoteRequest, services: Services, user_id: ActingUser):
    return await services.exploration.save_note(game_id, user_id, body.note)


@router.get("/games/{game_id}/comments", response_model=CommentList, summary="List public comments")
async def list_comments(game_id: str, services: Services):
    return {"comments": await services.exploration.list_comments(game_id)}


@router.post(
    "/games/{game_id}/comments",
    status_code=201,
    response_model=CommentSchema,
    summary="Add a public comment",
)
async def add_comment(game_id: str, body: CommentRequest, services: Services, user_id: ActingUser):
    return await services.exploration.add_comment(game_id, user_id, body.comment)
