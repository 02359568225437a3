"""
Mock exploration service - Explorations, playground, notes and comments.

Visibility rules:
- A public exploration is readable by anyone.
- A private exploration is readable only by its owner, or by anyone holding
  a share id the owner generated.
- Only the owner can overwrite, delete or share an exploration.

Notes are private per (game, user); comments are public per game.
"""

from __future__ import annotations
from typing import Any, Optional
import base64
import binascii
import re

from ..errors import NotFoundError, PermissionDeniedError
from ..interfaces import ExplorationService
from ..models import Comment, Exploration, GameNote, PlayerRef, Playground, new_id, now_ms
from ..store import InMemoryStore, Store

SHARE_ID_RE = re.compile(r"[A-Za-z0-9_-]+")


def encode_share_id(exploration_id: str) -> str:
    """URL-safe base64 without padding."""
    return base64.urlsafe_b64encode(exploration_id.encode("utf-8")).rstrip(b"=").decode("ascii")


def decode_share_id(share_id: str) -> Optional[str]:
    """Inverse of encode_share_id; None unless share_id is exactly what it would produce."""
    if not SHARE_ID_RE.fullmatch(share_id):
        return None
    padded = share_id + "=" * (-len(share_id) % 4)
    try:
        exploration_id = base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")
    except (binascii.Error, UnicodeError):
        return None
    if encode_share_id(exploration_id) != share_id:
        return None
    return exploration_id


class MockExplorationService(ExplorationService):
    """In-memory explorations keyed by id; playgrounds, notes and comments keyed by owner/game."""

    def __init__(
        self,
        explorations: Optional[Store[Exploration]] = None,
        playgrounds: Optional[Store[Playground]] = None,
        notes: Optional[Store[GameNote]] = None,
        comments: Optional[Store[list[Comment]]] = None,
        shares: Optional[Store[str]] = None,
    ):
        self._explorations = explorations if explorations is not None else InMemoryStore("explorations")
        self._playgrounds = playgrounds if playgrounds is not None else InMemoryStore("playgrounds")
        self._notes = notes if notes is not None else InMemoryStore("game_notes")
        self._comments = comments if comments is not None else InMemoryStore("game_comments")
        self._shares = shares if shares is not None else InMemoryStore("exploration_shares")

    # =========================================================================
    # Explorations
    # =========================================================================

    async def save_exploration(
        self,
        owner: PlayerRef,
        meta_game: str,
        state: Any,
        exploration_id: Optional[str] = None,
        is_public: bool = False,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Exploration:
        existing = await self._explorations.get(exploration_id) if exploration_id else None
        if existing is not None:
            if existing.user_id != owner.id:
                raise PermissionDeniedError("Not authorized to update this exploration")
            existing.meta_game = meta_game
            existing.state = state
            existing.is_public = is_public
            existing.published = is_public
            existing.title = title
            existing.description = description
            existing.date_modified = now_ms()
            await self._explorations.put(existing.id, existing)
            return existing

        exploration = Exploration(
            id=exploration_id or new_id(),
            meta_game=meta_game,
            state=state,
            user_id=owner.id,
            user_name=owner.name,
            is_public=is_public,
            published=is_public,
            title=title,
            description=description,
        )
        await self._explorations.put(exploration.id, exploration)
        return exploration

    async def _load(self, exploration_id: str) -> Exploration:
        exploration = await self._explorations.get(exploration_id)
        if exploration is None:
            raise NotFoundError("Exploration not found", code="NOT_FOUND")
        return exploration

    async def get_exploration(self, exploration_id: str, viewer_id: Optional[str] = None) -> Exploration:
        exploration = await self._load(exploration_id)
        if not exploration.is_public and exploration.user_id != viewer_id:
            raise PermissionDeniedError("This exploration is private", code="ACCESS_DENIED")
        return exploration

    async def list_explorations(
        self,
        viewer_id: Optional[str] = None,
        meta_game: Optional[str] = None,
        user_id: Optional[str] = None,
        public_only: bool = False,
    ) -> list[Exploration]:
        def matches(exploration: Exploration) -> bool:
            if meta_game is not None and exploration.meta_game != meta_game:
                return False
            if user_id is not None and exploration.user_id != user_id:
                return False
            if exploration.is_public:
                return True
            return not public_only and viewer_id is not None and exploration.user_id == viewer_id

        explorations = await self._explorations.list(matches)
        return sorted(explorations, key=lambda e: e.date_modified, reverse=True)

    async def delete_exploration(self, exploration_id: str, user_id: str) -> None:
        exploration = await self._load(exploration_id)
        if exploration.user_id != user_id:
            raise PermissionDeniedError("Not authorized to delete this exploration")
        await self._explorations.delete(exploration.id)
        await self._shares.delete(exploration.id)

    async def share_exploration(self, exploration_id: str, user_id: str) -> str:
        exploration = await self._load(exploration_id)
        if exploration.user_id != user_id:
            raise PermissionDeniedError("Not authorized to share this exploration")
        await self._shares.put(exploration.id, exploration.id)
        return encode_share_id(exploration.id)

    async def get_shared_exploration(self, share_id: str) -> Exploration:
        exploration_id = decode_share_id(share_id)
        if exploration_id is None or not await self._shares.exists(exploration_id):
            raise NotFoundError("Shared exploration not found", code="NOT_FOUND")
        return await self._load(exploration_id)

    # =========================================================================
    # Playground
    # =========================================================================

    async def get_playground(self, user_id: str) -> Playground:
        playground = await self._playgrounds.get(user_id)
        return playground if playground is not None else Playground(user_id=user_id)

    async def save_playground(self, user_id: str, meta_game: str, state: Any) -> Playground:
        playground = await self.get_playground(user_id)
        playground.games[meta_game] = state
        await self._playgrounds.put(user_id, playground)
        return playground

    async def clear_playground(self, user_id: str) -> None:
        await self._playgrounds.delete(user_id)

    # =========================================================================
    # Notes and comments
    # =========================================================================

    async def get_note(self, game_id: str, user_id: str) -> Optional[GameNote]:
        return await self._notes.get(f"{game_id}:{user_id}")

    async def save_note(self, game_id: str, user_id: str, note: str) -> GameNote:
        record = GameNote(game_id=game_id, user_id=user_id, note=note)
        await self._notes.put(f"{game_id}:{user_id}", record)
        return record

    async def add_comment(self, game_id: str, user_id: str, comment: str) -> Comment:
        record = Comment(user=user_id, comment=comment)
        comments = await self._comments.get(game_id) or []
        comments.append(record)
        await self._comments.put(game_id, comments)
        return record

    async def list_comments(self, game_id: str) -> list[Comment]:
        return list(await self._comments.get(game_id) or [])
