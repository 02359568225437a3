"""
Mock user service - Profiles, settings, stars and push subscriptions.
"""

from __future__ import annotations
from typing import Any, Optional
import copy

from ..errors import InvalidOperationError, NotFoundError
from ..interfaces import UserService
from ..models import PushSubscription, User, now_ms
from ..store import InMemoryStore, Store


PROFILE_FIELDS = {"name", "email", "country", "about", "bggid", "tags", "palettes"}


def seed_users() -> list[User]:
    day_ms = 86_400_000
    return [
        User(
            id="user1",
            name="Alice",
            email="alice@example.com",
            country="US",
            stars=5,
            ratings={"chess": 1650, "go": 1500},
            games_played=150,
            wins=90,
        ),
        User(
            id="user2",
            name="Bob",
            email="bob@example.com",
            country="UK",
            stars=3,
            last_seen=now_ms() - day_ms,
            ratings={"chess": 1500},
            games_played=89,
            wins=40,
        ),
        User(id="bot", name="AI Bot", ratings={"chess": 2000, "go": 1800}),
    ]


class MockUserService(UserService):
    """In-memory user directory. Unknown users are created on first reference."""

    def __init__(self, users: Optional[Store[User]] = None):
        if users is None:
            users = InMemoryStore("users", {user.id: user for user in seed_users()})
        self._users: Store[User] = users

    async def find_user(self, user_id: str) -> Optional[User]:
        return await self._users.get(user_id)

    async def get_user(self, user_id: str) -> User:
        user = await self.find_user(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found", code="USER_NOT_FOUND")
        return user

    async def get_or_create_user(self, user_id: str, name: Optional[str] = None) -> User:
        user = await self.find_user(user_id)
        if user is None:
            user = User(id=user_id, name=name or user_id)
            await self._users.put(user_id, user)
        return user

    async def list_users(self) -> list[User]:
        return await self._users.list()

    async def update_profile(self, user_id: str, updates: dict[str, Any]) -> User:
        unknown = set(updates) - PROFILE_FIELDS
        if unknown:
            raise InvalidOperationError(
                f"Unknown profile fields: {', '.join(sorted(unknown))}",
                code="VALIDATION_ERROR",
            )
        user = await self.get_or_create_user(user_id)
        for key, value in updates.items():
            if value is not None:
                setattr(user, key, value)
        user.last_seen = now_ms()
        await self._users.put(user_id, user)
        return user

    # =========================================================================
    # Settings
    # =========================================================================

    async def get_settings(self, user_id: str) -> dict[str, Any]:
        user = await self.get_or_create_user(user_id)
        return copy.deepcopy(user.settings)

    async def update_setting(
        self, user_id: str, setting: str, value: Any, meta_game: Optional[str] = None
    ) -> dict[str, Any]:
        user = await self.get_or_create_user(user_id)
        scope = user.settings.setdefault(meta_game or "all", {})
        scope[setting] = value
        await self._users.put(user_id, user)
        return copy.deepcopy(user.settings)

    async def get_notification_settings(self, user_id: str) -> dict[str, bool]:
        user = await self.get_or_create_user(user_id)
        return dict(user.settings.get("all", {}).get("notifications", {}))

    async def update_notification_settings(self, user_id: str, updates: dict[str, bool]) -> dict[str, bool]:
        user = await self.get_or_create_user(user_id)
        notifications = user.settings.setdefault("all", {}).setdefault("notifications", {})
        notifications.update({k: v for k, v in updates.items() if v is not None})
        await self._users.put(user_id, user)
        return dict(notifications)

    async def toggle_star(self, user_id: str, meta_game: str) -> bool:
        user = await self.get_or_create_user(user_id)
        if meta_game in user.starred:
            user.starred.remove(meta_game)
            starred = False
        else:
            user.starred.append(meta_game)
            starred = True
        await self._users.put(user_id, user)
        return starred

    # =========================================================================
    # Push subscriptions
    # =========================================================================

    async def save_push_subscription(self, user_id: str, subscription: PushSubscription) -> None:
        user = await self.get_or_create_user(user_id)
        user.push_subscription = subscription
        await self._users.put(user_id, user)

    async def delete_push_subscription(self, user_id: str) -> bool:
        user = await self.get_or_create_user(user_id)
        had_subscription = user.push_subscription is not None
        user.push_subscription = None
        await self._users.put(user_id, user)
        return had_subscription

    async def get_push_subscription(self, user_id: str) -> Optional[PushSubscription]:
        user = await self.find_user(user_id)
        return user.push_subscription if user else None

    # =========================================================================
    # Ratings
    # =========================================================================

    async def get_ratings(self, meta_game: str) -> list[dict[str, Any]]:
        users = await self.list_users()
        rated = [u for u in users if meta_game in u.ratings]
        rated.sort(key=lambda u: u.ratings[meta_game], reverse=True)
        return [
            {"userid": u.id, "rating": u.ratings[meta_game], "games": u.games_played}
            for u in rated
        ]
