"""
Mock webhook service - Subscription bookkeeping only, nothing is delivered.
"""

from __future__ import annotations
from typing import Optional

from ..errors import InvalidOperationError, NotFoundError, PermissionDeniedError
from ..interfaces import WebhookService
from ..models import Webhook, WebhookEvent, new_id
from ..store import InMemoryStore, Store


class MockWebhookService(WebhookService):

    def __init__(self, webhooks: Optional[Store[Webhook]] = None):
        self._webhooks: Store[Webhook] = webhooks if webhooks is not None else InMemoryStore("webhooks")

    async def register_webhook(
        self, owner_id: str, url: str, events: list[WebhookEvent], secret: Optional[str] = None
    ) -> Webhook:
        if not events:
            raise InvalidOperationError("Subscribe to at least one event", code="VALIDATION_ERROR")
        webhook = Webhook(
            id=new_id(),
            url=url,
            events=list(dict.fromkeys(events)),
            owner_id=owner_id,
            secret=secret,
        )
        await self._webhooks.put(webhook.id, webhook)
        return webhook

    async def list_webhooks(self, owner_id: str) -> list[Webhook]:
        return await self._webhooks.list(lambda w: w.owner_id == owner_id)

    async def delete_webhook(self, webhook_id: str, owner_id: str) -> None:
        webhook = await self._webhooks.get(webhook_id)
        if webhook is None:
            raise NotFoundError("Webhook not found", code="NOT_FOUND")
        if webhook.owner_id != owner_id:
            raise PermissionDeniedError("Not authorized to delete this webhook")
        await self._webhooks.delete(webhook_id)
