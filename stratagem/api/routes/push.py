"""Push notification routes - subscriptions and notification preferences.

Nothing is delivered: the test endpoint only reports whether the caller has
a subscription a real sender would use.
"""

import logging
from typing import Optional

from fastapi import APIRouter

from ...services.models import PushSubscription
from ..auth import ActingUser
from ..deps import Services
from ..schemas import (
    NotificationSettings,
    PushSubscriptionSchema,
    PushTestRequest,
    PushTestResponse,
    SuccessResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/push", tags=["Push Notifications"])


def to_subscription(body: PushSubscriptionSchema) -> PushSubscription:
    return PushSubscription(
        endpoint=body.endpoint,
        keys=body.keys.model_dump(),
        expiration_time=body.expiration_time,
    )


@router.post("/subscribe", response_model=SuccessResponse, summary="Save a push subscription")
async def subscribe(body: PushSubscriptionSchema, services: Services, user_id: ActingUser):
    await services.user.save_push_subscription(user_id, to_subscription(body))
    return SuccessResponse(success=True)


@router.delete("/subscribe", response_model=SuccessResponse, summary="Remove the push subscription")
async def unsubscribe(services: Services, user_id: ActingUser):
    await services.user.delete_push_subscription(user_id)
    return SuccessResponse(success=True)


@router.post("/test", response_model=PushTestResponse, summary="Send a test notification")
async def send_test(services: Services, user_id: ActingUser, body: Optional[PushTestRequest] = None):
    body = body or PushTestRequest()
    subscription = await services.user.get_push_subscription(user_id)
    if subscription is None:
        return PushTestResponse(success=True, sent=0)
    logger.info("Test notification %r for %s (not delivered)", body.title, user_id)
    return PushTestResponse(success=True, sent=1)


@router.get("/settings", response_model=NotificationSettings, summary="Get notification preferences")
async def get_settings(services: Services, user_id: ActingUser):
    return NotificationSettings.model_validate(await services.user.get_notification_settings(user_id))


@router.put("/settings", response_model=NotificationSettings, summary="Update notification preferences")
async def update_settings(body: NotificationSettings, services: Services, user_id: ActingUser):
    updated = await services.user.update_notification_settings(
        user_id, body.model_dump(by_alias=True, exclude_none=True)
    )
    return NotificationSettings.model_validate(updated)
