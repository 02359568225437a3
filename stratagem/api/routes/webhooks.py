"""Webhook routes - subscription management. Requires a bearer token."""

from fastapi import APIRouter, Depends

from ..auth import RequiredUser, require_bearer
from ..deps import Services
from ..schemas import ErrorResponse, SuccessResponse, WebhookList, WebhookRequest, WebhookSchema

router = APIRouter(
    prefix="/webhooks",
    tags=["Webhooks"],
    dependencies=[Depends(require_bearer)],
    responses={401: {"model": ErrorResponse, "description": "Unauthorized"}},
)


@router.post(
    "",
    status_code=201,
    response_model=WebhookSchema,
    responses={400: {"model": ErrorResponse}},
    summary="Register a webhook",
)
async def register_webhook(body: WebhookRequest, services: Services, user_id: RequiredUser):
    return await services.webhook.register_webhook(user_id, body.url, list(body.events), secret=body.secret)


@router.get("", response_model=WebhookList, summary="List the caller's webhooks")
async def list_webhooks(services: Services, user_id: RequiredUser):
    return {"webhooks": await services.webhook.list_webhooks(user_id)}


@router.delete(
    "/{webhook_id}",
    response_model=SuccessResponse,
    responses={404: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
    summary="Delete a webhook",
)
async def delete_webhook(webhook_id: str, services: Services, user_id: RequiredUser):
    await services.webhook.delete_webhook(webhook_id, user_id)
    return SuccessResponse(success=True)
