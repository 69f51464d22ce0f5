import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from devhub.api.deps import get_deployment_service
from devhub.schemas.deployment import WebhookAck, WebhookEvent
from devhub.services.deployment_service import DeploymentService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=WebhookAck)
async def receive_webhook(
    request: Request,
    service: DeploymentService = Depends(get_deployment_service),
) -> Any:
    """
    Record a deployment lifecycle notification.
    Unknown event types are acknowledged without touching the database.
    """
    try:
        body = await request.json()
        logger.info(f"Webhook received: {body}")
        event = WebhookEvent.model_validate(body)
        await service.handle_event(event)
    except Exception as e:
        logger.error(f"Webhook error: {e}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
    return WebhookAck()
