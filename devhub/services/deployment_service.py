"""
Deployment Service

Records deployment lifecycle webhooks and aggregates them for the status
endpoint.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select, desc

from devhub.models.deployment import APP_STATUS_ID, AppStatus, Deployment, DeploymentError
from devhub.schemas.deployment import (
    DeploymentErrorRead,
    DeploymentRead,
    StatusResponse,
    WebhookEvent,
)
from devhub.services.error_handler import QueryError, ValidationError

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5
UNKNOWN_STATUS = "unknown"


class DeploymentService:
    """Service for deployment status bookkeeping."""

    def __init__(self, db: Session):
        self.db = db
        self.handlers = {
            "deployment.succeeded": self._record_success,
            "deployment.error": self._record_error,
            "deployment.ready": self._mark_ready,
        }

    async def handle_event(self, event: WebhookEvent) -> bool:
        """
        Apply a webhook event to the status tables.

        Returns:
            True if the event type was recognized, False if it was ignored.
        """
        handler = self.handlers.get(event.type) if isinstance(event.type, str) else None
        if handler is None:
            logger.info(f"Ignoring webhook event of type {event.type!r}")
            return False

        if not isinstance(event.payload, dict):
            raise ValidationError(f"{event.type} payload must be an object")

        try:
            handler(event.payload)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise QueryError(f"Failed to record {event.type}: {e}") from e

        logger.info(f"Recorded webhook event {event.type} for deployment {event.payload.get('id')}")
        return True

    async def get_status(self) -> StatusResponse:
        """Current status plus the most recent deployments and errors."""
        app_status = self.db.get(AppStatus, APP_STATUS_ID)

        deployments = self.db.exec(
            select(Deployment)
            .order_by(desc(Deployment.created_at), desc(Deployment.id))
            .limit(RECENT_LIMIT)
        ).all()

        errors = self.db.exec(
            select(DeploymentError)
            .order_by(desc(DeploymentError.created_at), desc(DeploymentError.id))
            .limit(RECENT_LIMIT)
        ).all()

        return StatusResponse(
            status=app_status.status if app_status and app_status.status else UNKNOWN_STATUS,
            deployments=[DeploymentRead.model_validate(d) for d in deployments],
            errors=[DeploymentErrorRead.model_validate(e) for e in errors],
        )

    def _record_success(self, payload: Dict[str, Any]) -> None:
        self.db.add(Deployment(
            status="success",
            url=_as_text(payload.get("url")),
            deployment_id=_as_text(payload.get("id")),
            created_at=datetime.now(timezone.utc),
        ))

    def _record_error(self, payload: Dict[str, Any]) -> None:
        self.db.add(DeploymentError(
            error=_as_text(payload.get("error")),
            deployment_id=_as_text(payload.get("id")),
            created_at=datetime.now(timezone.utc),
        ))

    def _mark_ready(self, payload: Dict[str, Any]) -> None:
        app_status = self.db.get(AppStatus, APP_STATUS_ID) or AppStatus(id=APP_STATUS_ID, status="ready")
        app_status.status = "ready"
        app_status.last_deployment = _as_text(payload.get("id"))
        app_status.updated_at = datetime.now(timezone.utc)
        self.db.add(app_status)


def _as_text(value: Any) -> Optional[str]:
    return None if value is None else str(value)
