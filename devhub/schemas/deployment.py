from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel


class WebhookEvent(BaseModel):
    """
    Inbound deployment lifecycle notification.

    Both fields are taken as sent; only recognized string types are acted on.
    """
    type: Optional[Any] = None
    payload: Optional[Any] = None


class WebhookAck(BaseModel):
    received: bool = True


class DeploymentRead(BaseModel):
    id: int
    status: str
    url: Optional[str] = None
    deployment_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class DeploymentErrorRead(BaseModel):
    id: int
    error: Optional[str] = None
    deployment_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class StatusResponse(BaseModel):
    status: str
    deployments: List[DeploymentRead] = []
    errors: List[DeploymentErrorRead] = []
