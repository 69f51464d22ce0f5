from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime, timezone


APP_STATUS_ID = 1


class AppStatus(SQLModel, table=True):
    """Single-row table holding the latest deployment readiness."""
    __tablename__ = "app_status"

    id: int = Field(default=APP_STATUS_ID, primary_key=True)
    status: str = Field(max_length=50)
    last_deployment: Optional[str] = Field(default=None, max_length=255)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Deployment(SQLModel, table=True):
    """Append-only record of a successful deployment."""
    __tablename__ = "deployments"

    id: Optional[int] = Field(default=None, primary_key=True)
    status: str = Field(max_length=50)
    url: Optional[str] = Field(default=None)
    deployment_id: Optional[str] = Field(default=None, index=True, max_length=255)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)


class DeploymentError(SQLModel, table=True):
    """Append-only record of a failed deployment."""
    __tablename__ = "deployment_errors"

    id: Optional[int] = Field(default=None, primary_key=True)
    error: Optional[str] = Field(default=None)
    deployment_id: Optional[str] = Field(default=None, index=True, max_length=255)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)
