from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr


class AuthSession(BaseModel):
    """The only view of a session the application keeps."""
    email: str
    access_token: str
    expires_at: datetime


class SessionResponse(BaseModel):
    session: Optional[AuthSession] = None


class MagicLinkRequest(BaseModel):
    email: EmailStr


class MagicLinkResponse(BaseModel):
    sent: bool = True
