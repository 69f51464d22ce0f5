from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from devhub.core.config import settings
from devhub.db.session import get_session
from devhub.schemas.auth import AuthSession
from devhub.services.auth_service import AuthService
from devhub.services.compound_service import CompoundService
from devhub.services.deployment_service import DeploymentService
from devhub.services.error_handler import AuthenticationError

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service() -> AuthService:
    return AuthService()


def get_compound_service(db: Session = Depends(get_session)) -> CompoundService:
    return CompoundService(db)


def get_deployment_service(db: Session = Depends(get_session)) -> DeploymentService:
    return DeploymentService(db)


def get_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    """Session token from the Authorization header, falling back to the cookie."""
    if credentials:
        return credentials.credentials
    return request.cookies.get(settings.session_cookie_name)


async def get_current_session(
    token: Optional[str] = Depends(get_session_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthSession:
    """Get the caller's session or fail with 401."""
    session = auth_service.get_session(token)
    if session is None:
        raise AuthenticationError("Not authenticated")
    return session
