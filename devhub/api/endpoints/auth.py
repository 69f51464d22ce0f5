import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse

from devhub.api.deps import get_auth_service, get_session_token
from devhub.core.config import settings
from devhub.core.limiter import limiter
from devhub.schemas.auth import AuthSession, MagicLinkRequest, MagicLinkResponse, SessionResponse
from devhub.services.auth_service import AuthService
from devhub.services.error_handler import AuthenticationError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter()


def _set_session_cookie(response: Response, session: AuthSession) -> None:
    response.set_cookie(
        settings.session_cookie_name,
        session.access_token,
        max_age=settings.session_expire_minutes * 60,
        httponly=True,
        samesite="lax",
    )


@router.post("")
async def sign_out(
    request: Request,
    token: Optional[str] = Depends(get_session_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> Any:
    """Sign out and redirect to the site root."""
    try:
        auth_service.get_session(token)
    except AuthenticationError:
        return JSONResponse(status_code=401, content={"error": "Authentication error"})
    except Exception as e:
        logger.error(f"Sign-out failed: {e}")
        return JSONResponse(status_code=500, content={"error": "Server error"})

    response = RedirectResponse(url=str(request.base_url), status_code=301)
    response.delete_cookie(settings.session_cookie_name)
    return response


@router.get("/session", response_model=SessionResponse)
async def read_session(
    token: Optional[str] = Depends(get_session_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> Any:
    """Current session, or null when signed out or the token is no longer valid."""
    try:
        session = auth_service.get_session(token)
    except AuthenticationError:
        session = None
    return SessionResponse(session=session)


@router.post("/magic-link", response_model=MagicLinkResponse)
@limiter.limit("5/minute")
async def request_magic_link(
    request: Request,
    magic_link: MagicLinkRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> Any:
    """Send a passwordless sign-in link to the given address."""
    auth_service.send_magic_link(magic_link.email)
    return MagicLinkResponse()


@router.get("/oauth/{provider}")
async def start_oauth(
    provider: str,
    auth_service: AuthService = Depends(get_auth_service),
) -> Any:
    """Redirect to the OAuth provider's consent screen."""
    return RedirectResponse(url=auth_service.oauth_authorize_url(provider), status_code=302)


@router.get("/callback", response_model=SessionResponse)
async def auth_callback(
    response: Response,
    token: Optional[str] = Query(None),
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    auth_service: AuthService = Depends(get_auth_service),
) -> Any:
    """
    Complete a sign-in: `token` for magic links, `code` and `state` for OAuth.
    """
    if token:
        session = auth_service.verify_magic_link(token)
    elif code and state:
        session = await auth_service.exchange_oauth_code(code, state)
    else:
        raise ValidationError("Missing sign-in token")

    _set_session_cookie(response, session)
    logger.info(f"Session started for {session.email}")
    return SessionResponse(session=session)
