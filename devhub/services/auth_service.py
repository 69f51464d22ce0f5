import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional
from urllib.parse import urlencode

import requests

from devhub.core.config import settings
from devhub.core.security import (
    MAGIC_LINK_PURPOSE,
    OAUTH_STATE_PURPOSE,
    SESSION_PURPOSE,
    create_access_token,
    verify_token,
)
from devhub.schemas.auth import AuthSession
from devhub.services.error_handler import OAuthError, ValidationError

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("google",)


class AuthService:
    """Issues and validates sessions for magic-link and OAuth sign-in."""

    def __init__(self):
        self.timeout = settings.oauth_timeout

    def issue_session(self, email: str) -> AuthSession:
        expires_delta = timedelta(minutes=settings.session_expire_minutes)
        token = create_access_token(
            {"sub": email, "purpose": SESSION_PURPOSE}, expires_delta=expires_delta)
        return AuthSession(
            email=email,
            access_token=token,
            expires_at=datetime.now(timezone.utc) + expires_delta,
        )

    def get_session(self, token: Optional[str]) -> Optional[AuthSession]:
        """Return the session a token represents, or None if there is no token."""
        if not token:
            return None
        payload = verify_token(token, purpose=SESSION_PURPOSE)
        return AuthSession(
            email=payload["sub"],
            access_token=token,
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )

    def send_magic_link(self, email: str) -> str:
        """
        Build a one-time sign-in link for `email`.

        Delivery is out of band; the link is logged so it can be picked up by
        whatever relays mail for the deployment.
        """
        token = create_access_token(
            {"sub": email, "purpose": MAGIC_LINK_PURPOSE},
            expires_delta=timedelta(minutes=settings.magic_link_expire_minutes),
        )
        link = f"{settings.callback_url}?{urlencode({'token': token})}"
        logger.info(f"Magic link issued for {email}: {link}")
        return link

    def verify_magic_link(self, token: str) -> AuthSession:
        payload = verify_token(token, purpose=MAGIC_LINK_PURPOSE)
        return self.issue_session(payload["sub"])

    def oauth_authorize_url(self, provider: str) -> str:
        if provider not in SUPPORTED_PROVIDERS:
            raise ValidationError(f"Unsupported OAuth provider: {provider}")
        if not settings.google_client_id:
            raise OAuthError("OAuth provider is not configured")

        state = create_access_token(
            {"sub": provider, "purpose": OAUTH_STATE_PURPOSE},
            expires_delta=timedelta(minutes=settings.magic_link_expire_minutes),
        )
        query = urlencode({
            "client_id": settings.google_client_id,
            "redirect_uri": settings.callback_url,
            "response_type": "code",
            "scope": "openid email",
            "state": state,
        })
        return f"{settings.google_authorize_url}?{query}"

    async def exchange_oauth_code(self, code: str, state: str) -> AuthSession:
        """Trade an authorization code for a session."""
        verify_token(state, purpose=OAUTH_STATE_PURPOSE)

        # Run the synchronous requests in a thread pool
        loop = asyncio.get_event_loop()
        email = await loop.run_in_executor(None, self._sync_fetch_email, code)
        logger.info(f"OAuth sign-in completed for {email}")
        return self.issue_session(email)

    def _sync_fetch_email(self, code: str) -> str:
        try:
            token_response = requests.post(
                settings.google_token_url,
                data={
                    "code": code,
                    "client_id": settings.google_client_id,
                    "client_secret": settings.google_client_secret,
                    "redirect_uri": settings.callback_url,
                    "grant_type": "authorization_code",
                },
                timeout=self.timeout,
            )
            token_response.raise_for_status()
            access_token = token_response.json()["access_token"]

            userinfo_response = requests.get(
                settings.google_userinfo_url,
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=self.timeout,
            )
            userinfo_response.raise_for_status()
            userinfo: Dict = userinfo_response.json()
        except (requests.RequestException, KeyError, ValueError) as e:
            raise OAuthError(f"OAuth code exchange failed: {e}") from e

        email = userinfo.get("email")
        if not email:
            raise OAuthError("OAuth provider did not return an email address")
        return email
