"""
Authentication Gate

Decides whether the dashboard or the sign-in panel is shown, and keeps the
compound list in step with the session.
"""

import asyncio
import enum
import inspect
import logging
from typing import Any, Callable, List, Optional

from devhub.client.api import DevHubClient
from devhub.client.view_model import Alert, CompoundListViewModel, default_alert
from devhub.schemas.auth import AuthSession
from devhub.services.error_handler import NetworkError

logger = logging.getLogger(__name__)


class AuthEvent(str, enum.Enum):
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


class Panel(str, enum.Enum):
    SIGN_IN = "sign_in"
    DASHBOARD = "dashboard"


SessionListener = Callable[[AuthEvent, Optional[AuthSession]], Any]


class SessionStore:
    """Client-side view of the session with push notifications on change."""

    def __init__(self, client: DevHubClient):
        self.client = client
        self.session: Optional[AuthSession] = None
        self._subscribers: List[SessionListener] = []

    def on_auth_state_change(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._subscribers.append(listener)

        def unsubscribe() -> None:
            if listener in self._subscribers:
                self._subscribers.remove(listener)

        return unsubscribe

    async def get_session(self) -> Optional[AuthSession]:
        self.session = await self._run(self.client.fetch_session)
        await self._emit(AuthEvent.INITIAL_SESSION)
        return self.session

    async def sign_in_with_otp(self, email: str) -> None:
        await self._run(self.client.request_magic_link, email)

    async def verify_magic_link(self, token: str) -> AuthSession:
        self.session = await self._run(self.client.verify_magic_link, token)
        await self._emit(AuthEvent.SIGNED_IN)
        return self.session

    async def sign_in_with_oauth(self, provider: str) -> str:
        """Return the provider URL the user must visit to finish signing in."""
        return await self._run(self.client.oauth_url, provider)

    async def sign_out(self) -> None:
        await self._run(self.client.sign_out)
        self.session = None
        await self._emit(AuthEvent.SIGNED_OUT)

    async def _emit(self, event: AuthEvent) -> None:
        for listener in list(self._subscribers):
            result = listener(event, self.session)
            if inspect.isawaitable(result):
                await result

    @staticmethod
    async def _run(call: Callable, *args: Any) -> Any:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, call, *args)


class AuthGate:
    """Owns the session subscription for as long as the dashboard is open."""

    def __init__(
        self,
        store: SessionStore,
        view_model: CompoundListViewModel,
        alert: Alert = default_alert,
    ):
        self.store = store
        self.view_model = view_model
        self.alert = alert
        self.session: Optional[AuthSession] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def panel(self) -> Panel:
        return Panel.DASHBOARD if self.session else Panel.SIGN_IN

    async def start(self) -> None:
        """Establish the session once, then follow change notifications."""
        self._unsubscribe = self.store.on_auth_state_change(self._on_session_change)
        try:
            await self.store.get_session()
        except NetworkError as e:
            logger.error(f"Could not establish session: {e}")
            await self._on_session_change(AuthEvent.INITIAL_SESSION, None)

    async def sign_in_with_oauth(self, provider: str = "google") -> Optional[str]:
        try:
            return await self.store.sign_in_with_oauth(provider)
        except NetworkError as e:
            self.alert(f"Error: {e}")
            return None

    async def sign_in_with_email(self, email: str) -> None:
        try:
            await self.store.sign_in_with_otp(email)
        except NetworkError as e:
            self.alert(f"Error: {e}")
            return
        self.alert("Check your email for the magic link.")

    async def complete_magic_link(self, token: str) -> None:
        try:
            await self.store.verify_magic_link(token)
        except NetworkError as e:
            self.alert(f"Error: {e}")

    async def sign_out(self) -> None:
        try:
            await self.store.sign_out()
        except NetworkError as e:
            self.alert(f"Error: {e}")

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.view_model.close()

    async def _on_session_change(self, event: AuthEvent, session: Optional[AuthSession]) -> None:
        logger.info(f"Session change: {event.value}")
        self.session = session
        await self.view_model.set_session_active(session is not None)
