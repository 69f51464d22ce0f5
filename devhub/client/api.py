import logging
from typing import Any, Dict, List, Optional

import requests

from devhub.client.config import client_settings
from devhub.schemas.auth import AuthSession
from devhub.schemas.compound import CompoundForm, CompoundRead
from devhub.services.error_handler import NetworkError

logger = logging.getLogger(__name__)


class DevHubClient:
    """Blocking HTTP client for the DevHub request tier."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        http: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or client_settings.api_url).rstrip("/")
        self.timeout = timeout or client_settings.request_timeout
        self.http = http or requests.Session()
        self.access_token: Optional[str] = None

    def fetch_session(self) -> Optional[AuthSession]:
        data = self._request("GET", "/api/auth/session").json()
        session = data.get("session")
        if session is None:
            return None
        auth_session = AuthSession.model_validate(session)
        self.access_token = auth_session.access_token
        return auth_session

    def request_magic_link(self, email: str) -> None:
        self._request("POST", "/api/auth/magic-link", json={"email": email})

    def verify_magic_link(self, token: str) -> AuthSession:
        data = self._request("GET", "/api/auth/callback", params={"token": token}).json()
        session = AuthSession.model_validate(data["session"])
        self.access_token = session.access_token
        return session

    def oauth_url(self, provider: str) -> str:
        """Where to send the user to start an OAuth sign-in."""
        response = self._request(
            "GET", f"/api/auth/oauth/{provider}", allow_redirects=False)
        location = response.headers.get("location")
        if not location:
            raise NetworkError("OAuth sign-in did not return a redirect")
        return location

    def sign_out(self) -> None:
        self._request("POST", "/api/auth", allow_redirects=False)
        self.access_token = None
        self.http.cookies.clear()

    def fetch_compounds(self) -> List[CompoundRead]:
        data = self._request("GET", "/api/compounds").json()
        return [CompoundRead.model_validate(row) for row in data.get("compounds") or []]

    def save_compound(self, form: CompoundForm) -> CompoundRead:
        data = self._request("POST", "/api/compounds", json=form.model_dump()).json()
        return CompoundRead.model_validate(data)

    def insert_seed(self) -> CompoundRead:
        data = self._request("POST", "/api/compounds/seed").json()
        return CompoundRead.model_validate(data)

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        headers: Dict[str, str] = kwargs.pop("headers", {})
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"

        try:
            response = self.http.request(
                method,
                f"{self.base_url}{path}",
                headers=headers,
                timeout=self.timeout,
                **kwargs
            )
        except requests.RequestException as e:
            raise NetworkError(f"{method} {path} failed: {e}") from e

        if response.status_code >= 400:
            raise NetworkError(self._error_message(response))
        return response

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get("error"):
            return data["error"]
        return f"{response.status_code} {response.reason}"
