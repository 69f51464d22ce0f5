from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from devhub.core.config import settings
from devhub.services.error_handler import AuthenticationError

SESSION_PURPOSE = "session"
MAGIC_LINK_PURPOSE = "magic_link"
OAUTH_STATE_PURPOSE = "oauth_state"


def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None
) -> str:
    """Sign a token carrying `data` that expires after `expires_delta`."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.session_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def verify_token(token: str, purpose: str = SESSION_PURPOSE) -> Dict[str, Any]:
    """Decode a token and check it was issued for `purpose`."""
    try:
        payload = jwt.decode(
            token, settings.secret_key, algorithms=[settings.algorithm])
    except jwt.ExpiredSignatureError as e:
        raise AuthenticationError("Session expired") from e
    except jwt.PyJWTError as e:
        raise AuthenticationError("Invalid session token") from e

    if payload.get("purpose") != purpose or not payload.get("sub"):
        raise AuthenticationError("Invalid session token")
    return payload
