"""Shared-secret authentication for PapyrusDB.

One server key, set at install time, gates the whole API. Every device
of the account sends it as a bearer token.
"""

import secrets
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import Settings, get_settings
from .errors import AuthenticationError, ForbiddenError

# Bearer token scheme; missing credentials are reported by us, not FastAPI
security = HTTPBearer(auto_error=False)


def generate_server_key() -> str:
    """Generate a server key (64 hex chars)."""
    return secrets.token_hex(32)


def verify_key(token: str, settings: Settings) -> bool:
    """Constant-time comparison against the configured key."""
    return secrets.compare_digest(token.encode(), settings.server_key.encode())


async def require_server_key(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> None:
    """Reject the request unless it carries ``Bearer <server_key>``."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError("Authentication required.")
    if not verify_key(credentials.credentials, settings):
        raise ForbiddenError(
            "Invalid server key. Check the configuration of your Papyrus app and server."
        )
