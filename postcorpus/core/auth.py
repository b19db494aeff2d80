"""FastAPI dependencies that resolve the owning identity and the clock.

Public interface:
    ``require_owner`` - owner id from a valid bearer token, or 401.
    ``get_clock``     - the time source services evaluate publish state with.

When ``settings.auth_enabled`` is False every request acts as the
``anonymous`` owner so local development needs no tokens.
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .clock import Clock, utc_now
from .config import settings
from .token_factory import decode_owner_token
from ..exceptions import AuthenticationError

logger = logging.getLogger(__name__)

ANONYMOUS_OWNER = "anonymous"

_bearer_scheme = HTTPBearer(auto_error=False)


def require_owner(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> str:
    """Return the owner id the request acts as."""
    if not settings.auth_enabled:
        return ANONYMOUS_OWNER

    if credentials is None:
        raise AuthenticationError("Missing authentication token")

    token = decode_owner_token(credentials.credentials, settings.jwt_secret_key, settings.jwt_algorithm)
    if token is None:
        logger.info("Rejected bearer token")
        raise AuthenticationError("Invalid or expired token")
    return token.owner_id


def get_clock() -> Clock:
    """Overridden in tests to pin ``now``."""
    return utc_now
