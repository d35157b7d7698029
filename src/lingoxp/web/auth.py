"""Caller check for private routes.

Private routes require an `Authorization: Bearer <token>` header whose token
is listed in the auth section of the app config (or set through its env var).
User identity and token issuance belong to the surrounding platform.
"""

import secrets

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from lingoxp.config.app_config import load_app_config

logger = structlog.get_logger(__name__)

_bearer = HTTPBearer(auto_error=False)


def require_caller(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> str:
    """Validate the bearer token and return it."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token is required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = credentials.credentials
    valid = load_app_config().auth.get_tokens()
    if not any(secrets.compare_digest(token.encode(), candidate.encode()) for candidate in valid):
        logger.warning("auth.invalid_token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid access token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return token
