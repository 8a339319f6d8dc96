from __future__ import annotations

from typing import Optional

from fastapi import WebSocket

from shared.security.jwt import AuthError, decode_jwt, parse_bearer

from .config import settings
from .logging_config import logger


def extract_bearer_token_from_ws(websocket: WebSocket) -> Optional[str]:
    """Extract Bearer token from Authorization header or `token` query param."""
    return parse_bearer(websocket.headers, websocket.query_params)


def decode_user_jwt(token: str) -> dict:
    """Validate a user token signed by the platform's auth service."""
    try:
        return decode_jwt(
            token,
            secret=settings.USER_JWT_SECRET_KEY,
            algorithm=settings.USER_JWT_ALGORITHM,
            issuer=settings.USER_JWT_ISSUER,
            audience=settings.USER_JWT_AUDIENCE,
        )
    except AuthError as user_err:
        logger.debug("JWT validation failed: %s", user_err)
        raise
