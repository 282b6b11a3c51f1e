"""Authentication dependencies for FastAPI endpoints."""

import logging
from dataclasses import dataclass

from fastapi import Header

from conduit.auth.jwt import decode_token
from conduit.errors import UnauthorizedError

logger = logging.getLogger(__name__)

SCHEME_PREFIX = "Token "


@dataclass(frozen=True)
class AuthUser:
    """The caller a verified session token asserts."""

    user_id: str
    token: str


def _authenticate(authorization: str) -> AuthUser:
    if not authorization.startswith(SCHEME_PREFIX):
        logger.debug("Authorization header uses the wrong scheme")
        raise UnauthorizedError("Authorization header must use the 'Token' scheme")

    token = authorization[len(SCHEME_PREFIX):].strip()
    payload = decode_token(token)
    if payload is None:
        raise UnauthorizedError("Invalid or expired token")

    return AuthUser(user_id=payload["sub"], token=token)


async def get_current_user(
    authorization: str | None = Header(default=None),
) -> AuthUser:
    """
    Validate the ``Authorization: Token <jwt>`` header.

    Raises:
        UnauthorizedError: header missing, malformed, badly signed, or expired
    """
    if not authorization:
        raise UnauthorizedError("Authentication required")
    return _authenticate(authorization)


async def get_optional_user(
    authorization: str | None = Header(default=None),
) -> AuthUser | None:
    """Like ``get_current_user`` but anonymous callers get ``None``; a bad token still fails."""
    if not authorization:
        return None
    return _authenticate(authorization)
