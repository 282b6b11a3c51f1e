"""JWT session token creation and validation."""

from datetime import datetime, timedelta, timezone

from jose import jwt

from conduit.config import settings


def create_access_token(user_id: str) -> str:
    """Create a signed session token asserting ``user_id`` (two weeks by default)."""
    issued_at = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "iat": issued_at,
        "exp": issued_at + timedelta(days=settings.session_length_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict | None:
    """
    Decode and validate a JWT token.

    Returns the payload if valid, None if invalid or expired.
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.JWTError:
        return None
    if not payload.get("sub"):
        return None
    return payload
