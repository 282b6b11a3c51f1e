"""Password hashing with argon2id.

Hashes are self-describing PHC strings (``$argon2id$v=19$m=...``) carrying
their own random salt and cost parameters, so stored hashes stay verifiable
after the configured cost changes.
"""

from functools import lru_cache

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from conduit.config import settings


@lru_cache
def get_hasher() -> PasswordHasher:
    """Get the process-wide hasher built from settings."""
    return PasswordHasher(
        time_cost=settings.argon2_time_cost,
        memory_cost=settings.argon2_memory_cost,
        parallelism=settings.argon2_parallelism,
    )


def hash_password(password: str) -> str:
    """Hash a password with a fresh random salt."""
    return get_hasher().hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored hash."""
    try:
        return get_hasher().verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


@lru_cache
def dummy_hash() -> str:
    """Hash compared against when the login matches no user, so both paths cost the same."""
    return hash_password("conduit-dummy-password")
