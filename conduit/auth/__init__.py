"""Authentication utilities for the Conduit API."""

from conduit.auth.jwt import create_access_token, decode_token
from conduit.auth.password import hash_password, verify_password

__all__ = [
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_token",
]
