"""Shared plumbing for the stores: session ownership and outage translation."""

import functools
import logging
from collections.abc import Awaitable, Callable
from typing import ParamSpec, TypeVar

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.errors import StoreUnavailableError, ValidationFailedError

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")

# Driver-level failures that say nothing about the request itself.
OUTAGE_ERRORS = (OperationalError, InterfaceError, PoolTimeoutError)


class Store:
    """Base class for the stores. Each instance works over one request-scoped session."""

    def __init__(self, db: AsyncSession):
        self.db = db


def store_operation(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
    """Roll back and surface driver outages as ``StoreUnavailableError``."""

    @functools.wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        store = args[0]
        try:
            return await func(*args, **kwargs)
        except OUTAGE_ERRORS as exc:
            logger.error("Store unavailable during %s", func.__qualname__, exc_info=True)
            try:
                await store.db.rollback()  # type: ignore[attr-defined]
            except OUTAGE_ERRORS:
                logger.debug("Rollback after outage failed", exc_info=True)
            raise StoreUnavailableError() from exc

    return wrapper


def require_text(
    field: str, value: str | None, max_length: int | None = None, strip: bool = True
) -> str:
    """Return ``value`` (stripped unless told otherwise), or fail when blank or too long."""
    if value is None or not value.strip():
        raise ValidationFailedError(field, "can't be blank")
    if strip:
        value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise ValidationFailedError(field, f"must be {max_length} characters or less")
    return value


def clamp_page(limit: int | None, offset: int | None, default: int, maximum: int) -> tuple[int, int]:
    """Normalize listing bounds."""
    if limit is None:
        limit = default
    if limit < 1:
        raise ValidationFailedError("limit", "must be at least 1")
    if offset is None:
        offset = 0
    if offset < 0:
        raise ValidationFailedError("offset", "must not be negative")
    return min(limit, maximum), offset
