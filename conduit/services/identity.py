"""Identity store: user records, credentials, and session tokens."""

import asyncio
import logging
import re

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError

from conduit.auth.jwt import create_access_token, decode_token
from conduit.auth.password import dummy_hash, hash_password, verify_password
from conduit.config import settings
from conduit.database import is_unique_violation
from conduit.errors import (
    DuplicateConstraintError,
    DuplicateEmailError,
    DuplicateUsernameError,
    InvalidCredentialsError,
    UnauthorizedError,
    UserNotFoundError,
    ValidationFailedError,
)
from conduit.models.user import User, utcnow
from conduit.services.base import Store, require_text, store_operation

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{1,50}$")
EMAIL_MAX_LENGTH = 100
BIO_MAX_LENGTH = 250
IMAGE_MAX_LENGTH = 250


def normalize_username(username: str | None) -> str:
    username = require_text("username", username)
    if not USERNAME_PATTERN.match(username):
        raise ValidationFailedError(
            "username",
            "must be 1-50 characters: letters, digits, '.', '_' or '-'",
        )
    return username


def normalize_email(email: str | None) -> str:
    """Validate syntax and fold case; uniqueness is case-insensitive."""
    email = require_text("email", email, EMAIL_MAX_LENGTH)
    try:
        result = validate_email(email, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValidationFailedError("email", str(exc)) from exc
    return result.normalized.lower()


def check_password(password: str | None) -> str:
    if password is None or len(password) < settings.password_min_length:
        raise ValidationFailedError(
            "password", f"must be at least {settings.password_min_length} characters"
        )
    return password


def _duplicate_error(exc: IntegrityError) -> DuplicateConstraintError:
    if is_unique_violation(exc, "key_username", "user.username"):
        return DuplicateUsernameError()
    if is_unique_violation(exc, "key_email", "user.email"):
        return DuplicateEmailError()
    return DuplicateConstraintError()


class IdentityStore(Store):
    """Owns user records and credential verification."""

    @store_operation
    async def register(self, username: str, email: str, password: str) -> User:
        """
        Create a user with a freshly hashed password.

        Raises:
            ValidationFailedError: malformed username, email, or password
            DuplicateUsernameError / DuplicateEmailError: unique key taken
        """
        username = normalize_username(username)
        email = normalize_email(email)
        check_password(password)

        password_hash = await asyncio.to_thread(hash_password, password)
        user = User(username=username, email=email, password_hash=password_hash)

        try:
            async with self.db.begin_nested():
                self.db.add(user)
                await self.db.flush()
        except IntegrityError as exc:
            raise _duplicate_error(exc) from exc

        await self.db.commit()
        logger.info("Registered user %s", user.username, extra={"user_id": user.user_id})
        return user

    @store_operation
    async def authenticate(self, login: str, password: str) -> tuple[User, str]:
        """
        Verify credentials given a username or an email.

        Returns the user and a fresh session token. Every failure is reported
        as the same ``InvalidCredentialsError``.
        """
        if not login or not password:
            raise InvalidCredentialsError()

        result = await self.db.execute(
            select(User).where(
                or_(
                    User.username == login,
                    User.email == login.strip().lower(),
                )
            )
        )
        user = result.scalars().first()

        if user is None:
            # Burn the same hashing cost as a real check.
            await asyncio.to_thread(verify_password, password, dummy_hash())
            raise InvalidCredentialsError()

        if not await asyncio.to_thread(verify_password, password, user.password_hash):
            logger.info("Failed login", extra={"user_id": user.user_id})
            raise InvalidCredentialsError()

        return user, self.issue_token(user.user_id)

    def issue_token(self, user_id: str) -> str:
        """Sign a session token asserting ``user_id``."""
        return create_access_token(user_id)

    def verify_token(self, token: str) -> str:
        """Return the user id a token asserts, or raise ``UnauthorizedError``."""
        payload = decode_token(token)
        if payload is None:
            raise UnauthorizedError("Invalid or expired token")
        return payload["sub"]

    @store_operation
    async def update_profile(
        self,
        user_id: str,
        *,
        bio: str | None = None,
        image: str | None = None,
        email: str | None = None,
        password: str | None = None,
    ) -> User:
        """
        Partially update a user. ``None`` leaves a field unchanged; an empty
        image clears it.
        """
        user = await self.get_by_id(user_id)

        changes: dict[str, object] = {}
        if bio is not None:
            if len(bio) > BIO_MAX_LENGTH:
                raise ValidationFailedError("bio", f"must be {BIO_MAX_LENGTH} characters or less")
            changes["bio"] = bio
        if image is not None:
            if len(image) > IMAGE_MAX_LENGTH:
                raise ValidationFailedError("image", f"must be {IMAGE_MAX_LENGTH} characters or less")
            changes["image"] = image.strip() or None
        if email is not None:
            changes["email"] = normalize_email(email)
        if password is not None:
            check_password(password)
            changes["password_hash"] = await asyncio.to_thread(hash_password, password)

        if not changes:
            return user

        try:
            async with self.db.begin_nested():
                for field, value in changes.items():
                    setattr(user, field, value)
                user.updated_at = utcnow()
                await self.db.flush()
        except IntegrityError as exc:
            # The savepoint rollback expired the user; reload it while async IO is allowed.
            await self.db.refresh(user)
            raise _duplicate_error(exc) from exc

        await self.db.commit()
        logger.info("Updated profile fields %s", sorted(changes), extra={"user_id": user_id})
        return await self.get_by_id(user_id)

    @store_operation
    async def get_by_id(self, user_id: str) -> User:
        result = await self.db.execute(
            select(User)
            .where(User.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        user = result.scalar_one_or_none()
        if user is None:
            raise UserNotFoundError()
        return user

    @store_operation
    async def get_by_username(self, username: str) -> User:
        result = await self.db.execute(
            select(User)
            .where(User.username == username)
            .execution_options(populate_existing=True)
        )
        user = result.scalar_one_or_none()
        if user is None:
            raise UserNotFoundError(f"User '{username}' not found")
        return user

    @store_operation
    async def get_many(self, user_ids: set[str]) -> dict[str, User]:
        """Fetch several users at once, keyed by id. Unknown ids are skipped."""
        if not user_ids:
            return {}
        result = await self.db.execute(select(User).where(User.user_id.in_(user_ids)))
        return {user.user_id: user for user in result.scalars()}
