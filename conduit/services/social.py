"""Social graph: directed follow edges between users."""

import logging

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import IntegrityError

from conduit.errors import (
    AlreadyFollowingError,
    NotFollowingError,
    SelfFollowError,
    UserNotFoundError,
)
from conduit.models.follow import Follow
from conduit.models.user import User, utcnow
from conduit.services.base import Store, store_operation

logger = logging.getLogger(__name__)


class SocialGraph(Store):
    """Owns follow edges. An edge is identified by the (followed, following) pair."""

    @store_operation
    async def follow(self, follower_id: str, followee_id: str) -> None:
        """
        Make ``follower_id`` follow ``followee_id``.

        The insert is rejected by the primary key when the edge exists, so
        concurrent duplicate calls resolve to exactly one success.
        """
        if follower_id == followee_id:
            raise SelfFollowError()

        result = await self.db.execute(
            select(User.user_id).where(User.user_id.in_([follower_id, followee_id]))
        )
        if len(set(result.scalars())) != 2:
            raise UserNotFoundError()

        now = utcnow()
        try:
            async with self.db.begin_nested():
                await self.db.execute(
                    insert(Follow).values(
                        followed_user_id=followee_id,
                        following_user_id=follower_id,
                        created_at=now,
                        updated_at=now,
                    )
                )
        except IntegrityError as exc:
            raise AlreadyFollowingError() from exc

        await self.db.commit()
        logger.info("User followed %s", followee_id, extra={"user_id": follower_id})

    @store_operation
    async def unfollow(self, follower_id: str, followee_id: str) -> None:
        result = await self.db.execute(
            delete(Follow).where(
                Follow.followed_user_id == followee_id,
                Follow.following_user_id == follower_id,
            )
        )
        if result.rowcount == 0:
            raise NotFollowingError()

        await self.db.commit()
        logger.info("User unfollowed %s", followee_id, extra={"user_id": follower_id})

    @store_operation
    async def is_following(self, follower_id: str | None, followee_id: str) -> bool:
        if follower_id is None:
            return False
        result = await self.db.execute(
            select(Follow.followed_user_id).where(
                Follow.followed_user_id == followee_id,
                Follow.following_user_id == follower_id,
            )
        )
        return result.first() is not None

    @store_operation
    async def list_followers(self, user_id: str) -> set[str]:
        """Ids of the users following ``user_id``."""
        result = await self.db.execute(
            select(Follow.following_user_id).where(Follow.followed_user_id == user_id)
        )
        return set(result.scalars())

    @store_operation
    async def list_following(self, user_id: str) -> set[str]:
        """Ids of the users ``user_id`` follows."""
        result = await self.db.execute(
            select(Follow.followed_user_id).where(Follow.following_user_id == user_id)
        )
        return set(result.scalars())

    @store_operation
    async def following_among(self, follower_id: str | None, user_ids: set[str]) -> set[str]:
        """Subset of ``user_ids`` that ``follower_id`` follows."""
        if follower_id is None or not user_ids:
            return set()
        result = await self.db.execute(
            select(Follow.followed_user_id).where(
                Follow.following_user_id == follower_id,
                Follow.followed_user_id.in_(user_ids),
            )
        )
        return set(result.scalars())
