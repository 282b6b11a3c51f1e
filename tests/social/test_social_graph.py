"""
Tests for SocialGraph:
- follow / unfollow
- is_following and the follower/following sets
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.errors import (
    AlreadyFollowingError,
    NotFollowingError,
    SelfFollowError,
    UserNotFoundError,
)
from conduit.models import User
from conduit.services.social import SocialGraph


class TestFollow:
    """SocialGraph.follow tests."""

    async def test_follow_creates_edge(self, db_session: AsyncSession, jake: User, alice: User):
        graph = SocialGraph(db_session)
        await graph.follow(alice.user_id, jake.user_id)

        assert await graph.is_following(alice.user_id, jake.user_id)
        assert not await graph.is_following(jake.user_id, alice.user_id)

    async def test_repeat_follow_rejected(self, db_session: AsyncSession, jake: User, alice: User):
        """The second insert is distinguishable from the first."""
        graph = SocialGraph(db_session)
        await graph.follow(alice.user_id, jake.user_id)

        with pytest.raises(AlreadyFollowingError):
            await graph.follow(alice.user_id, jake.user_id)

        assert await graph.list_followers(jake.user_id) == {alice.user_id}

    async def test_self_follow_rejected(self, db_session: AsyncSession, jake: User):
        with pytest.raises(SelfFollowError):
            await SocialGraph(db_session).follow(jake.user_id, jake.user_id)

    async def test_follow_unknown_user(self, db_session: AsyncSession, jake: User):
        with pytest.raises(UserNotFoundError):
            await SocialGraph(db_session).follow(jake.user_id, "missing")


class TestUnfollow:
    """SocialGraph.unfollow tests."""

    async def test_unfollow_removes_edge(self, db_session: AsyncSession, jake: User, alice: User):
        graph = SocialGraph(db_session)
        await graph.follow(alice.user_id, jake.user_id)
        await graph.unfollow(alice.user_id, jake.user_id)

        assert not await graph.is_following(alice.user_id, jake.user_id)

    async def test_unfollow_when_not_following(
        self, db_session: AsyncSession, jake: User, alice: User
    ):
        with pytest.raises(NotFollowingError):
            await SocialGraph(db_session).unfollow(alice.user_id, jake.user_id)

    async def test_follow_again_after_unfollow(
        self, db_session: AsyncSession, jake: User, alice: User
    ):
        graph = SocialGraph(db_session)
        await graph.follow(alice.user_id, jake.user_id)
        await graph.unfollow(alice.user_id, jake.user_id)
        await graph.follow(alice.user_id, jake.user_id)

        assert await graph.is_following(alice.user_id, jake.user_id)


class TestQueries:
    """Follower and following sets."""

    async def test_followers_and_following(
        self, db_session: AsyncSession, make_user, jake: User, alice: User
    ):
        bob = await make_user("bob")
        graph = SocialGraph(db_session)
        await graph.follow(alice.user_id, jake.user_id)
        await graph.follow(bob.user_id, jake.user_id)
        await graph.follow(jake.user_id, bob.user_id)

        assert await graph.list_followers(jake.user_id) == {alice.user_id, bob.user_id}
        assert await graph.list_following(jake.user_id) == {bob.user_id}
        assert await graph.list_following(alice.user_id) == {jake.user_id}
        assert await graph.list_followers(alice.user_id) == set()

    async def test_anonymous_viewer_follows_nobody(self, db_session: AsyncSession, jake: User):
        graph = SocialGraph(db_session)
        assert not await graph.is_following(None, jake.user_id)
        assert await graph.following_among(None, {jake.user_id}) == set()

    async def test_following_among(
        self, db_session: AsyncSession, make_user, jake: User, alice: User
    ):
        bob = await make_user("bob")
        graph = SocialGraph(db_session)
        await graph.follow(alice.user_id, jake.user_id)

        among = await graph.following_among(alice.user_id, {jake.user_id, bob.user_id})
        assert among == {jake.user_id}
