"""
Tests for FavoriteIndex:
- favorite / unfavorite
- counts and per-user flags
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.errors import AlreadyFavoritedError, ArticleNotFoundError, NotFavoritedError
from conduit.models import Article, User
from conduit.services.articles import ArticleStore
from conduit.services.favorites import FavoriteIndex


@pytest.fixture
async def article(db_session: AsyncSession, jake: User) -> Article:
    return await ArticleStore(db_session).create(
        jake.user_id, "How to train your dragon", "Ever wonder how?", "You have to believe", []
    )


class TestFavorite:
    """FavoriteIndex.favorite / unfavorite tests."""

    async def test_favorite_counts_once(self, db_session: AsyncSession, article: Article, alice: User):
        index = FavoriteIndex(db_session)
        await index.favorite(alice.user_id, article.article_id)

        assert await index.favorite_count(article.article_id) == 1
        assert await index.is_favorited_by(alice.user_id, article.article_id)

    async def test_repeat_favorite_rejected(
        self, db_session: AsyncSession, article: Article, alice: User
    ):
        """A second favorite by the same user is rejected and the count stays at one."""
        index = FavoriteIndex(db_session)
        await index.favorite(alice.user_id, article.article_id)

        with pytest.raises(AlreadyFavoritedError):
            await index.favorite(alice.user_id, article.article_id)

        assert await index.favorite_count(article.article_id) == 1

    async def test_favorite_missing_article(self, db_session: AsyncSession, alice: User):
        with pytest.raises(ArticleNotFoundError):
            await FavoriteIndex(db_session).favorite(alice.user_id, "missing")

    async def test_unfavorite(self, db_session: AsyncSession, article: Article, alice: User):
        index = FavoriteIndex(db_session)
        await index.favorite(alice.user_id, article.article_id)
        await index.unfavorite(alice.user_id, article.article_id)

        assert await index.favorite_count(article.article_id) == 0
        assert not await index.is_favorited_by(alice.user_id, article.article_id)

    async def test_unfavorite_when_not_favorited(
        self, db_session: AsyncSession, article: Article, alice: User
    ):
        with pytest.raises(NotFavoritedError):
            await FavoriteIndex(db_session).unfavorite(alice.user_id, article.article_id)


class TestCounts:
    """Batch helpers used when rendering article lists."""

    async def test_counts_for_includes_zeroes(
        self, db_session: AsyncSession, article: Article, jake: User, alice: User
    ):
        other = await ArticleStore(db_session).create(jake.user_id, "Other", "d", "b", [])
        index = FavoriteIndex(db_session)
        await index.favorite(alice.user_id, article.article_id)
        await index.favorite(jake.user_id, article.article_id)

        counts = await index.counts_for({article.article_id, other.article_id})
        assert counts == {article.article_id: 2, other.article_id: 0}

    async def test_favorited_among(
        self, db_session: AsyncSession, article: Article, jake: User, alice: User
    ):
        other = await ArticleStore(db_session).create(jake.user_id, "Other", "d", "b", [])
        index = FavoriteIndex(db_session)
        await index.favorite(alice.user_id, other.article_id)

        ids = {article.article_id, other.article_id}
        assert await index.favorited_among(alice.user_id, ids) == {other.article_id}
        assert await index.favorited_among(None, ids) == set()

    async def test_anonymous_never_favorited(self, db_session: AsyncSession, article: Article):
        assert not await FavoriteIndex(db_session).is_favorited_by(None, article.article_id)
