"""Favorite index: which users favorited which articles."""

import logging

from sqlalchemy import delete, func, insert, select
from sqlalchemy.exc import IntegrityError

from conduit.errors import (
    AlreadyFavoritedError,
    ArticleNotFoundError,
    NotFavoritedError,
    UserNotFoundError,
)
from conduit.models.article import Article, ArticleFavorite
from conduit.models.user import User, utcnow
from conduit.services.base import Store, store_operation

logger = logging.getLogger(__name__)


class FavoriteIndex(Store):
    """Owns (article, user) favorite edges. Counts are derived, never stored."""

    @store_operation
    async def favorite(self, user_id: str, article_id: str) -> None:
        """Record that ``user_id`` favorites ``article_id``; a repeat is rejected by the key."""
        article = await self.db.execute(
            select(Article.article_id).where(Article.article_id == article_id)
        )
        if article.first() is None:
            raise ArticleNotFoundError()
        user = await self.db.execute(select(User.user_id).where(User.user_id == user_id))
        if user.first() is None:
            raise UserNotFoundError()

        now = utcnow()
        try:
            async with self.db.begin_nested():
                await self.db.execute(
                    insert(ArticleFavorite).values(
                        article_id=article_id,
                        user_id=user_id,
                        created_at=now,
                        updated_at=now,
                    )
                )
        except IntegrityError as exc:
            raise AlreadyFavoritedError() from exc

        await self.db.commit()
        logger.info("Favorited article", extra={"user_id": user_id, "article_id": article_id})

    @store_operation
    async def unfavorite(self, user_id: str, article_id: str) -> None:
        result = await self.db.execute(
            delete(ArticleFavorite).where(
                ArticleFavorite.article_id == article_id,
                ArticleFavorite.user_id == user_id,
            )
        )
        if result.rowcount == 0:
            raise NotFavoritedError()

        await self.db.commit()
        logger.info("Unfavorited article", extra={"user_id": user_id, "article_id": article_id})

    @store_operation
    async def favorite_count(self, article_id: str) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(ArticleFavorite)
            .where(ArticleFavorite.article_id == article_id)
        )
        return result.scalar_one()

    @store_operation
    async def is_favorited_by(self, user_id: str | None, article_id: str) -> bool:
        if user_id is None:
            return False
        result = await self.db.execute(
            select(ArticleFavorite.article_id).where(
                ArticleFavorite.article_id == article_id,
                ArticleFavorite.user_id == user_id,
            )
        )
        return result.first() is not None

    @store_operation
    async def counts_for(self, article_ids: set[str]) -> dict[str, int]:
        """Favorite counts for several articles; articles without favorites map to 0."""
        if not article_ids:
            return {}
        result = await self.db.execute(
            select(ArticleFavorite.article_id, func.count())
            .where(ArticleFavorite.article_id.in_(article_ids))
            .group_by(ArticleFavorite.article_id)
        )
        counts = dict.fromkeys(article_ids, 0)
        counts.update({article_id: count for article_id, count in result.all()})
        return counts

    @store_operation
    async def favorited_among(self, user_id: str | None, article_ids: set[str]) -> set[str]:
        """Subset of ``article_ids`` that ``user_id`` has favorited."""
        if user_id is None or not article_ids:
            return set()
        result = await self.db.execute(
            select(ArticleFavorite.article_id).where(
                ArticleFavorite.user_id == user_id,
                ArticleFavorite.article_id.in_(article_ids),
            )
        )
        return set(result.scalars())
