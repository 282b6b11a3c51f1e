"""Comment log: append-only comments on articles."""

import logging

from sqlalchemy import delete, select
from sqlalchemy.orm import selectinload

from conduit.errors import (
    ArticleNotFoundError,
    CommentNotFoundError,
    NotAuthorError,
    UserNotFoundError,
)
from conduit.models.article import Article, ArticleComment
from conduit.models.user import User
from conduit.services.base import Store, require_text, store_operation

logger = logging.getLogger(__name__)


class CommentLog(Store):
    """Owns comments. Ids come from the database and are never reused."""

    @store_operation
    async def add(self, article_id: str, author_id: str, body: str) -> ArticleComment:
        body = require_text("body", body, strip=False)

        article = await self.db.execute(
            select(Article.article_id).where(Article.article_id == article_id)
        )
        if article.first() is None:
            raise ArticleNotFoundError()

        author = await self.db.execute(select(User.user_id).where(User.user_id == author_id))
        if author.first() is None:
            raise UserNotFoundError()

        comment = ArticleComment(article_id=article_id, user_id=author_id, body=body)
        self.db.add(comment)
        await self.db.flush()
        await self.db.commit()

        logger.info(
            "Added comment",
            extra={"user_id": author_id, "article_id": article_id, "comment_id": comment.comment_id},
        )
        return await self._get(comment.comment_id)

    @store_operation
    async def remove(
        self, comment_id: int, requester_id: str, article_id: str | None = None
    ) -> None:
        """
        Delete a comment. Only its author may.

        When ``article_id`` is given, a comment on a different article is
        reported as not found.
        """
        comment = await self._get(comment_id)
        if article_id is not None and comment.article_id != article_id:
            raise CommentNotFoundError()
        if comment.user_id != requester_id:
            raise NotAuthorError()

        await self.db.execute(
            delete(ArticleComment)
            .where(ArticleComment.comment_id == comment_id)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        self.db.expunge(comment)
        logger.info("Removed comment", extra={"user_id": requester_id, "comment_id": comment_id})

    @store_operation
    async def list_by_article(self, article_id: str) -> list[ArticleComment]:
        """Comments on an article, oldest first."""
        result = await self.db.execute(
            select(ArticleComment)
            .options(selectinload(ArticleComment.author))
            .where(ArticleComment.article_id == article_id)
            .order_by(ArticleComment.created_at.asc(), ArticleComment.comment_id.asc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    @store_operation
    async def get(self, comment_id: int) -> ArticleComment:
        return await self._get(comment_id)

    async def _get(self, comment_id: int) -> ArticleComment:
        result = await self.db.execute(
            select(ArticleComment)
            .options(selectinload(ArticleComment.author))
            .where(ArticleComment.comment_id == comment_id)
            .execution_options(populate_existing=True)
        )
        comment = result.scalar_one_or_none()
        if comment is None:
            raise CommentNotFoundError()
        return comment
