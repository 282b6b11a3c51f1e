"""Article store: articles, slugs, and tag lists."""

import logging
import re
import unicodedata
from collections.abc import Iterable

from sqlalchemy import cast, delete, exists, func, literal, select, update
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from conduit.config import settings
from conduit.database import is_unique_violation
from conduit.errors import (
    ArticleNotFoundError,
    NotAuthorError,
    SlugCollisionError,
    UserNotFoundError,
    ValidationFailedError,
)
from conduit.models.article import SLUG_MAX_LENGTH, Article, ArticleComment, ArticleFavorite
from conduit.models.follow import Follow
from conduit.models.user import User, utcnow
from conduit.services.base import Store, clamp_page, require_text, store_operation

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 250
DESCRIPTION_MAX_LENGTH = 500

_QUOTES = re.compile(r"['\"`]")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(title: str, max_length: int = SLUG_MAX_LENGTH) -> str:
    """
    Derive a URL-safe slug from a title.

    "How to Train Your Dragon" -> "how-to-train-your-dragon"; accents are
    folded to ASCII, quotes vanish ("Don't" -> "dont"), and every other run
    of non-alphanumerics becomes a single hyphen.
    """
    text = unicodedata.normalize("NFKD", title).encode("ascii", "ignore").decode("ascii")
    text = _QUOTES.sub("", text.lower())
    slug = _NON_ALNUM.sub("-", text).strip("-")
    return slug[:max_length].rstrip("-")


def slug_candidate(base: str, attempt: int, max_length: int = SLUG_MAX_LENGTH) -> str:
    """The slug tried on a given attempt: ``base``, then ``base-2``, ``base-3``, ..."""
    if attempt <= 1:
        return base
    suffix = f"-{attempt}"
    return base[: max_length - len(suffix)].rstrip("-") + suffix


def normalize_tags(tags: Iterable[str] | None) -> list[str]:
    """Trim tags, drop blanks and duplicates, keep first-seen order."""
    if tags is None:
        return []
    if isinstance(tags, str):
        raise ValidationFailedError("tagList", "must be a list of strings")
    seen: list[str] = []
    for tag in tags:
        if not isinstance(tag, str):
            raise ValidationFailedError("tagList", "must be a list of strings")
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


def _base_slug(title: str) -> str:
    base = slugify(title)
    if not base:
        raise ValidationFailedError("title", "must contain at least one letter or digit")
    return base


class ArticleStore(Store):
    """Owns articles. Slug uniqueness is enforced by the ``key_slug`` index."""

    @store_operation
    async def create(
        self,
        author_id: str,
        title: str,
        description: str,
        body: str,
        tags: Iterable[str] | None = None,
    ) -> Article:
        """
        Create an article with a slug derived from its title.

        A slug already in use is retried as ``-2``, ``-3``, ... against the
        unique index; after ``slug_max_attempts`` tries ``SlugCollisionError``
        is raised.
        """
        title = require_text("title", title, TITLE_MAX_LENGTH)
        description = self._check_description(description)
        body = require_text("body", body, strip=False)
        tag_list = normalize_tags(tags)
        base = _base_slug(title)

        author = await self.db.execute(select(User.user_id).where(User.user_id == author_id))
        if author.first() is None:
            raise UserNotFoundError()

        for attempt in range(1, settings.slug_max_attempts + 1):
            article = Article(
                user_id=author_id,
                slug=slug_candidate(base, attempt),
                title=title,
                description=description,
                body=body,
                tag_list=tag_list,
            )
            try:
                async with self.db.begin_nested():
                    self.db.add(article)
                    await self.db.flush()
            except IntegrityError as exc:
                if not is_unique_violation(exc, "key_slug", "article.slug"):
                    raise
                logger.debug("Slug %s taken, retrying", article.slug)
                continue

            await self.db.commit()
            logger.info(
                "Created article %s",
                article.slug,
                extra={"user_id": author_id, "article_id": article.article_id},
            )
            return await self._get(article.article_id)

        raise SlugCollisionError()

    @store_operation
    async def update(
        self,
        article_id: str,
        editor_id: str,
        *,
        title: str | None = None,
        description: str | None = None,
        body: str | None = None,
        tags: Iterable[str] | None = None,
    ) -> Article:
        """Partially update an article. Only its author may; a new title regenerates the slug."""
        article = await self._get(article_id)
        if article.user_id != editor_id:
            raise NotAuthorError()

        values: dict[str, object] = {}
        base = None
        if title is not None:
            title = require_text("title", title, TITLE_MAX_LENGTH)
            if title != article.title:
                values["title"] = title
                base = _base_slug(title)
        if description is not None:
            values["description"] = self._check_description(description)
        if body is not None:
            values["body"] = require_text("body", body, strip=False)
        if tags is not None:
            values["tag_list"] = normalize_tags(tags)

        if not values:
            return article
        values["updated_at"] = utcnow()

        attempts = settings.slug_max_attempts if base else 1
        for attempt in range(1, attempts + 1):
            if base:
                values["slug"] = slug_candidate(base, attempt)
            try:
                async with self.db.begin_nested():
                    await self.db.execute(
                        update(Article)
                        .where(Article.article_id == article_id)
                        .values(**values)
                        .execution_options(synchronize_session=False)
                    )
            except IntegrityError as exc:
                if base and is_unique_violation(exc, "key_slug", "article.slug"):
                    continue
                raise

            await self.db.commit()
            logger.info(
                "Updated article fields %s",
                sorted(values),
                extra={"user_id": editor_id, "article_id": article_id},
            )
            return await self._get(article_id)

        raise SlugCollisionError()

    @store_operation
    async def delete(self, article_id: str, requester_id: str) -> None:
        """Delete an article together with its favorites and comments, atomically."""
        article = await self._get(article_id)
        if article.user_id != requester_id:
            raise NotAuthorError()

        async with self.db.begin_nested():
            await self.db.execute(
                delete(ArticleFavorite).where(ArticleFavorite.article_id == article_id)
            )
            await self.db.execute(
                delete(ArticleComment).where(ArticleComment.article_id == article_id)
            )
            await self.db.execute(
                delete(Article)
                .where(Article.article_id == article_id)
                .execution_options(synchronize_session=False)
            )
        await self.db.commit()
        self.db.expunge(article)
        logger.info("Deleted article", extra={"user_id": requester_id, "article_id": article_id})

    @store_operation
    async def get_by_slug(self, slug: str) -> Article:
        result = await self.db.execute(
            select(Article)
            .options(selectinload(Article.author))
            .where(Article.slug == slug)
            .execution_options(populate_existing=True)
        )
        article = result.scalar_one_or_none()
        if article is None:
            raise ArticleNotFoundError(f"Article '{slug}' not found")
        return article

    @store_operation
    async def get(self, article_id: str) -> Article:
        return await self._get(article_id)

    @store_operation
    async def list_by_filter(
        self,
        *,
        author: str | None = None,
        tag: str | None = None,
        favorited_by: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[Article]:
        """
        List articles, most recent first (ties broken by id).

        ``author`` and ``favorited_by`` are usernames; ``tag`` matches one
        entry of the tag list exactly.
        """
        limit, offset = clamp_page(
            limit, offset, settings.default_page_size, settings.max_page_size
        )
        query = select(Article).options(selectinload(Article.author))

        if author is not None:
            query = query.where(
                Article.user_id.in_(select(User.user_id).where(User.username == author))
            )
        if tag is not None:
            query = query.where(self._has_tag(tag))
        if favorited_by is not None:
            query = query.where(
                Article.article_id.in_(
                    select(ArticleFavorite.article_id)
                    .join(User, User.user_id == ArticleFavorite.user_id)
                    .where(User.username == favorited_by)
                )
            )

        return await self._page(query, limit, offset)

    @store_operation
    async def list_feed(
        self, user_id: str, *, limit: int | None = None, offset: int | None = None
    ) -> list[Article]:
        """Articles written by the users ``user_id`` follows, most recent first."""
        limit, offset = clamp_page(
            limit, offset, settings.default_page_size, settings.max_page_size
        )
        query = (
            select(Article)
            .options(selectinload(Article.author))
            .where(
                Article.user_id.in_(
                    select(Follow.followed_user_id).where(Follow.following_user_id == user_id)
                )
            )
        )
        return await self._page(query, limit, offset)

    @store_operation
    async def list_tags(self) -> list[str]:
        """Every distinct tag in use, sorted."""
        result = await self.db.execute(select(Article.tag_list))
        tags: set[str] = set()
        for tag_list in result.scalars():
            tags.update(tag_list or [])
        return sorted(tags)

    # --- helpers ---

    async def _get(self, article_id: str) -> Article:
        result = await self.db.execute(
            select(Article)
            .options(selectinload(Article.author))
            .where(Article.article_id == article_id)
            .execution_options(populate_existing=True)
        )
        article = result.scalar_one_or_none()
        if article is None:
            raise ArticleNotFoundError()
        return article

    async def _page(self, query, limit: int, offset: int) -> list[Article]:
        query = (
            query.order_by(Article.created_at.desc(), Article.article_id.desc())
            .limit(limit)
            .offset(offset)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    def _has_tag(self, tag: str):
        """Dialect-specific membership test on the JSON tag list."""
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            return cast(Article.tag_list, JSONB).contains([tag])
        if dialect in ("mysql", "mariadb"):
            return func.json_contains(Article.tag_list, func.json_array(tag)) == 1
        tags = func.json_each(Article.tag_list).table_valued("value")
        return exists(select(literal(1)).select_from(tags).where(tags.c.value == tag))

    @staticmethod
    def _check_description(description: str | None) -> str:
        description = (description or "").strip()
        if len(description) > DESCRIPTION_MAX_LENGTH:
            raise ValidationFailedError(
                "description", f"must be {DESCRIPTION_MAX_LENGTH} characters or less"
            )
        return description
