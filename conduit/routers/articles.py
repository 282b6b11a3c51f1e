"""Articles router: articles, feed, favorites, and tags."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.auth.dependencies import AuthUser, get_current_user, get_optional_user
from conduit.database import get_db
from conduit.errors import AlreadyFavoritedError, NotFavoritedError
from conduit.routers.views import article_view, article_views
from conduit.schemas.articles import (
    ArticleListResponse,
    ArticleResponse,
    NewArticleRequest,
    TagsResponse,
    UpdateArticleRequest,
)
from conduit.services.articles import ArticleStore
from conduit.services.favorites import FavoriteIndex

router = APIRouter(prefix="/api", tags=["Articles"])


@router.get(
    "/articles",
    response_model=ArticleListResponse,
    status_code=status.HTTP_200_OK,
)
async def list_articles(
    tag: str | None = Query(default=None),
    author: str | None = Query(default=None),
    favorited: str | None = Query(default=None),
    limit: int | None = Query(default=None),
    offset: int | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    auth: AuthUser | None = Depends(get_optional_user),
) -> ArticleListResponse:
    """
    List articles, most recent first.

    Filters by tag, author username, or the username of a user who favorited
    the article.
    """
    articles = await ArticleStore(db).list_by_filter(
        author=author,
        tag=tag,
        favorited_by=favorited,
        limit=limit,
        offset=offset,
    )
    views = await article_views(db, articles, auth.user_id if auth else None)
    return ArticleListResponse(articles=views, articles_count=len(views))


@router.get(
    "/articles/feed",
    response_model=ArticleListResponse,
    status_code=status.HTTP_200_OK,
)
async def feed_articles(
    limit: int | None = Query(default=None),
    offset: int | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    auth: AuthUser = Depends(get_current_user),
) -> ArticleListResponse:
    """Articles by the users the caller follows, most recent first."""
    articles = await ArticleStore(db).list_feed(auth.user_id, limit=limit, offset=offset)
    views = await article_views(db, articles, auth.user_id)
    return ArticleListResponse(articles=views, articles_count=len(views))


@router.post(
    "/articles",
    response_model=ArticleResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_article(
    data: NewArticleRequest,
    db: AsyncSession = Depends(get_db),
    auth: AuthUser = Depends(get_current_user),
) -> ArticleResponse:
    """Publish an article. The slug is derived from the title."""
    article = await ArticleStore(db).create(
        auth.user_id,
        data.article.title,
        data.article.description,
        data.article.body,
        data.article.tag_list,
    )
    return ArticleResponse(article=await article_view(db, article, auth.user_id))


@router.get(
    "/articles/{slug}",
    response_model=ArticleResponse,
    status_code=status.HTTP_200_OK,
)
async def get_article(
    slug: str,
    db: AsyncSession = Depends(get_db),
    auth: AuthUser | None = Depends(get_optional_user),
) -> ArticleResponse:
    article = await ArticleStore(db).get_by_slug(slug)
    return ArticleResponse(article=await article_view(db, article, auth.user_id if auth else None))


@router.put(
    "/articles/{slug}",
    response_model=ArticleResponse,
    status_code=status.HTTP_200_OK,
)
async def update_article(
    slug: str,
    data: UpdateArticleRequest,
    db: AsyncSession = Depends(get_db),
    auth: AuthUser = Depends(get_current_user),
) -> ArticleResponse:
    """Edit an article. Only its author may; a new title changes the slug."""
    store = ArticleStore(db)
    article = await store.get_by_slug(slug)
    article = await store.update(
        article.article_id,
        auth.user_id,
        title=data.article.title,
        description=data.article.description,
        body=data.article.body,
        tags=data.article.tag_list,
    )
    return ArticleResponse(article=await article_view(db, article, auth.user_id))


@router.delete(
    "/articles/{slug}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_article(
    slug: str,
    db: AsyncSession = Depends(get_db),
    auth: AuthUser = Depends(get_current_user),
) -> None:
    """Delete an article with its favorites and comments. Only its author may."""
    store = ArticleStore(db)
    article = await store.get_by_slug(slug)
    await store.delete(article.article_id, auth.user_id)


@router.post(
    "/articles/{slug}/favorite",
    response_model=ArticleResponse,
    status_code=status.HTTP_200_OK,
)
async def favorite_article(
    slug: str,
    db: AsyncSession = Depends(get_db),
    auth: AuthUser = Depends(get_current_user),
) -> ArticleResponse:
    """Favorite an article. Favoriting it again is a no-op."""
    store = ArticleStore(db)
    article = await store.get_by_slug(slug)

    try:
        await FavoriteIndex(db).favorite(auth.user_id, article.article_id)
    except AlreadyFavoritedError:
        # Already favorited, return current state (idempotent)
        pass

    article = await store.get_by_slug(slug)
    return ArticleResponse(article=await article_view(db, article, auth.user_id))


@router.delete(
    "/articles/{slug}/favorite",
    response_model=ArticleResponse,
    status_code=status.HTTP_200_OK,
)
async def unfavorite_article(
    slug: str,
    db: AsyncSession = Depends(get_db),
    auth: AuthUser = Depends(get_current_user),
) -> ArticleResponse:
    """Remove a favorite. Removing one that does not exist is a no-op."""
    store = ArticleStore(db)
    article = await store.get_by_slug(slug)

    try:
        await FavoriteIndex(db).unfavorite(auth.user_id, article.article_id)
    except NotFavoritedError:
        pass

    article = await store.get_by_slug(slug)
    return ArticleResponse(article=await article_view(db, article, auth.user_id))


@router.get(
    "/tags",
    response_model=TagsResponse,
    status_code=status.HTTP_200_OK,
    tags=["Tags"],
)
async def get_tags(
    db: AsyncSession = Depends(get_db),
) -> TagsResponse:
    """Every tag in use, sorted."""
    return TagsResponse(tags=await ArticleStore(db).list_tags())
