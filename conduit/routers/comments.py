"""Comments router: comments on an article."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.auth.dependencies import AuthUser, get_current_user, get_optional_user
from conduit.database import get_db
from conduit.routers.views import comment_views
from conduit.schemas.articles import CommentListResponse, CommentResponse, NewCommentRequest
from conduit.services.articles import ArticleStore
from conduit.services.comments import CommentLog

router = APIRouter(prefix="/api/articles/{slug}/comments", tags=["Comments"])


@router.get(
    "",
    response_model=CommentListResponse,
    status_code=status.HTTP_200_OK,
)
async def list_comments(
    slug: str,
    db: AsyncSession = Depends(get_db),
    auth: AuthUser | None = Depends(get_optional_user),
) -> CommentListResponse:
    """Comments on an article, oldest first."""
    article = await ArticleStore(db).get_by_slug(slug)
    comments = await CommentLog(db).list_by_article(article.article_id)
    views = await comment_views(db, comments, auth.user_id if auth else None)
    return CommentListResponse(comments=views)


@router.post(
    "",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    slug: str,
    data: NewCommentRequest,
    db: AsyncSession = Depends(get_db),
    auth: AuthUser = Depends(get_current_user),
) -> CommentResponse:
    article = await ArticleStore(db).get_by_slug(slug)
    comment = await CommentLog(db).add(article.article_id, auth.user_id, data.comment.body)
    views = await comment_views(db, [comment], auth.user_id)
    return CommentResponse(comment=views[0])


@router.delete(
    "/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_comment(
    slug: str,
    comment_id: int,
    db: AsyncSession = Depends(get_db),
    auth: AuthUser = Depends(get_current_user),
) -> None:
    """
    Delete a comment. Only its author may.

    A comment that belongs to a different article answers 404.
    """
    article = await ArticleStore(db).get_by_slug(slug)
    await CommentLog(db).remove(comment_id, auth.user_id, article_id=article.article_id)
