"""Assemble response views from store records, batching the per-viewer flags."""

from sqlalchemy.ext.asyncio import AsyncSession

from conduit.models import Article, ArticleComment, User
from conduit.schemas.articles import ArticleView, CommentView
from conduit.schemas.users import ProfileView
from conduit.services.favorites import FavoriteIndex
from conduit.services.social import SocialGraph


def profile_view(user: User, following: bool) -> ProfileView:
    return ProfileView(
        username=user.username,
        bio=user.bio,
        image=user.image,
        following=following,
    )


async def article_views(
    db: AsyncSession, articles: list[Article], viewer_id: str | None
) -> list[ArticleView]:
    """Build article views with one query per flag, not one per article."""
    article_ids = {article.article_id for article in articles}
    author_ids = {article.user_id for article in articles}

    favorites = FavoriteIndex(db)
    counts = await favorites.counts_for(article_ids)
    favorited = await favorites.favorited_among(viewer_id, article_ids)
    following = await SocialGraph(db).following_among(viewer_id, author_ids)

    return [
        ArticleView(
            slug=article.slug,
            title=article.title,
            description=article.description,
            body=article.body,
            tag_list=article.tag_list,
            created_at=article.created_at,
            updated_at=article.updated_at,
            favorited=article.article_id in favorited,
            favorites_count=counts.get(article.article_id, 0),
            author=profile_view(article.author, article.user_id in following),
        )
        for article in articles
    ]


async def article_view(db: AsyncSession, article: Article, viewer_id: str | None) -> ArticleView:
    views = await article_views(db, [article], viewer_id)
    return views[0]


async def comment_views(
    db: AsyncSession, comments: list[ArticleComment], viewer_id: str | None
) -> list[CommentView]:
    following = await SocialGraph(db).following_among(
        viewer_id, {comment.user_id for comment in comments}
    )
    return [
        CommentView(
            id=comment.comment_id,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
            body=comment.body,
            author=profile_view(comment.author, comment.user_id in following),
        )
        for comment in comments
    ]
