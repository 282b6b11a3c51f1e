"""Database models for the Conduit core."""

from conduit.models.article import Article, ArticleComment, ArticleFavorite
from conduit.models.follow import Follow
from conduit.models.user import User

__all__ = [
    "User",
    "Follow",
    "Article",
    "ArticleFavorite",
    "ArticleComment",
]
