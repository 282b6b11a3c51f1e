"""Stores owning the Conduit tables."""

from conduit.services.articles import ArticleStore, normalize_tags, slugify
from conduit.services.comments import CommentLog
from conduit.services.favorites import FavoriteIndex
from conduit.services.identity import IdentityStore
from conduit.services.social import SocialGraph

__all__ = [
    "IdentityStore",
    "SocialGraph",
    "ArticleStore",
    "FavoriteIndex",
    "CommentLog",
    "slugify",
    "normalize_tags",
]
