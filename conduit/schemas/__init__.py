"""Pydantic schemas for request/response validation."""

from conduit.schemas.articles import (
    ArticleListResponse,
    ArticleResponse,
    ArticleView,
    CommentListResponse,
    CommentResponse,
    CommentView,
    NewArticleRequest,
    NewCommentRequest,
    TagsResponse,
    UpdateArticleRequest,
)
from conduit.schemas.users import (
    LoginUserRequest,
    NewUserRequest,
    ProfileResponse,
    ProfileView,
    UpdateUserRequest,
    UserResponse,
    UserView,
)

__all__ = [
    "NewUserRequest",
    "LoginUserRequest",
    "UpdateUserRequest",
    "UserView",
    "UserResponse",
    "ProfileView",
    "ProfileResponse",
    "NewArticleRequest",
    "UpdateArticleRequest",
    "ArticleView",
    "ArticleResponse",
    "ArticleListResponse",
    "NewCommentRequest",
    "CommentView",
    "CommentResponse",
    "CommentListResponse",
    "TagsResponse",
]
