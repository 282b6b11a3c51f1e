"""Article, comment, and tag schemas."""

from datetime import datetime

from conduit.schemas.base import CamelModel
from conduit.schemas.users import ProfileView


class NewArticle(CamelModel):
    """Article creation payload."""

    title: str
    description: str
    body: str
    tag_list: list[str] = []


class NewArticleRequest(CamelModel):
    article: NewArticle


class UpdateArticle(CamelModel):
    """Partial article update. Omitted fields are left unchanged."""

    title: str | None = None
    description: str | None = None
    body: str | None = None
    tag_list: list[str] | None = None


class UpdateArticleRequest(CamelModel):
    article: UpdateArticle


class ArticleView(CamelModel):
    slug: str
    title: str
    description: str
    body: str
    tag_list: list[str]
    created_at: datetime
    updated_at: datetime
    favorited: bool
    favorites_count: int
    author: ProfileView


class ArticleResponse(CamelModel):
    article: ArticleView


class ArticleListResponse(CamelModel):
    articles: list[ArticleView]
    articles_count: int


class NewComment(CamelModel):
    body: str


class NewCommentRequest(CamelModel):
    comment: NewComment


class CommentView(CamelModel):
    id: int
    created_at: datetime
    updated_at: datetime
    body: str
    author: ProfileView


class CommentResponse(CamelModel):
    comment: CommentView


class CommentListResponse(CamelModel):
    comments: list[CommentView]


class TagsResponse(CamelModel):
    tags: list[str]
