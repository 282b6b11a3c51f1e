"""Article, ArticleFavorite and ArticleComment models."""

from sqlalchemy import (
    JSON,
    TIMESTAMP,
    BigInteger,
    Column,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects import mysql
from sqlalchemy.orm import relationship

from conduit.database import Base
from conduit.models.user import new_id, utcnow

SLUG_MAX_LENGTH = 36

# MySQL TEXT tops out at 64KB; article bodies are unbounded.
LongText = Text().with_variant(mysql.LONGTEXT(), "mysql")

# SQLite only auto-increments an INTEGER PRIMARY KEY.
CommentId = BigInteger().with_variant(Integer(), "sqlite")


def _created_at() -> Column:
    return Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )


def _updated_at() -> Column:
    return Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )


class Article(Base):
    """Article authored by a user, addressed publicly by its slug."""

    __tablename__ = "article"

    article_id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), nullable=False)
    slug = Column(String(SLUG_MAX_LENGTH), nullable=False)
    title = Column(String(250), nullable=False)
    description = Column(String(500), nullable=False)
    body = Column(LongText, nullable=False)
    tag_list = Column(JSON, nullable=False)
    created_at = _created_at()
    updated_at = _updated_at()

    __table_args__ = (
        UniqueConstraint("slug", name="key_slug"),
    )

    author = relationship(
        "User",
        primaryjoin="foreign(Article.user_id) == User.user_id",
        viewonly=True,
        lazy="raise",
    )


class ArticleFavorite(Base):
    """Favorite edge between an article and a user."""

    __tablename__ = "article_favorite"

    article_id = Column(String(36), primary_key=True)
    user_id = Column(String(36), primary_key=True)
    created_at = _created_at()
    updated_at = _updated_at()


class ArticleComment(Base):
    """Comment on an article. Ids increase monotonically and are never reused."""

    __tablename__ = "article_comment"

    comment_id = Column(CommentId, primary_key=True, autoincrement=True)
    article_id = Column(String(36), nullable=False)
    user_id = Column(String(36), nullable=False)
    body = Column(Text, nullable=False)
    created_at = _created_at()
    updated_at = _updated_at()

    __table_args__ = {"sqlite_autoincrement": True}

    author = relationship(
        "User",
        primaryjoin="foreign(ArticleComment.user_id) == User.user_id",
        viewonly=True,
        lazy="raise",
    )
