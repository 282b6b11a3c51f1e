"""Initial schema: users, follows, articles, favorites, comments."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import mysql

revision = "20261018_01_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("user_id", sa.String(36), primary_key=True),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("email", sa.String(100), nullable=False),
        sa.Column("bio", sa.String(250), nullable=False, server_default=sa.text("''")),
        sa.Column("image", sa.String(250), nullable=True),
        sa.Column("password_hash", sa.String(250), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("username", name="key_username"),
        sa.UniqueConstraint("email", name="key_email"),
    )

    op.create_table(
        "follow",
        sa.Column("followed_user_id", sa.String(36), primary_key=True),
        sa.Column("following_user_id", sa.String(36), primary_key=True),
        *_timestamps(),
    )

    op.create_table(
        "article",
        sa.Column("article_id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("slug", sa.String(36), nullable=False),
        sa.Column("title", sa.String(250), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("body", sa.Text().with_variant(mysql.LONGTEXT(), "mysql"), nullable=False),
        sa.Column("tag_list", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("slug", name="key_slug"),
    )

    op.create_table(
        "article_favorite",
        sa.Column("article_id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), primary_key=True),
        *_timestamps(),
    )

    op.create_table(
        "article_comment",
        sa.Column(
            "comment_id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            primary_key=True,
            autoincrement=True,
        ),
        sa.Column("article_id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        *_timestamps(),
        sqlite_autoincrement=True,
    )


def downgrade() -> None:
    op.drop_table("article_comment")
    op.drop_table("article_favorite")
    op.drop_table("article")
    op.drop_table("follow")
    op.drop_table("user")
