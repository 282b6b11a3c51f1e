"""Follow edges between users."""

from sqlalchemy import TIMESTAMP, Column, String, text

from conduit.database import Base
from conduit.models.user import utcnow


class Follow(Base):
    """
    Directed edge: ``following_user_id`` follows ``followed_user_id``.

    The ordered pair is the primary key, so a second insert of the same
    edge is rejected by the store itself.
    """

    __tablename__ = "follow"

    followed_user_id = Column(String(36), primary_key=True)
    following_user_id = Column(String(36), primary_key=True)
    created_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
