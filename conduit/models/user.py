"""User model."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import TIMESTAMP, Column, String, UniqueConstraint, text

from conduit.database import Base


def new_id() -> str:
    """Opaque identifier used for users and articles."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """Registered account. Only bio, image, email and credential change after creation."""

    __tablename__ = "user"

    user_id = Column(String(36), primary_key=True, default=new_id)
    username = Column(String(50), nullable=False)
    email = Column(String(100), nullable=False)
    bio = Column(String(250), nullable=False, default="", server_default=text("''"))
    image = Column(String(250))
    password_hash = Column(String(250), nullable=False)
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

    __table_args__ = (
        UniqueConstraint("username", name="key_username"),
        UniqueConstraint("email", name="key_email"),
    )

    def __repr__(self) -> str:
        return f"<User {self.username}>"
