# src/chorus_graph/models/post.py
"""SQLAlchemy model for posts, read by the visibility resolver."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from chorus_graph.db.session import Base
from chorus_graph.db.time import utcnow


class PostVisibility(str, Enum):
    """Per-post readership setting."""

    PUBLIC = "public"
    PRIVATE = "private"
    FOLLOWERS = "followers"


class Post(Base):
    """Content authored by a user, optionally inside a community.

    Creation and editing happen elsewhere; this engine only decides who may
    read a post and records moderation deletes.
    """

    __tablename__ = "post"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    author_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    community_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("community.id", ondelete="CASCADE"), nullable=True, index=True
    )
    # Parent chain for replies; top-level posts have parent_id = NULL.
    parent_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("post.id", ondelete="CASCADE"), nullable=True
    )
    visibility: Mapped[PostVisibility] = mapped_column(
        SAEnum(PostVisibility, native_enum=False, length=16),
        nullable=False,
        default=PostVisibility.PUBLIC,
    )
    body_md: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    deleted: Mapped[bool] = mapped_column(default=False, nullable=False)
