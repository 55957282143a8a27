"""SQLAlchemy model for the unilateral follow relation."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from chorus_graph.db.session import Base
from chorus_graph.db.time import utcnow


class Follow(Base):
    """``follower_id`` subscribes to ``following_id``'s followers-only posts.

    Read-only input to visibility resolution; its lifecycle is owned elsewhere.
    """

    __tablename__ = "follow"

    follower_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("app_user.id", ondelete="CASCADE"), primary_key=True
    )
    following_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("app_user.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
