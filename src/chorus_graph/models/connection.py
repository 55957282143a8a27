"""SQLAlchemy model for the symmetric connection relationship."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from chorus_graph.db.session import Base
from chorus_graph.db.time import utcnow


class ConnectionStatus(str, Enum):
    """Lifecycle of a connection edge."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    BLOCKED = "BLOCKED"


def canonical_pair(first_user_id: str, second_user_id: str) -> tuple[str, str]:
    """Return the unordered pair ``{a, b}`` as ``(min, max)``."""
    if first_user_id <= second_user_id:
        return first_user_id, second_user_id
    return second_user_id, first_user_id


class Connection(Base):
    """One directed row per unordered pair of users.

    ``user_id`` is the requester and ``connected_user_id`` the recipient. The
    canonical ``(user_low_id, user_high_id)`` columns carry the pair uniqueness
    constraint so a reverse-direction duplicate is rejected by the store.
    """

    __tablename__ = "connection"
    __table_args__ = (
        UniqueConstraint("user_low_id", "user_high_id", name="uq_connection_pair"),
        CheckConstraint("user_id <> connected_user_id", name="ck_connection_not_self"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    connected_user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_low_id: Mapped[str] = mapped_column(String(64), nullable=False)
    user_high_id: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[ConnectionStatus] = mapped_column(
        SAEnum(ConnectionStatus, native_enum=False, length=16),
        nullable=False,
        default=ConnectionStatus.PENDING,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    def involves(self, user_id: str) -> bool:
        """Return True if ``user_id`` is either end of the edge."""
        return user_id in (self.user_id, self.connected_user_id)

    def is_requester(self, user_id: str) -> bool:
        """Return True if ``user_id`` created the edge."""
        return self.user_id == user_id

    def other_user_id(self, viewer_id: str) -> str:
        """Return the end of the edge that is not ``viewer_id``."""
        return self.connected_user_id if self.user_id == viewer_id else self.user_id
