"""SQLAlchemy models for communities and role-bearing memberships."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chorus_graph.db.session import Base
from chorus_graph.db.time import utcnow

if TYPE_CHECKING:
    from .event import CommunityEvent
    from .invitation import CommunityInvitation
    from .join_request import JoinRequest


class CommunityVisibility(str, Enum):
    """Whether anyone may join directly or membership goes through review."""

    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"


class MemberRole(str, Enum):
    """Flat role enum; capabilities live in the authorization table."""

    ADMIN = "ADMIN"
    MODERATOR = "MODERATOR"
    USER = "USER"


def community_name_key(name: str) -> str:
    """Return the case-insensitive uniqueness key for a community name."""
    return name.strip().casefold()


class Community(Base):
    """Named group owned by its creator."""

    __tablename__ = "community"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    # Lower-cased copy of ``name``; unique so concurrent creates cannot both win.
    name_key: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    visibility: Mapped[CommunityVisibility] = mapped_column(
        SAEnum(CommunityVisibility, native_enum=False, length=16),
        nullable=False,
        default=CommunityVisibility.PUBLIC,
    )
    creator_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("app_user.id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    memberships: Mapped[list[CommunityMember]] = relationship(
        "CommunityMember",
        back_populates="community",
        cascade="all, delete-orphan",
    )
    join_requests: Mapped[list[JoinRequest]] = relationship(
        "JoinRequest",
        cascade="all, delete-orphan",
    )
    invitations: Mapped[list[CommunityInvitation]] = relationship(
        "CommunityInvitation",
        cascade="all, delete-orphan",
    )
    events: Mapped[list[CommunityEvent]] = relationship(
        "CommunityEvent",
        cascade="all, delete-orphan",
    )

    @property
    def is_private(self) -> bool:
        """Return True for communities that gate content behind membership."""
        return self.visibility == CommunityVisibility.PRIVATE


class CommunityMember(Base):
    """A user's role in one community; at most one row per (user, community)."""

    __tablename__ = "community_member"
    __table_args__ = (
        UniqueConstraint("user_id", "community_id", name="uq_community_member_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    community_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("community.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[MemberRole] = mapped_column(
        SAEnum(MemberRole, native_enum=False, length=16),
        nullable=False,
        default=MemberRole.USER,
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    community: Mapped[Community] = relationship("Community", back_populates="memberships")
