"""Data access helpers for communities and memberships."""
from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from chorus_graph.models.community import (
    Community,
    CommunityMember,
    MemberRole,
    community_name_key,
)
from chorus_graph.models.user import User

__all__ = ["CommunityRepository"]


class CommunityRepository:
    """Thin wrapper around database access for communities and their members."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, community_id: int) -> Community | None:
        """Return a community by identifier."""
        return self.session.get(Community, community_id)

    def get_by_name(self, name: str) -> Community | None:
        """Return a community by name, ignoring case."""
        return self.session.scalars(
            select(Community).where(Community.name_key == community_name_key(name))
        ).first()

    def list_communities(
        self,
        *,
        search: str | None = None,
        before: int | None = None,
        limit: int = 20,
    ) -> list[Community]:
        """Return communities, newest first, optionally filtered by name."""
        stmt = select(Community)
        if search:
            stmt = stmt.where(Community.name_key.contains(community_name_key(search)))
        if before is not None:
            stmt = stmt.where(Community.id < before)
        stmt = stmt.order_by(Community.id.desc()).limit(limit)
        return list(self.session.scalars(stmt))

    def get_membership(self, user_id: str, community_id: int) -> CommunityMember | None:
        """Return the membership row for ``(user_id, community_id)`` if any."""
        return self.session.scalars(
            select(CommunityMember).where(
                CommunityMember.user_id == user_id,
                CommunityMember.community_id == community_id,
            )
        ).first()

    def get_membership_by_id(self, membership_id: int) -> CommunityMember | None:
        """Return a membership by identifier."""
        return self.session.get(CommunityMember, membership_id)

    def role_of(self, user_id: str, community_id: int) -> MemberRole | None:
        """Return the user's role in the community, or None for non-members."""
        return self.session.scalars(
            select(CommunityMember.role).where(
                CommunityMember.user_id == user_id,
                CommunityMember.community_id == community_id,
            )
        ).first()

    def add_membership(
        self,
        *,
        user_id: str,
        community_id: int,
        role: MemberRole = MemberRole.USER,
    ) -> CommunityMember:
        """Insert a membership row and flush so constraint violations surface here."""
        membership = CommunityMember(user_id=user_id, community_id=community_id, role=role)
        self.session.add(membership)
        self.session.flush()
        return membership

    def ensure_membership(self, *, user_id: str, community_id: int) -> tuple[CommunityMember, bool]:
        """Return the user's membership, creating a USER one if absent.

        The second element is True when a row was inserted. Callers run this
        inside ``atomic`` so a concurrent insert that wins the race turns into
        a rejected write on flush.
        """
        existing = self.get_membership(user_id, community_id)
        if existing is not None:
            return existing, False
        return self.add_membership(user_id=user_id, community_id=community_id), True

    def count_role(self, community_id: int, role: MemberRole) -> int:
        """Return how many members hold ``role``."""
        return self.session.scalar(
            select(func.count()).select_from(CommunityMember).where(
                CommunityMember.community_id == community_id,
                CommunityMember.role == role,
            )
        ) or 0

    def list_members(
        self,
        community_id: int,
        *,
        search: str | None = None,
        before: int | None = None,
        limit: int = 20,
    ) -> list[CommunityMember]:
        """Return memberships, most recently joined first."""
        stmt = select(CommunityMember).where(CommunityMember.community_id == community_id)
        if search:
            needle = f"%{search.strip().lower()}%"
            stmt = stmt.join(User, User.id == CommunityMember.user_id).where(
                func.lower(User.username).like(needle)
                | func.lower(func.coalesce(User.display_name, "")).like(needle)
            )
        if before is not None:
            stmt = stmt.where(CommunityMember.id < before)
        stmt = stmt.order_by(CommunityMember.id.desc()).limit(limit)
        return list(self.session.scalars(stmt))

    def shared_community_counts(self, user_id: str) -> dict[str, int]:
        """Return, per other user, how many communities they share with ``user_id``."""
        mine = select(CommunityMember.community_id).where(CommunityMember.user_id == user_id)
        rows = self.session.execute(
            select(CommunityMember.user_id, func.count())
            .where(
                CommunityMember.community_id.in_(mine),
                CommunityMember.user_id != user_id,
            )
            .group_by(CommunityMember.user_id)
        ).all()
        return {other_id: count for other_id, count in rows}
