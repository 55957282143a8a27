"""Data access helpers for join requests and invitations."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from chorus_graph.models.invitation import CommunityInvitation
from chorus_graph.models.join_request import JoinRequest, RequestStatus

__all__ = ["InvitationRepository", "JoinRequestRepository"]


class JoinRequestRepository:
    """Thin wrapper around database access for join requests."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, request_id: int) -> JoinRequest | None:
        """Return a join request by identifier."""
        return self.session.get(JoinRequest, request_id)

    def find(self, community_id: int, user_id: str) -> JoinRequest | None:
        """Return the request row for ``(community_id, user_id)`` if any."""
        return self.session.scalars(
            select(JoinRequest).where(
                JoinRequest.community_id == community_id,
                JoinRequest.user_id == user_id,
            )
        ).first()

    def create(self, *, community_id: int, user_id: str) -> JoinRequest:
        """Insert a pending request."""
        request = JoinRequest(
            community_id=community_id,
            user_id=user_id,
            status=RequestStatus.PENDING,
        )
        self.session.add(request)
        self.session.flush()
        return request

    def list_for_community(
        self,
        community_id: int,
        status: RequestStatus,
        *,
        before: int | None = None,
        limit: int = 20,
    ) -> list[JoinRequest]:
        """Return requests for a community with ``status``, newest first."""
        stmt = select(JoinRequest).where(
            JoinRequest.community_id == community_id,
            JoinRequest.status == status,
        )
        if before is not None:
            stmt = stmt.where(JoinRequest.id < before)
        stmt = stmt.order_by(JoinRequest.id.desc()).limit(limit)
        return list(self.session.scalars(stmt))


class InvitationRepository:
    """Thin wrapper around database access for community invitations."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, invitation_id: int) -> CommunityInvitation | None:
        """Return an invitation by identifier."""
        return self.session.get(CommunityInvitation, invitation_id)

    def find(self, community_id: int, invitee_id: str) -> CommunityInvitation | None:
        """Return the invitation row for ``(community_id, invitee_id)`` if any."""
        return self.session.scalars(
            select(CommunityInvitation).where(
                CommunityInvitation.community_id == community_id,
                CommunityInvitation.invitee_id == invitee_id,
            )
        ).first()

    def create(self, *, community_id: int, inviter_id: str, invitee_id: str) -> CommunityInvitation:
        """Insert a pending invitation."""
        invitation = CommunityInvitation(
            community_id=community_id,
            inviter_id=inviter_id,
            invitee_id=invitee_id,
            status=RequestStatus.PENDING,
        )
        self.session.add(invitation)
        self.session.flush()
        return invitation

    def list_for_community(
        self,
        community_id: int,
        status: RequestStatus,
        *,
        before: int | None = None,
        limit: int = 20,
    ) -> list[CommunityInvitation]:
        """Return invitations for a community with ``status``, newest first."""
        stmt = select(CommunityInvitation).where(
            CommunityInvitation.community_id == community_id,
            CommunityInvitation.status == status,
        )
        if before is not None:
            stmt = stmt.where(CommunityInvitation.id < before)
        stmt = stmt.order_by(CommunityInvitation.id.desc()).limit(limit)
        return list(self.session.scalars(stmt))

    def list_for_invitee(
        self,
        invitee_id: str,
        status: RequestStatus,
        *,
        before: int | None = None,
        limit: int = 20,
    ) -> list[CommunityInvitation]:
        """Return invitations addressed to ``invitee_id``, newest first."""
        stmt = select(CommunityInvitation).where(
            CommunityInvitation.invitee_id == invitee_id,
            CommunityInvitation.status == status,
        )
        if before is not None:
            stmt = stmt.where(CommunityInvitation.id < before)
        stmt = stmt.order_by(CommunityInvitation.id.desc()).limit(limit)
        return list(self.session.scalars(stmt))
