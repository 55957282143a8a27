"""Invitation workflow: members asking non-members to join a community."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from chorus_graph.core.errors import (
    AuthorizationDeniedError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationFailedError,
)
from chorus_graph.core.settings import settings
from chorus_graph.db.transaction import atomic
from chorus_graph.models.community import Community, MemberRole
from chorus_graph.models.invitation import CommunityInvitation
from chorus_graph.models.join_request import RequestStatus
from chorus_graph.models.user import User
from chorus_graph.repositories.community_repo import CommunityRepository
from chorus_graph.repositories.request_repo import InvitationRepository, JoinRequestRepository
from chorus_graph.repositories.user_repo import UserRepository
from chorus_graph.services.authorization import Action, authorize, can
from chorus_graph.services.identity import IdentityContext, require_identity
from chorus_graph.services.join_requests import ReviewDecision, parse_decision
from chorus_graph.services.notifications import (
    NotificationEmitter,
    NotificationEvent,
    NotificationType,
    dispatch,
)

logger = logging.getLogger(__name__)

__all__ = [
    "BulkInviteResult",
    "invite",
    "bulk_invite",
    "respond_invitation",
    "revoke_invitation",
    "list_received_invitations",
    "list_community_invitations",
]


@dataclass
class BulkInviteResult:
    """Per-username outcome of a bulk invite."""

    invited: list[str] = field(default_factory=list)
    already_members: list[str] = field(default_factory=list)
    already_invited: list[str] = field(default_factory=list)
    not_found: list[str] = field(default_factory=list)


def _load_community(communities: CommunityRepository, community_id: int) -> Community:
    community = communities.get(community_id)
    if community is None:
        raise NotFoundError("Community not found")
    return community


def _place_invitation(
    invitations: InvitationRepository,
    communities: CommunityRepository,
    *,
    community_id: int,
    inviter_id: str,
    invitee: User,
) -> CommunityInvitation:
    """Create or reopen the invitation row; raises ``ConflictError`` when not applicable."""
    if communities.get_membership(invitee.id, community_id) is not None:
        raise ConflictError("User is already a member")
    invitation = invitations.find(community_id, invitee.id)
    if invitation is None:
        return invitations.create(
            community_id=community_id, inviter_id=inviter_id, invitee_id=invitee.id
        )
    if invitation.status == RequestStatus.PENDING:
        raise ConflictError("Invitation already pending")
    # Rejected, or accepted by someone who has since left.
    invitation.status = RequestStatus.PENDING
    invitation.inviter_id = inviter_id
    invitations.session.flush()
    return invitation


def _sent_event(invitation: CommunityInvitation, community_id: int) -> NotificationEvent:
    return NotificationEvent(
        type=NotificationType.INVITATION_SENT,
        actor_id=invitation.inviter_id,
        recipient_ids=(invitation.invitee_id,),
        subject_id=invitation.id,
        context={"community_id": community_id},
    )


def invite(
    db: Session,
    identity: IdentityContext,
    community_id: int,
    invitee_username: str,
    *,
    emitter: NotificationEmitter | None = None,
) -> CommunityInvitation:
    """Invite a user by username. Any member may invite.

    Raises:
        NotFoundError: Unknown community or username.
        AuthorizationDeniedError: The caller is not a member.
        ConflictError: The invitee is a member or already has a pending invitation.
    """
    inviter_id = require_identity(identity)
    communities = CommunityRepository(db)
    invitations = InvitationRepository(db)

    with atomic(db, "Invitation already pending"):
        _load_community(communities, community_id)
        authorize(communities.role_of(inviter_id, community_id), Action.INVITE_MEMBER)
        invitee = UserRepository(db).get_by_username(invitee_username)
        if invitee is None:
            raise NotFoundError("User not found")
        invitation = _place_invitation(
            invitations,
            communities,
            community_id=community_id,
            inviter_id=inviter_id,
            invitee=invitee,
        )

    logger.info("Invitation %s sent by %s to %s", invitation.id, inviter_id, invitation.invitee_id)
    dispatch(emitter, [_sent_event(invitation, community_id)])
    return invitation


def bulk_invite(
    db: Session,
    identity: IdentityContext,
    community_id: int,
    usernames: Sequence[str],
    *,
    emitter: NotificationEmitter | None = None,
) -> BulkInviteResult:
    """Invite several users at once; ADMIN or MODERATOR only.

    Every username is classified rather than failing the whole batch. The
    writes share one transaction.
    """
    inviter_id = require_identity(identity)
    cleaned = list(dict.fromkeys(name.strip().lower() for name in usernames if name.strip()))
    if not cleaned:
        raise ValidationFailedError("At least one username is required")
    if len(cleaned) > settings.bulk_invite_limit:
        raise ValidationFailedError(
            f"Maximum {settings.bulk_invite_limit} invitations per request"
        )

    communities = CommunityRepository(db)
    invitations = InvitationRepository(db)
    result = BulkInviteResult()
    placed: list[CommunityInvitation] = []

    with atomic(db, "Invitations changed concurrently; retry the request"):
        _load_community(communities, community_id)
        authorize(communities.role_of(inviter_id, community_id), Action.BULK_INVITE)
        users = {user.username: user for user in UserRepository(db).list_by_usernames(cleaned)}
        for username in cleaned:
            invitee = users.get(username)
            if invitee is None:
                result.not_found.append(username)
                continue
            if communities.get_membership(invitee.id, community_id) is not None:
                result.already_members.append(username)
                continue
            existing = invitations.find(community_id, invitee.id)
            if existing is not None and existing.status == RequestStatus.PENDING:
                result.already_invited.append(username)
                continue
            placed.append(
                _place_invitation(
                    invitations,
                    communities,
                    community_id=community_id,
                    inviter_id=inviter_id,
                    invitee=invitee,
                )
            )
            result.invited.append(username)

    logger.info(
        "Bulk invite by %s to community %s: %d invited, %d skipped",
        inviter_id,
        community_id,
        len(result.invited),
        len(cleaned) - len(result.invited),
    )
    dispatch(emitter, [_sent_event(invitation, community_id) for invitation in placed])
    return result


def respond_invitation(
    db: Session,
    identity: IdentityContext,
    invitation_id: int,
    decision: ReviewDecision | str,
    *,
    emitter: NotificationEmitter | None = None,
) -> CommunityInvitation:
    """Accept or reject an invitation addressed to the caller.

    Accepting uses the same race-guarded membership creation as join-request
    review: an existing membership is reused, never duplicated.

    Raises:
        NotFoundError: Unknown invitation.
        AuthorizationDeniedError: The caller is not the invitee.
        InvalidStateError: The invitation is no longer PENDING.
    """
    invitee_id = require_identity(identity)
    choice = parse_decision(decision)
    communities = CommunityRepository(db)
    invitations = InvitationRepository(db)
    membership_created = False

    with atomic(db, "Membership was created concurrently; retry the response"):
        invitation = invitations.get(invitation_id)
        if invitation is None:
            raise NotFoundError("Invitation not found")
        if invitation.invitee_id != invitee_id:
            raise AuthorizationDeniedError("Only the invitee can respond to an invitation")
        if invitation.status != RequestStatus.PENDING:
            raise InvalidStateError("Invitation has already been answered")
        if choice is ReviewDecision.ACCEPT:
            _, membership_created = communities.ensure_membership(
                user_id=invitee_id, community_id=invitation.community_id
            )
            invitation.status = RequestStatus.ACCEPTED
            # The invitation settles any request still waiting for review.
            join_request = JoinRequestRepository(db).find(invitation.community_id, invitee_id)
            if join_request is not None and join_request.status == RequestStatus.PENDING:
                join_request.status = RequestStatus.ACCEPTED
                join_request.reviewed_by_id = invitation.inviter_id
        else:
            invitation.status = RequestStatus.REJECTED
        db.flush()

    logger.info(
        "Invitation %s %s by %s (membership created: %s)",
        invitation.id,
        invitation.status.value,
        invitee_id,
        membership_created,
    )
    if invitation.status == RequestStatus.ACCEPTED:
        dispatch(
            emitter,
            [
                NotificationEvent(
                    type=NotificationType.INVITATION_ACCEPTED,
                    actor_id=invitee_id,
                    recipient_ids=(invitation.inviter_id,),
                    subject_id=invitation.id,
                    context={"community_id": invitation.community_id},
                )
            ],
        )
    return invitation


def revoke_invitation(
    db: Session,
    identity: IdentityContext,
    invitation_id: int,
) -> CommunityInvitation:
    """Delete an invitation; allowed to the invitee or a community ADMIN/MODERATOR."""
    caller_id = require_identity(identity)
    communities = CommunityRepository(db)
    with atomic(db):
        invitation = InvitationRepository(db).get(invitation_id)
        if invitation is None:
            raise NotFoundError("Invitation not found")
        if invitation.invitee_id != caller_id:
            role: MemberRole | None = communities.role_of(caller_id, invitation.community_id)
            if not can(role, Action.REVIEW_REQUESTS):
                raise AuthorizationDeniedError("Not authorized to revoke this invitation")
        db.delete(invitation)
        db.flush()
    logger.info("Invitation %s revoked by %s", invitation_id, caller_id)
    return invitation


def list_received_invitations(
    db: Session,
    identity: IdentityContext,
    *,
    status: RequestStatus = RequestStatus.PENDING,
    before: int | None = None,
    limit: int | None = None,
) -> list[CommunityInvitation]:
    """Return invitations addressed to the caller, newest first."""
    invitee_id = require_identity(identity)
    return InvitationRepository(db).list_for_invitee(
        invitee_id,
        RequestStatus(status),
        before=before,
        limit=settings.clamp_page_size(limit),
    )


def list_community_invitations(
    db: Session,
    identity: IdentityContext,
    community_id: int,
    *,
    status: RequestStatus = RequestStatus.PENDING,
    before: int | None = None,
    limit: int | None = None,
) -> list[CommunityInvitation]:
    """Return a community's invitations; ADMIN or MODERATOR only."""
    caller_id = require_identity(identity)
    communities = CommunityRepository(db)
    _load_community(communities, community_id)
    authorize(communities.role_of(caller_id, community_id), Action.REVIEW_REQUESTS)
    return InvitationRepository(db).list_for_community(
        community_id,
        RequestStatus(status),
        before=before,
        limit=settings.clamp_page_size(limit),
    )
