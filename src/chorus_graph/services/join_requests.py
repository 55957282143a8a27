"""Join-request workflow for private communities."""
from __future__ import annotations

import logging
from enum import Enum

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
from chorus_graph.models.join_request import JoinRequest, RequestStatus
from chorus_graph.repositories.community_repo import CommunityRepository
from chorus_graph.repositories.request_repo import JoinRequestRepository
from chorus_graph.services.authorization import Action, authorize
from chorus_graph.services.identity import IdentityContext, require_identity
from chorus_graph.services.notifications import (
    NotificationEmitter,
    NotificationEvent,
    NotificationType,
    dispatch,
)

logger = logging.getLogger(__name__)

__all__ = [
    "ReviewDecision",
    "submit_join_request",
    "review_join_request",
    "cancel_join_request",
    "list_join_requests",
    "parse_decision",
]


class ReviewDecision(str, Enum):
    """Outcome chosen by a reviewer or an invitee."""

    ACCEPT = "accept"
    REJECT = "reject"


def parse_decision(decision: ReviewDecision | str) -> ReviewDecision:
    """Coerce ``decision`` or raise ``ValidationFailedError``."""
    try:
        return ReviewDecision(decision)
    except ValueError as err:
        raise ValidationFailedError('Invalid action. Must be "accept" or "reject"') from err


def submit_join_request(
    db: Session,
    identity: IdentityContext,
    community_id: int,
) -> JoinRequest:
    """File (or refile) the caller's request to join a private community.

    A REJECTED request, or an ACCEPTED one whose user has since left, is reset
    to PENDING in place.

    Raises:
        NotFoundError: Unknown community.
        InvalidStateError: The community is public; join directly instead.
        ConflictError: The caller is already a member or has a pending request.
    """
    user_id = require_identity(identity)
    communities = CommunityRepository(db)
    requests = JoinRequestRepository(db)

    with atomic(db, "Join request already pending"):
        community = communities.get(community_id)
        if community is None:
            raise NotFoundError("Community not found")
        if not community.is_private:
            raise InvalidStateError("Public communities can be joined directly")
        if communities.get_membership(user_id, community_id) is not None:
            raise ConflictError("Already a member of this community")

        request = requests.find(community_id, user_id)
        if request is None:
            request = requests.create(community_id=community_id, user_id=user_id)
        elif request.status == RequestStatus.PENDING:
            raise ConflictError("Join request already pending")
        else:
            request.status = RequestStatus.PENDING
            request.reviewed_by_id = None
            db.flush()

    logger.info(
        "Join request %s submitted by %s for community %s", request.id, user_id, community_id
    )
    return request


def review_join_request(
    db: Session,
    identity: IdentityContext,
    request_id: int,
    decision: ReviewDecision | str,
    *,
    emitter: NotificationEmitter | None = None,
) -> JoinRequest:
    """Accept or reject a pending join request; ADMIN or MODERATOR only.

    Accepting re-checks membership inside the transaction. If the user already
    joined by another path (for example an accepted invitation) the request is
    only marked ACCEPTED. A concurrent insert of the same membership surfaces
    as ``ConflictError``; retrying then takes the already-member branch.

    Raises:
        NotFoundError: Unknown request.
        AuthorizationDeniedError: The reviewer lacks the role.
        InvalidStateError: The request is no longer PENDING.
    """
    reviewer_id = require_identity(identity)
    choice = parse_decision(decision)
    communities = CommunityRepository(db)
    requests = JoinRequestRepository(db)
    membership_created = False

    with atomic(db, "Membership was created concurrently; retry the review"):
        request = requests.get(request_id)
        if request is None:
            raise NotFoundError("Join request not found")
        authorize(communities.role_of(reviewer_id, request.community_id), Action.REVIEW_REQUESTS)
        if request.status != RequestStatus.PENDING:
            raise InvalidStateError("Join request has already been reviewed")
        if choice is ReviewDecision.ACCEPT:
            _, membership_created = communities.ensure_membership(
                user_id=request.user_id, community_id=request.community_id
            )
            request.status = RequestStatus.ACCEPTED
        else:
            request.status = RequestStatus.REJECTED
        request.reviewed_by_id = reviewer_id
        db.flush()

    logger.info(
        "Join request %s %s by %s (membership created: %s)",
        request.id,
        request.status.value,
        reviewer_id,
        membership_created,
    )
    if request.status == RequestStatus.ACCEPTED:
        dispatch(
            emitter,
            [
                NotificationEvent(
                    type=NotificationType.JOIN_REQUEST_ACCEPTED,
                    actor_id=reviewer_id,
                    recipient_ids=(request.user_id,),
                    subject_id=request.community_id,
                    context={"join_request_id": request.id},
                )
            ],
        )
    return request


def cancel_join_request(db: Session, identity: IdentityContext, request_id: int) -> JoinRequest:
    """Withdraw the caller's own pending request; the row is deleted."""
    user_id = require_identity(identity)
    requests = JoinRequestRepository(db)
    with atomic(db):
        request = requests.get(request_id)
        if request is None:
            raise NotFoundError("Join request not found")
        if request.user_id != user_id:
            raise AuthorizationDeniedError("Only the requester can cancel a join request")
        if request.status != RequestStatus.PENDING:
            raise InvalidStateError("Only pending join requests can be cancelled")
        db.delete(request)
        db.flush()
    logger.info("Join request %s cancelled by %s", request_id, user_id)
    return request


def list_join_requests(
    db: Session,
    identity: IdentityContext,
    community_id: int,
    *,
    status: RequestStatus = RequestStatus.PENDING,
    before: int | None = None,
    limit: int | None = None,
) -> list[JoinRequest]:
    """Return a community's join requests; ADMIN or MODERATOR only."""
    reviewer_id = require_identity(identity)
    communities = CommunityRepository(db)
    if communities.get(community_id) is None:
        raise NotFoundError("Community not found")
    authorize(communities.role_of(reviewer_id, community_id), Action.REVIEW_REQUESTS)
    return JoinRequestRepository(db).list_for_community(
        community_id,
        RequestStatus(status),
        before=before,
        limit=settings.clamp_page_size(limit),
    )
