"""Community membership registry: communities, roles and creator invariants.

The creator of a community holds an ADMIN membership created in the same
transaction as the community. That membership cannot be left, removed or
demoted.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from chorus_graph.core.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationFailedError,
)
from chorus_graph.core.settings import settings
from chorus_graph.db.transaction import atomic
from chorus_graph.models.community import (
    Community,
    CommunityMember,
    CommunityVisibility,
    MemberRole,
    community_name_key,
)
from chorus_graph.models.join_request import JoinRequest
from chorus_graph.repositories.community_repo import CommunityRepository
from chorus_graph.repositories.post_repo import PostRepository
from chorus_graph.services.authorization import Action, authorize, capabilities_for
from chorus_graph.services.identity import IdentityContext, require_identity
from chorus_graph.services.join_requests import submit_join_request
from chorus_graph.services.notifications import (
    NotificationEmitter,
    NotificationEvent,
    NotificationType,
    dispatch,
)

logger = logging.getLogger(__name__)

__all__ = [
    "JoinResult",
    "create_community",
    "get_community",
    "list_communities",
    "update_community",
    "delete_community",
    "join_community",
    "leave_community",
    "remove_member",
    "update_member_role",
    "role_of",
    "list_members",
    "community_permissions",
]

_UNSET = object()


@dataclass(frozen=True)
class JoinResult:
    """Outcome of a join: a membership (public) or a join request (private)."""

    membership: CommunityMember | None = None
    join_request: JoinRequest | None = None

    @property
    def joined(self) -> bool:
        """Return True when a membership was created directly."""
        return self.membership is not None


def _clean_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationFailedError("Community name is required")
    if len(cleaned) > settings.community_name_max_length:
        raise ValidationFailedError(
            f"Community name must be {settings.community_name_max_length} characters or less"
        )
    return cleaned


def _clean_description(description: str | None) -> str | None:
    if description is None:
        return None
    cleaned = description.strip()
    if len(cleaned) > settings.community_description_max_length:
        raise ValidationFailedError(
            "Description must be "
            f"{settings.community_description_max_length} characters or less"
        )
    return cleaned or None


def _load_community(repo: CommunityRepository, community_id: int) -> Community:
    community = repo.get(community_id)
    if community is None:
        raise NotFoundError("Community not found")
    return community


def create_community(
    db: Session,
    identity: IdentityContext,
    *,
    name: str,
    visibility: CommunityVisibility = CommunityVisibility.PUBLIC,
    description: str | None = None,
) -> tuple[Community, CommunityMember]:
    """Create a community and its creator's ADMIN membership atomically.

    Raises:
        ValidationFailedError: The name or description is out of bounds.
        ConflictError: Another community already uses the name (any case).
    """
    creator_id = require_identity(identity)
    cleaned_name = _clean_name(name)
    cleaned_description = _clean_description(description)
    repo = CommunityRepository(db)

    with atomic(db, "Community name already exists"):
        if repo.get_by_name(cleaned_name) is not None:
            raise ConflictError("Community name already exists")
        community = Community(
            name=cleaned_name,
            name_key=community_name_key(cleaned_name),
            description=cleaned_description,
            visibility=CommunityVisibility(visibility),
            creator_id=creator_id,
        )
        db.add(community)
        db.flush()
        membership = repo.add_membership(
            user_id=creator_id,
            community_id=community.id,
            role=MemberRole.ADMIN,
        )

    logger.info("Community %s (%s) created by %s", community.id, community.name, creator_id)
    return community, membership


def get_community(db: Session, community_id: int) -> Community:
    """Return community metadata; metadata is discoverable by anyone."""
    return _load_community(CommunityRepository(db), community_id)


def list_communities(
    db: Session,
    *,
    search: str | None = None,
    before: int | None = None,
    limit: int | None = None,
) -> list[Community]:
    """Return communities, newest first, optionally filtered by name."""
    return CommunityRepository(db).list_communities(
        search=search, before=before, limit=settings.clamp_page_size(limit)
    )


def update_community(
    db: Session,
    identity: IdentityContext,
    community_id: int,
    *,
    name: str | None = None,
    description: str | None | object = _UNSET,
    visibility: CommunityVisibility | None = None,
) -> Community:
    """Change community settings; ADMIN only."""
    caller_id = require_identity(identity)
    repo = CommunityRepository(db)
    with atomic(db, "Community name already exists"):
        community = _load_community(repo, community_id)
        authorize(repo.role_of(caller_id, community_id), Action.MANAGE_COMMUNITY)
        if name is not None:
            cleaned_name = _clean_name(name)
            existing = repo.get_by_name(cleaned_name)
            if existing is not None and existing.id != community.id:
                raise ConflictError("Community name already exists")
            community.name = cleaned_name
            community.name_key = community_name_key(cleaned_name)
        if description is not _UNSET:
            community.description = _clean_description(description)  # type: ignore[arg-type]
        if visibility is not None:
            community.visibility = CommunityVisibility(visibility)
        db.flush()
    logger.info("Community %s updated by %s", community_id, caller_id)
    return community


def delete_community(db: Session, identity: IdentityContext, community_id: int) -> None:
    """Delete a community with its memberships, requests, invitations and posts; ADMIN only."""
    caller_id = require_identity(identity)
    repo = CommunityRepository(db)
    with atomic(db):
        community = _load_community(repo, community_id)
        authorize(repo.role_of(caller_id, community_id), Action.MANAGE_COMMUNITY)
        PostRepository(db).delete_for_community(community_id)
        db.delete(community)
        db.flush()
    logger.info("Community %s deleted by %s", community_id, caller_id)


def join_community(
    db: Session,
    identity: IdentityContext,
    community_id: int,
) -> JoinResult:
    """Join a public community directly, or file a join request for a private one.

    Raises:
        NotFoundError: Unknown community.
        ConflictError: The caller is already a member, or (private) already
            has a pending request.
    """
    user_id = require_identity(identity)
    repo = CommunityRepository(db)
    community = _load_community(repo, community_id)

    if community.is_private:
        return JoinResult(join_request=submit_join_request(db, identity, community_id))

    with atomic(db, "Already a member of this community"):
        if repo.get_membership(user_id, community_id) is not None:
            raise ConflictError("Already a member of this community")
        membership = repo.add_membership(user_id=user_id, community_id=community_id)
    logger.info("User %s joined community %s", user_id, community_id)
    return JoinResult(membership=membership)


def leave_community(db: Session, identity: IdentityContext, community_id: int) -> None:
    """Delete the caller's membership.

    Raises:
        NotFoundError: Unknown community or the caller is not a member.
        ForbiddenError: The caller created the community.
    """
    user_id = require_identity(identity)
    repo = CommunityRepository(db)
    with atomic(db):
        community = _load_community(repo, community_id)
        membership = repo.get_membership(user_id, community_id)
        if membership is None:
            raise NotFoundError("Not a member of this community")
        if community.creator_id == user_id:
            raise ForbiddenError("Creator cannot leave. Transfer ownership first.")
        db.delete(membership)
        db.flush()
    logger.info("User %s left community %s", user_id, community_id)


def remove_member(
    db: Session,
    identity: IdentityContext,
    community_id: int,
    membership_id: int,
    *,
    emitter: NotificationEmitter | None = None,
) -> None:
    """Remove another member; ADMIN only, never an ADMIN and never oneself.

    Raises:
        AuthorizationDeniedError: The caller is not an ADMIN of the community.
        NotFoundError: The membership does not belong to the community.
        ForbiddenError: The target is an ADMIN or the caller.
    """
    caller_id = require_identity(identity)
    repo = CommunityRepository(db)
    with atomic(db):
        _load_community(repo, community_id)
        authorize(repo.role_of(caller_id, community_id), Action.REMOVE_MEMBER)
        target = repo.get_membership_by_id(membership_id)
        if target is None or target.community_id != community_id:
            raise NotFoundError("Member not found")
        if target.user_id == caller_id:
            raise ForbiddenError("Cannot remove yourself")
        if target.role == MemberRole.ADMIN:
            raise ForbiddenError("Cannot remove an admin")
        removed_user_id = target.user_id
        db.delete(target)
        db.flush()

    logger.info(
        "Member %s removed from community %s by %s", removed_user_id, community_id, caller_id
    )
    dispatch(
        emitter,
        [
            NotificationEvent(
                type=NotificationType.MEMBER_REMOVED,
                actor_id=caller_id,
                recipient_ids=(removed_user_id,),
                subject_id=community_id,
                context={"membership_id": membership_id},
            )
        ],
    )


def update_member_role(
    db: Session,
    identity: IdentityContext,
    community_id: int,
    membership_id: int,
    role: MemberRole,
) -> CommunityMember:
    """Change a member's role; ADMIN only.

    Raises:
        ForbiddenError: The target is the community creator being demoted.
        ConflictError: The change would leave the community without an ADMIN.
    """
    caller_id = require_identity(identity)
    new_role = MemberRole(role)
    repo = CommunityRepository(db)
    with atomic(db):
        community = _load_community(repo, community_id)
        authorize(repo.role_of(caller_id, community_id), Action.CHANGE_MEMBER_ROLE)
        target = repo.get_membership_by_id(membership_id)
        if target is None or target.community_id != community_id:
            raise NotFoundError("Member not found")
        if target.role == MemberRole.ADMIN and new_role != MemberRole.ADMIN:
            if target.user_id == community.creator_id:
                raise ForbiddenError("The community creator must remain an admin")
            if repo.count_role(community_id, MemberRole.ADMIN) <= 1:
                raise ConflictError("Cannot change role: At least one admin is required")
        target.role = new_role
        db.flush()
    logger.info(
        "Member %s in community %s set to %s by %s",
        target.user_id,
        community_id,
        new_role.value,
        caller_id,
    )
    return target


def role_of(db: Session, user_id: str, community_id: int) -> MemberRole | None:
    """Return the user's role in the community, or None when not a member."""
    return CommunityRepository(db).role_of(user_id, community_id)


def list_members(
    db: Session,
    community_id: int,
    *,
    search: str | None = None,
    before: int | None = None,
    limit: int | None = None,
) -> list[CommunityMember]:
    """Return memberships, most recently joined first."""
    repo = CommunityRepository(db)
    _load_community(repo, community_id)
    return repo.list_members(
        community_id,
        search=search,
        before=before,
        limit=settings.clamp_page_size(limit),
    )


def community_permissions(
    db: Session,
    identity: IdentityContext,
    community_id: int,
) -> tuple[MemberRole | None, list[Action]]:
    """Return the caller's role in the community and the actions it grants."""
    user_id = require_identity(identity)
    repo = CommunityRepository(db)
    _load_community(repo, community_id)
    role = repo.role_of(user_id, community_id)
    return role, capabilities_for(role)
