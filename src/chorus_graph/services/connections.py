"""Connection graph: symmetric friendship over a single directed edge.

Each unordered pair of users has at most one ``Connection`` row. The viewer's
side of an edge is always resolved through the row's requester/recipient
columns rather than by storing a row per direction.

Re-request policy: once an edge exists in any status it blocks a new request.
A REJECTED edge therefore cannot be re-requested; only the deletion of an
ACCEPTED edge frees the pair.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.orm import Session

from chorus_graph.core.errors import (
    AuthorizationDeniedError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    SelfReferenceError,
    ValidationFailedError,
)
from chorus_graph.core.settings import settings
from chorus_graph.db.transaction import atomic
from chorus_graph.models.connection import Connection, ConnectionStatus
from chorus_graph.models.user import User
from chorus_graph.repositories.community_repo import CommunityRepository
from chorus_graph.repositories.connection_repo import ConnectionRepository
from chorus_graph.repositories.user_repo import UserRepository
from chorus_graph.services.identity import IdentityContext, require_identity
from chorus_graph.services.notifications import (
    NotificationEmitter,
    NotificationEvent,
    NotificationType,
    dispatch,
)

logger = logging.getLogger(__name__)

__all__ = [
    "ConnectionDecision",
    "RelationshipStatus",
    "ConnectionStatusView",
    "ConnectionEdgeView",
    "ConnectionSuggestion",
    "request_connection",
    "respond_connection",
    "accept_connection",
    "reject_connection",
    "remove_connection",
    "connection_status",
    "list_connections",
    "list_pending_requests",
    "mutual_connections",
    "suggest_connections",
]


class ConnectionDecision(str, Enum):
    """Recipient's answer to a pending request."""

    ACCEPT = "accept"
    REJECT = "reject"


class RelationshipStatus(str, Enum):
    """Viewer-relative projection of the edge between two users."""

    NOT_CONNECTED = "not_connected"
    REQUEST_SENT = "request_sent"
    REQUEST_RECEIVED = "request_received"
    CONNECTED = "connected"
    REJECTED = "rejected"
    BLOCKED = "blocked"
    SELF = "self"


@dataclass(frozen=True)
class ConnectionStatusView:
    """What one user sees of their relationship with another."""

    status: RelationshipStatus
    can_connect: bool
    connection_id: int | None = None
    is_requester: bool | None = None


@dataclass(frozen=True)
class ConnectionSuggestion:
    """A user the viewer is not yet related to, with the reasons to connect."""

    user: User
    mutual_connections: int
    shared_communities: int


@dataclass(frozen=True)
class ConnectionEdgeView:
    """A connection row normalized to the viewer's side."""

    id: int
    other_user_id: str
    status: ConnectionStatus
    is_requester: bool
    connection: Connection


def _project(connection: Connection, viewer_id: str) -> ConnectionStatusView:
    is_requester = connection.is_requester(viewer_id)
    if connection.status == ConnectionStatus.PENDING:
        status = (
            RelationshipStatus.REQUEST_SENT if is_requester else RelationshipStatus.REQUEST_RECEIVED
        )
        can_connect = not is_requester
    elif connection.status == ConnectionStatus.ACCEPTED:
        status, can_connect = RelationshipStatus.CONNECTED, False
    elif connection.status == ConnectionStatus.REJECTED:
        status, can_connect = RelationshipStatus.REJECTED, False
    else:
        status, can_connect = RelationshipStatus.BLOCKED, False
    return ConnectionStatusView(
        status=status,
        can_connect=can_connect,
        connection_id=connection.id,
        is_requester=is_requester,
    )


def _edge_view(connection: Connection, viewer_id: str) -> ConnectionEdgeView:
    return ConnectionEdgeView(
        id=connection.id,
        other_user_id=connection.other_user_id(viewer_id),
        status=connection.status,
        is_requester=connection.is_requester(viewer_id),
        connection=connection,
    )


def request_connection(
    db: Session,
    identity: IdentityContext,
    target_id: str,
    *,
    emitter: NotificationEmitter | None = None,
) -> Connection:
    """Create a PENDING edge from the caller to ``target_id``.

    Raises:
        SelfReferenceError: The caller targeted themselves.
        NotFoundError: The target user does not exist.
        ConflictError: An edge already exists between the pair, in any status
            and either direction (including a concurrent request that won).
    """
    requester_id = require_identity(identity)
    if requester_id == target_id:
        raise SelfReferenceError()

    repo = ConnectionRepository(db)
    with atomic(db, "Connection already exists or request already sent"):
        if UserRepository(db).get(target_id) is None:
            raise NotFoundError("User not found")
        if repo.find_between(requester_id, target_id) is not None:
            raise ConflictError("Connection already exists or request already sent")
        connection = repo.create(requester_id=requester_id, target_id=target_id)

    logger.info("Connection %s requested by %s", connection.id, requester_id)
    dispatch(
        emitter,
        [
            NotificationEvent(
                type=NotificationType.CONNECTION_REQUESTED,
                actor_id=requester_id,
                recipient_ids=(target_id,),
                subject_id=connection.id,
            )
        ],
    )
    return connection


def respond_connection(
    db: Session,
    identity: IdentityContext,
    connection_id: int,
    decision: ConnectionDecision | str,
    *,
    emitter: NotificationEmitter | None = None,
) -> Connection:
    """Accept or reject a pending request addressed to the caller.

    Raises:
        ValidationFailedError: ``decision`` is not accept/reject.
        NotFoundError: No such connection.
        AuthorizationDeniedError: The caller is not the edge's recipient.
        InvalidStateError: The edge is no longer PENDING.
    """
    caller_id = require_identity(identity)
    try:
        decision = ConnectionDecision(decision)
    except ValueError as err:
        raise ValidationFailedError('Invalid action. Must be "accept" or "reject"') from err

    repo = ConnectionRepository(db)
    with atomic(db):
        connection = repo.get(connection_id)
        if connection is None or not connection.involves(caller_id):
            raise NotFoundError("Connection not found")
        if connection.connected_user_id != caller_id:
            raise AuthorizationDeniedError("You can only respond to requests sent to you")
        if connection.status != ConnectionStatus.PENDING:
            raise InvalidStateError("No pending connection request found")
        if decision is ConnectionDecision.ACCEPT:
            connection.status = ConnectionStatus.ACCEPTED
            event_type = NotificationType.CONNECTION_ACCEPTED
        else:
            connection.status = ConnectionStatus.REJECTED
            event_type = NotificationType.CONNECTION_REJECTED
        db.flush()

    logger.info("Connection %s %s by %s", connection.id, connection.status.value, caller_id)
    dispatch(
        emitter,
        [
            NotificationEvent(
                type=event_type,
                actor_id=caller_id,
                recipient_ids=(connection.user_id,),
                subject_id=connection.id,
            )
        ],
    )
    return connection


def accept_connection(
    db: Session,
    identity: IdentityContext,
    connection_id: int,
    *,
    emitter: NotificationEmitter | None = None,
) -> Connection:
    """Accept a pending request addressed to the caller."""
    return respond_connection(
        db, identity, connection_id, ConnectionDecision.ACCEPT, emitter=emitter
    )


def reject_connection(
    db: Session,
    identity: IdentityContext,
    connection_id: int,
    *,
    emitter: NotificationEmitter | None = None,
) -> Connection:
    """Reject a pending request addressed to the caller."""
    return respond_connection(
        db, identity, connection_id, ConnectionDecision.REJECT, emitter=emitter
    )


def remove_connection(db: Session, identity: IdentityContext, other_user_id: str) -> None:
    """Delete the ACCEPTED edge between the caller and ``other_user_id``.

    Either party may remove. Nothing of the edge survives, so a later request
    creates a fresh row.

    Raises:
        NotFoundError: No edge exists between the pair.
        InvalidStateError: The edge exists but is not ACCEPTED.
    """
    caller_id = require_identity(identity)
    repo = ConnectionRepository(db)
    with atomic(db):
        connection = repo.find_between(caller_id, other_user_id)
        if connection is None:
            raise NotFoundError("Connection not found")
        if connection.status != ConnectionStatus.ACCEPTED:
            raise InvalidStateError("Only accepted connections can be removed")
        repo.delete(connection)
    logger.info("Connection between %s and %s removed", caller_id, other_user_id)


def connection_status(
    db: Session,
    identity: IdentityContext,
    other_id: str,
) -> ConnectionStatusView:
    """Return the caller's view of their relationship with ``other_id``."""
    viewer_id = require_identity(identity)
    if viewer_id == other_id:
        return ConnectionStatusView(status=RelationshipStatus.SELF, can_connect=False)
    connection = ConnectionRepository(db).find_between(viewer_id, other_id)
    if connection is None:
        return ConnectionStatusView(status=RelationshipStatus.NOT_CONNECTED, can_connect=True)
    return _project(connection, viewer_id)


def list_connections(
    db: Session,
    identity: IdentityContext,
    *,
    status: ConnectionStatus = ConnectionStatus.ACCEPTED,
    before: int | None = None,
    limit: int | None = None,
) -> list[ConnectionEdgeView]:
    """Return the caller's edges of ``status``, each showing the other user."""
    viewer_id = require_identity(identity)
    rows = ConnectionRepository(db).list_for_user(
        viewer_id, status, before=before, limit=settings.clamp_page_size(limit)
    )
    return [_edge_view(row, viewer_id) for row in rows]


def list_pending_requests(
    db: Session,
    identity: IdentityContext,
    *,
    received: bool = True,
    before: int | None = None,
    limit: int | None = None,
) -> list[ConnectionEdgeView]:
    """Return pending requests the caller received (or sent), newest first."""
    viewer_id = require_identity(identity)
    rows = ConnectionRepository(db).list_pending(
        viewer_id,
        received=received,
        before=before,
        limit=settings.clamp_page_size(limit),
    )
    return [_edge_view(row, viewer_id) for row in rows]


def mutual_connections(
    db: Session,
    identity: IdentityContext,
    other_id: str,
    *,
    limit: int | None = 10,
) -> list[User]:
    """Return users connected to both the caller and ``other_id``."""
    viewer_id = require_identity(identity)
    if viewer_id == other_id:
        return []
    repo = ConnectionRepository(db)
    shared = repo.connected_user_ids(viewer_id) & repo.connected_user_ids(other_id)
    users = sorted(UserRepository(db).list_by_ids(shared), key=lambda user: user.username)
    return users[: settings.clamp_page_size(limit)]


def suggest_connections(
    db: Session,
    identity: IdentityContext,
    *,
    limit: int | None = 10,
) -> list[ConnectionSuggestion]:
    """Suggest people the caller might connect with.

    Users who already share an edge with the caller, in any status, are
    skipped. The rest are ranked by mutual connections, then by shared
    communities. Remaining slots are filled with the newest users.
    """
    viewer_id = require_identity(identity)
    size = settings.clamp_page_size(limit)
    repo = ConnectionRepository(db)
    users = UserRepository(db)
    excluded = repo.related_user_ids(viewer_id) | {viewer_id}

    mutual = repo.connection_counts_among(repo.connected_user_ids(viewer_id))
    shared = CommunityRepository(db).shared_community_counts(viewer_id)
    candidates = (set(mutual) | set(shared)) - excluded
    ranked = sorted(
        users.list_by_ids(candidates),
        key=lambda user: (-mutual[user.id], -shared.get(user.id, 0), user.username),
    )[:size]

    if len(ranked) < size:
        seen = excluded | {user.id for user in ranked}
        ranked.extend(users.list_recent(exclude=seen, limit=size - len(ranked)))

    return [
        ConnectionSuggestion(
            user=user,
            mutual_connections=mutual[user.id],
            shared_communities=shared.get(user.id, 0),
        )
        for user in ranked
    ]
