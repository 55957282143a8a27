"""Community events: scheduling gated by role, with a creator override.

MODERATORs and ADMINs schedule events. Whoever created an event keeps the
right to edit or cancel it even after losing their role. Only members see a
community's events.
"""
from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum

from sqlalchemy.orm import Session

from chorus_graph.core.errors import AuthorizationDeniedError, NotFoundError, ValidationFailedError
from chorus_graph.core.settings import settings
from chorus_graph.db.time import as_utc, utcnow
from chorus_graph.db.transaction import atomic
from chorus_graph.models.community import Community
from chorus_graph.models.event import CommunityEvent
from chorus_graph.repositories.community_repo import CommunityRepository
from chorus_graph.repositories.event_repo import EventRepository
from chorus_graph.services.authorization import Action, authorize
from chorus_graph.services.identity import IdentityContext, require_identity

logger = logging.getLogger(__name__)

__all__ = [
    "EventWindow",
    "create_event",
    "update_event",
    "delete_event",
    "get_event",
    "list_events",
]

_TITLE_MAX_LENGTH = 200
_UNSET = object()


class EventWindow(str, Enum):
    """Which slice of a community's calendar to list."""

    ALL = "all"
    UPCOMING = "upcoming"
    PAST = "past"


def _load_community(communities: CommunityRepository, community_id: int) -> Community:
    community = communities.get(community_id)
    if community is None:
        raise NotFoundError("Community not found")
    return community


def _load_event(db: Session, community_id: int, event_id: int) -> CommunityEvent:
    event = EventRepository(db).get(event_id)
    if event is None or event.community_id != community_id:
        raise NotFoundError("Event not found")
    return event


def _require_member(communities: CommunityRepository, user_id: str, community_id: int) -> None:
    if communities.get_membership(user_id, community_id) is None:
        raise AuthorizationDeniedError("Not a member of this community")


def _clean_title(title: str) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationFailedError("Event title is required")
    if len(cleaned) > _TITLE_MAX_LENGTH:
        raise ValidationFailedError(f"Event title must be {_TITLE_MAX_LENGTH} characters or less")
    return cleaned


def _check_window(starts_at: datetime, ends_at: datetime) -> None:
    if ends_at <= starts_at:
        raise ValidationFailedError("End time must be after start time")


def create_event(
    db: Session,
    identity: IdentityContext,
    community_id: int,
    *,
    title: str,
    starts_at: datetime,
    ends_at: datetime,
    description: str | None = None,
    location: str | None = None,
) -> CommunityEvent:
    """Schedule an event; MODERATOR or ADMIN only.

    Raises:
        NotFoundError: Unknown community.
        AuthorizationDeniedError: The caller may not manage events here.
        ValidationFailedError: Empty title or an end before the start.
    """
    creator_id = require_identity(identity)
    cleaned_title = _clean_title(title)
    starts_at, ends_at = as_utc(starts_at), as_utc(ends_at)
    _check_window(starts_at, ends_at)
    communities = CommunityRepository(db)

    with atomic(db):
        _load_community(communities, community_id)
        authorize(communities.role_of(creator_id, community_id), Action.MANAGE_EVENT)
        event = EventRepository(db).add(
            CommunityEvent(
                community_id=community_id,
                creator_id=creator_id,
                title=cleaned_title,
                description=description,
                location=location,
                starts_at=starts_at,
                ends_at=ends_at,
            )
        )
    logger.info("Event %s scheduled in community %s by %s", event.id, community_id, creator_id)
    return event


def update_event(
    db: Session,
    identity: IdentityContext,
    community_id: int,
    event_id: int,
    *,
    title: str | None = None,
    starts_at: datetime | None = None,
    ends_at: datetime | None = None,
    description: str | None | object = _UNSET,
    location: str | None | object = _UNSET,
) -> CommunityEvent:
    """Edit an event; its creator, or a MODERATOR or ADMIN.

    Raises:
        NotFoundError: Unknown community, or the event belongs elsewhere.
        AuthorizationDeniedError: The caller neither created the event nor
            may manage events here.
        ValidationFailedError: The resulting window ends before it starts.
    """
    caller_id = require_identity(identity)
    communities = CommunityRepository(db)
    with atomic(db):
        _load_community(communities, community_id)
        event = _load_event(db, community_id, event_id)
        authorize(
            communities.role_of(caller_id, community_id),
            Action.MANAGE_EVENT,
            is_owner=event.creator_id == caller_id,
        )
        if title is not None:
            event.title = _clean_title(title)
        new_start = as_utc(starts_at) if starts_at is not None else as_utc(event.starts_at)
        new_end = as_utc(ends_at) if ends_at is not None else as_utc(event.ends_at)
        _check_window(new_start, new_end)
        event.starts_at, event.ends_at = new_start, new_end
        if description is not _UNSET:
            event.description = description  # type: ignore[assignment]
        if location is not _UNSET:
            event.location = location  # type: ignore[assignment]
        db.flush()
    logger.info("Event %s updated by %s", event_id, caller_id)
    return event


def delete_event(
    db: Session,
    identity: IdentityContext,
    community_id: int,
    event_id: int,
) -> None:
    """Cancel an event; its creator, or a MODERATOR or ADMIN."""
    caller_id = require_identity(identity)
    communities = CommunityRepository(db)
    with atomic(db):
        _load_community(communities, community_id)
        event = _load_event(db, community_id, event_id)
        authorize(
            communities.role_of(caller_id, community_id),
            Action.MANAGE_EVENT,
            is_owner=event.creator_id == caller_id,
        )
        EventRepository(db).delete(event)
    logger.info("Event %s deleted by %s", event_id, caller_id)


def get_event(
    db: Session,
    identity: IdentityContext,
    community_id: int,
    event_id: int,
) -> CommunityEvent:
    """Return one event to a member of its community."""
    viewer_id = require_identity(identity)
    communities = CommunityRepository(db)
    _load_community(communities, community_id)
    _require_member(communities, viewer_id, community_id)
    return _load_event(db, community_id, event_id)


def list_events(
    db: Session,
    identity: IdentityContext,
    community_id: int,
    *,
    window: EventWindow = EventWindow.ALL,
    limit: int | None = None,
    now: datetime | None = None,
) -> list[CommunityEvent]:
    """Return a community's events to one of its members.

    ``upcoming`` lists events starting from ``now`` soonest first; ``past``
    lists events that have ended, most recent first.
    """
    viewer_id = require_identity(identity)
    communities = CommunityRepository(db)
    _load_community(communities, community_id)
    _require_member(communities, viewer_id, community_id)

    window = EventWindow(window)
    moment = as_utc(now) if now is not None else utcnow()
    return EventRepository(db).list_for_community(
        community_id,
        starting_after=moment if window is EventWindow.UPCOMING else None,
        ended_before=moment if window is EventWindow.PAST else None,
        limit=settings.clamp_page_size(limit),
    )
