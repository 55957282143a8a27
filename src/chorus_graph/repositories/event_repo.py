"""Data access helpers for community events."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from chorus_graph.models.event import CommunityEvent

__all__ = ["EventRepository"]


class EventRepository:
    """Thin wrapper around database access for community events."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, event_id: int) -> CommunityEvent | None:
        """Return an event by identifier."""
        return self.session.get(CommunityEvent, event_id)

    def add(self, event: CommunityEvent) -> CommunityEvent:
        """Persist a new event."""
        self.session.add(event)
        self.session.flush()
        return event

    def delete(self, event: CommunityEvent) -> None:
        """Hard-delete an event."""
        self.session.delete(event)
        self.session.flush()

    def list_for_community(
        self,
        community_id: int,
        *,
        starting_after: datetime | None = None,
        ended_before: datetime | None = None,
        limit: int = 20,
    ) -> list[CommunityEvent]:
        """Return a community's events by start time.

        Upcoming listings (``starting_after``) run soonest first; everything
        else runs most recent first.
        """
        stmt = select(CommunityEvent).where(CommunityEvent.community_id == community_id)
        if starting_after is not None:
            stmt = stmt.where(CommunityEvent.starts_at >= starting_after).order_by(
                CommunityEvent.starts_at.asc(), CommunityEvent.id.asc()
            )
        else:
            if ended_before is not None:
                stmt = stmt.where(CommunityEvent.ends_at < ended_before)
            stmt = stmt.order_by(CommunityEvent.starts_at.desc(), CommunityEvent.id.desc())
        return list(self.session.scalars(stmt.limit(limit)))
