"""Tests for community events."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from chorus_graph.core.errors import (
    AuthorizationDeniedError,
    NotFoundError,
    ValidationFailedError,
)
from chorus_graph.models import CommunityEvent, MemberRole
from chorus_graph.repositories.community_repo import CommunityRepository
from chorus_graph.services import events, memberships
from chorus_graph.services.events import EventWindow
from tests.conftest import identity_of

NOON = datetime(2030, 5, 1, 12, 0, tzinfo=UTC)


@pytest.fixture()
def club(alice, make_community):
    return make_community(alice, "club")


def _add_member(db_session, user, community, role=MemberRole.USER):
    membership = CommunityRepository(db_session).add_membership(
        user_id=user.id, community_id=community.id, role=role
    )
    db_session.commit()
    return membership


def _schedule(db_session, user, community, title="Meetup", start=NOON, hours=2):
    return events.create_event(
        db_session,
        identity_of(user),
        community.id,
        title=title,
        starts_at=start,
        ends_at=start + timedelta(hours=hours),
    )


def test_moderator_schedules_event(db_session, bob, club) -> None:
    _add_member(db_session, bob, club, MemberRole.MODERATOR)
    event = _schedule(db_session, bob, club, title="  Meetup  ")
    assert event.creator_id == bob.id
    assert event.title == "Meetup"
    assert event.community_id == club.id


def test_plain_member_cannot_schedule(db_session, bob, club) -> None:
    _add_member(db_session, bob, club)
    with pytest.raises(AuthorizationDeniedError):
        _schedule(db_session, bob, club)


def test_end_must_follow_start(db_session, alice, club) -> None:
    with pytest.raises(ValidationFailedError):
        _schedule(db_session, alice, club, hours=0)


def test_creator_keeps_edit_rights_after_demotion(db_session, alice, bob, carol, club) -> None:
    """The creator edits their own event as a USER; another USER may not."""
    bob_membership = _add_member(db_session, bob, club, MemberRole.MODERATOR)
    _add_member(db_session, carol, club)
    event = _schedule(db_session, bob, club)
    memberships.update_member_role(
        db_session, identity_of(alice), club.id, bob_membership.id, MemberRole.USER
    )

    updated = events.update_event(
        db_session, identity_of(bob), club.id, event.id, title="Moved", location="Hall B"
    )
    assert updated.title == "Moved"
    assert updated.location == "Hall B"

    with pytest.raises(AuthorizationDeniedError):
        events.update_event(db_session, identity_of(carol), club.id, event.id, title="Mine")
    with pytest.raises(AuthorizationDeniedError):
        events.delete_event(db_session, identity_of(carol), club.id, event.id)

    events.delete_event(db_session, identity_of(bob), club.id, event.id)
    assert db_session.get(CommunityEvent, event.id) is None


def test_admin_edits_any_event(db_session, alice, bob, club) -> None:
    _add_member(db_session, bob, club, MemberRole.MODERATOR)
    event = _schedule(db_session, bob, club)
    updated = events.update_event(
        db_session, identity_of(alice), club.id, event.id, ends_at=NOON + timedelta(hours=5)
    )
    assert updated.ends_at.replace(tzinfo=UTC) == NOON + timedelta(hours=5)


def test_update_rejects_inverted_window(db_session, alice, club) -> None:
    event = _schedule(db_session, alice, club)
    with pytest.raises(ValidationFailedError):
        events.update_event(
            db_session, identity_of(alice), club.id, event.id, starts_at=NOON + timedelta(days=1)
        )


def test_event_from_another_community_is_not_found(
    db_session, alice, club, make_community
) -> None:
    other = make_community(alice, "other")
    event = _schedule(db_session, alice, club)
    with pytest.raises(NotFoundError):
        events.get_event(db_session, identity_of(alice), other.id, event.id)


def test_only_members_list_events(db_session, alice, bob, club) -> None:
    _schedule(db_session, alice, club)
    with pytest.raises(AuthorizationDeniedError):
        events.list_events(db_session, identity_of(bob), club.id)
    _add_member(db_session, bob, club)
    assert len(events.list_events(db_session, identity_of(bob), club.id)) == 1


def test_upcoming_and_past_windows(db_session, alice, club) -> None:
    """Upcoming runs soonest first; past holds only finished events."""
    earlier = _schedule(db_session, alice, club, title="Earlier", start=NOON - timedelta(days=2))
    later = _schedule(db_session, alice, club, title="Later", start=NOON + timedelta(days=2))
    soon = _schedule(db_session, alice, club, title="Soon", start=NOON + timedelta(hours=1))

    upcoming = events.list_events(
        db_session, identity_of(alice), club.id, window=EventWindow.UPCOMING, now=NOON
    )
    assert [event.id for event in upcoming] == [soon.id, later.id]

    past = events.list_events(
        db_session, identity_of(alice), club.id, window=EventWindow.PAST, now=NOON
    )
    assert [event.id for event in past] == [earlier.id]


def test_deleting_community_removes_events(db_session, alice, club) -> None:
    event = _schedule(db_session, alice, club)
    memberships.delete_community(db_session, identity_of(alice), club.id)
    assert db_session.get(CommunityEvent, event.id) is None
