"""Tests for the invitation workflow."""

from __future__ import annotations

import pytest

from chorus_graph.core.errors import (
    AuthorizationDeniedError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationFailedError,
)
from chorus_graph.models import CommunityVisibility, MemberRole, RequestStatus
from chorus_graph.repositories.community_repo import CommunityRepository
from chorus_graph.services import invitations, join_requests, memberships
from chorus_graph.services.notifications import NotificationType
from tests.conftest import identity_of


@pytest.fixture()
def club(alice, make_community):
    return make_community(alice, "design-club", CommunityVisibility.PRIVATE)


def _add_member(db_session, user, community, role=MemberRole.USER) -> None:
    CommunityRepository(db_session).add_membership(
        user_id=user.id, community_id=community.id, role=role
    )
    db_session.commit()


def test_any_member_may_invite(db_session, bob, carol, club, emitter) -> None:
    """A USER member invites by username, case-insensitively."""
    _add_member(db_session, bob, club)
    invitation = invitations.invite(db_session, identity_of(bob), club.id, "CAROL", emitter=emitter)

    assert invitation.status == RequestStatus.PENDING
    assert invitation.inviter_id == bob.id
    assert invitation.invitee_id == carol.id
    [event] = emitter.of_type(NotificationType.INVITATION_SENT)
    assert event.recipient_ids == (carol.id,)
    assert event.context == {"community_id": club.id}


def test_non_member_cannot_invite(db_session, bob, carol, club) -> None:
    with pytest.raises(AuthorizationDeniedError):
        invitations.invite(db_session, identity_of(bob), club.id, carol.username)


def test_invite_unknown_user_or_member(db_session, alice, bob, club) -> None:
    """Unknown usernames are not found and members cannot be invited."""
    with pytest.raises(NotFoundError):
        invitations.invite(db_session, identity_of(alice), club.id, "nobody")
    _add_member(db_session, bob, club)
    with pytest.raises(ConflictError):
        invitations.invite(db_session, identity_of(alice), club.id, bob.username)


def test_pending_invitation_conflicts(db_session, alice, carol, club) -> None:
    invitations.invite(db_session, identity_of(alice), club.id, carol.username)
    with pytest.raises(ConflictError):
        invitations.invite(db_session, identity_of(alice), club.id, carol.username)


def test_rejected_invitation_reopens_with_new_inviter(db_session, alice, bob, carol, club) -> None:
    """Re-inviting after a rejection resets the row and records the new inviter."""
    first = invitations.invite(db_session, identity_of(alice), club.id, carol.username)
    invitations.respond_invitation(db_session, identity_of(carol), first.id, "reject")
    _add_member(db_session, bob, club)

    again = invitations.invite(db_session, identity_of(bob), club.id, carol.username)

    assert again.id == first.id
    assert again.status == RequestStatus.PENDING
    assert again.inviter_id == bob.id


def test_accept_invitation_creates_membership(db_session, alice, carol, club, emitter) -> None:
    """Accepting joins the community and tells the inviter."""
    invitation = invitations.invite(db_session, identity_of(alice), club.id, carol.username)
    accepted = invitations.respond_invitation(
        db_session, identity_of(carol), invitation.id, "accept", emitter=emitter
    )

    assert accepted.status == RequestStatus.ACCEPTED
    assert memberships.role_of(db_session, carol.id, club.id) == MemberRole.USER
    [event] = emitter.of_type(NotificationType.INVITATION_ACCEPTED)
    assert event.recipient_ids == (alice.id,)


def test_accepting_invitation_settles_pending_join_request(
    db_session, alice, carol, club
) -> None:
    """A request waiting for review leaves the queue once the invitation is accepted."""
    join_request = join_requests.submit_join_request(db_session, identity_of(carol), club.id)
    invitation = invitations.invite(db_session, identity_of(alice), club.id, carol.username)

    invitations.respond_invitation(db_session, identity_of(carol), invitation.id, "accept")

    assert join_request.status == RequestStatus.ACCEPTED
    assert join_request.reviewed_by_id == alice.id
    assert join_requests.list_join_requests(db_session, identity_of(alice), club.id) == []


def test_only_invitee_responds_once(db_session, alice, bob, carol, club) -> None:
    invitation = invitations.invite(db_session, identity_of(alice), club.id, carol.username)
    with pytest.raises(AuthorizationDeniedError):
        invitations.respond_invitation(db_session, identity_of(bob), invitation.id, "accept")
    invitations.respond_invitation(db_session, identity_of(carol), invitation.id, "reject")
    with pytest.raises(InvalidStateError):
        invitations.respond_invitation(db_session, identity_of(carol), invitation.id, "accept")


def test_revoke_by_invitee_or_reviewer(db_session, alice, bob, carol, make_user, club) -> None:
    """Invitees and ADMIN/MODERATORs may revoke; plain members may not."""
    dave = make_user("dave")
    _add_member(db_session, bob, club)
    for_carol = invitations.invite(db_session, identity_of(bob), club.id, carol.username)
    for_dave = invitations.invite(db_session, identity_of(bob), club.id, dave.username)

    with pytest.raises(AuthorizationDeniedError):
        invitations.revoke_invitation(db_session, identity_of(bob), for_carol.id)

    invitations.revoke_invitation(db_session, identity_of(carol), for_carol.id)
    invitations.revoke_invitation(db_session, identity_of(alice), for_dave.id)
    assert invitations.list_community_invitations(db_session, identity_of(alice), club.id) == []


def test_bulk_invite_classifies_usernames(
    db_session, alice, bob, carol, make_user, club, emitter
) -> None:
    """Bulk invites report each username's outcome."""
    dave = make_user("dave")
    _add_member(db_session, bob, club)
    invitations.invite(db_session, identity_of(alice), club.id, dave.username)

    result = invitations.bulk_invite(
        db_session,
        identity_of(alice),
        club.id,
        ["Carol", "bob", "dave", "ghost", "carol", " "],
        emitter=emitter,
    )

    assert result.invited == ["carol"]
    assert result.already_members == ["bob"]
    assert result.already_invited == ["dave"]
    assert result.not_found == ["ghost"]
    assert len(emitter.of_type(NotificationType.INVITATION_SENT)) == 1


def test_bulk_invite_requires_moderator(db_session, bob, carol, club) -> None:
    _add_member(db_session, bob, club)
    with pytest.raises(AuthorizationDeniedError):
        invitations.bulk_invite(db_session, identity_of(bob), club.id, [carol.username])


@pytest.mark.parametrize("count", [0, 51])
def test_bulk_invite_size_limits(db_session, alice, club, count) -> None:
    """Between one and fifty usernames per call."""
    usernames = [f"user-{index}" for index in range(count)]
    with pytest.raises(ValidationFailedError):
        invitations.bulk_invite(db_session, identity_of(alice), club.id, usernames)


def test_list_received_invitations(db_session, alice, carol, make_community, club) -> None:
    other = make_community(alice, "other-club")
    first = invitations.invite(db_session, identity_of(alice), club.id, carol.username)
    second = invitations.invite(db_session, identity_of(alice), other.id, carol.username)
    received = invitations.list_received_invitations(db_session, identity_of(carol))
    assert [invitation.id for invitation in received] == [second.id, first.id]
