"""Concurrent acceptance through a join request and an invitation."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select

from chorus_graph.core.errors import ConflictError
from chorus_graph.models import CommunityMember, CommunityVisibility, MemberRole, RequestStatus
from chorus_graph.repositories.community_repo import CommunityRepository
from chorus_graph.services import invitations, join_requests
from tests.conftest import identity_of


@pytest.fixture()
def setting(db_session, make_user, make_community):
    """U1 owns a private club with two moderators; U4 is a member, U5 is not."""
    owner = make_user("u1")
    club = make_community(owner, "design-club", CommunityVisibility.PRIVATE)
    repo = CommunityRepository(db_session)
    mod_a, mod_b, inviter, candidate = (make_user(name) for name in ("u3", "u7", "u4", "u5"))
    repo.add_membership(user_id=mod_a.id, community_id=club.id, role=MemberRole.MODERATOR)
    repo.add_membership(user_id=mod_b.id, community_id=club.id, role=MemberRole.MODERATOR)
    repo.add_membership(user_id=inviter.id, community_id=club.id)
    db_session.commit()

    invitation = invitations.invite(db_session, identity_of(inviter), club.id, candidate.username)
    request = join_requests.submit_join_request(db_session, identity_of(candidate), club.id)
    return {
        "club": club,
        "mod_a": mod_a,
        "mod_b": mod_b,
        "candidate": candidate,
        "invitation": invitation,
        "request": request,
    }


def _memberships_of(db_session, user, club) -> int:
    return db_session.scalar(
        select(func.count()).select_from(CommunityMember).where(
            CommunityMember.user_id == user.id, CommunityMember.community_id == club.id
        )
    )


def test_invitation_then_review_yields_one_membership(db_session, setting) -> None:
    """Whichever acceptance lands second only marks its row ACCEPTED."""
    candidate = setting["candidate"]
    invitations.respond_invitation(
        db_session, identity_of(candidate), setting["invitation"].id, "accept"
    )
    join_requests.review_join_request(
        db_session, identity_of(setting["mod_a"]), setting["request"].id, "accept"
    )

    assert _memberships_of(db_session, candidate, setting["club"]) == 1
    assert setting["invitation"].status == RequestStatus.ACCEPTED
    assert setting["request"].status == RequestStatus.ACCEPTED


def test_lost_race_surfaces_conflict_and_retry_converges(
    db_session, setting, monkeypatch
) -> None:
    """A review that read a stale 'not a member' loses on the unique key, then converges."""
    candidate = setting["candidate"]
    join_requests.review_join_request(
        db_session, identity_of(setting["mod_a"]), setting["request"].id, "accept"
    )

    original = CommunityRepository.get_membership
    stale_reads = {"remaining": 1}

    def stale_get_membership(self, user_id, community_id):
        if stale_reads["remaining"]:
            stale_reads["remaining"] -= 1
            return None
        return original(self, user_id, community_id)

    monkeypatch.setattr(CommunityRepository, "get_membership", stale_get_membership)

    with pytest.raises(ConflictError):
        invitations.respond_invitation(
            db_session, identity_of(candidate), setting["invitation"].id, "accept"
        )
    db_session.refresh(setting["invitation"])
    assert setting["invitation"].status == RequestStatus.PENDING

    retried = invitations.respond_invitation(
        db_session, identity_of(candidate), setting["invitation"].id, "accept"
    )

    assert retried.status == RequestStatus.ACCEPTED
    assert setting["request"].status == RequestStatus.ACCEPTED
    assert _memberships_of(db_session, candidate, setting["club"]) == 1
