# tests/test_authorization.py
"""Tests for the fixed role capability table."""

import pytest

from chorus_graph.core.errors import AuthorizationDeniedError
from chorus_graph.models.community import MemberRole
from chorus_graph.services.authorization import Action, authorize, can, capabilities_for


@pytest.mark.parametrize(
    ("action", "user", "moderator", "admin"),
    [
        (Action.POST_IN_COMMUNITY, True, True, True),
        (Action.MANAGE_EVENT, False, True, True),
        (Action.REVIEW_REQUESTS, False, True, True),
        (Action.MODERATE_POST, False, True, True),
        (Action.REMOVE_MEMBER, False, False, True),
        (Action.MANAGE_COMMUNITY, False, False, True),
        (Action.REMOVE_ADMIN, False, False, False),
    ],
)
def test_capability_table(action: Action, user: bool, moderator: bool, admin: bool) -> None:
    """Each role holds exactly the documented capabilities."""
    assert can(MemberRole.USER, action) is user
    assert can(MemberRole.MODERATOR, action) is moderator
    assert can(MemberRole.ADMIN, action) is admin


def test_non_member_can_do_nothing() -> None:
    """A caller without a role is denied every action."""
    assert not any(can(None, action) for action in Action)


def test_owner_override_applies_to_own_resource_actions() -> None:
    """Creators act as moderators of their own events and posts."""
    assert can(MemberRole.USER, Action.MANAGE_EVENT, is_owner=True)
    assert can(None, Action.MODERATE_POST, is_owner=True)


def test_owner_override_does_not_grant_community_administration() -> None:
    """Ownership of a resource never unlocks member or settings management."""
    assert not can(MemberRole.USER, Action.REMOVE_MEMBER, is_owner=True)
    assert not can(MemberRole.MODERATOR, Action.MANAGE_COMMUNITY, is_owner=True)
    assert not can(MemberRole.ADMIN, Action.REMOVE_ADMIN, is_owner=True)


def test_authorize_raises_denied() -> None:
    """``authorize`` surfaces a denial as an authorization error."""
    authorize(MemberRole.ADMIN, Action.REMOVE_MEMBER)
    with pytest.raises(AuthorizationDeniedError):
        authorize(MemberRole.MODERATOR, Action.REMOVE_MEMBER)


def test_capabilities_for_lists_actions_in_order() -> None:
    """The permissions listing follows the declaration order of actions."""
    assert capabilities_for(None) == []
    assert capabilities_for(MemberRole.USER) == [Action.POST_IN_COMMUNITY, Action.INVITE_MEMBER]
    admin_actions = capabilities_for(MemberRole.ADMIN)
    assert Action.REMOVE_ADMIN not in admin_actions
    assert admin_actions == [action for action in Action if action is not Action.REMOVE_ADMIN]
