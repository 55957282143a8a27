"""Fixed capability table deciding what each community role may do.

Roles are a flat enum and permissions a lookup table; there is no role
inheritance and nothing here is user-configurable.
"""

from __future__ import annotations

import logging
from enum import Enum

from chorus_graph.core.errors import AuthorizationDeniedError
from chorus_graph.models.community import MemberRole

logger = logging.getLogger(__name__)


class Action(str, Enum):
    """Community-scoped actions guarded by the gate."""

    POST_IN_COMMUNITY = "post_in_community"
    MANAGE_EVENT = "manage_event"
    REVIEW_REQUESTS = "review_requests"
    MODERATE_POST = "moderate_post"
    REMOVE_MEMBER = "remove_member"
    MANAGE_COMMUNITY = "manage_community"
    CHANGE_MEMBER_ROLE = "change_member_role"
    INVITE_MEMBER = "invite_member"
    BULK_INVITE = "bulk_invite"
    REMOVE_ADMIN = "remove_admin"


_USER_ACTIONS = frozenset({Action.POST_IN_COMMUNITY, Action.INVITE_MEMBER})
_MODERATOR_ACTIONS = _USER_ACTIONS | {
    Action.MANAGE_EVENT,
    Action.REVIEW_REQUESTS,
    Action.MODERATE_POST,
    Action.BULK_INVITE,
}
_ADMIN_ACTIONS = _MODERATOR_ACTIONS | {
    Action.REMOVE_MEMBER,
    Action.MANAGE_COMMUNITY,
    Action.CHANGE_MEMBER_ROLE,
}

CAPABILITIES: dict[MemberRole, frozenset[Action]] = {
    MemberRole.USER: _USER_ACTIONS,
    MemberRole.MODERATOR: frozenset(_MODERATOR_ACTIONS),
    MemberRole.ADMIN: frozenset(_ADMIN_ACTIONS),
}

# Resource creators act as moderators of that one resource.
OWNERSHIP_ACTIONS = frozenset({Action.MANAGE_EVENT, Action.MODERATE_POST})


def can(role: MemberRole | None, action: Action, *, is_owner: bool = False) -> bool:
    """Return True if ``role`` may perform ``action``.

    Args:
        role: Caller's role in the community, or None for non-members.
        action: The action being attempted.
        is_owner: Whether the caller created the specific resource acted on.
    """
    if action is Action.REMOVE_ADMIN:
        return False
    if is_owner and action in OWNERSHIP_ACTIONS:
        return True
    if role is None:
        return False
    return action in CAPABILITIES[role]


def authorize(role: MemberRole | None, action: Action, *, is_owner: bool = False) -> None:
    """Raise ``AuthorizationDeniedError`` unless ``can`` allows the action."""
    if not can(role, action, is_owner=is_owner):
        logger.debug("Denied %s for role %s (owner=%s)", action.value, role, is_owner)
        raise AuthorizationDeniedError(f"Not authorized to {action.value.replace('_', ' ')}")


def capabilities_for(role: MemberRole | None) -> list[Action]:
    """Return the actions ``role`` holds, in declaration order."""
    if role is None:
        return []
    allowed = CAPABILITIES[role]
    return [action for action in Action if action in allowed]
