# src/chorus_graph/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

Response models read ORM rows directly via ``from_attributes``.
"""

from .common import ERROR_RESPONSES, DecisionRequest, ErrorResponse, UtcDatetime
from .community import (
    CommunityCreate,
    CommunityPermissionsResponse,
    CommunityResponse,
    CommunityUpdate,
    JoinRequestResponse,
    JoinResponse,
    MemberRoleUpdate,
    MembershipResponse,
)
from .connection import (
    ConnectionEdgeResponse,
    ConnectionRequestCreate,
    ConnectionResponse,
    ConnectionStatusResponse,
    ConnectionSuggestionResponse,
)
from .event import EventCreate, EventResponse, EventUpdate
from .invitation import (
    BulkInvitationCreate,
    BulkInviteResponse,
    InvitationCreate,
    InvitationResponse,
)
from .post import PostResponse
from .user import UserSummary

__all__ = [
    "BulkInvitationCreate",
    "BulkInviteResponse",
    "CommunityCreate",
    "CommunityPermissionsResponse",
    "CommunityResponse",
    "CommunityUpdate",
    "ConnectionEdgeResponse",
    "ConnectionRequestCreate",
    "ConnectionResponse",
    "ConnectionStatusResponse",
    "ConnectionSuggestionResponse",
    "DecisionRequest",
    "ERROR_RESPONSES",
    "ErrorResponse",
    "EventCreate",
    "EventResponse",
    "EventUpdate",
    "InvitationCreate",
    "InvitationResponse",
    "JoinRequestResponse",
    "JoinResponse",
    "MemberRoleUpdate",
    "MembershipResponse",
    "PostResponse",
    "UserSummary",
    "UtcDatetime",
]
