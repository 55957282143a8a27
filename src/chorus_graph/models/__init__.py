# src/chorus_graph/models/__init__.py
"""SQLAlchemy models for the Chorus social graph."""

from .community import Community, CommunityMember, CommunityVisibility, MemberRole
from .connection import Connection, ConnectionStatus, canonical_pair
from .event import CommunityEvent
from .follow import Follow
from .invitation import CommunityInvitation
from .join_request import JoinRequest, RequestStatus
from .post import Post, PostVisibility
from .user import User

__all__ = [
    "Community", "CommunityMember", "CommunityVisibility", "MemberRole",
    "Connection", "ConnectionStatus", "canonical_pair",
    "CommunityEvent",
    "Follow",
    "CommunityInvitation",
    "JoinRequest", "RequestStatus",
    "Post", "PostVisibility",
    "User",
]
