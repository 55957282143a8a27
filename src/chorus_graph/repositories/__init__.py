"""Data access helpers wrapping SQLAlchemy sessions."""

from .community_repo import CommunityRepository
from .connection_repo import ConnectionRepository
from .event_repo import EventRepository
from .post_repo import PostRepository
from .request_repo import InvitationRepository, JoinRequestRepository
from .user_repo import UserRepository

__all__ = [
    "CommunityRepository",
    "ConnectionRepository",
    "EventRepository",
    "InvitationRepository",
    "JoinRequestRepository",
    "PostRepository",
    "UserRepository",
]
