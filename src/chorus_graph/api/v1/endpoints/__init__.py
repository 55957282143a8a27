"""API v1 endpoint modules."""

from .communities import router as communities_router
from .connections import router as connections_router
from .invitations import router as invitations_router
from .join_requests import router as join_requests_router
from .posts import router as posts_router

__all__ = [
    "communities_router",
    "connections_router",
    "invitations_router",
    "join_requests_router",
    "posts_router",
]
