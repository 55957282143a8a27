# src/chorus_graph/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    communities_router,
    connections_router,
    invitations_router,
    join_requests_router,
    posts_router,
)

__all__ = [
    "connections_router",
    "communities_router",
    "join_requests_router",
    "invitations_router",
    "posts_router",
]
