"""Data access helpers for working with posts and follow edges."""
from __future__ import annotations

from sqlalchemy import ColumnElement, delete, select
from sqlalchemy.orm import Session

from chorus_graph.models.follow import Follow
from chorus_graph.models.post import Post

__all__ = ["PostRepository"]


class PostRepository:
    """Thin wrapper around database access for post entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, post_id: int) -> Post | None:
        """Return a post by identifier."""
        return self.session.get(Post, post_id)

    def list_where(
        self,
        *criteria: ColumnElement[bool],
        before: int | None = None,
        limit: int = 20,
    ) -> list[Post]:
        """Return posts matching every criterion, newest first.

        Args:
            criteria: Boolean SQL expressions combined with AND.
            before: Keyset cursor; only posts with a smaller id are returned.
            limit: Maximum number of rows.
        """
        stmt = select(Post).where(*criteria)
        if before is not None:
            stmt = stmt.where(Post.id < before)
        stmt = stmt.order_by(Post.id.desc()).limit(limit)
        return list(self.session.scalars(stmt))

    def delete_for_community(self, community_id: int) -> None:
        """Remove every post that belongs to a community."""
        self.session.execute(delete(Post).where(Post.community_id == community_id))

    def is_following(self, follower_id: str, following_id: str) -> bool:
        """Return True if ``follower_id`` follows ``following_id``."""
        return self.session.get(Follow, (follower_id, following_id)) is not None
