"""Data access helpers for the user directory."""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from chorus_graph.models.user import User

__all__ = ["UserRepository"]


class UserRepository:
    """Thin wrapper around database access for users."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: str) -> User | None:
        """Return a user by identifier."""
        return self.session.get(User, user_id)

    def get_by_username(self, username: str) -> User | None:
        """Return a user by handle, ignoring case."""
        return self.session.scalars(
            select(User).where(User.username == username.strip().lower())
        ).first()

    def list_by_usernames(self, usernames: Iterable[str]) -> list[User]:
        """Return every user whose handle is in ``usernames`` (case-insensitive)."""
        keys = {name.strip().lower() for name in usernames}
        if not keys:
            return []
        return list(self.session.scalars(select(User).where(User.username.in_(keys))))

    def list_by_ids(self, user_ids: Iterable[str]) -> list[User]:
        """Return the users with the given identifiers."""
        ids = set(user_ids)
        if not ids:
            return []
        return list(self.session.scalars(select(User).where(User.id.in_(ids))))

    def list_recent(self, *, exclude: Iterable[str] = (), limit: int = 10) -> list[User]:
        """Return the newest users, skipping ``exclude``."""
        stmt = select(User)
        excluded = set(exclude)
        if excluded:
            stmt = stmt.where(User.id.not_in(excluded))
        stmt = stmt.order_by(User.created_at.desc(), User.id.desc()).limit(limit)
        return list(self.session.scalars(stmt))
