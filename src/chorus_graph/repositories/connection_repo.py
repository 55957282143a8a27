"""Data access helpers for connection edges."""
from __future__ import annotations

from collections import Counter
from collections.abc import Collection

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from chorus_graph.models.connection import Connection, ConnectionStatus, canonical_pair

__all__ = ["ConnectionRepository"]


class ConnectionRepository:
    """Thin wrapper around database access for connections."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, connection_id: int) -> Connection | None:
        """Return a connection by identifier."""
        return self.session.get(Connection, connection_id)

    def find_between(self, first_user_id: str, second_user_id: str) -> Connection | None:
        """Return the single edge for the unordered pair, in either direction."""
        low, high = canonical_pair(first_user_id, second_user_id)
        return self.session.scalars(
            select(Connection).where(
                Connection.user_low_id == low,
                Connection.user_high_id == high,
            )
        ).first()

    def create(self, *, requester_id: str, target_id: str) -> Connection:
        """Insert a pending edge from ``requester_id`` to ``target_id``."""
        low, high = canonical_pair(requester_id, target_id)
        connection = Connection(
            user_id=requester_id,
            connected_user_id=target_id,
            user_low_id=low,
            user_high_id=high,
            status=ConnectionStatus.PENDING,
        )
        self.session.add(connection)
        self.session.flush()
        return connection

    def delete(self, connection: Connection) -> None:
        """Hard-delete an edge."""
        self.session.delete(connection)
        self.session.flush()

    def list_for_user(
        self,
        user_id: str,
        status: ConnectionStatus,
        *,
        before: int | None = None,
        limit: int = 20,
    ) -> list[Connection]:
        """Return edges of ``status`` touching ``user_id``, newest first."""
        stmt = select(Connection).where(
            or_(Connection.user_id == user_id, Connection.connected_user_id == user_id),
            Connection.status == status,
        )
        if before is not None:
            stmt = stmt.where(Connection.id < before)
        stmt = stmt.order_by(Connection.id.desc()).limit(limit)
        return list(self.session.scalars(stmt))

    def list_pending(
        self,
        user_id: str,
        *,
        received: bool,
        before: int | None = None,
        limit: int = 20,
    ) -> list[Connection]:
        """Return pending edges received by (or sent by) ``user_id``, newest first."""
        column = Connection.connected_user_id if received else Connection.user_id
        stmt = select(Connection).where(
            column == user_id, Connection.status == ConnectionStatus.PENDING
        )
        if before is not None:
            stmt = stmt.where(Connection.id < before)
        stmt = stmt.order_by(Connection.id.desc()).limit(limit)
        return list(self.session.scalars(stmt))

    def connected_user_ids(self, user_id: str) -> set[str]:
        """Return the ids of everyone holding an ACCEPTED edge with ``user_id``."""
        rows = self.session.execute(
            select(Connection.user_id, Connection.connected_user_id).where(
                or_(Connection.user_id == user_id, Connection.connected_user_id == user_id),
                Connection.status == ConnectionStatus.ACCEPTED,
            )
        ).all()
        return {other if requester == user_id else requester for requester, other in rows}

    def related_user_ids(self, user_id: str) -> set[str]:
        """Return everyone sharing an edge with ``user_id`` in any status."""
        rows = self.session.execute(
            select(Connection.user_id, Connection.connected_user_id).where(
                or_(Connection.user_id == user_id, Connection.connected_user_id == user_id)
            )
        ).all()
        return {other if requester == user_id else requester for requester, other in rows}

    def connection_counts_among(self, user_ids: Collection[str]) -> Counter[str]:
        """Count, per user, the ACCEPTED edges they hold with members of ``user_ids``."""
        if not user_ids:
            return Counter()
        rows = self.session.execute(
            select(Connection.user_id, Connection.connected_user_id).where(
                or_(
                    Connection.user_id.in_(user_ids),
                    Connection.connected_user_id.in_(user_ids),
                ),
                Connection.status == ConnectionStatus.ACCEPTED,
            )
        ).all()
        counts: Counter[str] = Counter()
        for requester, recipient in rows:
            if requester in user_ids:
                counts[recipient] += 1
            if recipient in user_ids:
                counts[requester] += 1
        return counts
