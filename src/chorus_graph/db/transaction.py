"""Unit-of-work boundary for every engine mutation."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from chorus_graph.core.errors import ConflictError, EngineError, InternalError

logger = logging.getLogger(__name__)


@contextmanager
def atomic(db: Session, conflict_detail: str | None = None) -> Iterator[Session]:
    """Run the enclosed reads and writes as one transaction.

    The block commits when it exits cleanly and rolls back otherwise. A
    uniqueness violation reported by the store is the losing side of a race and
    surfaces as ``ConflictError``; any other storage failure becomes
    ``InternalError`` so no driver detail crosses the engine boundary.

    Args:
        db: Session the block operates on.
        conflict_detail: Message used when a constraint violation is converted.
    """
    try:
        yield db
        db.commit()
    except EngineError:
        db.rollback()
        raise
    except IntegrityError as exc:
        db.rollback()
        logger.info("Constraint violation treated as conflict: %s", exc.orig)
        raise ConflictError(conflict_detail) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Storage failure inside transaction", exc_info=True)
        raise InternalError() from exc
    except Exception:
        db.rollback()
        raise
