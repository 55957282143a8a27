"""Shared API dependencies for identity resolution and common functionality."""

from typing import Annotated

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from chorus_graph.core.security import decode_subject
from chorus_graph.db.session import get_db
from chorus_graph.repositories.user_repo import UserRepository
from chorus_graph.services.identity import IdentityContext
from chorus_graph.services.notifications import NotificationEmitter, get_notification_emitter

# HTTP Bearer scheme; tokens are minted by the session layer
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]

_CREDENTIALS_ERROR = "Could not validate credentials"


def _resolve_identity(token: str, db: Session) -> IdentityContext:
    user_id = decode_subject(token)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=_CREDENTIALS_ERROR,
        )
    if UserRepository(db).get(user_id) is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return IdentityContext(user_id=user_id)


def get_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> IdentityContext:
    """Resolve the bearer token into the caller's identity.

    Raises:
        HTTPException: 401 if the token is missing or invalid, or names an
            unknown user.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return _resolve_identity(credentials.credentials, db)


def get_optional_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> IdentityContext | None:
    """Like ``get_identity`` but anonymous readers get None."""
    if credentials is None:
        return None
    return _resolve_identity(credentials.credentials, db)


def get_emitter() -> NotificationEmitter:
    """Return the notification emitter used by mutating endpoints."""
    return get_notification_emitter()


# Type aliases for identity and emitter dependencies
IdentityDep = Annotated[IdentityContext, Depends(get_identity)]
OptionalIdentityDep = Annotated[IdentityContext | None, Depends(get_optional_identity)]
EmitterDep = Annotated[NotificationEmitter, Depends(get_emitter)]

# Shared pagination parameters
LimitQuery = Annotated[int | None, Query(ge=1, le=100)]
BeforeQuery = Annotated[int | None, Query(ge=1, description="Return rows with a smaller id.")]
