# src/chorus_graph/api/v1/endpoints/connections.py
"""Connection endpoints: requests, responses and the viewer-relative status."""

from __future__ import annotations

from typing import Annotated, Literal

from fastapi import APIRouter, Query, Response, status

from chorus_graph.api.v1.dependencies import (
    BeforeQuery,
    EmitterDep,
    IdentityDep,
    LimitQuery,
    SessionDep,
)
from chorus_graph.models.connection import ConnectionStatus
from chorus_graph.schemas.common import DecisionRequest
from chorus_graph.schemas.connection import (
    ConnectionEdgeResponse,
    ConnectionRequestCreate,
    ConnectionResponse,
    ConnectionStatusResponse,
    ConnectionSuggestionResponse,
)
from chorus_graph.schemas.user import UserSummary
from chorus_graph.services import connections

router = APIRouter(prefix="/connections", tags=["connections"])


@router.post("/", response_model=ConnectionResponse, status_code=status.HTTP_201_CREATED)
async def request_connection(
    payload: ConnectionRequestCreate,
    identity: IdentityDep,
    db: SessionDep,
    emitter: EmitterDep,
) -> ConnectionResponse:
    """Send a connection request."""
    connection = connections.request_connection(
        db, identity, payload.target_user_id, emitter=emitter
    )
    return ConnectionResponse.model_validate(connection)


@router.get("/", response_model=list[ConnectionEdgeResponse])
async def list_connections(
    identity: IdentityDep,
    db: SessionDep,
    status_filter: Annotated[ConnectionStatus, Query(alias="status")] = ConnectionStatus.ACCEPTED,
    before: BeforeQuery = None,
    limit: LimitQuery = None,
) -> list[ConnectionEdgeResponse]:
    """List the caller's connections of one status."""
    edges = connections.list_connections(
        db, identity, status=status_filter, before=before, limit=limit
    )
    return [ConnectionEdgeResponse.model_validate(edge) for edge in edges]


@router.get("/pending", response_model=list[ConnectionEdgeResponse])
async def list_pending(
    identity: IdentityDep,
    db: SessionDep,
    direction: Literal["received", "sent"] = "received",
    before: BeforeQuery = None,
    limit: LimitQuery = None,
) -> list[ConnectionEdgeResponse]:
    """List pending requests received by (or sent by) the caller."""
    edges = connections.list_pending_requests(
        db, identity, received=direction == "received", before=before, limit=limit
    )
    return [ConnectionEdgeResponse.model_validate(edge) for edge in edges]


@router.post("/{connection_id}/respond", response_model=ConnectionResponse)
async def respond_connection(
    connection_id: int,
    payload: DecisionRequest,
    identity: IdentityDep,
    db: SessionDep,
    emitter: EmitterDep,
) -> ConnectionResponse:
    """Accept or reject a request sent to the caller."""
    connection = connections.respond_connection(
        db, identity, connection_id, payload.action, emitter=emitter
    )
    return ConnectionResponse.model_validate(connection)


@router.get("/status/{other_user_id}", response_model=ConnectionStatusResponse)
async def connection_status(
    other_user_id: str,
    identity: IdentityDep,
    db: SessionDep,
) -> ConnectionStatusResponse:
    """Return how the caller relates to another user."""
    view = connections.connection_status(db, identity, other_user_id)
    return ConnectionStatusResponse.model_validate(view)


@router.get("/mutual/{other_user_id}", response_model=list[UserSummary])
async def mutual_connections(
    other_user_id: str,
    identity: IdentityDep,
    db: SessionDep,
    limit: LimitQuery = 10,
) -> list[UserSummary]:
    """List users connected to both the caller and another user."""
    users = connections.mutual_connections(db, identity, other_user_id, limit=limit)
    return [UserSummary.model_validate(user) for user in users]


@router.get("/suggestions", response_model=list[ConnectionSuggestionResponse])
async def suggest_connections(
    identity: IdentityDep,
    db: SessionDep,
    limit: LimitQuery = 10,
) -> list[ConnectionSuggestionResponse]:
    """Suggest people to connect with, strongest ties first."""
    suggestions = connections.suggest_connections(db, identity, limit=limit)
    return [ConnectionSuggestionResponse.model_validate(item) for item in suggestions]


@router.delete("/users/{other_user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_connection(
    other_user_id: str,
    identity: IdentityDep,
    db: SessionDep,
) -> Response:
    """Remove an accepted connection."""
    connections.remove_connection(db, identity, other_user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
