# src/chorus_graph/schemas/connection.py
"""Connection-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field

from chorus_graph.models.connection import ConnectionStatus
from chorus_graph.schemas.common import UtcDatetime
from chorus_graph.schemas.user import UserSummary
from chorus_graph.services.connections import RelationshipStatus


class ConnectionRequestCreate(BaseModel):
    """Schema for requesting a connection with another user."""

    target_user_id: str = Field(..., min_length=1, max_length=64)


class ConnectionResponse(BaseModel):
    """Raw connection row as stored."""

    id: int
    user_id: str
    connected_user_id: str
    status: ConnectionStatus
    created_at: UtcDatetime
    updated_at: UtcDatetime

    model_config = ConfigDict(from_attributes=True)


class ConnectionEdgeResponse(BaseModel):
    """A connection seen from the caller's side."""

    id: int
    other_user_id: str
    status: ConnectionStatus
    is_requester: bool

    model_config = ConfigDict(from_attributes=True)


class ConnectionStatusResponse(BaseModel):
    """Viewer-relative relationship with another user."""

    status: RelationshipStatus
    can_connect: bool
    connection_id: int | None = None
    is_requester: bool | None = None

    model_config = ConfigDict(from_attributes=True)


class ConnectionSuggestionResponse(BaseModel):
    """Someone the caller might connect with."""

    user: UserSummary
    mutual_connections: int
    shared_communities: int

    model_config = ConfigDict(from_attributes=True)
