"""Invitation schemas."""

from pydantic import BaseModel, ConfigDict, Field

from chorus_graph.models.join_request import RequestStatus
from chorus_graph.schemas.common import UtcDatetime


class InvitationCreate(BaseModel):
    """Invite one user by username."""

    username: str = Field(..., min_length=1, max_length=64)


class BulkInvitationCreate(BaseModel):
    """Invite several users by username."""

    usernames: list[str] = Field(..., min_length=1)


class InvitationResponse(BaseModel):
    """A community invitation."""

    id: int
    community_id: int
    inviter_id: str
    invitee_id: str
    status: RequestStatus
    created_at: UtcDatetime
    updated_at: UtcDatetime

    model_config = ConfigDict(from_attributes=True)


class BulkInviteResponse(BaseModel):
    """Per-username outcome of a bulk invite."""

    invited: list[str]
    already_members: list[str]
    already_invited: list[str]
    not_found: list[str]

    model_config = ConfigDict(from_attributes=True)
