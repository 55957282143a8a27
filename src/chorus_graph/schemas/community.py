# src/chorus_graph/schemas/community.py
"""Community-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field

from chorus_graph.models.community import CommunityVisibility, MemberRole
from chorus_graph.models.join_request import RequestStatus
from chorus_graph.schemas.common import UtcDatetime
from chorus_graph.services.authorization import Action


class CommunityCreate(BaseModel):
    """Schema for creating a new community."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    visibility: CommunityVisibility = CommunityVisibility.PUBLIC


class CommunityUpdate(BaseModel):
    """Partial update of community settings; omitted fields are unchanged."""

    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    visibility: CommunityVisibility | None = None


class CommunityResponse(BaseModel):
    """Schema for community information returned by the API."""

    id: int
    name: str
    description: str | None
    visibility: CommunityVisibility
    creator_id: str
    created_at: UtcDatetime

    model_config = ConfigDict(from_attributes=True)


class MembershipResponse(BaseModel):
    """A user's role-bearing membership."""

    id: int
    user_id: str
    community_id: int
    role: MemberRole
    joined_at: UtcDatetime

    model_config = ConfigDict(from_attributes=True)


class MemberRoleUpdate(BaseModel):
    """New role for a member."""

    role: MemberRole


class JoinRequestResponse(BaseModel):
    """A request to join a private community."""

    id: int
    community_id: int
    user_id: str
    status: RequestStatus
    reviewed_by_id: str | None = None
    created_at: UtcDatetime
    updated_at: UtcDatetime

    model_config = ConfigDict(from_attributes=True)


class JoinResponse(BaseModel):
    """Result of joining: a membership for public communities, a request otherwise."""

    joined: bool
    membership: MembershipResponse | None = None
    join_request: JoinRequestResponse | None = None

    model_config = ConfigDict(from_attributes=True)


class CommunityPermissionsResponse(BaseModel):
    """The caller's role in a community and what it allows."""

    community_id: int
    role: MemberRole | None
    actions: list[Action]
