"""Community event schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from chorus_graph.schemas.common import UtcDatetime


class EventCreate(BaseModel):
    """Schema for scheduling an event."""

    title: str = Field(..., min_length=1, max_length=200)
    starts_at: datetime
    ends_at: datetime
    description: str | None = None
    location: str | None = Field(None, max_length=255)


class EventUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    title: str | None = Field(None, min_length=1, max_length=200)
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    description: str | None = None
    location: str | None = Field(None, max_length=255)


class EventResponse(BaseModel):
    """Schema for event information returned by the API."""

    id: int
    community_id: int
    creator_id: str
    title: str
    description: str | None
    location: str | None
    starts_at: UtcDatetime
    ends_at: UtcDatetime
    created_at: UtcDatetime
    updated_at: UtcDatetime

    model_config = ConfigDict(from_attributes=True)
