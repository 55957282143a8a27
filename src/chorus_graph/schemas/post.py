# src/chorus_graph/schemas/post.py
"""Post-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict

from chorus_graph.models.post import PostVisibility
from chorus_graph.schemas.common import UtcDatetime


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: int
    author_id: str
    community_id: int | None
    parent_id: int | None
    visibility: PostVisibility
    body_md: str
    created_at: UtcDatetime
    deleted: bool

    model_config = ConfigDict(from_attributes=True)
