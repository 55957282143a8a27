# src/chorus_graph/api/v1/endpoints/posts.py
"""Post read and moderation endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from chorus_graph.api.v1.dependencies import (
    BeforeQuery,
    IdentityDep,
    LimitQuery,
    OptionalIdentityDep,
    SessionDep,
)
from chorus_graph.schemas.post import PostResponse
from chorus_graph.services.moderation import delete_post
from chorus_graph.services.visibility import PostFilter, get_visible_post, list_visible_posts

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("/", response_model=list[PostResponse])
async def list_posts(
    identity: OptionalIdentityDep,
    db: SessionDep,
    author_id: str | None = None,
    community_id: int | None = None,
    include_replies: bool = False,
    before: BeforeQuery = None,
    limit: LimitQuery = None,
) -> list[PostResponse]:
    """List posts visible to the caller, newest first."""
    viewer_id = identity.user_id if identity else None
    post_filter = PostFilter(
        author_id=author_id,
        community_id=community_id,
        include_replies=include_replies,
        before=before,
        limit=limit,
    )
    posts = list_visible_posts(db, viewer_id, post_filter)
    return [PostResponse.model_validate(post) for post in posts]


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: int, identity: OptionalIdentityDep, db: SessionDep) -> PostResponse:
    """Get a post the caller may read."""
    viewer_id = identity.user_id if identity else None
    return PostResponse.model_validate(get_visible_post(db, viewer_id, post_id))


@router.delete("/{post_id}", response_model=PostResponse)
async def moderate_post(post_id: int, identity: IdentityDep, db: SessionDep) -> PostResponse:
    """Delete a post as its author or as a community moderator."""
    return PostResponse.model_validate(delete_post(db, identity, post_id))
