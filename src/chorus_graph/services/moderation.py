"""Moderation deletes of posts."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from chorus_graph.core.errors import AuthorizationDeniedError, NotFoundError
from chorus_graph.db.transaction import atomic
from chorus_graph.models.post import Post
from chorus_graph.repositories.community_repo import CommunityRepository
from chorus_graph.repositories.post_repo import PostRepository
from chorus_graph.services.authorization import Action, can
from chorus_graph.services.identity import IdentityContext, require_identity
from chorus_graph.services.visibility import can_view

logger = logging.getLogger(__name__)


def delete_post(db: Session, identity: IdentityContext, post_id: int) -> Post:
    """Soft-delete a post.

    The author may always delete their own post. Inside a community, its
    MODERATORs and ADMINs may delete anyone's post whatever its visibility.
    Outside communities only the author may.

    Raises:
        NotFoundError: The post is missing or already deleted, or the caller
            may neither moderate nor read it.
        AuthorizationDeniedError: The caller can read the post but may not
            moderate it.
    """
    caller_id = require_identity(identity)
    with atomic(db):
        post = PostRepository(db).get_by_id(post_id)
        if post is None or post.deleted:
            raise NotFoundError("Post not found")
        role = None
        if post.community_id is not None:
            role = CommunityRepository(db).role_of(caller_id, post.community_id)
        if not can(role, Action.MODERATE_POST, is_owner=post.author_id == caller_id):
            if not can_view(db, caller_id, post):
                raise NotFoundError("Post not found")
            raise AuthorizationDeniedError("Not authorized to moderate post")
        post.deleted = True
        db.flush()
    logger.info("Post %s deleted by %s", post_id, caller_id)
    return post
