"""Who may read which post.

Two gates apply in order. The community gate hides every post of a PRIVATE
community from non-members. The post gate then applies the post's own
visibility: authors always see their posts, ``public`` is open, and
``followers`` requires a Follow edge from the viewer to the author.

Bulk reads compile both gates into one SQL predicate so that filtering
happens in the database; ``can_view`` evaluates the same rules for a single
loaded post.
"""
from __future__ import annotations

from dataclasses import dataclass, replace

from sqlalchemy import ColumnElement, and_, exists, false, or_, select
from sqlalchemy.orm import Session

from chorus_graph.core.errors import NotFoundError
from chorus_graph.core.settings import settings
from chorus_graph.models.community import Community, CommunityMember, CommunityVisibility
from chorus_graph.models.follow import Follow
from chorus_graph.models.post import Post, PostVisibility
from chorus_graph.repositories.community_repo import CommunityRepository
from chorus_graph.repositories.post_repo import PostRepository

__all__ = [
    "PostFilter",
    "visible_posts_clause",
    "can_view",
    "list_visible_posts",
    "get_visible_post",
    "list_community_posts",
]


@dataclass(frozen=True)
class PostFilter:
    """Criteria narrowing a visible-post listing."""

    author_id: str | None = None
    community_id: int | None = None
    include_replies: bool = False
    before: int | None = None
    limit: int | None = None


def _community_gate(viewer_id: str | None) -> ColumnElement[bool]:
    private_ids = select(Community.id).where(
        Community.visibility == CommunityVisibility.PRIVATE
    )
    clauses = [Post.community_id.is_(None), Post.community_id.not_in(private_ids)]
    if viewer_id is not None:
        member_of = select(CommunityMember.community_id).where(
            CommunityMember.user_id == viewer_id
        )
        clauses.append(Post.community_id.in_(member_of))
    return or_(*clauses)


def _post_gate(viewer_id: str | None) -> ColumnElement[bool]:
    if viewer_id is None:
        return Post.visibility == PostVisibility.PUBLIC
    follows_author = exists().where(
        Follow.follower_id == viewer_id,
        Follow.following_id == Post.author_id,
    )
    return or_(
        Post.author_id == viewer_id,
        Post.visibility == PostVisibility.PUBLIC,
        and_(Post.visibility == PostVisibility.FOLLOWERS, follows_author),
    )


def visible_posts_clause(viewer_id: str | None) -> ColumnElement[bool]:
    """Return the SQL predicate selecting exactly the posts ``viewer_id`` may read.

    ``None`` stands for an anonymous viewer: no memberships and no follows.
    """
    return and_(
        Post.deleted.is_(false()),
        _community_gate(viewer_id),
        _post_gate(viewer_id),
    )


def can_view(db: Session, viewer_id: str | None, post: Post) -> bool:
    """Return True when ``viewer_id`` may read ``post``."""
    if post.deleted:
        return False
    if post.community_id is not None:
        communities = CommunityRepository(db)
        community = communities.get(post.community_id)
        if community is not None and community.is_private:
            if viewer_id is None or communities.get_membership(viewer_id, community.id) is None:
                return False
    if viewer_id is not None and post.author_id == viewer_id:
        return True
    if post.visibility == PostVisibility.PUBLIC:
        return True
    if post.visibility == PostVisibility.FOLLOWERS and viewer_id is not None:
        return PostRepository(db).is_following(viewer_id, post.author_id)
    return False


def _filter_criteria(post_filter: PostFilter) -> list[ColumnElement[bool]]:
    criteria: list[ColumnElement[bool]] = []
    if post_filter.author_id is not None:
        criteria.append(Post.author_id == post_filter.author_id)
    if post_filter.community_id is not None:
        criteria.append(Post.community_id == post_filter.community_id)
    if not post_filter.include_replies:
        criteria.append(Post.parent_id.is_(None))
    return criteria


def list_visible_posts(
    db: Session,
    viewer_id: str | None,
    post_filter: PostFilter | None = None,
) -> list[Post]:
    """Return the posts matching ``post_filter`` that ``viewer_id`` may read, newest first."""
    post_filter = post_filter or PostFilter()
    return PostRepository(db).list_where(
        visible_posts_clause(viewer_id),
        *_filter_criteria(post_filter),
        before=post_filter.before,
        limit=settings.clamp_page_size(post_filter.limit),
    )


def get_visible_post(db: Session, viewer_id: str | None, post_id: int) -> Post:
    """Return a post, or raise ``NotFoundError`` if it is missing or hidden."""
    post = PostRepository(db).get_by_id(post_id)
    if post is None or not can_view(db, viewer_id, post):
        raise NotFoundError("Post not found")
    return post


def list_community_posts(
    db: Session,
    viewer_id: str | None,
    community_id: int,
    post_filter: PostFilter | None = None,
) -> list[Post]:
    """Return a community's visible posts.

    Raises:
        NotFoundError: The community does not exist, or it is PRIVATE and the
            viewer is not a member.
    """
    communities = CommunityRepository(db)
    community = communities.get(community_id)
    if community is None:
        raise NotFoundError("Community not found")
    if community.is_private and (
        viewer_id is None or communities.get_membership(viewer_id, community_id) is None
    ):
        raise NotFoundError("Community not found")
    scoped = replace(post_filter or PostFilter(), community_id=community_id)
    return list_visible_posts(db, viewer_id, scoped)
