# src/chorus_graph/api/v1/endpoints/communities.py
"""Community endpoints: settings, membership, join requests, invitations and events."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from chorus_graph.api.v1.dependencies import (
    BeforeQuery,
    EmitterDep,
    IdentityDep,
    LimitQuery,
    OptionalIdentityDep,
    SessionDep,
)
from chorus_graph.models.join_request import RequestStatus
from chorus_graph.schemas.community import (
    CommunityCreate,
    CommunityPermissionsResponse,
    CommunityResponse,
    CommunityUpdate,
    JoinRequestResponse,
    JoinResponse,
    MemberRoleUpdate,
    MembershipResponse,
)
from chorus_graph.schemas.event import EventCreate, EventResponse, EventUpdate
from chorus_graph.schemas.invitation import (
    BulkInvitationCreate,
    BulkInviteResponse,
    InvitationCreate,
    InvitationResponse,
)
from chorus_graph.schemas.post import PostResponse
from chorus_graph.services import events, invitations, join_requests, memberships
from chorus_graph.services.events import EventWindow
from chorus_graph.services.visibility import PostFilter, list_community_posts

router = APIRouter(prefix="/communities", tags=["communities"])


@router.get("/", response_model=list[CommunityResponse])
async def list_communities(
    db: SessionDep,
    search: str | None = None,
    before: BeforeQuery = None,
    limit: LimitQuery = None,
) -> list[CommunityResponse]:
    """List communities; metadata of private communities is listed too."""
    rows = memberships.list_communities(db, search=search, before=before, limit=limit)
    return [CommunityResponse.model_validate(row) for row in rows]


@router.post("/", response_model=CommunityResponse, status_code=status.HTTP_201_CREATED)
async def create_community(
    payload: CommunityCreate,
    identity: IdentityDep,
    db: SessionDep,
) -> CommunityResponse:
    """Create a community; the caller becomes its ADMIN."""
    community, _ = memberships.create_community(
        db,
        identity,
        name=payload.name,
        visibility=payload.visibility,
        description=payload.description,
    )
    return CommunityResponse.model_validate(community)


@router.get("/{community_id}", response_model=CommunityResponse)
async def get_community(community_id: int, db: SessionDep) -> CommunityResponse:
    """Get a specific community by ID."""
    return CommunityResponse.model_validate(memberships.get_community(db, community_id))


@router.patch("/{community_id}", response_model=CommunityResponse)
async def update_community(
    community_id: int,
    payload: CommunityUpdate,
    identity: IdentityDep,
    db: SessionDep,
) -> CommunityResponse:
    """Change community settings."""
    changes = payload.model_dump(exclude_unset=True)
    community = memberships.update_community(db, identity, community_id, **changes)
    return CommunityResponse.model_validate(community)


@router.delete("/{community_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_community(community_id: int, identity: IdentityDep, db: SessionDep) -> Response:
    """Delete a community and everything in it."""
    memberships.delete_community(db, identity, community_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{community_id}/join", response_model=JoinResponse)
async def join_community(community_id: int, identity: IdentityDep, db: SessionDep) -> JoinResponse:
    """Join a public community, or request to join a private one."""
    result = memberships.join_community(db, identity, community_id)
    return JoinResponse.model_validate(result)


@router.post("/{community_id}/leave", status_code=status.HTTP_204_NO_CONTENT)
async def leave_community(community_id: int, identity: IdentityDep, db: SessionDep) -> Response:
    """Leave a community."""
    memberships.leave_community(db, identity, community_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{community_id}/permissions", response_model=CommunityPermissionsResponse)
async def community_permissions(
    community_id: int,
    identity: IdentityDep,
    db: SessionDep,
) -> CommunityPermissionsResponse:
    """Return the caller's role and allowed actions in a community."""
    role, actions = memberships.community_permissions(db, identity, community_id)
    return CommunityPermissionsResponse(community_id=community_id, role=role, actions=actions)


@router.get("/{community_id}/members", response_model=list[MembershipResponse])
async def list_members(
    community_id: int,
    db: SessionDep,
    search: str | None = None,
    before: BeforeQuery = None,
    limit: LimitQuery = None,
) -> list[MembershipResponse]:
    """List members, most recently joined first."""
    rows = memberships.list_members(db, community_id, search=search, before=before, limit=limit)
    return [MembershipResponse.model_validate(row) for row in rows]


@router.patch("/{community_id}/members/{membership_id}", response_model=MembershipResponse)
async def update_member_role(
    community_id: int,
    membership_id: int,
    payload: MemberRoleUpdate,
    identity: IdentityDep,
    db: SessionDep,
) -> MembershipResponse:
    """Change a member's role."""
    membership = memberships.update_member_role(
        db, identity, community_id, membership_id, payload.role
    )
    return MembershipResponse.model_validate(membership)


@router.delete("/{community_id}/members/{membership_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    community_id: int,
    membership_id: int,
    identity: IdentityDep,
    db: SessionDep,
    emitter: EmitterDep,
) -> Response:
    """Remove a member from the community."""
    memberships.remove_member(db, identity, community_id, membership_id, emitter=emitter)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{community_id}/join-requests",
    response_model=JoinRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_join_request(
    community_id: int,
    identity: IdentityDep,
    db: SessionDep,
) -> JoinRequestResponse:
    """Ask to join a private community."""
    request = join_requests.submit_join_request(db, identity, community_id)
    return JoinRequestResponse.model_validate(request)


@router.get("/{community_id}/join-requests", response_model=list[JoinRequestResponse])
async def list_join_requests(
    community_id: int,
    identity: IdentityDep,
    db: SessionDep,
    status_filter: Annotated[RequestStatus, Query(alias="status")] = RequestStatus.PENDING,
    before: BeforeQuery = None,
    limit: LimitQuery = None,
) -> list[JoinRequestResponse]:
    """List join requests for reviewers."""
    rows = join_requests.list_join_requests(
        db, identity, community_id, status=status_filter, before=before, limit=limit
    )
    return [JoinRequestResponse.model_validate(row) for row in rows]


@router.post(
    "/{community_id}/invitations",
    response_model=InvitationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def invite_member(
    community_id: int,
    payload: InvitationCreate,
    identity: IdentityDep,
    db: SessionDep,
    emitter: EmitterDep,
) -> InvitationResponse:
    """Invite a user by username."""
    invitation = invitations.invite(
        db, identity, community_id, payload.username, emitter=emitter
    )
    return InvitationResponse.model_validate(invitation)


@router.post("/{community_id}/invitations/bulk", response_model=BulkInviteResponse)
async def bulk_invite(
    community_id: int,
    payload: BulkInvitationCreate,
    identity: IdentityDep,
    db: SessionDep,
    emitter: EmitterDep,
) -> BulkInviteResponse:
    """Invite several users at once."""
    result = invitations.bulk_invite(
        db, identity, community_id, payload.usernames, emitter=emitter
    )
    return BulkInviteResponse.model_validate(result)


@router.get("/{community_id}/invitations", response_model=list[InvitationResponse])
async def list_community_invitations(
    community_id: int,
    identity: IdentityDep,
    db: SessionDep,
    status_filter: Annotated[RequestStatus, Query(alias="status")] = RequestStatus.PENDING,
    before: BeforeQuery = None,
    limit: LimitQuery = None,
) -> list[InvitationResponse]:
    """List a community's invitations for reviewers."""
    rows = invitations.list_community_invitations(
        db, identity, community_id, status=status_filter, before=before, limit=limit
    )
    return [InvitationResponse.model_validate(row) for row in rows]


@router.get("/{community_id}/posts", response_model=list[PostResponse])
async def list_posts(
    community_id: int,
    identity: OptionalIdentityDep,
    db: SessionDep,
    include_replies: bool = False,
    before: BeforeQuery = None,
    limit: LimitQuery = None,
) -> list[PostResponse]:
    """List the posts of a community the caller may read."""
    viewer_id = identity.user_id if identity else None
    rows = list_community_posts(
        db,
        viewer_id,
        community_id,
        PostFilter(include_replies=include_replies, before=before, limit=limit),
    )
    return [PostResponse.model_validate(row) for row in rows]


@router.get("/{community_id}/events", response_model=list[EventResponse])
async def list_events(
    community_id: int,
    identity: IdentityDep,
    db: SessionDep,
    window: EventWindow = EventWindow.ALL,
    limit: LimitQuery = None,
) -> list[EventResponse]:
    """List a community's events for its members."""
    rows = events.list_events(db, identity, community_id, window=window, limit=limit)
    return [EventResponse.model_validate(row) for row in rows]


@router.post(
    "/{community_id}/events",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_event(
    community_id: int,
    payload: EventCreate,
    identity: IdentityDep,
    db: SessionDep,
) -> EventResponse:
    """Schedule an event in the community."""
    event = events.create_event(db, identity, community_id, **payload.model_dump())
    return EventResponse.model_validate(event)


@router.get("/{community_id}/events/{event_id}", response_model=EventResponse)
async def get_event(
    community_id: int,
    event_id: int,
    identity: IdentityDep,
    db: SessionDep,
) -> EventResponse:
    """Get one event."""
    return EventResponse.model_validate(events.get_event(db, identity, community_id, event_id))


@router.patch("/{community_id}/events/{event_id}", response_model=EventResponse)
async def update_event(
    community_id: int,
    event_id: int,
    payload: EventUpdate,
    identity: IdentityDep,
    db: SessionDep,
) -> EventResponse:
    """Edit an event."""
    changes = payload.model_dump(exclude_unset=True)
    event = events.update_event(db, identity, community_id, event_id, **changes)
    return EventResponse.model_validate(event)


@router.delete(
    "/{community_id}/events/{event_id}", status_code=status.HTTP_204_NO_CONTENT
)
async def delete_event(
    community_id: int,
    event_id: int,
    identity: IdentityDep,
    db: SessionDep,
) -> Response:
    """Cancel an event."""
    events.delete_event(db, identity, community_id, event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
