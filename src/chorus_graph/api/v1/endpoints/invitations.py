"""Endpoints for invitations addressed to the caller."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query

from chorus_graph.api.v1.dependencies import (
    BeforeQuery,
    EmitterDep,
    IdentityDep,
    LimitQuery,
    SessionDep,
)
from chorus_graph.models.join_request import RequestStatus
from chorus_graph.schemas.common import DecisionRequest
from chorus_graph.schemas.invitation import InvitationResponse
from chorus_graph.services import invitations

router = APIRouter(prefix="/invitations", tags=["invitations"])


@router.get("/", response_model=list[InvitationResponse])
async def list_received(
    identity: IdentityDep,
    db: SessionDep,
    status_filter: Annotated[RequestStatus, Query(alias="status")] = RequestStatus.PENDING,
    before: BeforeQuery = None,
    limit: LimitQuery = None,
) -> list[InvitationResponse]:
    """List invitations the caller received."""
    rows = invitations.list_received_invitations(
        db, identity, status=status_filter, before=before, limit=limit
    )
    return [InvitationResponse.model_validate(row) for row in rows]


@router.post("/{invitation_id}/respond", response_model=InvitationResponse)
async def respond_invitation(
    invitation_id: int,
    payload: DecisionRequest,
    identity: IdentityDep,
    db: SessionDep,
    emitter: EmitterDep,
) -> InvitationResponse:
    """Accept or reject an invitation."""
    invitation = invitations.respond_invitation(
        db, identity, invitation_id, payload.action, emitter=emitter
    )
    return InvitationResponse.model_validate(invitation)


@router.delete("/{invitation_id}", response_model=InvitationResponse)
async def revoke_invitation(
    invitation_id: int,
    identity: IdentityDep,
    db: SessionDep,
) -> InvitationResponse:
    """Revoke an invitation (invitee, or a community ADMIN/MODERATOR)."""
    invitation = invitations.revoke_invitation(db, identity, invitation_id)
    return InvitationResponse.model_validate(invitation)
