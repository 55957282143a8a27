"""Join-request review and cancellation endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from chorus_graph.api.v1.dependencies import EmitterDep, IdentityDep, SessionDep
from chorus_graph.schemas.common import DecisionRequest
from chorus_graph.schemas.community import JoinRequestResponse
from chorus_graph.services import join_requests

router = APIRouter(prefix="/join-requests", tags=["join-requests"])


@router.post("/{request_id}/review", response_model=JoinRequestResponse)
async def review_join_request(
    request_id: int,
    payload: DecisionRequest,
    identity: IdentityDep,
    db: SessionDep,
    emitter: EmitterDep,
) -> JoinRequestResponse:
    """Accept or reject a pending join request."""
    request = join_requests.review_join_request(
        db, identity, request_id, payload.action, emitter=emitter
    )
    return JoinRequestResponse.model_validate(request)


@router.delete("/{request_id}", response_model=JoinRequestResponse)
async def cancel_join_request(
    request_id: int,
    identity: IdentityDep,
    db: SessionDep,
) -> JoinRequestResponse:
    """Withdraw the caller's pending join request."""
    request = join_requests.cancel_join_request(db, identity, request_id)
    return JoinRequestResponse.model_validate(request)
