"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, Field

from chorus_graph.core.errors import ErrorCode
from chorus_graph.db.time import as_utc

# Timestamps always leave the API timezone-aware
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class ErrorResponse(BaseModel):
    """Body returned for every engine error."""

    code: ErrorCode = Field(..., description="Stable, machine-readable error code.")
    detail: str = Field(..., description="Human-readable explanation.")


ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    status_code: {"model": ErrorResponse}
    for status_code in (401, 403, 404, 409, 422)
}


class DecisionRequest(BaseModel):
    """Accept/reject answer for requests and invitations."""

    action: str = Field(..., description='Either "accept" or "reject".')
