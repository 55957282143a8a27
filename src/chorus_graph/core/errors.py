"""Error taxonomy for the relationship and authorization engine.

Every failure that crosses the engine boundary is an ``EngineError`` carrying a
stable ``ErrorCode``. Callers (the HTTP layer included) render messages from the
code and never need to inspect free text.
"""

from __future__ import annotations

from enum import Enum

HTTP_BAD_REQUEST = 400
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404
HTTP_CONFLICT = 409
HTTP_UNPROCESSABLE = 422
HTTP_INTERNAL_SERVER_ERROR = 500


class ErrorCode(str, Enum):
    """Stable, enumerable error codes exposed to callers."""

    AUTHENTICATION_MISSING = "authentication_missing"
    AUTHORIZATION_DENIED = "authorization_denied"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INVALID_STATE = "invalid_state"
    VALIDATION_ERROR = "validation_error"
    INTERNAL = "internal"


class EngineError(RuntimeError):
    """Base exception for every engine failure."""

    code: ErrorCode = ErrorCode.INTERNAL
    status_code: int = HTTP_INTERNAL_SERVER_ERROR
    detail: str = "An unexpected error occurred"

    def __init__(self, detail: str | None = None) -> None:
        if detail:
            self.detail = detail
        super().__init__(self.detail)

    def to_dict(self) -> dict[str, str]:
        """Return the wire representation of the error."""
        return {"code": self.code.value, "detail": self.detail}


class AuthenticationMissingError(EngineError):
    """No identity was handed to the engine; an upstream wiring fault."""

    code = ErrorCode.AUTHENTICATION_MISSING
    status_code = HTTP_INTERNAL_SERVER_ERROR
    detail = "No identity context was provided"


class AuthorizationDeniedError(EngineError):
    """The caller lacks the role or relationship the action requires."""

    code = ErrorCode.AUTHORIZATION_DENIED
    status_code = HTTP_FORBIDDEN
    detail = "Not authorized to perform this action"


class ForbiddenError(AuthorizationDeniedError):
    """The action is never allowed against this target, whatever the caller's role."""

    code = ErrorCode.FORBIDDEN
    detail = "This action is forbidden"


class NotFoundError(EngineError):
    """The entity does not exist or is not visible to the caller."""

    code = ErrorCode.NOT_FOUND
    status_code = HTTP_NOT_FOUND
    detail = "Not found"


class ConflictError(EngineError):
    """A uniqueness invariant would be violated."""

    code = ErrorCode.CONFLICT
    status_code = HTTP_CONFLICT
    detail = "Conflicting state"


class SelfReferenceError(ConflictError):
    """A user attempted to relate to themselves."""

    detail = "Cannot connect to yourself"


class InvalidStateError(EngineError):
    """The action does not apply to the entity's current status."""

    code = ErrorCode.INVALID_STATE
    status_code = HTTP_CONFLICT
    detail = "Action not valid in the current state"


class ValidationFailedError(EngineError):
    """Malformed input."""

    code = ErrorCode.VALIDATION_ERROR
    status_code = HTTP_UNPROCESSABLE
    detail = "Invalid input"


class InternalError(EngineError):
    """Storage or other internal failure; carries no storage detail."""

    code = ErrorCode.INTERNAL
    status_code = HTTP_INTERNAL_SERVER_ERROR
    detail = "An unexpected error occurred"
