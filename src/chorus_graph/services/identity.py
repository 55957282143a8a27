"""Explicit identity threaded into every engine call."""
from __future__ import annotations

from dataclasses import dataclass

from chorus_graph.core.errors import AuthenticationMissingError


@dataclass(frozen=True, slots=True)
class IdentityContext:
    """An already-authenticated caller. The engine never authenticates."""

    user_id: str


def require_identity(identity: IdentityContext | None) -> str:
    """Return the caller's user id or fail loudly when upstream skipped authentication."""
    if identity is None or not identity.user_id:
        raise AuthenticationMissingError()
    return identity.user_id
