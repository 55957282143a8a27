"""Outbound notification events.

The engine describes what happened; persistence and delivery belong to a
collaborator behind ``NotificationEmitter``. Emission happens after the
triggering transaction commits and is best-effort: a failing emitter is
logged and never undoes the state change.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class NotificationType(str, Enum):
    """Kinds of events the engine emits."""

    CONNECTION_REQUESTED = "connection_requested"
    CONNECTION_ACCEPTED = "connection_accepted"
    CONNECTION_REJECTED = "connection_rejected"
    INVITATION_SENT = "invitation_sent"
    INVITATION_ACCEPTED = "invitation_accepted"
    JOIN_REQUEST_ACCEPTED = "join_request_accepted"
    MEMBER_REMOVED = "member_removed"


@dataclass(frozen=True)
class NotificationEvent:
    """Structured description of a completed state transition."""

    type: NotificationType
    actor_id: str
    recipient_ids: tuple[str, ...]
    subject_id: int | str
    context: dict[str, Any] = field(default_factory=dict)


class NotificationEmitter(Protocol):
    """Anything that accepts notification events."""

    def emit(self, event: NotificationEvent) -> None:
        """Hand an event to the delivery collaborator."""


class LoggingNotificationEmitter:
    """Default emitter: records events in the application log."""

    def emit(self, event: NotificationEvent) -> None:
        logger.info(
            "notification %s actor=%s recipients=%s subject=%s",
            event.type.value,
            event.actor_id,
            ",".join(event.recipient_ids),
            event.subject_id,
        )


class CollectingNotificationEmitter:
    """In-process sink that keeps every event it receives."""

    def __init__(self) -> None:
        self.events: list[NotificationEvent] = []

    def emit(self, event: NotificationEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: NotificationType) -> list[NotificationEvent]:
        """Return the collected events of one kind."""
        return [event for event in self.events if event.type == event_type]

    def clear(self) -> None:
        """Forget everything collected so far."""
        self.events.clear()


_default_emitter: NotificationEmitter | None = None


def get_notification_emitter() -> NotificationEmitter:
    """Return the process-wide emitter, creating the logging one on first use."""
    global _default_emitter
    if _default_emitter is None:
        _default_emitter = LoggingNotificationEmitter()
    return _default_emitter


def set_notification_emitter(emitter: NotificationEmitter | None) -> None:
    """Replace the process-wide emitter (None restores the default)."""
    global _default_emitter
    _default_emitter = emitter


def dispatch(emitter: NotificationEmitter | None, events: Iterable[NotificationEvent]) -> None:
    """Emit each event, logging and swallowing emitter failures."""
    target = emitter if emitter is not None else get_notification_emitter()
    for event in events:
        try:
            target.emit(event)
        except Exception:
            logger.warning(
                "Failed to emit %s notification for subject %s",
                event.type.value,
                event.subject_id,
                exc_info=True,
            )
