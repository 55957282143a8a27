"""Relationship and authorization services.

Every operation takes a SQLAlchemy ``Session`` and an ``IdentityContext``
(where a caller is involved) and raises ``EngineError`` subclasses on failure.
"""

from .identity import IdentityContext, require_identity
from .notifications import (
    CollectingNotificationEmitter,
    LoggingNotificationEmitter,
    NotificationEmitter,
    NotificationEvent,
    NotificationType,
    get_notification_emitter,
    set_notification_emitter,
)

__all__ = [
    "CollectingNotificationEmitter",
    "IdentityContext",
    "LoggingNotificationEmitter",
    "NotificationEmitter",
    "NotificationEvent",
    "NotificationType",
    "get_notification_emitter",
    "require_identity",
    "set_notification_emitter",
]
