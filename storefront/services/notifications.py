"""
User-facing notifications (toasts).

Notifications are fire-and-forget: a sink never raises back into the cart,
and nothing is retried if a notification is dropped.
"""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    """Toast styles understood by the UI."""

    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Notification:
    """Notification payload."""

    message: str
    kind: NotificationKind = NotificationKind.INFO
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "kind": self.kind.value,
            "created_at": self.created_at.isoformat(),
        }


class NotificationSink(Protocol):
    def notify(self, message: str, kind: NotificationKind = NotificationKind.INFO) -> None: ...


class LoggingNotificationSink:
    """Writes notifications to the log; the default when no UI is attached."""

    def notify(self, message: str, kind: NotificationKind = NotificationKind.INFO) -> None:
        level = logging.WARNING if kind == NotificationKind.ERROR else logging.INFO
        logger.log(level, "[%s] %s", kind.value, message)


class QueueNotificationSink:
    """Collects notifications until the UI drains them.

    Bounded: when full, the oldest notifications are dropped first.
    """

    def __init__(self, max_size: int = 50) -> None:
        self._queue: deque[Notification] = deque(maxlen=max_size)

    def notify(self, message: str, kind: NotificationKind = NotificationKind.INFO) -> None:
        self._queue.append(Notification(message=message, kind=NotificationKind(kind)))

    def drain(self) -> list[Notification]:
        items = list(self._queue)
        self._queue.clear()
        return items

    def __len__(self) -> int:
        return len(self._queue)


def safe_notify(
    sink: NotificationSink | None, message: str, kind: NotificationKind = NotificationKind.INFO
) -> None:
    """Deliver to ``sink`` and log, never raise, if the sink fails."""
    if sink is None:
        return
    try:
        sink.notify(message, kind)
    except Exception as e:
        logger.error(f"Notification sink error: {e}")
