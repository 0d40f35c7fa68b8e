"""In-memory log of operator-facing moderation outcomes."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Deque, Iterable


@dataclass
class Notification:
    level: str
    message: str
    created_at: datetime
    context: dict | None = None

    def to_dict(self) -> dict:
        return {
            "level": self.level,
            "message": self.message,
            "created_at": self.created_at.isoformat(),
            "context": self.context,
        }


class NotificationLog:
    """Capped, newest-first log the dashboard reads to show inline results."""

    def __init__(self, max_items: int = 50) -> None:
        self.max_items = max_items
        self._items: Deque[Notification] = deque(maxlen=max_items)

    def add(self, level: str, message: str, context: dict | None = None) -> Notification:
        note = Notification(level=level, message=message, created_at=datetime.now(timezone.utc), context=context)
        self._items.appendleft(note)
        return note

    def recent(self, limit: int | None = None) -> Iterable[Notification]:
        if limit is None or limit >= len(self._items):
            return list(self._items)
        return list(self._items)[:limit]

    def for_submission(self, submission_id: str) -> list[Notification]:
        return [note for note in self._items if (note.context or {}).get("id") == submission_id]

    def latest(self) -> Notification | None:
        return self._items[0] if self._items else None

    def clear(self) -> None:
        self._items.clear()


NOTIFICATIONS = NotificationLog()

__all__ = ["Notification", "NotificationLog", "NOTIFICATIONS"]
