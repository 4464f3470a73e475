"""
services/notification_service.py

The two surfaces a fired reminder reaches:

  NoticeBoard           — transient in-app notices ("toasts"), each expiring
                          after a fixed duration.
  NotificationPlatform  — system-level notifications gated by a permission
                          state (default | granted | denied). Notifications
                          are keyed by tag, so re-emitting for the same tag
                          replaces the earlier one.

Both keep an optional listener list so the SSE stream can push new items.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from courtbell.utils.helpers import generate_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notice:
    id:          str
    title:       str
    description: str
    created_at:  datetime
    expires_at:  datetime


@dataclass(frozen=True)
class SystemNotification:
    tag:        str
    title:      str
    body:       str
    created_at: datetime


Listener = Callable[[str, object], None]


@dataclass
class _Listeners:
    items: List[Listener] = field(default_factory=list)

    def add(self, listener: Listener) -> Callable[[], None]:
        self.items.append(listener)

        def remove() -> None:
            if listener in self.items:
                self.items.remove(listener)

        return remove

    def emit(self, kind: str, payload: object) -> None:
        for listener in list(self.items):
            try:
                listener(kind, payload)
            except Exception:
                logger.exception("Notification listener failed (%s)", kind)


class NoticeBoard:
    """In-app notices, auto-dismissed after ``duration_seconds``."""

    def __init__(self, duration_seconds: int = 20, clock: Callable[[], datetime] = datetime.now) -> None:
        self.duration = timedelta(seconds=duration_seconds)
        self._clock = clock
        self._notices: List[Notice] = []
        self._lock = threading.Lock()
        self.listeners = _Listeners()

    def post(self, title: str, description: str) -> Notice:
        now = self._clock()
        notice = Notice(
            id=generate_id(),
            title=title,
            description=description,
            created_at=now,
            expires_at=now + self.duration,
        )
        with self._lock:
            self._prune(now)
            self._notices.append(notice)
        self.listeners.emit("notice", notice)
        return notice

    def _prune(self, now: datetime) -> None:
        self._notices = [n for n in self._notices if n.expires_at > now]

    def active(self) -> List[Notice]:
        with self._lock:
            self._prune(self._clock())
            return list(self._notices)

    def dismiss(self, notice_id: str) -> bool:
        with self._lock:
            before = len(self._notices)
            self._notices = [n for n in self._notices if n.id != notice_id]
            return len(self._notices) != before

    def clear(self) -> None:
        with self._lock:
            self._notices = []


class NotificationPlatform:
    """
    System notification capability. The permission decision belongs to the
    client device: ``request_permission`` only flags that a prompt is wanted,
    and the client reports the outcome through ``set_permission``.
    """

    def __init__(self, permission: str = "default", supported: bool = True) -> None:
        self.supported = supported
        self.permission = permission
        self.permission_requested = False
        self._by_tag: Dict[str, SystemNotification] = {}
        self._lock = threading.Lock()
        self.listeners = _Listeners()

    def request_permission(self) -> None:
        """Non-blocking: marks the permission prompt as pending."""
        if self.supported and self.permission == "default" and not self.permission_requested:
            self.permission_requested = True
            logger.info("Notification permission requested")
            self.listeners.emit("permission_request", self.permission)

    def set_permission(self, permission: str) -> None:
        if permission not in ("default", "granted", "denied"):
            raise ValueError(f"Unknown permission state: {permission}")
        self.permission = permission

    def notify(self, title: str, body: str, tag: str, now: Optional[datetime] = None) -> Optional[SystemNotification]:
        if not self.supported or self.permission != "granted":
            return None
        notification = SystemNotification(tag=tag, title=title, body=body, created_at=now or datetime.now())
        with self._lock:
            self._by_tag.pop(tag, None)
            self._by_tag[tag] = notification
        self.listeners.emit("notification", notification)
        return notification

    def notifications(self) -> List[SystemNotification]:
        with self._lock:
            return list(self._by_tag.values())

    def clear(self) -> None:
        with self._lock:
            self._by_tag.clear()
