"""
services/session_service.py

Per-user session state.

A UserSession is opened explicitly when a lawyer signs in and torn down
explicitly when they sign out. It owns the user-scoped accessors, the cached
profile, the notice board, the notification platform and the reminder
scheduler. While open it listens to ``cases`` and ``clients`` changes and
re-plans reminders on each one.

Teardown releases the change subscriptions, cancels every pending reminder
and drops cached profile data.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from apscheduler.schedulers.base import BaseScheduler

from courtbell.core.config import settings
from courtbell.db.schemas import UserProfile
from courtbell.services.case_service import CaseStore
from courtbell.services.client_service import ClientStore, JuniorStore
from courtbell.services.document_store import ChangeEvent, DocumentStore, Subscription
from courtbell.services.notification_service import NoticeBoard, NotificationPlatform
from courtbell.services.profile_service import ProfileStore
from courtbell.services.reminder_scheduler import ReminderScheduler, ScheduledReminder
from courtbell.services.transaction_service import TransactionStore

logger = logging.getLogger(__name__)


class UserSession:

    def __init__(
        self,
        user_id:      str,
        store:        DocumentStore,
        scheduler:    BaseScheduler,
        email:        Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> None:
        self.user_id = user_id
        self.store = store

        self.cases = CaseStore(store, user_id)
        self.clients = ClientStore(store, user_id)
        self.juniors = JuniorStore(store, user_id)
        self.transactions = TransactionStore(store, user_id, self.clients, self.juniors)
        self.profiles = ProfileStore(store, user_id, email=email, display_name=display_name)

        self.notices = NoticeBoard(duration_seconds=settings.REMINDER_NOTICE_SECONDS)
        self.platform = NotificationPlatform()
        self.reminders = ReminderScheduler(
            scheduler,
            self.notices,
            self.platform,
            owner_id=user_id,
            misfire_grace_seconds=settings.REMINDER_MISFIRE_GRACE_SECONDS,
        )

        self._profile: Optional[UserProfile] = None
        self._subscriptions: List[Subscription] = []
        self.is_open = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> "UserSession":
        if self.is_open:
            return self
        self._subscriptions = [
            self.cases.subscribe(self._on_change),
            self.clients.subscribe(self._on_change),
        ]
        self.is_open = True
        self.refresh_reminders()
        logger.info("Session opened for user %s", self.user_id)
        return self

    def teardown(self) -> None:
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions = []
        self.reminders.close()
        self.notices.clear()
        self.platform.clear()
        self._profile = None
        self.is_open = False
        logger.info("Session closed for user %s", self.user_id)

    # ------------------------------------------------------------------
    # Reminders
    # ------------------------------------------------------------------

    def _on_change(self, event: ChangeEvent) -> None:
        logger.debug("Re-planning reminders after %s %s/%s", event.kind, event.collection, event.doc_id)
        self.refresh_reminders()

    def refresh_reminders(self) -> List[ScheduledReminder]:
        clients = {client.id: client for client in self.clients.list()}
        return self.reminders.reschedule(self.cases.list(), clients.get)

    # ------------------------------------------------------------------
    # Profile (cached for the life of the session)
    # ------------------------------------------------------------------

    @property
    def profile(self) -> UserProfile:
        if self._profile is None:
            self._profile = self.profiles.get()
        return self._profile

    def save_profile(self, profile: UserProfile) -> UserProfile:
        self._profile = self.profiles.save(profile)
        return self._profile


class SessionRegistry:
    """Open sessions keyed by user id."""

    def __init__(self, store: DocumentStore, scheduler: BaseScheduler) -> None:
        self.store = store
        self.scheduler = scheduler
        self._sessions: Dict[str, UserSession] = {}

    def open(self, user_id: str, email: Optional[str] = None, display_name: Optional[str] = None) -> UserSession:
        session = self._sessions.get(user_id)
        if session is not None and session.is_open:
            return session
        session = UserSession(user_id, self.store, self.scheduler, email=email, display_name=display_name)
        self._sessions[user_id] = session.start()
        return session

    def get(self, user_id: str) -> Optional[UserSession]:
        return self._sessions.get(user_id)

    def close(self, user_id: str) -> bool:
        session = self._sessions.pop(user_id, None)
        if session is None:
            return False
        session.teardown()
        return True

    def close_all(self) -> int:
        user_ids = list(self._sessions)
        for user_id in user_ids:
            self.close(user_id)
        return len(user_ids)

    def __len__(self) -> int:
        return len(self._sessions)
