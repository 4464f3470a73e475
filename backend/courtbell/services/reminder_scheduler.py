"""
services/reminder_scheduler.py

Local hearing reminders.

Given the full case list and a client lookup, ReminderScheduler plans one
one-shot APScheduler ``date`` job per upcoming case. Any change to the input
triggers a full re-plan: every job of the previous plan is removed first,
then the new plan is scheduled. Past cases are skipped (no catch-up), as
are cases whose client no longer resolves.

When a job fires it posts an in-app notice and, if the platform permission
is granted, a system notification tagged with the case id.

Job ownership is exclusive: an instance only ever removes the job ids it
created, so several users' schedulers can share one AsyncIOScheduler.

Per-case lifecycle: unscheduled -> pending -> fired | cancelled.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Literal, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.date import DateTrigger

from courtbell.db.schemas import Case, Client
from courtbell.services.notification_service import NoticeBoard, NotificationPlatform
from courtbell.utils.helpers import combine_date_time

logger = logging.getLogger(__name__)

ReminderState = Literal["pending", "fired", "cancelled"]
ClientLookup = Callable[[str], Optional[Client]]


@dataclass
class ScheduledReminder:
    job_id:        str
    case_id:       str
    title:         str
    client_name:   str
    court:         str
    fire_at:       datetime
    delay_seconds: float
    state:         ReminderState = "pending"


class ReminderScheduler:

    def __init__(
        self,
        scheduler:             BaseScheduler,
        notices:               NoticeBoard,
        platform:              Optional[NotificationPlatform] = None,
        owner_id:              str = "",
        clock:                 Callable[[], datetime] = datetime.now,
        misfire_grace_seconds: int = 60,
    ) -> None:
        self._scheduler = scheduler
        self._notices = notices
        self._platform = platform
        self._owner_id = owner_id
        self._clock = clock
        self._misfire_grace = misfire_grace_seconds
        self._pending: Dict[str, ScheduledReminder] = {}
        self._epoch = 0
        self._closed = False

        # Ask once, opportunistically; never wait for the answer.
        if platform is not None and platform.supported and platform.permission == "default":
            platform.request_permission()

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    def reschedule(self, cases: Iterable[Case], get_client: ClientLookup) -> List[ScheduledReminder]:
        """Cancel the previous plan, then schedule every future case."""
        self.cancel_all()
        if self._closed:
            return []

        self._epoch += 1
        now = self._clock()

        for case in cases:
            try:
                client = get_client(case.client_id)
                if client is None:
                    logger.debug("Reminder skipped for case %s: client %s not found", case.id, case.client_id)
                    continue

                fire_at = combine_date_time(case.date, case.time)
                delay = (fire_at - now).total_seconds()
                if delay <= 0:
                    continue

                job_id = f"reminder:{self._owner_id}:{self._epoch}:{case.id}"
                self._scheduler.add_job(
                    self._fire,
                    trigger=DateTrigger(run_date=fire_at),
                    args=[job_id],
                    id=job_id,
                    name=f"Reminder for case {case.id}",
                    replace_existing=True,
                    misfire_grace_time=self._misfire_grace,
                )
                self._pending[job_id] = ScheduledReminder(
                    job_id=job_id,
                    case_id=case.id,
                    title=case.title,
                    client_name=client.name,
                    court=case.court,
                    fire_at=fire_at,
                    delay_seconds=delay,
                )
            except Exception:
                logger.exception("Could not set alarm for case %s", case.id)

        logger.info(
            "Reminders planned for %s: %d pending (epoch %d)",
            self._owner_id or "-", len(self._pending), self._epoch,
        )
        return self.pending

    def cancel_all(self) -> int:
        """Remove every job of the current plan. Returns how many were pending."""
        cancelled = 0
        for job_id, reminder in list(self._pending.items()):
            try:
                self._scheduler.remove_job(job_id)
            except JobLookupError:
                # Already executed or never reached the job store
                pass
            reminder.state = "cancelled"
            cancelled += 1
        self._pending.clear()
        return cancelled

    @property
    def pending(self) -> List[ScheduledReminder]:
        return sorted(self._pending.values(), key=lambda r: r.fire_at)

    # ------------------------------------------------------------------
    # Firing
    # ------------------------------------------------------------------

    async def _fire(self, job_id: str) -> None:
        reminder = self._pending.pop(job_id, None)
        if reminder is None:
            # Cancelled by a re-plan after the job was handed to the executor
            return
        reminder.state = "fired"

        try:
            self._notices.post(
                title=f"Reminder: {reminder.title}",
                description=f"Case for {reminder.client_name} is scheduled now.",
            )
            if self._platform is not None and self._platform.permission == "granted":
                self._platform.notify(
                    title=f"CourtBell: {reminder.title}",
                    body=f"Your case for {reminder.client_name} at {reminder.court} is scheduled now.",
                    tag=reminder.case_id,
                )
            logger.info("Reminder fired for case %s", reminder.case_id)
        except Exception:
            logger.exception("Reminder delivery failed for case %s", reminder.case_id)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def close(self) -> None:
        cancelled = self.cancel_all()
        self._closed = True
        logger.debug("Reminder scheduler closed for %s (%d cancelled)", self._owner_id or "-", cancelled)

    def __enter__(self) -> "ReminderScheduler":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
