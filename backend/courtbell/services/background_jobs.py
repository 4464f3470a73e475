"""
services/background_jobs.py

The shared APScheduler instance for CourtBell.

Reminder jobs (one-shot ``date`` jobs, see reminder_scheduler.py) and the
housekeeping jobs below all run on one AsyncIOScheduler in the server's
event loop, using the server's local time zone so stored case dates and
times are read as local clock values.

Jobs:
  1. purge_expired_reset_tokens
     — Clears password-reset tokens whose expiry has passed.
     — Runs every 60 minutes.

Wired into FastAPI startup/shutdown in main.py:

    start_scheduler()     # on startup
    shutdown_scheduler()  # on shutdown
"""

from __future__ import annotations

import logging
from datetime import datetime

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from courtbell.db.database import SessionLocal

logger = logging.getLogger(__name__)

# ── Scheduler singleton ───────────────────────────────────────────────────────
_scheduler: AsyncIOScheduler | None = None


def get_scheduler() -> AsyncIOScheduler:
    """Returns the shared scheduler, creating it (stopped) on first use."""
    global _scheduler
    if _scheduler is None:
        _scheduler = AsyncIOScheduler()
    return _scheduler


def start_scheduler() -> AsyncIOScheduler:
    """
    Starts the scheduler and registers housekeeping jobs.
    Must be called from inside the running event loop (FastAPI startup).
    """
    scheduler = get_scheduler()

    scheduler.add_job(
        purge_expired_reset_tokens,
        trigger=IntervalTrigger(minutes=60),
        id="purge_expired_reset_tokens",
        name="Purge expired password reset tokens",
        replace_existing=True,
        max_instances=1,
        misfire_grace_time=300,
    )

    if not scheduler.running:
        scheduler.start()
        logger.info("Background scheduler started — %d jobs registered", len(scheduler.get_jobs()))
    return scheduler


def shutdown_scheduler() -> None:
    """Gracefully shuts down the scheduler. Call from FastAPI shutdown."""
    global _scheduler
    if _scheduler and _scheduler.running:
        _scheduler.shutdown(wait=False)
        logger.info("Background scheduler shut down")
    _scheduler = None


# ============================================================================
# Job 1: Purge expired password reset tokens
# ============================================================================

async def purge_expired_reset_tokens() -> int:
    """Nulls out reset tokens past their expiry. Returns rows touched."""
    db = SessionLocal()

    try:
        from courtbell.db.models import User

        cleared = (
            db.query(User)
            .filter(
                User.reset_token.isnot(None),
                User.reset_token_expires_at < datetime.utcnow(),
            )
            .update(
                {User.reset_token: None, User.reset_token_expires_at: None},
                synchronize_session=False,
            )
        )
        db.commit()
        if cleared:
            logger.info("Job: purge_expired_reset_tokens — cleared %d tokens", cleared)
        return cleared

    except Exception:
        db.rollback()
        logger.exception("Job: purge_expired_reset_tokens — failed")
        return 0

    finally:
        db.close()
