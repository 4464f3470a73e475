"""
Hearing reminder endpoints: the session's pending plan, in-app notices and
the system-notification permission handshake.
"""
from fastapi import APIRouter, Depends, status
from typing import List

from courtbell.api.v1.deps import get_current_session
from courtbell.db.schemas import (
    NoticeOut,
    NotificationOut,
    PermissionState,
    PermissionUpdate,
    ScheduledReminderOut,
)
from courtbell.services.session_service import UserSession
from courtbell.utils.exceptions import EntityNotFoundError

router = APIRouter()


def _permission_state(session: UserSession) -> PermissionState:
    return PermissionState(
        permission=session.platform.permission,
        requested=session.platform.permission_requested,
    )


@router.get("/", response_model=List[ScheduledReminderOut])
async def list_pending_reminders(session: UserSession = Depends(get_current_session)):
    """Reminders that have not fired yet, soonest first."""
    return [
        ScheduledReminderOut(
            case_id=r.case_id,
            title=r.title,
            fire_at=r.fire_at,
            delay_seconds=r.delay_seconds,
        )
        for r in session.reminders.pending
    ]


@router.get("/notices", response_model=List[NoticeOut])
async def list_notices(session: UserSession = Depends(get_current_session)):
    return [
        NoticeOut(
            id=n.id,
            title=n.title,
            description=n.description,
            created_at=n.created_at,
            expires_at=n.expires_at,
        )
        for n in session.notices.active()
    ]


@router.delete("/notices/{notice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def dismiss_notice(notice_id: str, session: UserSession = Depends(get_current_session)):
    if not session.notices.dismiss(notice_id):
        raise EntityNotFoundError("notices", notice_id)


@router.get("/permission", response_model=PermissionState)
async def get_permission(session: UserSession = Depends(get_current_session)):
    return _permission_state(session)


@router.put("/permission", response_model=PermissionState)
async def set_permission(
    update: PermissionUpdate,
    session: UserSession = Depends(get_current_session),
):
    """The client reports the outcome of the permission prompt."""
    session.platform.set_permission(update.permission)
    return _permission_state(session)


@router.get("/notifications", response_model=List[NotificationOut])
async def list_notifications(session: UserSession = Depends(get_current_session)):
    return [
        NotificationOut(tag=n.tag, title=n.title, body=n.body, created_at=n.created_at)
        for n in session.platform.notifications()
    ]
