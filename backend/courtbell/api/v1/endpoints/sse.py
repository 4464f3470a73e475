"""
Server-Sent Events for real-time updates
"""
from fastapi import APIRouter, Depends, Request
from sse_starlette.sse import EventSourceResponse
import asyncio
import json
import logging
from dataclasses import asdict, is_dataclass
from datetime import datetime

from courtbell.api.v1.deps import get_current_session
from courtbell.core.config import settings
from courtbell.services.document_store import ChangeEvent
from courtbell.services.session_service import UserSession
from courtbell.utils.helpers import to_portable

logger = logging.getLogger(__name__)

router = APIRouter()

STREAMED_COLLECTIONS = ("cases", "clients", "juniors", "transactions")


@router.get("/changes")
async def subscribe_to_changes(
    request: Request,
    session: UserSession = Depends(get_current_session),
):
    """
    Subscribe to real-time updates via Server-Sent Events

    Events:
    - change: a record was added, updated or deleted (``collection``, ``kind``, ``id``, ``data``)
    - notice: a hearing reminder fired
    - notification: a system notification was shown
    - permission_request: the client should prompt for notification permission
    - ping: Keepalive
    """
    queue: asyncio.Queue = asyncio.Queue()

    def on_change(event: ChangeEvent) -> None:
        queue.put_nowait({
            "event": "change",
            "data": json.dumps(to_portable({
                "collection": event.collection,
                "kind": event.kind,
                "id": event.doc_id,
                "data": event.data,
            })),
        })

    def on_signal(kind: str, payload: object) -> None:
        body = asdict(payload) if is_dataclass(payload) else {"value": payload}
        queue.put_nowait({"event": kind, "data": json.dumps(to_portable(body))})

    async def event_generator():
        subscriptions = [session.store.subscribe(name, session.user_id, on_change) for name in STREAMED_COLLECTIONS]
        releases = [session.notices.listeners.add(on_signal), session.platform.listeners.add(on_signal)]
        try:
            while True:
                if await request.is_disconnected():
                    logger.info("SSE client disconnected (user %s)", session.user_id)
                    break
                try:
                    yield await asyncio.wait_for(queue.get(), timeout=settings.SSE_PING_SECONDS)
                except asyncio.TimeoutError:
                    yield {
                        "event": "ping",
                        "data": json.dumps({"timestamp": datetime.now().isoformat()}),
                    }
        finally:
            for subscription in subscriptions:
                subscription.unsubscribe()
            for release in releases:
                release()
            logger.debug("SSE stream ended for user %s", session.user_id)

    return EventSourceResponse(event_generator())
