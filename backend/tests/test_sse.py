"""Change stream: events reach the client and listeners are released when it ends."""

import asyncio
import json

import pytest

from courtbell.api.v1.endpoints.sse import STREAMED_COLLECTIONS, subscribe_to_changes
from courtbell.db.schemas import ClientCreate
from courtbell.services.session_service import UserSession

OWNER = "user-1"


class FakeRequest:
    def __init__(self) -> None:
        self.disconnected = False

    async def is_disconnected(self) -> bool:
        return self.disconnected


def _listener_counts(session: UserSession) -> dict:
    counts = {name: session.store.broker.listener_count(name, OWNER) for name in STREAMED_COLLECTIONS}
    counts["notices"] = len(session.notices.listeners.items)
    counts["platform"] = len(session.platform.listeners.items)
    return counts


async def _next_event(stream, session: UserSession, baseline: dict):
    """Start waiting for the next event once the stream has subscribed."""
    pending = asyncio.ensure_future(stream.__anext__())
    for _ in range(100):
        if _listener_counts(session) != baseline:
            break
        await asyncio.sleep(0)
    return pending


async def test_change_reaches_stream_and_disconnect_releases_listeners(sql_store, scheduler):
    session = UserSession(OWNER, sql_store, scheduler).start()
    baseline = _listener_counts(session)
    request = FakeRequest()
    response = await subscribe_to_changes(request, session)
    stream = response.body_iterator

    pending = await _next_event(stream, session, baseline)
    assert _listener_counts(session)["clients"] == baseline["clients"] + 1
    added = session.clients.add(ClientCreate(name="Ravi Kumar"))
    event = await asyncio.wait_for(pending, timeout=5)

    assert event["event"] == "change"
    payload = json.loads(event["data"])
    assert payload["collection"] == "clients"
    assert payload["kind"] == "add"
    assert payload["id"] == added.id
    assert payload["data"]["name"] == "Ravi Kumar"

    request.disconnected = True
    with pytest.raises(StopAsyncIteration):
        await stream.__anext__()
    assert _listener_counts(session) == baseline
    session.teardown()


async def test_notice_reaches_stream_and_close_releases_listeners(sql_store, scheduler):
    session = UserSession(OWNER, sql_store, scheduler).start()
    baseline = _listener_counts(session)
    response = await subscribe_to_changes(FakeRequest(), session)
    stream = response.body_iterator

    pending = await _next_event(stream, session, baseline)
    session.notices.post("Hearing reminder", "Rent dispute at Munsiff Court, Kochi")
    event = await asyncio.wait_for(pending, timeout=5)

    assert event["event"] == "notice"
    assert json.loads(event["data"])["title"] == "Hearing reminder"

    await stream.aclose()
    assert _listener_counts(session) == baseline
    session.teardown()


async def test_unread_stream_holds_no_listeners(sql_store, scheduler):
    session = UserSession(OWNER, sql_store, scheduler).start()
    baseline = _listener_counts(session)

    await subscribe_to_changes(FakeRequest(), session)

    assert _listener_counts(session) == baseline
    session.teardown()
