"""Document store behaviour shared by the SQL and local JSON backends."""

import json
import os

import pytest

from courtbell.services.document_store import ChangeEvent
from courtbell.services.local_document_store import LocalDocumentStore, storage_key
from courtbell.utils.exceptions import PersistenceError

OWNER = "user-1"


def test_add_then_get_returns_input_plus_id(store):
    created = store.add("clients", OWNER, {"name": "Ravi Kumar", "phone": "9876543210"})

    assert created["id"]
    assert store.get("clients", OWNER, created["id"]) == {
        "id": created["id"],
        "name": "Ravi Kumar",
        "phone": "9876543210",
    }


def test_list_keeps_insertion_order(store):
    ids = [store.add("clients", OWNER, {"name": name})["id"] for name in ("A", "B", "C")]

    assert [record["id"] for record in store.list("clients", OWNER)] == ids


def test_records_are_scoped_to_owner(store):
    store.add("clients", OWNER, {"name": "Mine"})
    store.add("clients", "someone-else", {"name": "Theirs"})

    assert [r["name"] for r in store.list("clients", OWNER)] == ["Mine"]


def test_update_changes_only_the_given_field(store):
    created = store.add("clients", OWNER, {"name": "Ravi", "address": "Kochi", "phone": "1"})

    updated = store.update("clients", OWNER, created["id"], {"address": "Thrissur"})

    assert updated == {"id": created["id"], "name": "Ravi", "address": "Thrissur", "phone": "1"}
    assert store.get("clients", OWNER, created["id"]) == updated


def test_update_of_unknown_id_returns_none(store):
    assert store.update("clients", OWNER, "missing", {"name": "x"}) is None


def test_delete_is_unconditional(store):
    created = store.add("clients", OWNER, {"name": "Ravi"})

    assert store.delete("clients", OWNER, created["id"]) is True
    assert store.get("clients", OWNER, created["id"]) is None
    assert store.delete("clients", OWNER, created["id"]) is False


def test_set_creates_then_merges(store):
    store.set("profiles", OWNER, OWNER, {"name": "A. Menon"})
    merged = store.set("profiles", OWNER, OWNER, {"upiId": "menon@okaxis"})

    assert merged == {"id": OWNER, "name": "A. Menon", "upiId": "menon@okaxis"}


def test_clear_removes_everything(store):
    for name in ("A", "B"):
        store.add("juniors", OWNER, {"name": name})

    assert store.clear("juniors", OWNER) == 2
    assert store.list("juniors", OWNER) == []


def test_subscribers_receive_every_write(store):
    events: list[ChangeEvent] = []
    subscription = store.subscribe("cases", OWNER, events.append)

    created = store.add("cases", OWNER, {"title": "Rent dispute"})
    store.update("cases", OWNER, created["id"], {"title": "Rent dispute (appeal)"})
    store.delete("cases", OWNER, created["id"])

    assert [e.kind for e in events] == ["add", "update", "delete"]
    assert all(e.doc_id == created["id"] for e in events)
    assert events[1].data["title"] == "Rent dispute (appeal)"

    subscription.unsubscribe()
    store.add("cases", OWNER, {"title": "Another"})
    assert len(events) == 3


def test_subscription_is_scoped_to_collection_and_owner(store):
    events = []
    with store.subscribe("cases", OWNER, events.append):
        store.add("clients", OWNER, {"name": "Ravi"})
        store.add("cases", "someone-else", {"title": "Theirs"})

    assert events == []
    assert store.broker.listener_count("cases", OWNER) == 0


def test_failing_listener_does_not_block_others(store):
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    store.subscribe("cases", OWNER, broken)
    store.subscribe("cases", OWNER, seen.append)

    store.add("cases", OWNER, {"title": "Rent dispute"})

    assert len(seen) == 1


# =============================================================================
# Local JSON backend
# =============================================================================


def test_storage_key_is_collection_underscore_user():
    assert storage_key("cases", "abc123") == "cases_abc123"
    assert storage_key("cases", "") == "cases"
    assert storage_key("cases", "../etc") == "cases_..-etc"


def test_local_store_writes_one_file_per_collection_and_user(local_store):
    created = local_store.add("cases", "abc123", {"title": "Rent dispute"})

    path = local_store.directory / "cases_abc123.json"
    assert path.exists()
    assert json.loads(path.read_text(encoding="utf-8")) == [{"id": created["id"], "title": "Rent dispute"}]


def test_local_store_survives_reopen(tmp_path):
    first = LocalDocumentStore(tmp_path)
    created = first.add("clients", OWNER, {"name": "Ravi"})

    second = LocalDocumentStore(tmp_path)
    assert second.get("clients", OWNER, created["id"])["name"] == "Ravi"


def test_local_store_reports_corrupt_file(local_store):
    local_store.directory.mkdir(parents=True)
    local_store.path_for("cases", OWNER).write_text("{not json", encoding="utf-8")

    with pytest.raises(PersistenceError) as excinfo:
        local_store.list("cases", OWNER)

    assert excinfo.value.status_code == 503


def test_local_store_failed_write_leaves_no_temp_file(local_store):
    created = local_store.add("cases", OWNER, {"title": "Rent dispute"})

    with pytest.raises(TypeError):
        local_store.add("cases", OWNER, {"title": "Bad", "blob": object()})

    assert [p.name for p in local_store.directory.iterdir()] == [f"cases_{OWNER}.json"]
    assert [r["id"] for r in local_store.list("cases", OWNER)] == [created["id"]]


def test_local_store_failed_replace_is_persistence_error(local_store, monkeypatch):
    local_store.add("cases", OWNER, {"title": "Rent dispute"})

    def fail_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", fail_replace)

    with pytest.raises(PersistenceError):
        local_store.add("cases", OWNER, {"title": "Second"})

    assert [p.name for p in local_store.directory.iterdir()] == [f"cases_{OWNER}.json"]
