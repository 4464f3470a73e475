"""
services/document_store.py

Persistence collaborator for CourtBell.

A document store holds schemaless JSON records grouped by collection
("cases", "clients", "juniors", "transactions", "profiles") and scoped to an
owner (the signed-in lawyer). Two backends exist:

  - SqlDocumentStore   (services/sql_document_store.py)   — primary
  - LocalDocumentStore (services/local_document_store.py) — JSON files keyed
                                                            <collection>_<userId>

Every successful write is pushed to subscribers of (collection, owner)
through the ChangeBroker. Subscribers get a Subscription handle back and
must release it; the handle is a context manager so callers can scope it:

    with store.subscribe("cases", user_id, on_change):
        ...
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Literal, Optional, Tuple

from courtbell.utils.helpers import generate_id, to_portable

logger = logging.getLogger(__name__)

ChangeKind = Literal["add", "update", "delete"]


@dataclass(frozen=True)
class ChangeEvent:
    collection: str
    owner_id:   str
    kind:       ChangeKind
    doc_id:     str
    data:       Optional[Dict[str, Any]] = None


ChangeCallback = Callable[[ChangeEvent], None]


class Subscription:
    """Cancellation handle returned by ``subscribe``."""

    def __init__(self, release: Callable[["Subscription"], None]) -> None:
        self._release = release
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self._release(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unsubscribe()


@dataclass
class ChangeBroker:
    """In-process fan-out of change events per (collection, owner)."""

    _listeners: Dict[Tuple[str, str], List[Tuple[Subscription, ChangeCallback]]] = field(
        default_factory=dict
    )

    def subscribe(self, collection: str, owner_id: str, callback: ChangeCallback) -> Subscription:
        key = (collection, owner_id)

        def release(sub: Subscription) -> None:
            listeners = self._listeners.get(key, [])
            self._listeners[key] = [pair for pair in listeners if pair[0] is not sub]
            if not self._listeners[key]:
                del self._listeners[key]

        subscription = Subscription(release)
        self._listeners.setdefault(key, []).append((subscription, callback))
        return subscription

    def publish(self, event: ChangeEvent) -> None:
        # Copy: callbacks may subscribe/unsubscribe while we iterate.
        for subscription, callback in list(self._listeners.get((event.collection, event.owner_id), [])):
            if not subscription.active:
                continue
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "Change listener failed for %s/%s (%s)",
                    event.collection, event.doc_id, event.kind,
                )

    def listener_count(self, collection: str, owner_id: str) -> int:
        return len(self._listeners.get((collection, owner_id), []))


class DocumentStore(ABC):
    """
    Abstract document store. Backends implement the ``_``-prefixed
    primitives; this base class assigns ids, normalises timestamps and
    publishes change events.
    """

    def __init__(self, broker: Optional[ChangeBroker] = None) -> None:
        self.broker = broker or ChangeBroker()

    # ------------------------------------------------------------------ reads

    def list(self, collection: str, owner_id: str) -> List[Dict[str, Any]]:
        """All records of a collection in insertion order, each with ``id``."""
        return [{**data, "id": doc_id} for doc_id, data in self._list(collection, owner_id)]

    def get(self, collection: str, owner_id: str, doc_id: str) -> Optional[Dict[str, Any]]:
        data = self._get(collection, owner_id, doc_id)
        if data is None:
            return None
        return {**data, "id": doc_id}

    # ----------------------------------------------------------------- writes

    def add(self, collection: str, owner_id: str, data: Dict[str, Any], doc_id: Optional[str] = None) -> Dict[str, Any]:
        doc_id = doc_id or generate_id()
        payload = to_portable({k: v for k, v in data.items() if k != "id"})
        self._insert(collection, owner_id, doc_id, payload)
        logger.debug("Document added: %s/%s (owner=%s)", collection, doc_id, owner_id)
        self.broker.publish(ChangeEvent(collection, owner_id, "add", doc_id, payload))
        return {**payload, "id": doc_id}

    def update(self, collection: str, owner_id: str, doc_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Shallow-merge ``changes`` into the record. Returns None if missing."""
        current = self._get(collection, owner_id, doc_id)
        if current is None:
            return None
        merged = {**current, **to_portable({k: v for k, v in changes.items() if k != "id"})}
        self._replace(collection, owner_id, doc_id, merged)
        logger.debug("Document updated: %s/%s fields=%s", collection, doc_id, sorted(changes))
        self.broker.publish(ChangeEvent(collection, owner_id, "update", doc_id, merged))
        return {**merged, "id": doc_id}

    def set(self, collection: str, owner_id: str, doc_id: str, data: Dict[str, Any], merge: bool = True) -> Dict[str, Any]:
        """Write a record under a known id (create or overwrite)."""
        current = self._get(collection, owner_id, doc_id)
        if current is None:
            return self.add(collection, owner_id, data, doc_id=doc_id)
        if merge:
            return self.update(collection, owner_id, doc_id, data)
        payload = to_portable({k: v for k, v in data.items() if k != "id"})
        self._replace(collection, owner_id, doc_id, payload)
        self.broker.publish(ChangeEvent(collection, owner_id, "update", doc_id, payload))
        return {**payload, "id": doc_id}

    def delete(self, collection: str, owner_id: str, doc_id: str) -> bool:
        removed = self._delete(collection, owner_id, doc_id)
        if removed:
            logger.debug("Document deleted: %s/%s (owner=%s)", collection, doc_id, owner_id)
            self.broker.publish(ChangeEvent(collection, owner_id, "delete", doc_id))
        return removed

    def clear(self, collection: str, owner_id: str) -> int:
        """Delete every record of a collection; returns the number removed."""
        removed = 0
        for doc_id, _ in self._list(collection, owner_id):
            if self.delete(collection, owner_id, doc_id):
                removed += 1
        return removed

    # ---------------------------------------------------------- subscription

    def subscribe(self, collection: str, owner_id: str, callback: ChangeCallback) -> Subscription:
        return self.broker.subscribe(collection, owner_id, callback)

    # ------------------------------------------------------------- backends

    @abstractmethod
    def _list(self, collection: str, owner_id: str) -> List[Tuple[str, Dict[str, Any]]]:
        ...

    @abstractmethod
    def _get(self, collection: str, owner_id: str, doc_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def _insert(self, collection: str, owner_id: str, doc_id: str, data: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def _replace(self, collection: str, owner_id: str, doc_id: str, data: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def _delete(self, collection: str, owner_id: str, doc_id: str) -> bool:
        ...
