"""Client and junior-advocate accessors."""
from __future__ import annotations

from courtbell.db.schemas import Client, Junior
from courtbell.services.document_store import DocumentStore
from courtbell.services.entity_store import EntityStore


class ClientStore(EntityStore[Client]):
    collection = "clients"

    def __init__(self, store: DocumentStore, owner_id: str) -> None:
        super().__init__(store, owner_id, Client)


class JuniorStore(EntityStore[Junior]):
    collection = "juniors"

    def __init__(self, store: DocumentStore, owner_id: str) -> None:
        super().__init__(store, owner_id, Junior)
