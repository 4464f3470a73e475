"""
services/entity_store.py

Typed CRUD over one document collection, scoped to the signed-in user.
Domain accessors (cases, clients, juniors, transactions) build on this.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel

from courtbell.services.document_store import ChangeEvent, DocumentStore, Subscription
from courtbell.utils.exceptions import EntityNotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class EntityStore(Generic[T]):
    collection: str = ""

    def __init__(self, store: DocumentStore, owner_id: str, model: Type[T], collection: Optional[str] = None) -> None:
        self.store = store
        self.owner_id = owner_id
        self.model = model
        if collection:
            self.collection = collection

    def _to_model(self, data: dict) -> T:
        return self.model.model_validate(data)

    @staticmethod
    def _dump(record: BaseModel, **kwargs) -> dict:
        return record.model_dump(by_alias=True, mode="json", **kwargs)

    def list(self) -> List[T]:
        return [self._to_model(data) for data in self.store.list(self.collection, self.owner_id)]

    def get_by_id(self, entity_id: Optional[str]) -> Optional[T]:
        """Returns None for a missing or empty id (dangling references are normal)."""
        if not entity_id:
            return None
        data = self.store.get(self.collection, self.owner_id, entity_id)
        return self._to_model(data) if data is not None else None

    def require(self, entity_id: str) -> T:
        entity = self.get_by_id(entity_id)
        if entity is None:
            raise EntityNotFoundError(self.collection, entity_id)
        return entity

    def add(self, record: BaseModel) -> T:
        data = self.store.add(self.collection, self.owner_id, self._dump(record, exclude={"id"}))
        logger.info("%s added: %s (owner=%s)", self.collection, data["id"], self.owner_id)
        return self._to_model(data)

    def update(self, entity_id: str, patch: BaseModel) -> T:
        """Shallow merge of the fields set on ``patch``.

        The merged record is validated before anything is written, so a
        rejected patch leaves the stored record untouched.
        """
        changes = self._dump(patch, exclude_unset=True, exclude={"id"})
        current = self.store.get(self.collection, self.owner_id, entity_id)
        if current is None:
            raise EntityNotFoundError(self.collection, entity_id)
        self._to_model({**current, **changes})
        data = self.store.update(self.collection, self.owner_id, entity_id, changes)
        if data is None:
            raise EntityNotFoundError(self.collection, entity_id)
        return self._to_model(data)

    def replace(self, entity_id: str, record: BaseModel) -> T:
        """Full replace: every field of ``record`` is written."""
        self.require(entity_id)
        data = self.store.update(self.collection, self.owner_id, entity_id, self._dump(record, exclude={"id"}))
        return self._to_model(data)

    def delete(self, entity_id: str) -> bool:
        removed = self.store.delete(self.collection, self.owner_id, entity_id)
        if removed:
            logger.info("%s deleted: %s (owner=%s)", self.collection, entity_id, self.owner_id)
        return removed

    def subscribe(self, callback: Callable[[ChangeEvent], None]) -> Subscription:
        return self.store.subscribe(self.collection, self.owner_id, callback)
