"""
services/sql_document_store.py

Document store on SQLAlchemy: every record is a row of ``documents`` holding
its JSON payload, keyed by (collection, owner_id, doc_id).
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from courtbell.db.models import StoredDocument
from courtbell.services.document_store import ChangeBroker, DocumentStore
from courtbell.utils.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class SqlDocumentStore(DocumentStore):

    def __init__(self, session_factory: sessionmaker, broker: Optional[ChangeBroker] = None) -> None:
        super().__init__(broker)
        self._session_factory = session_factory

    @contextmanager
    def _session(self, operation: str, collection: str) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Document store %s failed for %s", operation, collection)
            raise PersistenceError(operation, collection, str(e.__class__.__name__)) from e
        finally:
            db.close()

    @staticmethod
    def _query(db: Session, collection: str, owner_id: str):
        return db.query(StoredDocument).filter(
            StoredDocument.collection == collection,
            StoredDocument.owner_id == owner_id,
        )

    def _list(self, collection: str, owner_id: str) -> List[Tuple[str, Dict[str, Any]]]:
        with self._session("load", collection) as db:
            rows = self._query(db, collection, owner_id).order_by(StoredDocument.seq.asc()).all()
            return [(row.doc_id, dict(row.data or {})) for row in rows]

    def _get(self, collection: str, owner_id: str, doc_id: str) -> Optional[Dict[str, Any]]:
        with self._session("load", collection) as db:
            row = self._query(db, collection, owner_id).filter(StoredDocument.doc_id == doc_id).first()
            return dict(row.data or {}) if row else None

    def _insert(self, collection: str, owner_id: str, doc_id: str, data: Dict[str, Any]) -> None:
        with self._session("save", collection) as db:
            db.add(StoredDocument(
                doc_id=doc_id,
                collection=collection,
                owner_id=owner_id,
                data=data,
            ))

    def _replace(self, collection: str, owner_id: str, doc_id: str, data: Dict[str, Any]) -> None:
        with self._session("update", collection) as db:
            row = self._query(db, collection, owner_id).filter(StoredDocument.doc_id == doc_id).first()
            if row is not None:
                # Assign a fresh dict so the JSON column is flagged dirty
                row.data = dict(data)

    def _delete(self, collection: str, owner_id: str, doc_id: str) -> bool:
        with self._session("delete", collection) as db:
            deleted = (
                self._query(db, collection, owner_id)
                .filter(StoredDocument.doc_id == doc_id)
                .delete(synchronize_session=False)
            )
            return bool(deleted)
