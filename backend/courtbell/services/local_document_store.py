"""
services/local_document_store.py

Durable local key-value rendition of the document store. Each
(collection, owner) pair lives in one JSON file named ``<collection>_<owner>.json``
(``<collection>.json`` when unscoped) holding a list of records in insertion
order. Files are rewritten atomically via a temp file + ``os.replace``; a
failed write removes its temp file.

Writes are serialised with an in-process lock only. Two processes sharing
one data directory are not coordinated.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from courtbell.services.document_store import ChangeBroker, DocumentStore
from courtbell.utils.exceptions import PersistenceError

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")


def storage_key(collection: str, owner_id: str) -> str:
    key = f"{collection}_{owner_id}" if owner_id else collection
    return _SAFE_KEY.sub("-", key)


class LocalDocumentStore(DocumentStore):

    def __init__(self, directory: str | Path, broker: Optional[ChangeBroker] = None) -> None:
        super().__init__(broker)
        self.directory = Path(directory)
        self._lock = threading.RLock()

    def path_for(self, collection: str, owner_id: str) -> Path:
        return self.directory / f"{storage_key(collection, owner_id)}.json"

    def _read(self, collection: str, owner_id: str) -> List[Dict[str, Any]]:
        path = self.path_for(collection, owner_id)
        if not path.exists():
            return []
        try:
            with path.open("r", encoding="utf-8") as fh:
                records = json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            logger.exception("Could not read %s", path)
            raise PersistenceError("load", collection, str(e.__class__.__name__)) from e
        if not isinstance(records, list):
            raise PersistenceError("load", collection, "corrupt storage file")
        return records

    def _write(self, collection: str, owner_id: str, records: List[Dict[str, Any]]) -> None:
        path = self.path_for(collection, owner_id)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".tmp-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(records, fh, ensure_ascii=False, indent=2)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            logger.exception("Could not write %s", path)
            raise PersistenceError("save", collection, str(e.__class__.__name__)) from e

    def _list(self, collection: str, owner_id: str) -> List[Tuple[str, Dict[str, Any]]]:
        with self._lock:
            return [
                (record["id"], {k: v for k, v in record.items() if k != "id"})
                for record in self._read(collection, owner_id)
            ]

    def _get(self, collection: str, owner_id: str, doc_id: str) -> Optional[Dict[str, Any]]:
        for current_id, data in self._list(collection, owner_id):
            if current_id == doc_id:
                return data
        return None

    def _insert(self, collection: str, owner_id: str, doc_id: str, data: Dict[str, Any]) -> None:
        with self._lock:
            records = self._read(collection, owner_id)
            records.append({"id": doc_id, **data})
            self._write(collection, owner_id, records)

    def _replace(self, collection: str, owner_id: str, doc_id: str, data: Dict[str, Any]) -> None:
        with self._lock:
            records = self._read(collection, owner_id)
            for index, record in enumerate(records):
                if record.get("id") == doc_id:
                    records[index] = {"id": doc_id, **data}
                    break
            self._write(collection, owner_id, records)

    def _delete(self, collection: str, owner_id: str, doc_id: str) -> bool:
        with self._lock:
            records = self._read(collection, owner_id)
            kept = [record for record in records if record.get("id") != doc_id]
            if len(kept) == len(records):
                return False
            self._write(collection, owner_id, kept)
            return True
