"""
services/transaction_service.py

Payments in (from clients) and out (to juniors / expenses).

Listing is newest first. The related-to display name is denormalised at
creation time so the history still reads correctly after the client or
junior is deleted.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from courtbell.db.schemas import RelatedTo, Transaction, TransactionCreate, TransactionSummary
from courtbell.services.client_service import ClientStore, JuniorStore
from courtbell.services.document_store import DocumentStore
from courtbell.services.entity_store import EntityStore
from courtbell.utils.helpers import utc_now_iso

logger = logging.getLogger(__name__)


class TransactionStore(EntityStore[Transaction]):
    collection = "transactions"

    def __init__(
        self,
        store:   DocumentStore,
        owner_id: str,
        clients: Optional[ClientStore] = None,
        juniors: Optional[JuniorStore] = None,
    ) -> None:
        super().__init__(store, owner_id, Transaction)
        self.clients = clients or ClientStore(store, owner_id)
        self.juniors = juniors or JuniorStore(store, owner_id)

    def resolve_related_name(self, kind: str, related_id: str) -> str:
        if kind == "client":
            client = self.clients.get_by_id(related_id)
            return client.name if client else "Unknown Client"
        if kind == "junior":
            junior = self.juniors.get_by_id(related_id)
            return junior.name if junior else "Unknown Junior"
        return "Other"

    def add(self, record: TransactionCreate) -> Transaction:
        """Stamps the current UTC time and fills the related-to name."""
        related = record.related_to
        name = related.name or self.resolve_related_name(related.type, related.id)
        stamped = record.model_copy(update={
            "date": utc_now_iso(),
            "related_to": RelatedTo(type=related.type, id=related.id, name=name),
        })
        return super().add(stamped)

    def list(self) -> List[Transaction]:
        return sorted(super().list(), key=lambda t: t.date, reverse=True)

    def filter(self, direction: Optional[str] = None) -> List[Transaction]:
        transactions = self.list()
        if direction in ("in", "out"):
            return [t for t in transactions if t.type == direction]
        return transactions

    def summary(self) -> TransactionSummary:
        transactions = super().list()
        income = sum(t.amount for t in transactions if t.type == "in")
        outcome = sum(t.amount for t in transactions if t.type == "out")
        return TransactionSummary(
            total_income=income,
            total_outcome=outcome,
            net_balance=income - outcome,
        )
