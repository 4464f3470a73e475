# courtbell/services/case_service.py
"""
Case accessor: CRUD plus the derived views the dashboard needs
(upcoming / past split, hearing history and expense bookkeeping).
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from courtbell.db.schemas import Case, Expense, Hearing
from courtbell.services.document_store import DocumentStore
from courtbell.services.entity_store import EntityStore
from courtbell.utils.helpers import combine_date_time

logger = logging.getLogger(__name__)


def scheduled_at(case: Case) -> Optional[datetime]:
    """Local datetime of the case's next hearing, or None if unparsable."""
    try:
        return combine_date_time(case.date, case.time)
    except (TypeError, ValueError):
        logger.warning("Case %s has an unparsable schedule: %r %r", case.id, case.date, case.time)
        return None


class CaseStore(EntityStore[Case]):
    collection = "cases"

    def __init__(self, store: DocumentStore, owner_id: str) -> None:
        super().__init__(store, owner_id, Case)

    # ------------------------------------------------------------------
    # Derived queries
    # ------------------------------------------------------------------

    @staticmethod
    def is_past(case: Case, now: Optional[datetime] = None) -> bool:
        when = scheduled_at(case)
        return when is not None and when < (now or datetime.now())

    def upcoming(self, now: Optional[datetime] = None) -> List[Case]:
        """Cases at or after ``now``, soonest first."""
        now = now or datetime.now()
        dated = [(scheduled_at(c), c) for c in self.list()]
        future = [(when, c) for when, c in dated if when is not None and when >= now]
        return [c for _, c in sorted(future, key=lambda pair: pair[0])]

    def past(self, now: Optional[datetime] = None) -> List[Case]:
        """Cases before ``now``, most recent first."""
        now = now or datetime.now()
        dated = [(scheduled_at(c), c) for c in self.list()]
        earlier = [(when, c) for when, c in dated if when is not None and when < now]
        return [c for _, c in sorted(earlier, key=lambda pair: pair[0], reverse=True)]

    def cases_for_client(self, client_id: str) -> List[Case]:
        return [c for c in self.list() if c.client_id == client_id]

    def cases_for_junior(self, junior_id: str) -> List[Case]:
        return [c for c in self.list() if c.junior_id == junior_id]

    # ------------------------------------------------------------------
    # Embedded history / expenses (append + remove only)
    # ------------------------------------------------------------------

    def _write_embedded(self, case: Case, field: str, items: list) -> Case:
        data = self.store.update(
            self.collection,
            self.owner_id,
            case.id,
            {field: [item.model_dump(by_alias=True, mode="json") for item in items]},
        )
        return self._to_model(data)

    def add_hearing(self, case_id: str, hearing: Hearing) -> Case:
        case = self.require(case_id)
        return self._write_embedded(case, "history", [*case.history, hearing])

    def remove_hearing(self, case_id: str, index: int) -> Case:
        case = self.require(case_id)
        if not 0 <= index < len(case.history):
            raise IndexError(f"Hearing {index} does not exist on case {case_id}")
        return self._write_embedded(case, "history", case.history[:index] + case.history[index + 1:])

    def add_expense(self, case_id: str, expense: Expense) -> Case:
        case = self.require(case_id)
        return self._write_embedded(case, "expenses", [*case.expenses, expense])

    def remove_expense(self, case_id: str, index: int) -> Case:
        case = self.require(case_id)
        if not 0 <= index < len(case.expenses):
            raise IndexError(f"Expense {index} does not exist on case {case_id}")
        return self._write_embedded(case, "expenses", case.expenses[:index] + case.expenses[index + 1:])

    @staticmethod
    def total_expenses(case: Case) -> float:
        return sum(expense.amount for expense in case.expenses)
