from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from ...constants import EXPENSE_CATEGORIES, KEY_EXPENSES
from ...utils.errors import ValidationFailure
from ...utils.helpers import new_id, now_str
from ...utils.validators import non_empty, is_strictly_positive_number
from .document_store import DocumentStore


@dataclass
class Expense:
    id: str
    reason: str
    amount: float
    category: str
    timestamp: str
    added_by: str | None = None

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "reason": self.reason,
            "amount": self.amount,
            "category": self.category,
            "timestamp": self.timestamp,
            "addedBy": self.added_by,
        }

    @classmethod
    def from_dict(cls, d: Dict) -> "Expense":
        return cls(
            id=str(d["id"]),
            reason=d.get("reason") or "",
            amount=float(d.get("amount") or 0.0),
            category=d.get("category") or "other",
            timestamp=str(d.get("timestamp") or ""),
            added_by=d.get("addedBy"),
        )


class ExpensesRepo:
    def __init__(self, store: DocumentStore):
        self.store = store

    def list_expenses(self) -> List[Expense]:
        return [Expense.from_dict(d) for d in self.store.load(KEY_EXPENSES, [])]

    def add(
        self,
        *,
        reason: str,
        amount: float,
        category: str = "other",
        added_by: str | None = None,
        timestamp: str | None = None,
    ) -> Expense:
        if not non_empty(reason):
            raise ValidationFailure("Expense reason cannot be empty.")
        if not is_strictly_positive_number(amount):
            raise ValidationFailure("Expense amount must be greater than zero.")
        if category not in EXPENSE_CATEGORIES:
            raise ValidationFailure(f"Unknown expense category: {category}")

        exp = Expense(
            id=new_id(),
            reason=reason.strip(),
            amount=float(amount),
            category=category,
            timestamp=timestamp or now_str(),
            added_by=added_by,
        )
        rows = self.store.load(KEY_EXPENSES, [])
        rows.insert(0, exp.to_dict())
        self.store.save(KEY_EXPENSES, rows)
        return exp

    def delete(self, expense_id: str) -> bool:
        rows = self.store.load(KEY_EXPENSES, [])
        kept = [r for r in rows if str(r.get("id")) != expense_id]
        if len(kept) == len(rows):
            return False
        self.store.save(KEY_EXPENSES, kept)
        return True

    def total(self) -> float:
        return sum(e.amount for e in self.list_expenses())
