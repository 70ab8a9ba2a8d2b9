# tinshop/modules/reporting/reports.py
"""
Read-only figures over the stored documents: stock valuation, profit and
loss, per-sale profit and customer balances. Nothing here writes.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from ...constants import (
    DELIVERY_PENDING,
    LEDGER_CREDIT_HISTORY_TOLERANCE,
    LEDGER_DUE_TOLERANCE,
)
from ...database.repositories.document_store import DocumentStore
from ...database.repositories.expenses_repo import Expense, ExpensesRepo
from ...database.repositories.inventory_repo import InventoryRepo, ProductGroup
from ...database.repositories.sales_repo import Sale, SalesRepo
from ..inventory.ledger import variant_label


def _in_range(timestamp: str, date_from: Optional[str], date_to: Optional[str]) -> bool:
    day = (timestamp or "")[:10]
    if date_from and day < date_from:
        return False
    if date_to and day > date_to:
        return False
    return True


def stock_valuation(groups: Iterable[ProductGroup]) -> Dict:
    """
    Value of stock on hand at average cost. Negative balances count as zero.

    Returns {'rows': [{'name', 'stock_pieces', 'average_cost', 'value'}], 'total': float}
    """
    rows: List[Dict] = []
    total = 0.0
    for g in groups:
        for v in g.variants:
            value = max(v.stock_pieces, 0) * v.average_cost
            rows.append({
                "name": variant_label(g, v),
                "stock_pieces": v.stock_pieces,
                "average_cost": v.average_cost,
                "value": value,
            })
            total += value
    return {"rows": rows, "total": total}


def sale_cost(sale: Sale) -> float:
    """Buying cost of the goods on a sale (manual lines cost nothing)."""
    return sum(it.buy_price_unit * it.quantity_pieces for it in sale.items)


def sale_profit(sale: Sale) -> float:
    return sale.final_amount - sale_cost(sale)


def profit_and_loss(
    sales: Sequence[Sale],
    expenses: Sequence[Expense],
    date_from: str | None = None,
    date_to: str | None = None,
) -> Dict:
    """
    Returns:
      {
        'revenue': float,        sum of final amounts
        'cogs': float,           sum of buy cost per piece * pieces
        'gross_profit': float,
        'expenses': float,
        'net_profit': float,
      }
    """
    picked = [s for s in sales if _in_range(s.timestamp, date_from, date_to)]
    revenue = sum(s.final_amount for s in picked)
    cogs = sum(sale_cost(s) for s in picked)
    spent = sum(e.amount for e in expenses if _in_range(e.timestamp, date_from, date_to))
    gross = revenue - cogs
    return {
        "revenue": revenue,
        "cogs": cogs,
        "gross_profit": gross,
        "expenses": spent,
        "net_profit": gross - spent,
    }


def customer_dues(sales: Iterable[Sale]) -> List[Dict]:
    """
    Balances per customer, keyed by (name, phone). Positive due is owed to
    the shop, negative is advance held for the customer. Largest due first.
    """
    acc: Dict[tuple, Dict] = {}
    for s in sales:
        key = (s.customer_name, s.customer_phone)
        row = acc.setdefault(key, {
            "customer_name": s.customer_name,
            "customer_phone": s.customer_phone,
            "customer_address": s.customer_address,
            "total": 0.0,
            "paid": 0.0,
            "due": 0.0,
            "sales": 0,
        })
        row["total"] += s.final_amount
        row["paid"] += s.paid_amount
        row["due"] += s.due_amount
        row["sales"] += 1
        if s.customer_address and not row["customer_address"]:
            row["customer_address"] = s.customer_address
    return sorted(acc.values(), key=lambda r: r["due"], reverse=True)


def is_ledger_entry(sale: Sale) -> bool:
    """
    Sales worth showing on the due/credit ledger: an open balance (either
    way), an undelivered order, or one settled through later payments.
    """
    if abs(sale.due_amount) > LEDGER_DUE_TOLERANCE:
        return True
    if sale.delivery_status == DELIVERY_PENDING:
        return True
    paid_at_counter = sum(p.amount for p in sale.payment_history if p.note == "Initial")
    return sale.final_amount - paid_at_counter > LEDGER_CREDIT_HISTORY_TOLERANCE


def ledger_sales(sales: Iterable[Sale], query: str = "") -> List[Sale]:
    q = (query or "").strip().lower()
    return [
        s for s in sales
        if is_ledger_entry(s)
        and (not q or q in s.customer_name.lower() or q in s.customer_phone or q in s.invoice_id.lower())
    ]


class ShopReports:
    """Report entry points over a DocumentStore."""

    def __init__(self, store: DocumentStore) -> None:
        self.inventory = InventoryRepo(store)
        self.sales = SalesRepo(store)
        self.expenses = ExpensesRepo(store)

    def stock_valuation(self) -> Dict:
        return stock_valuation(self.inventory.list_groups())

    def profit_and_loss(self, date_from: str | None = None, date_to: str | None = None) -> Dict:
        return profit_and_loss(self.sales.list_sales(), self.expenses.list_expenses(), date_from, date_to)

    def customer_dues(self) -> List[Dict]:
        return customer_dues(self.sales.list_sales())

    def ledger(self, query: str = "") -> List[Sale]:
        return ledger_sales(self.sales.list_sales(), query)
