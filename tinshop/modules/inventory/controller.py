# tinshop/modules/inventory/controller.py
from __future__ import annotations

import logging
import sqlite3
from typing import Dict, List

from PySide6.QtCore import Signal

from ..base_module import BaseModule
from ...database.repositories.inventory_repo import InventoryRepo, ProductGroup, StockLog
from ...utils.errors import ValidationFailure
from ...utils.helpers import fmt_qty
from .conversion import bundle_display
from .ledger import StockInResult, StockLedger, suggested_buy_rate, variant_label

_log = logging.getLogger(__name__)


class InventoryController(BaseModule):
    """
    Product groups, stock receipts and the stock overview.

    Every change loads the inventory document, applies it on a StockLedger
    and saves the result in one store transaction.
    """

    # emitted after any write to the inventory document
    stock_changed = Signal()

    def __init__(self, conn: sqlite3.Connection, current_user: dict | None = None):
        super().__init__(conn, current_user)
        self.repo = InventoryRepo(self.store)

    # ---------------------------- groups ----------------------------

    def create_group(self, **fields) -> ProductGroup:
        with self.store.transaction():
            group = self.repo.create_group(**fields)
            self._audit("Create Product", f"{group.product_type} {group.display_name}")
        _log.info("Created product group %s (%s)", group.display_name, group.calculation_mode)
        self.stock_changed.emit()
        return group

    def delete_group(self, group_id: str) -> bool:
        group = self.repo.get_group(group_id)
        if group is None:
            return False
        with self.store.transaction():
            self.repo.delete_group(group_id)
            self._audit("Delete Product", group.display_name)
        _log.info("Deleted product group %s", group.display_name)
        self.stock_changed.emit()
        return True

    def remove_variant(self, group_id: str, variant_id: str) -> bool:
        with self.store.transaction():
            removed = self.repo.remove_variant(group_id, variant_id)
            if removed:
                self._audit("Remove Variant", f"{group_id}/{variant_id}")
        if removed:
            self.stock_changed.emit()
        return removed

    def search(self, term: str) -> List[ProductGroup]:
        return self.repo.search_groups(term)

    # ---------------------------- stock in ----------------------------

    def stock_in(
        self,
        group_id: str,
        *,
        length_feet: float,
        quantity: float,
        unit: str,
        rate: float,
        calculation_base: float | None = None,
        note: str = "Manual Entry",
        confirmed: bool = False,
    ) -> StockInResult:
        """Receive goods; see StockLedger.stock_in for the rules."""
        with self.store.transaction():
            ledger = StockLedger(self.repo.list_groups())
            result = ledger.stock_in(
                group_id,
                length_feet=length_feet,
                quantity=quantity,
                unit=unit,
                rate=rate,
                calculation_base=calculation_base,
                note=note,
                confirmed=confirmed,
            )
            self.repo.save_groups(ledger.groups)
            self.repo.save_stock_logs(ledger.stock_logs + self.repo.list_stock_logs())
            self._audit(
                "Stock In",
                f"{result.log.product_name}: +{result.pieces_added} pcs for {result.incoming_total_cost:.2f}",
            )
        self.stock_changed.emit()
        return result

    def suggested_rate(self, group_id: str, length_feet: float) -> int:
        group = self.repo.get_group(group_id)
        if group is None:
            raise ValidationFailure("Product group not found.")
        return suggested_buy_rate(group, group.variant_by_length(length_feet))

    def stock_logs(self, limit: int | None = None) -> List[StockLog]:
        return self.repo.list_stock_logs(limit)

    # ---------------------------- overview ----------------------------

    def stock_rows(self, term: str = "") -> List[Dict]:
        """One row per variant for the stock table, ordered as stored."""
        rows = []
        for g in self.repo.search_groups(term):
            for v in g.variants:
                rows.append({
                    "group_id": g.id,
                    "variant_id": v.id,
                    "product_type": g.product_type,
                    "name": variant_label(g, v),
                    "length": fmt_qty(v.length_feet),
                    "calculation_mode": g.calculation_mode,
                    "stock_pieces": v.stock_pieces,
                    "bundles": bundle_display(g.calculation_mode, v.stock_pieces, v.length_feet, v.calculation_base),
                    "average_cost": v.average_cost,
                    "stock_value": max(v.stock_pieces, 0) * v.average_cost,
                    "is_negative": v.is_negative,
                })
        return rows
