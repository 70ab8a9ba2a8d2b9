# tinshop/modules/sales/controller.py
from __future__ import annotations

import logging
import sqlite3
from typing import List, Sequence

from PySide6.QtCore import Signal

from ..base_module import BaseModule
from ..inventory.ledger import StockLedger
from ...constants import DELIVERY_DELIVERED
from ...database.repositories.inventory_repo import InventoryRepo
from ...database.repositories.sales_repo import CartItem, Sale, SalesRepo
from ...database.repositories.settings_repo import SettingsRepo
from ...utils.errors import ValidationFailure
from . import builder, returns
from .cart import build_inventory_item, build_manual_item
from .invoice import render_invoice_html

_log = logging.getLogger(__name__)


class SalesController(BaseModule):
    """
    Checkout, sales history and customer ledger actions.

    Each action reads the sales and inventory documents, computes the new
    state with the builder/returns functions and writes both back in a
    single store transaction. A raised error (including a confirmation
    request) leaves both documents as they were.
    """

    sales_changed = Signal()
    stock_changed = Signal()

    def __init__(self, conn: sqlite3.Connection, current_user: dict | None = None):
        super().__init__(conn, current_user)
        self.repo = SalesRepo(self.store)
        self.inventory = InventoryRepo(self.store)
        self.settings = SettingsRepo(self.store)

    # ---------------------------- helpers ----------------------------

    def _require(self, sales: List[Sale], sale_id: str) -> Sale:
        sale = next((s for s in sales if s.id == sale_id), None)
        if sale is None:
            raise ValidationFailure("Sale not found.")
        return sale

    def _save(self, sales: List[Sale], ledger: StockLedger | None = None) -> None:
        self.repo.save_sales(sales)
        if ledger is not None:
            self.inventory.save_groups(ledger.groups)

    def _notify(self, stock: bool) -> None:
        self.sales_changed.emit()
        if stock:
            self.stock_changed.emit()

    # ---------------------------- cart ----------------------------

    def cart_line(self, group_id: str, variant_id: str, *, quantity: float, rate: float, unit: str) -> CartItem:
        group = self.inventory.get_group(group_id)
        variant = group.variant_by_id(variant_id) if group else None
        if variant is None:
            raise ValidationFailure("Product not found.")
        return build_inventory_item(group, variant, quantity=quantity, rate=rate, unit=unit)

    def manual_line(self, name: str, *, quantity: float, rate: float) -> CartItem:
        return build_manual_item(name, quantity=quantity, rate=rate)

    # ---------------------------- checkout ----------------------------

    def checkout(
        self,
        cart: Sequence[CartItem],
        *,
        customer_name: str,
        customer_phone: str = "",
        customer_address: str | None = None,
        discount: float = 0.0,
        paid_amount: float = 0.0,
        delivery_status: str = DELIVERY_DELIVERED,
        note: str | None = None,
        confirmed: bool = False,
    ) -> Sale:
        with self.store.transaction():
            ledger = StockLedger(self.inventory.list_groups())
            sale = builder.checkout(
                ledger,
                cart,
                invoice_id=self.settings.reserve_invoice_id(),
                customer_name=customer_name,
                customer_phone=customer_phone,
                customer_address=customer_address,
                discount=discount,
                paid_amount=paid_amount,
                delivery_status=delivery_status,
                note=note,
                sold_by=self.user_name,
                confirmed=confirmed,
            )
            self._save(SalesRepo.with_added(self.repo.list_sales(), sale), ledger)
            self._audit("Sale", f"Invoice #{sale.invoice_id} to {sale.customer_name}: {sale.final_amount:.2f}")
        self._notify(stock=True)
        return sale

    # ---------------------------- history ----------------------------

    def edit_sale(
        self,
        sale_id: str,
        items: Sequence[CartItem],
        *,
        discount: float,
        paid_amount: float,
        confirmed: bool = False,
    ) -> Sale:
        with self.store.transaction():
            sales = self.repo.list_sales()
            original = self._require(sales, sale_id)
            ledger = StockLedger(self.inventory.list_groups())
            sale = builder.edit_sale(
                ledger,
                original,
                items,
                discount=discount,
                paid_amount=paid_amount,
                received_by=self.user_name or None,
                confirmed=confirmed,
            )
            self._save(SalesRepo.with_replaced(sales, sale), ledger)
            self._audit("Edit Sale", f"Invoice #{sale.invoice_id}")
        self._notify(stock=True)
        return sale

    def delete_sale(self, sale_id: str) -> None:
        with self.store.transaction():
            sales = self.repo.list_sales()
            sale = self._require(sales, sale_id)
            ledger = StockLedger(self.inventory.list_groups())
            builder.delete_sale(ledger, sale)
            self._save(SalesRepo.without(sales, sale_id), ledger)
            self._audit("Delete Sale", f"Invoice #{sale.invoice_id} ({sale.customer_name})")
        self._notify(stock=True)

    def add_payment(self, sale_id: str, amount: float, note: str = "Collection") -> Sale:
        with self.store.transaction():
            sales = self.repo.list_sales()
            sale = builder.add_payment(
                self._require(sales, sale_id), amount, note=note, received_by=self.user_name or None
            )
            self._save(SalesRepo.with_replaced(sales, sale))
            self._audit("Payment", f"Invoice #{sale.invoice_id}: {float(amount):.2f}")
        self._notify(stock=False)
        return sale

    def return_item(self, sale_id: str, item_index: int, quantity: int) -> returns.ReturnOutcome:
        """Goods back against the customer's due."""
        with self.store.transaction():
            sales = self.repo.list_sales()
            ledger = StockLedger(self.inventory.list_groups())
            outcome = returns.return_item(ledger, self._require(sales, sale_id), item_index, quantity)
            self._save(SalesRepo.with_replaced(sales, outcome.sale), ledger)
            self._audit("Return", f"Invoice #{outcome.sale.invoice_id}: {outcome.returned_pieces} pcs")
        self._notify(stock=True)
        return outcome

    def return_item_with_refund(
        self, sale_id: str, item_index: int, quantity: int, cash_refund: float
    ) -> returns.ReturnOutcome:
        """Goods back and cash handed to the customer."""
        with self.store.transaction():
            sales = self.repo.list_sales()
            ledger = StockLedger(self.inventory.list_groups())
            outcome = returns.return_item_with_refund(
                ledger,
                self._require(sales, sale_id),
                item_index,
                quantity,
                cash_refund,
                received_by=self.user_name or None,
            )
            self._save(SalesRepo.with_replaced(sales, outcome.sale), ledger)
            self._audit(
                "Return",
                f"Invoice #{outcome.sale.invoice_id}: {outcome.returned_pieces} pcs, refunded {outcome.cash_refund:.2f}",
            )
        self._notify(stock=True)
        return outcome

    # ---------------------------- customer ledger ----------------------------

    def record_opening_due(
        self,
        *,
        customer_name: str,
        customer_phone: str,
        amount: float,
        customer_address: str | None = None,
        note: str | None = None,
    ) -> Sale:
        sale = builder.opening_due_sale(
            customer_name=customer_name,
            customer_phone=customer_phone,
            amount=amount,
            customer_address=customer_address,
            note=note,
            sold_by=self.user_name,
        )
        with self.store.transaction():
            self._save(SalesRepo.with_added(self.repo.list_sales(), sale))
            self._audit("Opening Due", f"{sale.customer_name}: {sale.due_amount:.2f}")
        self._notify(stock=False)
        return sale

    def update_customer_details(
        self,
        sale_id: str,
        *,
        customer_name: str,
        customer_phone: str,
        customer_address: str | None = None,
        note: str | None = None,
    ) -> Sale:
        with self.store.transaction():
            sales = self.repo.list_sales()
            sale = builder.update_customer_details(
                self._require(sales, sale_id),
                customer_name=customer_name,
                customer_phone=customer_phone,
                customer_address=customer_address,
                note=note,
            )
            self._save(SalesRepo.with_replaced(sales, sale))
        self._notify(stock=False)
        return sale

    def toggle_delivery(self, sale_id: str) -> Sale:
        with self.store.transaction():
            sales = self.repo.list_sales()
            sale = builder.toggle_delivery(self._require(sales, sale_id))
            self._save(SalesRepo.with_replaced(sales, sale))
        self._notify(stock=False)
        return sale

    def rename_customer(
        self,
        *,
        old_name: str,
        old_phone: str,
        new_name: str,
        new_phone: str,
        new_address: str | None = None,
    ) -> List[Sale]:
        with self.store.transaction():
            sales = builder.rename_customer(
                self.repo.list_sales(),
                old_name=old_name,
                old_phone=old_phone,
                new_name=new_name,
                new_phone=new_phone,
                new_address=new_address,
            )
            self._save(sales)
            self._audit("Update Customer", f"{old_name} -> {new_name}")
        self._notify(stock=False)
        return sales

    # ---------------------------- printing ----------------------------

    def invoice_html(self, sale_id: str) -> str:
        return render_invoice_html(self._require(self.repo.list_sales(), sale_id))
