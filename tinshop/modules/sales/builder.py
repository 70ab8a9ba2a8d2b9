# tinshop/modules/sales/builder.py
"""
Sale transactions: checkout, full edit, delete, payments and the small
record updates done from the sales history and customer ledger screens.

Every function returns new Sale objects and leaves its inputs alone. Stock
effects go through a StockLedger the caller passes in; the caller persists
`ledger.groups` together with the sales document.

Totals always satisfy

    final_amount = sub_total - discount
    due_amount   = final_amount - paid_amount

A negative due is customer credit.
"""

from __future__ import annotations

import copy
import logging
from typing import List, Optional, Sequence

from ...constants import (
    DELIVERY_DELIVERED,
    DELIVERY_PENDING,
    DELIVERY_STATUSES,
    MIN_PHONE_DIGITS,
    OPENING_DUE_INVOICE_ID,
)
from ...database.repositories.sales_repo import CartItem, PaymentEntry, Sale
from ...utils.errors import StockIntegrityWarning, ValidationFailure
from ...utils.helpers import new_id, now_str
from ...utils.validators import (
    is_non_negative_number,
    is_strictly_positive_number,
    is_valid_phone,
    non_empty,
)
from ..inventory.ledger import StockLedger
from .cart import build_manual_item, cart_total

_log = logging.getLogger(__name__)


def settle(sale: Sale) -> Sale:
    """Recompute final and due from sub_total, discount and paid (in place)."""
    sale.final_amount = sale.sub_total - sale.discount
    sale.due_amount = sale.final_amount - sale.paid_amount
    return sale


def _check_money(discount: float, paid_amount: float) -> None:
    if not is_non_negative_number(discount):
        raise ValidationFailure("Discount cannot be negative.")
    if not is_non_negative_number(paid_amount):
        raise ValidationFailure("Paid amount cannot be negative.")


def _raise_on_shortage(ledger: StockLedger, confirmed: bool) -> None:
    shortages = ledger.shortages()
    if shortages and not confirmed:
        raise StockIntegrityWarning(shortages)
    for s in shortages:
        _log.warning("Confirmed sale leaves %s at %d pcs", s["name"], s["stock_after"])


# ---------------------------- checkout ----------------------------

def checkout(
    ledger: StockLedger,
    cart: Sequence[CartItem],
    *,
    invoice_id: str,
    customer_name: str,
    customer_phone: str = "",
    customer_address: str | None = None,
    discount: float = 0.0,
    paid_amount: float = 0.0,
    delivery_status: str = DELIVERY_DELIVERED,
    note: str | None = None,
    sold_by: str = "",
    confirmed: bool = False,
) -> Sale:
    """
    Turn a cart into a Sale and deduct its stock.

    Raises ValidationFailure for an empty cart, a missing customer name, a
    negative discount or payment, or a due balance without a usable phone
    number. Raises StockIntegrityWarning when a line would push a variant
    below zero, unless `confirmed`; the ledger is left as it was.
    """
    if not cart:
        raise ValidationFailure("Cart is empty.")
    if not non_empty(customer_name):
        raise ValidationFailure("Customer name is required.")
    _check_money(discount, paid_amount)
    if delivery_status not in DELIVERY_STATUSES:
        raise ValidationFailure(f"Unknown delivery status: {delivery_status}")

    items = copy.deepcopy(list(cart))
    sub_total = cart_total(items)
    discount = float(discount)
    paid = float(paid_amount)
    due = (sub_total - discount) - paid
    if due > 0 and not is_valid_phone(customer_phone, MIN_PHONE_DIGITS):
        raise ValidationFailure(
            f"A phone number with at least {MIN_PHONE_DIGITS} digits is required for a sale with due."
        )

    with ledger.atomic():
        ledger.release_items(items)
        _raise_on_shortage(ledger, confirmed)

    timestamp = now_str()
    history = [PaymentEntry(amount=paid, date=timestamp, note="Initial", received_by=sold_by or None)] if paid > 0 else []
    sale = settle(Sale(
        id=new_id(),
        invoice_id=str(invoice_id),
        customer_name=customer_name.strip(),
        customer_phone=(customer_phone or "").strip() or "N/A",
        customer_address=(customer_address or "").strip() or None,
        items=items,
        sub_total=sub_total,
        discount=discount,
        final_amount=0.0,
        paid_amount=paid,
        due_amount=0.0,
        timestamp=timestamp,
        payment_history=history,
        delivery_status=delivery_status,
        sold_by=sold_by,
        note=(note or "").strip() or None,
    ))
    _log.info(
        "Checkout #%s for %s: total %.2f paid %.2f due %.2f",
        sale.invoice_id, sale.customer_name, sale.final_amount, sale.paid_amount, sale.due_amount,
    )
    return sale


# ---------------------------- edit / delete ----------------------------

def edit_sale(
    ledger: StockLedger,
    original: Sale,
    items: Sequence[CartItem],
    *,
    discount: float,
    paid_amount: float,
    received_by: str | None = None,
    confirmed: bool = False,
) -> Sale:
    """
    Replace a sale's lines, discount and paid amount.

    All stock of the original lines is put back before the revised lines
    are deducted, so moving quantity between lines of the same variant nets
    out. The note gets " (Edited)" appended.

    The paid amount is overwritten. As an extension to a plain overwrite,
    a changed paid amount also appends its difference to the payment
    history as an "Edit adjustment" entry. No total is derived from these
    entries.
    """
    if not items:
        raise ValidationFailure("A sale needs at least one item; delete the sale instead.")
    _check_money(discount, paid_amount)

    revised = copy.deepcopy(list(items))
    with ledger.atomic():
        ledger.restore_items(original.items)
        ledger.release_items(revised)
        _raise_on_shortage(ledger, confirmed)

    sale = copy.deepcopy(original)
    sale.items = revised
    sale.sub_total = cart_total(revised)
    sale.discount = float(discount)

    paid = float(paid_amount)
    if paid != original.paid_amount:
        sale.payment_history.append(PaymentEntry(
            amount=paid - original.paid_amount,
            date=now_str(),
            note="Edit adjustment",
            received_by=received_by,
        ))
    sale.paid_amount = paid
    sale.note = f"{original.note or ''} (Edited)".strip()
    settle(sale)

    _log.info("Edited sale #%s: total %.2f due %.2f", sale.invoice_id, sale.final_amount, sale.due_amount)
    return sale


def delete_sale(ledger: StockLedger, sale: Sale) -> None:
    """Put back the stock of every inventory line. The caller drops the record."""
    ledger.restore_items(sale.items)
    _log.info("Deleted sale #%s (%s)", sale.invoice_id, sale.customer_name)


# ---------------------------- payments ----------------------------

def add_payment(
    sale: Sale,
    amount: float,
    *,
    note: str = "Collection",
    received_by: str | None = None,
) -> Sale:
    """Record money received against a sale; overpaying leaves a credit."""
    if not is_strictly_positive_number(amount):
        raise ValidationFailure("Payment amount must be greater than zero.")
    new = copy.deepcopy(sale)
    new.paid_amount = sale.paid_amount + float(amount)
    new.payment_history.append(
        PaymentEntry(amount=float(amount), date=now_str(), note=note, received_by=received_by)
    )
    settle(new)
    _log.info("Payment %.2f on #%s, due now %.2f", float(amount), new.invoice_id, new.due_amount)
    return new


def opening_due_sale(
    *,
    customer_name: str,
    customer_phone: str,
    amount: float,
    customer_address: str | None = None,
    note: str | None = None,
    sold_by: str = "",
) -> Sale:
    """
    A sale carrying a customer's balance from before the system was used:
    one manual line, nothing paid, invoice "OLD".
    """
    if not non_empty(customer_name):
        raise ValidationFailure("Customer name is required.")
    if not is_strictly_positive_number(amount):
        raise ValidationFailure("Due amount must be greater than zero.")

    line = build_manual_item("Previous Due", quantity=1, rate=amount)
    line.subtotal = float(amount)
    return settle(Sale(
        id=new_id(),
        invoice_id=OPENING_DUE_INVOICE_ID,
        customer_name=customer_name.strip(),
        customer_phone=(customer_phone or "").strip() or "N/A",
        customer_address=(customer_address or "").strip() or None,
        items=[line],
        sub_total=float(amount),
        discount=0.0,
        final_amount=0.0,
        paid_amount=0.0,
        due_amount=0.0,
        timestamp=now_str(),
        payment_history=[],
        delivery_status=DELIVERY_DELIVERED,
        sold_by=sold_by,
        note=(note or "").strip() or "Opening balance",
    ))


# ---------------------------- record updates ----------------------------

def update_customer_details(
    sale: Sale,
    *,
    customer_name: str,
    customer_phone: str,
    customer_address: str | None = None,
    note: str | None = None,
) -> Sale:
    if not non_empty(customer_name):
        raise ValidationFailure("Customer name is required.")
    new = copy.deepcopy(sale)
    new.customer_name = customer_name.strip()
    new.customer_phone = (customer_phone or "").strip() or "N/A"
    new.customer_address = (customer_address or "").strip() or None
    if note is not None:
        new.note = note.strip() or None
    return new


def toggle_delivery(sale: Sale) -> Sale:
    new = copy.deepcopy(sale)
    new.delivery_status = (
        DELIVERY_DELIVERED if sale.delivery_status == DELIVERY_PENDING else DELIVERY_PENDING
    )
    return new


def rename_customer(
    sales: Sequence[Sale],
    *,
    old_name: str,
    old_phone: str,
    new_name: str,
    new_phone: str,
    new_address: Optional[str] = None,
) -> List[Sale]:
    """
    Apply new contact details to every sale of the customer identified by
    (old_name, old_phone). Other sales are returned unchanged.
    """
    if not non_empty(new_name):
        raise ValidationFailure("Customer name is required.")
    out = []
    changed = 0
    for s in sales:
        if s.customer_name == old_name and s.customer_phone == old_phone:
            s = update_customer_details(
                s, customer_name=new_name, customer_phone=new_phone,
                customer_address=new_address if new_address is not None else s.customer_address,
            )
            changed += 1
        out.append(s)
    _log.info("Renamed customer %r -> %r on %d sale(s)", old_name, new_name, changed)
    return out
