# tinshop/modules/sales/returns.py
"""
Returning goods from a recorded sale.

Two settlement policies, chosen by the operator:

  return_item            goods come back against the customer's balance.
                         The line's value drops by the proportional refund,
                         so the due goes down; paid_amount is untouched.
  return_item_with_refund
                         goods come back and cash goes out. The line's value
                         drops the same way, paid_amount drops by the cash
                         handed over and a negative payment entry is logged.

Both put the returned pieces back into stock (manual lines have none).
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Optional

from ...database.repositories.sales_repo import PaymentEntry, Sale
from ...utils.errors import ValidationFailure
from ...utils.helpers import now_str, round_half_up
from ...utils.validators import is_strictly_positive_number, is_whole_number
from ..inventory.ledger import StockLedger, StockMovement
from .builder import settle
from .cart import cart_total

_log = logging.getLogger(__name__)


@dataclass
class ReturnOutcome:
    sale: Sale
    line_refund: float
    cash_refund: float
    returned_pieces: int
    movement: Optional[StockMovement]


def proportional_refund(subtotal: float, quantity_pieces: int, return_qty: int) -> int:
    """round(subtotal / quantity * return_qty), halves up."""
    return round_half_up(subtotal / quantity_pieces * return_qty)


def _take_back(ledger: StockLedger, sale: Sale, item_index: int, return_qty) -> tuple[Sale, float, int, Optional[StockMovement]]:
    if not 0 <= item_index < len(sale.items):
        raise ValidationFailure("Sale line not found.")
    if not is_strictly_positive_number(return_qty) or not is_whole_number(return_qty):
        raise ValidationFailure("Return quantity must be a whole number greater than zero.")

    qty = int(float(return_qty))
    item = sale.items[item_index]
    if qty > item.quantity_pieces:
        raise ValidationFailure(
            f"Cannot return {qty} pcs of {item.name}; only {item.quantity_pieces} were sold."
        )

    new = copy.deepcopy(sale)
    line = new.items[item_index]
    if qty == line.quantity_pieces:
        refund = line.subtotal
        del new.items[item_index]
    else:
        refund = float(proportional_refund(line.subtotal, line.quantity_pieces, qty))
        line.quantity_pieces -= qty
        line.subtotal -= refund
        line.formatted_qty = f"{line.quantity_pieces} pcs (Returned {qty})"

    movement = None
    if not item.is_manual:
        movement = ledger.stock_reverse(item.group_id, item.variant_id, qty, item.name)

    new.sub_total = cart_total(new.items)
    new.note = f"{sale.note or ''} | Returned {qty} of {item.name}".lstrip(" |")
    return new, refund, qty, movement


def return_item(ledger: StockLedger, sale: Sale, item_index: int, return_qty: int) -> ReturnOutcome:
    """Return pieces of one line against the customer's balance."""
    new, refund, qty, movement = _take_back(ledger, sale, item_index, return_qty)
    settle(new)
    _log.info(
        "Return on #%s: %d pcs, line value -%.2f, due now %.2f",
        new.invoice_id, qty, refund, new.due_amount,
    )
    return ReturnOutcome(new, refund, 0.0, qty, movement)


def return_item_with_refund(
    ledger: StockLedger,
    sale: Sale,
    item_index: int,
    return_qty: int,
    cash_refund: float,
    *,
    received_by: str | None = None,
) -> ReturnOutcome:
    """Return pieces of one line and hand `cash_refund` back to the customer."""
    if not is_strictly_positive_number(cash_refund):
        raise ValidationFailure("Refund amount must be greater than zero.")

    new, refund, qty, movement = _take_back(ledger, sale, item_index, return_qty)
    cash = float(cash_refund)
    name = sale.items[item_index].name
    new.paid_amount = sale.paid_amount - cash
    new.payment_history.append(PaymentEntry(
        amount=-cash,
        date=now_str(),
        note=f"Returned {qty}x {name}",
        received_by=received_by,
    ))
    settle(new)
    _log.info(
        "Return with refund on #%s: %d pcs, cash out %.2f, due now %.2f",
        new.invoice_id, qty, cash, new.due_amount,
    )
    return ReturnOutcome(new, refund, cash, qty, movement)
