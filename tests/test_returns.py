"""
Returns: due-only settlement and cash-refund settlement.
"""

from __future__ import annotations

import pytest

from tinshop.constants import UNIT_PIECE
from tinshop.modules.inventory.ledger import StockLedger
from tinshop.modules.sales import builder, returns
from tinshop.modules.sales.cart import build_inventory_item, build_manual_item
from tinshop.utils.errors import ValidationFailure


@pytest.fixture()
def sold(tin_group):
    """30 pcs of 6 ft tin at 500 per bundle (1250) sold on credit; 150 pcs left."""
    ledger = StockLedger([tin_group])
    line = build_inventory_item(tin_group, tin_group.variants[0], quantity=30, rate=500, unit=UNIT_PIECE)
    sale = builder.checkout(
        ledger, [line], invoice_id="1001", customer_name="Karim", customer_phone="01712345678",
    )
    return ledger, sale


def _stock(ledger):
    return ledger.find_variant("g1", "g1-v1").stock_pieces


def test_partial_return_reduces_due_not_paid(sold):
    ledger, sale = sold
    assert _stock(ledger) == 150

    out = returns.return_item(ledger, sale, 0, 10)

    assert _stock(ledger) == 160
    assert out.line_refund == 417
    assert out.cash_refund == 0
    assert out.returned_pieces == 10
    assert out.movement.stock_after == 160

    new = out.sale
    assert new.paid_amount == sale.paid_amount == 0
    assert new.sub_total == 833
    assert new.due_amount == 833
    assert new.items[0].quantity_pieces == 20
    assert new.items[0].subtotal == 833
    assert new.items[0].formatted_qty == "20 pcs (Returned 10)"
    assert new.note == "Returned 10 of Tin | PHP | 0.32mm Red | 6'"
    # the original sale object is untouched
    assert sale.items[0].quantity_pieces == 30


def test_full_return_removes_line(sold):
    ledger, sale = sold
    out = returns.return_item(ledger, sale, 0, 30)
    assert out.sale.items == []
    assert out.line_refund == 1250
    assert out.sale.due_amount == 0
    assert _stock(ledger) == 180


def test_return_appends_to_existing_note(sold):
    ledger, sale = sold
    sale.note = "site B"
    out = returns.return_item(ledger, sale, 0, 5)
    assert out.sale.note.startswith("site B | Returned 5 of ")


@pytest.mark.parametrize("qty", [31, 0, -1, 2.5])
def test_invalid_return_quantity_changes_nothing(sold, qty):
    ledger, sale = sold
    with pytest.raises(ValidationFailure):
        returns.return_item(ledger, sale, 0, qty)
    assert _stock(ledger) == 150


def test_unknown_line_index(sold):
    ledger, sale = sold
    with pytest.raises(ValidationFailure):
        returns.return_item(ledger, sale, 3, 1)


def test_cash_refund_reduces_paid_and_logs_negative_payment(tin_group):
    ledger = StockLedger([tin_group])
    line = build_inventory_item(tin_group, tin_group.variants[0], quantity=30, rate=500, unit=UNIT_PIECE)
    sale = builder.checkout(ledger, [line], invoice_id="1002", customer_name="Karim", paid_amount=1250)

    out = returns.return_item_with_refund(ledger, sale, 0, 10, 417)

    new = out.sale
    assert _stock(ledger) == 160
    assert out.cash_refund == 417
    assert new.paid_amount == 833
    assert new.final_amount == 833
    assert new.due_amount == 0
    last = new.payment_history[-1]
    assert last.amount == -417
    assert last.note == "Returned 10x Tin | PHP | 0.32mm Red | 6'"


def test_cash_refund_must_be_positive(sold):
    ledger, sale = sold
    with pytest.raises(ValidationFailure):
        returns.return_item_with_refund(ledger, sale, 0, 5, 0)
    assert _stock(ledger) == 150


def test_return_of_manual_line_has_no_stock_effect(tin_group):
    ledger = StockLedger([tin_group])
    sale = builder.checkout(
        ledger, [build_manual_item("Ridge cap", quantity=4, rate=250)],
        invoice_id="1003", customer_name="Karim", customer_phone="01712345678",
    )
    out = returns.return_item(ledger, sale, 0, 1)
    assert out.movement is None
    assert out.sale.due_amount == 750
    assert _stock(ledger) == 180
