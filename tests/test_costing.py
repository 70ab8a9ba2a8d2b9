from __future__ import annotations

import pytest

from tinshop.constants import UNIT_BUNDLE, UNIT_PIECE
from tinshop.modules.inventory.costing import cost_per_piece, weighted_average_cost
from tinshop.modules.inventory.ledger import StockLedger
from tinshop.utils.errors import ValidationFailure


def test_first_receipt_sets_cost_per_piece():
    # 10 bundles of 6 ft (120 pcs) at 4200 per bundle
    assert weighted_average_cost(0, 0.0, 120, 42000) == 350.0


def test_second_receipt_blends_with_stock_on_hand():
    # 60 pcs at 2100 per bundle = 5 bundles = 10500
    avg = weighted_average_cost(120, 350.0, 60, 10500)
    assert avg == pytest.approx(291.67, abs=0.01)
    assert avg == pytest.approx(52500 / 180)


def test_equal_cost_receipt_keeps_average():
    assert weighted_average_cost(120, 350.0, 60, 21000) == pytest.approx(350.0)


def test_average_stays_between_old_and_incoming_cost():
    old_avg, incoming = 400.0, 100.0
    avg = weighted_average_cost(50, old_avg, 50, incoming * 50)
    assert incoming <= avg <= old_avg


def test_negative_stock_takes_incoming_cost():
    assert weighted_average_cost(-5, 300.0, 10, 2000) == 200.0


def test_zero_cost_receipt_is_allowed_and_drags_average_down():
    assert weighted_average_cost(100, 10.0, 100, 0) == 5.0


@pytest.mark.parametrize("pieces", [0, -3])
def test_incoming_pieces_must_be_positive(pieces):
    with pytest.raises(ValidationFailure):
        weighted_average_cost(10, 5.0, pieces, 100)


def test_negative_purchase_cost_is_rejected():
    with pytest.raises(ValidationFailure):
        weighted_average_cost(10, 5.0, 10, -1)


def test_cost_per_piece():
    assert cost_per_piece(600, 12) == 50.0
    with pytest.raises(ValidationFailure):
        cost_per_piece(600, 0)


# 6 ft tin, 12 pcs per bundle: (quantity, unit, rate per bundle) -> (pieces, total cost)
RECEIPTS = [
    (10, UNIT_BUNDLE, 4200),  # 120 pcs, 42000
    (30, UNIT_PIECE, 2400),   # 30 pcs = 2.5 bundles, 6000
    (2, UNIT_BUNDLE, 3000),   # 24 pcs, 6000
]


@pytest.mark.parametrize("order", [(0, 1, 2), (2, 1, 0), (1, 2, 0)])
def test_average_is_cumulative_cost_over_cumulative_pieces(make_group, order):
    ledger = StockLedger([make_group()])
    pieces = cost = 0
    for i in order:
        qty, unit, rate = RECEIPTS[i]
        res = ledger.stock_in("g1", length_feet=6, quantity=qty, unit=unit, rate=rate)
        pieces += res.pieces_added
        cost += res.incoming_total_cost
        assert res.variant.average_cost == pytest.approx(cost / pieces)

    assert pieces == 174
    assert cost == 54000
    assert ledger.find_group("g1").variants[0].average_cost == pytest.approx(54000 / 174)
