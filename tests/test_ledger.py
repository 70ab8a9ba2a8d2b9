"""
StockLedger: stock in (with average cost), stock out, stock reverse,
shortage detection and referential gaps.
"""

from __future__ import annotations

import logging

import pytest

from tinshop.constants import MODE_FIXED_PIECE, MODE_RUNNING_FOOT, UNIT_BUNDLE, UNIT_PIECE
from tinshop.modules.inventory.ledger import StockLedger, suggested_buy_rate
from tinshop.utils.errors import ValidationFailure, ZeroCostWarning


def test_stock_in_creates_variant_and_logs(make_group):
    group = make_group()
    ledger = StockLedger([group])

    res = ledger.stock_in("g1", length_feet=6, quantity=10, unit=UNIT_BUNDLE, rate=4200, calculation_base=72)

    assert res.pieces_added == 120
    assert res.incoming_total_cost == 42000
    assert res.variant.stock_pieces == 120
    assert res.variant.average_cost == 350.0
    assert res.variant.calculation_base == 72.0
    assert res.log.product_name == "PHP 0.32mm Red (6')"
    assert res.log.quantity_added == 120
    assert res.log.cost_price == 4200
    assert res.log.new_stock_level == 120
    assert res.log.note == "Manual Entry"
    assert ledger.stock_logs == [res.log]
    # caller's objects are untouched
    assert group.variants == []


def test_second_stock_in_in_pieces_reweights_average(make_group):
    ledger = StockLedger([make_group()])
    ledger.stock_in("g1", length_feet=6, quantity=10, unit=UNIT_BUNDLE, rate=4200)
    res = ledger.stock_in("g1", length_feet=6, quantity=60, unit=UNIT_PIECE, rate=2100)

    assert res.incoming_total_cost == 10500
    assert res.variant.stock_pieces == 180
    assert res.variant.average_cost == pytest.approx(291.67, abs=0.01)
    assert len(ledger.find_group("g1").variants) == 1


def test_variants_stay_sorted_by_length(make_group):
    ledger = StockLedger([make_group()])
    for length in (10, 6, 8):
        ledger.stock_in("g1", length_feet=length, quantity=1, unit=UNIT_BUNDLE, rate=3000)
    assert [v.length_feet for v in ledger.find_group("g1").variants] == [6.0, 8.0, 10.0]


def test_stock_in_running_foot_and_fixed_piece(make_group):
    ledger = StockLedger([
        make_group(MODE_RUNNING_FOOT, group_id="rf"),
        make_group(MODE_FIXED_PIECE, group_id="fx"),
    ])
    rf = ledger.stock_in("rf", length_feet=10, quantity=24, unit=UNIT_PIECE, rate=50)
    assert rf.pieces_added == 24
    assert rf.variant.average_cost == 500.0  # 10 ft * 50
    assert rf.variant.calculation_base is None

    fx = ledger.stock_in("fx", length_feet=1, quantity=5, unit=UNIT_PIECE, rate=120)
    assert fx.variant.average_cost == 120.0


def test_stock_in_onto_negative_stock_uses_incoming_cost(make_group):
    ledger = StockLedger([make_group(variants=[(6, -12, 300.0)])])
    res = ledger.stock_in("g1", length_feet=6, quantity=2, unit=UNIT_BUNDLE, rate=3600)
    assert res.variant.stock_pieces == 12
    assert res.variant.average_cost == 300.0  # 7200 / 24


def test_zero_rate_needs_confirmation(make_group):
    ledger = StockLedger([make_group()])
    with pytest.raises(ZeroCostWarning):
        ledger.stock_in("g1", length_feet=6, quantity=1, unit=UNIT_BUNDLE, rate=0)
    assert ledger.find_group("g1").variants == []
    assert ledger.stock_logs == []

    res = ledger.stock_in("g1", length_feet=6, quantity=1, unit=UNIT_BUNDLE, rate=0, confirmed=True)
    assert res.variant.stock_pieces == 12
    assert res.variant.average_cost == 0.0


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(length_feet=6, quantity=0, unit=UNIT_BUNDLE, rate=100),
        dict(length_feet=6, quantity=-1, unit=UNIT_BUNDLE, rate=100),
        dict(length_feet=0, quantity=1, unit=UNIT_BUNDLE, rate=100),
        dict(length_feet=6, quantity=1, unit=UNIT_BUNDLE, rate=-5),
        dict(length_feet=6, quantity=2.5, unit=UNIT_PIECE, rate=100),
    ],
)
def test_stock_in_validation(make_group, kwargs):
    ledger = StockLedger([make_group()])
    with pytest.raises(ValidationFailure):
        ledger.stock_in("g1", **kwargs)
    assert ledger.find_group("g1").variants == []


def test_stock_in_unknown_group():
    with pytest.raises(ValidationFailure):
        StockLedger([]).stock_in("nope", length_feet=6, quantity=1, unit=UNIT_BUNDLE, rate=100)


def test_stock_out_and_reverse_leave_average_cost_alone(tin_group):
    ledger = StockLedger([tin_group])
    out = ledger.stock_out("g1", "g1-v1", 30)
    assert out.stock_after == 150
    back = ledger.stock_reverse("g1", "g1-v1", 10)
    assert back.stock_after == 160
    assert ledger.find_variant("g1", "g1-v1").average_cost == 350.0


def test_stock_out_can_go_negative_and_is_reported(tin_group):
    ledger = StockLedger([tin_group])
    ledger.stock_out("g1", "g1-v1", 200, "Tin 6'")
    variant = ledger.find_variant("g1", "g1-v1")
    assert variant.stock_pieces == -20
    assert variant.is_negative
    assert ledger.shortages() == [{
        "group_id": "g1",
        "variant_id": "g1-v1",
        "name": "PHP 0.32mm Red (6')",
        "stock_after": -20,
    }]
    assert len(ledger.negative_variants()) == 1


def test_shortages_ignore_variants_not_deducted(make_group):
    ledger = StockLedger([make_group(variants=[(6, -5, 300.0), (8, 100, 400.0)])])
    ledger.stock_out("g1", "g1-v2", 10)
    assert ledger.shortages() == []
    assert [r["variant_id"] for r in ledger.negative_variants()] == ["g1-v1"]


def test_missing_variant_is_recorded_not_raised(tin_group, caplog):
    ledger = StockLedger([tin_group])
    with caplog.at_level(logging.WARNING):
        assert ledger.stock_reverse("g1", "gone", 5, "Old item") is None
        assert ledger.stock_out("deleted-group", "v", 5, "Other") is None

    assert [(m.reason, m.pieces) for m in ledger.missing] == [
        ("variant not found", 5),
        ("group not found", 5),
    ]
    assert "Old item" in caplog.text
    assert ledger.find_variant("g1", "g1-v1").stock_pieces == 180


def test_atomic_restores_working_copy_on_error(tin_group):
    ledger = StockLedger([tin_group])
    with pytest.raises(RuntimeError):
        with ledger.atomic():
            ledger.stock_out("g1", "g1-v1", 50)
            raise RuntimeError("abort")
    assert ledger.find_variant("g1", "g1-v1").stock_pieces == 180
    assert ledger.movements == []


def test_suggested_buy_rate_in_quoted_unit(make_group):
    tin = make_group(variants=[(6, 120, 350.0)])
    assert suggested_buy_rate(tin, tin.variants[0]) == 4200

    rf = make_group(MODE_RUNNING_FOOT, variants=[(10, 24, 500.0)])
    assert suggested_buy_rate(rf, rf.variants[0]) == 50

    fx = make_group(MODE_FIXED_PIECE, variants=[(1, 5, 119.6)])
    assert suggested_buy_rate(fx, fx.variants[0]) == 120

    assert suggested_buy_rate(tin, None) == 0
