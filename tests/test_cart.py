from __future__ import annotations

import pytest

from tinshop.constants import (
    MANUAL_GROUP_ID,
    MODE_FIXED_PIECE,
    MODE_RUNNING_FOOT,
    UNIT_BUNDLE,
    UNIT_PIECE,
)
from tinshop.modules.sales.cart import (
    build_inventory_item,
    build_manual_item,
    cart_total,
    line_name,
    update_line,
)
from tinshop.utils.errors import ValidationFailure


def test_bundle_line(tin_group):
    item = build_inventory_item(tin_group, tin_group.variants[0], quantity=2, rate=4500, unit=UNIT_BUNDLE)
    assert item.quantity_pieces == 24
    assert item.subtotal == 9000
    assert item.formatted_qty == "2 bundle"
    assert item.price_unit == 4500
    assert item.buy_price_unit == 350.0
    assert item.unit_type == UNIT_BUNDLE
    assert item.calculation_base == 72.0
    assert not item.is_manual


def test_piece_line_priced_at_bundle_rate(tin_group):
    # 30 pcs of 6 ft = 2.5 bundles at 500
    item = build_inventory_item(tin_group, tin_group.variants[0], quantity=30, rate=500, unit=UNIT_PIECE)
    assert item.quantity_pieces == 30
    assert item.subtotal == 1250
    assert item.formatted_qty == "30 pcs"


def test_running_foot_and_fixed_piece_lines(make_group):
    rf = make_group(MODE_RUNNING_FOOT, variants=[(10, 50, 400.0)])
    line = build_inventory_item(rf, rf.variants[0], quantity=3, rate=45.5)
    assert line.subtotal == 1365
    assert line.formatted_qty == "3 pcs (30 ft)"

    fx = make_group(MODE_FIXED_PIECE, variants=[(1, 50, 10.0)])
    line = build_inventory_item(fx, fx.variants[0], quantity=7, rate=12.5, unit=UNIT_BUNDLE)
    assert line.subtotal == 88  # 87.5 rounds up
    assert line.unit_type == UNIT_PIECE


def test_line_name_drops_placeholder_attributes(make_group):
    full = make_group(variants=[(6, 0, 0.0)])
    assert line_name(full, full.variants[0]) == "Tin | PHP | 0.32mm Red | 6'"

    bare = make_group(variants=[(8, 0, 0.0)], color="N/A", thickness="Standard")
    assert line_name(bare, bare.variants[0]) == "Tin | PHP | 8'"


@pytest.mark.parametrize("qty,rate", [(0, 100), (-1, 100), (1, 0), (1, -10)])
def test_inventory_line_needs_positive_qty_and_rate(tin_group, qty, rate):
    with pytest.raises(ValidationFailure):
        build_inventory_item(tin_group, tin_group.variants[0], quantity=qty, rate=rate)


def test_manual_line():
    item = build_manual_item("Labour", quantity=2, rate=150.4)
    assert item.group_id == MANUAL_GROUP_ID
    assert item.is_manual
    assert item.variant_id.startswith("manual_")
    assert item.subtotal == 301
    assert item.buy_price_unit == 0.0
    assert item.formatted_qty == "2 pcs"


@pytest.mark.parametrize("name,qty,rate", [("", 1, 10), ("Transport", 0, 10), ("Transport", 1, 0)])
def test_manual_line_validation(name, qty, rate):
    with pytest.raises(ValidationFailure):
        build_manual_item(name, quantity=qty, rate=rate)


def test_update_line_with_price_is_per_piece(tin_group):
    item = build_inventory_item(tin_group, tin_group.variants[0], quantity=2, rate=4500, unit=UNIT_BUNDLE)
    new = update_line(item, quantity=20, price_unit=45)
    assert new.quantity_pieces == 20
    assert new.subtotal == 900
    assert new.formatted_qty == "20 pcs"
    assert new.unit_type == UNIT_PIECE
    # original untouched
    assert item.quantity_pieces == 24


def test_update_line_quantity_only_keeps_value_per_piece(tin_group):
    item = build_inventory_item(tin_group, tin_group.variants[0], quantity=30, rate=500)
    new = update_line(item, quantity=12)
    assert new.subtotal == 500
    assert new.price_unit == 500
    assert new.formatted_qty == "12 pcs"


def test_update_line_rejects_bad_values(tin_group):
    item = build_inventory_item(tin_group, tin_group.variants[0], quantity=30, rate=500)
    with pytest.raises(ValidationFailure):
        update_line(item, quantity=0)
    with pytest.raises(ValidationFailure):
        update_line(item, price_unit=-1)


def test_cart_total():
    items = [build_manual_item("A", quantity=1, rate=100), build_manual_item("B", quantity=3, rate=50)]
    assert cart_total(items) == 250
