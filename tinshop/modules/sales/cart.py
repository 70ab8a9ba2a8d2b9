# tinshop/modules/sales/cart.py
"""
Building and adjusting sale lines (CartItem) before and after checkout.

A line is a snapshot: the product name, buying cost per piece and selling
price are copied in here and never looked up again.
"""

from __future__ import annotations

import copy
import logging
import time

from ...constants import (
    DEFAULT_CALCULATION_BASE,
    MANUAL_GROUP_ID,
    MODE_BUNDLE_TIN,
    UNIT_PIECE,
)
from ...database.repositories.inventory_repo import ProductGroup, ProductVariant
from ...database.repositories.sales_repo import CartItem
from ...utils.errors import ValidationFailure
from ...utils.helpers import fmt_qty, round_half_up
from ...utils.validators import is_strictly_positive_number, is_whole_number, non_empty
from ..inventory.conversion import amount_for, effective_unit, format_quantity, to_pieces

_log = logging.getLogger(__name__)

# Attribute values that carry no information and are left out of line names.
_PLACEHOLDER_VALUES = {"", "N/A", "Standard"}


def line_name(group: ProductGroup, variant: ProductVariant) -> str:
    """'Tin | Brand | 0.32mm Red | 8'' with placeholder attributes dropped."""
    attrs = " ".join(
        part for part in (group.thickness, group.color) if part not in _PLACEHOLDER_VALUES
    )
    parts = [group.product_type, group.brand, attrs]
    name = " | ".join(p for p in parts if p not in _PLACEHOLDER_VALUES)
    return f"{name} | {fmt_qty(variant.length_feet)}'"


def build_inventory_item(
    group: ProductGroup,
    variant: ProductVariant,
    *,
    quantity: float,
    rate: float,
    unit: str = UNIT_PIECE,
) -> CartItem:
    """
    A sale line for `quantity` of a variant at a selling `rate`.

    The rate is per bundle for tin_bundle groups (in either unit), per foot
    for running_foot and per piece for fixed_piece. The subtotal is rounded
    half-up to a whole currency unit.
    """
    if not is_strictly_positive_number(quantity):
        raise ValidationFailure("Quantity must be greater than zero.")
    if not is_strictly_positive_number(rate):
        raise ValidationFailure("Selling rate must be greater than zero.")

    mode = group.calculation_mode
    unit = effective_unit(mode, unit)
    base = None
    if mode == MODE_BUNDLE_TIN:
        base = variant.calculation_base or DEFAULT_CALCULATION_BASE

    pieces = to_pieces(mode, quantity, unit, variant.length_feet, base)
    if pieces <= 0:
        raise ValidationFailure("Quantity is too small to make a whole piece.")

    subtotal = round_half_up(amount_for(mode, quantity, unit, rate, variant.length_feet, base))
    item = CartItem(
        group_id=group.id,
        variant_id=variant.id,
        name=line_name(group, variant),
        length_feet=variant.length_feet,
        quantity_pieces=pieces,
        formatted_qty=format_quantity(mode, quantity, unit, variant.length_feet),
        price_unit=float(rate),
        buy_price_unit=variant.average_cost,
        subtotal=float(subtotal),
        unit_type=unit,
        calculation_base=base,
    )
    _log.debug("Cart line %s: %s = %s", item.name, item.formatted_qty, item.subtotal)
    return item


def build_manual_item(name: str, *, quantity: float, rate: float) -> CartItem:
    """A line with no inventory behind it (labour, transport, old debt)."""
    if not non_empty(name):
        raise ValidationFailure("Item name is required.")
    if not is_strictly_positive_number(quantity) or not is_whole_number(quantity):
        raise ValidationFailure("Quantity must be a whole number greater than zero.")
    if not is_strictly_positive_number(rate):
        raise ValidationFailure("Rate must be greater than zero.")

    qty = int(float(quantity))
    return CartItem(
        group_id=MANUAL_GROUP_ID,
        variant_id=f"manual_{time.time_ns()}",
        name=name.strip(),
        length_feet=0.0,
        quantity_pieces=qty,
        formatted_qty=f"{qty} pcs",
        price_unit=float(rate),
        buy_price_unit=0.0,
        subtotal=float(round_half_up(qty * float(rate))),
        unit_type=UNIT_PIECE,
    )


def update_line(item: CartItem, *, quantity: int | None = None, price_unit: float | None = None) -> CartItem:
    """
    Copy of `item` with a new piece count and/or price, as done from the
    edit-sale screen. The edited line is always expressed in pieces.

    - a new price is per piece: subtotal = round(quantity * price_unit)
    - a new quantity alone keeps the line's value per piece:
      subtotal = round(subtotal / old_quantity * quantity)
    """
    if quantity is not None and (
        not is_strictly_positive_number(quantity) or not is_whole_number(quantity)
    ):
        raise ValidationFailure("Quantity must be a whole number greater than zero.")
    if price_unit is not None and not is_strictly_positive_number(price_unit):
        raise ValidationFailure("Price must be greater than zero.")

    new = copy.deepcopy(item)
    if quantity is None and price_unit is None:
        return new

    if quantity is not None:
        new.quantity_pieces = int(float(quantity))
    if price_unit is not None:
        new.price_unit = float(price_unit)
        new.calculation_base = None
        new.subtotal = float(round_half_up(new.quantity_pieces * new.price_unit))
    elif item.quantity_pieces > 0:
        new.subtotal = float(round_half_up(item.subtotal / item.quantity_pieces * new.quantity_pieces))
    else:
        new.subtotal = 0.0

    new.unit_type = UNIT_PIECE
    new.formatted_qty = f"{new.quantity_pieces} pcs"
    return new


def cart_total(items) -> float:
    return float(sum(it.subtotal for it in items))
