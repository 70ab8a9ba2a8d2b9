# tinshop/modules/inventory/conversion.py
"""
Unit conversion between bundles, pieces and running feet.

Every stock variant is counted in pieces. How a quantity or a rate maps onto
pieces depends on the group's calculation mode:

  tin_bundle    one bundle = calculation_base / length_feet pieces
                (base 72, length 6 ft -> 12 pieces per bundle); rates are per bundle
  running_foot  quantities are pieces; rates are per running foot
  fixed_piece   quantities are pieces; rates are per piece

Pure functions, no state. Pieces are rounded half-up to whole numbers;
amounts are returned unrounded and the caller decides where to round.
"""

from __future__ import annotations

import logging

from ...constants import (
    CALCULATION_MODES,
    DEFAULT_CALCULATION_BASE,
    MODE_BUNDLE_TIN,
    MODE_RUNNING_FOOT,
    QUANTITY_UNITS,
    UNIT_BUNDLE,
    UNIT_PIECE,
)
from ...utils.errors import ValidationFailure
from ...utils.helpers import fmt_qty, round_half_up
from ...utils.validators import is_whole_number

_log = logging.getLogger(__name__)


def _check_mode(mode: str) -> None:
    if mode not in CALCULATION_MODES:
        raise ValidationFailure(f"Unknown calculation mode: {mode}")


def _check_unit(unit: str) -> None:
    if unit not in QUANTITY_UNITS:
        raise ValidationFailure(f"Unknown quantity unit: {unit}")


def pieces_per_bundle(length_feet: float, calculation_base: float | None) -> float:
    """calculation_base / length_feet; not necessarily a whole number."""
    length = float(length_feet or 0)
    base = float(calculation_base or 0)
    if length <= 0:
        raise ValidationFailure("Length must be greater than zero.")
    if base <= 0:
        raise ValidationFailure("Calculation base must be greater than zero.")
    return base / length


def bundles_to_pieces(bundles: float, length_feet: float, calculation_base: float | None) -> int:
    return round_half_up(float(bundles) * pieces_per_bundle(length_feet, calculation_base))


def pieces_to_bundles(pieces: float, length_feet: float, calculation_base: float | None) -> float:
    """Bundle equivalent of a piece count (cost math and display only)."""
    pieces_per_bundle(length_feet, calculation_base)  # validates
    return (float(pieces) * float(length_feet)) / float(calculation_base)


def total_feet(pieces: float, length_feet: float) -> float:
    return float(pieces) * float(length_feet)


def effective_unit(mode: str, unit: str) -> str:
    """Only tin_bundle groups can be counted in bundles."""
    _check_mode(mode)
    _check_unit(unit)
    return unit if mode == MODE_BUNDLE_TIN else UNIT_PIECE


def to_pieces(
    mode: str,
    quantity: float,
    unit: str,
    length_feet: float,
    calculation_base: float | None = None,
) -> int:
    """Convert an entered quantity into whole pieces."""
    unit = effective_unit(mode, unit)
    if unit == UNIT_BUNDLE:
        return bundles_to_pieces(quantity, length_feet, calculation_base or DEFAULT_CALCULATION_BASE)
    if not is_whole_number(quantity):
        raise ValidationFailure(f"Piece quantity must be a whole number, got {quantity!r}.")
    return int(float(quantity))


def amount_for(
    mode: str,
    quantity: float,
    unit: str,
    rate: float,
    length_feet: float,
    calculation_base: float | None = None,
) -> float:
    """
    Money value of `quantity` (in `unit`) at `rate`, where the rate is quoted
    per bundle (tin_bundle), per foot (running_foot) or per piece (fixed_piece).

    Used for both purchase cost on stock-in and the selling price of a sale
    line. Not rounded.
    """
    unit = effective_unit(mode, unit)
    qty = float(quantity)
    rate = float(rate)

    if mode == MODE_BUNDLE_TIN:
        base = calculation_base or DEFAULT_CALCULATION_BASE
        if unit == UNIT_BUNDLE:
            pieces_per_bundle(length_feet, base)  # validates
            amount = qty * rate
        else:
            amount = pieces_to_bundles(qty, length_feet, base) * rate
    elif mode == MODE_RUNNING_FOOT:
        amount = total_feet(qty, length_feet) * rate
    else:
        amount = qty * rate

    _log.debug("amount_for(%s, %s %s @ %s, %sft) = %s", mode, qty, unit, rate, length_feet, amount)
    return amount


def format_quantity(
    mode: str,
    quantity: float,
    unit: str,
    length_feet: float,
) -> str:
    """Display string stored on a sale line ("3 bundle", "24 pcs (240 ft)", "5 pcs")."""
    unit = effective_unit(mode, unit)
    if unit == UNIT_BUNDLE:
        return f"{fmt_qty(quantity)} bundle"
    if mode == MODE_RUNNING_FOOT:
        return f"{fmt_qty(quantity)} pcs ({fmt_qty(total_feet(quantity, length_feet))} ft)"
    return f"{fmt_qty(quantity)} pcs"


def bundle_display(mode: str, stock_pieces: int, length_feet: float, calculation_base: float | None) -> str:
    """Stock in bundles to two decimals for tin_bundle variants, "-" otherwise."""
    if mode != MODE_BUNDLE_TIN or not calculation_base or not length_feet:
        return "-"
    return f"{pieces_to_bundles(stock_pieces, length_feet, calculation_base):.2f} bundle"
