# tinshop/modules/inventory/ledger.py
"""
Stock ledger: every change to a variant's piece count goes through here.

A StockLedger works on its own deep copy of the product groups it is given,
so the caller's objects (and the stored document) are untouched until the
caller decides to persist `ledger.groups`. Operations that must be all or
nothing run inside `ledger.atomic()`, which restores the working copy if the
block raises.

Three movements exist:

  stock_in       receive goods; adds pieces and re-weights the average cost
  stock_out      sale line; subtracts pieces, may go negative (flagged)
  stock_reverse  sale deleted/edited/returned; adds pieces back, cost unchanged

stock_out/stock_reverse never fail on a missing group or variant. The gap is
recorded as a MissingStockRef and logged, and the rest of the operation goes on.
"""

from __future__ import annotations

import copy
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional

from ...constants import DEFAULT_CALCULATION_BASE, MODE_BUNDLE_TIN, MODE_RUNNING_FOOT
from ...database.repositories.inventory_repo import (
    InventoryRepo,
    ProductGroup,
    ProductVariant,
    StockLog,
)
from ...utils.errors import ValidationFailure, ZeroCostWarning
from ...utils.helpers import fmt_qty, new_id, round_half_up
from ...utils.validators import is_strictly_positive_number
from .conversion import amount_for, to_pieces
from .costing import weighted_average_cost

_log = logging.getLogger(__name__)

STOCK_IN = "in"
STOCK_OUT = "out"
STOCK_REVERSE = "reverse"


@dataclass
class StockMovement:
    kind: str
    group_id: str
    variant_id: str
    name: str
    pieces: int
    stock_after: int


@dataclass
class MissingStockRef:
    """A stock_out/stock_reverse that pointed at a group or variant that no longer exists."""
    kind: str
    group_id: str
    variant_id: str
    name: str
    pieces: int
    reason: str


@dataclass
class StockInResult:
    group: ProductGroup
    variant: ProductVariant
    pieces_added: int
    incoming_total_cost: float
    log: StockLog


def variant_label(group: ProductGroup, variant: ProductVariant) -> str:
    return f"{group.display_name} ({fmt_qty(variant.length_feet)}')"


def sort_variants(group: ProductGroup) -> None:
    group.variants.sort(key=lambda v: v.length_feet)


def suggested_buy_rate(group: ProductGroup, variant: ProductVariant | None) -> int:
    """
    Rate to pre-fill on the stock-in form, in the unit rates are quoted in for
    this group (per bundle, per foot or per piece), from the running average
    cost per piece. 0 when there is no cost history.
    """
    if variant is None or variant.average_cost <= 0:
        return 0
    avg = variant.average_cost
    if group.calculation_mode == MODE_BUNDLE_TIN:
        base = variant.calculation_base or DEFAULT_CALCULATION_BASE
        return round_half_up(avg * base / variant.length_feet)
    if group.calculation_mode == MODE_RUNNING_FOOT and variant.length_feet:
        return round_half_up(avg / variant.length_feet)
    return round_half_up(avg)


class StockLedger:
    def __init__(self, groups: Iterable[ProductGroup]):
        self._groups: List[ProductGroup] = copy.deepcopy(list(groups))
        self.movements: List[StockMovement] = []
        self.missing: List[MissingStockRef] = []
        self.stock_logs: List[StockLog] = []

    @property
    def groups(self) -> List[ProductGroup]:
        return self._groups

    def find_group(self, group_id: str) -> ProductGroup | None:
        return next((g for g in self._groups if g.id == group_id), None)

    def find_variant(self, group_id: str, variant_id: str) -> ProductVariant | None:
        group = self.find_group(group_id)
        return group.variant_by_id(variant_id) if group else None

    # ---------------------------- unit of work ----------------------------

    @contextmanager
    def atomic(self) -> Iterator["StockLedger"]:
        """Roll the working copy back if the block raises."""
        saved = (
            copy.deepcopy(self._groups),
            list(self.movements),
            list(self.missing),
            list(self.stock_logs),
        )
        try:
            yield self
        except Exception:
            self._groups, self.movements, self.missing, self.stock_logs = saved
            raise

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
        """
        Receive `quantity` (`unit`) of `length_feet` at `rate` into a group,
        creating the length variant on first receipt.

        Raises ValidationFailure for an unknown group, a non-positive
        quantity or length, or a negative rate. A zero rate raises
        ZeroCostWarning unless `confirmed`.
        """
        group = self.find_group(group_id)
        if group is None:
            raise ValidationFailure("Product group not found.")
        if not is_strictly_positive_number(quantity):
            raise ValidationFailure("Quantity must be greater than zero.")
        if not is_strictly_positive_number(length_feet):
            raise ValidationFailure("Length must be greater than zero.")
        if rate is None or float(rate) < 0:
            raise ValidationFailure("Buying rate cannot be negative.")

        existing = group.variant_by_length(length_feet)
        base = None
        if group.calculation_mode == MODE_BUNDLE_TIN:
            base = float(
                calculation_base
                or (existing.calculation_base if existing else None)
                or DEFAULT_CALCULATION_BASE
            )

        pieces = to_pieces(group.calculation_mode, quantity, unit, length_feet, base)
        if pieces <= 0:
            raise ValidationFailure("Quantity is too small to make a whole piece.")

        label = f"{group.display_name} ({fmt_qty(length_feet)}')"
        if float(rate) == 0 and not confirmed:
            raise ZeroCostWarning(label)

        incoming_cost = amount_for(group.calculation_mode, quantity, unit, rate, length_feet, base)

        with self.atomic():
            variant = existing
            if variant is None:
                variant = ProductVariant(
                    id=new_id(),
                    length_feet=float(length_feet),
                    calculation_base=base,
                    stock_pieces=0,
                    average_cost=0.0,
                )
                group.variants.append(variant)
                sort_variants(group)
            elif base is not None:
                variant.calculation_base = base

            variant.average_cost = weighted_average_cost(
                variant.stock_pieces, variant.average_cost, pieces, incoming_cost
            )
            variant.stock_pieces += pieces

            log = InventoryRepo.make_stock_log(
                product_name=label,
                quantity_added=pieces,
                cost_price=float(rate),
                new_stock_level=variant.stock_pieces,
                note=note,
            )
            self.stock_logs.append(log)
            self.movements.append(
                StockMovement(STOCK_IN, group.id, variant.id, label, pieces, variant.stock_pieces)
            )

        _log.info(
            "Stock in: %s +%d pcs for %.2f (avg cost now %.4f, stock %d)",
            label, pieces, incoming_cost, variant.average_cost, variant.stock_pieces,
        )
        return StockInResult(group, variant, pieces, incoming_cost, log)

    # ---------------------------- out / reverse ----------------------------

    def _move(self, kind: str, group_id: str, variant_id: str, pieces: int, name: str) -> Optional[StockMovement]:
        pieces = int(pieces)
        if pieces < 0:
            raise ValidationFailure("Piece count cannot be negative.")

        group = self.find_group(group_id)
        variant = group.variant_by_id(variant_id) if group else None
        if variant is None:
            reason = "group not found" if group is None else "variant not found"
            gap = MissingStockRef(kind, group_id, variant_id, name, pieces, reason)
            self.missing.append(gap)
            _log.warning(
                "Stock %s skipped for %r (%s/%s): %s", kind, name, group_id, variant_id, reason
            )
            return None

        variant.stock_pieces += pieces if kind == STOCK_REVERSE else -pieces
        movement = StockMovement(kind, group.id, variant.id, variant_label(group, variant), pieces, variant.stock_pieces)
        self.movements.append(movement)
        if kind == STOCK_OUT and variant.is_negative:
            _log.warning("Stock for %s is now negative (%d pcs)", movement.name, variant.stock_pieces)
        return movement

    def stock_out(self, group_id: str, variant_id: str, pieces: int, name: str = "") -> Optional[StockMovement]:
        return self._move(STOCK_OUT, group_id, variant_id, pieces, name)

    def stock_reverse(self, group_id: str, variant_id: str, pieces: int, name: str = "") -> Optional[StockMovement]:
        return self._move(STOCK_REVERSE, group_id, variant_id, pieces, name)

    def release_items(self, items) -> None:
        """Deduct stock for every inventory-backed sale line."""
        for it in items:
            if not it.is_manual:
                self.stock_out(it.group_id, it.variant_id, it.quantity_pieces, it.name)

    def restore_items(self, items) -> None:
        """Put back stock for every inventory-backed sale line."""
        for it in items:
            if not it.is_manual:
                self.stock_reverse(it.group_id, it.variant_id, it.quantity_pieces, it.name)

    # ---------------------------- inspection ----------------------------

    def shortages(self) -> List[Dict]:
        """Variants deducted in this ledger whose stock is now below zero."""
        seen: Dict[str, Dict] = {}
        for m in self.movements:
            if m.kind != STOCK_OUT or m.variant_id in seen:
                continue
            variant = self.find_variant(m.group_id, m.variant_id)
            if variant is not None and variant.is_negative:
                seen[m.variant_id] = {
                    "group_id": m.group_id,
                    "variant_id": m.variant_id,
                    "name": m.name,
                    "stock_after": variant.stock_pieces,
                }
        return list(seen.values())

    def negative_variants(self) -> List[Dict]:
        """Every variant currently below zero, touched here or not."""
        rows = []
        for g in self._groups:
            for v in g.variants:
                if v.is_negative:
                    rows.append({
                        "group_id": g.id,
                        "variant_id": v.id,
                        "name": variant_label(g, v),
                        "stock_after": v.stock_pieces,
                    })
        return rows
