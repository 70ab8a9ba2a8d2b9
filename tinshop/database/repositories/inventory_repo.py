"""
Repository for the inventory document (product groups + their length
variants) and the append-only stock log.

Conventions:
- Documents keep the camelCase field names of the stored JSON; the
  dataclasses below use snake_case and convert in to_dict()/from_dict().
- list_* methods return fresh objects on every call. Mutating them has no
  effect until they are passed back to a save_* method.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ...constants import (
    CALCULATION_MODES,
    KEY_INVENTORY,
    KEY_STOCK_LOGS,
    MODE_BUNDLE_TIN,
)
from ...utils.errors import ValidationFailure
from ...utils.helpers import new_id, now_str
from ...utils.validators import non_empty
from .document_store import DocumentStore


@dataclass
class ProductVariant:
    id: str
    length_feet: float
    calculation_base: Optional[float]
    stock_pieces: int
    average_cost: float

    @property
    def is_negative(self) -> bool:
        return self.stock_pieces < 0

    def to_dict(self) -> Dict:
        d = {
            "id": self.id,
            "lengthFeet": self.length_feet,
            "stockPieces": self.stock_pieces,
            "averageCost": self.average_cost,
        }
        if self.calculation_base is not None:
            d["calculationBase"] = self.calculation_base
        return d

    @classmethod
    def from_dict(cls, d: Dict) -> "ProductVariant":
        base = d.get("calculationBase")
        return cls(
            id=str(d["id"]),
            length_feet=float(d.get("lengthFeet") or 0),
            calculation_base=float(base) if base else None,
            stock_pieces=int(d.get("stockPieces") or 0),
            average_cost=float(d.get("averageCost") or 0.0),
        )


@dataclass
class ProductGroup:
    id: str
    product_type: str
    brand: str
    color: str
    thickness: str
    calculation_mode: str = MODE_BUNDLE_TIN
    custom_values: Dict[str, str] = field(default_factory=dict)
    variants: List[ProductVariant] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return f"{self.brand} {self.thickness} {self.color}"

    def variant_by_id(self, variant_id: str) -> ProductVariant | None:
        return next((v for v in self.variants if v.id == variant_id), None)

    def variant_by_length(self, length_feet: float) -> ProductVariant | None:
        return next(
            (v for v in self.variants if abs(v.length_feet - float(length_feet)) < 1e-9),
            None,
        )

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "productType": self.product_type,
            "brand": self.brand,
            "color": self.color,
            "thickness": self.thickness,
            "customValues": dict(self.custom_values),
            "calculationMode": self.calculation_mode,
            "variants": [v.to_dict() for v in self.variants],
        }

    @classmethod
    def from_dict(cls, d: Dict) -> "ProductGroup":
        # older documents stored the mode under "type"
        mode = d.get("calculationMode") or d.get("type") or MODE_BUNDLE_TIN
        return cls(
            id=str(d["id"]),
            product_type=d.get("productType") or "",
            brand=d.get("brand") or "",
            color=d.get("color") or "",
            thickness=d.get("thickness") or "",
            calculation_mode=mode,
            custom_values=dict(d.get("customValues") or {}),
            variants=[ProductVariant.from_dict(v) for v in d.get("variants") or []],
        )


@dataclass
class StockLog:
    id: str
    date: str
    product_name: str
    quantity_added: int
    cost_price: float
    new_stock_level: int
    note: str | None = None

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "date": self.date,
            "productName": self.product_name,
            "quantityAdded": self.quantity_added,
            "costPrice": self.cost_price,
            "newStockLevel": self.new_stock_level,
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, d: Dict) -> "StockLog":
        return cls(
            id=str(d["id"]),
            date=str(d.get("date") or ""),
            product_name=d.get("productName") or "",
            quantity_added=int(d.get("quantityAdded") or 0),
            cost_price=float(d.get("costPrice") or 0.0),
            new_stock_level=int(d.get("newStockLevel") or 0),
            note=d.get("note"),
        )


class InventoryRepo:
    def __init__(self, store: DocumentStore):
        self.store = store

    # ---------------------------- Groups ----------------------------

    def list_groups(self) -> List[ProductGroup]:
        return [ProductGroup.from_dict(d) for d in self.store.load(KEY_INVENTORY, [])]

    def get_group(self, group_id: str) -> ProductGroup | None:
        return next((g for g in self.list_groups() if g.id == group_id), None)

    def save_groups(self, groups: List[ProductGroup]) -> None:
        self.store.save(KEY_INVENTORY, [g.to_dict() for g in groups])

    def search_groups(self, term: str) -> List[ProductGroup]:
        """Case-insensitive match on product type, brand, thickness or color."""
        t = (term or "").strip().lower()
        groups = self.list_groups()
        if not t:
            return groups
        return [
            g for g in groups
            if t in g.product_type.lower()
            or t in g.brand.lower()
            or t in g.thickness.lower()
            or t in g.color.lower()
        ]

    def create_group(
        self,
        *,
        product_type: str,
        brand: str,
        color: str | None = None,
        thickness: str | None = None,
        calculation_mode: str = MODE_BUNDLE_TIN,
        custom_values: Dict[str, str] | None = None,
    ) -> ProductGroup:
        if not non_empty(product_type) or not non_empty(brand):
            raise ValidationFailure("Product type and brand are required.")
        if calculation_mode not in CALCULATION_MODES:
            raise ValidationFailure(f"Unknown calculation mode: {calculation_mode}")

        group = ProductGroup(
            id=new_id(),
            product_type=product_type.strip(),
            brand=brand.strip(),
            color=(color or "").strip() or "N/A",
            thickness=(thickness or "").strip() or "Standard",
            calculation_mode=calculation_mode,
            custom_values=dict(custom_values or {}),
            variants=[],
        )
        groups = self.list_groups()
        groups.append(group)
        self.save_groups(groups)
        return group

    def delete_group(self, group_id: str) -> bool:
        """
        Remove a group and its variants. Sales keep their own snapshots, so
        nothing else is touched. Returns False if the id was unknown.
        """
        groups = self.list_groups()
        kept = [g for g in groups if g.id != group_id]
        if len(kept) == len(groups):
            return False
        self.save_groups(kept)
        return True

    def remove_variant(self, group_id: str, variant_id: str) -> bool:
        groups = self.list_groups()
        for g in groups:
            if g.id == group_id:
                before = len(g.variants)
                g.variants = [v for v in g.variants if v.id != variant_id]
                if len(g.variants) == before:
                    return False
                self.save_groups(groups)
                return True
        return False

    # ---------------------------- Stock logs ----------------------------

    def list_stock_logs(self, limit: int | None = None) -> List[StockLog]:
        """Newest first."""
        logs = [StockLog.from_dict(d) for d in self.store.load(KEY_STOCK_LOGS, [])]
        return logs[:limit] if limit else logs

    def save_stock_logs(self, logs: List[StockLog]) -> None:
        self.store.save(KEY_STOCK_LOGS, [lg.to_dict() for lg in logs])

    @staticmethod
    def make_stock_log(
        *,
        product_name: str,
        quantity_added: int,
        cost_price: float,
        new_stock_level: int,
        note: str | None = None,
    ) -> StockLog:
        return StockLog(
            id=new_id(),
            date=now_str(),
            product_name=product_name,
            quantity_added=int(quantity_added),
            cost_price=float(cost_price),
            new_stock_level=int(new_stock_level),
            note=note,
        )
