# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - Every test gets its own in-memory database (schema + seed applied)
# - pytest-qt owns QApplication (use the qapp fixture for model tests)
# - Pure ledger/builder tests work on ProductGroup objects from make_group
# ---------------------------------------------------------------------

from __future__ import annotations

import pytest

from tinshop.constants import MODE_BUNDLE_TIN
from tinshop.database import get_connection
from tinshop.database.repositories import DocumentStore
from tinshop.database.repositories.inventory_repo import ProductGroup, ProductVariant
from tinshop.modules.inventory.controller import InventoryController
from tinshop.modules.payroll.controller import PayrollController
from tinshop.modules.sales.controller import SalesController
from tinshop.modules.settings.controller import SettingsController


# ---------- Database ----------
@pytest.fixture()
def conn():
    con = get_connection(":memory:")
    try:
        yield con
    finally:
        con.close()


@pytest.fixture()
def store(conn) -> DocumentStore:
    return DocumentStore(conn)


@pytest.fixture()
def current_user() -> dict:
    return {"user_id": 1, "username": "ops", "role": "admin"}


@pytest.fixture()
def inventory(conn, current_user) -> InventoryController:
    return InventoryController(conn, current_user)


@pytest.fixture()
def sales(conn, current_user) -> SalesController:
    return SalesController(conn, current_user)


@pytest.fixture()
def payroll(conn, current_user) -> PayrollController:
    return PayrollController(conn, current_user)


@pytest.fixture()
def shop_settings(conn, current_user) -> SettingsController:
    return SettingsController(conn, current_user)


# ---------- In-memory product groups ----------
@pytest.fixture()
def make_group():
    """
    Factory for a ProductGroup. Each `variants` entry is
    (length_feet, stock_pieces, average_cost[, calculation_base]).
    """
    def _make(
        mode: str = MODE_BUNDLE_TIN,
        variants=(),
        *,
        group_id: str = "g1",
        product_type: str = "Tin",
        brand: str = "PHP",
        color: str = "Red",
        thickness: str = "0.32mm",
    ) -> ProductGroup:
        built = []
        for i, entry in enumerate(variants, start=1):
            length, stock, avg = entry[:3]
            base = entry[3] if len(entry) > 3 else (72.0 if mode == MODE_BUNDLE_TIN else None)
            built.append(ProductVariant(
                id=f"{group_id}-v{i}",
                length_feet=float(length),
                calculation_base=base,
                stock_pieces=stock,
                average_cost=avg,
            ))
        return ProductGroup(
            id=group_id,
            product_type=product_type,
            brand=brand,
            color=color,
            thickness=thickness,
            calculation_mode=mode,
            variants=built,
        )
    return _make


@pytest.fixture()
def tin_group(make_group) -> ProductGroup:
    """6 ft tin, base 72 (12 pcs per bundle), 180 pcs on hand at 350/pc."""
    return make_group(variants=[(6, 180, 350.0)])
