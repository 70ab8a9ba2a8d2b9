"""Qt table models; pytest-qt provides the QApplication (qapp)."""

from __future__ import annotations

from PySide6.QtCore import Qt

from tinshop.database.repositories import Sale
from tinshop.modules.inventory.model import StockTableModel
from tinshop.modules.payroll.model import EmployeesTableModel
from tinshop.modules.sales.model import SaleItemsModel, SalesTableModel
from tinshop.modules.sales.cart import build_manual_item


def _row(**over):
    row = {
        "group_id": "g", "variant_id": "v", "product_type": "Tin", "name": "PHP 0.32mm Red (6')",
        "length": "6", "calculation_mode": "tin_bundle", "stock_pieces": 150, "bundles": "12.50 bundle",
        "average_cost": 350.0, "stock_value": 52500.0, "is_negative": False,
    }
    row.update(over)
    return row


def _sale(due: float) -> Sale:
    return Sale(
        id="s", invoice_id="1001", customer_name="Karim", customer_phone="01712345678",
        items=[build_manual_item("Labour", quantity=1, rate=1000)], sub_total=1000, discount=0,
        final_amount=1000, paid_amount=1000 - due, due_amount=due, timestamp="2026-01-02T10:00:00",
    )


def test_stock_model_display(qapp):
    m = StockTableModel([_row()])
    assert m.rowCount() == 1
    assert m.columnCount() == len(StockTableModel.HEADERS)
    assert m.data(m.index(0, 0)) == "PHP 0.32mm Red (6')"
    assert m.data(m.index(0, 1)) == "6'"
    assert m.data(m.index(0, 2)) == "150"
    assert m.data(m.index(0, 4)) == "350.00"
    assert m.data(m.index(0, 5)) == "52,500.00"
    assert m.data(m.index(0, 0), Qt.ForegroundRole) is None
    assert m.headerData(2, Qt.Horizontal) == "Stock (pcs)"


def test_stock_model_flags_negative(qapp):
    m = StockTableModel([_row(stock_pieces=-20, is_negative=True, stock_value=0.0)])
    assert m.data(m.index(0, 2)) == "-20 (negative)"
    assert m.data(m.index(0, 2), Qt.ForegroundRole).name() == "#c0392b"


def test_stock_model_replace(qapp):
    m = StockTableModel()
    assert m.rowCount() == 0
    m.replace([_row(), _row(variant_id="v2")])
    assert m.rowCount() == 2
    assert m.at(1)["variant_id"] == "v2"


def test_sales_model_colors_due_and_credit(qapp):
    m = SalesTableModel([_sale(250), _sale(-50), _sale(0)])
    due_col = SalesTableModel.DUE_COLUMN
    assert m.data(m.index(0, 0)) == "1001"
    assert m.data(m.index(0, 1)) == "2026-01-02"
    assert m.data(m.index(0, due_col)) == "250.00"
    assert m.data(m.index(0, due_col), Qt.ForegroundRole).name() == "#c0392b"
    assert m.data(m.index(1, due_col), Qt.ForegroundRole).name() == "#1e8449"
    assert m.data(m.index(2, due_col), Qt.ForegroundRole) is None


def test_sale_items_model(qapp):
    sale = _sale(0)
    m = SaleItemsModel(sale)
    assert m.rowCount() == 1
    assert m.data(m.index(0, 1)) == "Labour"
    assert m.data(m.index(0, 4)) == "1,000.00"
    m.replace(None)
    assert m.rowCount() == 0


def test_employees_model(qapp):
    m = EmployeesTableModel([{
        "id": "e1", "name": "Rahim", "designation": "Staff", "phone": "", "base_salary": 12000.0,
        "total_advance": 1500.0, "total_salary": 0.0, "last_payment": "",
    }])
    assert m.columnCount() == 7
    assert m.headerData(3, Qt.Horizontal) == "Base Salary"
    assert m.data(m.index(0, 0)) == "Rahim"
    assert m.data(m.index(0, 2)) == "-"
    assert m.data(m.index(0, 3)) == "12,000.00"
    assert m.data(m.index(0, 4)) == "1,500.00"
    assert m.data(m.index(0, 6)) == "-"
    assert m.at(0)["id"] == "e1"
