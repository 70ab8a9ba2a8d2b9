# database/repositories/__init__.py
"""
Repository layer public API.

Usage:
    from tinshop.database.repositories import (
        DocumentStore,
        InventoryRepo, ProductGroup, ProductVariant, StockLog,
        SalesRepo, Sale, CartItem, PaymentEntry,
        SettingsRepo, StoreSettings,
        ExpensesRepo, Expense,
        PayrollRepo, Employee, SalaryRecord, AttendanceRecord,
        ActivityRepo, ActivityLog,
    )
"""

# -------------- Document store -------------
from .document_store import DocumentStore

# ---------------- Inventory ----------------
from .inventory_repo import InventoryRepo, ProductGroup, ProductVariant, StockLog

# ------------------ Sales ------------------
from .sales_repo import SalesRepo, Sale, CartItem, PaymentEntry

# ---------------- Settings -----------------
from .settings_repo import SettingsRepo, StoreSettings

# ---------------- Expenses -----------------
from .expenses_repo import ExpensesRepo, Expense

# ---------------- Payroll ------------------
from .payroll_repo import PayrollRepo, Employee, SalaryRecord, AttendanceRecord

# ---------------- Activity -----------------
from .activity_repo import ActivityRepo, ActivityLog

__all__ = [
    "DocumentStore",
    # inventory_repo
    "InventoryRepo",
    "ProductGroup",
    "ProductVariant",
    "StockLog",
    # sales_repo
    "SalesRepo",
    "Sale",
    "CartItem",
    "PaymentEntry",
    # settings_repo
    "SettingsRepo",
    "StoreSettings",
    # expenses_repo
    "ExpensesRepo",
    "Expense",
    # payroll_repo
    "PayrollRepo",
    "Employee",
    "SalaryRecord",
    "AttendanceRecord",
    # activity_repo
    "ActivityRepo",
    "ActivityLog",
]
