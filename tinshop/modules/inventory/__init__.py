# tinshop/modules/inventory/__init__.py

from .controller import InventoryController
from .ledger import MissingStockRef, StockLedger, StockMovement
from .model import StockTableModel

__all__ = [
    "InventoryController",
    "MissingStockRef",
    "StockLedger",
    "StockMovement",
    "StockTableModel",
]
