# tinshop/modules/sales/__init__.py

from .controller import SalesController
from .model import SaleItemsModel, SalesTableModel

__all__ = [
    "SalesController",
    "SaleItemsModel",
    "SalesTableModel",
]
