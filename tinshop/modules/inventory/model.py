from __future__ import annotations

from typing import Any, Dict, List, Optional

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt
from PySide6.QtGui import QColor

from ...utils.helpers import fmt_money


class StockTableModel(QAbstractTableModel):
    """
    One row per product variant, as produced by InventoryController.stock_rows().

    Variants with negative stock are shown in red and their piece count is
    suffixed with "(negative)".
    """
    HEADERS: List[str] = ["Product", "Length", "Stock (pcs)", "Bundles", "Avg Cost", "Stock Value"]

    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__()
        self._rows: List[Dict[str, Any]] = list(rows or [])

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._rows)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self.HEADERS)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole) -> Any:
        if not index.isValid():
            return None
        r = self._rows[index.row()]
        col = index.column()

        if role in (Qt.DisplayRole, Qt.EditRole):
            if col == 0:
                return r["name"]
            if col == 1:
                return f"{r['length']}'"
            if col == 2:
                pcs = str(r["stock_pieces"])
                return f"{pcs} (negative)" if r["is_negative"] else pcs
            if col == 3:
                return r["bundles"]
            if col == 4:
                return fmt_money(r["average_cost"])
            if col == 5:
                return fmt_money(r["stock_value"])
            return None

        if role == Qt.ForegroundRole and r["is_negative"]:
            return QColor("#c0392b")

        if role == Qt.TextAlignmentRole and col >= 2:
            return int(Qt.AlignRight | Qt.AlignVCenter)

        return None

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.DisplayRole) -> Any:
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section] if 0 <= section < len(self.HEADERS) else None
        return super().headerData(section, orientation, role)

    def at(self, row: int) -> Dict[str, Any]:
        return self._rows[row]

    def replace(self, rows: List[Dict[str, Any]]) -> None:
        self.beginResetModel()
        self._rows = list(rows or [])
        self.endResetModel()
