from __future__ import annotations

from typing import Any, Dict, List, Optional

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt

from ...utils.helpers import fmt_money


class EmployeesTableModel(QAbstractTableModel):
    """Rows from PayrollController.employee_rows()."""

    HEADERS: List[str] = ["Name", "Designation", "Phone", "Base Salary", "Advance", "Salary Paid", "Last Payment"]
    _KEYS = ("name", "designation", "phone", "base_salary", "total_advance", "total_salary", "last_payment")
    _MONEY = {"base_salary", "total_advance", "total_salary"}

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
        key = self._KEYS[index.column()]
        if role in (Qt.DisplayRole, Qt.EditRole):
            value = self._rows[index.row()][key]
            return fmt_money(value) if key in self._MONEY else (value or "-")
        if role == Qt.TextAlignmentRole and key in self._MONEY:
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
