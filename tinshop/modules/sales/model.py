from PySide6.QtCore import QAbstractTableModel, Qt, QModelIndex
from PySide6.QtGui import QColor

from ...database.repositories.sales_repo import Sale
from ...utils.helpers import fmt_money

DUE_COLOR = QColor("#c0392b")
CREDIT_COLOR = QColor("#1e8449")


class SalesTableModel(QAbstractTableModel):
    HEADERS = ["Invoice", "Date", "Customer", "Phone", "Total", "Paid", "Due", "Delivery"]
    DUE_COLUMN = 6

    def __init__(self, sales: list[Sale]):
        super().__init__()
        self._rows = sales

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        s = self._rows[index.row()]
        c = index.column()
        if role in (Qt.DisplayRole, Qt.EditRole):
            mapping = [
                s.invoice_id,
                s.timestamp[:10],
                s.customer_name,
                s.customer_phone,
                fmt_money(s.final_amount),
                fmt_money(s.paid_amount),
                fmt_money(s.due_amount),
                s.delivery_status,
            ]
            return mapping[c] if c < len(mapping) else None
        if role == Qt.ForegroundRole and c == self.DUE_COLUMN:
            # due in red, advance (negative due) in green
            if s.due_amount > 0:
                return DUE_COLOR
            if s.due_amount < 0:
                return CREDIT_COLOR
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section] if section < len(self.HEADERS) else None
        return super().headerData(section, orientation, role)

    def at(self, row: int) -> Sale:
        return self._rows[row]

    def replace(self, sales: list[Sale]):
        self.beginResetModel()
        self._rows = sales
        self.endResetModel()


class SaleItemsModel(QAbstractTableModel):
    HEADERS = ["#", "Product", "Qty", "Rate", "Amount"]

    def __init__(self, sale: Sale | None = None):
        super().__init__()
        self._items = list(sale.items) if sale else []

    def rowCount(self, parent=QModelIndex()):
        return len(self._items)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, idx, role=Qt.DisplayRole):
        if not idx.isValid():
            return None
        it = self._items[idx.row()]
        if role in (Qt.DisplayRole, Qt.EditRole):
            m = [idx.row() + 1, it.name, it.formatted_qty, fmt_money(it.price_unit), fmt_money(it.subtotal)]
            return m[idx.column()]
        return None

    def headerData(self, s, o, role=Qt.DisplayRole):
        return self.HEADERS[s] if o == Qt.Horizontal and role == Qt.DisplayRole else super().headerData(s, o, role)

    def replace(self, sale: Sale | None):
        self.beginResetModel()
        self._items = list(sale.items) if sale else []
        self.endResetModel()
