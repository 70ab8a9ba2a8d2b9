# tinshop/main.py
"""
Entry point.

    tinshop                      open the stock / sales / staff window
    tinshop export backup.json   write every document to a JSON file
    tinshop import backup.json   restore documents from a JSON file
    tinshop report [--from D] [--to D]
                                 print stock value, profit and loss, dues

--db PATH selects a database file other than the configured one.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import DB_PATH, LOG_PATH
from .constants import APP_NAME
from .database import get_connection
from .database.repositories.document_store import DocumentStore
from .modules.reporting.reports import ShopReports
from .utils.helpers import fmt_money
from .utils.loggers import get_logger

_log = logging.getLogger(__name__)


def _add_file_log(logger: logging.Logger) -> None:
    LOG_PATH.mkdir(parents=True, exist_ok=True)
    fh = logging.FileHandler(LOG_PATH / "tinshop.log", encoding="utf-8")
    fh.setFormatter(logger.handlers[0].formatter)
    logger.addHandler(fh)


def run_gui(conn, user: dict | None = None) -> int:
    from PySide6.QtWidgets import QApplication, QMainWindow, QTabWidget, QTableView

    from .modules.inventory.controller import InventoryController
    from .modules.inventory.model import StockTableModel
    from .modules.payroll.controller import PayrollController
    from .modules.payroll.model import EmployeesTableModel
    from .modules.sales.controller import SalesController
    from .modules.sales.model import SalesTableModel

    app = QApplication.instance() or QApplication(sys.argv)
    inventory = InventoryController(conn, user)
    sales = SalesController(conn, user)
    payroll = PayrollController(conn, user)

    stock_model = StockTableModel(inventory.stock_rows())
    sales_model = SalesTableModel(sales.repo.list_sales())
    staff_model = EmployeesTableModel(payroll.employee_rows())
    inventory.stock_changed.connect(lambda: stock_model.replace(inventory.stock_rows()))
    sales.stock_changed.connect(lambda: stock_model.replace(inventory.stock_rows()))
    sales.sales_changed.connect(lambda: sales_model.replace(sales.repo.list_sales()))
    payroll.payroll_changed.connect(lambda: staff_model.replace(payroll.employee_rows()))

    tabs = QTabWidget()
    for title, model in (("Stock", stock_model), ("Sales", sales_model), ("Staff", staff_model)):
        view = QTableView()
        view.setModel(model)
        view.setSelectionBehavior(QTableView.SelectRows)
        view.resizeColumnsToContents()
        tabs.addTab(view, title)

    win = QMainWindow()
    win.setWindowTitle(APP_NAME)
    win.setCentralWidget(tabs)
    win.resize(1000, 640)
    win.show()
    return app.exec()


def export_backup(store: DocumentStore, path: Path) -> int:
    data = store.export_all()
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    _log.info("Exported %d documents to %s", len(data), path)
    return len(data)


def import_backup(store: DocumentStore, path: Path) -> int:
    data = json.loads(path.read_text(encoding="utf-8"))
    store.import_data(data)
    return len(data)


def print_report(store: DocumentStore, date_from: str | None, date_to: str | None, out=None) -> None:
    out = out or sys.stdout
    reports = ShopReports(store)
    valuation = reports.stock_valuation()
    pnl = reports.profit_and_loss(date_from, date_to)

    print(f"Stock value: {fmt_money(valuation['total'])}", file=out)
    print(f"Revenue:     {fmt_money(pnl['revenue'])}", file=out)
    print(f"COGS:        {fmt_money(pnl['cogs'])}", file=out)
    print(f"Expenses:    {fmt_money(pnl['expenses'])}", file=out)
    print(f"Net profit:  {fmt_money(pnl['net_profit'])}", file=out)
    for row in reports.customer_dues():
        if row["due"]:
            print(f"  {row['customer_name']} ({row['customer_phone']}): {fmt_money(row['due'])}", file=out)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="tinshop", description=APP_NAME)
    p.add_argument("--db", type=Path, default=None, help=f"database file (default: {DB_PATH})")
    sub = p.add_subparsers(dest="command")

    ex = sub.add_parser("export", help="write all documents to a JSON backup")
    ex.add_argument("path", type=Path)

    im = sub.add_parser("import", help="restore documents from a JSON backup")
    im.add_argument("path", type=Path)

    rp = sub.add_parser("report", help="print stock value, profit and loss and dues")
    rp.add_argument("--from", dest="date_from", default=None)
    rp.add_argument("--to", dest="date_to", default=None)
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logger = get_logger("tinshop")

    conn = get_connection(args.db)
    try:
        store = DocumentStore(conn)
        if args.command == "export":
            export_backup(store, args.path)
        elif args.command == "import":
            n = import_backup(store, args.path)
            logger.info("Restored %d documents from %s", n, args.path)
        elif args.command == "report":
            print_report(store, args.date_from, args.date_to)
        else:
            _add_file_log(logger)
            return run_gui(conn)
    finally:
        conn.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
