from pathlib import Path
import logging
import sqlite3
import sys

from ..constants import TABLE_DOCUMENTS

_log = logging.getLogger(__name__)

SQL = rf"""
PRAGMA foreign_keys = ON;

/* ======================== DOCUMENT STORE ======================== */

/* One row per collection (inventory, sales, stock logs, settings, ...).
   value holds the whole collection as JSON text and is rewritten in full
   on every mutation. */
CREATE TABLE IF NOT EXISTS {TABLE_DOCUMENTS} (
    key        TEXT PRIMARY KEY,
    value      TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now', 'localtime'))
);

DROP TRIGGER IF EXISTS trg_documents_touch;
CREATE TRIGGER trg_documents_touch
AFTER UPDATE OF value ON {TABLE_DOCUMENTS}
FOR EACH ROW
BEGIN
  UPDATE {TABLE_DOCUMENTS}
     SET updated_at = strftime('%Y-%m-%dT%H:%M:%S', 'now', 'localtime')
   WHERE key = NEW.key;
END;
"""


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply the (idempotent) schema on an open connection."""
    conn.executescript(SQL)


def init_schema(db_path: Path | str = "tinshop.db") -> None:
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(db_path) as conn:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        apply_schema(conn)
        conn.commit()
    _log.info("Schema applied to %s", db_path)


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else Path(__file__).resolve().parents[1] / "data" / "tinshop.db"
    init_schema(target)
